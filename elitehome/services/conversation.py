# elitehome/services/conversation.py

ADMINS_ROOM = "admins"


def conversation_key(customer_id: str) -> str:
    """Every customer has exactly one conversation, always with the admin."""
    return f"cust_{customer_id}__admin"


def personal_room(user_id: str) -> str:
    return f"user_{user_id}"
