# elitehome/models/message.py
from pydantic import BaseModel, Field
from typing import Literal, Optional
from datetime import datetime

class Message(BaseModel):
    id: Optional[str] = None
    conversation_id: str
    from_role: Literal["customer", "admin"]
    from_id: str
    to_id: str
    body: str = Field(..., min_length=1)
    read: bool = False
    seq: Optional[int] = None
    created_at: Optional[datetime] = None

class SendMessageRequest(BaseModel):
    customer_id: Optional[str] = None
    body: Optional[str] = None


def serialize_message(doc: dict) -> dict:
    """Mongo document -> JSON-safe message payload."""
    return Message(
        id=str(doc["_id"]) if doc.get("_id") is not None else None,
        conversation_id=doc["conversation_id"],
        from_role=doc["from_role"],
        from_id=str(doc["from_id"]),
        to_id=str(doc["to_id"]),
        body=doc["body"],
        read=doc.get("read", False),
        seq=doc.get("seq"),
        created_at=doc.get("created_at"),
    ).model_dump(mode="json")
