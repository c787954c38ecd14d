# elitehome/services/chat_service.py
"""
Customer <-> admin chat: persistence, dispatch, unread counts and read marks.

A send is persist-then-broadcast. The broadcast is best-effort and happens
after the write; a failed publish is logged and never reported to the sender.
"""

from datetime import datetime
from typing import List, Optional, Protocol

from motor.motor_asyncio import AsyncIOMotorDatabase
from pymongo import ASCENDING, DESCENDING, ReturnDocument
from pymongo.errors import PyMongoError

from elitehome.core.logger import logger
from elitehome.db.mongo import MESSAGE_COUNTERS, MESSAGES
from elitehome.models.message import serialize_message
from elitehome.models.user import Principal
from elitehome.services.admin_identity import resolve_admin_id
from elitehome.services.conversation import conversation_key, personal_room
from elitehome.services.realtime import manager
from elitehome.utils.errors import (
    ForbiddenError,
    StoreError,
    UnresolvedRecipientError,
    ValidationError,
)

MESSAGE_EVENT = "chat:message"
NOTIFY_EVENT = "chat:notify"
TYPING_EVENT = "chat:typing"


class Publisher(Protocol):
    async def publish(self, room: str, event: str, data, exclude=None) -> int: ...


def _validate_send(customer_id, body) -> str:
    if not isinstance(customer_id, str) or not customer_id:
        raise ValidationError("customer_id is required")
    if not isinstance(body, str) or not body.strip():
        raise ValidationError("Message body cannot be empty")
    return body.strip()


def ensure_conversation_access(principal: Principal, customer_id: str):
    """Customers may only reach their own conversation; the admin reaches all."""
    if principal.role == "customer" and principal.user_id != customer_id:
        raise ForbiddenError("Customers can only access their own conversation")


async def send_message(
    db: AsyncIOMotorDatabase,
    customer_id: Optional[str],
    body: Optional[str],
    sender: Principal,
    publisher: Publisher = manager,
) -> dict:
    body = _validate_send(customer_id, body)
    ensure_conversation_access(sender, customer_id)

    if sender.is_admin:
        to_id = customer_id
    else:
        to_id = await resolve_admin_id(db)
        if not to_id:
            logger.warning("Rejected message from customer %s: no admin identity yet", sender.user_id)
            raise UnresolvedRecipientError()

    conv_id = conversation_key(customer_id)
    seq, created_at = await _next_position(db, conv_id)
    doc = {
        "conversation_id": conv_id,
        "from_role": sender.role,
        "from_id": sender.user_id,
        "to_id": to_id,
        "body": body,
        "read": False,
        "seq": seq,
        "created_at": created_at,
    }
    try:
        result = await db[MESSAGES].insert_one(doc)
    except PyMongoError as e:
        logger.error("Failed to persist message in %s: %s", conv_id, e)
        raise StoreError("Could not save message")
    doc["_id"] = result.inserted_id

    payload = serialize_message(doc)
    await _broadcast(publisher, conv_id, to_id, payload)
    return payload


async def _next_position(db: AsyncIOMotorDatabase, conv_id: str):
    """
    Claim the next slot in a conversation. The counter hands out an increasing
    seq and a created_at that never goes below the previous message's.
    """
    try:
        counter = await db[MESSAGE_COUNTERS].find_one_and_update(
            {"_id": conv_id},
            {"$inc": {"seq": 1}, "$max": {"last_at": datetime.utcnow()}},
            upsert=True,
            return_document=ReturnDocument.AFTER,
        )
    except PyMongoError as e:
        logger.error("Failed to allocate position in %s: %s", conv_id, e)
        raise StoreError("Could not save message")
    return counter["seq"], counter["last_at"]


async def _broadcast(publisher: Publisher, conv_id: str, to_id: str, payload: dict):
    try:
        await publisher.publish(conv_id, MESSAGE_EVENT, payload)
        await publisher.publish(personal_room(to_id), NOTIFY_EVENT, payload)
    except Exception as e:
        logger.warning("Broadcast for %s failed after persist: %s", conv_id, e)


async def broadcast_typing(
    customer_id: Optional[str],
    is_typing: bool,
    sender: Principal,
    publisher: Publisher = manager,
    exclude=None,
):
    if not isinstance(customer_id, str) or not customer_id:
        return
    ensure_conversation_access(sender, customer_id)
    await publisher.publish(
        conversation_key(customer_id),
        TYPING_EVENT,
        {"customer_id": customer_id, "is_typing": bool(is_typing), "from_role": sender.role},
        exclude=exclude,
    )


async def get_history(db: AsyncIOMotorDatabase, customer_id: str) -> List[dict]:
    try:
        cursor = db[MESSAGES].find({"conversation_id": conversation_key(customer_id)}).sort(
            [("seq", ASCENDING), ("_id", ASCENDING)]
        )
        docs = await cursor.to_list(length=None)
    except PyMongoError as e:
        raise StoreError(f"Could not load conversation: {e}")
    return [serialize_message(d) for d in docs]


async def unread_count(db: AsyncIOMotorDatabase, viewer_id: str) -> int:
    try:
        return await db[MESSAGES].count_documents({"to_id": viewer_id, "read": False})
    except PyMongoError as e:
        raise StoreError(f"Could not count unread messages: {e}")


async def mark_read(db: AsyncIOMotorDatabase, conversation_id: str, viewer_id: str) -> int:
    try:
        result = await db[MESSAGES].update_many(
            {"conversation_id": conversation_id, "to_id": viewer_id, "read": False},
            {"$set": {"read": True}},
        )
    except PyMongoError as e:
        raise StoreError(f"Could not mark messages as read: {e}")
    return result.modified_count


async def list_conversations(db: AsyncIOMotorDatabase, viewer_id: str) -> List[dict]:
    """Admin inbox: one entry per conversation, most recently active first."""
    try:
        conv_ids = await db[MESSAGES].distinct("conversation_id")
        summaries = []
        for conv_id in conv_ids:
            last = await db[MESSAGES].find_one(
                {"conversation_id": conv_id},
                sort=[("seq", DESCENDING), ("_id", DESCENDING)],
            )
            unread = await db[MESSAGES].count_documents(
                {"conversation_id": conv_id, "to_id": viewer_id, "read": False}
            )
            summaries.append({
                "conversation_id": conv_id,
                "customer_id": conv_id[len("cust_"):-len("__admin")],
                "last_message": serialize_message(last),
                "unread": unread,
            })
    except PyMongoError as e:
        raise StoreError(f"Could not list conversations: {e}")

    summaries.sort(key=lambda s: s["last_message"]["created_at"] or "", reverse=True)
    return summaries
