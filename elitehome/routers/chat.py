# elitehome/routers/chat.py

from typing import Optional
from fastapi import APIRouter, Depends, WebSocket, WebSocketDisconnect
from fastapi import HTTPException
from motor.motor_asyncio import AsyncIOMotorDatabase
from elitehome.core.logger import logger
from elitehome.core.security import decode_principal
from elitehome.db.mongo import get_db
from elitehome.models.message import SendMessageRequest
from elitehome.models.user import Principal
from elitehome.routers.deps import get_chat_principal, get_current_principal, require_chat_admin
from elitehome.services.admin_identity import chat_principal
from elitehome.services.chat_service import (
    broadcast_typing,
    ensure_conversation_access,
    get_history,
    list_conversations,
    mark_read,
    send_message,
    unread_count,
)
from elitehome.services.conversation import conversation_key
from elitehome.services.realtime import connection_rooms, manager
from elitehome.utils.errors import ValidationError
from elitehome.utils.responses import format_response

router = APIRouter(tags=["chat"])

# Close code for a rejected handshake (no verified userId/role)
WS_UNAUTHORIZED = 4001


# ---------------------
# Request/response routes
# ---------------------

@router.get("/history/{customer_id}", summary="Conversation history, oldest first")
async def chat_history(
    customer_id: str,
    principal: Principal = Depends(get_current_principal),
    db: AsyncIOMotorDatabase = Depends(get_db),
):
    ensure_conversation_access(principal, customer_id)
    messages = await get_history(db, customer_id)
    return format_response(success=True, data={"messages": messages})


@router.post("/read/{customer_id}", summary="Mark the caller's unread messages as read")
async def chat_mark_read(
    customer_id: str,
    principal: Principal = Depends(get_chat_principal),
    db: AsyncIOMotorDatabase = Depends(get_db),
):
    ensure_conversation_access(principal, customer_id)
    updated = await mark_read(db, conversation_key(customer_id), principal.user_id)
    return format_response(success=True, data={"updated": updated})


@router.post("/send", summary="Send a chat message")
async def chat_send(
    req: SendMessageRequest,
    principal: Principal = Depends(get_chat_principal),
    db: AsyncIOMotorDatabase = Depends(get_db),
):
    message = await send_message(db, req.customer_id, req.body, principal)
    return format_response(success=True, data={"message": message})


@router.get("/unread-count", summary="Unread badge count for the caller")
async def chat_unread_count(
    principal: Principal = Depends(get_chat_principal),
    db: AsyncIOMotorDatabase = Depends(get_db),
):
    count = await unread_count(db, principal.user_id)
    return format_response(success=True, data={"count": count})


@router.get("/conversations", summary="Admin inbox")
async def chat_conversations(
    principal: Principal = Depends(require_chat_admin),
    db: AsyncIOMotorDatabase = Depends(get_db),
):
    conversations = await list_conversations(db, principal.user_id)
    return format_response(success=True, data={"conversations": conversations})


# ---------------------
# Realtime
# ---------------------

@router.websocket("/ws")
async def chat_socket(
    websocket: WebSocket,
    token: Optional[str] = None,
    customer_id: Optional[str] = None,
    db: AsyncIOMotorDatabase = Depends(get_db),
):
    try:
        principal = await chat_principal(db, decode_principal(token))
    except HTTPException as e:
        logger.warning("Rejected chat socket: %s", e.detail)
        await websocket.close(code=WS_UNAUTHORIZED)
        return

    # Rooms are registered before the accept so no publish can miss a socket the client already sees as open
    manager.connect(websocket, connection_rooms(principal, customer_id))
    await websocket.accept()
    logger.info("Chat socket connected: %s %s", principal.role, principal.user_id)

    try:
        while True:
            try:
                event = await websocket.receive_json()
            except ValueError:
                logger.warning("Dropping malformed frame from %s", principal.user_id)
                continue
            await handle_socket_event(websocket, db, principal, event)
    except WebSocketDisconnect:
        pass
    finally:
        manager.disconnect(websocket)
        logger.info("Chat socket disconnected: %s %s", principal.role, principal.user_id)


async def handle_socket_event(
    websocket: WebSocket,
    db: AsyncIOMotorDatabase,
    principal: Principal,
    event: dict,
):
    """
    Push-style events from a connected client:

        {"type": "send", "customer_id": "...", "body": "..."}
        {"type": "typing", "customer_id": "...", "is_typing": true}
        {"type": "join", "customer_id": "..."}       (admin only)

    Rejected events are not reported back to the socket.
    """
    if not isinstance(event, dict):
        return
    event_type = event.get("type")
    customer_id = event.get("customer_id")
    if customer_id is not None and not isinstance(customer_id, str):
        return

    try:
        if event_type == "send":
            await send_message(db, customer_id, event.get("body"), principal)
        elif event_type == "typing":
            await broadcast_typing(customer_id, event.get("is_typing", False), principal, exclude=websocket)
        elif event_type == "join" and principal.is_admin and customer_id:
            manager.switch_conversation(websocket, customer_id)
        else:
            logger.debug("Ignoring socket event %r", event_type)
    except ValidationError:
        pass
    except HTTPException as e:
        logger.warning("Socket %s event from %s rejected: %s", event_type, principal.user_id, e.detail)
