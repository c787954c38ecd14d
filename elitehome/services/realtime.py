# elitehome/services/realtime.py
"""In-process room fan-out for chat WebSocket connections.

Each connection joins a personal room (``user_<id>``) and, when it has one,
the conversation room it is viewing (``cust_<customerId>__admin``). Admin
connections also join the ``admins`` room for new-quote alerts.

Publishing is best-effort: a connection that fails to receive is dropped and
the failure is logged, never raised to the publisher.
"""

from collections import defaultdict
from typing import Any, Dict, List, Optional, Set

from fastapi import WebSocket

from elitehome.core.logger import logger
from elitehome.models.user import Principal
from elitehome.services.conversation import ADMINS_ROOM, conversation_key, personal_room


def connection_rooms(principal: Principal, customer_id: Optional[str] = None) -> List[str]:
    rooms = [personal_room(principal.user_id)]
    if principal.role == "customer":
        rooms.append(conversation_key(principal.user_id))
    else:
        rooms.append(ADMINS_ROOM)
        if customer_id:
            rooms.append(conversation_key(customer_id))
    return rooms


class ConnectionManager:
    """Tracks which sockets are in which rooms and publishes events to rooms."""

    def __init__(self):
        self.rooms: Dict[str, Set[WebSocket]] = defaultdict(set)
        self.memberships: Dict[WebSocket, Set[str]] = defaultdict(set)

    def join(self, websocket: WebSocket, room: str):
        self.rooms[room].add(websocket)
        self.memberships[websocket].add(room)

    def leave(self, websocket: WebSocket, room: str):
        members = self.rooms.get(room)
        if members is not None:
            members.discard(websocket)
            if not members:
                del self.rooms[room]
        if websocket in self.memberships:
            self.memberships[websocket].discard(room)

    def connect(self, websocket: WebSocket, rooms: List[str]):
        for room in rooms:
            self.join(websocket, room)

    def disconnect(self, websocket: WebSocket):
        for room in list(self.memberships.get(websocket, ())):
            self.leave(websocket, room)
        self.memberships.pop(websocket, None)

    def switch_conversation(self, websocket: WebSocket, customer_id: str):
        """Leave any conversation room the socket is in, then join the new one."""
        for room in list(self.memberships.get(websocket, ())):
            if room.startswith("cust_"):
                self.leave(websocket, room)
        self.join(websocket, conversation_key(customer_id))

    def rooms_of(self, websocket: WebSocket) -> Set[str]:
        return set(self.memberships.get(websocket, ()))

    async def publish(
        self,
        room: str,
        event: str,
        data: Any,
        exclude: Optional[WebSocket] = None,
    ) -> int:
        """Send ``{"event", "data"}`` to every socket in ``room``; returns deliveries."""
        delivered = 0
        for websocket in list(self.rooms.get(room, ())):
            if websocket is exclude:
                continue
            try:
                await websocket.send_json({"event": event, "data": data})
                delivered += 1
            except Exception as e:
                logger.warning("Dropping socket from %s after failed send: %s", room, e)
                self.disconnect(websocket)
        return delivered


manager = ConnectionManager()
