# tests/test_chat_service.py

from datetime import datetime

import pytest
from bson import ObjectId
from pymongo.errors import PyMongoError

from elitehome.core.config import settings
from elitehome.models.user import Principal
from elitehome.services.admin_identity import chat_principal, record_admin_login, resolve_admin_id
from elitehome.services.chat_service import (
    broadcast_typing,
    get_history,
    list_conversations,
    mark_read,
    send_message,
    unread_count,
)
from elitehome.utils.errors import (
    ForbiddenError,
    StoreError,
    UnresolvedRecipientError,
    ValidationError,
)

ADMIN = Principal(user_id="a1", role="admin")


def customer(user_id="c1"):
    return Principal(user_id=user_id, role="customer")


@pytest.fixture
def admin_configured(monkeypatch):
    monkeypatch.setattr(settings, "ADMIN_USER_ID", "a1")


# ---------------------
# Dispatch
# ---------------------

@pytest.mark.asyncio
async def test_customer_message_reaches_admin(db, publisher, admin_configured):
    msg = await send_message(db, "c1", "Hi", customer("c1"), publisher=publisher)

    stored = await db["messages"].find({}).to_list(length=None)
    assert len(stored) == 1
    assert stored[0]["from_role"] == "customer"
    assert stored[0]["from_id"] == "c1"
    assert stored[0]["to_id"] == "a1"
    assert stored[0]["read"] is False
    assert stored[0]["conversation_id"] == "cust_c1__admin"

    assert msg["id"] == str(stored[0]["_id"])
    assert publisher.events == [
        ("cust_c1__admin", "chat:message", msg),
        ("user_a1", "chat:notify", msg),
    ]


@pytest.mark.asyncio
async def test_admin_message_goes_to_named_customer(db, publisher):
    msg = await send_message(db, "c2", "Your quote is ready", ADMIN, publisher=publisher)

    assert msg["from_role"] == "admin"
    assert msg["from_id"] == "a1"
    assert msg["to_id"] == "c2"
    assert publisher.rooms() == ["cust_c2__admin", "user_c2"]


@pytest.mark.asyncio
async def test_offline_customer_finds_message_in_history(db, publisher):
    await send_message(db, "c2", "Booked for Monday", ADMIN, publisher=publisher)

    history = await get_history(db, "c2")

    assert len(history) == 1
    assert history[0]["body"] == "Booked for Monday"
    assert history[0]["read"] is False


@pytest.mark.asyncio
@pytest.mark.parametrize("body", ["", "   ", None, 123, ["Hi"]])
async def test_empty_body_is_rejected_without_side_effects(db, publisher, admin_configured, body):
    with pytest.raises(ValidationError):
        await send_message(db, "c1", body, customer("c1"), publisher=publisher)

    assert await db["messages"].count_documents({}) == 0
    assert publisher.events == []


@pytest.mark.asyncio
async def test_missing_target_is_rejected(db, publisher):
    with pytest.raises(ValidationError):
        await send_message(db, None, "Hello?", ADMIN, publisher=publisher)
    assert await db["messages"].count_documents({}) == 0


@pytest.mark.asyncio
async def test_non_string_target_is_rejected(db, publisher):
    with pytest.raises(ValidationError):
        await send_message(db, {"id": "c1"}, "Hello?", ADMIN, publisher=publisher)
    assert await db["messages"].count_documents({}) == 0


@pytest.mark.asyncio
async def test_customer_send_without_admin_identity_is_rejected(db, publisher):
    with pytest.raises(UnresolvedRecipientError):
        await send_message(db, "c1", "Anyone there?", customer("c1"), publisher=publisher)

    assert await db["messages"].count_documents({}) == 0
    assert publisher.events == []


@pytest.mark.asyncio
async def test_customer_cannot_write_into_another_conversation(db, publisher, admin_configured):
    with pytest.raises(ForbiddenError):
        await send_message(db, "c2", "Hi", customer("c1"), publisher=publisher)
    assert await db["messages"].count_documents({}) == 0


@pytest.mark.asyncio
async def test_broadcast_failure_does_not_fail_the_send(db, admin_configured):
    class ExplodingPublisher:
        async def publish(self, room, event, data, exclude=None):
            raise RuntimeError("socket layer down")

    msg = await send_message(db, "c1", "Still saved", customer("c1"), publisher=ExplodingPublisher())

    assert msg["body"] == "Still saved"
    assert await db["messages"].count_documents({}) == 1


@pytest.mark.asyncio
async def test_persist_failure_raises_store_error(publisher):
    class FailingCollection:
        async def find_one_and_update(self, *args, **kwargs):
            raise PyMongoError("primary unavailable")

        async def insert_one(self, doc):
            raise PyMongoError("primary unavailable")

    broken_db = {"conversation_counters": FailingCollection(), "messages": FailingCollection()}

    with pytest.raises(StoreError):
        await send_message(broken_db, "c1", "Hi", ADMIN, publisher=publisher)
    assert publisher.events == []


@pytest.mark.asyncio
async def test_history_keeps_persist_order(db, publisher):
    await send_message(db, "c3", "first", ADMIN, publisher=publisher)
    await send_message(db, "c3", "second", ADMIN, publisher=publisher)
    await send_message(db, "c4", "elsewhere", ADMIN, publisher=publisher)

    history = await get_history(db, "c3")

    assert [m["body"] for m in history] == ["first", "second"]


@pytest.mark.asyncio
async def test_created_at_is_non_decreasing(db, publisher):
    for i in range(5):
        await send_message(db, "c5", f"msg {i}", ADMIN, publisher=publisher)

    docs = await db["messages"].find({"conversation_id": "cust_c5__admin"}).sort("_id", 1).to_list(length=None)
    stamps = [d["created_at"] for d in docs]
    assert stamps == sorted(stamps)


# ---------------------
# Admin identity
# ---------------------

@pytest.mark.asyncio
async def test_admin_login_is_stamped_once(db):
    admin_id = ObjectId()
    await db["admins"].insert_one({"_id": admin_id, "email": "owner@example.com", "first_login_at": None})
    assert await resolve_admin_id(db) is None

    await record_admin_login(db, admin_id)
    first = (await db["admins"].find_one({"_id": admin_id}))["first_login_at"]
    await record_admin_login(db, admin_id)
    doc = await db["admins"].find_one({"_id": admin_id})

    assert doc["first_login_at"] == first
    assert doc["last_login_at"] >= first
    assert await resolve_admin_id(db) == str(admin_id)


@pytest.mark.asyncio
async def test_earliest_admin_login_becomes_recipient(db, publisher):
    owner, helper = ObjectId(), ObjectId()
    await db["admins"].insert_many([
        {"_id": owner, "email": "owner@example.com", "first_login_at": datetime(2025, 3, 2)},
        {"_id": helper, "email": "helper@example.com", "first_login_at": datetime(2025, 3, 1)},
        {"email": "never@example.com", "first_login_at": None},
    ])

    assert await resolve_admin_id(db) == str(helper)
    msg = await send_message(db, "c1", "Hi", customer("c1"), publisher=publisher)
    assert msg["to_id"] == str(helper)


@pytest.mark.asyncio
async def test_configured_admin_takes_precedence(db, monkeypatch):
    admin_id = ObjectId()
    await db["admins"].insert_one({"_id": admin_id, "email": "owner@example.com", "first_login_at": None})
    await record_admin_login(db, admin_id)
    monkeypatch.setattr(settings, "ADMIN_USER_ID", "configured-admin")

    assert await resolve_admin_id(db) == "configured-admin"


# ---------------------
# Unread / read
# ---------------------

@pytest.mark.asyncio
async def test_unread_count_and_mark_read(db, publisher):
    for body in ("one", "two", "three"):
        await send_message(db, "c1", body, ADMIN, publisher=publisher)
    assert await unread_count(db, "c1") == 3

    assert await mark_read(db, "cust_c1__admin", "c1") == 3
    assert await unread_count(db, "c1") == 0

    await send_message(db, "c1", "four", ADMIN, publisher=publisher)
    assert await unread_count(db, "c1") == 1


@pytest.mark.asyncio
async def test_mark_read_is_idempotent(db, publisher):
    await send_message(db, "c1", "hello", ADMIN, publisher=publisher)

    assert await mark_read(db, "cust_c1__admin", "c1") == 1
    assert await mark_read(db, "cust_c1__admin", "c1") == 0
    assert await unread_count(db, "c1") == 0


@pytest.mark.asyncio
async def test_mark_read_only_touches_viewers_messages(db, publisher, admin_configured):
    await send_message(db, "c1", "from admin", ADMIN, publisher=publisher)
    await send_message(db, "c1", "from customer", customer("c1"), publisher=publisher)

    await mark_read(db, "cust_c1__admin", "c1")

    assert await unread_count(db, "c1") == 0
    assert await unread_count(db, "a1") == 1


# ---------------------
# Typing / inbox
# ---------------------

@pytest.mark.asyncio
async def test_typing_is_broadcast_not_stored(db, publisher):
    await broadcast_typing("c1", True, customer("c1"), publisher=publisher)

    assert publisher.events == [
        ("cust_c1__admin", "chat:typing", {"customer_id": "c1", "is_typing": True, "from_role": "customer"}),
    ]
    assert await db["messages"].count_documents({}) == 0


@pytest.mark.asyncio
async def test_admin_inbox_lists_conversations(db, publisher, admin_configured):
    await send_message(db, "c1", "old question", customer("c1"), publisher=publisher)
    await send_message(db, "c2", "new question", customer("c2"), publisher=publisher)
    await send_message(db, "c2", "another", customer("c2"), publisher=publisher)

    inbox = await list_conversations(db, "a1")

    by_customer = {c["customer_id"]: c for c in inbox}
    assert set(by_customer) == {"c1", "c2"}
    assert by_customer["c2"]["unread"] == 2
    assert by_customer["c2"]["last_message"]["body"] == "another"
    assert by_customer["c1"]["unread"] == 1


@pytest.mark.asyncio
async def test_positions_come_from_the_conversation_counter(db, publisher):
    # A clock that fell behind the last stored message must not reorder history
    await db["conversation_counters"].insert_one(
        {"_id": "cust_c9__admin", "seq": 5, "last_at": datetime(2100, 1, 1)}
    )

    first = await send_message(db, "c9", "after the jump", ADMIN, publisher=publisher)
    second = await send_message(db, "c9", "next", ADMIN, publisher=publisher)

    assert first["seq"] == 6
    assert second["seq"] == 7
    stored = await db["messages"].find({"conversation_id": "cust_c9__admin"}).to_list(length=None)
    assert all(d["created_at"] == datetime(2100, 1, 1) for d in stored)
    assert [m["body"] for m in await get_history(db, "c9")] == ["after the jump", "next"]


@pytest.mark.asyncio
async def test_each_conversation_counts_independently(db, publisher):
    await send_message(db, "c1", "one", ADMIN, publisher=publisher)
    await send_message(db, "c2", "one", ADMIN, publisher=publisher)
    msg = await send_message(db, "c1", "two", ADMIN, publisher=publisher)

    assert msg["seq"] == 2
    assert [m["seq"] for m in await get_history(db, "c2")] == [1]


# ---------------------
# Shared admin identity
# ---------------------

@pytest.mark.asyncio
async def test_every_admin_account_speaks_as_the_resolved_admin(db):
    owner, helper = ObjectId(), ObjectId()
    await db["admins"].insert_many([
        {"_id": owner, "email": "owner@example.com", "first_login_at": datetime(2025, 3, 1)},
        {"_id": helper, "email": "helper@example.com", "first_login_at": datetime(2025, 3, 2)},
    ])

    as_helper = await chat_principal(db, Principal(user_id=str(helper), role="admin"))
    as_owner = await chat_principal(db, Principal(user_id=str(owner), role="admin"))
    as_customer = await chat_principal(db, customer("c1"))

    assert as_helper == Principal(user_id=str(owner), role="admin")
    assert as_owner.user_id == str(owner)
    assert as_customer == customer("c1")
