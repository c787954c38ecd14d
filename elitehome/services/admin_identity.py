# elitehome/services/admin_identity.py

from datetime import datetime
from typing import Optional

from bson import ObjectId
from motor.motor_asyncio import AsyncIOMotorDatabase
from pymongo import ASCENDING
from pymongo.errors import PyMongoError

from elitehome.core.config import settings
from elitehome.db.mongo import ADMINS
from elitehome.models.user import Principal
from elitehome.utils.errors import StoreError


async def resolve_admin_id(db: AsyncIOMotorDatabase) -> Optional[str]:
    """
    Identity that receives customer chat messages.

    The configured ADMIN_USER_ID wins; otherwise the admin whose first login
    is earliest. None until either exists.
    """
    if settings.ADMIN_USER_ID:
        return settings.ADMIN_USER_ID

    try:
        cursor = (
            db[ADMINS]
            .find({"first_login_at": {"$ne": None}})
            .sort([("first_login_at", ASCENDING), ("_id", ASCENDING)])
            .limit(1)
        )
        admins = await cursor.to_list(length=1)
    except PyMongoError as e:
        raise StoreError(f"Could not look up admin identity: {e}")
    return str(admins[0]["_id"]) if admins else None


async def record_admin_login(db: AsyncIOMotorDatabase, admin_id: ObjectId):
    now = datetime.utcnow()
    await db[ADMINS].update_one(
        {"_id": admin_id, "first_login_at": None},
        {"$set": {"first_login_at": now}},
    )
    await db[ADMINS].update_one({"_id": admin_id}, {"$set": {"last_login_at": now}})


async def chat_principal(db: AsyncIOMotorDatabase, principal: Principal) -> Principal:
    """
    Every admin account speaks in chat as the single resolved admin identity,
    so sends, unread badges and read marks all land on the same id.
    """
    if not principal.is_admin:
        return principal
    admin_id = await resolve_admin_id(db)
    if not admin_id or admin_id == principal.user_id:
        return principal
    return Principal(user_id=admin_id, role="admin")
