# elitehome/routers/deps.py

from typing import Optional
from fastapi import Depends, Security
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from motor.motor_asyncio import AsyncIOMotorDatabase
from elitehome.core.security import decode_principal
from elitehome.db.mongo import get_db
from elitehome.models.user import Principal
from elitehome.services.admin_identity import chat_principal
from elitehome.utils.errors import ForbiddenError

bearer_scheme = HTTPBearer(auto_error=False)

def get_current_principal(
    token: Optional[HTTPAuthorizationCredentials] = Security(bearer_scheme),
) -> Principal:
    return decode_principal(token.credentials if token else None)


def require_admin(principal: Principal = Depends(get_current_principal)) -> Principal:
    if principal.role != "admin":
        raise ForbiddenError("Admin access required")
    return principal


def require_customer(principal: Principal = Depends(get_current_principal)) -> Principal:
    if principal.role != "customer":
        raise ForbiddenError("Customer access required")
    return principal


async def get_chat_principal(
    principal: Principal = Depends(get_current_principal),
    db: AsyncIOMotorDatabase = Depends(get_db),
) -> Principal:
    return await chat_principal(db, principal)


async def require_chat_admin(
    principal: Principal = Depends(require_admin),
    db: AsyncIOMotorDatabase = Depends(get_db),
) -> Principal:
    return await chat_principal(db, principal)
