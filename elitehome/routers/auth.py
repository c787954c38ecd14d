# elitehome/routers/auth.py

from datetime import datetime
from fastapi import APIRouter, Depends
from motor.motor_asyncio import AsyncIOMotorDatabase
from pymongo.errors import DuplicateKeyError
from elitehome.core.logger import logger
from elitehome.core.security import create_access_token, hash_password, verify_password
from elitehome.db.mongo import ADMINS, CUSTOMERS, get_db
from elitehome.models.user import AccountCreate, AccountLogin, Principal, Role, Token, serialize_account
from elitehome.routers.deps import get_current_principal
from elitehome.services.admin_identity import record_admin_login
from elitehome.utils.errors import ConflictError, UnauthorizedRequestError
from elitehome.utils.responses import format_response

router = APIRouter(tags=["auth"])


async def _register(db: AsyncIOMotorDatabase, collection: str, account: AccountCreate, role: Role) -> dict:
    existing = await db[collection].find_one({"email": account.email})
    if existing:
        raise ConflictError("Email already registered")

    doc = {
        "name": account.name,
        "email": account.email,
        "password": hash_password(account.password),
        "created_at": datetime.utcnow(),
    }
    if role == "admin":
        doc["first_login_at"] = None
    try:
        result = await db[collection].insert_one(doc)
    except DuplicateKeyError:
        raise ConflictError("Email already registered")
    doc["_id"] = result.inserted_id
    logger.info("Registered %s %s", role, account.email)
    return serialize_account(doc, role)


async def _authenticate(db: AsyncIOMotorDatabase, collection: str, creds: AccountLogin) -> dict:
    account = await db[collection].find_one({"email": creds.email})
    if not account or not verify_password(creds.password, account.get("password", "")):
        logger.warning("Failed login for %s", creds.email)
        raise UnauthorizedRequestError("Invalid credentials")
    return account


# -----------------------------
# Admin
# -----------------------------

@router.post("/admin/register", status_code=201, summary="Create an admin account (internal)")
async def admin_register(account: AccountCreate, db: AsyncIOMotorDatabase = Depends(get_db)):
    admin = await _register(db, ADMINS, account, "admin")
    return format_response(success=True, data={"admin": admin}, message="Admin account created")


@router.post("/admin/login", response_model=Token)
async def admin_login(creds: AccountLogin, db: AsyncIOMotorDatabase = Depends(get_db)):
    admin = await _authenticate(db, ADMINS, creds)
    await record_admin_login(db, admin["_id"])
    token = create_access_token({"sub": str(admin["_id"]), "role": "admin", "email": admin["email"]})
    return {"access_token": token, "token_type": "bearer"}


# -----------------------------
# Customer
# -----------------------------

@router.post("/customer/register", status_code=201, summary="Create a customer account")
async def customer_register(account: AccountCreate, db: AsyncIOMotorDatabase = Depends(get_db)):
    customer = await _register(db, CUSTOMERS, account, "customer")
    return format_response(success=True, data={"customer": customer}, message="Customer account created")


@router.post("/customer/login", response_model=Token)
async def customer_login(creds: AccountLogin, db: AsyncIOMotorDatabase = Depends(get_db)):
    customer = await _authenticate(db, CUSTOMERS, creds)
    token = create_access_token({"sub": str(customer["_id"]), "role": "customer", "email": customer["email"]})
    return {"access_token": token, "token_type": "bearer"}


@router.get("/me", summary="Current principal")
async def me(principal: Principal = Depends(get_current_principal)):
    return format_response(success=True, data=principal.model_dump())
