# elitehome/routers/admin.py

from fastapi import APIRouter, Depends
from motor.motor_asyncio import AsyncIOMotorDatabase
from elitehome.db.mongo import CUSTOMERS, EMPLOYEES, QUOTES, get_db
from elitehome.models.quote import serialize_quote
from elitehome.models.user import Principal
from elitehome.routers.deps import require_admin, require_chat_admin
from elitehome.services.chat_service import unread_count
from elitehome.utils.errors import NotFoundError
from elitehome.utils.object_ids import parse_object_id
from elitehome.utils.pagination import build_pagination, build_sort
from elitehome.utils.responses import format_response

router = APIRouter(tags=["admin"])


@router.get("/dashboard", summary="Back-office overview")
async def dashboard(
    current_user: Principal = Depends(require_chat_admin),
    db: AsyncIOMotorDatabase = Depends(get_db),
):
    data = {
        "customer_count": await db[CUSTOMERS].count_documents({}),
        "quote_count": await db[QUOTES].count_documents({}),
        "active_employees": await db[EMPLOYEES].count_documents({"status": "Active"}),
        "unread_messages": await unread_count(db, current_user.user_id),
    }
    return format_response(success=True, data=data)


@router.get("/quotes", summary="Quote requests, newest first")
async def list_quotes(
    page: int = 1,
    page_size: int = 50,
    current_user: Principal = Depends(require_admin),
    db: AsyncIOMotorDatabase = Depends(get_db),
):
    skip, limit = build_pagination(page, page_size)
    total = await db[QUOTES].count_documents({})
    cursor = db[QUOTES].find({}).sort(build_sort("created_at") + build_sort("_id")).skip(skip).limit(limit)
    quotes = [serialize_quote(doc) async for doc in cursor]
    return format_response(
        success=True,
        data={"quotes": quotes, "total": total, "page": page, "page_size": page_size},
    )


@router.delete("/quotes/{quote_id}", summary="Delete a quote request")
async def delete_quote(
    quote_id: str,
    current_user: Principal = Depends(require_admin),
    db: AsyncIOMotorDatabase = Depends(get_db),
):
    result = await db[QUOTES].delete_one({"_id": parse_object_id(quote_id)})
    if result.deleted_count == 0:
        raise NotFoundError("Quote not found")
    return format_response(success=True, message="Quote deleted")


@router.get("/quote-count", summary="Total quote requests (badge polling)")
async def quote_count(
    current_user: Principal = Depends(require_admin),
    db: AsyncIOMotorDatabase = Depends(get_db),
):
    count = await db[QUOTES].count_documents({})
    return format_response(success=True, data={"count": count})


@router.post("/reset-notifications", summary="Acknowledge new-quote alerts")
async def reset_notifications(current_user: Principal = Depends(require_admin)):
    # Alerts are client-side counters; nothing is stored server-side.
    return format_response(success=True, message="Notifications reset")
