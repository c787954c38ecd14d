# elitehome/routers/customer.py

from fastapi import APIRouter, Depends
from motor.motor_asyncio import AsyncIOMotorDatabase
from elitehome.db.mongo import CUSTOMERS, get_db
from elitehome.models.user import Principal, serialize_account
from elitehome.routers.deps import require_customer
from elitehome.services.chat_service import unread_count
from elitehome.utils.errors import NotFoundError
from elitehome.utils.object_ids import parse_object_id
from elitehome.utils.responses import format_response

router = APIRouter(tags=["customer"])


@router.get("/dashboard", summary="Customer portal overview")
async def customer_dashboard(
    current_user: Principal = Depends(require_customer),
    db: AsyncIOMotorDatabase = Depends(get_db),
):
    doc = await db[CUSTOMERS].find_one({"_id": parse_object_id(current_user.user_id)})
    if not doc:
        raise NotFoundError("Customer not found")
    return format_response(
        success=True,
        data={
            "customer": serialize_account(doc, "customer"),
            "unread_messages": await unread_count(db, current_user.user_id),
        },
    )
