# elitehome/routers/quotes.py
from datetime import datetime
from fastapi import APIRouter, BackgroundTasks, Depends, Query
from motor.motor_asyncio import AsyncIOMotorDatabase
from elitehome.core.logger import logger
from elitehome.db.mongo import QUOTES, get_db
from elitehome.models.quote import QuoteCreate, serialize_quote
from elitehome.services.conversation import ADMINS_ROOM
from elitehome.services.quote_service import estimate_price
from elitehome.services.realtime import manager
from elitehome.utils.email import notify_admins_of_quote
from elitehome.utils.responses import format_response

router = APIRouter(tags=["quotation"])

NEW_QUOTE_EVENT = "quote:new"


@router.post("", status_code=201, summary="Request a painting quote")
async def request_quote(
    req: QuoteCreate,
    background_tasks: BackgroundTasks,
    db: AsyncIOMotorDatabase = Depends(get_db),
):
    doc = req.model_dump()
    doc["estimated_price"] = estimate_price(req.area, req.windows, req.doors, req.frames, req.features)
    doc["created_at"] = datetime.utcnow()
    result = await db[QUOTES].insert_one(doc)
    doc["_id"] = result.inserted_id
    quote = serialize_quote(doc)
    logger.info("New quote %s from %s: NZD %s", quote["id"], req.name, quote["estimated_price"])

    await manager.publish(ADMINS_ROOM, NEW_QUOTE_EVENT, quote)
    background_tasks.add_task(notify_admins_of_quote, quote)

    return format_response(success=True, data={"quote": quote}, message="Quote request submitted.")


@router.get("/estimate", summary="Price estimate without submitting")
async def quote_estimate(
    area: float = Query(0, ge=0),
    windows: int = Query(0, ge=0),
    doors: int = Query(0, ge=0),
    frames: int = Query(0, ge=0),
    features: int = Query(0, ge=0),
):
    price = estimate_price(area, windows, doors, frames, features)
    return format_response(success=True, data={"estimated_price": price})
