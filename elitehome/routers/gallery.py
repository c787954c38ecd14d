# elitehome/routers/gallery.py

from datetime import datetime
from fastapi import APIRouter, Depends, File, Form, UploadFile
from motor.motor_asyncio import AsyncIOMotorDatabase
from elitehome.db.mongo import GALLERY, get_db
from elitehome.models.gallery import serialize_image
from elitehome.models.user import Principal
from elitehome.routers.deps import require_admin
from elitehome.utils.errors import BadRequestError, NotFoundError
from elitehome.utils.object_ids import parse_object_id
from elitehome.utils.pagination import build_sort
from elitehome.utils.responses import format_response
from elitehome.utils.uploads import is_image, remove_upload, save_upload

router = APIRouter(tags=["gallery"])


@router.get("/gallery", summary="Public gallery, newest first")
async def list_gallery(db: AsyncIOMotorDatabase = Depends(get_db)):
    cursor = db[GALLERY].find({}).sort(build_sort("uploaded_at") + build_sort("_id"))
    images = [serialize_image(doc) async for doc in cursor]
    return format_response(success=True, data={"images": images})


@router.post("/admin/gallery", status_code=201, summary="Upload a gallery image")
async def upload_gallery_image(
    image: UploadFile = File(...),
    caption: str = Form(""),
    current_user: Principal = Depends(require_admin),
    db: AsyncIOMotorDatabase = Depends(get_db),
):
    if not image.filename:
        raise BadRequestError("No file uploaded")
    if not is_image(image):
        raise BadRequestError("Only image files can be added to the gallery")

    doc = {
        "image": await save_upload(image),
        "caption": caption,
        "uploaded_at": datetime.utcnow(),
    }
    result = await db[GALLERY].insert_one(doc)
    doc["_id"] = result.inserted_id
    return format_response(success=True, data={"image": serialize_image(doc)})


@router.delete("/admin/gallery/{image_id}", summary="Delete a gallery image and its file")
async def delete_gallery_image(
    image_id: str,
    current_user: Principal = Depends(require_admin),
    db: AsyncIOMotorDatabase = Depends(get_db),
):
    doc = await db[GALLERY].find_one_and_delete({"_id": parse_object_id(image_id)})
    if not doc:
        raise NotFoundError("Image not found")
    remove_upload(doc.get("image"))
    return format_response(success=True, message="Image deleted")
