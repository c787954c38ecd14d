# elitehome/models/gallery.py
from pydantic import BaseModel
from typing import Optional
from datetime import datetime

class GalleryImage(BaseModel):
    id: str
    image: str
    caption: str = ""
    uploaded_at: Optional[datetime] = None


def serialize_image(doc: dict) -> dict:
    return GalleryImage(
        id=str(doc["_id"]),
        image=doc["image"],
        caption=doc.get("caption") or "",
        uploaded_at=doc.get("uploaded_at"),
    ).model_dump(mode="json")
