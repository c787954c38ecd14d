# elitehome/models/quote.py
from pydantic import BaseModel, EmailStr, Field
from typing import Optional
from datetime import datetime

class QuoteCreate(BaseModel):
    # Customer info
    name: str = Field(..., min_length=1)
    email: Optional[EmailStr] = None
    phone: str = ""
    address: str = ""

    # Job info
    paint_type: str = ""

    # Measurements (m²) and extras (counts)
    area: float = Field(default=0, ge=0)
    windows: int = Field(default=0, ge=0)
    doors: int = Field(default=0, ge=0)
    frames: int = Field(default=0, ge=0)
    features: int = Field(default=0, ge=0)

    message: str = ""

class Quote(QuoteCreate):
    id: str
    estimated_price: float
    created_at: Optional[datetime] = None


def serialize_quote(doc: dict) -> dict:
    data = {k: v for k, v in doc.items() if k != "_id"}
    return Quote(id=str(doc["_id"]), **data).model_dump(mode="json")
