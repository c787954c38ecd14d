# elitehome/models/user.py
from pydantic import BaseModel, EmailStr, Field
from typing import Literal, Optional
from datetime import datetime

Role = Literal["customer", "admin"]

class Principal(BaseModel):
    """Identity verified once at the request/connection boundary."""
    user_id: str
    role: Role

    @property
    def is_admin(self) -> bool:
        return self.role == "admin"

class AccountCreate(BaseModel):
    name: str = Field(..., min_length=1)
    email: EmailStr
    password: str = Field(..., min_length=1)

class AccountLogin(BaseModel):
    email: EmailStr
    password: str

class Account(BaseModel):
    id: str
    name: str
    email: EmailStr
    role: Role
    created_at: Optional[datetime] = None

class Token(BaseModel):
    access_token: str
    token_type: str


def serialize_account(doc: dict, role: Role) -> dict:
    return Account(
        id=str(doc["_id"]),
        name=doc.get("name", ""),
        email=doc["email"],
        role=role,
        created_at=doc.get("created_at"),
    ).model_dump(mode="json")
