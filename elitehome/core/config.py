# elitehome/core/config.py

from typing import List, Optional
from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

    # MongoDB settings
    MONGODB_URI: str = Field(default="mongodb://localhost:27017")
    MONGODB_DB: str = Field(default="elitehomepainters")

    # Auth/JWT settings
    SECRET_KEY: str = Field(...)
    JWT_ALGORITHM: str = Field(default="HS256")
    ACCESS_TOKEN_EXPIRE_MINUTES: int = Field(default=60 * 24)

    # Chat: fixed admin identity. When unset, the first admin to log in is used.
    ADMIN_USER_ID: Optional[str] = Field(default=None)

    # Uploads (employee photos, gallery images)
    UPLOAD_DIR: str = Field(default="uploads")

    # Quote notification email
    SENDGRID_API_KEY: Optional[str] = Field(default=None)
    ADMIN_EMAILS: str = Field(default="")
    FROM_EMAIL: str = Field(default="quotes@elitehomepainters.co.nz")
    FROM_NAME: str = Field(default="EliteHomePainters")

    # Pricing rates (NZD)
    PRICE_PER_SQM: float = Field(default=1.5, ge=0)
    PRICE_PER_WINDOW: float = Field(default=45.0, ge=0)
    PRICE_PER_DOOR: float = Field(default=60.0, ge=0)
    PRICE_PER_FRAME: float = Field(default=25.0, ge=0)
    PRICE_PER_FEATURE: float = Field(default=120.0, ge=0)

    @property
    def admin_email_list(self) -> List[str]:
        return [e.strip() for e in self.ADMIN_EMAILS.split(",") if e.strip()]

settings = Settings()
