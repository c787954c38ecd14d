# elitehome/utils/uploads.py

import os
import time
from typing import Optional
from fastapi import UploadFile
from elitehome.core.config import settings
from elitehome.core.logger import logger

ALLOWED_IMAGE_EXTENSIONS = {"jpg", "jpeg", "png", "gif", "webp"}


async def save_upload(file: UploadFile) -> str:
    """Store an uploaded file as ``<millis>-<original name>`` and return that name."""
    os.makedirs(settings.UPLOAD_DIR, exist_ok=True)
    original = os.path.basename(file.filename or "upload")
    filename = f"{int(time.time() * 1000)}-{original}"
    with open(os.path.join(settings.UPLOAD_DIR, filename), "wb") as f:
        f.write(await file.read())
    return filename


def is_image(file: UploadFile) -> bool:
    ext = (file.filename or "").rsplit(".", 1)[-1].lower()
    return ext in ALLOWED_IMAGE_EXTENSIONS


def remove_upload(filename: Optional[str]):
    if not filename:
        return
    path = os.path.join(settings.UPLOAD_DIR, os.path.basename(filename))
    if os.path.exists(path):
        os.remove(path)
        logger.info("Deleted upload %s", filename)
