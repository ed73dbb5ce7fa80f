# app/services/storage_service.py
import os
import time
import uuid

from fastapi import UploadFile

from app.domain.errors import ValidationError
from app.utils.settings import UPLOADS_DIR
from app.utils.logging import get_logger

logger = get_logger(__name__)

_CHUNK = 1024 * 1024


class ImageStorage:
    """Zapis obrazkow produktow na dysk; pliki serwowane pod /uploads."""

    def __init__(self, directory: str | None = None):
        self.directory = directory or UPLOADS_DIR
        os.makedirs(self.directory, exist_ok=True)

    def save(self, upload: UploadFile, field_name: str = "image") -> str:
        content_type = upload.content_type or ""
        if not content_type.startswith("image/"):
            raise ValidationError("Only image uploads are allowed")

        ext = os.path.splitext(upload.filename or "")[1]
        filename = f"{field_name}-{int(time.time() * 1000)}-{uuid.uuid4().hex[:12]}{ext}"
        path = os.path.join(self.directory, filename)

        with open(path, "wb") as out:
            while True:
                chunk = upload.file.read(_CHUNK)
                if not chunk:
                    break
                out.write(chunk)

        logger.info(f"Zapisano obrazek {filename} ({content_type})")
        return filename

    def delete(self, filename: str):
        path = os.path.join(self.directory, os.path.basename(filename))
        try:
            os.remove(path)
        except FileNotFoundError:
            return
        logger.info(f"Usunieto obrazek {filename}")
