"""
Storage Service
Local storage for uploaded template images, served under /uploads
"""

import logging
import uuid
from io import BytesIO
from pathlib import Path
from typing import Optional, Tuple

from fastapi import HTTPException, status
from PIL import Image, UnidentifiedImageError

from app.config import settings
from app.services.image_loader import UPLOADS_PREFIX

logger = logging.getLogger(__name__)


class StorageService:
    """Upload directory helper"""

    FORMAT_EXTENSIONS = {
        "PNG": "png",
        "JPEG": "jpg",
        "GIF": "gif",
        "WEBP": "webp",
        "BMP": "bmp",
    }

    @staticmethod
    def upload_dir() -> Path:
        path = Path(settings.UPLOAD_DIR)
        path.mkdir(parents=True, exist_ok=True)
        return path

    @staticmethod
    def _inspect_image(content: bytes) -> Tuple[str, int, int]:
        try:
            with Image.open(BytesIO(content)) as img:
                img.verify()
            with Image.open(BytesIO(content)) as img:
                return img.format or "", img.width, img.height
        except (UnidentifiedImageError, OSError, SyntaxError) as e:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail=f"Invalid template image: {e}"
            )

    @staticmethod
    def save_template_image(content: bytes, content_type: Optional[str]) -> Tuple[str, int, int]:
        """
        Validate and store an uploaded template image.

        The image is stored byte-for-byte; resizing would change the native
        coordinate space text boxes are positioned in.

        Returns:
            Tuple of (image_url, width, height)
        """
        if content_type and content_type not in settings.allowed_image_types:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail=f"Unsupported image type: {content_type}"
            )
        if not content:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="Uploaded image is empty"
            )
        if len(content) > settings.MAX_UPLOAD_SIZE:
            raise HTTPException(
                status_code=status.HTTP_413_REQUEST_ENTITY_TOO_LARGE,
                detail=f"Image exceeds the {settings.MAX_UPLOAD_SIZE} byte upload limit"
            )

        image_format, width, height = StorageService._inspect_image(content)
        extension = StorageService.FORMAT_EXTENSIONS.get(image_format)
        if not extension:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail=f"Unsupported image format: {image_format or 'unknown'}"
            )

        filename = f"{uuid.uuid4()}.{extension}"
        (StorageService.upload_dir() / filename).write_bytes(content)
        logger.info("Stored template image %s (%dx%d)", filename, width, height)
        return f"{UPLOADS_PREFIX}{filename}", width, height

    @staticmethod
    def delete_by_url(file_url: str) -> None:
        if not file_url or not file_url.startswith(UPLOADS_PREFIX):
            # Remote and data: URLs are not ours to delete
            return
        path = StorageService.upload_dir() / Path(file_url[len(UPLOADS_PREFIX):]).name
        path.unlink(missing_ok=True)
