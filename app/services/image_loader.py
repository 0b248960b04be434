"""
Template Image Loader
Fetches template image bytes (upload, remote URL or data: URL) and decodes them once
"""

import base64
import binascii
import logging
from io import BytesIO
from pathlib import Path
from typing import Optional

import httpx
from PIL import Image, UnidentifiedImageError

from app.config import settings
from app.exceptions import ImageDecodeError, ImageLoadError

logger = logging.getLogger(__name__)

UPLOADS_PREFIX = "/uploads/"


class TemplateImageLoader:
    """Image-loading port used by every render path"""

    def __init__(self, upload_dir: Optional[str] = None, timeout: Optional[float] = None):
        self.upload_dir = Path(upload_dir or settings.UPLOAD_DIR)
        self.timeout = timeout if timeout is not None else settings.IMAGE_FETCH_TIMEOUT

    def local_path(self, image_url: str) -> Path:
        """Filesystem path of an `/uploads/...` reference, confined to the upload dir"""
        relative = image_url[len(UPLOADS_PREFIX):]
        root = self.upload_dir.resolve()
        path = (root / relative).resolve()
        if root not in path.parents:
            raise ImageLoadError(f"Template image path escapes the upload directory: {image_url}")
        return path

    @staticmethod
    def _decode_data_url(image_url: str) -> bytes:
        header, _, payload = image_url.partition(",")
        if not header.endswith(";base64"):
            raise ImageLoadError("Only base64 data: URLs are supported for template images")
        try:
            return base64.b64decode(payload, validate=True)
        except (binascii.Error, ValueError) as e:
            raise ImageLoadError(f"Malformed data: URL: {e}") from e

    async def fetch_bytes(self, image_url: str) -> bytes:
        if not image_url:
            raise ImageLoadError("Template has no image")

        if image_url.startswith("data:"):
            return self._decode_data_url(image_url)

        if image_url.startswith(UPLOADS_PREFIX):
            path = self.local_path(image_url)
            try:
                return path.read_bytes()
            except OSError as e:
                raise ImageLoadError(f"Template image could not be read: {image_url}") from e

        if image_url.startswith(("http://", "https://")):
            try:
                async with httpx.AsyncClient(timeout=self.timeout, follow_redirects=True) as client:
                    response = await client.get(image_url)
            except httpx.HTTPError as e:
                raise ImageLoadError(f"Template image could not be fetched: {e}") from e
            if response.status_code != 200:
                raise ImageLoadError(
                    f"Template image could not be fetched (HTTP {response.status_code})"
                )
            return response.content

        raise ImageLoadError(f"Unsupported template image reference: {image_url}")

    @staticmethod
    def decode(image_bytes: bytes) -> Image.Image:
        """Fully decode image bytes; lazy decoding would defer errors into the render"""
        try:
            image = Image.open(BytesIO(image_bytes))
            image.load()
        except (UnidentifiedImageError, OSError, ValueError, Image.DecompressionBombError) as e:
            raise ImageDecodeError(f"Template image could not be decoded: {e}") from e
        return image

    async def load(self, image_url: str) -> Image.Image:
        image_bytes = await self.fetch_bytes(image_url)
        image = self.decode(image_bytes)
        logger.debug("Loaded template image %s (%dx%d)", image_url[:64], image.width, image.height)
        return image


# Singleton
image_loader = TemplateImageLoader()
