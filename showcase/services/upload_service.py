"""
Thumbnail uploads: validate, store under UPLOAD_DIR, return the public /uploads path.
No file -> inline SVG placeholder. The content repository only stores the resulting URL.
"""
import asyncio
import base64
import re
import time
import uuid
from pathlib import Path
from typing import Optional

from showcase.errors import ValidationError
from showcase.logging_config import get_logger

logger = get_logger(__name__)

UPLOADS_URL_PREFIX = "/uploads"

_PLACEHOLDER_SVG = (
    '<svg width="300" height="200" xmlns="http://www.w3.org/2000/svg">'
    '<rect width="100%" height="100%" fill="#6b7280"/>'
    '<text x="50%" y="50%" font-family="Arial, sans-serif" font-size="14" fill="#ffffff" '
    'text-anchor="middle" dy=".3em">No Image</text></svg>'
)
PLACEHOLDER_THUMBNAIL = "data:image/svg+xml;base64," + base64.b64encode(_PLACEHOLDER_SVG.encode("utf-8")).decode("ascii")

_UNSAFE_CHARS = re.compile(r"[^A-Za-z0-9._-]+")


def safe_filename(filename: str) -> str:
    """Basename with anything outside [A-Za-z0-9._-] replaced by '_'."""
    name = _UNSAFE_CHARS.sub("_", Path(filename or "").name).strip("._")
    return name or "upload"


class UploadStore:
    """Local disk storage for submitted thumbnails."""

    def __init__(self, upload_dir: str | Path, max_mb: int) -> None:
        self.upload_dir = Path(upload_dir)
        self.max_bytes = max_mb * 1024 * 1024

    def ensure_dir(self) -> None:
        self.upload_dir.mkdir(parents=True, exist_ok=True)

    async def save_image(self, filename: str, content_type: Optional[str], data: bytes) -> str:
        """
        Store an image and return its public URL (/uploads/<epoch_ms>-<uuid>-<name>).
        Raises ValidationError for non-images, empty files or files over the size limit.
        """
        if not content_type or not content_type.startswith("image/"):
            raise ValidationError("Only image files are allowed", field="thumbnail")
        if not data:
            raise ValidationError("Uploaded file is empty", field="thumbnail")
        if len(data) > self.max_bytes:
            raise ValidationError(
                f"File too large (max {self.max_bytes // (1024 * 1024)}MB)",
                field="thumbnail",
            )
        name = f"{int(time.time() * 1000)}-{uuid.uuid4()}-{safe_filename(filename)}"
        self.ensure_dir()
        await asyncio.to_thread((self.upload_dir / name).write_bytes, data)
        logger.info("upload.saved", filename=name, size=len(data), content_type=content_type)
        return f"{UPLOADS_URL_PREFIX}/{name}"
