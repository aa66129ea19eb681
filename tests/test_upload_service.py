"""Thumbnail uploads: naming, type and size limits."""
import base64

import pytest

from showcase.errors import ValidationError
from showcase.services.upload_service import PLACEHOLDER_THUMBNAIL, UploadStore, safe_filename


def test_placeholder_is_svg_data_uri() -> None:
    prefix = "data:image/svg+xml;base64,"
    assert PLACEHOLDER_THUMBNAIL.startswith(prefix)
    assert b"No Image" in base64.b64decode(PLACEHOLDER_THUMBNAIL[len(prefix):])


def test_safe_filename() -> None:
    assert safe_filename("../../etc/passwd") == "passwd"
    assert safe_filename("my photo (1).png") == "my_photo_1_.png"
    assert safe_filename("") == "upload"


@pytest.mark.asyncio
async def test_save_image(tmp_path) -> None:
    store = UploadStore(tmp_path / "uploads", max_mb=1)
    url = await store.save_image("cat.jpg", "image/jpeg", b"jpeg-bytes")
    assert url.startswith("/uploads/")
    name = url[len("/uploads/"):]
    assert name.endswith("-cat.jpg")
    assert (tmp_path / "uploads" / name).read_bytes() == b"jpeg-bytes"


@pytest.mark.asyncio
async def test_rejects_non_images_empty_and_oversized(tmp_path) -> None:
    store = UploadStore(tmp_path, max_mb=1)
    with pytest.raises(ValidationError):
        await store.save_image("a.pdf", "application/pdf", b"%PDF")
    with pytest.raises(ValidationError):
        await store.save_image("a.png", "image/png", b"")
    with pytest.raises(ValidationError):
        await store.save_image("a.png", "image/png", b"x" * (1024 * 1024 + 1))
