"""Local disk storage for store images.

Files land in ``UPLOAD_DIR`` under a random name and are served back from
``/uploads/<name>``. Each upload is checked for size, declared content type
and that Pillow can actually decode it as an image.
"""

import asyncio
import os
import secrets
import time
from io import BytesIO
from pathlib import Path

from fastapi import HTTPException, UploadFile, status
from libs.common.config import get_settings
from libs.common.logging import get_logger
from PIL import Image, UnidentifiedImageError

logger = get_logger(__name__)

UPLOAD_URL_PREFIX = "/uploads"

_FORMAT_EXTENSIONS = {
    "JPEG": ".jpg",
    "PNG": ".png",
    "GIF": ".gif",
    "WEBP": ".webp",
    "BMP": ".bmp",
}


def upload_dir() -> Path:
    path = Path(get_settings().UPLOAD_DIR)
    path.mkdir(parents=True, exist_ok=True)
    return path


def _bad_request(detail: str) -> HTTPException:
    return HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=detail)


def detect_image_format(data: bytes) -> str:
    """Pillow's format name for an image payload; 400 when it is not one."""
    try:
        with Image.open(BytesIO(data)) as img:
            img.verify()
            return img.format or ""
    except (UnidentifiedImageError, OSError, SyntaxError):
        raise _bad_request("Можно загружать только изображения")


def _unique_name(extension: str) -> str:
    return f"{int(time.time() * 1000)}-{secrets.token_hex(6)}{extension}"


def _extension_for(filename: str, image_format: str) -> str:
    extension = _FORMAT_EXTENSIONS.get(image_format)
    if extension:
        return extension
    suffix = os.path.splitext(filename or "")[1].lower()
    return suffix if suffix.isascii() and len(suffix) <= 6 else ""


def _write_files(prepared: list[tuple[str, bytes]]) -> list[str]:
    target = upload_dir()
    urls = []
    for name, data in prepared:
        (target / name).write_bytes(data)
        urls.append(f"{UPLOAD_URL_PREFIX}/{name}")
    return urls


async def save_images(files: list[UploadFile]) -> list[str]:
    """Validate and store images; returns their public URLs."""
    settings = get_settings()
    if not files:
        raise _bad_request("Файлы не выбраны")
    if len(files) > settings.UPLOAD_MAX_FILES:
        raise _bad_request(f"Можно загрузить не более {settings.UPLOAD_MAX_FILES} файлов")

    prepared: list[tuple[str, bytes]] = []
    for upload in files:
        if not (upload.content_type or "").startswith("image/"):
            raise _bad_request("Можно загружать только изображения")
        data = await upload.read()
        if len(data) > settings.UPLOAD_MAX_BYTES:
            max_mb = settings.UPLOAD_MAX_BYTES // (1024 * 1024)
            raise _bad_request(f"Файл слишком большой (максимум {max_mb} МБ)")
        image_format = await asyncio.to_thread(detect_image_format, data)
        prepared.append((_unique_name(_extension_for(upload.filename, image_format)), data))

    urls = await asyncio.to_thread(_write_files, prepared)
    logger.info(f"Stored {len(urls)} uploaded image(s)")
    return urls
