# backend/parkmap/services/storage/photos.py
import logging
import re
import time
from io import BytesIO
from pathlib import Path
from typing import Optional
from urllib.parse import urlparse

from PIL import Image, UnidentifiedImageError

from parkmap import settings

logger = logging.getLogger(__name__)

_UNSAFE = re.compile(r"[^A-Za-z0-9._-]+")


class PhotoError(ValueError):
    pass


def _safe_name(filename: str) -> str:
    name = Path(filename or "photo").name
    name = _UNSAFE.sub("_", name).strip("._") or "photo"
    return name[-120:]


def verify_image(content: bytes) -> str:
    """Return the image format (JPEG, PNG, ...) or raise PhotoError."""
    if not content:
        raise PhotoError("empty file")
    try:
        with Image.open(BytesIO(content)) as img:
            fmt = img.format
            img.verify()
    except (UnidentifiedImageError, OSError, SyntaxError) as e:
        raise PhotoError("file is not an image") from e
    return fmt or "UNKNOWN"


def save_photo(filename: str, content: bytes, photos_dir: Optional[Path] = None) -> str:
    """Store an uploaded photo and return its public URL."""
    verify_image(content)
    target_dir = photos_dir or settings.PHOTOS_DIR
    target_dir.mkdir(parents=True, exist_ok=True)
    stored = f"{int(time.time() * 1000)}-{_safe_name(filename)}"
    (target_dir / stored).write_bytes(content)
    logger.info("stored photo %s (%d bytes)", stored, len(content))
    return f"{settings.PUBLIC_ASSET_URL}/photos/{stored}"


def delete_photo(url: Optional[str], photos_dir: Optional[Path] = None) -> bool:
    # URL の最後のパス要素をファイル名とみなす
    if not url:
        return False
    name = Path(urlparse(url).path).name
    if not name:
        return False
    path = (photos_dir or settings.PHOTOS_DIR) / name
    if not path.is_file():
        return False
    path.unlink()
    logger.info("deleted photo %s", name)
    return True
