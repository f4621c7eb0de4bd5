# fleet_inspection/services/photo_store.py
"""
Photo store: writes uploaded images under UPLOAD_DIR and returns the URL
they are served at (UPLOAD_URL_PREFIX, mounted as static files by main.py).

Inspection photos: UPLOAD_DIR/inspections/{plate}/{request_id}-{timestamp}-{index}{ext}
Vehicle / driver photos: UPLOAD_DIR/{subdir}/{hint}-{timestamp}{ext}

Callers never see file-system paths, only URLs.
"""

import os
import re
from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from fleet_inspection.config import settings
from fleet_inspection.errors import StorageError, ValidationError
from fleet_inspection.utils.logger import get_logger

logger = get_logger(__name__)

_UNSAFE_CHARS = re.compile(r"[^A-Za-z0-9_-]")
_ALLOWED_EXTENSIONS = {".jpg", ".jpeg", ".png", ".gif", ".webp", ".heic", ".bmp"}


@dataclass
class PhotoUpload:
    content: bytes
    filename: str
    content_type: Optional[str] = None


def validate_photos(photos: list[PhotoUpload], max_count: Optional[int] = None) -> None:
    """Reject non-images, oversized files, and too many files in one upload."""
    max_count = settings.MAX_PHOTOS_PER_INSPECTION if max_count is None else max_count
    if len(photos) > max_count:
        raise ValidationError(f"At most {max_count} photos may be uploaded at once")
    for photo in photos:
        if not (photo.content_type or "").startswith("image/"):
            raise ValidationError(f"Only images are allowed ({photo.filename})")
        if len(photo.content) > settings.MAX_PHOTO_BYTES:
            limit_mb = settings.MAX_PHOTO_BYTES / (1024 * 1024)
            raise ValidationError(f"Photo {photo.filename} exceeds the {limit_mb:g} MB limit")


def safe_hint(hint: Optional[str], fallback: str = "unknown") -> str:
    cleaned = _UNSAFE_CHARS.sub("", hint or "")
    return cleaned or fallback


def _extension(filename: str) -> str:
    ext = os.path.splitext(filename or "")[1].lower()
    return ext if ext in _ALLOWED_EXTENSIONS else ".jpg"


def _timestamp() -> str:
    return datetime.utcnow().strftime("%Y%m%d_%H%M%S_%f")


def _write(directory: str, filename: str, content: bytes) -> str:
    os.makedirs(directory, exist_ok=True)
    filepath = os.path.join(directory, filename)
    with open(filepath, "wb") as f:
        f.write(content)
    return filepath


def _to_url(relative_dir: str, filename: str) -> str:
    return f"{settings.UPLOAD_URL_PREFIX.rstrip('/')}/{relative_dir}/{filename}"


def url_to_path(url: str) -> Optional[str]:
    """Map a URL handed out by this store back to its file. None for foreign URLs."""
    prefix = settings.UPLOAD_URL_PREFIX.rstrip("/") + "/"
    if not url or not url.startswith(prefix):
        return None
    relative = url[len(prefix):]
    if ".." in relative.split("/"):
        return None
    return os.path.join(settings.UPLOAD_DIR, *relative.split("/"))


async def save_photos(request_id: int, photos: list[PhotoUpload], naming_hint: Optional[str]) -> list[str]:
    """
    Store every photo of one inspection submission.
    Returns the URLs in upload order. On failure, files already written are removed.
    """
    folder = safe_hint(naming_hint, fallback=f"request-{request_id}")
    relative_dir = f"inspections/{folder}"
    directory = os.path.join(settings.inspections_upload_dir, folder)
    timestamp = _timestamp()
    urls = []

    for index, photo in enumerate(photos):
        filename = f"{request_id}-{timestamp}-{index}{_extension(photo.filename)}"
        try:
            _write(directory, filename, photo.content)
        except OSError as e:
            logger.error(f"[PHOTOS] Failed writing {filename} for request {request_id}: {e}")
            remove_photos(urls)
            raise StorageError("Could not store inspection photos") from e
        urls.append(_to_url(relative_dir, filename))

    logger.info(f"[PHOTOS] Stored {len(urls)} photo(s) for request {request_id} in {relative_dir}")
    return urls


async def save_photo(subdir: str, photo: PhotoUpload, naming_hint: Optional[str]) -> str:
    """Store a single registry photo (vehicle or driver). Returns its URL."""
    filename = f"{safe_hint(naming_hint)}-{_timestamp()}{_extension(photo.filename)}"
    try:
        _write(os.path.join(settings.UPLOAD_DIR, subdir), filename, photo.content)
    except OSError as e:
        logger.error(f"[PHOTOS] Failed writing {subdir}/{filename}: {e}")
        raise StorageError("Could not store photo") from e
    logger.info(f"[PHOTOS] Stored {subdir}/{filename}")
    return _to_url(subdir, filename)


def remove_photo(url: Optional[str]) -> None:
    """Best-effort delete. Failures are logged, never raised."""
    path = url_to_path(url) if url else None
    if not path:
        return
    try:
        os.remove(path)
        logger.info(f"[PHOTOS] Removed {url}")
    except FileNotFoundError:
        pass
    except OSError as e:
        logger.warning(f"[PHOTOS] Could not remove orphaned photo {url}: {e}")


def remove_photos(urls: list[str]) -> None:
    for url in urls:
        remove_photo(url)
