# backend/ostsee/services/uploads.py
import mimetypes
from dataclasses import dataclass
from pathlib import PurePath
from typing import Optional

from ostsee.exceptions import UploadRejectedError

MB = 1024 * 1024
MAX_FILE_SIZE = 50 * MB
PHOTO_GPS_MAX_SIZE = 10 * MB
MAX_FILES = 20

# image/svg+xml stays out: it can carry script
IMAGE_TYPES = (
    "image/jpeg", "image/jpg", "image/png", "image/gif", "image/webp", "image/bmp",
)
VIDEO_TYPES = (
    "video/mp4", "video/avi", "video/mov", "video/quicktime", "video/wmv",
    "video/flv", "video/webm", "video/mkv", "video/x-matroska", "video/m4v",
)

MIME_BY_EXT = {
    ".jpg": "image/jpeg",
    ".jpeg": "image/jpeg",
    ".png": "image/png",
    ".gif": "image/gif",
    ".webp": "image/webp",
    ".bmp": "image/bmp",
    ".svg": "image/svg+xml",
    ".mp4": "video/mp4",
    ".mov": "video/quicktime",
    ".avi": "video/x-msvideo",
    ".webm": "video/webm",
    ".mkv": "video/x-matroska",
    ".m4v": "video/m4v",
}


@dataclass(frozen=True)
class UploadPreset:
    allowed_types: tuple[str, ...]
    max_file_size: int
    max_files: int


MEDIA = UploadPreset(IMAGE_TYPES + VIDEO_TYPES, MAX_FILE_SIZE, MAX_FILES)
GPS_PHOTO = UploadPreset(IMAGE_TYPES, PHOTO_GPS_MAX_SIZE, 1)


def guess_mime_type(file_name: str) -> str:
    ext = PurePath(file_name).suffix.lower()
    return MIME_BY_EXT.get(ext) or mimetypes.guess_type(file_name)[0] or "application/octet-stream"


def is_safe_name(file_name: str) -> bool:
    return bool(file_name) and ".." not in file_name and "/" not in file_name and "\\" not in file_name


def check_upload(file_name: str, mime_type: Optional[str], size: int,
                 preset: UploadPreset = MEDIA, existing: int = 0) -> str:
    """Reject unsafe or oversized files; returns the effective MIME type."""
    if not is_safe_name(file_name):
        raise UploadRejectedError(f"{file_name}: Unsicherer Dateiname")
    if size <= 0:
        raise UploadRejectedError(f"{file_name}: Datei ist leer")
    mime = (mime_type or "").lower() or guess_mime_type(file_name)
    if mime == "application/octet-stream":
        mime = guess_mime_type(file_name)
    if mime not in preset.allowed_types:
        raise UploadRejectedError(
            f"{file_name}: Ungültiger Dateityp. Erlaubt: {', '.join(preset.allowed_types)}"
        )
    if size > preset.max_file_size:
        raise UploadRejectedError(
            f"{file_name}: Datei zu groß. Maximum: {round(preset.max_file_size / MB)}MB"
        )
    if existing >= MAX_FILES:
        raise UploadRejectedError(f"Zu viele Dateien. Maximum: {MAX_FILES}")
    return mime
