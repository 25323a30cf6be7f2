# backend/ostsee/services/exif/reader.py
from datetime import datetime
from io import BytesIO
from typing import Any, Optional

import exifread
from PIL import Image

from ostsee.logging_config import get_logger
from ostsee.schemas.report import ExifRecord

logger = get_logger(__name__)

EXIF_DT_KEYS = ["EXIF DateTimeOriginal", "Image DateTime"]
GPS_IFD = 0x8825


def _ratio(value: Any) -> Optional[float]:
    if value is None:
        return None
    if hasattr(value, "num") and hasattr(value, "den"):
        return value.num / value.den if value.den else None
    if isinstance(value, tuple) and len(value) == 2:
        return value[0] / value[1] if value[1] else None
    return float(value)


def _to_deg(values, ref) -> Optional[float]:
    if not values or len(values) < 3:
        return None
    d, m, s = (_ratio(v) for v in values[:3])
    if d is None or m is None or s is None:
        return None
    deg = d + m / 60 + s / 3600
    if isinstance(ref, bytes):
        ref = ref.decode("ascii", "ignore")
    if ref and ref.strip("\x00").upper() in ("S", "W"):
        deg *= -1
    return deg


def _read_gps(data: bytes) -> dict:
    # GPS via Pillow; rationals arrive as IFDRational
    with Image.open(BytesIO(data)) as img:
        gps_info = img.getexif().get_ifd(GPS_IFD)
    if not gps_info:
        return {}
    out: dict = {
        "latitude": _to_deg(gps_info.get(2), gps_info.get(1)),
        "longitude": _to_deg(gps_info.get(4), gps_info.get(3)),
    }
    alt = _ratio(gps_info.get(6))
    if alt is not None:
        ref = gps_info.get(5)
        if isinstance(ref, bytes):
            ref = ref[0] if ref else 0
        out["altitude"] = -alt if ref == 1 else alt
    return out


def _first(tags: dict, key: str):
    tag = tags.get(key)
    if tag is None or not getattr(tag, "values", None):
        return None
    return tag.values[0]


def _text(tags: dict, key: str) -> Optional[str]:
    tag = tags.get(key)
    if tag is None:
        return None
    text = str(tag.printable).strip().strip("\x00").strip()
    return text or None


def format_exposure(seconds: Optional[float]) -> Optional[str]:
    if seconds is None or seconds <= 0:
        return None
    if seconds < 1:
        return f"1/{round(1 / seconds)}"
    return f"{seconds:g}s"


def _read_tags(data: bytes) -> dict:
    tags = exifread.process_file(BytesIO(data), details=False)
    if not tags:
        return {}

    taken_at = None
    for k in EXIF_DT_KEYS:
        if k in tags:
            try:
                taken_at = datetime.strptime(str(tags[k]).strip(), "%Y:%m:%d %H:%M:%S")
                break
            except ValueError:
                continue

    f_number = _ratio(_first(tags, "EXIF FNumber"))
    focal = _ratio(_first(tags, "EXIF FocalLength"))
    flash = _first(tags, "EXIF Flash")
    return {
        "make": _text(tags, "Image Make"),
        "model": _text(tags, "Image Model"),
        "date_time_original": taken_at,
        "exposure_time": format_exposure(_ratio(_first(tags, "EXIF ExposureTime"))),
        "f_number": round(f_number, 1) if f_number is not None else None,
        "iso": _first(tags, "EXIF ISOSpeedRatings"),
        "focal_length": round(focal) if focal is not None else None,
        "flash": (int(flash) & 1) == 1 if flash is not None else None,
        "width": _first(tags, "EXIF ExifImageWidth"),
        "height": _first(tags, "EXIF ExifImageLength"),
        "orientation": _first(tags, "Image Orientation"),
    }


def parse_exif(data: bytes) -> ExifRecord:
    """Metadata of an image payload; unreadable input gives an empty record."""
    if not data:
        return ExifRecord()
    fields: dict = {}
    try:
        fields.update(_read_tags(data))
    except Exception as exc:
        logger.warning("EXIF tags unreadable: %s", exc)
    try:
        fields.update(_read_gps(data))
    except Exception as exc:
        logger.warning("EXIF GPS unreadable: %s", exc)
    try:
        return ExifRecord(**{k: v for k, v in fields.items() if v is not None})
    except ValueError as exc:
        logger.warning("EXIF values rejected: %s", exc)
        return ExifRecord()
