# backend/ostsee/schemas/report.py
import base64
from datetime import datetime
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field


class ExifRecord(BaseModel):
    """Metadata read from an image; every field may be missing."""

    model_config = ConfigDict(frozen=True)

    latitude: Optional[float] = None
    longitude: Optional[float] = None
    altitude: Optional[float] = None
    make: Optional[str] = None
    model: Optional[str] = None
    date_time_original: Optional[datetime] = None
    exposure_time: Optional[str] = None
    f_number: Optional[float] = None
    iso: Optional[int] = None
    focal_length: Optional[float] = None
    flash: Optional[bool] = None
    width: Optional[int] = None
    height: Optional[int] = None
    orientation: Optional[int] = None

    @property
    def has_gps(self) -> bool:
        return self.latitude is not None and self.longitude is not None

    @property
    def is_empty(self) -> bool:
        return all(v is None for v in self.model_dump().values())


class MediaAttachment(BaseModel):
    file_name: str
    mime_type: str
    size: int
    content_b64: Optional[str] = None
    exif: ExifRecord = Field(default_factory=ExifRecord)
    from_position_step: bool = False
    # set once the file went through the storage provider
    file_path: Optional[str] = None
    stored_name: Optional[str] = None
    url: Optional[str] = None
    uploaded_at: Optional[datetime] = None

    @classmethod
    def from_bytes(cls, file_name: str, mime_type: str, data: bytes, **kw) -> "MediaAttachment":
        return cls(
            file_name=file_name,
            mime_type=mime_type,
            size=len(data),
            content_b64=base64.b64encode(data).decode("ascii"),
            **kw,
        )

    @property
    def content(self) -> bytes:
        return base64.b64decode(self.content_b64) if self.content_b64 else b""

    @property
    def is_stored(self) -> bool:
        return self.file_path is not None

    def public_dict(self) -> dict:
        """Attachment without the payload, for API answers."""
        return self.model_dump(mode="json", exclude={"content_b64"})


class SightingDraft(BaseModel):
    values: dict[str, Any] = Field(default_factory=dict)
    media: list[MediaAttachment] = Field(default_factory=list)
    reference_id: Optional[str] = None
    current_step: int = 0
    completed_steps: list[int] = Field(default_factory=list)
    updated_at: Optional[datetime] = None

    @property
    def is_empty(self) -> bool:
        return not self.values and not self.media and self.reference_id is None

    def public_dict(self) -> dict:
        data = self.model_dump(mode="json", exclude={"media"})
        data["media"] = [m.public_dict() for m in self.media]
        return data


class UploadedFileRef(BaseModel):
    """Reference to a stored upload, as sent with a submission."""

    file_path: str
    original_name: str
    file_name: Optional[str] = None
    mime_type: str
    size: int
    url: Optional[str] = None
    uploaded_at: Optional[datetime] = None
    exif_data: Optional[dict] = None
