# backend/ostsee/schemas/sighting.py
from datetime import date, datetime
from typing import Literal, Optional

from pydantic import BaseModel, Field

SortField = Literal[
    "sightingDate", "created", "email", "species", "totalCount",
    "distance", "juvenileCount", "distribution",
]


class SightingFilter(BaseModel):
    date_from: Optional[date] = None
    date_to: Optional[date] = None
    year: Optional[int] = None
    verified: Optional[bool] = None
    approved: Optional[bool] = None
    is_dead: Optional[bool] = None
    media_upload: Optional[bool] = None
    entry_channel: Optional[list[int]] = None
    species: Optional[list[int]] = None
    waterway: Optional[str] = None
    search: Optional[str] = None


class VerifyIn(BaseModel):
    verified: Literal[0, 1]


class ApproveIn(BaseModel):
    approve: bool
    internal_comment: Optional[str] = Field(default=None, max_length=1000)


class BulkUpdates(BaseModel):
    verified: Optional[Literal[0, 1]] = None
    approve: Optional[bool] = None
    internal_comment: Optional[str] = Field(default=None, max_length=1000)


class BulkIn(BaseModel):
    ids: list[int] = Field(min_length=1, max_length=100)
    verified: Optional[Literal[0, 1]] = None
    updates: Optional[BulkUpdates] = None


class SearchPagination(BaseModel):
    page: int = Field(default=1, ge=1)
    limit: int = Field(default=20, ge=1, le=100)
    sort_by: SortField = "sightingDate"
    sort_order: Literal["asc", "desc"] = "desc"


class SearchIn(BaseModel):
    filters: SightingFilter = Field(default_factory=SightingFilter)
    pagination: SearchPagination = Field(default_factory=SearchPagination)


class SightingFileOut(BaseModel):
    id: int
    original_name: str
    file_name: str
    file_path: str
    url: Optional[str] = None
    mime_type: str
    size: int
    uploaded_at: Optional[datetime] = None
    exif_data: Optional[dict] = None

    model_config = {"from_attributes": True}
