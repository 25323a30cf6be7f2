# backend/ostsee/api/routers/admin.py
from typing import Optional

from fastapi import APIRouter, Depends, Query
from pydantic import ValidationError as PydanticValidationError
from sqlalchemy.orm import Session

from ostsee.api.deps import require_admin
from ostsee.db import get_db
from ostsee.exceptions import ValidationError
from ostsee.schemas.sighting import SightingFilter, SortField
from ostsee.services.auth.auth0 import AuthUser
from ostsee.services.sightings import repository as repo

router = APIRouter()


def admin_filters(
    date_from: Optional[str] = Query(None, alias="dateFrom"),
    date_to: Optional[str] = Query(None, alias="dateTo"),
    verified: Optional[str] = None,
    entry_channel: Optional[str] = Query(None, alias="entryChannel"),
    media_upload: Optional[str] = Query(None, alias="mediaUpload"),
) -> SightingFilter:
    """Query string filters shared by the list and the exports ("all" or empty = no filter)."""

    def flag(value: Optional[str]) -> Optional[bool]:
        return {"1": True, "0": False}.get(value or "")

    channel = None
    if entry_channel not in (None, "", "all"):
        try:
            channel = [int(entry_channel)]
        except ValueError:
            raise ValidationError("Ungültiger Eingangskanal", context={"entryChannel": entry_channel})
    try:
        return SightingFilter.model_validate({
            "date_from": date_from or None,
            "date_to": date_to or None,
            "verified": flag(verified),
            "entry_channel": channel,
            "media_upload": flag(media_upload),
        })
    except PydanticValidationError as exc:
        fields = [str(e["loc"][0]) for e in exc.errors()]
        raise ValidationError("Ungültiger Filter", context={"fields": fields}) from exc


@router.get("/sightings")
def list_sightings(
    page: int = Query(1, ge=1),
    per_page: int = Query(20, ge=1, le=100, alias="perPage"),
    sort: SortField = "sightingDate",
    order: str = Query("desc", pattern="^(asc|desc)$"),
    filters: SightingFilter = Depends(admin_filters),
    db: Session = Depends(get_db),
    user: AuthUser = Depends(require_admin),
):
    result = repo.paginate_sightings(db, filters, page, per_page, sort, order)
    result["items"] = [repo.sighting_to_dict(r, include_files=False) for r in result["items"]]
    return result


@router.get("/me")
def me(user: AuthUser = Depends(require_admin)):
    return user.model_dump()
