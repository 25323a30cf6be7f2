# backend/ostsee/api/routers/sightings.py
from datetime import date
from typing import Optional

from fastapi import APIRouter, Body, Depends, Query, Response
from sqlalchemy.orm import Session

from ostsee.api.deps import get_current_user, require_admin
from ostsee.config import get_settings
from ostsee.db import get_db
from ostsee.exceptions import ValidationError
from ostsee.logging_config import get_logger
from ostsee.schemas.sighting import ApproveIn, BulkIn, SearchIn, SightingFilter, VerifyIn
from ostsee.services.auth.auth0 import AuthUser
from ostsee.services.sightings import repository as repo

logger = get_logger(__name__)

router = APIRouter()


@router.post("", status_code=201)
def create_sighting(payload: dict = Body(...), db: Session = Depends(get_db)):
    sighting_id = repo.create_sighting(db, payload)
    return {"success": True, "id": sighting_id}


@router.get("")
def list_sightings(response: Response, year: Optional[int] = None, db: Session = Depends(get_db)):
    year = year or date.today().year
    rows = repo.query_sightings(db, SightingFilter(year=year)).order_by(repo.Sighting.sighting_date).all()
    response.headers["Cache-Control"] = "max-age=3600"
    return [repo.public_summary(r) for r in rows]


@router.post("/search")
def search_sightings(body: SearchIn, db: Session = Depends(get_db),
                     user: Optional[AuthUser] = Depends(get_current_user)):
    is_admin = user is not None and user.has_any_role([get_settings().admin_role])
    filters = body.filters
    if not is_admin:
        # approval state and internal fields stay admin-only
        filters = filters.model_copy(update={"approved": None})
    p = body.pagination
    result = repo.paginate_sightings(db, filters, p.page, p.limit, p.sort_by, p.sort_order)
    return {
        "success": True,
        "data": [repo.public_summary(r, include_email=is_admin) for r in result["items"]],
        "pagination": {k: v for k, v in result.items() if k != "items"},
    }


@router.post("/bulk")
def bulk(body: BulkIn, action: str = Query(...), db: Session = Depends(get_db),
         user: AuthUser = Depends(require_admin)):
    logger.info("Bulk %s by %s", action, user.email)
    updates = body.updates.model_dump() if body.updates else None
    return repo.bulk_action(db, action, body.ids, verified=body.verified, updates=updates)


@router.get("/{sighting_id}")
def get_sighting(sighting_id: int, db: Session = Depends(get_db),
                 user: AuthUser = Depends(require_admin)):
    return repo.sighting_to_dict(repo.get_sighting(db, sighting_id))


@router.put("/{sighting_id}")
def update_sighting(sighting_id: int, payload: dict = Body(...), db: Session = Depends(get_db),
                    user: AuthUser = Depends(require_admin)):
    if not payload:
        raise ValidationError("Keine Änderungen angegeben")
    row = repo.update_sighting(db, sighting_id, payload)
    logger.info("Sighting %s updated by %s", sighting_id, user.email)
    return {"success": True, "sighting": repo.sighting_to_dict(row)}


@router.delete("/{sighting_id}")
def delete_sighting(sighting_id: int, db: Session = Depends(get_db),
                    user: AuthUser = Depends(require_admin)):
    repo.delete_sighting(db, sighting_id)
    logger.info("Sighting %s deleted by %s", sighting_id, user.email)
    return {"success": True}


@router.patch("/{sighting_id}/verify")
def verify_sighting(sighting_id: int, body: VerifyIn, db: Session = Depends(get_db),
                    user: AuthUser = Depends(require_admin)):
    row = repo.set_verified(db, sighting_id, bool(body.verified))
    return {"success": True, "id": row.id, "verified": int(row.verified)}


@router.patch("/{sighting_id}/approve")
def approve_sighting(sighting_id: int, body: ApproveIn, db: Session = Depends(get_db),
                     user: AuthUser = Depends(require_admin)):
    row = repo.set_approved(db, sighting_id, body.approve, body.internal_comment)
    return {
        "success": True,
        "id": row.id,
        "approved_at": row.approved_at.isoformat() if row.approved_at else None,
        "internal_comment": row.internal_comment,
    }
