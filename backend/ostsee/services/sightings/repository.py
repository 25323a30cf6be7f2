# backend/ostsee/services/sightings/repository.py
"""Reading and writing sightings through the ORM."""
from datetime import date, datetime, time, timezone
from typing import Any, Iterable, Optional

from sqlalchemy import and_, extract, func, or_
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Query, Session

from ostsee.exceptions import DatabaseError, NotFoundError, ValidationError
from ostsee.logging_config import get_logger
from ostsee.models.sighting import Sighting
from ostsee.models.sighting_file import SightingFile
from ostsee.report import options
from ostsee.report.validation import DEFAULT_SCHEMA, FieldError, FieldRule, ValidationSchema
from ostsee.schemas.report import UploadedFileRef
from ostsee.schemas.sighting import SightingFileOut, SightingFilter
from ostsee.services.geo.baltic import check_baltic_sea

logger = get_logger(__name__)

SORT_COLUMNS = {
    "sightingDate": Sighting.sighting_date,
    "created": Sighting.created,
    "email": Sighting.email,
    "species": Sighting.species,
    "totalCount": Sighting.total_count,
    "distance": Sighting.distance,
    "juvenileCount": Sighting.juvenile_count,
    "distribution": Sighting.distribution,
}

# form fields copied 1:1 onto the model
_DIRECT_FIELDS = (
    "latitude", "longitude", "waterway", "sea_mark", "species", "total_count",
    "juvenile_count", "distance", "sighting_from", "sighting_from_text",
    "boat_drive", "boat_drive_text", "is_dead", "dead_condition", "dead_sex",
    "dead_size", "dead_phone_contact", "informed_authorities", "distribution",
    "distribution_text", "behavior", "behavior_text", "reaction",
    "other_observations", "ship_count", "sea_state", "visibility", "wind_force",
    "wind_direction", "media_file", "media_consent", "first_name", "last_name",
    "email", "phone", "street", "zip_code", "city", "ship_name", "home_port",
    "boat_type", "name_consent", "ship_name_consent", "privacy_consent", "notes",
)
# NOT NULL columns that fall back to 0/False when the form left them empty
_ZERO_DEFAULTS = {
    "species": 0, "total_count": 0, "juvenile_count": 0, "distance": 0,
    "sighting_from": 0, "boat_drive": 0, "dead_condition": 0, "dead_sex": 0,
    "distribution": 0, "behavior": 0, "sea_state": 0, "visibility": 0,
    "is_dead": False, "dead_phone_contact": False, "informed_authorities": False,
    "media_consent": False, "name_consent": False, "ship_name_consent": False,
    "privacy_consent": False,
    "verified": False, "entry_channel": 0,
}

ADMIN_RULES = ValidationSchema(rules=(
    FieldRule("verified", bool),
    FieldRule("internal_comment", str,
              checks=((lambda v, _: len(v) <= 1000,
                       "Der Kommentar darf nicht länger als 1000 Zeichen sein."),)),
    FieldRule("entry_channel", int,
              checks=((lambda v, _: options.ENTRY_CHANNEL.is_valid(v), "Ungültiger Eingangskanal"),)),
), steps=())


def _now() -> datetime:
    return datetime.now(timezone.utc).replace(tzinfo=None)


def combine_date_time(day: Optional[date], hhmm: Optional[str]) -> datetime:
    if day is None:
        return _now()
    if not hhmm:
        return datetime.combine(day, time(0, 0))
    hours, _, minutes = hhmm.partition(":")
    return datetime.combine(day, time(int(hours or 0), int(minutes or 0)))


def _baltic_flags(lon: Optional[float], lat: Optional[float]) -> dict:
    if lon is None or lat is None:
        return {"in_baltic_sea": False, "in_chart_area": False}
    try:
        result = check_baltic_sea(lon, lat)
    except ValueError as exc:
        logger.warning("Baltic check skipped for (%s, %s): %s", lon, lat, exc)
        return {"in_baltic_sea": False, "in_chart_area": False}
    return {"in_baltic_sea": result["in_baltic"], "in_chart_area": result["in_chart_area"]}


def map_form_to_sighting(values: dict, reference_id: str, has_files: bool) -> Sighting:
    """Cleaned form values to a new ``Sighting`` row."""
    row = Sighting(
        reference_id=reference_id,
        created=_now(),
        sighting_date=combine_date_time(values.get("sighting_date"), values.get("sighting_time")),
        media_upload=has_files,
        entry_channel=int(options.EntryChannel.WEB),
        verified=False,
    )
    for name in _DIRECT_FIELDS:
        value = values.get(name)
        if value is None:
            value = _ZERO_DEFAULTS.get(name)
        setattr(row, name, value)
    if values.get("has_position") is False:
        row.latitude = row.longitude = None
    for k, v in _baltic_flags(row.longitude, row.latitude).items():
        setattr(row, k, v)
    return row


def _file_rows(files: Iterable[UploadedFileRef], reference_id: str) -> list[SightingFile]:
    now = _now()
    return [
        SightingFile(
            reference_id=reference_id,
            original_name=f.original_name,
            file_name=f.file_name or f.file_path.rsplit("/", 1)[-1] or f.original_name,
            file_path=f.file_path,
            url=f.url,
            mime_type=f.mime_type,
            size=f.size,
            exif_data=f.exif_data,
            uploaded_at=(f.uploaded_at.replace(tzinfo=None) if f.uploaded_at else now),
            created_at=now,
        )
        for f in files
    ]


def create_sighting(db: Session, payload: dict, schema: ValidationSchema = DEFAULT_SCHEMA) -> int:
    errors = schema.validate_full(payload)
    reference_id = payload.get("reference_id")
    if not reference_id:
        errors.append(FieldError("reference_id", "Referenz-ID fehlt"))
    try:
        files = [UploadedFileRef.model_validate(f) for f in payload.get("uploaded_files") or []]
    except ValueError:
        errors.append(FieldError("uploaded_files", "Ungültige Dateireferenzen"))
        files = []
    if errors:
        raise ValidationError(errors=errors)

    values = schema.clean(payload)
    row = map_form_to_sighting(values, reference_id, bool(files))
    row.files = _file_rows(files, reference_id)
    try:
        db.add(row)
        db.commit()
    except SQLAlchemyError as exc:
        db.rollback()
        logger.error("Storing sighting %s failed: %s", reference_id, exc)
        raise DatabaseError(context={"reference_id": reference_id}) from exc
    db.refresh(row)
    logger.info("Stored sighting %s (ref %s, %d files)", row.id, reference_id, len(files))
    return row.id


def get_sighting(db: Session, sighting_id: int) -> Sighting:
    row = db.get(Sighting, sighting_id)
    if row is None:
        raise NotFoundError("Sichtung nicht gefunden", context={"id": sighting_id})
    return row


def _commit(db: Session, what: str) -> None:
    try:
        db.commit()
    except SQLAlchemyError as exc:
        db.rollback()
        logger.error("%s failed: %s", what, exc)
        raise DatabaseError() from exc


def update_sighting(db: Session, sighting_id: int, data: dict,
                    schema: ValidationSchema = DEFAULT_SCHEMA) -> Sighting:
    """Admin edit: only the given fields are checked and written."""
    row = get_sighting(db, sighting_id)
    form_fields = [k for k in data if k in schema.field_names]
    admin_fields = [k for k in data if k in ADMIN_RULES.field_names]
    errors = schema.validate(data, form_fields) + ADMIN_RULES.validate(data, admin_fields)
    if errors:
        raise ValidationError(errors=errors)

    values = schema.clean({k: data[k] for k in form_fields})
    values.update(ADMIN_RULES.clean({k: data[k] for k in admin_fields}))
    for name in _DIRECT_FIELDS + ("verified", "internal_comment", "entry_channel"):
        if name in data:
            value = values.get(name)
            if value is None:
                value = _ZERO_DEFAULTS.get(name)
            setattr(row, name, value)
    if "sighting_date" in values or "sighting_time" in values:
        day = values.get("sighting_date") or row.sighting_date.date()
        hhmm = values.get("sighting_time") or row.sighting_date.strftime("%H:%M")
        row.sighting_date = combine_date_time(day, hhmm)
    if "latitude" in data or "longitude" in data:
        for k, v in _baltic_flags(row.longitude, row.latitude).items():
            setattr(row, k, v)
    _commit(db, f"Updating sighting {sighting_id}")
    db.refresh(row)
    return row


def delete_sighting(db: Session, sighting_id: int) -> None:
    row = get_sighting(db, sighting_id)
    db.delete(row)
    _commit(db, f"Deleting sighting {sighting_id}")
    logger.info("Deleted sighting %s", sighting_id)


def set_verified(db: Session, sighting_id: int, verified: bool) -> Sighting:
    row = get_sighting(db, sighting_id)
    row.verified = bool(verified)
    _commit(db, f"Verifying sighting {sighting_id}")
    return row


def set_approved(db: Session, sighting_id: int, approve: bool,
                 internal_comment: Optional[str] = None) -> Sighting:
    row = get_sighting(db, sighting_id)
    row.approved_at = _now() if approve else None
    if internal_comment is not None:
        row.internal_comment = internal_comment
    _commit(db, f"Approving sighting {sighting_id}")
    return row


def bulk_action(db: Session, action: str, ids: list[int], verified: Optional[int] = None,
                updates: Optional[dict] = None) -> dict:
    rows = db.query(Sighting).filter(Sighting.id.in_(ids)).all()
    found = {r.id for r in rows}
    missing = [i for i in ids if i not in found]
    if action == "delete":
        for r in rows:
            db.delete(r)
    elif action == "verify":
        if verified is None:
            raise ValidationError(errors=[FieldError("verified", "Dieses Feld ist erforderlich")])
        for r in rows:
            r.verified = bool(verified)
    elif action == "unverify":
        for r in rows:
            r.verified = False
    elif action == "approve":
        now = _now()
        for r in rows:
            r.approved_at = now
    elif action == "update":
        updates = updates or {}
        for r in rows:
            if updates.get("verified") is not None:
                r.verified = bool(updates["verified"])
            if updates.get("approve") is not None:
                r.approved_at = _now() if updates["approve"] else None
            if updates.get("internal_comment") is not None:
                r.internal_comment = updates["internal_comment"]
    else:
        raise ValidationError(f"Ungültige Aktion: {action}")
    _commit(db, f"Bulk {action}")
    logger.info("Bulk %s on %d sightings (%d missing)", action, len(rows), len(missing))
    return {"success": True, "action": action, "affected": sorted(found), "not_found": missing}


def _consented_name_match(pattern: str):
    return or_(
        and_(Sighting.name_consent.is_(True),
             or_(Sighting.first_name.ilike(pattern), Sighting.last_name.ilike(pattern))),
        and_(Sighting.ship_name_consent.is_(True), Sighting.ship_name.ilike(pattern)),
    )


def query_sightings(db: Session, filters: Optional[SightingFilter] = None) -> Query:
    f = filters or SightingFilter()
    q = db.query(Sighting)
    if f.date_from:
        q = q.filter(Sighting.sighting_date >= datetime.combine(f.date_from, time.min))
    if f.date_to:
        q = q.filter(Sighting.sighting_date <= datetime.combine(f.date_to, time.max))
    if f.year:
        q = q.filter(extract("year", Sighting.sighting_date) == f.year)
    if f.verified is not None:
        q = q.filter(Sighting.verified.is_(f.verified))
    if f.approved is not None:
        q = q.filter(Sighting.approved_at.isnot(None) if f.approved else Sighting.approved_at.is_(None))
    if f.is_dead is not None:
        q = q.filter(Sighting.is_dead.is_(f.is_dead))
    if f.media_upload is not None:
        q = q.filter(Sighting.media_upload.is_(f.media_upload))
    if f.entry_channel:
        q = q.filter(Sighting.entry_channel.in_(f.entry_channel))
    if f.species:
        q = q.filter(Sighting.species.in_(f.species))
    if f.waterway:
        q = q.filter(Sighting.waterway.ilike(f"%{f.waterway}%"))
    if f.search:
        pattern = f"%{f.search}%"
        q = q.filter(or_(Sighting.waterway.ilike(pattern), Sighting.sea_mark.ilike(pattern),
                         _consented_name_match(pattern)))
    return q


def paginate_sightings(db: Session, filters: Optional[SightingFilter] = None, page: int = 1,
                       per_page: int = 20, sort: str = "sightingDate", order: str = "desc") -> dict:
    page = max(1, page)
    per_page = min(100, max(1, per_page))
    column = SORT_COLUMNS.get(sort, Sighting.sighting_date)
    q = query_sightings(db, filters)
    total = q.order_by(None).with_entities(func.count(Sighting.id)).scalar() or 0
    ordering = column.asc() if order == "asc" else column.desc()
    items = q.order_by(ordering, Sighting.id.desc()).offset((page - 1) * per_page).limit(per_page).all()
    pages = (total + per_page - 1) // per_page
    return {
        "items": items,
        "page": page,
        "per_page": per_page,
        "total": total,
        "pages": pages,
        "has_next": page < pages,
        "has_previous": page > 1,
    }


def _iso(value: Any) -> Optional[str]:
    return value.isoformat() if value is not None else None


def sighting_to_dict(row: Sighting, include_files: bool = True) -> dict:
    data = {name: getattr(row, name) for name in _DIRECT_FIELDS}
    data.update(
        id=row.id,
        reference_id=row.reference_id,
        created=_iso(row.created),
        sighting_date=_iso(row.sighting_date),
        media_upload=row.media_upload,
        entry_channel=row.entry_channel,
        verified=row.verified,
        approved_at=_iso(row.approved_at),
        internal_comment=row.internal_comment,
        in_baltic_sea=row.in_baltic_sea,
        in_chart_area=row.in_chart_area,
    )
    if include_files:
        data["files"] = [SightingFileOut.model_validate(f).model_dump(mode="json") for f in row.files]
    return data


def public_summary(row: Sighting, include_email: bool = False) -> dict:
    """Compact view; names only where the reporter agreed."""
    data = {
        "id": row.id,
        "sighting_date": _iso(row.sighting_date),
        "created": _iso(row.created),
        "species": row.species,
        "total_count": row.total_count,
        "juvenile_count": row.juvenile_count,
        "is_dead": row.is_dead,
        "latitude": row.latitude,
        "longitude": row.longitude,
        "waterway": row.waterway,
        "distance": row.distance,
        "distribution": row.distribution,
        "verified": row.verified,
        "media_upload": row.media_upload,
        "entry_channel": row.entry_channel,
        "first_name": row.first_name if row.name_consent else None,
        "last_name": row.last_name if row.name_consent else None,
        "ship_name": row.ship_name if row.ship_name_consent else None,
    }
    if include_email:
        data["email"] = row.email
        data["approved_at"] = _iso(row.approved_at)
        data["internal_comment"] = row.internal_comment
    return data


def map_features(db: Session, year: Optional[int] = None, search: Optional[str] = None) -> dict:
    f = SightingFilter(verified=True, year=year, search=search)
    rows = query_sightings(db, f).order_by(Sighting.sighting_date).all()
    features = []
    for r in rows:
        if r.latitude is None or r.longitude is None:
            continue
        props = {
            "id": r.id,
            "ts": int(r.sighting_date.replace(tzinfo=timezone.utc).timestamp()),
            "ta": r.species,
            "ct": r.total_count,
            "jt": r.juvenile_count,
            "tf": r.is_dead,
            "waterway": r.waterway,
            "seaMark": r.sea_mark,
        }
        if r.name_consent:
            props["name"] = r.last_name
            props["firstname"] = r.first_name
        if r.ship_name_consent:
            props["shipname"] = r.ship_name
        features.append({
            "type": "Feature",
            "id": r.id,
            "geometry": {"type": "Point", "coordinates": [r.longitude, r.latitude]},
            "properties": props,
        })
    return {"type": "FeatureCollection", "features": features}
