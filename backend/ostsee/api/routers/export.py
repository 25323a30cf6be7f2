# backend/ostsee/api/routers/export.py
import json

from fastapi import APIRouter, Depends
from fastapi.responses import Response
from sqlalchemy.orm import Session

from ostsee.api.deps import require_admin
from ostsee.api.routers.admin import admin_filters
from ostsee.db import get_db
from ostsee.schemas.sighting import SightingFilter
from ostsee.services.auth.auth0 import AuthUser
from ostsee.services.export.csv_export import CSV_FILENAME, generate_csv
from ostsee.services.export.json_export import JSON_FILENAME, generate_json
from ostsee.services.export.kml import KML_FILENAME, generate_kml
from ostsee.services.export.xml_export import XML_FILENAME, generate_xml
from ostsee.services.sightings import repository as repo

router = APIRouter()


def _rows(db: Session, filters: SightingFilter):
    return repo.query_sightings(db, filters).order_by(repo.Sighting.sighting_date).all()


def _attachment(body: str, media_type: str, filename: str) -> Response:
    return Response(
        content=body,
        media_type=media_type,
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )


@router.get("")
def export_json(filters: SightingFilter = Depends(admin_filters), db: Session = Depends(get_db),
                user: AuthUser = Depends(require_admin)):
    return generate_json(_rows(db, filters))


@router.get("/json")
def export_json_file(filters: SightingFilter = Depends(admin_filters), db: Session = Depends(get_db),
                     user: AuthUser = Depends(require_admin)):
    body = json.dumps(generate_json(_rows(db, filters)), ensure_ascii=False, indent=2)
    return _attachment(body, "application/json", JSON_FILENAME)


@router.get("/csv")
def export_csv(filters: SightingFilter = Depends(admin_filters), db: Session = Depends(get_db),
               user: AuthUser = Depends(require_admin)):
    return _attachment(generate_csv(_rows(db, filters)), "text/csv; charset=utf-8", CSV_FILENAME)


@router.get("/kml")
def export_kml(filters: SightingFilter = Depends(admin_filters), db: Session = Depends(get_db),
               user: AuthUser = Depends(require_admin)):
    return _attachment(generate_kml(_rows(db, filters)), "application/vnd.google-earth.kml+xml",
                       KML_FILENAME)


@router.get("/xml")
def export_xml(filters: SightingFilter = Depends(admin_filters), db: Session = Depends(get_db),
               user: AuthUser = Depends(require_admin)):
    return _attachment(generate_xml(_rows(db, filters)), "application/xml; charset=utf-8",
                       XML_FILENAME)
