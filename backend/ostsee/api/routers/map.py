# backend/ostsee/api/routers/map.py
from typing import Optional

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from ostsee.db import get_db
from ostsee.services.sightings.repository import map_features

router = APIRouter()


@router.get("/sightings")
def map_sightings(year: Optional[int] = None, search: Optional[str] = None,
                  db: Session = Depends(get_db)):
    # verified sightings only
    return map_features(db, year=year, search=search or None)
