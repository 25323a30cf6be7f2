# backend/ostsee/api/routers/geo.py
from fastapi import APIRouter, Query

from ostsee.exceptions import ValidationError
from ostsee.services.geo.baltic import check_baltic_sea

router = APIRouter()


@router.get("/in-baltic")
def in_baltic(longitude: float = Query(...), latitude: float = Query(...)):
    try:
        result = check_baltic_sea(longitude, latitude)
    except ValueError as exc:
        raise ValidationError(str(exc)) from exc
    return {**result, "longitude": longitude, "latitude": latitude}
