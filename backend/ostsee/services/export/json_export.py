# backend/ostsee/services/export/json_export.py
from typing import Iterable

from ostsee.models.sighting import Sighting
from ostsee.services.sightings.repository import sighting_to_dict

JSON_FILENAME = "sichtungen-export.json"


def generate_json(sightings: Iterable[Sighting]) -> dict:
    items = [sighting_to_dict(s) for s in sightings]
    return {"sightings": items, "count": len(items)}
