# backend/ostsee/services/export/xml_export.py
"""Legacy <sichtungen> XML layout consumed by the old map tooling."""
from functools import lru_cache
from typing import Iterable
from xml.etree import ElementTree as ET

from pyproj import CRS, Transformer

from ostsee.models.sighting import Sighting

XML_FILENAME = "sichtungen-export.xml"

# spherical mercator on R=6371000, then normalised to the legacy map frame
EARTH_RADIUS = 6371000
X_OFFSET, X_SCALE = 1050792.0567911, 628251.3355417
Y_OFFSET, Y_SCALE = 7138521.4416712, 909594.5299957

SIZE_CLASSES = (
    # (upper bound exclusive, media code, label)
    (2, "Einzeltier", "Einzeltier"),
    (6, "2_5", "2-5 Tiere"),
    (11, "6_10", "6-10 Tiere"),
    (16, "11_15", "11-15 Tiere"),
)


@lru_cache
def _transformer() -> Transformer:
    sphere = CRS.from_proj4(f"+proj=longlat +R={EARTH_RADIUS} +no_defs")
    merc = CRS.from_proj4(f"+proj=merc +R={EARTH_RADIUS} +lon_0=0 +x_0=0 +y_0=0 +units=m +no_defs")
    return Transformer.from_crs(sphere, merc, always_xy=True)


def legacy_xy(longitude: float, latitude: float) -> tuple[float, float]:
    X, Y = _transformer().transform(longitude, latitude)
    x = round((round(X) - X_OFFSET) / X_SCALE, 3)
    y = round((round(Y) - Y_OFFSET) / Y_SCALE, 3)
    return x, y


def size_class(s: Sighting) -> tuple[str, str]:
    if s.is_dead:
        return "tot", "tot"
    count = s.total_count or 0
    for bound, media, label in SIZE_CLASSES:
        if count < bound:
            return media, label
    return "_15", "Mehr als 15 Tiere"


def _fields(s: Sighting) -> dict:
    lat = s.latitude or 0
    lon = s.longitude or 0
    media, label = size_class(s)
    x, y = legacy_xy(lon, lat)
    return {
        "nr": s.id,
        "datum": s.sighting_date.strftime("%d.%m.%y"),
        "uhrzeit": s.sighting_date.strftime("%H%M"),
        "tierart": s.species,
        "fahrwasser": s.waterway,
        "dezigrad_n": lat,
        "dezigrad_e": lon,
        "totfund": bool(s.is_dead),
        "media": media,
        "anz_ber": None if s.is_dead else s.total_count,
        "groessenklasse": label,
        "jungtiere": s.juvenile_count or None,
        "x": x,
        "y": y,
        "schiff": s.ship_name if s.ship_name_consent else None,
        "person": (f"{s.first_name} {s.last_name}"
                   if s.name_consent and s.first_name and s.last_name else None),
    }


def generate_xml(sightings: Iterable[Sighting]) -> str:
    root = ET.Element("sichtungen")
    for s in sightings:
        el = ET.SubElement(root, "sichtung")
        for key, value in _fields(s).items():
            if value is None or value == "":
                continue
            if isinstance(value, bool):
                value = "1" if value else "0"
            ET.SubElement(el, key).text = str(value)
    ET.indent(root)
    return '<?xml version="1.0" encoding="UTF-8"?>\n' + ET.tostring(root, encoding="unicode")
