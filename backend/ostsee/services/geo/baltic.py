# backend/ostsee/services/geo/baltic.py
import json
from functools import lru_cache
from pathlib import Path
from typing import Optional

from shapely.geometry import Point, box, shape
from shapely.strtree import STRtree

from ostsee.config import get_settings
from ostsee.logging_config import get_logger

logger = get_logger(__name__)

# map extent of the sightings chart (lon/lat, EPSG:4326)
CHART_AREA = box(9.4, 53.0, 30.2, 66.0)


def check_coordinates(longitude: float, latitude: float) -> None:
    if not -180 <= longitude <= 180:
        raise ValueError("Longitude muss zwischen -180 und 180 liegen")
    if not -90 <= latitude <= 90:
        raise ValueError("Latitude muss zwischen -90 und 90 liegen")


class BalticSea:
    """Point-in-polygon test against Baltic Sea polygons from a GeoJSON file."""

    def __init__(self, polygons: list):
        self.polygons = polygons
        self.tree = STRtree(polygons) if polygons else None

    @classmethod
    def from_geojson(cls, path: Path) -> "BalticSea":
        data = json.loads(Path(path).read_text(encoding="utf-8"))
        if data.get("type") == "FeatureCollection":
            geoms = [f.get("geometry") for f in data.get("features", [])]
        elif data.get("type") == "Feature":
            geoms = [data.get("geometry")]
        else:
            geoms = [data]
        polygons = [shape(g) for g in geoms if g and g.get("type") in ("Polygon", "MultiPolygon")]
        logger.info("Loaded %d Baltic Sea polygons from %s", len(polygons), path)
        return cls(polygons)

    def contains(self, longitude: float, latitude: float) -> bool:
        if self.tree is None:
            return False
        pt = Point(longitude, latitude)
        return len(self.tree.query(pt, predicate="within")) > 0

    def check(self, longitude: float, latitude: float) -> dict:
        check_coordinates(longitude, latitude)
        return {
            "in_baltic": self.contains(longitude, latitude),
            "in_chart_area": CHART_AREA.intersects(Point(longitude, latitude)),
        }


@lru_cache
def get_baltic_sea(path: Optional[str] = None) -> BalticSea:
    path = path or get_settings().baltic_geojson_path
    if not path:
        logger.warning("No Baltic Sea polygons configured, in_baltic is always false")
        return BalticSea([])
    try:
        return BalticSea.from_geojson(Path(path))
    except (OSError, ValueError) as exc:
        logger.warning("Baltic Sea polygons unreadable (%s): %s", path, exc)
        return BalticSea([])


def check_baltic_sea(longitude: float, latitude: float) -> dict:
    return get_baltic_sea().check(longitude, latitude)
