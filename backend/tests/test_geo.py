import json

import pytest
from shapely.geometry import box

from ostsee.services.geo.baltic import BalticSea, check_coordinates


def test_point_in_polygon():
    sea = BalticSea([box(10.0, 54.0, 11.0, 55.0)])
    assert sea.check(10.5, 54.5) == {"in_baltic": True, "in_chart_area": True}
    assert sea.check(5.0, 54.5) == {"in_baltic": False, "in_chart_area": False}


def test_without_polygons_nothing_is_inside():
    assert BalticSea([]).check(10.5, 54.5)["in_baltic"] is False


def test_from_geojson(tmp_path):
    path = tmp_path / "baltic.geojson"
    path.write_text(json.dumps({
        "type": "FeatureCollection",
        "features": [
            {"type": "Feature", "properties": {},
             "geometry": {"type": "Polygon",
                          "coordinates": [[[10, 54], [11, 54], [11, 55], [10, 55], [10, 54]]]}},
            {"type": "Feature", "properties": {},
             "geometry": {"type": "Point", "coordinates": [10, 54]}},
        ],
    }))
    sea = BalticSea.from_geojson(path)
    assert len(sea.polygons) == 1
    assert sea.contains(10.2, 54.2)


def test_coordinate_bounds():
    with pytest.raises(ValueError):
        check_coordinates(200, 0)
    with pytest.raises(ValueError):
        check_coordinates(0, -95)
