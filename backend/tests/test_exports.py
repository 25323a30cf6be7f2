import csv
import io
import math
from datetime import datetime
from xml.etree import ElementTree as ET

import pytest

from ostsee.models.sighting import Sighting
from ostsee.services.export.csv_export import HEADERS, generate_csv
from ostsee.services.export.json_export import generate_json
from ostsee.services.export.kml import KML_NS, format_dms, generate_kml, style_for
from ostsee.services.export.xml_export import generate_xml, legacy_xy, size_class


def sighting(**kw) -> Sighting:
    data = dict(
        id=1, reference_id="ref1", created=datetime(2024, 6, 2, 8, 0),
        sighting_date=datetime(2024, 6, 1, 14, 30), latitude=54.32, longitude=10.14,
        waterway="Kieler Förde", species=0, total_count=3, juvenile_count=1, distance=2,
        distribution=1, is_dead=False, sea_state=2, visibility=2, wind_force=4,
        media_upload=False, in_baltic_sea=True, verified=True, entry_channel=0,
        first_name="Erika", last_name="Mustermann", email="erika@example.org",
        name_consent=False, ship_name="Möwe", ship_name_consent=True,
    )
    data.update(kw)
    row = Sighting(**data)
    row.files = []
    return row


def test_csv_header_and_labels():
    rows = list(csv.reader(io.StringIO(generate_csv([sighting()]))))
    assert rows[0] == HEADERS
    record = dict(zip(HEADERS, rows[1]))
    assert record["Tierart"] == "Schweinswal"
    assert record["Entfernung"] == "10 bis 50 Meter"
    assert record["Totfund"] == "Nein"
    assert record["Verifiziert"] == "Ja"
    assert record["Position Unsicher"] == "Nein"
    assert record["Sichtungsdatum"] == "2024-06-01 14:30:00"


def test_csv_quotes_every_cell():
    text = generate_csv([sighting(notes='Sagte "hallo", dann weg')])
    assert text.splitlines()[0].startswith('"Referenz-ID","Sichtungsdatum"')
    assert '"Sagte ""hallo"", dann weg"' in text


def test_csv_missing_values():
    record = dict(zip(HEADERS, list(csv.reader(io.StringIO(
        generate_csv([sighting(latitude=None, longitude=None, wind_force=None, species=None)])
    )))[1]))
    assert record["Position Unsicher"] == "Ja"
    assert record["Wind"] == ""
    assert record["Tierart"] == "Nicht angegeben"


@pytest.mark.parametrize("kw, expected", [
    ({"is_dead": True, "total_count": 1}, "style0"),
    ({"total_count": 1}, "style1"),
    ({"total_count": 5}, "style2"),
    ({"total_count": 6}, "style3"),
    ({"total_count": 15}, "style4"),
    ({"total_count": 16}, "style5"),
])
def test_kml_styles(kw, expected):
    assert style_for(sighting(**kw))[0] == expected


def test_format_dms():
    assert format_dms(54.5, 10.25) == "54° 30' 0.00\"N - 010° 15' 0.00\"E"
    assert format_dms(-33.5, -70.5).endswith("\"W")


def test_kml_document():
    text = generate_kml([sighting(), sighting(id=2, is_dead=True)])
    root = ET.fromstring(text.split("\n", 1)[1])
    ns = {"k": KML_NS}
    placemarks = root.findall("k:Document/k:Folder/k:Placemark", ns)
    assert len(placemarks) == 2
    assert placemarks[0].findtext("k:styleUrl", namespaces=ns) == "#style2"
    assert placemarks[0].findtext("k:Point/k:coordinates", namespaces=ns) == "10.14,54.32"
    assert placemarks[0].findtext("k:name", namespaces=ns) == "01.06.24 14:30"
    description = placemarks[0].findtext("k:description", namespaces=ns)
    assert "Schiffsname: </label>Möwe" in description
    # no name without consent
    assert "Mustermann" not in description
    assert root.findtext("k:Document/k:Folder/k:ExtendedData/k:Data/k:value", namespaces=ns) == "0,1,0,0,0,1"


def test_legacy_xy_matches_mercator():
    lon, lat = 10.14, 54.32
    r = 6371000
    big_x = r * math.radians(lon)
    big_y = r * math.log(math.tan(math.pi / 4 + math.radians(lat) / 2))
    expected = (
        round((round(big_x) - 1050792.0567911) / 628251.3355417, 3),
        round((round(big_y) - 7138521.4416712) / 909594.5299957, 3),
    )
    assert legacy_xy(lon, lat) == pytest.approx(expected, abs=0.0015)


def test_size_classes():
    assert size_class(sighting(total_count=1)) == ("Einzeltier", "Einzeltier")
    assert size_class(sighting(total_count=7)) == ("6_10", "6-10 Tiere")
    assert size_class(sighting(total_count=20)) == ("_15", "Mehr als 15 Tiere")
    assert size_class(sighting(is_dead=True)) == ("tot", "tot")


def test_xml_layout():
    root = ET.fromstring(generate_xml([sighting()]).split("\n", 1)[1])
    item = root.find("sichtung")
    assert item.findtext("nr") == "1"
    assert item.findtext("datum") == "01.06.24"
    assert item.findtext("uhrzeit") == "1430"
    assert item.findtext("totfund") == "0"
    assert item.findtext("schiff") == "Möwe"
    assert item.find("person") is None


def test_json_export():
    data = generate_json([sighting(), sighting(id=2)])
    assert data["count"] == 2
    assert data["sightings"][0]["sighting_date"] == "2024-06-01T14:30:00"
    assert data["sightings"][0]["files"] == []
