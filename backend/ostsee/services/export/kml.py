# backend/ostsee/services/export/kml.py
"""KML placemarks for Google Earth and similar viewers."""
import math
from typing import Iterable, Optional
from xml.etree import ElementTree as ET

from ostsee.models.sighting import Sighting
from ostsee.report import options

KML_FILENAME = "sichtungen-export.kml"
KML_NS = "http://www.opengis.net/kml/2.2"

STYLE_ICONS = {
    "style0": "red-dot",      # Totfund
    "style1": "blue-dot",     # 1 Tier
    "style2": "green-dot",    # 2-5
    "style3": "yellow-dot",   # 6-10
    "style4": "purple-dot",   # 11-15
    "style5": "orange-dot",   # >15
}
COUNT_KEYS = ("eq_1", "2_5", "5_10", "11_15", "gt_15", "dead")


def style_for(s: Sighting) -> tuple[str, str]:
    """Style id and the count bucket a sighting falls into."""
    if s.is_dead:
        return "style0", "dead"
    count = s.total_count or 0
    if count == 1:
        return "style1", "eq_1"
    if count < 6:
        return "style2", "2_5"
    if count < 11:
        return "style3", "5_10"
    if count < 16:
        return "style4", "11_15"
    return "style5", "gt_15"


def _dms(dec: float) -> tuple[int, int, float]:
    deg = math.floor(abs(dec))
    min_float = (abs(dec) - deg) * 60
    minutes = math.floor(min_float)
    sec = (min_float - minutes) * 60
    return (-deg if dec < 0 else deg), minutes, sec


def format_dms(latitude: float, longitude: float) -> str:
    lat_d, lat_m, lat_s = _dms(latitude)
    lon_d, lon_m, lon_s = _dms(longitude)
    lat = f"{abs(lat_d):02d}° {lat_m:02d}' {lat_s:.2f}\"{'S' if latitude < 0 else 'N'}"
    lon = f"{abs(lon_d):03d}° {lon_m:02d}' {lon_s:.2f}\"{'W' if longitude < 0 else 'E'}"
    return f"{lat} - {lon}"


def _description(s: Sighting) -> str:
    parts = []
    if s.species is not None:
        parts.append(("Tierart", options.SPECIES.label(s.species)))
    parts.append(("Position", format_dms(s.latitude or 0, s.longitude or 0)))
    parts.append(("Anzahl Tiere", s.total_count))
    if s.juvenile_count:
        parts.append(("Davon Jungtiere", s.juvenile_count))
    if s.ship_name and s.ship_name_consent:
        parts.append(("Schiffsname", s.ship_name))
    if s.name_consent and s.first_name and s.last_name:
        parts.append(("Name", f"{s.first_name} {s.last_name}"))
    if s.waterway:
        parts.append(("Fahrwasser", s.waterway))
    return "".join(f"<p><label>{label}: </label>{value}</p>" for label, value in parts)


def _sub(parent: ET.Element, tag: str, text: Optional[str] = None) -> ET.Element:
    el = ET.SubElement(parent, tag)
    if text is not None:
        el.text = text
    return el


def generate_kml(sightings: Iterable[Sighting]) -> str:
    kml = ET.Element("kml", xmlns=KML_NS)
    doc = _sub(kml, "Document")
    for style_id, icon in STYLE_ICONS.items():
        style = _sub(doc, "Style")
        style.set("id", style_id)
        icon_el = _sub(_sub(style, "IconStyle"), "Icon")
        _sub(icon_el, "href", f"https://maps.google.com/mapfiles/ms/icons/{icon}.png")

    folder = _sub(doc, "Folder")
    _sub(folder, "name", "Sichtungen")
    counts = dict.fromkeys(COUNT_KEYS, 0)
    for s in sightings:
        style_id, bucket = style_for(s)
        counts[bucket] += 1
        pm = _sub(folder, "Placemark")
        _sub(pm, "name", s.sighting_date.strftime("%d.%m.%y %H:%M"))
        # HTML body; ElementTree escapes it, viewers unescape it again
        _sub(pm, "description", _description(s))
        _sub(_sub(pm, "Point"), "coordinates", f"{s.longitude or 0},{s.latitude or 0}")
        _sub(_sub(pm, "TimeStamp"), "when", s.sighting_date.strftime("%Y-%m-%dT%H:%M:%SZ"))
        _sub(pm, "styleUrl", f"#{style_id}")

    data = _sub(_sub(folder, "ExtendedData"), "Data")
    data.set("name", "counts")
    _sub(data, "value", ",".join(str(counts[k]) for k in COUNT_KEYS))

    ET.indent(kml)
    return '<?xml version="1.0" encoding="UTF-8"?>\n' + ET.tostring(kml, encoding="unicode")
