# backend/ostsee/services/export/csv_export.py
import csv
import io
from typing import Iterable

from ostsee.models.sighting import Sighting
from ostsee.report import options

CSV_FILENAME = "sichtungen-export.csv"

HEADERS = [
    "Referenz-ID", "Sichtungsdatum", "Meldedatum", "Email", "Name", "Telefon",
    "Tierart", "Anzahl Total", "Anzahl Jungtiere", "Entfernung", "Verteilung",
    "Längengrad", "Breitengrad", "Ort", "Position Unsicher", "Totfund",
    "Kommentar", "Seegang", "Wind", "Sicht", "Aufnahme", "Ostsee",
    "Verifiziert", "Eingangskanal",
]


def _yes_no(flag) -> str:
    return "Ja" if flag else "Nein"


def _cell(value) -> str:
    return "" if value is None else str(value)


def _row(s: Sighting) -> list[str]:
    return [
        _cell(s.reference_id),
        s.sighting_date.isoformat(sep=" ") if s.sighting_date else "",
        s.created.isoformat(sep=" ") if s.created else "",
        _cell(s.email),
        _cell(s.last_name),
        _cell(s.phone),
        options.SPECIES.label(s.species),
        _cell(s.total_count),
        _cell(s.juvenile_count),
        options.DISTANCE.label(s.distance),
        options.DISTRIBUTION.label(s.distribution),
        _cell(s.longitude),
        _cell(s.latitude),
        _cell(s.city),
        "Nein" if s.latitude is not None else "Ja",
        _yes_no(s.is_dead),
        _cell(s.notes),
        options.SEA_STATE.label(s.sea_state),
        options.WIND_STRENGTH.label(s.wind_force) if s.wind_force is not None else "",
        options.VISIBILITY.label(s.visibility),
        _yes_no(s.media_upload),
        _yes_no(s.in_baltic_sea),
        _yes_no(s.verified),
        options.ENTRY_CHANNEL.label(s.entry_channel),
    ]


def generate_csv(sightings: Iterable[Sighting]) -> str:
    buf = io.StringIO()
    writer = csv.writer(buf, quoting=csv.QUOTE_ALL, lineterminator="\n")
    writer.writerow(HEADERS)
    for s in sightings:
        writer.writerow(_row(s))
    return buf.getvalue()
