# backend/ostsee/report/options.py
"""Choice lists of the report form.

Codes are what the database stores; labels are German display texts used by
the form, the exports and the admin views.
"""
from enum import Enum, IntEnum
from typing import Any

NOT_SPECIFIED = "Nicht angegeben"
UNKNOWN = "Unbekannt"


class OptionSet:
    """Enum plus its labels with lookup helpers."""

    def __init__(self, enum: type[Enum], labels: dict):
        self.enum = enum
        self.labels = labels

    def _coerce(self, value: Any):
        if isinstance(value, Enum):
            return value.value
        if issubclass(self.enum, IntEnum):
            if isinstance(value, bool):
                return None
            if isinstance(value, int):
                return value
            if isinstance(value, str):
                try:
                    return int(value.strip())
                except ValueError:
                    return None
            return None
        return value

    def is_valid(self, value: Any) -> bool:
        code = self._coerce(value)
        return code is not None and code in {m.value for m in self.enum}

    def label(self, value: Any) -> str:
        if value is None:
            return NOT_SPECIFIED
        code = self._coerce(value)
        for member, text in self.labels.items():
            if member.value == code:
                return text
        return UNKNOWN

    def options(self) -> list[dict]:
        return [{"value": m.value, "label": text} for m, text in self.labels.items()]


class Species(IntEnum):
    HARBOR_PORPOISE = 0
    GREY_SEAL = 1
    HARBOR_SEAL = 2
    DOLPHIN = 3
    BELUGA = 4
    MINKE_WHALE = 5
    FIN_WHALE = 6
    HUMPBACK_WHALE = 7
    UNKNOWN_WHALE = 8
    RINGED_SEAL = 9
    UNKNOWN_SEAL = 10


class Distance(IntEnum):
    LESS_THAN_10M = 1
    FROM_10_TO_50M = 2
    FROM_51_TO_100M = 3
    FROM_101_TO_500M = 4
    MORE_THAN_500M = 5


class Distribution(IntEnum):
    OTHER = 0
    SINGLE = 1
    MOTHER_WITH_YOUNG = 2
    SCHOOLS = 3


class AnimalBehavior(IntEnum):
    OTHER = 0
    CONSTANT_COURSE = 1
    VARYING_COURSE = 2
    SLOW_SWIMMING = 3


class AnimalCondition(IntEnum):
    UNKNOWN = 0
    EXTREMELY_FRESH = 1
    FRESH_BEGINNING_DECOMPOSITION = 2
    MEDIUM_DECOMPOSITION = 3
    ADVANCED_DECOMPOSITION = 4
    SEVERE_DECOMPOSITION = 5


class Sex(IntEnum):
    UNKNOWN = 0
    FEMALE = 1
    MALE = 2


class SightingFrom(IntEnum):
    OTHER = 0
    SAILBOAT = 1
    MOTORBOAT = 2
    LAND = 3
    FERRY = 4


class BoatDrive(IntEnum):
    OTHER = 0
    MOTOR = 1
    SAIL = 2
    DRIFTING = 3
    ANCHORED = 4


class BoatType(IntEnum):
    OTHER = 0
    SAILBOAT = 1
    MOTORBOAT = 2
    FERRY = 3
    FISHING_VESSEL = 4
    CARGO_SHIP = 5
    CRUISE_SHIP = 6
    RESEARCH_VESSEL = 7
    INFLATABLE_BOAT = 8
    SAILING_CATAMARAN = 9
    MOTOR_YACHT = 10


class SeaState(IntEnum):
    NONE = 0
    SMOOTH = 1
    CALM = 2
    SLIGHT = 3
    ROUGH = 4
    HIGH = 5


class Visibility(IntEnum):
    NONE = 0
    EXCEPTIONAL = 1
    CLEAR = 2
    HAZY = 3
    FOGGY = 4


class WindDirection(str, Enum):
    NONE = ""
    N = "N"
    NO = "NO"
    O = "O"
    SO = "SO"
    S = "S"
    SW = "SW"
    W = "W"
    NW = "NW"


class WindStrength(IntEnum):
    WINDSTILL = 0
    LEISER_ZUG = 1
    LEICHTE_BRISE = 2
    SCHWACHE_BRISE = 3
    MAESSIGE_BRISE = 4
    FRISCHE_BRISE = 5
    STARKER_WIND = 6
    STEIFER_WIND = 7
    STUERMISCHER_WIND = 8
    STURM = 9
    SCHWERER_STURM = 10
    ORKANARTIGER_STURM = 11
    ORKAN = 12


class EntryChannel(IntEnum):
    WEB = 0
    EMAIL = 1
    MAIL = 2
    FAX = 3
    APP = 4
    PHONE = 5


class ReactionToBoat(IntEnum):
    NONE = 0
    APPROACH = 1
    AVOIDANCE = 2
    BOW_RIDING = 3
    COURSE_CHANGE = 4
    LONGER_DIVING = 5
    FREQUENT_SURFACING = 6


class MediaType(IntEnum):
    OTHER = 0
    PHOTO = 1
    VIDEO = 2
    AUDIO = 3
    DRAWING = 4
    SATELLITE = 5
    DRONE = 6
    UNDERWATER = 7


SPECIES = OptionSet(Species, {
    Species.HARBOR_PORPOISE: "Schweinswal",
    Species.GREY_SEAL: "Kegelrobbe",
    Species.HARBOR_SEAL: "Seehund",
    Species.DOLPHIN: "Delphin",
    Species.BELUGA: "Beluga",
    Species.MINKE_WHALE: "Zwergwal",
    Species.FIN_WHALE: "Finnwal",
    Species.HUMPBACK_WHALE: "Buckelwal",
    Species.UNKNOWN_WHALE: "Unbekannte Walart",
    Species.RINGED_SEAL: "Ringelrobbe",
    Species.UNKNOWN_SEAL: "Unbekannte Robbenart",
})

DISTANCE = OptionSet(Distance, {
    Distance.LESS_THAN_10M: "weniger als 10 Meter",
    Distance.FROM_10_TO_50M: "10 bis 50 Meter",
    Distance.FROM_51_TO_100M: "51 bis 100 Meter",
    Distance.FROM_101_TO_500M: "101 bis 500 Meter",
    Distance.MORE_THAN_500M: "mehr als 500 Meter",
})

DISTRIBUTION = OptionSet(Distribution, {
    Distribution.OTHER: "Sonstige Verteilung",
    Distribution.SINGLE: "Einzeln",
    Distribution.MOTHER_WITH_YOUNG: "Mutter mit Jungtier",
    Distribution.SCHOOLS: "Deutliche Schulen",
})

ANIMAL_BEHAVIOR = OptionSet(AnimalBehavior, {
    AnimalBehavior.OTHER: "Sonstiges Verhalten",
    AnimalBehavior.CONSTANT_COURSE: "Konstanter Kurs, regelmäßiges Tauchen (schwimmen, ziehen)",
    AnimalBehavior.VARYING_COURSE: "Unterschiedlicher Kurs, kreisend, unregelmäßiges Tauchen (futtersuchend)",
    AnimalBehavior.SLOW_SWIMMING: "Langsames Schwimmen, längere Zeit an der Wasseroberfläche (ruhend)",
})

ANIMAL_CONDITION = OptionSet(AnimalCondition, {
    AnimalCondition.UNKNOWN: "Unbekannt",
    AnimalCondition.EXTREMELY_FRESH: "Extrem frisch",
    AnimalCondition.FRESH_BEGINNING_DECOMPOSITION: "Frisch, bzw. beginnende Verwesung",
    AnimalCondition.MEDIUM_DECOMPOSITION: "Mittlere Verwesung",
    AnimalCondition.ADVANCED_DECOMPOSITION: "Fortgeschrittene Verwesung",
    AnimalCondition.SEVERE_DECOMPOSITION: "Starke Verwesung",
})

SEX = OptionSet(Sex, {
    Sex.UNKNOWN: "Unbekannt",
    Sex.FEMALE: "Weiblich",
    Sex.MALE: "Männlich",
})

SIGHTING_FROM = OptionSet(SightingFrom, {
    SightingFrom.OTHER: "Sonstiges",
    SightingFrom.SAILBOAT: "Segelschiff",
    SightingFrom.MOTORBOAT: "Motorboot",
    SightingFrom.LAND: "Land",
    SightingFrom.FERRY: "Fähre",
})

BOAT_DRIVE = OptionSet(BoatDrive, {
    BoatDrive.OTHER: "Sonstiger Bootsantrieb",
    BoatDrive.MOTOR: "Motor",
    BoatDrive.SAIL: "Segel",
    BoatDrive.DRIFTING: "Treibend",
    BoatDrive.ANCHORED: "Vor Anker",
})

BOAT_TYPE = OptionSet(BoatType, {
    BoatType.OTHER: "Sonstiger Bootstyp",
    BoatType.SAILBOAT: "Segelboot",
    BoatType.MOTORBOAT: "Motorboot",
    BoatType.FERRY: "Fähre",
    BoatType.FISHING_VESSEL: "Fischereifahrzeug",
    BoatType.CARGO_SHIP: "Frachtschiff",
    BoatType.CRUISE_SHIP: "Kreuzfahrtschiff",
    BoatType.RESEARCH_VESSEL: "Forschungsschiff",
    BoatType.INFLATABLE_BOAT: "Schlauchboot",
    BoatType.SAILING_CATAMARAN: "Segelkatamaran",
    BoatType.MOTOR_YACHT: "Motoryacht",
})

SEA_STATE = OptionSet(SeaState, {
    SeaState.NONE: "Keine Angabe",
    SeaState.SMOOTH: "Glatte See, keine Wellen",
    SeaState.CALM: "Ruhige See, gekräuselte, kurze Wellen",
    SeaState.SLIGHT: "Leicht bewegte See, Schaumköpfe",
    SeaState.ROUGH: "Grobe See, lange, brechende Wellen",
    SeaState.HIGH: "Hohe See, Wellenberge und Gischt",
})

VISIBILITY = OptionSet(Visibility, {
    Visibility.NONE: "Keine Angabe",
    Visibility.EXCEPTIONAL: "Außergewöhnlich klar (mehr als 20km)",
    Visibility.CLEAR: "Klar (bis 20km)",
    Visibility.HAZY: "Diesig (bis 4km)",
    Visibility.FOGGY: "Nebel (bis 1km)",
})

WIND_DIRECTION = OptionSet(WindDirection, {
    WindDirection.NONE: "Keine Angabe",
    WindDirection.N: "Nord",
    WindDirection.NO: "Nordost",
    WindDirection.O: "Ost",
    WindDirection.SO: "Südost",
    WindDirection.S: "Süd",
    WindDirection.SW: "Südwest",
    WindDirection.W: "West",
    WindDirection.NW: "Nordwest",
})

WIND_STRENGTH = OptionSet(WindStrength, {
    WindStrength.WINDSTILL: "0 - Windstille (< 1 km/h)",
    WindStrength.LEISER_ZUG: "1 - Leiser Zug (1-5 km/h)",
    WindStrength.LEICHTE_BRISE: "2 - Leichte Brise (6-11 km/h)",
    WindStrength.SCHWACHE_BRISE: "3 - Schwache Brise (12-19 km/h)",
    WindStrength.MAESSIGE_BRISE: "4 - Mäßige Brise (20-28 km/h)",
    WindStrength.FRISCHE_BRISE: "5 - Frische Brise (29-38 km/h)",
    WindStrength.STARKER_WIND: "6 - Starker Wind (39-49 km/h)",
    WindStrength.STEIFER_WIND: "7 - Steifer Wind (50-61 km/h)",
    WindStrength.STUERMISCHER_WIND: "8 - Stürmischer Wind (62-74 km/h)",
    WindStrength.STURM: "9 - Sturm (75-88 km/h)",
    WindStrength.SCHWERER_STURM: "10 - Schwerer Sturm (89-102 km/h)",
    WindStrength.ORKANARTIGER_STURM: "11 - Orkanartiger Sturm (103-117 km/h)",
    WindStrength.ORKAN: "12 - Orkan (> 117 km/h)",
})

ENTRY_CHANNEL = OptionSet(EntryChannel, {
    EntryChannel.WEB: "Web",
    EntryChannel.EMAIL: "E-Mail",
    EntryChannel.MAIL: "Post",
    EntryChannel.FAX: "Fax",
    EntryChannel.APP: "App",
    EntryChannel.PHONE: "Telefon",
})

REACTION_TO_BOAT = OptionSet(ReactionToBoat, {
    ReactionToBoat.NONE: "Keine Reaktion",
    ReactionToBoat.APPROACH: "Annäherung an Boot",
    ReactionToBoat.AVOIDANCE: "Vermeidung/Flucht",
    ReactionToBoat.BOW_RIDING: "Bugwellenreiten",
    ReactionToBoat.COURSE_CHANGE: "Kursänderung",
    ReactionToBoat.LONGER_DIVING: "Längeres Abtauchen",
    ReactionToBoat.FREQUENT_SURFACING: "Häufigeres Auftauchen",
})

MEDIA_TYPE = OptionSet(MediaType, {
    MediaType.OTHER: "Sonstiges Medienformat",
    MediaType.PHOTO: "Foto",
    MediaType.VIDEO: "Video",
    MediaType.AUDIO: "Audiodatei",
    MediaType.DRAWING: "Zeichnung/Skizze",
    MediaType.SATELLITE: "Satellitenaufnahme",
    MediaType.DRONE: "Drohnenaufnahme",
    MediaType.UNDERWATER: "Unterwasseraufnahme",
})

ALL_OPTIONS = {
    "species": SPECIES,
    "distance": DISTANCE,
    "distribution": DISTRIBUTION,
    "behavior": ANIMAL_BEHAVIOR,
    "dead_condition": ANIMAL_CONDITION,
    "dead_sex": SEX,
    "sighting_from": SIGHTING_FROM,
    "boat_drive": BOAT_DRIVE,
    "boat_type": BOAT_TYPE,
    "sea_state": SEA_STATE,
    "visibility": VISIBILITY,
    "wind_direction": WIND_DIRECTION,
    "wind_force": WIND_STRENGTH,
    "entry_channel": ENTRY_CHANNEL,
    "reaction_to_boat": REACTION_TO_BOAT,
    "media_type": MEDIA_TYPE,
}
