# backend/ostsee/report/validation.py
"""Field rules of the sighting report.

Rules are data: each ``FieldRule`` names the field, the type raw input is
coerced to (through a pydantic ``TypeAdapter``), whether it is required and a
list of (check, message) pairs. Conditional requirements only look at fields
of the same form step, so validating one step never needs another step's data.

Nothing here mutates its input or does I/O.
"""
import re
from dataclasses import dataclass, field
from datetime import date
from functools import cached_property
from typing import Any, Callable, Iterable, Optional, Union

from pydantic import EmailStr, TypeAdapter
from pydantic import ValidationError as PydanticValidationError

from ostsee.report import options
from ostsee.report.steps import FORM_STEPS, FormStep

REQUIRED = "Dieses Feld ist erforderlich"
INVALID = "Ungültiger Wert"
INVALID_OPTION = "Bitte wählen Sie eine gültige Option."
TIME_RE = re.compile(r"^([0-1]?[0-9]|2[0-3]):[0-5][0-9]$")

Check = tuple[Callable[[Any, dict], bool], str]


@dataclass(frozen=True)
class FieldError:
    field: str
    message: str

    def to_dict(self) -> dict:
        return {"field": self.field, "message": self.message}


@dataclass(frozen=True)
class FieldRule:
    name: str
    kind: Any = str
    required: Union[bool, Callable[[dict], bool]] = False
    required_message: str = REQUIRED
    checks: tuple[Check, ...] = ()
    depends_on: tuple[str, ...] = ()
    invalid_message: str = INVALID

    @cached_property
    def adapter(self) -> TypeAdapter:
        return TypeAdapter(self.kind)

    def is_required(self, values: dict) -> bool:
        if callable(self.required):
            return bool(self.required(values))
        return self.required

    def coerce(self, raw: Any) -> Any:
        if self.kind is str and isinstance(raw, (int, float)) and not isinstance(raw, bool):
            raw = str(raw)
        if isinstance(raw, str) and self.kind is not str:
            raw = raw.strip()
        return self.adapter.validate_python(raw)


def is_empty(value: Any) -> bool:
    return value is None or (isinstance(value, str) and value.strip() == "")


def _max_len(limit: int, message: str) -> Check:
    return (lambda v, _: len(v) <= limit, message)


def _between(low, high, message: str) -> Check:
    return (lambda v, _: low <= v <= high, message)


def _option(option_set: options.OptionSet, message: str = INVALID_OPTION) -> Check:
    return (lambda v, _: option_set.is_valid(v), message)


def _when(field_name: str, predicate: Callable[[Any], bool]) -> Callable[[dict], bool]:
    return lambda values: predicate(values.get(field_name))


def _text(name: str, limit: int, message: Optional[str] = None, **kw) -> FieldRule:
    msg = message or f"Die Angabe darf nicht länger als {limit} Zeichen sein."
    return FieldRule(name, str, checks=(_max_len(limit, msg),), **kw)


def _flag(name: str) -> FieldRule:
    return FieldRule(name, bool)


BOAT_VIEWPOINTS = {
    options.SightingFrom.SAILBOAT,
    options.SightingFrom.MOTORBOAT,
    options.SightingFrom.FERRY,
}

_lat_msg = "Der Wert muss zwischen 53° und 56° liegen (Ostseebereich)"
_lon_msg = "Der Wert muss zwischen 9° und 15° liegen (Ostseebereich)"
_has_position = _when("has_position", lambda v: v is not False)
_is_dead = _when("is_dead", lambda v: v is True)

RULES: tuple[FieldRule, ...] = (
    # Position & Zeit
    _flag("has_position"),
    FieldRule("latitude", float, required=_has_position,
              required_message="GPS-Position: Breitengrad fehlt",
              checks=(_between(53, 56, _lat_msg),), depends_on=("has_position",)),
    FieldRule("longitude", float, required=_has_position,
              required_message="GPS-Position: Längengrad fehlt",
              checks=(_between(9, 15, _lon_msg),), depends_on=("has_position",)),
    _text("waterway", 255, "Der Name ist zu lang (maximal 255 Zeichen)"),
    _text("sea_mark", 255, "Der Name ist zu lang (maximal 255 Zeichen)"),
    FieldRule("sighting_date", date, required=True,
              required_message="Wann war die Sichtung? Datum erforderlich",
              invalid_message="Ungültiges Datum",
              checks=((lambda v, _: v <= date.today(),
                       "Das Datum liegt in der Zukunft - bitte korrigieren Sie es"),)),
    FieldRule("sighting_time", str,
              checks=((lambda v, _: bool(TIME_RE.match(v)),
                       "Ungültige Uhrzeit - bitte Format 14:30 verwenden"),)),

    # Sichtungsdetails
    FieldRule("species", int, required=True,
              required_message="Bitte wählen Sie eine Tierart aus",
              invalid_message="Bitte wählen Sie eine Tierart aus",
              checks=(_option(options.SPECIES, "Diese Tierart ist nicht verfügbar"),)),
    FieldRule("total_count", int, required=True,
              required_message="Wie viele Tiere haben Sie gesehen?",
              checks=((lambda v, _: v >= 0, "Die Anzahl muss 0 oder höher sein"),
                      (lambda v, _: v <= 15, "Bei mehr als 15 Tieren bitte 15 eintragen"))),
    FieldRule("juvenile_count", int,
              checks=((lambda v, _: v >= 0, "Die Anzahl muss 0 oder höher sein"),
                      (lambda v, _: v <= 15, "Bei mehr als 15 bitte 15 eintragen"),
                      (lambda v, values: not isinstance(values.get("total_count"), int)
                       or v <= values["total_count"],
                       "Es können nicht mehr Jungtiere als Tiere insgesamt sein")),
              depends_on=("total_count",)),
    FieldRule("distance", int, required=True,
              required_message="Bitte geben Sie eine Entfernung an.",
              checks=(_option(options.DISTANCE, "Bitte wählen Sie eine gültige Entfernung."),)),
    FieldRule("sighting_from", int, required=True,
              required_message="Bitte geben Sie an, von wo die Sichtung erfolgte.",
              checks=(_option(options.SIGHTING_FROM),)),
    _text("sighting_from_text", 255,
          required=_when("sighting_from", lambda v: v == options.SightingFrom.OTHER),
          required_message="Bitte geben Sie an, von wo die Sichtung erfolgte.",
          depends_on=("sighting_from",)),
    FieldRule("boat_drive", int,
              required=_when("sighting_from", lambda v: v in BOAT_VIEWPOINTS),
              required_message="Bitte geben Sie den Bootsantrieb an.",
              checks=(_option(options.BOAT_DRIVE),), depends_on=("sighting_from",)),
    _text("boat_drive_text", 255,
          required=_when("boat_drive", lambda v: v == options.BoatDrive.OTHER),
          required_message="Bitte beschreiben Sie den Bootsantrieb.",
          depends_on=("boat_drive",)),
    _flag("is_dead"),
    FieldRule("dead_condition", int, required=_is_dead,
              required_message="Bitte geben Sie den Zustand des toten Tieres an.",
              checks=(_option(options.ANIMAL_CONDITION, "Bitte wählen Sie einen gültigen Zustand."),),
              depends_on=("is_dead",)),
    FieldRule("dead_sex", int, required=_is_dead,
              required_message="Bitte geben Sie das Geschlecht des toten Tieres an.",
              checks=(_option(options.SEX, "Bitte wählen Sie ein gültiges Geschlecht."),),
              depends_on=("is_dead",)),
    FieldRule("dead_size", int,
              checks=((lambda v, _: v >= 0, "Die Größe muss positiv sein."),
                      (lambda v, _: v <= 300, "Die Größe darf 300 nicht überschreiten."))),
    _flag("informed_authorities"),
    _flag("dead_phone_contact"),

    # Beobachtungen
    FieldRule("distribution", int, checks=(_option(options.DISTRIBUTION),)),
    _text("distribution_text", 255,
          required=_when("distribution", lambda v: v == options.Distribution.OTHER),
          required_message="Bitte beschreiben Sie die Verteilung.",
          depends_on=("distribution",)),
    FieldRule("behavior", int, checks=(_option(options.ANIMAL_BEHAVIOR),)),
    _text("behavior_text", 255,
          required=_when("behavior", lambda v: v == options.AnimalBehavior.OTHER),
          required_message="Bitte beschreiben Sie das Verhalten.",
          depends_on=("behavior",)),
    _text("other_observations", 1000),
    _text("reaction", 1000, "Die Reaktion darf nicht länger als 1000 Zeichen sein."),
    FieldRule("ship_count", int,
              checks=((lambda v, _: v >= 0, "Die Anzahl der Schiffe muss positiv sein."),
                      (lambda v, _: v <= 15, "Die Anzahl der Schiffe darf 15 nicht überschreiten."))),
    FieldRule("sea_state", int, checks=(_option(options.SEA_STATE),)),
    FieldRule("visibility", int, checks=(_option(options.VISIBILITY),)),
    FieldRule("wind_force", int,
              checks=(_between(0, 12, "Bitte geben Sie eine gültige Windstärke zwischen 0 und 12 an."),)),
    FieldRule("wind_direction", str,
              checks=(_option(options.WIND_DIRECTION, "Bitte wählen Sie eine gültige Windrichtung."),)),
    _text("media_file", 255, "Der Pfad/Name darf nicht länger als 255 Zeichen sein."),
    _flag("media_upload"),
    _flag("media_consent"),

    # Kontaktdaten
    _text("first_name", 64, "Der Vorname darf nicht länger als 64 Zeichen sein.",
          required=True, required_message="Bitte geben Sie Ihren Vornamen an."),
    _text("last_name", 64, "Der Nachname darf nicht länger als 64 Zeichen sein.",
          required=True, required_message="Bitte geben Sie Ihren Nachnamen an."),
    FieldRule("email", EmailStr, required=True,
              required_message="Bitte geben Sie Ihre E-Mail-Adresse an.",
              invalid_message="Bitte geben Sie eine gültige E-Mail-Adresse an.",
              checks=(_max_len(64, "Die E-Mail-Adresse darf nicht länger als 64 Zeichen sein."),)),
    _text("phone", 64, "Die Telefonnummer darf nicht länger als 64 Zeichen sein."),
    _text("street", 64, "Die Straße darf nicht länger als 64 Zeichen sein."),
    _text("zip_code", 5, "Die Postleitzahl darf nicht länger als 5 Zeichen sein."),
    _text("city", 64, "Der Ort darf nicht länger als 64 Zeichen sein."),
    _text("ship_name", 64, "Der Schiffsname darf nicht länger als 64 Zeichen sein."),
    _text("home_port", 64, "Der Heimathafen darf nicht länger als 64 Zeichen sein."),
    _text("boat_type", 64, "Der Bootstyp darf nicht länger als 64 Zeichen sein."),
    _flag("name_consent"),
    _flag("ship_name_consent"),
    _text("notes", 1000, "Die Anmerkungen dürfen nicht länger als 1000 Zeichen sein."),
    FieldRule("privacy_consent", bool, required=True,
              required_message="Bitte stimmen Sie der Datenschutzerklärung zu.",
              checks=((lambda v, _: v is True, "Bitte stimmen Sie der Datenschutzerklärung zu."),)),
    _flag("persistent_data_consent"),
)


@dataclass
class ValidationSchema:
    rules: tuple[FieldRule, ...] = RULES
    steps: tuple[FormStep, ...] = FORM_STEPS
    _by_name: dict = field(init=False, repr=False)

    def __post_init__(self):
        self._by_name = {r.name: r for r in self.rules}

    @property
    def field_names(self) -> list[str]:
        return list(self._by_name)

    def rule(self, name: str) -> FieldRule:
        return self._by_name[name]

    def _coerce_all(self, values: dict, names: Iterable[str]) -> tuple[dict, dict]:
        coerced: dict = {}
        failed: dict = {}
        for name in names:
            raw = values.get(name)
            if is_empty(raw):
                continue
            r = self._by_name[name]
            try:
                coerced[name] = r.coerce(raw)
            except PydanticValidationError:
                failed[name] = r.invalid_message
        return coerced, failed

    def validate(self, values: dict, fields: Optional[Iterable[str]] = None) -> list[FieldError]:
        names = [n for n in (fields if fields is not None else self._by_name) if n in self._by_name]
        scope = set(names)
        for n in names:
            scope.update(self._by_name[n].depends_on)
        coerced, failed = self._coerce_all(values, [n for n in self._by_name if n in scope])

        errors: list[FieldError] = []
        for name in names:
            r = self._by_name[name]
            if name in failed:
                errors.append(FieldError(name, failed[name]))
                continue
            if name not in coerced:
                if r.is_required(coerced):
                    errors.append(FieldError(name, r.required_message))
                continue
            value = coerced[name]
            for check, message in r.checks:
                if not check(value, coerced):
                    errors.append(FieldError(name, message))
                    break
        return errors

    def validate_step(self, step: Union[int, FormStep], values: dict) -> list[FieldError]:
        if isinstance(step, int):
            step = self.steps[step]
        return self.validate(values, step.fields)

    def validate_full(self, values: dict) -> list[FieldError]:
        return self.validate(values)

    def clean(self, values: dict) -> dict:
        """Coerced values of every known, set and well-typed field."""
        coerced, _ = self._coerce_all(values, self._by_name)
        return {k: (str(v) if self._by_name[k].kind is EmailStr else v) for k, v in coerced.items()}


DEFAULT_SCHEMA = ValidationSchema()


def validate_step(step, values: dict) -> list[FieldError]:
    return DEFAULT_SCHEMA.validate_step(step, values)


def validate_full(values: dict) -> list[FieldError]:
    return DEFAULT_SCHEMA.validate_full(values)
