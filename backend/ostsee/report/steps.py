# backend/ostsee/report/steps.py
from dataclasses import dataclass
from typing import Optional


@dataclass(frozen=True)
class FormStep:
    id: str
    title: str
    description: str
    fields: tuple[str, ...]
    optional: bool = False

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "title": self.title,
            "description": self.description,
            "fields": list(self.fields),
            "optional": self.optional,
        }


FORM_STEPS: tuple[FormStep, ...] = (
    FormStep(
        id="location-time",
        title="Position & Zeit",
        description="Wo und wann haben Sie die Tiere gesehen?",
        fields=(
            "has_position", "latitude", "longitude", "waterway", "sea_mark",
            "sighting_date", "sighting_time",
        ),
    ),
    FormStep(
        id="sighting-details",
        title="Sichtungsdetails",
        description="Welche Tiere, wie viele und von wo aus?",
        fields=(
            "species", "total_count", "juvenile_count", "distance",
            "sighting_from", "sighting_from_text", "boat_drive", "boat_drive_text",
            "is_dead", "dead_condition", "dead_sex", "dead_size",
            "informed_authorities", "dead_phone_contact",
        ),
    ),
    FormStep(
        id="observations",
        title="Beobachtungen",
        description="Verhalten, Umweltbedingungen und Medien",
        fields=(
            "distribution", "distribution_text", "behavior", "behavior_text",
            "other_observations", "reaction", "ship_count", "sea_state",
            "visibility", "wind_force", "wind_direction",
            "media_file", "media_upload", "media_consent",
        ),
        optional=True,
    ),
    FormStep(
        id="contact",
        title="Kontaktdaten",
        description="Wie können wir Sie bei Rückfragen erreichen?",
        fields=(
            "first_name", "last_name", "email", "phone", "street", "zip_code",
            "city", "ship_name", "home_port", "boat_type", "name_consent",
            "ship_name_consent", "notes", "privacy_consent",
            "persistent_data_consent",
        ),
    ),
)

# fields remembered between reports when the reporter agrees
CONTACT_FIELDS: tuple[str, ...] = (
    "first_name", "last_name", "email", "phone", "street", "zip_code", "city",
    "ship_name", "home_port", "boat_type", "name_consent", "ship_name_consent",
    "persistent_data_consent",
)


def step_for_field(name: str, steps: tuple[FormStep, ...] = FORM_STEPS) -> Optional[int]:
    for index, step in enumerate(steps):
        if name in step.fields:
            return index
    return None
