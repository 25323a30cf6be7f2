# backend/ostsee/models/sighting.py
from sqlalchemy import Integer, Column, String, Text, DateTime, Float, Boolean, SmallInteger
from sqlalchemy.orm import relationship
from .base import Base

# column names follow the legacy "sichtungen" table
class Sighting(Base):
    __tablename__ = "sichtungen"
    id = Column(Integer, primary_key=True)
    reference_id = Column("referenz_id", String(64), nullable=True, index=True)
    created = Column(DateTime, nullable=False)

    # Position & Zeit
    latitude = Column("gps_breite", Float, nullable=True)
    longitude = Column("gps_laenge", Float, nullable=True)
    waterway = Column("fahrwasser", Text, nullable=True)
    sea_mark = Column("seezeichen", Text, nullable=True)
    sighting_date = Column("sichtungsdatum", DateTime, nullable=False, index=True)

    # Tier
    species = Column("tierart", SmallInteger, nullable=False, default=0)
    total_count = Column("anzahl_gesamt", Integer, nullable=False, default=0)
    juvenile_count = Column("anzahl_jung", Integer, nullable=False, default=0)
    distance = Column("entfernung", Integer, nullable=False, default=0)
    sighting_from = Column("vonwo", Integer, nullable=False, default=0)
    sighting_from_text = Column("vonwo_text", Text, nullable=True)
    boat_drive = Column("bootsantrieb", Integer, nullable=False, default=0)
    boat_drive_text = Column("bootsantrieb_text", Text, nullable=True)
    is_dead = Column("totfund", Boolean, nullable=False, default=False)
    dead_condition = Column("totfund_zustand", SmallInteger, nullable=False, default=0)
    dead_sex = Column("totfund_geschlecht", SmallInteger, nullable=False, default=0)
    dead_size = Column("totfund_groesse", Integer, nullable=True)
    dead_phone_contact = Column("totfund_telefon", Boolean, nullable=False, default=False)
    informed_authorities = Column("behoerden_informiert", Boolean, nullable=False, default=False)

    # Beobachtungen
    distribution = Column("verteilung", Integer, nullable=False, default=0)
    distribution_text = Column("verteilung_text", Text, nullable=True)
    behavior = Column("verhalten", Integer, nullable=False, default=0)
    behavior_text = Column("verhalten_text", Text, nullable=True)
    reaction = Column("reaktion", Text, nullable=True)
    other_observations = Column("sonstige_auffaelligkeiten", Text, nullable=True)
    ship_count = Column("anzahl_schiffe", Integer, nullable=True)
    sea_state = Column("seegang", Integer, nullable=False, default=0)
    visibility = Column("sichtweite", Integer, nullable=False, default=0)
    wind_force = Column("windstaerke", Integer, nullable=True)
    wind_direction = Column("windrichtung", String(4), nullable=True)
    media_file = Column("aufnahme", String(255), nullable=True)
    media_upload = Column("aufnahme_hochladen", Boolean, nullable=False, default=False)
    media_consent = Column("aufnahme_einverstaendnis", Boolean, nullable=False, default=False)

    # Kontakt
    first_name = Column("vorname", String(64), nullable=True)
    last_name = Column("name", String(64), nullable=True)
    email = Column(String(64), nullable=True)
    phone = Column("telefon", String(64), nullable=True)
    street = Column("strasse", String(64), nullable=True)
    zip_code = Column("plz", String(5), nullable=True)
    city = Column("ort", String(64), nullable=True)
    ship_name = Column("schiffsname", String(64), nullable=True)
    home_port = Column("heimathafen", String(64), nullable=True)
    boat_type = Column("bootstyp", String(64), nullable=True)
    name_consent = Column("namensnennung", Boolean, nullable=False, default=False)
    ship_name_consent = Column("schiffnamensnennung", Boolean, nullable=False, default=False)
    privacy_consent = Column("datenschutz_einverstaendnis", Boolean, nullable=False, default=False)
    notes = Column("bemerkungen", Text, nullable=True)

    # Verwaltung
    entry_channel = Column("eingangskanal", Integer, nullable=False, default=0)
    verified = Column("geprueft", Boolean, nullable=False, default=False, index=True)
    approved_at = Column("freigegeben_am", DateTime, nullable=True)
    internal_comment = Column("kommentar_intern", Text, nullable=True)
    in_baltic_sea = Column("ostsee", Boolean, nullable=False, default=False)
    in_chart_area = Column("ostsee_geo", Boolean, nullable=False, default=False)

    files = relationship("SightingFile", back_populates="sighting",
                         cascade="all, delete-orphan")
