# backend/ostsee/models/sighting_file.py
from sqlalchemy import Integer, BigInteger, Column, ForeignKey, String, DateTime, JSON
from sqlalchemy.orm import relationship
from .base import Base

class SightingFile(Base):
    __tablename__ = "sichtungen_dateien"
    id = Column(Integer, primary_key=True)
    sighting_id = Column("sichtung_id", Integer, ForeignKey("sichtungen.id", ondelete="CASCADE"),
                         nullable=False, index=True)
    reference_id = Column("referenz_id", String(64), nullable=False, index=True)
    original_name = Column(String(255), nullable=False)
    file_name = Column("datei_name", String(255), nullable=False)
    file_path = Column("datei_pfad", String(500), nullable=False)
    url = Column(String(500), nullable=True)
    mime_type = Column("mime_typ", String(100), nullable=False)
    size = Column(BigInteger, nullable=False)
    exif_data = Column(JSON, nullable=True)  # ExifRecord as dict
    uploaded_at = Column("hochgeladen_am", DateTime, nullable=False)
    created_at = Column("erstellt_am", DateTime, nullable=False)

    sighting = relationship("Sighting", back_populates="files")
