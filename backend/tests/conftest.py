import io
import os
import tempfile

# settings are read at import time by db/main
os.environ.setdefault("DATA_DIR", tempfile.mkdtemp(prefix="ostsee-test-"))
os.environ.setdefault("DRAFT_BACKEND", "memory")
os.environ.setdefault("SESSION_SECRET", "test-secret")
os.environ.setdefault("API_AUDIENCE", "https://api.ostsee.test")

import piexif
import pytest
from fastapi.testclient import TestClient
from PIL import Image
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from ostsee.api.routers import report as report_router
from ostsee.config import get_settings
from ostsee.db import get_db, init_db
from ostsee.main import app
from ostsee.report.draft import DraftStore, MemoryDraftBackend
from ostsee.services.auth.auth0 import AuthUser, create_session_token
from ostsee.services.storage.factory import get_storage_provider
from ostsee.services.storage.local import LocalStorageProvider


def dms(value: float):
    value = abs(value)
    d = int(value)
    m_float = (value - d) * 60
    m = int(m_float)
    s = int(round((m_float - m) * 60 * 1000))
    return [(d, 1), (m, 1), (s, 1000)]


def make_jpeg(gps=None, taken="2024:06:01 14:30:00", make="Canon", model="EOS R6") -> bytes:
    buf = io.BytesIO()
    Image.new("RGB", (16, 12), (20, 60, 120)).save(buf, format="JPEG")
    exif = {"0th": {}, "Exif": {}, "GPS": {}}
    if make:
        exif["0th"][piexif.ImageIFD.Make] = make
    if model:
        exif["0th"][piexif.ImageIFD.Model] = model
    if taken:
        exif["Exif"][piexif.ExifIFD.DateTimeOriginal] = taken
    exif["Exif"][piexif.ExifIFD.ExposureTime] = (1, 250)
    exif["Exif"][piexif.ExifIFD.FNumber] = (28, 10)
    exif["Exif"][piexif.ExifIFD.ISOSpeedRatings] = 400
    if gps:
        lat, lon = gps
        exif["GPS"][piexif.GPSIFD.GPSLatitudeRef] = "N" if lat >= 0 else "S"
        exif["GPS"][piexif.GPSIFD.GPSLatitude] = dms(lat)
        exif["GPS"][piexif.GPSIFD.GPSLongitudeRef] = "E" if lon >= 0 else "W"
        exif["GPS"][piexif.GPSIFD.GPSLongitude] = dms(lon)
    out = io.BytesIO()
    piexif.insert(piexif.dump(exif), buf.getvalue(), out)
    return out.getvalue()


def valid_values(**overrides) -> dict:
    values = {
        "has_position": True,
        "latitude": 54.32,
        "longitude": 10.14,
        "waterway": "Kieler Förde",
        "sighting_date": "2024-06-01",
        "sighting_time": "14:30",
        "species": 1,
        "total_count": 3,
        "juvenile_count": 1,
        "distance": 2,
        "sighting_from": 3,
        "first_name": "Erika",
        "last_name": "Mustermann",
        "email": "erika@example.org",
        "privacy_consent": True,
    }
    values.update(overrides)
    return values


@pytest.fixture
def jpeg_with_gps() -> bytes:
    return make_jpeg(gps=(54.5, 10.25))


@pytest.fixture
def jpeg_without_gps() -> bytes:
    return make_jpeg(gps=None, taken=None)


@pytest.fixture
def draft_backend():
    return MemoryDraftBackend()


@pytest.fixture
def store(draft_backend):
    return DraftStore(draft_backend, "a" * 32)


@pytest.fixture
def storage(tmp_path):
    return LocalStorageProvider(tmp_path / "uploads", "/uploads")


@pytest.fixture
def engine():
    eng = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    init_db(eng)
    yield eng
    eng.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture
def db(session_factory):
    session = session_factory()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def client(session_factory, draft_backend, storage):
    def _get_db():
        session = session_factory()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = _get_db
    app.dependency_overrides[report_router.get_draft_backend] = lambda: draft_backend
    app.dependency_overrides[get_storage_provider] = lambda: storage
    app.dependency_overrides[report_router.get_sighting_backend] = (
        lambda: report_router.RepositoryBackend(session_factory)
    )
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()


def session_cookie(roles) -> dict:
    settings = get_settings()
    user = AuthUser(sub="auth0|tester", email="admin@example.org", name="Tester", roles=list(roles))
    return {settings.session_cookie_name: create_session_token(settings, user)}


@pytest.fixture
def admin_cookies():
    return session_cookie(["admin"])


@pytest.fixture
def user_cookies():
    return session_cookie([])
