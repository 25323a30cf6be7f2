import pytest
import requests

from conftest import valid_values
from ostsee.exceptions import DraftValidationError, StorageError, SubmissionError
from ostsee.models.sighting import Sighting
from ostsee.report.media import MediaPipeline
from ostsee.report.submit import (
    FALLBACK_MESSAGE,
    HttpSightingBackend,
    RepositoryBackend,
    SubmissionClient,
    serialize_draft,
)
from ostsee.schemas.report import ExifRecord
from ostsee.services.storage.local import LocalStorageProvider


class FakeBackend:
    def __init__(self, result):
        self.result = result
        self.payloads = []

    def create(self, payload):
        self.payloads.append(payload)
        return self.result


def test_invalid_draft_is_not_sent(store):
    store.update(valid_values(species=None))
    backend = FakeBackend({"success": True, "id": 1})
    with pytest.raises(DraftValidationError) as info:
        SubmissionClient(store, backend).submit()
    assert info.value.fields == ["species"]
    assert backend.payloads == []
    assert store.load().values["first_name"] == "Erika"


def test_success_clears_draft(store):
    store.update(valid_values())
    backend = FakeBackend({"success": True, "id": 42})
    assert SubmissionClient(store, backend).submit() == 42
    assert store.load().is_empty
    payload = backend.payloads[0]
    assert payload["species"] == 1
    assert payload["sighting_date"] == "2024-06-01"
    assert payload["reference_id"]
    assert payload["uploaded_files"] == []


def test_failure_keeps_draft(store, storage):
    store.update(valid_values())
    MediaPipeline(store, extractor=lambda d: ExifRecord()).ingest("wal.jpg", "image/jpeg", b"jpeg")
    before = store.load().model_dump()
    backend = FakeBackend({"success": False, "message": "db error"})
    with pytest.raises(SubmissionError, match="db error"):
        SubmissionClient(store, backend, storage=storage).submit()
    after = store.load()
    assert after.model_dump() == before
    assert after.reference_id is None
    assert after.media[0].content_b64 is not None


def test_failure_without_message_uses_fallback(store):
    store.update(valid_values())
    with pytest.raises(SubmissionError) as info:
        SubmissionClient(store, FakeBackend({})).submit()
    assert info.value.message == FALLBACK_MESSAGE


def test_rejected_submission_removes_its_uploads(store, storage):
    store.update(valid_values())
    MediaPipeline(store, extractor=lambda d: ExifRecord()).ingest("wal.jpg", "image/jpeg", b"jpeg")
    failing = FakeBackend({"success": False})
    with pytest.raises(SubmissionError):
        SubmissionClient(store, failing, storage=storage).submit()
    first = failing.payloads[0]
    assert len(first["uploaded_files"]) == 1
    assert not storage.exists(first["uploaded_files"][0]["file_path"])
    assert storage.list(first["reference_id"]) == []

    ok = FakeBackend({"success": True, "id": 7})
    assert SubmissionClient(store, ok, storage=storage).submit() == 7
    second = ok.payloads[0]
    assert storage.exists(second["uploaded_files"][0]["file_path"])
    assert len(storage.list(second["reference_id"])) == 1


class SecondUploadFails(LocalStorageProvider):
    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self.uploaded = []

    def upload(self, data, original_name, mime_type, reference_id, extract_exif=False):
        if self.uploaded:
            raise StorageError("Speicher voll")
        stored = super().upload(data, original_name, mime_type, reference_id, extract_exif)
        self.uploaded.append(stored.file_path)
        return stored


def test_storage_failure_becomes_submission_error(store, tmp_path):
    storage = SecondUploadFails(tmp_path / "uploads", "/uploads")
    store.update(valid_values())
    media = MediaPipeline(store, extractor=lambda d: ExifRecord())
    media.ingest("a.jpg", "image/jpeg", b"eins")
    media.ingest("b.jpg", "image/jpeg", b"zwei")
    before = store.load().model_dump()
    backend = FakeBackend({"success": True, "id": 1})
    with pytest.raises(SubmissionError, match="Speicher voll"):
        SubmissionClient(store, backend, storage=storage).submit()
    assert backend.payloads == []
    assert len(storage.uploaded) == 1
    assert not storage.exists(storage.uploaded[0])
    assert store.load().model_dump() == before


def test_contact_remembered_on_consent(store):
    store.update(valid_values(persistent_data_consent=True))
    SubmissionClient(store, FakeBackend({"success": True, "id": 1})).submit()
    assert store.remembered_contact()["email"] == "erika@example.org"
    assert store.load_with_contact().values["first_name"] == "Erika"


def test_contact_forgotten_without_consent(store):
    store.remember_contact({"first_name": "Alt"})
    store.update(valid_values())
    SubmissionClient(store, FakeBackend({"success": True, "id": 1})).submit()
    assert store.remembered_contact() == {}


def test_serialize_draft_drops_unknown_fields(store):
    draft = store.update(valid_values(unexpected="x"))
    assert "unexpected" not in serialize_draft(draft)


def test_repository_backend_stores_row(store, session_factory, db):
    store.update(valid_values())
    sighting_id = SubmissionClient(store, RepositoryBackend(session_factory)).submit()
    row = db.get(Sighting, sighting_id)
    assert row.species == 1
    assert row.first_name == "Erika"
    assert row.sighting_date.hour == 14


class _Resp:
    def __init__(self, status, body):
        self.status_code = status
        self.ok = status < 400
        self._body = body

    def json(self):
        if isinstance(self._body, Exception):
            raise self._body
        return self._body


class _Session:
    def __init__(self, resp=None, exc=None):
        self.resp = resp
        self.exc = exc
        self.calls = []

    def post(self, url, json=None, timeout=None):
        self.calls.append((url, json, timeout))
        if self.exc:
            raise self.exc
        return self.resp


def test_http_backend_passes_body():
    session = _Session(_Resp(201, {"success": True, "id": 3}))
    backend = HttpSightingBackend("http://api/sightings", timeout=5, session=session)
    assert backend.create({"a": 1}) == {"success": True, "id": 3}
    assert session.calls == [("http://api/sightings", {"a": 1}, 5)]


def test_http_backend_error_status():
    backend = HttpSightingBackend("http://x", session=_Session(_Resp(422, {"message": "db error"})))
    assert backend.create({}) == {"message": "db error", "success": False}


def test_http_backend_network_failure():
    backend = HttpSightingBackend("http://x", session=_Session(exc=requests.ConnectionError("down")))
    assert backend.create({}) == {"success": False}
    backend = HttpSightingBackend("http://x", session=_Session(_Resp(500, ValueError("html"))))
    assert backend.create({}) == {"success": False}
