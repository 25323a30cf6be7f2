# backend/ostsee/report/submit.py
"""Sending a finished draft to the sightings backend."""
import uuid
from typing import Optional, Protocol

import requests
from pydantic_core import to_jsonable_python
from sqlalchemy.exc import SQLAlchemyError

from ostsee.exceptions import DraftValidationError, OstseeError, SubmissionError
from ostsee.logging_config import get_logger
from ostsee.report.draft import DraftStore
from ostsee.report.validation import DEFAULT_SCHEMA, ValidationSchema
from ostsee.schemas.report import SightingDraft, UploadedFileRef
from ostsee.services.storage.base import StorageProvider

logger = get_logger(__name__)

FALLBACK_MESSAGE = "Die Sichtung konnte nicht gespeichert werden"


class SightingBackend(Protocol):
    def create(self, payload: dict) -> dict: ...


def new_reference_id() -> str:
    return uuid.uuid4().hex


def serialize_draft(draft: SightingDraft, schema: ValidationSchema = DEFAULT_SCHEMA) -> dict:
    payload = to_jsonable_python(schema.clean(draft.values))
    payload["reference_id"] = draft.reference_id
    payload["uploaded_files"] = [
        UploadedFileRef(
            file_path=m.file_path,
            original_name=m.file_name,
            file_name=m.stored_name,
            mime_type=m.mime_type,
            size=m.size,
            url=m.url,
            uploaded_at=m.uploaded_at,
            exif_data=m.exif.model_dump(mode="json", exclude_none=True) or None,
        ).model_dump(mode="json")
        for m in draft.media if m.is_stored
    ]
    return payload


class HttpSightingBackend:
    """POSTs the payload as JSON to the public sightings endpoint."""

    def __init__(self, url: str, timeout: int = 30, session: Optional[requests.Session] = None):
        self.url = url
        self.timeout = timeout
        self.session = session or requests.Session()

    def create(self, payload: dict) -> dict:
        try:
            resp = self.session.post(self.url, json=payload, timeout=self.timeout)
        except requests.RequestException as exc:
            logger.error("Submitting to %s failed: %s", self.url, exc)
            return {"success": False}
        try:
            body = resp.json()
        except ValueError:
            logger.error("Non-JSON answer from %s (HTTP %s)", self.url, resp.status_code)
            return {"success": False}
        if not isinstance(body, dict):
            return {"success": False}
        if not resp.ok:
            body["success"] = False
        return body


class RepositoryBackend:
    """Stores the sighting in-process, with a session of its own."""

    def __init__(self, session_factory):
        self.session_factory = session_factory

    def create(self, payload: dict) -> dict:
        # imported here: the repository pulls in the ORM models
        from ostsee.services.sightings.repository import create_sighting

        db = self.session_factory()
        try:
            sighting_id = create_sighting(db, payload)
            return {"success": True, "id": sighting_id}
        except OstseeError as exc:
            return {"success": False, "message": exc.message}
        except SQLAlchemyError as exc:
            logger.error("Database error while storing sighting: %s", exc)
            return {"success": False}
        finally:
            db.close()


class SubmissionClient:
    def __init__(self, store: DraftStore, backend: SightingBackend,
                 storage: Optional[StorageProvider] = None,
                 schema: ValidationSchema = DEFAULT_SCHEMA):
        self.store = store
        self.backend = backend
        self.storage = storage
        self.schema = schema

    def _prepare(self, draft: SightingDraft, uploaded: list) -> None:
        if draft.reference_id is None:
            draft.reference_id = new_reference_id()
        for m in draft.media:
            if m.is_stored:
                continue
            if self.storage is None:
                logger.warning("No storage configured, %s is not uploaded", m.file_name)
                continue
            stored = self.storage.upload(m.content, m.file_name, m.mime_type, draft.reference_id)
            uploaded.append(stored.file_path)
            m.file_path = stored.file_path
            m.stored_name = stored.file_name
            m.url = stored.url
            m.uploaded_at = stored.uploaded_at
            m.content_b64 = None

    def _discard(self, paths: list) -> None:
        for path in paths:
            try:
                self.storage.delete(path)
            except (OstseeError, OSError) as exc:
                logger.warning("Could not remove uploaded file %s: %s", path, exc)

    def submit(self) -> int:
        draft = self.store.load()
        errors = self.schema.validate_full(draft.values)
        if errors:
            raise DraftValidationError(errors=errors)

        # the stored draft only changes once the backend accepted the sighting
        prepared = draft.model_copy(deep=True)
        uploaded = []
        try:
            self._prepare(prepared, uploaded)
            payload = serialize_draft(prepared, self.schema)
            result = self.backend.create(payload) or {}
        except OstseeError as exc:
            self._discard(uploaded)
            logger.error("Submission of %s failed: %s", prepared.reference_id, exc.message)
            raise SubmissionError(exc.message or FALLBACK_MESSAGE,
                                  context={"reference_id": prepared.reference_id}) from exc

        if not result.get("success"):
            self._discard(uploaded)
            message = result.get("message") or FALLBACK_MESSAGE
            logger.warning("Submission of %s rejected: %s", prepared.reference_id, message)
            raise SubmissionError(message, context={"reference_id": prepared.reference_id})

        sighting_id = result.get("id")
        if self.schema.clean(draft.values).get("persistent_data_consent"):
            self.store.remember_contact(draft.values)
        else:
            self.store.forget_contact()
        self.store.clear()
        logger.info("Sighting %s submitted as #%s", prepared.reference_id, sighting_id)
        return sighting_id
