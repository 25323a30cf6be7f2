# backend/ostsee/report/draft.py
"""Persistent storage of an in-progress sighting report.

The store sits on top of a small key/value backend so it can be swapped for
tests. Every write goes through a per-key lock and is complete before the call
returns; a draft that cannot be parsed back is dropped instead of breaking the
form.
"""
import json
import os
import tempfile
import threading
from contextlib import contextmanager
from datetime import datetime, timezone
from pathlib import Path
from typing import Callable, Iterator, Optional, Protocol

from pydantic import ValidationError as PydanticValidationError

from ostsee.logging_config import get_logger
from ostsee.schemas.report import SightingDraft
from ostsee.report.steps import CONTACT_FIELDS

logger = get_logger(__name__)

KEY_PREFIX = "sichtungen_"
FORM_DATA_KEY = "form_data"
CONTACT_KEY = "user_contact_data"


class DraftBackend(Protocol):
    def get(self, key: str) -> Optional[str]: ...

    def set(self, key: str, value: str) -> None: ...

    def delete(self, key: str) -> None: ...

    def lock(self, key: str): ...


class _KeyLocks:
    def __init__(self):
        self._guard = threading.Lock()
        self._locks: dict[str, threading.RLock] = {}

    @contextmanager
    def __call__(self, key: str) -> Iterator[None]:
        with self._guard:
            lk = self._locks.setdefault(key, threading.RLock())
        with lk:
            yield


class MemoryDraftBackend:
    def __init__(self):
        self._data: dict[str, str] = {}
        self.lock = _KeyLocks()

    def get(self, key: str) -> Optional[str]:
        return self._data.get(key)

    def set(self, key: str, value: str) -> None:
        self._data[key] = value

    def delete(self, key: str) -> None:
        self._data.pop(key, None)

    def keys(self) -> list[str]:
        return list(self._data)


class FileDraftBackend:
    """One JSON file per key; replaced atomically on write."""

    def __init__(self, directory: Path):
        self.directory = Path(directory)
        self.directory.mkdir(parents=True, exist_ok=True)
        self.lock = _KeyLocks()

    def _path(self, key: str) -> Path:
        safe = "".join(c if c.isalnum() or c in "-_" else "_" for c in key)
        return self.directory / f"{safe}.json"

    def get(self, key: str) -> Optional[str]:
        path = self._path(key)
        if not path.exists():
            return None
        return path.read_text(encoding="utf-8")

    def set(self, key: str, value: str) -> None:
        path = self._path(key)
        fd, tmp = tempfile.mkstemp(dir=str(self.directory), prefix=".draft-", suffix=".tmp")
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                f.write(value)
                f.flush()
                os.fsync(f.fileno())
            os.replace(tmp, path)
        except OSError:
            if os.path.exists(tmp):
                os.unlink(tmp)
            raise

    def delete(self, key: str) -> None:
        self._path(key).unlink(missing_ok=True)


class DraftStore:
    def __init__(self, backend: DraftBackend, key: str = ""):
        self.backend = backend
        self.key = key
        self._draft_key = f"{KEY_PREFIX}{key}{'_' if key else ''}{FORM_DATA_KEY}"
        self._contact_key = f"{KEY_PREFIX}{key}{'_' if key else ''}{CONTACT_KEY}"

    def _read(self) -> SightingDraft:
        raw = self.backend.get(self._draft_key)
        if raw is None:
            return SightingDraft()
        try:
            return SightingDraft.model_validate_json(raw)
        except (PydanticValidationError, ValueError):
            logger.warning("Discarding unreadable draft %s", self._draft_key)
            self.backend.delete(self._draft_key)
            return SightingDraft()

    def _write(self, draft: SightingDraft) -> None:
        draft.updated_at = datetime.now(timezone.utc)
        self.backend.set(self._draft_key, draft.model_dump_json())

    def load(self) -> SightingDraft:
        with self.backend.lock(self._draft_key):
            return self._read()

    def modify(self, fn: Callable[[SightingDraft], object]) -> SightingDraft:
        """Read, apply ``fn`` and write back under the draft's lock."""
        with self.backend.lock(self._draft_key):
            draft = self._read()
            fn(draft)
            self._write(draft)
            return draft

    def update(self, values: dict) -> SightingDraft:
        return self.modify(lambda d: d.values.update(values))

    def save(self, draft: SightingDraft) -> None:
        with self.backend.lock(self._draft_key):
            self._write(draft)

    def clear(self) -> None:
        with self.backend.lock(self._draft_key):
            self.backend.delete(self._draft_key)

    # contact data survives clear() when the reporter asked for it
    def remember_contact(self, values: dict) -> None:
        contact = {k: values[k] for k in CONTACT_FIELDS if k in values}
        with self.backend.lock(self._contact_key):
            self.backend.set(self._contact_key, json.dumps(contact))

    def remembered_contact(self) -> dict:
        raw = self.backend.get(self._contact_key)
        if raw is None:
            return {}
        try:
            data = json.loads(raw)
        except ValueError:
            logger.warning("Discarding unreadable contact data %s", self._contact_key)
            self.backend.delete(self._contact_key)
            return {}
        return data if isinstance(data, dict) else {}

    def forget_contact(self) -> None:
        with self.backend.lock(self._contact_key):
            self.backend.delete(self._contact_key)

    def load_with_contact(self) -> SightingDraft:
        """Draft for display; a fresh draft is prefilled with remembered contact data."""
        draft = self.load()
        if draft.is_empty:
            draft.values.update(self.remembered_contact())
        return draft
