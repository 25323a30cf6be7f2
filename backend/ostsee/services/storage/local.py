# backend/ostsee/services/storage/local.py
import uuid
from datetime import datetime, timezone
from pathlib import Path, PurePosixPath
from typing import Optional

from ostsee.exceptions import StorageError
from ostsee.logging_config import get_logger
from ostsee.services.exif.reader import parse_exif
from ostsee.services.storage.base import FileMetadata, StoredFile
from ostsee.services.uploads import guess_mime_type, is_safe_name

logger = get_logger(__name__)


class LocalStorageProvider:
    """Files live under ``base_dir/<reference_id>/<id><ext>``."""

    def __init__(self, base_dir: Path, public_url_base: str = "/uploads"):
        self.base_dir = Path(base_dir)
        self.public_url_base = public_url_base.rstrip("/")

    def _full_path(self, file_path: str) -> Path:
        rel = PurePosixPath(file_path)
        if rel.is_absolute() or ".." in rel.parts:
            raise StorageError("Ungültiger Dateipfad", context={"file_path": file_path})
        return self.base_dir.joinpath(*rel.parts)

    def upload(self, data: bytes, original_name: str, mime_type: str, reference_id: str,
               extract_exif: bool = False) -> StoredFile:
        if not is_safe_name(reference_id):
            raise StorageError("Ungültige Referenz-ID", context={"reference_id": reference_id})
        file_id = uuid.uuid4().hex
        ext = PurePosixPath(original_name).suffix.lower()
        file_name = f"{file_id}{ext}"
        rel = f"{reference_id}/{file_name}"
        full = self._full_path(rel)
        try:
            full.parent.mkdir(parents=True, exist_ok=True)
            full.write_bytes(data)
        except OSError as exc:
            logger.error("Writing %s failed: %s", full, exc)
            raise StorageError(context={"file_path": rel}) from exc

        exif_data = None
        if extract_exif and mime_type.startswith("image/"):
            exif_data = parse_exif(data).model_dump(mode="json", exclude_none=True) or None

        stored = StoredFile(
            id=file_id,
            original_name=original_name,
            file_name=file_name,
            file_path=rel,
            size=len(data),
            mime_type=mime_type,
            url=self.get_url(rel),
            uploaded_at=datetime.now(timezone.utc),
            exif_data=exif_data,
        )
        logger.debug("Stored %s as %s", original_name, rel)
        return stored

    def delete(self, file_path: str) -> None:
        full = self._full_path(file_path)
        if full.exists():
            full.unlink()
            logger.debug("Deleted %s", file_path)
        else:
            logger.warning("File not found for deletion: %s", file_path)

    def get_url(self, file_path: str) -> str:
        return f"{self.public_url_base}/{file_path}"

    def get_metadata(self, file_path: str) -> Optional[FileMetadata]:
        full = self._full_path(file_path)
        if not full.is_file():
            return None
        stat = full.stat()
        return FileMetadata(
            size=stat.st_size,
            mime_type=guess_mime_type(full.name),
            last_modified=datetime.fromtimestamp(stat.st_mtime, tz=timezone.utc),
        )

    def list(self, prefix: Optional[str] = None) -> list[StoredFile]:
        directory = self._full_path(prefix) if prefix else self.base_dir
        if not directory.is_dir():
            return []
        files = []
        for entry in sorted(directory.iterdir()):
            if not entry.is_file():
                continue
            rel = f"{prefix}/{entry.name}" if prefix else entry.name
            stat = entry.stat()
            files.append(StoredFile(
                id=entry.stem or "unknown",
                original_name=entry.name,
                file_name=entry.name,
                file_path=rel,
                size=stat.st_size,
                mime_type=guess_mime_type(entry.name),
                url=self.get_url(rel),
                uploaded_at=datetime.fromtimestamp(stat.st_mtime, tz=timezone.utc),
            ))
        return files

    def exists(self, file_path: str) -> bool:
        return self._full_path(file_path).exists()
