# backend/ostsee/services/storage/base.py
from datetime import datetime
from typing import Optional, Protocol

from pydantic import BaseModel


class StoredFile(BaseModel):
    id: str
    original_name: str
    file_name: str
    file_path: str
    size: int
    mime_type: str
    url: str
    uploaded_at: datetime
    exif_data: Optional[dict] = None


class FileMetadata(BaseModel):
    size: int
    mime_type: str
    last_modified: datetime


class StorageProvider(Protocol):
    def upload(self, data: bytes, original_name: str, mime_type: str, reference_id: str,
               extract_exif: bool = False) -> StoredFile: ...

    def delete(self, file_path: str) -> None: ...

    def get_url(self, file_path: str) -> str: ...

    def get_metadata(self, file_path: str) -> Optional[FileMetadata]: ...

    def list(self, prefix: Optional[str] = None) -> list[StoredFile]: ...

    def exists(self, file_path: str) -> bool: ...
