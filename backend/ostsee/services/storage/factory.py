# backend/ostsee/services/storage/factory.py
from functools import lru_cache

from ostsee.config import Settings, get_settings
from ostsee.exceptions import ConfigurationError
from ostsee.services.storage.base import StorageProvider
from ostsee.services.storage.local import LocalStorageProvider


def create_storage_provider(settings: Settings) -> StorageProvider:
    kind = settings.storage_provider.lower()
    if kind == "local":
        upload_dir = settings.resolved_upload_dir
        upload_dir.mkdir(parents=True, exist_ok=True)
        return LocalStorageProvider(upload_dir, settings.upload_url_base)
    raise ConfigurationError(f"Unknown storage provider type: {settings.storage_provider}")


@lru_cache
def get_storage_provider() -> StorageProvider:
    return create_storage_provider(get_settings())
