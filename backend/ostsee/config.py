# backend/ostsee/config.py
"""Application settings, read from environment variables (and an optional .env).

Usage:
    from ostsee.config import get_settings

    settings = get_settings()
    settings.database_url
"""
from enum import Enum
from functools import lru_cache
from pathlib import Path
from typing import Optional

from pydantic import Field, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from ostsee.exceptions import ConfigurationError

DEFAULT_SESSION_SECRET = "change-me"
MIN_SESSION_SECRET_LENGTH = 32

# backend/ostsee/config.py → ../../.. = <repo root>
REPO_ROOT = Path(__file__).resolve().parents[2]


class Environment(str, Enum):
    DEVELOPMENT = "development"
    TESTING = "testing"
    PRODUCTION = "production"


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        case_sensitive=False,
        extra="ignore",
        str_strip_whitespace=True,
    )

    environment: Environment = Field(default=Environment.DEVELOPMENT)
    log_level: str = Field(default="INFO")

    # Database: DATABASE_URL wins, otherwise sqlite under data_dir
    database_url: Optional[str] = None
    data_dir: Path = Field(default=REPO_ROOT / "data")

    # Uploaded media
    storage_provider: str = Field(default="local")
    upload_dir: Optional[Path] = None
    upload_url_base: str = Field(default="/uploads")

    # Report drafts
    draft_backend: str = Field(default="file")  # file | memory
    draft_dir: Optional[Path] = None
    draft_cookie_name: str = Field(default="sichtungen_session_id")

    # Auth0
    auth0_domain: str = Field(default="")
    auth0_client_id: str = Field(default="")
    auth0_client_secret: str = Field(default="")
    api_audience: str = Field(default="")
    session_secret: str = Field(default=DEFAULT_SESSION_SECRET, min_length=1)
    session_cookie_name: str = Field(default="session")
    csrf_cookie_name: str = Field(default="csrfState")
    session_max_age_seconds: int = Field(default=60 * 60 * 24 * 7, ge=60)
    admin_role: str = Field(default="admin")
    public_site_url: str = Field(default="http://localhost:8000")

    # Optional Baltic Sea polygons (GeoJSON) for the in_baltic_sea flag
    baltic_geojson_path: Optional[Path] = None

    # Remote API for HttpSightingBackend
    sightings_api_url: Optional[str] = None
    api_timeout_seconds: int = Field(default=30, ge=1, le=300)

    @model_validator(mode="after")
    def _check_session_secret(self) -> "Settings":
        # session cookies are signed with this secret, production must set its own
        if self.environment == Environment.PRODUCTION and (
            self.session_secret == DEFAULT_SESSION_SECRET
            or len(self.session_secret) < MIN_SESSION_SECRET_LENGTH
        ):
            raise ConfigurationError(
                f"SESSION_SECRET must be set to at least {MIN_SESSION_SECRET_LENGTH} characters in production"
            )
        return self

    @property
    def sqlalchemy_url(self) -> str:
        if self.database_url:
            return self.database_url
        return f"sqlite:///{self.data_dir / 'app.db'}"

    @property
    def resolved_upload_dir(self) -> Path:
        return self.upload_dir or (self.data_dir / "uploads")

    @property
    def resolved_draft_dir(self) -> Path:
        return self.draft_dir or (self.data_dir / "drafts")

    @property
    def auth0_base_url(self) -> str:
        return f"https://{self.auth0_domain}"

    @property
    def roles_claim(self) -> str:
        return f"{self.api_audience}/roles"


@lru_cache
def get_settings() -> Settings:
    return Settings()
