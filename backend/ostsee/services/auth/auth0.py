# backend/ostsee/services/auth/auth0.py
"""Auth0 authorization-code login and the signed session cookie."""
import secrets
from datetime import datetime, timedelta, timezone
from typing import Optional
from urllib.parse import urlencode

import jwt
import requests
from pydantic import BaseModel, Field

from ostsee.config import Settings
from ostsee.exceptions import AuthenticationError
from ostsee.logging_config import get_logger

logger = get_logger(__name__)

SESSION_ALGORITHM = "HS256"


class AuthUser(BaseModel):
    sub: str
    email: Optional[str] = None
    name: Optional[str] = None
    roles: list[str] = Field(default_factory=list)

    def has_any_role(self, roles) -> bool:
        return any(r in self.roles for r in roles)


def new_state() -> str:
    return secrets.token_urlsafe(24)


def callback_url(settings: Settings, return_url: str = "/") -> str:
    base = settings.public_site_url.rstrip("/")
    return f"{base}/api/auth/callback?{urlencode({'returnUrl': return_url})}"


def login_url(settings: Settings, state: str, return_url: str = "/") -> str:
    params = {
        "response_type": "code",
        "client_id": settings.auth0_client_id,
        "redirect_uri": callback_url(settings, return_url),
        "scope": "openid profile email",
        "audience": settings.api_audience,
        "state": state,
    }
    return f"{settings.auth0_base_url}/authorize?{urlencode(params)}"


def logout_url(settings: Settings) -> str:
    params = {"client_id": settings.auth0_client_id, "returnTo": settings.public_site_url}
    return f"{settings.auth0_base_url}/v2/logout?{urlencode(params)}"


def exchange_code(settings: Settings, code: str, redirect_uri: str,
                  session: Optional[requests.Session] = None) -> dict:
    http = session or requests
    try:
        resp = http.post(
            f"{settings.auth0_base_url}/oauth/token",
            json={
                "grant_type": "authorization_code",
                "client_id": settings.auth0_client_id,
                "client_secret": settings.auth0_client_secret,
                "code": code,
                "redirect_uri": redirect_uri,
            },
            timeout=settings.api_timeout_seconds,
        )
        resp.raise_for_status()
        return resp.json()
    except (requests.RequestException, ValueError) as exc:
        logger.error("Auth0 token exchange failed: %s", exc)
        raise AuthenticationError("Anmeldung fehlgeschlagen") from exc


class TokenVerifier:
    """Checks RS256 tokens against the tenant's JWKS."""

    def __init__(self, settings: Settings, jwks_client: Optional[jwt.PyJWKClient] = None):
        self.settings = settings
        self.jwks_client = jwks_client or jwt.PyJWKClient(
            f"{settings.auth0_base_url}/.well-known/jwks.json"
        )

    def decode(self, token: str, audience: str) -> dict:
        try:
            key = self.jwks_client.get_signing_key_from_jwt(token).key
            return jwt.decode(
                token,
                key,
                algorithms=["RS256"],
                audience=audience,
                issuer=f"{self.settings.auth0_base_url}/",
            )
        except jwt.PyJWTError as exc:
            logger.warning("Token rejected: %s", exc)
            raise AuthenticationError("Ungültiges Token") from exc

    def user_from_tokens(self, tokens: dict) -> AuthUser:
        id_token = tokens.get("id_token")
        if not id_token:
            raise AuthenticationError("Kein ID-Token erhalten")
        claims = self.decode(id_token, self.settings.auth0_client_id)
        roles: list[str] = []
        access_token = tokens.get("access_token")
        if access_token:
            access = self.decode(access_token, self.settings.api_audience)
            roles = list(access.get(self.settings.roles_claim) or [])
        return AuthUser(sub=claims["sub"], email=claims.get("email"),
                        name=claims.get("name"), roles=roles)


def create_session_token(settings: Settings, user: AuthUser) -> str:
    now = datetime.now(timezone.utc)
    payload = {
        "sub": user.sub,
        "email": user.email,
        "name": user.name,
        "roles": user.roles,
        "iat": now,
        "exp": now + timedelta(seconds=settings.session_max_age_seconds),
    }
    return jwt.encode(payload, settings.session_secret, algorithm=SESSION_ALGORITHM)


def read_session_token(settings: Settings, token: Optional[str]) -> Optional[AuthUser]:
    if not token:
        return None
    try:
        claims = jwt.decode(token, settings.session_secret, algorithms=[SESSION_ALGORITHM])
    except jwt.PyJWTError as exc:
        logger.info("Session cookie rejected: %s", exc)
        return None
    return AuthUser(sub=claims["sub"], email=claims.get("email"),
                    name=claims.get("name"), roles=claims.get("roles") or [])
