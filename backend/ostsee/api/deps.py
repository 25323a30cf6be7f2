# backend/ostsee/api/deps.py
from typing import Optional

from fastapi import Depends, Request

from ostsee.config import Settings, get_settings
from ostsee.exceptions import AuthenticationError, AuthorizationError
from ostsee.services.auth.auth0 import AuthUser, read_session_token


def get_current_user(request: Request, settings: Settings = Depends(get_settings)) -> Optional[AuthUser]:
    return read_session_token(settings, request.cookies.get(settings.session_cookie_name))


def require_roles(*roles: str):
    """Dependency that lets only users holding one of ``roles`` through."""

    def _check(user: Optional[AuthUser] = Depends(get_current_user)) -> AuthUser:
        if user is None:
            raise AuthenticationError()
        if not user.has_any_role(roles):
            raise AuthorizationError()
        return user

    return _check


def require_admin(user: Optional[AuthUser] = Depends(get_current_user),
                  settings: Settings = Depends(get_settings)) -> AuthUser:
    return require_roles(settings.admin_role)(user)
