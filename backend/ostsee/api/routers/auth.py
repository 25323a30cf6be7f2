# backend/ostsee/api/routers/auth.py
from typing import Optional

from fastapi import APIRouter, Depends, Query, Request
from fastapi.responses import RedirectResponse

from ostsee.config import Settings, get_settings
from ostsee.exceptions import AuthorizationError
from ostsee.logging_config import get_logger
from ostsee.services.auth import auth0

logger = get_logger(__name__)

router = APIRouter()


def get_token_verifier(settings: Settings = Depends(get_settings)) -> auth0.TokenVerifier:
    return auth0.TokenVerifier(settings)


def _safe_return(url: Optional[str]) -> str:
    # only relative targets, no open redirect
    if not url or not url.startswith("/") or url.startswith("//"):
        return "/"
    return url


@router.get("/login")
def login(return_url: Optional[str] = Query(None, alias="returnUrl"),
          settings: Settings = Depends(get_settings)):
    state = auth0.new_state()
    resp = RedirectResponse(auth0.login_url(settings, state, _safe_return(return_url)), status_code=302)
    resp.set_cookie(settings.csrf_cookie_name, state, httponly=True, samesite="lax",
                    secure=settings.public_site_url.startswith("https"), max_age=600, path="/")
    return resp


@router.get("/callback")
def callback(request: Request, code: str, state: str,
             return_url: Optional[str] = Query(None, alias="returnUrl"),
             settings: Settings = Depends(get_settings),
             verifier: auth0.TokenVerifier = Depends(get_token_verifier)):
    if state != request.cookies.get(settings.csrf_cookie_name):
        logger.warning("OAuth state mismatch")
        raise AuthorizationError("Ungültiger Anmeldestatus")
    target = _safe_return(return_url)
    tokens = auth0.exchange_code(settings, code, auth0.callback_url(settings, target))
    user = verifier.user_from_tokens(tokens)
    logger.info("Login of %s with roles %s", user.email, user.roles)

    resp = RedirectResponse(target, status_code=302)
    resp.delete_cookie(settings.csrf_cookie_name, path="/")
    resp.set_cookie(settings.session_cookie_name, auth0.create_session_token(settings, user),
                    httponly=True, samesite="lax", secure=settings.public_site_url.startswith("https"),
                    max_age=settings.session_max_age_seconds, path="/")
    return resp


@router.get("/logout")
def logout(settings: Settings = Depends(get_settings)):
    resp = RedirectResponse(auth0.logout_url(settings), status_code=302)
    resp.delete_cookie(settings.session_cookie_name, path="/")
    return resp
