"""Authentication for the web app: auth cookie, edge gate, page-level gate.

Authorization is two-phase:

1. ``has_token`` runs in ``AdminGateMiddleware`` for every path under the
   admin prefix. It only checks that the cookie decodes to a non-empty token
   and never touches the database. Expired or revoked tokens that are still
   present pass this phase.
2. ``require_auth`` is a dependency on every admin route. It looks the
   session up and redirects to the login entry point unless it is still
   live. No state-changing admin operation runs without it.
"""
from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from typing import Optional

from fastapi import Depends, HTTPException, Request, Response, status
from fastapi.responses import RedirectResponse
from starlette.middleware.base import BaseHTTPMiddleware

import config
from landing.errors import Unauthorized
from landing.models import Database
from landing.schemas import UserRead
from landing.services.sessions import get_session_user, validate_session
from web.api.utils import get_database, login_url

logger = logging.getLogger("landing.auth")

COOKIE_MAX_AGE = config.SESSION_EXPIRE_DAYS * 24 * 60 * 60


@dataclass(frozen=True)
class AuthCookie:
    token: str
    user_id: Optional[str] = None  # only present in the legacy composite form


def encode_auth_cookie(response: Response, token: str) -> Response:
    """Set the auth cookie. The opaque token is the only value the client holds."""
    response.set_cookie(
        key=config.AUTH_COOKIE_NAME,
        value=token,
        httponly=True,
        secure=config.IS_PRODUCTION,
        samesite="lax",
        path="/",
        max_age=COOKIE_MAX_AGE,
    )
    return response


def clear_auth_cookie(response: Response) -> Response:
    response.set_cookie(
        key=config.AUTH_COOKIE_NAME,
        value="",
        httponly=True,
        secure=config.IS_PRODUCTION,
        samesite="lax",
        path="/",
        max_age=0,
    )
    return response


def decode_auth_cookie(raw: Optional[str]) -> Optional[AuthCookie]:
    """Parse the cookie value. Anything malformed means "no session"."""
    if not raw or not isinstance(raw, str):
        return None
    raw = raw.strip()
    if not raw:
        return None
    if not raw.startswith("{"):
        return AuthCookie(token=raw)
    # Composite form: {"token": "...", "userId": "..."}
    try:
        payload = json.loads(raw)
    except ValueError:
        return None
    if not isinstance(payload, dict):
        return None
    token = payload.get("token")
    if not isinstance(token, str) or not token.strip():
        return None
    user_id = payload.get("userId")
    return AuthCookie(token=token.strip(), user_id=str(user_id) if user_id is not None else None)


def read_auth_cookie(request: Request) -> Optional[AuthCookie]:
    return decode_auth_cookie(request.cookies.get(config.AUTH_COOKIE_NAME))


def has_token(request: Request) -> bool:
    """Edge check: a token is present. No store lookup."""
    return read_auth_cookie(request) is not None


def _is_admin_path(path: str) -> bool:
    prefix = config.ADMIN_PATH_PREFIX.rstrip("/")
    return path == prefix or path.startswith(prefix + "/")


class AdminGateMiddleware(BaseHTTPMiddleware):
    """Redirect admin requests without an auth token to the login entry point."""

    async def dispatch(self, request, call_next):
        if _is_admin_path(request.url.path) and not has_token(request):
            logger.debug("No auth token for %s, redirecting to login", request.url.path)
            return RedirectResponse(login_url(request.url.path), status_code=status.HTTP_307_TEMPORARY_REDIRECT)
        return await call_next(request)


async def session_valid(request: Request, database: Database) -> bool:
    """Full check: the cookie's session exists, is unexpired and matches any user id it names."""
    cookie = read_auth_cookie(request)
    if cookie is None:
        return False
    return await validate_session(database, cookie.token, cookie.user_id)


async def get_current_user(
    request: Request,
    database: Database = Depends(get_database),
) -> Optional[UserRead]:
    """Return the current user from the session cookie, or None if not authenticated."""
    if not await session_valid(request, database):
        return None
    return await get_session_user(database, read_auth_cookie(request).token)


async def require_auth(
    request: Request,
    user: Optional[UserRead] = Depends(get_current_user),
) -> UserRead:
    """Require a valid session. Redirects to login otherwise."""
    if not user:
        logger.info("Invalid or expired session for %s", request.url.path)
        raise Unauthorized(redirect_from=request.url.path)
    return user


async def require_user(
    user: Optional[UserRead] = Depends(get_current_user),
) -> UserRead:
    """Require a valid session on JSON endpoints. Raises 401 instead of redirecting."""
    if not user:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Not authenticated")
    return user
