"""Auth API routes: login, logout, current user, user registration."""
from __future__ import annotations

import logging
from typing import Optional

from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse
from pydantic import BaseModel
from pydantic import ValidationError as PydanticValidationError

from landing.errors import InvalidCredentials
from landing.models import Database
from landing.schemas import UserRead
from landing.services.accounts import register_user, verify_credentials
from landing.services.sessions import issue_session, revoke_session
from web.api.utils import get_database
from web.auth import (
    clear_auth_cookie,
    encode_auth_cookie,
    read_auth_cookie,
    require_user,
)

import config

logger = logging.getLogger("landing.api")

router = APIRouter(prefix="/api/auth", tags=["auth"])


class LoginRequest(BaseModel):
    email: Optional[str] = None
    password: Optional[str] = None


async def _read_login_request(request: Request) -> Optional[LoginRequest]:
    """Parse the login body by hand so a missing or non-JSON body is a 400, not a 422."""
    try:
        payload = await request.json()
    except ValueError:
        return None
    if not isinstance(payload, dict):
        return None
    try:
        return LoginRequest.model_validate(payload)
    except PydanticValidationError:
        return None


class CreateUserRequest(BaseModel):
    email: str
    password: str
    name: Optional[str] = None
    role: str = "user"  # user, admin


@router.post("/login")
async def login(request: Request, database: Database = Depends(get_database)):
    """Check credentials, open a session and set the auth cookie."""
    body = await _read_login_request(request)
    if body is None or not body.email or not body.password:
        return JSONResponse({"error": "Email and password are required"}, status_code=400)
    try:
        user = await verify_credentials(database, body.email, body.password)
    except InvalidCredentials as e:
        return JSONResponse({"error": str(e)}, status_code=401)
    issued = await issue_session(database, user.id)
    logger.info("User %s logged in", user.email)
    response = JSONResponse({"user": user.model_dump(mode="json"), "token": issued.token})
    encode_auth_cookie(response, issued.token)
    return response


@router.post("/logout")
async def logout(request: Request, database: Database = Depends(get_database)):
    """Revoke the cookie's session and clear the cookie."""
    if not request.cookies.get(config.AUTH_COOKIE_NAME):
        return JSONResponse({"error": "Token required"}, status_code=400)
    cookie = read_auth_cookie(request)
    if cookie is not None:
        await revoke_session(database, cookie.token)
    response = JSONResponse({"success": True})
    clear_auth_cookie(response)
    return response


@router.get("/me", response_model=UserRead)
async def get_me(user: UserRead = Depends(require_user)):
    """Get current authenticated user."""
    return user


@router.post("/users", response_model=UserRead, status_code=201)
async def create_user(
    body: CreateUserRequest,
    user: UserRead = Depends(require_user),
    database: Database = Depends(get_database),
):
    """Register a new user (any signed-in user; roles are not enforced)."""
    return await register_user(database, body.email, body.password, name=body.name, role=body.role)
