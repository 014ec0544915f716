"""Session issuance, validation and revocation."""
from __future__ import annotations

import logging
import secrets
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Optional
from uuid import UUID

from sqlalchemy import delete, select
from sqlalchemy.exc import SQLAlchemyError

import config
from landing.errors import StorageError
from landing.models import Database, Session, User, utcnow
from landing.schemas import UserRead

logger = logging.getLogger("landing.auth")


@dataclass(frozen=True)
class IssuedSession:
    token: str
    expires_at: datetime


def generate_session_token() -> str:
    return secrets.token_urlsafe(32)


def _coerce_user_id(user_id) -> Optional[UUID]:
    if isinstance(user_id, UUID):
        return user_id
    try:
        return UUID(str(user_id))
    except (TypeError, ValueError):
        return None


async def issue_session(database: Database, user_id: UUID) -> IssuedSession:
    """Persist a new session for user_id. Earlier sessions stay valid."""
    token = generate_session_token()
    expires_at = utcnow() + timedelta(days=config.SESSION_EXPIRE_DAYS)
    try:
        async with database.session() as session:
            session.add(Session(user_id=user_id, token=token, expires_at=expires_at))
            await session.commit()
    except SQLAlchemyError as e:
        logger.exception("Could not persist session for user %s", user_id)
        raise StorageError("Could not create session") from e
    return IssuedSession(token=token, expires_at=expires_at)


async def _find_valid_session(database: Database, token: str) -> Optional[Session]:
    async with database.session() as session:
        result = await session.execute(
            select(Session).where(
                Session.token == token,
                Session.expires_at > utcnow(),
            )
        )
        return result.scalar_one_or_none()


async def validate_session(database: Database, token: Optional[str], user_id=None) -> bool:
    """True iff an unexpired session with this token exists (and belongs to user_id when given).

    Never raises: bad input and storage failures resolve to False.
    """
    if not token or not isinstance(token, str):
        return False
    expected_user = None
    if user_id is not None:
        expected_user = _coerce_user_id(user_id)
        if expected_user is None:
            return False
    try:
        row = await _find_valid_session(database, token)
    except SQLAlchemyError:
        logger.exception("Session lookup failed")
        return False
    if row is None:
        return False
    return expected_user is None or row.user_id == expected_user


async def get_session_user(database: Database, token: Optional[str]) -> Optional[UserRead]:
    """User owning a valid session. The user id comes from the session row, not the client."""
    if not token or not isinstance(token, str):
        return None
    try:
        async with database.session() as session:
            result = await session.execute(
                select(User)
                .join(Session, Session.user_id == User.id)
                .where(Session.token == token, Session.expires_at > utcnow())
            )
            user = result.scalar_one_or_none()
    except SQLAlchemyError:
        logger.exception("Session lookup failed")
        return None
    return UserRead.model_validate(user) if user else None


async def revoke_session(database: Database, token: str) -> None:
    """Delete the session with this token. Unknown tokens are ignored."""
    if not token:
        return
    try:
        async with database.session() as session:
            result = await session.execute(delete(Session).where(Session.token == token))
            await session.commit()
    except SQLAlchemyError as e:
        logger.exception("Could not revoke session")
        raise StorageError("Could not revoke session") from e
    if result.rowcount:
        logger.info("Session revoked")
