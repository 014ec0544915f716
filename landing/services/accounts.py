"""User accounts: password hashing, credential checks, registration."""
from __future__ import annotations

import hashlib
import logging
from typing import Optional

from fastapi.concurrency import run_in_threadpool
from passlib.context import CryptContext
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError

import config
from landing.errors import InvalidCredentials, StorageError, ValidationError
from landing.models import ROLES, Database, User
from landing.schemas import UserRead

logger = logging.getLogger("landing.auth")

pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto", bcrypt__rounds=config.BCRYPT_ROUNDS)


def _prepare_password(password: str) -> str:
    """Bcrypt has a 72-byte limit. Pre-hash longer passwords with SHA256."""
    encoded = password.encode("utf-8")
    if len(encoded) > 72:
        return hashlib.sha256(encoded).hexdigest()
    return password


def hash_password(password: str) -> str:
    return pwd_context.hash(_prepare_password(password))


def verify_password(plain: str, hashed: str) -> bool:
    return pwd_context.verify(_prepare_password(plain), hashed)


async def get_user_by_email(database: Database, email: str) -> Optional[User]:
    try:
        async with database.session() as session:
            result = await session.execute(select(User).where(User.email == email))
            return result.scalar_one_or_none()
    except SQLAlchemyError as e:
        logger.exception("User lookup failed")
        raise StorageError("Could not read users") from e


async def verify_credentials(database: Database, email: str, password: str) -> UserRead:
    """Return the user for a matching email/password pair, without its password hash.

    Unknown email and wrong password both raise InvalidCredentials with the
    same message. A dummy hash check runs for unknown emails so both paths
    take about as long.
    """
    user = await get_user_by_email(database, email)
    if user is None:
        await run_in_threadpool(pwd_context.dummy_verify)
        logger.info("Login failed for %s", email)
        raise InvalidCredentials()
    if not await run_in_threadpool(verify_password, password, user.password_hash):
        logger.info("Login failed for %s", email)
        raise InvalidCredentials()
    return UserRead.model_validate(user)


async def register_user(
    database: Database,
    email: str,
    password: str,
    name: Optional[str] = None,
    role: str = "user",
) -> UserRead:
    """Create a user with a bcrypt password hash."""
    errors = {}
    email = (email or "").strip()
    if not email:
        errors["email"] = "Email is required"
    elif len(email) > 255:
        errors["email"] = "Email must be at most 255 characters"
    if name and len(name) > 255:
        errors["name"] = "Name must be at most 255 characters"
    if not password:
        errors["password"] = "Password is required"
    if role not in ROLES:
        errors["role"] = "Invalid role"
    if errors:
        raise ValidationError(errors)
    if await get_user_by_email(database, email) is not None:
        raise ValidationError({"email": "A user with this email already exists"})
    password_hash = await run_in_threadpool(hash_password, password)
    try:
        async with database.session() as session:
            user = User(email=email, password_hash=password_hash, name=name or None, role=role)
            session.add(user)
            await session.commit()
            await session.refresh(user)
    except IntegrityError as e:
        # Lost a race with a concurrent registration of the same email
        raise ValidationError({"email": "A user with this email already exists"}) from e
    except SQLAlchemyError as e:
        logger.exception("Could not create user %s", email)
        raise StorageError("Could not create user") from e
    logger.info("Registered user %s (%s)", email, role)
    return UserRead.model_validate(user)


async def ensure_initial_admin(database: Database) -> Optional[UserRead]:
    """Create the bootstrap admin from INITIAL_ADMIN_* settings if missing."""
    if not config.INITIAL_ADMIN_PASSWORD:
        return None
    if await get_user_by_email(database, config.INITIAL_ADMIN_EMAIL) is not None:
        return None
    admin = await register_user(
        database,
        config.INITIAL_ADMIN_EMAIL,
        config.INITIAL_ADMIN_PASSWORD,
        name=config.INITIAL_ADMIN_NAME,
        role="admin",
    )
    logger.info("Initial admin %s created", admin.email)
    return admin
