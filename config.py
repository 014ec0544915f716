"""Configuration for the landing page admin service."""
from __future__ import annotations

import os
from pathlib import Path

from dotenv import load_dotenv

load_dotenv()


def _parse_int(value: str, default: int) -> int:
    try:
        return int(value)
    except (TypeError, ValueError):
        return default


# Deployment
ENVIRONMENT = os.getenv("ENVIRONMENT", "development")
IS_PRODUCTION = ENVIRONMENT.lower() == "production"
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()

# Database
DATABASE_URL = os.getenv(
    "DATABASE_URL",
    f"sqlite+aiosqlite:///{Path(__file__).parent / 'landing.db'}",
)

# Sessions and the auth cookie (cookie max-age and session expiry share one lifetime)
AUTH_COOKIE_NAME = os.getenv("AUTH_COOKIE_NAME", "auth_token")
SESSION_EXPIRE_DAYS = _parse_int(os.getenv("SESSION_EXPIRE_DAYS", ""), 7)
BCRYPT_ROUNDS = _parse_int(os.getenv("BCRYPT_ROUNDS", ""), 10)

# Routing
ADMIN_PATH_PREFIX = os.getenv("ADMIN_PATH_PREFIX", "/admin")
LOGIN_PATH = os.getenv("LOGIN_PATH", "/login")

# Initial admin bootstrap (created at startup when a password is set)
INITIAL_ADMIN_EMAIL = os.getenv("INITIAL_ADMIN_EMAIL", "admin@example.com")
INITIAL_ADMIN_PASSWORD = os.getenv("INITIAL_ADMIN_PASSWORD", "")
INITIAL_ADMIN_NAME = os.getenv("INITIAL_ADMIN_NAME", "Administrator")
