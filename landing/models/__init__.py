"""Database models."""
from landing.models.base import Base, Database, TimestampMixin, utcnow
from landing.models.configuration import Configuration, CustomButton
from landing.models.session import Session
from landing.models.user import ROLES, User

__all__ = [
    "Base",
    "Database",
    "TimestampMixin",
    "Configuration",
    "CustomButton",
    "Session",
    "User",
    "ROLES",
    "utcnow",
]
