"""Admin user model for site authentication."""
from __future__ import annotations

from uuid import UUID, uuid4

from sqlalchemy import String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from landing.models.base import Base, TimestampMixin

ROLES = ("user", "admin")


class User(Base, TimestampMixin):
    """Login account. Role is stored but not enforced."""

    __tablename__ = "users"

    id: Mapped[UUID] = mapped_column(primary_key=True, default=uuid4)
    email: Mapped[str] = mapped_column(String(255), unique=True, nullable=False, index=True)
    password_hash: Mapped[str] = mapped_column(String(128), nullable=False)
    name: Mapped[str | None] = mapped_column(String(255), nullable=True)
    role: Mapped[str] = mapped_column(String(16), nullable=False, default="user")  # user, admin

    sessions = relationship(
        "Session", back_populates="user", cascade="all, delete-orphan", passive_deletes=True
    )
