"""Landing page configuration and its ordered custom buttons."""
from __future__ import annotations

from typing import Optional
from uuid import UUID, uuid4

from sqlalchemy import Boolean, ForeignKey, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from landing.models.base import Base, TimestampMixin


class Configuration(Base, TimestampMixin):
    """Landing page setup for one physical entity (table, room, store)."""

    __tablename__ = "configurations"

    id: Mapped[UUID] = mapped_column(primary_key=True, default=uuid4)
    name: Mapped[str] = mapped_column(String(255), nullable=False, index=True)
    entity_type: Mapped[str] = mapped_column(String(64), nullable=False)
    background_image_url: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    menu_button_link: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    menu_button_text: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    show_menu_button: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    wifi_config_url: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    # Deleting a configuration is a single DELETE; the FK cascade removes the buttons
    buttons = relationship(
        "CustomButton",
        back_populates="configuration",
        cascade="all, delete-orphan",
        passive_deletes=True,
        order_by="CustomButton.display_order",
    )


class CustomButton(Base, TimestampMixin):
    """Call-to-action link. Replaced wholesale on every configuration update."""

    __tablename__ = "custom_buttons"

    id: Mapped[UUID] = mapped_column(primary_key=True, default=uuid4)
    configuration_id: Mapped[UUID] = mapped_column(
        ForeignKey("configurations.id", ondelete="CASCADE"), nullable=False, index=True
    )
    button_text: Mapped[str] = mapped_column(String(255), nullable=False)
    button_url: Mapped[str] = mapped_column(Text, nullable=False)
    display_order: Mapped[int] = mapped_column(Integer, nullable=False, default=0, index=True)
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)

    configuration: Mapped["Configuration"] = relationship("Configuration", back_populates="buttons")
