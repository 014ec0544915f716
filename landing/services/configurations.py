"""Configuration repository: CRUD over configurations and their ordered buttons."""
from __future__ import annotations

import logging
from typing import Any, Mapping, Optional, Sequence, Union
from uuid import UUID

from sqlalchemy import delete, select, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from landing.errors import NotFound, StorageError, ValidationError
from landing.models import Configuration, CustomButton, Database, utcnow
from landing.schemas import ConfigurationInput, CustomButtonInput, validate_model

logger = logging.getLogger("landing.configurations")

FieldsArg = Union[ConfigurationInput, Mapping[str, Any]]
ButtonsArg = Sequence[Union[CustomButtonInput, Mapping[str, Any]]]


def _validate(fields: FieldsArg, buttons: Optional[ButtonsArg]) -> tuple[ConfigurationInput, list[CustomButtonInput]]:
    """Validate everything before any statement runs. Collects errors across fields and buttons."""
    errors: dict[str, str] = {}
    data = None
    try:
        data = validate_model(ConfigurationInput, fields)
    except ValidationError as e:
        errors.update(e.errors)
    validated_buttons = []
    for index, button in enumerate(buttons or []):
        try:
            validated_buttons.append(validate_model(CustomButtonInput, button, prefix=f"custom_buttons.{index}"))
        except ValidationError as e:
            errors.update(e.errors)
    if errors:
        raise ValidationError(errors)
    return data, validated_buttons


def resolve_display_order(button: CustomButtonInput, position: int) -> int:
    """Explicit order when given (0 included), else the 0-based list position."""
    return button.display_order if button.display_order is not None else position


class ConfigurationRepository:
    """Configurations own their buttons; create and update are single transactions.

    Updates replace the whole button set (delete then insert), so button ids
    change on every save.
    """

    def __init__(self, database: Database):
        self.database = database

    async def _insert_buttons(
        self, session: AsyncSession, configuration_id: UUID, buttons: list[CustomButtonInput]
    ) -> None:
        session.add_all(
            [
                CustomButton(
                    configuration_id=configuration_id,
                    button_text=button.button_text,
                    button_url=button.button_url,
                    display_order=resolve_display_order(button, position),
                    is_active=button.is_active,
                )
                for position, button in enumerate(buttons)
            ]
        )
        await session.flush()

    async def create_configuration(self, fields: FieldsArg, buttons: Optional[ButtonsArg] = None) -> UUID:
        """Insert the configuration and its buttons atomically. Returns the new id."""
        data, button_inputs = _validate(fields, buttons)
        try:
            async with self.database.session() as session:
                async with session.begin():
                    configuration = Configuration(**data.model_dump())
                    session.add(configuration)
                    await session.flush()
                    await self._insert_buttons(session, configuration.id, button_inputs)
                    configuration_id = configuration.id
        except SQLAlchemyError as e:
            logger.exception("Could not create configuration %r", data.name)
            raise StorageError("Could not save configuration") from e
        logger.info("Created configuration %s (%s) with %d button(s)", configuration_id, data.name, len(button_inputs))
        return configuration_id

    async def update_configuration(
        self, configuration_id: UUID, fields: FieldsArg, buttons: Optional[ButtonsArg] = None
    ) -> None:
        """Update scalar fields and replace the full button set in one transaction."""
        data, button_inputs = _validate(fields, buttons)
        try:
            async with self.database.session() as session:
                async with session.begin():
                    result = await session.execute(
                        update(Configuration)
                        .where(Configuration.id == configuration_id)
                        .values(**data.model_dump(), updated_at=utcnow())
                    )
                    if result.rowcount == 0:
                        # Leaving the block with an exception rolls the transaction back
                        raise NotFound(f"Configuration {configuration_id} not found")
                    await session.execute(
                        delete(CustomButton).where(CustomButton.configuration_id == configuration_id)
                    )
                    await self._insert_buttons(session, configuration_id, button_inputs)
        except SQLAlchemyError as e:
            logger.exception("Could not update configuration %s", configuration_id)
            raise StorageError("Could not save configuration") from e
        logger.info("Updated configuration %s with %d button(s)", configuration_id, len(button_inputs))

    async def get_configuration(self, configuration_id: UUID) -> Optional[Configuration]:
        try:
            async with self.database.session() as session:
                return await session.get(Configuration, configuration_id)
        except SQLAlchemyError as e:
            logger.exception("Could not read configuration %s", configuration_id)
            raise StorageError("Could not read configuration") from e

    async def get_configuration_with_buttons(
        self, configuration_id: UUID
    ) -> Optional[tuple[Configuration, list[CustomButton]]]:
        """Configuration plus all its buttons, ascending by display_order."""
        try:
            async with self.database.session() as session:
                result = await session.execute(
                    select(Configuration)
                    .where(Configuration.id == configuration_id)
                    .options(selectinload(Configuration.buttons))
                )
                configuration = result.scalar_one_or_none()
        except SQLAlchemyError as e:
            logger.exception("Could not read configuration %s", configuration_id)
            raise StorageError("Could not read configuration") from e
        if configuration is None:
            return None
        buttons = sorted(configuration.buttons, key=lambda b: b.display_order)
        return configuration, buttons

    async def list_configurations(self) -> list[Configuration]:
        """All configurations, most recent first. Always read from the store."""
        try:
            async with self.database.session() as session:
                result = await session.execute(
                    select(Configuration).order_by(Configuration.created_at.desc())
                )
                return list(result.scalars().all())
        except SQLAlchemyError as e:
            logger.exception("Could not list configurations")
            raise StorageError("Could not read configurations") from e

    async def delete_configuration(self, configuration_id: UUID) -> None:
        """Single DELETE; the foreign key cascade removes the buttons. Repeat calls are no-ops."""
        try:
            async with self.database.session() as session:
                result = await session.execute(
                    delete(Configuration).where(Configuration.id == configuration_id)
                )
                await session.commit()
        except SQLAlchemyError as e:
            logger.exception("Could not delete configuration %s", configuration_id)
            raise StorageError("Could not delete configuration") from e
        if result.rowcount:
            logger.info("Deleted configuration %s", configuration_id)
