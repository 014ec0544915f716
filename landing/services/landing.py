"""Public landing page lookup."""
from __future__ import annotations

from typing import Union
from uuid import UUID

from landing.errors import NotFound
from landing.schemas import LandingButton, LandingPage
from landing.services.configurations import ConfigurationRepository


def parse_configuration_id(value: Union[str, UUID]) -> UUID:
    """Malformed ids are reported the same way as unknown ones."""
    if isinstance(value, UUID):
        return value
    try:
        return UUID(str(value))
    except (TypeError, ValueError):
        raise NotFound(f"Configuration {value} not found") from None


async def resolve_landing(repository: ConfigurationRepository, configuration_id: Union[str, UUID]) -> LandingPage:
    """Configuration with its active buttons in display order. Raises NotFound."""
    found = await repository.get_configuration_with_buttons(parse_configuration_id(configuration_id))
    if found is None:
        raise NotFound(f"Configuration {configuration_id} not found")
    configuration, buttons = found
    active = sorted((b for b in buttons if b.is_active), key=lambda b: b.display_order)
    return LandingPage(
        id=configuration.id,
        name=configuration.name,
        entity_type=configuration.entity_type,
        background_image_url=configuration.background_image_url,
        show_menu_button=configuration.show_menu_button,
        menu_button_text=configuration.menu_button_text,
        menu_button_link=configuration.menu_button_link,
        wifi_config_url=configuration.wifi_config_url,
        buttons=[LandingButton.model_validate(b) for b in active],
    )
