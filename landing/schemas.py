"""Pydantic schemas shared by the services and the web API."""
from __future__ import annotations

from datetime import datetime
from typing import Any, Mapping, Optional, TypeVar
from uuid import UUID

from pydantic import AnyUrl, BaseModel, ConfigDict, Field, TypeAdapter, field_validator
from pydantic import ValidationError as PydanticValidationError

from landing.errors import ValidationError

_any_url = TypeAdapter(AnyUrl)
_BLOCKED_SCHEMES = {"javascript", "data", "vbscript"}

ModelT = TypeVar("ModelT", bound=BaseModel)


def clean_url(value: Any) -> Optional[str]:
    """Return a trimmed absolute URL, None for blank input. Raises ValueError otherwise."""
    if value is None:
        return None
    if not isinstance(value, str):
        raise ValueError("Must be a valid URL")
    value = value.strip()
    if not value:
        return None
    try:
        parsed = _any_url.validate_python(value)
    except PydanticValidationError:
        raise ValueError("Must be a valid URL") from None
    if parsed.scheme in _BLOCKED_SCHEMES:
        raise ValueError("Must be a valid URL")
    return value


def _clean_text(value: Any) -> Any:
    if isinstance(value, str):
        value = value.strip()
        return value or None
    return value


def field_errors(errors: list[dict], skip_prefix: tuple = ()) -> dict[str, str]:
    """Flatten pydantic error dicts into {"a.0.b": "message"}."""
    result: dict[str, str] = {}
    for err in errors:
        loc = list(err.get("loc", ()))
        if skip_prefix and tuple(loc[: len(skip_prefix)]) == skip_prefix:
            loc = loc[len(skip_prefix):]
        key = ".".join(str(part) for part in loc) or "__root__"
        message = err.get("msg", "Invalid value")
        if message.startswith("Value error, "):
            message = message[len("Value error, "):]
        result.setdefault(key, message)
    return result


def validate_model(model: type[ModelT], data: ModelT | Mapping[str, Any], prefix: str = "") -> ModelT:
    """Coerce data into model, raising the service-level ValidationError on failure."""
    if isinstance(data, model):
        return data
    try:
        return model.model_validate(data)
    except PydanticValidationError as e:
        errors = field_errors(e.errors())
        if prefix:
            errors = {f"{prefix}.{k}": v for k, v in errors.items()}
        raise ValidationError(errors) from e


# --- Users ---


class UserRead(BaseModel):
    """User as it crosses any boundary: no password hash."""

    model_config = ConfigDict(from_attributes=True)

    id: UUID
    email: str
    name: Optional[str] = None
    role: str
    created_at: datetime
    updated_at: datetime


# --- Configurations ---


class CustomButtonInput(BaseModel):
    button_text: str = Field(max_length=255)
    button_url: str
    display_order: Optional[int] = None  # None: position in the submitted list
    is_active: bool = True

    @field_validator("button_text", mode="before")
    @classmethod
    def text_required(cls, v):
        v = _clean_text(v)
        if v is None:
            raise ValueError("Button text is required")
        return v

    @field_validator("button_url", mode="before")
    @classmethod
    def url_required(cls, v):
        v = clean_url(v)
        if v is None:
            raise ValueError("Button URL is required")
        return v


class ConfigurationInput(BaseModel):
    name: str = Field(max_length=255)
    entity_type: str = Field(max_length=64)
    background_image_url: Optional[str] = None
    show_menu_button: bool = False
    menu_button_text: Optional[str] = Field(default=None, max_length=255)
    menu_button_link: Optional[str] = None
    wifi_config_url: Optional[str] = None

    @field_validator("name", mode="before")
    @classmethod
    def name_required(cls, v):
        v = _clean_text(v)
        if v is None:
            raise ValueError("Name is required")
        return v

    @field_validator("entity_type", mode="before")
    @classmethod
    def entity_type_required(cls, v):
        v = _clean_text(v)
        if v is None:
            raise ValueError("Entity type is required")
        return v

    @field_validator("menu_button_text", mode="before")
    @classmethod
    def blank_text_is_none(cls, v):
        return _clean_text(v)

    @field_validator("background_image_url", "menu_button_link", "wifi_config_url", mode="before")
    @classmethod
    def optional_url(cls, v):
        return clean_url(v)


class ConfigurationPayload(ConfigurationInput):
    """Request body: scalar fields plus the full ordered button list."""

    custom_buttons: list[CustomButtonInput] = Field(default_factory=list)


class CustomButtonRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    configuration_id: UUID
    button_text: str
    button_url: str
    display_order: int
    is_active: bool
    created_at: datetime
    updated_at: datetime


class ConfigurationRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    name: str
    entity_type: str
    background_image_url: Optional[str]
    show_menu_button: bool
    menu_button_text: Optional[str]
    menu_button_link: Optional[str]
    wifi_config_url: Optional[str]
    created_at: datetime
    updated_at: datetime


class ConfigurationDetail(ConfigurationRead):
    custom_buttons: list[CustomButtonRead] = Field(default_factory=list)


# --- Public landing page ---


class LandingButton(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    button_text: str
    button_url: str
    display_order: int


class LandingPage(BaseModel):
    """What the public page needs; menu and Wi-Fi fields are passed through as stored."""

    id: UUID
    name: str
    entity_type: str
    background_image_url: Optional[str]
    show_menu_button: bool
    menu_button_text: Optional[str]
    menu_button_link: Optional[str]
    wifi_config_url: Optional[str]
    buttons: list[LandingButton]
