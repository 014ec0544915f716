"""Shared API utilities."""
from __future__ import annotations

from urllib.parse import urlencode

from fastapi import Request

from landing.models import Database
from landing.services.configurations import ConfigurationRepository

import config


def get_database(request: Request) -> Database:
    """Dependency: the Database the app was created with."""
    return request.app.state.database


def get_repository(request: Request) -> ConfigurationRepository:
    """Dependency: the app-wide configuration repository."""
    return request.app.state.configurations


def login_url(redirected_from: str) -> str:
    """Login entry point carrying the page the user was trying to reach."""
    return f"{config.LOGIN_PATH}?{urlencode({'redirectedFrom': redirected_from})}"
