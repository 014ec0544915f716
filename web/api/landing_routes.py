"""Public routes: landing pages and the login entry point (no auth)."""
from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends

import config
from landing.schemas import LandingPage
from landing.services.configurations import ConfigurationRepository
from landing.services.landing import resolve_landing
from web.api.utils import get_repository

router = APIRouter(tags=["landing"])


@router.get("/l/{configuration_id}", response_model=LandingPage)
async def get_landing(configuration_id: str, repo: ConfigurationRepository = Depends(get_repository)):
    """Landing page for one configuration: active buttons only, in display order."""
    return await resolve_landing(repo, configuration_id)


@router.get(config.LOGIN_PATH)
async def login_entry(redirectedFrom: Optional[str] = None):
    """Where gated requests are sent. Tells the client how to log in and where to return."""
    return {
        "login": "/api/auth/login",
        "redirectedFrom": redirectedFrom,
    }
