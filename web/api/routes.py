"""Admin API routes for landing page configurations."""
from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException

import config
from landing.schemas import ConfigurationDetail, ConfigurationPayload, ConfigurationRead, CustomButtonRead
from landing.services.configurations import ConfigurationRepository
from landing.services.landing import parse_configuration_id
from web.api.utils import get_repository
from web.auth import require_auth

# Every route here sits behind both gates: the middleware's token check and require_auth
router = APIRouter(
    prefix=f"{config.ADMIN_PATH_PREFIX.rstrip('/')}/configurations",
    tags=["configurations"],
    dependencies=[Depends(require_auth)],
)


@router.get("", response_model=list[ConfigurationRead])
async def list_configurations(repo: ConfigurationRepository = Depends(get_repository)):
    """List configurations, most recent first."""
    return await repo.list_configurations()


@router.post("", status_code=201)
async def create_configuration(body: ConfigurationPayload, repo: ConfigurationRepository = Depends(get_repository)):
    """Create a configuration with its buttons."""
    fields = body.model_dump(exclude={"custom_buttons"})
    configuration_id = await repo.create_configuration(fields, body.custom_buttons)
    return {"id": str(configuration_id)}


@router.get("/{configuration_id}", response_model=ConfigurationDetail)
async def get_configuration(configuration_id: str, repo: ConfigurationRepository = Depends(get_repository)):
    """Get a configuration with all its buttons (active or not) in display order."""
    found = await repo.get_configuration_with_buttons(parse_configuration_id(configuration_id))
    if found is None:
        raise HTTPException(404, "Configuration not found")
    configuration, buttons = found
    return ConfigurationDetail(
        **ConfigurationRead.model_validate(configuration).model_dump(),
        custom_buttons=[CustomButtonRead.model_validate(b) for b in buttons],
    )


@router.put("/{configuration_id}")
async def update_configuration(
    configuration_id: str,
    body: ConfigurationPayload,
    repo: ConfigurationRepository = Depends(get_repository),
):
    """Replace a configuration's fields and its whole button list."""
    fields = body.model_dump(exclude={"custom_buttons"})
    await repo.update_configuration(parse_configuration_id(configuration_id), fields, body.custom_buttons)
    return {"ok": True}


@router.delete("/{configuration_id}")
async def delete_configuration(configuration_id: str, repo: ConfigurationRepository = Depends(get_repository)):
    """Delete a configuration and, through the FK cascade, its buttons."""
    await repo.delete_configuration(parse_configuration_id(configuration_id))
    return {"ok": True}
