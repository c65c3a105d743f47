"""Runtime config push and reload (config file is master over env; pushes override both)."""
from fastapi import APIRouter, Body, Depends, HTTPException, status

from meetspot.api.deps import get_current_moderator
from meetspot.domain.common.types import Caller
from meetspot.settings import get_config_store

router = APIRouter()


@router.post("/config", status_code=status.HTTP_200_OK)
async def update_config(
    body: dict = Body(..., embed=False),
    caller: Caller = Depends(get_current_moderator),
):
    """
    Merge overrides into the running config. An override that fails validation
    leaves the previous config in place.
    """
    if not get_config_store().update(body):
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Config update failed validation; previous config kept",
        )
    return {"ok": True, "message": "Config updated"}


@router.post("/config/reload", status_code=status.HTTP_200_OK)
async def reload_config(caller: Caller = Depends(get_current_moderator)):
    """Re-read the config file and reapply pushed overrides."""
    get_config_store().reload_from_file()
    return {"ok": True, "message": "Config reloaded from file"}


@router.post("/config/clear-overrides", status_code=status.HTTP_200_OK)
async def clear_config_overrides(caller: Caller = Depends(get_current_moderator)):
    """Drop pushed overrides and reset to config file + env."""
    get_config_store().clear_overrides()
    return {"ok": True, "message": "Overrides cleared"}
