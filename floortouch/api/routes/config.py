"""Settings and noise-band preset endpoints.

Changes are kept in memory only; persist them through `FTD_` environment
variables or the YAML file.
"""

from __future__ import annotations

from fastapi import APIRouter, HTTPException

from floortouch.api.schemas.models import ConfigSchema
from floortouch.api.services.state import get_settings, reload_settings
from floortouch.core.config.presets import list_presets, preset_patch
from floortouch.core.config.settings import TouchSettings, settings_to_dict

router = APIRouter(prefix="/config", tags=["config"])


def _as_schema(settings: TouchSettings) -> ConfigSchema:
    return ConfigSchema(**settings_to_dict(settings))


@router.get("", response_model=ConfigSchema)
def get_config() -> ConfigSchema:
    return _as_schema(get_settings())


@router.post("", response_model=ConfigSchema)
def update_config(cfg: ConfigSchema) -> ConfigSchema:
    """Apply new settings.

    Band, gain and marker changes reach the running pipeline directly. A new
    source or frame size restarts the engine, which recaptures the floor.
    """

    return _as_schema(reload_settings(cfg.model_dump()))


@router.get("/presets")
def get_presets() -> dict[str, list[dict[str, object]]]:
    return {"presets": list_presets()}


@router.post("/presets/{preset_id}", response_model=ConfigSchema)
def apply_preset(preset_id: str) -> ConfigSchema:
    """Switch to a named noise band; the floor baseline is kept."""

    try:
        patch = preset_patch(preset_id)
    except KeyError:
        raise HTTPException(status_code=404, detail=f"Unknown preset: {preset_id}") from None
    return _as_schema(reload_settings({**settings_to_dict(get_settings()), **patch}))
