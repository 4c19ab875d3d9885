"""
Atlas configuration.

One fixed-size atlas is shared by every shape in a workspace. The values here
are constants for the lifetime of a workspace; they can be overridden at
startup through ``PAPER3D_<FIELD>`` environment variables or keyword
arguments to :func:`load_settings`.
"""

import logging
import os
from typing import Any, Dict

from pydantic import BaseModel, ConfigDict, Field

logger = logging.getLogger(__name__)

ENV_PREFIX = "PAPER3D_"


class AtlasSettings(BaseModel):
    model_config = ConfigDict(frozen=True, extra='forbid')

    atlas_size: int = Field(512, gt=0, description="Raster edge length in pixels.")
    padding: int = Field(8, ge=0, description="Empty margin kept around every island.")
    grid_snap: int = Field(16, gt=0, description="Placement grid step in raster pixels.")
    export_size: int = Field(1024, gt=0, description="Edge length of exported images.")
    pixels_per_unit: int = Field(32, gt=0, description="Texture pixels per world unit.")
    min_island_size: int = Field(32, gt=0, description="Smallest island edge in pixels.")
    max_history: int = Field(10, gt=0, description="Number of undo steps kept.")
    background: str = Field('#ffffff', description="Colour the atlas is cleared to.")


DEFAULT_SETTINGS = AtlasSettings()


def _settings_from_env() -> Dict[str, Any]:
    values = {}
    for name in AtlasSettings.model_fields:
        raw = os.environ.get(f"{ENV_PREFIX}{name.upper()}")
        if raw is not None:
            values[name] = raw
    return values


def load_settings(**overrides) -> AtlasSettings:
    """
    Build settings from defaults, environment variables and explicit overrides.

    Explicit keyword arguments win over the environment.

    Example:
        >>> load_settings(atlas_size=256).atlas_size
        256
    """
    values = _settings_from_env()
    values.update({k: v for k, v in overrides.items() if v is not None})
    settings = AtlasSettings.model_validate(values)
    if values:
        logger.debug(f"Loaded atlas settings: {settings}")
    return settings
