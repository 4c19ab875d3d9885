"""
Project files and texture import/export.

A project file is a JSON snapshot (see paper3d.schema.project). Loading is
all-or-nothing: the file is parsed, validated and fully rebuilt before the
workspace is touched.
"""

import json
import logging
import os
from typing import Optional

from paper3d.exceptions import SnapshotError
from paper3d.history.snapshot import capture, restore
from paper3d.workspace import Workspace

logger = logging.getLogger(__name__)


def save_project(workspace: Workspace, path: str) -> None:
    """Write the workspace to a JSON project file."""
    payload = capture(workspace).to_payload()
    with open(path, 'w') as f:
        json.dump(payload, f)
    logger.info(f"Saved project with {len(workspace)} shapes to {path}")


def load_project(workspace: Workspace, path: str) -> Workspace:
    """
    Replace the workspace contents with a project file.

    Raises:
        FileNotFoundError: path does not exist
        SnapshotError: file is not valid JSON or not a valid snapshot
    """
    if not os.path.exists(path):
        raise FileNotFoundError(f"Project file not found: {path}")

    with open(path, 'r') as f:
        try:
            data = json.load(f)
        except json.JSONDecodeError as e:
            raise SnapshotError(f"Project file is not valid JSON: {e}") from e

    restore(workspace, data)
    logger.info(f"Loaded project with {len(workspace)} shapes from {path}")
    return workspace


def import_texture(workspace: Workspace, path: str) -> None:
    """
    Load an image file into the atlas, scaled to the atlas size.

    Raises:
        FileNotFoundError: path does not exist
        TextureDecodeError: file is not a readable image
    """
    if not os.path.exists(path):
        raise FileNotFoundError(f"Texture file not found: {path}")

    with open(path, 'rb') as f:
        workspace.raster.load_image(f.read())


def export_texture(workspace: Workspace, path: str, size: Optional[int] = None) -> None:
    """Write the atlas as PNG, nearest-neighbour scaled to ``size``."""
    size = size or workspace.settings.export_size
    with open(path, 'wb') as f:
        f.write(workspace.raster.export_scaled(size))
    logger.info(f"Exported {size}x{size} texture to {path}")
