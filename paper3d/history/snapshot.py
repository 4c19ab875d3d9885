"""
Snapshot codec - capture and restore the full workspace state.

Used by undo/redo history and project files. Restore is all-or-nothing:
the snapshot is validated, the raster decoded and every shape rebuilt before
anything in the workspace is replaced.
"""

import logging
from typing import Any, List

from pydantic import ValidationError

from paper3d.exceptions import GeometryError, SnapshotError, TextureDecodeError
from paper3d.geometry.shapes import Shape, build_shape
from paper3d.schema.project import Island, ShapeEntry, Snapshot
from paper3d.texturing.atlas_packer import find_space
from paper3d.texturing.raster import RasterSurface
from paper3d.texturing.uv_mapper import recompute_uv
from paper3d.workspace import Workspace

logger = logging.getLogger(__name__)


def _capture_shape(shape: Shape) -> ShapeEntry:
    # Geometry, transform, island and UV points are frozen models; sharing them is safe
    return ShapeEntry(
        id=shape.id,
        transform=shape.transform,
        geometry=shape.geometry,
        island=shape.island,
        uv_outline=tuple(shape.uv_outline),
        snap_points=tuple(shape.snap_points),
    )


def capture(workspace: Workspace) -> Snapshot:
    """Immutable copy of every shape plus the PNG-encoded raster."""
    return Snapshot(
        shapes=tuple(_capture_shape(shape) for shape in workspace),
        raster=workspace.raster.encode(),
    )


def parse_snapshot(data: Any) -> Snapshot:
    """
    Validate raw snapshot data (e.g. parsed project JSON).

    A bare list is the oldest format: the whole value is the shapes array
    and there is no raster.

    Raises:
        SnapshotError: data does not match the snapshot schema
    """
    if isinstance(data, Snapshot):
        return data
    if isinstance(data, list):
        data = {'objects': data}
    try:
        return Snapshot.model_validate(data)
    except ValidationError as e:
        raise SnapshotError(f"Invalid snapshot: {e}") from e


def _rebuild_shapes(workspace: Workspace, entries) -> List[Shape]:
    settings = workspace.settings
    rebuilt: List[Shape] = []

    for index, entry in enumerate(entries):
        def place(width: int, height: int, entry=entry) -> Island:
            if entry.island is not None:
                return entry.island
            # No stored placement: allocate against what is restored so far
            return find_space([s.island for s in rebuilt], width, height, settings)

        shape_id = entry.id if entry.id not in {s.id for s in rebuilt} else None
        try:
            shape = build_shape(entry.geometry, settings, place, shape_id=shape_id)
        except GeometryError as e:
            raise SnapshotError(f"Shape {index + 1}: {e}") from e

        if entry.transform is not None:
            shape.transform = entry.transform
        if entry.uv_outline is not None:
            shape.uv_outline = list(entry.uv_outline)
        recompute_uv(shape, settings.atlas_size)
        rebuilt.append(shape)

    return rebuilt


def restore(workspace: Workspace, snapshot: Any) -> Workspace:
    """
    Replace the workspace contents with a snapshot.

    Shapes are rebuilt through the normal construction path, then their
    stored island and UV outline are applied directly (no re-allocation).
    If the snapshot carries no raster the atlas is left as it is.

    Raises:
        SnapshotError: malformed snapshot, bad geometry or corrupt raster.
            The workspace is unchanged when this is raised.
    """
    snapshot = parse_snapshot(snapshot)

    image = None
    if snapshot.raster:
        try:
            image = RasterSurface.decode_data_url(snapshot.raster)
        except TextureDecodeError as e:
            raise SnapshotError(f"Corrupt atlas image ({e.reason}): {e}") from e

    shapes = _rebuild_shapes(workspace, snapshot.shapes)

    workspace.replace_shapes(shapes)
    if image is not None:
        workspace.raster.replace(image)

    logger.info(f"Restored {len(shapes)} shapes from snapshot")
    return workspace
