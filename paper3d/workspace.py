"""
Workspace - the explicitly owned scene aggregate.

Holds the atlas raster and the shape table. Every component (island editor,
snapshot codec, exporters) receives the workspace it operates on; there is no
module-level scene state.
"""

import logging
from typing import Dict, Iterable, List, Optional, Sequence

from pydantic import ValidationError

from paper3d.config import AtlasSettings, DEFAULT_SETTINGS
from paper3d.exceptions import GeometryError
from paper3d.geometry.shapes import Shape, build_shape
from paper3d.schema.project import GeometryConfig, Island, OutlineGeometry, TriangleGeometry
from paper3d.texturing.atlas_packer import auto_pack, find_space
from paper3d.texturing.raster import RasterSurface

logger = logging.getLogger(__name__)


def _validated(model, points: Sequence):
    """Build a geometry config from raw points; schema errors become GeometryError."""
    try:
        return model(points=list(points))
    except ValidationError as e:
        raise GeometryError(f"Invalid {model.model_fields['type'].default} points: {e}") from e


class Workspace:
    """
    Shapes, their islands and the shared atlas.

    Shapes are kept in insertion order, which is also their stacking order
    for island hit-testing (last inserted is on top).

    Example:
        >>> ws = Workspace()
        >>> shape = ws.add_outline([(0, 0, 0), (2, 0, 0), (2, 0, 1), (0, 0, 1)])
        >>> shape.island.x, shape.island.y
        (8, 8)
    """

    def __init__(self, settings: Optional[AtlasSettings] = None):
        self.settings = settings or DEFAULT_SETTINGS
        self.raster = RasterSurface(self.settings.atlas_size, self.settings.background)
        self.shapes: Dict[str, Shape] = {}

    def __len__(self) -> int:
        return len(self.shapes)

    def __iter__(self):
        return iter(list(self.shapes.values()))

    def __contains__(self, shape_id: str) -> bool:
        return shape_id in self.shapes

    def get(self, shape_id: str) -> Optional[Shape]:
        return self.shapes.get(shape_id)

    def islands(self) -> List[Island]:
        return [shape.island for shape in self.shapes.values()]

    def allocate_island(self, width: int, height: int) -> Island:
        """Find free atlas space for a new island of the given size."""
        return find_space(self.islands(), width, height, self.settings)

    # ------------------------------------------------------------------
    # Shape lifecycle
    # ------------------------------------------------------------------

    def add_geometry(self, geometry: GeometryConfig) -> Shape:
        shape = build_shape(geometry, self.settings, self.allocate_island)
        self.shapes[shape.id] = shape
        logger.info(f"Added {shape.kind} shape {shape.id} ({len(self.shapes)} total)")
        return shape

    def add_outline(self, points: Sequence) -> Shape:
        """Create a panel from a closed polyline of world points (uses x and z)."""
        return self.add_geometry(_validated(OutlineGeometry, points))

    def add_triangle(self, p1, p2, p3) -> Shape:
        """Create a gap-filling triangle between three world points."""
        return self.add_geometry(_validated(TriangleGeometry, (p1, p2, p3)))

    def remove(self, shape_id: str) -> Optional[Shape]:
        """Delete a shape; its island is freed with it."""
        shape = self.shapes.pop(shape_id, None)
        if shape is not None:
            logger.info(f"Removed shape {shape_id}")
        return shape

    def duplicate(self, shape_id: str, offset: float = 1.0) -> Optional[Shape]:
        """
        Rebuild a shape from its geometry config with a fresh island.

        The copy keeps the original's rotation and scale and is shifted by
        ``offset`` on every axis.
        """
        original = self.shapes.get(shape_id)
        if original is None:
            return None

        clone = self.add_geometry(original.geometry)
        clone.transform = original.transform.model_copy(update={
            'position': tuple(c + offset for c in original.transform.position),
        })
        return clone

    def clear_shapes(self):
        self.shapes = {}

    def replace_shapes(self, shapes: Iterable[Shape]):
        """Swap in a complete shape set (used by snapshot restore)."""
        self.shapes = {shape.id: shape for shape in shapes}

    def auto_pack(self):
        """Shelf-pack every island; returns (shape_id, island) placements."""
        return auto_pack(self.shapes.values(), self.settings)
