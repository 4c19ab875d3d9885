"""
UV Mapper - translates between a shape's local 2D space and its atlas island.

Conventions:
- Local points are normalized against the shape's bounding box
- U is mirrored (1 - t) to match the island preview orientation
- The raster is Y-down, UVs are Y-up, so V is flipped on projection

Per-vertex UVs are always computed from each geometry vertex's own local
position. The normalized outline is a separate, coarser structure used only
for 2D previews and export guides.
"""
import logging
from typing import List, Sequence, Tuple

import numpy as np

from paper3d.schema.project import BoundingBox, Island, UVPoint

logger = logging.getLogger(__name__)


def _clamp01(value: float) -> float:
    return max(0.0, min(1.0, value))


def normalize_point(point: Sequence[float], bbox: BoundingBox) -> Tuple[float, float]:
    """Local (x, y) -> (norm_u, norm_v) in [0, 1], U mirrored."""
    norm_u = 1.0 - (point[0] - bbox.min_x) / bbox.width
    norm_v = (point[1] - bbox.min_y) / bbox.height
    # Tolerate floating-point spill at the bbox edges
    return _clamp01(norm_u), _clamp01(norm_v)


def compute_uv(
    point: Sequence[float],
    bbox: BoundingBox,
    island: Island,
    atlas_size: int
) -> Tuple[float, float]:
    """
    Map one local point to atlas UV space.

    Example:
        >>> bbox = BoundingBox(minX=-1, minY=-1, width=2, height=2)
        >>> compute_uv((-1, -1), bbox, Island(x=8, y=8, width=32, height=32), 512)
        (0.078125, 0.921875)
    """
    norm_u, norm_v = normalize_point(point, bbox)
    atlas_u = (island.x + norm_u * island.width) / atlas_size
    atlas_v = 1.0 - (island.y + (1.0 - norm_v) * island.height) / atlas_size
    return atlas_u, atlas_v


def map_vertices(
    vertices: np.ndarray,
    bbox: BoundingBox,
    island: Island,
    atlas_size: int
) -> np.ndarray:
    """Vectorized compute_uv over an (N, 2) array of local vertices."""
    verts = np.asarray(vertices, dtype=float).reshape(-1, 2)
    norm_u = np.clip(1.0 - (verts[:, 0] - bbox.min_x) / bbox.width, 0.0, 1.0)
    norm_v = np.clip((verts[:, 1] - bbox.min_y) / bbox.height, 0.0, 1.0)

    atlas_u = (island.x + norm_u * island.width) / atlas_size
    atlas_v = 1.0 - (island.y + (1.0 - norm_v) * island.height) / atlas_size
    return np.column_stack([atlas_u, atlas_v])


def uv_outline(points: Sequence[Sequence[float]], bbox: BoundingBox) -> List[UVPoint]:
    """Re-express an outline in normalized bbox coordinates."""
    return [UVPoint(u=u, v=v) for u, v in (normalize_point(p, bbox) for p in points)]


def map_initial_uv(shape, atlas_size: int):
    """
    Compute per-vertex UVs and the normalized outline for a freshly built shape.

    Returns:
        Tuple of (uvs (N, 2) array, uv outline list)
    """
    shape.uvs = map_vertices(shape.local_vertices, shape.bbox, shape.island, atlas_size)
    shape.uv_outline = uv_outline(shape.outline_2d, shape.bbox)
    return shape.uvs, shape.uv_outline


def recompute_uv(shape, atlas_size: int) -> np.ndarray:
    """
    Regenerate per-vertex UVs from the stored bbox and the current island.

    Geometry positions, the bbox and the UV outline are never touched, so
    moving an island is a pure texture-mapping update.
    """
    shape.uvs = map_vertices(shape.local_vertices, shape.bbox, shape.island, atlas_size)
    return shape.uvs


def outline_to_raster(
    outline: Sequence[UVPoint],
    island: Island,
    scale: float = 1.0
) -> List[Tuple[float, float]]:
    """Pixel-space polyline of a UV outline inside its island (Y-down)."""
    return [
        ((island.x + pt.u * island.width) * scale,
         (island.y + (1.0 - pt.v) * island.height) * scale)
        for pt in outline
    ]
