"""
Flat panel shapes.

Two kinds of geometry:
- outline: closed polyline drawn on the ground grid. Its 2D shape space is
  world (x, z); the mesh is centred and laid flat on the XZ plane.
- triangle: three arbitrary world points (gap filler). Its 2D shape space is
  a local basis built from the points; the mesh lies in local XY and the
  transform rotates it into place.

Every shape owns one atlas island. Construction always goes through
build_shape(), which sizes the island from the shape's bbox, asks the caller
to place it, then computes the initial UVs.
"""

import logging
import uuid
from dataclasses import dataclass, field
from typing import Callable, List, Optional, Tuple

import numpy as np

from paper3d.config import AtlasSettings
from paper3d.exceptions import GeometryError
from paper3d.geometry.triangulate import triangulate
from paper3d.rotation_utils import basis_to_quaternion, rotate_points
from paper3d.schema.project import (
    BoundingBox,
    GeometryConfig,
    Island,
    OutlineGeometry,
    Point3,
    Transform,
    TriangleGeometry,
    UVPoint,
)
from paper3d.texturing.atlas_packer import island_size
from paper3d.texturing.uv_mapper import map_initial_uv

logger = logging.getLogger(__name__)

# Outline panels float slightly above the grid to avoid z-fighting
GROUND_OFFSET = 0.05

EPSILON = 1e-9

PlaceFn = Callable[[int, int], Island]


@dataclass
class Shape:
    """
    Owned record for one panel, keyed by ``id`` in the workspace.

    Attributes:
        geometry: Construction config (outline or triangle points)
        transform: Placement of the mesh in world space
        bbox: Extent of the shape in its own 2D space
        island: Atlas region owned by this shape
        outline_2d: Outline points in shape space, (K, 2)
        local_vertices: Geometry vertices in shape space, (N, 2)
        positions: Geometry vertices in mesh space, (N, 3)
        triangles: Index triples into the vertex arrays
        uvs: Per-vertex atlas UVs, (N, 2)
        uv_outline: Outline normalized to the bbox, for previews only
    """
    id: str
    geometry: GeometryConfig
    transform: Transform
    bbox: BoundingBox
    island: Island
    outline_2d: np.ndarray
    local_vertices: np.ndarray
    positions: np.ndarray
    triangles: List[Tuple[int, int, int]]
    snap_points: List[Point3] = field(default_factory=list)
    uvs: Optional[np.ndarray] = None
    uv_outline: List[UVPoint] = field(default_factory=list)

    @property
    def kind(self) -> str:
        return self.geometry.type

    def world_vertices(self) -> np.ndarray:
        """Geometry vertices after scale, rotation and translation."""
        scaled = self.positions * np.asarray(self.transform.scale, dtype=float)
        rotated = rotate_points(self.transform.rotation, scaled)
        return rotated + np.asarray(self.transform.position, dtype=float)


@dataclass
class _Layout:
    outline_2d: np.ndarray
    positions: np.ndarray
    transform: Transform
    snap_points: List[Point3]
    triangles: List[Tuple[int, int, int]]


def _bounding_box(points_2d: np.ndarray) -> BoundingBox:
    mins = points_2d.min(axis=0)
    maxs = points_2d.max(axis=0)
    width, height = (maxs - mins).tolist()
    if width <= EPSILON or height <= EPSILON:
        raise GeometryError(f"Shape has zero extent ({width:g} x {height:g})")
    return BoundingBox(min_x=float(mins[0]), min_y=float(mins[1]), width=width, height=height)


def _outline_layout(geometry: OutlineGeometry) -> _Layout:
    pts = np.array([(p.x, p.z) for p in geometry.points], dtype=float)
    center = (pts.min(axis=0) + pts.max(axis=0)) / 2.0
    local = pts - center

    # Centered in XY, then rotated +90 degrees about X: (x, y, 0) -> (x, 0, y)
    positions = np.column_stack([local[:, 0], np.zeros(len(local)), local[:, 1]])
    snap_points = [Point3(x=float(x), y=0.0, z=float(z)) for x, z in local]

    return _Layout(
        outline_2d=pts,
        positions=positions,
        transform=Transform(position=[float(center[0]), GROUND_OFFSET, float(center[1])]),
        snap_points=snap_points,
        triangles=triangulate(pts),
    )


def _triangle_layout(geometry: TriangleGeometry) -> _Layout:
    pts = np.array([p.as_tuple() for p in geometry.points], dtype=float)
    center = pts.mean(axis=0)

    forward = pts[1] - pts[0]
    side = pts[2] - pts[0]
    normal = np.cross(forward, side)
    if np.linalg.norm(forward) <= EPSILON or np.linalg.norm(normal) <= EPSILON:
        raise GeometryError("Triangle points are collinear")

    forward = forward / np.linalg.norm(forward)
    normal = normal / np.linalg.norm(normal)
    up = np.cross(normal, forward)
    up = up / np.linalg.norm(up)

    # Rows are basis^T (p - center)
    basis = np.column_stack([forward, up, normal])
    local = (pts - center) @ basis
    local[:, 2] = 0.0

    return _Layout(
        outline_2d=local[:, :2].copy(),
        positions=local,
        transform=Transform(
            position=[float(c) for c in center],
            rotation=basis_to_quaternion(forward, up, normal),
        ),
        snap_points=[Point3(x=float(x), y=float(y), z=float(z)) for x, y, z in local],
        triangles=[(0, 1, 2)],
    )


def build_shape(
    geometry: GeometryConfig,
    settings: AtlasSettings,
    place: PlaceFn,
    shape_id: Optional[str] = None
) -> Shape:
    """
    Construct a shape and its island.

    Args:
        geometry: Outline or triangle config
        settings: Atlas settings (island sizing, atlas size)
        place: Called with the island (width, height); returns the Island.
            New shapes pass the packing allocator, snapshot restore passes
            the stored placement.
        shape_id: Stable identifier; generated when omitted

    Raises:
        GeometryError: zero-extent outline or collinear triangle
    """
    if isinstance(geometry, OutlineGeometry):
        layout = _outline_layout(geometry)
    elif isinstance(geometry, TriangleGeometry):
        layout = _triangle_layout(geometry)
    else:
        raise GeometryError(f"Unknown geometry kind: {type(geometry).__name__}")

    bbox = _bounding_box(layout.outline_2d)
    island = place(island_size(bbox.width, settings), island_size(bbox.height, settings))

    shape = Shape(
        id=shape_id or uuid.uuid4().hex,
        geometry=geometry,
        transform=layout.transform,
        bbox=bbox,
        island=island,
        outline_2d=layout.outline_2d,
        # Flat panels keep one vertex per outline point
        local_vertices=layout.outline_2d.copy(),
        positions=layout.positions,
        triangles=layout.triangles,
        snap_points=layout.snap_points,
    )
    map_initial_uv(shape, settings.atlas_size)

    logger.debug(f"Built {shape.kind} shape {shape.id} with {island.width}x{island.height} island at ({island.x}, {island.y})")
    return shape
