"""Snapshot / project schema definitions."""
from .project import (
    Point3,
    UVPoint,
    Island,
    BoundingBox,
    Transform,
    OutlineGeometry,
    TriangleGeometry,
    GeometryConfig,
    ShapeEntry,
    Snapshot,
)

__all__ = [
    "Point3",
    "UVPoint",
    "Island",
    "BoundingBox",
    "Transform",
    "OutlineGeometry",
    "TriangleGeometry",
    "GeometryConfig",
    "ShapeEntry",
    "Snapshot",
]
