"""
Project / snapshot schema.

A snapshot is the full persisted state of a workspace: every shape's
geometry config, transform, island and UV outline, plus the atlas raster as a
PNG data URL. Project files on disk and undo/redo history entries share this
format.

WIRE FORMAT (JSON, camelCase keys):

    {
      "objects": [
        {
          "id": "3f2a...",
          "transform": {"position": [x, y, z], "rotation": [w, x, y, z], "scale": [x, y, z]},
          "geometryConfig": {"type": "outline" | "triangle", "points": [{"x":..,"y":..,"z":..}]},
          "uvBounds": {"x": 8, "y": 8, "width": 32, "height": 32},
          "uvShape": [{"u": 1.0, "v": 0.0}, ...],
          "snapPoints": [{"x":..,"y":..,"z":..}, ...]
        }
      ],
      "atlasData": "data:image/png;base64,..."
    }

COMPATIBILITY:
- Older files tag geometry as 'cardboard' (outline) and 'fill' (triangle)
- Older files store rotations as Euler arrays [x, y, z, 'XYZ'] in radians
- The oldest files are a bare list of objects with no atlas (see
  paper3d.history.snapshot.parse_snapshot)

COORDINATES:
- Island x/y/width/height are raster pixels, origin top-left, Y down
- UV outline points are normalized to the shape's own bounding box, with U
  mirrored and V up
"""

from __future__ import annotations

from typing import Annotated, Any, Literal, Optional, Tuple, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from paper3d.rotation_utils import IDENTITY_QUATERNION, euler_to_quaternion

Vec3 = Tuple[float, float, float]
Quat4 = Tuple[float, float, float, float]  # [w, x, y, z]

# Geometry tags used by older project files
LEGACY_KINDS = {'cardboard': 'outline', 'fill': 'triangle'}


class Point3(BaseModel):
    model_config = ConfigDict(frozen=True)

    x: float
    y: float
    z: float

    @model_validator(mode='before')
    @classmethod
    def accept_sequence(cls, data: Any) -> Any:
        if isinstance(data, (list, tuple)):
            if len(data) != 3:
                raise ValueError("Point must have exactly three coordinates")
            return {'x': data[0], 'y': data[1], 'z': data[2]}
        return data

    def as_tuple(self) -> Tuple[float, float, float]:
        return (self.x, self.y, self.z)


class UVPoint(BaseModel):
    model_config = ConfigDict(frozen=True)

    u: float
    v: float


class Island(BaseModel):
    """
    Rectangular atlas region owned by exactly one shape.

    Islands are values: moving one produces a new Island, so a snapshot can
    keep a reference without copying.
    """
    model_config = ConfigDict(frozen=True)

    x: int = Field(..., description="Left edge in raster pixels.")
    y: int = Field(..., description="Top edge in raster pixels (Y down).")
    width: int = Field(..., gt=0)
    height: int = Field(..., gt=0)

    def moved_to(self, x: int, y: int) -> "Island":
        return self.model_copy(update={'x': int(x), 'y': int(y)})

    def contains(self, px: float, py: float) -> bool:
        """Point-in-rectangle test, edges inclusive."""
        return self.x <= px <= self.x + self.width and self.y <= py <= self.y + self.height


class BoundingBox(BaseModel):
    """Axis-aligned extent of a shape in its own un-rotated 2D space."""
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    min_x: float = Field(..., alias='minX')
    min_y: float = Field(..., alias='minY')
    width: float = Field(..., gt=0)
    height: float = Field(..., gt=0)


class Transform(BaseModel):
    """Immutable placement of a shape's mesh."""
    model_config = ConfigDict(frozen=True)

    position: Vec3 = (0.0, 0.0, 0.0)
    rotation: Quat4 = Field(default=tuple(IDENTITY_QUATERNION), description="Quaternion [w, x, y, z].")
    scale: Vec3 = (1.0, 1.0, 1.0)

    @field_validator('rotation', mode='before')
    @classmethod
    def convert_euler(cls, v: Any) -> Any:
        # Older files: [x, y, z, 'XYZ'] in radians
        if isinstance(v, (list, tuple)) and len(v) == 4 and isinstance(v[3], str):
            return euler_to_quaternion(v[:3], order=v[3])
        return v


class OutlineGeometry(BaseModel):
    """Closed polyline drawn on the ground plane; shape space is world (x, z)."""
    model_config = ConfigDict(frozen=True)

    type: Literal['outline'] = 'outline'
    points: Tuple[Point3, ...] = Field(..., min_length=3)


class TriangleGeometry(BaseModel):
    """Gap-filling triangle between three arbitrary world points."""
    model_config = ConfigDict(frozen=True)

    type: Literal['triangle'] = 'triangle'
    points: Tuple[Point3, ...] = Field(..., min_length=3, max_length=3)


GeometryConfig = Annotated[Union[OutlineGeometry, TriangleGeometry], Field(discriminator='type')]


class ShapeEntry(BaseModel):
    """One shape as captured in a snapshot."""
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    id: Optional[str] = Field(None, description="Stable shape identifier; generated on restore when absent.")
    transform: Optional[Transform] = Field(None, description="Stored placement; the layout transform is kept when absent.")
    geometry: GeometryConfig = Field(..., alias='geometryConfig')
    island: Optional[Island] = Field(None, alias='uvBounds')
    uv_outline: Optional[Tuple[UVPoint, ...]] = Field(None, alias='uvShape')
    snap_points: Tuple[Point3, ...] = Field(default=(), alias='snapPoints')

    @field_validator('geometry', mode='before')
    @classmethod
    def map_legacy_kind(cls, v: Any) -> Any:
        if isinstance(v, dict) and v.get('type') in LEGACY_KINDS:
            return {**v, 'type': LEGACY_KINDS[v['type']]}
        return v


class Snapshot(BaseModel):
    """Immutable capture of all shapes plus the encoded atlas raster."""
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    shapes: Tuple[ShapeEntry, ...] = Field(default=(), alias='objects')
    raster: Optional[str] = Field(None, alias='atlasData', description="PNG data URL of the atlas.")

    def to_payload(self) -> dict:
        """JSON-ready dict using the wire (camelCase) keys."""
        return self.model_dump(mode='json', by_alias=True, exclude_none=True)
