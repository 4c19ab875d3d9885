"""
UV guide export.

Draws every island on an upscaled copy of the atlas so the texture can be
painted in an external editor:
- dashed translucent box around each island
- magenta shape outline with cyan vertex dots
- "Shape N" label in the island's top-left corner
"""

import logging
import math
from typing import List, Optional, Tuple

from PIL import Image, ImageDraw

from paper3d.texturing.uv_mapper import outline_to_raster
from paper3d.workspace import Workspace

logger = logging.getLogger(__name__)

BOX_COLOR = (0, 0, 0, 128)
OUTLINE_COLOR = (255, 0, 255, 255)
VERTEX_COLOR = (0, 255, 255, 255)
DASH = 8
VERTEX_RADIUS = 4


def _dashed_line(draw: ImageDraw.ImageDraw, start: Tuple[float, float], end: Tuple[float, float], fill, dash: int = DASH):
    length = math.hypot(end[0] - start[0], end[1] - start[1])
    if length == 0:
        return
    ux = (end[0] - start[0]) / length
    uy = (end[1] - start[1]) / length
    pos = 0.0
    while pos < length:
        seg_end = min(pos + dash, length)
        draw.line(
            [(start[0] + ux * pos, start[1] + uy * pos), (start[0] + ux * seg_end, start[1] + uy * seg_end)],
            fill=fill,
            width=1,
        )
        pos += dash * 2


def _dashed_rect(draw: ImageDraw.ImageDraw, box: Tuple[float, float, float, float], fill):
    x1, y1, x2, y2 = box
    corners: List[Tuple[float, float]] = [(x1, y1), (x2, y1), (x2, y2), (x1, y2)]
    for i, start in enumerate(corners):
        _dashed_line(draw, start, corners[(i + 1) % 4], fill)


def render_uv_guide(workspace: Workspace, size: Optional[int] = None) -> Image.Image:
    """Upscaled atlas with island boxes, outlines, vertices and labels."""
    size = size or workspace.settings.export_size
    scale = size / workspace.settings.atlas_size

    base = workspace.raster.scaled(size)
    overlay = Image.new('RGBA', base.size, (0, 0, 0, 0))
    draw = ImageDraw.Draw(overlay)

    for idx, shape in enumerate(workspace):
        b = shape.island
        _dashed_rect(draw, (b.x * scale, b.y * scale, (b.x + b.width) * scale, (b.y + b.height) * scale), BOX_COLOR)

        points = outline_to_raster(shape.uv_outline, b, scale)
        if len(points) >= 2:
            draw.line(points + [points[0]], fill=OUTLINE_COLOR, width=2)
        for px, py in points:
            draw.ellipse(
                (px - VERTEX_RADIUS, py - VERTEX_RADIUS, px + VERTEX_RADIUS, py + VERTEX_RADIUS),
                fill=VERTEX_COLOR,
            )

        draw.text((b.x * scale + 8, b.y * scale + 8), f"Shape {idx + 1}", fill=OUTLINE_COLOR)

    return Image.alpha_composite(base, overlay)


def export_uv_guide(workspace: Workspace, path: str, size: Optional[int] = None) -> None:
    """Write the UV guide image as PNG."""
    image = render_uv_guide(workspace, size)
    image.save(path, format='PNG')
    logger.info(f"Exported {image.size[0]}x{image.size[1]} UV guide for {len(workspace)} shapes to {path}")
