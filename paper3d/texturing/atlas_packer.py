"""
Island allocation and auto-packing for the shared atlas.

Two strategies:
- find_space: first-fit scan on the placement grid against existing islands,
  used when a single shape is created
- auto_pack: deterministic shelf packing of every island at once

Neither ever fails. An exhausted atlas degrades to overlapping placement.
"""

import logging
import math
from typing import Iterable, Iterator, List, Tuple

from paper3d.config import AtlasSettings
from paper3d.schema.project import Island
from paper3d.texturing.uv_mapper import recompute_uv

logger = logging.getLogger(__name__)


def padded_overlap(x: int, y: int, width: int, height: int, island: Island, padding: int) -> bool:
    """True if the candidate rect comes within ``padding`` of ``island``."""
    return (
        x < island.x + island.width + padding and
        x + width + padding > island.x and
        y < island.y + island.height + padding and
        y + height + padding > island.y
    )


def grid_positions(start: int, stop: int, step: int) -> Iterator[int]:
    """
    Candidate coordinates: ``start`` itself, then each grid line past it.

    Example:
        >>> list(grid_positions(8, 70, 16))
        [8, 16, 32, 48, 64]
    """
    if start < stop:
        yield start
    pos = (start // step + 1) * step
    while pos < stop:
        yield pos
        pos += step


def island_size(extent: float, settings: AtlasSettings) -> int:
    """Island edge for a world-space extent, rounded up to the grid."""
    step = settings.grid_snap
    return max(settings.min_island_size, int(math.ceil(extent * settings.pixels_per_unit / step)) * step)


def find_space(
    islands: Iterable[Island],
    width: int,
    height: int,
    settings: AtlasSettings
) -> Island:
    """
    Find the first free spot for a ``width x height`` island.

    Scans row-major (left to right, then top to bottom) starting at
    (padding, padding). The first candidate whose padded rect clears every
    existing island wins.

    Returns:
        New Island. If the atlas is full it is placed at (padding, padding)
        and may overlap others.
    """
    padding = settings.padding
    size = settings.atlas_size
    existing = list(islands)

    for y in grid_positions(padding, size - height - padding, settings.grid_snap):
        for x in grid_positions(padding, size - width - padding, settings.grid_snap):
            if not any(padded_overlap(x, y, width, height, b, padding) for b in existing):
                return Island(x=x, y=y, width=width, height=height)

    # TODO: offer a strict mode that rejects the request instead of overlapping
    logger.warning(f"No free space for {width}x{height} island in {size}x{size} atlas, overlapping at origin")
    return Island(x=padding, y=padding, width=width, height=height)


def auto_pack(shapes: Iterable, settings: AtlasSettings) -> List[Tuple[str, Island]]:
    """
    Re-place every island with a shelf packer, tallest first.

    Island sizes never change, only positions. Ties keep their current
    order. Islands that do not fit run past the bottom edge.

    Returns:
        List of (shape_id, island) in packing order
    """
    padding = settings.padding
    size = settings.atlas_size
    x = padding
    y = padding
    row_height = 0

    # sorted() is stable, so equal heights keep insertion order
    ordered = sorted(shapes, key=lambda s: s.island.height, reverse=True)
    placements = []

    for shape in ordered:
        b = shape.island
        if x + b.width + padding > size:
            x = padding
            y += row_height + padding
            row_height = 0

        shape.island = b.moved_to(x, y)
        x += b.width + padding
        row_height = max(row_height, b.height)

        recompute_uv(shape, size)
        placements.append((shape.id, shape.island))

    if y + row_height > size:
        logger.warning(f"Auto-pack overflowed atlas: rows reach y={y + row_height} of {size}")
    logger.info(f"Auto-packed {len(placements)} islands into {size}x{size} atlas")
    return placements
