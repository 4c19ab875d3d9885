"""
Island editor - interactive painting and island placement on the atlas.

All coordinates are raster pixels (origin top-left). The interaction layer
converts pointer positions before calling in. Out-of-range input is clamped
or ignored, never an error.
"""

import logging
import math
from typing import Literal, Optional, Tuple

from paper3d.schema.project import Island
from paper3d.texturing.raster import Color
from paper3d.texturing.uv_mapper import recompute_uv
from paper3d.workspace import Workspace

logger = logging.getLogger(__name__)

Tool = Literal['paint', 'move']

TOOLS = ('paint', 'move')


def snap_to_grid(value: float, step: int) -> int:
    """Round to the nearest multiple of ``step`` (halves round up)."""
    return int(math.floor(value / step + 0.5)) * step


class IslandEditor:
    """
    Paint / move tool state over one workspace.

    Example:
        >>> editor = IslandEditor(ws)
        >>> editor.tool = 'move'
        >>> editor.pointer_down(20, 20)   # grabs the island under the cursor
        >>> editor.pointer_move(73, 30)   # drags it, snapped and clamped
        >>> editor.pointer_up()
    """

    def __init__(self, workspace: Workspace):
        self.workspace = workspace
        self.tool: Tool = 'paint'
        self.paint_color: Color = '#000000'
        self._brush_size = 1
        self.grid_snap = workspace.settings.grid_snap
        self.selected: Optional[str] = None

        self._painting = False
        self._dragging = False
        self._drag_start: Tuple[int, int] = (0, 0)
        self._drag_island_start: Tuple[int, int] = (0, 0)

    @property
    def brush_size(self) -> int:
        return self._brush_size

    @brush_size.setter
    def brush_size(self, value: int):
        self._brush_size = max(1, int(value))

    def set_tool(self, tool: Tool):
        if tool not in TOOLS:
            raise ValueError(f"Unknown tool: {tool}")
        self.tool = tool

    @property
    def selected_island(self) -> Optional[Island]:
        shape = self.workspace.get(self.selected) if self.selected else None
        return shape.island if shape else None

    def select(self, shape_id: Optional[str]):
        self.selected = shape_id if shape_id in self.workspace else None

    def hit_test(self, x: float, y: float) -> Optional[str]:
        """Id of the topmost shape whose island contains (x, y)."""
        for shape in reversed(list(self.workspace)):
            if shape.island.contains(x, y):
                return shape.id
        return None

    # ------------------------------------------------------------------
    # Raster edits
    # ------------------------------------------------------------------

    def paint(self, x: int, y: int) -> bool:
        """Stamp a square brush centred on (x, y), clipped to the atlas."""
        half = self._brush_size // 2
        return self.workspace.raster.write_rect(
            int(x) - half, int(y) - half, self._brush_size, self._brush_size, self.paint_color
        )

    def fill_selected(self) -> bool:
        """Flat-fill the selected island with the paint colour."""
        island = self.selected_island
        if island is None:
            return False
        return self.workspace.raster.write_rect(island.x, island.y, island.width, island.height, self.paint_color)

    def clear_atlas(self):
        self.workspace.raster.clear()

    def auto_pack(self):
        return self.workspace.auto_pack()

    # ------------------------------------------------------------------
    # Island placement
    # ------------------------------------------------------------------

    def move_island(self, shape_id: str, x: float, y: float) -> Optional[Island]:
        """
        Place an island at (x, y), snapped to the grid and clamped inside the atlas.

        Overlap with other islands is allowed.
        """
        shape = self.workspace.get(shape_id)
        if shape is None:
            return None

        size = self.workspace.settings.atlas_size
        b = shape.island
        new_x = snap_to_grid(x, self.grid_snap)
        new_y = snap_to_grid(y, self.grid_snap)
        new_x = max(0, min(size - b.width, new_x))
        new_y = max(0, min(size - b.height, new_y))

        if (new_x, new_y) != (b.x, b.y):
            shape.island = b.moved_to(new_x, new_y)
            recompute_uv(shape, size)
        return shape.island

    # ------------------------------------------------------------------
    # Pointer gestures
    # ------------------------------------------------------------------

    def pointer_down(self, x: int, y: int):
        if self.tool == 'paint':
            self._painting = True
            self.paint(x, y)
            return

        self.selected = self.hit_test(x, y)
        if self.selected is not None:
            island = self.selected_island
            self._dragging = True
            self._drag_start = (x, y)
            self._drag_island_start = (island.x, island.y)

    def pointer_move(self, x: int, y: int):
        if self.tool == 'paint' and self._painting:
            self.paint(x, y)
        elif self.tool == 'move' and self._dragging and self.selected:
            dx = x - self._drag_start[0]
            dy = y - self._drag_start[1]
            self.move_island(self.selected, self._drag_island_start[0] + dx, self._drag_island_start[1] + dy)

    def pointer_up(self):
        self._painting = False
        if self._dragging:
            self._dragging = False
            island = self.selected_island
            if island is not None:
                logger.debug(f"Dropped island {self.selected} at ({island.x}, {island.y})")
