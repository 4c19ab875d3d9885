"""Interactive atlas editing."""
from .island_editor import IslandEditor, snap_to_grid

__all__ = ['IslandEditor', 'snap_to_grid']
