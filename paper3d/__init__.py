"""
Paper3D - texture atlas packing and UV mapping for flat cardboard panels

Every panel in a project samples one shared, fixed-size atlas. This package
allocates a rectangular island of that atlas to each panel, keeps per-vertex
UVs in sync as islands move, paints the raster, and captures/restores the
whole state for undo/redo and project files.
"""

from paper3d.config import AtlasSettings, load_settings
from paper3d.workspace import Workspace

__version__ = "0.1.0"
__all__ = ["AtlasSettings", "Workspace", "load_settings"]
