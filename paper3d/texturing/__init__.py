"""
Atlas texturing: raster surface, island allocation and UV mapping.
"""
from .raster import RasterSurface
from .atlas_packer import find_space, auto_pack, island_size
from .uv_mapper import compute_uv, map_initial_uv, recompute_uv, outline_to_raster

__all__ = [
    'RasterSurface',
    'find_space',
    'auto_pack',
    'island_size',
    'compute_uv',
    'map_initial_uv',
    'recompute_uv',
    'outline_to_raster',
]
