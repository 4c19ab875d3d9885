"""
Panel geometry: shape records, construction and triangulation.
"""
from .shapes import Shape, build_shape
from .triangulate import triangulate

__all__ = [
    'Shape',
    'build_shape',
    'triangulate',
]
