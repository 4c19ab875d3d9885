"""Project files, texture import/export and UV guide rendering"""

from paper3d.converters.project import save_project, load_project, import_texture, export_texture
from paper3d.converters.guide import render_uv_guide, export_uv_guide

__all__ = [
    "save_project",
    "load_project",
    "import_texture",
    "export_texture",
    "render_uv_guide",
    "export_uv_guide",
]
