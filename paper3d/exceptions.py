"""Custom exceptions for atlas, geometry and snapshot operations"""


class Paper3DError(Exception):
    """Base exception for Paper3D errors"""
    pass


class GeometryError(Paper3DError, ValueError):
    """Shape outline cannot be turned into a flat panel (too few points, zero extent, collinear)"""
    pass


class SnapshotError(Paper3DError):
    """Snapshot or project data is malformed (bad schema, unknown kind, corrupt raster)"""
    pass


class TextureDecodeError(Paper3DError):
    """Raster image could not be decoded.

    ``reason`` is a short code the caller can show or branch on:
    ``empty``, ``bad-data-url`` or ``unreadable``.
    """

    def __init__(self, reason: str, message: str):
        super().__init__(message)
        self.reason = reason
