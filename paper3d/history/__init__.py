"""
Snapshot capture/restore and undo/redo history.
"""
from .snapshot import capture, restore, parse_snapshot
from .history import History

__all__ = [
    'capture',
    'restore',
    'parse_snapshot',
    'History',
]
