"""Undo/redo history built on workspace snapshots."""

import logging
from typing import List, Optional

from paper3d.history.snapshot import capture, restore
from paper3d.schema.project import Snapshot
from paper3d.workspace import Workspace

logger = logging.getLogger(__name__)


class History:
    """
    Linear snapshot history with a movable cursor.

    Recording after an undo discards the redo branch. At most
    ``max_history + 1`` snapshots are kept (the current state plus
    ``max_history`` undo steps).

    Example:
        >>> history = History(max_history=10)
        >>> history.record(ws)
        >>> ws.add_outline(points)
        >>> history.record(ws)
        >>> history.undo(ws)
        True
    """

    def __init__(self, max_history: int = 10):
        self.max_history = max_history
        self.entries: List[Snapshot] = []
        self.index = -1

    def __len__(self) -> int:
        return len(self.entries)

    @property
    def current(self) -> Optional[Snapshot]:
        if 0 <= self.index < len(self.entries):
            return self.entries[self.index]
        return None

    def can_undo(self) -> bool:
        return self.index > 0

    def can_redo(self) -> bool:
        return self.index < len(self.entries) - 1

    def record(self, workspace: Workspace) -> Snapshot:
        """Capture the workspace as the newest entry."""
        del self.entries[self.index + 1:]

        snapshot = capture(workspace)
        self.entries.append(snapshot)

        if len(self.entries) > self.max_history + 1:
            self.entries.pop(0)
        else:
            self.index += 1

        logger.debug(f"Recorded history entry {self.index + 1}/{len(self.entries)}")
        return snapshot

    def undo(self, workspace: Workspace) -> bool:
        if not self.can_undo():
            return False
        restore(workspace, self.entries[self.index - 1])
        self.index -= 1
        return True

    def redo(self, workspace: Workspace) -> bool:
        if not self.can_redo():
            return False
        restore(workspace, self.entries[self.index + 1])
        self.index += 1
        return True

    def clear(self):
        self.entries = []
        self.index = -1
