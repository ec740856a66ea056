"""
Undo/redo history for the level editor.

History is a stack of whole-document snapshots rather than reversible
commands: every committed edit stores the previous document, and undo
simply swaps it back in.
"""

from __future__ import annotations

import logging
from typing import List, Optional

from .constants import MAX_HISTORY
from .data_model import LevelDocument

logger = logging.getLogger(__name__)


class HistoryManager:
    """
    Manages document snapshots with undo/redo stacks.

    Usage:
        history = HistoryManager(document)
        history.commit(edited)     # edited becomes present
        history.undo()             # document is present again
        history.redo()             # edited is present again
    """

    def __init__(self, initial: Optional[LevelDocument] = None,
                 max_depth: int = MAX_HISTORY):
        self._past: List[LevelDocument] = []
        self._future: List[LevelDocument] = []    # Next redo first
        self._present = (initial or LevelDocument()).copy()
        self._max_depth = max_depth

    @property
    def present(self) -> LevelDocument:
        return self._present

    @property
    def past(self) -> List[LevelDocument]:
        """Snapshots before present, oldest first."""
        return list(self._past)

    @property
    def future(self) -> List[LevelDocument]:
        """Snapshots after present, next redo first."""
        return list(self._future)

    def commit(self, document: LevelDocument, skip_history: bool = False) -> LevelDocument:
        """
        Make a document the present state.

        Args:
            document: New document (copied; later changes to it are not recorded)
            skip_history: Replace present without pushing an undo entry

        Returns:
            The new present document.
        """
        snapshot = document.copy()

        if skip_history or snapshot == self._present:
            self._present = snapshot
            return self._present

        self._past.append(self._present)
        self._future.clear()

        # Limit stack size
        if len(self._past) > self._max_depth:
            del self._past[:len(self._past) - self._max_depth]

        self._present = snapshot
        return self._present

    def undo(self) -> Optional[LevelDocument]:
        """
        Step back one snapshot.

        Returns:
            The restored document, or None if nothing to undo.
        """
        if not self._past:
            return None

        self._future.insert(0, self._present)
        self._present = self._past.pop()
        logger.debug("Undo: %d more available", len(self._past))
        return self._present

    def redo(self) -> Optional[LevelDocument]:
        """
        Step forward one snapshot.

        Returns:
            The restored document, or None if nothing to redo.
        """
        if not self._future:
            return None

        self._past.append(self._present)
        self._present = self._future.pop(0)
        logger.debug("Redo: %d more available", len(self._future))
        return self._present

    @property
    def can_undo(self) -> bool:
        """Check if there are snapshots to undo."""
        return len(self._past) > 0

    @property
    def can_redo(self) -> bool:
        """Check if there are snapshots to redo."""
        return len(self._future) > 0

    @property
    def undo_count(self) -> int:
        return len(self._past)

    @property
    def redo_count(self) -> int:
        return len(self._future)

    def clear(self):
        """Drop all undo/redo entries, keeping the present document."""
        self._past.clear()
        self._future.clear()
