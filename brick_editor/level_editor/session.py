"""
Editor session: owns the level being edited and routes every edit through
cleanup, history and persistence.

Flow for each edit:
    gesture/edit -> new document -> clean_bricks -> history commit -> store.save

Undo and redo restore a snapshot without recording a new history entry, and
the restored document is persisted like any other edit.

Test mode hands the current level to the game through TestModeBridge:
test_level() emits test_requested with the level dict, and the game calls
bridge.return_to_editor() when the player leaves the test run.
"""

from __future__ import annotations

import dataclasses
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional, Set, Tuple, Union

from PyQt5.QtCore import QObject, pyqtSignal

from brick_editor.storage.level_files import load_level_from_path, save_level_to_path
from brick_editor.storage.level_storage import LevelStore
from .constants import MAX_HISTORY
from .data_model import Brick, BrickType, HalfSlot, LevelDocument, brick_position
from .history import HistoryManager
from .image_import import bricks_from_pixels
from .placement import GestureResult, PlacementEngine, PointLike, occupancy_key, remove_bricks
from .position import bricks_in_area
from .validation import clean_document

logger = logging.getLogger(__name__)


class TestModeBridge(QObject):
    """Signals between the editor and the game's test run."""
    test_requested = pyqtSignal(dict)      # Level dict with cell geometry baked in
    returned_to_editor = pyqtSignal()

    def return_to_editor(self):
        """Called by the game when the player leaves the test run."""
        self.returned_to_editor.emit()


@dataclass
class LevelStats:
    """Brick counts shown in the stats panel."""
    total: int = 0
    by_type: Dict[BrickType, int] = field(default_factory=dict)
    fuse_count: int = 0
    half_size_count: int = 0

    def count(self, brick_type: BrickType) -> int:
        return self.by_type.get(brick_type, 0)


def _step_half(col: int, slot: HalfSlot, direction: int) -> Tuple[int, HalfSlot]:
    """Move a half-size position one half cell left (-1) or right (+1)."""
    if direction < 0:
        if slot is HalfSlot.RIGHT:
            return col, HalfSlot.LEFT
        return col - 1, HalfSlot.RIGHT
    if slot is HalfSlot.LEFT:
        return col, HalfSlot.RIGHT
    return col + 1, HalfSlot.LEFT


class EditorSession:
    """
    One editing session over a single level.

    Usage:
        session = EditorSession(store=InMemoryLevelStore())
        session.click(2, 3)
        session.engine.select_brick_type(BrickType.PORTAL)
        session.click(0, 0)
        session.undo()
    """

    def __init__(self, store=None, bridge: Optional[TestModeBridge] = None,
                 max_history: int = MAX_HISTORY):
        self.store = store if store is not None else LevelStore()
        self.bridge = bridge if bridge is not None else TestModeBridge()
        self.engine = PlacementEngine()
        self.selected: Optional[Brick] = None      # Brick picked by a paint click
        self.in_test_mode = False
        self._selection: List[int] = []            # Indices into document.bricks

        self.history = HistoryManager(self._load_initial(), max_depth=max_history)
        self.bridge.returned_to_editor.connect(self._on_returned_to_editor)

    def _load_initial(self) -> LevelDocument:
        stored = self.store.load()
        if stored is None:
            logger.info("No stored level, starting a new one")
            return LevelDocument()
        logger.info("Loaded stored level '%s' (%d bricks)", stored.name, len(stored.bricks))
        return clean_document(stored)

    @property
    def document(self) -> LevelDocument:
        return self.history.present

    def _commit(self, document: LevelDocument) -> LevelDocument:
        present = self.history.commit(clean_document(document))
        self.store.save(present)
        return present

    def _restore(self, document: Optional[LevelDocument]) -> Optional[LevelDocument]:
        if document is None:
            return None
        self._clear_selection()
        self.store.save(document)
        return document

    def _apply(self, result: GestureResult) -> GestureResult:
        if result.selected is not None:
            self.selected = result.selected
        if result.changed:
            self._clear_selection()
            self._commit(result.document)
        return result

    def _clear_selection(self):
        self.selected = None
        self._selection = []

    # ------------------------------------------------------------------
    # Gestures
    # ------------------------------------------------------------------

    def click(self, col: int, row: int, half_slot: Optional[HalfSlot] = None) -> GestureResult:
        return self._apply(self.engine.click(self.document, col, row, half_slot))

    def begin_drag(self, col: int, row: int, half_slot: Optional[HalfSlot] = None):
        self.engine.begin_drag(self.document, col, row, half_slot)

    def extend_drag(self, col: int, row: int, half_slot: Optional[HalfSlot] = None):
        self.engine.extend_drag(self.document, col, row, half_slot)

    def end_drag(self) -> GestureResult:
        return self._apply(self.engine.end_drag(self.document))

    def drag(self, path: List[PointLike]) -> GestureResult:
        return self._apply(self.engine.drag(self.document, path))

    # ------------------------------------------------------------------
    # Edits
    # ------------------------------------------------------------------

    def _index_of(self, brick: Brick) -> Optional[int]:
        bricks = self.document.bricks
        for i, candidate in enumerate(bricks):
            if candidate is brick:
                return i
        try:
            return bricks.index(brick)
        except ValueError:
            return None

    def update_brick(self, brick: Brick, color: Optional[int] = None,
                     drop_chance: Optional[float] = None,
                     coin_value: Optional[int] = None) -> Optional[Brick]:
        """
        Edit the gameplay attributes of one brick.

        Returns:
            The updated brick, or None if the brick is not in the level.
        """
        index = self._index_of(brick)
        if index is None:
            logger.warning("Cannot update brick at (%s, %s): not in level", brick.col, brick.row)
            return None

        changes: Dict[str, Any] = {}
        if color is not None:
            changes['color'] = int(color) & 0xFFFFFF
        if drop_chance is not None:
            clamped = min(1.0, max(0.0, float(drop_chance)))
            if clamped != drop_chance:
                logger.warning("Drop chance %s clamped to %s", drop_chance, clamped)
            changes['drop_chance'] = clamped
        if coin_value is not None:
            clamped_coins = max(0, int(coin_value))
            if clamped_coins != coin_value:
                logger.warning("Coin value %s clamped to %s", coin_value, clamped_coins)
            changes['coin_value'] = clamped_coins

        bricks = list(self.document.bricks)
        bricks[index] = bricks[index].with_changes(**changes)
        self.selected = None
        present = self._commit(self.document.with_bricks(bricks))
        return present.bricks[index] if index < len(present.bricks) else None

    def rename(self, name: str):
        self._commit(dataclasses.replace(self.document, name=name))

    def set_background_color(self, color: int):
        self._commit(dataclasses.replace(self.document, background_color=int(color) & 0xFFFFFF))

    def resize_grid(self, width: Optional[int] = None, height: Optional[int] = None):
        """Change grid extents; bricks beyond the new edge are dropped."""
        self._clear_selection()
        self._commit(self.document.resized(width, height))

    # ------------------------------------------------------------------
    # Selection
    # ------------------------------------------------------------------

    @property
    def selected_bricks(self) -> List[Brick]:
        bricks = self.document.bricks
        return [bricks[i] for i in self._selection if i < len(bricks)]

    def select_area(self, start_col: int, start_row: int,
                    end_col: int, end_row: int) -> List[Brick]:
        """Select every brick inside a rectangle of cells."""
        found = bricks_in_area(self.document, start_col, start_row, end_col, end_row)
        positions = {id(b): i for i, b in enumerate(self.document.bricks)}
        self.selected = None
        self._selection = [positions[id(b)] for b in found]
        return self.selected_bricks

    def deselect(self):
        self._clear_selection()

    def delete_selected(self) -> GestureResult:
        """Delete the selected bricks, plus the partners of selected portals."""
        targets = self.selected_bricks
        if not targets:
            return GestureResult(self.document)
        return self._apply(remove_bricks(self.document, targets))

    def move_selected(self, d_col: int, d_row: int) -> bool:
        """
        Move the selection. Half-size bricks step by half cells horizontally,
        full-size bricks by whole cells.

        Returns:
            True if moved; False if any brick would leave the grid or land
            on an unselected brick (nothing moves then).
        """
        if not self._selection or (d_col == 0 and d_row == 0):
            return False

        document = self.document
        selected = set(self._selection)
        blocked: Set[Tuple[int, int, Optional[HalfSlot]]] = {
            occupancy_key(b, document) for i, b in enumerate(document.bricks)
            if i not in selected
        }

        cell_size = document.cell_size()
        bricks = list(document.bricks)
        claimed: Set[Tuple[int, int, Optional[HalfSlot]]] = set()
        for index in self._selection:
            brick = document.bricks[index]
            col, row, slot = occupancy_key(brick, document)
            row += d_row
            if slot is None:
                col += d_col
                targets = [(col, row, None), (col, row, HalfSlot.LEFT), (col, row, HalfSlot.RIGHT)]
            else:
                for _ in range(abs(d_col)):
                    col, slot = _step_half(col, slot, d_col)
                targets = [(col, row, slot), (col, row, None)]

            if not document.in_grid(col, row):
                logger.debug("Move refused: brick would leave the grid at (%d, %d)", col, row)
                return False
            if any(t in blocked or t in claimed for t in targets):
                logger.debug("Move refused: (%d, %d) is occupied", col, row)
                return False
            claimed.add((col, row, slot))

            x, y = brick_position(col, row, cell_size, slot)
            bricks[index] = brick.with_changes(col=col, row=row, x=x, y=y, half_size_align=slot)

        self._commit(document.with_bricks(bricks))
        return True

    # ------------------------------------------------------------------
    # History
    # ------------------------------------------------------------------

    def undo(self) -> Optional[LevelDocument]:
        return self._restore(self.history.undo())

    def redo(self) -> Optional[LevelDocument]:
        return self._restore(self.history.redo())

    def clear_history(self):
        self.history.clear()

    @property
    def can_undo(self) -> bool:
        return self.history.can_undo

    @property
    def can_redo(self) -> bool:
        return self.history.can_redo

    # ------------------------------------------------------------------
    # Level operations
    # ------------------------------------------------------------------

    def clear_level(self):
        """Reset to an empty default level (undoable)."""
        self._clear_selection()
        self._commit(LevelDocument())
        logger.info("Level cleared")

    def save(self):
        self.store.save(self.document)
        logger.info("Saved level '%s'", self.document.name)

    def stats(self) -> LevelStats:
        stats = LevelStats(total=len(self.document.bricks))
        for brick in self.document.bricks:
            stats.by_type[brick.type] = stats.by_type.get(brick.type, 0) + 1
            if brick.type.is_fuse:
                stats.fuse_count += 1
            if brick.is_half_size:
                stats.half_size_count += 1
        return stats

    def export_level(self, directory: Union[str, Path]) -> Path:
        document = self.document.with_cell_size(self.document.cell_size())
        return save_level_to_path(document, directory)

    def import_level(self, path: Union[str, Path]) -> LevelDocument:
        """
        Replace the level with one read from a file.

        Raises:
            LevelImportError: If the file cannot be parsed; the level is left untouched
        """
        imported = load_level_from_path(path)
        self._clear_selection()
        present = self._commit(imported)
        logger.info("Imported level '%s' (%d bricks) from %s",
                    present.name, len(present.bricks), path)
        return present

    def import_image(self, pixels, image_scale: float = 1.0) -> LevelDocument:
        """Replace all bricks with bricks sampled from an RGBA array."""
        document = self.document
        bricks = bricks_from_pixels(pixels, document.width, document.height,
                                    document.cell_size(), image_scale)
        self._clear_selection()
        present = self._commit(document.with_bricks(bricks))
        logger.info("Imported image as %d bricks", len(present.bricks))
        return present

    # ------------------------------------------------------------------
    # Test mode
    # ------------------------------------------------------------------

    def test_level(self) -> Dict[str, Any]:
        """Hand the current level to the game for a test run."""
        data = self.document.with_cell_size(self.document.cell_size()).to_dict()
        self.in_test_mode = True
        logger.info("Testing level '%s'", self.document.name)
        self.bridge.test_requested.emit(data)
        return data

    def _on_returned_to_editor(self):
        self.in_test_mode = False
        logger.info("Returned from test mode")
