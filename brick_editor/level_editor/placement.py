"""
Placement and erase engine for the brick grid.

Turns user gestures into brick insertions and removals:
- click: place one brick, select an occupied cell, or erase
- drag: accumulate a path while the pointer is held, then commit the whole
  path as one batch on release

Every gesture takes the current LevelDocument and returns a GestureResult
holding a new document; the input document is never mutated. Gestures that
touch no brick return the input document unchanged.

Batch rules:
- A new brick replaces whatever sits at its exact position and slot; a
  full-size brick covers both slots of its cell
- A half-size brick is never placed over a full-size brick (dropped per cell)
- Out-of-grid points produce nothing
- Erasing a portal also erases its partner
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, Iterable, List, Optional, Sequence, Set, Tuple, Union

from .constants import DEFAULT_COLORS, FUSE_COLOR
from .data_model import Brick, BrickType, HalfSlot, LevelDocument, create_brick, legacy_cell
from .fuse_detection import PathPoint, classify_path
from .portal_pairing import generate_pair_ids_for_bricks, next_portal_id, portal_partners
from .position import bricks_at, resolve

logger = logging.getLogger(__name__)

PositionKey = Tuple[int, int, Optional[HalfSlot]]
PointLike = Union[PathPoint, Sequence]


class BrushMode(Enum):
    """What a gesture does to the cells it touches."""
    PAINT = "paint"
    ERASE = "erase"


@dataclass
class GestureResult:
    """Outcome of one gesture."""
    document: LevelDocument
    placed: List[Brick] = field(default_factory=list)
    removed: List[Brick] = field(default_factory=list)
    selected: Optional[Brick] = None    # Set when a paint click hit an occupied cell

    @property
    def changed(self) -> bool:
        return bool(self.placed or self.removed)


@dataclass
class DragState:
    """Path accumulated while the pointer is held down."""
    brush_mode: BrushMode
    fuse_mode: bool
    path: List[PathPoint] = field(default_factory=list)

    def add(self, point: PathPoint) -> bool:
        """Append a point unless it repeats one already on the path."""
        if point in self.path:
            return False
        self.path.append(point)
        return True


def as_path_point(value: PointLike) -> PathPoint:
    """Accept PathPoint or (col, row[, slot]) tuples; slot may be a HalfSlot or 'left'/'right'."""
    if isinstance(value, PathPoint):
        return value
    col, row = int(value[0]), int(value[1])
    slot = value[2] if len(value) > 2 else None
    if slot is not None and not isinstance(slot, HalfSlot):
        slot = HalfSlot(slot)
    return PathPoint(col, row, slot)


def occupancy_key(brick: Brick, document: LevelDocument) -> PositionKey:
    """(col, row, slot) a brick occupies; legacy bricks count as full-size at their pixel cell."""
    key = brick.position_key()
    if key is not None:
        return key
    col, row = legacy_cell(brick.x, brick.y, document.cell_size())
    return (col, row, None)


def place_bricks(document: LevelDocument, new_bricks: Iterable[Brick]) -> GestureResult:
    """Commit a batch of new bricks.

    Portal bricks without an id get one allocated against the bricks that
    survive replacement, so painting over a portal re-pairs with its partner.

    Args:
        document: Current level
        new_bricks: Bricks to insert, in gesture order (later wins on duplicates)

    Returns:
        GestureResult with the new document and the placed/removed bricks
    """
    existing_full: Set[Tuple[int, int]] = {
        key[:2] for key in (occupancy_key(b, document) for b in document.bricks)
        if key[2] is None
    }

    batch: Dict[PositionKey, Brick] = {}
    batch_full_cells: Set[Tuple[int, int]] = set()
    for brick in new_bricks:
        if not brick.has_grid_position or not document.in_grid(brick.col, brick.row):
            logger.debug("Skipping out-of-grid brick at (%s, %s)", brick.col, brick.row)
            continue
        cell = (brick.col, brick.row)
        if brick.is_half_size:
            if cell in batch_full_cells or cell in existing_full:
                logger.debug("Dropping half-size brick at %s: cell holds a full-size brick", cell)
                continue
        else:
            batch_full_cells.add(cell)
            for slot in HalfSlot:
                batch.pop((brick.col, brick.row, slot), None)
        batch[brick.position_key()] = brick

    if not batch:
        return GestureResult(document)

    kept: List[Brick] = []
    removed: List[Brick] = []
    for brick in document.bricks:
        key = occupancy_key(brick, document)
        if key[:2] in batch_full_cells or key in batch:
            removed.append(brick)
        else:
            kept.append(brick)

    placed = list(batch.values())
    needs_id = [i for i, b in enumerate(placed) if b.is_portal and not b.id]
    if needs_id:
        ids = generate_pair_ids_for_bricks(len(needs_id), kept)
        for i, portal_id in zip(needs_id, ids):
            placed[i] = placed[i].with_changes(id=portal_id)

    return GestureResult(document.with_bricks(kept + placed), placed=placed, removed=removed)


def _erase_targets(document: LevelDocument, point: PathPoint) -> List[Brick]:
    """Bricks an erase at a point hits: the full-size brick first, else the halves."""
    full = resolve(document, point.col, point.row)
    if full is not None and not full.is_half_size:
        return [full]
    if point.half_slot is not None:
        half = resolve(document, point.col, point.row, point.half_slot)
        return [half] if half is not None else []
    return [b for b in bricks_at(document, point.col, point.row) if b.is_half_size]


def erase_bricks(document: LevelDocument, points: Iterable[PathPoint]) -> GestureResult:
    """Remove the bricks under a set of points, plus the partners of erased portals."""
    targets: List[Brick] = []
    seen: Set[int] = set()
    for point in points:
        if not document.in_grid(point.col, point.row):
            continue
        for brick in _erase_targets(document, point):
            if id(brick) not in seen:
                seen.add(id(brick))
                targets.append(brick)

    if not targets:
        return GestureResult(document)

    for partner in portal_partners(document.bricks, targets):
        if id(partner) not in seen:
            seen.add(id(partner))
            targets.append(partner)

    kept = [b for b in document.bricks if id(b) not in seen]
    return GestureResult(document.with_bricks(kept), removed=targets)


def remove_bricks(document: LevelDocument, bricks: Iterable[Brick]) -> GestureResult:
    """Remove specific bricks (by identity) and the partners of any removed portals."""
    targets = list(bricks)
    seen = {id(b) for b in targets}
    for partner in portal_partners(document.bricks, targets):
        if id(partner) not in seen:
            seen.add(id(partner))
            targets.append(partner)
    kept = [b for b in document.bricks if id(b) not in seen]
    removed = [b for b in document.bricks if id(b) in seen]
    if not removed:
        return GestureResult(document)
    return GestureResult(document.with_bricks(kept), removed=removed)


class PlacementEngine:
    """
    Brush state plus the gesture protocol.

    Usage:
        engine = PlacementEngine()
        engine.select_brick_type(BrickType.PORTAL)
        result = engine.click(document, 0, 0)

        engine.set_fuse_mode(True)
        engine.begin_drag(result.document, 0, 0)
        engine.extend_drag(result.document, 1, 0)
        result = engine.end_drag(result.document)
    """

    def __init__(self, brush_mode: BrushMode = BrushMode.PAINT,
                 brick_type: BrickType = BrickType.DEFAULT,
                 color: int = DEFAULT_COLORS[0],
                 half_size: bool = False,
                 half_size_align: HalfSlot = HalfSlot.LEFT):
        self.brush_mode = brush_mode
        self.color = color
        self.half_size = half_size
        self.half_size_align = half_size_align
        self._brick_type = brick_type
        self._fuse_mode = False
        self._drag: Optional[DragState] = None

    # ------------------------------------------------------------------
    # Brush state
    # ------------------------------------------------------------------

    @property
    def brick_type(self) -> BrickType:
        return self._brick_type

    @property
    def fuse_mode(self) -> bool:
        return self._fuse_mode

    def select_brick_type(self, brick_type: BrickType):
        """Select a concrete brick type; picking any fuse variant enables fuse mode."""
        if brick_type.is_fuse:
            self.set_fuse_mode(True)
            return
        self._brick_type = brick_type
        self._fuse_mode = False

    def set_fuse_mode(self, enabled: bool):
        self._fuse_mode = enabled
        if enabled:
            self._brick_type = BrickType.DEFAULT

    def toggle_fuse_mode(self):
        self.set_fuse_mode(not self._fuse_mode)

    def _slot_for(self, half_slot: Optional[HalfSlot]) -> Optional[HalfSlot]:
        """Slot a new brick goes into under the current half-size setting."""
        if not self.half_size:
            return None
        return half_slot or self.half_size_align

    # ------------------------------------------------------------------
    # Click
    # ------------------------------------------------------------------

    def click(self, document: LevelDocument, col: int, row: int,
              half_slot: Optional[HalfSlot] = None) -> GestureResult:
        """Handle a single click on a cell (or one half of it)."""
        if self._fuse_mode or not document.in_grid(col, row):
            return GestureResult(document)

        if self.brush_mode is BrushMode.ERASE:
            result = erase_bricks(document, [PathPoint(col, row, half_slot)])
            logger.debug("Erase click at (%d, %d) removed %d bricks", col, row, len(result.removed))
            return result

        slot = self._slot_for(half_slot)
        existing = resolve(document, col, row, slot)
        if existing is None and slot is not None:
            # A full-size brick owns both halves of its cell
            existing = resolve(document, col, row)
        if existing is not None:
            return GestureResult(document, selected=existing)

        portal_id = None
        if self._brick_type is BrickType.PORTAL:
            portal_id = next_portal_id(document)

        brick = create_brick(col, row, self._brick_type, self.color, document.cell_size(),
                             portal_id=portal_id, half_slot=slot)
        result = place_bricks(document, [brick])
        logger.debug("Paint click at (%d, %d) placed %d bricks", col, row, len(result.placed))
        return result

    # ------------------------------------------------------------------
    # Drag
    # ------------------------------------------------------------------

    @property
    def is_dragging(self) -> bool:
        return self._drag is not None

    @property
    def drag_path(self) -> List[PathPoint]:
        return list(self._drag.path) if self._drag else []

    def _drag_point(self, col: int, row: int, half_slot: Optional[HalfSlot]) -> PathPoint:
        if self.brush_mode is BrushMode.ERASE:
            return PathPoint(col, row, half_slot)
        if not self.half_size:
            return PathPoint(col, row)
        if half_slot is None and self._drag and self._drag.path:
            half_slot = self._drag.path[-1].half_slot
        return PathPoint(col, row, self._slot_for(half_slot))

    def begin_drag(self, document: LevelDocument, col: int, row: int,
                   half_slot: Optional[HalfSlot] = None):
        """Start a drag gesture at a cell."""
        self._drag = DragState(brush_mode=self.brush_mode, fuse_mode=self._fuse_mode)
        self.extend_drag(document, col, row, half_slot)

    def extend_drag(self, document: LevelDocument, col: int, row: int,
                    half_slot: Optional[HalfSlot] = None):
        """Add a cell to the active drag path; out-of-grid cells are ignored."""
        if self._drag is None or not document.in_grid(col, row):
            return
        self._drag.add(self._drag_point(col, row, half_slot))

    def cancel_drag(self):
        self._drag = None

    def end_drag(self, document: LevelDocument) -> GestureResult:
        """Release the pointer: commit the accumulated path as one batch."""
        drag, self._drag = self._drag, None
        if drag is None or not drag.path:
            return GestureResult(document)
        return self._commit_path(document, drag.path, drag.brush_mode, drag.fuse_mode)

    def drag(self, document: LevelDocument, path: Iterable[PointLike]) -> GestureResult:
        """Run a whole drag gesture over a path in one call."""
        points = [as_path_point(p) for p in path]
        if not points:
            return GestureResult(document)
        self.begin_drag(document, points[0].col, points[0].row, points[0].half_slot)
        for point in points[1:]:
            self.extend_drag(document, point.col, point.row, point.half_slot)
        return self.end_drag(document)

    def _commit_path(self, document: LevelDocument, path: List[PathPoint],
                     brush_mode: BrushMode, fuse_mode: bool) -> GestureResult:
        if brush_mode is BrushMode.ERASE:
            result = erase_bricks(document, path)
            logger.debug("Erase drag over %d cells removed %d bricks", len(path), len(result.removed))
            return result

        cell_size = document.cell_size()
        if fuse_mode:
            fuse_types = classify_path(path)
            bricks = [
                create_brick(p.col, p.row, fuse_type, FUSE_COLOR, cell_size,
                             half_slot=p.half_slot)
                for p, fuse_type in zip(path, fuse_types)
            ]
        else:
            bricks = [
                create_brick(p.col, p.row, self._brick_type, self.color, cell_size,
                             half_slot=p.half_slot)
                for p in path
            ]

        result = place_bricks(document, bricks)
        logger.debug("Paint drag over %d cells placed %d bricks", len(path), len(result.placed))
        return result
