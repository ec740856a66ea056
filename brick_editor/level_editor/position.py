"""
Position resolution on the brick grid.

A cell can hold either one full-size brick or up to two half-size bricks
(left and right slot). Lookups by (col, row) match the full-size occupant;
lookups by (col, row, slot) match only the half-size occupant of that slot.

Documents saved before bricks carried col/row are resolved through a
separate pixel-bucketing path that only scans those legacy bricks.
"""

from typing import List, Optional

from .data_model import Brick, HalfSlot, LevelDocument, legacy_cell


def is_in_grid(document: LevelDocument, col: int, row: int) -> bool:
    return document.in_grid(col, row)


def resolve(document: LevelDocument, col: int, row: int,
            half_slot: Optional[HalfSlot] = None) -> Optional[Brick]:
    """Get the brick occupying a position, if any.

    Args:
        document: Level to search
        col: Grid column
        row: Grid row
        half_slot: When given, only the half-size brick in that slot matches

    Returns:
        The occupying brick, or None
    """
    if half_slot is not None:
        for brick in document.bricks:
            if brick.occupies(col, row) and brick.is_half_size and brick.slot is half_slot:
                return brick
        return None

    for brick in document.bricks:
        if brick.occupies(col, row) and not brick.is_half_size:
            return brick

    return _resolve_legacy(document, col, row)


def _resolve_legacy(document: LevelDocument, col: int, row: int) -> Optional[Brick]:
    """Pixel-based lookup for bricks that predate explicit col/row."""
    cell_size = document.cell_size()
    for brick in document.bricks:
        if brick.has_grid_position:
            continue
        if legacy_cell(brick.x, brick.y, cell_size) == (col, row):
            return brick
    return None


def bricks_at(document: LevelDocument, col: int, row: int) -> List[Brick]:
    """All bricks occupying a cell: the full-size brick or its halves."""
    return [b for b in document.bricks if b.occupies(col, row)]


def bricks_in_area(document: LevelDocument, start_col: int, start_row: int,
                   end_col: int, end_row: int) -> List[Brick]:
    """Bricks inside a rectangular cell area (corners inclusive, any order)."""
    min_col, max_col = sorted((start_col, end_col))
    min_row, max_row = sorted((start_row, end_row))

    found: List[Brick] = []
    for row in range(min_row, max_row + 1):
        for col in range(min_col, max_col + 1):
            full = resolve(document, col, row)
            if full is not None and not full.is_half_size:
                found.append(full)
                continue
            for slot in HalfSlot:
                half = resolve(document, col, row, slot)
                if half is not None:
                    found.append(half)
    return found
