"""
Directional fuse detection for drawn fuse paths.

Each cell visited while dragging a fuse gets one of six fuse variants,
chosen from the movement into and out of that cell:

    straight horizontal / vertical runs  -> fuse-horizontal / fuse-vertical
    turns                                -> one of the four corner variants

Grid rows grow downward, so a negative row delta is "up".

The result depends only on the cell and its two path neighbors, which keeps
the classification identical every time a path is replayed.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import List, Optional, Sequence, Tuple

from .data_model import BrickType, HalfSlot


@dataclass(frozen=True)
class PathPoint:
    """A cell (optionally a half-slot of it) visited during a drag."""
    col: int
    row: int
    half_slot: Optional[HalfSlot] = None


# Horizontal-then-vertical turns: (incoming col sign, outgoing row sign)
_HORIZONTAL_TO_VERTICAL = {
    (1, -1): BrickType.FUSE_LEFT_UP,
    (1, 1): BrickType.FUSE_LEFT_DOWN,
    (-1, -1): BrickType.FUSE_RIGHT_UP,
    (-1, 1): BrickType.FUSE_RIGHT_DOWN,
}

# Vertical-then-horizontal turns: (incoming row sign, outgoing col sign)
_VERTICAL_TO_HORIZONTAL = {
    (-1, 1): BrickType.FUSE_RIGHT_DOWN,
    (-1, -1): BrickType.FUSE_LEFT_DOWN,
    (1, 1): BrickType.FUSE_RIGHT_UP,
    (1, -1): BrickType.FUSE_LEFT_UP,
}


def _sign(value: int) -> int:
    return (value > 0) - (value < 0)


def movement(start: PathPoint, end: PathPoint) -> Tuple[int, int]:
    """(col delta, row delta) between two path points.

    Moving between the two halves of the same cell counts as one step
    sideways: +1 for left to right, -1 for right to left.
    """
    if (start.col == end.col and start.row == end.row
            and start.half_slot is not None and end.half_slot is not None
            and start.half_slot is not end.half_slot):
        return (1 if start.half_slot is HalfSlot.LEFT else -1), 0
    return end.col - start.col, end.row - start.row


def _is_horizontal(delta: Tuple[int, int]) -> bool:
    return delta[0] != 0 and delta[1] == 0


def _is_vertical(delta: Tuple[int, int]) -> bool:
    return delta[0] == 0 and delta[1] != 0


def _straight_type(delta: Tuple[int, int]) -> BrickType:
    if _is_vertical(delta):
        return BrickType.FUSE_VERTICAL
    return BrickType.FUSE_HORIZONTAL


def detect_fuse_type(current: PathPoint, prev: Optional[PathPoint],
                     next_point: Optional[PathPoint]) -> BrickType:
    """Fuse variant for one path cell given its neighbors on the path.

    Args:
        current: The cell being classified
        prev: Previous point on the path, None at the start
        next_point: Next point on the path, None at the end

    Returns:
        One of the six fuse BrickTypes
    """
    if prev is None and next_point is None:
        return BrickType.FUSE_HORIZONTAL

    if prev is None:
        return _straight_type(movement(current, next_point))
    if next_point is None:
        return _straight_type(movement(prev, current))

    incoming = movement(prev, current)
    outgoing = movement(current, next_point)

    if _is_horizontal(incoming) and _is_vertical(outgoing):
        return _HORIZONTAL_TO_VERTICAL[(_sign(incoming[0]), _sign(outgoing[1]))]
    if _is_vertical(incoming) and _is_horizontal(outgoing):
        return _VERTICAL_TO_HORIZONTAL[(_sign(incoming[1]), _sign(outgoing[0]))]
    if _is_horizontal(incoming) and _is_horizontal(outgoing):
        return BrickType.FUSE_HORIZONTAL
    if _is_vertical(incoming) and _is_vertical(outgoing):
        return BrickType.FUSE_VERTICAL

    # Diagonal jumps and other irregular moves
    return BrickType.FUSE_HORIZONTAL


def classify_path(path: Sequence[PathPoint]) -> List[BrickType]:
    """Fuse variant for every point of a path, in path order."""
    types = []
    for i, point in enumerate(path):
        prev = path[i - 1] if i > 0 else None
        next_point = path[i + 1] if i < len(path) - 1 else None
        types.append(detect_fuse_type(point, prev, next_point))
    return types
