"""
Data model for the brick level editor.

Defines the core data structures for brick-breaker levels:
- BrickType: Closed set of brick variants (default, metal, portal, fuses, ...)
- HalfSlot: Left/right subdivision of a cell used by half-size bricks
- Brick: A brick on the grid with its derived pixel position and attributes
- LevelDocument: Complete level with grid extents, cell geometry and bricks

Pixel System:
- Cells are laid out on a (brick_width + padding) x (brick_height + padding) pitch
- Full-size bricks sit at the cell center
- Half-size bricks are (brick_width - padding) / 2 wide, separated by one padding gap
- Bricks from legacy documents may lack col/row; their cell is derived from x/y
"""

from __future__ import annotations

import copy
import dataclasses
import logging
import math
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Mapping, Optional, Tuple

from brick_editor.exceptions import LevelDecodeError
from .constants import (
    CATALOG_COLORS,
    DEFAULT_BACKGROUND_COLOR,
    DEFAULT_BRICK_HEIGHT,
    DEFAULT_BRICK_WIDTH,
    DEFAULT_COLORS,
    DEFAULT_DROP_CHANCE,
    DEFAULT_LEVEL_HEIGHT,
    DEFAULT_LEVEL_NAME,
    DEFAULT_LEVEL_WIDTH,
    DEFAULT_PADDING,
    GOLD_COIN_VALUE,
    PORTAL_ID_PREFIX,
)

logger = logging.getLogger(__name__)

# (cell width, cell height, padding) in pixels
CellSize = Tuple[float, float, float]


class BrickType(Enum):
    """Brick variants understood by the game."""
    DEFAULT = "default"
    METAL = "metal"
    UNBREAKABLE = "unbreakable"
    TNT = "tnt"
    GOLD = "gold"
    BOOST = "boost"
    PORTAL = "portal"
    FUSE_HORIZONTAL = "fuse-horizontal"
    FUSE_VERTICAL = "fuse-vertical"
    FUSE_LEFT_UP = "fuse-left-up"
    FUSE_RIGHT_UP = "fuse-right-up"
    FUSE_LEFT_DOWN = "fuse-left-down"
    FUSE_RIGHT_DOWN = "fuse-right-down"

    @property
    def is_fuse(self) -> bool:
        """True for the six directional fuse variants."""
        return self.value.startswith("fuse-")


FUSE_TYPES = frozenset(t for t in BrickType if t.is_fuse)


class HalfSlot(Enum):
    """Which half of a cell a half-size brick occupies."""
    LEFT = "left"
    RIGHT = "right"

    def opposite(self) -> 'HalfSlot':
        return HalfSlot.RIGHT if self is HalfSlot.LEFT else HalfSlot.LEFT


BRICK_HEALTH: Dict[BrickType, int] = {
    BrickType.DEFAULT: 1,
    BrickType.METAL: 5,
    BrickType.GOLD: 3,
    BrickType.BOOST: 1,
    BrickType.PORTAL: 1,
    BrickType.UNBREAKABLE: 999,
}


def brick_health(brick_type: BrickType) -> int:
    """Hit points a freshly placed brick of this type starts with."""
    return BRICK_HEALTH.get(brick_type, 1)


def brick_color(brick_type: BrickType, selected_color: int) -> int:
    """Color for a new brick: the user's color for default bricks, the catalog color otherwise."""
    if brick_type is BrickType.DEFAULT:
        return selected_color
    return CATALOG_COLORS.get(brick_type.value, selected_color)


def default_coin_value(brick_type: BrickType, row: int) -> int:
    if brick_type is BrickType.GOLD:
        return GOLD_COIN_VALUE
    return (row + 1) * 2


def is_portal_id(value: Optional[str]) -> bool:
    """Check whether an identifier has the portal-id shape."""
    return bool(value) and value.startswith(PORTAL_ID_PREFIX)


def brick_position(col: int, row: int, cell_size: CellSize,
                   half_slot: Optional[HalfSlot] = None) -> Tuple[float, float]:
    """Pixel center of a brick placed at (col, row).

    Args:
        col: Grid column
        row: Grid row
        cell_size: (cell width, cell height, padding)
        half_slot: Slot for half-size bricks, None for full-size

    Returns:
        (x, y) pixel center
    """
    width, height, padding = cell_size
    cell_left = col * (width + padding)
    y = row * (height + padding) + height / 2

    if half_slot is None:
        return cell_left + width / 2, y

    # The gap between two halves matches the gap between cells
    half_width = (width - padding) / 2
    if half_slot is HalfSlot.LEFT:
        return cell_left + half_width / 2, y
    return cell_left + width / 2 + padding / 2 + half_width / 2, y


def legacy_cell(x: float, y: float, cell_size: CellSize) -> Tuple[int, int]:
    """Grid cell a pixel position falls in (used for bricks lacking col/row)."""
    width, height, padding = cell_size
    return int(math.floor(x / (width + padding))), int(math.floor(y / (height + padding)))


@dataclass
class Brick:
    """A brick on the grid."""
    type: BrickType
    col: Optional[int]                # None only for legacy documents
    row: Optional[int]
    x: float                          # Derived pixel center
    y: float
    color: int = DEFAULT_COLORS[0]    # Meaningful only for DEFAULT bricks
    drop_chance: float = DEFAULT_DROP_CHANCE
    coin_value: int = 2
    health: int = 1
    max_health: int = 1
    is_half_size: bool = False
    half_size_align: Optional[HalfSlot] = None
    id: Optional[str] = None          # Portal pair id for PORTAL bricks

    @property
    def has_grid_position(self) -> bool:
        return self.col is not None and self.row is not None

    @property
    def slot(self) -> Optional[HalfSlot]:
        """Half-slot this brick occupies, None for full-size bricks."""
        if self.is_half_size:
            return self.half_size_align or HalfSlot.LEFT
        return None

    @property
    def is_portal(self) -> bool:
        return self.type is BrickType.PORTAL

    def position_key(self) -> Optional[Tuple[int, int, Optional[HalfSlot]]]:
        """(col, row, slot) occupancy key, None for legacy bricks."""
        if not self.has_grid_position:
            return None
        return (self.col, self.row, self.slot)

    def occupies(self, col: int, row: int) -> bool:
        return self.col == col and self.row == row

    def with_changes(self, **changes: Any) -> 'Brick':
        """Return a copy of this brick with some attributes replaced."""
        return dataclasses.replace(self, **changes)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for serialization."""
        result: Dict[str, Any] = {
            'x': self.x,
            'y': self.y,
        }
        if self.col is not None:
            result['col'] = self.col
        if self.row is not None:
            result['row'] = self.row
        result.update({
            'health': self.health,
            'maxHealth': self.max_health,
            'color': self.color,
            'dropChance': self.drop_chance,
            'coinValue': self.coin_value,
            'type': self.type.value,
            'isHalfSize': self.is_half_size,
        })
        if self.is_half_size and self.half_size_align is not None:
            result['halfSizeAlign'] = self.half_size_align.value
        if self.id is not None:
            result['id'] = self.id
        return result

    @staticmethod
    def from_dict(data: Mapping[str, Any], cell_size: CellSize) -> 'Brick':
        """Create from dictionary.

        Bricks written before col/row were stored keep col/row as None.
        Bricks missing x/y get them recomputed from col/row.

        Raises:
            KeyError, TypeError, ValueError: On malformed brick data
        """
        brick_type = BrickType(data['type'])
        col = data.get('col')
        row = data.get('row')
        col = int(col) if col is not None else None
        row = int(row) if row is not None else None

        is_half_size = bool(data.get('isHalfSize', False))
        align = data.get('halfSizeAlign')
        half_size_align = HalfSlot(align) if is_half_size and align else None
        if is_half_size and half_size_align is None:
            half_size_align = HalfSlot.LEFT

        if 'x' in data and 'y' in data:
            x, y = float(data['x']), float(data['y'])
        elif col is not None and row is not None:
            x, y = brick_position(col, row, cell_size, half_size_align)
        else:
            raise KeyError("brick has neither pixel nor grid position")

        health = int(data.get('health', brick_health(brick_type)))
        brick_id = data.get('id')
        return Brick(
            type=brick_type,
            col=col,
            row=row,
            x=x,
            y=y,
            color=int(data.get('color', brick_color(brick_type, DEFAULT_COLORS[0]))),
            drop_chance=float(data.get('dropChance', DEFAULT_DROP_CHANCE)),
            coin_value=int(data.get('coinValue', default_coin_value(brick_type, row or 0))),
            health=health,
            max_health=int(data.get('maxHealth', health)),
            is_half_size=is_half_size,
            half_size_align=half_size_align,
            id=str(brick_id) if brick_id else None,
        )


def create_brick(col: int, row: int, brick_type: BrickType, selected_color: int,
                 cell_size: CellSize, portal_id: Optional[str] = None,
                 half_slot: Optional[HalfSlot] = None) -> Brick:
    """Factory for a new brick at a grid position.

    Args:
        col: Grid column
        row: Grid row
        brick_type: Type of brick to create
        selected_color: Active palette color (used by DEFAULT bricks)
        cell_size: (cell width, cell height, padding)
        portal_id: Pair id, only kept for PORTAL bricks
        half_slot: Slot for a half-size brick, None for full-size

    Returns:
        New Brick with pixel position and gameplay attributes derived
    """
    x, y = brick_position(col, row, cell_size, half_slot)
    health = brick_health(brick_type)
    return Brick(
        type=brick_type,
        col=col,
        row=row,
        x=x,
        y=y,
        color=brick_color(brick_type, selected_color),
        drop_chance=DEFAULT_DROP_CHANCE,
        coin_value=default_coin_value(brick_type, row),
        health=health,
        max_health=health,
        is_half_size=half_slot is not None,
        half_size_align=half_slot,
        id=portal_id if brick_type is BrickType.PORTAL else None,
    )


@dataclass
class LevelDocument:
    """Complete level: grid extents, cell geometry and bricks."""
    name: str = DEFAULT_LEVEL_NAME
    width: int = DEFAULT_LEVEL_WIDTH                  # Columns
    height: int = DEFAULT_LEVEL_HEIGHT                # Rows
    bricks: List[Brick] = field(default_factory=list)
    background_color: int = DEFAULT_BACKGROUND_COLOR
    brick_width: float = DEFAULT_BRICK_WIDTH
    brick_height: float = DEFAULT_BRICK_HEIGHT
    padding: float = DEFAULT_PADDING

    def cell_size(self) -> CellSize:
        """Cell geometry, falling back to defaults for unset or non-positive values."""
        return (
            self.brick_width if self.brick_width > 0 else DEFAULT_BRICK_WIDTH,
            self.brick_height if self.brick_height > 0 else DEFAULT_BRICK_HEIGHT,
            self.padding if self.padding > 0 else DEFAULT_PADDING,
        )

    def in_grid(self, col: int, row: int) -> bool:
        return 0 <= col < self.width and 0 <= row < self.height

    def copy(self) -> 'LevelDocument':
        """Deep copy, safe to mutate without affecting this document."""
        return copy.deepcopy(self)

    def with_bricks(self, bricks: List[Brick]) -> 'LevelDocument':
        """Return a new document sharing everything but the brick list."""
        return dataclasses.replace(self, bricks=list(bricks))

    def brick_center(self, brick: Brick) -> Tuple[float, float]:
        """Pixel center derived from col/row, or stored x/y for legacy bricks."""
        if brick.has_grid_position:
            return brick_position(brick.col, brick.row, self.cell_size())
        return brick.x, brick.y

    def resized(self, width: Optional[int] = None,
                height: Optional[int] = None) -> 'LevelDocument':
        """Return a copy with new grid extents.

        Bricks whose pixel center falls beyond the last column/row of the new
        grid are dropped.
        """
        new_width = max(1, int(width if width is not None else self.width))
        new_height = max(1, int(height if height is not None else self.height))
        cell_width, cell_height, padding = self.cell_size()
        max_x = (new_width - 1) * (cell_width + padding) + cell_width / 2
        max_y = (new_height - 1) * (cell_height + padding) + cell_height / 2

        kept = []
        for brick in self.bricks:
            x, y = self.brick_center(brick)
            if x <= max_x and y <= max_y:
                kept.append(brick)

        dropped = len(self.bricks) - len(kept)
        if dropped:
            logger.debug("Resize to %dx%d dropped %d bricks", new_width, new_height, dropped)
        return dataclasses.replace(self, width=new_width, height=new_height, bricks=kept)

    def with_cell_size(self, cell_size: CellSize) -> 'LevelDocument':
        """Return a copy with the given cell geometry baked in."""
        width, height, padding = cell_size
        return dataclasses.replace(
            self, bricks=list(self.bricks),
            brick_width=width, brick_height=height, padding=padding,
        )

    def to_dict(self) -> Dict[str, Any]:
        """Serialize level to dictionary for JSON export."""
        return {
            'name': self.name,
            'width': self.width,
            'height': self.height,
            'bricks': [b.to_dict() for b in self.bricks],
            'backgroundColor': self.background_color,
            'brickWidth': self.brick_width,
            'brickHeight': self.brick_height,
            'padding': self.padding,
        }

    @staticmethod
    def from_dict(data: Any) -> 'LevelDocument':
        """Deserialize level from dictionary.

        Malformed bricks are skipped with a warning so one bad entry does not
        discard the whole level.

        Raises:
            LevelDecodeError: If the top-level structure or grid extents are invalid
        """
        if not isinstance(data, Mapping):
            raise LevelDecodeError(f"Level must be an object, got {type(data).__name__}")

        try:
            width = int(data.get('width', DEFAULT_LEVEL_WIDTH))
            height = int(data.get('height', DEFAULT_LEVEL_HEIGHT))
            level = LevelDocument(
                name=str(data.get('name', DEFAULT_LEVEL_NAME)),
                width=width,
                height=height,
                background_color=int(data.get('backgroundColor', DEFAULT_BACKGROUND_COLOR)),
                brick_width=float(data.get('brickWidth') or DEFAULT_BRICK_WIDTH),
                brick_height=float(data.get('brickHeight') or DEFAULT_BRICK_HEIGHT),
                padding=float(data.get('padding') or DEFAULT_PADDING),
            )
        except (TypeError, ValueError, OverflowError) as e:
            raise LevelDecodeError(f"Invalid level header: {e}") from e

        if width <= 0 or height <= 0:
            raise LevelDecodeError(f"Invalid grid size {width}x{height}")

        bricks_data = data.get('bricks', [])
        if not isinstance(bricks_data, list):
            raise LevelDecodeError("'bricks' must be a list")

        cell_size = level.cell_size()
        for i, brick_data in enumerate(bricks_data):
            if not isinstance(brick_data, Mapping):
                logger.warning("Skipping brick %d: not an object", i)
                continue
            try:
                level.bricks.append(Brick.from_dict(brick_data, cell_size))
            except (KeyError, TypeError, ValueError, OverflowError) as e:
                logger.warning("Skipping malformed brick %d: %s", i, e)

        return level
