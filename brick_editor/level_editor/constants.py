"""
Editor constants and the brick type catalog.

Central place for default colors, cell geometry and storage keys so the
engine, session and storage layers agree on them.
"""

from typing import Dict, List, NamedTuple


class BrickTypeInfo(NamedTuple):
    """Catalog entry for a brick type shown in the type selector."""
    type: str                 # BrickType value
    name: str
    color: int
    description: str


BRICK_TYPES: List[BrickTypeInfo] = [
    BrickTypeInfo("default", "Default", 0xFF6B6B, "1 hit, any color"),
    BrickTypeInfo("metal", "Metal", 0x888888, "5 hits, darkens each hit"),
    BrickTypeInfo("unbreakable", "Unbreakable", 0x333333, "Cannot be destroyed"),
    BrickTypeInfo("tnt", "TNT", 0xFF0000, "Explodes area around it"),
    BrickTypeInfo("fuse-horizontal", "Fuse", 0x00FF00,
                  "Drag to place fuses - automatically detects direction"),
    BrickTypeInfo("gold", "Gold", 0xFFD700, "3 hits, high coin value"),
    BrickTypeInfo("boost", "Boost", 0x8B4513, "Random buff/debuff"),
    BrickTypeInfo("portal", "Portal", 0x9B59B6, "Teleports to paired portal"),
]

CATALOG_COLORS: Dict[str, int] = {info.type: info.color for info in BRICK_TYPES}

DEFAULT_COLORS: List[int] = [
    0xFF6B6B, 0x4ECDC4, 0x45B7D1, 0xFFA07A, 0x98D8C8, 0xF7DC6F, 0xBB8FCE,
    0x85C1E2, 0xFF9FF3, 0x54A0FF, 0x5F27CD, 0x00D2D3, 0xFF6348, 0xFFA502,
    0xFF3838,
]

FUSE_COLOR = 0x00FF00

# Default cell geometry in pixels
DEFAULT_BRICK_WIDTH = 90.0
DEFAULT_BRICK_HEIGHT = 30.0
DEFAULT_PADDING = 5.0

DEFAULT_LEVEL_NAME = "New Level"
DEFAULT_LEVEL_WIDTH = 10
DEFAULT_LEVEL_HEIGHT = 8
DEFAULT_BACKGROUND_COLOR = 0x1A1A2E

DEFAULT_DROP_CHANCE = 0.15
GOLD_COIN_VALUE = 10

MAX_HISTORY = 50

STORAGE_KEY = "levelEditor/workingCopy"

PORTAL_ID_PREFIX = "portal_"
