"""
Grid-based brick level editing engine.

Provides the level document model and the rules applied to it: placement
and erase gestures, fuse direction detection, portal pairing, cleanup and
undo/redo history. EditorSession (in .session) ties these together with
persistence.
"""

from .data_model import (
    BrickType,
    HalfSlot,
    Brick,
    LevelDocument,
    brick_position,
    create_brick,
)
from .position import is_in_grid, resolve, bricks_at, bricks_in_area
from .portal_pairing import generate_pair_ids, next_portal_id, unpaired_portal_ids
from .fuse_detection import PathPoint, detect_fuse_type, classify_path
from .placement import (
    BrushMode,
    GestureResult,
    PlacementEngine,
    place_bricks,
    erase_bricks,
    remove_bricks,
)
from .validation import ValidationResult, ValidationIssue, clean_bricks, validate_level
from .history import HistoryManager
from .image_import import bricks_from_pixels

__all__ = [
    'BrickType',
    'HalfSlot',
    'Brick',
    'LevelDocument',
    'brick_position',
    'create_brick',
    'is_in_grid',
    'resolve',
    'bricks_at',
    'bricks_in_area',
    'generate_pair_ids',
    'next_portal_id',
    'unpaired_portal_ids',
    'PathPoint',
    'detect_fuse_type',
    'classify_path',
    'BrushMode',
    'GestureResult',
    'PlacementEngine',
    'place_bricks',
    'erase_bricks',
    'remove_bricks',
    'ValidationResult',
    'ValidationIssue',
    'clean_bricks',
    'validate_level',
    'HistoryManager',
    'bricks_from_pixels',
]
