"""
Persistence for the level editor: QSettings working copy and JSON level files.
"""

from .level_storage import LevelStore, InMemoryLevelStore
from .level_files import (
    encode_level,
    decode_level,
    level_filename,
    save_level_to_path,
    load_level_from_path,
)

__all__ = [
    'LevelStore',
    'InMemoryLevelStore',
    'encode_level',
    'decode_level',
    'level_filename',
    'save_level_to_path',
    'load_level_from_path',
]
