"""
Brick Level Editor

Editing engine for brick-breaker levels: document model, placement and
erase gestures, fuse and portal rules, cleanup and undo/redo history.
"""

__version__ = "0.1.0"
