"""
Exceptions raised by the brick level editor.

Most editing errors are absorbed by the engine (out-of-grid gestures are
ignored, storage failures are logged). Only document decoding and file
import surface as exceptions.
"""


class BrickEditorError(Exception):
    """Base class for brick editor errors."""


class LevelDecodeError(BrickEditorError, ValueError):
    """Raised when a level document cannot be decoded from its dict/JSON form."""


class LevelImportError(BrickEditorError):
    """Raised when an imported level file cannot be read or parsed.

    The message is generic; the underlying cause is chained.
    """

    def __init__(self, message: str = "Invalid level file"):
        super().__init__(message)
