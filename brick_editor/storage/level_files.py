"""
JSON file transport for levels (export and import).

Level files use the same camelCase schema the game loads, so an exported
file can be dropped straight into the game's level folder.
"""

from __future__ import annotations

import json
import logging
import re
from pathlib import Path
from typing import Union

from brick_editor.exceptions import LevelDecodeError, LevelImportError
from brick_editor.level_editor.data_model import LevelDocument

logger = logging.getLogger(__name__)


def encode_level(document: LevelDocument) -> str:
    """Serialize a level to a JSON string."""
    return json.dumps(document.to_dict(), indent=2, ensure_ascii=False)


def decode_level(text: Union[str, bytes]) -> LevelDocument:
    """
    Parse a level from JSON text.

    Raises:
        LevelDecodeError: If the text is not JSON or not a level object
    """
    try:
        data = json.loads(text)
    except (json.JSONDecodeError, UnicodeDecodeError) as e:
        raise LevelDecodeError(f"Level is not valid JSON: {e}") from e
    return LevelDocument.from_dict(data)


def level_filename(name: str) -> str:
    """
    Build an export filename from a level name.

    Args:
        name: The level name

    Returns:
        A safe filename (whitespace runs replaced with underscores, unsafe chars removed)
    """
    safe = re.sub(r"\s+", "_", name.strip())
    # Remove any characters that aren't alphanumeric, underscore, hyphen or dot
    safe = "".join(c for c in safe if c.isalnum() or c in "_-.").strip(".")
    return (safe or "level") + ".json"


def save_level_to_path(document: LevelDocument, directory: Union[str, Path]) -> Path:
    """
    Export a level into a directory.

    Args:
        document: The level to export
        directory: Target directory (created if missing)

    Returns:
        Path to the written file

    Raises:
        OSError: If the file cannot be written
    """
    directory = Path(directory)
    directory.mkdir(parents=True, exist_ok=True)
    file_path = directory / level_filename(document.name)

    with open(file_path, 'w', encoding='utf-8') as f:
        f.write(encode_level(document))

    logger.info("Exported level '%s' to %s", document.name, file_path)
    return file_path


def load_level_from_path(file_path: Union[str, Path]) -> LevelDocument:
    """
    Import a level from a JSON file.

    Args:
        file_path: Path to the level file

    Returns:
        The decoded level (not yet cleaned)

    Raises:
        LevelImportError: If the file cannot be read or parsed
    """
    file_path = Path(file_path)
    try:
        with open(file_path, 'r', encoding='utf-8') as f:
            text = f.read()
        return decode_level(text)
    except (OSError, UnicodeDecodeError, LevelDecodeError) as e:
        logger.error("Failed to import level from %s: %s", file_path, e)
        raise LevelImportError() from e
