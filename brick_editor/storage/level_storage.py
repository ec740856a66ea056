"""
Working-copy persistence for the level editor.

The level being edited is auto-saved after every change and restored on the
next start. Documents are stored as a JSON string under a fixed QSettings
key, so the working copy lives alongside the rest of the application's
settings.

Usage:
    store = LevelStore()
    store.save(document)
    document = store.load()    # None when nothing is stored or it is unreadable
"""

from __future__ import annotations

import json
import logging
from typing import Optional

from PyQt5.QtCore import QSettings

from brick_editor.exceptions import LevelDecodeError
from brick_editor.level_editor.constants import STORAGE_KEY
from brick_editor.level_editor.data_model import LevelDocument

logger = logging.getLogger(__name__)

SETTINGS_ORGANIZATION = "BrickBreaker"
SETTINGS_APPLICATION = "LevelEditor"


class LevelStore:
    """Working copy stored in QSettings.

    Note: QSettings is accessed lazily to avoid issues with object lifetime
    in test environments where QApplication may not persist. An explicit
    QSettings instance (e.g. an INI file) can be injected instead.
    """

    def __init__(self, settings: Optional[QSettings] = None, key: str = STORAGE_KEY):
        self._settings = settings
        self._owns_settings = settings is None
        self.key = key

    def _get_settings(self) -> QSettings:
        """Get or create the QSettings instance."""
        if not self._owns_settings:
            return self._settings
        try:
            # Test if the existing settings object is still valid
            if self._settings is not None:
                self._settings.organizationName()
                return self._settings
        except RuntimeError:
            # Object was deleted, need to recreate
            pass

        self._settings = QSettings(SETTINGS_ORGANIZATION, SETTINGS_APPLICATION)
        return self._settings

    def load(self) -> Optional[LevelDocument]:
        """Load the stored working copy.

        Returns:
            The stored level, or None if nothing is stored or it cannot be read
        """
        try:
            raw = self._get_settings().value(self.key, None)
        except RuntimeError as e:
            logger.error("Failed to read level from settings: %s", e)
            return None

        if not raw:
            return None

        try:
            return LevelDocument.from_dict(json.loads(str(raw)))
        except (json.JSONDecodeError, LevelDecodeError) as e:
            logger.error("Failed to load stored level: %s", e)
            return None

    def save(self, document: LevelDocument):
        """Store the working copy; failures are logged and the write is dropped."""
        try:
            data = json.dumps(document.to_dict())
        except (TypeError, ValueError) as e:
            logger.error("Failed to serialize level '%s': %s", document.name, e)
            return

        try:
            settings = self._get_settings()
            settings.setValue(self.key, data)
            settings.sync()
        except RuntimeError as e:
            logger.error("Failed to save level to settings: %s", e)
            return

        if settings.status() != QSettings.NoError:
            logger.error("Failed to save level to settings: status %s", settings.status())

    def clear(self):
        """Remove the stored working copy."""
        try:
            settings = self._get_settings()
            settings.remove(self.key)
            settings.sync()
        except RuntimeError as e:
            logger.error("Failed to clear stored level: %s", e)


class InMemoryLevelStore:
    """Store with the LevelStore interface that keeps the JSON string in memory."""

    def __init__(self, document: Optional[LevelDocument] = None):
        self.data: Optional[str] = None
        self.save_count = 0
        if document is not None:
            self.data = json.dumps(document.to_dict())

    def load(self) -> Optional[LevelDocument]:
        if not self.data:
            return None
        try:
            return LevelDocument.from_dict(json.loads(self.data))
        except (json.JSONDecodeError, LevelDecodeError) as e:
            logger.error("Failed to load stored level: %s", e)
            return None

    def save(self, document: LevelDocument):
        self.data = json.dumps(document.to_dict())
        self.save_count += 1

    def clear(self):
        self.data = None
