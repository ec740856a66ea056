"""
Tests for working-copy persistence.

The QSettings-backed store is pointed at an INI file under tmp_path so tests
never touch the user's real settings.
"""

import json
import logging

import pytest
from PyQt5.QtCore import QSettings

from brick_editor.level_editor.constants import STORAGE_KEY
from brick_editor.level_editor.data_model import LevelDocument
from brick_editor.storage.level_storage import InMemoryLevelStore, LevelStore


@pytest.fixture
def ini_settings(tmp_path):
    """QSettings stored in a temporary INI file."""
    return QSettings(str(tmp_path / "editor.ini"), QSettings.IniFormat)


@pytest.fixture
def ini_store(ini_settings):
    return LevelStore(settings=ini_settings)


class TestLevelStore:
    """Test the QSettings-backed store."""

    def test_load_empty(self, ini_store):
        assert ini_store.load() is None

    def test_save_then_load(self, ini_store, sample_level):
        ini_store.save(sample_level)
        assert ini_store.load() == sample_level

    def test_stored_as_json_under_fixed_key(self, ini_store, ini_settings, sample_level):
        ini_store.save(sample_level)
        raw = ini_settings.value(STORAGE_KEY)
        assert json.loads(raw)['name'] == "Sample"

    def test_persists_across_instances(self, tmp_path, sample_level):
        path = str(tmp_path / "shared.ini")
        LevelStore(settings=QSettings(path, QSettings.IniFormat)).save(sample_level)
        reopened = LevelStore(settings=QSettings(path, QSettings.IniFormat))
        assert reopened.load() == sample_level

    def test_corrupt_value_returns_none(self, ini_store, ini_settings, caplog):
        ini_settings.setValue(STORAGE_KEY, "{not json")
        with caplog.at_level(logging.ERROR):
            assert ini_store.load() is None
        assert "Failed to load stored level" in caplog.text

    def test_non_level_value_returns_none(self, ini_store, ini_settings):
        ini_settings.setValue(STORAGE_KEY, "[1, 2, 3]")
        assert ini_store.load() is None

    def test_clear(self, ini_store, sample_level):
        ini_store.save(sample_level)
        ini_store.clear()
        assert ini_store.load() is None

    def test_custom_key(self, ini_settings, sample_level):
        store = LevelStore(settings=ini_settings, key="levelEditor/other")
        store.save(sample_level)
        assert LevelStore(settings=ini_settings).load() is None
        assert store.load() == sample_level


class TestInMemoryLevelStore:
    """Test the in-memory store."""

    def test_empty(self):
        assert InMemoryLevelStore().load() is None

    def test_preloaded(self, sample_level):
        assert InMemoryLevelStore(sample_level).load() == sample_level

    def test_save_counts(self, sample_level):
        store = InMemoryLevelStore()
        store.save(sample_level)
        store.save(LevelDocument())
        assert store.save_count == 2
        assert store.load() == LevelDocument()

    def test_corrupt_returns_none(self):
        store = InMemoryLevelStore()
        store.data = "nope"
        assert store.load() is None


class _FailingSettings:
    """Settings object whose writes fail the way a deleted QSettings does."""

    def __init__(self, status=QSettings.NoError):
        self._status = status
        self.raise_on_write = status == QSettings.NoError

    def setValue(self, key, value):
        if self.raise_on_write:
            raise RuntimeError("wrapped C/C++ object of type QSettings has been deleted")

    def sync(self):
        pass

    def status(self):
        return self._status


class TestLevelStoreSaveFailures:
    """Test that failed writes are logged and dropped."""

    def test_write_error_is_logged(self, sample_level, caplog):
        store = LevelStore(settings=_FailingSettings())
        with caplog.at_level(logging.ERROR):
            store.save(sample_level)
        assert "Failed to save level to settings" in caplog.text

    def test_bad_status_is_logged(self, sample_level, caplog):
        store = LevelStore(settings=_FailingSettings(status=QSettings.AccessError))
        with caplog.at_level(logging.ERROR):
            store.save(sample_level)
        assert "Failed to save level to settings: status" in caplog.text

    def test_successful_save_logs_nothing(self, ini_store, sample_level, caplog):
        with caplog.at_level(logging.ERROR):
            ini_store.save(sample_level)
        assert "Failed to save" not in caplog.text
