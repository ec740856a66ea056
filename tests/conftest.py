"""
Shared test fixtures for brick editor tests.

Provides reusable level, brick, engine and session fixtures.
"""

import pytest

from brick_editor.level_editor.data_model import (
    Brick,
    BrickType,
    HalfSlot,
    LevelDocument,
    create_brick,
)
from brick_editor.level_editor.placement import PlacementEngine
from brick_editor.level_editor.session import EditorSession
from brick_editor.storage.level_storage import InMemoryLevelStore

CELL = (90.0, 30.0, 5.0)


@pytest.fixture
def cell_size():
    """Default cell geometry (width, height, padding)."""
    return CELL


@pytest.fixture
def empty_level() -> LevelDocument:
    """An empty 10x8 level with default geometry."""
    return LevelDocument()


@pytest.fixture
def make_brick():
    """Factory for bricks at grid positions on the default geometry."""
    def _make(col, row, brick_type=BrickType.DEFAULT, color=0xFF6B6B,
              portal_id=None, half_slot=None) -> Brick:
        return create_brick(col, row, brick_type, color, CELL,
                            portal_id=portal_id, half_slot=half_slot)
    return _make


@pytest.fixture
def sample_level(make_brick) -> LevelDocument:
    """A 10x8 level with a default brick, a metal brick, two halves and a portal pair."""
    return LevelDocument(
        name="Sample",
        bricks=[
            make_brick(2, 3),
            make_brick(4, 1, BrickType.METAL),
            make_brick(5, 5, half_slot=HalfSlot.LEFT),
            make_brick(5, 5, color=0x4ECDC4, half_slot=HalfSlot.RIGHT),
            make_brick(0, 0, BrickType.PORTAL, portal_id="portal_1_abc"),
            make_brick(9, 7, BrickType.PORTAL, portal_id="portal_1_abc"),
        ],
    )


@pytest.fixture
def engine() -> PlacementEngine:
    """A placement engine in paint mode with default bricks."""
    return PlacementEngine()


@pytest.fixture
def store() -> InMemoryLevelStore:
    """An empty in-memory working-copy store."""
    return InMemoryLevelStore()


@pytest.fixture
def session(store) -> EditorSession:
    """A session over an empty level backed by an in-memory store."""
    return EditorSession(store=store)
