"""
Tests for ghost brick cleanup and level validation.
"""

import logging
import math

from brick_editor.level_editor.data_model import Brick, BrickType, HalfSlot, LevelDocument
from brick_editor.level_editor.validation import (
    ValidationSeverity,
    clean_bricks,
    clean_document,
    validate_level,
)


def legacy(x, y, brick_type=BrickType.DEFAULT):
    return Brick(type=brick_type, col=None, row=None, x=x, y=y)


class TestCleanBricks:
    """Test the ghost brick filter."""

    def test_valid_level_unchanged(self, sample_level):
        cleaned = clean_bricks(sample_level.bricks, 10, 8)
        assert cleaned == sample_level.bricks

    def test_out_of_bounds_removed(self, make_brick):
        bricks = [make_brick(1, 1), make_brick(1, 1).with_changes(col=10)]
        assert clean_bricks(bricks, 10, 8) == bricks[:1]

    def test_negative_cell_removed(self, make_brick):
        assert clean_bricks([make_brick(0, 0).with_changes(row=-1)], 10, 8) == []

    def test_non_finite_removed(self, make_brick):
        brick = make_brick(1, 1).with_changes(x=math.nan)
        assert clean_bricks([brick], 10, 8) == []

    def test_infinite_removed(self, make_brick):
        brick = make_brick(1, 1).with_changes(y=math.inf)
        assert clean_bricks([brick], 10, 8) == []

    def test_ghost_portal_id_removed(self, make_brick):
        """Non-portal bricks must not carry portal ids."""
        ghost = make_brick(1, 1).with_changes(id="portal_1_abc")
        assert clean_bricks([ghost], 10, 8) == []

    def test_non_portal_id_kept(self, make_brick):
        brick = make_brick(1, 1).with_changes(id="brick-7")
        assert clean_bricks([brick], 10, 8) == [brick]

    def test_portal_without_id_removed(self, make_brick):
        assert clean_bricks([make_brick(0, 0, BrickType.PORTAL)], 10, 8) == []

    def test_legacy_dropped_without_cell_size(self):
        assert clean_bricks([legacy(235.0, 120.0)], 10, 8) == []

    def test_legacy_checked_by_pixel_cell(self, cell_size):
        inside = legacy(235.0, 120.0)
        outside = legacy(2000.0, 120.0)
        assert clean_bricks([inside, outside], 10, 8, cell_size) == [inside]

    def test_idempotent(self, sample_level, make_brick):
        bricks = sample_level.bricks + [
            make_brick(1, 1).with_changes(col=99),
            make_brick(2, 2).with_changes(id="portal_x"),
            make_brick(3, 3, BrickType.PORTAL),
        ]
        once = clean_bricks(bricks, 10, 8)
        assert clean_bricks(once, 10, 8) == once
        assert len(once) == len(sample_level.bricks)

    def test_removal_logged(self, make_brick, caplog):
        with caplog.at_level(logging.WARNING):
            clean_bricks([make_brick(0, 0, BrickType.PORTAL)], 10, 8)
        assert "PORTAL_MISSING_ID" in caplog.text

    def test_input_not_mutated(self, make_brick):
        bricks = [make_brick(1, 1).with_changes(col=50)]
        clean_bricks(bricks, 10, 8)
        assert len(bricks) == 1


class TestCleanDocument:
    """Test document-level cleanup."""

    def test_clean_document_returns_same_when_clean(self, sample_level):
        assert clean_document(sample_level) is sample_level

    def test_clean_document_keeps_legacy_inside(self):
        level = LevelDocument(bricks=[legacy(235.0, 120.0)])
        assert len(clean_document(level).bricks) == 1


class TestValidateLevel:
    """Test the validation report."""

    def test_empty_level_info(self, empty_level):
        result = validate_level(empty_level)
        assert result.is_valid
        assert [i.code for i in result.issues] == ["EMPTY"]
        assert result.issues[0].severity is ValidationSeverity.INFO

    def test_clean_level(self, sample_level):
        result = validate_level(sample_level)
        assert result.is_valid
        assert not result.has_warnings

    def test_ghost_reported_as_error(self, sample_level, make_brick):
        level = sample_level.with_bricks(sample_level.bricks + [make_brick(1, 1).with_changes(row=30)])
        result = validate_level(level)
        assert not result.is_valid
        assert result.error_count == 1
        assert result.issues[0].code == "OUT_OF_BOUNDS"

    def test_unpaired_portal_warning(self, make_brick):
        level = LevelDocument(bricks=[make_brick(0, 0, BrickType.PORTAL, portal_id="portal_1_a")])
        result = validate_level(level)
        assert result.is_valid
        assert [i.code for i in result.issues] == ["UNPAIRED_PORTAL"]

    def test_overlap_warning(self, make_brick):
        level = LevelDocument(bricks=[
            make_brick(1, 1),
            make_brick(1, 1, half_slot=HalfSlot.LEFT),
        ])
        result = validate_level(level)
        assert result.warning_count == 1
        assert result.issues[0].code == "OVERLAP"
        assert (result.issues[0].col, result.issues[0].row) == (1, 1)

    def test_validation_does_not_modify(self, sample_level, make_brick):
        level = sample_level.with_bricks(sample_level.bricks + [make_brick(1, 1).with_changes(col=-5)])
        validate_level(level)
        assert len(level.bricks) == len(sample_level.bricks) + 1
