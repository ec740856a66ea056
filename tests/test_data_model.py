"""
Tests for the level document model.

Tests pixel positions, brick attributes and dict serialization.
"""

import pytest

from brick_editor.exceptions import LevelDecodeError
from brick_editor.level_editor.data_model import (
    Brick,
    BrickType,
    HalfSlot,
    LevelDocument,
    brick_position,
    create_brick,
    is_portal_id,
    legacy_cell,
)


class TestBrickPosition:
    """Test pixel positions derived from grid cells."""

    def test_full_size_at_origin(self, cell_size):
        """Full-size brick sits at the cell center."""
        assert brick_position(0, 0, cell_size) == (45.0, 15.0)

    def test_full_size_uses_cell_pitch(self, cell_size):
        """Cells are laid out on a (size + padding) pitch."""
        assert brick_position(2, 3, cell_size) == (235.0, 120.0)

    def test_left_half(self, cell_size):
        """Left half is centered in the left (w - p) / 2 span."""
        x, y = brick_position(0, 0, cell_size, HalfSlot.LEFT)
        assert x == pytest.approx(21.25)
        assert y == 15.0

    def test_right_half(self, cell_size):
        """Right half starts one padding gap after the cell middle."""
        x, _ = brick_position(0, 0, cell_size, HalfSlot.RIGHT)
        assert x == pytest.approx(68.75)

    def test_halves_keep_padding_gap(self, cell_size):
        """Gap between the two halves equals the padding."""
        half_width = (90.0 - 5.0) / 2
        left, _ = brick_position(1, 0, cell_size, HalfSlot.LEFT)
        right, _ = brick_position(1, 0, cell_size, HalfSlot.RIGHT)
        assert (right - half_width / 2) - (left + half_width / 2) == pytest.approx(5.0)

    def test_legacy_cell_inverts_position(self, cell_size):
        """Pixel bucketing maps a brick center back to its cell."""
        x, y = brick_position(7, 5, cell_size)
        assert legacy_cell(x, y, cell_size) == (7, 5)


class TestCreateBrick:
    """Test the brick factory."""

    def test_default_brick_uses_selected_color(self, cell_size):
        brick = create_brick(2, 3, BrickType.DEFAULT, 0x123456, cell_size)
        assert brick.color == 0x123456
        assert brick.health == 1
        assert brick.coin_value == 8
        assert brick.drop_chance == pytest.approx(0.15)

    def test_metal_brick_uses_catalog(self, cell_size):
        brick = create_brick(0, 0, BrickType.METAL, 0x123456, cell_size)
        assert brick.color == 0x888888
        assert brick.health == 5
        assert brick.max_health == 5

    def test_gold_coin_value(self, cell_size):
        brick = create_brick(0, 6, BrickType.GOLD, 0, cell_size)
        assert brick.coin_value == 10
        assert brick.health == 3

    def test_portal_keeps_id(self, cell_size):
        brick = create_brick(0, 0, BrickType.PORTAL, 0, cell_size, portal_id="portal_1_a")
        assert brick.id == "portal_1_a"
        assert brick.is_portal

    def test_non_portal_drops_id(self, cell_size):
        """Only portals carry pair ids."""
        brick = create_brick(0, 0, BrickType.TNT, 0, cell_size, portal_id="portal_1_a")
        assert brick.id is None

    def test_half_size_brick(self, cell_size):
        brick = create_brick(1, 1, BrickType.DEFAULT, 0, cell_size, half_slot=HalfSlot.RIGHT)
        assert brick.is_half_size
        assert brick.slot is HalfSlot.RIGHT
        assert brick.position_key() == (1, 1, HalfSlot.RIGHT)


class TestBrickType:
    """Test the brick type set."""

    def test_six_fuse_variants(self):
        assert sum(1 for t in BrickType if t.is_fuse) == 6

    def test_wire_values(self):
        assert BrickType("fuse-left-up") is BrickType.FUSE_LEFT_UP
        assert BrickType.DEFAULT.value == "default"

    def test_portal_id_shape(self):
        assert is_portal_id("portal_123_abc")
        assert not is_portal_id("brick_1")
        assert not is_portal_id(None)


class TestLevelDocument:
    """Test document-level operations."""

    def test_defaults(self, empty_level):
        assert empty_level.name == "New Level"
        assert (empty_level.width, empty_level.height) == (10, 8)
        assert empty_level.background_color == 0x1A1A2E
        assert empty_level.cell_size() == (90.0, 30.0, 5.0)

    def test_cell_size_fallback(self):
        level = LevelDocument(brick_width=0, brick_height=-10, padding=8)
        assert level.cell_size() == (90.0, 30.0, 8)

    def test_copy_is_deep(self, sample_level):
        copied = sample_level.copy()
        copied.bricks[0].color = 0
        assert sample_level.bricks[0].color != 0

    def test_resize_drops_bricks_beyond_edge(self, sample_level):
        """Bricks in columns/rows past the new extents are removed."""
        resized = sample_level.resized(width=5, height=5)
        cells = {(b.col, b.row) for b in resized.bricks}
        assert (9, 7) not in cells
        assert (5, 5) not in cells
        assert (2, 3) in cells
        assert (4, 1) in cells

    def test_resize_clamps_to_one(self, empty_level):
        resized = empty_level.resized(width=0, height=-3)
        assert (resized.width, resized.height) == (1, 1)

    def test_resize_does_not_mutate(self, sample_level):
        count = len(sample_level.bricks)
        sample_level.resized(width=1, height=1)
        assert len(sample_level.bricks) == count
        assert sample_level.width == 10


class TestSerialization:
    """Test dict round trips and lenient decoding."""

    def test_camel_case_keys(self, sample_level):
        data = sample_level.to_dict()
        assert data['backgroundColor'] == 0x1A1A2E
        assert data['brickWidth'] == 90.0
        brick = data['bricks'][0]
        assert {'x', 'y', 'col', 'row', 'maxHealth', 'dropChance', 'coinValue',
                'type', 'isHalfSize'} <= set(brick)

    def test_half_size_align_serialized(self, sample_level):
        halves = [b for b in sample_level.to_dict()['bricks'] if b['isHalfSize']]
        assert {b['halfSizeAlign'] for b in halves} == {'left', 'right'}

    def test_round_trip(self, sample_level):
        assert LevelDocument.from_dict(sample_level.to_dict()) == sample_level

    def test_legacy_brick_without_grid_position(self):
        """Bricks saved before col/row existed keep only pixel positions."""
        level = LevelDocument.from_dict({
            'width': 10, 'height': 8,
            'bricks': [{'x': 235.0, 'y': 120.0, 'type': 'default'}],
        })
        brick = level.bricks[0]
        assert brick.col is None and brick.row is None
        assert not brick.has_grid_position

    def test_missing_pixel_position_recomputed(self):
        level = LevelDocument.from_dict({'bricks': [{'col': 2, 'row': 3, 'type': 'default'}]})
        assert (level.bricks[0].x, level.bricks[0].y) == (235.0, 120.0)

    def test_malformed_brick_skipped(self):
        level = LevelDocument.from_dict({
            'bricks': [
                {'col': 1, 'row': 1, 'type': 'no-such-type'},
                'not a brick',
                {'col': 2, 'row': 2, 'type': 'metal'},
            ],
        })
        assert [b.type for b in level.bricks] == [BrickType.METAL]

    def test_non_mapping_rejected(self):
        with pytest.raises(LevelDecodeError):
            LevelDocument.from_dict([1, 2, 3])

    def test_bad_grid_rejected(self):
        with pytest.raises(LevelDecodeError):
            LevelDocument.from_dict({'width': 0, 'height': 8})

    def test_bad_bricks_rejected(self):
        with pytest.raises(LevelDecodeError):
            LevelDocument.from_dict({'bricks': {'a': 1}})

    def test_decode_error_is_value_error(self):
        with pytest.raises(ValueError):
            LevelDocument.from_dict({'width': 'wide'})

    def test_brick_from_dict_requires_position(self, cell_size):
        with pytest.raises(KeyError):
            Brick.from_dict({'type': 'default'}, cell_size)

    def test_out_of_range_header_rejected(self):
        """JSON 1e400 decodes to infinity, which has no integer value."""
        with pytest.raises(LevelDecodeError):
            LevelDocument.from_dict({'width': float('inf'), 'height': 8})

    def test_out_of_range_brick_skipped(self):
        level = LevelDocument.from_dict({
            'bricks': [
                {'col': 1, 'row': 1, 'type': 'default', 'color': float('inf')},
                {'col': 2, 'row': 2, 'type': 'metal', 'health': 1e400},
                {'col': 3, 'row': 3, 'type': 'gold'},
            ],
        })
        assert [b.type for b in level.bricks] == [BrickType.GOLD]
