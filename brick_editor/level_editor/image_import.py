"""
Image import: convert an RGBA image into default bricks.

The image is fitted into the grid (one empty cell of margin on every side),
then each cell is sampled at its left and right quarter. Cells become a
full-size brick, one or two half-size bricks, or stay empty depending on
which halves are opaque and whether their colors match.
"""

from __future__ import annotations

import logging
from typing import List, Optional, Tuple

import numpy as np

from .data_model import Brick, BrickType, CellSize, HalfSlot, create_brick

logger = logging.getLogger(__name__)

# Alpha below this counts as transparent
ALPHA_THRESHOLD = 128
# Max per-channel difference for two colors to count as the same
COLOR_SIMILARITY = 10
# Empty cells kept around the fitted image
MARGIN_CELLS = 1


def rgb_to_color(rgb) -> int:
    """Pack an (r, g, b) triple into 0xRRGGBB."""
    r, g, b = (int(c) for c in rgb[:3])
    return (r << 16) | (g << 8) | b


def colors_similar(color1: int, color2: int, threshold: int = COLOR_SIMILARITY) -> bool:
    """Check if two 0xRRGGBB colors differ by at most `threshold` on every channel."""
    for shift in (16, 8, 0):
        if abs(((color1 >> shift) & 0xFF) - ((color2 >> shift) & 0xFF)) > threshold:
            return False
    return True


def fit_image(image_width: int, image_height: int, grid_width: int, grid_height: int,
              image_scale: float = 1.0) -> Tuple[float, float, float, float]:
    """Placement of the image on the grid, in cell units.

    Returns:
        (offset_x, offset_y, scaled_width, scaled_height)
    """
    available_width = max(1, grid_width - MARGIN_CELLS * 2)
    available_height = max(1, grid_height - MARGIN_CELLS * 2)
    scale = min(available_width / image_width, available_height / image_height) * image_scale
    scaled_width = image_width * scale
    scaled_height = image_height * scale
    return (
        (grid_width - scaled_width) / 2,
        (grid_height - scaled_height) / 2,
        scaled_width,
        scaled_height,
    )


def _sample(pixels: np.ndarray, grid_x: np.ndarray, grid_y: np.ndarray,
            fit: Tuple[float, float, float, float]) -> Tuple[np.ndarray, np.ndarray]:
    """Nearest-neighbor lookup of grid-space points.

    Returns:
        (rgb array of shape (..., 3), opaque mask)
    """
    image_height, image_width = pixels.shape[:2]
    offset_x, offset_y, scaled_width, scaled_height = fit

    u = (grid_x - offset_x) / scaled_width * image_width
    v = (grid_y - offset_y) / scaled_height * image_height
    inside = (u >= 0) & (u < image_width) & (v >= 0) & (v < image_height)

    px = np.clip(np.floor(u).astype(int), 0, image_width - 1)
    py = np.clip(np.floor(v).astype(int), 0, image_height - 1)
    samples = pixels[py, px]

    opaque = inside & (samples[..., 3] >= ALPHA_THRESHOLD)
    return samples[..., :3], opaque


def bricks_from_pixels(pixels, width: int, height: int, cell_size: CellSize,
                       image_scale: float = 1.0) -> List[Brick]:
    """Convert an RGBA image into bricks for a width x height grid.

    Args:
        pixels: Array-like of shape (H, W, 4), uint8 RGBA
        width: Grid columns
        height: Grid rows
        cell_size: (cell width, cell height, padding)
        image_scale: Extra scale applied after fitting (1.0 fills the available area)

    Returns:
        Default-type bricks in row-major order

    Raises:
        ValueError: If the array is not an RGBA image or the scale is not positive
    """
    pixels = np.asarray(pixels)
    if pixels.ndim != 3 or pixels.shape[2] != 4:
        raise ValueError(f"Expected an (H, W, 4) RGBA array, got shape {pixels.shape}")
    if pixels.shape[0] == 0 or pixels.shape[1] == 0:
        raise ValueError("Image is empty")
    if image_scale <= 0:
        raise ValueError(f"Image scale must be positive, got {image_scale}")

    fit = fit_image(pixels.shape[1], pixels.shape[0], width, height, image_scale)

    rows, cols = np.mgrid[0:height, 0:width]
    center_y = rows + 0.5
    left_rgb, left_opaque = _sample(pixels, cols + 0.25, center_y, fit)
    right_rgb, right_opaque = _sample(pixels, cols + 0.75, center_y, fit)

    bricks: List[Brick] = []
    for row in range(height):
        for col in range(width):
            left: Optional[int] = rgb_to_color(left_rgb[row, col]) if left_opaque[row, col] else None
            right: Optional[int] = rgb_to_color(right_rgb[row, col]) if right_opaque[row, col] else None

            if left is None and right is None:
                continue
            if right is None:
                bricks.append(create_brick(col, row, BrickType.DEFAULT, left, cell_size,
                                           half_slot=HalfSlot.LEFT))
            elif left is None:
                bricks.append(create_brick(col, row, BrickType.DEFAULT, right, cell_size,
                                           half_slot=HalfSlot.RIGHT))
            elif colors_similar(left, right):
                bricks.append(create_brick(col, row, BrickType.DEFAULT, left, cell_size))
            else:
                bricks.append(create_brick(col, row, BrickType.DEFAULT, left, cell_size,
                                           half_slot=HalfSlot.LEFT))
                bricks.append(create_brick(col, row, BrickType.DEFAULT, right, cell_size,
                                           half_slot=HalfSlot.RIGHT))

    logger.debug("Image %dx%d produced %d bricks", pixels.shape[1], pixels.shape[0], len(bricks))
    return bricks
