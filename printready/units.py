"""
Physical unit conversions shared by the compositor and the assembler.

Rasters are produced at a fixed 300 pixels per inch; PDF pages are
measured in points at 72 per inch.
"""

import math
from typing import Tuple

PRINT_DPI = 300
POINTS_PER_INCH = 72

BLEED_INCHES = 0.125
CROP_MARK_OFFSET_INCHES = 0.0625
CROP_MARK_LENGTH_INCHES = 0.25
CROP_MARK_STROKE_PT = 0.5


def round_half_up(value: float) -> int:
    """Round to the nearest integer with halves going up (JavaScript Math.round)."""
    return int(math.floor(value + 0.5))


def inches_to_pixels(inches: float, dpi: int = PRINT_DPI) -> int:
    return round_half_up(inches * dpi)


def inches_to_points(inches: float) -> float:
    return inches * POINTS_PER_INCH


def target_pixel_size(dimensions) -> Tuple[int, int]:
    """Exact raster size for a print, e.g. 24x36in -> (7200, 10800)."""
    return inches_to_pixels(dimensions.width), inches_to_pixels(dimensions.height)


def page_size_points(dimensions) -> Tuple[float, float]:
    """Trim size of a print in points, e.g. 24x36in -> (1728.0, 2592.0)."""
    return inches_to_points(dimensions.width), inches_to_points(dimensions.height)
