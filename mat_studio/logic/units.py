"""
Unit Conversion for Mat Studio

Three coordinate spaces are in play:
- canonical storage: centimeters (mat size, grid size, default zone size)
- display: inch or cm, only used when reading/writing form values
- pixels: screen pixels at SCREEN_DPI for everything on the canvas,
  export pixels at the chosen export DPI (computed at export time, never stored)

"""

import math
from typing import Optional, Tuple

from ..config import CM_PER_INCH, SCREEN_DPI, MIN_DIMENSION_CM

UNITS = ("inch", "cm")


def _to_inches(value: float, unit: str) -> float:
    if unit == "inch":
        return value
    if unit == "cm":
        return value / CM_PER_INCH
    raise ValueError(f"unknown unit: {unit!r}")


def _from_inches(inches: float, unit: str) -> float:
    if unit == "inch":
        return inches
    if unit == "cm":
        return inches * CM_PER_INCH
    raise ValueError(f"unknown unit: {unit!r}")


def to_pixels(value: float, unit: str, dpi: float = SCREEN_DPI) -> float:
    """Convert a physical length in ``unit`` to pixels at ``dpi``."""
    return _to_inches(value, unit) * dpi


def from_pixels(px: float, unit: str, dpi: float = SCREEN_DPI) -> float:
    """Convert pixels at ``dpi`` back to a physical length in ``unit``."""
    return _from_inches(px / dpi, unit)


def cm_to_pixels(value_cm: float, dpi: float = SCREEN_DPI) -> float:
    return to_pixels(value_cm, "cm", dpi)


def pixels_to_cm(px: float, dpi: float = SCREEN_DPI) -> float:
    return from_pixels(px, "cm", dpi)


def cm_to_display(value_cm: float, unit: str) -> float:
    """Canonical cm -> the user's display unit."""
    return _from_inches(value_cm / CM_PER_INCH, unit)


def display_to_cm(value: float, unit: str) -> float:
    """Display unit -> canonical cm."""
    return _to_inches(value, unit) * CM_PER_INCH


def format_length(value_cm: float, unit: str, decimals: int = 1) -> str:
    return f"{cm_to_display(value_cm, unit):.{decimals}f} {unit}"


def export_pixel_ratio(export_dpi: float) -> float:
    return export_dpi / SCREEN_DPI


def mat_pixel_size(mat_size) -> Tuple[float, float]:
    """Mat width/height in screen pixels."""
    return cm_to_pixels(mat_size.width), cm_to_pixels(mat_size.height)


def export_size(mat_size, export_dpi: float) -> Tuple[int, int]:
    """Pixel dimensions of the exported raster for ``mat_size`` at ``export_dpi``."""
    width_px, height_px = mat_pixel_size(mat_size)
    ratio = export_pixel_ratio(export_dpi)
    return round(width_px * ratio), round(height_px * ratio)


def parse_dimension(raw, unit: str, minimum: float = MIN_DIMENSION_CM) -> Optional[float]:
    """
    Turn a form value (text or number, in display units) into centimeters.

    Returns None when the value is not a finite number so the caller can
    ignore the edit. Values below ``minimum`` cm are clamped up to it.
    """
    try:
        value = float(raw)
    except (TypeError, ValueError):
        return None
    if not math.isfinite(value):
        return None
    return max(minimum, display_to_cm(value, unit))
