"""
Grid snapping

The grid pitch is stored in centimeters and converted to screen pixels
here. Snapping is only applied to settled geometry (end of a drag or
resize), never to positions in the middle of a gesture.
"""

from typing import List, Tuple

from ..config import MIN_ZONE_SIZE
from .units import cm_to_pixels


def grid_pitch_px(grid_size_cm: float) -> float:
    return cm_to_pixels(grid_size_cm)


def snap(value_px: float, grid_size_cm: float, enabled: bool) -> float:
    """
    Round ``value_px`` to the nearest multiple of the grid pitch.

    The pitch must be positive; the settings boundary guarantees a minimum
    grid size so it is not checked here.
    """
    if not enabled:
        return value_px
    pitch = grid_pitch_px(grid_size_cm)
    return round(value_px / pitch) * pitch


def snap_geometry(x: float, y: float, width: float, height: float,
                  grid_size_cm: float, enabled: bool) -> Tuple[float, float, float, float]:
    """Snap a rectangle; width/height never drop below MIN_ZONE_SIZE."""
    return (
        snap(x, grid_size_cm, enabled),
        snap(y, grid_size_cm, enabled),
        max(MIN_ZONE_SIZE, snap(width, grid_size_cm, enabled)),
        max(MIN_ZONE_SIZE, snap(height, grid_size_cm, enabled)),
    )


def grid_lines(width_px: float, height_px: float, grid_size_cm: float) -> Tuple[List[float], List[float]]:
    """
    Offsets of the vertical and horizontal overlay lines, from 0 up to and
    including the mat edge when it falls on the grid.
    """
    pitch = grid_pitch_px(grid_size_cm)
    if pitch <= 0:
        return [], []

    def _offsets(limit: float) -> List[float]:
        count = int(limit / pitch + 1e-9)
        return [i * pitch for i in range(count + 1)]

    return _offsets(width_px), _offsets(height_px)
