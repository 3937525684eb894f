import math

import pytest

from mat_studio.config import CM_PER_INCH, SCREEN_DPI
from mat_studio.logic.state import MatSize
from mat_studio.logic.units import (
    cm_to_display, display_to_cm, export_size, format_length, from_pixels, mat_pixel_size,
    parse_dimension, to_pixels,
)


@pytest.mark.parametrize("unit", ["inch", "cm"])
@pytest.mark.parametrize("dpi", [1, 72, SCREEN_DPI, 150, 300, 1200])
@pytest.mark.parametrize("value", [0, 0.1, 1, 2.54, 35, 60, 1234.5678])
def test_pixel_round_trip(value, unit, dpi):
    assert from_pixels(to_pixels(value, unit, dpi), unit, dpi) == pytest.approx(value)


def test_one_inch_is_screen_dpi_pixels():
    assert to_pixels(1, "inch") == SCREEN_DPI
    assert to_pixels(CM_PER_INCH, "cm") == pytest.approx(SCREEN_DPI)


def test_unknown_unit_is_rejected():
    with pytest.raises(ValueError):
        to_pixels(1, "mm")


def test_display_conversion():
    assert cm_to_display(2.54, "inch") == pytest.approx(1)
    assert display_to_cm(1, "inch") == pytest.approx(2.54)
    assert cm_to_display(60, "cm") == pytest.approx(60)
    assert format_length(2.54, "inch") == "1.0 inch"


def test_mat_pixel_size():
    w, h = mat_pixel_size(MatSize(width=2.54, height=5.08))
    assert (w, h) == (pytest.approx(96), pytest.approx(192))


def test_export_size_at_300_dpi():
    mat = MatSize(width=60, height=35)
    mat_w, mat_h = mat_pixel_size(mat)
    assert export_size(mat, 300) == (round(mat_w * 300 / 96), round(mat_h * 300 / 96))
    assert export_size(mat, 300) == (7087, 4134)


class TestParseDimension:
    def test_text_in_display_unit(self):
        assert parse_dimension("10", "inch") == pytest.approx(25.4)

    def test_garbage_is_ignored(self):
        assert parse_dimension("abc", "cm") is None
        assert parse_dimension(None, "cm") is None
        assert parse_dimension(math.nan, "cm") is None
        assert parse_dimension("inf", "cm") is None

    def test_clamped_to_minimum(self):
        assert parse_dimension(0, "cm") == pytest.approx(0.1)
        assert parse_dimension(-5, "inch") == pytest.approx(0.1)
