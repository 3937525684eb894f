import pytest

from mat_studio.logic import state as ops
from mat_studio.logic.errors import ExportError
from mat_studio.logic.export import export_filename, export_png, render_export
from mat_studio.logic.selection import SelectionManager
from mat_studio.logic.state import default_state
from mat_studio.logic.units import mat_pixel_size


class FakeImage:
    def __init__(self, width, height):
        self.width, self.height = width, height
        self.saved = None

    def save(self, path, fmt):
        self.saved = (path, fmt)
        return True


class FakeSurface:
    """Records calls; can be told to fail while rasterizing."""

    def __init__(self, fail=False):
        self.fail = fail
        self.calls = []
        self.view = "zoomed"
        self.guides = True
        self.grid = True
        self.seen_during_capture = None
        self.selection = None

    def view_transform(self):
        return self.view

    def set_view_transform(self, view):
        self.calls.append(("view", view))
        self.view = view

    def reset_view_transform(self):
        self.calls.append(("view", "identity"))
        self.view = "identity"

    def guides_visible(self):
        return self.guides

    def set_guides_visible(self, visible):
        self.calls.append(("guides", visible))
        self.guides = visible

    def grid_visible(self):
        return self.grid

    def set_grid_visible(self, visible):
        self.calls.append(("grid", visible))
        self.grid = visible

    def rasterize(self, width_px, height_px, pixel_ratio):
        self.seen_during_capture = (self.view, self.guides, self.grid, self.selection.snapshot())
        if self.fail:
            raise RuntimeError("out of memory")
        return FakeImage(round(width_px * pixel_ratio), round(height_px * pixel_ratio))


@pytest.fixture
def selection():
    sel = SelectionManager()
    sel.replace("a")
    sel.toggle("b")
    return sel


def test_capture_is_clean_and_everything_is_restored(selection):
    surface = FakeSurface()
    surface.selection = selection
    before = selection.snapshot()

    render_export(surface, default_state(), selection)

    assert surface.seen_during_capture == ("identity", False, False, (None, ()))
    assert (surface.view, surface.guides, surface.grid) == ("zoomed", True, True)
    assert selection.snapshot() == before
    restore = surface.calls[-3:]
    assert restore == [("view", "zoomed"), ("guides", True), ("grid", True)]


def test_restores_even_when_rasterizing_fails(selection):
    surface = FakeSurface(fail=True)
    surface.selection = selection
    before = selection.snapshot()

    with pytest.raises(RuntimeError):
        render_export(surface, default_state(), selection)

    assert (surface.view, surface.guides, surface.grid) == ("zoomed", True, True)
    assert selection.snapshot() == before


def test_raster_size_at_300_dpi():
    surface = FakeSurface()
    surface.selection = SelectionManager()
    state = ops.set_export_dpi(default_state(), 300)
    image = render_export(surface, state, surface.selection)
    mat_w, mat_h = mat_pixel_size(state.mat_size)
    assert (image.width, image.height) == (round(mat_w * 300 / 96), round(mat_h * 300 / 96))


def test_export_png_names_file_after_project(tmp_path):
    surface = FakeSurface()
    surface.selection = SelectionManager()
    state = ops.set_project_name(default_state(), "Mi Playmat: v2")
    path = export_png(surface, state, surface.selection, str(tmp_path))
    assert path == str(tmp_path / "Mi Playmat v2.png")


def test_export_png_wraps_failures(tmp_path):
    surface = FakeSurface(fail=True)
    surface.selection = SelectionManager()
    with pytest.raises(ExportError):
        export_png(surface, default_state(), surface.selection, str(tmp_path))


def test_export_filename_fallback():
    assert export_filename("***") == "playmat-design.png"
