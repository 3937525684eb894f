"""
Print export for Mat Studio

The canvas shows more than the design: selection handles, the mat guide,
the grid, and whatever pan/zoom the user is at. render_export() strips all
of that for the duration of one capture and puts it back afterwards, even
when the capture fails.
"""

import logging
import os
from typing import Any, Protocol

from ..config import DEFAULT_EXPORT_NAME
from .errors import ExportError
from .project import sanitize_name
from .units import export_pixel_ratio, mat_pixel_size

log = logging.getLogger(__name__)


class ExportSurface(Protocol):
    """What the render surface must offer for an export"""

    def view_transform(self) -> Any: ...
    def set_view_transform(self, transform: Any) -> None: ...
    def reset_view_transform(self) -> None: ...
    def guides_visible(self) -> bool: ...
    def set_guides_visible(self, visible: bool) -> None: ...
    def grid_visible(self) -> bool: ...
    def set_grid_visible(self, visible: bool) -> None: ...
    def rasterize(self, width_px: float, height_px: float, pixel_ratio: float) -> Any: ...


def export_filename(project_name: str) -> str:
    return f"{sanitize_name(project_name) or DEFAULT_EXPORT_NAME}.png"


def render_export(surface: ExportSurface, state, selection):
    """
    Capture the mat at the project's export DPI.

    Captures exactly [0, mat width] x [0, mat height] in screen pixels,
    scaled by export_dpi / SCREEN_DPI. Pan/zoom, guide, grid and selection
    are restored in that order whatever happens.
    """
    width_px, height_px = mat_pixel_size(state.mat_size)
    ratio = export_pixel_ratio(state.export_dpi)

    previous_selection = selection.snapshot()
    previous_view = surface.view_transform()
    guides = surface.guides_visible()
    grid = surface.grid_visible()
    try:
        selection.clear()
        surface.set_guides_visible(False)
        surface.set_grid_visible(False)
        surface.reset_view_transform()
        return surface.rasterize(width_px, height_px, ratio)
    finally:
        surface.set_view_transform(previous_view)
        surface.set_guides_visible(guides)
        surface.set_grid_visible(grid)
        selection.restore(previous_selection)


def export_png(surface: ExportSurface, state, selection, directory) -> str:
    """Render and save ``<project name>.png`` into ``directory``; returns the path."""
    path = os.path.join(directory, export_filename(state.project_name))
    try:
        image = render_export(surface, state, selection)
    except Exception as e:
        log.error("export rendering failed", exc_info=True)
        raise ExportError(f"could not render the mat: {e}") from e
    if not image.save(path, "PNG"):
        raise ExportError(f"could not write {path}")
    log.info("✅ Exported %s at %s dpi", path, state.export_dpi)
    return path
