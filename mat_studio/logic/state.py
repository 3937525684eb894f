"""
Project state for Mat Studio

ProjectState is the single source of truth for a design. It is an
immutable value: every operation in this module takes a state and returns
a new one, which is what lets the history keep plain references as
snapshots.

Z-order: ``zones[0]`` is the bottommost zone, the last one is drawn on top.
New and pasted zones are appended.
"""

import uuid
from typing import Dict, Iterable, Literal, Optional, Tuple

from pydantic import Field

from ..config import (
    DEFAULT_MAT_WIDTH_CM, DEFAULT_MAT_HEIGHT_CM, DEFAULT_EXPORT_DPI,
    DEFAULT_GRID_ENABLED, DEFAULT_GRID_SIZE_CM, DEFAULT_UNIT,
    DEFAULT_ZONE_WIDTH_CM, DEFAULT_ZONE_HEIGHT_CM, DEFAULT_ZONE_POSITION,
    DEFAULT_PROJECT_NAME, PASTE_OFFSET_PX,
)
from .grid import grid_pitch_px
from .units import cm_to_pixels, mat_pixel_size
from .zone import StateModel, Zone, normalize_patch, POSITION_FIELDS, IDENTITY_FIELDS

Unit = Literal["inch", "cm"]
BackgroundKind = Literal["url", "upload"]


class MatSize(StateModel):
    """Physical mat size in centimeters"""
    width: float = Field(DEFAULT_MAT_WIDTH_CM, gt=0)
    height: float = Field(DEFAULT_MAT_HEIGHT_CM, gt=0)


class ZoneSize(StateModel):
    """Size (cm) given to newly added zones"""
    width: float = Field(DEFAULT_ZONE_WIDTH_CM, gt=0)
    height: float = Field(DEFAULT_ZONE_HEIGHT_CM, gt=0)


class BackgroundTransform(StateModel):
    """
    Placement of the background image, in screen pixels.

    No rotation: a rotation found in incoming
    data is dropped (extra fields are ignored) and never persisted.
    """
    x: float = 0.0
    y: float = 0.0
    scale_x: float = 1.0
    scale_y: float = 1.0
    image_width: float = Field(..., gt=0)
    image_height: float = Field(..., gt=0)


class BackgroundSource(StateModel):
    kind: BackgroundKind
    value: str


class ProjectState(StateModel):
    """Everything that is persisted and recorded in history (never selection)"""
    mat_size: MatSize = Field(default_factory=MatSize)
    unit: Unit = DEFAULT_UNIT
    export_dpi: int = Field(DEFAULT_EXPORT_DPI, gt=0)
    grid_enabled: bool = DEFAULT_GRID_ENABLED
    grid_size: float = Field(DEFAULT_GRID_SIZE_CM, gt=0)
    zones: Tuple[Zone, ...] = ()
    background: Optional[BackgroundTransform] = None
    background_source: Optional[BackgroundSource] = None
    project_name: str = DEFAULT_PROJECT_NAME
    default_zone_size: ZoneSize = Field(default_factory=ZoneSize)
    aux_api_key: str = ""


def default_state() -> ProjectState:
    return ProjectState()


def reset_project(state: Optional[ProjectState] = None) -> ProjectState:
    """Fresh defaults. The local API key of ``state`` is carried over, it is not part of a design."""
    fresh = default_state()
    if state is not None and state.aux_api_key:
        fresh = _replace(fresh, aux_api_key=state.aux_api_key)
    return fresh


def new_zone_id() -> str:
    return f"zone-{uuid.uuid4().hex[:12]}"


def find_zone(state: ProjectState, zone_id: str) -> Optional[Zone]:
    for zone in state.zones:
        if zone.id == zone_id:
            return zone
    return None


def _replace(state: ProjectState, **changes) -> ProjectState:
    return state.model_copy(update=changes)


# ==========================================
# 🟦 ZONE OPERATIONS
# ==========================================

def add_zone(state: ProjectState, partial: Optional[Dict] = None, zone_id: Optional[str] = None) -> ProjectState:
    """
    Append a new zone.

    ``partial`` is merged over the default style; position defaults to
    (100, 100) px and size to the project's default zone size. The zone
    gets ``zone_id`` if given, otherwise a fresh one.
    """
    fields = {
        "x": DEFAULT_ZONE_POSITION[0],
        "y": DEFAULT_ZONE_POSITION[1],
        "width": cm_to_pixels(state.default_zone_size.width),
        "height": cm_to_pixels(state.default_zone_size.height),
    }
    fields.update(normalize_patch(Zone, partial or {}))
    fields["id"] = zone_id or new_zone_id()
    zone = Zone(**fields)
    return _replace(state, zones=state.zones + (zone,))


def update_zone(state: ProjectState, zone_id: str, patch: Dict) -> ProjectState:
    """
    Apply ``patch`` to the zone with ``zone_id``, keeping list order.

    A zone that is not in the list yet (an optimistic new object) is added
    with the patch as its full record, under ``zone_id``.
    """
    changes = normalize_patch(Zone, patch)
    changes.pop("id", None)
    if find_zone(state, zone_id) is None:
        return add_zone(state, changes, zone_id=zone_id)
    zones = tuple(
        zone.model_copy(update=changes) if zone.id == zone_id else zone
        for zone in state.zones
    )
    return _replace(state, zones=zones)


def batch_update_zones(state: ProjectState, ids: Iterable[str], patch: Dict) -> ProjectState:
    """
    Apply a style patch to every zone in ``ids``.

    Position and identity are never broadcast: moving one of several
    selected zones must not move the others.
    """
    targets = set(ids)
    changes = {
        key: value for key, value in normalize_patch(Zone, patch).items()
        if key not in POSITION_FIELDS and key not in IDENTITY_FIELDS
    }
    if not targets or not changes:
        return state
    zones = tuple(
        zone.model_copy(update=changes) if zone.id in targets else zone
        for zone in state.zones
    )
    return _replace(state, zones=zones)


def remove_zones(state: ProjectState, ids: Iterable[str]) -> ProjectState:
    targets = set(ids)
    return _replace(state, zones=tuple(z for z in state.zones if z.id not in targets))


def paste_zone(state: ProjectState, zone: Zone) -> ProjectState:
    """Append a copy of ``zone`` with a fresh id, offset by one grid step (or 20px)."""
    offset = grid_pitch_px(state.grid_size) if state.grid_enabled else PASTE_OFFSET_PX
    copy = zone.model_copy(update={
        "id": new_zone_id(),
        "x": zone.x + offset,
        "y": zone.y + offset,
    })
    return _replace(state, zones=state.zones + (copy,))


# ==========================================
# 🖼️ BACKGROUND
# ==========================================

def set_background(state: ProjectState, kind: str, value: str) -> ProjectState:
    """New background image; the transform is cleared so it gets auto-fitted."""
    return _replace(
        state,
        background_source=BackgroundSource(kind=kind, value=value),
        background=None,
    )


def clear_background(state: ProjectState) -> ProjectState:
    return _replace(state, background_source=None, background=None)


def set_background_transform(state: ProjectState, transform: Optional[BackgroundTransform]) -> ProjectState:
    return _replace(state, background=transform)


def autofit_background(mat_size: MatSize, image_width: float, image_height: float) -> BackgroundTransform:
    """Cover-fit: scale so the image covers the whole mat, then centre it."""
    mat_w, mat_h = mat_pixel_size(mat_size)
    scale = max(mat_w / image_width, mat_h / image_height)
    return BackgroundTransform(
        x=(mat_w - image_width * scale) / 2,
        y=(mat_h - image_height * scale) / 2,
        scale_x=scale,
        scale_y=scale,
        image_width=image_width,
        image_height=image_height,
    )


def fit_background_width(bg: BackgroundTransform, mat_size: MatSize) -> BackgroundTransform:
    mat_w, mat_h = mat_pixel_size(mat_size)
    scale = mat_w / bg.image_width
    return bg.model_copy(update={
        "scale_x": scale, "scale_y": scale,
        "x": 0.0, "y": (mat_h - bg.image_height * scale) / 2,
    })


def fit_background_height(bg: BackgroundTransform, mat_size: MatSize) -> BackgroundTransform:
    mat_w, mat_h = mat_pixel_size(mat_size)
    scale = mat_h / bg.image_height
    return bg.model_copy(update={
        "scale_x": scale, "scale_y": scale,
        "x": (mat_w - bg.image_width * scale) / 2, "y": 0.0,
    })


def stretch_background(bg: BackgroundTransform, mat_size: MatSize) -> BackgroundTransform:
    """Independent X/Y scales so the image fills the mat exactly."""
    mat_w, mat_h = mat_pixel_size(mat_size)
    return bg.model_copy(update={
        "scale_x": mat_w / bg.image_width,
        "scale_y": mat_h / bg.image_height,
        "x": 0.0, "y": 0.0,
    })


def center_background(bg: BackgroundTransform, mat_size: MatSize,
                      horizontal: bool = True, vertical: bool = True) -> BackgroundTransform:
    mat_w, mat_h = mat_pixel_size(mat_size)
    changes = {}
    if horizontal:
        changes["x"] = (mat_w - bg.image_width * bg.scale_x) / 2
    if vertical:
        changes["y"] = (mat_h - bg.image_height * bg.scale_y) / 2
    return bg.model_copy(update=changes)


# ==========================================
# ⚙️ SETTINGS
# ==========================================

def set_mat_size(state: ProjectState, width_cm: float, height_cm: float) -> ProjectState:
    return _replace(state, mat_size=MatSize(width=width_cm, height=height_cm))


def set_grid_enabled(state: ProjectState, enabled: bool) -> ProjectState:
    return _replace(state, grid_enabled=bool(enabled))


def set_grid_size(state: ProjectState, size_cm: float) -> ProjectState:
    return _replace(state, grid_size=size_cm)


def set_unit(state: ProjectState, unit: str) -> ProjectState:
    if unit not in ("inch", "cm"):
        raise ValueError(f"unknown unit: {unit!r}")
    return _replace(state, unit=unit)


def set_export_dpi(state: ProjectState, dpi: int) -> ProjectState:
    return _replace(state, export_dpi=int(dpi))


def set_project_name(state: ProjectState, name: str) -> ProjectState:
    return _replace(state, project_name=name)


def set_default_zone_size(state: ProjectState, width_cm: float, height_cm: float) -> ProjectState:
    return _replace(state, default_zone_size=ZoneSize(width=width_cm, height=height_cm))


def set_aux_api_key(state: ProjectState, key: str) -> ProjectState:
    return _replace(state, aux_api_key=key)
