"""
Zone model for Mat Studio

A zone is one positioned, styled rectangle on the mat:
- geometry in screen pixels (x, y = top-left corner)
- fill / border styling with per-edge visibility
- a text label anchored inside or outside the rectangle
- an optional embedded image with its own opacity and fit mode

Zones are immutable; every edit produces a new Zone.
"""

import logging
from typing import Dict, Literal, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

from ..config import MIN_ZONE_SIZE, DEFAULT_ZONE_POSITION
from .units import pixels_to_cm

log = logging.getLogger(__name__)

TextPosition = Literal["center", "top", "bottom", "top-out", "bottom-out"]
ImageFit = Literal["fill", "fit-width", "fit-height"]

# Fields that belong to a zone's placement rather than its style
POSITION_FIELDS = frozenset({"x", "y"})
IDENTITY_FIELDS = frozenset({"id"})


class StateModel(BaseModel):
    """Base for every persisted value: frozen, camelCase JSON aliases."""

    model_config = ConfigDict(
        frozen=True,
        populate_by_name=True,
        alias_generator=to_camel,
        extra="ignore",
    )

    def to_json_dict(self) -> dict:
        return self.model_dump(by_alias=True, mode="json")


class Zone(StateModel):
    """A single rectangular zone"""

    id: str = Field(..., description="Unique zone ID, stable for the session")

    # Geometry (screen pixels)
    x: float = DEFAULT_ZONE_POSITION[0]
    y: float = DEFAULT_ZONE_POSITION[1]
    width: float = Field(..., description="Width in pixels")
    height: float = Field(..., description="Height in pixels")
    rotation: float = Field(default=0.0, description="Rotation in degrees")

    # Fill and border
    fill: str = "rgba(255, 255, 255, 0.3)"
    no_fill: bool = False
    stroke: str = "#ffffff"
    stroke_width: float = 3
    corner_radius: float = 18
    opacity: float = 0.5
    border_top: bool = True
    border_right: bool = True
    border_bottom: bool = True
    border_left: bool = True
    border_shadow: bool = False
    border_shadow_x: float = 3
    border_shadow_y: float = 3
    border_shadow_blur: float = 5
    border_shadow_color: str = "#000000"

    # Text
    text: str = "Card Zone"
    font_size: float = 28
    font_family: str = "Arial"
    font_style: str = "bold"
    text_color: str = "white"
    text_position: TextPosition = "bottom-out"
    text_distance: float = 10
    text_stroke: float = 0
    text_stroke_color: str = "#000000"
    text_shadow: bool = False
    text_shadow_x: float = 2
    text_shadow_y: float = 2
    text_shadow_blur: float = 3
    text_shadow_color: str = "#000000"

    # Embedded image (URL or data URI)
    zone_image: Optional[str] = None
    image_opacity: float = 1.0
    image_fit: ImageFit = "fill"

    @field_validator("width", "height")
    @classmethod
    def _min_size(cls, value: float) -> float:
        return max(float(MIN_ZONE_SIZE), value)


def normalize_patch(model_cls, patch: Dict) -> Dict:
    """
    Map a patch keyed by attribute names or JSON aliases onto attribute
    names. Keys the model does not know about are dropped.
    """
    names = {}
    for name, info in model_cls.model_fields.items():
        names[name] = name
        if info.alias:
            names[info.alias] = name

    normalized = {}
    for key, value in patch.items():
        name = names.get(key)
        if name is None:
            log.debug("ignoring unknown %s field %r", model_cls.__name__, key)
            continue
        normalized[name] = value
    return normalized


# ==========================================
# 📐 GEOMETRY HELPERS
# ==========================================

def corner_radii(zone: Zone) -> Tuple[float, float, float, float]:
    """
    Radii for (top-left, top-right, bottom-right, bottom-left).

    A corner is rounded only when both edges meeting there are visible.
    """
    r = zone.corner_radius
    return (
        r if zone.border_top and zone.border_left else 0.0,
        r if zone.border_top and zone.border_right else 0.0,
        r if zone.border_bottom and zone.border_right else 0.0,
        r if zone.border_bottom and zone.border_left else 0.0,
    )


def text_offset_y(zone: Zone, text_height: Optional[float] = None) -> float:
    """Top of the text box relative to the zone's top edge."""
    th = zone.font_size if text_height is None else text_height
    gap = zone.text_distance
    if zone.text_position == "top":
        return gap
    if zone.text_position == "bottom":
        return zone.height - th - gap
    if zone.text_position == "top-out":
        return -th - gap
    if zone.text_position == "bottom-out":
        return zone.height + gap
    return (zone.height - th) / 2


def image_rect(zone: Zone, image_width: float, image_height: float) -> Tuple[float, float, float, float]:
    """
    Where the embedded image is drawn, in zone-local pixels.

    fill stretches over the whole zone; fit-width / fit-height keep the
    aspect ratio, match one side and centre on the other axis.
    """
    if zone.image_fit == "fit-width" and image_width > 0:
        h = image_height * zone.width / image_width
        return 0.0, (zone.height - h) / 2, zone.width, h
    if zone.image_fit == "fit-height" and image_height > 0:
        w = image_width * zone.height / image_height
        return (zone.width - w) / 2, 0.0, w, zone.height
    return 0.0, 0.0, zone.width, zone.height


def edge_distances(zone: Zone, mat_width_px: float, mat_height_px: float) -> Dict[str, float]:
    """Distance (cm) from each side of the zone to the matching mat edge."""
    return {
        "left": pixels_to_cm(zone.x),
        "right": pixels_to_cm(mat_width_px - (zone.x + zone.width)),
        "top": pixels_to_cm(zone.y),
        "bottom": pixels_to_cm(mat_height_px - (zone.y + zone.height)),
    }
