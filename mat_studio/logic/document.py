"""
Project document (JSON) encode/decode

The on-disk format uses camelCase keys:

    { backgroundImage?, backgroundUrl?, backgroundType, backgroundAttrs?,
      zones, matSize, unit, dpi, gridEnabled, gridSize, projectName,
      defaultZoneSize, timestamp, version }

Every field is validated on its own; a bad field
keeps the value from the base state and is reported as a DocumentIssue.
"""

import logging
import time
from dataclasses import dataclass, field
from typing import Any, List, Optional

from pydantic import PositiveFloat, PositiveInt, TypeAdapter, ValidationError

from ..config import DOCUMENT_VERSION
from .state import (
    BackgroundSource, BackgroundTransform, MatSize, ProjectState, Unit, ZoneSize,
)
from .zone import Zone

log = logging.getLogger(__name__)


@dataclass(frozen=True)
class DocumentIssue:
    field: str
    message: str


@dataclass
class DecodeResult:
    state: ProjectState
    issues: List[DocumentIssue] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.issues


# (document key, state attribute, validator)
_SIMPLE_FIELDS = (
    ("matSize", "mat_size", TypeAdapter(MatSize)),
    ("unit", "unit", TypeAdapter(Unit)),
    ("dpi", "export_dpi", TypeAdapter(PositiveInt)),
    ("gridEnabled", "grid_enabled", TypeAdapter(bool)),
    ("gridSize", "grid_size", TypeAdapter(PositiveFloat)),
    ("projectName", "project_name", TypeAdapter(str)),
    ("defaultZoneSize", "default_zone_size", TypeAdapter(ZoneSize)),
    ("auxApiKey", "aux_api_key", TypeAdapter(str)),
)
_ZONE = TypeAdapter(Zone)
_TRANSFORM = TypeAdapter(BackgroundTransform)


def _first_error(exc: ValidationError) -> str:
    errors = exc.errors()
    if not errors:
        return str(exc)
    err = errors[0]
    loc = ".".join(str(part) for part in err.get("loc", ()))
    return f"{loc}: {err['msg']}" if loc else err["msg"]


def encode_document(state: ProjectState, timestamp: Optional[int] = None,
                    include_aux_key: bool = False) -> dict:
    """ProjectState -> JSON-ready dict. Background rotation is never written."""
    doc = {
        "backgroundType": state.background_source.kind if state.background_source else "url",
        "zones": [zone.to_json_dict() for zone in state.zones],
        "matSize": state.mat_size.to_json_dict(),
        "unit": state.unit,
        "dpi": state.export_dpi,
        "gridEnabled": state.grid_enabled,
        "gridSize": state.grid_size,
        "projectName": state.project_name,
        "defaultZoneSize": state.default_zone_size.to_json_dict(),
        "timestamp": int(timestamp if timestamp is not None else time.time() * 1000),
        "version": DOCUMENT_VERSION,
    }
    source = state.background_source
    if source is not None:
        if source.kind == "url":
            doc["backgroundUrl"] = source.value
        else:
            doc["backgroundImage"] = source.value
        if state.background is not None:
            doc["backgroundAttrs"] = state.background.to_json_dict()
    if include_aux_key and state.aux_api_key:
        doc["auxApiKey"] = state.aux_api_key
    return doc


def _decode_background_source(data: dict, issues: List[DocumentIssue]) -> Optional[BackgroundSource]:
    kind = data.get("backgroundType")
    url = data.get("backgroundUrl")
    image = data.get("backgroundImage")

    if kind is None:
        # Older documents: a URL means "url", a bare image means "upload"
        if url:
            kind = "url"
        elif image:
            kind = "upload"
        else:
            return None
    if kind not in ("url", "upload"):
        issues.append(DocumentIssue("backgroundType", f"unknown background type {kind!r}"))
        return None

    value = (url or image) if kind == "url" else (image or url)
    if not value:
        return None
    if not isinstance(value, str):
        issues.append(DocumentIssue("backgroundImage", "background must be a string"))
        return None
    return BackgroundSource(kind=kind, value=value)


def _decode_zones(raw: Any, issues: List[DocumentIssue]) -> Optional[tuple]:
    if not isinstance(raw, list):
        issues.append(DocumentIssue("zones", "zones must be a list"))
        return None
    zones = []
    seen = set()
    for index, item in enumerate(raw):
        try:
            zone = _ZONE.validate_python(item)
        except ValidationError as e:
            issues.append(DocumentIssue(f"zones[{index}]", _first_error(e)))
            continue
        if zone.id in seen:
            issues.append(DocumentIssue(f"zones[{index}]", f"duplicate zone id {zone.id!r}"))
            continue
        seen.add(zone.id)
        zones.append(zone)
    return tuple(zones)


def decode_document(data: Any, base: Optional[ProjectState] = None) -> DecodeResult:
    """
    Apply a decoded JSON document over ``base`` field by field.

    Missing (or null) fields keep the base value. Fields that fail
    validation keep the base value too and are listed in ``issues``.
    """
    base = base or ProjectState()
    if not isinstance(data, dict):
        return DecodeResult(base, [DocumentIssue("", "document is not a JSON object")])

    issues: List[DocumentIssue] = []
    changes = {}

    for key, attr, adapter in _SIMPLE_FIELDS:
        raw = data.get(key)
        if raw is None:
            continue
        try:
            changes[attr] = adapter.validate_python(raw)
        except ValidationError as e:
            issues.append(DocumentIssue(key, _first_error(e)))

    if data.get("zones") is not None:
        zones = _decode_zones(data["zones"], issues)
        if zones is not None:
            changes["zones"] = zones

    source = _decode_background_source(data, issues)
    if source is not None:
        changes["background_source"] = source
        changes["background"] = None
        raw_attrs = data.get("backgroundAttrs")
        if raw_attrs is not None:
            try:
                changes["background"] = _TRANSFORM.validate_python(raw_attrs)
            except ValidationError as e:
                issues.append(DocumentIssue("backgroundAttrs", _first_error(e)))

    for issue in issues:
        log.warning("project document: skipped %s (%s)", issue.field or "<root>", issue.message)

    return DecodeResult(base.model_copy(update=changes), issues)
