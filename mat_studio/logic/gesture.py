"""
Gesture tracking (drag / resize / pan)

While a gesture is in progress the canvas writes the live geometry of the
objects it moves into a transient cache keyed by object id. The cache is
read for drawing only; the committed ProjectState and the history are not
touched until the gesture ends and commit() hands back the final values.
"""

import logging
from typing import Dict, Iterable, List, Optional

log = logging.getLogger(__name__)

GEOMETRY_KEYS = frozenset({"x", "y", "width", "height", "scale_x", "scale_y"})


class GestureError(RuntimeError):
    pass


class GestureTracker:
    def __init__(self):
        self._cache: Dict[str, dict] = {}
        self._active = False

    @property
    def active(self) -> bool:
        return self._active

    def begin(self, ids: Iterable[str] = ()):
        if self._active:
            raise GestureError("a gesture is already in progress")
        self._active = True
        self._cache = {object_id: {} for object_id in ids}
        log.debug("gesture started for %s", list(self._cache))

    def update(self, object_id: str, **geometry):
        """Record the live geometry of ``object_id`` (replaces earlier values key by key)."""
        if not self._active:
            raise GestureError("update() outside of a gesture")
        unknown = set(geometry) - GEOMETRY_KEYS
        if unknown:
            raise GestureError(f"not geometry: {sorted(unknown)}")
        self._cache.setdefault(object_id, {}).update(geometry)

    def tracked_ids(self) -> List[str]:
        return list(self._cache)

    def geometry_for(self, object_id: str) -> Optional[dict]:
        values = self._cache.get(object_id)
        return dict(values) if values else None

    def commit(self) -> Dict[str, dict]:
        """End the gesture; returns {object_id: geometry} for objects that moved."""
        if not self._active:
            raise GestureError("commit() outside of a gesture")
        settled = {k: v for k, v in self._cache.items() if v}
        self._cache = {}
        self._active = False
        log.debug("gesture committed: %s", settled)
        return settled

    def cancel(self):
        self._cache = {}
        self._active = False
