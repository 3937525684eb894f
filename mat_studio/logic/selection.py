"""
Selection for Mat Studio

Two pieces of state:
- primary_id: the object whose properties are shown (a zone id, the
  background, or None)
- multi_ids: the zones that share property edits (ordered by when they
  were added; the background is never part of it)

The modifier key that switches between replace() and toggle() is read by
the canvas, not here.
"""

from typing import Callable, FrozenSet, Iterable, Optional, Tuple

BACKGROUND_ID = "background"


class SelectionManager:
    """Single + multi selection with replace/toggle click semantics"""

    def __init__(self, on_change: Optional[Callable[[], None]] = None):
        self.primary_id: Optional[str] = None
        self._multi: dict = {}  # insertion-ordered set
        self.on_change = on_change

    @property
    def multi_ids(self) -> FrozenSet[str]:
        return frozenset(self._multi)

    def _changed(self):
        if self.on_change is not None:
            self.on_change()

    def replace(self, object_id: Optional[str]):
        """Plain click: select exactly ``object_id`` (None clears)."""
        before = self.snapshot()
        self.primary_id = object_id
        self._multi = {} if object_id in (None, BACKGROUND_ID) else {object_id: None}
        if self.snapshot() != before:
            self._changed()

    def toggle(self, object_id: str):
        """Modifier click: add/remove ``object_id`` from the multi-selection."""
        if object_id == BACKGROUND_ID:
            return
        if self.primary_id is not None and self.primary_id not in self._multi:
            # background (or nothing) was primary: start a fresh set
            self._multi = {}

        if object_id in self._multi:
            del self._multi[object_id]
            if self.primary_id == object_id or self.primary_id not in self._multi:
                self.primary_id = next(reversed(self._multi), None)
        else:
            self._multi[object_id] = None
            self.primary_id = object_id
        self._changed()

    def clear(self):
        if self.primary_id is None and not self._multi:
            return
        self.primary_id = None
        self._multi = {}
        self._changed()

    def discard(self, ids: Iterable[str]):
        """Forget deleted zones; losing the primary clears everything."""
        gone = set(ids)
        if self.primary_id in gone:
            self.clear()
            return
        remaining = {i: None for i in self._multi if i not in gone}
        if len(remaining) != len(self._multi):
            self._multi = remaining
            self._changed()

    # === Queries === #
    def is_selected(self, object_id: str) -> bool:
        return object_id == self.primary_id or object_id in self._multi

    def has_zone_selection(self) -> bool:
        return self.primary_id not in (None, BACKGROUND_ID)

    def is_multi(self) -> bool:
        return len(self._multi) > 1

    def broadcast_ids(self) -> Tuple[str, ...]:
        """Zones that receive a property (style) edit."""
        if self.is_multi():
            return tuple(self._multi)
        if self.has_zone_selection():
            return (self.primary_id,)
        return ()

    def position_target(self) -> Optional[str]:
        """Position edits only ever go to the primary zone."""
        return self.primary_id if self.has_zone_selection() else None

    # === Export support === #
    def snapshot(self) -> Tuple[Optional[str], Tuple[str, ...]]:
        return self.primary_id, tuple(self._multi)

    def restore(self, snapshot):
        primary, multi = snapshot
        if snapshot == self.snapshot():
            return
        self.primary_id = primary
        self._multi = {i: None for i in multi}
        self._changed()

    def __repr__(self):
        return f"SelectionManager(primary={self.primary_id!r}, multi={list(self._multi)!r})"
