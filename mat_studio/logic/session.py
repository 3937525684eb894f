"""
Editor session

EditorSession owns everything for one editing session: the current
ProjectState, the selection, the undo history, the in-progress gesture and
the autosave slot. Every mutation goes through commit(), which is the only
place that replaces the state, records history and schedules a save.
Widgets listen to the signals; they never write state directly.
"""

import logging
import time
from typing import Dict, Iterable, Optional

from PyQt6.QtCore import QObject, QTimer, pyqtSignal

from .. import config_manager
from . import state as ops
from .document import DecodeResult, decode_document
from .gesture import GestureTracker
from .grid import snap_geometry
from .history import HistoryManager
from .project import ProjectStore, read_project_file, write_project_file
from .selection import BACKGROUND_ID, SelectionManager
from .state import ProjectState, default_state, find_zone
from .zone import POSITION_FIELDS, Zone, normalize_patch

log = logging.getLogger(__name__)

BACKGROUND_LAYOUTS = {
    "width": ops.fit_background_width,
    "height": ops.fit_background_height,
    "stretch": ops.stretch_background,
    "center": lambda bg, mat: ops.center_background(bg, mat, True, True),
    "center-h": lambda bg, mat: ops.center_background(bg, mat, True, False),
    "center-v": lambda bg, mat: ops.center_background(bg, mat, False, True),
}


class EditorSession(QObject):
    state_changed = pyqtSignal(object)
    selection_changed = pyqtSignal()
    transient_changed = pyqtSignal(str)
    history_changed = pyqtSignal()
    save_failed = pyqtSignal(str)

    def __init__(self, store: Optional[ProjectStore] = None, autosave_delay_ms: Optional[int] = None,
                 parent=None):
        super().__init__(parent)
        self.store = store
        self.history = HistoryManager()
        self.selection = SelectionManager(on_change=self.selection_changed.emit)
        self.gestures = GestureTracker()
        self.clipboard: Optional[Zone] = None
        self.last_saved: Optional[float] = None
        self.load_issues = []

        self._state = self._initial_state()
        self.history.reset(self._state)  # undo can never go before this

        if autosave_delay_ms is None:
            autosave_delay_ms = config_manager.app_setting('autosave_delay_ms', 400)
        self._save_timer = QTimer(self)
        self._save_timer.setSingleShot(True)
        self._save_timer.setInterval(int(autosave_delay_ms))
        self._save_timer.timeout.connect(self.flush_save)

    def _initial_state(self) -> ProjectState:
        if self.store is None:
            return default_state()
        data = self.store.load()
        if data is None:
            return default_state()
        result = decode_document(data, default_state())
        self.load_issues = result.issues
        return result.state

    @property
    def state(self) -> ProjectState:
        return self._state

    # ==========================================
    # 🔁 COMMIT PATH
    # ==========================================
    def commit(self, new_state: ProjectState, record: bool = True) -> bool:
        """
        Make ``new_state`` current.

        ``record`` adds a history entry (ignored while an undo/redo is being
        applied). Returns False when nothing changed.
        """
        if new_state == self._state:
            return False
        self._state = new_state
        if record and self.history.push(new_state):
            self.history_changed.emit()
        self.state_changed.emit(new_state)
        self._schedule_save()
        return True

    def _schedule_save(self):
        if self.store is not None:
            self._save_timer.start()

    def flush_save(self) -> bool:
        """Write the autosave slot now. Failures are reported, state is kept."""
        self._save_timer.stop()
        if self.store is None:
            return False
        if self.store.save(self._state):
            self.last_saved = time.time()
            return True
        self.save_failed.emit("The project could not be saved to local storage.")
        return False

    # ==========================================
    # ⏪ UNDO / REDO
    # ==========================================
    def _restore(self, entry: Optional[ProjectState]) -> bool:
        if entry is None:
            return False
        with self.history.replaying():
            self.commit(entry)
        self._drop_missing_selection()
        self.history_changed.emit()
        return True

    def undo(self) -> bool:
        self.cancel_transient_edit()
        return self._restore(self.history.undo())

    def redo(self) -> bool:
        self.cancel_transient_edit()
        return self._restore(self.history.redo())

    def _drop_missing_selection(self):
        present = {zone.id for zone in self._state.zones}
        missing = [i for i in self.selection.multi_ids | {self.selection.primary_id}
                   if i not in (None, BACKGROUND_ID) and i not in present]
        if self.selection.primary_id == BACKGROUND_ID and self._state.background_source is None:
            missing.append(BACKGROUND_ID)
        if missing:
            self.selection.discard(missing)

    # ==========================================
    # 🟦 ZONES
    # ==========================================
    def add_zone(self, partial: Optional[Dict] = None) -> str:
        new_state = ops.add_zone(self._state, partial)
        self.commit(new_state)
        return new_state.zones[-1].id

    def update_zone(self, zone_id: str, patch: Dict):
        self.commit(ops.update_zone(self._state, zone_id, patch))

    def update_selection(self, patch: Dict):
        """
        Property edit from the properties panel.

        Style fields go to every selected zone; x/y only to the primary.
        """
        changes = normalize_patch(Zone, patch)
        position = {k: v for k, v in changes.items() if k in POSITION_FIELDS}
        new_state = ops.batch_update_zones(self._state, self.selection.broadcast_ids(), changes)
        target = self.selection.position_target()
        if position and target is not None:
            new_state = ops.update_zone(new_state, target, position)
        self.commit(new_state)

    def remove_zones(self, ids: Iterable[str]):
        ids = list(ids)
        if self.commit(ops.remove_zones(self._state, ids)):
            self.selection.discard(ids)

    def delete_selection(self) -> bool:
        ids = self.selection.broadcast_ids()
        if not ids:
            return False
        if self.commit(ops.remove_zones(self._state, ids)):
            self.selection.clear()
            return True
        return False

    def copy_selection(self) -> bool:
        zone = find_zone(self._state, self.selection.primary_id) if self.selection.has_zone_selection() else None
        if zone is None:
            return False
        self.clipboard = zone
        return True

    def paste(self) -> Optional[str]:
        if self.clipboard is None:
            return None
        new_state = ops.paste_zone(self._state, self.clipboard)
        self.commit(new_state)
        new_id = new_state.zones[-1].id
        self.selection.replace(new_id)
        return new_id

    # ==========================================
    # 🖼️ BACKGROUND
    # ==========================================
    def set_background(self, kind: str, value: str):
        self.commit(ops.set_background(self._state, kind, value))

    def clear_background(self):
        if self.selection.primary_id == BACKGROUND_ID:
            self.selection.clear()
        self.commit(ops.clear_background(self._state))

    def report_background_size(self, image_width: float, image_height: float) -> bool:
        """
        Called by the canvas once a new background image is decoded.

        Auto-fits the image if it has no transform yet. The fit is fully
        determined by the image and the mat, so it is not a history step.
        """
        if self._state.background is not None or self._state.background_source is None:
            return False
        if image_width <= 0 or image_height <= 0:
            return False
        fitted = ops.autofit_background(self._state.mat_size, image_width, image_height)
        return self.commit(ops.set_background_transform(self._state, fitted), record=False)

    def set_background_transform(self, transform):
        self.commit(ops.set_background_transform(self._state, transform))

    def update_background(self, patch: Dict):
        bg = self._state.background
        if bg is None:
            return
        changes = normalize_patch(type(bg), patch)
        self.set_background_transform(bg.model_copy(update=changes))

    def layout_background(self, mode: str):
        """Quick actions: width, height, stretch, center, center-h, center-v."""
        bg = self._state.background
        if bg is None:
            return
        self.set_background_transform(BACKGROUND_LAYOUTS[mode](bg, self._state.mat_size))

    # ==========================================
    # ⚙️ SETTINGS
    # ==========================================
    def set_mat_size(self, width_cm: float, height_cm: float):
        self.commit(ops.set_mat_size(self._state, width_cm, height_cm))

    def set_grid_enabled(self, enabled: bool):
        self.commit(ops.set_grid_enabled(self._state, enabled))

    def set_grid_size(self, size_cm: float):
        self.commit(ops.set_grid_size(self._state, size_cm))

    def set_unit(self, unit: str):
        self.commit(ops.set_unit(self._state, unit))

    def set_export_dpi(self, dpi: int):
        self.commit(ops.set_export_dpi(self._state, dpi))

    def set_project_name(self, name: str):
        self.commit(ops.set_project_name(self._state, name))

    def set_default_zone_size(self, width_cm: float, height_cm: float):
        self.commit(ops.set_default_zone_size(self._state, width_cm, height_cm))

    def set_aux_api_key(self, key: str):
        self.commit(ops.set_aux_api_key(self._state, key))

    # ==========================================
    # 🗂️ PROJECT
    # ==========================================
    def new_project(self, mat_width_cm: Optional[float] = None, mat_height_cm: Optional[float] = None):
        self.cancel_transient_edit()
        fresh = ops.reset_project(self._state)
        if mat_width_cm and mat_height_cm:
            fresh = ops.set_mat_size(fresh, mat_width_cm, mat_height_cm)
        self.selection.clear()
        self.clipboard = None
        self.commit(fresh)

    def import_document(self, data) -> DecodeResult:
        """Apply an imported document over the current project (field by field)."""
        self.cancel_transient_edit()
        result = decode_document(data, self._state)
        if not isinstance(data, dict):
            return result
        self.selection.clear()
        self.commit(result.state)
        self.flush_save()
        return result

    def open_file(self, path) -> DecodeResult:
        self.cancel_transient_edit()
        result = read_project_file(path, self._state)
        self.selection.clear()
        self.commit(result.state)
        self.flush_save()
        return result

    def save_file(self, path):
        write_project_file(path, self._state)

    # ==========================================
    # ✋ GESTURES
    # ==========================================
    def begin_transient_edit(self, ids: Iterable[str]):
        if self.gestures.active:
            self.cancel_transient_edit()
        self.gestures.begin(ids)

    def update_transient_edit(self, object_id: str, **geometry):
        self.gestures.update(object_id, **geometry)
        self.transient_changed.emit(object_id)

    def geometry_for(self, object_id: str) -> Optional[dict]:
        return self.gestures.geometry_for(object_id)

    def cancel_transient_edit(self):
        if not self.gestures.active:
            return
        ids = self.gestures.tracked_ids()
        self.gestures.cancel()
        for object_id in ids:
            self.transient_changed.emit(object_id)

    def commit_edit(self) -> bool:
        """
        End the gesture: snap the zones it moved, apply everything as one
        state change and one history entry.
        """
        settled = self.gestures.commit()
        new_state = self._state
        for object_id, geometry in settled.items():
            if object_id == BACKGROUND_ID:
                bg = new_state.background
                if bg is not None:
                    new_state = ops.set_background_transform(new_state, bg.model_copy(update=geometry))
                continue
            zone = find_zone(new_state, object_id)
            if zone is None:
                log.debug("gesture target %s no longer exists", object_id)
                continue
            x, y, w, h = snap_geometry(
                geometry.get("x", zone.x), geometry.get("y", zone.y),
                geometry.get("width", zone.width), geometry.get("height", zone.height),
                new_state.grid_size, new_state.grid_enabled,
            )
            new_state = ops.update_zone(new_state, object_id, {"x": x, "y": y, "width": w, "height": h})
        changed = self.commit(new_state)
        for object_id in settled:
            self.transient_changed.emit(object_id)
        return changed
