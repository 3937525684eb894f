import json

import pytest

from mat_studio.logic.grid import grid_pitch_px
from mat_studio.logic.selection import BACKGROUND_ID
from mat_studio.logic.session import EditorSession
from mat_studio.logic.state import find_zone
from mat_studio.logic.units import cm_to_pixels


def test_starts_with_one_history_entry(session):
    assert len(session.history) == 1
    assert session.history.cursor == 0
    assert session.undo() is False


def test_commit_records_emits_and_skips_noops(session):
    seen = []
    session.state_changed.connect(seen.append)
    session.set_project_name("Deck")
    session.set_project_name("Deck")
    assert len(seen) == 1
    assert len(session.history) == 2


def test_drag_with_snap_is_one_history_entry(session):
    """Mat 60x35, 1 cm grid: drag a default zone from (100,100) to (101,101)."""
    zone_id = session.add_zone()
    before = len(session.history)
    pitch = grid_pitch_px(1)

    session.begin_transient_edit([zone_id])
    for step in range(1, 11):
        session.update_transient_edit(zone_id, x=100 + step * 0.1, y=100 + step * 0.1)
    assert find_zone(session.state, zone_id).x == 100  # live moves are not committed
    assert len(session.history) == before

    assert session.commit_edit() is True
    zone = find_zone(session.state, zone_id)
    assert zone.x == pytest.approx(round(101 / pitch) * pitch)
    assert zone.y == pytest.approx(round(101 / pitch) * pitch)
    assert zone.width == pytest.approx(round(cm_to_pixels(6.3) / pitch) * pitch)
    assert len(session.history) == before + 1
    assert session.geometry_for(zone_id) is None


def test_gesture_without_movement_adds_nothing(session):
    session.set_grid_enabled(False)
    zone_id = session.add_zone()
    before = len(session.history)
    session.begin_transient_edit([zone_id])
    assert session.commit_edit() is False
    assert len(session.history) == before


def test_background_drag_is_not_snapped(session):
    session.set_background("url", "http://example.com/bg.png")
    session.report_background_size(800, 600)
    session.begin_transient_edit([BACKGROUND_ID])
    session.update_transient_edit(BACKGROUND_ID, x=12.3, y=4.5)
    session.commit_edit()
    assert (session.state.background.x, session.state.background.y) == (12.3, 4.5)


def test_cancelled_gesture_leaves_state(session):
    zone_id = session.add_zone()
    state = session.state
    session.begin_transient_edit([zone_id])
    session.update_transient_edit(zone_id, x=500)
    session.cancel_transient_edit()
    assert session.state is state
    assert session.geometry_for(zone_id) is None


def test_undo_redo_restore_states(session):
    session.set_project_name("one")
    first = session.state
    session.set_project_name("two")
    second = session.state
    assert session.undo()
    assert session.state == first
    assert session.redo()
    assert session.state == second
    assert len(session.history) == 3  # replay added nothing


def test_undo_drops_selection_of_vanished_zone(session):
    zone_id = session.add_zone()
    session.selection.replace(zone_id)
    session.undo()
    assert session.selection.primary_id is None


def test_update_selection_broadcasts_style_not_position(session):
    a = session.add_zone({"x": 0})
    b = session.add_zone({"x": 300})
    session.selection.replace(a)
    session.selection.toggle(b)
    session.update_selection({"x": 10, "fill": "red"})
    za, zb = find_zone(session.state, a), find_zone(session.state, b)
    assert za.fill == zb.fill == "red"
    assert za.x == 0
    assert zb.x == 10  # b is the primary


def test_delete_selection(session):
    a = session.add_zone()
    b = session.add_zone()
    session.selection.replace(a)
    session.selection.toggle(b)
    assert session.delete_selection()
    assert session.state.zones == ()
    assert session.selection.primary_id is None


def test_remove_zones_clears_selection_of_removed(session):
    a = session.add_zone()
    session.selection.replace(a)
    session.remove_zones([a])
    assert session.selection.primary_id is None


def test_copy_paste_selects_copy(session):
    a = session.add_zone({"text": "Deck"})
    assert not session.copy_selection()
    session.selection.replace(a)
    assert session.copy_selection()
    new_id = session.paste()
    assert new_id != a
    assert session.selection.primary_id == new_id
    assert find_zone(session.state, new_id).text == "Deck"


def test_autofit_is_not_a_history_step(session):
    session.set_background("upload", "data:image/png;base64,AA==")
    before = len(session.history)
    assert session.report_background_size(100, 50)
    assert session.state.background is not None
    assert len(session.history) == before
    assert not session.report_background_size(100, 50)  # only once per background


def test_layout_background(session):
    session.set_background("url", "http://example.com/bg.png")
    session.report_background_size(100, 100)
    session.layout_background("stretch")
    bg = session.state.background
    assert (bg.x, bg.y) == (0, 0)
    assert bg.scale_x != bg.scale_y


def test_clear_background_drops_its_selection(session):
    session.set_background("url", "http://example.com/bg.png")
    session.selection.replace(BACKGROUND_ID)
    session.clear_background()
    assert session.selection.primary_id is None
    assert session.state.background_source is None


def test_new_project_keeps_api_key_and_is_undoable(session):
    session.set_aux_api_key("secret")
    zone_id = session.add_zone()
    session.selection.replace(zone_id)
    session.new_project(40, 20)
    assert session.state.zones == ()
    assert session.state.mat_size.width == 40
    assert session.state.aux_api_key == "secret"
    assert session.selection.primary_id is None
    session.undo()
    assert find_zone(session.state, zone_id) is not None


def test_import_document_applies_fields_independently(session):
    session.set_project_name("Before")
    result = session.import_document({"projectName": "After", "dpi": "lots", "unit": "inch"})
    assert session.state.project_name == "After"
    assert session.state.unit == "inch"
    assert session.state.export_dpi == 150
    assert [issue.field for issue in result.issues] == ["dpi"]


def test_import_rejects_non_objects(session):
    state = session.state
    result = session.import_document(["not", "a", "project"])
    assert not result.ok
    assert session.state is state


def test_flush_save_and_reload(qapp, store, session):
    session.set_project_name("Persisted")
    session.set_aux_api_key("k")
    assert session.flush_save()
    reloaded = EditorSession(store, autosave_delay_ms=60_000)
    assert reloaded.state == session.state
    assert len(reloaded.history) == 1


def test_corrupt_store_falls_back_to_defaults(qapp, settings, store):
    settings.setValue("playmat-generator-project", "{broken")
    settings.setValue("playmat-generator-version", "1.0")
    s = EditorSession(store, autosave_delay_ms=60_000)
    assert s.state.project_name == "Mi Playmat"


def test_failed_save_is_reported(qapp, session, monkeypatch):
    messages = []
    session.save_failed.connect(messages.append)
    monkeypatch.setattr(session.store, "save", lambda state: False)
    session.set_project_name("x")
    assert session.flush_save() is False
    assert messages
    assert session.state.project_name == "x"


def test_open_and_save_file(session, tmp_path):
    session.add_zone({"text": "Saved"})
    path = tmp_path / "deck.json"
    session.save_file(path)
    data = json.loads(path.read_text(encoding="utf-8"))
    assert data["zones"][0]["text"] == "Saved"

    session.new_project()
    session.open_file(path)
    assert session.state.zones[0].text == "Saved"
