from mat_studio.logic.selection import BACKGROUND_ID, SelectionManager


def make():
    calls = []
    return SelectionManager(on_change=lambda: calls.append(1)), calls


def test_replace_selects_exactly_one():
    sel, calls = make()
    sel.replace("a")
    sel.replace("b")
    assert sel.primary_id == "b"
    assert sel.multi_ids == {"b"}
    assert len(calls) == 2


def test_replace_with_none_clears():
    sel, _ = make()
    sel.replace("a")
    sel.replace(None)
    assert sel.primary_id is None and not sel.multi_ids


def test_background_is_never_in_multi():
    sel, _ = make()
    sel.replace(BACKGROUND_ID)
    assert sel.primary_id == BACKGROUND_ID
    assert not sel.multi_ids
    assert not sel.has_zone_selection()
    assert sel.broadcast_ids() == ()

    sel.toggle(BACKGROUND_ID)
    assert BACKGROUND_ID not in sel.multi_ids


def test_toggle_adds_and_tracks_primary():
    sel, _ = make()
    sel.replace("a")
    sel.toggle("b")
    sel.toggle("c")
    assert sel.primary_id == "c"
    assert sel.multi_ids == {"a", "b", "c"}
    assert sel.is_multi()
    assert sel.broadcast_ids() == ("a", "b", "c")
    assert sel.position_target() == "c"


def test_toggle_off_primary_falls_back_to_last_member():
    sel, _ = make()
    sel.replace("a")
    sel.toggle("b")
    sel.toggle("c")
    sel.toggle("c")
    assert sel.primary_id == "b"
    assert sel.multi_ids == {"a", "b"}
    sel.toggle("b")
    sel.toggle("a")
    assert sel.primary_id is None and not sel.multi_ids


def test_toggle_after_background_starts_fresh():
    sel, _ = make()
    sel.replace(BACKGROUND_ID)
    sel.toggle("a")
    assert sel.primary_id == "a" and sel.multi_ids == {"a"}


def test_clear_only_notifies_on_change():
    sel, calls = make()
    sel.clear()
    assert calls == []
    sel.replace("a")
    sel.clear()
    assert len(calls) == 2


def test_discard_primary_clears_everything():
    sel, _ = make()
    sel.replace("a")
    sel.toggle("b")
    sel.discard(["b"])
    assert sel.primary_id is None and not sel.multi_ids


def test_discard_other_member_keeps_primary():
    sel, _ = make()
    sel.replace("a")
    sel.toggle("b")
    sel.discard(["a"])
    assert sel.primary_id == "b" and sel.multi_ids == {"b"}


def test_snapshot_restore():
    sel, calls = make()
    sel.replace("a")
    sel.toggle("b")
    snap = sel.snapshot()
    sel.clear()
    sel.restore(snap)
    assert sel.primary_id == "b"
    assert sel.broadcast_ids() == ("a", "b")
