import pytest

from mat_studio.logic.gesture import GestureError, GestureTracker


def test_live_geometry_is_cached_until_commit():
    g = GestureTracker()
    g.begin(["a"])
    g.update("a", x=10)
    g.update("a", y=20)
    assert g.geometry_for("a") == {"x": 10, "y": 20}
    assert g.commit() == {"a": {"x": 10, "y": 20}}
    assert not g.active
    assert g.geometry_for("a") is None


def test_untouched_objects_are_not_committed():
    g = GestureTracker()
    g.begin(["a", "b"])
    g.update("b", width=50)
    assert g.commit() == {"b": {"width": 50}}


def test_rejects_non_geometry():
    g = GestureTracker()
    g.begin(["a"])
    with pytest.raises(GestureError):
        g.update("a", fill="red")


def test_update_outside_gesture():
    with pytest.raises(GestureError):
        GestureTracker().update("a", x=1)


def test_cannot_nest_gestures():
    g = GestureTracker()
    g.begin()
    with pytest.raises(GestureError):
        g.begin()


def test_cancel_discards():
    g = GestureTracker()
    g.begin(["a"])
    g.update("a", x=1)
    g.cancel()
    assert not g.active and g.tracked_ids() == []
