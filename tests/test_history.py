from mat_studio.logic.history import HistoryManager


def test_bounded_to_fifty_entries():
    history = HistoryManager()
    for i in range(1, 61):
        history.push(i)
    assert len(history) == 50
    assert history.cursor == 49
    assert history.entries[0] == 11
    assert history.get_stats()["full"]


def test_undo_redo_symmetry():
    history = HistoryManager()
    s1, s2 = {"v": 1}, {"v": 2}
    history.push(s1)
    history.push(s2)
    assert history.undo() == s1
    assert history.redo() == s2
    assert history.current == s2


def test_push_after_undo_truncates_future():
    history = HistoryManager()
    for s in ("s1", "s2", "s3"):
        history.push(s)
    history.undo()
    history.push("s4")
    assert history.redo() is None
    assert history.entries == ["s1", "s2", "s4"]


def test_underflow_and_overflow_are_noops():
    history = HistoryManager()
    history.reset("initial")
    assert history.undo() is None
    assert history.redo() is None
    assert history.cursor == 0
    assert not history.can_undo() and not history.can_redo()


def test_undo_never_goes_before_initial_entry():
    history = HistoryManager()
    history.reset("loaded")
    history.push("edit")
    assert history.undo() == "loaded"
    assert history.undo() is None
    assert history.current == "loaded"


def test_push_is_ignored_while_replaying():
    history = HistoryManager()
    history.reset("a")
    history.push("b")
    with history.replaying():
        assert history.is_replaying
        assert history.push("c") is False
    assert not history.is_replaying
    assert history.entries == ["a", "b"]


def test_stats():
    history = HistoryManager(limit=5)
    history.reset("a")
    history.push("b")
    history.push("c")
    history.undo()
    assert history.get_stats() == {
        'entries': 3, 'cursor': 1, 'undo_count': 1, 'redo_count': 1, 'limit': 5, 'full': False,
    }
