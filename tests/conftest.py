import os

import pytest

os.environ.setdefault("QT_QPA_PLATFORM", "offscreen")

from PyQt6.QtCore import QSettings  # noqa: E402
from PyQt6.QtWidgets import QApplication  # noqa: E402

from mat_studio.logic.project import ProjectStore  # noqa: E402
from mat_studio.logic.session import EditorSession  # noqa: E402


@pytest.fixture(scope="session")
def qapp():
    app = QApplication.instance() or QApplication([])
    yield app


@pytest.fixture
def settings(tmp_path):
    return QSettings(str(tmp_path / "store.ini"), QSettings.Format.IniFormat)


@pytest.fixture
def store(settings):
    return ProjectStore(settings)


@pytest.fixture
def session(qapp, store):
    """Session on an empty store; autosave only happens on flush_save()."""
    s = EditorSession(store, autosave_delay_ms=60_000)
    yield s
    s._save_timer.stop()
