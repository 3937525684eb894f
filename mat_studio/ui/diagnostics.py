import os
from time import localtime, strftime

import psutil
from PyQt6.QtWidgets import QDockWidget, QFrame, QVBoxLayout, QLabel
from PyQt6.QtCore import QTimer, Qt


class DiagnosticsPanel(QDockWidget):
    """Process memory and undo history position, refreshed once a second"""

    def __init__(self, session, parent=None):
        super().__init__("System", parent)
        self.session = session
        self.process = psutil.Process(os.getpid())

        self.setAllowedAreas(Qt.DockWidgetArea.LeftDockWidgetArea | Qt.DockWidgetArea.RightDockWidgetArea)
        self.setFeatures(QDockWidget.DockWidgetFeature.DockWidgetMovable | QDockWidget.DockWidgetFeature.DockWidgetFloatable)

        self.container = QFrame()
        self.container.setObjectName("PanelContent")
        self.setWidget(self.container)

        layout = QVBoxLayout(self.container)
        layout.setContentsMargins(10, 10, 10, 10)

        # --- DATA LABELS ---
        self.lbl_ram = QLabel("MEM: 0.0 MB")
        self.lbl_undo = QLabel("STEPS: 0 / 0")
        self.lbl_zones = QLabel("ZONES: 0")
        self.lbl_saved = QLabel("SAVED: never")
        for label in (self.lbl_ram, self.lbl_undo, self.lbl_zones, self.lbl_saved):
            layout.addWidget(label)

        self.session.history_changed.connect(self.refresh_diagnostics)
        self.session.state_changed.connect(self.refresh_diagnostics)

        # Timer setup
        self.timer = QTimer(self)
        self.timer.timeout.connect(self.refresh_diagnostics)
        self.timer.start(1000)
        self.refresh_diagnostics()

    def refresh_diagnostics(self, *_):
        mem_mb = self.process.memory_info().rss / (1024 * 1024)
        self.lbl_ram.setText(f"MEM: {mem_mb:.1f} MB")

        stats = self.session.history.get_stats()
        self.lbl_undo.setText(f"STEPS: {stats['cursor'] + 1} / {stats['entries']}"
                              + (" (full)" if stats['full'] else ""))
        self.lbl_zones.setText(f"ZONES: {len(self.session.state.zones)}")

        if self.session.last_saved is not None:
            self.lbl_saved.setText(f"SAVED: {strftime('%H:%M:%S', localtime(self.session.last_saved))}")
