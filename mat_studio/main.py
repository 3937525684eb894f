import logging
import os
import sys

from PyQt6.QtWidgets import QApplication, QMainWindow, QToolBar, QDockWidget, QFileDialog, QMessageBox
from PyQt6.QtCore import Qt, QSize, QSettings
from PyQt6.QtGui import QAction, QFont, QKeySequence

from . import config_manager
from . import styles
from .logic.errors import MatStudioError
from .logic.export import export_png
from .logic.project import ProjectStore, project_filename
from .logic.session import EditorSession
from .ui.canvas import Canvas
from .ui.diagnostics import DiagnosticsPanel
from .ui.new_project_dialog import NewProjectDialog
from .ui.properties_panel import PropertiesPanel
from .ui.settings_panel import SettingsPanel
from .ui.zone_panel import ZonePanel

log = logging.getLogger(__name__)


class MatStudio(QMainWindow):
    def __init__(self, session):
        super().__init__()

        # 1. Config & Window Setup
        self.config = config_manager.CONFIG
        app_settings = self.config['app_settings']
        self.session = session

        self.setWindowTitle(app_settings['title'])
        self.resize(app_settings['initial_width'], app_settings['initial_height'])
        self.setStyleSheet(styles.get_stylesheet())

        # 2. The Canvas
        self.canvas = Canvas(self.session, self)
        self.setCentralWidget(self.canvas)

        # 3. The Docks
        self.settings_panel = SettingsPanel(self.session, self)
        self.addDockWidget(Qt.DockWidgetArea.LeftDockWidgetArea, self.settings_panel)

        self.zone_panel = ZonePanel(self.session, self)
        self.addDockWidget(Qt.DockWidgetArea.RightDockWidgetArea, self.zone_panel)

        self.properties_panel = PropertiesPanel(self.session, self)
        self.addDockWidget(Qt.DockWidgetArea.RightDockWidgetArea, self.properties_panel)

        self.diagnostics = DiagnosticsPanel(self.session, self)
        self.addDockWidget(Qt.DockWidgetArea.LeftDockWidgetArea, self.diagnostics)
        self.diagnostics.hide()

        self.docks = [self.settings_panel, self.zone_panel, self.properties_panel, self.diagnostics]

        # 4. Menus & Actions
        self.setup_actions()
        self.setup_menubar()
        self.setup_toolbar()

        self.session.history_changed.connect(self.update_history_actions)
        self.session.save_failed.connect(lambda msg: self.statusBar().showMessage(msg, 5000))
        self.update_history_actions()

        # Start Unlocked
        self.toggle_ui_lock(False)

        if self.session.load_issues:
            fields = ", ".join(issue.field for issue in self.session.load_issues)
            self.statusBar().showMessage(f"Saved project restored; skipped invalid fields: {fields}", 8000)

    def setup_actions(self):
        """Define logic for menus and buttons"""
        self.act_new = QAction("New Mat...", self)
        self.act_new.setShortcut(QKeySequence.StandardKey.New)
        self.act_new.triggered.connect(self.new_project)

        self.act_open = QAction("Open...", self)
        self.act_open.setShortcut(QKeySequence.StandardKey.Open)
        self.act_open.triggered.connect(self.open_project)

        self.act_save = QAction("Save As...", self)
        self.act_save.setShortcut(QKeySequence.StandardKey.Save)
        self.act_save.triggered.connect(self.save_project)

        self.act_export = QAction("Export PNG...", self)
        self.act_export.setShortcut("Ctrl+E")
        self.act_export.triggered.connect(self.export_image)

        self.act_exit = QAction("Exit", self)
        self.act_exit.triggered.connect(self.close)

        self.act_undo = QAction("Undo", self)
        self.act_undo.triggered.connect(self.session.undo)
        self.act_redo = QAction("Redo", self)
        self.act_redo.triggered.connect(self.session.redo)

        self.act_add_zone = QAction("Add Zone", self)
        self.act_add_zone.triggered.connect(lambda: self.session.selection.replace(self.session.add_zone()))
        self.act_copy = QAction("Copy", self)
        self.act_copy.triggered.connect(self.session.copy_selection)
        self.act_paste = QAction("Paste", self)
        self.act_paste.triggered.connect(self.session.paste)
        self.act_delete = QAction("Delete", self)
        self.act_delete.triggered.connect(self.session.delete_selection)

        self.act_fit = QAction("Fit Mat to Window", self)
        self.act_fit.setShortcut("Ctrl+0")
        self.act_fit.triggered.connect(self.canvas.fit_to_view)

        self.act_lock = QAction("Lock Workspace", self)
        self.act_lock.setCheckable(True)
        self.act_lock.toggled.connect(self.toggle_ui_lock)

    def setup_menubar(self):
        """Create the top text menu"""
        menu = self.menuBar()

        file_menu = menu.addMenu("&File")
        for action in (self.act_new, self.act_open, self.act_save, self.act_export):
            file_menu.addAction(action)
        file_menu.addSeparator()
        file_menu.addAction(self.act_exit)

        # Canvas handles the keyboard shortcuts for these
        edit_menu = menu.addMenu("&Edit")
        for action in (self.act_undo, self.act_redo, self.act_add_zone, self.act_copy, self.act_paste, self.act_delete):
            edit_menu.addAction(action)

        view_menu = menu.addMenu("&View")
        view_menu.addAction(self.act_fit)
        view_menu.addAction(self.act_lock)

        # Window menu lets users bring back closed panels
        win_menu = menu.addMenu("&Window")
        for dock in self.docks:
            win_menu.addAction(dock.toggleViewAction())

    def setup_toolbar(self):
        """Create the icon bar"""
        toolbar = QToolBar("Main Toolbar")
        toolbar.setIconSize(QSize(16, 16))
        toolbar.setMovable(False)
        self.addToolBar(toolbar)

        for action in (self.act_add_zone, self.act_undo, self.act_redo, self.act_export):
            toolbar.addAction(action)
        toolbar.addSeparator()
        toolbar.addAction(self.act_lock)

    def update_history_actions(self):
        self.act_undo.setEnabled(self.session.history.can_undo())
        self.act_redo.setEnabled(self.session.history.can_redo())

    def toggle_ui_lock(self, locked):
        """Freezes or Unfreezes the panels"""
        for dock in self.docks:
            if locked:
                dock.setFeatures(QDockWidget.DockWidgetFeature.NoDockWidgetFeatures)
            else:
                dock.setFeatures(QDockWidget.DockWidgetFeature.DockWidgetMovable |
                                 QDockWidget.DockWidgetFeature.DockWidgetFloatable |
                                 QDockWidget.DockWidgetFeature.DockWidgetClosable)

    # ==========================================
    # 🗂️ FILE ACTIONS
    # ==========================================
    def new_project(self):
        dialog = NewProjectDialog(self.session.state.unit, self)
        if dialog.exec():
            w, h = dialog.get_dimensions()
            self.session.new_project(w, h)
            self.canvas.fit_to_view()

    def open_project(self):
        path, _ = QFileDialog.getOpenFileName(self, "Open Project", "", "Mat project (*.json)")
        if not path:
            return
        try:
            result = self.session.open_file(path)
        except MatStudioError as e:
            QMessageBox.critical(self, "Open Project", str(e))
            return
        if result.issues:
            details = "\n".join(f"{issue.field}: {issue.message}" for issue in result.issues)
            QMessageBox.warning(self, "Open Project", f"Some fields were skipped:\n{details}")
        self.canvas.fit_to_view()

    def save_project(self):
        suggested = project_filename(self.session.state.project_name)
        path, _ = QFileDialog.getSaveFileName(self, "Save Project", suggested, "Mat project (*.json)")
        if not path:
            return
        try:
            self.session.save_file(path)
        except MatStudioError as e:
            QMessageBox.critical(self, "Save Project", str(e))
            return
        self.statusBar().showMessage(f"Saved {os.path.basename(path)}", 4000)

    def export_image(self):
        directory = QFileDialog.getExistingDirectory(self, "Export PNG to...")
        if not directory:
            return
        try:
            path = export_png(self.canvas, self.session.state, self.session.selection, directory)
        except MatStudioError as e:
            QMessageBox.critical(self, "Export", str(e))
            return
        self.statusBar().showMessage(f"Exported {os.path.basename(path)}", 4000)

    def showEvent(self, event):
        super().showEvent(event)
        self.canvas.fit_to_view()

    def closeEvent(self, event):
        self.session.flush_save()
        super().closeEvent(event)


def main():
    logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s %(name)s: %(message)s")

    if config_manager.CONFIG is None:
        log.critical("no usable %s, cannot start", config_manager.CONFIG_FILE)
        return 1

    app = QApplication(sys.argv)
    app_settings = config_manager.CONFIG['app_settings']
    app.setOrganizationName(app_settings['organization'])
    app.setApplicationName(app_settings['application'])
    app.setFont(QFont(config_manager.CONFIG['theme']['font_family_ui'], 10))

    # === STARTUP === #
    store = ProjectStore(QSettings())
    session = EditorSession(store)
    window = MatStudio(session)
    window.show()
    return app.exec()


if __name__ == "__main__":
    sys.exit(main())
