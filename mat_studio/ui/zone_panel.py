from PyQt6.QtWidgets import (QDockWidget, QFrame, QVBoxLayout, QPushButton, QListWidget, QListWidgetItem,
                             QHBoxLayout, QAbstractItemView, QApplication)
from PyQt6.QtCore import Qt


class ZonePanel(QDockWidget):
    """Zone list: topmost zone first, click selects, Ctrl/Shift-click toggles"""

    def __init__(self, session, parent=None):
        super().__init__("Zones", parent)
        self.session = session
        self._syncing = False

        # 1. Dock Config
        self.setAllowedAreas(Qt.DockWidgetArea.LeftDockWidgetArea | Qt.DockWidgetArea.RightDockWidgetArea)
        self.setFeatures(QDockWidget.DockWidgetFeature.DockWidgetMovable | QDockWidget.DockWidgetFeature.DockWidgetFloatable)

        # 2. Container
        self.container = QFrame()
        self.container.setObjectName("PanelContent")
        self.setWidget(self.container)

        # 3. Layout
        self.layout = QVBoxLayout(self.container)
        self.layout.setContentsMargins(10, 10, 10, 10)

        # 4. Content
        self.zone_list = QListWidget()
        self.zone_list.setSelectionMode(QAbstractItemView.SelectionMode.ExtendedSelection)
        self.zone_list.itemClicked.connect(self.on_item_clicked)
        self.layout.addWidget(self.zone_list)

        # Button Row
        btn_layout = QHBoxLayout()
        self.btn_add = QPushButton("+")
        self.btn_add.setToolTip("Add zone")
        self.btn_add.clicked.connect(self.on_add)
        self.btn_del = QPushButton("-")
        self.btn_del.setObjectName("Danger")
        self.btn_del.setToolTip("Delete selected zones")
        self.btn_del.clicked.connect(self.session.delete_selection)
        btn_layout.addWidget(self.btn_add)
        btn_layout.addWidget(self.btn_del)
        self.layout.addLayout(btn_layout)

        self.session.state_changed.connect(self.refresh)
        self.session.selection_changed.connect(self.refresh_selection)
        self.refresh()

    def refresh(self, *_):
        self._syncing = True
        self.zone_list.clear()
        for zone in reversed(self.session.state.zones):
            item = QListWidgetItem(zone.text or zone.id)
            item.setData(Qt.ItemDataRole.UserRole, zone.id)
            self.zone_list.addItem(item)
        self._syncing = False
        self.refresh_selection()

    def refresh_selection(self):
        selection = self.session.selection
        for row in range(self.zone_list.count()):
            item = self.zone_list.item(row)
            zone_id = item.data(Qt.ItemDataRole.UserRole)
            font = item.font()
            font.setBold(zone_id == selection.primary_id)
            item.setFont(font)
            item.setSelected(selection.is_selected(zone_id))

    def on_item_clicked(self, item):
        if self._syncing:
            return
        zone_id = item.data(Qt.ItemDataRole.UserRole)
        modifiers = QApplication.keyboardModifiers()
        if modifiers & (Qt.KeyboardModifier.ControlModifier | Qt.KeyboardModifier.ShiftModifier):
            self.session.selection.toggle(zone_id)
        else:
            self.session.selection.replace(zone_id)

    def on_add(self):
        zone_id = self.session.add_zone()
        self.session.selection.replace(zone_id)
