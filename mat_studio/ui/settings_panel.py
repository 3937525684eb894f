from PyQt6.QtWidgets import (QDockWidget, QFrame, QVBoxLayout, QHBoxLayout, QFormLayout, QLabel, QLineEdit,
                             QComboBox, QCheckBox, QDoubleSpinBox, QPushButton, QFileDialog, QMessageBox)
from PyQt6.QtCore import Qt

from ..config import AVAILABLE_DPI_OPTIONS, MIN_DIMENSION_CM
from ..logic.units import UNITS, cm_to_display, parse_dimension
from .images import image_to_data_uri


def section_title(text):
    label = QLabel(text)
    label.setObjectName("SectionTitle")
    return label


def edited_value(spin, shown):
    """
    The value typed into ``spin``, or None while it still displays ``shown``.

    Spin boxes display a rounded value, which must not replace the stored one
    on a focus-out without an edit.
    """
    if spin.textFromValue(spin.value()) == spin.textFromValue(shown):
        return None
    return spin.value()


class SettingsPanel(QDockWidget):
    """Project, mat, grid and background settings"""

    def __init__(self, session, parent=None):
        super().__init__("Settings", parent)
        self.session = session

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
        self.layout.setSpacing(8)
        self.layout.setAlignment(Qt.AlignmentFlag.AlignTop)

        # 4. Content
        self._build_project_section()
        self._build_mat_section()
        self._build_background_section()
        self.layout.addStretch()

        self.session.state_changed.connect(self.refresh)
        self.refresh()

    # ==========================================
    # 🧱 BUILD
    # ==========================================
    def _dimension_spin(self):
        spin = QDoubleSpinBox()
        spin.setDecimals(2)
        spin.setRange(0.01, 10000)
        spin.setKeyboardTracking(False)
        return spin

    def _build_project_section(self):
        self.layout.addWidget(section_title("PROJECT"))
        form = QFormLayout()

        self.edit_name = QLineEdit()
        self.edit_name.editingFinished.connect(lambda: self.session.set_project_name(self.edit_name.text()))
        form.addRow("Name:", self.edit_name)

        self.combo_unit = QComboBox()
        self.combo_unit.addItems(UNITS)
        self.combo_unit.currentTextChanged.connect(self.session.set_unit)
        form.addRow("Units:", self.combo_unit)

        self.combo_dpi = QComboBox()
        for dpi in AVAILABLE_DPI_OPTIONS:
            self.combo_dpi.addItem(f"{dpi} DPI", dpi)
        self.combo_dpi.currentIndexChanged.connect(
            lambda i: self.session.set_export_dpi(self.combo_dpi.itemData(i)) if i >= 0 else None)
        form.addRow("Export:", self.combo_dpi)

        self.edit_api_key = QLineEdit()
        self.edit_api_key.setEchoMode(QLineEdit.EchoMode.Password)
        self.edit_api_key.setPlaceholderText("stored locally only")
        self.edit_api_key.editingFinished.connect(lambda: self.session.set_aux_api_key(self.edit_api_key.text()))
        form.addRow("API key:", self.edit_api_key)
        self.layout.addLayout(form)

    def _build_mat_section(self):
        self.layout.addWidget(section_title("MAT"))
        form = QFormLayout()

        self.spin_mat_w = self._dimension_spin()
        self.spin_mat_h = self._dimension_spin()
        self.spin_mat_w.editingFinished.connect(self.on_mat_width)
        self.spin_mat_h.editingFinished.connect(self.on_mat_height)
        form.addRow("Width:", self.spin_mat_w)
        form.addRow("Height:", self.spin_mat_h)

        self.check_grid = QCheckBox("Snap to grid")
        self.check_grid.toggled.connect(self.session.set_grid_enabled)
        form.addRow(self.check_grid)

        self.spin_grid = self._dimension_spin()
        self.spin_grid.editingFinished.connect(self.on_grid_size)
        form.addRow("Grid:", self.spin_grid)

        self.spin_zone_w = self._dimension_spin()
        self.spin_zone_h = self._dimension_spin()
        self.spin_zone_w.editingFinished.connect(self.on_zone_width)
        self.spin_zone_h.editingFinished.connect(self.on_zone_height)
        form.addRow("Zone W:", self.spin_zone_w)
        form.addRow("Zone H:", self.spin_zone_h)
        self.layout.addLayout(form)

    def _build_background_section(self):
        self.layout.addWidget(section_title("BACKGROUND"))
        row = QHBoxLayout()
        self.edit_bg_url = QLineEdit()
        self.edit_bg_url.setPlaceholderText("https://...")
        self.btn_bg_url = QPushButton("Load")
        self.btn_bg_url.clicked.connect(self.on_background_url)
        row.addWidget(self.edit_bg_url)
        row.addWidget(self.btn_bg_url)
        self.layout.addLayout(row)

        row = QHBoxLayout()
        self.btn_upload = QPushButton("Upload...")
        self.btn_upload.clicked.connect(self.on_upload)
        self.btn_clear_bg = QPushButton("Remove")
        self.btn_clear_bg.setObjectName("Danger")
        self.btn_clear_bg.clicked.connect(self.session.clear_background)
        row.addWidget(self.btn_upload)
        row.addWidget(self.btn_clear_bg)
        self.layout.addLayout(row)

    # ==========================================
    # 🔁 STATE -> WIDGETS
    # ==========================================
    def refresh(self, *_):
        state = self.session.state
        unit = state.unit
        widgets = [self.edit_name, self.combo_unit, self.combo_dpi, self.edit_api_key, self.spin_mat_w,
                   self.spin_mat_h, self.check_grid, self.spin_grid, self.spin_zone_w, self.spin_zone_h]
        for w in widgets:
            w.blockSignals(True)

        if not self.edit_name.hasFocus():
            self.edit_name.setText(state.project_name)
        self.combo_unit.setCurrentText(unit)
        self.combo_dpi.setCurrentIndex(self.combo_dpi.findData(state.export_dpi))
        if not self.edit_api_key.hasFocus():
            self.edit_api_key.setText(state.aux_api_key)

        minimum = cm_to_display(MIN_DIMENSION_CM, unit)
        for spin, value_cm in ((self.spin_mat_w, state.mat_size.width), (self.spin_mat_h, state.mat_size.height),
                               (self.spin_grid, state.grid_size),
                               (self.spin_zone_w, state.default_zone_size.width),
                               (self.spin_zone_h, state.default_zone_size.height)):
            spin.setMinimum(minimum)
            spin.setSuffix(f" {unit}")
            spin.setValue(cm_to_display(value_cm, unit))

        self.check_grid.setChecked(state.grid_enabled)
        self.spin_grid.setEnabled(state.grid_enabled)

        source = state.background_source
        self.edit_bg_url.setText(source.value if source and source.kind == "url" else "")
        self.btn_clear_bg.setEnabled(source is not None)

        for w in widgets:
            w.blockSignals(False)

    # ==========================================
    # ✏️ WIDGETS -> SESSION
    # ==========================================
    def _edited_cm(self, spin, stored_cm):
        unit = self.session.state.unit
        value = edited_value(spin, cm_to_display(stored_cm, unit))
        return None if value is None else parse_dimension(value, unit)

    def on_mat_width(self):
        size = self.session.state.mat_size
        width = self._edited_cm(self.spin_mat_w, size.width)
        if width is not None:
            self.session.set_mat_size(width, size.height)

    def on_mat_height(self):
        size = self.session.state.mat_size
        height = self._edited_cm(self.spin_mat_h, size.height)
        if height is not None:
            self.session.set_mat_size(size.width, height)

    def on_grid_size(self):
        size = self._edited_cm(self.spin_grid, self.session.state.grid_size)
        if size is not None:
            self.session.set_grid_size(size)

    def on_zone_width(self):
        size = self.session.state.default_zone_size
        width = self._edited_cm(self.spin_zone_w, size.width)
        if width is not None:
            self.session.set_default_zone_size(width, size.height)

    def on_zone_height(self):
        size = self.session.state.default_zone_size
        height = self._edited_cm(self.spin_zone_h, size.height)
        if height is not None:
            self.session.set_default_zone_size(size.width, height)

    def on_background_url(self):
        url = self.edit_bg_url.text().strip()
        if url:
            self.session.set_background("url", url)

    def on_upload(self):
        path, _ = QFileDialog.getOpenFileName(self, "Background Image", "", "Images (*.png *.jpg *.jpeg *.webp *.bmp)")
        if not path:
            return
        uri = image_to_data_uri(path)
        if uri is None:
            QMessageBox.warning(self, "Background", f"Could not read {path}")
            return
        self.session.set_background("upload", uri)
