from PyQt6.QtWidgets import (QDockWidget, QFrame, QVBoxLayout, QGridLayout, QFormLayout, QLabel, QLineEdit,
                             QComboBox, QCheckBox, QDoubleSpinBox, QPushButton, QStackedWidget, QWidget,
                             QScrollArea, QFileDialog)
from PyQt6.QtCore import Qt

from ..config import MIN_ZONE_SIZE
from ..logic.selection import BACKGROUND_ID
from ..logic.state import find_zone
from ..logic.units import cm_to_display, cm_to_pixels, format_length, mat_pixel_size, parse_dimension, pixels_to_cm
from ..logic.zone import edge_distances
from .images import image_to_data_uri
from .settings_panel import edited_value, section_title

# (field, label, kind, extra)
ZONE_FIELDS = [
    ("text", "Text", "text", None),
    ("font_size", "Font size", "float", (1, 400)),
    ("font_family", "Font", "text", None),
    ("font_style", "Style", "choice", ["normal", "bold", "italic", "bold italic"]),
    ("text_color", "Text color", "text", None),
    ("text_position", "Text at", "choice", ["center", "top", "bottom", "top-out", "bottom-out"]),
    ("text_distance", "Text gap", "float", (0, 500)),
    ("text_stroke", "Outline", "float", (0, 50)),
    ("text_stroke_color", "Outline color", "text", None),
    ("text_shadow", "Text shadow", "bool", None),
    ("text_shadow_x", "Shadow X", "float", (-100, 100)),
    ("text_shadow_y", "Shadow Y", "float", (-100, 100)),
    ("text_shadow_blur", "Shadow blur", "float", (0, 100)),
    ("text_shadow_color", "Shadow color", "text", None),
    ("fill", "Fill", "text", None),
    ("no_fill", "No fill", "bool", None),
    ("opacity", "Opacity", "float", (0, 1)),
    ("stroke", "Border", "text", None),
    ("stroke_width", "Border width", "float", (0, 100)),
    ("corner_radius", "Corner radius", "float", (0, 500)),
    ("border_top", "Top edge", "bool", None),
    ("border_right", "Right edge", "bool", None),
    ("border_bottom", "Bottom edge", "bool", None),
    ("border_left", "Left edge", "bool", None),
    ("border_shadow", "Border shadow", "bool", None),
    ("border_shadow_x", "Shadow X", "float", (-100, 100)),
    ("border_shadow_y", "Shadow Y", "float", (-100, 100)),
    ("border_shadow_blur", "Shadow blur", "float", (0, 100)),
    ("border_shadow_color", "Shadow color", "text", None),
    ("rotation", "Rotation", "float", (-360, 360)),
    ("zone_image", "Image URL", "text", None),
    ("image_fit", "Image fit", "choice", ["fill", "fit-width", "fit-height"]),
    ("image_opacity", "Image opacity", "float", (0, 1)),
]

BACKGROUND_ACTIONS = [
    ("Fit width", "width"), ("Fit height", "height"), ("Stretch", "stretch"),
    ("Center", "center"), ("Center H", "center-h"), ("Center V", "center-v"),
]


class PropertiesPanel(QDockWidget):
    """Style fields of the selected zones, or quick actions for the background"""

    def __init__(self, session, parent=None):
        super().__init__("Properties", parent)
        self.session = session
        self.widgets = {}

        # 1. Dock Config
        self.setAllowedAreas(Qt.DockWidgetArea.LeftDockWidgetArea | Qt.DockWidgetArea.RightDockWidgetArea)
        self.setFeatures(QDockWidget.DockWidgetFeature.DockWidgetMovable | QDockWidget.DockWidgetFeature.DockWidgetFloatable)

        # 2. Container
        self.container = QFrame()
        self.container.setObjectName("PanelContent")
        scroll = QScrollArea()
        scroll.setWidgetResizable(True)
        scroll.setWidget(self.container)
        self.setWidget(scroll)

        # 3. Layout
        self.layout = QVBoxLayout(self.container)
        self.layout.setContentsMargins(10, 10, 10, 10)
        self.layout.setAlignment(Qt.AlignmentFlag.AlignTop)

        # 4. Pages: nothing / zone / background
        self.stack = QStackedWidget()
        hint = QLabel("Select a zone or the background")
        hint.setObjectName("Hint")
        hint.setAlignment(Qt.AlignmentFlag.AlignCenter)
        self.stack.addWidget(hint)
        self.stack.addWidget(self._build_zone_page())
        self.stack.addWidget(self._build_background_page())
        self.layout.addWidget(self.stack)

        self.session.state_changed.connect(self.refresh)
        self.session.selection_changed.connect(self.refresh)
        self.session.transient_changed.connect(self.refresh)
        self.refresh()

    # ==========================================
    # 🧱 BUILD
    # ==========================================
    def _build_zone_page(self):
        page = QWidget()
        layout = QVBoxLayout(page)
        layout.setContentsMargins(0, 0, 0, 0)

        self.lbl_multi = QLabel()
        self.lbl_multi.setObjectName("Hint")
        layout.addWidget(self.lbl_multi)

        layout.addWidget(section_title("POSITION"))
        form = QFormLayout()
        self.spin_x = self._spin(-100000, 100000)
        self.spin_y = self._spin(-100000, 100000)
        self.spin_w = self._spin(0, 100000)
        self.spin_h = self._spin(0, 100000)
        self.spin_x.editingFinished.connect(lambda: self.on_position("x", self.spin_x))
        self.spin_y.editingFinished.connect(lambda: self.on_position("y", self.spin_y))
        self.spin_w.editingFinished.connect(lambda: self.on_size("width", self.spin_w))
        self.spin_h.editingFinished.connect(lambda: self.on_size("height", self.spin_h))
        form.addRow("X:", self.spin_x)
        form.addRow("Y:", self.spin_y)
        form.addRow("Width:", self.spin_w)
        form.addRow("Height:", self.spin_h)
        self.lbl_edges = QLabel()
        self.lbl_edges.setObjectName("Hint")
        self.lbl_edges.setWordWrap(True)
        form.addRow(self.lbl_edges)
        layout.addLayout(form)

        layout.addWidget(section_title("STYLE"))
        form = QFormLayout()
        for name, label, kind, extra in ZONE_FIELDS:
            widget = self._field_widget(name, kind, extra)
            self.widgets[name] = (kind, widget)
            form.addRow(f"{label}:", widget)
        self.btn_zone_image = QPushButton("Image from file...")
        self.btn_zone_image.clicked.connect(self.on_zone_image_file)
        form.addRow(self.btn_zone_image)
        layout.addLayout(form)
        return page

    def _build_background_page(self):
        page = QWidget()
        layout = QVBoxLayout(page)
        layout.setContentsMargins(0, 0, 0, 0)
        layout.addWidget(section_title("BACKGROUND"))

        grid = QGridLayout()
        for i, (label, mode) in enumerate(BACKGROUND_ACTIONS):
            btn = QPushButton(label)
            btn.clicked.connect(lambda _, m=mode: self.session.layout_background(m))
            grid.addWidget(btn, i // 2, i % 2)
        layout.addLayout(grid)

        form = QFormLayout()
        self.spin_bg_x = self._spin(-100000, 100000)
        self.spin_bg_y = self._spin(-100000, 100000)
        self.spin_bg_scale_x = self._spin(0.001, 1000, decimals=3)
        self.spin_bg_scale_y = self._spin(0.001, 1000, decimals=3)
        self.spin_bg_x.editingFinished.connect(lambda: self.on_background_position("x", self.spin_bg_x))
        self.spin_bg_y.editingFinished.connect(lambda: self.on_background_position("y", self.spin_bg_y))
        self.spin_bg_scale_x.editingFinished.connect(lambda: self.on_background_scale("scale_x", self.spin_bg_scale_x))
        self.spin_bg_scale_y.editingFinished.connect(lambda: self.on_background_scale("scale_y", self.spin_bg_scale_y))
        form.addRow("X:", self.spin_bg_x)
        form.addRow("Y:", self.spin_bg_y)
        form.addRow("Scale X:", self.spin_bg_scale_x)
        form.addRow("Scale Y:", self.spin_bg_scale_y)
        layout.addLayout(form)

        self.btn_bg_remove = QPushButton("Remove background")
        self.btn_bg_remove.setObjectName("Danger")
        self.btn_bg_remove.clicked.connect(self.session.clear_background)
        layout.addWidget(self.btn_bg_remove)
        return page

    def _spin(self, low, high, decimals=2):
        spin = QDoubleSpinBox()
        spin.setRange(low, high)
        spin.setDecimals(decimals)
        spin.setKeyboardTracking(False)
        return spin

    def _field_widget(self, name, kind, extra):
        if kind == "bool":
            widget = QCheckBox()
            widget.toggled.connect(lambda value, n=name: self.session.update_selection({n: value}))
        elif kind == "choice":
            widget = QComboBox()
            widget.addItems(extra)
            widget.currentTextChanged.connect(lambda value, n=name: self.session.update_selection({n: value}))
        elif kind == "float":
            widget = self._spin(*extra)
            if extra[1] <= 1:
                widget.setSingleStep(0.05)
            widget.editingFinished.connect(lambda n=name: self.on_float(n))
        else:
            widget = QLineEdit()
            widget.editingFinished.connect(lambda n=name: self.on_text(n))
        return widget

    # ==========================================
    # 🔁 STATE -> WIDGETS
    # ==========================================
    def refresh(self, *_):
        selection = self.session.selection
        state = self.session.state
        if selection.primary_id == BACKGROUND_ID and state.background is not None:
            self.stack.setCurrentIndex(2)
            bg = state.background
            for spin, value_px in ((self.spin_bg_x, bg.x), (self.spin_bg_y, bg.y)):
                spin.blockSignals(True)
                spin.setSuffix(f" {state.unit}")
                spin.setValue(self._display(pixels_to_cm(value_px)))
                spin.blockSignals(False)
            for spin, value in ((self.spin_bg_scale_x, bg.scale_x), (self.spin_bg_scale_y, bg.scale_y)):
                spin.blockSignals(True)
                spin.setValue(value)
                spin.blockSignals(False)
            return

        zone = find_zone(state, selection.primary_id) if selection.has_zone_selection() else None
        if zone is None:
            self.stack.setCurrentIndex(0)
            return
        self.stack.setCurrentIndex(1)

        count = len(selection.broadcast_ids())
        self.lbl_multi.setText(f"{count} zones selected: style edits apply to all" if count > 1 else "")
        self.lbl_multi.setVisible(count > 1)

        # Show the live position while a drag is running
        live = self.session.geometry_for(zone.id) or {}
        if live:
            zone = zone.model_copy(update=live)

        unit = state.unit
        for spin, value_px in ((self.spin_x, zone.x), (self.spin_y, zone.y),
                               (self.spin_w, zone.width), (self.spin_h, zone.height)):
            spin.blockSignals(True)
            spin.setSuffix(f" {unit}")
            spin.setValue(self._display(pixels_to_cm(value_px)))
            spin.blockSignals(False)

        mat_w, mat_h = mat_pixel_size(state.mat_size)
        edges = edge_distances(zone, mat_w, mat_h)
        self.lbl_edges.setText("  ".join(f"{side}: {format_length(cm, unit)}" for side, cm in edges.items()))

        for name, (kind, widget) in self.widgets.items():
            value = getattr(zone, name)
            widget.blockSignals(True)
            if kind == "bool":
                widget.setChecked(bool(value))
            elif kind == "choice":
                widget.setCurrentText(value)
            elif kind == "float":
                widget.setValue(value)
            elif not widget.hasFocus():
                widget.setText(value or "")
            widget.blockSignals(False)

    def _display(self, value_cm):
        return cm_to_display(value_cm, self.session.state.unit)

    # ==========================================
    # ✏️ WIDGETS -> SESSION
    # ==========================================
    def _primary_zone(self):
        return find_zone(self.session.state, self.session.selection.primary_id)

    def _edited_cm(self, spin, stored_px, minimum):
        unit = self.session.state.unit
        value = edited_value(spin, self._display(pixels_to_cm(stored_px)))
        return None if value is None else parse_dimension(value, unit, minimum=minimum)

    def on_position(self, axis, spin):
        zone = self._primary_zone()
        if zone is None:
            return
        value_cm = self._edited_cm(spin, getattr(zone, axis), float("-inf"))
        if value_cm is not None:
            self.session.update_selection({axis: cm_to_pixels(value_cm)})

    def on_size(self, name, spin):
        zone = self._primary_zone()
        if zone is None:
            return
        value_cm = self._edited_cm(spin, getattr(zone, name), 0.0)
        # update_selection skips model validation, clamp here
        if value_cm is not None:
            self.session.update_selection({name: max(MIN_ZONE_SIZE, cm_to_pixels(value_cm))})

    def on_float(self, name):
        zone = self._primary_zone()
        if zone is None:
            return
        _, widget = self.widgets[name]
        value = edited_value(widget, getattr(zone, name))
        if value is not None:
            self.session.update_selection({name: value})

    def on_background_position(self, axis, spin):
        bg = self.session.state.background
        if bg is None:
            return
        value_cm = self._edited_cm(spin, getattr(bg, axis), float("-inf"))
        if value_cm is not None:
            self.session.update_background({axis: cm_to_pixels(value_cm)})

    def on_background_scale(self, name, spin):
        bg = self.session.state.background
        if bg is None:
            return
        value = edited_value(spin, getattr(bg, name))
        if value is not None:
            self.session.update_background({name: value})

    def on_text(self, name):
        _, widget = self.widgets[name]
        text = widget.text()
        if name == "zone_image":
            self.session.update_selection({name: text.strip() or None})
        else:
            self.session.update_selection({name: text})

    def on_zone_image_file(self):
        path, _ = QFileDialog.getOpenFileName(self, "Zone Image", "", "Images (*.png *.jpg *.jpeg *.webp *.bmp)")
        if not path:
            return
        uri = image_to_data_uri(path)
        if uri is not None:
            self.session.update_selection({"zone_image": uri})
