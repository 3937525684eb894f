from PyQt6.QtWidgets import (QDialog, QVBoxLayout, QLabel, QDoubleSpinBox,
                             QPushButton, QHBoxLayout, QFormLayout)
from PyQt6.QtCore import Qt

from ..config import DEFAULT_MAT_WIDTH_CM, DEFAULT_MAT_HEIGHT_CM, MIN_DIMENSION_CM
from ..logic.units import cm_to_display, parse_dimension


class NewProjectDialog(QDialog):
    """Asks for the mat size of a fresh project (in the current display unit)"""

    def __init__(self, unit="cm", parent=None):
        super().__init__(parent)
        self.setWindowTitle("New Project")
        self.setFixedSize(300, 200)
        self.unit = unit

        layout = QVBoxLayout(self)

        # Title
        title = QLabel("New Mat")
        title.setAlignment(Qt.AlignmentFlag.AlignCenter)
        title.setStyleSheet("font-size: 18px; font-weight: bold; margin-bottom: 10px;")
        layout.addWidget(title)

        # Form
        form_layout = QFormLayout()

        self.spin_width = self._spin(DEFAULT_MAT_WIDTH_CM)
        self.spin_height = self._spin(DEFAULT_MAT_HEIGHT_CM)

        form_layout.addRow("Width:", self.spin_width)
        form_layout.addRow("Height:", self.spin_height)
        layout.addLayout(form_layout)

        hint = QLabel("The current design will be replaced (undo brings it back).")
        hint.setObjectName("Hint")
        hint.setWordWrap(True)
        layout.addWidget(hint)

        # Buttons
        btn_layout = QHBoxLayout()
        self.btn_create = QPushButton("Create Mat")
        self.btn_create.clicked.connect(self.accept)
        self.btn_create.setDefault(True)

        self.btn_cancel = QPushButton("Cancel")
        self.btn_cancel.clicked.connect(self.reject)

        btn_layout.addWidget(self.btn_cancel)
        btn_layout.addWidget(self.btn_create)
        layout.addLayout(btn_layout)

    def _spin(self, value_cm):
        spin = QDoubleSpinBox()
        spin.setDecimals(2)
        spin.setRange(cm_to_display(MIN_DIMENSION_CM, self.unit), 10000)
        spin.setValue(cm_to_display(value_cm, self.unit))
        spin.setSuffix(f" {self.unit}")
        return spin

    def get_dimensions(self):
        """Mat size in cm"""
        return (parse_dimension(self.spin_width.value(), self.unit),
                parse_dimension(self.spin_height.value(), self.unit))
