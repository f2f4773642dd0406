"""
Category chip for the filter row and the category picker
"""

from PyQt6.QtWidgets import QWidget, QLabel, QHBoxLayout
from PyQt6.QtCore import Qt, pyqtSignal

from simpananku.models.entry import ALL_CATEGORIES, CATEGORY_CONFIG, FAVORITES, TextCategory


SPECIAL_LABELS = {
    ALL_CATEGORIES: ("✨", "Semua"),
    FAVORITES: ("★", "Favorit"),
}


def chip_text(value: str) -> str:
    if value in SPECIAL_LABELS:
        icon, label = SPECIAL_LABELS[value]
    else:
        config = CATEGORY_CONFIG[TextCategory(value)]
        icon, label = config["icon"], config["label"]
    return f"{icon} {label}"


class CategoryChip(QWidget):
    """Clickable category chip"""

    # Signals
    clicked = pyqtSignal(str)

    def __init__(self, value: str, active: bool = False):
        super().__init__()
        self.value = value
        self.active = active

        if value in CATEGORY_CONFIG:
            config = CATEGORY_CONFIG[TextCategory(value)]
            self.color, self.bg = config["color"], config["bg"]
        else:
            self.color, self.bg = "#3b82f6", "#DBEAFE"

        self._setup_ui()

    def _setup_ui(self):
        """Setup the chip UI"""
        layout = QHBoxLayout()
        layout.setContentsMargins(2, 2, 2, 2)
        layout.setSpacing(0)

        self.label = QLabel(chip_text(self.value))
        layout.addWidget(self.label)
        self.setLayout(layout)

        self._apply_style()

        # Make clickable
        self.setCursor(Qt.CursorShape.PointingHandCursor)

    def set_active(self, active: bool):
        self.active = active
        self._apply_style()

    def _apply_style(self):
        if self.active:
            background, border, text = self.bg, self.color, self.color
        else:
            background, border, text = "#ffffff", "#e2e8f0", "#64748b"

        self.label.setStyleSheet(f"""
            QLabel {{
                background-color: {background};
                border: 1px solid {border};
                border-radius: 12px;
                padding: 6px 12px;
                color: {text};
                font-size: 12px;
                font-weight: 600;
            }}
        """)

    def mousePressEvent(self, event):
        """Handle mouse click"""
        if event.button() == Qt.MouseButton.LeftButton:
            self.clicked.emit(self.value)
        super().mousePressEvent(event)
