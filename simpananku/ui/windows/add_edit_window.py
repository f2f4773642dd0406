"""
Add/Edit screen for a single entry
"""

from typing import Dict, Optional

from PyQt6.QtWidgets import (QVBoxLayout, QHBoxLayout, QLineEdit, QTextEdit, QPushButton,
                             QLabel, QCheckBox, QWidget, QGridLayout)
from PyQt6.QtCore import pyqtSignal

from simpananku.config.settings import Settings
from simpananku.models.entry import CreateTextEntry, TextCategory, TextEntry
from simpananku.services.backend_client import BackendError
from simpananku.ui.components.category_chip import CategoryChip
from simpananku.ui.windows.base_window import BaseScreen


VALIDATION_MESSAGE = "Masukkan title dan content"


def build_entry(title: str, content: str, category: TextCategory,
                is_favorite: bool) -> Optional[CreateTextEntry]:
    """Trimmed form values, or None when title or content is blank"""
    title, content = title.strip(), content.strip()
    if not title or not content:
        return None
    return CreateTextEntry(title=title, content=content, category=category, is_favorite=is_favorite)


class AddEditWindow(BaseScreen):
    """Form for creating a new entry or editing an existing one"""

    # Signals
    finished = pyqtSignal()

    def __init__(self, settings: Settings, backend_client):
        super().__init__(title="SimpananKu - Note")
        self.settings = settings
        self.backend_client = backend_client

        # State
        self.edit_entry: Optional[TextEntry] = None
        self.category = TextCategory.TEXT
        self.saving = False

        # UI Components
        self.header_label: Optional[QLabel] = None
        self.title_input: Optional[QLineEdit] = None
        self.content_input: Optional[QTextEdit] = None
        self.favorite_checkbox: Optional[QCheckBox] = None
        self.save_button: Optional[QPushButton] = None
        self.chips: Dict[str, CategoryChip] = {}

        self._setup_ui()

    def _setup_ui(self):
        """Setup the user interface"""
        main_layout = QVBoxLayout()
        main_layout.setContentsMargins(16, 16, 16, 16)
        main_layout.setSpacing(10)

        # Header with back button
        header_layout = QHBoxLayout()
        back_button = QPushButton("←")
        back_button.setFixedSize(44, 36)
        back_button.clicked.connect(self.finished)

        self.header_label = QLabel("Tambah Note")
        self.header_label.setStyleSheet("QLabel { font-size: 18px; font-weight: bold; }")

        header_layout.addWidget(back_button)
        header_layout.addStretch()
        header_layout.addWidget(self.header_label)
        header_layout.addStretch()
        main_layout.addLayout(header_layout)

        main_layout.addWidget(QLabel("Judul"))
        self.title_input = QLineEdit()
        self.title_input.setPlaceholderText("Masukkan judul...")
        main_layout.addWidget(self.title_input)

        main_layout.addWidget(QLabel("Kategori"))
        chips_container = QWidget()
        chips_layout = QGridLayout(chips_container)
        chips_layout.setContentsMargins(0, 0, 0, 0)
        for index, category in enumerate(TextCategory):
            chip = CategoryChip(category.value, active=category == self.category)
            chip.clicked.connect(self._on_category_selected)
            self.chips[category.value] = chip
            chips_layout.addWidget(chip, index // 4, index % 4)
        main_layout.addWidget(chips_container)

        main_layout.addWidget(QLabel("Konten"))
        self.content_input = QTextEdit()
        self.content_input.setPlaceholderText("Masukkan konten...")
        main_layout.addWidget(self.content_input, stretch=1)

        self.favorite_checkbox = QCheckBox("⭐ Tandai sebagai favorit")
        main_layout.addWidget(self.favorite_checkbox)

        self.save_button = QPushButton("Simpan")
        self.save_button.clicked.connect(self._on_save_clicked)
        self.save_button.setStyleSheet("""
            QPushButton {
                background-color: #3b82f6;
                color: white;
                border: none;
                border-radius: 14px;
                padding: 14px;
                font-size: 15px;
                font-weight: bold;
            }
            QPushButton:disabled {
                background-color: #93c5fd;
            }
        """)
        main_layout.addWidget(self.save_button)

        self.setLayout(main_layout)

    def load(self, entry: Optional[TextEntry] = None):
        """Reset the form for a new entry, or fill it from `entry`"""
        self.edit_entry = entry
        self.header_label.setText("Edit Note" if entry else "Tambah Note")
        self.title_input.setText(entry.title if entry else "")
        self.content_input.setPlainText(entry.content if entry else "")
        self.favorite_checkbox.setChecked(entry.is_favorite if entry else False)
        self._on_category_selected((entry.category if entry else TextCategory.TEXT).value)
        self.title_input.setFocus()

    def _on_category_selected(self, value: str):
        self.category = TextCategory(value)
        for chip_value, chip in self.chips.items():
            chip.set_active(chip_value == value)

    def _on_save_clicked(self):
        if not self.saving:
            self.run_async(self.save())

    async def save(self):
        payload = build_entry(
            self.title_input.text(),
            self.content_input.toPlainText(),
            self.category,
            self.favorite_checkbox.isChecked(),
        )
        if payload is None:
            self.show_error(VALIDATION_MESSAGE)
            return

        self.saving = True
        self.save_button.setEnabled(False)
        try:
            if self.edit_entry:
                await self.backend_client.update_entry(self.edit_entry.id, payload)
            else:
                await self.backend_client.create_entry(payload)
        except BackendError as e:
            self.logger.error(f"Error saving entry: {e.message}")
            self.show_error(e.message)
            return
        finally:
            self.saving = False
            self.save_button.setEnabled(True)

        self.finished.emit()
