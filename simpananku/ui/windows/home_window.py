"""
Home screen - entry list with search, category filter and actions
"""

from typing import Dict, List, Optional

from PyQt6.QtWidgets import (QVBoxLayout, QHBoxLayout, QLineEdit, QPushButton, QLabel,
                             QScrollArea, QWidget, QFrame)
from PyQt6.QtCore import Qt, pyqtSignal

from simpananku.config.settings import Settings
from simpananku.models.entry import ALL_CATEGORIES, FILTER_OPTIONS, TextEntry, filter_entries
from simpananku.services.backend_client import BackendError
from simpananku.ui.components.category_chip import CategoryChip
from simpananku.ui.components.entry_card import EntryCard
from simpananku.ui.windows.base_window import BaseScreen


def empty_state_text(search_query: str) -> str:
    if search_query:
        return "Tidak ditemukan\nCoba kata kunci lain"
    return "Belum ada note\nMulai simpan catatan Anda"


class HomeWindow(BaseScreen):
    """Main surface listing the user's entries"""

    # Signals
    add_requested = pyqtSignal()
    edit_requested = pyqtSignal(object)  # TextEntry

    def __init__(self, settings: Settings, backend_client):
        super().__init__(title="SimpananKu")
        self.settings = settings
        self.backend_client = backend_client

        # State
        self.entries: List[TextEntry] = []
        self.search_query = ""
        self.selected_category = ALL_CATEGORIES
        self.loading = False

        # UI Components
        self.search_input: Optional[QLineEdit] = None
        self.chips: Dict[str, CategoryChip] = {}
        self.list_layout: Optional[QVBoxLayout] = None
        self.status_label: Optional[QLabel] = None

        self._setup_ui()

    def _setup_ui(self):
        """Setup the user interface"""
        main_layout = QVBoxLayout()
        main_layout.setContentsMargins(16, 16, 16, 16)
        main_layout.setSpacing(10)

        # Header
        header_layout = QHBoxLayout()
        title_label = QLabel("SimpananKu")
        title_label.setStyleSheet("QLabel { font-size: 22px; font-weight: bold; }")

        refresh_button = QPushButton("⟳")
        refresh_button.setToolTip("Muat ulang")
        refresh_button.clicked.connect(self.refresh)

        logout_button = QPushButton("Keluar")
        logout_button.clicked.connect(self._on_logout_clicked)

        header_layout.addWidget(title_label)
        header_layout.addStretch()
        header_layout.addWidget(refresh_button)
        header_layout.addWidget(logout_button)
        main_layout.addLayout(header_layout)

        # Search
        self.search_input = QLineEdit()
        self.search_input.setPlaceholderText("🔍  Cari note...")
        self.search_input.setClearButtonEnabled(True)
        self.search_input.textChanged.connect(self._on_search_changed)
        main_layout.addWidget(self.search_input)

        # Category filter row
        chips_container = QWidget()
        chips_layout = QHBoxLayout(chips_container)
        chips_layout.setContentsMargins(0, 0, 0, 0)
        chips_layout.setSpacing(4)
        for value in FILTER_OPTIONS:
            chip = CategoryChip(value, active=value == self.selected_category)
            chip.clicked.connect(self._on_category_selected)
            self.chips[value] = chip
            chips_layout.addWidget(chip)
        chips_layout.addStretch()

        chips_scroll = QScrollArea()
        chips_scroll.setWidget(chips_container)
        chips_scroll.setWidgetResizable(True)
        chips_scroll.setFixedHeight(48)
        chips_scroll.setFrameShape(QFrame.Shape.NoFrame)
        chips_scroll.setVerticalScrollBarPolicy(Qt.ScrollBarPolicy.ScrollBarAlwaysOff)
        main_layout.addWidget(chips_scroll)

        # Status / empty state
        self.status_label = QLabel("")
        self.status_label.setAlignment(Qt.AlignmentFlag.AlignCenter)
        self.status_label.setStyleSheet("QLabel { color: #64748b; font-size: 15px; }")
        main_layout.addWidget(self.status_label)

        # Entry list
        list_container = QWidget()
        self.list_layout = QVBoxLayout(list_container)
        self.list_layout.setContentsMargins(0, 0, 0, 0)
        self.list_layout.setSpacing(10)
        self.list_layout.addStretch()

        list_scroll = QScrollArea()
        list_scroll.setWidget(list_container)
        list_scroll.setWidgetResizable(True)
        list_scroll.setFrameShape(QFrame.Shape.NoFrame)
        main_layout.addWidget(list_scroll, stretch=1)

        # Add button
        add_button = QPushButton("+  Tambah Note")
        add_button.clicked.connect(self.add_requested)
        add_button.setStyleSheet("""
            QPushButton {
                background-color: #3b82f6;
                color: white;
                border: none;
                border-radius: 14px;
                padding: 14px;
                font-size: 15px;
                font-weight: bold;
            }
        """)
        main_layout.addWidget(add_button)

        self.setLayout(main_layout)

    @property
    def visible_entries(self) -> List[TextEntry]:
        return filter_entries(self.entries, self.search_query, self.selected_category)

    def showEvent(self, event):
        """Reload whenever the screen comes back into view"""
        super().showEvent(event)
        self.refresh()

    def refresh(self):
        if not self.loading:
            self.run_async(self.load_entries())

    async def load_entries(self):
        self.loading = True
        if not self.entries:
            self.status_label.setText("Memuat...")
            self.status_label.setVisible(True)
        try:
            self.entries = await self.backend_client.list_entries()
        except BackendError as e:
            self.logger.error(f"Error fetching entries: {e.message}")
        finally:
            self.loading = False
            self._render()

    def _on_search_changed(self, text: str):
        self.search_query = text
        self._render()

    def _on_category_selected(self, value: str):
        self.selected_category = value
        for chip_value, chip in self.chips.items():
            chip.set_active(chip_value == value)
        self._render()

    def _render(self):
        # Remove old cards, keep the trailing stretch
        while self.list_layout.count() > 1:
            item = self.list_layout.takeAt(0)
            if item.widget():
                item.widget().deleteLater()

        visible = self.visible_entries
        self.status_label.setText("" if visible else empty_state_text(self.search_query))
        self.status_label.setVisible(not visible)

        for index, entry in enumerate(visible):
            card = EntryCard(entry, mask_passwords=self.settings.ui.mask_passwords)
            card.edit_requested.connect(self.edit_requested)
            card.delete_requested.connect(self._on_delete_requested)
            card.favorite_toggled.connect(self._on_favorite_toggled)
            self.list_layout.insertWidget(index, card)

    def _on_delete_requested(self, entry_id: str):
        if self.settings.ui.confirm_delete and not self.confirm(
            "Hapus Note?", "Data yang dihapus tidak dapat dikembalikan.", "Ya, Hapus"
        ):
            return
        self.run_async(self._delete(entry_id))

    async def _delete(self, entry_id: str):
        try:
            await self.backend_client.delete_entry(entry_id)
        except BackendError as e:
            self.logger.error(f"Error deleting entry: {e.message}")
            self.show_error("Gagal menghapus note")
            return
        await self.load_entries()

    def _on_favorite_toggled(self, entry_id: str, is_favorite: bool):
        self.run_async(self._set_favorite(entry_id, is_favorite))

    async def _set_favorite(self, entry_id: str, is_favorite: bool):
        try:
            await self.backend_client.set_favorite(entry_id, is_favorite)
        except BackendError as e:
            self.logger.error(f"Error toggling favorite: {e.message}")
            return
        await self.load_entries()

    def _on_logout_clicked(self):
        if self.confirm("Keluar?", "Kamu yakin ingin keluar dari akun ini?", "Keluar"):
            self.run_async(self._logout())

    async def _logout(self):
        # Routing and clearing follow the SIGNED_OUT event
        await self.backend_client.sign_out()

    def clear(self):
        """Forget the signed-out account's entries and filters"""
        self.entries = []
        self.loading = False
        self.search_query = ""
        self.search_input.blockSignals(True)
        self.search_input.clear()
        self.search_input.blockSignals(False)
        self._on_category_selected(ALL_CATEGORIES)
