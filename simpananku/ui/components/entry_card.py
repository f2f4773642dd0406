"""
Entry Card component
"""

from datetime import datetime

from PyQt6.QtWidgets import QWidget, QVBoxLayout, QHBoxLayout, QLabel, QPushButton, QApplication
from PyQt6.QtCore import Qt, QTimer, QUrl, pyqtSignal
from PyQt6.QtGui import QDesktopServices

from simpananku.models.entry import CATEGORY_CONFIG, TextCategory, TextEntry


PASSWORD_MASK = "••••••••••••"
MONTHS_ID = ["Jan", "Feb", "Mar", "Apr", "Mei", "Jun", "Jul", "Agu", "Sep", "Okt", "Nov", "Des"]


def display_content(entry: TextEntry, reveal: bool) -> str:
    if entry.category == TextCategory.PASSWORD and not reveal:
        return PASSWORD_MASK
    return entry.content


def link_target(content: str) -> str:
    url = content.strip()
    if not url.startswith("http://") and not url.startswith("https://"):
        url = "https://" + url
    return url


def format_created(timestamp: datetime) -> str:
    """Short Indonesian date, e.g. '5 Des 2025'"""
    local = timestamp.astimezone() if timestamp.tzinfo else timestamp
    return f"{local.day} {MONTHS_ID[local.month - 1]} {local.year}"


class EntryCard(QWidget):
    """Card widget for one saved entry"""

    # Signals
    edit_requested = pyqtSignal(object)  # TextEntry
    delete_requested = pyqtSignal(str)  # entry id
    favorite_toggled = pyqtSignal(str, bool)  # entry id, new value

    def __init__(self, entry: TextEntry, mask_passwords: bool = True):
        super().__init__()
        self.entry = entry
        self.reveal = not mask_passwords
        self.config = CATEGORY_CONFIG[entry.category]

        self._setup_ui()

    def _setup_ui(self):
        """Setup the card UI"""
        layout = QVBoxLayout()
        layout.setContentsMargins(14, 12, 14, 12)
        layout.setSpacing(6)

        # Header with category badge and favorite star
        header_layout = QHBoxLayout()

        badge = QLabel(self.config["label"])
        badge.setStyleSheet(f"""
            QLabel {{
                background-color: {self.config['bg']};
                color: {self.config['color']};
                border-radius: 8px;
                padding: 2px 8px;
                font-size: 11px;
                font-weight: 600;
            }}
        """)

        self.favorite_button = QPushButton("★" if self.entry.is_favorite else "☆")
        self.favorite_button.setFixedSize(28, 28)
        self.favorite_button.setStyleSheet(
            "QPushButton { border: none; font-size: 18px; color: %s; }"
            % ("#f59e0b" if self.entry.is_favorite else "#94a3b8")
        )
        self.favorite_button.clicked.connect(
            lambda: self.favorite_toggled.emit(self.entry.id, not self.entry.is_favorite)
        )

        header_layout.addWidget(badge)
        header_layout.addStretch()
        header_layout.addWidget(self.favorite_button)
        layout.addLayout(header_layout)

        # Title
        title_label = QLabel(self.entry.title)
        title_label.setStyleSheet("QLabel { font-size: 16px; font-weight: 600; color: #1e293b; }")
        layout.addWidget(title_label)

        # Content
        self.content_label = QLabel(display_content(self.entry, self.reveal))
        self.content_label.setWordWrap(True)
        self.content_label.setTextInteractionFlags(Qt.TextInteractionFlag.TextSelectableByMouse)
        self.content_label.setStyleSheet("QLabel { color: #475569; font-size: 14px; }")
        layout.addWidget(self.content_label)

        if self.entry.category == TextCategory.PASSWORD:
            self.reveal_button = QPushButton()
            self.reveal_button.setFlat(True)
            self.reveal_button.clicked.connect(self._toggle_reveal)
            self._update_reveal_text()
            layout.addWidget(self.reveal_button, alignment=Qt.AlignmentFlag.AlignLeft)

        # Actions
        actions_layout = QHBoxLayout()

        self.copy_button = QPushButton("Copy")
        self.copy_button.clicked.connect(self._copy)
        actions_layout.addWidget(self.copy_button)

        if self.entry.category == TextCategory.LINK:
            open_button = QPushButton("Open")
            open_button.clicked.connect(self._open_link)
            actions_layout.addWidget(open_button)

        share_button = QPushButton("Share")
        share_button.clicked.connect(self._share)
        actions_layout.addWidget(share_button)

        actions_layout.addStretch()

        edit_button = QPushButton("Edit")
        edit_button.clicked.connect(lambda: self.edit_requested.emit(self.entry))
        actions_layout.addWidget(edit_button)

        delete_button = QPushButton("Hapus")
        delete_button.setStyleSheet("QPushButton { color: #dc2626; }")
        delete_button.clicked.connect(lambda: self.delete_requested.emit(self.entry.id))
        actions_layout.addWidget(delete_button)

        layout.addLayout(actions_layout)

        # Timestamp
        timestamp_label = QLabel(format_created(self.entry.created_at))
        timestamp_label.setStyleSheet("QLabel { color: #94a3b8; font-size: 11px; }")
        layout.addWidget(timestamp_label)

        self.setLayout(layout)
        self._apply_card_styling()

    def _apply_card_styling(self):
        """Apply card styling"""
        self.setAttribute(Qt.WidgetAttribute.WA_StyledBackground, True)
        self.setStyleSheet(f"""
            EntryCard {{
                background-color: #ffffff;
                border: 1px solid #e2e8f0;
                border-left: 4px solid {self.config['color']};
                border-radius: 12px;
            }}
        """)

    def _toggle_reveal(self):
        self.reveal = not self.reveal
        self.content_label.setText(display_content(self.entry, self.reveal))
        self._update_reveal_text()

    def _update_reveal_text(self):
        self.reveal_button.setText("Sembunyikan" if self.reveal else "Tampilkan")

    def _copy(self):
        QApplication.clipboard().setText(self.entry.content)
        self.copy_button.setText("Copied!")
        QTimer.singleShot(2000, lambda: self.copy_button.setText("Copy"))

    def _share(self):
        QApplication.clipboard().setText(f"{self.entry.title}\n\n{self.entry.content}")

    def _open_link(self):
        QDesktopServices.openUrl(QUrl(link_target(self.entry.content)))
