"""
Login screen - Google sign-in through the system browser
"""

from typing import Optional

from PyQt6.QtWidgets import QVBoxLayout, QPushButton, QLabel
from PyQt6.QtCore import Qt

from simpananku.auth.errors import AuthRejected, UserCancelled
from simpananku.auth.oauth_flow import AuthBrowserSession, sign_in_with_provider
from simpananku.config.settings import Settings
from simpananku.ui.windows.base_window import BaseScreen


class LoginWindow(BaseScreen):
    """Sign-in surface"""

    DEFAULT_ERROR = "Gagal login dengan Google"

    def __init__(self, settings: Settings, backend_client, browser: AuthBrowserSession):
        super().__init__(title="SimpananKu - Masuk")
        self.settings = settings
        self.backend_client = backend_client
        self.browser = browser

        self.loading = False

        # UI Components
        self.login_button: Optional[QPushButton] = None
        self.cancel_button: Optional[QPushButton] = None
        self.status_label: Optional[QLabel] = None

        self._setup_ui()

    def _setup_ui(self):
        """Setup the user interface"""
        layout = QVBoxLayout()
        layout.setContentsMargins(32, 32, 32, 32)
        layout.setSpacing(12)
        layout.addStretch()

        logo_label = QLabel("SimpananKu :3")
        logo_label.setAlignment(Qt.AlignmentFlag.AlignCenter)
        logo_label.setStyleSheet("QLabel { font-size: 32px; font-weight: bold; }")
        layout.addWidget(logo_label)

        tagline = QLabel("Simpan catatan Broo :3")
        tagline.setAlignment(Qt.AlignmentFlag.AlignCenter)
        tagline.setStyleSheet("QLabel { color: #64748b; }")
        layout.addWidget(tagline)

        layout.addSpacing(36)

        self.login_button = QPushButton("G   Masuk dengan Google")
        self.login_button.clicked.connect(self._on_login_clicked)
        self.login_button.setStyleSheet("""
            QPushButton {
                background-color: #ffffff;
                border: 2px solid #e2e8f0;
                border-radius: 14px;
                padding: 16px 24px;
                font-size: 16px;
                font-weight: 600;
            }
            QPushButton:disabled {
                color: #94a3b8;
            }
        """)
        layout.addWidget(self.login_button)

        self.status_label = QLabel("")
        self.status_label.setAlignment(Qt.AlignmentFlag.AlignCenter)
        self.status_label.setStyleSheet("QLabel { color: #4285F4; }")
        layout.addWidget(self.status_label)

        self.cancel_button = QPushButton("Batal")
        self.cancel_button.setFlat(True)
        self.cancel_button.clicked.connect(self.browser.cancel)
        self.cancel_button.hide()
        layout.addWidget(self.cancel_button, alignment=Qt.AlignmentFlag.AlignCenter)

        layout.addStretch()

        footer = QLabel("Dengan masuk, kamu setuju dengan\nKetentuan Layanan kami")
        footer.setAlignment(Qt.AlignmentFlag.AlignCenter)
        footer.setStyleSheet("QLabel { color: #94a3b8; font-size: 12px; }")
        layout.addWidget(footer)

        self.setLayout(layout)

    def set_loading(self, loading: bool):
        self.loading = loading
        self.login_button.setEnabled(not loading)
        self.status_label.setText("Menunggu browser..." if loading else "")
        self.cancel_button.setVisible(loading)

    def _on_login_clicked(self):
        if not self.loading:
            self.run_async(self.sign_in())

    async def sign_in(self):
        """Run the browser flow; errors end up in an alert, cancellation just stops the spinner"""
        self.set_loading(True)
        try:
            outcome = await sign_in_with_provider(
                self.backend_client,
                self.browser,
                self.settings.auth.provider,
                self.settings.redirect_url,
            )
            self.logger.info(f"Sign-in finished: {outcome.value}")
        except UserCancelled as e:
            self.logger.info(f"User cancelled login ({e.reason})")
        except AuthRejected as e:
            self.logger.error(f"Login error: {e.message}")
            self.show_error(e.message or self.DEFAULT_ERROR)
        except Exception as e:
            self.logger.error(f"Login error: {e}")
            self.show_error(str(e) or self.DEFAULT_ERROR)
        finally:
            self.set_loading(False)
