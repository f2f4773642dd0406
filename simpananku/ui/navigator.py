"""
App navigator - picks the visible screen from the sign-in state
"""

import logging
from typing import Optional

from PyQt6.QtWidgets import QMainWindow, QStackedWidget, QWidget

from simpananku.auth.oauth_flow import AuthBrowserSession
from simpananku.auth.session_bootstrapper import AuthState, SessionBootstrapper, Surface, reachable_screens, route_for
from simpananku.config.settings import Settings
from simpananku.models.entry import TextEntry
from simpananku.ui.windows.add_edit_window import AddEditWindow
from simpananku.ui.windows.home_window import HomeWindow
from simpananku.ui.windows.login_window import LoginWindow


class AppNavigator(QMainWindow):
    """
    Stack of screens driven by the bootstrapper.

    Signed in, the home screen and the add/edit form are reachable; signed
    out, only the login screen is. While the initial session read is pending
    a blank page is shown.
    """

    def __init__(self, settings: Settings, backend_client, bootstrapper: SessionBootstrapper,
                 browser: AuthBrowserSession):
        super().__init__()
        self.settings = settings
        self.bootstrapper = bootstrapper
        self.logger = logging.getLogger(__name__)

        self.setWindowTitle("SimpananKu :3")
        self.resize(settings.windows.main_width, settings.windows.main_height)

        self.stack = QStackedWidget()
        self.blank = QWidget()
        self.login = LoginWindow(settings, backend_client, browser)
        self.home = HomeWindow(settings, backend_client)
        self.add_edit = AddEditWindow(settings, backend_client)

        self.screens = {
            "login": self.login,
            "home": self.home,
            "add_edit": self.add_edit,
        }
        self.stack.addWidget(self.blank)
        for screen in self.screens.values():
            self.stack.addWidget(screen)
        self.setCentralWidget(self.stack)

        self.home.add_requested.connect(lambda: self.open_add_edit(None))
        self.home.edit_requested.connect(self.open_add_edit)
        self.add_edit.finished.connect(lambda: self.navigate("home"))

        bootstrapper.state_changed.connect(self._on_state_changed)
        self._on_state_changed(bootstrapper.state)

    @property
    def surface(self) -> Surface:
        return route_for(self.bootstrapper.state)

    def _on_state_changed(self, state: AuthState):
        surface = route_for(state)
        self.logger.info(f"Routing to {surface.value}")
        if surface is Surface.MAIN:
            self.stack.setCurrentWidget(self.home)
        elif surface is Surface.SIGN_IN:
            self.add_edit.cancel_tasks()
            self.home.cancel_tasks()
            self.home.clear()
            self.add_edit.load(None)
            self.stack.setCurrentWidget(self.login)
        else:
            self.stack.setCurrentWidget(self.blank)

    def navigate(self, name: str) -> bool:
        """Show a screen if the current surface allows it"""
        if name not in reachable_screens(self.surface):
            self.logger.warning(f"Screen '{name}' is not reachable from {self.surface.value}")
            return False
        self.stack.setCurrentWidget(self.screens[name])
        return True

    def open_add_edit(self, entry: Optional[TextEntry]):
        if self.navigate("add_edit"):
            self.add_edit.load(entry)
