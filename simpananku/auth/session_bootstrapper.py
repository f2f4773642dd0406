"""
Session bootstrap and sign-in routing.
"""

import logging
from enum import Enum
from typing import Callable, Optional, FrozenSet

from PyQt6.QtCore import QObject, pyqtSignal


class AuthState(Enum):
    UNKNOWN = "unknown"
    AUTHENTICATED = "authenticated"
    UNAUTHENTICATED = "unauthenticated"


class Surface(Enum):
    BLANK = "blank"
    SIGN_IN = "sign_in"
    MAIN = "main"


_REACHABLE = {
    Surface.BLANK: frozenset(),
    Surface.SIGN_IN: frozenset({"login"}),
    Surface.MAIN: frozenset({"home", "add_edit"}),
}


def route_for(state: AuthState) -> Surface:
    if state is AuthState.AUTHENTICATED:
        return Surface.MAIN
    if state is AuthState.UNAUTHENTICATED:
        return Surface.SIGN_IN
    return Surface.BLANK


def reachable_screens(surface: Surface) -> FrozenSet[str]:
    return _REACHABLE[surface]


class SessionBootstrapper(QObject):
    """
    Holds the authoritative sign-in state for the lifetime of the process.

    Starts UNKNOWN, resolves from one read of the current session, then
    follows session-change events from the backend client. The UI only asks
    the client to sign in or out; state here changes through events alone.
    """

    # Signals
    state_changed = pyqtSignal(object)  # AuthState

    def __init__(self, backend_client):
        super().__init__()
        self.backend_client = backend_client
        self.logger = logging.getLogger(__name__)

        self.state = AuthState.UNKNOWN
        self.session = None
        self._unsubscribe: Optional[Callable[[], None]] = None
        self._initial_read_done = False
        self._pending_event = None

    @property
    def surface(self) -> Surface:
        return route_for(self.state)

    async def start(self):
        """Resolve the initial state, then follow session changes"""
        if self._unsubscribe is not None:
            return

        # Subscribe first so events that land during the read are not lost;
        # they are applied once the read finishes.
        self._unsubscribe = self.backend_client.on_session_change(self._on_session_change)

        try:
            session = await self.backend_client.get_current_session()
        except Exception as e:
            self.logger.error(f"Initial session read failed: {e}")
            session = None

        self._initial_read_done = True
        if self._unsubscribe is None:
            # stop() ran while the read was outstanding
            self._pending_event = None
            return

        if self._pending_event is not None:
            event, session = self._pending_event
            self._pending_event = None
            self.logger.debug(f"Applying {event} received during initial read")

        self._apply(session)
        self.logger.info(f"Initial auth state: {self.state.value}")

    def stop(self):
        """Release the session-change subscription"""
        if self._unsubscribe is not None:
            self._unsubscribe()
            self._unsubscribe = None
            self.logger.debug("Session subscription released")

    def _on_session_change(self, event, session):
        if not self._initial_read_done:
            self._pending_event = (event, session)
            return
        self._apply(session)

    def _apply(self, session):
        self.session = session
        new_state = AuthState.AUTHENTICATED if session is not None else AuthState.UNAUTHENTICATED
        if new_state is not self.state:
            self.state = new_state
            self.state_changed.emit(new_state)
