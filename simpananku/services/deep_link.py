"""
Deep link delivery.

The OS starts the app with the link as a command-line argument. When an
instance is already running, the new process forwards the link over a local
socket and exits, so every link after the first reaches the running instance
as a `url_received` signal. `LinkRouter` decides where each link goes.
"""

import asyncio
import logging
from typing import Callable, Iterable, List, Optional, Sequence, Set

from PyQt6.QtCore import QObject, pyqtSignal
from PyQt6.QtNetwork import QLocalServer, QLocalSocket

from simpananku.auth.callback_resolver import CallbackOutcome, resolve_callback
from simpananku.auth.errors import AuthRejected
from simpananku.auth.oauth_flow import AuthBrowserSession


class DeepLinkListener(QObject):
    """Receives deep links for the registered schemes"""

    # Signals
    url_received = pyqtSignal(str)

    FORWARD_TIMEOUT_MS = 1000

    def __init__(self, prefixes: Iterable[str], server_name: str = "simpananku-links"):
        super().__init__()
        self.prefixes: List[str] = list(prefixes)
        self.server_name = server_name
        self.logger = logging.getLogger(__name__)
        self.server: Optional[QLocalServer] = None

    def accepts(self, url: str) -> bool:
        return any(url.startswith(prefix) for prefix in self.prefixes)

    def initial_url(self, argv: Sequence[str]) -> Optional[str]:
        """The link that launched this process, if any"""
        for arg in argv[1:]:
            if self.accepts(arg):
                return arg
        return None

    def forward_to_running_instance(self, url: Optional[str]) -> bool:
        """Send `url` to an already running instance; False if none is listening"""
        socket = QLocalSocket()
        socket.connectToServer(self.server_name)
        if not socket.waitForConnected(self.FORWARD_TIMEOUT_MS):
            return False

        socket.write((url or "").encode("utf-8") + b"\n")
        socket.flush()
        socket.waitForBytesWritten(self.FORWARD_TIMEOUT_MS)
        socket.disconnectFromServer()
        self.logger.info("Forwarded launch link to running instance")
        return True

    def listen(self) -> bool:
        self.server = QLocalServer(self)
        self.server.newConnection.connect(self._on_new_connection)

        if not self.server.listen(self.server_name):
            # A stale socket from a crashed instance blocks listen()
            QLocalServer.removeServer(self.server_name)
            if not self.server.listen(self.server_name):
                self.logger.error(f"Deep link server failed: {self.server.errorString()}")
                return False

        self.logger.info(f"Listening for deep links on '{self.server_name}'")
        return True

    def _on_new_connection(self):
        while self.server and self.server.hasPendingConnections():
            connection = self.server.nextPendingConnection()
            connection.readyRead.connect(lambda conn=connection: self._read_links(conn))
            connection.disconnected.connect(connection.deleteLater)

    def _read_links(self, connection: QLocalSocket):
        while connection.canReadLine():
            line = bytes(connection.readLine()).decode("utf-8", errors="replace").strip()
            self.deliver(line)

    def deliver(self, url: str):
        if not url:
            return
        if not self.accepts(url):
            self.logger.debug("Ignoring link with unregistered scheme")
            return
        self.url_received.emit(url)

    def close(self):
        if self.server:
            self.server.close()
            self.server = None


class LinkRouter:
    """
    Sends every incoming link to the waiting browser flow or the callback resolver.

    Links that arrive before the backend client is attached (the launch link,
    or one forwarded during start-up) are queued and resolved in order once
    `attach` is called.
    """

    def __init__(self, browser: AuthBrowserSession,
                 on_rejected: Optional[Callable[[str], None]] = None):
        self.browser = browser
        self.on_rejected = on_rejected
        self.client = None
        self.logger = logging.getLogger(__name__)
        self._queued: List[str] = []
        self._tasks: Set[asyncio.Task] = set()

    def attach(self, client):
        self.client = client
        queued, self._queued = self._queued, []
        for url in queued:
            self.handle(url)

    def handle(self, url: str) -> Optional[asyncio.Task]:
        if self.browser.offer(url):
            return None
        if self.client is None:
            self._queued.append(url)
            return None

        task = asyncio.ensure_future(self._resolve(url))
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)
        return task

    async def _resolve(self, url: str) -> Optional[CallbackOutcome]:
        try:
            outcome = await resolve_callback(url, self.client)
        except AuthRejected as e:
            self.logger.error(f"Deep link sign-in rejected: {e.message}")
            if self.on_rejected:
                self.on_rejected(e.message)
            return None
        except Exception as e:
            self.logger.error(f"Error handling deep link: {e}")
            return None

        self.logger.info(f"Deep link handled: {outcome.value}")
        return outcome

    def cancel(self):
        for task in list(self._tasks):
            task.cancel()
