#!/usr/bin/env python3
"""
SimpananKu - desktop client main application
"""

import sys
import asyncio
import logging
from typing import Optional

import qasync
from PyQt6.QtWidgets import QApplication, QMessageBox

from simpananku.auth.oauth_flow import AuthBrowserSession
from simpananku.auth.session_bootstrapper import SessionBootstrapper
from simpananku.config.settings import Settings
from simpananku.services.backend_client import BackendClient
from simpananku.services.deep_link import DeepLinkListener, LinkRouter
from simpananku.services.secure_store import SecureStore
from simpananku.ui.navigator import AppNavigator
from simpananku.utils.logging_config import setup_logging


class SimpananKuApp:
    """Main application class"""

    def __init__(self, argv=None):
        self.argv = list(sys.argv if argv is None else argv)
        self.app = QApplication(self.argv)
        self.app.setApplicationName("SimpananKu")

        # Initialize components
        self.settings = Settings()
        setup_logging(self.settings.log_dir)
        self.logger = logging.getLogger(__name__)

        self.backend_client: Optional[BackendClient] = None
        self.bootstrapper: Optional[SessionBootstrapper] = None
        self.deep_links: Optional[DeepLinkListener] = None
        self.browser = AuthBrowserSession()
        self.links = LinkRouter(self.browser, on_rejected=self._on_link_rejected)
        self.navigator: Optional[AppNavigator] = None

        self.logger.info("SimpananKu starting up...")

    def _start_deep_links(self) -> bool:
        """Listen for links; False when the launch link went to a running instance instead"""
        self.deep_links = DeepLinkListener(self.settings.auth.link_prefixes)
        launch_url = self.deep_links.initial_url(self.argv)

        if self.deep_links.forward_to_running_instance(launch_url):
            return False

        self.deep_links.listen()
        self.deep_links.url_received.connect(self.links.handle)
        if launch_url:
            # Held by the router until the backend client is attached
            self.links.handle(launch_url)
        return True

    async def initialize(self):
        """Initialize the application asynchronously"""
        if not self.settings.backend.anon_key:
            self.logger.warning("No anon key configured; set SIMPANANKU_SUPABASE_ANON_KEY")

        try:
            store = SecureStore(self.settings.store_dir)
            self.backend_client = BackendClient(self.settings.backend, self.settings.auth, store)

            self.bootstrapper = SessionBootstrapper(self.backend_client)
            self.navigator = AppNavigator(self.settings, self.backend_client, self.bootstrapper, self.browser)
            self.navigator.show()

            await self.backend_client.connect()
            await self.bootstrapper.start()
        except Exception as e:
            self.logger.error(f"Failed to initialize application: {e}")
            return False

        self.links.attach(self.backend_client)

        self.logger.info("Application initialized successfully")
        return True

    def _on_link_rejected(self, message: str):
        QMessageBox.warning(self.navigator, "Error", message or "Gagal login dengan Google")

    async def cleanup_async(self):
        """Cleanup async resources properly"""
        self.logger.info("Starting async cleanup...")

        self.links.cancel()

        if self.bootstrapper:
            self.bootstrapper.stop()

        if self.deep_links:
            self.deep_links.close()

        if self.backend_client:
            await self.backend_client.disconnect()

        self.logger.info("Async cleanup complete")

    def run(self) -> int:
        """Run the application with the Qt and asyncio loops integrated"""
        if not self._start_deep_links():
            self.logger.info("Another instance is running; link forwarded")
            return 0

        loop = qasync.QEventLoop(self.app)
        asyncio.set_event_loop(loop)

        app_close_event = asyncio.Event()
        self.app.aboutToQuit.connect(app_close_event.set)

        async def main_task():
            if not await self.initialize():
                self.app.quit()
                return
            await app_close_event.wait()
            await self.cleanup_async()

        try:
            with loop:
                loop.run_until_complete(main_task())
            return 0
        except KeyboardInterrupt:
            self.logger.info("Application interrupted by user")
            return 0


def main():
    """Main entry point"""
    app = SimpananKuApp()
    return app.run()


if __name__ == "__main__":
    sys.exit(main())
