"""
Browser-based OAuth sign-in
"""

import asyncio
import logging
from dataclasses import dataclass
from typing import Optional

from PyQt6.QtCore import QUrl
from PyQt6.QtGui import QDesktopServices

from simpananku.auth.callback_resolver import CallbackOutcome, resolve_callback
from simpananku.auth.errors import UserCancelled

logger = logging.getLogger(__name__)


def make_redirect_uri(scheme: str, path: str = "") -> str:
    return f"{scheme}://{path.lstrip('/')}"


@dataclass(frozen=True)
class BrowserResult:
    type: str  # success | cancel | dismiss
    url: Optional[str] = None


class AuthBrowserSession:
    """Opens the authorize URL and waits for the redirect, a cancel or a dismiss"""

    def __init__(self, open_url=None):
        self._open_url = open_url or (lambda url: QDesktopServices.openUrl(QUrl(url)))
        self._future: Optional[asyncio.Future] = None
        self._redirect_url: Optional[str] = None

    @property
    def is_waiting(self) -> bool:
        return self._future is not None and not self._future.done()

    async def open(self, auth_url: str, redirect_url: str) -> BrowserResult:
        if self.is_waiting:
            self.dismiss()

        loop = asyncio.get_running_loop()
        future = self._future = loop.create_future()
        self._redirect_url = redirect_url

        if not self._open_url(auth_url):
            logger.error("Could not open the system browser")
            self._resolve(BrowserResult("dismiss"))

        try:
            return await future
        finally:
            if self._future is future:
                self._future = None
                self._redirect_url = None

    def offer(self, url: str) -> bool:
        """Hand a deep link to the waiting session; True if it was the redirect"""
        if not self.is_waiting or not url.startswith(self._redirect_url):
            return False
        self._resolve(BrowserResult("success", url))
        return True

    def cancel(self):
        self._resolve(BrowserResult("cancel"))

    def dismiss(self):
        self._resolve(BrowserResult("dismiss"))

    def _resolve(self, result: BrowserResult):
        if self.is_waiting:
            self._future.set_result(result)


async def sign_in_with_provider(client, browser: AuthBrowserSession,
                                provider: str, redirect_url: str) -> CallbackOutcome:
    """
    Run the full browser sign-in.

    Raises UserCancelled when the browser is closed without a redirect and
    AuthRejected when the backend refuses the result.
    """
    auth_url = await client.begin_oauth(provider, redirect_url)
    logger.info(f"Starting {provider} sign-in, redirect {redirect_url}")

    result = await browser.open(auth_url, redirect_url)
    logger.info(f"Browser result: {result.type}")

    if result.type != "success" or not result.url:
        raise UserCancelled(result.type)

    return await resolve_callback(result.url, client)
