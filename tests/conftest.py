"""
Pytest config.

Qt runs on the offscreen platform so signal-based objects can be created
without a display. `FakeBackend` stands in for the hosted backend client and
records every call made to it.
"""

from __future__ import annotations

import asyncio
import os
from typing import Any, Callable, Dict, List, Optional, Tuple

import pytest

os.environ.setdefault("QT_QPA_PLATFORM", "offscreen")

from simpananku.auth.errors import AuthRejected  # noqa: E402
from simpananku.auth.oauth_flow import AuthBrowserSession, BrowserResult  # noqa: E402
from simpananku.models.session import Session  # noqa: E402


@pytest.fixture(scope="session")
def qapp():
    from PyQt6.QtWidgets import QApplication

    app = QApplication.instance() or QApplication([])
    yield app


class FakeBackend:
    def __init__(self, current: Optional[Session] = None) -> None:
        self.current = current
        self.calls: List[Tuple[str, Tuple[Any, ...]]] = []
        self.listeners: Dict[int, Callable] = {}
        self.reject_with: Optional[str] = None
        self.read_error: Optional[Exception] = None
        self._next_id = 0

    def _calls(self, name: str) -> List[Tuple[Any, ...]]:
        return [args for called, args in self.calls if called == name]

    @property
    def adopt_calls(self) -> List[Tuple[Any, ...]]:
        return self._calls("adopt_token_pair")

    @property
    def exchange_calls(self) -> List[Tuple[Any, ...]]:
        return self._calls("exchange_code_for_session")

    async def get_current_session(self) -> Optional[Session]:
        self.calls.append(("get_current_session", ()))
        if self.read_error is not None:
            raise self.read_error
        return self.current

    def on_session_change(self, callback: Callable) -> Callable[[], None]:
        listener_id = self._next_id
        self._next_id += 1
        self.listeners[listener_id] = callback
        return lambda: self.listeners.pop(listener_id, None)

    def emit(self, event: str, session: Optional[Session]) -> None:
        self.current = session
        for listener in list(self.listeners.values()):
            listener(event, session)

    async def adopt_token_pair(self, access_token: str, refresh_token: str) -> Session:
        self.calls.append(("adopt_token_pair", (access_token, refresh_token)))
        if self.reject_with:
            raise AuthRejected(self.reject_with, 401)
        if self.current is not None and self.current.same_tokens(access_token, refresh_token):
            return self.current
        session = Session(access_token=access_token, refresh_token=refresh_token)
        self.emit("SIGNED_IN", session)
        return session

    async def exchange_code_for_session(self, code: str) -> Session:
        self.calls.append(("exchange_code_for_session", (code,)))
        if self.reject_with:
            raise AuthRejected(self.reject_with, 400)
        session = Session(access_token=f"at-{code}", refresh_token=f"rt-{code}")
        self.emit("SIGNED_IN", session)
        return session

    async def begin_oauth(self, provider: str, redirect_url: str) -> str:
        self.calls.append(("begin_oauth", (provider, redirect_url)))
        return f"https://example.supabase.co/auth/v1/authorize?provider={provider}"

    async def list_entries(self) -> list:
        self.calls.append(("list_entries", ()))
        return []

    async def sign_out(self) -> None:
        self.calls.append(("sign_out", ()))
        self.emit("SIGNED_OUT", None)


class ScriptedBrowser(AuthBrowserSession):
    """Resolves the wait with a fixed result as soon as the URL is opened"""

    def __init__(self, result: BrowserResult) -> None:
        self.opened: list = []
        super().__init__(open_url=self._record)
        self.result = result

    def _record(self, url: str) -> bool:
        self.opened.append(url)
        asyncio.get_running_loop().call_soon(self._resolve, self.result)
        return True


@pytest.fixture
def backend() -> FakeBackend:
    return FakeBackend()


@pytest.fixture
def make_session() -> Callable[..., Session]:
    def _make(access_token: str = "AAA", refresh_token: str = "BBB") -> Session:
        return Session(access_token=access_token, refresh_token=refresh_token)

    return _make


@pytest.fixture
def scripted_browser() -> Callable[..., ScriptedBrowser]:
    def _make(result_type: str, url: Optional[str] = None) -> ScriptedBrowser:
        return ScriptedBrowser(BrowserResult(result_type, url))

    return _make
