"""
Login screen and navigator behavior on the offscreen Qt platform.
"""

from __future__ import annotations

from datetime import datetime, timezone

import pytest

from simpananku.auth.oauth_flow import AuthBrowserSession
from simpananku.auth.session_bootstrapper import SessionBootstrapper
from simpananku.config.settings import Settings
from simpananku.models.entry import TextCategory, TextEntry
from simpananku.ui.navigator import AppNavigator
from simpananku.ui.windows.login_window import LoginWindow

REDIRECT = "simpananku://auth/callback"


@pytest.fixture
def settings(tmp_path, monkeypatch) -> Settings:
    monkeypatch.delenv("SIMPANANKU_SUPABASE_URL", raising=False)
    monkeypatch.delenv("EXPO_PUBLIC_SUPABASE_URL", raising=False)
    return Settings(tmp_path)


def _login(settings, backend, browser) -> tuple:
    window = LoginWindow(settings, backend, browser)
    errors: list = []
    window.show_error = lambda message, title="Error": errors.append(message)

    loading_while_open: list = []
    open_url = browser._open_url
    browser._open_url = lambda url: loading_while_open.append(window.loading) or open_url(url)
    return window, errors, loading_while_open


@pytest.mark.asyncio
async def test_cancelled_sign_in_clears_loading(qapp, settings, backend, scripted_browser) -> None:
    window, errors, loading_while_open = _login(settings, backend, scripted_browser("cancel"))

    await window.sign_in()

    assert loading_while_open == [True]
    assert window.loading is False
    assert window.login_button.isEnabled()
    assert window.cancel_button.isHidden()
    assert errors == []
    assert backend.adopt_calls == [] and backend.exchange_calls == []


@pytest.mark.asyncio
async def test_rejected_sign_in_shows_backend_message(qapp, settings, backend, scripted_browser) -> None:
    backend.reject_with = "invalid flow state"
    window, errors, _ = _login(settings, backend, scripted_browser("success", f"{REDIRECT}?code=CCC"))

    await window.sign_in()

    assert errors == ["invalid flow state"]
    assert window.loading is False
    assert backend.exchange_calls == [("CCC",)]


@pytest.fixture
def navigator(qapp, settings, backend):
    bootstrapper = SessionBootstrapper(backend)
    nav = AppNavigator(settings, backend, bootstrapper, AuthBrowserSession(open_url=lambda url: True))
    yield nav
    bootstrapper.stop()
    nav.deleteLater()


@pytest.mark.asyncio
async def test_navigator_shows_blank_until_initial_read(navigator) -> None:
    assert navigator.stack.currentWidget() is navigator.blank
    assert not navigator.navigate("login")
    assert not navigator.navigate("home")


@pytest.mark.asyncio
async def test_navigator_follows_sign_in_and_out(navigator, backend, make_session) -> None:
    await navigator.bootstrapper.start()
    assert navigator.stack.currentWidget() is navigator.login
    assert not navigator.navigate("home")

    backend.emit("SIGNED_IN", make_session())
    assert navigator.stack.currentWidget() is navigator.home
    assert not navigator.navigate("login")

    navigator.open_add_edit(None)
    assert navigator.stack.currentWidget() is navigator.add_edit
    assert navigator.add_edit.header_label.text() == "Tambah Note"

    backend.emit("SIGNED_OUT", None)
    assert navigator.stack.currentWidget() is navigator.login


@pytest.mark.asyncio
async def test_signing_out_forgets_previous_entries(navigator, backend, make_session) -> None:
    backend.current = make_session()
    await navigator.bootstrapper.start()
    stamp = datetime(2025, 1, 1, tzinfo=timezone.utc)
    home = navigator.home
    home.entries = [TextEntry(
        id="1", user_id="user-1", title="Wifi", content="hunter2", category=TextCategory.PASSWORD,
        created_at=stamp, updated_at=stamp,
    )]
    home.search_input.setText("wi")
    home._render()
    assert home.list_layout.count() == 2

    backend.emit("SIGNED_OUT", None)

    assert home.entries == []
    assert home.list_layout.count() == 1
    assert home.search_input.text() == ""
    assert home.visible_entries == []
