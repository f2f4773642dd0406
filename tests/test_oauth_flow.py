from __future__ import annotations

import asyncio

import pytest

from simpananku.auth.callback_resolver import CallbackOutcome
from simpananku.auth.errors import UserCancelled
from simpananku.auth.oauth_flow import AuthBrowserSession, BrowserResult, make_redirect_uri, sign_in_with_provider

REDIRECT = "simpananku://auth/callback"


def test_make_redirect_uri() -> None:
    assert make_redirect_uri("simpananku", "auth/callback") == REDIRECT
    assert make_redirect_uri("simpananku", "/auth/callback") == REDIRECT


@pytest.mark.asyncio
async def test_cancel_makes_no_token_calls(backend, scripted_browser) -> None:
    browser = scripted_browser("cancel")

    with pytest.raises(UserCancelled) as excinfo:
        await sign_in_with_provider(backend, browser, "google", REDIRECT)

    assert excinfo.value.reason == "cancel"
    assert [name for name, _ in backend.calls] == ["begin_oauth"]


@pytest.mark.asyncio
async def test_dismiss_is_treated_like_cancel(backend, scripted_browser) -> None:
    browser = scripted_browser("dismiss")

    with pytest.raises(UserCancelled):
        await sign_in_with_provider(backend, browser, "google", REDIRECT)

    assert backend.adopt_calls == [] and backend.exchange_calls == []


@pytest.mark.asyncio
async def test_success_result_goes_through_resolver(backend, scripted_browser) -> None:
    browser = scripted_browser("success", f"{REDIRECT}#access_token=AAA&refresh_token=BBB")

    outcome = await sign_in_with_provider(backend, browser, "google", REDIRECT)

    assert outcome is CallbackOutcome.ADOPTED_TOKENS
    assert backend.calls[0] == ("begin_oauth", ("google", REDIRECT))
    assert backend.adopt_calls == [("AAA", "BBB")]
    assert browser.opened == ["https://example.supabase.co/auth/v1/authorize?provider=google"]


@pytest.mark.asyncio
async def test_offer_resolves_only_matching_redirects() -> None:
    browser = AuthBrowserSession(open_url=lambda url: True)
    waiter = asyncio.ensure_future(browser.open("https://auth.example/authorize", REDIRECT))
    await asyncio.sleep(0)

    assert browser.is_waiting
    assert not browser.offer("exp://192.168.1.5:8081")
    assert browser.offer(f"{REDIRECT}?code=CCC")

    result = await waiter
    assert result == BrowserResult("success", f"{REDIRECT}?code=CCC")
    assert not browser.is_waiting
    assert not browser.offer(f"{REDIRECT}?code=CCC")


@pytest.mark.asyncio
async def test_browser_that_fails_to_open_is_dismissed() -> None:
    browser = AuthBrowserSession(open_url=lambda url: False)
    result = await browser.open("https://auth.example/authorize", REDIRECT)
    assert result.type == "dismiss"


@pytest.mark.asyncio
async def test_user_cancel_while_waiting() -> None:
    browser = AuthBrowserSession(open_url=lambda url: True)
    waiter = asyncio.ensure_future(browser.open("https://auth.example/authorize", REDIRECT))
    await asyncio.sleep(0)

    browser.cancel()

    assert (await waiter).type == "cancel"


@pytest.mark.asyncio
async def test_reopening_dismisses_previous_wait() -> None:
    browser = AuthBrowserSession(open_url=lambda url: True)
    first = asyncio.ensure_future(browser.open("https://auth.example/authorize", REDIRECT))
    await asyncio.sleep(0)
    second = asyncio.ensure_future(browser.open("https://auth.example/authorize", REDIRECT))
    await asyncio.sleep(0)

    assert (await first).type == "dismiss"
    assert browser.is_waiting
    assert browser.offer(f"{REDIRECT}?code=CCC")
    assert (await second).type == "success"
