from __future__ import annotations

import asyncio

import pytest

from simpananku.auth.callback_resolver import CallbackOutcome, extract_callback_params, resolve_callback
from simpananku.auth.errors import AuthRejected, ParseFailure


def test_fragment_tokens_are_extracted() -> None:
    params = extract_callback_params("simpananku://auth/callback#access_token=AAA&refresh_token=BBB")
    assert params.access_token == "AAA"
    assert params.refresh_token == "BBB"
    assert params.code is None
    assert params.has_token_pair


def test_fragment_wins_over_query_tokens() -> None:
    params = extract_callback_params(
        "simpananku://auth/callback?access_token=QA&refresh_token=QR#access_token=FA&refresh_token=FR"
    )
    assert (params.access_token, params.refresh_token) == ("FA", "FR")


def test_query_tokens_used_when_fragment_has_none() -> None:
    params = extract_callback_params("simpananku://auth/callback?access_token=QA&refresh_token=QR#state=xyz")
    assert (params.access_token, params.refresh_token) == ("QA", "QR")


def test_missing_half_of_pair_is_taken_from_query() -> None:
    params = extract_callback_params("simpananku://auth/callback?refresh_token=QR#access_token=FA")
    assert (params.access_token, params.refresh_token) == ("FA", "QR")


def test_code_is_read_from_query_only() -> None:
    assert extract_callback_params("simpananku://auth/callback?code=CCC").code == "CCC"
    assert extract_callback_params("simpananku://auth/callback#code=CCC").code is None


def test_empty_values_count_as_missing() -> None:
    params = extract_callback_params("simpananku://auth/callback#access_token=&refresh_token=BBB")
    assert params.access_token is None
    assert not params.has_token_pair


@pytest.mark.parametrize("url", ["", "   ", "not a url", "http://[::1"])
def test_unparseable_urls_raise_parse_failure(url: str) -> None:
    with pytest.raises(ParseFailure):
        extract_callback_params(url)


@pytest.mark.asyncio
async def test_fragment_pair_is_adopted_once(backend) -> None:
    outcome = await resolve_callback("simpananku://auth/callback#access_token=AAA&refresh_token=BBB", backend)

    assert outcome is CallbackOutcome.ADOPTED_TOKENS
    assert backend.adopt_calls == [("AAA", "BBB")]
    assert backend.exchange_calls == []


@pytest.mark.asyncio
async def test_fragment_pair_adopted_regardless_of_query_code(backend) -> None:
    url = "simpananku://auth/callback?code=CCC&access_token=x#access_token=AAA&refresh_token=BBB"
    outcome = await resolve_callback(url, backend)

    assert outcome is CallbackOutcome.ADOPTED_TOKENS
    assert backend.adopt_calls == [("AAA", "BBB")]
    assert backend.exchange_calls == []


@pytest.mark.asyncio
async def test_query_pair_is_adopted(backend) -> None:
    await resolve_callback("simpananku://auth/callback?access_token=QA&refresh_token=QR", backend)
    assert backend.adopt_calls == [("QA", "QR")]


@pytest.mark.asyncio
async def test_code_is_exchanged_exactly_once(backend) -> None:
    outcome = await resolve_callback("simpananku://auth/callback?code=CCC", backend)

    assert outcome is CallbackOutcome.EXCHANGED_CODE
    assert backend.exchange_calls == [("CCC",)]
    assert backend.adopt_calls == []


@pytest.mark.asyncio
async def test_code_used_when_only_half_a_pair_is_present(backend) -> None:
    await resolve_callback("simpananku://auth/callback?code=CCC#access_token=AAA", backend)
    assert backend.adopt_calls == []
    assert backend.exchange_calls == [("CCC",)]


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "url",
    [
        "simpananku://auth/callback",
        "simpananku://auth/callback?error=access_denied#state=abc",
        "exp://192.168.1.5:8081",
        "exp://192.168.1.5:8081/--/home",
        "garbage",
    ],
)
async def test_inconclusive_urls_make_no_backend_call(backend, url: str) -> None:
    outcome = await resolve_callback(url, backend)

    assert outcome is CallbackOutcome.IGNORED
    assert backend.calls == []


@pytest.mark.asyncio
async def test_second_identical_call_does_not_raise(backend) -> None:
    url = "simpananku://auth/callback#access_token=AAA&refresh_token=BBB"

    first = await resolve_callback(url, backend)
    second = await resolve_callback(url, backend)

    assert first is second is CallbackOutcome.ADOPTED_TOKENS
    assert backend.current.same_tokens("AAA", "BBB")


@pytest.mark.asyncio
async def test_concurrent_calls_are_safe(backend) -> None:
    url = "simpananku://auth/callback#access_token=AAA&refresh_token=BBB"

    results = await asyncio.gather(resolve_callback(url, backend), resolve_callback(url, backend))

    assert results == [CallbackOutcome.ADOPTED_TOKENS, CallbackOutcome.ADOPTED_TOKENS]
    assert backend.current.same_tokens("AAA", "BBB")


@pytest.mark.asyncio
async def test_backend_rejection_propagates(backend) -> None:
    backend.reject_with = "Invalid Refresh Token"

    with pytest.raises(AuthRejected) as excinfo:
        await resolve_callback("simpananku://auth/callback?code=CCC", backend)

    assert excinfo.value.message == "Invalid Refresh Token"
