"""
OAuth callback resolution.

A callback URL reaches the app in two ways: as the redirect returned by the
in-app browser flow, or as an OS deep link (including the link that launched
the process). Both are handed to `resolve_callback`, which finds either a
token pair or an authorization code and turns it into a session:

1. token pair from the fragment (`#access_token=...&refresh_token=...`)
2. any missing half of the pair from the query string
3. otherwise `code` from the query string
4. otherwise nothing - a cancelled flow or an unrelated link

The resolver keeps no state of its own. Repeated or concurrent calls with the
same URL rely on the backend client treating re-adoption of the current
token pair as a no-op.
"""

import logging
from enum import Enum
from dataclasses import dataclass
from typing import Optional
from urllib.parse import parse_qs, urlsplit

from simpananku.auth.errors import ParseFailure

logger = logging.getLogger(__name__)


class CallbackOutcome(Enum):
    ADOPTED_TOKENS = "adopted_tokens"
    EXCHANGED_CODE = "exchanged_code"
    IGNORED = "ignored"


@dataclass(frozen=True)
class CallbackParams:
    access_token: Optional[str] = None
    refresh_token: Optional[str] = None
    code: Optional[str] = None

    @property
    def has_token_pair(self) -> bool:
        return bool(self.access_token) and bool(self.refresh_token)


def _first(params, name: str) -> Optional[str]:
    values = params.get(name)
    return values[0] if values else None


def _parse_pairs(text: str):
    try:
        return parse_qs(text, keep_blank_values=True, strict_parsing=False)
    except ValueError as e:
        raise ParseFailure(f"Unparseable parameter list: {e}") from e


def extract_callback_params(url: str) -> CallbackParams:
    """Pull the token pair and authorization code out of a callback URL."""
    if not isinstance(url, str) or not url.strip():
        raise ParseFailure("Empty callback URL")

    try:
        parts = urlsplit(url.strip())
    except ValueError as e:
        raise ParseFailure(f"Unparseable callback URL: {e}") from e
    if not parts.scheme:
        raise ParseFailure("Callback URL has no scheme")

    access_token = refresh_token = None

    if parts.fragment:
        fragment = _parse_pairs(parts.fragment)
        access_token = _first(fragment, "access_token")
        refresh_token = _first(fragment, "refresh_token")

    query = _parse_pairs(parts.query) if parts.query else {}
    if not access_token or not refresh_token:
        access_token = access_token or _first(query, "access_token")
        refresh_token = refresh_token or _first(query, "refresh_token")

    return CallbackParams(
        access_token=access_token or None,
        refresh_token=refresh_token or None,
        code=_first(query, "code") or None,
    )


async def resolve_callback(url: str, client) -> CallbackOutcome:
    """
    Turn a callback URL into a session on `client`.

    Parse failures are swallowed and reported as IGNORED. AuthRejected from
    the client propagates so the caller can show it to the user.
    """
    try:
        params = extract_callback_params(url)
    except ParseFailure as e:
        logger.debug(f"Ignoring callback URL: {e}")
        return CallbackOutcome.IGNORED

    logger.info(
        f"Callback received (access_token={bool(params.access_token)} "
        f"refresh_token={bool(params.refresh_token)} code={bool(params.code)})"
    )

    if params.has_token_pair:
        await client.adopt_token_pair(params.access_token, params.refresh_token)
        return CallbackOutcome.ADOPTED_TOKENS

    if params.code:
        await client.exchange_code_for_session(params.code)
        return CallbackOutcome.EXCHANGED_CODE

    return CallbackOutcome.IGNORED
