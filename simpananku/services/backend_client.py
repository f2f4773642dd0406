"""
Backend client for the hosted auth and table storage service
"""

import time
import json
import base64
import hashlib
import secrets
import logging
import asyncio
from enum import Enum
from datetime import datetime, timezone
from typing import Optional, Dict, Any, Callable, List, Tuple
from urllib.parse import urlencode
from dataclasses import dataclass

import aiohttp

from simpananku.auth.errors import AuthRejected
from simpananku.config.settings import AuthConfig, BackendConfig
from simpananku.models.entry import CreateTextEntry, TextEntry
from simpananku.models.session import Session, User, session_from_token_response, token_expiry
from simpananku.services.secure_store import SecureStore


@dataclass
class APIResponse:
    """Represents an API response"""
    success: bool
    data: Any = None
    error: Optional[str] = None
    status_code: Optional[int] = None


class BackendError(Exception):
    """A table operation failed"""

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.message = message
        self.status_code = status_code


class AuthChangeEvent(str, Enum):
    INITIAL_SESSION = "INITIAL_SESSION"
    SIGNED_IN = "SIGNED_IN"
    SIGNED_OUT = "SIGNED_OUT"
    TOKEN_REFRESHED = "TOKEN_REFRESHED"
    USER_UPDATED = "USER_UPDATED"


SessionListener = Callable[[AuthChangeEvent, Optional[Session]], None]


def _error_message(data: Any, status: int) -> str:
    if isinstance(data, dict):
        for key in ('error_description', 'msg', 'message', 'error'):
            if data.get(key):
                return str(data[key])
    if isinstance(data, str) and data:
        return data
    return f"HTTP {status}"


def _pkce_pair() -> Tuple[str, str]:
    """Generate PKCE code verifier and S256 challenge"""
    code_verifier = base64.urlsafe_b64encode(secrets.token_bytes(32)).decode('utf-8').rstrip('=')
    code_challenge = base64.urlsafe_b64encode(
        hashlib.sha256(code_verifier.encode('utf-8')).digest()
    ).decode('utf-8').rstrip('=')
    return code_verifier, code_challenge


class BackendClient:
    """Client for the hosted auth service and the entries table"""

    def __init__(self, config: BackendConfig, auth_config: AuthConfig, store: SecureStore):
        self.config = config
        self.auth_config = auth_config
        self.store = store
        self.session: Optional[aiohttp.ClientSession] = None
        self.logger = logging.getLogger(__name__)

        self.storage_key = f"sb-{config.project_ref}-auth-token"
        self.verifier_key = f"{self.storage_key}-code-verifier"

        # Auth state
        self._current: Optional[Session] = None
        self._loaded = False
        self._last_code: Optional[str] = None
        self._adopted_pair: Optional[Tuple[str, str]] = None
        self._listeners: Dict[int, SessionListener] = {}
        self._next_listener_id = 0
        self._adoptions: Dict[Tuple[str, str], asyncio.Future] = {}
        self._exchanges: Dict[str, asyncio.Future] = {}
        self._refresh_task: Optional[asyncio.Task] = None

        self.connected = False

    async def connect(self):
        """Open the HTTP session and restore any persisted auth session"""
        self.logger.info(f"Connecting to {self.config.supabase_url}")

        timeout = aiohttp.ClientTimeout(total=self.config.api_timeout)
        self.session = aiohttp.ClientSession(timeout=timeout)
        self.connected = True

        session = await self.get_current_session()
        self._notify(AuthChangeEvent.INITIAL_SESSION, session)

    async def disconnect(self):
        """Close the HTTP session"""
        self.logger.info("Disconnecting from backend service")
        self.connected = False
        self._cancel_refresh()

        if self.session:
            await self.session.close()
            self.session = None

    # HTTP API methods
    def _headers(self, token: Optional[str] = None) -> Dict[str, str]:
        return {
            'apikey': self.config.anon_key,
            'Authorization': f"Bearer {token or self.config.anon_key}",
        }

    async def _request(self, method: str, endpoint: str, token: Optional[str] = None,
                       headers: Optional[Dict[str, str]] = None, **kwargs) -> APIResponse:
        """Make HTTP request"""
        if not self.session:
            return APIResponse(success=False, error="Not connected")

        url = f"{self.config.supabase_url.rstrip('/')}{endpoint}"
        request_headers = self._headers(token)
        if headers:
            request_headers.update(headers)

        try:
            async with self.session.request(method, url, headers=request_headers, **kwargs) as response:
                if response.content_type == 'application/json':
                    data = await response.json()
                else:
                    data = await response.text()

                if response.status < 400:
                    return APIResponse(success=True, data=data, status_code=response.status)
                else:
                    return APIResponse(success=False, error=_error_message(data, response.status),
                                       status_code=response.status)

        except (aiohttp.ClientError, asyncio.TimeoutError, json.JSONDecodeError) as e:
            self.logger.error(f"Request failed: {method} {url} - {e}")
            return APIResponse(success=False, error=str(e) or type(e).__name__)

    # Session change notifications
    def on_session_change(self, callback: SessionListener) -> Callable[[], None]:
        """Register a listener; returns a handle that removes it"""
        listener_id = self._next_listener_id
        self._next_listener_id += 1
        self._listeners[listener_id] = callback

        def unsubscribe():
            self._listeners.pop(listener_id, None)

        return unsubscribe

    def _notify(self, event: AuthChangeEvent, session: Optional[Session]):
        self.logger.debug(f"Auth event {event.value} (session={session is not None})")
        for listener in list(self._listeners.values()):
            try:
                listener(event, session)
            except Exception as e:
                self.logger.error(f"Session listener failed on {event.value}: {e}")

    # Session storage
    def _load_persisted(self) -> Optional[Session]:
        if not self.auth_config.persist_session:
            return None
        raw = self.store.get_item(self.storage_key)
        if not raw:
            return None
        try:
            return Session.model_validate_json(raw)
        except ValueError as e:
            self.logger.warning(f"Stored session is unreadable, discarding: {e}")
            self.store.remove_item(self.storage_key)
            return None

    def _save_session(self, session: Session):
        self._current = session
        self._loaded = True
        if self.auth_config.persist_session:
            self.store.set_item(self.storage_key, session.model_dump_json())
        self._schedule_refresh(session)

    def _clear_session(self):
        self._current = None
        self._loaded = True
        self._last_code = None
        self._adopted_pair = None
        self._cancel_refresh()
        self.store.remove_item(self.storage_key)

    def _schedule_refresh(self, session: Session):
        self._cancel_refresh()
        if not self.auth_config.auto_refresh_token or session.expires_at is None:
            return
        delay = max(session.expires_at - self.auth_config.refresh_margin - time.time(), 0)
        self._refresh_task = asyncio.get_running_loop().create_task(self._refresh_later(delay))

    def _cancel_refresh(self):
        if self._refresh_task and not self._refresh_task.done():
            self._refresh_task.cancel()
        self._refresh_task = None

    async def _refresh_later(self, delay: float):
        await asyncio.sleep(delay)
        self._refresh_task = None
        try:
            await self.refresh_session()
        except AuthRejected as e:
            self.logger.warning(f"Automatic token refresh failed: {e.message}")
        except ValueError as e:
            # pydantic ValidationError on a malformed token response
            self.logger.error(f"Automatic token refresh returned an unusable session: {e}")

    # Auth operations
    async def get_current_session(self) -> Optional[Session]:
        """Return the signed-in session, restoring and refreshing it if needed"""
        if not self._loaded:
            self._current = self._load_persisted()
            self._loaded = True

        session = self._current
        if session is None:
            return None

        if session.is_expired(margin=0):
            response = await self._refresh_request(session.refresh_token)
            if response.success:
                session = session_from_token_response(response.data)
                self._save_session(session)
                self._notify(AuthChangeEvent.TOKEN_REFRESHED, session)
            elif response.status_code is not None:
                self.logger.info("Stored session was rejected on refresh, signing out")
                self._clear_session()
                self._notify(AuthChangeEvent.SIGNED_OUT, None)
                return None
            else:
                self.logger.warning(f"Could not refresh stored session: {response.error}")
        elif self._refresh_task is None:
            self._schedule_refresh(session)

        return session

    async def adopt_token_pair(self, access_token: str, refresh_token: str) -> Session:
        """
        Establish a session from a token pair obtained outside this client.

        Adopting the pair that is already current, or the pair the current
        session was adopted from (it may since have been refreshed), returns
        the current session without a request or an event. Concurrent
        adoptions of the same pair share one request.
        """
        current = self._current
        if current is not None and (
            current.same_tokens(access_token, refresh_token)
            or self._adopted_pair == (access_token, refresh_token)
        ):
            return current

        key = (access_token, refresh_token)
        pending = self._adoptions.get(key)
        if pending is None:
            pending = asyncio.ensure_future(self._adopt(access_token, refresh_token))
            self._adoptions[key] = pending
            pending.add_done_callback(lambda _: self._adoptions.pop(key, None))
        return await asyncio.shield(pending)

    async def _adopt(self, access_token: str, refresh_token: str) -> Session:
        if not access_token or not refresh_token:
            raise AuthRejected("Access token and refresh token are required")

        now = time.time()
        expires_at = token_expiry(access_token)

        if expires_at is not None and expires_at <= now:
            response = await self._refresh_request(refresh_token)
            if not response.success:
                raise AuthRejected(response.error or "Session refresh failed", response.status_code)
            session = session_from_token_response(response.data)
        else:
            response = await self._request("GET", "/auth/v1/user", token=access_token)
            if not response.success:
                raise AuthRejected(response.error or "Invalid access token", response.status_code)
            session = Session(
                access_token=access_token,
                refresh_token=refresh_token,
                expires_at=expires_at,
                expires_in=int(expires_at - now) if expires_at is not None else None,
                user=User.model_validate(response.data),
            )

        self._save_session(session)
        self._last_code = None
        self._adopted_pair = (access_token, refresh_token)
        self._notify(AuthChangeEvent.SIGNED_IN, session)
        self.logger.info("Session established from token pair")
        return session

    async def exchange_code_for_session(self, code: str) -> Session:
        """
        Exchange a PKCE authorization code for a session.

        A code that already produced the current session returns it again;
        concurrent exchanges of one code share one request.
        """
        if code and code == self._last_code and self._current is not None:
            return self._current

        pending = self._exchanges.get(code)
        if pending is None:
            pending = asyncio.ensure_future(self._exchange(code))
            self._exchanges[code] = pending
            pending.add_done_callback(lambda _: self._exchanges.pop(code, None))
        return await asyncio.shield(pending)

    async def _exchange(self, code: str) -> Session:
        code_verifier = self.store.get_item(self.verifier_key)
        if not code_verifier:
            raise AuthRejected("No PKCE code verifier found for this sign-in")

        response = await self._request(
            "POST", "/auth/v1/token?grant_type=pkce",
            json={'auth_code': code, 'code_verifier': code_verifier},
        )
        if not response.success:
            raise AuthRejected(response.error or "Code exchange failed", response.status_code)

        self.store.remove_item(self.verifier_key)
        session = session_from_token_response(response.data)
        self._last_code = code
        self._adopted_pair = None
        self._save_session(session)
        self._notify(AuthChangeEvent.SIGNED_IN, session)
        self.logger.info("Session established from authorization code")
        return session

    async def begin_oauth(self, provider: str, redirect_url: str) -> str:
        """Build the provider authorize URL; the caller opens it"""
        code_verifier, code_challenge = _pkce_pair()
        self.store.set_item(self.verifier_key, code_verifier)

        params = {
            'provider': provider,
            'redirect_to': redirect_url,
            'code_challenge': code_challenge,
            'code_challenge_method': 's256',
        }
        return f"{self.config.supabase_url.rstrip('/')}/auth/v1/authorize?{urlencode(params)}"

    async def _refresh_request(self, refresh_token: str) -> APIResponse:
        return await self._request(
            "POST", "/auth/v1/token?grant_type=refresh_token",
            json={'refresh_token': refresh_token},
        )

    async def refresh_session(self) -> Session:
        """Use the refresh token to get a new access token"""
        current = self._current
        if current is None:
            raise AuthRejected("No session to refresh")

        response = await self._refresh_request(current.refresh_token)
        if not response.success:
            raise AuthRejected(response.error or "Session refresh failed", response.status_code)

        session = session_from_token_response(response.data)
        self._save_session(session)
        self._notify(AuthChangeEvent.TOKEN_REFRESHED, session)
        return session

    async def sign_out(self):
        """Revoke the session remotely when possible and always forget it locally"""
        current = self._current
        if current is not None:
            response = await self._request("POST", "/auth/v1/logout", token=current.access_token)
            if not response.success:
                self.logger.warning(f"Remote sign-out failed: {response.error}")

        self._clear_session()
        self._notify(AuthChangeEvent.SIGNED_OUT, None)

    async def get_user(self) -> Optional[User]:
        session = await self.get_current_session()
        if session is None:
            return None

        response = await self._request("GET", "/auth/v1/user", token=session.access_token)
        if not response.success:
            self.logger.warning(f"Failed to fetch user: {response.error}")
            return None

        user = User.model_validate(response.data)
        if session.user != user:
            session.user = user
            self._notify(AuthChangeEvent.USER_UPDATED, session)
        return user

    # Entries table
    async def _access_token(self) -> str:
        session = await self.get_current_session()
        if session is None:
            raise BackendError("User not authenticated")
        return session.access_token

    def _table(self, query: str = "") -> str:
        return f"/rest/v1/{self.config.entries_table}{query}"

    async def list_entries(self) -> List[TextEntry]:
        """Fetch the user's entries, newest first"""
        token = await self._access_token()
        response = await self._request(
            "GET", self._table(), token=token,
            params={'select': '*', 'order': 'created_at.desc'},
        )
        if not response.success:
            raise BackendError(response.error, response.status_code)
        return [TextEntry.model_validate(row) for row in response.data or []]

    async def create_entry(self, entry: CreateTextEntry) -> TextEntry:
        token = await self._access_token()
        user = await self.get_user()
        if user is None:
            raise BackendError("User not authenticated")

        payload = entry.model_dump(mode='json')
        payload['user_id'] = user.id
        response = await self._request(
            "POST", self._table(), token=token, json=payload,
            headers={'Prefer': 'return=representation'},
        )
        if not response.success:
            raise BackendError(response.error, response.status_code)
        return TextEntry.model_validate(response.data[0])

    async def update_entry(self, entry_id: str, entry: CreateTextEntry) -> TextEntry:
        token = await self._access_token()
        payload = entry.model_dump(mode='json')
        payload['updated_at'] = datetime.now(timezone.utc).isoformat()
        response = await self._request(
            "PATCH", self._table(), token=token, json=payload,
            params={'id': f"eq.{entry_id}"},
            headers={'Prefer': 'return=representation'},
        )
        if not response.success:
            raise BackendError(response.error, response.status_code)
        if not response.data:
            raise BackendError("Entry not found", 404)
        return TextEntry.model_validate(response.data[0])

    async def set_favorite(self, entry_id: str, is_favorite: bool):
        token = await self._access_token()
        response = await self._request(
            "PATCH", self._table(), token=token,
            json={'is_favorite': is_favorite},
            params={'id': f"eq.{entry_id}"},
        )
        if not response.success:
            raise BackendError(response.error, response.status_code)

    async def delete_entry(self, entry_id: str):
        token = await self._access_token()
        response = await self._request(
            "DELETE", self._table(), token=token,
            params={'id': f"eq.{entry_id}"},
        )
        if not response.success:
            raise BackendError(response.error, response.status_code)
