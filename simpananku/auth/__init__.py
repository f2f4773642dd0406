"""
Authentication module for SimpananKu.
Provides OAuth callback resolution, the browser sign-in flow and session bootstrap.
"""

from .errors import AuthError, AuthRejected, ParseFailure, UserCancelled
from .callback_resolver import CallbackOutcome, extract_callback_params, resolve_callback
from .oauth_flow import AuthBrowserSession, BrowserResult, make_redirect_uri, sign_in_with_provider
from .session_bootstrapper import AuthState, SessionBootstrapper, Surface, route_for

__all__ = [
    "AuthError",
    "AuthRejected",
    "ParseFailure",
    "UserCancelled",
    "CallbackOutcome",
    "extract_callback_params",
    "resolve_callback",
    "AuthBrowserSession",
    "BrowserResult",
    "make_redirect_uri",
    "sign_in_with_provider",
    "AuthState",
    "SessionBootstrapper",
    "Surface",
    "route_for"
]
