"""
Authentication error types.
"""

from typing import Optional


class AuthError(Exception):
    """Base class for sign-in failures."""


class ParseFailure(AuthError):
    """A callback URL or one of its parameters could not be parsed."""


class AuthRejected(AuthError):
    """The backend refused token adoption, code exchange or refresh."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.message = message
        self.status_code = status_code


class UserCancelled(AuthError):
    """The browser flow was closed before sign-in completed."""

    def __init__(self, reason: str = "cancel"):
        super().__init__(f"Sign-in {reason}")
        self.reason = reason
