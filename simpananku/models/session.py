"""
Session models returned by the hosted auth service
"""

import time
from typing import Any, Dict, Optional

import jwt
from pydantic import BaseModel, Field


class User(BaseModel):
    id: str
    email: Optional[str] = None
    user_metadata: Dict[str, Any] = Field(default_factory=dict)


class Session(BaseModel):
    """Token pair plus expiry metadata"""
    access_token: str
    refresh_token: str
    token_type: str = "bearer"
    expires_in: Optional[int] = None
    expires_at: Optional[int] = None
    user: Optional[User] = None

    def same_tokens(self, access_token: str, refresh_token: str) -> bool:
        return self.access_token == access_token and self.refresh_token == refresh_token

    def is_expired(self, margin: int = 0, now: Optional[float] = None) -> bool:
        if self.expires_at is None:
            return False
        now = time.time() if now is None else now
        return self.expires_at - margin <= now


def token_expiry(access_token: str) -> Optional[int]:
    """
    Read the `exp` claim of an access token.

    The signature is not checked here; the backend validates tokens on use.
    Returns None for tokens that are not JWTs or carry no expiry.
    """
    try:
        claims = jwt.decode(access_token, options={"verify_signature": False})
    except jwt.PyJWTError:
        return None
    exp = claims.get("exp")
    return int(exp) if isinstance(exp, (int, float)) else None


def session_from_token_response(data: Dict[str, Any], now: Optional[float] = None) -> Session:
    """Build a Session from a /token or adopted-pair payload"""
    now = time.time() if now is None else now
    session = Session(**{k: v for k, v in data.items() if k in Session.model_fields})

    if session.expires_at is None:
        if session.expires_in is not None:
            session.expires_at = int(now) + int(session.expires_in)
        else:
            session.expires_at = token_expiry(session.access_token)
    return session
