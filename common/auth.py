"""Server-side OAuth2 helpers used by the mock REST server."""
from __future__ import annotations

import base64
import binascii
import secrets
import time
from dataclasses import dataclass
from typing import Any, Callable, Dict, Optional, Tuple

from fastapi import HTTPException, Query, Request, status

__all__ = ["IssuedToken", "TokenRegistry", "parse_basic_auth", "require_access_token"]


@dataclass(frozen=True)
class IssuedToken:
    username: str
    expires_at: float


class TokenRegistry:
    """In-memory store of issued access tokens."""

    def __init__(self, ttl: int = 3600, *, scope: str = "read write", clock: Callable[[], float] = time.time) -> None:
        self.ttl = ttl
        self.scope = scope
        self._clock = clock
        self._tokens: Dict[str, IssuedToken] = {}

    def issue(self, username: str) -> Dict[str, Any]:
        access = secrets.token_urlsafe(24)
        self._tokens[access] = IssuedToken(username, self._clock() + self.ttl)
        return {
            "access_token": access,
            "token_type": "bearer",
            "refresh_token": secrets.token_urlsafe(24),
            "expires_in": self.ttl,
            "scope": self.scope,
        }

    def lookup(self, token: Optional[str]) -> Optional[str]:
        """Return the owning username, or None for unknown/expired tokens."""

        if not token:
            return None
        issued = self._tokens.get(token)
        if issued is None:
            return None
        if self._clock() >= issued.expires_at:
            del self._tokens[token]
            return None
        return issued.username


def parse_basic_auth(authorization: Optional[str]) -> Optional[Tuple[str, str]]:
    if not authorization:
        return None
    scheme, _, encoded = authorization.partition(" ")
    if scheme.lower() != "basic" or not encoded:
        return None
    try:
        decoded = base64.b64decode(encoded, validate=True).decode("utf-8")
    except (binascii.Error, UnicodeDecodeError):
        return None
    client_id, sep, client_secret = decoded.partition(":")
    if not sep:
        return None
    return client_id, client_secret


def require_access_token(request: Request, access_token: str | None = Query(None)) -> str:
    """Validate the ``access_token`` query parameter; returns the username."""

    registry: TokenRegistry = request.app.state.tokens
    username = registry.lookup(access_token)
    if username is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED, detail="invalid_token"
        )
    return username
