"""OAuth2 password-grant token exchange for the REST server.

``PasswordGrantTokenClient`` performs one exchange per call, which is the
default behaviour of the REST client. ``CachingTokenProvider`` can be layered
on top to reuse a token until shortly before it expires.
"""
from __future__ import annotations

import asyncio
import logging
import time
from typing import Any, Callable, Optional, Protocol, runtime_checkable

import httpx
from pydantic import ValidationError

from common.metrics import token_errors_total, tokens_issued_total

from .config import Credentials, Endpoints
from .errors import AuthEndpointUnreachable, AuthRejected, TokenDecodeError
from .models import AccessTokenInfo

_LOG = logging.getLogger(__name__)

__all__ = [
    "TokenProvider",
    "PasswordGrantTokenClient",
    "CachingTokenProvider",
    "fetch_token",
]


@runtime_checkable
class TokenProvider(Protocol):
    """Return an access token, or ``None`` when the server issued none."""

    async def token(self) -> Optional[AccessTokenInfo]:  # noqa: D401 – imperative form
        ...


def response_body(resp: httpx.Response) -> Any:
    try:
        return resp.json()
    except ValueError:
        return resp.text


class PasswordGrantTokenClient:
    """Exchanges client + user credentials for an access token."""

    def __init__(
        self,
        credentials: Credentials,
        endpoints: Optional[Endpoints] = None,
        *,
        client: Optional[httpx.AsyncClient] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
        timeout: float = 10.0,
    ) -> None:
        self._credentials = credentials
        self._endpoints = endpoints or Endpoints()
        self._own_client = client is None
        self._client = client or httpx.AsyncClient(timeout=timeout, transport=transport)

    async def token(self) -> Optional[AccessTokenInfo]:  # type: ignore[override]
        return await self.request_token()

    async def request_token(self) -> Optional[AccessTokenInfo]:
        creds = self._credentials
        params = {
            "grant_type": "password",
            "username": creds.username,
            "password": creds.password,
        }
        try:
            resp = await self._client.post(
                self._endpoints.token_url,
                params=params,
                headers={"Accept": "application/json"},
                auth=httpx.BasicAuth(creds.client_id, creds.client_secret),
            )
        except httpx.RequestError as exc:
            token_errors_total.labels("unreachable").inc()
            raise AuthEndpointUnreachable(
                f"authorization endpoint {self._endpoints.token_url} unreachable: {exc}"
            ) from exc

        if not resp.is_success:
            token_errors_total.labels("rejected").inc()
            _LOG.info("token request rejected; status=%s user=%s", resp.status_code, creds.username)
            raise AuthRejected(
                f"token request rejected with HTTP {resp.status_code}",
                status=resp.status_code,
                body=response_body(resp),
            )

        info = self._parse(resp)
        if info is None:
            token_errors_total.labels("absent").inc()
            _LOG.debug("token response carried no access token; user=%s", creds.username)
            return None
        tokens_issued_total.labels("password").inc()
        _LOG.debug("issued password-grant token; scope=%s expires_in=%s", info.scope, info.expires_in)
        return info

    @staticmethod
    def _parse(resp: httpx.Response) -> Optional[AccessTokenInfo]:
        if not resp.content.strip():
            return None
        try:
            data = resp.json()
        except ValueError as exc:
            token_errors_total.labels("decode").inc()
            raise TokenDecodeError("token response is not valid JSON", status=resp.status_code, body=resp.text) from exc
        if not isinstance(data, dict) or not data.get("access_token"):
            return None
        try:
            return AccessTokenInfo.model_validate(data)
        except ValidationError as exc:
            token_errors_total.labels("decode").inc()
            raise TokenDecodeError(f"malformed token response: {exc}", status=resp.status_code) from exc

    async def aclose(self) -> None:
        if self._own_client:
            await self._client.aclose()

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc, tb):
        await self.aclose()


class CachingTokenProvider:
    """Reuse a token until ``expires_in`` minus a skew has elapsed.

    Skew = max(1s, min(60s, expires_in // 3)) so short-lived tokens are not
    refreshed immediately. Empty exchanges and tokens without ``expires_in``
    are handed through but never cached.
    """

    def __init__(self, source: TokenProvider, *, clock: Callable[[], float] = time.monotonic) -> None:
        self._source = source
        self._clock = clock
        self._lock = asyncio.Lock()
        self._cached: Optional[AccessTokenInfo] = None
        self._expires_at: float = 0.0

    def _fresh(self) -> bool:
        return self._cached is not None and self._clock() < self._expires_at

    async def token(self) -> Optional[AccessTokenInfo]:  # type: ignore[override]
        if self._fresh():
            return self._cached
        async with self._lock:
            # another task may have refilled while we waited
            if self._fresh():
                return self._cached
            info = await self._source.token()
            if info is None or not info.expires_in or info.expires_in <= 0:
                self._cached = None
                return info
            skew = max(1, min(60, info.expires_in // 3))
            self._cached = info
            self._expires_at = self._clock() + info.expires_in - skew
            return info

    def invalidate(self) -> None:
        self._cached = None
        self._expires_at = 0.0


async def fetch_token(
    credentials: Credentials,
    endpoints: Optional[Endpoints] = None,
    *,
    transport: Optional[httpx.AsyncBaseTransport] = None,
) -> Optional[AccessTokenInfo]:
    async with PasswordGrantTokenClient(credentials, endpoints, transport=transport) as client:
        return await client.request_token()
