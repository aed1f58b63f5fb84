"""Authenticated requests against the REST server's resource endpoints.

Uses `httpx.AsyncClient` with:
* Resource base URL from :class:`~integrations.restserver.config.Endpoints`
* The access token appended as the ``access_token`` query parameter
* Prometheus counters + histogram (labels: resource, method, status)

No retries: every failure is reported to the caller as a typed error.
Tests swap the transport for ``httpx.MockTransport`` or an ASGI app.
"""
from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from functools import lru_cache
from typing import Any, Dict, Generic, Optional, TypeVar

import httpx
from pydantic import TypeAdapter, ValidationError

from common.metrics import resource_latency_seconds, resource_requests_total

from .auth import response_body
from .config import Endpoints
from .errors import (
    ResourceDecodeError,
    ResourceFetchError,
    ResourceNotFound,
    ResourceUnreachable,
    TokenAbsent,
)
from .models import AccessTokenInfo, ErrorDetails

__all__ = ["ResourceResponse", "RestServerHTTP"]

_LOG = logging.getLogger(__name__)

T = TypeVar("T")


@dataclass(frozen=True)
class ResourceResponse(Generic[T]):
    status: int
    payload: T


@lru_cache(maxsize=None)
def _adapter(target: Any) -> TypeAdapter:
    return TypeAdapter(target)


def _label(path: str) -> str:
    return path.strip("/").split("/", 1)[0].split("?", 1)[0] or "root"


class RestServerHTTP:
    def __init__(
        self,
        endpoints: Optional[Endpoints] = None,
        *,
        client: Optional[httpx.AsyncClient] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
        timeout: float = 10.0,
    ) -> None:
        self._endpoints = endpoints or Endpoints()
        self._own_client = client is None
        self._client = client or httpx.AsyncClient(timeout=timeout, transport=transport)

    async def request(
        self,
        method: str,
        path: str,
        token: Optional[AccessTokenInfo],
        target: Any,
        *,
        params: Optional[Dict[str, Any]] = None,
        resource: Optional[str] = None,
    ) -> ResourceResponse:
        """Issue one authenticated request and decode the body into *target*."""

        if token is None or not token.access_token:
            raise TokenAbsent("an access token is required before calling the resource server")

        url = self._endpoints.resource_url(path)
        query = {**(params or {}), "access_token": token.access_token}
        label = resource or _label(path)

        start = time.perf_counter()
        try:
            resp = await self._client.request(
                method, url, params=query, headers={"Accept": "application/json"}
            )
        except httpx.RequestError as exc:
            resource_requests_total.labels(label, method.lower(), "error").inc()
            raise ResourceUnreachable(f"resource server unreachable for {method} {path}: {exc}") from exc
        resource_latency_seconds.labels(label).observe(time.perf_counter() - start)
        resource_requests_total.labels(label, method.lower(), str(resp.status_code)).inc()

        if resp.status_code == 404:
            raise ResourceNotFound(
                f"{method} {path} not found", status=404, body=self._error_details(resp)
            )
        if not resp.is_success:
            _LOG.info("resource request failed; %s %s status=%s", method, path, resp.status_code)
            raise ResourceFetchError(
                f"{method} {path} failed with HTTP {resp.status_code}",
                status=resp.status_code,
                body=response_body(resp),
            )

        try:
            payload = _adapter(target).validate_json(resp.content)
        except ValidationError as exc:
            raise ResourceDecodeError(
                f"cannot decode {method} {path} response: {exc}",
                status=resp.status_code,
                body=resp.text,
            ) from exc
        return ResourceResponse(status=resp.status_code, payload=payload)

    async def get(self, path: str, token: Optional[AccessTokenInfo], target: Any, **kw) -> ResourceResponse:
        return await self.request("GET", path, token, target, **kw)

    @staticmethod
    def _error_details(resp: httpx.Response) -> Any:
        try:
            return ErrorDetails.model_validate_json(resp.content)
        except ValidationError:
            return response_body(resp)

    async def aclose(self) -> None:
        if self._own_client:
            await self._client.aclose()

    # context-manager sugar
    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc, tb):
        await self.aclose()
