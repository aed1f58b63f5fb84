"""Typed lookups of customers, orders and products on the REST server.

Each call runs token exchange then one authenticated GET and returns a
``FetchOk`` or ``FetchFailed``. Nothing is shared between calls except the
HTTP connection pool.
"""
from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from enum import Enum
from typing import Any, ClassVar, Dict, Generic, List, Optional, TypeVar, Union
from urllib.parse import quote

import httpx

from .auth import CachingTokenProvider, PasswordGrantTokenClient, TokenProvider
from .config import ClientSettings
from .errors import (
    DeadlineExceeded,
    FailureReason,
    RestClientError,
    Stage,
    TokenAbsent,
)
from .http import RestServerHTTP
from .models import Customer, CustomerReport, Order, Product

__all__ = [
    "CallState",
    "FetchOk",
    "FetchFailed",
    "FetchResult",
    "RestServerClient",
]

_LOG = logging.getLogger(__name__)

T = TypeVar("T")


class CallState(str, Enum):
    INIT = "init"
    AWAITING_TOKEN = "awaiting_token"
    AWAITING_RESOURCE = "awaiting_resource"
    DONE_OK = "done_ok"
    DONE_FAILED = "done_failed"


@dataclass(frozen=True)
class FetchOk(Generic[T]):
    status: int
    payload: T

    ok: ClassVar[bool] = True

    def unwrap(self) -> T:
        return self.payload


@dataclass(frozen=True)
class FetchFailed:
    stage: Stage
    reason: FailureReason
    error: RestClientError
    status: Optional[int] = None

    ok: ClassVar[bool] = False
    payload: ClassVar[None] = None

    def unwrap(self):
        raise self.error


FetchResult = Union[FetchOk[T], FetchFailed]


class _Call:
    """Per-call progress; lets a deadline report the stage in flight."""

    def __init__(self, resource: str) -> None:
        self.resource = resource
        self.state = CallState.INIT

    @property
    def stage(self) -> Stage:
        if self.state in (CallState.INIT, CallState.AWAITING_TOKEN):
            return Stage.TOKEN
        return Stage.RESOURCE

    def advance(self, state: CallState) -> None:
        _LOG.debug("%s: %s -> %s", self.resource, self.state.value, state.value)
        self.state = state

    def fail(self, exc: RestClientError) -> FetchFailed:
        self.advance(CallState.DONE_FAILED)
        _LOG.info(
            "%s lookup failed at %s stage: %s",
            self.resource,
            exc.stage.value,
            exc.reason.value,
            extra={"resource": self.resource, "stage": exc.stage.value, "status": exc.status},
        )
        return FetchFailed(stage=exc.stage, reason=exc.reason, error=exc, status=exc.status)


def _positive_id(value: Any, name: str) -> int:
    if isinstance(value, bool) or not isinstance(value, int) or value <= 0:
        raise ValueError(f"{name} must be a positive integer, got {value!r}")
    return value


class RestServerClient:
    """Public entry point for resource lookups.

    Args:
        settings: credentials, endpoints and transport timeout.
        client: optional shared ``httpx.AsyncClient``; left open on close.
        transport: transport for an internally created client (tests).
        token_provider: overrides the password-grant client, e.g. a
            :class:`CachingTokenProvider` shared across façades.
    """

    def __init__(
        self,
        settings: ClientSettings,
        *,
        client: Optional[httpx.AsyncClient] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
        token_provider: Optional[TokenProvider] = None,
    ) -> None:
        self._own_client = client is None
        self._client = client or httpx.AsyncClient(timeout=settings.timeout, transport=transport)
        if token_provider is None:
            token_provider = PasswordGrantTokenClient(
                settings.credentials, settings.endpoints, client=self._client
            )
            if settings.cache_tokens:
                token_provider = CachingTokenProvider(token_provider)
        self._tokens = token_provider
        self._http = RestServerHTTP(settings.endpoints, client=self._client)

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc, tb):
        await self.aclose()

    async def aclose(self) -> None:
        if self._own_client:
            await self._client.aclose()

    # ---------------------------------------------------------------------
    # Public API
    # ---------------------------------------------------------------------

    async def fetch_customer(
        self, customer_id: int, *, deadline: Optional[float] = None
    ) -> FetchResult[Customer]:
        cid = _positive_id(customer_id, "customer_id")
        return await self._fetch(f"/customers/{cid}", Customer, resource="customer", deadline=deadline)

    async def fetch_customer_orders(
        self, customer_id: int, *, deadline: Optional[float] = None
    ) -> FetchResult[List[Order]]:
        cid = _positive_id(customer_id, "customer_id")
        return await self._fetch(
            f"/customers/{cid}/orders", List[Order], resource="customer_orders", deadline=deadline
        )

    async def fetch_order(
        self, order_number: int, *, deadline: Optional[float] = None
    ) -> FetchResult[Order]:
        num = _positive_id(order_number, "order_number")
        return await self._fetch(f"/orders/{num}", Order, resource="order", deadline=deadline)

    async def fetch_product(
        self, product_code: str, *, deadline: Optional[float] = None
    ) -> FetchResult[Product]:
        if not isinstance(product_code, str) or not product_code.strip():
            raise ValueError(f"product_code must be a non-empty string, got {product_code!r}")
        path = f"/products/{quote(product_code.strip(), safe='')}"
        return await self._fetch(path, Product, resource="product", deadline=deadline)

    async def fetch_customer_report(
        self,
        customer_id: int,
        *,
        page: Optional[int] = None,
        size: Optional[int] = None,
        deadline: Optional[float] = None,
    ) -> FetchResult[List[CustomerReport]]:
        """Order lines for a customer, optionally one page of them."""

        cid = _positive_id(customer_id, "customer_id")
        params: Dict[str, Any] = {"customerId": cid}
        if (page is None) != (size is None):
            raise ValueError("page and size must be given together")
        if page is not None:
            if page < 0 or size < 1:
                raise ValueError("page must be >= 0 and size >= 1")
            params.update(page=page, size=size)
        return await self._fetch(
            "/reports/customers",
            List[CustomerReport],
            resource="customer_report",
            params=params,
            deadline=deadline,
        )

    # ---------------------------------------------------------------------
    # internals
    # ---------------------------------------------------------------------

    async def _fetch(
        self,
        path: str,
        target: Any,
        *,
        resource: str,
        params: Optional[Dict[str, Any]] = None,
        deadline: Optional[float] = None,
    ) -> FetchResult:
        call = _Call(resource)
        if deadline is None:
            return await self._run(call, path, target, params)
        try:
            return await asyncio.wait_for(self._run(call, path, target, params), deadline)
        except asyncio.TimeoutError:
            return call.fail(
                DeadlineExceeded(f"{resource} lookup exceeded {deadline}s", stage=call.stage)
            )

    async def _run(
        self, call: _Call, path: str, target: Any, params: Optional[Dict[str, Any]]
    ) -> FetchResult:
        call.advance(CallState.AWAITING_TOKEN)
        try:
            token = await self._tokens.token()
            if token is None:
                raise TokenAbsent("authorization server returned no access token")
            call.advance(CallState.AWAITING_RESOURCE)
            resp = await self._http.get(path, token, target, params=params, resource=call.resource)
        except RestClientError as exc:
            if (
                exc.stage is Stage.RESOURCE
                and exc.reason is FailureReason.AUTH_FAILED
                and isinstance(self._tokens, CachingTokenProvider)
            ):
                self._tokens.invalidate()
            return call.fail(exc)
        call.advance(CallState.DONE_OK)
        return FetchOk(status=resp.status, payload=resp.payload)
