"""Synchronous client wrapping the async :class:`RestServerClient`.

Each method runs one complete lookup on a fresh event loop, so it must not be
called from inside a running loop; async code should use the façade directly.
"""
from __future__ import annotations

import asyncio
from typing import List, Optional

import httpx

from integrations.restserver.config import ClientSettings, load_settings
from integrations.restserver.models import Customer, CustomerReport, Order, Product
from integrations.restserver.resources_client import FetchResult, RestServerClient

__all__ = ["RestClient"]


class RestClient:
    """Blocking pass-through helpers over the async façade."""

    def __init__(
        self,
        settings: Optional[ClientSettings] = None,
        *,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self._settings = settings or load_settings()
        self._transport = transport

    def _run(self, method: str, *args, **kwargs) -> FetchResult:
        async def _call():
            async with RestServerClient(self._settings, transport=self._transport) as client:
                return await getattr(client, method)(*args, **kwargs)

        return asyncio.run(_call())

    # ---- Pass-through helpers -------------------------------------------------

    def get_customer(self, customer_id: int, *, deadline: Optional[float] = None) -> FetchResult[Customer]:
        return self._run("fetch_customer", customer_id, deadline=deadline)

    def get_customer_orders(
        self, customer_id: int, *, deadline: Optional[float] = None
    ) -> FetchResult[List[Order]]:
        return self._run("fetch_customer_orders", customer_id, deadline=deadline)

    def get_order(self, order_number: int, *, deadline: Optional[float] = None) -> FetchResult[Order]:
        return self._run("fetch_order", order_number, deadline=deadline)

    def get_product(self, product_code: str, *, deadline: Optional[float] = None) -> FetchResult[Product]:
        return self._run("fetch_product", product_code, deadline=deadline)

    def get_customer_report(
        self,
        customer_id: int,
        page: Optional[int] = None,
        size: Optional[int] = None,
        *,
        deadline: Optional[float] = None,
    ) -> FetchResult[List[CustomerReport]]:
        return self._run("fetch_customer_report", customer_id, page=page, size=size, deadline=deadline)
