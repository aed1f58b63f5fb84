"""End-to-end smoke run of the client against the in-process mock server.

No network: requests go through ``httpx.ASGITransport`` straight into the
FastAPI app from ``mocks.mock_rest_server``.
"""
import asyncio
import sys

import httpx

from common.logging import configure_logging
from integrations.restserver.config import ClientSettings, Credentials, Endpoints
from integrations.restserver.errors import FailureReason
from integrations.restserver.resources_client import RestServerClient
from mocks.mock_rest_server import create_app

ENDPOINTS = Endpoints(
    auth_base_url="http://mock-rest",
    resource_base_url="http://mock-rest/api/v2",
)


async def main() -> int:
    transport = httpx.ASGITransport(app=create_app())
    good = ClientSettings(Credentials("trusted-client", "secret", "admin", "admin"), ENDPOINTS)
    bad = ClientSettings(Credentials("trusted-client", "secret", "admin", "nope"), ENDPOINTS)

    async with RestServerClient(good, transport=transport) as client:
        customer = await client.fetch_customer(1)
        assert customer.ok and customer.payload.customer_id == 1, customer
        orders = await client.fetch_customer_orders(1)
        assert orders.ok and len(orders.payload) == 2, orders
        product = await client.fetch_product("S10_1678")
        assert product.ok, product
        missing = await client.fetch_customer(999)
        assert missing.reason is FailureReason.RESOURCE_NOT_FOUND, missing

    async with RestServerClient(bad, transport=transport) as client:
        rejected = await client.fetch_customer(1)
        assert rejected.reason is FailureReason.AUTH_FAILED, rejected

    print("SMOKE: OK")
    return 0


if __name__ == "__main__":
    configure_logging(service_name="smoke")
    sys.exit(asyncio.run(main()))
