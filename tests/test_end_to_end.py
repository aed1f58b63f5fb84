"""Client against the mock server, in-process via ``httpx.ASGITransport``."""
from decimal import Decimal

import httpx
import pytest

from integrations.restserver.config import ClientSettings, Credentials, Endpoints
from integrations.restserver.errors import FailureReason, Stage
from integrations.restserver.resources_client import RestServerClient
from mocks.mock_rest_server import create_app

ENDPOINTS = Endpoints(auth_base_url="http://mock", resource_base_url="http://mock/api/v2")


def _settings(password="admin"):
    return ClientSettings(Credentials("trusted-client", "secret", "admin", password), ENDPOINTS)


@pytest.fixture()
def transport():
    return httpx.ASGITransport(app=create_app())


@pytest.mark.anyio
async def test_customer_lookup(transport):
    async with RestServerClient(_settings(), transport=transport) as client:
        result = await client.fetch_customer(42)
    assert result.status == 200
    assert result.payload.customer_id == 42
    assert result.payload.first_name == "Jane"


@pytest.mark.anyio
async def test_bad_password(transport):
    async with RestServerClient(_settings("wrong"), transport=transport) as client:
        result = await client.fetch_customer(42)
    assert result.stage is Stage.TOKEN
    assert result.reason is FailureReason.AUTH_FAILED
    assert result.status == 401


@pytest.mark.anyio
async def test_unknown_customer(transport):
    async with RestServerClient(_settings(), transport=transport) as client:
        result = await client.fetch_customer(4242)
    assert result.reason is FailureReason.RESOURCE_NOT_FOUND
    assert result.error.body.message == "Customer with this ID not found"


@pytest.mark.anyio
async def test_order_product_and_report(transport):
    async with RestServerClient(_settings(), transport=transport) as client:
        order = (await client.fetch_order(10100)).unwrap()
        product = (await client.fetch_product("S10_1949")).unwrap()
        orders = (await client.fetch_customer_orders(1)).unwrap()
        report = (await client.fetch_customer_report(1, page=0, size=2)).unwrap()

    assert order.order_details[0].price == Decimal("136.00")
    assert order.shipped_date is not None
    assert product.product_line == "Classic Cars"
    assert sorted(o.order_number for o in orders) == [10100, 10101]
    assert [r.product_code for r in report] == ["S10_1678", "S10_1949"]
