from typing import List

import httpx
import pytest

from integrations.restserver.errors import (
    FailureReason,
    ResourceDecodeError,
    ResourceFetchError,
    ResourceNotFound,
    ResourceUnreachable,
    Stage,
    TokenAbsent,
)
from integrations.restserver.http import RestServerHTTP
from integrations.restserver.models import AccessTokenInfo, Customer, ErrorDetails, Order

TOKEN = AccessTokenInfo(
    access_token="tok1", token_type="bearer", refresh_token="r1", expires_in=3600, scope="read"
)


class _Transport(httpx.AsyncBaseTransport):
    """Returns a pre-canned response and counts calls."""

    def __init__(self, response):
        self.response = response
        self.calls = 0
        self.last_request = None

    async def handle_async_request(self, request):  # type: ignore[override]
        self.calls += 1
        self.last_request = request
        if isinstance(self.response, Exception):
            raise self.response
        return self.response


@pytest.mark.anyio
async def test_absent_token_fails_before_any_io(endpoints):
    transport = _Transport(httpx.Response(200, json={"customerId": 1}))
    async with RestServerHTTP(endpoints, transport=transport) as http:
        with pytest.raises(TokenAbsent) as excinfo:
            await http.get("/customers/1", None, Customer)

    assert transport.calls == 0
    assert excinfo.value.stage is Stage.TOKEN
    assert excinfo.value.reason is FailureReason.AUTH_FAILED


@pytest.mark.anyio
async def test_token_is_sent_as_query_parameter(endpoints):
    transport = _Transport(httpx.Response(200, json={"customerId": 42, "firstName": "Jane"}))
    async with RestServerHTTP(endpoints, transport=transport) as http:
        resp = await http.get("/customers/42", TOKEN, Customer)

    req = transport.last_request
    assert req.method == "GET"
    assert str(req.url) == "https://api.test/api/v2/customers/42?access_token=tok1"
    assert req.headers["Accept"] == "application/json"
    assert "Authorization" not in req.headers
    assert resp.status == 200
    assert resp.payload.customer_id == 42
    assert resp.payload.first_name == "Jane"


@pytest.mark.anyio
async def test_extra_params_are_kept_next_to_token(endpoints):
    transport = _Transport(httpx.Response(200, json=[]))
    async with RestServerHTTP(endpoints, transport=transport) as http:
        resp = await http.get("/reports/customers", TOKEN, List[Order], params={"customerId": 7})

    params = transport.last_request.url.params
    assert params["customerId"] == "7"
    assert params["access_token"] == "tok1"
    assert resp.payload == []


@pytest.mark.anyio
async def test_not_found_carries_error_details(endpoints):
    body = {"timestamp": "2019-01-01T00:00:00Z", "message": "Customer with this ID not found", "details": "/api/v2/customers/9"}
    transport = _Transport(httpx.Response(404, json=body))
    async with RestServerHTTP(endpoints, transport=transport) as http:
        with pytest.raises(ResourceNotFound) as excinfo:
            await http.get("/customers/9", TOKEN, Customer)

    err = excinfo.value
    assert err.status == 404
    assert err.reason is FailureReason.RESOURCE_NOT_FOUND
    assert isinstance(err.body, ErrorDetails)
    assert err.body.message == "Customer with this ID not found"


@pytest.mark.anyio
@pytest.mark.parametrize(
    "status, reason",
    [(401, FailureReason.AUTH_FAILED), (403, FailureReason.AUTH_FAILED), (500, FailureReason.TRANSPORT_ERROR)],
)
async def test_other_non_2xx_statuses(endpoints, status, reason):
    transport = _Transport(httpx.Response(status, json={"error": "x"}))
    async with RestServerHTTP(endpoints, transport=transport) as http:
        with pytest.raises(ResourceFetchError) as excinfo:
            await http.get("/customers/1", TOKEN, Customer)

    assert excinfo.value.status == status
    assert excinfo.value.reason is reason
    assert excinfo.value.body == {"error": "x"}


@pytest.mark.anyio
@pytest.mark.parametrize("content", [b"<html>oops</html>", b'{"firstName": "no id"}', b""])
async def test_undecodable_body(endpoints, content):
    transport = _Transport(httpx.Response(200, content=content))
    async with RestServerHTTP(endpoints, transport=transport) as http:
        with pytest.raises(ResourceDecodeError) as excinfo:
            await http.get("/customers/1", TOKEN, Customer)
    assert excinfo.value.reason is FailureReason.DECODE_ERROR


@pytest.mark.anyio
async def test_unreachable_resource_server(endpoints):
    transport = _Transport(httpx.ConnectError("no route to host"))
    async with RestServerHTTP(endpoints, transport=transport) as http:
        with pytest.raises(ResourceUnreachable) as excinfo:
            await http.get("/customers/1", TOKEN, Customer)
    assert excinfo.value.stage is Stage.RESOURCE
    assert transport.calls == 1
