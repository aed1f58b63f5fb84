import base64

import pytest
from fastapi.testclient import TestClient

from common.auth import TokenRegistry, parse_basic_auth
from mocks.mock_rest_server import CUSTOMER_FIELDS, RecordStore, create_app, to_dto


def _basic(client_id="trusted-client", secret="secret"):
    raw = base64.b64encode(f"{client_id}:{secret}".encode()).decode()
    return {"Authorization": f"Basic {raw}"}


def _token(client, username="admin", password="admin"):
    r = client.post(
        "/oauth/token",
        params={"grant_type": "password", "username": username, "password": password},
        headers=_basic(),
    )
    assert r.status_code == 200, r.text
    return r.json()["access_token"]


@pytest.fixture()
def client():
    return TestClient(create_app())


def test_password_grant_issues_full_token(client):
    r = client.post(
        "/oauth/token",
        params={"grant_type": "password", "username": "admin", "password": "admin"},
        headers=_basic(),
    )
    assert r.status_code == 200
    body = r.json()
    assert set(body) == {"access_token", "token_type", "refresh_token", "expires_in", "scope"}
    assert body["token_type"] == "bearer"
    assert body["expires_in"] == 3600


@pytest.mark.parametrize(
    "headers, params, status, error",
    [
        (_basic(secret="wrong"), {"grant_type": "password", "username": "admin", "password": "admin"}, 401, "unauthorized"),
        ({}, {"grant_type": "password", "username": "admin", "password": "admin"}, 401, "unauthorized"),
        (_basic(), {"grant_type": "password", "username": "admin", "password": "nope"}, 401, "invalid_grant"),
        (_basic(), {"grant_type": "client_credentials"}, 400, "unsupported_grant_type"),
    ],
)
def test_token_endpoint_rejections(client, headers, params, status, error):
    r = client.post("/oauth/token", params=params, headers=headers)
    assert r.status_code == status
    assert r.json()["error"] == error


def test_resources_require_valid_token(client):
    assert client.get("/api/v2/customers/1").status_code == 401
    assert client.get("/api/v2/customers/1", params={"access_token": "forged"}).status_code == 401


def test_customer_is_returned_as_camel_case_dto(client):
    token = _token(client)
    r = client.get("/api/v2/customers/1", params={"access_token": token})
    assert r.status_code == 200
    assert r.json() == {"customerId": 1, "firstName": "John", "lastName": "Smith", "age": 35}


def test_unknown_customer_returns_error_details(client):
    token = _token(client)
    r = client.get("/api/v2/customers/999", params={"access_token": token})
    assert r.status_code == 404
    body = r.json()
    assert body["message"] == "Customer with this ID not found"
    assert body["details"] == "/api/v2/customers/999"
    assert "timestamp" in body


def test_orders_of_unknown_customer_are_not_found(client):
    token = _token(client)
    r = client.get("/api/v2/customers/999/orders", params={"access_token": token})
    assert r.status_code == 404


def test_order_includes_details(client):
    token = _token(client)
    r = client.get("/api/v2/orders/10100", params={"access_token": token})
    assert r.status_code == 200
    body = r.json()
    assert body["customerId"] == 1
    assert [d["productCode"] for d in body["orderDetails"]] == ["S10_1678", "S10_1949"]


def test_report_is_paginated(client):
    token = _token(client)
    full = client.get("/api/v2/reports/customers", params={"customerId": 1, "access_token": token}).json()
    page = client.get(
        "/api/v2/reports/customers",
        params={"customerId": 1, "page": 1, "size": 2, "access_token": token},
    ).json()
    assert len(full) == 3
    assert page == full[2:]


def test_expired_token_is_rejected():
    now = [0.0]
    app = create_app(tokens=TokenRegistry(ttl=10, clock=lambda: now[0]))
    client = TestClient(app)
    token = _token(client)
    assert client.get("/api/v2/products/S10_1678", params={"access_token": token}).status_code == 200
    now[0] = 11
    assert client.get("/api/v2/products/S10_1678", params={"access_token": token}).status_code == 401


def test_empty_store_and_field_table():
    client = TestClient(create_app(RecordStore()))
    token = _token(client)
    assert client.get("/api/v2/customers/1", params={"access_token": token}).status_code == 404
    assert to_dto({"customer_id": 5, "first_name": "A"}, CUSTOMER_FIELDS) == {
        "customerId": 5,
        "firstName": "A",
        "lastName": None,
        "age": None,
    }


@pytest.mark.parametrize("header", [None, "Bearer x", "Basic !!!", "Basic " + base64.b64encode(b"nocolon").decode()])
def test_parse_basic_auth_rejects_garbage(header):
    assert parse_basic_auth(header) is None
