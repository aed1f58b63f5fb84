"""In-memory stand-in for the customer/order/product REST server.

Serves the password-grant token endpoint and the ``/api/v2`` read endpoints
the client uses. Records are stored snake_case and converted to the camelCase
transport DTOs through explicit field tables.

Run locally with ``uvicorn mocks.mock_rest_server:app --port 8099``.
"""
from __future__ import annotations

import copy
from datetime import datetime, timezone
from typing import Any, Dict, List, Mapping, Optional

from fastapi import APIRouter, Depends, FastAPI, Header, Query, Request
from fastapi.responses import JSONResponse

from common.auth import TokenRegistry, parse_basic_auth, require_access_token

# --- record <-> DTO field tables ----------------------------------------------

CUSTOMER_FIELDS: Mapping[str, str] = {
    "customer_id": "customerId",
    "first_name": "firstName",
    "last_name": "lastName",
    "age": "age",
}

PRODUCT_FIELDS: Mapping[str, str] = {
    "product_code": "productCode",
    "product_name": "productName",
    "product_line": "productLine",
    "product_vendor": "productVendor",
    "price": "price",
}

ORDER_FIELDS: Mapping[str, str] = {
    "order_number": "orderNumber",
    "customer_id": "customerId",
    "order_date": "orderDate",
    "required_date": "requiredDate",
    "shipped_date": "shippedDate",
    "status": "status",
}

ORDER_DETAILS_FIELDS: Mapping[str, str] = {
    "product_code": "productCode",
    "quantity_ordered": "quantityOrdered",
    "price": "price",
}


def to_dto(record: Mapping[str, Any], fields: Mapping[str, str]) -> Dict[str, Any]:
    return {dto_key: record.get(column) for column, dto_key in fields.items()}


# --- Sample Data ---

SAMPLE_CUSTOMERS: Dict[int, Dict[str, Any]] = {
    1: {"customer_id": 1, "first_name": "John", "last_name": "Smith", "age": 35},
    2: {"customer_id": 2, "first_name": "Jane", "last_name": "Doe", "age": 28},
    42: {"customer_id": 42, "first_name": "Jane", "last_name": "Roe", "age": 41},
}

SAMPLE_PRODUCTS: Dict[str, Dict[str, Any]] = {
    "S10_1678": {
        "product_code": "S10_1678",
        "product_name": "1969 Harley Davidson Ultimate Chopper",
        "product_line": "Motorcycles",
        "product_vendor": "Min Lin Diecast",
        "price": "95.70",
    },
    "S10_1949": {
        "product_code": "S10_1949",
        "product_name": "1952 Alpine Renault 1300",
        "product_line": "Classic Cars",
        "product_vendor": "Classic Metal Creations",
        "price": "214.30",
    },
}

SAMPLE_ORDERS: Dict[int, Dict[str, Any]] = {
    10100: {
        "order_number": 10100,
        "customer_id": 1,
        "order_date": "2018-01-06T00:00:00",
        "required_date": "2018-01-13T00:00:00",
        "shipped_date": "2018-01-10T00:00:00",
        "status": "Shipped",
        "details": [
            {"product_code": "S10_1678", "quantity_ordered": 30, "price": "136.00"},
            {"product_code": "S10_1949", "quantity_ordered": 2, "price": "214.30"},
        ],
    },
    10101: {
        "order_number": 10101,
        "customer_id": 1,
        "order_date": "2018-01-09T00:00:00",
        "required_date": "2018-01-18T00:00:00",
        "shipped_date": None,
        "status": "In Process",
        "details": [
            {"product_code": "S10_1949", "quantity_ordered": 1, "price": "214.30"},
        ],
    },
}

SAMPLE_CLIENTS: Dict[str, str] = {"trusted-client": "secret"}
SAMPLE_USERS: Dict[str, str] = {"admin": "admin", "user": "password"}


class RecordNotFound(Exception):
    """No record exists for the requested key."""


class RecordStore:
    def __init__(
        self,
        customers: Optional[Dict[int, Dict[str, Any]]] = None,
        orders: Optional[Dict[int, Dict[str, Any]]] = None,
        products: Optional[Dict[str, Dict[str, Any]]] = None,
    ) -> None:
        self.customers = customers if customers is not None else {}
        self.orders = orders if orders is not None else {}
        self.products = products if products is not None else {}

    @classmethod
    def seeded(cls) -> "RecordStore":
        return cls(
            copy.deepcopy(SAMPLE_CUSTOMERS),
            copy.deepcopy(SAMPLE_ORDERS),
            copy.deepcopy(SAMPLE_PRODUCTS),
        )

    def customer(self, customer_id: int) -> Dict[str, Any]:
        record = self.customers.get(customer_id)
        if record is None:
            raise RecordNotFound("Customer with this ID not found")
        return record

    def order(self, order_number: int) -> Dict[str, Any]:
        record = self.orders.get(order_number)
        if record is None:
            raise RecordNotFound("Order with this number not found")
        return record

    def product(self, product_code: str) -> Dict[str, Any]:
        record = self.products.get(product_code)
        if record is None:
            raise RecordNotFound("Product with this code not found")
        return record

    def orders_for_customer(self, customer_id: int) -> List[Dict[str, Any]]:
        self.customer(customer_id)
        return [o for o in self.orders.values() if o["customer_id"] == customer_id]


def order_dto(record: Mapping[str, Any]) -> Dict[str, Any]:
    dto = to_dto(record, ORDER_FIELDS)
    dto["orderDetails"] = [to_dto(d, ORDER_DETAILS_FIELDS) for d in record.get("details", [])]
    return dto


def report_rows(store: RecordStore, customer_id: int) -> List[Dict[str, Any]]:
    rows: List[Dict[str, Any]] = []
    for order in sorted(store.orders_for_customer(customer_id), key=lambda o: o["order_number"]):
        for line in order.get("details", []):
            product = store.products.get(line["product_code"], {})
            rows.append(
                {
                    "customerId": customer_id,
                    "orderNumber": order["order_number"],
                    "productCode": line["product_code"],
                    "productName": product.get("product_name"),
                    "quantityOrdered": line["quantity_ordered"],
                    "price": line["price"],
                }
            )
    return rows


def _oauth_error(status_code: int, error: str, description: str) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content={"error": error, "error_description": description},
    )


def _store(request: Request) -> RecordStore:
    return request.app.state.store


# --- Endpoints -----------------------------------------------------------------

api = APIRouter(prefix="/api/v2", dependencies=[Depends(require_access_token)])


@api.get("/customers/{customer_id}")
def get_customer(customer_id: int, store: RecordStore = Depends(_store)) -> Dict[str, Any]:
    return to_dto(store.customer(customer_id), CUSTOMER_FIELDS)


@api.get("/customers/{customer_id}/orders")
def get_customer_orders(customer_id: int, store: RecordStore = Depends(_store)) -> List[Dict[str, Any]]:
    return [order_dto(o) for o in store.orders_for_customer(customer_id)]


@api.get("/orders/{order_number}")
def get_order(order_number: int, store: RecordStore = Depends(_store)) -> Dict[str, Any]:
    return order_dto(store.order(order_number))


@api.get("/products/{product_code}")
def get_product(product_code: str, store: RecordStore = Depends(_store)) -> Dict[str, Any]:
    return to_dto(store.product(product_code), PRODUCT_FIELDS)


@api.get("/reports/customers")
def get_customer_report(
    customerId: int,
    page: Optional[int] = Query(None, ge=0),
    size: Optional[int] = Query(None, ge=1),
    store: RecordStore = Depends(_store),
) -> List[Dict[str, Any]]:
    rows = report_rows(store, customerId)
    if page is not None and size is not None:
        rows = rows[page * size:(page + 1) * size]
    return rows


def create_app(
    store: Optional[RecordStore] = None,
    *,
    tokens: Optional[TokenRegistry] = None,
    clients: Optional[Mapping[str, str]] = None,
    users: Optional[Mapping[str, str]] = None,
) -> FastAPI:
    app = FastAPI(title="Mock REST server", version="2")
    app.state.store = store if store is not None else RecordStore.seeded()
    app.state.tokens = tokens or TokenRegistry()
    app.state.clients = dict(clients if clients is not None else SAMPLE_CLIENTS)
    app.state.users = dict(users if users is not None else SAMPLE_USERS)

    @app.exception_handler(RecordNotFound)
    async def _not_found(request: Request, exc: RecordNotFound) -> JSONResponse:
        return JSONResponse(
            status_code=404,
            content={
                "timestamp": datetime.now(timezone.utc).isoformat(),
                "message": str(exc),
                "details": request.url.path,
            },
        )

    @app.post("/oauth/token")
    def issue_token(
        request: Request,
        grant_type: str = Query(...),
        username: str = Query(""),
        password: str = Query(""),
        authorization: str | None = Header(None),
    ):
        state = request.app.state
        client = parse_basic_auth(authorization)
        if client is None or state.clients.get(client[0]) != client[1]:
            return _oauth_error(401, "unauthorized", "Full authentication is required")
        if grant_type != "password":
            return _oauth_error(400, "unsupported_grant_type", f"Unsupported grant type: {grant_type}")
        if not username or state.users.get(username) != password:
            return _oauth_error(401, "invalid_grant", "Bad credentials")
        return state.tokens.issue(username)

    app.include_router(api)
    return app


app = create_app()
