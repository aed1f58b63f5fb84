"""Transport DTOs returned by the REST server (camelCase on the wire)."""
from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

__all__ = [
    "AccessTokenInfo",
    "Customer",
    "OrderDetails",
    "Order",
    "Product",
    "CustomerReport",
    "ErrorDetails",
]


class AccessTokenInfo(BaseModel):
    """Result of a password-grant exchange. Field names match the OAuth2 body."""

    model_config = ConfigDict(frozen=True)

    access_token: str = Field(min_length=1, repr=False)
    token_type: Optional[str] = None
    refresh_token: Optional[str] = Field(default=None, repr=False)
    expires_in: Optional[int] = None
    scope: Optional[str] = None


class _DTO(BaseModel):
    # unknown fields (HATEOAS links etc.) are kept, not rejected
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="allow")


class Customer(_DTO):
    customer_id: int
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    age: Optional[int] = None


class OrderDetails(_DTO):
    product_code: str
    quantity_ordered: int
    price: Decimal


class Order(_DTO):
    order_number: int
    customer_id: Optional[int] = None
    order_date: Optional[datetime] = None
    required_date: Optional[datetime] = None
    shipped_date: Optional[datetime] = None
    status: Optional[str] = None
    order_details: List[OrderDetails] = Field(default_factory=list)


class Product(_DTO):
    product_code: str
    product_name: Optional[str] = None
    product_line: Optional[str] = None
    product_vendor: Optional[str] = None
    price: Optional[Decimal] = None


class CustomerReport(_DTO):
    """One row of the per-customer order report."""

    customer_id: int
    order_number: int
    product_code: str
    product_name: Optional[str] = None
    quantity_ordered: int
    price: Decimal


class ErrorDetails(_DTO):
    timestamp: datetime
    message: str
    details: Optional[str] = None
