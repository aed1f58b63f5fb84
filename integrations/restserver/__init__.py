"""Client integration for the customer/order/product REST server (API v2)."""
import os
from typing import Final

AUTH_BASE_URL: Final[str] = os.getenv("REST_AUTH_BASE_URL", "https://localhost:8099")
RESOURCE_BASE_URL: Final[str] = os.getenv("REST_RESOURCE_BASE_URL", "https://localhost:8099/api/v2")
TOKEN_PATH: Final[str] = "/oauth/token"
