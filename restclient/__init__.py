"""REST server client package.

Re-exports the async façade, its result types and the blocking wrapper.
"""

from integrations.restserver.config import ClientSettings, Credentials, Endpoints, load_settings
from integrations.restserver.errors import FailureReason, RestClientError, Stage
from integrations.restserver.models import AccessTokenInfo, Customer, Order, Product
from integrations.restserver.resources_client import FetchFailed, FetchOk, RestServerClient

from ._client_impl import RestClient

__all__ = [
    "AccessTokenInfo",
    "ClientSettings",
    "Credentials",
    "Customer",
    "Endpoints",
    "FailureReason",
    "FetchFailed",
    "FetchOk",
    "Order",
    "Product",
    "RestClient",
    "RestClientError",
    "RestServerClient",
    "Stage",
    "load_settings",
]
