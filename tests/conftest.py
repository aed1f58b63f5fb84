import pytest

from common import secrets as secrets_module
from integrations.restserver.config import ClientSettings, Credentials, Endpoints


# Every test runs against in-process transports (MockTransport / ASGITransport).


@pytest.fixture
def anyio_backend():
    return "asyncio"


# ---------------------------------------------------------------------------
# Default credentials for client tests
# ---------------------------------------------------------------------------


@pytest.fixture(autouse=True)
def _secrets() -> None:
    """Provide default secrets for tests via the secrets manager."""

    secrets_module.secrets.set_override(
        {
            "REST_CLIENT_ID": "abc",
            "REST_CLIENT_SECRET": "xyz",
            "REST_USERNAME": "bob",
            "REST_PASSWORD": "pw",
        }
    )
    yield
    secrets_module.secrets.set_override({})


@pytest.fixture
def credentials() -> Credentials:
    return Credentials(client_id="abc", client_secret="xyz", username="bob", password="pw")


@pytest.fixture
def endpoints() -> Endpoints:
    return Endpoints(auth_base_url="https://auth.test", resource_base_url="https://api.test/api/v2")


@pytest.fixture
def settings(credentials, endpoints) -> ClientSettings:
    return ClientSettings(credentials=credentials, endpoints=endpoints)
