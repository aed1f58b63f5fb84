"""Immutable settings passed to the token client, dispatcher and façade."""
from __future__ import annotations

import os
from dataclasses import dataclass, field

from common.secrets import SecretsManager, secrets as default_secrets

from . import AUTH_BASE_URL, RESOURCE_BASE_URL, TOKEN_PATH

__all__ = ["Credentials", "Endpoints", "ClientSettings", "load_credentials", "load_settings"]


@dataclass(frozen=True)
class Credentials:
    """OAuth2 client credentials plus the resource owner's login."""

    client_id: str
    client_secret: str = field(repr=False)
    username: str
    password: str = field(repr=False)

    def __post_init__(self) -> None:
        if not self.client_id:
            raise ValueError("client_id must not be empty")
        if not self.username:
            raise ValueError("username must not be empty")


@dataclass(frozen=True)
class Endpoints:
    auth_base_url: str = AUTH_BASE_URL
    resource_base_url: str = RESOURCE_BASE_URL

    @property
    def token_url(self) -> str:
        return f"{self.auth_base_url.rstrip('/')}{TOKEN_PATH}"

    def resource_url(self, path: str) -> str:
        path = path if path.startswith("/") else f"/{path}"
        return f"{self.resource_base_url.rstrip('/')}{path}"


@dataclass(frozen=True)
class ClientSettings:
    credentials: Credentials
    endpoints: Endpoints = field(default_factory=Endpoints)
    timeout: float = 10.0
    cache_tokens: bool = False


def _flag(name: str, default: str = "false") -> bool:
    return os.getenv(name, default).lower() in ("1", "true", "yes")


def load_credentials(store: SecretsManager | None = None) -> Credentials:
    """Read credentials from the secrets file; raises ``MissingSecret``."""

    store = store or default_secrets
    return Credentials(
        client_id=store.require("REST_CLIENT_ID"),
        client_secret=store.get("REST_CLIENT_SECRET", "") or "",
        username=store.require("REST_USERNAME"),
        password=store.get("REST_PASSWORD", "") or "",
    )


def load_settings(store: SecretsManager | None = None) -> ClientSettings:
    return ClientSettings(
        credentials=load_credentials(store),
        endpoints=Endpoints(
            auth_base_url=os.getenv("REST_AUTH_BASE_URL", AUTH_BASE_URL),
            resource_base_url=os.getenv("REST_RESOURCE_BASE_URL", RESOURCE_BASE_URL),
        ),
        timeout=float(os.getenv("REST_HTTP_TIMEOUT", "10")),
        cache_tokens=_flag("REST_TOKEN_CACHE"),
    )
