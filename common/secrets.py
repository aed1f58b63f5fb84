"""Credential storage backed by a JSON secrets file.

The REST client reads its OAuth2 client and user credentials through this
module so nothing sensitive has to live in environment variables or in the
source tree.
"""
from __future__ import annotations

import json
import logging
import os
from pathlib import Path
from typing import Any, Mapping, Optional

_LOG = logging.getLogger(__name__)

__all__ = ["SecretsManager", "MissingSecret", "secrets"]


class MissingSecret(KeyError):
    """A required secret is absent or blank."""


class SecretsManager:
    """Load secrets from a JSON file pointed to by ``SECRETS_PATH``.

    The file is read once and cached. Tests replace or extend the in-memory
    cache via :meth:`set_override` and :meth:`update`.
    """

    def __init__(self, path: str | Path | None = None) -> None:
        self._path = Path(
            path or os.getenv("SECRETS_PATH", "/var/run/secrets/rest-client.json")
        )
        self._cache: dict[str, Any] | None = None

    def _load(self) -> dict[str, Any]:
        if self._cache is None:
            try:
                with self._path.open("r", encoding="utf-8") as fh:
                    data = json.load(fh)
            except FileNotFoundError:
                _LOG.debug("secrets file %s not found; starting empty", self._path)
                data = {}
            if not isinstance(data, dict):
                raise ValueError(f"secrets file {self._path} must hold a JSON object")
            self._cache = data
        return self._cache

    def get(self, key: str, default: Optional[Any] = None) -> Any:
        """Return secret value for *key* or *default* if missing."""

        return self._load().get(key, default)

    def require(self, key: str) -> str:
        value = self._load().get(key)
        if value is None or not str(value).strip():
            raise MissingSecret(key)
        return str(value)

    def set_override(self, data: Mapping[str, Any]) -> None:
        """Replace the entire secret cache (test helper)."""

        self._cache = dict(data)

    def update(self, data: Mapping[str, Any]) -> None:
        """Merge *data* into the existing cache (test helper)."""

        current = self._load()
        current.update(data)
        self._cache = current


# Process default
secrets = SecretsManager()

