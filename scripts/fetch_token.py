"""Utility script to obtain a password-grant access token from the REST server."""

import asyncio
import sys

from common.logging import configure_logging
from common.secrets import MissingSecret
from integrations.restserver.auth import fetch_token
from integrations.restserver.config import load_settings
from integrations.restserver.errors import RestClientError

if __name__ == "__main__":
    configure_logging(service_name="fetch-token")
    try:
        settings = load_settings()
    except MissingSecret as exc:
        raise SystemExit(f"Set {exc.args[0]} in the secrets file (SECRETS_PATH)")
    try:
        info = asyncio.run(fetch_token(settings.credentials, settings.endpoints))
    except RestClientError as exc:
        raise SystemExit(f"token request failed ({exc.reason.value}): {exc}")
    if info is None:
        raise SystemExit("authorization server returned no token")
    print(info.model_dump_json(indent=2))
    sys.exit(0)
