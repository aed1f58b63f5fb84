"""Fetch one customer by ID: ``python scripts/fetch_customer.py <customer_id>``."""

import sys

from common.logging import configure_logging
from common.secrets import MissingSecret
from restclient import RestClient


def main():
    if len(sys.argv) != 2 or not sys.argv[1].isdigit() or int(sys.argv[1]) < 1:
        print("Usage: python scripts/fetch_customer.py <customer_id>")
        sys.exit(1)

    configure_logging(service_name="fetch-customer")
    try:
        client = RestClient()
    except MissingSecret as exc:
        raise SystemExit(f"Set {exc.args[0]} in the secrets file (SECRETS_PATH)")

    result = client.get_customer(int(sys.argv[1]))
    if not result.ok:
        print(f"{result.stage.value} stage failed: {result.reason.value} ({result.error})", file=sys.stderr)
        sys.exit(1)
    print(f"HTTP {result.status}")
    print(result.payload.model_dump_json(by_alias=True, indent=2))


if __name__ == "__main__":
    main()
