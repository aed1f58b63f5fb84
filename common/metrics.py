"""Prometheus metrics for the REST client.

Collectors are created through :func:`get_metric` so re-importing a module
(tests do this) never registers the same name twice.
"""
from __future__ import annotations

from typing import Any, Dict, Tuple, Type

from prometheus_client import Counter, Histogram

_METRICS: Dict[Tuple[Type[Any], str], Any] = {}


def get_metric(cls: Type[Any], name: str, *args, **kwargs):
    key = (cls, name)
    if key in _METRICS:
        return _METRICS[key]
    metric = cls(name, *args, **kwargs)
    _METRICS[key] = metric
    return metric


tokens_issued_total = get_metric(
    Counter, "rest_oauth_tokens_issued_total",
    "Access tokens obtained through the password grant",
    ["source"],
)

token_errors_total = get_metric(
    Counter, "rest_oauth_token_errors_total",
    "Failed or empty token exchanges",
    ["reason"],
)

resource_requests_total = get_metric(
    Counter, "rest_resource_requests_total",
    "Authenticated requests to the resource server",
    ["resource", "method", "status"],
)

resource_latency_seconds = get_metric(
    Histogram, "rest_resource_latency_seconds",
    "Latency of authenticated resource requests (seconds)",
    ["resource"],
    buckets=(0.05, 0.1, 0.25, 0.5, 1, 2, 5, 10),
)

__all__ = [
    "get_metric",
    "tokens_issued_total",
    "token_errors_total",
    "resource_requests_total",
    "resource_latency_seconds",
]
