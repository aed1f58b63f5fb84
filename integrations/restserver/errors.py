"""Failure taxonomy for token exchange and resource fetches.

Every error records the stage that failed (``token`` or ``resource``) and a
coarse reason the façade reports back to callers.
"""
from __future__ import annotations

from enum import Enum
from typing import Any, Optional

__all__ = [
    "Stage",
    "FailureReason",
    "RestClientError",
    "AuthError",
    "AuthEndpointUnreachable",
    "AuthRejected",
    "TokenAbsent",
    "TokenDecodeError",
    "ResourceError",
    "ResourceUnreachable",
    "ResourceNotFound",
    "ResourceFetchError",
    "ResourceDecodeError",
    "DeadlineExceeded",
]


class Stage(str, Enum):
    TOKEN = "token"
    RESOURCE = "resource"


class FailureReason(str, Enum):
    AUTH_FAILED = "auth-failed"
    RESOURCE_NOT_FOUND = "resource-not-found"
    TRANSPORT_ERROR = "transport-error"
    DECODE_ERROR = "decode-error"


class RestClientError(Exception):
    stage: Stage
    reason: FailureReason

    def __init__(self, message: str, *, status: Optional[int] = None, body: Any = None) -> None:
        super().__init__(message)
        self.status = status
        self.body = body


# --- token stage ---------------------------------------------------------------


class AuthError(RestClientError):
    stage = Stage.TOKEN
    reason = FailureReason.AUTH_FAILED


class AuthEndpointUnreachable(AuthError):
    """The authorization server could not be reached."""

    reason = FailureReason.TRANSPORT_ERROR


class AuthRejected(AuthError):
    """The authorization server answered with a non-2xx status."""


class TokenAbsent(AuthError):
    """No usable access token is available for an authenticated call."""


class TokenDecodeError(AuthError):
    reason = FailureReason.DECODE_ERROR


# --- resource stage ------------------------------------------------------------


class ResourceError(RestClientError):
    stage = Stage.RESOURCE
    reason = FailureReason.TRANSPORT_ERROR


class ResourceUnreachable(ResourceError):
    """The resource server could not be reached."""


class ResourceNotFound(ResourceError):
    reason = FailureReason.RESOURCE_NOT_FOUND


class ResourceFetchError(ResourceError):
    """Non-2xx answer other than 404."""

    def __init__(self, message: str, *, status: Optional[int] = None, body: Any = None) -> None:
        super().__init__(message, status=status, body=body)
        if status in (401, 403):
            self.reason = FailureReason.AUTH_FAILED


class ResourceDecodeError(ResourceError):
    reason = FailureReason.DECODE_ERROR


class DeadlineExceeded(RestClientError):
    """The caller's deadline elapsed; ``stage`` is the step that was in flight."""

    reason = FailureReason.TRANSPORT_ERROR

    def __init__(self, message: str, *, stage: Stage) -> None:
        super().__init__(message)
        self.stage = stage
