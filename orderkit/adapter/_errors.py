"""
Request errors — everything Adapter.request() can fail with.

Upstream error bodies are passed through unmodified as the error value, so
RequestError is either a parsed payload or one of the exceptions below.
Exceptions here are returned inside Error(...), not raised.
"""

from __future__ import annotations

import copy
from dataclasses import dataclass, field
from datetime import timedelta
from typing import Any

from orderkit._types import Payload

# The upstream's 500 bodies are not guaranteed to be JSON, so this stands in.
INTERNAL_SERVER_ERROR: dict[str, Any] = {
    "errors": [
        {
            "code": "errors.server.internal",
            "title": "Internal Server Error",
            "status": 500,
        }
    ],
}


def internal_server_error() -> dict[str, Any]:
    """Fresh copy of the fixed 500 payload."""
    return copy.deepcopy(INTERNAL_SERVER_ERROR)


@dataclass(frozen=True, slots=True, eq=False)
class ResponseException(Exception):
    """
    Response could not be read or parsed.

    Carries the original response, the underlying exception and the raw
    text (when it was extracted) for diagnostics.
    """

    message: str
    response: Any = field(repr=False)
    exception: Exception | None = None
    extracted: str | None = field(default=None, repr=False)

    def __str__(self) -> str:
        return f"orderkit: {self.message}"


@dataclass(frozen=True, slots=True, eq=False)
class RequestTimeout(Exception):
    """The call did not complete in time. The server may still process it."""

    method: str
    path: str
    timeout: timedelta

    def __str__(self) -> str:
        return (
            f"orderkit: The {self.method} request to {self.path} "
            f"timed out after {self.timeout.total_seconds():g}s."
        )


@dataclass(frozen=True, slots=True, eq=False)
class TransportError(Exception):
    """The body could not be encoded, or the transport raised before a response arrived."""

    method: str
    path: str
    cause: Exception

    def __str__(self) -> str:
        return f"orderkit: The {self.method} request to {self.path} failed: {self.cause}"


type RequestError = Payload | ResponseException | RequestTimeout | TransportError


__all__ = (
    "INTERNAL_SERVER_ERROR",
    "internal_server_error",
    "ResponseException",
    "RequestTimeout",
    "TransportError",
    "RequestError",
)
