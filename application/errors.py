"""Error kinds raised by the chat session service.

Routers map these to HTTP status codes and a ``{"error": ...}`` body:

- ValidationError -> 400 (bad input, nothing was written)
- StorageError    -> 500 (persistence fault)
- GatewayError    -> 429 for rate-limit / quota, 500 otherwise
"""

from enum import Enum
from typing import Optional


class ChatServiceError(Exception):
    """Base class for chat service failures."""


class ValidationError(ChatServiceError):
    """Client input was missing or malformed."""


class StorageError(ChatServiceError):
    """The session store failed while running ``operation``."""

    def __init__(self, operation: str, cause: Optional[BaseException] = None) -> None:
        self.operation = operation
        self.cause = cause
        detail = f"{operation} failed"
        if cause is not None:
            detail = f"{detail}: {cause}"
        super().__init__(detail)


class GatewayErrorKind(str, Enum):
    RATE_LIMITED = "rate_limited"
    QUOTA_EXCEEDED = "quota_exceeded"
    TIMEOUT = "timeout"
    OTHER = "other"


class GatewayError(ChatServiceError):
    """The completion provider call failed."""

    def __init__(self, message: str, kind: GatewayErrorKind = GatewayErrorKind.OTHER) -> None:
        self.message = message
        self.kind = kind
        super().__init__(message)

    @property
    def is_throttled(self) -> bool:
        """True for failures the client should retry later (HTTP 429)."""
        return self.kind in (GatewayErrorKind.RATE_LIMITED, GatewayErrorKind.QUOTA_EXCEEDED)


def classify_gateway_message(message: str) -> GatewayErrorKind:
    """Best-effort classification from an error message.

    Only used when the provider SDK does not expose a structured error.
    """
    text = (message or "").lower()
    if "rate limit" in text:
        return GatewayErrorKind.RATE_LIMITED
    if "quota" in text:
        return GatewayErrorKind.QUOTA_EXCEEDED
    return GatewayErrorKind.OTHER
