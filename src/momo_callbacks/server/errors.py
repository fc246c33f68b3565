"""Error code catalog for the callback server.

Error Code Ranges:
    E50x: Startup errors (fatal)
    E51x: Payload errors (logged, acknowledged)
    E52x: Delivery errors (logged, acknowledged)
    E53x: Request errors (rejected)

Only ``BODY_TOO_LARGE`` ever changes the HTTP response; every other failure
is acknowledged with 200 so the provider does not retry, and is surfaced
through logs and metrics instead.

Example:
    >>> from momo_callbacks.server.errors import CallbackErrorCode, create_error_response
    >>> create_error_response(CallbackErrorCode.BODY_TOO_LARGE, details={"limit": 1024})
    {'error': 'request_too_large', 'message': 'Request body exceeds size limit', 'details': {'limit': 1024}}
"""

from __future__ import annotations

from enum import Enum
from typing import Any

__all__ = [
    "CALLBACK_ERROR_REGISTRY",
    "BodyTooLargeError",
    "CallbackErrorCode",
    "TLSConfigurationError",
    "create_error_response",
    "get_callback_error_message",
    "get_callback_error_status",
    "is_recoverable",
]


class CallbackErrorCode(str, Enum):
    """Callback server error codes (E5xx range)."""

    # E50x - Startup errors
    TLS_CONFIGURATION_INVALID = "E501"

    # E51x - Payload errors
    PAYLOAD_UNPARSEABLE = "E510"
    PAYLOAD_UNCLASSIFIED = "E511"

    # E52x - Delivery errors
    CHANNEL_FULL = "E520"
    CHANNEL_CLOSED = "E521"

    # E53x - Request errors
    BODY_TOO_LARGE = "E530"


# Error registry mapping codes to HTTP status and metadata
CALLBACK_ERROR_REGISTRY: dict[CallbackErrorCode, dict[str, Any]] = {
    # E50x - Startup errors
    CallbackErrorCode.TLS_CONFIGURATION_INVALID: {
        "error": "tls_configuration_invalid",
        "http_status": 500,
        "recoverable": False,
        "message": "TLS certificate or key could not be loaded",
    },
    # E51x - Payload errors
    CallbackErrorCode.PAYLOAD_UNPARSEABLE: {
        "error": "payload_unparseable",
        "http_status": 200,
        "recoverable": False,
        "message": "Callback body is not a JSON object",
    },
    CallbackErrorCode.PAYLOAD_UNCLASSIFIED: {
        "error": "payload_unclassified",
        "http_status": 200,
        "recoverable": False,
        "message": "Callback body does not match any known callback shape",
    },
    # E52x - Delivery errors
    CallbackErrorCode.CHANNEL_FULL: {
        "error": "channel_full",
        "http_status": 200,
        "recoverable": True,
        "message": "Delivery channel stayed full past the enqueue timeout",
    },
    CallbackErrorCode.CHANNEL_CLOSED: {
        "error": "channel_closed",
        "http_status": 200,
        "recoverable": False,
        "message": "Delivery channel is closed",
    },
    # E53x - Request errors
    CallbackErrorCode.BODY_TOO_LARGE: {
        "error": "request_too_large",
        "http_status": 413,
        "recoverable": False,
        "message": "Request body exceeds size limit",
    },
}


class TLSConfigurationError(Exception):
    """TLS certificate/key material is missing or invalid.

    Raised at startup; the server does not start.
    """

    code = CallbackErrorCode.TLS_CONFIGURATION_INVALID


class BodyTooLargeError(Exception):
    """Request body exceeded the configured limit."""

    code = CallbackErrorCode.BODY_TOO_LARGE

    def __init__(self, limit: int, received: int | None = None) -> None:
        self.limit = limit
        self.received = received
        super().__init__(f"Request body must be less than {limit} bytes")


def get_callback_error_status(code: CallbackErrorCode) -> int:
    """Get HTTP status for a callback error code."""
    entry = CALLBACK_ERROR_REGISTRY.get(code)
    if entry is None:
        return 500
    status = entry.get("http_status")
    return int(status) if status is not None else 500


def get_callback_error_message(code: CallbackErrorCode) -> str:
    """Get default message for a callback error code."""
    entry = CALLBACK_ERROR_REGISTRY.get(code)
    if entry is None:
        return "Unknown callback error"
    message = entry.get("message")
    return str(message) if message is not None else "Unknown callback error"


def is_recoverable(code: CallbackErrorCode) -> bool:
    """Whether the condition behind ``code`` can clear without operator action."""
    return bool(CALLBACK_ERROR_REGISTRY[code]["recoverable"])


def create_error_response(
    code: CallbackErrorCode,
    message: str | None = None,
    details: dict[str, Any] | None = None,
) -> dict[str, Any]:
    """Create an error response body.

    Args:
        code: The error code.
        message: Optional custom message (uses default if not provided).
        details: Optional additional context.

    Returns:
        Dictionary with ``error``, ``message`` and ``details`` keys.
    """
    metadata = CALLBACK_ERROR_REGISTRY[code]
    return {
        "error": metadata["error"],
        "message": message or metadata["message"],
        "details": details or {},
    }
