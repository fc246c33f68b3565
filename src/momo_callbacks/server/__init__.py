"""HTTP ingress for provider callbacks.

Components:
    - create_server: FastAPI app with the webhook routes and /health
    - serve: uvicorn runner owning TLS, the consumer task and shutdown
    - ServerConfig: Complete server configuration (pydantic-settings)
    - CallbackMetrics: Prometheus collectors
    - TLSMaterial: PEM certificate/key pair

Example:
    >>> import asyncio
    >>> from momo_callbacks.server import ServerConfig, serve
    >>> asyncio.run(serve(ServerConfig()))

Installation:
    pip install momo-callbacks

    This installs:
    - fastapi
    - uvicorn[standard]
    - pydantic-settings
    - prometheus-client
"""

from momo_callbacks.server.errors import (
    BodyTooLargeError,
    CallbackErrorCode,
    TLSConfigurationError,
)
from momo_callbacks.server.factory import ROUTE_PREFIXES, create_server
from momo_callbacks.server.models import (
    CallbackAck,
    ChannelConfig,
    ObservabilityConfig,
    ServerConfig,
    TLSConfig,
    ValidationConfig,
)
from momo_callbacks.server.observability import CallbackMetrics
from momo_callbacks.server.runner import serve
from momo_callbacks.server.tls import TLSMaterial

__all__ = [
    "ROUTE_PREFIXES",
    "BodyTooLargeError",
    "CallbackAck",
    "CallbackErrorCode",
    "CallbackMetrics",
    "ChannelConfig",
    "ObservabilityConfig",
    "ServerConfig",
    "TLSConfig",
    "TLSConfigurationError",
    "TLSMaterial",
    "ValidationConfig",
    "create_server",
    "serve",
]
