"""Observability for the callback server.

Prometheus metrics are exposed on a separate port when enabled.

Example:
    >>> from momo_callbacks.server.observability import CallbackMetrics, start_metrics_server
    >>> metrics = CallbackMetrics()
    >>> start_metrics_server(9090, metrics.registry)
"""

from momo_callbacks.server.observability.metrics import (
    CallbackMetrics,
    create_metrics_middleware,
    start_metrics_server,
)

__all__ = [
    "CallbackMetrics",
    "create_metrics_middleware",
    "start_metrics_server",
]
