"""Prometheus metrics for the callback server.

Provides CallbackMetrics for recording received, classified and rejected
callbacks plus delivery channel health. The scrape endpoint runs on a
separate port (default 9090).

Each CallbackMetrics owns its own CollectorRegistry, so several apps can
live in one process (tests, embedded servers) without name collisions.

Example:
    >>> from momo_callbacks.server.observability.metrics import (
    ...     CallbackMetrics,
    ...     start_metrics_server,
    ... )
    >>> metrics = CallbackMetrics()
    >>> start_metrics_server(9090, metrics.registry)
    >>> metrics.record_received("/collection_request_to_pay/{category}", "REQUEST_TO_PAY")
    >>> metrics.record_classified("RequestToPaySuccess")
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from prometheus_client import CollectorRegistry, Counter, Gauge, Histogram

if TYPE_CHECKING:
    from collections.abc import Awaitable, Callable

    from starlette.requests import Request
    from starlette.responses import Response

logger = logging.getLogger(__name__)

__all__ = ["CallbackMetrics", "create_metrics_middleware", "start_metrics_server"]


class CallbackMetrics:
    """Collects Prometheus metrics for the callback server.

    Metrics collected:
    - momo_callback_received_total: Webhook requests by route and category
    - momo_callback_classified_total: Classified callbacks by variant
    - momo_callback_parse_failures_total: Unparseable/unclassified bodies
    - momo_callback_enqueue_failures_total: Envelopes dropped by error code
    - momo_callback_body_too_large_total: Requests rejected with 413
    - momo_callback_queue_depth: Envelopes waiting for the consumer
    - momo_callback_ack_latency_seconds: Time from request to acknowledgment
    - momo_callback_http_requests_total: All HTTP responses by route and status

    Example:
        >>> metrics = CallbackMetrics()
        >>> metrics.record_parse_failure("E510")
        >>> metrics.set_queue_depth(3)
    """

    def __init__(
        self, registry: CollectorRegistry | None = None, enabled: bool = True
    ) -> None:
        """Initialize metrics collector.

        Args:
            registry: Registry to register collectors in (a new private
                registry by default)
            enabled: When False every ``record_*`` call is a no-op
        """
        self._enabled = enabled
        self.registry = registry if registry is not None else CollectorRegistry()

        self.received = Counter(
            "momo_callback_received_total",
            "Webhook requests received",
            ["route", "category"],
            registry=self.registry,
        )
        self.classified = Counter(
            "momo_callback_classified_total",
            "Callbacks classified per variant",
            ["variant"],
            registry=self.registry,
        )
        self.parse_failures = Counter(
            "momo_callback_parse_failures_total",
            "Callback bodies that could not be classified",
            ["code"],
            registry=self.registry,
        )
        self.enqueue_failures = Counter(
            "momo_callback_enqueue_failures_total",
            "Classified callbacks that could not be queued",
            ["code"],
            registry=self.registry,
        )
        self.body_too_large = Counter(
            "momo_callback_body_too_large_total",
            "Requests rejected because the body exceeded the size limit",
            registry=self.registry,
        )
        self.queue_depth = Gauge(
            "momo_callback_queue_depth",
            "Envelopes waiting for the consumer",
            registry=self.registry,
        )
        self.ack_latency = Histogram(
            "momo_callback_ack_latency_seconds",
            "Seconds from request start to acknowledgment",
            ["route"],
            buckets=(0.001, 0.005, 0.01, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0, 10.0),
            registry=self.registry,
        )
        self.http_requests = Counter(
            "momo_callback_http_requests_total",
            "HTTP responses by route, method and status",
            ["route", "method", "status"],
            registry=self.registry,
        )

    @property
    def enabled(self) -> bool:
        """Check if metrics collection is enabled."""
        return self._enabled

    def record_received(self, route: str, category: str) -> None:
        """Record a webhook request.

        Args:
            route: Route path template (e.g. "/disbursement_transfer/{category}")
            category: Category token resolved from the path
        """
        if not self._enabled:
            return
        self.received.labels(route=route, category=category).inc()

    def record_classified(self, variant: str) -> None:
        if not self._enabled:
            return
        self.classified.labels(variant=variant).inc()

    def record_parse_failure(self, code: str) -> None:
        """Record a body that failed classification.

        Args:
            code: Error code value (E510 or E511)
        """
        if not self._enabled:
            return
        self.parse_failures.labels(code=code).inc()

    def record_enqueue_failure(self, code: str) -> None:
        """Record an envelope that never reached the channel.

        Args:
            code: Error code value (E520 or E521)
        """
        if not self._enabled:
            return
        self.enqueue_failures.labels(code=code).inc()

    def record_body_too_large(self) -> None:
        if not self._enabled:
            return
        self.body_too_large.inc()

    def set_queue_depth(self, depth: int) -> None:
        if not self._enabled:
            return
        self.queue_depth.set(depth)

    def observe_ack_latency(self, route: str, seconds: float) -> None:
        if not self._enabled:
            return
        self.ack_latency.labels(route=route).observe(seconds)

    def record_request(self, route: str, method: str, status: int) -> None:
        if not self._enabled:
            return
        self.http_requests.labels(route=route, method=method, status=str(status)).inc()


def _route_template(request: Request) -> str:
    """Return the matched route's path template, falling back to the raw path."""
    route = request.scope.get("route")
    path = getattr(route, "path", None)
    return path if isinstance(path, str) else request.url.path


def create_metrics_middleware(
    metrics: CallbackMetrics | None,
) -> Callable[[Request, Callable[[Request], Awaitable[Response]]], Awaitable[Response]]:
    """Create Starlette middleware that counts HTTP responses.

    Routes are labelled by path template so arbitrary category segments do
    not create new label values.

    Args:
        metrics: CallbackMetrics instance or None

    Returns:
        Starlette middleware callable.

    Example:
        >>> from starlette.middleware.base import BaseHTTPMiddleware
        >>> app.add_middleware(BaseHTTPMiddleware, dispatch=create_metrics_middleware(metrics))
    """

    async def metrics_middleware(
        request: Request,
        call_next: Callable[[Request], Awaitable[Response]],
    ) -> Response:
        """Record request status per route."""
        if metrics is None or not metrics.enabled:
            return await call_next(request)

        try:
            response = await call_next(request)
        except Exception:
            metrics.record_request(_route_template(request), request.method, 500)
            raise
        metrics.record_request(
            _route_template(request), request.method, response.status_code
        )
        return response

    return metrics_middleware


def start_metrics_server(port: int = 9090, registry: CollectorRegistry | None = None) -> bool:
    """Start Prometheus metrics HTTP server on separate port.

    Runs in a background thread.

    Args:
        port: Port to listen on (default: 9090)
        registry: Registry to expose (the global default registry if None)

    Returns:
        True if server started successfully, False otherwise.
    """
    from prometheus_client import REGISTRY, start_http_server

    try:
        start_http_server(port, registry=registry if registry is not None else REGISTRY)
    except OSError as e:
        if "Address already in use" in str(e):
            logger.error(
                f"Metrics port {port} already in use by another process. "
                "Metrics will NOT be exposed. Use a different port."
            )
            return False
        logger.error(f"Failed to start metrics server: {e}")
        return False
    logger.info(f"Prometheus metrics server started on port {port}")
    return True


