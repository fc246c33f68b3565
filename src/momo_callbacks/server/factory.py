"""Server factory for the callback ingress application.

Builds a FastAPI app exposing one webhook route per provider operation plus a
liveness probe. Every webhook route is served by the same handler, which
classifies the body, wraps it in an envelope and pushes it onto the app's
delivery channel.

Example - Minimal usage:
    >>> from momo_callbacks.server import create_server
    >>> app = create_server()  # Load config from environment
    >>> channel = app.state.channel
    >>> async for envelope in channel.updates():
    ...     print(envelope.variant, envelope.category)

Example - Custom configuration:
    >>> from momo_callbacks.server.models import ChannelConfig, ServerConfig
    >>> config = ServerConfig(channel=ChannelConfig(capacity=500))
    >>> app = create_server(config)

Routes:
    GET /health:
        Liveness probe. Always HTTP 200 with plain text body ``OK``.

    POST|PUT /{prefix}/{category}:
        One route per entry of ``ROUTE_PREFIXES``. Always HTTP 200 with
        ``{"status": "success", "message": "Callback received successfully"}``
        unless the body exceeds ``validation.max_body_size`` (HTTP 413).
        Classification and delivery failures are logged and counted, never
        reported to the caller.

app.state:
    config: ServerConfig the app was built with
    channel: CallbackChannel envelopes are delivered to
    metrics: CallbackMetrics
"""

from __future__ import annotations

import logging
import time
from contextlib import asynccontextmanager
from typing import TYPE_CHECKING

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse, PlainTextResponse
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import ClientDisconnect

from momo_callbacks.callbacks.categories import CallbackCategory, classify_path
from momo_callbacks.callbacks.channel import (
    CallbackChannel,
    ChannelClosedError,
    ChannelFullError,
)
from momo_callbacks.callbacks.classifier import ParseError, classify_body
from momo_callbacks.callbacks.models import CallbackEnvelope
from momo_callbacks.server.errors import BodyTooLargeError, CallbackErrorCode
from momo_callbacks.server.middleware.validation import BodySizeValidator
from momo_callbacks.server.models import (
    CallbackAck,
    RequestTooLargeResponse,
    ServerConfig,
)
from momo_callbacks.server.observability.metrics import (
    CallbackMetrics,
    create_metrics_middleware,
    start_metrics_server,
)

if TYPE_CHECKING:
    from collections.abc import AsyncGenerator

logger = logging.getLogger(__name__)

__all__ = ["ROUTE_PREFIXES", "create_server"]

# One webhook route per provider operation, in the order they are registered.
ROUTE_PREFIXES: tuple[str, ...] = (
    "collection_request_to_pay",
    "collection_request_to_withdraw_v1",
    "collection_request_to_withdraw_v2",
    "collection_invoice",
    "collection_payment",
    "collection_preapproval",
    "disbursement_deposit_v1",
    "disbursement_deposit_v2",
    "disbursement_refund_v1",
    "disbursement_refund_v2",
    "disbursement_transfer",
    "remittance_cash_transfer",
    "remittance_transfer",
)

_ACK = CallbackAck().model_dump()


def _remote_address(request: Request) -> str:
    """Caller address as ``host:port``."""
    client = request.client
    if client is None:
        return "unknown"
    return f"{client.host}:{client.port}"


def _truncate(text: str, limit: int) -> str:
    if len(text) <= limit:
        return text
    return f"{text[:limit]}... ({len(text) - limit} more chars)"


def create_server(
    config: ServerConfig | None = None,
    channel: CallbackChannel | None = None,
    metrics: CallbackMetrics | None = None,
) -> FastAPI:
    """Create the callback ingress FastAPI application.

    Args:
        config: Server configuration (loads from environment if None)
        channel: Delivery channel (a new one sized from ``config.channel``
            if None)
        metrics: Metrics collector (a new one with a private registry if None)

    Returns:
        Configured FastAPI application. The channel and metrics are available
        on ``app.state`` before startup, so the app can be driven without
        running its lifespan.

    Example:
        >>> app = create_server()
        >>> import uvicorn
        >>> uvicorn.run(app, host="127.0.0.1", port=8500)
    """
    if config is None:
        config = ServerConfig()

    if channel is None:
        channel = CallbackChannel(capacity=config.channel.capacity)
    if metrics is None:
        metrics = CallbackMetrics()

    validator = BodySizeValidator(max_body_size=config.validation.max_body_size)
    enqueue_timeout = config.channel.enqueue_timeout
    log_body_limit = config.observability.log_body_limit

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
        """Application lifespan: metrics endpoint and lifecycle logging."""
        logger.info(
            f"Starting {config.app_name}: {len(ROUTE_PREFIXES)} webhook routes, "
            f"channel capacity={channel.capacity}"
        )

        if config.observability.prometheus_enabled:
            if start_metrics_server(config.observability.metrics_port, metrics.registry):
                logger.info(
                    f"Prometheus metrics enabled on port {config.observability.metrics_port}"
                )
            else:
                logger.warning("Prometheus metrics disabled (server failed to start)")

        yield

        logger.info(
            f"Shutting down {config.app_name}: {channel.pending()} envelopes pending"
        )

    app = FastAPI(
        title=config.app_name,
        description="Mobile money provider callback receiver",
        lifespan=lifespan,
        docs_url=None,
        redoc_url=None,
        openapi_url=None,
    )
    app.state.config = config
    app.state.channel = channel
    app.state.metrics = metrics

    app.add_middleware(BaseHTTPMiddleware, dispatch=create_metrics_middleware(metrics))

    async def deliver(body: bytes, category: CallbackCategory, remote_address: str) -> None:
        """Classify a body and queue the resulting envelope.

        Failures are logged and counted; nothing is raised for bad input.
        """
        result = classify_body(body)
        if isinstance(result, ParseError):
            code = (
                CallbackErrorCode.PAYLOAD_UNPARSEABLE
                if result.is_json_error
                else CallbackErrorCode.PAYLOAD_UNCLASSIFIED
            )
            metrics.record_parse_failure(code.value)
            logger.warning(
                f"[{code.value}] Failed to parse callback from {remote_address} "
                f"(category={category.value}): {result.detail}; "
                f"body={_truncate(result.body, log_body_limit)!r}"
            )
            for variant, reason in result.rejections:
                logger.debug(f"  {variant}: {reason}")
            return

        metrics.record_classified(result.variant)
        envelope = CallbackEnvelope(
            remote_address=remote_address,
            response=result,
            category=category,
        )
        try:
            await channel.enqueue(envelope, timeout=enqueue_timeout)
        except ChannelFullError as e:
            metrics.record_enqueue_failure(CallbackErrorCode.CHANNEL_FULL.value)
            logger.error(
                f"[{CallbackErrorCode.CHANNEL_FULL.value}] Dropped {result.variant} "
                f"from {remote_address}: {e}"
            )
        except ChannelClosedError:
            metrics.record_enqueue_failure(CallbackErrorCode.CHANNEL_CLOSED.value)
            logger.error(
                f"[{CallbackErrorCode.CHANNEL_CLOSED.value}] Dropped {result.variant} "
                f"from {remote_address}: channel closed"
            )
        else:
            logger.debug(
                f"Queued {result.variant} category={category.value} from {remote_address}"
            )
        finally:
            metrics.set_queue_depth(channel.pending())

    async def receive_callback(request: Request, category: str) -> JSONResponse:
        """Accept one provider callback and acknowledge it."""
        start = time.perf_counter()
        route = request.scope["route"].path
        remote_address = _remote_address(request)

        try:
            body = await validator.read_body(request)
        except BodyTooLargeError as e:
            metrics.record_body_too_large()
            logger.warning(
                f"[{e.code.value}] Rejected callback from {remote_address} on {route}: {e}"
            )
            return validator.too_large_response(e)
        except ClientDisconnect:
            logger.info(f"Client {remote_address} disconnected before sending the body")
            return JSONResponse(content=_ACK)

        token = classify_path(category)
        metrics.record_received(route, token.value)
        logger.info(
            f"Callback received on {request.url.path} from {remote_address} "
            f"({len(body)} bytes)"
        )

        try:
            await deliver(body, token, remote_address)
        except Exception as e:
            logger.exception(f"Unexpected error handling callback from {remote_address}: {e}")

        metrics.observe_ack_latency(route, time.perf_counter() - start)
        return JSONResponse(content=_ACK)

    for prefix in ROUTE_PREFIXES:
        app.add_api_route(
            f"/{prefix}/{{category}}",
            receive_callback,
            methods=["POST", "PUT"],
            name=prefix,
            response_model=CallbackAck,
            responses={413: {"model": RequestTooLargeResponse}},
        )

    @app.get("/health", response_class=PlainTextResponse)
    async def health() -> str:
        """Liveness probe."""
        return "OK"

    logger.info(
        f"Callback server configured: max_body_size={validator.max_body_size} bytes, "
        f"enqueue_timeout={enqueue_timeout}"
    )
    return app
