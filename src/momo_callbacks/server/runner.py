"""Run the callback server under uvicorn together with its consumer.

The runner owns the process-level lifecycle: TLS material is loaded and
validated before anything listens, the consumer task is started next to the
HTTP server, and on shutdown the channel is closed and the consumer
cancelled once uvicorn has drained in-flight requests.

Example:
    >>> import asyncio
    >>> from momo_callbacks.callbacks import CallbackDispatcher, CallbackBucket
    >>> from momo_callbacks.server.runner import serve
    >>>
    >>> dispatcher = CallbackDispatcher()
    >>> @dispatcher.on(CallbackBucket.PAYMENT)
    ... async def on_payment(envelope):
    ...     ...
    >>> asyncio.run(serve(consumer=dispatcher.run))
"""

from __future__ import annotations

import asyncio
import logging
from contextlib import ExitStack
from typing import TYPE_CHECKING, Any

import uvicorn

from momo_callbacks.callbacks.dispatch import log_updates
from momo_callbacks.server.errors import TLSConfigurationError
from momo_callbacks.server.factory import create_server
from momo_callbacks.server.models import ServerConfig
from momo_callbacks.server.tls import TLSMaterial

if TYPE_CHECKING:
    from collections.abc import Awaitable, Callable

    from momo_callbacks.callbacks.channel import UpdateStream

    Consumer = Callable[[UpdateStream], Awaitable[None]]

logger = logging.getLogger(__name__)

__all__ = ["load_tls_material", "serve"]


def load_tls_material(config: ServerConfig) -> TLSMaterial | None:
    """Resolve TLS material from configuration.

    Returns:
        Validated material, or None when TLS is disabled

    Raises:
        TLSConfigurationError: TLS is enabled but the material is missing or
            invalid
    """
    if not config.tls.enabled:
        logger.warning("TLS disabled: serving plain HTTP (local development only)")
        return None
    if config.tls.certfile is None or config.tls.keyfile is None:
        raise TLSConfigurationError(
            "TLS is enabled but no certificate/key is configured "
            "(set MOMO_CALLBACK_TLS_CERTFILE and MOMO_CALLBACK_TLS_KEYFILE)"
        )
    material = TLSMaterial.from_files(config.tls.certfile, config.tls.keyfile)
    material.validate()
    return material


async def serve(
    config: ServerConfig | None = None,
    consumer: Consumer = log_updates,
    tls_material: TLSMaterial | None = None,
) -> int:
    """Serve callbacks until uvicorn receives a shutdown signal.

    Args:
        config: Server configuration (loads from environment if None)
        consumer: Coroutine function draining the update stream
        tls_material: PEM pair to serve with; overrides ``config.tls``

    Returns:
        Number of envelopes still buffered (and therefore lost) at shutdown

    Raises:
        TLSConfigurationError: TLS material is missing or invalid. Raised
            before the listener is bound.
    """
    if config is None:
        config = ServerConfig()

    if tls_material is not None:
        tls_material.validate()
    else:
        tls_material = load_tls_material(config)

    app = create_server(config)
    channel = app.state.channel

    with ExitStack() as stack:
        ssl_options: dict[str, Any] = {}
        if tls_material is not None:
            certfile, keyfile = stack.enter_context(tls_material.materialize())
            ssl_options = {"ssl_certfile": certfile, "ssl_keyfile": keyfile}

        server = uvicorn.Server(
            uvicorn.Config(
                app,
                host=config.host,
                port=config.port,
                log_level=config.log_level,
                log_config=None,
                timeout_graceful_shutdown=config.shutdown_timeout,
                **ssl_options,
            )
        )

        scheme = "https" if tls_material is not None else "http"
        logger.info(f"Listening on {scheme}://{config.host}:{config.port}")

        consumer_task = asyncio.create_task(
            consumer(channel.updates()), name="momo-callback-consumer"
        )
        try:
            await server.serve()
        finally:
            await channel.close()
            lost = channel.pending()
            consumer_task.cancel()
            (outcome,) = await asyncio.gather(consumer_task, return_exceptions=True)
            if isinstance(outcome, Exception):
                logger.error(f"Consumer task failed: {outcome!r}")
            if lost:
                logger.warning(f"Shutdown discarded {lost} undelivered callbacks")
            else:
                logger.info("Shutdown complete, no callbacks pending")

    return lost
