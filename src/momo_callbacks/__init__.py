"""momo-callbacks - webhook receiver for MTN MoMo style payment callbacks.

Accepts provider callbacks over HTTPS, classifies each untagged JSON body
into a typed variant and delivers it, with the category taken from the URL,
to a single in-process consumer.

Quick Start:
    >>> import asyncio
    >>> from momo_callbacks import CallbackDispatcher, CallbackBucket, serve
    >>> dispatcher = CallbackDispatcher()
    >>> @dispatcher.on(CallbackBucket.PAYMENT)
    ... async def on_payment(envelope):
    ...     print(envelope.variant, envelope.response.amount)
    >>> asyncio.run(serve(consumer=dispatcher.run))
"""

__version__ = "0.1.0"

from momo_callbacks.callbacks import (
    CallbackBucket,
    CallbackCategory,
    CallbackDispatcher,
    CallbackEnvelope,
    ParseError,
    classify_body,
    classify_path,
)
from momo_callbacks.server import ServerConfig, create_server, serve

__all__ = [
    "CallbackBucket",
    "CallbackCategory",
    "CallbackDispatcher",
    "CallbackEnvelope",
    "ParseError",
    "ServerConfig",
    "__version__",
    "classify_body",
    "classify_path",
    "create_server",
    "serve",
]
