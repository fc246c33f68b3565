"""Consumer-side dispatch of classified callbacks.

Groups callback categories into coarse business buckets and runs one handler
per bucket while draining an :class:`UpdateStream`.

Example:
    >>> dispatcher = CallbackDispatcher()
    >>> @dispatcher.on(CallbackBucket.PAYMENT)
    ... async def settle(envelope: CallbackEnvelope) -> None:
    ...     ...
    >>> await dispatcher.run(channel.updates())
"""

from __future__ import annotations

import logging
from enum import Enum
from typing import TYPE_CHECKING

from momo_callbacks.callbacks.categories import CallbackCategory

if TYPE_CHECKING:
    from collections.abc import AsyncIterator, Awaitable, Callable

    from momo_callbacks.callbacks.models import CallbackEnvelope

    CallbackHandler = Callable[[CallbackEnvelope], Awaitable[None]]

logger = logging.getLogger(__name__)

__all__ = ["CallbackBucket", "CallbackDispatcher", "bucket_for", "log_updates"]


class CallbackBucket(str, Enum):
    """Business area a callback belongs to."""

    PAYMENT = "payment"
    INVOICE = "invoice"
    DISBURSEMENT = "disbursement"
    REMITTANCE = "remittance"
    OTHER = "other"


_BUCKETS: dict[CallbackCategory, CallbackBucket] = {
    CallbackCategory.REQUEST_TO_PAY: CallbackBucket.PAYMENT,
    CallbackCategory.REQUEST_TO_WITHDRAW_V1: CallbackBucket.PAYMENT,
    CallbackCategory.REQUEST_TO_WITHDRAW_V2: CallbackBucket.PAYMENT,
    CallbackCategory.COLLECTION_PAYMENT: CallbackBucket.PAYMENT,
    CallbackCategory.COLLECTION_PRE_APPROVAL: CallbackBucket.PAYMENT,
    CallbackCategory.INVOICE: CallbackBucket.INVOICE,
    CallbackCategory.DISBURSEMENT_DEPOSIT_V1: CallbackBucket.DISBURSEMENT,
    CallbackCategory.DISBURSEMENT_DEPOSIT_V2: CallbackBucket.DISBURSEMENT,
    CallbackCategory.DISBURSEMENT_REFUND_V1: CallbackBucket.DISBURSEMENT,
    CallbackCategory.DISBURSEMENT_REFUND_V2: CallbackBucket.DISBURSEMENT,
    CallbackCategory.DISBURSEMENT_TRANSFER: CallbackBucket.DISBURSEMENT,
    CallbackCategory.REMITTANCE_CASH_TRANSFER: CallbackBucket.REMITTANCE,
    CallbackCategory.REMITTANCE_TRANSFER: CallbackBucket.REMITTANCE,
}


def bucket_for(category: CallbackCategory) -> CallbackBucket:
    """Return the dispatch bucket for a category (``OTHER`` when unmapped)."""
    return _BUCKETS.get(category, CallbackBucket.OTHER)


class CallbackDispatcher:
    """Routes envelopes to per-bucket handlers.

    Envelopes are handled one at a time, in stream order. A handler that
    raises is logged and the loop moves on to the next envelope; envelopes
    whose bucket has no handler go to the fallback handler, if any.
    """

    def __init__(self, fallback: CallbackHandler | None = None) -> None:
        self._handlers: dict[CallbackBucket, CallbackHandler] = {}
        self._fallback = fallback
        self.handled = 0
        self.failed = 0

    def register(self, bucket: CallbackBucket, handler: CallbackHandler) -> None:
        """Register the handler for a bucket, replacing any previous one."""
        self._handlers[bucket] = handler

    def on(self, bucket: CallbackBucket) -> Callable[[CallbackHandler], CallbackHandler]:
        """Decorator form of :meth:`register`."""

        def decorator(handler: CallbackHandler) -> CallbackHandler:
            self.register(bucket, handler)
            return handler

        return decorator

    async def dispatch(self, envelope: CallbackEnvelope) -> bool:
        """Hand one envelope to its handler.

        Returns:
            True if a handler ran without raising
        """
        bucket = bucket_for(envelope.category)
        handler = self._handlers.get(bucket, self._fallback)
        if handler is None:
            logger.debug(
                f"No handler for {bucket.value} callback {envelope.variant}, skipping"
            )
            return False
        try:
            await handler(envelope)
        except Exception as e:
            self.failed += 1
            logger.exception(
                f"Handler for {bucket.value} failed on {envelope.variant} "
                f"from {envelope.remote_address}: {e}"
            )
            return False
        self.handled += 1
        return True

    async def run(self, stream: AsyncIterator[CallbackEnvelope]) -> None:
        """Drain ``stream`` until it ends, dispatching every envelope."""
        async for envelope in stream:
            await self.dispatch(envelope)
        logger.info(
            f"Update stream ended: handled={self.handled} failed={self.failed}"
        )


async def log_updates(stream: AsyncIterator[CallbackEnvelope]) -> None:
    """Default consumer: log every callback received."""
    async for envelope in stream:
        logger.info(
            f"Callback {envelope.variant} category={envelope.category.value} "
            f"from={envelope.remote_address}"
        )
        logger.debug(f"Callback payload: {envelope.response!r}")
