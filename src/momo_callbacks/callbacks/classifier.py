"""Structural classification of untagged callback bodies.

Callback bodies carry no type tag, and several shapes overlap (a cash transfer
body is a superset of a remittance transfer body, an invoice body contains
every payment field, ...). Classification therefore walks an explicit,
ordered list of variants and returns the first one whose predicate accepts
the decoded object:

1. none of the variant's ``excluded_fields`` is present;
2. every required field is present with a compatible JSON type;
3. ``status`` is one of the variant's allowed literals.

Optional fields never block a match and unknown fields are ignored.

Example:
    >>> result = classify_body(b'{"referenceId": "r-1", "status": "SUCCESSFUL"}')
    >>> type(result).__name__
    'PaymentSucceeded'
    >>> classify_body(b"not-json").detail
    'invalid JSON: Expecting value: line 1 column 1 (char 0)'
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from typing import Any

from pydantic import ValidationError

from momo_callbacks.callbacks.models import (
    CallbackPayload,
    CallbackVariant,
    CashTransferFailed,
    CashTransferSucceeded,
    DisbursementFailed,
    DisbursementSuccess,
    InvoiceFailed,
    InvoiceSucceeded,
    PaymentFailed,
    PaymentSucceeded,
    PreApprovalCreated,
    PreApprovalFailed,
    PreApprovalPending,
    PreApprovalSuccessful,
    RemittanceTransferFailed,
    RemittanceTransferSuccess,
    RequestToPayFailed,
    RequestToPaySuccess,
)

logger = logging.getLogger(__name__)

__all__ = [
    "CLASSIFICATION_ORDER",
    "ParseError",
    "classify_body",
    "matching_variants",
]

# Supersets before subsets: cash transfer > remittance transfer > disbursement,
# invoice > payment.
CLASSIFICATION_ORDER: tuple[type[CallbackPayload], ...] = (
    CashTransferSucceeded,
    CashTransferFailed,
    RemittanceTransferSuccess,
    RemittanceTransferFailed,
    InvoiceSucceeded,
    InvoiceFailed,
    PaymentSucceeded,
    PaymentFailed,
    PreApprovalPending,
    PreApprovalCreated,
    PreApprovalSuccessful,
    PreApprovalFailed,
    RequestToPaySuccess,
    RequestToPayFailed,
    DisbursementSuccess,
    DisbursementFailed,
)


@dataclass(frozen=True)
class ParseError:
    """Classification failure.

    Returned (not raised) by :func:`classify_body`.

    Attributes:
        detail: Human readable reason
        body: Raw body as text, for diagnostics
        rejections: Per-variant rejection reason, in classification order
    """

    detail: str
    body: str
    rejections: tuple[tuple[str, str], ...] = field(default=())

    @property
    def is_json_error(self) -> bool:
        """True when the body was not a JSON object at all."""
        return not self.rejections


def _body_text(body: bytes | str) -> str:
    if isinstance(body, bytes):
        return body.decode("utf-8", errors="replace")
    return body


def _try_variant(
    variant: type[CallbackPayload], payload: dict[str, Any]
) -> tuple[CallbackPayload | None, str | None]:
    """Validate ``payload`` against one variant.

    Returns:
        ``(model, None)`` on a match, ``(None, reason)`` otherwise
    """
    present = variant.excluded_fields.intersection(payload)
    if present:
        return None, f"excluded field present: {', '.join(sorted(present))}"
    try:
        return variant.model_validate(payload), None
    except ValidationError as e:
        first = e.errors()[0]
        location = ".".join(str(part) for part in first["loc"]) or "body"
        return None, f"{location}: {first['msg']}"


def matching_variants(payload: dict[str, Any]) -> list[type[CallbackPayload]]:
    """List every variant whose predicate accepts ``payload``.

    Classification only uses the first entry; this is exposed so overlap
    between shapes can be checked explicitly.
    """
    return [
        variant
        for variant in CLASSIFICATION_ORDER
        if _try_variant(variant, payload)[0] is not None
    ]


def classify_body(body: bytes | str) -> CallbackVariant | ParseError:
    """Classify a raw callback body.

    Args:
        body: Request body as received

    Returns:
        The first matching variant, or a ParseError. Never raises for
        malformed or unrecognised input.
    """
    try:
        payload = json.loads(body)
    except (ValueError, RecursionError) as e:
        return ParseError(detail=f"invalid JSON: {e}", body=_body_text(body))

    if not isinstance(payload, dict):
        return ParseError(
            detail=f"expected a JSON object, got {type(payload).__name__}",
            body=_body_text(body),
        )

    rejections: list[tuple[str, str]] = []
    for variant in CLASSIFICATION_ORDER:
        model, reason = _try_variant(variant, payload)
        if model is not None:
            logger.debug(f"Classified callback as {variant.__name__}")
            return model  # type: ignore[return-value]
        rejections.append((variant.__name__, reason or "rejected"))

    return ParseError(
        detail="body does not match any callback variant",
        body=_body_text(body),
        rejections=tuple(rejections),
    )
