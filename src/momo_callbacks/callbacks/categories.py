"""Callback category tokens taken from the webhook URL path."""

from __future__ import annotations

from enum import Enum

__all__ = ["CallbackCategory", "classify_path"]


class CallbackCategory(str, Enum):
    """Provider operation a webhook route was registered for.

    The value is the exact path segment the provider is configured with,
    e.g. ``/collection_request_to_pay/REQUEST_TO_PAY``.
    """

    REQUEST_TO_PAY = "REQUEST_TO_PAY"
    REQUEST_TO_WITHDRAW_V1 = "REQUEST_TO_WITHDRAW_V1"
    REQUEST_TO_WITHDRAW_V2 = "REQUEST_TO_WITHDRAW_V2"
    INVOICE = "INVOICE"
    COLLECTION_PAYMENT = "COLLECTION_PAYMENT"
    COLLECTION_PRE_APPROVAL = "COLLECTION_PRE_APPROVAL"
    DISBURSEMENT_DEPOSIT_V1 = "DISBURSEMENT_DEPOSIT_V1"
    DISBURSEMENT_DEPOSIT_V2 = "DISBURSEMENT_DEPOSIT_V2"
    DISBURSEMENT_REFUND_V1 = "DISBURSEMENT_REFUND_V1"
    DISBURSEMENT_REFUND_V2 = "DISBURSEMENT_REFUND_V2"
    DISBURSEMENT_TRANSFER = "DISBURSEMENT_TRANSFER"
    REMITTANCE_CASH_TRANSFER = "REMITTANCE_CASH_TRANSFER"
    REMITTANCE_TRANSFER = "REMITTANCE_TRANSFER"
    UNKNOWN = "UNKNOWN"


_TOKENS: dict[str, CallbackCategory] = {
    category.value: category
    for category in CallbackCategory
    if category is not CallbackCategory.UNKNOWN
}


def classify_path(segment: str) -> CallbackCategory:
    """Map a path segment to its category.

    Matching is exact and case-sensitive; anything outside the provider's
    vocabulary maps to ``UNKNOWN``.

    Example:
        >>> classify_path("REQUEST_TO_PAY")
        <CallbackCategory.REQUEST_TO_PAY: 'REQUEST_TO_PAY'>
        >>> classify_path("request_to_pay")
        <CallbackCategory.UNKNOWN: 'UNKNOWN'>
    """
    return _TOKENS.get(segment, CallbackCategory.UNKNOWN)
