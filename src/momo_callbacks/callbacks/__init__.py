"""Callback classification and in-process delivery.

Turns raw provider webhook bodies into typed variants, wraps them in
envelopes, and hands them to a single consumer through a bounded channel.

Example:
    >>> from momo_callbacks.callbacks import classify_body, classify_path
    >>> result = classify_body(raw_body)
    >>> category = classify_path("REQUEST_TO_PAY")
"""

from momo_callbacks.callbacks.categories import CallbackCategory, classify_path
from momo_callbacks.callbacks.channel import (
    CallbackChannel,
    ChannelClosedError,
    ChannelFullError,
    UpdateStream,
)
from momo_callbacks.callbacks.classifier import (
    CLASSIFICATION_ORDER,
    ParseError,
    classify_body,
    matching_variants,
)
from momo_callbacks.callbacks.dispatch import (
    CallbackBucket,
    CallbackDispatcher,
    bucket_for,
    log_updates,
)
from momo_callbacks.callbacks.models import (
    CallbackEnvelope,
    CallbackPayload,
    CallbackVariant,
    CashTransferFailed,
    CashTransferSucceeded,
    DisbursementFailed,
    DisbursementSuccess,
    InvoiceFailed,
    InvoiceSucceeded,
    Party,
    PartyIdType,
    PaymentFailed,
    PaymentSucceeded,
    PreApprovalCreated,
    PreApprovalFailed,
    PreApprovalPending,
    PreApprovalSuccessful,
    Reason,
    ReasonCode,
    RemittanceTransferFailed,
    RemittanceTransferSuccess,
    RequestToPayFailed,
    RequestToPaySuccess,
)

__all__ = [
    "CLASSIFICATION_ORDER",
    "CallbackBucket",
    "CallbackCategory",
    "CallbackChannel",
    "CallbackDispatcher",
    "CallbackEnvelope",
    "CallbackPayload",
    "CallbackVariant",
    "CashTransferFailed",
    "CashTransferSucceeded",
    "ChannelClosedError",
    "ChannelFullError",
    "DisbursementFailed",
    "DisbursementSuccess",
    "InvoiceFailed",
    "InvoiceSucceeded",
    "ParseError",
    "Party",
    "PartyIdType",
    "PaymentFailed",
    "PaymentSucceeded",
    "PreApprovalCreated",
    "PreApprovalFailed",
    "PreApprovalPending",
    "PreApprovalSuccessful",
    "Reason",
    "ReasonCode",
    "RemittanceTransferFailed",
    "RemittanceTransferSuccess",
    "RequestToPayFailed",
    "RequestToPaySuccess",
    "UpdateStream",
    "bucket_for",
    "classify_body",
    "classify_path",
    "log_updates",
    "matching_variants",
]
