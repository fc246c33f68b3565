"""Pydantic models for provider callback payloads.

Each callback variant is a frozen model describing one structural shape the
provider can POST to us. The wire format is camelCase JSON; models expose
snake_case attributes and accept either spelling on input.

Variants declare:
    - their required and optional fields (regular pydantic fields)
    - the ``status`` literal(s) they accept
    - ``excluded_fields``: wire names whose presence rules the variant out

The classification order lives in :mod:`momo_callbacks.callbacks.classifier`.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Annotated, Any, ClassVar, Literal, Union

from pydantic import BaseModel, BeforeValidator, ConfigDict
from pydantic.alias_generators import to_camel

from momo_callbacks.callbacks.categories import CallbackCategory

__all__ = [
    "CallbackEnvelope",
    "CallbackPayload",
    "CallbackVariant",
    "CashTransferFailed",
    "CashTransferSucceeded",
    "DisbursementFailed",
    "DisbursementSuccess",
    "InvoiceFailed",
    "InvoiceSucceeded",
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
]


class PartyIdType(str, Enum):
    """Account holder identifier types accepted by the wallet platform."""

    MSISDN = "MSISDN"
    EMAIL = "EMAIL"
    PARTY_CODE = "PARTY_CODE"


class ReasonCode(str, Enum):
    """Failure codes documented by the provider.

    ``Reason.code`` stays a plain string so that codes added by the provider
    later still parse; use :attr:`Reason.known_code` to map onto this enum.
    """

    INTERNAL_PROCESSING_ERROR = "INTERNAL_PROCESSING_ERROR"
    APPROVAL_REJECTED = "APPROVAL_REJECTED"
    EXPIRED = "EXPIRED"
    ONGOING = "ONGOING"
    PAYER_DELAYED = "PAYER_DELAYED"
    PAYER_NOT_FOUND = "PAYER_NOT_FOUND"
    PAYEE_NOT_ALLOWED_TO_RECEIVE = "PAYEE_NOT_ALLOWED_TO_RECEIVE"
    NOT_ALLOWED = "NOT_ALLOWED"
    NOT_ALLOWED_TARGET_ENVIRONMENT = "NOT_ALLOWED_TARGET_ENVIRONMENT"
    INVALID_CALLBACK_URL_HOST = "INVALID_CALLBACK_URL_HOST"
    INVALID_CURRENCY = "INVALID_CURRENCY"
    SERVICE_UNAVAILABLE = "SERVICE_UNAVAILABLE"
    COULD_NOT_PERFORM_TRANSACTION = "COULD_NOT_PERFORM_TRANSACTION"
    NOT_ENOUGH_FUNDS = "NOT_ENOUGH_FUNDS"
    PAYEE_NOT_FOUND = "PAYEE_NOT_FOUND"
    PAYER_LIMIT_REACHED = "PAYER_LIMIT_REACHED"
    PAYEE_DELAYED = "PAYEE_DELAYED"


class _WireModel(BaseModel):
    """Base for every model parsed from provider JSON."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        frozen=True,
        extra="ignore",
    )


class Party(_WireModel):
    """Account holder reference (identifier type plus identifier value).

    Example:
        >>> Party.model_validate({"partyIdType": "MSISDN", "partyId": "+256700000000"})
        Party(party_id_type=<PartyIdType.MSISDN: 'MSISDN'>, party_id='+256700000000')
    """

    party_id_type: PartyIdType
    party_id: str


class Reason(_WireModel):
    """Machine code and human readable message attached to failures."""

    code: str
    message: str | None = None

    @property
    def known_code(self) -> ReasonCode | None:
        """Return the documented :class:`ReasonCode`, or None for new codes."""
        try:
            return ReasonCode(self.code)
        except ValueError:
            return None


def _coerce_reason(value: Any) -> Any:
    """Accept a bare reason code string as shorthand for ``{"code": value}``."""
    if isinstance(value, str):
        return {"code": value}
    return value


LenientReason = Annotated[Reason, BeforeValidator(_coerce_reason)]


class CallbackPayload(_WireModel):
    """Base class for every callback variant.

    Attributes:
        excluded_fields: Wire names that must be absent for this variant to
            match. Used to separate shapes whose field sets are supersets of
            each other.
    """

    excluded_fields: ClassVar[frozenset[str]] = frozenset()

    @property
    def variant(self) -> str:
        """Variant name, stable across releases (used in logs and metrics)."""
        return type(self).__name__


# =============================================================================
# Remittance: cash transfer
# =============================================================================


class _CashTransferBase(CallbackPayload):
    financial_transaction_id: str
    external_id: str
    amount: str
    currency: str
    payee: Party
    originating_country: str
    original_amount: str
    original_currency: str
    payer_identification_type: str
    payer_identification_number: str
    payer_identity: str | None = None
    payer_first_name: str | None = None
    payer_surname: str | None = None
    payer_language_code: str | None = None
    payer_email: str | None = None
    payer_msisdn: str | None = None
    payer_gender: str | None = None
    payer_message: str | None = None
    payee_note: str | None = None
    reason: str | None = None


class CashTransferSucceeded(_CashTransferBase):
    """Remittance cash transfer completed."""

    status: Literal["SUCCESSFUL"]


class CashTransferFailed(_CashTransferBase):
    """Remittance cash transfer rejected; details in ``error_reason``."""

    status: Literal["FAILED"]
    error_reason: Reason


# =============================================================================
# Remittance: transfer
# =============================================================================


class _RemittanceTransferBase(CallbackPayload):
    excluded_fields: ClassVar[frozenset[str]] = frozenset(
        {"payerIdentificationType", "payerIdentificationNumber"}
    )

    financial_transaction_id: str
    external_id: str
    amount: str
    currency: str
    payee: Party
    originating_country: str
    original_amount: str
    original_currency: str
    payer_message: str | None = None
    payee_note: str | None = None
    reason: str | None = None


class RemittanceTransferSuccess(_RemittanceTransferBase):
    """Remittance transfer completed."""

    status: Literal["SUCCESSFUL"]


class RemittanceTransferFailed(_RemittanceTransferBase):
    """Remittance transfer rejected; details in ``error_reason``."""

    status: Literal["FAILED"]
    error_reason: Reason


# =============================================================================
# Collection: invoice
# =============================================================================


class _InvoiceBase(CallbackPayload):
    reference_id: str
    external_id: str
    amount: str
    currency: str
    payment_reference: str
    invoice_id: str
    expiry_date_time: str
    intended_payer: Party
    description: str | None = None


class InvoiceSucceeded(_InvoiceBase):
    """Invoice paid."""

    status: Literal["SUCCESSFUL"]


class InvoiceFailed(_InvoiceBase):
    """Invoice payment failed; details in ``error_reason``."""

    status: Literal["FAILED"]
    error_reason: Reason


# =============================================================================
# Collection: payment
# =============================================================================


class _PaymentBase(CallbackPayload):
    excluded_fields: ClassVar[frozenset[str]] = frozenset({"invoiceId"})

    reference_id: str
    financial_transaction_id: str | None = None


class PaymentSucceeded(_PaymentBase):
    """Collection payment completed."""

    status: Literal["SUCCESSFUL"]


class PaymentFailed(_PaymentBase):
    """Collection payment failed."""

    status: Literal["FAILED"]
    reason: Reason


# =============================================================================
# Collection: pre-approval
# =============================================================================


class _PreApprovalBase(CallbackPayload):
    payer: Party
    payer_currency: str
    expiration_date_time: str


class PreApprovalPending(_PreApprovalBase):
    """Pre-approval waiting for the payer."""

    status: Literal["PENDING"]


class PreApprovalCreated(_PreApprovalBase):
    """Pre-approval registered by the provider."""

    status: Literal["CREATED"]


class PreApprovalSuccessful(_PreApprovalBase):
    """Pre-approval granted by the payer."""

    status: Literal["SUCCESSFUL"]


class PreApprovalFailed(_PreApprovalBase):
    """Pre-approval refused or expired."""

    status: Literal["FAILED"]
    reason: Reason | None = None


# =============================================================================
# Collection: request to pay (and request to withdraw)
# =============================================================================


class _RequestToPayBase(CallbackPayload):
    external_id: str
    amount: str
    currency: str
    payer: Party
    payee_note: str | None = None
    payer_message: str | None = None


class RequestToPaySuccess(_RequestToPayBase):
    """Payer approved a request to pay (or request to withdraw)."""

    status: Literal["SUCCESSFUL"]
    financial_transaction_id: str


class RequestToPayFailed(_RequestToPayBase):
    """Request to pay was rejected, expired or failed.

    The provider sends ``reason`` either as an object or as a bare code.
    """

    status: Literal["FAILED"]
    financial_transaction_id: str | None = None
    reason: LenientReason


# =============================================================================
# Disbursement: deposit v1/v2, refund v1/v2, transfer
# =============================================================================


class _DisbursementBase(CallbackPayload):
    excluded_fields: ClassVar[frozenset[str]] = frozenset(
        {"originatingCountry", "originalAmount", "originalCurrency"}
    )

    financial_transaction_id: str
    external_id: str
    amount: str
    currency: str
    payee: Party
    payee_note: str | None = None
    payer_message: str | None = None


class DisbursementSuccess(_DisbursementBase):
    """Deposit, refund or transfer credited to the payee.

    All disbursement operations share this shape; the operation is given by
    the envelope's category.
    """

    status: Literal["SUCCESSFUL"]


class DisbursementFailed(_DisbursementBase):
    """Deposit, refund or transfer failed."""

    status: Literal["FAILED"]
    reason: Reason


CallbackVariant = Union[
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
]


@dataclass(frozen=True)
class CallbackEnvelope:
    """Unit delivered to the consumer.

    Attributes:
        remote_address: Caller address as ``host:port``
        response: Classified callback payload
        category: Category token taken from the request path
    """

    remote_address: str
    response: CallbackVariant
    category: CallbackCategory

    @property
    def variant(self) -> str:
        """Name of the classified variant."""
        return self.response.variant
