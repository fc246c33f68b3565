"""Pytest configuration and shared fixtures for momo-callbacks tests."""

from __future__ import annotations

import copy
import json
from typing import Any

import pytest

from momo_callbacks.server.models import (
    ChannelConfig,
    ServerConfig,
    TLSConfig,
    ValidationConfig,
)

MSISDN_PAYER = {"partyIdType": "MSISDN", "partyId": "256774290781"}
MSISDN_PAYEE = {"partyIdType": "MSISDN", "partyId": "256772123456"}

_CASH_TRANSFER = {
    "financialTransactionId": "363440463",
    "externalId": "ext-cash-001",
    "amount": "1000",
    "currency": "UGX",
    "payee": MSISDN_PAYEE,
    "originatingCountry": "UG",
    "originalAmount": "1000",
    "originalCurrency": "UGX",
    "payerIdentificationType": "PASS",
    "payerIdentificationNumber": "A1234567",
    "payerIdentity": "ID-884421",
    "payerFirstName": "Jane",
    "payerSurname": "Doe",
    "payerLanguageCode": "en",
    "payerEmail": "jane@example.com",
    "payerMsisdn": "256774290781",
    "payerGender": "F",
    "payerMessage": "School fees",
    "payeeNote": "Term 2",
}

_REMITTANCE_TRANSFER = {
    "financialTransactionId": "363440464",
    "externalId": "ext-rem-001",
    "amount": "500",
    "currency": "EUR",
    "payee": MSISDN_PAYEE,
    "originatingCountry": "FR",
    "originalAmount": "500",
    "originalCurrency": "EUR",
    "payerMessage": "Gift",
    "payeeNote": "Birthday",
}

_INVOICE = {
    "referenceId": "2ec8a1c6-6c3e-4a4d-9f7e-5c1c2d3a4b5c",
    "externalId": "ext-inv-001",
    "amount": "15000",
    "currency": "UGX",
    "paymentReference": "pay-ref-77",
    "invoiceId": "inv-9921",
    "expiryDateTime": "2024-12-31T23:59:59Z",
    "intendedPayer": MSISDN_PAYER,
    "description": "Electricity bill",
}

_PAYMENT = {
    "referenceId": "8f0e4d6a-2b1c-4e3f-9a8b-7c6d5e4f3a2b",
    "financialTransactionId": "363440470",
}

_PREAPPROVAL = {
    "payer": MSISDN_PAYER,
    "payerCurrency": "UGX",
    "expirationDateTime": "2025-01-31T00:00:00Z",
}

_REQUEST_TO_PAY = {
    "externalId": "ext-rtp-001",
    "amount": "100",
    "currency": "UGX",
    "payer": MSISDN_PAYER,
    "payerMessage": "Order 42",
    "payeeNote": "Thanks",
}

_DISBURSEMENT = {
    "financialTransactionId": "363440480",
    "externalId": "ext-dis-001",
    "amount": "2500",
    "currency": "UGX",
    "payee": MSISDN_PAYEE,
    "payerMessage": "Salary",
    "payeeNote": "June",
}

_FAILURE_REASON = {"code": "PAYER_NOT_FOUND", "message": "Payer account not found"}

# One wire body per callback variant, keyed by the variant it must classify as.
PAYLOADS: dict[str, dict[str, Any]] = {
    "CashTransferSucceeded": {**_CASH_TRANSFER, "status": "SUCCESSFUL"},
    "CashTransferFailed": {
        **_CASH_TRANSFER,
        "status": "FAILED",
        "errorReason": {"code": "NOT_ENOUGH_FUNDS", "message": "Insufficient balance"},
    },
    "RemittanceTransferSuccess": {**_REMITTANCE_TRANSFER, "status": "SUCCESSFUL"},
    "RemittanceTransferFailed": {
        **_REMITTANCE_TRANSFER,
        "status": "FAILED",
        "errorReason": {"code": "PAYEE_NOT_FOUND", "message": "Unknown payee"},
    },
    "InvoiceSucceeded": {**_INVOICE, "status": "SUCCESSFUL"},
    "InvoiceFailed": {
        **_INVOICE,
        "status": "FAILED",
        "errorReason": {"code": "EXPIRED", "message": "Invoice expired"},
    },
    "PaymentSucceeded": {**_PAYMENT, "status": "SUCCESSFUL"},
    "PaymentFailed": {
        "referenceId": _PAYMENT["referenceId"],
        "status": "FAILED",
        "reason": {"code": "INTERNAL_PROCESSING_ERROR", "message": "Try again"},
    },
    "PreApprovalPending": {**_PREAPPROVAL, "status": "PENDING"},
    "PreApprovalCreated": {**_PREAPPROVAL, "status": "CREATED"},
    "PreApprovalSuccessful": {**_PREAPPROVAL, "status": "SUCCESSFUL"},
    "PreApprovalFailed": {
        **_PREAPPROVAL,
        "status": "FAILED",
        "reason": {"code": "APPROVAL_REJECTED", "message": "Payer declined"},
    },
    "RequestToPaySuccess": {
        **_REQUEST_TO_PAY,
        "financialTransactionId": "363440490",
        "status": "SUCCESSFUL",
    },
    "RequestToPayFailed": {
        **_REQUEST_TO_PAY,
        "status": "FAILED",
        "reason": _FAILURE_REASON,
    },
    "DisbursementSuccess": {**_DISBURSEMENT, "status": "SUCCESSFUL"},
    "DisbursementFailed": {
        **_DISBURSEMENT,
        "status": "FAILED",
        "reason": {"code": "PAYEE_NOT_ALLOWED_TO_RECEIVE", "message": "Blocked"},
    },
}


@pytest.fixture
def payloads() -> dict[str, dict[str, Any]]:
    """Provide a fresh copy of every variant fixture body.

    Returns:
        Mapping of variant name to decoded JSON body.
    """
    return copy.deepcopy(PAYLOADS)


@pytest.fixture(params=sorted(PAYLOADS))
def variant_case(request: pytest.FixtureRequest) -> tuple[str, dict[str, Any]]:
    """Parametrized (variant name, body) pair, one per callback variant."""
    return request.param, copy.deepcopy(PAYLOADS[request.param])


@pytest.fixture
def rtp_success_body() -> bytes:
    """Encoded body of a successful request-to-pay callback."""
    return json.dumps(PAYLOADS["RequestToPaySuccess"]).encode()


@pytest.fixture
def server_config() -> ServerConfig:
    """Plain-HTTP server config with a small body limit for route tests."""
    return ServerConfig(
        tls=TLSConfig(enabled=False),
        validation=ValidationConfig(max_body_size=64 * 1024),
        channel=ChannelConfig(capacity=100),
    )


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch: pytest.MonkeyPatch) -> None:
    """Keep MOMO_CALLBACK_* variables from the caller's shell out of tests."""
    import os

    for name in list(os.environ):
        if name.startswith("MOMO_CALLBACK_"):
            monkeypatch.delenv(name, raising=False)
