"""Tests for the callback server error code catalog."""

from __future__ import annotations

import re

from momo_callbacks.server.errors import (
    CALLBACK_ERROR_REGISTRY,
    BodyTooLargeError,
    CallbackErrorCode,
    TLSConfigurationError,
    create_error_response,
    get_callback_error_message,
    get_callback_error_status,
    is_recoverable,
)


class TestErrorCodeRegistry:
    """Test error code definitions and registry completeness."""

    def test_all_codes_have_metadata(self) -> None:
        """Every CallbackErrorCode member has a registry entry."""
        for code in CallbackErrorCode:
            assert code in CALLBACK_ERROR_REGISTRY, f"Missing registry entry for {code.name}"

    def test_codes_follow_format(self) -> None:
        """All error codes are in the E5xx range."""
        pattern = re.compile(r"^E5\d{2}$")
        for code in CallbackErrorCode:
            assert pattern.match(code.value), f"Invalid code format: {code.value}"

    def test_registry_has_required_fields(self) -> None:
        required_fields = {"error", "http_status", "recoverable", "message"}
        for code, metadata in CALLBACK_ERROR_REGISTRY.items():
            assert required_fields <= set(metadata.keys()), code.name

    def test_error_field_is_snake_case(self) -> None:
        pattern = re.compile(r"^[a-z][a-z0-9_]*$")
        for code, metadata in CALLBACK_ERROR_REGISTRY.items():
            assert pattern.match(metadata["error"]), code.name


class TestErrorSemantics:
    """Test how each error surfaces to the provider."""

    def test_payload_and_delivery_errors_are_acknowledged(self) -> None:
        """Only oversized bodies change the HTTP status."""
        for code in (
            CallbackErrorCode.PAYLOAD_UNPARSEABLE,
            CallbackErrorCode.PAYLOAD_UNCLASSIFIED,
            CallbackErrorCode.CHANNEL_FULL,
            CallbackErrorCode.CHANNEL_CLOSED,
        ):
            assert get_callback_error_status(code) == 200

    def test_body_too_large_is_413(self) -> None:
        assert get_callback_error_status(CallbackErrorCode.BODY_TOO_LARGE) == 413

    def test_only_channel_full_is_recoverable(self) -> None:
        recoverable = [code for code in CallbackErrorCode if is_recoverable(code)]
        assert recoverable == [CallbackErrorCode.CHANNEL_FULL]

    def test_default_message(self) -> None:
        message = get_callback_error_message(CallbackErrorCode.CHANNEL_CLOSED)
        assert message == "Delivery channel is closed"

    def test_create_error_response(self) -> None:
        response = create_error_response(
            CallbackErrorCode.BODY_TOO_LARGE, details={"limit": 1024}
        )

        assert response == {
            "error": "request_too_large",
            "message": "Request body exceeds size limit",
            "details": {"limit": 1024},
        }

    def test_exceptions_carry_codes(self) -> None:
        assert TLSConfigurationError.code is CallbackErrorCode.TLS_CONFIGURATION_INVALID
        assert BodyTooLargeError(1).code is CallbackErrorCode.BODY_TOO_LARGE
