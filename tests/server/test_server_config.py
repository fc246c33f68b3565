"""Tests for callback server configuration models."""

from __future__ import annotations

import pytest
from pydantic import ValidationError

from momo_callbacks.server.models import (
    CallbackAck,
    ChannelConfig,
    ObservabilityConfig,
    ServerConfig,
    TLSConfig,
)


class TestServerConfigDefaults:
    """Test default values of the composed configuration."""

    def test_defaults(self) -> None:
        config = ServerConfig()

        assert config.host == "127.0.0.1"
        assert config.port == 8500
        assert config.shutdown_timeout == 30.0
        assert config.log_level == "info"
        assert config.tls.enabled is True
        assert config.tls.certfile is None
        assert config.channel.capacity == 100
        assert config.channel.enqueue_timeout is None
        assert config.validation.max_body_size == 1024 * 1024
        assert config.observability.prometheus_enabled is False
        assert config.observability.metrics_port == 9090
        assert config.observability.log_body_limit == 2048

    def test_port_range(self) -> None:
        with pytest.raises(ValidationError):
            ServerConfig(port=0)
        with pytest.raises(ValidationError):
            ServerConfig(port=70000)

    def test_log_level_choices(self) -> None:
        with pytest.raises(ValidationError):
            ServerConfig(log_level="verbose")  # type: ignore[arg-type]


class TestEnvironment:
    """Test loading configuration from MOMO_CALLBACK_* variables."""

    def test_top_level_env(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("MOMO_CALLBACK_HOST", "0.0.0.0")
        monkeypatch.setenv("MOMO_CALLBACK_PORT", "9443")
        monkeypatch.setenv("MOMO_CALLBACK_SHUTDOWN_TIMEOUT", "5")

        config = ServerConfig()

        assert config.host == "0.0.0.0"
        assert config.port == 9443
        assert config.shutdown_timeout == 5.0

    def test_tls_env(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("MOMO_CALLBACK_TLS_CERTFILE", "/etc/momo/cert.pem")
        monkeypatch.setenv("MOMO_CALLBACK_TLS_KEYFILE", "/etc/momo/key.pem")

        config = ServerConfig()

        assert config.tls.certfile == "/etc/momo/cert.pem"
        assert config.tls.keyfile == "/etc/momo/key.pem"

    def test_channel_env(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("MOMO_CALLBACK_CHANNEL_CAPACITY", "250")
        monkeypatch.setenv("MOMO_CALLBACK_CHANNEL_ENQUEUE_TIMEOUT", "2.5")

        config = ServerConfig()

        assert config.channel.capacity == 250
        assert config.channel.enqueue_timeout == 2.5

    def test_observability_env(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("MOMO_CALLBACK_OBSERVABILITY_PROMETHEUS_ENABLED", "true")
        monkeypatch.setenv("MOMO_CALLBACK_OBSERVABILITY_METRICS_PORT", "9191")

        config = ObservabilityConfig()

        assert config.prometheus_enabled is True
        assert config.metrics_port == 9191


class TestNestedModels:
    """Test validation of nested configuration models."""

    def test_tls_requires_both_files(self) -> None:
        """Certificate and key are configured together or not at all."""
        with pytest.raises(ValidationError):
            TLSConfig(certfile="cert.pem")
        with pytest.raises(ValidationError):
            TLSConfig(keyfile="key.pem")

        config = TLSConfig(certfile="cert.pem", keyfile="key.pem")
        assert config.enabled is True

    def test_channel_capacity_positive(self) -> None:
        with pytest.raises(ValidationError):
            ChannelConfig(capacity=0)

    def test_enqueue_timeout_positive(self) -> None:
        with pytest.raises(ValidationError):
            ChannelConfig(enqueue_timeout=0)

    def test_metrics_port_range(self) -> None:
        with pytest.raises(ValidationError):
            ObservabilityConfig(metrics_port=80)


class TestCallbackAck:
    """Test the acknowledgment body."""

    def test_fixed_body(self) -> None:
        assert CallbackAck().model_dump() == {
            "status": "success",
            "message": "Callback received successfully",
        }
