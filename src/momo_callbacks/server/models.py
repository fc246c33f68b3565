"""Configuration and response models for the callback server.

All configuration models are pydantic-settings classes and can be populated
from environment variables.
"""

from __future__ import annotations

import logging
from typing import Literal

from pydantic import BaseModel, Field, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

logger = logging.getLogger(__name__)

ACK_MESSAGE = "Callback received successfully"


class CallbackAck(BaseModel):
    """Acknowledgment returned to the provider on every webhook route.

    The body never depends on whether the callback was classified or
    delivered.

    Example:
        >>> CallbackAck().model_dump()
        {'status': 'success', 'message': 'Callback received successfully'}
    """

    status: Literal["success"] = Field(
        default="success",
        description="Always 'success'",
    )
    message: str = Field(
        default=ACK_MESSAGE,
        description="Fixed acknowledgment message",
    )


class RequestTooLargeResponse(BaseModel):
    """Error body for HTTP 413 responses.

    Example:
        >>> RequestTooLargeResponse(
        ...     message="Request body must be less than 1024 bytes",
        ...     details={"limit": 1024},
        ... )
    """

    error: Literal["request_too_large"] = Field(default="request_too_large")
    message: str = Field(description="Human-readable error description")
    details: dict[str, int] = Field(description="Limit that was exceeded")


class TLSConfig(BaseSettings):
    """TLS termination configuration.

    Attributes:
        enabled: Serve HTTPS (plain HTTP is for local development only)
        certfile: PEM certificate chain path
        keyfile: PEM private key path

    Environment Variables:
        MOMO_CALLBACK_TLS_ENABLED: Enable TLS (default: true)
        MOMO_CALLBACK_TLS_CERTFILE: Certificate chain path
        MOMO_CALLBACK_TLS_KEYFILE: Private key path

    Example:
        >>> config = TLSConfig(certfile="/etc/momo/cert.pem", keyfile="/etc/momo/key.pem")
    """

    model_config = SettingsConfigDict(env_prefix="MOMO_CALLBACK_TLS_", extra="ignore")

    enabled: bool = Field(
        default=True,
        description="Terminate TLS on the listener",
    )
    certfile: str | None = Field(
        default=None,
        description="Path to the PEM certificate chain",
    )
    keyfile: str | None = Field(
        default=None,
        description="Path to the PEM private key",
    )

    @model_validator(mode="after")
    def _check_pair(self) -> TLSConfig:
        if (self.certfile is None) != (self.keyfile is None):
            raise ValueError("certfile and keyfile must be configured together")
        return self


class ValidationConfig(BaseSettings):
    """Request validation configuration.

    Attributes:
        max_body_size: Maximum webhook body size in bytes (default: 1MB)

    Environment Variables:
        MOMO_CALLBACK_MAX_BODY_SIZE: Maximum body size in bytes

    Example:
        >>> config = ValidationConfig(max_body_size=64 * 1024)
    """

    model_config = SettingsConfigDict(populate_by_name=True, extra="ignore")

    max_body_size: int = Field(
        default=1024 * 1024,  # 1MB
        ge=1024,  # Minimum 1KB
        le=100 * 1024 * 1024,  # Maximum 100MB
        description="Maximum request body size in bytes",
        validation_alias="MOMO_CALLBACK_MAX_BODY_SIZE",
    )


class ChannelConfig(BaseSettings):
    """Delivery channel configuration.

    Attributes:
        capacity: Envelopes buffered before producers wait
        enqueue_timeout: Seconds a request waits for capacity before the
            envelope is dropped (None waits indefinitely)

    Environment Variables:
        MOMO_CALLBACK_CHANNEL_CAPACITY: Channel capacity (default: 100)
        MOMO_CALLBACK_CHANNEL_ENQUEUE_TIMEOUT: Enqueue timeout in seconds
    """

    model_config = SettingsConfigDict(
        env_prefix="MOMO_CALLBACK_CHANNEL_", extra="ignore"
    )

    capacity: int = Field(
        default=100,
        ge=1,
        le=1_000_000,
        description="Maximum number of buffered envelopes",
    )
    enqueue_timeout: float | None = Field(
        default=None,
        gt=0,
        description="Seconds to wait for capacity (unset waits indefinitely)",
    )


class ObservabilityConfig(BaseSettings):
    """Logging and metrics configuration.

    Attributes:
        prometheus_enabled: Expose Prometheus metrics on a separate port
        metrics_port: Port for the /metrics endpoint
        log_body_limit: Characters of a rejected body written to the log

    Environment Variables:
        MOMO_CALLBACK_OBSERVABILITY_PROMETHEUS_ENABLED: Enable Prometheus
        MOMO_CALLBACK_OBSERVABILITY_METRICS_PORT: Metrics server port
        MOMO_CALLBACK_OBSERVABILITY_LOG_BODY_LIMIT: Logged body length
    """

    model_config = SettingsConfigDict(
        env_prefix="MOMO_CALLBACK_OBSERVABILITY_", extra="ignore"
    )

    prometheus_enabled: bool = Field(
        default=False,
        description="Enable Prometheus metrics endpoint on separate port",
    )
    metrics_port: int = Field(
        default=9090,
        ge=1024,
        le=65535,
        description="Separate port for Prometheus /metrics endpoint",
    )
    log_body_limit: int = Field(
        default=2048,
        ge=0,
        description="Maximum characters of a raw body included in log lines",
    )


class ServerConfig(BaseSettings):
    """Complete callback server configuration.

    Attributes:
        tls: TLS termination configuration
        validation: Request validation configuration (body size limits)
        channel: Delivery channel configuration
        observability: Metrics and logging configuration
        host: Bind address
        port: Bind port
        shutdown_timeout: Seconds in-flight requests get to finish on shutdown
        log_level: Root log level
        app_name: Application name

    Environment Variables:
        MOMO_CALLBACK_HOST: Bind address (default: 127.0.0.1)
        MOMO_CALLBACK_PORT: Bind port (default: 8500)
        MOMO_CALLBACK_SHUTDOWN_TIMEOUT: Graceful shutdown deadline (default: 30)
        MOMO_CALLBACK_LOG_LEVEL: Log level (default: info)

        See nested config classes for their environment variables.

    Example:
        >>> config = ServerConfig()
        >>> config = ServerConfig(
        ...     tls=TLSConfig(certfile="cert.pem", keyfile="key.pem"),
        ...     channel=ChannelConfig(capacity=500),
        ... )
    """

    model_config = SettingsConfigDict(env_prefix="MOMO_CALLBACK_", extra="ignore")

    tls: TLSConfig = Field(
        default_factory=TLSConfig,
        description="TLS termination configuration",
    )
    validation: ValidationConfig = Field(
        default_factory=ValidationConfig,
        description="Request validation configuration (body size limits)",
    )
    channel: ChannelConfig = Field(
        default_factory=ChannelConfig,
        description="Delivery channel configuration",
    )
    observability: ObservabilityConfig = Field(
        default_factory=ObservabilityConfig,
        description="Observability configuration (metrics, logging)",
    )
    host: str = Field(
        default="127.0.0.1",
        description="Server host",
    )
    port: int = Field(
        default=8500,
        ge=1,
        le=65535,
        description="Server port",
    )
    shutdown_timeout: float = Field(
        default=30.0,
        ge=0,
        description="Seconds in-flight requests may take to finish on shutdown",
    )
    log_level: Literal["critical", "error", "warning", "info", "debug"] = Field(
        default="info",
        description="Log level",
    )
    app_name: str = Field(
        default="MoMo Callback Server",
        description="Application name",
    )
