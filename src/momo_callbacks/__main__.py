"""CLI entry point for momo-callbacks."""

from __future__ import annotations

import asyncio
import logging
import sys
from pathlib import Path
from typing import Any

import click
from pydantic import ValidationError

from momo_callbacks.callbacks.classifier import ParseError, classify_body
from momo_callbacks.server.errors import TLSConfigurationError
from momo_callbacks.server.factory import ROUTE_PREFIXES
from momo_callbacks.server.models import (
    ChannelConfig,
    ServerConfig,
    TLSConfig,
    ValidationConfig,
)

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


@click.group()
@click.version_option(package_name="momo-callbacks")
def cli() -> None:
    """MoMo callback server - receive and classify mobile money webhooks."""


@cli.command()
@click.option("--host", help="Bind address (default: 127.0.0.1)")
@click.option("--port", type=int, help="Bind port (default: 8500)")
@click.option(
    "--certfile",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    help="PEM certificate chain",
)
@click.option(
    "--keyfile",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    help="PEM private key",
)
@click.option(
    "--insecure",
    is_flag=True,
    help="Serve plain HTTP (local development only)",
)
@click.option("--capacity", type=int, help="Delivery channel capacity (default: 100)")
@click.option("--max-body-size", type=int, help="Maximum body size in bytes")
@click.option(
    "--log-level",
    type=click.Choice(["critical", "error", "warning", "info", "debug"]),
    help="Log level (default: info)",
)
def serve(
    host: str | None,
    port: int | None,
    certfile: Path | None,
    keyfile: Path | None,
    insecure: bool,
    capacity: int | None,
    max_body_size: int | None,
    log_level: str | None,
) -> None:
    """Run the HTTPS callback server and log every callback received."""
    overrides: dict[str, Any] = {}
    if host is not None:
        overrides["host"] = host
    if port is not None:
        overrides["port"] = port
    if log_level is not None:
        overrides["log_level"] = log_level

    tls_overrides: dict[str, Any] = {}
    if insecure:
        tls_overrides["enabled"] = False
    if certfile is not None:
        tls_overrides["certfile"] = str(certfile)
    if keyfile is not None:
        tls_overrides["keyfile"] = str(keyfile)

    try:
        if tls_overrides:
            overrides["tls"] = TLSConfig(**tls_overrides)
        if capacity is not None:
            overrides["channel"] = ChannelConfig(capacity=capacity)
        if max_body_size is not None:
            overrides["validation"] = ValidationConfig(max_body_size=max_body_size)
        config = ServerConfig(**overrides)
    except ValidationError as e:
        click.echo(f"Error: invalid configuration\n{e}", err=True)
        sys.exit(2)

    logging.basicConfig(level=config.log_level.upper(), format=LOG_FORMAT)

    from momo_callbacks.server.runner import serve as run_server

    try:
        asyncio.run(run_server(config))
    except TLSConfigurationError as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)


@cli.command()
@click.argument("body", type=click.File("rb"), default="-")
def classify(body: Any) -> None:
    """Classify a callback body read from a file (or stdin)."""
    result = classify_body(body.read())
    if isinstance(result, ParseError):
        click.echo(f"Unrecognised callback: {result.detail}", err=True)
        for variant, reason in result.rejections:
            click.echo(f"  {variant}: {reason}", err=True)
        sys.exit(1)
    click.echo(result.variant)
    click.echo(result.model_dump_json(indent=2, by_alias=True, exclude_none=True))


@cli.command()
def routes() -> None:
    """List the webhook routes served."""
    click.echo("GET       /health")
    for prefix in ROUTE_PREFIXES:
        click.echo(f"POST|PUT  /{prefix}/{{category}}")


if __name__ == "__main__":
    cli()
