"""TLS material for the HTTPS listener.

Certificate and key are held as PEM bytes, validated once at startup and
written to a private temporary directory for uvicorn, which only accepts
file paths.

Example:
    >>> material = TLSMaterial.from_files("/etc/momo/cert.pem", "/etc/momo/key.pem")
    >>> material.validate()
    >>> with material.materialize() as (certfile, keyfile):
    ...     uvicorn.Config(app, ssl_certfile=certfile, ssl_keyfile=keyfile)
"""

from __future__ import annotations

import logging
import os
import ssl
import tempfile
from contextlib import contextmanager
from dataclasses import dataclass, field
from pathlib import Path
from typing import TYPE_CHECKING

from momo_callbacks.server.errors import TLSConfigurationError

if TYPE_CHECKING:
    from collections.abc import Iterator

logger = logging.getLogger(__name__)

__all__ = ["TLSMaterial"]


@dataclass(frozen=True)
class TLSMaterial:
    """PEM encoded certificate chain and private key.

    Attributes:
        cert_pem: Certificate chain (leaf first)
        key_pem: Private key matching the leaf certificate
    """

    cert_pem: bytes = field(repr=False)
    key_pem: bytes = field(repr=False)

    @classmethod
    def from_files(cls, certfile: str | Path, keyfile: str | Path) -> TLSMaterial:
        """Read certificate and key from disk.

        Raises:
            TLSConfigurationError: Either file cannot be read
        """
        try:
            cert_pem = Path(certfile).read_bytes()
            key_pem = Path(keyfile).read_bytes()
        except OSError as e:
            raise TLSConfigurationError(f"Cannot read TLS material: {e}") from e
        return cls(cert_pem=cert_pem, key_pem=key_pem)

    @contextmanager
    def materialize(self) -> Iterator[tuple[str, str]]:
        """Write the PEM pair to owner-only temp files.

        Yields:
            ``(certfile, keyfile)`` paths, removed on exit
        """
        with tempfile.TemporaryDirectory(prefix="momo-tls-") as directory:
            certfile = os.path.join(directory, "cert.pem")
            keyfile = os.path.join(directory, "key.pem")
            for path, data in ((certfile, self.cert_pem), (keyfile, self.key_pem)):
                fd = os.open(path, os.O_WRONLY | os.O_CREAT | os.O_EXCL, 0o600)
                with os.fdopen(fd, "wb") as handle:
                    handle.write(data)
            yield certfile, keyfile

    def validate(self) -> ssl.SSLContext:
        """Load the pair into a server-side SSL context.

        Returns:
            The loaded context

        Raises:
            TLSConfigurationError: Not PEM, unreadable, or key does not
                match the certificate
        """
        if not self.cert_pem.strip() or not self.key_pem.strip():
            raise TLSConfigurationError("TLS certificate and key must not be empty")
        context = ssl.create_default_context(ssl.Purpose.CLIENT_AUTH)
        with self.materialize() as (certfile, keyfile):
            try:
                context.load_cert_chain(certfile=certfile, keyfile=keyfile)
            except (ssl.SSLError, OSError) as e:
                raise TLSConfigurationError(f"Invalid TLS certificate or key: {e}") from e
        logger.info("TLS certificate and key loaded")
        return context
