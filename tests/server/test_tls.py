"""Tests for TLS material loading and validation."""

from __future__ import annotations

import os
import ssl
import stat
from pathlib import Path

import pytest

from momo_callbacks.server.errors import TLSConfigurationError
from momo_callbacks.server.tls import TLSMaterial

FIXTURES = Path(__file__).parent.parent / "fixtures" / "tls"
CERTFILE = FIXTURES / "cert.pem"
KEYFILE = FIXTURES / "key.pem"
OTHER_KEYFILE = FIXTURES / "other_key.pem"


class TestTLSMaterial:
    """Test loading PEM certificate/key pairs."""

    def test_from_files(self) -> None:
        material = TLSMaterial.from_files(CERTFILE, KEYFILE)

        assert material.cert_pem.startswith(b"-----BEGIN CERTIFICATE-----")
        assert b"PRIVATE KEY" in material.key_pem

    def test_repr_hides_key(self) -> None:
        """Key bytes never end up in logs via repr."""
        material = TLSMaterial.from_files(CERTFILE, KEYFILE)

        assert "PRIVATE KEY" not in repr(material)

    def test_missing_file(self, tmp_path: Path) -> None:
        with pytest.raises(TLSConfigurationError, match="Cannot read TLS material"):
            TLSMaterial.from_files(tmp_path / "missing.pem", KEYFILE)

    def test_validate_returns_server_context(self) -> None:
        context = TLSMaterial.from_files(CERTFILE, KEYFILE).validate()

        assert isinstance(context, ssl.SSLContext)

    def test_mismatched_key(self) -> None:
        """A key that does not belong to the certificate is fatal."""
        material = TLSMaterial.from_files(CERTFILE, OTHER_KEYFILE)

        with pytest.raises(TLSConfigurationError, match="Invalid TLS certificate or key"):
            material.validate()

    def test_not_pem(self) -> None:
        material = TLSMaterial(cert_pem=b"not a certificate", key_pem=b"not a key")

        with pytest.raises(TLSConfigurationError):
            material.validate()

    def test_empty_material(self) -> None:
        with pytest.raises(TLSConfigurationError, match="must not be empty"):
            TLSMaterial(cert_pem=b"", key_pem=b"  ").validate()

    def test_materialize_writes_private_files(self) -> None:
        material = TLSMaterial.from_files(CERTFILE, KEYFILE)

        with material.materialize() as (certfile, keyfile):
            assert Path(certfile).read_bytes() == material.cert_pem
            assert Path(keyfile).read_bytes() == material.key_pem
            mode = stat.S_IMODE(os.stat(keyfile).st_mode)
            assert mode == 0o600

        assert not Path(certfile).exists()
        assert not Path(keyfile).exists()
