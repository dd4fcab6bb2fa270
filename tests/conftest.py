"""Shared test fixtures for passforge."""

from __future__ import annotations

from datetime import UTC, datetime, timedelta
from pathlib import Path
from typing import Any

import pytest
from cryptography import x509
from cryptography.hazmat.primitives import hashes, serialization
from cryptography.hazmat.primitives.asymmetric import ec, rsa
from cryptography.hazmat.primitives.serialization import pkcs12
from cryptography.x509.oid import NameOID

from passforge.builder import PassBuilder
from passforge.signing import PassSigner

P12_PASSWORD = "password"

# ---------------------------------------------------------------------------
# Certificate helpers
# ---------------------------------------------------------------------------


def _name(common_name: str) -> x509.Name:
    return x509.Name(
        [
            x509.NameAttribute(NameOID.COMMON_NAME, common_name),
            x509.NameAttribute(NameOID.ORGANIZATION_NAME, "Test Organization"),
        ]
    )


def make_certificate(
    subject_key: Any,
    subject_cn: str,
    issuer_key: Any | None = None,
    issuer_cert: x509.Certificate | None = None,
    ca: bool = False,
) -> x509.Certificate:
    """Issue a certificate for *subject_key*; self-signed when no issuer is given."""
    now = datetime.now(tz=UTC)
    issuer_name = issuer_cert.subject if issuer_cert else _name(subject_cn)
    signing_key = issuer_key or subject_key
    builder = (
        x509.CertificateBuilder()
        .subject_name(_name(subject_cn))
        .issuer_name(issuer_name)
        .public_key(subject_key.public_key())
        .serial_number(x509.random_serial_number())
        .not_valid_before(now - timedelta(days=1))
        .not_valid_after(now + timedelta(days=30))
        .add_extension(x509.BasicConstraints(ca=ca, path_length=None), critical=True)
        .add_extension(
            x509.KeyUsage(
                digital_signature=True,
                content_commitment=False,
                key_encipherment=False,
                data_encipherment=False,
                key_agreement=False,
                key_cert_sign=ca,
                crl_sign=ca,
                encipher_only=False,
                decipher_only=False,
            ),
            critical=True,
        )
        .add_extension(
            x509.SubjectKeyIdentifier.from_public_key(subject_key.public_key()),
            critical=False,
        )
    )
    if issuer_cert is not None:
        builder = builder.add_extension(
            x509.AuthorityKeyIdentifier.from_issuer_public_key(issuer_cert.public_key()),
            critical=False,
        )
    # Ed25519 certificates are signed without a separate hash algorithm.
    algorithm = (
        hashes.SHA256()
        if isinstance(signing_key, (rsa.RSAPrivateKey, ec.EllipticCurvePrivateKey))
        else None
    )
    return builder.sign(signing_key, algorithm)


# ---------------------------------------------------------------------------
# Key material: generated once per session
# ---------------------------------------------------------------------------


@pytest.fixture(scope="session")
def wwdr_key() -> rsa.RSAPrivateKey:
    return rsa.generate_private_key(public_exponent=65537, key_size=2048)


@pytest.fixture(scope="session")
def wwdr_cert(wwdr_key: rsa.RSAPrivateKey) -> x509.Certificate:
    """Stand-in for the WWDR intermediate: a self-signed CA."""
    return make_certificate(wwdr_key, "Test WWDR Authority", ca=True)


@pytest.fixture(scope="session")
def signer_key() -> rsa.RSAPrivateKey:
    return rsa.generate_private_key(public_exponent=65537, key_size=2048)


@pytest.fixture(scope="session")
def signer_cert(
    signer_key: rsa.RSAPrivateKey,
    wwdr_key: rsa.RSAPrivateKey,
    wwdr_cert: x509.Certificate,
) -> x509.Certificate:
    return make_certificate(
        signer_key, "Pass Type ID: pass.com.test.example", wwdr_key, wwdr_cert
    )


@pytest.fixture(scope="session")
def pass_signer(
    signer_key: rsa.RSAPrivateKey,
    signer_cert: x509.Certificate,
    wwdr_cert: x509.Certificate,
) -> PassSigner:
    """A shared PassSigner (stateless, safe to share)."""
    return PassSigner(signer_key, signer_cert, [wwdr_cert])


# ---------------------------------------------------------------------------
# On-disk key material
# ---------------------------------------------------------------------------


@pytest.fixture()
def cert_files(
    tmp_path: Path,
    signer_key: rsa.RSAPrivateKey,
    signer_cert: x509.Certificate,
    wwdr_cert: x509.Certificate,
) -> dict[str, Path]:
    """Write p12, PEM cert, PEM key and WWDR cert; return their paths."""
    certs = tmp_path / "certs"
    certs.mkdir()
    paths = {
        "p12": certs / "Certificates.p12",
        "cert": certs / "pass.pem",
        "key": certs / "pass.key",
        "wwdr": certs / "wwdr.pem",
    }
    paths["p12"].write_bytes(
        pkcs12.serialize_key_and_certificates(
            b"pass",
            signer_key,
            signer_cert,
            None,
            serialization.BestAvailableEncryption(P12_PASSWORD.encode()),
        )
    )
    paths["cert"].write_bytes(signer_cert.public_bytes(serialization.Encoding.PEM))
    paths["key"].write_bytes(
        signer_key.private_bytes(
            encoding=serialization.Encoding.PEM,
            format=serialization.PrivateFormat.PKCS8,
            encryption_algorithm=serialization.NoEncryption(),
        )
    )
    paths["wwdr"].write_bytes(wwdr_cert.public_bytes(serialization.Encoding.PEM))
    return paths


# ---------------------------------------------------------------------------
# Pass fixtures
# ---------------------------------------------------------------------------


@pytest.fixture()
def minimal_pass_data() -> dict[str, Any]:
    return {
        "formatVersion": 1,
        "organizationName": "X",
        "passTypeIdentifier": "pass.x",
        "serialNumber": "S1",
        "teamIdentifier": "T1",
    }


@pytest.fixture()
def sample_pass_data() -> dict[str, Any]:
    return {
        "description": "Test pass",
        "formatVersion": 1,
        "organizationName": "Test Organization",
        "passTypeIdentifier": "pass.com.test.example",
        "serialNumber": "12345678",
        "teamIdentifier": "KN44X8ZLNC",
        "barcode": {
            "format": "PKBarcodeFormatQR",
            "message": "Test-Message",
            "messageEncoding": "iso-8859-1",
        },
        "backgroundColor": "rgb(32,110,247)",
        "logoText": "Test Pass",
    }


@pytest.fixture()
def icon_file(tmp_path: Path) -> Path:
    """A small stand-in for icon.png."""
    path = tmp_path / "icon.png"
    path.write_bytes(b"\x89PNG\r\n\x1a\n" + bytes(range(64)))
    return path


@pytest.fixture()
def sample_builder(
    pass_signer: PassSigner,
    sample_pass_data: dict[str, Any],
    icon_file: Path,
) -> PassBuilder:
    builder = PassBuilder(pass_signer)
    builder.set_data(sample_pass_data)
    builder.add_file(icon_file)
    return builder


@pytest.fixture()
def sample_pass(sample_builder: PassBuilder) -> bytes:
    """Finished .pkpass bytes for the sample pass."""
    return sample_builder.build()
