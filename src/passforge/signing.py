"""Detached PKCS#7 signatures over pass manifests."""

from __future__ import annotations

import logging
from collections.abc import Sequence
from pathlib import Path

from cryptography import x509
from cryptography.hazmat.primitives import hashes, serialization
from cryptography.hazmat.primitives.asymmetric import ec, rsa
from cryptography.hazmat.primitives.serialization import pkcs7, pkcs12

from passforge.errors import SigningError

logger = logging.getLogger(__name__)

SIGNATURE_NAME = "signature"

SigningKey = rsa.RSAPrivateKey | ec.EllipticCurvePrivateKey

# ---------------------------------------------------------------------------
# Internal helpers
# ---------------------------------------------------------------------------


def _read(path: str | Path, what: str) -> bytes:
    try:
        return Path(path).read_bytes()
    except OSError as exc:
        raise SigningError(f"Could not read {what} at {path}: {exc}") from exc


def _load_certificate(data: bytes, what: str) -> x509.Certificate:
    """Load a PEM or DER certificate."""
    try:
        if b"-----BEGIN" in data:
            return x509.load_pem_x509_certificate(data)
        return x509.load_der_x509_certificate(data)
    except ValueError as exc:
        raise SigningError(f"Invalid {what}: {exc}") from exc


def _public_bytes(key: object) -> bytes:
    return key.public_bytes(  # type: ignore[attr-defined]
        encoding=serialization.Encoding.DER,
        format=serialization.PublicFormat.SubjectPublicKeyInfo,
    )


def _check_pair(private_key: object, certificate: x509.Certificate) -> SigningKey:
    if not isinstance(private_key, (rsa.RSAPrivateKey, ec.EllipticCurvePrivateKey)):
        raise SigningError(
            f"Unsupported key type: {type(private_key).__name__}. "
            "Only RSA and EC keys can sign passes."
        )
    if _public_bytes(private_key.public_key()) != _public_bytes(certificate.public_key()):
        raise SigningError("Private key does not match the signing certificate.")
    return private_key


# ---------------------------------------------------------------------------
# Signing primitive
# ---------------------------------------------------------------------------


def sign_manifest(
    manifest_bytes: bytes,
    private_key: SigningKey,
    certificate: x509.Certificate,
    chain: Sequence[x509.Certificate] = (),
) -> bytes:
    """Return a DER-encoded detached PKCS#7 signature over *manifest_bytes*.

    The signer certificate and every certificate in *chain* are embedded in
    the signature; the manifest itself is not.

    Raises:
        SigningError: if the key is unusable or the signing primitive fails.
    """
    key = _check_pair(private_key, certificate)
    try:
        builder = (
            pkcs7.PKCS7SignatureBuilder()
            .set_data(manifest_bytes)
            .add_signer(certificate, key, hashes.SHA256())
        )
        for extra in chain:
            builder = builder.add_certificate(extra)
        return builder.sign(
            serialization.Encoding.DER,
            [pkcs7.PKCS7Options.DetachedSignature, pkcs7.PKCS7Options.Binary],
        )
    except (TypeError, ValueError) as exc:
        raise SigningError(f"Unable to sign manifest: {exc}") from exc


# ---------------------------------------------------------------------------
# PassSigner
# ---------------------------------------------------------------------------


class PassSigner:
    """Loaded signing identity, reusable across any number of passes.

    The signer keeps no state between calls. Sharing one instance between
    threads relies on ``cryptography`` signing being thread-safe.
    """

    def __init__(
        self,
        private_key: SigningKey,
        certificate: x509.Certificate,
        chain: Sequence[x509.Certificate] = (),
    ) -> None:
        self._private_key = _check_pair(private_key, certificate)
        self._certificate = certificate
        self._chain = tuple(chain)

    @property
    def certificate(self) -> x509.Certificate:
        return self._certificate

    @property
    def chain(self) -> tuple[x509.Certificate, ...]:
        return self._chain

    @classmethod
    def from_pkcs12(
        cls,
        path: str | Path,
        password: str | bytes | None,
        wwdr_path: str | Path | None = None,
    ) -> PassSigner:
        """Load a pass type certificate bundle (``.p12``).

        Args:
            path: The ``.p12`` file exported from the keychain.
            password: Its export password, if any.
            wwdr_path: The intermediate certificate appended to the signature.
        """
        data = _read(path, "certificate bundle")
        if isinstance(password, str):
            password = password.encode("utf-8")
        try:
            private_key, certificate, additional = pkcs12.load_key_and_certificates(
                data, password or None
            )
        except ValueError as exc:
            raise SigningError(
                f"Could not read certificate bundle {path}; check the password: {exc}"
            ) from exc
        if private_key is None or certificate is None:
            raise SigningError(f"Certificate bundle {path} has no key or certificate.")
        chain = list(additional or [])
        if wwdr_path is not None:
            chain.append(
                _load_certificate(_read(wwdr_path, "WWDR certificate"), "WWDR certificate")
            )
        logger.debug("Loaded signing identity %s", certificate.subject.rfc4514_string())
        return cls(private_key, certificate, chain)  # type: ignore[arg-type]

    @classmethod
    def from_pem(
        cls,
        cert_path: str | Path,
        key_path: str | Path,
        wwdr_path: str | Path | None = None,
        key_password: str | bytes | None = None,
    ) -> PassSigner:
        """Load a separate certificate and private key (PEM or DER certificate)."""
        certificate = _load_certificate(_read(cert_path, "certificate"), "certificate")
        if isinstance(key_password, str):
            key_password = key_password.encode("utf-8")
        try:
            private_key = serialization.load_pem_private_key(
                _read(key_path, "private key"), password=key_password or None
            )
        except (TypeError, ValueError) as exc:
            raise SigningError(f"Could not load private key {key_path}: {exc}") from exc
        chain = []
        if wwdr_path is not None:
            chain.append(
                _load_certificate(_read(wwdr_path, "WWDR certificate"), "WWDR certificate")
            )
        return cls(private_key, certificate, chain)  # type: ignore[arg-type]

    def sign(self, manifest_bytes: bytes) -> bytes:
        return sign_manifest(manifest_bytes, self._private_key, self._certificate, self._chain)


__all__ = ["SIGNATURE_NAME", "PassSigner", "sign_manifest"]
