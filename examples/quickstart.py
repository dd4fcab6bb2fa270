"""passforge quickstart: working demonstrations of the main features.

Run this file directly to verify your installation and see the features in action:

    python examples/quickstart.py

A throwaway certificate authority and pass certificate are generated in memory,
so no Apple credentials are needed. Each demo writes into a temporary directory
and cleans up after itself.
"""

from __future__ import annotations

import datetime
import io
import json
import tempfile
import zipfile
from pathlib import Path

from cryptography import x509
from cryptography.hazmat.primitives import hashes
from cryptography.hazmat.primitives.asymmetric import rsa
from cryptography.x509.oid import NameOID

from passforge import (
    EmptyBundleError,
    PassBuilder,
    PassBundle,
    PassSigner,
    PassVerifier,
    ValidationError,
)

PASS_DATA = {
    "formatVersion": 1,
    "organizationName": "Demo Airlines",
    "passTypeIdentifier": "pass.com.example.boarding",
    "serialNumber": "DEMO-0001",
    "teamIdentifier": "ABCDE12345",
    "description": "Boarding pass",
    "boardingPass": {
        "transitType": "PKTransitTypeAir",
        "primaryFields": [{"key": "origin", "label": "From", "value": "SFO"}],
    },
}


def _demo_signer() -> PassSigner:
    """Create a self-signed CA and a pass certificate issued by it."""
    now = datetime.datetime.now(datetime.timezone.utc)

    def _cert(subject_key, cn, issuer_key, issuer_name, ca):  # type: ignore[no-untyped-def]
        name = x509.Name([x509.NameAttribute(NameOID.COMMON_NAME, cn)])
        return (
            x509.CertificateBuilder()
            .subject_name(name)
            .issuer_name(issuer_name or name)
            .public_key(subject_key.public_key())
            .serial_number(x509.random_serial_number())
            .not_valid_before(now - datetime.timedelta(days=1))
            .not_valid_after(now + datetime.timedelta(days=30))
            .add_extension(x509.BasicConstraints(ca=ca, path_length=None), critical=True)
            .sign(issuer_key, hashes.SHA256())
        )

    ca_key = rsa.generate_private_key(public_exponent=65537, key_size=2048)
    ca_cert = _cert(ca_key, "Demo WWDR", ca_key, None, True)
    pass_key = rsa.generate_private_key(public_exponent=65537, key_size=2048)
    pass_cert = _cert(pass_key, "Pass Type ID: demo", ca_key, ca_cert.subject, False)
    return PassSigner(pass_key, pass_cert, [ca_cert])


# ---------------------------------------------------------------------------
# Demo 1: Build a single pass
# ---------------------------------------------------------------------------

def demo_build_pass(signer: PassSigner) -> bytes:
    """Build, write and inspect one signed pass."""

    print("\n=== Demo 1: Build a Pass ===")

    builder = PassBuilder(signer, name="boarding")
    builder.set_data(PASS_DATA)
    builder.add_file_content(b"\x89PNG demo icon", "icon.png")
    builder.add_locale_strings("fr", {"From": "De"})
    archive = builder.build()

    with zipfile.ZipFile(io.BytesIO(archive)) as zf:
        manifest = json.loads(zf.read("manifest.json"))
    for name, digest in manifest.items():
        print(f"  {digest}  {name}")

    with tempfile.TemporaryDirectory() as tmpdir:
        target = builder.write_to_file(Path(tmpdir) / builder.filename)
        print(f"  Written: {target.name} ({target.stat().st_size:,} bytes)")

    print("  Demo 1 passed.")
    return archive


# ---------------------------------------------------------------------------
# Demo 2: Validation errors
# ---------------------------------------------------------------------------

def demo_validation(signer: PassSigner) -> None:
    """Show the violations reported for an incomplete pass document."""

    print("\n=== Demo 2: Validation ===")

    builder = PassBuilder(signer)
    builder.set_data({"organizationName": "Demo Airlines"})
    for violation in builder.validate():
        print(f"  {violation.field}: {violation.message}")

    try:
        builder.build()
    except ValidationError as exc:
        print(f"  build() refused: {len(exc.violations)} violation(s)")
    else:
        raise AssertionError("Expected ValidationError")

    print("  Demo 2 passed.")


# ---------------------------------------------------------------------------
# Demo 3: Bundle several passes
# ---------------------------------------------------------------------------

def demo_bundle(signer: PassSigner, archive: bytes) -> None:
    """Bundle the demo pass with a second one."""

    print("\n=== Demo 3: Bundle Passes ===")

    bundle = PassBundle()
    try:
        bundle.build()
    except EmptyBundleError as exc:
        print(f"  Empty bundle: {exc}")

    second = PassBuilder(signer)
    second.set_data({**PASS_DATA, "serialNumber": "DEMO-0002"})
    second.add_file_content(b"\x89PNG demo icon", "icon.png")

    bundle.add(archive)
    bundle.add(second)
    with zipfile.ZipFile(io.BytesIO(bundle.build())) as zf:
        print(f"  Entries: {', '.join(zf.namelist())}")

    print("  Demo 3 passed.")


# ---------------------------------------------------------------------------
# Demo 4: Verify an archive
# ---------------------------------------------------------------------------

def demo_verify(archive: bytes) -> None:
    """Check layout and digests of a finished pass."""

    print("\n=== Demo 4: Verify ===")

    result = PassVerifier().verify(archive, check_signature=False)
    print(f"  Valid: {result.valid}  serial={result.serial_number}")
    assert result.valid, result.errors

    print("  Demo 4 passed.")


def main() -> None:
    signer = _demo_signer()
    archive = demo_build_pass(signer)
    demo_validation(signer)
    demo_bundle(signer, archive)
    demo_verify(archive)
    print("\nAll demos completed successfully.")


if __name__ == "__main__":
    main()
