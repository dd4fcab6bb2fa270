"""Reader-side checks of finished pass archives."""

from __future__ import annotations

import io
import json
import logging
import shutil
import subprocess
import tempfile
import zipfile
from pathlib import Path

from passforge.data import PASS_DOCUMENT_NAME
from passforge.manifest import MANIFEST_NAME, sha1_hex
from passforge.models import VerificationResult
from passforge.signing import SIGNATURE_NAME

logger = logging.getLogger(__name__)

_REQUIRED_MEMBERS = (PASS_DOCUMENT_NAME, MANIFEST_NAME, SIGNATURE_NAME)


def _read_members(archive_bytes: bytes) -> tuple[dict[str, bytes], list[str]]:
    """Return the first copy of each member and the names stored more than once."""
    members: dict[str, bytes] = {}
    duplicates: list[str] = []
    with zipfile.ZipFile(io.BytesIO(archive_bytes)) as zf:
        for info in zf.infolist():
            if info.filename in members:
                if info.filename not in duplicates:
                    duplicates.append(info.filename)
                continue
            members[info.filename] = zf.read(info)
    return members, duplicates


class PassVerifier:
    """Check a ``.pkpass`` the way a pass reader would."""

    def __init__(self, openssl: str = "openssl") -> None:
        self._openssl = openssl

    def verify_archive(self, archive_bytes: bytes) -> VerificationResult:
        """Check archive layout and every manifest digest.

        The manifest must list each member except itself and the signature,
        exactly once, with a matching SHA-1.
        """
        try:
            members, duplicates = _read_members(archive_bytes)
        except (zipfile.BadZipFile, ValueError) as exc:
            return VerificationResult(valid=False, errors=[f"Not a zip archive: {exc}"])

        errors = [f"Missing {name}" for name in _REQUIRED_MEMBERS if name not in members]
        errors.extend(f"Duplicate member {name}" for name in duplicates)
        if MANIFEST_NAME not in members:
            return VerificationResult(valid=False, errors=errors)

        try:
            manifest = json.loads(members[MANIFEST_NAME])
        except (json.JSONDecodeError, UnicodeDecodeError) as exc:
            return VerificationResult(valid=False, errors=[*errors, f"Unreadable manifest: {exc}"])
        if not isinstance(manifest, dict):
            return VerificationResult(valid=False, errors=[*errors, "Manifest is not an object"])

        covered = set(members) - {MANIFEST_NAME, SIGNATURE_NAME}
        for name in sorted(covered - set(manifest)):
            errors.append(f"{name} is not listed in the manifest")
        for name in sorted(set(manifest) - covered):
            errors.append(f"{name} is listed in the manifest but not archived")
        for name in sorted(covered & set(manifest)):
            if sha1_hex(members[name]) != manifest[name]:
                errors.append(f"Digest mismatch for {name}")

        pass_type = serial = None
        if PASS_DOCUMENT_NAME in members:
            try:
                document = json.loads(members[PASS_DOCUMENT_NAME])
            except (json.JSONDecodeError, UnicodeDecodeError) as exc:
                errors.append(f"Unreadable {PASS_DOCUMENT_NAME}: {exc}")
            else:
                if isinstance(document, dict):
                    pass_type = document.get("passTypeIdentifier")
                    serial = document.get("serialNumber")

        return VerificationResult(
            valid=not errors,
            errors=errors,
            pass_type_identifier=pass_type if isinstance(pass_type, str) else None,
            serial_number=serial if isinstance(serial, str) else None,
        )

    def verify_signature(
        self,
        manifest_bytes: bytes,
        signature: bytes,
        ca_file: str | Path | None = None,
    ) -> VerificationResult:
        """Check *signature* against exactly *manifest_bytes* with ``openssl cms``.

        Without *ca_file* only the signature itself is checked, not the
        certificate chain.
        """
        executable = shutil.which(self._openssl)
        if executable is None:
            return VerificationResult(
                valid=False, errors=[f"{self._openssl} executable not found"]
            )
        with tempfile.TemporaryDirectory() as workdir:
            manifest_path = Path(workdir) / MANIFEST_NAME
            signature_path = Path(workdir) / SIGNATURE_NAME
            manifest_path.write_bytes(manifest_bytes)
            signature_path.write_bytes(signature)
            command = [
                executable, "cms", "-verify", "-binary",
                "-inform", "DER",
                "-in", str(signature_path),
                "-content", str(manifest_path),
                "-purpose", "any",
                "-out", str(Path(workdir) / "verified"),
            ]
            if ca_file is None:
                command.append("-noverify")
            else:
                command.extend(["-CAfile", str(ca_file)])
            result = subprocess.run(command, capture_output=True, text=True, timeout=30)
        if result.returncode != 0:
            logger.debug("openssl cms -verify failed: %s", result.stderr.strip())
            return VerificationResult(
                valid=False,
                errors=[f"Signature verification failed: {result.stderr.strip()}"],
            )
        return VerificationResult(valid=True)

    def verify(
        self,
        archive_bytes: bytes,
        ca_file: str | Path | None = None,
        check_signature: bool = True,
    ) -> VerificationResult:
        """Run :meth:`verify_archive` and, if it passes, :meth:`verify_signature`."""
        result = self.verify_archive(archive_bytes)
        if not result.valid or not check_signature:
            return result
        members, _ = _read_members(archive_bytes)
        signature_result = self.verify_signature(
            members[MANIFEST_NAME], members[SIGNATURE_NAME], ca_file
        )
        return result.model_copy(
            update={"valid": signature_result.valid, "errors": signature_result.errors}
        )


__all__ = ["PassVerifier"]
