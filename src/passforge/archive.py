"""Zip packing of pass archives and atomic writes to disk."""

from __future__ import annotations

import io
import os
import tempfile
import zipfile
from collections.abc import Iterable
from pathlib import Path
from typing import IO

from passforge.data import PASS_DOCUMENT_NAME
from passforge.errors import ArchiveError
from passforge.manifest import MANIFEST_NAME
from passforge.models import Asset
from passforge.signing import SIGNATURE_NAME

WRITE_ERROR_MESSAGE = "Could not write zip archive to file."

# Every member carries the same timestamp so equal input gives equal bytes.
_FIXED_DATE_TIME = (1980, 1, 1, 0, 0, 0)


def _member(name: str) -> zipfile.ZipInfo:
    info = zipfile.ZipInfo(name, date_time=_FIXED_DATE_TIME)
    info.compress_type = zipfile.ZIP_DEFLATED
    info.external_attr = 0o644 << 16
    return info


def write_members(target: IO[bytes], members: Iterable[tuple[str, bytes]]) -> None:
    """Write *members* as a zip into the open binary stream *target*.

    Raises:
        ArchiveError: if the zip writer fails or a name repeats.
    """
    seen: set[str] = set()
    try:
        with zipfile.ZipFile(target, mode="w") as zf:
            for name, content in members:
                if name in seen:
                    raise ArchiveError(f"Duplicate archive member: {name}")
                seen.add(name)
                zf.writestr(_member(name), content)
    except (OSError, ValueError, zipfile.LargeZipFile) as exc:
        raise ArchiveError(f"Could not create zip archive: {exc}") from exc


def write_atomic(path: str | Path, data: bytes) -> Path:
    """Write *data* to *path* through a temporary sibling file and rename it.

    A failure at any point leaves nothing at *path*.

    Raises:
        ArchiveError: if the directory does not exist or is not writable.
    """
    target = Path(path)
    tmp_name: str | None = None
    try:
        fd, tmp_name = tempfile.mkstemp(
            dir=target.parent, prefix=f".{target.name}.", suffix=".tmp"
        )
        with os.fdopen(fd, "wb") as fh:
            fh.write(data)
            fh.flush()
            os.fsync(fh.fileno())
        os.replace(tmp_name, target)
    except OSError as exc:
        if tmp_name is not None and os.path.exists(tmp_name):
            os.unlink(tmp_name)
        raise ArchiveError(WRITE_ERROR_MESSAGE) from exc
    return target


class ArchiveAssembler:
    """Pack a signed pass into its ``.pkpass`` zip.

    Members are exactly ``pass.json``, ``manifest.json``, ``signature`` and the
    assets under their given names, in that order.
    """

    def assemble(
        self,
        data_bytes: bytes,
        manifest_bytes: bytes,
        signature_bytes: bytes,
        assets: Iterable[Asset],
    ) -> bytes:
        members = [
            (PASS_DOCUMENT_NAME, data_bytes),
            (MANIFEST_NAME, manifest_bytes),
            (SIGNATURE_NAME, signature_bytes),
        ]
        members.extend((asset.name, asset.content) for asset in assets)
        buffer = io.BytesIO()
        write_members(buffer, members)
        return buffer.getvalue()


__all__ = ["WRITE_ERROR_MESSAGE", "ArchiveAssembler", "write_atomic", "write_members"]
