"""Assemble one complete, signed ``.pkpass`` archive."""

from __future__ import annotations

import logging
from collections.abc import Mapping
from pathlib import Path
from typing import Any

import httpx
from starlette.responses import Response

from passforge.archive import ArchiveAssembler, write_atomic
from passforge.assets import AssetCollection
from passforge.data import PassData
from passforge.manifest import ManifestBuilder
from passforge.models import Asset, Violation
from passforge.responses import PKPASS_MEDIA_TYPE, archive_response
from passforge.signing import PassSigner

logger = logging.getLogger(__name__)

PASS_EXTENSION = "pkpass"


class PassBuilder:
    """Collect pass data and files, then sign and pack them.

    Mutators may be called freely until the first :meth:`build`; from then on
    the pass is frozen so the manifest always describes what gets packed.

    Example::

        signer = PassSigner.from_pkcs12("Certificates.p12", "secret", "wwdr.pem")
        builder = PassBuilder(signer)
        builder.set_data({"formatVersion": 1, ...})
        builder.add_file("images/icon.png")
        builder.write_to_file("boarding.pkpass")
    """

    def __init__(self, signer: PassSigner, name: str = "pass") -> None:
        self._signer = signer
        self._data = PassData()
        self._assets = AssetCollection()
        self._manifest_builder = ManifestBuilder()
        self._assembler = ArchiveAssembler()
        self.name = name

    @property
    def filename(self) -> str:
        return f"{self.name}.{PASS_EXTENSION}"

    @property
    def data(self) -> PassData:
        return self._data

    @property
    def assets(self) -> AssetCollection:
        return self._assets

    # ------------------------------------------------------------------
    # Mutators
    # ------------------------------------------------------------------

    def set_data(self, data: Mapping[str, Any] | str, merge: bool = False) -> None:
        self._data.set_data(data, merge=merge)

    def add_file(self, path: str | Path, name: str | None = None) -> Asset:
        return self._assets.add_file(path, name)

    def add_file_content(self, content: bytes | str, name: str) -> Asset:
        return self._assets.add_file_content(content, name)

    def add_remote_file(
        self, url: str, name: str | None = None, client: httpx.Client | None = None
    ) -> Asset:
        return self._assets.add_remote_file(url, name, client=client)

    def add_locale_file(
        self, language: str, path: str | Path, name: str | None = None
    ) -> Asset:
        return self._assets.add_locale_file(language, path, name)

    def add_locale_file_content(
        self, language: str, content: bytes | str, name: str
    ) -> Asset:
        return self._assets.add_locale_file_content(language, content, name)

    def add_locale_strings(self, language: str, strings: Mapping[str, str]) -> Asset:
        return self._assets.add_locale_strings(language, strings)

    # ------------------------------------------------------------------
    # Output
    # ------------------------------------------------------------------

    def validate(self) -> list[Violation]:
        return self._data.validate()

    def build(self) -> bytes:
        """Validate, hash, sign and pack the pass; return the archive bytes.

        Raises:
            ValidationError: if required pass fields are missing or malformed.
            SigningError: if the manifest could not be signed.
            ArchiveError: if the zip could not be written.
        """
        self._data.require_valid()
        self._data.freeze()
        self._assets.freeze()

        data_bytes = self._data.to_bytes()
        assets = list(self._assets.files())
        manifest = self._manifest_builder.build(data_bytes, assets)
        signature = self._signer.sign(manifest.canonical)
        archive = self._assembler.assemble(data_bytes, manifest.canonical, signature, assets)
        logger.info(
            "Built pass %s (%d files, %d bytes)",
            self._data.get("serialNumber"),
            len(manifest.entries),
            len(archive),
        )
        return archive

    def write_to_file(self, path: str | Path) -> Path:
        """Build the pass and write it to *path*.

        Raises:
            ArchiveError: if *path* cannot be written.
        """
        return write_atomic(path, self.build())

    def as_response(self) -> Response:
        return archive_response(self.build(), self.filename, PKPASS_MEDIA_TYPE)


__all__ = ["PASS_EXTENSION", "PassBuilder"]
