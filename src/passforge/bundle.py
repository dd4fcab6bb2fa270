"""Combine several signed passes into one ``.pkpasses`` bundle."""

from __future__ import annotations

import logging
import tempfile
from pathlib import Path

from starlette.responses import Response

from passforge.archive import write_atomic, write_members
from passforge.builder import PASS_EXTENSION, PassBuilder
from passforge.errors import ArchiveError, EmptyBundleError, PassError
from passforge.responses import PKPASSES_MEDIA_TYPE, archive_response

logger = logging.getLogger(__name__)

BUNDLE_EXTENSION = "pkpasses"

EMPTY_BUNDLE_MESSAGE = (
    "Cannot create bundle with no passes. Add at least one pass before creating the bundle."
)


class PassBundle:
    """Ordered collection of signed pass archives.

    Entries are named ``pass1.pkpass``, ``pass2.pkpass``, ... in the order
    passes were added. Passes cannot be removed, and :meth:`build` can be
    called any number of times; it always reflects the current contents.

    Args:
        temp_dir: Scratch directory for the bundle zip while it is written.
            Defaults to the platform temp directory. It can be changed through
            :attr:`temp_dir` until the first :meth:`add` or :meth:`build`.
    """

    def __init__(self, temp_dir: str | Path | None = None) -> None:
        self._passes: list[bytes] = []
        self._temp_dir = Path(temp_dir) if temp_dir is not None else Path(tempfile.gettempdir())
        self._started = False

    def __len__(self) -> int:
        return len(self._passes)

    @property
    def temp_dir(self) -> Path:
        return self._temp_dir

    @temp_dir.setter
    def temp_dir(self, value: str | Path) -> None:
        if self._started:
            raise PassError("The temp directory must be set before passes are added.")
        self._temp_dir = Path(value)

    def add(self, archive: bytes | PassBuilder) -> str:
        """Append a signed pass and return the entry name it will get.

        *archive* is either finished ``.pkpass`` bytes or a :class:`PassBuilder`,
        which is built right away.
        """
        if isinstance(archive, PassBuilder):
            archive = archive.build()
        if not archive:
            raise ValueError("Pass archive must not be empty.")
        self._started = True
        self._passes.append(bytes(archive))
        return self._entry_name(len(self._passes))

    def names(self) -> list[str]:
        return [self._entry_name(index) for index in range(1, len(self._passes) + 1)]

    @staticmethod
    def _entry_name(position: int) -> str:
        return f"pass{position}.{PASS_EXTENSION}"

    def build(self) -> bytes:
        """Return the bundle zip.

        Raises:
            EmptyBundleError: if no pass was added.
            ArchiveError: if the scratch file could not be written.
        """
        self._started = True
        if not self._passes:
            raise EmptyBundleError(EMPTY_BUNDLE_MESSAGE)
        members = list(zip(self.names(), self._passes))
        try:
            with tempfile.TemporaryFile(dir=self._temp_dir, suffix=f".{BUNDLE_EXTENSION}") as scratch:
                write_members(scratch, members)
                scratch.seek(0)
                content = scratch.read()
        except OSError as exc:
            raise ArchiveError(f"Could not create zip archive in {self._temp_dir}: {exc}") from exc
        logger.info("Built bundle with %d passes (%d bytes)", len(members), len(content))
        return content

    def write_to_file(self, path: str | Path) -> Path:
        """Build the bundle and write it to *path*.

        Raises:
            EmptyBundleError: if no pass was added.
            ArchiveError: if *path* cannot be written.
        """
        return write_atomic(path, self.build())

    def as_response(self, filename: str = f"passes.{BUNDLE_EXTENSION}") -> Response:
        """Build the bundle and wrap it in a download response."""
        return archive_response(self.build(), filename, PKPASSES_MEDIA_TYPE)


__all__ = ["BUNDLE_EXTENSION", "EMPTY_BUNDLE_MESSAGE", "PassBundle"]
