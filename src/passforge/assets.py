"""Named binary files (icons, logos, localized strings) attached to a pass."""

from __future__ import annotations

import logging
from collections.abc import Iterator, Mapping
from pathlib import Path

import httpx

from passforge.errors import DuplicateAssetError, PassFrozenError
from passforge.models import Asset

logger = logging.getLogger(__name__)

# Names the archive assembler writes itself.
RESERVED_NAMES = frozenset({"pass.json", "manifest.json", "signature"})

LOCALE_STRINGS_NAME = "pass.strings"


def _check_name(name: str) -> str:
    if not name:
        raise ValueError("Asset name must not be empty.")
    if name.startswith("/") or "\\" in name:
        raise ValueError(f"Asset name must be a relative archive path: {name!r}")
    parts = name.split("/")
    if any(part in ("", ".", "..") for part in parts):
        raise ValueError(f"Asset name contains an invalid path segment: {name!r}")
    return name


def _escape_strings_value(value: str) -> str:
    return (
        value.replace("\\", "\\\\")
        .replace('"', '\\"')
        .replace("\n", "\\n")
        .replace("\r", "\\r")
    )


def render_strings(strings: Mapping[str, str]) -> bytes:
    """Render *strings* in the ``"key" = "value";`` format of ``pass.strings``."""
    lines = [
        f'"{_escape_strings_value(str(key))}" = "{_escape_strings_value(str(value))}";\n'
        for key, value in strings.items()
    ]
    return "".join(lines).encode("utf-8")


def locale_path(language: str, name: str) -> str:
    if not language or "/" in language:
        raise ValueError(f"Invalid language code: {language!r}")
    return f"{language}.lproj/{name}"


class AssetCollection:
    """Insertion-ordered set of uniquely named assets.

    Adding a name that is already present, or one of :data:`RESERVED_NAMES`,
    raises :class:`~passforge.errors.DuplicateAssetError`; nothing is ever
    overwritten.
    """

    def __init__(self) -> None:
        self._assets: dict[str, Asset] = {}
        self._frozen = False

    def __len__(self) -> int:
        return len(self._assets)

    def __contains__(self, name: object) -> bool:
        return name in self._assets

    def __iter__(self) -> Iterator[Asset]:
        return self.files()

    def files(self) -> Iterator[Asset]:
        """Yield every asset in the order it was added."""
        return iter(list(self._assets.values()))

    def names(self) -> list[str]:
        return list(self._assets)

    def freeze(self) -> None:
        self._frozen = True

    # ------------------------------------------------------------------
    # Adding content
    # ------------------------------------------------------------------

    def add_file_content(self, content: bytes | str, name: str) -> Asset:
        """Store *content* under *name*; ``str`` content is UTF-8 encoded."""
        if self._frozen:
            raise PassFrozenError("Files cannot be added after the pass was built.")
        name = _check_name(name)
        if name in RESERVED_NAMES:
            raise DuplicateAssetError(f"'{name}' is reserved for the pass archive itself.")
        if name in self._assets:
            raise DuplicateAssetError(f"A file named '{name}' was already added.")
        if isinstance(content, str):
            content = content.encode("utf-8")
        asset = Asset(name=name, content=bytes(content))
        self._assets[name] = asset
        logger.debug("Added asset %s (%d bytes)", name, len(asset.content))
        return asset

    def add_file(self, path: str | Path, name: str | None = None) -> Asset:
        """Read *path* and store it under *name* (default: the file's base name).

        Raises:
            FileNotFoundError: if *path* is not a readable file.
        """
        file_path = Path(path)
        if not file_path.is_file():
            raise FileNotFoundError(f"File {file_path} does not exist.")
        try:
            content = file_path.read_bytes()
        except OSError as exc:
            raise FileNotFoundError(f"File {file_path} could not be read: {exc}") from exc
        return self.add_file_content(content, name or file_path.name)

    def add_remote_file(
        self,
        url: str,
        name: str | None = None,
        client: httpx.Client | None = None,
    ) -> Asset:
        """Download *url* and store the body under *name* (default: last URL segment).

        Raises:
            FileNotFoundError: on transport failure or a non-success status.
        """
        target = name or httpx.URL(url).path.rsplit("/", 1)[-1]
        try:
            if client is None:
                response = httpx.get(url, follow_redirects=True, timeout=30.0)
            else:
                response = client.get(url, follow_redirects=True)
            response.raise_for_status()
        except httpx.HTTPError as exc:
            raise FileNotFoundError(f"Could not fetch remote file {url}: {exc}") from exc
        return self.add_file_content(response.content, target)

    def add_locale_file(
        self, language: str, path: str | Path, name: str | None = None
    ) -> Asset:
        file_path = Path(path)
        if not file_path.is_file():
            raise FileNotFoundError(f"File {file_path} does not exist.")
        return self.add_file_content(
            file_path.read_bytes(), locale_path(language, name or file_path.name)
        )

    def add_locale_file_content(
        self, language: str, content: bytes | str, name: str
    ) -> Asset:
        return self.add_file_content(content, locale_path(language, name))

    def add_locale_strings(self, language: str, strings: Mapping[str, str]) -> Asset:
        """Store *strings* as ``<language>.lproj/pass.strings``."""
        return self.add_file_content(
            render_strings(strings), locale_path(language, LOCALE_STRINGS_NAME)
        )


__all__ = [
    "LOCALE_STRINGS_NAME",
    "RESERVED_NAMES",
    "AssetCollection",
    "locale_path",
    "render_strings",
]
