"""Tests for passforge.manifest: ManifestBuilder."""

from __future__ import annotations

import hashlib
import json

import pytest

from passforge.manifest import ManifestBuilder, canonical_manifest_bytes, sha1_hex
from passforge.models import Asset, ManifestEntry


class TestSha1Hex:
    def test_known_digest(self) -> None:
        assert sha1_hex(b"abc") == "a9993e364706816aba3e25717850c26c9cd0d89d"

    def test_empty_digest(self) -> None:
        assert sha1_hex(b"") == hashlib.sha1(b"").hexdigest()


class TestManifestBuilder:
    def test_pass_document_only(self) -> None:
        manifest = ManifestBuilder().build(b'{"a":1}', [])
        assert manifest.names() == ["pass.json"]
        assert manifest.entries[0].sha1 == sha1_hex(b'{"a":1}')

    def test_one_entry_per_asset(self) -> None:
        assets = [
            Asset(name="icon.png", content=b"icon"),
            Asset(name="fr.lproj/pass.strings", content=b'"a" = "b";\n'),
        ]
        manifest = ManifestBuilder().build(b"{}", assets)
        assert manifest.names() == ["pass.json", "icon.png", "fr.lproj/pass.strings"]
        assert manifest.as_dict()["icon.png"] == sha1_hex(b"icon")

    def test_duplicate_asset_rejected(self) -> None:
        assets = [Asset(name="pass.json", content=b"x")]
        with pytest.raises(ValueError):
            ManifestBuilder().build(b"{}", assets)

    def test_canonical_bytes_are_sorted_compact_json(self) -> None:
        assets = [Asset(name="logo.png", content=b"l"), Asset(name="icon.png", content=b"i")]
        manifest = ManifestBuilder().build(b"{}", assets)
        decoded = json.loads(manifest.canonical)
        assert list(decoded) == ["icon.png", "logo.png", "pass.json"]
        assert b" " not in manifest.canonical

    def test_slashes_not_escaped(self) -> None:
        manifest = ManifestBuilder().build(b"{}", [Asset(name="en.lproj/logo.png", content=b"")])
        assert b'"en.lproj/logo.png"' in manifest.canonical

    def test_canonical_bytes_independent_of_asset_order(self) -> None:
        a = Asset(name="a.png", content=b"a")
        b = Asset(name="b.png", content=b"b")
        first = ManifestBuilder().build(b"{}", [a, b])
        second = ManifestBuilder().build(b"{}", [b, a])
        assert first.canonical == second.canonical

    def test_canonical_matches_helper(self) -> None:
        entries = [ManifestEntry(name="pass.json", sha1="0" * 40)]
        assert canonical_manifest_bytes(entries) == b'{"pass.json":"' + b"0" * 40 + b'"}'
