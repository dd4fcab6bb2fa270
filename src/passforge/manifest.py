"""Digest manifest (``manifest.json``) of a pass."""

from __future__ import annotations

import hashlib
import json
from collections.abc import Iterable

from passforge.data import PASS_DOCUMENT_NAME
from passforge.models import Asset, Manifest, ManifestEntry

MANIFEST_NAME = "manifest.json"


def sha1_hex(content: bytes) -> str:
    """Return the hex-encoded SHA-1 digest of *content*.

    Wallet reads manifest digests as SHA-1; the algorithm is not configurable.
    """
    return hashlib.sha1(content).hexdigest()


def canonical_manifest_bytes(entries: Iterable[ManifestEntry]) -> bytes:
    """Deterministic JSON serialisation of the manifest for signing."""
    data = {entry.name: entry.sha1 for entry in entries}
    return json.dumps(data, sort_keys=True, separators=(",", ":")).encode("utf-8")


class ManifestBuilder:
    """Hash the pass document and every asset into a :class:`Manifest`."""

    def build(self, data_bytes: bytes, assets: Iterable[Asset]) -> Manifest:
        entries = [ManifestEntry(name=PASS_DOCUMENT_NAME, sha1=sha1_hex(data_bytes))]
        seen = {PASS_DOCUMENT_NAME}
        for asset in assets:
            if asset.name in seen:
                raise ValueError(f"Duplicate manifest entry: {asset.name}")
            seen.add(asset.name)
            entries.append(ManifestEntry(name=asset.name, sha1=sha1_hex(asset.content)))
        return Manifest(entries=entries, canonical=canonical_manifest_bytes(entries))


__all__ = ["MANIFEST_NAME", "ManifestBuilder", "canonical_manifest_bytes", "sha1_hex"]
