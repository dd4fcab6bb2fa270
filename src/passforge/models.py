"""Pydantic models for passforge."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field, StrictInt, StrictStr


class Violation(BaseModel):
    """One problem found while validating pass data."""

    field: str
    message: str


class PassFields(BaseModel):
    """Top-level fields every pass document must carry.

    Only the required keys are checked here; any other key in the document is
    passed through untouched.
    """

    model_config = ConfigDict(extra="ignore")

    formatVersion: StrictInt
    organizationName: StrictStr = Field(min_length=1)
    passTypeIdentifier: StrictStr = Field(min_length=1)
    serialNumber: StrictStr = Field(min_length=1)
    teamIdentifier: StrictStr = Field(min_length=1)


class Asset(BaseModel):
    """A named file attached to a pass."""

    model_config = ConfigDict(frozen=True)

    name: str
    content: bytes


class ManifestEntry(BaseModel):
    """Archive file name and the SHA-1 hex digest of its content."""

    model_config = ConfigDict(frozen=True)

    name: str
    sha1: str = Field(min_length=40, max_length=40)


class Manifest(BaseModel):
    """Digest listing of a pass plus the exact bytes that get signed.

    ``canonical`` is computed once by :class:`~passforge.manifest.ManifestBuilder`
    and reused for both signing and archiving.
    """

    model_config = ConfigDict(frozen=True)

    entries: list[ManifestEntry] = Field(default_factory=list)
    canonical: bytes

    def names(self) -> list[str]:
        return [entry.name for entry in self.entries]

    def as_dict(self) -> dict[str, str]:
        return {entry.name: entry.sha1 for entry in self.entries}


class VerificationResult(BaseModel):
    """Outcome of checking a finished pass archive."""

    valid: bool
    errors: list[str] = Field(default_factory=list)
    pass_type_identifier: str | None = None
    serial_number: str | None = None


class PushConfig(BaseModel):
    """Credentials for token-based push to the notification service."""

    bundle_id: str = ""
    key_id: str = ""
    team_id: str = ""
    auth_key_path: str = ""
    production: bool = True

    def is_complete(self) -> bool:
        return all((self.bundle_id, self.key_id, self.team_id, self.auth_key_path))


class PushResult(BaseModel):
    """Status code and raw body returned by the notification service."""

    status: int
    response: str


__all__ = [
    "Asset",
    "Manifest",
    "ManifestEntry",
    "PassFields",
    "PushConfig",
    "PushResult",
    "VerificationResult",
    "Violation",
]
