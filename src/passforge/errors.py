"""Exception hierarchy for passforge."""

from __future__ import annotations

from passforge.models import Violation


class PassError(Exception):
    """Base class for every error raised by passforge."""


class ValidationError(PassError):
    """Pass data is missing required fields or holds values of the wrong type."""

    def __init__(self, violations: list[Violation]) -> None:
        self.violations = list(violations)
        details = "; ".join(f"{v.field}: {v.message}" for v in self.violations)
        super().__init__(f"Invalid pass data: {details}" if details else "Invalid pass data")


class DuplicateAssetError(PassError):
    """An asset name is already taken within the pass."""


class PassFrozenError(PassError):
    """The pass was already assembled and can no longer be changed."""


class SigningError(PassError):
    """Key material could not be loaded or the signature could not be produced."""


class ArchiveError(PassError):
    """The archive could not be assembled or written."""


class EmptyBundleError(PassError):
    """A bundle was built before any pass was added."""


class PushConfigError(PassError):
    """Push configuration is incomplete."""


class AuthKeyError(PassError):
    """The push auth key could not be read or is not an ES256 key."""


class DeliveryError(PassError):
    """The notification service could not be reached or rejected the request."""


__all__ = [
    "ArchiveError",
    "AuthKeyError",
    "DeliveryError",
    "DuplicateAssetError",
    "EmptyBundleError",
    "PassError",
    "PassFrozenError",
    "PushConfigError",
    "SigningError",
    "ValidationError",
]
