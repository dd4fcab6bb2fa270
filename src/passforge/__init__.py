"""passforge: build, sign and bundle Apple Wallet passes."""

from passforge.archive import ArchiveAssembler
from passforge.assets import AssetCollection
from passforge.builder import PassBuilder
from passforge.bundle import PassBundle
from passforge.data import PassData
from passforge.errors import (
    ArchiveError,
    AuthKeyError,
    DeliveryError,
    DuplicateAssetError,
    EmptyBundleError,
    PassError,
    PassFrozenError,
    PushConfigError,
    SigningError,
    ValidationError,
)
from passforge.manifest import ManifestBuilder
from passforge.models import (
    Asset,
    Manifest,
    ManifestEntry,
    PushConfig,
    PushResult,
    VerificationResult,
    Violation,
)
from passforge.push import PushNotifier
from passforge.signing import PassSigner, sign_manifest
from passforge.verify import PassVerifier

__version__ = "0.1.0"

__all__ = [
    "ArchiveAssembler",
    "ArchiveError",
    "Asset",
    "AssetCollection",
    "AuthKeyError",
    "DeliveryError",
    "DuplicateAssetError",
    "EmptyBundleError",
    "Manifest",
    "ManifestBuilder",
    "ManifestEntry",
    "PassBuilder",
    "PassBundle",
    "PassData",
    "PassError",
    "PassFrozenError",
    "PassSigner",
    "PassVerifier",
    "PushConfig",
    "PushConfigError",
    "PushNotifier",
    "PushResult",
    "SigningError",
    "ValidationError",
    "VerificationResult",
    "Violation",
    "sign_manifest",
]
