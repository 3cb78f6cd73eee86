"""Signing orchestration domain module."""

from .canonical import Bytes4, Bytes32, Bytes48, Bytes96, ByteVector, Uint64, hash_tree_root
from .capabilities import AccountCapabilities, Capability, probe_capabilities
from .config import SigningConfig
from .digest import SigningContainer, build_root, build_signing_digest
from .exceptions import (
    CanonicalizationError,
    PublicKeyUnavailableError,
    RelockFailedError,
    SignerTimeoutError,
    SigningError,
    UnlockFailedError,
    UnsupportedCapabilityError,
)
from .interfaces import (
    Account,
    CompositeAccount,
    GenericSigner,
    Locker,
    ProtectingSigner,
    Signature,
)
from .lifecycle import UnlockOutcome, UnlockSession, lock, unlock, unlocked
from .service import SigningService, best_public_key


__all__ = [
    # Canonical types
    "ByteVector",
    "Bytes4",
    "Bytes32",
    "Bytes48",
    "Bytes96",
    "Uint64",
    "hash_tree_root",
    # Digest
    "SigningContainer",
    "build_root",
    "build_signing_digest",
    # Capabilities
    "Account",
    "AccountCapabilities",
    "Capability",
    "CompositeAccount",
    "GenericSigner",
    "Locker",
    "ProtectingSigner",
    "Signature",
    "probe_capabilities",
    # Lifecycle
    "UnlockOutcome",
    "UnlockSession",
    "lock",
    "unlock",
    "unlocked",
    # Service
    "SigningConfig",
    "SigningService",
    "best_public_key",
    # Exceptions
    "CanonicalizationError",
    "PublicKeyUnavailableError",
    "RelockFailedError",
    "SignerTimeoutError",
    "SigningError",
    "UnlockFailedError",
    "UnsupportedCapabilityError",
]
