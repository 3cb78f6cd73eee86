"""Concrete account implementations for the signing core."""

from infrastructure.accounts.keystore import (
    EcdsaSignature,
    KeystoreError,
    LocalAccount,
    UnlockedAccount,
)
from infrastructure.accounts.protected import ConflictingSignatureError, ProtectedLocalAccount


__all__ = [
    "ConflictingSignatureError",
    "EcdsaSignature",
    "KeystoreError",
    "LocalAccount",
    "ProtectedLocalAccount",
    "UnlockedAccount",
]
