"""Capability interfaces an account may implement.

Accounts are duck-typed: an implementation provides only the methods for the
capabilities it supports. Methods may be coroutine functions or plain
blocking functions; the signing core bounds either kind with a timeout.
"""

from __future__ import annotations

from typing import Any, Protocol, runtime_checkable


@runtime_checkable
class Account(Protocol):
    """Key-holding entity that can expose its public key."""

    def public_key(self) -> Any:
        """Return the account public key."""
        ...


@runtime_checkable
class CompositeAccount(Protocol):
    """Distributed account whose verifying key differs from its share key."""

    def composite_public_key(self) -> Any:
        """Return the public key signatures from this account verify against."""
        ...


@runtime_checkable
class Locker(Protocol):
    """Account whose secret material is gated behind explicit unlock and lock."""

    def is_unlocked(self) -> Any:
        """Report whether the account is currently unlocked."""
        ...

    def unlock(self, passphrase: bytes) -> Any:
        """Unlock the account.

        Args:
            passphrase: Candidate passphrase

        Raises:
            Exception: If the passphrase is rejected
        """
        ...

    def lock(self) -> Any:
        """Lock the account, discarding unlocked secret material."""
        ...


@runtime_checkable
class ProtectingSigner(Protocol):
    """Account that builds its own signing digest and guards against replay.

    It receives the raw object root and domain rather than a prehashed digest.
    """

    def sign_generic(self, data: bytes, domain: bytes) -> Any:
        """Sign an object root within a domain.

        Args:
            data: 32-byte object root
            domain: 32-byte signing domain

        Returns:
            Signature
        """
        ...


@runtime_checkable
class GenericSigner(Protocol):
    """Account that signs a caller-built digest with no bookkeeping."""

    def sign(self, digest: bytes) -> Any:
        """Sign a 32-byte signing digest.

        Args:
            digest: Signing digest

        Returns:
            Signature
        """
        ...


@runtime_checkable
class Signature(Protocol):
    """Opaque signature that can check itself against a digest and key."""

    def verify(self, digest: bytes, public_key: Any) -> bool:
        """Verify the signature.

        Args:
            digest: Signing digest the signature should cover
            public_key: Key to verify against

        Returns:
            True if the signature is valid
        """
        ...
