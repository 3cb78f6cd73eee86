"""Local ECDSA accounts backed by passphrase-encrypted keys.

Signatures are ECDSA over SECP256R1 with the 32-byte signing digest passed
as a SHA-256 prehash, so the digest built by the signing core is signed
as-is.
"""

from __future__ import annotations

from typing import Any

from cryptography.exceptions import InvalidSignature
from cryptography.hazmat.primitives import hashes, serialization
from cryptography.hazmat.primitives.asymmetric import ec
from cryptography.hazmat.primitives.asymmetric.utils import Prehashed
from loguru import logger

from domain.common.exceptions import SecurityViolationError


DIGEST_LENGTH = 32


class KeystoreError(SecurityViolationError):
    """Raised when a local account cannot perform a key operation."""

    def __init__(self, message: str) -> None:
        """Initialize keystore error.

        Args:
            message: Error message
        """
        super().__init__(
            message,
            violation_type="KEYSTORE_ERROR",
        )


def _signature_algorithm() -> ec.ECDSA:
    return ec.ECDSA(Prehashed(hashes.SHA256()))


class EcdsaSignature(bytes):
    """DER-encoded ECDSA signature over a 32-byte signing digest."""

    def verify(self, digest: bytes, public_key: Any) -> bool:
        """Verify the signature.

        Args:
            digest: Signing digest
            public_key: SECP256R1 public key

        Returns:
            True if the signature is valid
        """
        if not isinstance(public_key, ec.EllipticCurvePublicKey):
            logger.debug(f"Unsupported public key type {type(public_key).__name__}")
            return False
        try:
            public_key.verify(bytes(self), digest, _signature_algorithm())
            return True
        except (InvalidSignature, ValueError) as e:
            # Invalid signature is not an error, return False
            logger.debug(f"Signature verification failed: {e!r}")
            return False

    def __repr__(self) -> str:
        return f"EcdsaSignature({self[:8].hex()}...)"


def _sign_digest(private_key: ec.EllipticCurvePrivateKey, digest: bytes) -> EcdsaSignature:
    if len(digest) != DIGEST_LENGTH:
        raise KeystoreError(f"Digest must be {DIGEST_LENGTH} bytes, got {len(digest)}")
    try:
        return EcdsaSignature(private_key.sign(digest, _signature_algorithm()))
    except Exception as e:
        raise KeystoreError(f"Failed to sign digest: {e}") from e


class LocalAccount:
    """Account holding an encrypted private key that must be unlocked to sign.

    The encrypted PKCS8 key is kept at rest; unlocking decrypts it into
    memory and locking discards the decrypted key again.
    """

    def __init__(self, name: str, encrypted_key: bytes, public_key_pem: bytes) -> None:
        """Initialize local account.

        Args:
            name: Account name
            encrypted_key: Passphrase-encrypted PKCS8 private key in PEM format
            public_key_pem: Matching public key in PEM format

        Raises:
            KeystoreError: If the public key cannot be loaded
        """
        self.name = name
        self._encrypted_key = encrypted_key
        self._private_key: ec.EllipticCurvePrivateKey | None = None

        try:
            key = serialization.load_pem_public_key(public_key_pem)
        except Exception as e:
            raise KeystoreError(f"Failed to load public key for {name}: {e}") from e
        if not isinstance(key, ec.EllipticCurvePublicKey):
            raise KeystoreError(f"Invalid ECDSA public key format for {name}")
        self._public_key = key

    @classmethod
    def generate(
        cls, name: str, passphrase: bytes, curve: ec.EllipticCurve | None = None
    ) -> LocalAccount:
        """Create an account with a fresh key pair.

        Args:
            name: Account name
            passphrase: Passphrase protecting the key at rest
            curve: Elliptic curve (default: SECP256R1/P-256)

        Returns:
            New locked account

        Raises:
            KeystoreError: If key generation or encryption fails
        """
        if not passphrase:
            raise KeystoreError("Account passphrase cannot be empty")

        try:
            logger.info(f"Generating ECDSA key pair for account {name}")
            private_key = ec.generate_private_key(curve or ec.SECP256R1())
            encrypted = private_key.private_bytes(
                encoding=serialization.Encoding.PEM,
                format=serialization.PrivateFormat.PKCS8,
                encryption_algorithm=serialization.BestAvailableEncryption(passphrase),
            )
            public_pem = private_key.public_key().public_bytes(
                encoding=serialization.Encoding.PEM,
                format=serialization.PublicFormat.SubjectPublicKeyInfo,
            )
        except Exception as e:
            raise KeystoreError(f"Failed to generate account key: {e}") from e

        return cls(name, encrypted, public_pem)

    def is_unlocked(self) -> bool:
        return self._private_key is not None

    def unlock(self, passphrase: bytes) -> None:
        """Decrypt the private key into memory.

        Args:
            passphrase: Candidate passphrase

        Raises:
            KeystoreError: If the passphrase is incorrect
        """
        try:
            loaded: Any = serialization.load_pem_private_key(
                self._encrypted_key, password=passphrase
            )
        except (ValueError, TypeError) as e:
            raise KeystoreError(f"Incorrect passphrase for account {self.name}") from e

        if not isinstance(loaded, ec.EllipticCurvePrivateKey):
            raise KeystoreError(f"Invalid ECDSA key format for account {self.name}")
        self._private_key = loaded

    def lock(self) -> None:
        self._private_key = None

    def public_key(self) -> ec.EllipticCurvePublicKey:
        return self._public_key

    def sign(self, digest: bytes) -> EcdsaSignature:
        """Sign a 32-byte signing digest.

        Args:
            digest: Signing digest

        Returns:
            Signature

        Raises:
            KeystoreError: If the account is locked or signing fails
        """
        if self._private_key is None:
            raise KeystoreError(f"Account {self.name} is locked")
        return _sign_digest(self._private_key, digest)

    def export_encrypted_key(self) -> bytes:
        """Return the passphrase-encrypted private key in PEM format."""
        return self._encrypted_key

    def export_public_key(self) -> bytes:
        """Return the public key in PEM format."""
        return self._public_key.public_bytes(
            encoding=serialization.Encoding.PEM,
            format=serialization.PublicFormat.SubjectPublicKeyInfo,
        )

    def __repr__(self) -> str:
        state = "unlocked" if self.is_unlocked() else "locked"
        return f"{type(self).__name__}(name={self.name!r}, {state})"


class UnlockedAccount:
    """Account with an in-memory key and no lock discipline."""

    def __init__(self, name: str, private_key: ec.EllipticCurvePrivateKey) -> None:
        """Initialize unlocked account.

        Args:
            name: Account name
            private_key: Signing key
        """
        self.name = name
        self._private_key = private_key

    @classmethod
    def generate(cls, name: str, curve: ec.EllipticCurve | None = None) -> UnlockedAccount:
        """Create an account with a fresh key pair.

        Args:
            name: Account name
            curve: Elliptic curve (default: SECP256R1/P-256)

        Returns:
            New account
        """
        logger.info(f"Generating ECDSA key pair for account {name}")
        return cls(name, ec.generate_private_key(curve or ec.SECP256R1()))

    def public_key(self) -> ec.EllipticCurvePublicKey:
        return self._private_key.public_key()

    def sign(self, digest: bytes) -> EcdsaSignature:
        return _sign_digest(self._private_key, digest)

    def __repr__(self) -> str:
        return f"UnlockedAccount(name={self.name!r})"
