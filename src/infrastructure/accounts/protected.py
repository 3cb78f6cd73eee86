"""Local account with its own digest construction and replay protection."""

from __future__ import annotations

from loguru import logger

from domain.signing.digest import build_signing_digest
from infrastructure.accounts.keystore import EcdsaSignature, KeystoreError, LocalAccount


class ConflictingSignatureError(KeystoreError):
    """Raised when a request would sign a second root within one domain."""

    def __init__(self, domain: bytes) -> None:
        """Initialize conflicting signature error.

        Args:
            domain: Domain that already has a signed root
        """
        super().__init__(f"Refusing to sign a conflicting root for domain {domain.hex()}")
        self.domain = domain


class ProtectedLocalAccount(LocalAccount):
    """Local account that signs raw roots and keeps a signing ledger.

    Each domain identifies a single signing slot: once a root has been signed
    within a domain, signing that root again is allowed but signing any other
    root within the same domain is refused.
    """

    def __init__(self, name: str, encrypted_key: bytes, public_key_pem: bytes) -> None:
        super().__init__(name, encrypted_key, public_key_pem)
        self._ledger: dict[bytes, bytes] = {}

    def sign_generic(self, data: bytes, domain: bytes) -> EcdsaSignature:
        """Sign an object root within a domain.

        Args:
            data: 32-byte object root
            domain: 32-byte signing domain

        Returns:
            Signature over the signing digest of data and domain

        Raises:
            ConflictingSignatureError: If another root was signed in domain
            KeystoreError: If the account is locked or signing fails
        """
        previous = self._ledger.get(bytes(domain))
        if previous is not None and previous != bytes(data):
            logger.bind(account_id=self.name, security_event=True, severity="high").warning(
                f"Blocked conflicting signature for domain {domain.hex()}"
            )
            raise ConflictingSignatureError(bytes(domain))

        signature = self.sign(build_signing_digest(data, domain))
        self._ledger[bytes(domain)] = bytes(data)
        return signature

    def signed_root(self, domain: bytes) -> bytes | None:
        """Return the root signed within a domain, if any."""
        return self._ledger.get(bytes(domain))
