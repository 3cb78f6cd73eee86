"""Signing and verification of arbitrary payloads for a single account."""

from __future__ import annotations

from typing import Any

from loguru import logger

from domain.signing.capabilities import AccountCapabilities, Capability
from domain.signing.config import SigningConfig
from domain.signing.digest import build_root, build_signing_digest, check_signing_inputs
from domain.signing.exceptions import PublicKeyUnavailableError, SigningError
from domain.signing.lifecycle import account_label, unlocked
from domain.signing.timeouts import call_with_timeout


def best_public_key(account: Any, capabilities: AccountCapabilities | None = None) -> Any:
    """Return the key signatures from an account verify against.

    Distributed accounts verify against their composite key; every other
    account against its own public key.

    Args:
        account: Account handle
        capabilities: Probed capabilities, probed here when omitted

    Returns:
        Public key

    Raises:
        PublicKeyUnavailableError: If the account cannot supply a key
    """
    caps = capabilities or AccountCapabilities.probe(account)

    if caps.has_composite_public_key:
        accessor = account.composite_public_key
    elif caps.has_public_key:
        accessor = account.public_key
    else:
        raise PublicKeyUnavailableError("Account does not provide a public key")

    try:
        key = accessor()
    except Exception as e:
        raise PublicKeyUnavailableError(f"Failed to obtain account public key: {e}") from e

    if key is None:
        raise PublicKeyUnavailableError("Account returned no public key")
    return key


class SigningService:
    """Drives an account through unlock, sign or verify, and relock.

    Example:
        service = SigningService(SigningConfig(timeout=5, passphrases=("secret",)))
        signature = await service.sign_payload(account, checkpoint, domain)
        assert await service.verify_payload(account, checkpoint, domain, signature)
    """

    def __init__(self, config: SigningConfig) -> None:
        """Initialize signing service.

        Args:
            config: Timeout and passphrase candidates used for every call
        """
        self._config = config

    @property
    def config(self) -> SigningConfig:
        return self._config

    async def sign_payload(self, account: Any, payload: Any, domain: bytes) -> Any:
        """Sign an arbitrary payload within a domain.

        Args:
            account: Account handle
            payload: Dataclass or pydantic model to sign
            domain: 32-byte signing domain

        Returns:
            Signature

        Raises:
            CanonicalizationError: If the payload cannot be hashed
            UnsupportedCapabilityError: If the account cannot sign
            UnlockFailedError: If the account could not be unlocked
            SignerTimeoutError: If an external call timed out
            RelockFailedError: If relocking failed after signing
            SigningError: If the signer rejected the request
        """
        return await self.sign_root(account, build_root(payload), domain)

    async def verify_payload(
        self, account: Any, payload: Any, domain: bytes, signature: Any
    ) -> bool:
        """Verify a payload signature against the account public key.

        Args:
            account: Account handle
            payload: Payload the signature should cover
            domain: 32-byte signing domain
            signature: Signature to check

        Returns:
            True if the signature is valid

        Raises:
            CanonicalizationError: If the payload cannot be hashed
            PublicKeyUnavailableError: If the account cannot supply a key
        """
        return await self.verify_root(account, build_root(payload), domain, signature)

    async def sign_root(self, account: Any, root: bytes, domain: bytes) -> Any:
        """Sign an object root within a domain.

        Protecting signers receive the raw root and domain so their own
        replay protection sees them; everything else signs the signing digest.

        Args:
            account: Account handle
            root: 32-byte object root
            domain: 32-byte signing domain

        Returns:
            Signature
        """
        capabilities = AccountCapabilities.probe(account)

        if capabilities.is_protecting_signer:
            check_signing_inputs(root, domain)
            logger.debug(f"Signing root {root.hex()} with protecting signer")
            return await self._sign_locked(
                account, capabilities, "sign_generic", account.sign_generic, root, domain
            )

        digest = build_signing_digest(root, domain)
        capabilities.require(Capability.GENERIC_SIGNER, "signing")
        return await self._sign_locked(account, capabilities, "sign", account.sign, digest)

    async def verify_root(
        self, account: Any, root: bytes, domain: bytes, signature: Any
    ) -> bool:
        """Verify a signature over an object root within a domain.

        Verification always rebuilds the signing digest, whatever signing
        protocol the account uses, and never unlocks the account.

        Args:
            account: Account handle
            root: 32-byte object root
            domain: 32-byte signing domain
            signature: Signature to check

        Returns:
            True if the signature is valid
        """
        digest = build_signing_digest(root, domain)
        public_key = best_public_key(account)
        return bool(signature.verify(digest, public_key))

    async def _sign_locked(
        self,
        account: Any,
        capabilities: AccountCapabilities,
        operation: str,
        func: Any,
        *args: bytes,
    ) -> Any:
        async with unlocked(account, capabilities, self._config) as session:
            try:
                session.signature = await call_with_timeout(
                    operation, self._config.timeout, func, *args
                )
            except SigningError:
                raise
            except Exception as e:
                raise SigningError(f"Failed to sign: {e}") from e
            logger.debug(f"Account {account_label(account)} signed via {operation}")
        return session.signature
