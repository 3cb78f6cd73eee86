"""Runtime classification of account capabilities."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Flag, auto
from typing import Any

from domain.signing.exceptions import UnsupportedCapabilityError
from domain.signing.interfaces import (
    Account,
    CompositeAccount,
    GenericSigner,
    Locker,
    ProtectingSigner,
)


class Capability(Flag):
    """Optional abilities an account handle may provide."""

    NONE = 0
    LOCKER = auto()
    PROTECTING_SIGNER = auto()
    GENERIC_SIGNER = auto()
    PUBLIC_KEY = auto()
    COMPOSITE_PUBLIC_KEY = auto()


_PROBES: tuple[tuple[Capability, type], ...] = (
    (Capability.LOCKER, Locker),
    (Capability.PROTECTING_SIGNER, ProtectingSigner),
    (Capability.GENERIC_SIGNER, GenericSigner),
    (Capability.PUBLIC_KEY, Account),
    (Capability.COMPOSITE_PUBLIC_KEY, CompositeAccount),
)


def probe_capabilities(account: Any) -> Capability:
    """Classify an account against every known capability.

    Capabilities are independent; an account may have any combination,
    including none. Probing never raises.

    Args:
        account: Account handle

    Returns:
        Bitset of supported capabilities
    """
    found = Capability.NONE
    for capability, interface in _PROBES:
        if isinstance(account, interface):
            found |= capability
    return found


@dataclass(frozen=True)
class AccountCapabilities:
    """Capability bitset probed once for an account."""

    flags: Capability

    @classmethod
    def probe(cls, account: Any) -> AccountCapabilities:
        """Probe an account and wrap the result.

        Args:
            account: Account handle

        Returns:
            Probed capabilities
        """
        return cls(probe_capabilities(account))

    @property
    def is_locker(self) -> bool:
        """Whether the account supports unlock, lock and unlock-state queries."""
        return Capability.LOCKER in self.flags

    @property
    def is_protecting_signer(self) -> bool:
        """Whether the account signs raw root and domain itself."""
        return Capability.PROTECTING_SIGNER in self.flags

    @property
    def is_generic_signer(self) -> bool:
        """Whether the account signs prebuilt digests."""
        return Capability.GENERIC_SIGNER in self.flags

    @property
    def has_public_key(self) -> bool:
        return Capability.PUBLIC_KEY in self.flags

    @property
    def has_composite_public_key(self) -> bool:
        return Capability.COMPOSITE_PUBLIC_KEY in self.flags

    def require(self, capability: Capability, operation: str) -> None:
        """Ensure a capability is present.

        Args:
            capability: Capability the operation needs
            operation: Operation name for the error message

        Raises:
            UnsupportedCapabilityError: If the capability is missing
        """
        if capability not in self.flags:
            name = capability.name.lower().replace("_", " ") if capability.name else "capability"
            raise UnsupportedCapabilityError(name, operation)
