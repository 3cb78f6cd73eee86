"""Signing-specific domain exceptions."""

from typing import Any

from domain.common.exceptions import SecurityViolationError


class SigningError(SecurityViolationError):
    """Base class for signing orchestration failures."""

    def __init__(
        self,
        message: str,
        violation_type: str = "SIGNING_ERROR",
        context: dict[str, Any] | None = None,
        error_code: str = "SIGNING_ERROR",
    ) -> None:
        """Initialize signing error.

        Args:
            message: Error message
            violation_type: Type of signing failure
            context: Additional context (never key material)
            error_code: Machine-readable error code
        """
        super().__init__(message, violation_type, context, error_code)


class CanonicalizationError(SigningError):
    """Raised when a payload cannot be hashed by the canonicalization scheme."""

    def __init__(self, message: str, path: str | None = None) -> None:
        """Initialize canonicalization error.

        Args:
            message: Description of the unsupported shape or value
            path: Dotted location of the offending value inside the payload
        """
        if path:
            message = f"{message} (at {path})"
        super().__init__(
            message,
            violation_type="CANONICALIZATION",
            context={"path": path} if path else None,
            error_code="CANONICALIZATION_ERROR",
        )
        self.path = path


class UnsupportedCapabilityError(SigningError):
    """Raised when an account lacks a capability an operation requires."""

    def __init__(self, capability: str, operation: str) -> None:
        """Initialize unsupported capability error.

        Args:
            capability: Name of the missing capability
            operation: Operation that required it
        """
        super().__init__(
            f"Account does not provide {capability} required for {operation}",
            violation_type="UNSUPPORTED_CAPABILITY",
            context={"capability": capability, "operation": operation},
            error_code="UNSUPPORTED_CAPABILITY",
        )
        self.capability = capability
        self.operation = operation


class UnlockFailedError(SigningError):
    """Raised when an account could not be unlocked."""

    def __init__(self, message: str = "Failed to unlock account", attempts: int = 0) -> None:
        """Initialize unlock failed error.

        Args:
            message: Error message
            attempts: Number of passphrase candidates tried
        """
        super().__init__(
            message,
            violation_type="UNLOCK_FAILED",
            context={"attempts": attempts},
            error_code="UNLOCK_FAILED",
        )
        self.attempts = attempts


class SignerTimeoutError(SigningError):
    """Raised when a call to an external signer exceeds its time bound."""

    def __init__(self, operation: str, timeout: float) -> None:
        """Initialize signer timeout error.

        Args:
            operation: Name of the external call that timed out
            timeout: Bound that was exceeded, in seconds
        """
        super().__init__(
            f"{operation} did not complete within {timeout:g}s",
            violation_type="SIGNER_TIMEOUT",
            context={"operation": operation, "timeout": timeout},
            error_code="SIGNER_TIMEOUT",
        )
        self.operation = operation
        self.timeout = timeout


class RelockFailedError(SigningError):
    """Raised when an account this call unlocked could not be locked again.

    The signature produced before the relock attempt, if any, is kept on the
    error so callers can tell a relock failure apart from a signing failure.
    """

    def __init__(self, message: str = "Failed to lock account", signature: Any = None) -> None:
        """Initialize relock failed error.

        Args:
            message: Error message
            signature: Signature produced before the relock failed, if any
        """
        super().__init__(
            message,
            violation_type="RELOCK_FAILED",
            context={"signed": signature is not None},
            error_code="RELOCK_FAILED",
        )
        self.signature = signature


class PublicKeyUnavailableError(SigningError):
    """Raised when an account cannot supply a public key for verification."""

    def __init__(self, message: str = "Failed to obtain account public key") -> None:
        """Initialize public key unavailable error.

        Args:
            message: Error message
        """
        super().__init__(
            message,
            violation_type="PUBLIC_KEY_UNAVAILABLE",
            error_code="PUBLIC_KEY_UNAVAILABLE",
        )
