"""Domain layer base exceptions shared by every Signet component."""

from typing import Any


class DomainError(Exception):
    """Base class for all domain layer exceptions."""

    def __init__(self, message: str, error_code: str | None = None) -> None:
        """Initialize domain error.

        Args:
            message: Human-readable error message
            error_code: Optional machine-readable error code
        """
        super().__init__(message)
        self.message = message
        self.error_code = error_code


class ValidationError(DomainError):
    """Raised when a caller-supplied value breaks an input contract."""

    def __init__(
        self,
        message: str,
        field: str | None = None,
        value: str | int | float | bool | None = None,
        error_code: str = "VALIDATION_ERROR",
    ) -> None:
        """Initialize validation error.

        Args:
            message: Validation error message
            field: Name of the field that failed validation
            value: The invalid value (sanitized)
            error_code: Machine-readable error code
        """
        super().__init__(message, error_code)
        self.field = field
        self.value = value


class SecurityViolationError(DomainError):
    """Raised when a security-relevant operation fails or is refused."""

    def __init__(
        self,
        message: str,
        violation_type: str,
        context: dict[str, Any] | None = None,
        error_code: str = "SECURITY_VIOLATION",
    ) -> None:
        """Initialize security violation error.

        Args:
            message: Security violation message
            violation_type: Type of security violation
            context: Additional context (sanitized, never key material)
            error_code: Machine-readable error code
        """
        super().__init__(message, error_code)
        self.violation_type = violation_type
        self.context = context or {}
