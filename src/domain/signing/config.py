"""Explicit per-call configuration for the signing core."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field, field_validator

from domain.common.exceptions import ValidationError


class SigningConfig(BaseModel):
    """Timeout and passphrase candidates threaded into every signing call."""

    model_config = ConfigDict(frozen=True)

    timeout: float = Field(default=10.0, description="Bound for each external call in seconds")
    passphrases: tuple[str, ...] = Field(
        default_factory=tuple, description="Ordered passphrase candidates for unlocking"
    )

    @field_validator("timeout")
    @classmethod
    def validate_timeout(cls, v: float) -> float:
        """Validate the per-call timeout.

        Args:
            v: Timeout in seconds

        Returns:
            Validated timeout

        Raises:
            ValidationError: If the timeout is not positive
        """
        if v <= 0:
            raise ValidationError("Signing timeout must be positive", field="timeout", value=v)
        return v

    @field_validator("passphrases")
    @classmethod
    def validate_passphrases(cls, v: tuple[str, ...]) -> tuple[str, ...]:
        """Reject empty candidates; keys are never encrypted with an empty passphrase.

        Raises:
            ValidationError: If a candidate is empty, reporting only its position
        """
        for position, passphrase in enumerate(v, start=1):
            if not passphrase:
                raise ValidationError(
                    f"Passphrase candidate {position} is empty",
                    field="passphrases",
                    value=position,
                )
        return v

    def __repr__(self) -> str:
        return f"SigningConfig(timeout={self.timeout}, passphrases=<{len(self.passphrases)} hidden>)"

    __str__ = __repr__
