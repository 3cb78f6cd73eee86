"""Signet - capability-based signing orchestration for cryptographic accounts."""

__version__ = "1.0.0"

# Re-export main components for easy access
from domain.signing import SigningConfig, SigningService
from signet.bootstrap import create_signing_service


__all__ = ["SigningConfig", "SigningService", "create_signing_service", "__version__"]
