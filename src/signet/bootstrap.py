"""Application edge wiring settings and logging into a signing service."""

from __future__ import annotations

from core.config import Settings, get_settings
from core.logging import configure_logging, get_logger
from domain.signing import SigningService


def create_signing_service(
    settings: Settings | None = None, *, setup_logging: bool = True
) -> SigningService:
    """Build a signing service from settings.

    Args:
        settings: Settings to use (global settings when omitted)
        setup_logging: Configure loguru sinks from the observability settings

    Returns:
        Signing service bound to the configured timeout and passphrases
    """
    settings = settings or get_settings()

    if setup_logging:
        configure_logging(
            level=settings.observability.log_level,
            structured=settings.observability.structured,
            log_file=settings.observability.log_file_path,
            environment=settings.environment,
        )

    log = get_logger(__name__)
    for component, problems in settings.validate_required_settings().items():
        for problem in problems:
            log.warning(f"{component}: {problem}")

    config = settings.signing.to_config()
    log.info(
        f"Signing service ready (timeout={config.timeout}s, "
        f"{len(config.passphrases)} passphrase candidates)"
    )
    return SigningService(config)
