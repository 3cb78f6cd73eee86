"""Loguru logging configuration for Signet."""

from __future__ import annotations

import json
import sys
from pathlib import Path
from typing import Any

from loguru import logger


_PROMOTED_EXTRAS = ("account_id", "security_event", "severity")
_INTERNAL_EXTRAS = ("serialized",)


def serialize_log(record: dict[str, Any]) -> str:
    """Serialize log record to JSON for structured logging.

    Args:
        record: Log record from loguru

    Returns:
        JSON string
    """
    subset: dict[str, Any] = {
        "timestamp": record["time"].isoformat(),
        "level": record["level"].name,
        "logger": record["name"],
        "function": record["function"],
        "line": record["line"],
        "message": record["message"],
    }

    # Promote account and security context to top-level keys
    for key in _PROMOTED_EXTRAS:
        if key in record["extra"]:
            subset[key] = record["extra"][key]

    if record["exception"]:
        subset["exception"] = {
            "type": record["exception"].type.__name__,
            "value": str(record["exception"].value),
        }

    subset["extra"] = {
        k: v
        for k, v in record["extra"].items()
        if k not in _PROMOTED_EXTRAS and k not in _INTERNAL_EXTRAS
    }

    return json.dumps(subset, default=str)


def _json_sink_format(record: dict[str, Any]) -> str:
    # Loguru treats the returned string as a template, so the JSON payload is
    # stashed in extra and referenced instead of being returned directly.
    record["extra"]["serialized"] = serialize_log(record)
    return "{extra[serialized]}\n"


def configure_logging(
    level: str = "INFO",
    structured: bool = True,
    log_file: Path | None = None,
    environment: str = "production",
) -> None:
    """Configure loguru logging.

    Args:
        level: Log level (DEBUG, INFO, WARNING, ERROR)
        structured: Use JSON structured logging
        log_file: Optional file path for logs
        environment: Deployment environment (development/production)
    """
    logger.remove()

    # Backtrace/diagnose print local variables, which may hold key material
    enable_debug_info = environment == "development"

    if structured:
        logger.add(
            sys.stdout,
            format=_json_sink_format,
            level=level,
            backtrace=enable_debug_info,
            diagnose=enable_debug_info,
        )
    else:
        logger.add(
            sys.stdout,
            format=(
                "<green>{time:YYYY-MM-DD HH:mm:ss.SSS}</green> | "
                "<level>{level: <8}</level> | "
                "<cyan>{name}</cyan>:<cyan>{function}</cyan>:<cyan>{line}</cyan> | "
                "<level>{message}</level> | "
                "{extra}"
            ),
            level=level,
            colorize=True,
            backtrace=enable_debug_info,
            diagnose=enable_debug_info,
        )

    if log_file:
        logger.add(
            log_file,
            format=_json_sink_format if structured else "{time} | {level} | {message}",
            level=level,
            rotation="100 MB",
            retention="30 days",
            compression="gz",
            backtrace=enable_debug_info,
            diagnose=enable_debug_info,
        )


def get_logger(name: str) -> Any:
    """Get a logger instance with the specified name.

    Args:
        name: Logger name

    Returns:
        Configured logger instance
    """
    return logger.bind(logger_name=name)
