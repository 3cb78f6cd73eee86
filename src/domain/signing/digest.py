"""Signing digest construction.

The object root of a payload is bound to a 32-byte signing domain by hashing
both as a two-field container. The resulting digest is what generic signers
sign and what verification recomputes.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from loguru import logger

from domain.signing.canonical import Bytes32, hash_tree_root
from domain.signing.exceptions import CanonicalizationError


ROOT_LENGTH = 32
DOMAIN_LENGTH = 32


@dataclass(frozen=True)
class SigningContainer:
    """Container for signing an object root within a domain."""

    root: Bytes32
    domain: Bytes32


def build_root(payload: Any) -> bytes:
    """Compute the canonical object root of a payload.

    Args:
        payload: Dataclass or pydantic model to hash

    Returns:
        32-byte object root

    Raises:
        CanonicalizationError: If the payload shape is not supported
    """
    root = hash_tree_root(payload)
    logger.debug(f"Object root is {root.hex()}")
    return root


def check_signing_inputs(root: bytes, domain: bytes) -> None:
    """Reject roots and domains that are not exactly 32 bytes.

    Raises:
        CanonicalizationError: If either input has the wrong length
    """
    if len(root) != ROOT_LENGTH:
        raise CanonicalizationError(
            f"Signing root must be {ROOT_LENGTH} bytes, got {len(root)}", "root"
        )
    if len(domain) != DOMAIN_LENGTH:
        raise CanonicalizationError(
            f"Signing domain must be {DOMAIN_LENGTH} bytes, got {len(domain)}", "domain"
        )


def build_signing_digest(root: bytes, domain: bytes) -> bytes:
    """Combine an object root and a signing domain into a signing digest.

    Args:
        root: 32-byte object root
        domain: 32-byte signing domain

    Returns:
        32-byte signing digest

    Raises:
        CanonicalizationError: If root or domain is not exactly 32 bytes
    """
    check_signing_inputs(root, domain)
    container = SigningContainer(root=bytes(root), domain=bytes(domain))
    logger.debug(
        f"Signing container: root={container.root.hex()} domain={container.domain.hex()}"
    )
    digest = hash_tree_root(container)
    logger.debug(f"Signing root: {digest.hex()}")
    return digest
