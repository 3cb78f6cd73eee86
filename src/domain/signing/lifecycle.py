"""Unlock, operate, relock.

An account is unlocked only when it is not already unlocked, and relocked
only when this call was the one that unlocked it. Accounts that do not
support locking are treated as always available. An unlock attempt given up
on by timeout or cancellation is followed by a lock once it settles, since a
blocking attempt may still succeed after the caller stopped waiting.
"""

from __future__ import annotations

import asyncio
import inspect
from collections.abc import AsyncIterator, Callable
from concurrent.futures import Future
from contextlib import asynccontextmanager
from dataclasses import dataclass
from enum import Enum
from typing import Any

from loguru import logger

from domain.signing.capabilities import AccountCapabilities
from domain.signing.config import SigningConfig
from domain.signing.exceptions import (
    RelockFailedError,
    SignerTimeoutError,
    UnlockFailedError,
)
from domain.signing.timeouts import call_with_timeout


class UnlockOutcome(str, Enum):
    """How the account came to be usable for this call."""

    NOT_LOCKABLE = "not_lockable"
    ALREADY_UNLOCKED = "already_unlocked"
    JUST_UNLOCKED = "just_unlocked"


@dataclass
class UnlockSession:
    """State of one unlock scope; the body records its signature here."""

    outcome: UnlockOutcome
    signature: Any = None

    @property
    def unlocked_by_call(self) -> bool:
        return self.outcome is UnlockOutcome.JUST_UNLOCKED


def account_label(account: Any) -> str:
    """Return a loggable identity for an account, never key material."""
    name = getattr(account, "name", None)
    if isinstance(name, str) and name:
        return name
    return type(account).__name__


def _relock_abandoned(account: Any, config: SigningConfig, label: str) -> Callable[[], None]:
    """Build the cleanup for an unlock attempt the caller gave up on.

    A blocking unlock keeps running after its timeout and may still succeed,
    so the account is locked once the attempt settles. Blocking lock calls
    run on the settling worker thread; coroutine ones are scheduled on the
    caller's loop.
    """
    loop = asyncio.get_running_loop()
    security_log = logger.bind(account_id=label, security_event=True, severity="critical")

    def report(error: BaseException | None) -> None:
        if error is None:
            logger.info(f"Account {label} locked after abandoned unlock")
        else:
            security_log.critical(f"Failed to lock account after abandoned unlock: {error!r}")

    def report_pending(pending: Future) -> None:
        report(asyncio.CancelledError() if pending.cancelled() else pending.exception())

    async def bounded_lock() -> None:
        await call_with_timeout("lock", config.timeout, account.lock)

    def relock() -> None:
        if inspect.iscoroutinefunction(account.lock):
            coro = bounded_lock()
            try:
                pending = asyncio.run_coroutine_threadsafe(coro, loop)
            except RuntimeError as e:
                coro.close()
                security_log.critical(f"Cannot lock account after abandoned unlock: {e}")
                return
            pending.add_done_callback(report_pending)
            return

        try:
            account.lock()
        except Exception as e:
            report(e)
        else:
            report(None)

    return relock


async def unlock(
    account: Any, capabilities: AccountCapabilities, config: SigningConfig
) -> UnlockOutcome:
    """Make an account usable for signing.

    Args:
        account: Account handle
        capabilities: Probed capabilities of account
        config: Timeout and passphrase candidates

    Returns:
        How the account became usable

    Raises:
        UnlockFailedError: If the unlock state is unknown or no candidate works
        SignerTimeoutError: If an unlock-state query or unlock attempt times out
    """
    if not capabilities.is_locker:
        logger.debug("Account does not support unlocking")
        return UnlockOutcome.NOT_LOCKABLE

    label = account_label(account)

    try:
        already_unlocked = await call_with_timeout(
            "is_unlocked", config.timeout, account.is_unlocked
        )
    except SignerTimeoutError:
        raise
    except Exception as e:
        raise UnlockFailedError("Unable to ascertain if account is unlocked") from e

    if already_unlocked:
        logger.debug(f"Account {label} already unlocked")
        return UnlockOutcome.ALREADY_UNLOCKED

    attempts = 0
    for passphrase in config.passphrases:
        attempts += 1
        try:
            await call_with_timeout(
                "unlock",
                config.timeout,
                account.unlock,
                passphrase.encode("utf-8"),
                on_abandoned=_relock_abandoned(account, config, label),
            )
        except SignerTimeoutError:
            raise
        except Exception as e:
            logger.debug(f"Passphrase candidate {attempts} rejected: {type(e).__name__}")
            continue
        logger.debug(f"Account {label} unlocked with candidate {attempts}")
        return UnlockOutcome.JUST_UNLOCKED

    logger.bind(account_id=label, security_event=True, severity="high").error(
        f"Failed to unlock account after {attempts} passphrase candidates"
    )
    raise UnlockFailedError(attempts=attempts)


async def lock(
    account: Any,
    capabilities: AccountCapabilities,
    config: SigningConfig,
    signature: Any = None,
) -> None:
    """Lock an account.

    Args:
        account: Account handle
        capabilities: Probed capabilities of account
        config: Timeout configuration
        signature: Signature already produced in this call, kept on failure

    Raises:
        RelockFailedError: If the lock call fails or times out
    """
    if not capabilities.is_locker:
        return

    try:
        await call_with_timeout("lock", config.timeout, account.lock)
    except Exception as e:
        logger.bind(
            account_id=account_label(account), security_event=True, severity="critical"
        ).critical(f"Failed to lock account: {e}")
        raise RelockFailedError(f"Failed to lock account: {e}", signature=signature) from e


@asynccontextmanager
async def unlocked(
    account: Any, capabilities: AccountCapabilities, config: SigningConfig
) -> AsyncIterator[UnlockSession]:
    """Hold an account unlocked for the duration of the block.

    The relock runs on every exit path once this call has unlocked the
    account, including cancellation, and is shielded so that a second
    cancellation cannot interrupt it.

    Args:
        account: Account handle
        capabilities: Probed capabilities of account
        config: Timeout and passphrase candidates

    Yields:
        Session the block records its signature on

    Raises:
        UnlockFailedError: If the account could not be unlocked
        SignerTimeoutError: If unlocking timed out
        RelockFailedError: If relocking failed; carries the recorded signature
    """
    session = UnlockSession(outcome=await unlock(account, capabilities, config))
    try:
        yield session
    finally:
        if session.unlocked_by_call:
            await asyncio.shield(lock(account, capabilities, config, session.signature))
