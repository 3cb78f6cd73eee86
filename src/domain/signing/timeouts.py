"""Time-boxed invocation of external account calls."""

from __future__ import annotations

import asyncio
import inspect
import threading
from collections.abc import Callable
from concurrent.futures import Future
from typing import Any

from loguru import logger

from domain.signing.exceptions import SignerTimeoutError


def _start_worker(operation: str, func: Callable[..., Any], args: tuple[Any, ...]) -> Future:
    """Run a blocking call on a daemon thread.

    The loop's default executor is joined when the loop shuts down, so a call
    that never returns would keep asyncio.run from returning. Daemon threads
    are never joined.
    """
    future: Future = Future()
    # A running future cannot be cancelled, so abandoning it never races the
    # worker setting its result
    future.set_running_or_notify_cancel()

    def run() -> None:
        try:
            result = func(*args)
        except BaseException as e:  # forwarded to the awaiting caller
            future.set_exception(e)
        else:
            future.set_result(result)

    threading.Thread(target=run, name=f"signet-{operation}", daemon=True).start()
    return future


def _notify_abandoned(
    operation: str, worker: Future | None, on_abandoned: Callable[[], None] | None
) -> None:
    if on_abandoned is None:
        return

    def settled(_: Future | None = None) -> None:
        try:
            on_abandoned()
        except Exception as e:
            logger.error(f"Cleanup after abandoned {operation} failed: {e}")

    if worker is None:
        settled()
    else:
        # Runs in the worker thread once the call returns, or right away
        worker.add_done_callback(settled)


async def call_with_timeout(
    operation: str,
    timeout: float,
    func: Callable[..., Any],
    *args: Any,
    on_abandoned: Callable[[], None] | None = None,
) -> Any:
    """Invoke an account method within a fresh timeout scope.

    Coroutine functions are awaited directly and cancelled when the bound is
    exceeded. Plain functions run on a daemon worker thread; the caller stops
    waiting at the bound even though the thread itself cannot be interrupted.

    Args:
        operation: Name of the call, used in the timeout error
        timeout: Bound in seconds
        func: Account method to call
        *args: Arguments for func
        on_abandoned: Called once a call given up on by timeout or
            cancellation has settled. For blocking calls it runs on the
            worker thread after func returns, otherwise immediately.

    Returns:
        Whatever func returns

    Raises:
        SignerTimeoutError: If the call exceeds the bound
    """
    worker: Future | None = None
    try:
        async with asyncio.timeout(timeout) as scope:
            if inspect.iscoroutinefunction(func):
                return await func(*args)
            worker = _start_worker(operation, func, args)
            result = await asyncio.wrap_future(worker)
            if inspect.isawaitable(result):
                return await result
            return result
    except TimeoutError as e:
        if not scope.expired():
            raise
        _notify_abandoned(operation, worker, on_abandoned)
        raise SignerTimeoutError(operation, timeout) from e
    except asyncio.CancelledError:
        _notify_abandoned(operation, worker, on_abandoned)
        raise
