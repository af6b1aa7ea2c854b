"""Timeout combinators

Combinators for execution time limiting. A timed-out computation is
abandoned by the wrapper, never cancelled."""

from __future__ import annotations

import asyncio
import copy
import logging

from kungfu import Error, LazyCoroResult, Result

from .._errors import TimeoutError
from .._types import LCR

logger = logging.getLogger(__name__)

# Abandoned computations stay referenced until they finish
_abandoned: set[asyncio.Task[object]] = set()

def _forget(task: asyncio.Task[object]) -> None:
    _abandoned.discard(task)
    if task.cancelled():
        return
    exc = task.exception()
    if exc is None:
        match task.result():
            case Error(e):
                exc = e
            case _:
                return
    logger.warning("abandoned computation failed: %r", exc)

def abandon(task: asyncio.Task[object]) -> None:
    """Keep a still-running task alive and log its late failure."""
    if task.done():
        _forget(task)
        return
    _abandoned.add(task)
    task.add_done_callback(_forget)

def _expired(seconds: float, error: Exception | type[Exception] | None) -> Exception:
    """Fresh error for one expiry."""
    if error is None:
        return TimeoutError(seconds)
    if isinstance(error, type):
        return error()
    return copy.copy(error)

def timeout[T](
    interp: LCR[T],
    *,
    seconds: float,
    error: Exception | type[Exception] | None = None,
) -> LCR[T]:
    """
    Timeout for LazyCoroResult.

    Fail with TimeoutError(seconds), or with `error` when given, if the
    interpretation takes too long. An error class is instantiated and an
    error instance copied on every expiry.

    The interpretation is shielded: it keeps running in the background
    and its outcome is discarded.
    """

    async def run() -> Result[T, Exception]:
        task = asyncio.ensure_future(interp())
        try:
            return await asyncio.wait_for(asyncio.shield(task), timeout=seconds)
        except asyncio.TimeoutError:
            logger.warning("timed out after %.3fs, abandoning computation", seconds)
            abandon(task)
            return Error(_expired(seconds, error))
        except asyncio.CancelledError:
            abandon(task)
            raise

    return LazyCoroResult(run)

__all__ = ("abandon", "timeout")
