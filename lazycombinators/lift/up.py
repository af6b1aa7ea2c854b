"""
Lifting exception-raising code into Result values.

The resilience layer reasons about outcomes as kungfu Results. These
helpers move a plain evaluation into that context without losing the
identity of the raised error.
"""

from __future__ import annotations

from collections.abc import Awaitable, Callable

from kungfu import Error, LazyCoroResult, Ok, Result

from .._types import LCR


def catching[T](thunk: Callable[[], T]) -> Result[T, Exception]:
    """
    Execute sync thunk, capture its exception as Error.

    **When to use:** sync fallback logic that must inspect the error
    before deciding whether to handle or re-raise it.

    Example:
        from lazycombinators import lift as L

        match L.up.catching(lambda: int(raw)):
            case Ok(n): ...
            case Error(exc): ...

    NOTE: Catches Exception subclasses only. KeyboardInterrupt,
          SystemExit and asyncio.CancelledError keep propagating.
    """
    try:
        return Ok(thunk())
    except Exception as exc:
        return Error(exc)


def catching_async[T](thunk: Callable[[], Awaitable[T]]) -> LCR[T]:
    """
    Lazily execute async thunk, capture its exception as Error.

    **When to use:** the lazy entry point of every async resilience
    combinator (retry, timeout, fallback, parallel). Each call of the
    returned LazyCoroResult runs the thunk again.

    Example:
        from lazycombinators import lift as L

        interp = L.up.catching_async(lambda: fetch_user(42))
        result = await interp()  # Ok(User(...)) or Error(exc)
    """
    async def run() -> Result[T, Exception]:
        try:
            return Ok(await thunk())
        except Exception as exc:
            return Error(exc)

    return LazyCoroResult(run)


def fail(error: Exception) -> LCR[object]:
    """Always-failing interpretation, the Error counterpart of a value."""
    async def run() -> Result[object, Exception]:
        return Error(error)

    return LazyCoroResult(run)


__all__ = (
    "catching",
    "catching_async",
    "fail",
)
