"""
Fallback combinators
====================

Switch to an alternative when the primary interpretation is absent or
fails with a matching error.
"""

from __future__ import annotations

from collections.abc import Callable

from kungfu import Error, LazyCoroResult, Ok, Result

from .._types import LCR, Matcher
from .matcher import matches


def fallback[T](
    primary: LCR[T],
    secondary: Callable[[Exception | None], LCR[T]],
    *,
    matcher: Matcher | None = None,
) -> LCR[T]:
    """
    Try secondary if primary is absent or fails with a matching error.

    secondary receives the intercepted error, or None when the primary
    produced an absent (None) value. Errors that do not match stay in the
    Error channel untouched.
    """

    async def run() -> Result[T, Exception]:
        raw = await primary()
        match raw:
            case Ok(value) if value is not None:
                return raw
            case Ok(_):
                return await secondary(None)()
            case Error(e) if matches(e, matcher):
                return await secondary(e)()
            case _:
                return raw

    return LazyCoroResult(run)


def first_of[T](*interps: LCR[T]) -> LCR[T | None]:
    """
    Try each until one produces a value.

    Errors count as absent here; Ok(None) when nothing produced a value.
    """

    async def run() -> Result[T | None, Exception]:
        for interp in interps:
            raw = await interp()
            match raw:
                case Ok(value) if value is not None:
                    return raw
                case _:
                    continue
        return Ok(None)

    return LazyCoroResult(run)


__all__ = (
    "fallback",
    "first_of",
)
