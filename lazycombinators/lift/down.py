"""
Lowering Result values back into plain evaluation.

The counterpart of `up`: a Result becomes a value, or its error is
raised again.
"""

from __future__ import annotations

from kungfu import Error, Ok, Result

from .._types import LCR


def unwrap[T](result: Result[T, Exception]) -> T:
    """
    Return the Ok value or raise the captured error.

    The error object is re-raised as is: same identity, same traceback,
    no wrapping exception.
    """
    match result:
        case Ok(value):
            return value
        case Error(error):
            raise error


async def to_result[T](interp: LCR[T]) -> Result[T, Exception]:
    """Run interp and return its Result."""
    return await interp()


async def unsafe[T](interp: LCR[T]) -> T:
    """
    Run and unwrap, raises on Error.

    **When to use:** at the boundary of an AsyncFunction, where callers
    expect exceptions rather than Result values.
    """
    return unwrap(await interp())


__all__ = (
    "unwrap",
    "to_result",
    "unsafe",
)
