"""
Parallel combinators
====================

Run several lazy interpretations against the same input.
"""

from __future__ import annotations

import asyncio

from kungfu import Error, LazyCoroResult, Ok, Result

from .._types import LCR


def parallel[T](*interps: LCR[T]) -> LCR[tuple[T, ...]]:
    """
    Run all concurrently, collect results as a tuple in argument order.

    Launch order is concurrent (asyncio.gather); only the ordering of the
    result tuple is guaranteed. The first Error in argument order wins.
    """

    async def run() -> Result[tuple[T, ...], Exception]:
        raws: list[Result[T, Exception]] = await asyncio.gather(*(i() for i in interps))

        values: list[T] = []
        for raw in raws:
            match raw:
                case Ok(v):
                    values.append(v)
                case Error(e):
                    return Error(e)

        return Ok(tuple(values))

    return LazyCoroResult(run)


__all__ = ("parallel",)
