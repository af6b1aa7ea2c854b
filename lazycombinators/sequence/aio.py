"""
AsyncSequence
=============

Asynchronous counterpart of SyncSequence.

Elements may be pending (awaitable) at the source; they are awaited one
at a time, in source order, as the sequence is iterated. Callbacks may
be plain functions or coroutine functions. Nothing runs concurrently:
every combinator pulls one element, finishes with it, then pulls the
next.

A pending element that is a coroutine can only be awaited once, so a
sequence built over coroutines can be iterated once. Futures and tasks
can be awaited again and do not have this limit.

Example:
    async def double(n):
        await asyncio.sleep(0)
        return n * 2

    await AsyncSequence.of(1, 2, 3).map(double).to_list()  # [2, 4, 6]
"""

from __future__ import annotations

import typing
from collections.abc import AsyncIterable, AsyncIterator, Callable, Iterable, Mapping, Set

from .._helpers import apply, is_async_iterable, is_iterable, resolve_pending
from .._types import MISSING, Predicate, Step
from .sync import _index_predicate, naturals

if typing.TYPE_CHECKING:
    from ..function.aio import AsyncFunction


_END = object()


class AsyncSequence[T]:
    """
    Lazy asynchronous sequence defined by how to produce a fresh
    asynchronous iteration.
    """

    __slots__ = ("_factory",)

    def __init__(self, factory: Callable[[], AsyncIterable[T]], /) -> None:
        self._factory = factory

    def __aiter__(self) -> AsyncIterator[T]:
        return aiter(self._factory())

    def __repr__(self) -> str:
        return f"AsyncSequence({self._factory!r})"

    # ------------------------------------------------------------------
    # Construction
    # ------------------------------------------------------------------

    @staticmethod
    def of(*items: typing.Any) -> AsyncSequence[typing.Any]:
        """Sequence over items, awaiting pending ones in order."""
        return AsyncSequence.bridge(items)

    @staticmethod
    def bridge(iterable: Iterable[typing.Any]) -> AsyncSequence[typing.Any]:
        """
        Resolve each element of a synchronous iterable in position order.

        Elements are awaited one after another, so the output order is the
        source order whatever order the pending values complete in.
        """

        async def generate() -> AsyncIterator[typing.Any]:
            for item in iterable:
                yield await resolve_pending(item)

        return AsyncSequence(generate)

    @staticmethod
    def coerce(value: typing.Any) -> AsyncSequence[typing.Any]:
        """
        Convert anything to an AsyncSequence.

        - None                   -> empty sequence
        - AsyncSequence          -> itself
        - async iterable         -> wrap, pending elements resolved
        - iterable (not text)    -> bridge
        - pending value, scalar  -> one-item sequence
        """
        if value is None:
            return AsyncSequence.of()
        if isinstance(value, AsyncSequence):
            return value
        if is_async_iterable(value):

            async def generate() -> AsyncIterator[typing.Any]:
                async for item in value:
                    yield await resolve_pending(item)

            return AsyncSequence(generate)
        if is_iterable(value):
            return AsyncSequence.bridge(value)
        return AsyncSequence.of(value)

    @staticmethod
    def along[V](seed: V, step: Step[V, typing.Any]) -> AsyncSequence[V]:
        """seed, step(seed), ... until a falsy value; step may be async."""

        async def generate() -> AsyncIterator[V]:
            current = await resolve_pending(seed)
            while current:
                yield current
                current = await resolve_pending(apply(step, current))

        return AsyncSequence(generate)

    @staticmethod
    def naturals() -> AsyncSequence[int]:
        return AsyncSequence.bridge(naturals())

    @staticmethod
    def flatten_all(source: typing.Any) -> AsyncSequence[typing.Any]:
        """Flatten one level of sync or async nesting; text passes through."""

        async def generate() -> AsyncIterator[typing.Any]:
            async for element in AsyncSequence.coerce(source):
                if is_async_iterable(element) or is_iterable(element):
                    async for item in AsyncSequence.coerce(element):
                        yield item
                else:
                    yield element

        return AsyncSequence(generate)

    @staticmethod
    def product(*factors: typing.Any) -> AsyncFunction:
        """
        Cartesian product as an asynchronous step function over PathChain.

        Same contract as SyncSequence.product; factors may be asynchronous.
        """
        from ..collection.path import PathChain
        from ..function.aio import AsyncFunction

        def step(chain: typing.Any = None) -> AsyncSequence[PathChain[typing.Any]]:
            if chain is None:
                chain = PathChain()
            elif not isinstance(chain, PathChain):
                chain = PathChain.of(chain)
            if chain.length >= len(factors):
                return AsyncSequence.of()
            return AsyncSequence.coerce(factors[chain.length]).map(chain.extend)

        return AsyncFunction(step)

    @staticmethod
    async def equal(a: typing.Any, b: typing.Any) -> bool:
        """
        Deep structural equality across sync and async nesting.

        Pending values are resolved before comparison. Never returns for
        two equal infinite sequences.
        """
        a = await resolve_pending(a)
        b = await resolve_pending(b)
        if _walkable(a) and _walkable(b):
            left = aiter(AsyncSequence.coerce(a))
            right = aiter(AsyncSequence.coerce(b))
            while True:
                x = await anext(left, _END)
                y = await anext(right, _END)
                if x is _END or y is _END:
                    return x is y
                if not await AsyncSequence.equal(x, y):
                    return False
        return bool(a == b)

    # ------------------------------------------------------------------
    # Evaluation
    # ------------------------------------------------------------------

    async def to_list(self) -> list[T]:
        return [item async for item in self]

    async def resolve(self, op: Callable[..., typing.Any] | None = None, seed: typing.Any = MISSING) -> typing.Any:
        """Asynchronous SyncSequence.resolve; op may be async."""
        iterator = aiter(self)
        if op is None:
            return await anext(iterator, None)
        if seed is MISSING:
            acc = await anext(iterator, MISSING)
            if acc is MISSING:
                return None
        else:
            acc = await resolve_pending(seed)
        async for item in iterator:
            acc = await resolve_pending(apply(op, acc, item))
        return acc

    async def equals(self, other: typing.Any) -> bool:
        return await AsyncSequence.equal(self, other)

    # ------------------------------------------------------------------
    # Combinators
    # ------------------------------------------------------------------

    def restrict(self, predicate: Predicate | None = None) -> AsyncSequence[T]:
        """Keep items where predicate(item, index) holds; default drops None."""

        async def generate() -> AsyncIterator[T]:
            index = 0
            async for item in self:
                if predicate is None:
                    keep = item is not None
                else:
                    keep = await resolve_pending(apply(predicate, item, index))
                if keep:
                    yield item
                index += 1

        return AsyncSequence(generate)

    def map[R](self, fn: Step[T, R]) -> AsyncSequence[R]:
        async def generate() -> AsyncIterator[R]:
            index = 0
            async for item in self:
                yield await resolve_pending(apply(fn, item, index))
                index += 1

        return AsyncSequence(generate)

    def flatten(self) -> AsyncSequence[typing.Any]:
        return AsyncSequence.flatten_all(self)

    def concat(self, *others: typing.Any) -> AsyncSequence[typing.Any]:
        return AsyncSequence.flatten_all((self, *(AsyncSequence.coerce(o) for o in others)))

    def zip(self, *others: typing.Any) -> AsyncSequence[tuple[typing.Any, ...]]:
        """
        Tuples by position, stopping at the shortest side.

        Sources advance one after another for every tuple, never
        concurrently. Without arguments the items of this sequence are
        zipped together.
        """

        async def generate() -> AsyncIterator[tuple[typing.Any, ...]]:
            if others:
                sources = [self, *(AsyncSequence.coerce(o) for o in others)]
            else:
                sources = [AsyncSequence.coerce(item) async for item in self]
            if not sources:
                return
            iterators = [aiter(source) for source in sources]
            while True:
                row = []
                for iterator in iterators:
                    item = await anext(iterator, _END)
                    if item is _END:
                        return
                    row.append(item)
                yield tuple(row)

        return AsyncSequence(generate)

    def expand(self, other: typing.Any = MISSING) -> typing.Any:
        """
        Cartesian product with other as (a, b) pairs.

        Without arguments the items of this sequence are the factors of a
        PathChain step function; they are read each time the step runs.
        """
        if other is MISSING:
            from ..function.aio import AsyncFunction

            async def step(chain: typing.Any = None) -> typing.Any:
                factors = await self.to_list()
                return await AsyncSequence.product(*factors)(chain)

            return AsyncFunction(step)

        async def generate() -> AsyncIterator[tuple[T, typing.Any]]:
            right = AsyncSequence.coerce(other)
            async for a in self:
                async for b in right:
                    yield (a, b)

        return AsyncSequence(generate)

    def slice(
        self,
        predicate_or_index: Predicate | int | None = None,
        start: bool = True,
        inclusive: bool | None = None,
    ) -> AsyncSequence[T]:
        """
        Cut at the first match of predicate(item, index), see
        SyncSequence.slice. Without a predicate the sequence is passed
        through unchanged.
        """
        if predicate_or_index is None:
            return AsyncSequence(lambda: self)

        test = _index_predicate(predicate_or_index)
        keep_match = start if inclusive is None else inclusive

        async def from_match() -> AsyncIterator[T]:
            started = False
            index = 0
            async for item in self:
                if started:
                    yield item
                elif await resolve_pending(apply(test, item, index)):
                    started = True
                    if keep_match:
                        yield item
                index += 1

        async def until_match() -> AsyncIterator[T]:
            index = 0
            async for item in self:
                if await resolve_pending(apply(test, item, index)):
                    if keep_match:
                        yield item
                    return
                yield item
                index += 1

        return AsyncSequence(from_match if start else until_match)

    def cycle(self) -> AsyncSequence[AsyncSequence[T]]:
        async def generate() -> AsyncIterator[AsyncSequence[T]]:
            while True:
                yield self

        return AsyncSequence(generate)


def _walkable(value: object) -> bool:
    if isinstance(value, (Mapping, Set)):
        return False
    return is_async_iterable(value) or is_iterable(value)


__all__ = ("AsyncSequence",)
