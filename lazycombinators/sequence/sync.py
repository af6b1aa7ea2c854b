"""
SyncSequence
============

Lazy, re-entrant, possibly infinite iteration.

A SyncSequence stores no items, only a factory producing a fresh
iterator. Every combinator returns a new SyncSequence and evaluates
nothing until the result is iterated or resolved.

Example:
    evens = naturals().restrict(lambda n: n % 2 == 0).map(lambda n: n * 10)
    evens.slice(3, start=False).to_list()  # [0, 20, 40, 60]
"""

from __future__ import annotations

import itertools
import typing
from collections.abc import Callable, Iterable, Iterator, Mapping, Set

from .._helpers import apply, chain_pending, is_iterable
from .._types import MISSING, Predicate, Step

if typing.TYPE_CHECKING:
    from ..collection.path import PathChain
    from ..function.sync import SyncFunction
    from .aio import AsyncSequence


_END = object()


def _index_predicate(predicate_or_index: Predicate | int) -> Predicate:
    if isinstance(predicate_or_index, int) and not isinstance(predicate_or_index, bool):
        index = predicate_or_index
        return lambda _, i: i == index
    return predicate_or_index


def _not_none(item: object) -> bool:
    return item is not None


class SyncSequence[T]:
    """
    Lazy sequence defined by how to produce a fresh iteration.

    Callbacks of restrict/map/slice receive (item, index), trimmed to the
    positional arguments they accept.
    """

    __slots__ = ("_factory",)

    def __init__(self, factory: Callable[[], Iterable[T]], /) -> None:
        self._factory = factory

    def __iter__(self) -> Iterator[T]:
        return iter(self._factory())

    def __repr__(self) -> str:
        return f"SyncSequence({self._factory!r})"

    # ------------------------------------------------------------------
    # Construction
    # ------------------------------------------------------------------

    @staticmethod
    def of[V](*items: V) -> SyncSequence[V]:
        """Sequence over the given items."""
        return SyncSequence(lambda: items)

    @staticmethod
    def coerce(value: typing.Any) -> SyncSequence[typing.Any]:
        """
        Convert anything to a SyncSequence.

        - None           -> empty sequence
        - SyncSequence   -> itself
        - iterable       -> lazy wrap (text and bytes excluded)
        - anything else  -> one-item sequence
        """
        if value is None:
            return SyncSequence.of()
        if isinstance(value, SyncSequence):
            return value
        if is_iterable(value):
            return SyncSequence(lambda: value)
        return SyncSequence.of(value)

    @staticmethod
    def along[V](seed: V, step: Step[V, V | None]) -> SyncSequence[V]:
        """
        seed, step(seed), step(step(seed)), ... until a falsy value.

        Example:
            SyncSequence.along(node, lambda n: n.parent)  # node and its ancestors
        """
        def generate() -> Iterator[V]:
            current: V | None = seed
            while current:
                yield current
                current = apply(step, current)

        return SyncSequence(generate)

    @staticmethod
    def naturals() -> SyncSequence[int]:
        """0, 1, 2, ... with a fresh counter for every iteration."""
        return naturals()

    @staticmethod
    def flatten_all(source: Iterable[typing.Any]) -> SyncSequence[typing.Any]:
        """Flatten one level; non-iterable and text elements pass through."""
        def generate() -> Iterator[typing.Any]:
            for element in SyncSequence.coerce(source):
                if is_iterable(element):
                    yield from element
                else:
                    yield element

        return SyncSequence(generate)

    @staticmethod
    def product(*factors: typing.Any) -> SyncFunction:
        """
        Cartesian product as a step function over PathChain.

        A chain of length L < len(factors) is extended across factors[L];
        longer chains have no children. Driving the step from the empty
        chain enumerates factors[0] x ... x factors[k-1] one level at a
        time, never materializing the product.
        """
        from ..collection.path import PathChain
        from ..function.sync import SyncFunction

        stages = tuple(SyncSequence.coerce(f) for f in factors)

        def step(chain: PathChain[typing.Any] | typing.Any = None) -> SyncSequence[PathChain[typing.Any]]:
            if chain is None:
                chain = PathChain()
            elif not isinstance(chain, PathChain):
                chain = PathChain.of(chain)
            if chain.length >= len(stages):
                return SyncSequence.of()
            return chain.extend_across(stages[chain.length])

        return SyncFunction(step)

    # ------------------------------------------------------------------
    # Evaluation
    # ------------------------------------------------------------------

    def to_list(self) -> list[T]:
        return list(self)

    def resolve(self, op: Callable[..., typing.Any] | None = None, seed: typing.Any = MISSING) -> typing.Any:
        """
        Force evaluation.

        - no op            -> first item, or None when empty
        - op, no seed      -> left fold seeded with the first item
        - op and seed      -> left fold over every item
        """
        iterator = iter(self)
        if op is None:
            return next(iterator, None)
        if seed is MISSING:
            acc = next(iterator, MISSING)
            if acc is MISSING:
                return None
        else:
            acc = seed
        for item in iterator:
            acc = apply(op, acc, item)
        return acc

    @staticmethod
    def equal(a: typing.Any, b: typing.Any) -> bool:
        """
        Deep structural equality.

        Text, mappings and sets compare with ==; other iterables are
        walked in step and compared recursively. Never returns for two
        equal infinite sequences.
        """
        if _walkable(a) and _walkable(b):
            for x, y in itertools.zip_longest(a, b, fillvalue=_END):
                if x is _END or y is _END:
                    return x is y
                if not SyncSequence.equal(x, y):
                    return False
            return True
        return bool(a == b)

    def equals(self, other: typing.Any) -> bool:
        return SyncSequence.equal(self, other)

    # ------------------------------------------------------------------
    # Combinators
    # ------------------------------------------------------------------

    def restrict(self, predicate: Predicate | None = None) -> SyncSequence[T]:
        """Keep items where predicate(item, index) holds; default drops None."""
        test = predicate if predicate is not None else _not_none

        def generate() -> Iterator[T]:
            for index, item in enumerate(self):
                if apply(test, item, index):
                    yield item

        return SyncSequence(generate)

    def map[R](self, fn: Step[T, R]) -> SyncSequence[R]:
        """
        item -> fn(item, index).

        Pending (awaitable) items map to new pending values, so a sequence
        of pending values can be transformed before it is bridged.
        """
        def generate() -> Iterator[R]:
            for index, item in enumerate(self):
                yield chain_pending(item, fn, index)

        return SyncSequence(generate)

    def flatten(self) -> SyncSequence[typing.Any]:
        return SyncSequence.flatten_all(self)

    def concat(self, *others: typing.Any) -> SyncSequence[typing.Any]:
        parts = (self, *(SyncSequence.coerce(o) for o in others))
        return SyncSequence.flatten_all(parts)

    def zip(self, *others: typing.Any) -> SyncSequence[tuple[typing.Any, ...]]:
        """
        Tuples by position, stopping at the shortest side.

        Without arguments the items of this sequence are zipped together.
        """
        def generate() -> Iterator[tuple[typing.Any, ...]]:
            if others:
                sources = (self, *(SyncSequence.coerce(o) for o in others))
            else:
                sources = tuple(SyncSequence.coerce(item) for item in self)
            if not sources:
                return
            yield from zip(*sources)

        return SyncSequence(generate)

    @typing.overload
    def expand(self) -> SyncFunction: ...

    @typing.overload
    def expand(self, other: typing.Any) -> SyncSequence[tuple[T, typing.Any]]: ...

    def expand(self, other: typing.Any = MISSING) -> SyncSequence[tuple[T, typing.Any]] | SyncFunction:
        """
        Cartesian product with other as a nested loop of (a, b) pairs.

        Without arguments the items of this sequence are the factors of a
        PathChain step function (see product()).
        """
        if other is MISSING:
            return SyncSequence.product(*self)

        def generate() -> Iterator[tuple[T, typing.Any]]:
            right = SyncSequence.coerce(other)
            for a in self:
                for b in right:
                    yield (a, b)

        return SyncSequence(generate)

    def slice(
        self,
        predicate_or_index: Predicate | int,
        start: bool = True,
        inclusive: bool | None = None,
    ) -> SyncSequence[T]:
        """
        Cut the sequence at the first match of predicate(item, index).

        start=True yields from the match on (inclusive) or after it;
        start=False yields up to the match (exclusive) or through it, then
        stops. inclusive defaults to start. An int n matches index n.
        """
        test = _index_predicate(predicate_or_index)
        keep_match = start if inclusive is None else inclusive

        def from_match() -> Iterator[T]:
            started = False
            for index, item in enumerate(self):
                if started:
                    yield item
                elif apply(test, item, index):
                    started = True
                    if keep_match:
                        yield item

        def until_match() -> Iterator[T]:
            for index, item in enumerate(self):
                if apply(test, item, index):
                    if keep_match:
                        yield item
                    return
                yield item

        return SyncSequence(from_match if start else until_match)

    def cycle(self) -> SyncSequence[SyncSequence[T]]:
        """
        This very sequence, forever.

        Each repetition re-runs from scratch when it is iterated; combine
        with flatten() for an endless stream of items.
        """
        def generate() -> Iterator[SyncSequence[T]]:
            while True:
                yield self

        return SyncSequence(generate)

    def to_async(self) -> AsyncSequence[typing.Any]:
        """Bridge into an AsyncSequence resolving pending items in order."""
        from .aio import AsyncSequence

        return AsyncSequence.bridge(self)


def _walkable(value: object) -> bool:
    return is_iterable(value) and not isinstance(value, (Mapping, Set))


def naturals() -> SyncSequence[int]:
    """Infinite natural numbers starting from 0."""
    return SyncSequence(itertools.count)


__all__ = ("SyncSequence", "naturals")
