"""
SyncFunction
============

Callable, composable, lazy mapping from arguments to a result.

Every combinator returns a derived function of the same class and runs
nothing until the derived function is called. A result may itself be
iterable (a multivalued function); slice/expand/restrict_each treat it
as a SyncSequence.

Absent values are None: restrictions produce None instead of a value,
map stops at None, fallback replaces None.

Example:
    parse = (
        SyncFunction(int)
        .fallback(lambda raw, error: 0, matcher=ValueError)
        .restrict_output(lambda n: n >= 0, on_fail="negative input")
        .map(lambda n: n * 2)
    )
    parse("21")   # 42
    parse("x")    # 0
    parse("-1")   # raises RestrictionError("negative input")
"""

from __future__ import annotations

import copy
import typing
from collections.abc import Callable

from kungfu import Error, Ok

from .._helpers import apply, chain_pending, is_iterable, refuse
from .._types import MISSING, Matcher, Predicate
from ..collection.path import PathChain
from ..control.matcher import matches
from ..lift.up import catching
from ..sequence.sync import SyncSequence
from . import adapt as records


def _with_args(predicate_or_index: typing.Any, args: tuple[typing.Any, ...]) -> typing.Any:
    """Item predicate (value, index) extended with the call arguments; indexes pass through."""
    if records.is_index(predicate_or_index):
        return predicate_or_index
    return lambda value, index: apply(predicate_or_index, value, index, *args)


class SyncFunction[R]:
    """
    Wrapper making a callable fluent.

    Calling it applies the wrapped callable to as many leading positional
    arguments as it accepts. Subclasses survive chaining: combinators
    return shallow copies holding a new core.
    """

    __slots__ = ("_fn",)

    def __init__(self, fn: Callable[..., R], /) -> None:
        self._fn = fn

    def __call__(self, *args: typing.Any) -> R:
        return apply(self._fn, *args)

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self._fn!r})"

    def resolve(self, *args: typing.Any) -> R:
        """Evaluate against args; same as calling."""
        return self(*args)

    def bind(self, key: typing.Any, value: typing.Any) -> SyncFunction[R]:
        raise NotImplementedError(f"{type(self).__name__} does not support bind()")

    def _derive(self, fn: Callable[..., typing.Any]) -> typing.Self:
        derived = copy.copy(self)
        derived._fn = fn
        return derived

    # ------------------------------------------------------------------
    # Construction
    # ------------------------------------------------------------------

    @staticmethod
    def coerce(f: typing.Any) -> SyncFunction[typing.Any]:
        """SyncFunction as is, callable wrapped, anything else constant."""
        if isinstance(f, SyncFunction):
            return f
        if callable(f):
            return SyncFunction(f)
        return SyncFunction(lambda *_: f)

    @staticmethod
    def matching[V](args: typing.Any, value: V) -> SyncFunction[V | None]:
        """
        value when called with arguments equal to args, None otherwise.

        Example:
            one = SyncFunction.matching((1,), "one")
            one(1), one(2)  # ("one", None)
        """
        expected = tuple(args) if is_iterable(args) else (args,)
        return SyncFunction(lambda *given: value if SyncSequence.equal(given, expected) else None)

    @staticmethod
    def first_of(*fns: typing.Any) -> SyncFunction[typing.Any]:
        """First non-None result among fns; a raising function counts as absent."""

        def first(*args: typing.Any) -> typing.Any:
            for fn in fns:
                match catching(lambda: apply(fn, *args)):
                    case Ok(value) if value is not None:
                        return value
                    case _:
                        continue
            return None

        return SyncFunction(first)

    @staticmethod
    def parallel_all(*fns: typing.Any) -> SyncFunction[tuple[typing.Any, ...]]:
        """Tuple of every fn's result for the same arguments, in order."""
        return SyncFunction(lambda *args: tuple(apply(fn, *args) for fn in fns))

    @staticmethod
    def expand_paths(*fns: typing.Any) -> SyncFunction[SyncSequence[PathChain[typing.Any]]]:
        """
        One expansion step of the product fns[0] x ... x fns[k-1].

        Input is a PathChain (anything else becomes a root chain). A chain
        of length L in 1..k is extended once per non-None value of
        fns[L-1](chain.last); other chains have no children.
        """

        def step(chain_or_item: typing.Any) -> SyncSequence[PathChain[typing.Any]]:
            chain = chain_or_item if isinstance(chain_or_item, PathChain) else PathChain.of(chain_or_item)
            if chain.length == 0 or chain.length > len(fns):
                return SyncSequence.of()
            factor = SyncSequence.coerce(apply(fns[chain.length - 1], chain.last)).restrict()
            return chain.extend_across(factor)

        return SyncFunction(step)

    # ------------------------------------------------------------------
    # Restriction
    # ------------------------------------------------------------------

    def restrict_input(self, predicate: Predicate, on_fail: typing.Any = None) -> typing.Self:
        """
        Evaluate only when predicate(*args) holds.

        Otherwise None, or raise on_fail (message, exception or class).
        """

        def restricted(*args: typing.Any) -> typing.Any:
            if apply(predicate, *args):
                return self(*args)
            return refuse(on_fail)

        return self._derive(restricted)

    def restrict_output(self, predicate: Predicate, on_fail: typing.Any = None) -> typing.Self:
        """Evaluate, keep the result when predicate(result, *args) holds."""

        def restricted(*args: typing.Any) -> typing.Any:
            result = self(*args)
            if apply(predicate, result, *args):
                return result
            return refuse(on_fail)

        return self._derive(restricted)

    def restrict_each(self, predicate: Predicate) -> typing.Self:
        """
        Filter a multivalued result with predicate(value, index, *args).

        Composed onto a PathChain step function, the rejected children are
        never produced, so their subtrees are never explored.
        """

        def restricted(*args: typing.Any) -> SyncSequence[typing.Any]:
            return SyncSequence.coerce(self(*args)).restrict(
                lambda value, index: apply(predicate, value, index, *args)
            )

        return self._derive(restricted)

    # ------------------------------------------------------------------
    # Composition
    # ------------------------------------------------------------------

    def map(self, *fns: typing.Any) -> typing.Self:
        """
        Pipe the result through fns in order.

        A None result is returned at once without calling the remaining
        fns. Pending results are chained, not awaited.
        """

        def mapped(*args: typing.Any) -> typing.Any:
            got = self(*args)
            for fn in fns:
                if got is None:
                    break
                got = chain_pending(got, fn)
            return got

        return self._derive(mapped)

    def fallback(self, alt: typing.Any, matcher: Matcher | None = None) -> typing.Self:
        """
        alt(*args) when the result is None; alt(*args, error) when the call
        raises an error accepted by matcher (no matcher accepts all).

        Rejected errors are raised again unchanged.
        """

        def guarded(*args: typing.Any) -> typing.Any:
            match catching(lambda: self(*args)):
                case Ok(value) if value is not None:
                    return value
                case Ok(_):
                    return apply(alt, *args)
                case Error(error) if matches(error, matcher):
                    return apply(alt, *args, error)
                case Error(error):
                    raise error

        return self._derive(guarded)

    def parallel(self, *fns: typing.Any) -> typing.Self:
        """
        Tuple of this function's result followed by each fn's result.

        Always a tuple, whatever the number of functions or the shape of
        their results.
        """

        def together(*args: typing.Any) -> tuple[typing.Any, ...]:
            return (self(*args), *(apply(fn, *args) for fn in fns))

        return self._derive(together)

    def slice(
        self,
        predicate_or_index: Predicate | int,
        start: bool = True,
        inclusive: bool | None = None,
    ) -> typing.Self:
        """Result as a SyncSequence cut by predicate(value, index, *args)."""

        def sliced(*args: typing.Any) -> SyncSequence[typing.Any]:
            test = _with_args(predicate_or_index, args)
            return SyncSequence.coerce(self(*args)).slice(test, start, inclusive)

        return self._derive(sliced)

    def expand(self, fn: typing.Any) -> typing.Self:
        """
        Apply fn to each value of the result and flatten.

        None values and None outputs are dropped.
        """

        def expanded(*args: typing.Any) -> SyncSequence[typing.Any]:
            values = SyncSequence.coerce(self(*args)).restrict()
            return values.map(lambda value: apply(fn, value)).flatten().restrict()

        return self._derive(expanded)

    def adapt(self, index_or_keys: typing.Any = MISSING, value_or_key: typing.Any = MISSING) -> typing.Self:
        """
        Change how arguments reach this function.

        - adapt()                  chain -> children of chain over self(chain.last)
        - adapt(i, value)          insert value (None when omitted) at argument position i
        - adapt(keys)              record -> self(*fields read off record)
        - adapt(keys, output_key)  same, result written into record, record returned
        - adapt(None, output_key)  result wrapped as {output_key: result}
        """
        if index_or_keys is MISSING or index_or_keys is None:
            if value_or_key is MISSING or value_or_key is None:

                def across(chain: PathChain[typing.Any]) -> SyncSequence[PathChain[typing.Any]]:
                    return chain.extend_across(SyncSequence.coerce(self(chain.last)).restrict())

                return self._derive(across)

            return self._derive(lambda *args: records.wrap(self(*args), value_or_key))

        if records.is_index(index_or_keys):
            return self._derive(lambda *args: self(*records.insert_at(args, index_or_keys, value_or_key)))

        def from_record(record: typing.Any) -> typing.Any:
            result = self(*records.read_fields(record, index_or_keys))
            return records.store(record, result, value_or_key)

        return self._derive(from_record)


__all__ = ("SyncFunction",)
