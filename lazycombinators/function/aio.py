"""
AsyncFunction
=============

Asynchronous counterpart of SyncFunction plus the resilience
combinators: timeout, retry with backoff, event-gated start/stop.

Calling an AsyncFunction returns a coroutine; the wrapped callable may be
a plain function or a coroutine function. Internally each resilience
combinator runs the evaluation as a kungfu LazyCoroResult (see interp())
and raises the captured error again at the boundary, unchanged.

Example:
    fetch = (
        AsyncFunction(load_user)
        .with_timeout(2.0)
        .with_retry(3, base_delay=0.1, retry_on=(TimeoutError, 503))
        .fallback(lambda user_id, error: cached_user(user_id))
    )
    user = await fetch(42)

    fetch.stopped = True  # the next retry checkpoint raises StopError
"""

from __future__ import annotations

import copy
import typing
from collections.abc import Callable

from .._helpers import apply, is_iterable, refuse, resolve_pending
from .._types import LCR, MISSING, Matcher, Predicate
from ..collection.path import PathChain
from ..concurrency.parallel import parallel
from ..control.fallback import fallback, first_of
from ..control.retry import RetryPolicy, retry
from ..control.signal import StopSignal
from ..events.gate import gate
from ..events.source import EventSource
from ..lift.down import unsafe
from ..lift.up import catching_async
from ..sequence.aio import AsyncSequence
from ..time.timeout import timeout as deadline
from . import adapt as records
from .sync import _with_args


class AsyncFunction[R]:
    """
    Wrapper making a sync or async callable fluent and awaitable.

    Combinators return shallow copies holding a new core, so subclasses
    and an attached stop signal survive chaining.
    """

    __slots__ = ("_fn", "_signal")

    def __init__(self, fn: Callable[..., typing.Any], /, signal: StopSignal | None = None) -> None:
        self._fn = fn
        self._signal = signal

    async def __call__(self, *args: typing.Any) -> R:
        return await resolve_pending(apply(self._fn, *args))

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self._fn!r})"

    async def resolve(self, *args: typing.Any) -> R:
        return await self(*args)

    def bind(self, key: typing.Any, value: typing.Any) -> AsyncFunction[R]:
        raise NotImplementedError(f"{type(self).__name__} does not support bind()")

    def interp(self, *args: typing.Any) -> LCR[R]:
        """Evaluation as a lazy Result; every call of it evaluates again."""
        return catching_async(lambda: self(*args))

    def _derive(self, fn: Callable[..., typing.Any]) -> typing.Self:
        derived = copy.copy(self)
        derived._fn = fn
        return derived

    # ------------------------------------------------------------------
    # Stop signal
    # ------------------------------------------------------------------

    @property
    def signal(self) -> StopSignal | None:
        """Stop signal attached by with_retry / gated_by_event, if any."""
        return self._signal

    @property
    def stopped(self) -> bool:
        return self._signal is not None and self._signal.stopped

    @stopped.setter
    def stopped(self, value: bool) -> None:
        if self._signal is None:
            raise AttributeError(
                f"{type(self).__name__} has no stop signal; use with_retry() or gated_by_event()"
            )
        self._signal.stopped = value

    # ------------------------------------------------------------------
    # Construction
    # ------------------------------------------------------------------

    @staticmethod
    def coerce(f: typing.Any) -> AsyncFunction[typing.Any]:
        if isinstance(f, AsyncFunction):
            return f
        if callable(f):
            return AsyncFunction(f)
        return AsyncFunction(lambda *_: f)

    @staticmethod
    def matching[V](args: typing.Any, value: V) -> AsyncFunction[V | None]:
        expected = tuple(args) if is_iterable(args) else (args,)

        async def matched(*given: typing.Any) -> V | None:
            return value if await AsyncSequence.equal(given, expected) else None

        return AsyncFunction(matched)

    @staticmethod
    def first_of(*fns: typing.Any) -> AsyncFunction[typing.Any]:
        """First non-None result, trying fns one after another; errors count as absent."""

        async def first(*args: typing.Any) -> typing.Any:
            interps = (AsyncFunction.coerce(fn).interp(*args) for fn in fns)
            return await unsafe(first_of(*interps))

        return AsyncFunction(first)

    @staticmethod
    def parallel_all(*fns: typing.Any) -> AsyncFunction[tuple[typing.Any, ...]]:
        """Run every fn concurrently on the same arguments, tuple in argument order."""

        async def together(*args: typing.Any) -> tuple[typing.Any, ...]:
            return await unsafe(parallel(*(AsyncFunction.coerce(fn).interp(*args) for fn in fns)))

        return AsyncFunction(together)

    @staticmethod
    def expand_paths(*fns: typing.Any) -> AsyncFunction[AsyncSequence[PathChain[typing.Any]]]:
        """Asynchronous SyncFunction.expand_paths; fns may be async."""

        async def step(chain_or_item: typing.Any) -> AsyncSequence[PathChain[typing.Any]]:
            chain = chain_or_item if isinstance(chain_or_item, PathChain) else PathChain.of(chain_or_item)
            if chain.length == 0 or chain.length > len(fns):
                return AsyncSequence.of()
            values = await resolve_pending(apply(fns[chain.length - 1], chain.last))
            return AsyncSequence.coerce(values).restrict().map(chain.extend)

        return AsyncFunction(step)

    # ------------------------------------------------------------------
    # Restriction
    # ------------------------------------------------------------------

    def restrict_input(self, predicate: Predicate, on_fail: typing.Any = None) -> typing.Self:
        async def restricted(*args: typing.Any) -> typing.Any:
            if await resolve_pending(apply(predicate, *args)):
                return await self(*args)
            return refuse(on_fail)

        return self._derive(restricted)

    def restrict_output(self, predicate: Predicate, on_fail: typing.Any = None) -> typing.Self:
        async def restricted(*args: typing.Any) -> typing.Any:
            result = await self(*args)
            if await resolve_pending(apply(predicate, result, *args)):
                return result
            return refuse(on_fail)

        return self._derive(restricted)

    def restrict_each(self, predicate: Predicate) -> typing.Self:
        async def restricted(*args: typing.Any) -> AsyncSequence[typing.Any]:
            return AsyncSequence.coerce(await self(*args)).restrict(
                lambda value, index: apply(predicate, value, index, *args)
            )

        return self._derive(restricted)

    # ------------------------------------------------------------------
    # Composition
    # ------------------------------------------------------------------

    def map(self, *fns: typing.Any) -> typing.Self:
        """Pipe the result through fns, which may be async; stops at None."""

        async def mapped(*args: typing.Any) -> typing.Any:
            got = await self(*args)
            for fn in fns:
                if got is None:
                    break
                got = await resolve_pending(apply(fn, got))
            return got

        return self._derive(mapped)

    def fallback(self, alt: typing.Any, matcher: Matcher | None = None) -> typing.Self:
        """
        alt(*args) when the result is None; alt(*args, error) when the
        evaluation fails with an error accepted by matcher.

        Rejected errors are raised again unchanged.
        """
        alternative = AsyncFunction.coerce(alt)

        async def guarded(*args: typing.Any) -> typing.Any:
            def secondary(error: Exception | None) -> LCR[typing.Any]:
                if error is None:
                    return alternative.interp(*args)
                return alternative.interp(*args, error)

            return await unsafe(fallback(self.interp(*args), secondary, matcher=matcher))

        return self._derive(guarded)

    def parallel(self, *fns: typing.Any) -> typing.Self:
        """
        Tuple of this function's result followed by each fn's result.

        Branches start concurrently; the first failing branch in argument
        order raises.
        """

        async def together(*args: typing.Any) -> tuple[typing.Any, ...]:
            interps = (self.interp(*args), *(AsyncFunction.coerce(fn).interp(*args) for fn in fns))
            return await unsafe(parallel(*interps))

        return self._derive(together)

    def slice(
        self,
        predicate_or_index: Predicate | int,
        start: bool = True,
        inclusive: bool | None = None,
    ) -> typing.Self:
        async def sliced(*args: typing.Any) -> AsyncSequence[typing.Any]:
            test = _with_args(predicate_or_index, args)
            return AsyncSequence.coerce(await self(*args)).slice(test, start, inclusive)

        return self._derive(sliced)

    def expand(self, fn: typing.Any) -> typing.Self:
        async def expanded(*args: typing.Any) -> AsyncSequence[typing.Any]:
            values = AsyncSequence.coerce(await self(*args)).restrict()
            return values.map(lambda value: apply(fn, value)).flatten().restrict()

        return self._derive(expanded)

    def adapt(self, index_or_keys: typing.Any = MISSING, value_or_key: typing.Any = MISSING) -> typing.Self:
        """Asynchronous SyncFunction.adapt, with the same modes."""
        if index_or_keys is MISSING or index_or_keys is None:
            if value_or_key is MISSING or value_or_key is None:

                async def across(chain: PathChain[typing.Any]) -> AsyncSequence[PathChain[typing.Any]]:
                    return AsyncSequence.coerce(await self(chain.last)).restrict().map(chain.extend)

                return self._derive(across)

            async def wrapped(*args: typing.Any) -> typing.Any:
                return records.wrap(await self(*args), value_or_key)

            return self._derive(wrapped)

        if records.is_index(index_or_keys):

            async def inserted(*args: typing.Any) -> typing.Any:
                return await self(*records.insert_at(args, index_or_keys, value_or_key))

            return self._derive(inserted)

        async def from_record(record: typing.Any) -> typing.Any:
            result = await self(*records.read_fields(record, index_or_keys))
            return records.store(record, result, value_or_key)

        return self._derive(from_record)

    # ------------------------------------------------------------------
    # Resilience
    # ------------------------------------------------------------------

    def with_timeout(
        self,
        seconds: float,
        error: Exception | type[Exception] | None = None,
    ) -> typing.Self:
        """
        Raise TimeoutError(seconds), or error, when evaluation takes longer.

        error may be a class, instantiated per expiry, or an instance,
        raised as a fresh copy per expiry.

        The evaluation is abandoned, not cancelled: it runs to completion
        in the background and its outcome is dropped.
        """

        async def timed(*args: typing.Any) -> typing.Any:
            return await unsafe(deadline(self.interp(*args), seconds=seconds, error=error))

        return self._derive(timed)

    def with_retry(
        self,
        max_attempts: int | None,
        base_delay: float = 0.0,
        factor: float = 2.0,
        max_delay: float = 60.0,
        retry_on: Matcher | None = None,
        signal: StopSignal | None = None,
    ) -> typing.Self:
        """
        Evaluate again after a failure, up to max_attempts times in total.

        The pause before attempt n + 1 is min(base_delay * factor**(n - 1),
        max_delay) seconds. max_attempts=None retries until success or stop.
        Errors rejected by retry_on surface at once; after the last attempt
        the last error is raised as is.
        factor below 1 or max_delay below base_delay raise ValueError.

        The result exposes `stopped` and `signal`: once stopped, the next
        checkpoint (before an attempt or during a pause) raises StopError.
        """
        policy = RetryPolicy.exponential(
            max_attempts,
            initial=base_delay,
            multiplier=factor,
            max_delay=max_delay,
            retry_on=retry_on,
        )
        stop = signal if signal is not None else StopSignal()

        async def retried(*args: typing.Any) -> typing.Any:
            return await unsafe(retry(self.interp(*args), policy=policy, signal=stop))

        derived = self._derive(retried)
        derived._signal = stop
        return derived

    def gated_by_event(
        self,
        predicate: Predicate | None,
        source: EventSource,
        event_name: str,
        timeout: float | None = None,
        start: bool = True,
        signal: StopSignal | None = None,
    ) -> typing.Self:
        """
        Tie evaluation to an event of source.

        start=True: wait for event_name with arguments accepted by
        predicate, then evaluate and return the result.
        start=False: evaluate at once and return None when the matching
        event fires; a failure before that is raised, the evaluation is
        never cancelled.

        No match within `timeout` seconds raises TimeoutError; stopping the
        signal raises StopError.
        """
        stop = signal if signal is not None else StopSignal()

        async def gated(*args: typing.Any) -> typing.Any:
            interp = gate(
                self.interp(*args),
                source=source,
                event_name=event_name,
                predicate=predicate,
                seconds=timeout,
                start=start,
                signal=stop,
            )
            return await unsafe(interp)

        derived = self._derive(gated)
        derived._signal = stop
        return derived


__all__ = ("AsyncFunction",)
