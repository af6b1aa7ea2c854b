"""
Retry combinators
=================

Re-run a lazy interpretation until it succeeds, with pluggable backoff
and a cooperative stop signal.
"""

from __future__ import annotations

import itertools
import logging
import random
from collections.abc import Callable, Iterator
from dataclasses import dataclass

from kungfu import Error, LazyCoroResult, Ok, Result

from .._errors import StopError
from .._types import LCR, Matcher
from ..time.delay import pause
from .matcher import matches
from .signal import StopSignal

logger = logging.getLogger(__name__)


# BackoffStrategy = (attempt_index, error) -> delay_seconds
type BackoffStrategy = Callable[[int, Exception], float]


def _fixed_backoff(delay: float) -> BackoffStrategy:
    """Same delay every retry."""
    def strategy(attempt: int, error: Exception) -> float:
        _ = (attempt, error)
        return delay
    return strategy


def _exponential_backoff(
    initial: float,
    multiplier: float = 2.0,
    max_delay: float = 60.0,
) -> BackoffStrategy:
    """Delay grows: initial * multiplier^attempt (capped at max_delay)."""
    def strategy(attempt: int, error: Exception) -> float:
        _ = error
        return min(initial * (multiplier ** attempt), max_delay)
    return strategy


def _jitter_backoff(base: float, jitter_factor: float = 0.5) -> BackoffStrategy:
    """Base delay plus or minus random noise."""
    def strategy(attempt: int, error: Exception) -> float:
        _ = (attempt, error)
        jitter = random.uniform(-jitter_factor, jitter_factor)
        return max(0.0, base * (1.0 + jitter))
    return strategy


def _exponential_jitter_backoff(
    initial: float,
    multiplier: float = 2.0,
    max_delay: float = 60.0,
    jitter_factor: float = 0.3,
) -> BackoffStrategy:
    """Exponential growth + randomness."""
    def strategy(attempt: int, error: Exception) -> float:
        _ = error
        capped = min(initial * (multiplier ** attempt), max_delay)
        jitter = random.uniform(-jitter_factor, jitter_factor)
        return max(0.0, capped * (1.0 + jitter))
    return strategy


@dataclass(frozen=True, slots=True)
class RetryPolicy:
    """
    Retry configuration with pluggable backoff strategy.

    times=None retries without bound (until success or stop).
    retry_on restricts which errors are retried; others surface at once.
    """

    times: int | None
    backoff: BackoffStrategy
    retry_on: Matcher | None = None

    def __post_init__(self) -> None:
        if self.times is not None and self.times < 1:
            raise ValueError("RetryPolicy.times must be >= 1 or None")

    @classmethod
    def fixed(
        cls,
        times: int | None,
        delay_seconds: float = 0.0,
        retry_on: Matcher | None = None,
    ) -> RetryPolicy:
        """Same delay every retry. Simple and predictable."""
        if delay_seconds < 0.0:
            raise ValueError("delay_seconds must be >= 0")
        return cls(times=times, backoff=_fixed_backoff(delay_seconds), retry_on=retry_on)

    @classmethod
    def exponential(
        cls,
        times: int | None,
        initial: float = 0.1,
        multiplier: float = 2.0,
        max_delay: float = 60.0,
        retry_on: Matcher | None = None,
    ) -> RetryPolicy:
        """Back off more aggressively with each failure."""
        if initial < 0.0:
            raise ValueError("initial must be >= 0")
        if multiplier < 1.0:
            raise ValueError("multiplier must be >= 1.0")
        if max_delay < initial:
            raise ValueError("max_delay must be >= initial")
        return cls(
            times=times,
            backoff=_exponential_backoff(initial, multiplier, max_delay),
            retry_on=retry_on,
        )

    @classmethod
    def jitter(
        cls,
        times: int | None,
        base: float = 1.0,
        jitter_factor: float = 0.5,
        retry_on: Matcher | None = None,
    ) -> RetryPolicy:
        """Randomized delays around a constant base."""
        if base < 0.0:
            raise ValueError("base must be >= 0")
        if jitter_factor < 0.0 or jitter_factor > 1.0:
            raise ValueError("jitter_factor must be in [0, 1]")
        return cls(times=times, backoff=_jitter_backoff(base, jitter_factor), retry_on=retry_on)

    @classmethod
    def exponential_jitter(
        cls,
        times: int | None,
        initial: float = 0.1,
        multiplier: float = 2.0,
        max_delay: float = 60.0,
        jitter_factor: float = 0.3,
        retry_on: Matcher | None = None,
    ) -> RetryPolicy:
        """Exponential growth + randomness, avoids synchronized retries."""
        if initial < 0.0:
            raise ValueError("initial must be >= 0")
        if multiplier < 1.0:
            raise ValueError("multiplier must be >= 1.0")
        if max_delay < initial:
            raise ValueError("max_delay must be >= initial")
        if jitter_factor < 0.0 or jitter_factor > 1.0:
            raise ValueError("jitter_factor must be in [0, 1]")
        return cls(
            times=times,
            backoff=_exponential_jitter_backoff(initial, multiplier, max_delay, jitter_factor),
            retry_on=retry_on,
        )

    def delays(self) -> Iterator[float]:
        """Backoff delays between consecutive attempts, ignoring errors."""
        stop = None if self.times is None else self.times - 1
        for attempt in itertools.islice(itertools.count(), stop):
            yield self.backoff(attempt, Exception())


def _attempts(policy: RetryPolicy) -> Iterator[int]:
    if policy.times is None:
        return itertools.count()
    return iter(range(policy.times))


def _should_retry(*, policy: RetryPolicy, attempt: int, error: Exception) -> bool:
    if policy.times is not None and attempt + 1 >= policy.times:
        return False
    if policy.retry_on is not None and not matches(error, policy.retry_on):
        return False
    return True


def retry[T](
    interp: LCR[T],
    *,
    policy: RetryPolicy,
    signal: StopSignal | None = None,
) -> LCR[T]:
    """
    Call interpretation until Ok, otherwise return the last Error.

    Intermediate errors are discarded; only the last one is kept.
    Attempts run in a loop inside one coroutine, each after a pause that
    yields to the event loop, so the attempt count is not bounded by the
    call stack. The stop signal is checked before every attempt and wakes
    pending pauses; a stopped retry returns Error(StopError) and never
    calls interp again.
    """

    async def run() -> Result[T, Exception]:
        last: Result[T, Exception] | None = None
        for attempt in _attempts(policy):
            if signal is not None and signal.stopped:
                logger.debug("retry stopped before attempt %d", attempt + 1)
                return Error(StopError(attempt))

            raw = await interp()
            match raw:
                case Ok(_):
                    return raw
                case Error(e):
                    last = raw
                    error = e

            if not _should_retry(policy=policy, attempt=attempt, error=error):
                if policy.times is not None and attempt + 1 >= policy.times:
                    logger.warning("retry exhausted after %d attempt(s): %r", attempt + 1, error)
                return raw

            delay = policy.backoff(attempt, error)
            logger.debug("attempt %d failed with %r, retrying in %.3fs", attempt + 1, error, delay)
            if await pause(delay, signal):
                logger.debug("retry stopped after %d attempt(s)", attempt + 1)
                return Error(StopError(attempt + 1))

        if last is None:
            raise RuntimeError("retry(): internal error (no attempts)")
        return last

    return LazyCoroResult(run)


__all__ = (
    "BackoffStrategy",
    "RetryPolicy",
    "retry",
)
