"""
Event-gated execution
=====================

Start an interpretation when an event arrives, or keep one running
until an event says stop.
"""

from __future__ import annotations

import asyncio
import logging
import typing

from kungfu import Error, LazyCoroResult, Ok, Result

from .._errors import StopError, TimeoutError
from .._helpers import apply
from .._types import LCR, Predicate
from ..time.timeout import abandon
from .source import EventSource, subscribe

if typing.TYPE_CHECKING:
    from ..control.signal import StopSignal

logger = logging.getLogger(__name__)


async def _wait_for_event(
    matched: asyncio.Future[tuple[typing.Any, ...]],
    *,
    seconds: float | None,
    signal: StopSignal | None,
    running: asyncio.Future[Result[typing.Any, Exception]] | None = None,
) -> Result[None, Exception]:
    """
    Suspend until the event matched, the signal stopped or time ran out.

    A running computation that fails first ends the wait with its error;
    one that succeeds first does not.
    """
    loop = asyncio.get_running_loop()
    deadline = None if seconds is None else loop.time() + seconds
    stopper = asyncio.ensure_future(signal.wait()) if signal is not None else None
    waiters: set[asyncio.Future[typing.Any]] = {matched}
    if stopper is not None:
        waiters.add(stopper)
    if running is not None:
        waiters.add(running)

    try:
        while True:
            remaining = None if deadline is None else max(0.0, deadline - loop.time())
            done, _ = await asyncio.wait(
                waiters, timeout=remaining, return_when=asyncio.FIRST_COMPLETED
            )
            if matched in done:
                exc = matched.exception()
                return Ok(None) if exc is None else Error(typing.cast(Exception, exc))
            if stopper is not None and stopper in done:
                return Error(StopError())
            if running is not None and running in done:
                waiters.discard(running)
                outcome = running.result()
                match outcome:
                    case Error(_):
                        return typing.cast(Result[None, Exception], outcome)
                    case _:
                        running = None
                        continue
            if not done:
                return Error(TimeoutError(typing.cast(float, seconds)))
    finally:
        if stopper is not None:
            stopper.cancel()


def gate[T](
    interp: LCR[T],
    *,
    source: EventSource,
    event_name: str,
    predicate: Predicate | None = None,
    seconds: float | None = None,
    start: bool = True,
    signal: StopSignal | None = None,
) -> LCR[T | None]:
    """
    Gate interpretation on an event.

    start=True: wait for event_name with arguments satisfying predicate,
    then run interp and return its result.

    start=False: run interp right away and return None once the
    stop-matching event fires. The computation is never cancelled; the
    gate only stops waiting for it.

    No match within `seconds` gives Error(TimeoutError); a set stop
    signal gives Error(StopError). The listener is removed exactly once,
    whatever the exit path.
    """

    async def run() -> Result[T | None, Exception]:
        loop = asyncio.get_running_loop()
        matched: asyncio.Future[tuple[typing.Any, ...]] = loop.create_future()

        def listener(*event_args: typing.Any) -> None:
            if matched.done():
                return
            try:
                accepted = predicate is None or apply(predicate, *event_args)
            except Exception as exc:
                matched.set_exception(exc)
                return
            if accepted:
                matched.set_result(event_args)

        unsubscribe = subscribe(source, event_name, listener)
        logger.debug("waiting for %r to %s", event_name, "start" if start else "stop")
        running: asyncio.Task[Result[T, Exception]] | None = None
        try:
            if not start:
                running = asyncio.ensure_future(interp())
            outcome = await _wait_for_event(
                matched, seconds=seconds, signal=signal, running=running
            )
            unsubscribe()
            match outcome:
                case Error(_):
                    return typing.cast(Result[T | None, Exception], outcome)
                case _:
                    pass
            if start:
                logger.debug("%r matched, starting", event_name)
                return await interp()
            logger.debug("%r matched, released running computation", event_name)
            return Ok(None)
        finally:
            unsubscribe()
            if not matched.done():
                matched.cancel()
            if running is not None and not running.done():
                abandon(typing.cast(asyncio.Task[object], running))

    return LazyCoroResult(run)


__all__ = ("gate",)
