"""Cooperative stop flag shared between a wrapper and its caller."""

from __future__ import annotations

import asyncio


class StopSignal:
    """
    Externally settable `stopped` flag.

    The owner sets it; retry and gate loops poll it at their checkpoints
    and wake up from pending pauses as soon as it is set. Setting the flag
    never interrupts work that is already running.

    The flag is plain state, not bound to any event loop: each wait()
    parks a future on the loop that is running it, so one signal serves
    any number of asyncio.run() calls.
    """

    __slots__ = ("_stopped", "_waiters")

    def __init__(self, stopped: bool = False) -> None:
        self._stopped = stopped
        self._waiters: list[asyncio.Future[None]] = []

    @property
    def stopped(self) -> bool:
        return self._stopped

    @stopped.setter
    def stopped(self, value: bool) -> None:
        self._stopped = bool(value)
        if not self._stopped:
            return
        for waiter in self._waiters:
            if not waiter.done() and not waiter.get_loop().is_closed():
                waiter.set_result(None)

    def stop(self) -> None:
        self.stopped = True

    async def wait(self) -> None:
        """Suspend until the flag is set."""
        if self._stopped:
            return
        waiter = asyncio.get_running_loop().create_future()
        self._waiters.append(waiter)
        try:
            await waiter
        finally:
            self._waiters.remove(waiter)

    def __repr__(self) -> str:
        return f"StopSignal(stopped={self.stopped})"


__all__ = ("StopSignal",)
