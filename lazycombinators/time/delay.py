"""Delay helpers

Stop-aware sleeping used between retry attempts."""

from __future__ import annotations

import asyncio
import typing

if typing.TYPE_CHECKING:
    from ..control.signal import StopSignal

async def pause(seconds: float, signal: StopSignal | None = None) -> bool:
    """
    Sleep for `seconds`, waking early when `signal` is set.

    Always yields to the event loop at least once, even for a zero delay,
    so a tight retry loop stays a sequence of scheduling checkpoints.
    Returns True when the pause ended because of the stop signal.
    """
    seconds = max(0.0, seconds)
    if signal is None:
        await asyncio.sleep(seconds)
        return False
    if signal.stopped:
        return True
    try:
        await asyncio.wait_for(signal.wait(), timeout=seconds)
    except asyncio.TimeoutError:
        return signal.stopped
    return True

__all__ = ("pause",)
