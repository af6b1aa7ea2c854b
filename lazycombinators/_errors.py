from __future__ import annotations

class TimeoutError(Exception):
    """Evaluation did not finish in time."""

    seconds: float

    def __init__(self, seconds: float) -> None:
        self.seconds = seconds
        super().__init__(f"Timed out after {seconds}s")

class StopError(Exception):
    """A retry or gate loop was halted through its stop signal."""

    attempts: int

    def __init__(self, attempts: int = 0) -> None:
        self.attempts = attempts
        super().__init__(f"Stopped after {attempts} attempt(s)")

class RestrictionError(ValueError):
    """A restrict combinator rejected its input or output."""

__all__ = ("RestrictionError", "StopError", "TimeoutError")
