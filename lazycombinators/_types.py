"""
Core type definitions for lazycombinators.

Type aliases shared across the library.
"""

from __future__ import annotations

import re
import typing
from collections.abc import Callable

from kungfu import LazyCoroResult

# ============================================================================
# Type aliases
# ============================================================================

# Predicate = function that tests a value (extra positional args are trimmed)
type Predicate = Callable[..., typing.Any]

# Step = per-item callback of a sequence combinator, called as step(item, index)
type Step[T, R] = Callable[..., R]

# Matcher = anything accepted by control.matcher.matches()
type Matcher = (
    int
    | str
    | type[BaseException]
    | re.Pattern[str]
    | Callable[[BaseException], bool]
    | tuple[typing.Any, ...]
    | list[typing.Any]
)

# ============================================================================
# Concrete type shortcuts
# ============================================================================

# LCR = LazyCoroResult shortcut, errors are plain exceptions
type LCR[T] = LazyCoroResult[T, Exception]


class _Missing:
    """Marker for "argument not supplied" where None is a legal value."""

    __slots__ = ()

    def __repr__(self) -> str:
        return "MISSING"

    def __bool__(self) -> bool:
        return False


MISSING: typing.Final = _Missing()

__all__ = (
    # Type aliases
    "Predicate",
    "Step",
    "Matcher",
    # Concrete shortcuts
    "LCR",
    # Sentinels
    "MISSING",
)
