"""
Error matchers
==============

Classify a raised error against a matcher. Used by fallback and retry
to decide which errors they handle.
"""

from __future__ import annotations

import re
import typing
from collections.abc import Callable

from .._types import Matcher


def status_of(error: BaseException) -> int | None:
    """Status-like field of an error (HTTP-style errors), if any."""
    for name in ("status_code", "status"):
        value = getattr(error, name, None)
        if isinstance(value, int):
            return value
    return None


def matches(error: BaseException | None, matcher: Matcher | None) -> bool:
    """
    Check if an error matches a condition.

    Supported matchers:
    - None            -> matches every error
    - int             -> compares the error's status_code (or status)
    - str             -> class name of the error or of one of its bases
    - exception class -> isinstance check
    - re.Pattern      -> searched in str(error)
    - tuple / list    -> any member matches
    - callable        -> custom predicate (error) -> bool

    Example:
        matches(HttpError(404), 404)           # True
        matches(ValueError("bad"), "ValueError")  # True
        matches(KeyError("x"), re.compile("y"))   # False
    """
    if error is None:
        return False
    if matcher is None:
        return True

    match matcher:
        case bool():
            return matcher
        case int():
            return status_of(error) == matcher
        case str():
            return any(cls.__name__ == matcher for cls in type(error).__mro__)
        case re.Pattern():
            return matcher.search(str(error)) is not None
        case tuple() | list():
            return any(matches(error, m) for m in matcher)
        case type() if issubclass(matcher, BaseException):
            return isinstance(error, matcher)
        case _ if callable(matcher):
            return bool(typing.cast(Callable[[BaseException], bool], matcher)(error))
        case _:
            return False


__all__ = ("matches", "status_of")
