"""Internal helpers for lazycombinators.

Common functions used across the sequence and function carriers.
These are not part of the public API."""

from __future__ import annotations

import functools
import inspect
import types
import typing
from collections.abc import AsyncIterable, Awaitable, Callable, Iterable

from ._errors import RestrictionError

# Identity function
def identity[T](x: T) -> T:
    """Identity function: returns its argument unchanged."""
    return x

# Calling convention
@functools.lru_cache(maxsize=1024)
def _code_arity(code: types.CodeType) -> int | None:
    if code.co_flags & inspect.CO_VARARGS:
        return None
    return code.co_argcount

def _arity(fn: Callable[..., typing.Any]) -> int | None:
    try:
        signature = inspect.signature(fn)
    except (TypeError, ValueError):
        # builtin types convert one value; other builtins take every argument
        return 1 if isinstance(fn, type) else None
    count = 0
    for param in signature.parameters.values():
        if param.kind is inspect.Parameter.VAR_POSITIONAL:
            return None
        if param.kind in (
            inspect.Parameter.POSITIONAL_ONLY,
            inspect.Parameter.POSITIONAL_OR_KEYWORD,
        ):
            count += 1
    return count

def arity(fn: Callable[..., typing.Any]) -> int | None:
    """
    Number of positional arguments fn accepts, None when unbounded.

    Plain functions and methods are counted off their code object, and
    only code objects are cached, so callables are never kept alive.
    """
    target, bound = fn, 0
    if inspect.ismethod(fn):
        target, bound = fn.__func__, 1
    code = getattr(target, "__code__", None)
    if isinstance(code, types.CodeType) and not hasattr(target, "__wrapped__"):
        count = _code_arity(code)
        return None if count is None else max(0, count - bound)
    return _arity(fn)

def apply(f: typing.Any, *args: typing.Any) -> typing.Any:
    """
    Evaluate f against args.

    Callables receive as many leading positional args as they accept, so
    `lambda item: ...` and `lambda item, index: ...` both work as steps.
    Anything that is not callable is a constant and is returned as is.
    """
    if not callable(f):
        return f
    n = arity(f)
    if n is None or n >= len(args):
        return f(*args)
    return f(*args[:n])

# Shape checks
def is_atomic(value: object) -> bool:
    """Text and bytes are iterable but treated as single values."""
    return isinstance(value, (str, bytes, bytearray))

def is_iterable(value: object) -> bool:
    return isinstance(value, Iterable) and not is_atomic(value)

def is_async_iterable(value: object) -> bool:
    return isinstance(value, AsyncIterable)

# Pending values
async def resolve_pending[T](value: T | Awaitable[T]) -> T:
    """Await value if it is pending, return it otherwise."""
    if inspect.isawaitable(value):
        return await value
    return value

def chain_pending(value: typing.Any, f: typing.Any, *extra: typing.Any) -> typing.Any:
    """
    Apply f to value, or to its resolution when value is pending.

    A pending value yields a new pending value; nothing is awaited here.
    """
    if not inspect.isawaitable(value):
        return apply(f, value, *extra)

    async def chained() -> typing.Any:
        return await resolve_pending(apply(f, await value, *extra))

    return chained()

# Restriction policy
def refuse(on_fail: typing.Any) -> None:
    """
    Outcome of a failed restriction: absent (None) or a raised error.

    on_fail may be a message, an exception instance or an exception class.
    """
    if on_fail is None:
        return None
    if isinstance(on_fail, BaseException):
        raise on_fail
    if isinstance(on_fail, type) and issubclass(on_fail, BaseException):
        raise on_fail()
    raise RestrictionError(str(on_fail))

__all__ = (
    "identity",
    "arity",
    "apply",
    "is_atomic",
    "is_iterable",
    "is_async_iterable",
    "resolve_pending",
    "chain_pending",
    "refuse",
)
