"""Record access shared by the adapt modes of SyncFunction and AsyncFunction.

A record is a Mapping, a Scope (names are searched upward through its
ancestors) or any object exposing its fields as attributes."""

from __future__ import annotations

import typing
from collections.abc import Mapping, MutableMapping

from .._types import MISSING
from ..collection.scope import Scope


def is_index(value: object) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


def insert_at(args: tuple[typing.Any, ...], index: int, value: typing.Any) -> tuple[typing.Any, ...]:
    """
    args with value inserted at position index (list.insert semantics).

    A value that was not supplied is inserted as None.
    """
    spliced = list(args)
    spliced.insert(index, None if value is MISSING else value)
    return tuple(spliced)


def lookup(record: typing.Any, name: str) -> typing.Any:
    """Field of record by name, None when absent."""
    match record:
        case None:
            return None
        case Scope():
            return record.get(name)
        case Mapping():
            return record.get(name)
        case _:
            return getattr(record, name, None)


def read_fields(record: typing.Any, keys: typing.Any) -> tuple[typing.Any, ...]:
    """
    Positional arguments read off record.

    keys is one name or a sequence of entries; string entries are looked
    up, anything else is passed literally.
    """
    entries = (keys,) if isinstance(keys, str) else tuple(keys)
    return tuple(lookup(record, entry) if isinstance(entry, str) else entry for entry in entries)


def write_field(record: typing.Any, name: str, value: typing.Any) -> None:
    match record:
        case Scope():
            record.let(name, value)
        case MutableMapping():
            record[name] = value
        case _:
            setattr(record, name, value)


def store(record: typing.Any, result: typing.Any, output_key: typing.Any) -> typing.Any:
    """
    Result of a field-reading evaluation.

    Absent results stay absent and nothing is written. Without an output
    key the result itself is returned; with one it is written into the
    record and the record is returned.
    """
    if result is None:
        return None
    if output_key is MISSING or output_key is None:
        return result
    write_field(record, output_key, result)
    return record


def wrap(result: typing.Any, output_key: str) -> dict[str, typing.Any] | None:
    return None if result is None else {output_key: result}


__all__ = (
    "insert_at",
    "is_index",
    "lookup",
    "read_fields",
    "store",
    "wrap",
    "write_field",
)
