"""
Event sources
=============

Subscription conventions understood by event-gated execution, plus a
minimal centralized emitter.
"""

from __future__ import annotations

import logging
import typing
from collections.abc import Callable

logger = logging.getLogger(__name__)

type Listener = Callable[..., typing.Any]


@typing.runtime_checkable
class EmitterSource(typing.Protocol):
    """Centralized-emitter convention: on / off."""

    def on(self, event_name: str, listener: Listener, /) -> typing.Any: ...

    def off(self, event_name: str, listener: Listener, /) -> typing.Any: ...


@typing.runtime_checkable
class ListenerSource(typing.Protocol):
    """add_listener / remove_listener convention."""

    def add_listener(self, event_name: str, listener: Listener, /) -> typing.Any: ...

    def remove_listener(self, event_name: str, listener: Listener, /) -> typing.Any: ...


@typing.runtime_checkable
class TargetSource(typing.Protocol):
    """add_event_listener / remove_event_listener convention."""

    def add_event_listener(self, event_name: str, listener: Listener, /) -> typing.Any: ...

    def remove_event_listener(self, event_name: str, listener: Listener, /) -> typing.Any: ...


type EventSource = EmitterSource | ListenerSource | TargetSource

_CONVENTIONS: tuple[tuple[str, str], ...] = (
    ("on", "off"),
    ("add_listener", "remove_listener"),
    ("add_event_listener", "remove_event_listener"),
)


def subscribe(source: EventSource, event_name: str, listener: Listener) -> Callable[[], None]:
    """
    Register listener for event_name on source.

    Returns an unsubscribe callable that deregisters the listener the
    first time it is called and does nothing afterwards.
    """
    for add_name, remove_name in _CONVENTIONS:
        add = getattr(source, add_name, None)
        remove = getattr(source, remove_name, None)
        if callable(add) and callable(remove):
            add(event_name, listener)
            removed = False

            def unsubscribe() -> None:
                nonlocal removed
                if removed:
                    return
                removed = True
                remove(event_name, listener)

            return unsubscribe

    raise TypeError(
        f"{type(source).__name__} is not an event source: expected on/off, "
        "add_listener/remove_listener or add_event_listener/remove_event_listener"
    )


class Emitter:
    """
    Minimal synchronous event emitter.

    Listeners run in registration order inside emit(); a listener that
    removes itself while being notified does not disturb the others.
    """

    __slots__ = ("_listeners",)

    def __init__(self) -> None:
        self._listeners: dict[str, list[Listener]] = {}

    def on(self, event_name: str, listener: Listener, /) -> Emitter:
        self._listeners.setdefault(event_name, []).append(listener)
        return self

    def off(self, event_name: str, listener: Listener, /) -> Emitter:
        listeners = self._listeners.get(event_name, [])
        if listener in listeners:
            listeners.remove(listener)
        if not listeners:
            self._listeners.pop(event_name, None)
        return self

    def emit(self, event_name: str, /, *args: typing.Any) -> int:
        """Notify listeners of event_name, return how many were called."""
        listeners = list(self._listeners.get(event_name, ()))
        for listener in listeners:
            listener(*args)
        logger.debug("emitted %r to %d listener(s)", event_name, len(listeners))
        return len(listeners)

    def listener_count(self, event_name: str) -> int:
        return len(self._listeners.get(event_name, ()))


__all__ = (
    "Emitter",
    "EmitterSource",
    "EventSource",
    "Listener",
    "ListenerSource",
    "TargetSource",
    "subscribe",
)
