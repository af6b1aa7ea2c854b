from .gate import gate
from .source import (
    Emitter,
    EmitterSource,
    EventSource,
    Listener,
    ListenerSource,
    TargetSource,
    subscribe,
)

__all__ = (
    # Gate
    "gate",
    # Sources
    "Emitter",
    "EmitterSource",
    "EventSource",
    "Listener",
    "ListenerSource",
    "TargetSource",
    "subscribe",
)
