"""
Lazy combinator algebra for sequences and functions.

Four carriers share one fluent vocabulary (restrict, map, fallback,
slice, zip, expand, adapt, resolve):

- SyncSequence / AsyncSequence - lazy, re-entrant, possibly infinite iteration
- SyncFunction / AsyncFunction - callable, composable mappings

plus PathChain for enumerating combinatorial products branch by branch,
and async resilience combinators (timeout, retry with backoff,
event-gated start/stop) built on kungfu's LazyCoroResult.

Architecture:
- Carriers (sequence, function) hold no data, only how to produce it
- Resilience combinators (control, time, events, concurrency) work on
  LazyCoroResult values; AsyncFunction raises their errors at the boundary
- Absent values are None, never an exception
"""

import logging

# Core types
from ._types import LCR, MISSING, Matcher, Predicate, Step

# Errors
from ._errors import RestrictionError, StopError, TimeoutError

# Carriers
from .sequence import AsyncSequence, SyncSequence, naturals
from .function import AsyncFunction, SyncFunction

# Combinatorial search
from .collection import PathChain, Scope, Thought, breadth_first, depth_first

# Lift helpers
from . import lift

# Control flow
from .control import RetryPolicy, StopSignal, fallback, first_of, matches, retry, status_of

# Time
from .time import abandon, pause, timeout

# Events
from .events import Emitter, EventSource, gate, subscribe

# Concurrency
from .concurrency import parallel

logging.getLogger(__name__).addHandler(logging.NullHandler())

__all__ = (
    # Types
    "LCR",
    "MISSING",
    "Matcher",
    "Predicate",
    "Step",
    # Errors
    "RestrictionError",
    "StopError",
    "TimeoutError",
    # Carriers
    "AsyncFunction",
    "AsyncSequence",
    "SyncFunction",
    "SyncSequence",
    "naturals",
    # Search
    "PathChain",
    "Scope",
    "Thought",
    "breadth_first",
    "depth_first",
    # Lift
    "lift",
    # Control
    "RetryPolicy",
    "StopSignal",
    "fallback",
    "first_of",
    "matches",
    "retry",
    "status_of",
    # Time
    "abandon",
    "pause",
    "timeout",
    # Events
    "Emitter",
    "EventSource",
    "gate",
    "subscribe",
    # Concurrency
    "parallel",
)
