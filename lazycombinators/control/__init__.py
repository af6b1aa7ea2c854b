from .fallback import fallback, first_of
from .matcher import matches, status_of
from .retry import BackoffStrategy, RetryPolicy, retry
from .signal import StopSignal

__all__ = (
    # Policies
    "BackoffStrategy",
    "RetryPolicy",
    "StopSignal",
    # Fallback
    "fallback",
    "first_of",
    # Matcher
    "matches",
    "status_of",
    # Retry
    "retry",
)
