from .aio import AsyncFunction
from .sync import SyncFunction

__all__ = (
    "AsyncFunction",
    "SyncFunction",
)
