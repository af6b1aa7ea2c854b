from .aio import AsyncSequence
from .sync import SyncSequence, naturals

__all__ = (
    "AsyncSequence",
    "SyncSequence",
    "naturals",
)
