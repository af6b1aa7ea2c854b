from .delay import pause
from .timeout import abandon, timeout

__all__ = (
    "abandon",
    "pause",
    "timeout",
)
