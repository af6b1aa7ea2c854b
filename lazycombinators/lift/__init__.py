"""
Lift helpers with semantic namespaces.

    from lazycombinators import lift as L

Architecture:
- L.up.*    - capture raised errors into kungfu Results
- L.down.*  - turn Results back into values or raised errors

Examples:
    from lazycombinators import lift as L

    interp = L.up.catching_async(lambda: fetch_user(42))
    user = await L.down.unsafe(interp)
"""

from __future__ import annotations

from . import down as down_ns
from . import up as up_ns

from .down import to_result, unsafe, unwrap
from .up import catching, catching_async, fail

up = up_ns
down = down_ns

__all__ = (
    # Namespaces
    "up",
    "down",
    # Up
    "catching",
    "catching_async",
    "fail",
    # Down
    "unwrap",
    "to_result",
    "unsafe",
)
