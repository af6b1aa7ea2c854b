"""
PathChain
=========

Immutable, persistent, backward-linked chain of steps: one branch of a
combinatorial search tree.

Extending a chain is O(1) and shares the parent node, so many branches
grown from one prefix hold a single copy of it. Reading the steps in
forward order is O(n).

Example:
    base = PathChain.of("a", "b")
    left, right = base.extend("c"), base.extend("d")
    left.to_list()   # ["a", "b", "c"]
    right.parent is base  # True
"""

from __future__ import annotations

import typing
from collections.abc import Callable, Iterable

from .._helpers import apply

if typing.TYPE_CHECKING:
    from ..sequence.sync import SyncSequence


class PathChain[T]:
    """
    {parent, last, length} with length == parent.length + 1.

    The empty chain has length 0 and no parent; a root has length 1 and
    no parent. Instances cannot be mutated.
    """

    __slots__ = ("parent", "last", "length")

    parent: PathChain[T] | None
    last: T | None
    length: int

    def __init__(self) -> None:
        object.__setattr__(self, "parent", None)
        object.__setattr__(self, "last", None)
        object.__setattr__(self, "length", 0)

    @classmethod
    def _node(cls, parent: PathChain[T] | None, last: T, length: int) -> PathChain[T]:
        node = cls.__new__(cls)
        object.__setattr__(node, "parent", parent)
        object.__setattr__(node, "last", last)
        object.__setattr__(node, "length", length)
        return node

    @classmethod
    def of[V](cls, *steps: V) -> PathChain[V]:
        return PathChain().extend_all(steps)

    def __setattr__(self, name: str, value: typing.Any) -> None:
        raise AttributeError(f"PathChain is immutable, cannot set {name!r}")

    def __delattr__(self, name: str) -> None:
        raise AttributeError(f"PathChain is immutable, cannot delete {name!r}")

    def __len__(self) -> int:
        return self.length

    def __repr__(self) -> str:
        return f"PathChain({self.to_list()!r})"

    # ------------------------------------------------------------------
    # Growth
    # ------------------------------------------------------------------

    def extend(self, item: T) -> PathChain[T]:
        """New chain with item appended; self is untouched."""
        if self.length == 0:
            return PathChain._node(None, item, 1)
        return PathChain._node(self, item, self.length + 1)

    def extend_all(self, items: Iterable[T]) -> PathChain[T]:
        chain = self
        for item in items:
            chain = chain.extend(item)
        return chain

    def extend_across(self, items: typing.Any) -> SyncSequence[PathChain[T]]:
        """
        One child chain per item, built as the result is consumed.

        Siblings share self as their parent.
        """
        from ..sequence.sync import SyncSequence

        return SyncSequence.coerce(items).map(self.extend)

    # ------------------------------------------------------------------
    # Reading
    # ------------------------------------------------------------------

    def to_list(self, n: int | None = None, fn: Callable[..., typing.Any] | None = None) -> list[typing.Any]:
        """
        Last n steps (all by default) in forward order.

        fn, when given, maps each step as fn(step, index).
        """
        remaining = self.length if n is None else min(max(n, 0), self.length)
        steps: list[typing.Any] = []
        node: PathChain[T] | None = self
        while node is not None and remaining > 0:
            steps.append(node.last)
            node = node.parent
            remaining -= 1
        steps.reverse()
        if fn is None:
            return steps
        return [apply(fn, step, index) for index, step in enumerate(steps)]

    def ancestors(self) -> SyncSequence[PathChain[T]]:
        """This chain, its parent, its grandparent, ... up to the root."""
        from ..sequence.sync import SyncSequence

        return SyncSequence.along(self, lambda chain: chain.parent)

    def is_empty(self) -> bool:
        return self.length == 0

    def is_root(self) -> bool:
        return self.length == 1


__all__ = ("PathChain",)
