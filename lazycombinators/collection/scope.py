"""
Scope
=====

Tree of named values with upward lookup: a name missing from a scope is
searched for in its parent, grandparent, and so on up to the root.

Used as a record by SyncFunction.adapt / AsyncFunction.adapt.

Example:
    root = Scope().let("unit", "ms")
    child = Scope().let("value", 12)
    root.let_child("timing", child)
    child.get("unit")  # "ms"
"""

from __future__ import annotations

import typing

from .._types import MISSING
from ..sequence.sync import SyncSequence


class Scope:
    """One node of the scope tree: named values plus named child scopes."""

    __slots__ = ("parent", "name", "_values", "_children")

    def __init__(
        self,
        parent: Scope | None = None,
        name: str | None = None,
        children: dict[str, Scope] | None = None,
    ) -> None:
        self.parent = parent
        self.name = name
        self._values: dict[str, typing.Any] = {}
        self._children: dict[str, Scope] = {}
        for child_name, child in (children or {}).items():
            self.let_child(child_name, child)

    def __repr__(self) -> str:
        return f"{type(self).__name__}(name={self.name!r}, values={sorted(self._values)!r})"

    def __contains__(self, name: object) -> bool:
        return name in self._values

    # ------------------------------------------------------------------
    # Values
    # ------------------------------------------------------------------

    def let(self, name: str, value: typing.Any) -> Scope:
        self._values[name] = value
        return self

    def forget(self, name: str) -> Scope:
        self._values.pop(name, None)
        return self

    def get(self, *names: str) -> typing.Any:
        """
        Value of names[0] in the nearest scope defining every name.

        None when no scope on the way up defines them all.
        """
        if not names:
            return None
        owner = self.ancestors().restrict(
            lambda scope: all(scope._values.get(n, MISSING) is not MISSING for n in names)
        ).resolve()
        return None if owner is None else owner._values[names[0]]

    def resolve(self, name_or_value: typing.Any) -> typing.Any:
        """Look a string up; return anything else as is."""
        if isinstance(name_or_value, str):
            return self.get(name_or_value)
        return name_or_value

    # ------------------------------------------------------------------
    # Tree
    # ------------------------------------------------------------------

    def let_child(self, name: str, child: Scope) -> Scope:
        self._children[name] = child
        child.parent = self
        child.name = name
        return self

    def get_child(self, *names: str) -> Scope | None:
        """Follow a path of child names; None when the path breaks."""
        found: Scope | None = self
        for name in names:
            found = found._children.get(name)
            if found is None:
                return None
        return found

    def children(self) -> SyncSequence[Scope]:
        return SyncSequence(lambda: self._children.values())

    def ancestors(self) -> SyncSequence[Scope]:
        """This scope, then its parent, up to the root."""
        return SyncSequence.along(self, lambda scope: scope.parent)

    def root(self) -> Scope:
        scope = self
        while scope.parent is not None:
            scope = scope.parent
        return scope

    def is_leaf(self) -> bool:
        return not self._children

    def is_root(self) -> bool:
        return self.parent is None


__all__ = ("Scope",)
