"""
Thought
=======

A Scope whose names can hold compositions of steps instead of values.

    let_else(name, *steps)   first step with a non-None result wins
    let_then(name, *steps)   each step receives the previous result
    let_each(name, *steps)   each step expands every value of the previous one

about(name) returns the composition as a SyncFunction. Steps are
resolved every time it is called, so a composition may refer to names
defined later, or redefined since, here or in an ancestor.

A step is one of:
- a string: another composition, looked up with about()
- a tuple or list (fn, keys[, output_key]): fn adapted to read its
  arguments from a record, see SyncFunction.adapt
- anything else: a callable, or a constant

Example:
    rules = Thought()
    rules.let_then("parse", str.strip, int)
    rules.let_else("amount", "parse", 0)
    rules.about("amount")(" 12 ")  # 12
    rules.about("amount")("n/a")   # 0
"""

from __future__ import annotations

import functools
import typing
from dataclasses import dataclass

from .scope import Scope

if typing.TYPE_CHECKING:
    from ..function.sync import SyncFunction

type Composition = typing.Literal["else", "then", "each"]


@dataclass(frozen=True, slots=True)
class Definition:
    """Steps stored under a name, with how they combine."""

    composition: Composition
    steps: tuple[typing.Any, ...]

    def __post_init__(self) -> None:
        if self.composition not in ("else", "then", "each"):
            raise ValueError(f"unknown composition: {self.composition!r}")
        if not self.steps:
            raise ValueError("a definition needs at least one step")


class Thought(Scope):
    """Scope of named step compositions."""

    __slots__ = ()

    def let_else(self, name: str, *steps: typing.Any) -> Thought:
        self.let(name, Definition("else", steps))
        return self

    def let_then(self, name: str, *steps: typing.Any) -> Thought:
        self.let(name, Definition("then", steps))
        return self

    def let_each(self, name: str, *steps: typing.Any) -> Thought:
        self.let(name, Definition("each", steps))
        return self

    def about(self, name: str) -> SyncFunction[typing.Any] | None:
        """
        The composition named `name`, here or in the nearest ancestor.

        None when no scope on the way up defines it.
        """
        from ..function.sync import SyncFunction

        owner = self.ancestors().restrict(
            lambda scope: isinstance(scope, Thought) and isinstance(scope._values.get(name), Definition)
        ).resolve()
        if owner is None:
            return None

        def thought(*args: typing.Any) -> typing.Any:
            definition = owner._values.get(name)
            if not isinstance(definition, Definition):
                return None
            return owner._compose(definition)(*args)

        return SyncFunction(thought)

    def step(self, step: typing.Any) -> typing.Any:
        """A single step as a callable (or constant)."""
        from ..function.sync import SyncFunction

        match step:
            case str():
                return self.about(step)
            case tuple() | list():
                fn, *adaptation = step
                return SyncFunction.coerce(self.step(fn)).adapt(*adaptation)
            case _:
                return step

    def _compose(self, definition: Definition) -> SyncFunction[typing.Any]:
        from ..function.sync import SyncFunction

        steps = [self.step(s) for s in definition.steps]
        match definition.composition:
            case "else":
                return SyncFunction.first_of(*steps)
            case "then":
                first, *rest = steps
                return SyncFunction.coerce(first).map(*rest)
            case "each":
                return functools.reduce(
                    lambda composed, step: composed.expand(step),
                    steps[1:],
                    SyncFunction.coerce(steps[0]),
                )
            case _:
                raise ValueError(f"unknown composition: {definition.composition!r}")


__all__ = ("Definition", "Thought")
