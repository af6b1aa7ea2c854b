"""
Search drivers
==============

Drive a PathChain step function (chain -> children) and yield the leaves,
the chains for which the step produces no children.

Both drivers are lazy: a child is generated only when the traversal
reaches it, so a step function that restricts its children prunes the
whole subtree below every rejected prefix.

Example:
    step = SyncSequence.product([0, 1], [0, 1], [0, 1])
    depth_first(step).map(lambda c: c.to_list()).to_list()
    # [[0, 0, 0], [0, 0, 1], ..., [1, 1, 1]]
"""

from __future__ import annotations

import typing
from collections import deque
from collections.abc import Callable, Iterator

from .._helpers import apply
from ..sequence.sync import SyncSequence
from .path import PathChain

_END = object()

type StepFunction = Callable[..., typing.Any]


def _start(root: typing.Any) -> PathChain[typing.Any]:
    if root is None:
        return PathChain()
    if isinstance(root, PathChain):
        return root
    return PathChain.of(root)


def _children(step: StepFunction, chain: PathChain[typing.Any]) -> SyncSequence[PathChain[typing.Any]]:
    return SyncSequence.coerce(apply(step, chain)).restrict()


def depth_first(step: StepFunction, root: typing.Any = None) -> SyncSequence[PathChain[typing.Any]]:
    """Leaves in depth-first order, one branch at a time."""

    def generate() -> Iterator[PathChain[typing.Any]]:
        first = _start(root)
        # frame: [chain, children iterator, produced any child]
        frames: list[list[typing.Any]] = [[first, iter(_children(step, first)), False]]
        while frames:
            frame = frames[-1]
            child = next(frame[1], _END)
            if child is _END:
                frames.pop()
                if not frame[2]:
                    yield frame[0]
                continue
            frame[2] = True
            frames.append([child, iter(_children(step, child)), False])

    return SyncSequence(generate)


def breadth_first(step: StepFunction, root: typing.Any = None) -> SyncSequence[PathChain[typing.Any]]:
    """Leaves level by level; holds a whole frontier in memory."""

    def generate() -> Iterator[PathChain[typing.Any]]:
        frontier: deque[PathChain[typing.Any]] = deque([_start(root)])
        while frontier:
            chain = frontier.popleft()
            leaf = True
            for child in _children(step, chain):
                leaf = False
                frontier.append(child)
            if leaf:
                yield chain

    return SyncSequence(generate)


__all__ = ("breadth_first", "depth_first")
