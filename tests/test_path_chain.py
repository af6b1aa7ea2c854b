"""PathChain: immutable persistent chain of steps.

Tests cover:
    - extend() never mutates the receiver
    - Parent sharing between siblings
    - to_list() windows and mapping
    - extend_across() is lazy
    - ancestors() and the length invariant
"""

import pytest

from lazycombinators import PathChain, SyncSequence


def test_empty_chain():
    empty = PathChain()
    assert empty.is_empty()
    assert len(empty) == 0
    assert empty.parent is None
    assert empty.to_list() == []


def test_extending_the_empty_chain_gives_a_root():
    root = PathChain().extend("a")
    assert root.is_root()
    assert root.parent is None
    assert root.last == "a"
    assert root.length == 1


def test_extend_does_not_mutate():
    chain = PathChain.of(1, 2)
    longer = chain.extend(3)

    assert chain.length == 2
    assert chain.to_list() == [1, 2]
    assert longer.length == 3
    assert longer.to_list() == [1, 2, 3]
    assert longer.parent is chain


def test_siblings_share_their_parent():
    base = PathChain.of("a", "b")
    left, right = base.extend("c"), base.extend("d")
    assert left.parent is right.parent is base


@pytest.mark.parametrize("name", ["parent", "last", "length"])
def test_fields_cannot_be_assigned(name):
    chain = PathChain.of(1)
    with pytest.raises(AttributeError):
        setattr(chain, name, None)


def test_fields_cannot_be_deleted():
    with pytest.raises(AttributeError):
        del PathChain.of(1).last


def test_to_list_windows_and_maps():
    chain = PathChain.of(1, 2, 3, 4)
    assert chain.to_list(2) == [3, 4]
    assert chain.to_list(0) == []
    assert chain.to_list(10) == [1, 2, 3, 4]
    assert chain.to_list(fn=lambda step, i: step * 10 + i) == [10, 21, 32, 43]


def test_extend_all():
    assert PathChain.of(1).extend_all([2, 3]).to_list() == [1, 2, 3]


def test_extend_across_builds_children_on_demand():
    pulled = []

    def items():
        for item in ("x", "y"):
            pulled.append(item)
            yield item

    base = PathChain.of(0)
    children = base.extend_across(SyncSequence(items))
    assert pulled == []

    built = children.to_list()
    assert [c.to_list() for c in built] == [[0, "x"], [0, "y"]]
    assert all(c.parent is base for c in built)


def test_ancestors_walk_back_to_the_root():
    chain = PathChain.of(1, 2, 3)
    assert chain.ancestors().map(lambda c: c.last).to_list() == [3, 2, 1]
    for node in chain.ancestors():
        if node.parent is not None:
            assert node.length == node.parent.length + 1
        else:
            assert node.length == 1


def test_repr_shows_steps():
    assert repr(PathChain.of(1, 2)) == "PathChain([1, 2])"
