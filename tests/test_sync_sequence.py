"""SyncSequence: lazy, re-entrant iteration.

Tests cover:
    - Building a chain evaluates nothing until iteration
    - Construction (of, coerce, along, naturals)
    - Combinators (restrict, map, flatten, concat, zip, expand, slice, cycle)
    - resolve() folds
    - Deep equality
"""

import pytest

from lazycombinators import SyncSequence, naturals


def _counting(items, pulled):
    """Sequence recording every item it hands out."""
    def generate():
        for item in items:
            pulled.append(item)
            yield item
    return SyncSequence(generate)


# ---------------------------------------------------------------------------
# Laziness
# ---------------------------------------------------------------------------


def test_building_a_chain_evaluates_nothing():
    pulled, seen = [], []
    chain = (
        _counting([1, 2, 3], pulled)
        .restrict(lambda x: seen.append(("restrict", x)) or True)
        .map(lambda x: seen.append(("map", x)) or x * 10)
        .slice(1)
        .concat([4])
        .flatten()
    )
    assert pulled == []
    assert seen == []

    assert chain.to_list() == [20, 30, 4]
    assert pulled == [1, 2, 3]


def test_every_iteration_is_an_independent_traversal():
    seq = naturals().map(lambda n: n * n).slice(4, start=False)
    assert seq.to_list() == [0, 1, 4, 9]
    assert seq.to_list() == [0, 1, 4, 9]


def test_resolve_without_op_pulls_only_the_first_item():
    pulled = []
    assert _counting([7, 8, 9], pulled).resolve() == 7
    assert pulled == [7]


# ---------------------------------------------------------------------------
# Construction
# ---------------------------------------------------------------------------


@pytest.mark.parametrize(
    "value, expected",
    [
        (None, []),
        ([1, 2], [1, 2]),
        ((x for x in "ab"), ["a", "b"]),
        ("abc", ["abc"]),
        (b"raw", [b"raw"]),
        (5, [5]),
    ],
)
def test_coerce(value, expected):
    assert SyncSequence.coerce(value).to_list() == expected


def test_coerce_keeps_an_existing_sequence():
    seq = SyncSequence.of(1)
    assert SyncSequence.coerce(seq) is seq


def test_along_stops_at_falsy_value():
    assert SyncSequence.along(5, lambda n: n - 1).to_list() == [5, 4, 3, 2, 1]


def test_naturals_are_fresh_each_call():
    first = naturals().slice(3, start=False).to_list()
    second = SyncSequence.naturals().slice(3, start=False).to_list()
    assert first == second == [0, 1, 2]


# ---------------------------------------------------------------------------
# Combinators
# ---------------------------------------------------------------------------


def test_restrict_defaults_to_dropping_none():
    assert SyncSequence.of(1, None, 2, None).restrict().to_list() == [1, 2]


def test_restrict_and_map_receive_the_index():
    seq = SyncSequence.of("a", "b", "c")
    assert seq.restrict(lambda _, i: i % 2 == 0).to_list() == ["a", "c"]
    assert seq.map(lambda x, i: f"{i}{x}").to_list() == ["0a", "1b", "2c"]


def test_flatten_one_level_keeps_text_whole():
    seq = SyncSequence.of([1, 2], 3, "ab", [[4]])
    assert seq.flatten().to_list() == [1, 2, 3, "ab", [4]]


def test_concat():
    assert SyncSequence.of(1).concat([2, 3], 4).to_list() == [1, 2, 3, 4]


def test_zip_stops_at_shortest():
    pairs = SyncSequence.of(1, 2, 3).zip(["a", "b"]).to_list()
    assert pairs == [(1, "a"), (2, "b")]


def test_zip_without_arguments_transposes_items():
    assert SyncSequence.of([1, 2], [3, 4]).zip().to_list() == [(1, 3), (2, 4)]


def test_zip_with_infinite_side():
    assert naturals().zip("xy", ["p", "q"]).to_list() == [(0, "xy", "p")]


def test_expand_is_a_nested_loop():
    pairs = SyncSequence.of(1, 2).expand(["x", "y"]).to_list()
    assert pairs == [(1, "x"), (1, "y"), (2, "x"), (2, "y")]


@pytest.mark.parametrize(
    "start, inclusive, expected",
    [
        (True, None, [3, 4, 5]),
        (True, False, [4, 5]),
        (False, None, [0, 1, 2]),
        (False, True, [0, 1, 2, 3]),
    ],
)
def test_slice_modes(start, inclusive, expected):
    seq = SyncSequence.of(0, 1, 2, 3, 4, 5)
    assert seq.slice(lambda n: n == 3, start, inclusive).to_list() == expected


def test_slice_stops_an_infinite_sequence():
    assert naturals().slice(lambda n: n == 4, start=False, inclusive=True).to_list() == [0, 1, 2, 3, 4]


def test_slice_by_index():
    assert SyncSequence.of("a", "b", "c").slice(1).to_list() == ["b", "c"]


def test_cycle_repeats_the_same_sequence_object():
    seq = SyncSequence.of(1, 2)
    repeats = seq.cycle().slice(3, start=False).to_list()
    assert len(repeats) == 3
    assert all(r is seq for r in repeats)
    assert seq.cycle().flatten().slice(5, start=False).to_list() == [1, 2, 1, 2, 1]


# ---------------------------------------------------------------------------
# resolve
# ---------------------------------------------------------------------------


def test_resolve_folds():
    seq = SyncSequence.of(1, 2, 3)
    assert seq.resolve() == 1
    assert seq.resolve(lambda acc, x: acc + x) == 6
    assert seq.resolve(lambda acc, x: acc + x, 10) == 16


def test_resolve_on_empty_sequence():
    empty = SyncSequence.of()
    assert empty.resolve() is None
    assert empty.resolve(lambda acc, x: acc + x) is None
    assert empty.resolve(lambda acc, x: acc + x, 0) == 0


# ---------------------------------------------------------------------------
# Equality
# ---------------------------------------------------------------------------


def test_nested_equality():
    assert SyncSequence.equal([[1, 2], [3]], [[1, 2], [3]])
    assert not SyncSequence.equal([[1, 2]], [[1, 3]])


def test_equality_is_reflexive_and_symmetric():
    a = SyncSequence.of(SyncSequence.of(1, 2), 3)
    b = [[1, 2], 3]
    assert a.equals(a)
    assert SyncSequence.equal(a, b)
    assert SyncSequence.equal(b, a)


def test_equality_detects_different_lengths():
    assert not SyncSequence.equal([1, 2], [1, 2, 3])
    assert not SyncSequence.equal([1, 2, 3], [1, 2])


def test_text_is_compared_atomically():
    assert SyncSequence.equal(["abc"], ["abc"])
    assert not SyncSequence.equal("abc", ["a", "b", "c"])


def test_mappings_compare_by_value():
    assert SyncSequence.equal([{"a": 1, "b": 2}], [{"b": 2, "a": 1}])
