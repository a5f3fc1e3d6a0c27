"""Tests for the visibility engine (declared vs. shown sequences)."""

import random

import pytest

from formstate.core.visibility import ShownSequence


class Item:
    """Identity-compared item."""

    def __init__(self, name):
        self.name = name

    def __repr__(self):
        return self.name


def _sequence(names, shown=None):
    items = [Item(name) for name in names]
    sequence = ShownSequence("test")
    sequence.declare(0, items)
    sequence.shown = [item for item in items if shown is None or item.name in shown]
    return sequence, {item.name: item for item in items}


def _names(items):
    return [item.name for item in items]


def _is_subsequence(shown, declared):
    positions = [next(i for i, d in enumerate(declared) if d is item) for item in shown]
    return positions == sorted(positions)


def test_hide_returns_former_index():
    sequence, items = _sequence("abc")
    assert sequence.hide(items["b"]) == 1
    assert _names(sequence.shown) == ["a", "c"]


def test_hide_absent_is_noop():
    sequence, items = _sequence("abc", shown="ac")
    assert sequence.hide(items["b"]) is None
    assert _names(sequence.shown) == ["a", "c"]


def test_show_after_nearest_shown_predecessor():
    sequence, items = _sequence("abcde", shown="ae")
    # b and c hidden: d goes right after a
    assert sequence.show(items["d"]) == 1
    assert _names(sequence.shown) == ["a", "d", "e"]


def test_show_without_shown_predecessor_goes_first():
    sequence, items = _sequence("abc", shown="c")
    assert sequence.show(items["b"]) == 0
    assert _names(sequence.shown) == ["b", "c"]


def test_show_already_shown_is_noop():
    sequence, items = _sequence("abc")
    assert sequence.show(items["a"]) is None
    assert _names(sequence.shown) == ["a", "b", "c"]


def test_show_undeclared_is_noop():
    sequence, _ = _sequence("abc")
    assert sequence.show(Item("z")) is None
    assert len(sequence) == 3


def test_insertion_index_requires_declared_item():
    sequence, _ = _sequence("ab")
    with pytest.raises(ValueError, match="not declared"):
        sequence.insertion_index(Item("z"))


def test_identity_membership():
    first, second = Item("same"), Item("same")
    sequence = ShownSequence("test")
    sequence.declare(0, [first, second])
    sequence.shown = [second]
    assert sequence.shown_index(first) is None
    assert sequence.show(first) == 0


def test_anchor_for():
    sequence, items = _sequence("abcd", shown="bd")
    assert sequence.anchor_for(0) == 1
    assert sequence.anchor_for(1) == 3
    assert sequence.anchor_for(2) == 4


def test_rebuild():
    sequence, _ = _sequence("abcd", shown="")
    sequence.rebuild(lambda item: item.name in "bd")
    assert _names(sequence.shown) == ["b", "d"]


def test_random_toggles_preserve_declared_order():
    rng = random.Random(1234)
    sequence, items = _sequence("abcdefghij", shown="")
    for _ in range(500):
        item = items[rng.choice("abcdefghij")]
        before = list(sequence.shown)
        if rng.random() < 0.5:
            sequence.show(item)
        else:
            sequence.hide(item)

        assert _is_subsequence(sequence.shown, sequence.declared)
        # Siblings that stayed shown keep their relative order
        survivors = [entry for entry in sequence.shown if entry is not item]
        assert survivors == [entry for entry in before if entry is not item]
