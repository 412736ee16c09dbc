from __future__ import annotations

import pytest

from dynamic_values.core.types import Symbol
from dynamic_values.nonlinear.ordering import Ordering


def test_push_back_assigns_consecutive_indices():
    ordering = Ordering()
    assert ordering.push_back("x1") == 0
    assert ordering.push_back("l1") == 1
    assert ordering["x1"] == 0
    assert ordering[Symbol("l", 1)] == 1
    assert ordering.key(1) == Symbol("l", 1)
    assert len(ordering) == 2
    assert ordering.n_vars == 2


def test_first_var_offsets_indices():
    ordering = Ordering(["a1", "b1"], first_var=3)
    assert ordering["a1"] == 3
    assert ordering["b1"] == 4
    assert ordering.n_vars == 5


def test_iteration_is_in_index_order():
    ordering = Ordering()
    ordering.insert("z9", 0)
    ordering.insert("a1", 1)
    assert list(ordering) == [Symbol("z", 9), Symbol("a", 1)]
    assert ordering.items() == [(Symbol("z", 9), 0), (Symbol("a", 1), 1)]


def test_duplicates_rejected():
    ordering = Ordering(["x1"])
    with pytest.raises(ValueError):
        ordering.push_back("x1")
    with pytest.raises(ValueError):
        ordering.insert("x2", 0)


def test_missing_key_raises_key_error():
    ordering = Ordering(["x1"])
    assert "x2" not in ordering
    with pytest.raises(KeyError):
        ordering["x2"]
    with pytest.raises(KeyError):
        ordering.key(5)


def test_equals():
    assert Ordering(["x1", "x2"]).equals(Ordering(["x1", "x2"]))
    assert Ordering(["x1", "x2"]) != Ordering(["x2", "x1"])
