from __future__ import annotations

import pytest

from dynamic_values.core.types import Symbol, TypedSymbol, as_key, symbol
from dynamic_values.geometry.pose2 import Pose2


def test_symbol_order_matches_packed_key():
    keys = [Symbol("x", 2), Symbol("l", 10), Symbol("x", 1), Symbol("a", 7)]
    assert sorted(keys) == sorted(keys, key=lambda k: k.key())
    assert sorted(keys) == [Symbol("a", 7), Symbol("l", 10), Symbol("x", 1), Symbol("x", 2)]


def test_symbol_pack_unpack():
    s = Symbol("x", 12345)
    assert Symbol.from_key(s.key()) == s
    assert s.key() == (ord("x") << 56) | 12345


def test_symbol_parse_and_str():
    s = Symbol.parse("l42")
    assert s == Symbol("l", 42)
    assert str(s) == "l42"
    with pytest.raises(ValueError):
        Symbol.parse("42")


def test_symbol_validation():
    with pytest.raises(ValueError):
        Symbol("xy", 1)
    with pytest.raises(ValueError):
        Symbol("x", -1)
    with pytest.raises(TypeError):
        Symbol("x", 1.5)


def test_as_key_normalizes_all_forms():
    s = symbol("x", 3)
    assert as_key(s) is s
    assert as_key("x3") == s
    assert as_key(s.key()) == s
    assert as_key(TypedSymbol(Pose2, "x", 3)) == s
    with pytest.raises(TypeError):
        as_key(3.0)


def test_symbols_are_hashable():
    d = {Symbol("x", 1): "a"}
    assert d[as_key("x1")] == "a"
