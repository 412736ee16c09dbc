from __future__ import annotations

import copy
import gc

import jax.numpy as jnp
import pytest

from dynamic_values.core.errors import (
    DynamicValuesError,
    DynamicValuesIncorrectType,
    DynamicValuesKeyAlreadyExists,
    DynamicValuesKeyDoesNotExist,
)
from dynamic_values.core.types import Symbol, TypedSymbol
from dynamic_values.core.value import DerivedValue, clear_pools, pool_for
from dynamic_values.geometry.point2 import Point2
from dynamic_values.geometry.pose2 import Pose2
from dynamic_values.geometry.rot2 import Rot2
from dynamic_values.nonlinear.dynamic_values import DynamicValues

A = Symbol("a", 1)
B = Symbol("b", 1)
C = Symbol("c", 1)


@pytest.fixture
def r1() -> DynamicValues:
    values = DynamicValues()
    values.insert(A, Point2(1.0, 2.0))
    values.insert(B, Rot2(0.3))
    return values


def test_empty_registry():
    values = DynamicValues()
    assert values.empty()
    assert values.size() == 0
    assert values.keys() == []


def test_at_returns_typed_value(r1):
    assert r1.at(A, Point2).equals(Point2(1.0, 2.0))
    assert r1.at(B, Rot2).equals(Rot2(0.3))
    assert r1.at("a1", Point2).equals(Point2(1.0, 2.0))
    assert r1[B].equals(Rot2(0.3))


def test_at_with_typed_symbol(r1):
    assert r1.at(TypedSymbol(Point2, "a", 1)).equals(Point2(1.0, 2.0))
    with pytest.raises(DynamicValuesIncorrectType):
        r1.at(TypedSymbol(Pose2, "a", 1))


def test_at_missing_key(r1):
    with pytest.raises(DynamicValuesKeyDoesNotExist) as info:
        r1.at(C, Point2)
    assert info.value.key == C
    assert info.value.operation == "at"
    assert "c1" in str(info.value)
    assert isinstance(info.value, KeyError)


def test_at_wrong_type_never_returns_data(r1):
    with pytest.raises(DynamicValuesIncorrectType) as info:
        r1.at(A, Rot2)
    err = info.value
    assert err.key == A
    assert err.stored_type is Point2
    assert err.requested_type is Rot2
    assert "Point2" in str(err) and "Rot2" in str(err)
    assert isinstance(err, TypeError)
    assert isinstance(err, DynamicValuesError)


def test_exists_forms(r1):
    assert r1.exists(A) is True
    assert r1.exists(C) is False
    assert A in r1
    assert "c1" not in r1
    assert r1.exists(A, Point2).equals(Point2(1.0, 2.0))
    assert r1.exists(C, Point2) is None
    assert r1.exists(TypedSymbol(Rot2, "b", 1)).equals(Rot2(0.3))
    with pytest.raises(DynamicValuesIncorrectType):
        r1.exists(A, Rot2)


def test_keys_are_sorted_regardless_of_insertion_order():
    values = DynamicValues()
    for key in ["x3", "l1", "x1", "a5", "l10", "l2"]:
        values.insert(key, Point2())
    keys = values.keys()
    assert keys == sorted(keys)
    assert all(k1 < k2 for k1, k2 in zip(keys, keys[1:]))
    assert values.size() == len(keys) == 6
    assert list(values) == keys
    assert list(reversed(values)) == keys[::-1]
    assert [k for k, _ in values.items()] == keys


def test_insert_existing_key_fails_and_leaves_registry_unchanged(r1):
    with pytest.raises(DynamicValuesKeyAlreadyExists) as info:
        r1.insert(A, Point2(9.0, 9.0))
    assert info.value.key == A
    assert "already exists" in str(info.value)
    assert r1.size() == 2
    assert r1.at(A, Point2).equals(Point2(1.0, 2.0))


def test_insert_stores_a_clone():
    p = Point2(1.0, 2.0)
    values = DynamicValues()
    values.insert(A, p)
    assert values.at(A) is not p


def test_insert_accepts_value_adapter():
    box = DerivedValue.create(Rot2(0.2))
    values = DynamicValues()
    values.insert(A, box)
    assert values.at(A, Rot2).equals(Rot2(0.2))
    box.deallocate()
    assert values.at(A, Rot2).equals(Rot2(0.2))


def test_insert_rejects_non_manifold():
    values = DynamicValues()
    with pytest.raises(TypeError):
        values.insert(A, [1.0, 2.0])
    assert values.empty()


def test_bulk_insert(r1):
    other = DynamicValues()
    other.insert(C, Pose2(1.0, 2.0, 0.0))
    r1.insert(other)
    assert r1.keys() == [A, B, C]
    assert r1.at(C, Pose2).equals(Pose2(1.0, 2.0, 0.0))
    assert r1.at(C) is not other.at(C)


def test_bulk_insert_is_all_or_nothing(r1):
    other = DynamicValues()
    other.insert(C, Point2(5.0, 5.0))
    other.insert(B, Rot2(1.0))
    with pytest.raises(DynamicValuesKeyAlreadyExists) as info:
        r1.insert(other)
    assert info.value.key == B
    assert r1.keys() == [A, B]
    assert r1.at(B, Rot2).equals(Rot2(0.3))


def test_update_single(r1):
    r1.update(A, Point2(5.0, 6.0))
    assert r1.at(A, Point2).equals(Point2(5.0, 6.0))


def test_update_may_change_type(r1):
    r1.update(A, Rot2(0.1))
    assert r1.at(A, Rot2).equals(Rot2(0.1))
    with pytest.raises(DynamicValuesIncorrectType):
        r1.at(A, Point2)


def test_update_missing_key(r1):
    with pytest.raises(DynamicValuesKeyDoesNotExist) as info:
        r1.update(C, Point2())
    assert info.value.operation == "update"
    assert C not in r1


def test_update_from_values_only_refreshes_existing(r1):
    other = DynamicValues()
    other.insert(A, Point2(7.0, 8.0))
    other.insert(C, Point2(0.0, 0.0))
    r1.update(other)
    assert r1.at(A, Point2).equals(Point2(7.0, 8.0))
    assert C not in r1
    assert r1.size() == 2


def test_erase(r1):
    r1.erase(A)
    assert r1.size() == 1
    assert r1.keys() == [B]
    with pytest.raises(DynamicValuesKeyDoesNotExist) as info:
        r1.erase(A)
    assert info.value.operation == "erase"
    assert r1.size() == 1


def test_erase_returns_value_to_pool():
    clear_pools()
    values = DynamicValues()
    values.insert(A, Point2(1.0, 1.0))
    pool = pool_for(Point2)
    released = pool.stats().released
    values.erase(A)
    assert pool.stats().released == released + 1
    values.insert(A, Point2(2.0, 2.0))
    assert pool.stats().reused == 1


def test_collected_registry_releases_every_value():
    clear_pools()
    values = DynamicValues()
    values.insert(A, Point2(1.0, 1.0))
    values.insert(B, Point2(2.0, 2.0))
    pool = pool_for(Point2)
    del values
    gc.collect()
    stats = pool.stats()
    assert stats.created == 2
    assert stats.released == 2
    assert stats.free == 2


def test_collecting_a_cleared_registry_releases_nothing_twice():
    clear_pools()
    values = DynamicValues()
    values.insert(A, Point2(1.0, 1.0))
    values.insert(B, Point2(2.0, 2.0))
    pool = pool_for(Point2)
    values.clear()
    assert pool.stats().released == 2
    del values
    gc.collect()
    stats = pool.stats()
    assert stats.released == 2
    assert stats.free == 2


def test_clear(r1):
    r1.clear()
    assert r1.empty()
    assert r1.keys() == []
    r1.insert(A, Point2())
    assert r1.size() == 1


def test_copy_is_isolated(r1):
    for r2 in (r1.copy(), DynamicValues(r1), copy.copy(r1), copy.deepcopy(r1)):
        assert r2.equals(r1)
        r2.update(A, Point2(-1.0, -1.0))
        assert r1.at(A, Point2).equals(Point2(1.0, 2.0))
        assert r2.at(A, Point2).equals(Point2(-1.0, -1.0))


def test_assign_replaces_everything(r1):
    other = DynamicValues()
    other.insert(C, Point2(3.0, 3.0))
    other.assign(r1)
    assert other.equals(r1)
    assert C not in other


def test_equals(r1):
    r2 = r1.copy()
    assert r1.equals(r2)
    r2.update(B, Rot2(0.3 + 1e-6))
    assert not r1.equals(r2)
    assert r1.equals(r2, tol=1e-5)

    r3 = r1.copy()
    r3.update(B, Point2())
    assert not r1.equals(r3)

    r4 = r1.copy()
    r4.erase(B)
    assert not r1.equals(r4)


def test_type_of(r1):
    assert r1.type_of(A) is Point2
    assert r1.type_of("b1") is Rot2


def test_str_lists_every_key(r1):
    text = str(r1)
    assert "a1" in text and "b1" in text
    assert "Point2" in repr(r1)


def test_total_dim(r1):
    assert r1.dim() == 3
    r1.insert(C, Pose2())
    assert r1.dim() == 6
