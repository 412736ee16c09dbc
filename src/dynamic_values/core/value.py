# Copyright (c) 2025.
# This file is part of dynamic-values, released under the MIT License.
"""
Type-erased manifold values.

A :class:`~dynamic_values.nonlinear.dynamic_values.DynamicValues` registry
stores objects of many different concrete types (points, rotations, poses,
user types) behind one interface. This module provides that interface and
the machinery that adapts concrete types to it:

Manifold
    Structural protocol a concrete type must satisfy to be stored:
    ``equals(other, tol)``, ``retract(delta)``, ``local_coordinates(other)``
    and ``dim()``. No inheritance is needed.

Value
    Abstract capability set used by the registry: clone, deallocate,
    equals, retract, local_coordinates, dim, plus a runtime type tag.

DerivedValue
    The generic adapter: wraps one concrete object and forwards each
    capability to it, checking concrete types where two values meet.

ValuePool
    A per-concrete-type free list of adapters. ``retract`` and
    ``local_coordinates`` over a whole registry clone every element, so
    adapters released by one registry are recycled for the next instead of
    being reallocated.

Notes
-----
The stored concrete objects are copied on clone: through their own
``clone()`` when they define one (the geometry types do, and share their
immutable arrays), otherwise with :func:`copy.deepcopy`.
"""

from __future__ import annotations

import abc
import copy
import logging
from dataclasses import dataclass
from typing import Any, Dict, Generic, List, Optional, Protocol, TypeVar, runtime_checkable

import jax.numpy as jnp

from ..config import get_config

logger = logging.getLogger(__name__)

T = TypeVar("T")


@runtime_checkable
class Manifold(Protocol):
    """Structural protocol for storable manifold elements."""

    def equals(self, other: Any, tol: float = 1e-9) -> bool: ...

    def retract(self, delta: jnp.ndarray) -> Any: ...

    def local_coordinates(self, other: Any) -> jnp.ndarray: ...

    def dim(self) -> int: ...


class Value(abc.ABC):
    """Abstract capability interface of a stored value."""

    __slots__ = ()

    @property
    @abc.abstractmethod
    def type_tag(self) -> type:
        """Concrete type of the wrapped object."""

    @abc.abstractmethod
    def get(self) -> Any:
        """The wrapped concrete object."""

    @abc.abstractmethod
    def clone(self) -> "Value": ...

    @abc.abstractmethod
    def deallocate(self) -> None: ...

    @abc.abstractmethod
    def equals(self, other: "Value", tol: float = 1e-9) -> bool: ...

    @abc.abstractmethod
    def retract(self, delta: jnp.ndarray) -> "Value": ...

    @abc.abstractmethod
    def local_coordinates(self, other: "Value") -> jnp.ndarray: ...

    @abc.abstractmethod
    def dim(self) -> int: ...


@dataclass
class PoolStats:
    created: int = 0
    reused: int = 0
    released: int = 0
    dropped: int = 0
    free: int = 0


class ValuePool:
    """Free list of :class:`DerivedValue` adapters for one concrete type."""

    def __init__(self, value_type: type, capacity: Optional[int] = None):
        self.value_type = value_type
        self.capacity = capacity
        self._free: List["DerivedValue"] = []
        self._stats = PoolStats()

    def _capacity(self) -> int:
        if self.capacity is not None:
            return self.capacity
        return get_config().pool_capacity

    def allocate(self, value: Any) -> "DerivedValue":
        """Hand out an adapter holding ``value`` (which is not copied)."""
        if self._free and get_config().pooling:
            box = self._free.pop()
            self._stats.reused += 1
        else:
            box = DerivedValue.__new__(DerivedValue)
            self._stats.created += 1
        box._value = value
        box._pool = self
        box._live = True
        return box

    def free(self, box: "DerivedValue") -> None:
        box._value = None
        box._live = False
        self._stats.released += 1
        if get_config().pooling and len(self._free) < self._capacity():
            self._free.append(box)
        else:
            self._stats.dropped += 1

    def clear(self) -> None:
        self._free.clear()

    def stats(self) -> PoolStats:
        s = copy.copy(self._stats)
        s.free = len(self._free)
        return s

    def __len__(self) -> int:
        return len(self._free)

    def __repr__(self) -> str:
        return f"ValuePool({self.value_type.__name__}, free={len(self._free)})"


_POOLS: Dict[type, ValuePool] = {}


def pool_for(value_type: type) -> ValuePool:
    pool = _POOLS.get(value_type)
    if pool is None:
        pool = ValuePool(value_type)
        _POOLS[value_type] = pool
        logger.debug("Created value pool for %s", value_type.__qualname__)
    return pool


def pool_stats() -> Dict[str, PoolStats]:
    return {t.__qualname__: p.stats() for t, p in _POOLS.items()}


def clear_pools() -> None:
    """Drop every pooled adapter and forget all pools."""
    for pool in _POOLS.values():
        pool.clear()
    _POOLS.clear()


def copy_value(value: Any) -> Any:
    clone = getattr(value, "clone", None)
    if callable(clone):
        return clone()
    return copy.deepcopy(value)


def _check_same_type(a: "DerivedValue", b: Value, operation: str) -> Any:
    if not isinstance(b, Value):
        raise TypeError(f"{operation}: expected a Value, got {type(b).__name__}")
    if b.type_tag is not a.type_tag:
        raise TypeError(
            f"{operation}: cannot combine {a.type_tag.__qualname__} "
            f"with {b.type_tag.__qualname__}"
        )
    return b.get()


class DerivedValue(Value, Generic[T]):
    """
    Generic adapter from a concrete manifold type to :class:`Value`.

    Instances come from a :class:`ValuePool`; use :meth:`create` rather than
    the constructor.
    """

    __slots__ = ("_value", "_pool", "_live")

    def __init__(self, value: T):
        self._value = value
        self._pool = pool_for(type(value))
        self._live = True

    @classmethod
    def create(cls, value: T) -> "DerivedValue[T]":
        """Pooled adapter holding a copy of ``value``."""
        if not isinstance(value, Manifold):
            raise TypeError(
                f"{type(value).__name__} is not a manifold type: it needs "
                "equals, retract, local_coordinates and dim"
            )
        return pool_for(type(value)).allocate(copy_value(value))

    @property
    def type_tag(self) -> type:
        return type(self._value)

    def get(self) -> T:
        return self._value

    def clone(self) -> "DerivedValue[T]":
        return self._pool.allocate(copy_value(self._value))

    def deallocate(self) -> None:
        if not self._live:
            raise RuntimeError("Value has already been deallocated")
        self._pool.free(self)

    def equals(self, other: Value, tol: float = 1e-9) -> bool:
        return bool(self._value.equals(_check_same_type(self, other, "equals"), tol))

    def retract(self, delta: jnp.ndarray) -> "DerivedValue[T]":
        delta = jnp.asarray(delta)
        if delta.shape != (self.dim(),):
            raise ValueError(
                f"retract: {self.type_tag.__qualname__} needs a delta of length "
                f"{self.dim()}, got shape {delta.shape}"
            )
        return self._pool.allocate(self._value.retract(delta))

    def local_coordinates(self, other: Value) -> jnp.ndarray:
        return jnp.asarray(
            self._value.local_coordinates(_check_same_type(self, other, "local_coordinates"))
        )

    def dim(self) -> int:
        return int(self._value.dim())

    def __repr__(self) -> str:
        if not self._live:
            return "DerivedValue(<deallocated>)"
        return f"DerivedValue({self._value!r})"
