# Copyright (c) 2025.
# This file is part of dynamic-values, released under the MIT License.
"""
A non-templated container holding manifold elements of any type.

A values structure maps keys to values and specifies the value of a set of
variables in a factor graph. :class:`DynamicValues` can hold variables that
live on manifolds (poses, rotations, points, user types), not just vectors,
and as a whole is itself a manifold element: it supports ``dims``,
``retract`` and ``local_coordinates`` given an
:class:`~dynamic_values.nonlinear.ordering.Ordering` that lays the
per-variable tangent spaces out in a
:class:`~dynamic_values.linear.vector_values.VectorValues`.

Ownership
---------
Every stored value is wrapped in a :class:`~dynamic_values.core.value.Value`
adapter owned by exactly one registry:

    • ``insert`` / ``update`` store a clone of the argument;
    • copying a registry clones every value;
    • ``erase``, ``update``, ``clear`` and garbage collection of the registry
      deallocate the adapters, returning them to their per-type pool.

Iteration is always in key order (see :class:`~dynamic_values.core.types.Symbol`).

Typical use
-----------
    values = DynamicValues()
    values.insert("x1", Pose2(0.0, 0.0, 0.0))
    values.insert("l1", Point2(1.0, 2.0))

    ordering = values.ordering_arbitrary()
    delta = values.zero_vectors(ordering)
    delta[ordering["l1"]] = jnp.array([0.1, 0.0])
    moved = values.retract(delta, ordering)
    assert moved.at("l1", Point2).equals(Point2(1.1, 2.0))
"""

from __future__ import annotations

import bisect
import logging
import weakref
from typing import Any, Dict, Iterator, List, Optional, Tuple, Type, TypeVar, Union

from ..core.errors import (
    DynamicValuesIncorrectType,
    DynamicValuesKeyAlreadyExists,
    DynamicValuesKeyDoesNotExist,
    DynamicValuesMismatched,
)
from ..core.types import KeyLike, Symbol, TypedSymbol, as_key
from ..core.value import DerivedValue, Value
from ..linear.vector_values import VectorValues
from .ordering import Ordering

logger = logging.getLogger(__name__)

V = TypeVar("V")


def _release_all(store: Dict[Symbol, Value]) -> None:
    for box in store.values():
        box.deallocate()
    store.clear()


def _make_box(value: Any) -> Value:
    if isinstance(value, Value):
        return value.clone()
    return DerivedValue.create(value)


def _resolve(key: KeyLike, value_type: Optional[type]) -> Tuple[Symbol, Optional[type]]:
    if isinstance(key, TypedSymbol) and value_type is None:
        value_type = key.value_type
    return as_key(key), value_type


class DynamicValues:
    """Ordered map from keys to manifold values of heterogeneous types."""

    def __init__(self, other: Optional["DynamicValues"] = None):
        self._values: Dict[Symbol, Value] = {}
        self._keys: List[Symbol] = []
        self._finalizer = weakref.finalize(self, _release_all, self._values)
        self._finalizer.atexit = False
        if other is not None:
            for key in other._keys:
                self._store(key, other._values[key].clone())

    # --- internal storage ---

    def _store(self, key: Symbol, box: Value) -> None:
        if key not in self._values:
            bisect.insort(self._keys, key)
        self._values[key] = box

    def _box(self, key: Symbol, operation: str) -> Value:
        try:
            return self._values[key]
        except KeyError:
            raise DynamicValuesKeyDoesNotExist(operation, key) from None

    def _empty_like(self) -> "DynamicValues":
        return type(self)()

    # --- Testable ---

    def equals(self, other: "DynamicValues", tol: float = 1e-9) -> bool:
        """Test whether the sets of keys and values are identical."""
        if self._keys != other._keys:
            return False
        for key in self._keys:
            a, b = self._values[key], other._values[key]
            if a.type_tag is not b.type_tag:
                return False
            if not a.equals(b, tol):
                return False
        return True

    def __str__(self) -> str:
        lines = [f"Values with {len(self)} values:"]
        for key in self._keys:
            lines.append(f"  {key}: {self._values[key].get()!r}")
        return "\n".join(lines)

    def __repr__(self) -> str:
        body = ", ".join(f"{k}: {self._values[k].get()!r}" for k in self._keys)
        return f"{type(self).__name__}({{{body}}})"

    # --- access ---

    def at(self, key: KeyLike, value_type: Optional[Type[V]] = None) -> V:
        """
        Retrieve the value stored under ``key``.

        Args:
            key: any key form; a TypedSymbol supplies ``value_type`` itself.
            value_type: the exact type expected. When omitted (and the key is
                untyped) the stored object is returned unchecked.

        Raises:
            DynamicValuesKeyDoesNotExist: the key is absent.
            DynamicValuesIncorrectType: the stored type is not ``value_type``.
        """
        key, value_type = _resolve(key, value_type)
        box = self._box(key, "at")
        if value_type is not None and box.type_tag is not value_type:
            raise DynamicValuesIncorrectType(key, box.type_tag, value_type)
        return box.get()

    def __getitem__(self, key: KeyLike) -> Any:
        return self.at(key)

    def exists(self, key: KeyLike, value_type: Optional[Type[V]] = None) -> Union[bool, Optional[V]]:
        """
        Without a type: whether ``key`` is present.

        With ``value_type`` (or a TypedSymbol key): the stored value, or
        ``None`` if the key is absent. A present key of another type raises
        DynamicValuesIncorrectType.
        """
        key, value_type = _resolve(key, value_type)
        if value_type is None:
            return key in self._values
        box = self._values.get(key)
        if box is None:
            return None
        if box.type_tag is not value_type:
            raise DynamicValuesIncorrectType(key, box.type_tag, value_type)
        return box.get()

    def __contains__(self, key: KeyLike) -> bool:
        return as_key(key) in self._values

    def size(self) -> int:
        return len(self._values)

    def __len__(self) -> int:
        return len(self._values)

    def empty(self) -> bool:
        return not self._values

    def keys(self) -> List[Symbol]:
        """Keys in sorted order."""
        return list(self._keys)

    def __iter__(self) -> Iterator[Symbol]:
        return iter(list(self._keys))

    def __reversed__(self) -> Iterator[Symbol]:
        return reversed(list(self._keys))

    def items(self) -> List[Tuple[Symbol, Any]]:
        return [(k, self._values[k].get()) for k in self._keys]

    def type_of(self, key: KeyLike) -> type:
        key = as_key(key)
        return self._box(key, "at").type_tag

    # --- mutation ---

    def insert(self, key: Union[KeyLike, "DynamicValues"], value: Any = None) -> None:
        """
        ``insert(key, value)``: add one variable, storing a clone of ``value``.
        ``insert(values)``: add every variable of another registry.

        The bulk form is all-or-nothing: if any key is already present,
        nothing is inserted.

        Raises:
            DynamicValuesKeyAlreadyExists: a key is already present.
        """
        if isinstance(key, DynamicValues):
            if value is not None:
                raise TypeError("insert(values) takes no second argument")
            self._insert_all(key)
            return
        key = as_key(key)
        if key in self._values:
            raise DynamicValuesKeyAlreadyExists(key)
        self._store(key, _make_box(value))

    def _insert_all(self, other: "DynamicValues") -> None:
        for key in other._keys:
            if key in self._values:
                raise DynamicValuesKeyAlreadyExists(key)
        for key in other._keys:
            self._store(key, other._values[key].clone())
        logger.debug("Inserted %d values (now %d)", len(other), len(self))

    def update(self, key: Union[KeyLike, "DynamicValues"], value: Any = None) -> None:
        """
        ``update(key, value)``: replace the value of an existing variable.
        ``update(values)``: replace every variable also present in ``values``;
        keys only present in ``values`` are ignored.

        Raises:
            DynamicValuesKeyDoesNotExist: single-key form with an absent key.
        """
        if isinstance(key, DynamicValues):
            if value is not None:
                raise TypeError("update(values) takes no second argument")
            self._update_all(key)
            return
        key = as_key(key)
        old = self._box(key, "update")
        self._values[key] = _make_box(value)
        old.deallocate()

    def _update_all(self, other: "DynamicValues") -> None:
        n = 0
        for key in other._keys:
            old = self._values.get(key)
            if old is None:
                continue
            self._values[key] = other._values[key].clone()
            old.deallocate()
            n += 1
        logger.debug("Updated %d of %d values", n, len(self))

    def erase(self, key: KeyLike) -> None:
        """
        Remove a variable.

        Raises:
            DynamicValuesKeyDoesNotExist: the key is absent.
        """
        key = as_key(key)
        box = self._box(key, "erase")
        del self._values[key]
        del self._keys[bisect.bisect_left(self._keys, key)]
        box.deallocate()

    def clear(self) -> None:
        """Remove all variables."""
        _release_all(self._values)
        self._keys.clear()

    def assign(self, other: "DynamicValues") -> "DynamicValues":
        """Replace all keys and values with clones of ``other``'s."""
        if other is self:
            return self
        self.clear()
        for key in other._keys:
            self._store(key, other._values[key].clone())
        return self

    # --- copying ---

    def copy(self) -> "DynamicValues":
        out = self._empty_like()
        out.assign(self)
        return out

    def __copy__(self) -> "DynamicValues":
        return self.copy()

    def __deepcopy__(self, memo) -> "DynamicValues":
        return self.copy()

    # --- manifold operations ---

    def _check_ordering(self, ordering: Ordering) -> None:
        if len(ordering) != len(self):
            raise ValueError(
                f"Ordering has {len(ordering)} keys but the values have {len(self)}"
            )
        for key in self._keys:
            if key not in ordering:
                raise ValueError(f"Ordering does not contain key {key}")

    def dims(self, ordering: Ordering) -> List[int]:
        """
        Variable dimensions laid out by ``ordering``: element ``ordering[key]``
        is the dimension of that key's value. Indices not used by this
        registry (below a non-zero ``first_var``) hold 0.
        """
        self._check_ordering(ordering)
        result = [0] * ordering.n_vars
        for key in self._keys:
            result[ordering[key]] = self._values[key].dim()
        return result

    def dim(self) -> int:
        """Total tangent-space dimension."""
        return sum(box.dim() for box in self._values.values())

    def zero_vectors(self, ordering: Ordering) -> VectorValues:
        """A zero VectorValues with one block per variable."""
        self._check_ordering(ordering)
        out = VectorValues()
        for key in self._keys:
            out.insert(ordering[key], [0.0] * self._values[key].dim())
        return out

    def retract(self, delta: VectorValues, ordering: Ordering) -> "DynamicValues":
        """
        Move every value along its manifold by its block of ``delta`` and
        return the result as a new registry; ``self`` is unchanged.
        """
        self._check_ordering(ordering)
        out = self._empty_like()
        for key in self._keys:
            box = self._values[key]
            out._store(key, box.retract(delta[ordering[key]]))
        logger.debug("Retracted %d values", len(out))
        return out

    def local_coordinates(
        self,
        other: "DynamicValues",
        ordering: Ordering,
        delta: Optional[VectorValues] = None,
    ) -> Optional[VectorValues]:
        """
        Tangent vector from ``self`` to ``other``: block ``ordering[key]`` is
        ``self[key].local_coordinates(other[key])``.

        When ``delta`` is given the blocks are written into it and ``None`` is
        returned; otherwise a new VectorValues is returned.

        Raises:
            DynamicValuesMismatched: the key sets differ, or a key holds
                values of different types in the two registries.
        """
        if self._keys != other._keys:
            missing = sorted(set(self._keys) ^ set(other._keys))
            raise DynamicValuesMismatched(
                "keys differ: " + ", ".join(str(k) for k in missing)
            )
        self._check_ordering(ordering)
        for key in self._keys:
            a, b = self._values[key], other._values[key]
            if a.type_tag is not b.type_tag:
                raise DynamicValuesMismatched(
                    f"key {key} holds {a.type_tag.__qualname__} and "
                    f"{b.type_tag.__qualname__}"
                )
        result = delta if delta is not None else VectorValues()
        for key in self._keys:
            result[ordering[key]] = self._values[key].local_coordinates(other._values[key])
        logger.debug("Computed local coordinates for %d values", len(self))
        return None if delta is not None else result

    def ordering_arbitrary(self, first_var: int = 0) -> Ordering:
        """
        A default ordering, simply in key sort order, with indices starting
        at ``first_var``.
        """
        return Ordering(self._keys, first_var=first_var)
