# Copyright (c) 2025.
# This file is part of dynamic-values, released under the MIT License.
"""
Variable orderings.

An :class:`Ordering` assigns each key a distinct integer index. The indices
address blocks of a :class:`~dynamic_values.linear.vector_values.VectorValues`
and, through it, slices of a flat tangent vector. Orderings are built by the
caller (or by ``DynamicValues.ordering_arbitrary``) and passed into each
operation; registries never own them.
"""

from __future__ import annotations

from typing import Dict, Iterable, Iterator, List, Tuple

from ..core.types import KeyLike, Symbol, as_key


class Ordering:
    """Injective map Symbol -> variable index."""

    def __init__(self, keys: Iterable[KeyLike] = (), first_var: int = 0):
        self._index: Dict[Symbol, int] = {}
        self._keys: Dict[int, Symbol] = {}
        self._next = first_var
        for key in keys:
            self.push_back(key)

    def push_back(self, key: KeyLike) -> int:
        """Assign the next free index to ``key`` and return it."""
        j = max(self._next, self.n_vars)
        self.insert(key, j)
        self._next = j + 1
        return j

    def insert(self, key: KeyLike, j: int) -> None:
        key = as_key(key)
        if key in self._index:
            raise ValueError(f"Key {key} is already in the ordering")
        if j < 0:
            raise ValueError(f"Variable index must be >= 0, got {j}")
        if j in self._keys:
            raise ValueError(f"Index {j} is already assigned to {self._keys[j]}")
        self._index[key] = j
        self._keys[j] = key

    def __getitem__(self, key: KeyLike) -> int:
        key = as_key(key)
        try:
            return self._index[key]
        except KeyError:
            raise KeyError(f"Key {key} is not in the ordering") from None

    def key(self, j: int) -> Symbol:
        try:
            return self._keys[j]
        except KeyError:
            raise KeyError(f"No key has index {j}") from None

    def __contains__(self, key: KeyLike) -> bool:
        return as_key(key) in self._index

    def __len__(self) -> int:
        return len(self._index)

    def size(self) -> int:
        return len(self._index)

    @property
    def n_vars(self) -> int:
        """One past the largest assigned index."""
        return max(self._keys) + 1 if self._keys else 0

    def __iter__(self) -> Iterator[Symbol]:
        return iter(self.keys())

    def keys(self) -> List[Symbol]:
        """Keys sorted by index."""
        return [self._keys[j] for j in sorted(self._keys)]

    def items(self) -> List[Tuple[Symbol, int]]:
        return [(self._keys[j], j) for j in sorted(self._keys)]

    def equals(self, other: "Ordering", tol: float = 1e-9) -> bool:
        return self._index == other._index

    def __eq__(self, other) -> bool:
        if not isinstance(other, Ordering):
            return NotImplemented
        return self.equals(other)

    __hash__ = None

    def __repr__(self) -> str:
        body = ", ".join(f"{k}: {j}" for k, j in self.items())
        return f"Ordering({{{body}}})"
