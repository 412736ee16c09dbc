# Copyright (c) 2025.
# This file is part of dynamic-values, released under the MIT License.
"""
Stacked tangent vectors.

:class:`VectorValues` holds one numeric block per integer variable index
(as assigned by an :class:`~dynamic_values.nonlinear.ordering.Ordering`).
Blocks may have different lengths; together they represent a vector in the
product of all per-variable tangent spaces, e.g. the ``delta`` passed to
``DynamicValues.retract``.

``vector()`` concatenates the blocks in index order, which is the flat
layout used by solvers that work on a single state vector;
``from_vector`` splits such a vector back into blocks.
"""

from __future__ import annotations

from typing import Dict, Iterator, List, Optional, Sequence

import jax.numpy as jnp


class VectorValues:
    """Mapping from variable index to a 1-D ``jnp`` block."""

    def __init__(self, blocks: Optional[Dict[int, jnp.ndarray]] = None):
        self._blocks: Dict[int, jnp.ndarray] = {}
        if blocks:
            for j, v in blocks.items():
                self.insert(j, v)

    @classmethod
    def zero(cls, dims: Sequence[int]) -> "VectorValues":
        """One zero block of length dims[j] for every index j."""
        return cls({j: jnp.zeros(int(d)) for j, d in enumerate(dims)})

    @classmethod
    def from_vector(cls, x, dims: Sequence[int]) -> "VectorValues":
        """Split a flat vector into consecutive blocks of the given lengths."""
        x = jnp.ravel(jnp.asarray(x, dtype=float))
        total = int(sum(dims))
        if x.shape[0] != total:
            raise ValueError(f"Vector of length {x.shape[0]} does not match total dim {total}")
        out = cls()
        offset = 0
        for j, d in enumerate(dims):
            out._blocks[j] = x[offset:offset + int(d)]
            offset += int(d)
        return out

    @staticmethod
    def _as_block(v) -> jnp.ndarray:
        v = jnp.asarray(v, dtype=float)
        if v.ndim == 0:
            v = jnp.reshape(v, (1,))
        if v.ndim != 1:
            raise ValueError(f"VectorValues blocks must be 1-D, got shape {v.shape}")
        return v

    def insert(self, j: int, v) -> None:
        if j in self._blocks:
            raise ValueError(f"VectorValues already has a block at index {j}")
        if j < 0:
            raise ValueError(f"Variable index must be >= 0, got {j}")
        self._blocks[j] = self._as_block(v)

    def __setitem__(self, j: int, v) -> None:
        if j < 0:
            raise ValueError(f"Variable index must be >= 0, got {j}")
        self._blocks[j] = self._as_block(v)

    def __getitem__(self, j: int) -> jnp.ndarray:
        try:
            return self._blocks[j]
        except KeyError:
            raise KeyError(f"VectorValues has no block at index {j}") from None

    def exists(self, j: int) -> bool:
        return j in self._blocks

    __contains__ = exists

    def dim(self, j: int) -> int:
        return int(self[j].shape[0])

    def dims(self) -> List[int]:
        return [int(self._blocks[j].shape[0]) for j in sorted(self._blocks)]

    def total_dim(self) -> int:
        return sum(self.dims())

    def size(self) -> int:
        return len(self._blocks)

    def __len__(self) -> int:
        return len(self._blocks)

    def __iter__(self) -> Iterator[int]:
        return iter(sorted(self._blocks))

    def items(self):
        return [(j, self._blocks[j]) for j in sorted(self._blocks)]

    def vector(self) -> jnp.ndarray:
        if not self._blocks:
            return jnp.zeros((0,))
        return jnp.concatenate([self._blocks[j] for j in sorted(self._blocks)])

    def same_structure(self, other: "VectorValues") -> bool:
        return list(self) == list(other) and self.dims() == other.dims()

    def equals(self, other: "VectorValues", tol: float = 1e-9) -> bool:
        if not self.same_structure(other):
            return False
        return all(
            bool(jnp.all(jnp.abs(self._blocks[j] - other._blocks[j]) <= tol))
            for j in self._blocks
        )

    # Arithmetic, block-wise
    def _combine(self, other: "VectorValues", op) -> "VectorValues":
        if not self.same_structure(other):
            raise ValueError("VectorValues have different structure")
        out = VectorValues()
        out._blocks = {j: op(self._blocks[j], other._blocks[j]) for j in self._blocks}
        return out

    def __add__(self, other: "VectorValues") -> "VectorValues":
        return self._combine(other, lambda a, b: a + b)

    def __sub__(self, other: "VectorValues") -> "VectorValues":
        return self._combine(other, lambda a, b: a - b)

    def __neg__(self) -> "VectorValues":
        out = VectorValues()
        out._blocks = {j: -v for j, v in self._blocks.items()}
        return out

    def __mul__(self, s: float) -> "VectorValues":
        out = VectorValues()
        out._blocks = {j: s * v for j, v in self._blocks.items()}
        return out

    __rmul__ = __mul__

    def __repr__(self) -> str:
        body = ", ".join(f"{j}: {list(map(float, v))}" for j, v in self.items())
        return f"VectorValues({{{body}}})"
