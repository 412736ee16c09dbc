# Copyright (c) 2025.
# This file is part of dynamic-values, released under the MIT License.
"""2D point, a vector-space manifold of dimension 2."""

from __future__ import annotations

import jax.numpy as jnp

from ..core import math3d  # noqa: F401  (applies the x64 setting)


class Point2:
    """Immutable 2D point; retract and local_coordinates are plain +/-."""

    __slots__ = ("_v",)

    def __init__(self, x: float = 0.0, y: float = 0.0):
        self._v = jnp.array([x, y], dtype=float)

    @classmethod
    def from_vector(cls, v) -> "Point2":
        v = jnp.asarray(v, dtype=float)
        p = cls.__new__(cls)
        p._v = jnp.reshape(v, (2,))
        return p

    @property
    def x(self) -> float:
        return float(self._v[0])

    @property
    def y(self) -> float:
        return float(self._v[1])

    def vector(self) -> jnp.ndarray:
        return self._v

    def norm(self) -> float:
        return float(jnp.linalg.norm(self._v))

    def dist(self, p: "Point2") -> float:
        return float(jnp.linalg.norm(p._v - self._v))

    # Group
    def compose(self, p: "Point2") -> "Point2":
        return Point2.from_vector(self._v + p._v)

    def between(self, p: "Point2") -> "Point2":
        return Point2.from_vector(p._v - self._v)

    def inverse(self) -> "Point2":
        return Point2.from_vector(-self._v)

    def __add__(self, p: "Point2") -> "Point2":
        return self.compose(p)

    def __sub__(self, p: "Point2") -> "Point2":
        return Point2.from_vector(self._v - p._v)

    def __neg__(self) -> "Point2":
        return self.inverse()

    def __mul__(self, s: float) -> "Point2":
        return Point2.from_vector(self._v * s)

    __rmul__ = __mul__

    # Lie group
    @staticmethod
    def expmap(v) -> "Point2":
        return Point2.from_vector(v)

    @staticmethod
    def logmap(p: "Point2") -> jnp.ndarray:
        return p._v

    # Manifold
    def dim(self) -> int:
        return 2

    def retract(self, v) -> "Point2":
        return Point2.from_vector(self._v + jnp.asarray(v))

    def local_coordinates(self, p: "Point2") -> jnp.ndarray:
        return p._v - self._v

    # Testable
    def equals(self, p: "Point2", tol: float = 1e-9) -> bool:
        return bool(jnp.all(jnp.abs(self._v - p._v) <= tol))

    def clone(self) -> "Point2":
        return Point2.from_vector(self._v)

    def __eq__(self, other) -> bool:
        if not isinstance(other, Point2):
            return NotImplemented
        return self.equals(other)

    __hash__ = None

    def __repr__(self) -> str:
        return f"Point2({self.x:.6g}, {self.y:.6g})"
