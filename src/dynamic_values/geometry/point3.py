# Copyright (c) 2025.
# This file is part of dynamic-values, released under the MIT License.
"""3D point, a vector-space manifold of dimension 3."""

from __future__ import annotations

import jax.numpy as jnp

from ..core import math3d  # noqa: F401  (applies the x64 setting)


class Point3:
    __slots__ = ("_v",)

    def __init__(self, x: float = 0.0, y: float = 0.0, z: float = 0.0):
        self._v = jnp.array([x, y, z], dtype=float)

    @classmethod
    def from_vector(cls, v) -> "Point3":
        p = cls.__new__(cls)
        p._v = jnp.reshape(jnp.asarray(v, dtype=float), (3,))
        return p

    @property
    def x(self) -> float:
        return float(self._v[0])

    @property
    def y(self) -> float:
        return float(self._v[1])

    @property
    def z(self) -> float:
        return float(self._v[2])

    def vector(self) -> jnp.ndarray:
        return self._v

    def norm(self) -> float:
        return float(jnp.linalg.norm(self._v))

    def dist(self, p: "Point3") -> float:
        return float(jnp.linalg.norm(p._v - self._v))

    def dot(self, p: "Point3") -> float:
        return float(jnp.dot(self._v, p._v))

    def cross(self, p: "Point3") -> "Point3":
        return Point3.from_vector(jnp.cross(self._v, p._v))

    def compose(self, p: "Point3") -> "Point3":
        return Point3.from_vector(self._v + p._v)

    def between(self, p: "Point3") -> "Point3":
        return Point3.from_vector(p._v - self._v)

    def inverse(self) -> "Point3":
        return Point3.from_vector(-self._v)

    def __add__(self, p: "Point3") -> "Point3":
        return self.compose(p)

    def __sub__(self, p: "Point3") -> "Point3":
        return Point3.from_vector(self._v - p._v)

    def __neg__(self) -> "Point3":
        return self.inverse()

    def __mul__(self, s: float) -> "Point3":
        return Point3.from_vector(self._v * s)

    __rmul__ = __mul__

    @staticmethod
    def expmap(v) -> "Point3":
        return Point3.from_vector(v)

    @staticmethod
    def logmap(p: "Point3") -> jnp.ndarray:
        return p._v

    def dim(self) -> int:
        return 3

    def retract(self, v) -> "Point3":
        return Point3.from_vector(self._v + jnp.asarray(v))

    def local_coordinates(self, p: "Point3") -> jnp.ndarray:
        return p._v - self._v

    def equals(self, p: "Point3", tol: float = 1e-9) -> bool:
        return bool(jnp.all(jnp.abs(self._v - p._v) <= tol))

    def clone(self) -> "Point3":
        return Point3.from_vector(self._v)

    def __eq__(self, other) -> bool:
        if not isinstance(other, Point3):
            return NotImplemented
        return self.equals(other)

    __hash__ = None

    def __repr__(self) -> str:
        return f"Point3({self.x:.6g}, {self.y:.6g}, {self.z:.6g})"
