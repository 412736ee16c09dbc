# Copyright (c) 2025.
# This file is part of dynamic-values, released under the MIT License.
"""
Planar rotation SO(2).

Stored as the (cos θ, sin θ) pair so that composition never needs to
re-normalize angles. The tangent space is 1-dimensional:

    retract(v)            = self ∘ Rot2(v[0])
    local_coordinates(r)  = [ θ(self⁻¹ ∘ r) ]   with θ ∈ (-π, π]
"""

from __future__ import annotations

import jax.numpy as jnp

from ..core.math3d import so2_matrix
from .point2 import Point2


class Rot2:
    __slots__ = ("_cs",)

    def __init__(self, theta: float = 0.0):
        self._cs = jnp.array([jnp.cos(theta), jnp.sin(theta)], dtype=float)

    @classmethod
    def _from_cs(cls, cs) -> "Rot2":
        r = cls.__new__(cls)
        r._cs = cs
        return r

    # Named constructors
    @classmethod
    def from_angle(cls, theta: float) -> "Rot2":
        return cls(theta)

    @classmethod
    def from_degrees(cls, degrees: float) -> "Rot2":
        return cls(jnp.deg2rad(degrees))

    @classmethod
    def from_cos_sin(cls, c: float, s: float) -> "Rot2":
        """Normalizes (c, s) onto the unit circle."""
        cs = jnp.array([c, s], dtype=float)
        n = jnp.linalg.norm(cs)
        if float(n) == 0.0:
            raise ValueError("Rot2.from_cos_sin: (c, s) must not both be zero")
        return cls._from_cs(cs / n)

    @classmethod
    def atan2(cls, y: float, x: float) -> "Rot2":
        return cls.from_cos_sin(x, y)

    @classmethod
    def relative_bearing(cls, d: Point2) -> "Rot2":
        """Rotation pointing along the direction vector d."""
        return cls.from_cos_sin(d.x, d.y)

    # Accessors
    def theta(self) -> float:
        return float(jnp.arctan2(self._cs[1], self._cs[0]))

    def degrees(self) -> float:
        return float(jnp.rad2deg(self.theta()))

    def c(self) -> float:
        return float(self._cs[0])

    def s(self) -> float:
        return float(self._cs[1])

    def matrix(self) -> jnp.ndarray:
        return so2_matrix(self._cs[0], self._cs[1])

    def rotate(self, p: Point2) -> Point2:
        return Point2.from_vector(self.matrix() @ p.vector())

    def unrotate(self, p: Point2) -> Point2:
        return Point2.from_vector(self.matrix().T @ p.vector())

    # Group
    def compose(self, r: "Rot2") -> "Rot2":
        c1, s1 = self._cs[0], self._cs[1]
        c2, s2 = r._cs[0], r._cs[1]
        return Rot2._from_cs(jnp.array([c1 * c2 - s1 * s2, s1 * c2 + c1 * s2]))

    def inverse(self) -> "Rot2":
        return Rot2._from_cs(jnp.array([self._cs[0], -self._cs[1]]))

    def between(self, r: "Rot2") -> "Rot2":
        return self.inverse().compose(r)

    def __mul__(self, other):
        if isinstance(other, Rot2):
            return self.compose(other)
        if isinstance(other, Point2):
            return self.rotate(other)
        return NotImplemented

    @staticmethod
    def expmap(v) -> "Rot2":
        return Rot2(jnp.reshape(jnp.asarray(v, dtype=float), (1,))[0])

    @staticmethod
    def logmap(r: "Rot2") -> jnp.ndarray:
        return jnp.array([jnp.arctan2(r._cs[1], r._cs[0])])

    # Manifold
    def dim(self) -> int:
        return 1

    def retract(self, v) -> "Rot2":
        return self.compose(Rot2.expmap(v))

    def local_coordinates(self, r: "Rot2") -> jnp.ndarray:
        return Rot2.logmap(self.between(r))

    def equals(self, r: "Rot2", tol: float = 1e-9) -> bool:
        return bool(jnp.all(jnp.abs(self._cs - r._cs) <= tol))

    def clone(self) -> "Rot2":
        return Rot2._from_cs(self._cs)

    def __eq__(self, other) -> bool:
        if not isinstance(other, Rot2):
            return NotImplemented
        return self.equals(other)

    __hash__ = None

    def __repr__(self) -> str:
        return f"Rot2({self.theta():.6g})"
