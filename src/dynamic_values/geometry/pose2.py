# Copyright (c) 2025.
# This file is part of dynamic-values, released under the MIT License.
"""
Planar pose SE(2): a rotation plus a translation.

Tangent vectors are twists ξ = [v_x, v_y, ω], applied on the right:

    retract(ξ)            = self ∘ Exp(ξ)
    local_coordinates(p)  = Log(self⁻¹ ∘ p)
"""

from __future__ import annotations

import jax.numpy as jnp

from ..core.math3d import se2_exp, se2_log
from .point2 import Point2
from .rot2 import Rot2


class Pose2:
    """
    ``x`` and ``y`` are properties, as on :class:`Point2`; ``theta()`` stays
    a method, as on :class:`Rot2`, whose value it returns.
    """

    __slots__ = ("_r", "_t")

    def __init__(self, x: float = 0.0, y: float = 0.0, theta: float = 0.0):
        self._r = Rot2(theta)
        self._t = Point2(x, y)

    @classmethod
    def from_rotation_translation(cls, r: Rot2, t: Point2) -> "Pose2":
        p = cls.__new__(cls)
        p._r = r
        p._t = t
        return p

    @classmethod
    def from_vector(cls, v) -> "Pose2":
        """From [x, y, theta]."""
        v = jnp.asarray(v, dtype=float)
        return cls(v[0], v[1], v[2])

    @property
    def x(self) -> float:
        return self._t.x

    @property
    def y(self) -> float:
        return self._t.y

    def theta(self) -> float:
        return self._r.theta()

    def rotation(self) -> Rot2:
        return self._r

    def translation(self) -> Point2:
        return self._t

    def matrix(self) -> jnp.ndarray:
        M = jnp.eye(3)
        M = M.at[:2, :2].set(self._r.matrix())
        M = M.at[:2, 2].set(self._t.vector())
        return M

    # Group
    def compose(self, p: "Pose2") -> "Pose2":
        return Pose2.from_rotation_translation(
            self._r.compose(p._r), self._t + self._r.rotate(p._t)
        )

    def inverse(self) -> "Pose2":
        r_inv = self._r.inverse()
        return Pose2.from_rotation_translation(r_inv, -r_inv.rotate(self._t))

    def between(self, p: "Pose2") -> "Pose2":
        return self.inverse().compose(p)

    def __mul__(self, p: "Pose2") -> "Pose2":
        if not isinstance(p, Pose2):
            return NotImplemented
        return self.compose(p)

    def transform_from(self, p: Point2) -> Point2:
        """Local point -> world point."""
        return self._r.rotate(p) + self._t

    def transform_to(self, p: Point2) -> Point2:
        """World point -> local point."""
        return self._r.unrotate(p - self._t)

    def bearing(self, point: Point2) -> Rot2:
        return Rot2.relative_bearing(self.transform_to(point))

    def range(self, point: Point2) -> float:
        return self._t.dist(point)

    @staticmethod
    def expmap(xi) -> "Pose2":
        t, w = se2_exp(jnp.asarray(xi, dtype=float))
        return Pose2.from_rotation_translation(Rot2(w), Point2.from_vector(t))

    @staticmethod
    def logmap(p: "Pose2") -> jnp.ndarray:
        return se2_log(p._t.vector(), jnp.arctan2(p._r.s(), p._r.c()))

    # Manifold
    def dim(self) -> int:
        return 3

    def retract(self, xi) -> "Pose2":
        return self.compose(Pose2.expmap(xi))

    def local_coordinates(self, p: "Pose2") -> jnp.ndarray:
        return Pose2.logmap(self.between(p))

    def equals(self, p: "Pose2", tol: float = 1e-9) -> bool:
        return self._r.equals(p._r, tol) and self._t.equals(p._t, tol)

    def clone(self) -> "Pose2":
        return Pose2.from_rotation_translation(self._r.clone(), self._t.clone())

    def __eq__(self, other) -> bool:
        if not isinstance(other, Pose2):
            return NotImplemented
        return self.equals(other)

    __hash__ = None

    def __repr__(self) -> str:
        return f"Pose2({self.x:.6g}, {self.y:.6g}, {self.theta():.6g})"
