# Copyright (c) 2025.
# This file is part of dynamic-values, released under the MIT License.
"""
3D pose SE(3): a :class:`Rot3` plus a :class:`Point3` translation.

Tangent vectors are twists ξ = [ω_x, ω_y, ω_z, v_x, v_y, v_z] (rotation
first), applied on the right:

    retract(ξ)            = self ∘ Exp(ξ)
    local_coordinates(p)  = Log(self⁻¹ ∘ p)
"""

from __future__ import annotations

import jax.numpy as jnp

from ..core.math3d import hat, se3_exp, se3_log
from .point3 import Point3
from .rot3 import Rot3


class Pose3:
    __slots__ = ("_R", "_t")

    def __init__(self, rotation: Rot3 = None, translation: Point3 = None):
        self._R = rotation if rotation is not None else Rot3()
        self._t = translation if translation is not None else Point3()

    @classmethod
    def from_matrix(cls, T) -> "Pose3":
        T = jnp.asarray(T, dtype=float)
        if T.shape != (4, 4):
            raise ValueError(f"Pose3.from_matrix needs a 4x4 matrix, got shape {T.shape}")
        return cls(Rot3(T[:3, :3]), Point3.from_vector(T[:3, 3]))

    @property
    def x(self) -> float:
        return self._t.x

    @property
    def y(self) -> float:
        return self._t.y

    @property
    def z(self) -> float:
        return self._t.z

    def rotation(self) -> Rot3:
        return self._R

    def translation(self) -> Point3:
        return self._t

    def matrix(self) -> jnp.ndarray:
        T = jnp.eye(4)
        T = T.at[:3, :3].set(self._R.matrix())
        T = T.at[:3, 3].set(self._t.vector())
        return T

    def adjoint_map(self) -> jnp.ndarray:
        """6×6 adjoint in [ω, v] twist order: [[R, 0], [t^ R, R]]."""
        R = self._R.matrix()
        A = jnp.zeros((6, 6))
        A = A.at[:3, :3].set(R)
        A = A.at[3:, 3:].set(R)
        A = A.at[3:, :3].set(hat(self._t.vector()) @ R)
        return A

    # Group
    def compose(self, p: "Pose3") -> "Pose3":
        return Pose3(self._R.compose(p._R), self._t + self._R.rotate(p._t))

    def inverse(self) -> "Pose3":
        R_inv = self._R.inverse()
        return Pose3(R_inv, -R_inv.rotate(self._t))

    def between(self, p: "Pose3") -> "Pose3":
        return self.inverse().compose(p)

    def __mul__(self, p: "Pose3") -> "Pose3":
        if not isinstance(p, Pose3):
            return NotImplemented
        return self.compose(p)

    def transform_from(self, p: Point3) -> Point3:
        return self._R.rotate(p) + self._t

    def transform_to(self, p: Point3) -> Point3:
        return self._R.unrotate(p - self._t)

    @staticmethod
    def expmap(xi) -> "Pose3":
        return Pose3.from_matrix(se3_exp(jnp.asarray(xi, dtype=float)))

    @staticmethod
    def logmap(p: "Pose3") -> jnp.ndarray:
        return se3_log(p.matrix())

    # Manifold
    def dim(self) -> int:
        return 6

    def retract(self, xi) -> "Pose3":
        return self.compose(Pose3.expmap(xi))

    def local_coordinates(self, p: "Pose3") -> jnp.ndarray:
        return Pose3.logmap(self.between(p))

    def equals(self, p: "Pose3", tol: float = 1e-9) -> bool:
        return self._R.equals(p._R, tol) and self._t.equals(p._t, tol)

    def clone(self) -> "Pose3":
        return Pose3(self._R.clone(), self._t.clone())

    def __eq__(self, other) -> bool:
        if not isinstance(other, Pose3):
            return NotImplemented
        return self.equals(other)

    __hash__ = None

    def __repr__(self) -> str:
        return f"Pose3(R={self._R!r}, t={self._t!r})"
