# Copyright (c) 2025.
# This file is part of dynamic-values, released under the MIT License.
"""
3D rotation SO(3), stored as a 3×3 rotation matrix.

Tangent space is R³ (rotation vectors), used on the right:

    retract(ω)            = R · Exp(ω)
    local_coordinates(S)  = Log(Rᵀ S)

Euler conventions follow the usual aerospace ones: ``rz_ry_rx(x, y, z)`` is
Rz(z)·Ry(y)·Rx(x), and yaw/pitch/roll are rotations about z/y/x.
"""

from __future__ import annotations

import jax.numpy as jnp

from ..core.math3d import so3_exp, so3_log
from .point3 import Point3


class Rot3:
    __slots__ = ("_R",)

    def __init__(self, R=None):
        if R is None:
            self._R = jnp.eye(3)
        else:
            R = jnp.asarray(R, dtype=float)
            if R.shape != (3, 3):
                raise ValueError(f"Rot3 needs a 3x3 matrix, got shape {R.shape}")
            self._R = R

    # Named constructors
    @classmethod
    def rx(cls, t: float) -> "Rot3":
        c, s = jnp.cos(t), jnp.sin(t)
        return cls(jnp.array([[1.0, 0.0, 0.0], [0.0, c, -s], [0.0, s, c]]))

    @classmethod
    def ry(cls, t: float) -> "Rot3":
        c, s = jnp.cos(t), jnp.sin(t)
        return cls(jnp.array([[c, 0.0, s], [0.0, 1.0, 0.0], [-s, 0.0, c]]))

    @classmethod
    def rz(cls, t: float) -> "Rot3":
        c, s = jnp.cos(t), jnp.sin(t)
        return cls(jnp.array([[c, -s, 0.0], [s, c, 0.0], [0.0, 0.0, 1.0]]))

    @classmethod
    def rz_ry_rx(cls, x: float, y: float, z: float) -> "Rot3":
        return cls.rz(z).compose(cls.ry(y)).compose(cls.rx(x))

    @classmethod
    def from_ypr(cls, y: float, p: float, r: float) -> "Rot3":
        return cls.rz_ry_rx(r, p, y)

    # positive yaw is to right (as in aircraft heading)
    @classmethod
    def yaw(cls, t: float) -> "Rot3":
        return cls.rz(t)

    # positive pitch is up (increasing aircraft altitude)
    @classmethod
    def pitch(cls, t: float) -> "Rot3":
        return cls.ry(t)

    # positive roll is to right (increasing yaw in aircraft)
    @classmethod
    def roll(cls, t: float) -> "Rot3":
        return cls.rx(t)

    @classmethod
    def quaternion(cls, w: float, x: float, y: float, z: float) -> "Rot3":
        q = jnp.array([w, x, y, z], dtype=float)
        q = q / jnp.linalg.norm(q)
        w, x, y, z = q[0], q[1], q[2], q[3]
        return cls(jnp.array([
            [1 - 2 * (y * y + z * z), 2 * (x * y - w * z), 2 * (x * z + w * y)],
            [2 * (x * y + w * z), 1 - 2 * (x * x + z * z), 2 * (y * z - w * x)],
            [2 * (x * z - w * y), 2 * (y * z + w * x), 1 - 2 * (x * x + y * y)],
        ]))

    @classmethod
    def rodriguez(cls, w) -> "Rot3":
        return cls(so3_exp(jnp.asarray(w, dtype=float)))

    # Accessors
    def matrix(self) -> jnp.ndarray:
        return self._R

    def transpose(self) -> jnp.ndarray:
        return self._R.T

    def xyz(self) -> jnp.ndarray:
        """Angles (x, y, z) such that self == rz_ry_rx(x, y, z)."""
        R = self._R
        x = jnp.arctan2(R[2, 1], R[2, 2])
        y = jnp.arctan2(-R[2, 0], jnp.sqrt(R[2, 1] ** 2 + R[2, 2] ** 2))
        z = jnp.arctan2(R[1, 0], R[0, 0])
        return jnp.array([x, y, z])

    def ypr(self) -> jnp.ndarray:
        return self.xyz()[::-1]

    def roll_angle(self) -> float:
        return float(self.xyz()[0])

    def pitch_angle(self) -> float:
        return float(self.xyz()[1])

    def yaw_angle(self) -> float:
        return float(self.xyz()[2])

    def rotate(self, p: Point3) -> Point3:
        return Point3.from_vector(self._R @ p.vector())

    def unrotate(self, p: Point3) -> Point3:
        return Point3.from_vector(self._R.T @ p.vector())

    # Group
    def compose(self, r: "Rot3") -> "Rot3":
        return Rot3(self._R @ r._R)

    def inverse(self) -> "Rot3":
        return Rot3(self._R.T)

    def between(self, r: "Rot3") -> "Rot3":
        return Rot3(self._R.T @ r._R)

    def __mul__(self, other):
        if isinstance(other, Rot3):
            return self.compose(other)
        if isinstance(other, Point3):
            return self.rotate(other)
        return NotImplemented

    @staticmethod
    def expmap(w) -> "Rot3":
        return Rot3(so3_exp(jnp.asarray(w, dtype=float)))

    @staticmethod
    def logmap(r: "Rot3") -> jnp.ndarray:
        return so3_log(r._R)

    # Manifold
    def dim(self) -> int:
        return 3

    def retract(self, w) -> "Rot3":
        return self.compose(Rot3.expmap(w))

    def local_coordinates(self, r: "Rot3") -> jnp.ndarray:
        return Rot3.logmap(self.between(r))

    def equals(self, r: "Rot3", tol: float = 1e-9) -> bool:
        return bool(jnp.all(jnp.abs(self._R - r._R) <= tol))

    def clone(self) -> "Rot3":
        return Rot3(self._R)

    def __eq__(self, other) -> bool:
        if not isinstance(other, Rot3):
            return NotImplemented
        return self.equals(other)

    __hash__ = None

    def __repr__(self) -> str:
        rows = ", ".join(
            "[" + ", ".join(f"{float(v):.6g}" for v in row) + "]" for row in self._R
        )
        return f"Rot3([{rows}])"
