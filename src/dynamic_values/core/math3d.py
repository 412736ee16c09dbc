"""
Lie-group primitives behind the geometry types of dynamic-values.

This module implements the minimal SO(2), SE(2), SO(3) and SE(3) mathematics
the value types in :mod:`dynamic_values.geometry` need for their
``retract`` / ``local_coordinates`` pairs:

    • SO(3) exponential & logarithm maps
    • SE(3) exponential & logarithm maps (twist order [ω, v])
    • SE(2) exponential & logarithm maps (twist order [v_x, v_y, ω])
    • Angle wrapping and 2D rotation matrices
    • Small-angle fallbacks for numerically stable results near identity

All functions are written in JAX and work on 1-D / 2-D ``jnp`` arrays, so
they can also be JIT-compiled or differentiated by callers who need it.

Key Functions
-------------
so3_exp(w), so3_log(R)
    Rotation vector ↔ 3×3 rotation matrix.

se3_exp(xi), se3_log(T)
    Twist ξ = (ω, v) ↔ 4×4 homogeneous transform.

se2_exp(xi), se2_log(t, theta)
    Planar twist (v_x, v_y, ω) ↔ (translation, heading).

Utilities
---------
hat(ω), vee(Ω)
    3-vector ↔ skew-symmetric matrix.

so3_left_jacobian(ω)
    The matrix V relating translation and twist in SE(3).

Notes
-----
The exp/log pairs here are inverses for rotation angles in [0, π], which
is what makes the geometry types satisfy
``x.retract(x.local_coordinates(y)) ≈ y``.
"""

from __future__ import annotations

import jax
import jax.numpy as jnp

# Importing config applies the x64 setting before any array is created.
from .. import config as _config  # noqa: F401

SMALL_ANGLE = 1e-5
NEAR_PI = 1e-2


def hat(v: jnp.ndarray) -> jnp.ndarray:
    """so(3) hat operator: R^3 -> 3x3 skew-symmetric matrix."""
    x, y, z = v[0], v[1], v[2]
    return jnp.array(
        [
            [0.0, -z, y],
            [z, 0.0, -x],
            [-y, x, 0.0],
        ]
    )


def vee(R: jnp.ndarray) -> jnp.ndarray:
    """
    vee: so(3) -> R^3, inverse of hat.
    Uses the antisymmetric part, so it is also valid for R - I with R ≈ I.
    """
    return jnp.array([
        R[2, 1] - R[1, 2],
        R[0, 2] - R[2, 0],
        R[1, 0] - R[0, 1],
    ]) / 2.0


def so3_exp(w: jnp.ndarray) -> jnp.ndarray:
    """
    Exponential map from so(3) (rotation vector) to SO(3).

    Uses Rodrigues' formula with a second-order small-angle fallback.
    """
    w = jnp.asarray(w)
    theta = jnp.linalg.norm(w)
    I = jnp.eye(3)

    def small_angle(_) -> jnp.ndarray:
        W = hat(w)
        return I + W + 0.5 * (W @ W)

    def normal_angle(_) -> jnp.ndarray:
        k = w / theta
        K = hat(k)
        return I + jnp.sin(theta) * K + (1.0 - jnp.cos(theta)) * (K @ K)

    return jax.lax.cond(theta < SMALL_ANGLE, small_angle, normal_angle, None)


def so3_log(R: jnp.ndarray) -> jnp.ndarray:
    """
    Numerically stable logarithm map for SO(3).

    The angle is taken as atan2(|s|, (tr R - 1) / 2) with s = vee(R - R^T)
    = sin(θ) k, which stays well conditioned up to θ = π. Branches:
      - small angles: first-order approximation
      - near π: the axis comes from the symmetric part of R, since s
        shrinks to zero there; s only fixes its sign
      - otherwise: w = θ s / |s|

    Returns w in R^3 such that Exp(w) ~ R.
    """
    R = jnp.asarray(R)
    s = vee(R - R.T)
    sin_theta = jnp.linalg.norm(s)
    cos_theta = (jnp.trace(R) - 1.0) / 2.0
    theta = jnp.arctan2(sin_theta, cos_theta)

    def small_angle_case(_) -> jnp.ndarray:
        # R ~ I + hat(w)
        return vee(R - jnp.eye(3, dtype=R.dtype))

    def near_pi_case(_) -> jnp.ndarray:
        # R + R^T = 2 cos(θ) I + 2 (1 - cos(θ)) k k^T
        I = jnp.eye(3, dtype=R.dtype)
        B = (0.5 * (R + R.T) - cos_theta * I) / (1.0 - cos_theta)
        i = jnp.argmax(jnp.diag(B))
        k = B[:, i] / jnp.sqrt(jnp.maximum(B[i, i], 1e-300))
        k = k / jnp.linalg.norm(k)
        k = jnp.where(jnp.dot(k, s) < 0.0, -k, k)
        return theta * k

    def general_case(_) -> jnp.ndarray:
        return theta * s / sin_theta

    def not_small(_) -> jnp.ndarray:
        return jax.lax.cond(jnp.pi - theta < NEAR_PI, near_pi_case, general_case, None)

    return jax.lax.cond(theta < SMALL_ANGLE, small_angle_case, not_small, None)


def so3_left_jacobian(w: jnp.ndarray) -> jnp.ndarray:
    """
    Left Jacobian of SO(3), the V in Exp([ω, v]) = [Exp(ω), V v].

        V = I + (1 - cos θ)/θ² W + (θ - sin θ)/θ³ W²
    """
    w = jnp.asarray(w)
    theta = jnp.linalg.norm(w)
    W = hat(w)
    W2 = W @ W
    I = jnp.eye(3)

    def small_angle(_) -> jnp.ndarray:
        return I + 0.5 * W + W2 / 6.0

    def normal_angle(_) -> jnp.ndarray:
        A = (1.0 - jnp.cos(theta)) / (theta * theta)
        B = (theta - jnp.sin(theta)) / (theta * theta * theta)
        return I + A * W + B * W2

    return jax.lax.cond(theta < SMALL_ANGLE, small_angle, normal_angle, None)


def se3_exp(xi: jnp.ndarray) -> jnp.ndarray:
    """
    Exponential map from se(3) -> SE(3).

    xi = [w_x, w_y, w_z, v_x, v_y, v_z]
      - w: rotation vector (axis-angle)
      - v: translational velocity

    Returns 4×4 homogeneous SE(3) matrix

        T = [ Exp(w), V(w) v ]
            [ 0,      1      ]
    """
    xi = jnp.asarray(xi)
    w = xi[:3]
    v = xi[3:]

    R = so3_exp(w)
    t = so3_left_jacobian(w) @ v

    T = jnp.eye(4)
    T = T.at[:3, :3].set(R)
    T = T.at[:3, 3].set(t)
    return T


def se3_log(T: jnp.ndarray) -> jnp.ndarray:
    """Inverse of se3_exp: returns [w, v] for a 4×4 transform."""
    T = jnp.asarray(T)
    w = so3_log(T[:3, :3])
    v = jnp.linalg.solve(so3_left_jacobian(w), T[:3, 3])
    return jnp.concatenate([w, v])


def wrap_angle(theta):
    """Wrap an angle to (-π, π]."""
    return jnp.arctan2(jnp.sin(theta), jnp.cos(theta))


def so2_matrix(c, s) -> jnp.ndarray:
    return jnp.array([[c, -s], [s, c]])


def _se2_v(theta) -> jnp.ndarray:
    # V(θ) = (1/θ) [[sin θ, -(1 - cos θ)], [1 - cos θ, sin θ]]
    def small_angle(_) -> jnp.ndarray:
        return jnp.array([[1.0, -0.5 * theta], [0.5 * theta, 1.0]])

    def normal_angle(_) -> jnp.ndarray:
        s = jnp.sin(theta) / theta
        c = (1.0 - jnp.cos(theta)) / theta
        return jnp.array([[s, -c], [c, s]])

    return jax.lax.cond(jnp.abs(theta) < SMALL_ANGLE, small_angle, normal_angle, None)


def se2_exp(xi: jnp.ndarray) -> tuple[jnp.ndarray, jnp.ndarray]:
    """
    Exponential map from se(2) -> SE(2).

    xi = [v_x, v_y, w]; returns (translation (2,), heading angle).
    """
    xi = jnp.asarray(xi)
    v = xi[:2]
    w = xi[2]
    return _se2_v(w) @ v, w


def se2_log(t: jnp.ndarray, theta) -> jnp.ndarray:
    """Inverse of se2_exp for a pose with translation t and heading theta."""
    t = jnp.asarray(t)
    theta = wrap_angle(theta)
    v = jnp.linalg.solve(_se2_v(theta), t)
    return jnp.concatenate([v, jnp.reshape(theta, (1,))])
