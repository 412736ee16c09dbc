from __future__ import annotations

import math

import jax.numpy as jnp
import pytest

from dynamic_values.geometry.point2 import Point2
from dynamic_values.geometry.point3 import Point3
from dynamic_values.geometry.pose2 import Pose2
from dynamic_values.geometry.pose3 import Pose3
from dynamic_values.geometry.rot2 import Rot2
from dynamic_values.geometry.rot3 import Rot3


MANIFOLD_PAIRS = [
    (Point2(1.0, 2.0), Point2(-0.5, 4.0)),
    (Point3(1.0, 2.0, 3.0), Point3(0.0, -1.0, 2.5)),
    (Rot2(0.3), Rot2(-2.0)),
    (Rot3.rz_ry_rx(0.1, -0.2, 0.3), Rot3.rz_ry_rx(-0.4, 0.5, 1.0)),
    (Pose2(1.0, 2.0, 0.3), Pose2(-1.0, 0.5, 2.0)),
    (
        Pose3(Rot3.rz_ry_rx(0.1, 0.2, 0.3), Point3(1.0, 2.0, 3.0)),
        Pose3(Rot3.rz_ry_rx(-0.3, 0.1, 1.2), Point3(-2.0, 0.5, 1.0)),
    ),
]


@pytest.mark.parametrize("x, y", MANIFOLD_PAIRS, ids=lambda v: type(v).__name__)
def test_retract_inverts_local_coordinates(x, y):
    d = x.local_coordinates(y)
    assert d.shape == (x.dim(),)
    assert x.retract(d).equals(y, 1e-9)


@pytest.mark.parametrize("x, y", MANIFOLD_PAIRS, ids=lambda v: type(v).__name__)
def test_local_coordinates_inverts_retract(x, y):
    d = 0.1 * jnp.arange(1, x.dim() + 1, dtype=float)
    assert jnp.allclose(x.local_coordinates(x.retract(d)), d, atol=1e-9)


@pytest.mark.parametrize("x, y", MANIFOLD_PAIRS, ids=lambda v: type(v).__name__)
def test_clone_is_equal_but_distinct(x, y):
    c = x.clone()
    assert c is not x
    assert c.equals(x)
    assert not c.equals(y)


def test_point2_arithmetic():
    p = Point2(1.0, 2.0)
    q = Point2(3.0, -1.0)
    assert (p + q).equals(Point2(4.0, 1.0))
    assert (q - p).equals(p.between(q))
    assert (-p).equals(p.inverse())
    assert (2.0 * p).equals(Point2(2.0, 4.0))
    assert p.dist(q) == pytest.approx(math.sqrt(13.0))


def test_point3_dot_cross():
    a = Point3(1.0, 0.0, 0.0)
    b = Point3(0.0, 1.0, 0.0)
    assert a.dot(b) == 0.0
    assert a.cross(b).equals(Point3(0.0, 0.0, 1.0))


def test_rot2_retract_adds_angle():
    assert Rot2(0.3).retract(jnp.array([0.05])).equals(Rot2(0.35), 1e-12)


def test_rot2_local_coordinates_wraps():
    d = Rot2(3.0).local_coordinates(Rot2(-3.0))
    assert float(d[0]) == pytest.approx(2 * math.pi - 6.0)


def test_rot2_constructors():
    assert Rot2.from_degrees(90.0).equals(Rot2(math.pi / 2))
    assert Rot2.atan2(1.0, 1.0).theta() == pytest.approx(math.pi / 4)
    assert Rot2.from_cos_sin(2.0, 0.0).equals(Rot2(0.0))
    assert Rot2.relative_bearing(Point2(0.0, 3.0)).degrees() == pytest.approx(90.0)
    with pytest.raises(ValueError):
        Rot2.from_cos_sin(0.0, 0.0)


def test_rot2_rotate_unrotate():
    r = Rot2(math.pi / 2)
    p = r.rotate(Point2(1.0, 0.0))
    assert p.equals(Point2(0.0, 1.0), 1e-12)
    assert r.unrotate(p).equals(Point2(1.0, 0.0), 1e-12)
    assert (r * Point2(1.0, 0.0)).equals(p)


def test_rot3_euler_roundtrip():
    R = Rot3.rz_ry_rx(0.1, 0.2, 0.3)
    assert jnp.allclose(R.xyz(), jnp.array([0.1, 0.2, 0.3]), atol=1e-12)
    assert jnp.allclose(R.ypr(), jnp.array([0.3, 0.2, 0.1]), atol=1e-12)
    assert Rot3.from_ypr(0.3, 0.2, 0.1).equals(R)
    assert R.roll_angle() == pytest.approx(0.1)
    assert R.pitch_angle() == pytest.approx(0.2)
    assert R.yaw_angle() == pytest.approx(0.3)


def test_rot3_quaternion_matches_rz():
    t = 0.7
    q = Rot3.quaternion(math.cos(t / 2), 0.0, 0.0, math.sin(t / 2))
    assert q.equals(Rot3.rz(t), 1e-12)
    assert Rot3.rodriguez([0.0, 0.0, t]).equals(Rot3.yaw(t), 1e-12)


def test_rot3_rejects_bad_shape():
    with pytest.raises(ValueError):
        Rot3(jnp.eye(2))


def test_pose2_compose_and_between():
    a = Pose2(1.0, 0.0, math.pi / 2)
    b = Pose2(1.0, 0.0, 0.0)
    ab = a.compose(b)
    assert ab.equals(Pose2(1.0, 1.0, math.pi / 2), 1e-12)
    assert a.between(ab).equals(b, 1e-12)
    assert (a * a.inverse()).equals(Pose2(), 1e-12)


def test_pose2_expmap_pure_rotation():
    assert Pose2.expmap([0.0, 0.0, 0.4]).equals(Pose2(0.0, 0.0, 0.4), 1e-12)


def test_pose2_bearing_and_range():
    pose = Pose2(0.0, 0.0, 0.0)
    p = Point2(1.0, 1.0)
    assert pose.bearing(p).theta() == pytest.approx(math.pi / 4)
    assert pose.range(p) == pytest.approx(math.sqrt(2.0))
    turned = Pose2(0.0, 0.0, math.pi / 2)
    assert turned.bearing(p).theta() == pytest.approx(-math.pi / 4)


def test_pose2_transform_to_from():
    pose = Pose2(1.0, 2.0, 0.5)
    p = Point2(3.0, -1.0)
    assert pose.transform_from(pose.transform_to(p)).equals(p, 1e-12)


def test_pose2_matrix():
    M = Pose2(1.0, 2.0, 0.0).matrix()
    assert jnp.allclose(M, jnp.array([[1.0, 0.0, 1.0], [0.0, 1.0, 2.0], [0.0, 0.0, 1.0]]))


def test_pose3_matrix_roundtrip():
    pose = Pose3(Rot3.rz_ry_rx(0.1, 0.2, 0.3), Point3(1.0, 2.0, 3.0))
    assert Pose3.from_matrix(pose.matrix()).equals(pose)
    assert (pose.x, pose.y, pose.z) == pytest.approx((1.0, 2.0, 3.0))


def test_pose3_transform_to_from():
    pose = Pose3(Rot3.rz_ry_rx(0.1, 0.2, 0.3), Point3(1.0, 2.0, 3.0))
    p = Point3(-1.0, 0.5, 2.0)
    assert pose.transform_from(pose.transform_to(p)).equals(p, 1e-12)


def test_eq_uses_equals_and_rejects_other_types():
    assert Point2(1.0, 2.0) == Point2(1.0, 2.0)
    assert Point2(1.0, 2.0) != Point2(1.0, 2.5)
    assert Point2(1.0, 2.0) != Point3(1.0, 2.0, 0.0)


NEAR_PI_EPS = [1e-3, 1e-5, 1e-6, 1e-8]


@pytest.mark.parametrize("eps", NEAR_PI_EPS)
def test_rot3_roundtrip_near_pi(eps):
    x = Rot3()
    y = Rot3.rx(math.pi - eps)
    assert x.retract(x.local_coordinates(y)).equals(y, 1e-9)


@pytest.mark.parametrize("eps", NEAR_PI_EPS)
def test_rot3_roundtrip_near_pi_from_rotated_base(eps):
    x = Rot3.rz_ry_rx(0.3, -0.2, 0.1)
    y = x.retract(jnp.array([0.0, math.pi - eps, 0.0]))
    assert x.retract(x.local_coordinates(y)).equals(y, 1e-9)


@pytest.mark.parametrize("eps", NEAR_PI_EPS)
def test_pose3_roundtrip_near_pi(eps):
    x = Pose3(Rot3.rz_ry_rx(0.3, -0.2, 0.1), Point3(1.0, -2.0, 0.5))
    axis = jnp.array([1.0, 2.0, -2.0]) / 3.0
    y = x.retract(jnp.concatenate([(math.pi - eps) * axis, jnp.array([0.4, 0.1, -0.3])]))
    assert x.retract(x.local_coordinates(y)).equals(y, 1e-9)


def test_pose2_accessors():
    p = Pose2(1.0, 2.0, 0.5)
    assert p.x == pytest.approx(1.0)
    assert p.y == pytest.approx(2.0)
    assert p.theta() == pytest.approx(0.5)
    assert p.theta() == pytest.approx(p.rotation().theta())
