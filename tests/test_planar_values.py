from __future__ import annotations

import pytest

from dynamic_values.core.errors import DynamicValuesIncorrectType
from dynamic_values.core.types import Symbol
from dynamic_values.geometry.point2 import Point2
from dynamic_values.geometry.pose2 import Pose2
from dynamic_values.linear.vector_values import VectorValues
from dynamic_values.nonlinear.dynamic_values import DynamicValues
from dynamic_values.slam.planar import PlanarValues, point_key, pose_key
from dynamic_values.slam.simulated2d import Simulated2DOrientedValues, Simulated2DValues


def test_planar_insert_and_lookup():
    values = PlanarValues()
    values.insert_pose(1, Pose2(0.0, 0.0, 0.0))
    values.insert_pose(2, Pose2(2.0, 0.0, 0.0))
    values.insert_point(1, Point2(1.0, 1.0))

    assert values.pose(2).equals(Pose2(2.0, 0.0, 0.0))
    assert values.point(1).equals(Point2(1.0, 1.0))
    assert values.nr_poses() == 2
    assert values.nr_points() == 1
    assert values.keys() == [Symbol("l", 1), Symbol("x", 1), Symbol("x", 2)]
    assert values.at(pose_key(1)).equals(Pose2())
    assert values.at(point_key(1)).equals(Point2(1.0, 1.0))


def test_planar_insert_checks_types():
    values = PlanarValues()
    with pytest.raises(TypeError):
        values.insert_pose(1, Point2())
    with pytest.raises(TypeError):
        values.insert_point(1, Pose2())
    assert values.empty()


def test_typed_keys_catch_misfiled_values():
    values = PlanarValues()
    values.insert("x1", Point2())
    with pytest.raises(DynamicValuesIncorrectType):
        values.pose(1)


def test_planar_retract_and_copy_preserve_class():
    values = PlanarValues()
    values.insert_pose(1, Pose2(0.0, 0.0, 0.0))
    values.insert_point(1, Point2(1.0, 1.0))
    ordering = values.ordering_arbitrary()

    delta = VectorValues.from_vector([0.5, 0.0, 1.0, 0.0, 0.0], values.dims(ordering))
    moved = values.retract(delta, ordering)

    assert isinstance(moved, PlanarValues)
    assert moved.point(1).equals(Point2(1.5, 1.0), 1e-12)
    assert moved.pose(1).equals(Pose2(1.0, 0.0, 0.0), 1e-12)
    assert isinstance(values.copy(), PlanarValues)
    assert isinstance(values, DynamicValues)


def test_simulated2d_poses_are_points():
    values = Simulated2DValues()
    values.insert_pose(1, Point2(0.0, 0.0))
    values.insert_point(1, Point2(3.0, 4.0))
    assert values.pose(1).equals(Point2(0.0, 0.0))
    assert values.nr_poses() == 1
    assert values.nr_points() == 1
    with pytest.raises(TypeError):
        values.insert_pose(2, Pose2())


def test_simulated2d_oriented_poses_are_pose2():
    values = Simulated2DOrientedValues()
    values.insert_pose(1, Pose2(1.0, 2.0, 0.5))
    values.insert_point(4, Point2(3.0, 4.0))
    assert values.pose(1).equals(Pose2(1.0, 2.0, 0.5))
    assert values.point(4).equals(Point2(3.0, 4.0))
    assert Simulated2DOrientedValues.pose_key(1).value_type is Pose2
