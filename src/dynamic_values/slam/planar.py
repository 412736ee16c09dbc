# Copyright (c) 2025.
# This file is part of dynamic-values, released under the MIT License.
"""
Planar SLAM values.

Robot poses and landmarks live in one :class:`DynamicValues`, told apart by
key character: ``'x'`` for poses and ``'l'`` for landmarks. The typed keys
(:func:`pose_key`, :func:`point_key`) carry the expected value type, so
lookups are checked without restating it.

:class:`PoseLandmarkValues` is the shared base; subclasses only pick the
pose and point types (see also :mod:`dynamic_values.slam.simulated2d`).
"""

from __future__ import annotations

from typing import Any

from ..core.types import TypedSymbol
from ..geometry.point2 import Point2
from ..geometry.pose2 import Pose2
from ..nonlinear.dynamic_values import DynamicValues

POSE_CHAR = "x"
POINT_CHAR = "l"


class PoseLandmarkValues(DynamicValues):
    """DynamicValues with typed pose ('x') and landmark ('l') accessors."""

    POSE_TYPE: type = Pose2
    POINT_TYPE: type = Point2

    @classmethod
    def pose_key(cls, i: int) -> TypedSymbol:
        return TypedSymbol(cls.POSE_TYPE, POSE_CHAR, i)

    @classmethod
    def point_key(cls, j: int) -> TypedSymbol:
        return TypedSymbol(cls.POINT_TYPE, POINT_CHAR, j)

    def _check(self, value: Any, expected: type, what: str) -> None:
        if not isinstance(value, expected):
            raise TypeError(
                f"{type(self).__name__}.insert_{what} expects {expected.__name__}, "
                f"got {type(value).__name__}"
            )

    def insert_pose(self, i: int, pose: Any) -> None:
        self._check(pose, self.POSE_TYPE, "pose")
        self.insert(self.pose_key(i), pose)

    def insert_point(self, j: int, point: Any) -> None:
        self._check(point, self.POINT_TYPE, "point")
        self.insert(self.point_key(j), point)

    def pose(self, i: int) -> Any:
        return self.at(self.pose_key(i))

    def point(self, j: int) -> Any:
        return self.at(self.point_key(j))

    def nr_poses(self) -> int:
        return sum(1 for key in self.keys() if key.char == POSE_CHAR)

    def nr_points(self) -> int:
        return sum(1 for key in self.keys() if key.char == POINT_CHAR)


class PlanarValues(PoseLandmarkValues):
    """Pose2 robot poses and Point2 landmarks."""

    POSE_TYPE = Pose2
    POINT_TYPE = Point2


def pose_key(i: int) -> TypedSymbol:
    return PlanarValues.pose_key(i)


def point_key(j: int) -> TypedSymbol:
    return PlanarValues.point_key(j)
