# Copyright (c) 2025.
# This file is part of dynamic-values, released under the MIT License.
"""
Values for the simulated 2D example domains.

    Simulated2DValues           robot "poses" are Point2 (position only)
    Simulated2DOrientedValues   robot poses are Pose2

Landmarks are Point2 in both.
"""

from __future__ import annotations

from ..geometry.point2 import Point2
from ..geometry.pose2 import Pose2
from .planar import PoseLandmarkValues


class Simulated2DValues(PoseLandmarkValues):
    POSE_TYPE = Point2
    POINT_TYPE = Point2


class Simulated2DOrientedValues(PoseLandmarkValues):
    POSE_TYPE = Pose2
    POINT_TYPE = Point2
