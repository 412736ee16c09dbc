# Copyright (c) 2025.
# This file is part of dynamic-values, released under the MIT License.
"""
Manifold metadata for flat-vector solvers.

Solvers that work on a single stacked state/step vector need to know, for
each variable, which slice of that vector belongs to it and which update
rule applies there. This module derives that metadata from a
:class:`~dynamic_values.nonlinear.dynamic_values.DynamicValues` and an
:class:`~dynamic_values.nonlinear.ordering.Ordering`:

    • `TYPE_TO_MANIFOLD`           (value type → "se3", "so2", "euclidean", ...)
    • `get_manifold_for_value_type`
    • `build_manifold_metadata`    (Symbol → slice, manifold label)

The slices index into ``values.zero_vectors(ordering).vector()``, i.e. the
blocks concatenated in ordering-index order, which is the layout
``VectorValues.from_vector`` expects when splitting a flat step back into
a delta for ``DynamicValues.retract``.

Extending
---------
Register additional value types by adding entries to `TYPE_TO_MANIFOLD`;
unknown types are reported as "euclidean".
"""

from __future__ import annotations

from typing import Dict, Tuple

import numpy as np

from ..core.types import Symbol
from ..geometry.point2 import Point2
from ..geometry.point3 import Point3
from ..geometry.pose2 import Pose2
from ..geometry.pose3 import Pose3
from ..geometry.rot2 import Rot2
from ..geometry.rot3 import Rot3
from ..nonlinear.dynamic_values import DynamicValues
from ..nonlinear.ordering import Ordering

TYPE_TO_MANIFOLD: Dict[type, str] = {
    Point2: "euclidean",
    Point3: "euclidean",
    Rot2: "so2",
    Rot3: "so3",
    Pose2: "se2",
    Pose3: "se3",
}


def get_manifold_for_value_type(value_type: type) -> str:
    return TYPE_TO_MANIFOLD.get(value_type, "euclidean")


def build_manifold_metadata(
    values: DynamicValues,
    ordering: Ordering,
) -> Tuple[Dict[Symbol, slice], Dict[Symbol, str]]:
    """
    Build metadata for manifold-aware solvers:

      - block_slices: Symbol -> slice in the flat tangent vector
      - manifold_types: Symbol -> 'se3', 'so2', 'euclidean', ...

    Offsets follow the ordering's index order; indices the values do not use
    contribute zero width.
    """
    dims = np.asarray(values.dims(ordering), dtype=np.int64)
    offsets = np.concatenate([[0], np.cumsum(dims)])

    block_slices: Dict[Symbol, slice] = {}
    manifold_types: Dict[Symbol, str] = {}

    for key in values.keys():
        j = ordering[key]
        block_slices[key] = slice(int(offsets[j]), int(offsets[j + 1]))
        manifold_types[key] = get_manifold_for_value_type(values.type_of(key))

    return block_slices, manifold_types
