from __future__ import annotations

import jax.numpy as jnp

from dynamic_values.core.errors import DynamicValuesIncorrectType, DynamicValuesKeyDoesNotExist
from dynamic_values.geometry.point2 import Point2
from dynamic_values.geometry.pose2 import Pose2
from dynamic_values.linear.vector_values import VectorValues
from dynamic_values.slam.manifold import build_manifold_metadata
from dynamic_values.slam.planar import PlanarValues, point_key, pose_key


def setup_planar_values() -> PlanarValues:
    """
    Tiny planar SLAM state:

      - 3 Pose2 robot poses along +x, turning left a little each step
      - 2 Point2 landmarks seen from the trajectory

    Keys are x1..x3 for poses and l1..l2 for landmarks.
    """
    values = PlanarValues()

    values.insert_pose(1, Pose2(0.0, 0.0, 0.0))
    values.insert_pose(2, Pose2(1.0, 0.0, 0.1))
    values.insert_pose(3, Pose2(2.0, 0.1, 0.2))

    values.insert_point(1, Point2(1.0, 2.0))
    values.insert_point(2, Point2(2.5, -1.0))

    return values


def main():
    values = setup_planar_values()
    print("=== Initial values ===")
    print(values)

    # -------------------------
    # Ordering + flat layout
    # -------------------------
    ordering = values.ordering_arbitrary()
    block_slices, manifold_types = build_manifold_metadata(values, ordering)
    print("\n=== Layout ===")
    for key in ordering:
        print(f"{key}: index {ordering[key]}, slice {block_slices[key]}, {manifold_types[key]}")

    # -------------------------
    # Retract along a flat step
    # -------------------------
    dims = values.dims(ordering)
    step = jnp.zeros(sum(dims))
    # Move every pose half a metre forward in its own frame
    for i in (1, 2, 3):
        sl = block_slices[pose_key(i).symbol]
        step = step.at[sl].set(jnp.array([0.5, 0.0, 0.0]))

    moved = values.retract(VectorValues.from_vector(step, dims), ordering)
    print("\n=== After retract ===")
    for i in (1, 2, 3):
        print(f"x{i}: {values.pose(i)} -> {moved.pose(i)}")

    # Local coordinates recover the step
    delta = values.local_coordinates(moved, ordering)
    print(f"\nmax |local - step| = {float(jnp.max(jnp.abs(delta.vector() - step))):.3e}")

    # -------------------------
    # Typed lookups
    # -------------------------
    print("\n=== Typed lookups ===")
    print(f"l2 = {values.at(point_key(2))}")
    try:
        values.at("x1", Point2)
    except DynamicValuesIncorrectType as err:
        print(f"IncorrectType: {err}")
    try:
        values.at(pose_key(9))
    except DynamicValuesKeyDoesNotExist as err:
        print(f"KeyDoesNotExist: {err}")


if __name__ == "__main__":
    main()
