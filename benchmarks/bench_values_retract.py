# Copyright (c) 2025.
# This file is part of dynamic-values, released under the MIT License.

import time

import numpy as np
import jax.numpy as jnp

from dynamic_values.config import set_config
from dynamic_values.core.types import Symbol
from dynamic_values.core.value import clear_pools, pool_stats
from dynamic_values.geometry.point3 import Point3
from dynamic_values.geometry.pose3 import Pose3
from dynamic_values.geometry.rot3 import Rot3
from dynamic_values.linear.vector_values import VectorValues
from dynamic_values.nonlinear.dynamic_values import DynamicValues


def build_trajectory_values(num_poses: int = 100) -> DynamicValues:
    """
    Pose3 trajectory along +x with one Point3 landmark per pose:

        x0 -> x1 -> ... -> x_{N-1}
        l_i ~ 1m above x_i

    Mixed types so each retract goes through two different value pools.
    """
    values = DynamicValues()
    for i in range(num_poses):
        pose = Pose3(Rot3.rz(0.05 * i), Point3(float(i), 0.1 * np.sin(0.3 * i), 0.0))
        values.insert(Symbol("x", i), pose)
        values.insert(Symbol("l", i), Point3(float(i), 0.0, 1.0))
    return values


def run_benchmark(num_poses: int = 100, num_iters: int = 10, pooling: bool = True):
    print("=== DynamicValues retract / local_coordinates benchmark ===")
    print(f"num_poses = {num_poses}, num_iters = {num_iters}, pooling = {pooling}")

    previous = set_config(pooling=pooling)
    clear_pools()
    try:
        values = build_trajectory_values(num_poses)
        ordering = values.ordering_arbitrary()
        dims = values.dims(ordering)

        rng = np.random.default_rng(0)
        step = VectorValues.from_vector(jnp.asarray(0.01 * rng.standard_normal(sum(dims))), dims)

        # Warmup (jax dispatch caches)
        values.retract(step, ordering)

        t0 = time.time()
        current = values
        for _ in range(num_iters):
            current = current.retract(step, ordering)
        t1 = time.time()
        delta = values.local_coordinates(current, ordering)
        t2 = time.time()

        retract_ms = (t1 - t0) * 1000.0 / num_iters
        local_ms = (t2 - t1) * 1000.0
        print(f"retract:           {retract_ms:.3f} ms / iter")
        print(f"local_coordinates: {local_ms:.3f} ms")

        # Repeated steps along one twist compose exactly, so this stays near zero
        drift = float(jnp.max(jnp.abs(delta.vector() - num_iters * step.vector())))
        print(f"max |delta - N*step|: {drift:.3e}")

        for name, stats in sorted(pool_stats().items()):
            print(f"pool {name:8s} created={stats.created} reused={stats.reused} free={stats.free}")
    finally:
        set_config(previous)


if __name__ == "__main__":
    # Example:
    #   PYTHONPATH=src python3 benchmarks/bench_values_retract.py
    run_benchmark(num_poses=100, num_iters=10, pooling=True)
    run_benchmark(num_poses=100, num_iters=10, pooling=False)
