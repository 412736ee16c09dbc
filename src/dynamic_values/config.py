# Copyright (c) 2025.
# This file is part of dynamic-values, released under the MIT License.
"""
Process-wide configuration for dynamic-values.

The settings live in a small dataclass, in the same spirit as the solver
configs used elsewhere in the stack (plain fields with defaults, passed
around explicitly). A module-level instance is created at import time from
environment variables and can be replaced with :func:`set_config`.

Fields
------
enable_x64
    Turn on JAX double precision. The geometry types and the default
    ``1e-9`` equality tolerances assume float64 arithmetic.

pooling
    Recycle value adapters through per-type pools (see
    :mod:`dynamic_values.core.value`). Disabling it makes every clone a
    fresh allocation, which is mostly useful for benchmarking.

pool_capacity
    Maximum number of released adapters kept per concrete value type.

Environment variables
---------------------
    DYNAMIC_VALUES_ENABLE_X64      "1"/"0"  (default "1")
    DYNAMIC_VALUES_POOLING         "1"/"0"  (default "1")
    DYNAMIC_VALUES_POOL_CAPACITY   integer  (default 4096)
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass, replace
from typing import Mapping, Optional

import jax

logger = logging.getLogger(__name__)

_TRUE = {"1", "true", "yes", "on"}
_FALSE = {"0", "false", "no", "off"}


@dataclass(frozen=True)
class ValuesConfig:
    enable_x64: bool = True
    pooling: bool = True
    pool_capacity: int = 4096

    def __post_init__(self) -> None:
        if self.pool_capacity < 0:
            raise ValueError(f"pool_capacity must be >= 0, got {self.pool_capacity}")


def _parse_bool(environ: Mapping[str, str], name: str, default: bool) -> bool:
    raw = environ.get(name)
    if raw is None:
        return default
    value = raw.strip().lower()
    if value in _TRUE:
        return True
    if value in _FALSE:
        return False
    logger.warning("Ignoring %s=%r: expected a boolean, using %s", name, raw, default)
    return default


def _parse_int(environ: Mapping[str, str], name: str, default: int) -> int:
    raw = environ.get(name)
    if raw is None:
        return default
    try:
        value = int(raw)
    except ValueError:
        logger.warning("Ignoring %s=%r: expected an integer, using %d", name, raw, default)
        return default
    if value < 0:
        logger.warning("Ignoring %s=%r: must be >= 0, using %d", name, raw, default)
        return default
    return value


def load_config_from_env(environ: Optional[Mapping[str, str]] = None) -> ValuesConfig:
    """Build a :class:`ValuesConfig` from ``DYNAMIC_VALUES_*`` variables."""
    if environ is None:
        environ = os.environ
    defaults = ValuesConfig()
    return ValuesConfig(
        enable_x64=_parse_bool(environ, "DYNAMIC_VALUES_ENABLE_X64", defaults.enable_x64),
        pooling=_parse_bool(environ, "DYNAMIC_VALUES_POOLING", defaults.pooling),
        pool_capacity=_parse_int(environ, "DYNAMIC_VALUES_POOL_CAPACITY", defaults.pool_capacity),
    )


def _apply(cfg: ValuesConfig) -> None:
    # x64 is only ever switched on, never back off.
    if cfg.enable_x64:
        jax.config.update("jax_enable_x64", True)


_CONFIG: ValuesConfig = load_config_from_env()
_apply(_CONFIG)


def get_config() -> ValuesConfig:
    return _CONFIG


def set_config(cfg: Optional[ValuesConfig] = None, **overrides) -> ValuesConfig:
    """
    Replace the active configuration.

    Either pass a full :class:`ValuesConfig` or keyword overrides applied to
    the current one. Returns the previous configuration so callers (tests,
    benchmarks) can restore it.
    """
    global _CONFIG
    previous = _CONFIG
    new_cfg = cfg if cfg is not None else previous
    if overrides:
        new_cfg = replace(new_cfg, **overrides)
    _CONFIG = new_cfg
    _apply(new_cfg)
    logger.debug("dynamic-values config set to %s", new_cfg)
    return previous
