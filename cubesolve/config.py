from __future__ import annotations

import os
from dataclasses import dataclass, replace
from typing import Mapping

ENV_TIMEOUT = "CUBESOLVE_TIMEOUT"
ENV_MAX_DEPTH = "CUBESOLVE_MAX_DEPTH"
ENV_MAX_NODES = "CUBESOLVE_MAX_NODES"
ENV_SEED = "CUBESOLVE_SEED"
ENV_USE_PRIMARY = "CUBESOLVE_USE_PRIMARY"

_TRUE_VALUES = {"1", "true", "yes", "on"}
_FALSE_VALUES = {"0", "false", "no", "off"}


@dataclass(frozen=True)
class SolverConfig:
    timeout: float = 30.0
    use_primary: bool = True
    max_depth: int = 10
    max_nodes: int = 2_000_000
    hill_climb_iterations: int = 300
    stagnation_limit: int = 3
    stuck_limit: int = 50
    restarts: int = 10
    restart_steps: int = 50
    greedy_ratio: float = 0.7
    seed: int | None = None
    yield_every: int = 2048
    validate: bool = True

    def __post_init__(self) -> None:
        if self.timeout <= 0:
            raise ValueError("timeout must be > 0")
        if self.max_depth < 1:
            raise ValueError("max_depth must be >= 1")
        if self.max_nodes < 1:
            raise ValueError("max_nodes must be >= 1")
        if self.hill_climb_iterations < 0 or self.restarts < 0 or self.restart_steps < 0:
            raise ValueError("iteration budgets must be >= 0")
        if not 0.0 <= self.greedy_ratio <= 1.0:
            raise ValueError("greedy_ratio must be within [0, 1]")
        if self.yield_every < 1:
            raise ValueError("yield_every must be >= 1")

    def with_overrides(self, **changes: object) -> "SolverConfig":
        cleaned = {key: value for key, value in changes.items() if value is not None}
        return replace(self, **cleaned)

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> "SolverConfig":
        env = os.environ if environ is None else environ
        changes: dict[str, object] = {}

        raw_timeout = env.get(ENV_TIMEOUT, "").strip()
        if raw_timeout:
            changes["timeout"] = _parse_number(ENV_TIMEOUT, raw_timeout, float)

        raw_depth = env.get(ENV_MAX_DEPTH, "").strip()
        if raw_depth:
            changes["max_depth"] = _parse_number(ENV_MAX_DEPTH, raw_depth, int)

        raw_nodes = env.get(ENV_MAX_NODES, "").strip()
        if raw_nodes:
            changes["max_nodes"] = _parse_number(ENV_MAX_NODES, raw_nodes, int)

        raw_seed = env.get(ENV_SEED, "").strip()
        if raw_seed:
            changes["seed"] = _parse_number(ENV_SEED, raw_seed, int)

        raw_primary = env.get(ENV_USE_PRIMARY, "").strip().lower()
        if raw_primary:
            if raw_primary in _TRUE_VALUES:
                changes["use_primary"] = True
            elif raw_primary in _FALSE_VALUES:
                changes["use_primary"] = False
            else:
                raise ValueError(f"Environment variable {ENV_USE_PRIMARY} must be a boolean")

        return cls(**changes)


def _parse_number(name: str, raw: str, kind: type) -> object:
    try:
        return kind(raw)
    except ValueError as exc:
        kind_name = "a float" if kind is float else "an integer"
        raise ValueError(f"Environment variable {name} must be {kind_name}") from exc
