from __future__ import annotations

import pytest

from cubesolve.config import SolverConfig


def test_defaults() -> None:
    config = SolverConfig()
    assert config.timeout == 30.0
    assert config.use_primary
    assert config.max_depth == 10
    assert config.seed is None
    assert config.validate


def test_from_env_reads_overrides() -> None:
    config = SolverConfig.from_env(
        {
            "CUBESOLVE_TIMEOUT": " 2.5 ",
            "CUBESOLVE_MAX_DEPTH": "6",
            "CUBESOLVE_MAX_NODES": "1000",
            "CUBESOLVE_SEED": "11",
            "CUBESOLVE_USE_PRIMARY": "off",
        }
    )
    assert config.timeout == 2.5
    assert config.max_depth == 6
    assert config.max_nodes == 1000
    assert config.seed == 11
    assert config.use_primary is False


def test_from_env_ignores_blank_values() -> None:
    assert SolverConfig.from_env({"CUBESOLVE_TIMEOUT": "   ", "CUBESOLVE_USE_PRIMARY": ""}) == SolverConfig()


@pytest.mark.parametrize(
    ("name", "value", "message"),
    [
        ("CUBESOLVE_TIMEOUT", "soon", "must be a float"),
        ("CUBESOLVE_MAX_DEPTH", "deep", "must be an integer"),
        ("CUBESOLVE_USE_PRIMARY", "maybe", "must be a boolean"),
    ],
)
def test_from_env_rejects_malformed_values(name: str, value: str, message: str) -> None:
    with pytest.raises(ValueError, match=message):
        SolverConfig.from_env({name: value})


def test_out_of_range_values_fail() -> None:
    with pytest.raises(ValueError):
        SolverConfig(timeout=0)
    with pytest.raises(ValueError):
        SolverConfig(max_depth=0)
    with pytest.raises(ValueError):
        SolverConfig(greedy_ratio=1.5)
    with pytest.raises(ValueError):
        SolverConfig.from_env({"CUBESOLVE_TIMEOUT": "-1"})


def test_with_overrides_skips_none() -> None:
    config = SolverConfig().with_overrides(timeout=None, max_depth=4, use_primary=False)
    assert config.timeout == 30.0
    assert config.max_depth == 4
    assert not config.use_primary
