from __future__ import annotations

import time

import pytest

from cubesolve.config import SolverConfig
from cubesolve.context import SolveContext, SolveStatus
from cubesolve.diagnostics import validate_cube
from cubesolve.formula import FormulaConverter
from cubesolve.models import Color, Face, FaceletPosition
from cubesolve.moves import state_from_moves
from cubesolve.solver import InvalidCubeStateError, Solver, solve
from cubesolve.state import empty_state, solved_state

OFFLINE = SolverConfig(use_primary=False)


def _flipped_edge():
    return solved_state().with_facelets(
        {FaceletPosition(Face.U, 7): Color.GREEN, FaceletPosition(Face.F, 1): Color.WHITE}
    )


def test_solved_input_returns_empty_solution() -> None:
    solution = Solver(OFFLINE).solve(solved_state())
    assert solution.status is SolveStatus.ALREADY_SOLVED
    assert solution.moves == ()
    assert solution.is_complete
    assert solution.notation == ""


def test_short_scramble_is_solved_by_search() -> None:
    state = state_from_moves("R U")
    solution = Solver(OFFLINE).solve(state)
    assert solution.status is SolveStatus.SOLVED
    assert solution.strategy == "ida*"
    assert solution.total_moves <= 2
    assert solution.solves(state)
    assert solution.notation == "U' R'"


def test_primary_backend_answer_is_translated_and_verified() -> None:
    seen: list[str] = []

    def backend(facelets: str) -> str:
        seen.append(facelets)
        return "U' R'"

    state = state_from_moves("R U")
    solution = Solver(SolverConfig(), backend=backend).solve(state)
    assert solution.strategy == "primary"
    assert solution.notation == "U' R'"
    assert len(seen) == 1
    assert len(seen[0]) == 54
    assert set(seen[0]) <= set("URFDLB")


def test_failing_backend_falls_back_to_search() -> None:
    def backend(facelets: str) -> str:
        raise ValueError("Error: no solution")

    solution = Solver(SolverConfig(), backend=backend).solve(state_from_moves("F"))
    assert solution.status is SolveStatus.SOLVED
    assert solution.strategy == "ida*"
    assert solution.notation == "F'"


def test_wrong_backend_answer_is_rejected_by_replay() -> None:
    solution = Solver(SolverConfig(), backend=lambda facelets: "D2").solve(state_from_moves("R"))
    assert solution.strategy == "ida*"
    assert solution.notation == "R'"


def test_winning_answer_is_simplified() -> None:
    solution = Solver(SolverConfig(), backend=lambda facelets: "U U U R R R").solve(state_from_moves("R U"))
    assert solution.strategy == "primary"
    assert solution.notation == "U' R'"


def test_invalid_state_is_rejected_before_search() -> None:
    with pytest.raises(InvalidCubeStateError) as exc_info:
        Solver(OFFLINE).solve(_flipped_edge())
    assert exc_info.value.violations
    assert isinstance(exc_info.value, ValueError)

    with pytest.raises(InvalidCubeStateError):
        Solver(OFFLINE).solve(empty_state())


def test_swapped_centres_are_rejected_before_search() -> None:
    state = solved_state().with_facelets(
        {FaceletPosition(Face.U, 4): Color.RED, FaceletPosition(Face.R, 4): Color.WHITE}
    )
    assert not validate_cube(state).is_valid
    with pytest.raises(InvalidCubeStateError) as exc_info:
        Solver(OFFLINE).solve(state)
    assert exc_info.value.reason == "centre colors do not form a legal color scheme"
    assert "legal color scheme" in str(exc_info.value)


def test_unsolvable_state_without_validation_returns_incomplete() -> None:
    config = SolverConfig(
        use_primary=False,
        max_depth=3,
        hill_climb_iterations=5,
        restarts=1,
        restart_steps=5,
        seed=3,
    )
    solution = Solver(config).solve(_flipped_edge(), validate_input=False)
    assert solution.status is SolveStatus.INCOMPLETE
    assert not solution.is_complete
    assert solution.strategy in ("hill-climb", "random-restart")


def test_cancelled_context_stops_the_chain() -> None:
    context = SolveContext()
    context.cancel()
    solution = Solver(OFFLINE).solve(state_from_moves("R U F"), context=context)
    assert solution.status is SolveStatus.CANCELLED
    assert solution.moves == ()


def test_expired_deadline_reports_timeout() -> None:
    context = SolveContext(deadline=time.monotonic() - 1.0)
    solution = Solver(OFFLINE).solve(state_from_moves("R U F"), context=context)
    assert solution.status is SolveStatus.TIMED_OUT


def test_submit_runs_in_background_and_reports_progress() -> None:
    stages: list[tuple[str, float]] = []
    with Solver(OFFLINE) as solver:
        handle = solver.submit(
            state_from_moves("R U'"),
            progress=lambda stage, fraction: stages.append((stage, fraction)),
        )
        solution = handle.result(timeout=30)
        assert handle.done()
    assert solution.status is SolveStatus.SOLVED
    assert stages
    assert all(0.0 <= fraction <= 1.0 for _, fraction in stages)


def test_module_level_solve_accepts_overrides() -> None:
    state = state_from_moves("B'")
    solution = solve(state, use_primary=False)
    assert solution.notation == "B"
    assert solution.solves(state)


def test_solution_as_dict() -> None:
    solution = Solver(OFFLINE).solve(state_from_moves("R'"))
    payload = solution.as_dict()
    assert payload["status"] == "solved"
    assert payload["notation"] == "R"
    assert payload["total_moves"] == 1
    assert payload["moves"][0]["description"] == "Turn R face clockwise 90°"


def test_real_two_phase_solver_handles_deep_scramble() -> None:
    pytest.importorskip("kociemba")
    state = state_from_moves("R U' F2 D L' B2 U F R2 D' B L U2 F' R D2 B' L2 U R'")
    solution = Solver(SolverConfig(timeout=60.0)).solve(state)
    assert solution.status is SolveStatus.SOLVED
    assert solution.strategy == "primary"
    assert solution.solves(state)
    assert solution.total_moves == len(FormulaConverter.convert(solution.notation))
