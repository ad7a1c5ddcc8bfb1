#!/usr/bin/env python3
from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import Sequence

REPO_ROOT = Path(__file__).resolve().parents[1]
if str(REPO_ROOT) not in sys.path:
    sys.path.insert(0, str(REPO_ROOT))

from pydantic import ValidationError

from cubesolve.config import SolverConfig
from cubesolve.diagnostics import auto_fix_all, validate_cube
from cubesolve.moves import state_from_moves
from cubesolve.presets import get_preset
from cubesolve.schemas import CubeStatePayload, SolutionPayload, ValidationPayload
from cubesolve.solver import Solver
from cubesolve.state import CubeState
from cubesolve.utils import normalize_formula_text, render_net, wrap_notation

EXIT_SOLVED = 0
EXIT_INVALID = 1
EXIT_INCOMPLETE = 2


def parse_args(argv: Sequence[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Validate a cube state and print a move sequence that solves it."
    )

    source_group = parser.add_mutually_exclusive_group(required=True)
    source_group.add_argument("--state", help="JSON file with faces U R F D L B, 9 colour symbols each")
    source_group.add_argument("--facelets", help="54-character facelet string in URFDLB order")
    source_group.add_argument("--scramble", help="Formula applied to a solved cube (e.g. \"R U R' U'\")")
    source_group.add_argument("--preset", help="Named algorithm applied to a solved cube (e.g. T-Perm)")

    parser.add_argument("--auto-fix", action="store_true", help="Repair colour-entry mistakes before solving")
    parser.add_argument("--validate-only", action="store_true", help="Print diagnostics and stop")
    parser.add_argument("--timeout", type=float, help="Overall solve budget in seconds")
    parser.add_argument("--max-depth", type=int, help="Depth limit of the bounded search")
    parser.add_argument("--seed", type=int, help="Seed for the heuristic fallbacks")
    parser.add_argument("--no-primary", action="store_true", help="Skip the external two-phase solver")
    parser.add_argument("--json", action="store_true", help="Print machine-readable JSON")
    parser.add_argument("-v", "--verbose", action="count", default=0, help="Increase log verbosity")

    return parser.parse_args(argv)


def _load_state(args: argparse.Namespace) -> CubeState:
    if args.state:
        raw = json.loads(Path(args.state).read_text(encoding="utf-8"))
        return CubeStatePayload.model_validate(raw).to_state()
    if args.facelets:
        return CubeState.from_facelet_string(args.facelets.strip())
    if args.preset:
        preset = get_preset(args.preset)
        return state_from_moves(f"({preset.formula}){preset.repeat}")
    return state_from_moves(normalize_formula_text(args.scramble))


def _configure_logging(verbosity: int) -> None:
    level = logging.WARNING
    if verbosity == 1:
        level = logging.INFO
    elif verbosity > 1:
        level = logging.DEBUG
    logging.basicConfig(level=level, format="%(levelname)s %(name)s: %(message)s")


def main(argv: Sequence[str] | None = None) -> int:
    args = parse_args(argv)
    _configure_logging(args.verbose)

    try:
        state = _load_state(args)
    except (OSError, ValueError, KeyError, ValidationError) as exc:
        print(f"Could not read cube state: {exc}", file=sys.stderr)
        return EXIT_INVALID

    if args.auto_fix:
        report = auto_fix_all(state)
        for description in report.descriptions:
            print(f"auto-fix: {description}")
        state = report.state

    result = validate_cube(state)
    if args.json and (args.validate_only or not result.is_valid):
        print(ValidationPayload.from_result(result).model_dump_json(indent=2))
    elif not args.json:
        print(render_net(state))
        print(f"\nValidation: {result.progress_percent}% ({len(result.errors)} issue(s))")
        for error in result.errors:
            print(f"  [{error.severity.value}] {error.title}: {error.message}")

    if not result.is_valid:
        return EXIT_INVALID
    if args.validate_only:
        return EXIT_SOLVED

    config = SolverConfig.from_env().with_overrides(
        timeout=args.timeout,
        max_depth=args.max_depth,
        seed=args.seed,
        use_primary=False if args.no_primary else None,
    )
    with Solver(config) as solver:
        solution = solver.solve(state, validate_input=False)

    if args.json:
        print(SolutionPayload.from_solution(solution).model_dump_json(indent=2))
    else:
        print(f"\nStatus: {solution.status.value} via {solution.strategy or '-'} in {solution.elapsed:.2f}s")
        print(f"Moves ({solution.total_moves}):")
        for line in wrap_notation(solution.notation):
            print(f"  {line}")

    return EXIT_SOLVED if solution.is_complete else EXIT_INCOMPLETE


if __name__ == "__main__":
    raise SystemExit(main())
