import logging

from cubesolve.config import SolverConfig
from cubesolve.context import SolveContext, SolveStatus
from cubesolve.diagnostics import (
    AutoFixReport,
    AutoFixResult,
    CubeError,
    ValidationResult,
    auto_fix,
    auto_fix_all,
    validate_cube,
)
from cubesolve.formula import (
    Direction,
    FormulaConverter,
    FormulaSyntaxError,
    Move,
    normalize_external_notation,
    simplify_moves,
)
from cubesolve.models import AlgorithmPreset, Color, Face, FaceletPosition
from cubesolve.moves import BASIC_MOVES, apply_move, apply_sequence, state_from_moves
from cubesolve.parity import check_parity, is_solvable, validate
from cubesolve.presets import get_preset, list_preset_names
from cubesolve.solver import InvalidCubeStateError, Solution, SolveHandle, Solver, solve
from cubesolve.state import CubeState, solved_state
from cubesolve.validator import Violation, ViolationKind, validate_structure

logging.getLogger(__name__).addHandler(logging.NullHandler())

__all__ = [
    "AlgorithmPreset",
    "AutoFixReport",
    "AutoFixResult",
    "BASIC_MOVES",
    "Color",
    "CubeError",
    "CubeState",
    "Direction",
    "Face",
    "FaceletPosition",
    "FormulaConverter",
    "FormulaSyntaxError",
    "InvalidCubeStateError",
    "Move",
    "Solution",
    "SolveContext",
    "SolveHandle",
    "SolveStatus",
    "Solver",
    "SolverConfig",
    "ValidationResult",
    "Violation",
    "ViolationKind",
    "apply_move",
    "apply_sequence",
    "auto_fix",
    "auto_fix_all",
    "check_parity",
    "get_preset",
    "is_solvable",
    "list_preset_names",
    "normalize_external_notation",
    "simplify_moves",
    "solve",
    "solved_state",
    "state_from_moves",
    "validate",
    "validate_cube",
    "validate_structure",
]
