from __future__ import annotations

import logging
from functools import lru_cache
from operator import itemgetter
from typing import Callable, Sequence

import numpy as np

from cubesolve.formula import Direction, FormulaConverter, Move, parse_moves
from cubesolve.models import FACE_ORDER, Face
from cubesolve.state import FACELET_COUNT, CubeState, FaceletTuple, slot_geometry, slot_index, solved_state

logger = logging.getLogger(__name__)

_NORMALS = {
    Face.U: (0, 1, 0),
    Face.D: (0, -1, 0),
    Face.R: (1, 0, 0),
    Face.L: (-1, 0, 0),
    Face.F: (0, 0, 1),
    Face.B: (0, 0, -1),
}

BASIC_MOVES: tuple[Move, ...] = tuple(
    Move(face=face, direction=direction)
    for face in FACE_ORDER
    for direction in (Direction.CW, Direction.CCW, Direction.HALF)
)

Permutation = tuple[int, ...]


def _quarter_turn_matrix(normal: Sequence[int]) -> np.ndarray:
    # Clockwise seen from outside the face: v' = n (n . v) - n x v
    n = np.array(normal, dtype=int)
    cross = np.array(
        [
            [0, -n[2], n[1]],
            [n[2], 0, -n[0]],
            [-n[1], n[0], 0],
        ],
        dtype=int,
    )
    return np.outer(n, n) - cross


def _vector(values: np.ndarray) -> tuple[int, int, int]:
    return (int(values[0]), int(values[1]), int(values[2]))


@lru_cache(maxsize=None)
def _quarter_turn_permutation(face: Face, wide: bool) -> Permutation:
    normal = np.array(_NORMALS[face], dtype=int)
    rotation = _quarter_turn_matrix(_NORMALS[face])
    threshold = 0 if wide else 1

    perm = list(range(FACELET_COUNT))
    for src, (position, facelet_normal) in enumerate(slot_geometry()):
        p = np.array(position, dtype=int)
        if int(p @ normal) < threshold:
            continue
        dest = slot_index(
            _vector(rotation @ p),
            _vector(rotation @ np.array(facelet_normal, dtype=int)),
        )
        perm[dest] = src
    return tuple(perm)


def _compose(first: Permutation, second: Permutation) -> Permutation:
    """Permutation equivalent to applying ``first`` then ``second``."""
    return tuple(first[i] for i in second)


@lru_cache(maxsize=None)
def move_permutation(move: Move) -> Permutation:
    quarter = _quarter_turn_permutation(move.face, move.wide)
    perm = quarter
    for _ in range(move.quarter_turns - 1):
        perm = _compose(perm, quarter)
    return perm


@lru_cache(maxsize=None)
def _move_getter(move: Move) -> Callable[[Sequence], tuple]:
    logger.debug("Compiled facelet permutation for %s", move.notation)
    return itemgetter(*move_permutation(move))


def apply_to_facelets(facelets: FaceletTuple, move: Move) -> FaceletTuple:
    return _move_getter(move)(facelets)


def _coerce_move(move: Move | str) -> Move:
    if isinstance(move, Move):
        return move
    return FormulaConverter.parse_move(move)


def apply_move(state: CubeState, move: Move | str) -> CubeState:
    return CubeState(apply_to_facelets(state.facelets, _coerce_move(move)))


def apply_sequence(state: CubeState, moves: str | Sequence[Move | str]) -> CubeState:
    if isinstance(moves, str):
        sequence: Sequence[Move | str] = parse_moves(moves)
    else:
        sequence = moves

    facelets = state.facelets
    for move in sequence:
        facelets = apply_to_facelets(facelets, _coerce_move(move))
    return CubeState(facelets)


def apply_sequence_to_facelets(facelets: FaceletTuple, moves: Sequence[Move]) -> FaceletTuple:
    for move in moves:
        facelets = _move_getter(move)(facelets)
    return facelets


def state_from_moves(moves: str | Sequence[Move | str], start: CubeState | None = None) -> CubeState:
    """Scrambled state reached by applying ``moves`` to ``start`` (solved by default)."""
    return apply_sequence(start or solved_state(), moves)
