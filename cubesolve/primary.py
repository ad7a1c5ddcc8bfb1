from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Callable

import kociemba

from cubesolve.context import SolveContext
from cubesolve.formula import FormulaSyntaxError, Move, normalize_external_notation
from cubesolve.models import Color
from cubesolve.state import CubeState

logger = logging.getLogger(__name__)

Backend = Callable[[str], str]

KOCIEMBA_LAYOUT = "URFDLB"
# Layered solvers in the rubiks-cube-solver family read F, R, U, D, L, B with lower-case letters.
LAYERED_LAYOUT = "FRUDLB"


def color_encoding(state: CubeState, lowercase: bool = False) -> dict[Color, str]:
    """Maps each centre colour to the letter of the face it sits on."""
    encoding: dict[Color, str] = {}
    for face, color in state.centers().items():
        if color is None:
            raise ValueError(f"Centre of face {face.value} is not set")
        if color in encoding:
            raise ValueError(f"Colour {color.display_name} is used by more than one centre")
        encoding[color] = face.value.lower() if lowercase else face.value
    return encoding


def encode_state(state: CubeState, layout: str = KOCIEMBA_LAYOUT) -> str:
    if not state.is_complete():
        raise ValueError("Cannot encode an incomplete cube state")
    lowercase = layout == LAYERED_LAYOUT
    return state.to_facelet_string(face_order=layout, encoding=color_encoding(state, lowercase=lowercase))


@dataclass
class PrimarySolver:
    """Delegates to an external two-phase or layered solver and translates its answer."""

    backend: Backend = kociemba.solve
    layout: str = KOCIEMBA_LAYOUT
    name: str = "primary"

    def attempt(self, state: CubeState, context: SolveContext) -> list[Move] | None:
        """The backend call blocks and cannot be interrupted; a stop is only seen before it starts."""
        try:
            facelets = encode_state(state, self.layout)
        except ValueError as exc:
            logger.warning("Primary solver skipped: %s", exc)
            return None

        logger.debug("Primary solver input: %s", facelets)
        if context.should_stop():
            return None
        try:
            raw = self.backend(facelets)
        except Exception as exc:  # backends signal unsolvable input with arbitrary exception types
            logger.warning("Primary solver failed: %s", exc)
            return None

        if not raw or not raw.strip():
            logger.debug("Primary solver returned an empty answer")
            return None

        try:
            moves = normalize_external_notation(raw)
        except FormulaSyntaxError as exc:
            logger.warning("Primary solver returned unreadable notation %r: %s", raw, exc)
            return None

        logger.debug("Primary solver proposed %d moves", len(moves))
        return moves
