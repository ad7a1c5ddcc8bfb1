from __future__ import annotations

import re

from cubesolve.models import Face
from cubesolve.state import CubeState

_PLAIN_CHUNK = re.compile(r"[^\s(]+")
# Group repeat suffix stays with its group: (...)2 or (...)^3
_GROUP_SUFFIX = re.compile(r"\^\d+|\d*")


def normalize_formula_text(formula: str) -> str:
    return " ".join(formula.split())


def _group_end(text: str, start: int) -> int:
    depth = 0
    for index in range(start, len(text)):
        if text[index] == "(":
            depth += 1
        elif text[index] == ")":
            depth -= 1
            if depth == 0:
                return _GROUP_SUFFIX.match(text, index + 1).end()
    return len(text)


def formula_display_chunks(formula: str) -> list[str]:
    """Display units of a formula: single moves and whole ``(...)n`` groups."""
    text = normalize_formula_text(formula)
    chunks: list[str] = []
    index = 0
    while index < len(text):
        if text[index] == " ":
            index += 1
            continue
        if text[index] == "(":
            end = _group_end(text, index)
        else:
            end = _PLAIN_CHUNK.match(text, index).end()
        chunks.append(text[index:end])
        index = end
    return chunks


def wrap_notation(notation: str, max_chars_per_line: int = 54) -> list[str]:
    """Splits a move string into lines without breaking a move or a group."""
    if max_chars_per_line < 1:
        raise ValueError("max_chars_per_line must be >= 1")

    lines: list[str] = []
    current = ""
    for chunk in formula_display_chunks(notation):
        candidate = chunk if not current else f"{current} {chunk}"
        if len(candidate) <= max_chars_per_line or not current:
            current = candidate
            continue
        lines.append(current)
        current = chunk

    if current:
        lines.append(current)
    return lines


def render_net(state: CubeState, unset: str = ".") -> str:
    """Text net with U on top, L F R B across the middle and D at the bottom."""

    def row(face: Face, r: int) -> str:
        colors = state.face(face)[r * 3 : r * 3 + 3]
        return "".join(color.value if color is not None else unset for color in colors)

    pad = " " * 4
    lines = [f"{pad}{row(Face.U, r)}" for r in range(3)]
    lines.extend(
        " ".join(row(face, r) for face in (Face.L, Face.F, Face.R, Face.B)) for r in range(3)
    )
    lines.extend(f"{pad}{row(Face.D, r)}" for r in range(3))
    return "\n".join(lines)
