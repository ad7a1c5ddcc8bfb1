from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, Mapping

from cubesolve.models import DEFAULT_SCHEME, FACE_ORDER, OPPOSITE_FACES, Color, Face, FaceletPosition
from cubesolve.state import CubeState


def _pos(name: str) -> FaceletPosition:
    return FaceletPosition(face=Face(name[0]), index=int(name[1]))


@dataclass(frozen=True)
class PieceSlot:
    """A physical edge or corner location; the first facelet is the reference one."""

    name: str
    positions: tuple[FaceletPosition, ...]

    @property
    def kind(self) -> str:
        return "edge" if len(self.positions) == 2 else "corner"

    @property
    def faces(self) -> tuple[Face, ...]:
        return tuple(position.face for position in self.positions)

    def read(self, state: CubeState) -> tuple[Color | None, ...]:
        return tuple(state.at(position) for position in self.positions)


EDGE_SLOTS: tuple[PieceSlot, ...] = tuple(
    PieceSlot(name=name, positions=tuple(_pos(p) for p in positions))
    for name, positions in (
        ("UF", ("U7", "F1")),
        ("UR", ("U5", "R1")),
        ("UB", ("U1", "B1")),
        ("UL", ("U3", "L1")),
        ("FR", ("F5", "R3")),
        ("FL", ("F3", "L5")),
        ("BR", ("B3", "R5")),
        ("BL", ("B5", "L3")),
        ("DF", ("D1", "F7")),
        ("DR", ("D5", "R7")),
        ("DB", ("D7", "B7")),
        ("DL", ("D3", "L7")),
    )
)

# Facelets listed clockwise around each corner, starting from the U/D facelet.
CORNER_SLOTS: tuple[PieceSlot, ...] = tuple(
    PieceSlot(name=name, positions=tuple(_pos(p) for p in positions))
    for name, positions in (
        ("URF", ("U8", "R0", "F2")),
        ("UFL", ("U6", "F0", "L2")),
        ("ULB", ("U0", "L0", "B2")),
        ("UBR", ("U2", "B0", "R2")),
        ("DFR", ("D2", "F8", "R6")),
        ("DLF", ("D0", "L8", "F6")),
        ("DBL", ("D6", "B8", "L6")),
        ("DRB", ("D8", "R8", "B6")),
    )
)

ALL_SLOTS: tuple[PieceSlot, ...] = EDGE_SLOTS + CORNER_SLOTS

_SLOTS_BY_NAME = {slot.name: slot for slot in ALL_SLOTS}


def get_slot(name: str) -> PieceSlot:
    key = name.strip().upper()
    if key not in _SLOTS_BY_NAME:
        raise KeyError(f"Unknown piece slot '{name}'")
    return _SLOTS_BY_NAME[key]


def slots_containing(position: FaceletPosition) -> list[PieceSlot]:
    return [slot for slot in ALL_SLOTS if position in slot.positions]


OPPOSITE_COLORS: dict[Color, Color] = {
    DEFAULT_SCHEME[face]: DEFAULT_SCHEME[other] for face, other in OPPOSITE_FACES.items()
}


def is_legal_scheme(centers: Mapping[Face, Color | None]) -> bool:
    colors = [centers.get(face) for face in FACE_ORDER]
    if any(color is None for color in colors) or len(set(colors)) != len(colors):
        return False
    return all(OPPOSITE_COLORS[centers[face]] == centers[other] for face, other in OPPOSITE_FACES.items())


def reference_scheme(centers: Mapping[Face, Color | None]) -> dict[Face, Color]:
    """The centre colours when they form a legal scheme, the default scheme otherwise."""
    if is_legal_scheme(centers):
        return {face: centers[face] for face in FACE_ORDER}
    return dict(DEFAULT_SCHEME)


def solved_pieces(
    slots: Iterable[PieceSlot],
    centers: Mapping[Face, Color | None],
) -> dict[frozenset[Color], int]:
    """Maps the colour set of each solved piece to its home slot number."""
    pieces: dict[frozenset[Color], int] = {}
    for number, slot in enumerate(slots):
        colors = [centers.get(face) for face in slot.faces]
        if any(color is None for color in colors):
            continue
        pieces[frozenset(colors)] = number
    return pieces
