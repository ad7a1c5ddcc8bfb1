from __future__ import annotations

from dataclasses import dataclass
from functools import lru_cache
from typing import Iterable, Mapping, Sequence

import numpy as np

from cubesolve.models import ALL_COLORS, DEFAULT_SCHEME, FACE_ORDER, Color, Face, FaceletPosition

FACELET_COUNT = 54
FACE_SIZE = 9
CENTER_INDEX = 4

_FACE_OFFSETS = {face: i * FACE_SIZE for i, face in enumerate(FACE_ORDER)}
_UNSET_CHARS = {"X", ".", "-", "?"}

# Outward normal, then the "right" and "down" reading directions of each face.
# U is read with B on top, D with F on top, the side faces with U on top.
_FACE_FRAMES = {
    Face.U: ((0, 1, 0), (1, 0, 0), (0, 0, 1)),
    Face.R: ((1, 0, 0), (0, 0, -1), (0, -1, 0)),
    Face.F: ((0, 0, 1), (1, 0, 0), (0, -1, 0)),
    Face.D: ((0, -1, 0), (1, 0, 0), (0, 0, -1)),
    Face.L: ((-1, 0, 0), (0, 0, 1), (0, -1, 0)),
    Face.B: ((0, 0, -1), (-1, 0, 0), (0, -1, 0)),
}

Vector = tuple[int, int, int]
FaceletTuple = tuple[Color | None, ...]


@lru_cache(maxsize=1)
def _slot_geometry() -> tuple[tuple[Vector, Vector], ...]:
    rows, cols = np.indices((3, 3))
    slots: list[tuple[Vector, Vector]] = []
    for face in FACE_ORDER:
        normal, right, down = (np.array(v, dtype=int) for v in _FACE_FRAMES[face])
        positions = (
            normal[None, None, :]
            + right[None, None, :] * (cols - 1)[:, :, None]
            + down[None, None, :] * (rows - 1)[:, :, None]
        )
        normal_key = tuple(int(v) for v in normal)
        for position in positions.reshape(FACE_SIZE, 3):
            slots.append((tuple(int(v) for v in position), normal_key))
    return tuple(slots)


@lru_cache(maxsize=1)
def _slot_lookup() -> dict[tuple[Vector, Vector], int]:
    return {slot: index for index, slot in enumerate(_slot_geometry())}


def state_slots_metadata() -> list[tuple[Vector, Face]]:
    """Returns (3-D position, face) for each of the 54 facelet slots, in state order."""
    return [(slot[0], index_to_position(index).face) for index, slot in enumerate(_slot_geometry())]


def slot_geometry() -> tuple[tuple[Vector, Vector], ...]:
    return _slot_geometry()


def slot_index(position: Vector, normal: Vector) -> int:
    try:
        return _slot_lookup()[(position, normal)]
    except KeyError:
        raise ValueError(f"No facelet at position={position} normal={normal}") from None


def position_index(position: FaceletPosition) -> int:
    return _FACE_OFFSETS[position.face] + position.index


def index_to_position(index: int) -> FaceletPosition:
    if not 0 <= index < FACELET_COUNT:
        raise ValueError(f"Facelet index must be in 0..53, got {index}")
    return FaceletPosition(face=FACE_ORDER[index // FACE_SIZE], index=index % FACE_SIZE)


def _coerce_color(value: object) -> Color | None:
    if value is None or isinstance(value, Color):
        return value
    if isinstance(value, str):
        text = value.strip().upper()
        if not text or text in _UNSET_CHARS:
            return None
        return Color(text)
    raise ValueError(f"Unsupported facelet value: {value!r}")


@dataclass(frozen=True)
class CubeState:
    """Immutable 54-facelet cube, faces in URFDLB order, each face row-major."""

    facelets: FaceletTuple

    def __post_init__(self) -> None:
        if len(self.facelets) != FACELET_COUNT:
            raise ValueError(f"State must contain exactly 54 facelets, got {len(self.facelets)}")

    @classmethod
    def from_faces(cls, faces: Mapping[Face | str, Sequence[object]]) -> "CubeState":
        by_face = {Face(key): values for key, values in faces.items()}
        missing = [face.value for face in FACE_ORDER if face not in by_face]
        if missing:
            raise ValueError(f"State is missing faces: {', '.join(missing)}")

        facelets: list[Color | None] = []
        for face in FACE_ORDER:
            values = list(by_face[face])
            if len(values) != FACE_SIZE:
                raise ValueError(f"Face {face.value} must have 9 facelets, got {len(values)}")
            facelets.extend(_coerce_color(value) for value in values)
        return cls(tuple(facelets))

    @classmethod
    def from_facelet_string(
        cls,
        text: str,
        face_order: str = "URFDLB",
        decoding: Mapping[str, Color] | None = None,
    ) -> "CubeState":
        if len(text) != FACELET_COUNT:
            raise ValueError(f"Facelet string must contain exactly 54 characters, got {len(text)}")

        by_face: dict[Face, list[Color | None]] = {}
        for block, letter in enumerate(face_order):
            chunk = text[block * FACE_SIZE : (block + 1) * FACE_SIZE]
            if decoding is None:
                by_face[Face(letter)] = [_coerce_color(char) for char in chunk]
            else:
                by_face[Face(letter)] = [None if char in _UNSET_CHARS else decoding[char] for char in chunk]
        return cls.from_faces(by_face)

    def to_faces(self) -> dict[Face, list[Color | None]]:
        return {face: list(self.face(face)) for face in FACE_ORDER}

    def to_facelet_string(
        self,
        face_order: str = "URFDLB",
        encoding: Mapping[Color, str] | None = None,
        unset: str = "X",
    ) -> str:
        chars: list[str] = []
        for letter in face_order:
            for color in self.face(Face(letter)):
                if color is None:
                    chars.append(unset)
                elif encoding is None:
                    chars.append(color.value)
                else:
                    chars.append(encoding[color])
        return "".join(chars)

    def face(self, face: Face | str) -> FaceletTuple:
        offset = _FACE_OFFSETS[Face(face)]
        return self.facelets[offset : offset + FACE_SIZE]

    def at(self, position: FaceletPosition) -> Color | None:
        return self.facelets[position_index(position)]

    def with_facelet(self, position: FaceletPosition, color: Color | None) -> "CubeState":
        return self.with_facelets({position: color})

    def with_facelets(self, changes: Mapping[FaceletPosition, Color | None]) -> "CubeState":
        facelets = list(self.facelets)
        for position, color in changes.items():
            facelets[position_index(position)] = _coerce_color(color)
        return CubeState(tuple(facelets))

    def centers(self) -> dict[Face, Color | None]:
        return {face: self.facelets[_FACE_OFFSETS[face] + CENTER_INDEX] for face in FACE_ORDER}

    def color_counts(self) -> dict[Color, int]:
        counts = {color: 0 for color in ALL_COLORS}
        for color in self.facelets:
            if color is not None:
                counts[color] += 1
        return counts

    def positions_of(self, color: Color) -> list[FaceletPosition]:
        return [index_to_position(i) for i, value in enumerate(self.facelets) if value == color]

    def is_complete(self) -> bool:
        return all(color is not None for color in self.facelets)

    def is_solved(self) -> bool:
        return is_solved_facelets(self.facelets)

    def __str__(self) -> str:
        return self.to_facelet_string()


def is_solved_facelets(facelets: Sequence[Color | None]) -> bool:
    for offset in range(0, FACELET_COUNT, FACE_SIZE):
        center = facelets[offset + CENTER_INDEX]
        if center is None:
            return False
        for i in range(offset, offset + FACE_SIZE):
            if facelets[i] != center:
                return False
    return True


def solved_target(facelets: Sequence[Color | None]) -> FaceletTuple:
    """Solved facelets relative to the centres of ``facelets``."""
    target: list[Color | None] = []
    for offset in range(0, FACELET_COUNT, FACE_SIZE):
        target.extend([facelets[offset + CENTER_INDEX]] * FACE_SIZE)
    return tuple(target)


def solved_state(scheme: Mapping[Face, Color] | None = None) -> CubeState:
    colors = scheme or DEFAULT_SCHEME
    return CubeState(tuple(colors[face] for face in FACE_ORDER for _ in range(FACE_SIZE)))


def empty_state(centers: Mapping[Face, Color] | None = None) -> CubeState:
    """An editing-time state: every facelet unset except the fixed centres."""
    colors = centers or DEFAULT_SCHEME
    facelets: list[Color | None] = []
    for face in FACE_ORDER:
        facelets.extend(colors[face] if i == CENTER_INDEX else None for i in range(FACE_SIZE))
    return CubeState(tuple(facelets))


def iter_positions() -> Iterable[FaceletPosition]:
    for index in range(FACELET_COUNT):
        yield index_to_position(index)
