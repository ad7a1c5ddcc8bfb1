from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Tuple


class Color(str, Enum):
    WHITE = "W"
    YELLOW = "Y"
    RED = "R"
    ORANGE = "O"
    GREEN = "G"
    BLUE = "B"

    @property
    def display_name(self) -> str:
        return COLOR_NAMES[self]


class Face(str, Enum):
    U = "U"
    R = "R"
    F = "F"
    D = "D"
    L = "L"
    B = "B"


COLOR_NAMES = {
    Color.WHITE: "White",
    Color.YELLOW: "Yellow",
    Color.RED: "Red",
    Color.ORANGE: "Orange",
    Color.GREEN: "Green",
    Color.BLUE: "Blue",
}

FACE_NAMES = {
    Face.U: "Up",
    Face.R: "Right",
    Face.F: "Front",
    Face.D: "Down",
    Face.L: "Left",
    Face.B: "Back",
}

FACE_ORDER: Tuple[Face, ...] = (Face.U, Face.R, Face.F, Face.D, Face.L, Face.B)
ALL_COLORS: Tuple[Color, ...] = tuple(Color)

# Colour held by each centre on the canonical solved cube.
DEFAULT_SCHEME = {
    Face.U: Color.WHITE,
    Face.R: Color.RED,
    Face.F: Color.GREEN,
    Face.D: Color.YELLOW,
    Face.L: Color.ORANGE,
    Face.B: Color.BLUE,
}

OPPOSITE_FACES = {
    Face.U: Face.D,
    Face.D: Face.U,
    Face.R: Face.L,
    Face.L: Face.R,
    Face.F: Face.B,
    Face.B: Face.F,
}


@dataclass(frozen=True, order=True)
class FaceletPosition:
    face: Face
    index: int

    def __post_init__(self) -> None:
        if not 0 <= self.index <= 8:
            raise ValueError(f"Facelet index must be in 0..8, got {self.index}")

    @property
    def name(self) -> str:
        return f"{self.face.value}{self.index}"

    @property
    def is_center(self) -> bool:
        return self.index == 4

    def __str__(self) -> str:
        return self.name


class AlgorithmGroup(str, Enum):
    F2L = "F2L"
    OLL = "OLL"
    PLL = "PLL"
    TRIGGER = "TRIGGER"
    NO_GROUP = "NO_GROUP"


@dataclass(frozen=True)
class AlgorithmPreset:
    name: str
    formula: str
    group: AlgorithmGroup = AlgorithmGroup.NO_GROUP
    repeat: int = 1
    aliases: Tuple[str, ...] = ()

    def __post_init__(self) -> None:
        if not self.name.strip():
            raise ValueError("Preset name must be non-empty")
        if not self.formula.strip():
            raise ValueError("Preset formula must be non-empty")
        if self.repeat < 1:
            raise ValueError("Preset repeat must be >= 1")
