from __future__ import annotations

import re
from dataclasses import dataclass
from enum import Enum
from typing import Iterable, Sequence

from cubesolve.models import Face


class FormulaSyntaxError(ValueError):
    def __init__(self, message: str, position: int) -> None:
        super().__init__(f"{message} at index {position}")
        self.position = position


class Direction(str, Enum):
    CW = "CW"
    CCW = "CCW"
    HALF = "180"


_QUARTER_TURNS = {Direction.CW: 1, Direction.HALF: 2, Direction.CCW: 3}
_SUFFIX = {Direction.CW: "", Direction.CCW: "'", Direction.HALF: "2"}


@dataclass(frozen=True)
class Move:
    face: Face
    direction: Direction = Direction.CW
    wide: bool = False

    @classmethod
    def from_quarter_turns(cls, face: Face, turns: int, wide: bool = False) -> "Move | None":
        turns %= 4
        if turns == 0:
            return None
        direction = {1: Direction.CW, 2: Direction.HALF, 3: Direction.CCW}[turns]
        return cls(face=face, direction=direction, wide=wide)

    @property
    def quarter_turns(self) -> int:
        return _QUARTER_TURNS[self.direction]

    @property
    def notation(self) -> str:
        letter = self.face.value.lower() if self.wide else self.face.value
        return f"{letter}{_SUFFIX[self.direction]}"

    @property
    def description(self) -> str:
        prefix = "Wide turn" if self.wide else "Turn"
        if self.direction is Direction.CW:
            return f"{prefix} {self.face.value} face clockwise 90°"
        if self.direction is Direction.CCW:
            return f"{prefix} {self.face.value} face counter-clockwise 90°"
        return f"{prefix} {self.face.value} face 180°"

    def inverse(self) -> "Move":
        if self.direction is Direction.HALF:
            return self
        flipped = Direction.CCW if self.direction is Direction.CW else Direction.CW
        return Move(face=self.face, direction=flipped, wide=self.wide)

    def __str__(self) -> str:
        return self.notation


class _TokenKind(str, Enum):
    LPAREN = "("
    RPAREN = ")"
    CARET = "^"
    INT = "int"
    MOVE = "move"


# "Rw" only counts as one token for upper-case faces; "rw" is an error.
_TOKEN_PATTERN = re.compile(
    r"(?P<space>\s+)"
    r"|(?P<punct>[()^])"
    r"|(?P<int>\d+)"
    r"|(?P<move>[URFDLB][wW]['2]?|[A-Za-z]['2]?)"
)

_MODIFIERS = {"": Direction.CW, "'": Direction.CCW, "2": Direction.HALF}


@dataclass(frozen=True)
class _Token:
    kind: _TokenKind
    text: str
    start: int


class FormulaConverter:
    """Parses face-turn formulas with groups and repeats into Move lists."""

    _FACE_LETTERS = frozenset("URFDLB")

    @classmethod
    def convert(cls, formula: str, repeat: int = 1) -> list[Move]:
        if repeat < 1:
            raise ValueError("repeat must be >= 1")
        parser = _FormulaParser(tokens=cls._tokenize(formula), end=len(formula))
        return parser.parse() * repeat

    @classmethod
    def parse_move(cls, text: str) -> Move:
        moves = cls.convert(text)
        if len(moves) != 1:
            raise FormulaSyntaxError(f"Expected exactly one move in '{text}'", 0)
        return moves[0]

    @staticmethod
    def invert_moves(moves: Sequence[Move]) -> list[Move]:
        return [move.inverse() for move in reversed(moves)]

    @staticmethod
    def to_notation(moves: Iterable[Move]) -> str:
        return " ".join(move.notation for move in moves)

    @classmethod
    def _tokenize(cls, formula: str) -> list[_Token]:
        tokens: list[_Token] = []
        position = 0
        while position < len(formula):
            match = _TOKEN_PATTERN.match(formula, position)
            if match is None:
                raise FormulaSyntaxError(f"Unsupported character '{formula[position]}'", position)
            text = match.group()
            if match.lastgroup == "punct":
                tokens.append(_Token(_TokenKind(text), text, position))
            elif match.lastgroup == "int":
                tokens.append(_Token(_TokenKind.INT, text, position))
            elif match.lastgroup == "move":
                tokens.append(_Token(_TokenKind.MOVE, text, position))
            position = match.end()
        return tokens

    @classmethod
    def expand_move(cls, token: _Token) -> Move:
        modifier = token.text[-1] if token.text[-1] in "'2" else ""
        base = token.text[: len(token.text) - len(modifier)]
        direction = _MODIFIERS[modifier]

        if len(base) == 1 and base.upper() in cls._FACE_LETTERS:
            return Move(face=Face(base.upper()), direction=direction, wide=base.islower())
        if len(base) == 2 and base[0] in cls._FACE_LETTERS and base[1] in "wW":
            return Move(face=Face(base[0]), direction=direction, wide=True)

        raise FormulaSyntaxError(f"Unknown move token '{token.text}'", token.start)


@dataclass
class _FormulaParser:
    """Recursive descent over ``sequence := (atom repeat?)*``, ``atom := MOVE | "(" sequence ")"``.

    A bare integer only repeats a group (``(R U)2``); ``^n`` repeats either.
    """

    tokens: list[_Token]
    end: int
    index: int = 0

    def parse(self) -> list[Move]:
        return self._sequence(nested=False)

    def _take(self, kind: _TokenKind) -> _Token | None:
        if self.index < len(self.tokens) and self.tokens[self.index].kind is kind:
            self.index += 1
            return self.tokens[self.index - 1]
        return None

    def _sequence(self, nested: bool) -> list[Move]:
        moves: list[Move] = []
        while self.index < len(self.tokens):
            token = self.tokens[self.index]
            self.index += 1

            if token.kind is _TokenKind.RPAREN:
                if nested:
                    return moves
                raise FormulaSyntaxError("Unexpected ')'", token.start)
            if token.kind is _TokenKind.LPAREN:
                group = self._sequence(nested=True)
                moves.extend(group * self._repeat(bare_int=True))
            elif token.kind is _TokenKind.MOVE:
                moves.extend([FormulaConverter.expand_move(token)] * self._repeat(bare_int=False))
            else:
                raise FormulaSyntaxError(f"Expected move or '(' but got '{token.text}'", token.start)

        if nested:
            raise FormulaSyntaxError("Missing closing ')'", self.end)
        return moves

    def _repeat(self, bare_int: bool) -> int:
        caret = self._take(_TokenKind.CARET)
        count = self._take(_TokenKind.INT) if caret is not None or bare_int else None
        if caret is not None and count is None:
            raise FormulaSyntaxError("Expected integer after '^'", caret.start)
        if count is None:
            return 1
        if int(count.text) < 1:
            raise FormulaSyntaxError("Repeat must be >= 1", count.start)
        return int(count.text)


def parse_moves(formula: str | Sequence[Move]) -> list[Move]:
    if isinstance(formula, str):
        return FormulaConverter.convert(formula)
    return list(formula)


def normalize_external_notation(text: str) -> list[Move]:
    """Converts a foreign solver's move string (``Rprime``, ``r2``, ``Fw'``) into Moves."""
    moves: list[Move] = []
    offset = 0
    for raw in text.split():
        start = text.index(raw, offset)
        offset = start + len(raw)

        letter = raw[0]
        if letter.upper() not in FormulaConverter._FACE_LETTERS:
            raise FormulaSyntaxError(f"Unknown move token '{raw}'", start)

        wide = letter.islower()
        rest = raw[1:]
        if rest[:1] in ("w", "W"):
            wide = True
            rest = rest[1:]

        lowered = rest.lower()
        if lowered in ("", "1"):
            direction = Direction.CW
        elif lowered in ("'", "prime", "'1", "3"):
            direction = Direction.CCW
        elif lowered in ("2", "2'", "2prime", "'2"):
            direction = Direction.HALF
        else:
            raise FormulaSyntaxError(f"Unknown move modifier in '{raw}'", start)

        moves.append(Move(face=Face(letter.upper()), direction=direction, wide=wide))
    return moves


def simplify_moves(moves: Sequence[Move]) -> list[Move]:
    """Merges adjacent same-face, same-width turns until nothing changes."""
    result = list(moves)
    while True:
        merged: list[Move] = []
        for move in result:
            if merged and merged[-1].face == move.face and merged[-1].wide == move.wide:
                previous = merged.pop()
                combined = Move.from_quarter_turns(
                    move.face,
                    previous.quarter_turns + move.quarter_turns,
                    wide=move.wide,
                )
                if combined is not None:
                    merged.append(combined)
                continue
            merged.append(move)

        if merged == result:
            return merged
        result = merged
