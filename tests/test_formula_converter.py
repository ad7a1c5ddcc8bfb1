from __future__ import annotations

import pytest

from cubesolve.formula import (
    Direction,
    FormulaConverter,
    FormulaSyntaxError,
    Move,
    normalize_external_notation,
    simplify_moves,
)
from cubesolve.models import Face


def _notation(moves: list[Move]) -> list[str]:
    return [move.notation for move in moves]


def test_basic_moves_are_parsed() -> None:
    moves = FormulaConverter.convert("R U' F2")
    assert moves == [
        Move(Face.R, Direction.CW),
        Move(Face.U, Direction.CCW),
        Move(Face.F, Direction.HALF),
    ]


def test_wide_short_and_long_moves_are_normalized() -> None:
    assert _notation(FormulaConverter.convert("r")) == ["r"]
    assert _notation(FormulaConverter.convert("Rw")) == ["r"]
    assert _notation(FormulaConverter.convert("f2")) == ["f2"]
    assert _notation(FormulaConverter.convert("Uw'")) == ["u'"]
    assert FormulaConverter.convert("Rw")[0].wide


def test_formula_repeat_argument_applies_after_parse() -> None:
    moves = FormulaConverter.convert("R U", repeat=3)
    assert _notation(moves) == ["R", "U", "R", "U", "R", "U"]


def test_group_and_caret_repeats() -> None:
    assert _notation(FormulaConverter.convert("(R U)2")) == ["R", "U", "R", "U"]
    assert _notation(FormulaConverter.convert("(R U)^2 F")) == ["R", "U", "R", "U", "F"]
    assert _notation(FormulaConverter.convert("R^3")) == ["R", "R", "R"]


def test_inverse_moves_are_built_in_reverse_order() -> None:
    moves = FormulaConverter.convert("R U2 F'")
    inverse = FormulaConverter.invert_moves(moves)
    assert _notation(inverse) == ["F", "U2", "R'"]


def test_inverse_of_repeated_formula_keeps_repeat_count() -> None:
    moves = FormulaConverter.convert("(R U)2")
    inverse = FormulaConverter.invert_moves(moves)
    assert _notation(inverse) == ["U'", "R'", "U'", "R'"]


def test_move_descriptions_and_quarter_turns() -> None:
    move = FormulaConverter.parse_move("R'")
    assert move.quarter_turns == 3
    assert move.description == "Turn R face counter-clockwise 90°"
    assert FormulaConverter.parse_move("u2").description == "Wide turn U face 180°"
    assert str(FormulaConverter.parse_move("F")) == "F"


@pytest.mark.parametrize(
    "formula",
    ["R U (", "R U )", "(R U)0", "R^", "R ^0", "Q", "M", "x", "R U$", "R2'"],
)
def test_invalid_formula_raises_syntax_error(formula: str) -> None:
    with pytest.raises(FormulaSyntaxError):
        FormulaConverter.convert(formula)


def test_syntax_error_reports_position_and_is_value_error() -> None:
    with pytest.raises(ValueError) as exc_info:
        FormulaConverter.convert("R U Q")
    assert isinstance(exc_info.value, FormulaSyntaxError)
    assert exc_info.value.position == 4


def test_parse_move_requires_exactly_one_move() -> None:
    with pytest.raises(FormulaSyntaxError):
        FormulaConverter.parse_move("R U")


def test_external_notation_is_normalized() -> None:
    moves = normalize_external_notation("R Uprime f2 Bw' D2 l")
    assert _notation(moves) == ["R", "U'", "f2", "b'", "D2", "l"]
    assert normalize_external_notation("  ") == []


def test_external_notation_rejects_unknown_tokens() -> None:
    with pytest.raises(FormulaSyntaxError):
        normalize_external_notation("R Xprime")
    with pytest.raises(FormulaSyntaxError):
        normalize_external_notation("R U5")


def test_simplify_merges_same_face_turns() -> None:
    assert _notation(simplify_moves(FormulaConverter.convert("R R"))) == ["R2"]
    assert _notation(simplify_moves(FormulaConverter.convert("R R'"))) == []
    assert _notation(simplify_moves(FormulaConverter.convert("R R2"))) == ["R'"]
    assert _notation(simplify_moves(FormulaConverter.convert("U2 U2 F"))) == ["F"]


def test_simplify_cascades_to_fixed_point() -> None:
    assert simplify_moves(FormulaConverter.convert("R U U' R'")) == []
    assert _notation(simplify_moves(FormulaConverter.convert("F R U U' R' F"))) == ["F2"]


def test_simplify_never_merges_wide_with_normal_moves() -> None:
    moves = FormulaConverter.convert("R r r'")
    assert _notation(simplify_moves(moves)) == ["R"]
    assert _notation(simplify_moves(FormulaConverter.convert("R r"))) == ["R", "r"]


def test_simplify_is_idempotent() -> None:
    moves = FormulaConverter.convert("R R U U U D D' F2 F2 L r r B' B' B'")
    once = simplify_moves(moves)
    assert simplify_moves(once) == once
