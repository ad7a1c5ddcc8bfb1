from __future__ import annotations

from cubesolve.models import Color, Face, FaceletPosition
from cubesolve.moves import state_from_moves
from cubesolve.state import empty_state, solved_state
from cubesolve.validator import (
    ViolationKind,
    check_color_counts,
    check_corners,
    check_edges,
    help_tips,
    is_structurally_valid,
    validate_structure,
)


def _pos(name: str) -> FaceletPosition:
    return FaceletPosition(Face(name[0]), int(name[1]))


def _paint(state, **tiles: Color):
    return state.with_facelets({_pos(name): color for name, color in tiles.items()})


def test_solved_and_scrambled_states_are_structurally_valid() -> None:
    assert validate_structure(solved_state()) == []
    assert is_structurally_valid(state_from_moves("R U R' U' F2 D' L B"))


def test_wrong_centre_reports_two_count_violations() -> None:
    state = _paint(solved_state(), U4=Color.RED)
    violations = validate_structure(state)
    assert [v.kind for v in violations] == [ViolationKind.COLOR_COUNT, ViolationKind.COLOR_COUNT]
    messages = {v.colors[0]: v.message for v in violations}
    assert messages[Color.WHITE] == "White count = 8 (missing 1)"
    assert messages[Color.RED] == "Red count = 10 (1 too many)"
    assert {v.colors[0]: v.delta for v in violations} == {Color.WHITE: -1, Color.RED: 1}


def test_count_violation_lists_positions_of_the_colour() -> None:
    state = _paint(solved_state(), F1=Color.YELLOW)
    yellow = next(v for v in check_color_counts(state) if v.colors == (Color.YELLOW,))
    assert len(yellow.positions) == 10
    assert _pos("F1") in yellow.positions


def test_incomplete_state_reports_missing_colours_without_piece_errors() -> None:
    state = empty_state()
    counts = check_color_counts(state)
    assert len(counts) == 6
    assert all(v.delta == -8 for v in counts)
    assert check_edges(state) == []
    assert check_corners(state) == []


def test_opposite_colours_on_an_edge() -> None:
    state = _paint(solved_state(), F1=Color.YELLOW)
    edges = check_edges(state)
    assert len(edges) == 1
    assert edges[0].kind is ViolationKind.EDGE_OPPOSITE
    assert edges[0].message == "Edge U7-F1 has opposite colors White/Yellow"
    assert edges[0].slots == ("UF",)


def test_same_colour_on_an_edge() -> None:
    state = _paint(solved_state(), U7=Color.GREEN)
    edges = check_edges(state)
    assert [v.kind for v in edges] == [ViolationKind.EDGE_SAME_COLOR]
    assert "Green" in edges[0].message


def test_same_colour_is_reported_before_opposite_on_a_corner() -> None:
    state = _paint(solved_state(), U8=Color.RED, F2=Color.ORANGE)
    corners = check_corners(state)
    assert [v.kind for v in corners] == [ViolationKind.CORNER_SAME_COLOR]


def test_opposite_colours_on_a_corner() -> None:
    state = _paint(solved_state(), U8=Color.ORANGE)
    corners = check_corners(state)
    assert [v.kind for v in corners] == [ViolationKind.CORNER_OPPOSITE]
    assert corners[0].message == "Corner U8-R0-F2 has opposite colors Orange/Red"


def test_duplicate_edge_lists_every_slot() -> None:
    state = _paint(solved_state(), R1=Color.GREEN)
    edges = check_edges(state)
    assert [v.kind for v in edges] == [ViolationKind.EDGE_DUPLICATE]
    duplicate = edges[0]
    assert duplicate.slots == ("UF", "UR")
    assert duplicate.colors == (Color.WHITE, Color.GREEN)
    assert duplicate.message == "The White/Green edge appears 2 times (UF, UR)"


def test_any_wrong_sticker_on_an_edge_names_a_real_piece() -> None:
    expected = {
        Color.WHITE: [ViolationKind.EDGE_SAME_COLOR],
        Color.YELLOW: [ViolationKind.EDGE_OPPOSITE],
        Color.GREEN: [],
        Color.RED: [ViolationKind.EDGE_DUPLICATE],
        Color.ORANGE: [ViolationKind.EDGE_DUPLICATE],
        Color.BLUE: [ViolationKind.EDGE_DUPLICATE],
    }
    for color, kinds in expected.items():
        edges = check_edges(_paint(solved_state(), F1=color))
        assert [v.kind for v in edges] == kinds, color


def test_duplicate_corner_is_detected() -> None:
    # UFL becomes a second white/red/green corner.
    state = _paint(solved_state(), F0=Color.RED, L2=Color.GREEN)
    corners = check_corners(state)
    assert ViolationKind.CORNER_DUPLICATE in [v.kind for v in corners]


def test_partially_entered_pieces_are_skipped() -> None:
    state = solved_state().with_facelet(_pos("F1"), None)
    assert check_edges(state) == []
    assert check_corners(state) == []


def test_kind_helpers_split_violation_families() -> None:
    assert ViolationKind.EDGE_OPPOSITE.is_edge
    assert not ViolationKind.EDGE_FLIP.is_edge
    assert ViolationKind.CORNER_DUPLICATE.is_corner
    assert not ViolationKind.CORNER_TWIST.is_corner
    assert ViolationKind.PIECE_SWAP.is_parity
    assert not ViolationKind.COLOR_COUNT.is_parity


def test_help_tips_are_unique_per_kind() -> None:
    state = _paint(solved_state(), U4=Color.RED, F1=Color.YELLOW)
    tips = help_tips(validate_structure(state))
    assert len(tips) == 2
    assert tips[0].startswith("Each color must appear exactly 9 times")
