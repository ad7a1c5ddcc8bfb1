from __future__ import annotations

import pytest

from cubesolve.formula import FormulaConverter
from cubesolve.models import AlgorithmGroup, AlgorithmPreset, Face, FaceletPosition
from cubesolve.moves import apply_sequence
from cubesolve.parity import validate
from cubesolve.presets import (
    PRESET_LIST,
    _index_presets,
    algorithm_library,
    get_preset,
    list_preset_names,
    preset_moves,
)
from cubesolve.state import solved_state
from cubesolve.utils import formula_display_chunks, normalize_formula_text, render_net, wrap_notation


def test_repeat_presets_expand_their_formula() -> None:
    preset = get_preset("Triple Sexy")
    assert preset.repeat == 3
    assert len(preset_moves(preset)) == 12


def test_preset_alias_resolves() -> None:
    assert get_preset("SexyMove").name == "Sexy"
    assert get_preset("  sledgehammer ").name == "Sledge"
    assert get_preset("Ua").name == "Ua-Perm"
    assert get_preset("t perm").name == "T-Perm"


def test_presets_can_be_listed_by_group() -> None:
    names = list_preset_names(AlgorithmGroup.F2L)
    assert names == ["F2L-1", "F2L-2", "F2L-3", "F2L-4"]
    assert "T-Perm" in list_preset_names(AlgorithmGroup.PLL)


def test_spelled_variants_find_the_same_preset() -> None:
    anti_sune = get_preset("Anti-Sune")
    assert get_preset("antisune") is anti_sune
    assert get_preset("Anti Sune") is anti_sune
    assert get_preset("ANTI_SUNE") is anti_sune


def test_index_tolerates_labels_of_the_same_preset() -> None:
    preset = AlgorithmPreset(name="Anti-Sune", formula="R' U' R U' R' U2 R", aliases=("AntiSune",))
    assert _index_presets([preset]) == {"antisune": preset}

    other = AlgorithmPreset(name="Anti Sune", formula="R")
    with pytest.raises(ValueError):
        _index_presets([preset, other])


def test_unknown_preset_fails() -> None:
    with pytest.raises(KeyError):
        get_preset("NotExistingPreset")


def test_preset_requires_positive_repeat() -> None:
    with pytest.raises(ValueError):
        AlgorithmPreset(name="Broken", formula="R", repeat=0)


def test_every_preset_parses_and_keeps_the_cube_valid() -> None:
    for preset in PRESET_LIST:
        state = apply_sequence(solved_state(), preset_moves(preset))
        assert validate(state) == [], preset.name


def test_library_lists_every_preset_once() -> None:
    library = algorithm_library()
    assert [name for name, _ in library] == [preset.name for preset in PRESET_LIST]
    assert len(list_preset_names()) == len(PRESET_LIST)
    assert {preset.group for preset in PRESET_LIST} == set(AlgorithmGroup)


def test_sexy_move_has_order_six() -> None:
    moves = FormulaConverter.convert(get_preset("Sexy").formula, repeat=6)
    assert apply_sequence(solved_state(), moves).is_solved()


def test_pll_presets_only_touch_the_top_layer() -> None:
    for name in ("T-Perm", "Y-Perm", "Ua-Perm"):
        state = apply_sequence(solved_state(), preset_moves(get_preset(name)))
        assert not state.is_solved(), name
        assert state.face("D") == solved_state().face("D"), name


def test_formula_chunks_keep_parenthesized_groups_together() -> None:
    chunks = formula_display_chunks("R' F' (R U R' U') F (R U2 R')2")
    assert chunks == ["R'", "F'", "(R U R' U')", "F", "(R U2 R')2"]


def test_normalize_formula_text_collapses_whitespace() -> None:
    assert normalize_formula_text("  R   U\tR'\n U' ") == "R U R' U'"


def test_wrap_notation_never_splits_moves_or_groups() -> None:
    lines = wrap_notation("R' F' (R U R' U') F (R U2 R') U", max_chars_per_line=14)
    assert lines == ["R' F'", "(R U R' U') F", "(R U2 R') U"]
    assert all(line.count("(") == line.count(")") for line in lines)
    assert wrap_notation("") == []
    with pytest.raises(ValueError):
        wrap_notation("R", max_chars_per_line=0)


def test_render_net_lays_out_faces() -> None:
    lines = render_net(solved_state()).splitlines()
    assert len(lines) == 9
    assert lines[0] == "    WWW"
    assert lines[3] == "OOO GGG RRR BBB"
    assert lines[8] == "    YYY"

    partial = render_net(solved_state().with_facelet(FaceletPosition(Face.U, 0), None))
    assert partial.splitlines()[0] == "    .WW"
