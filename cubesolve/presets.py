from __future__ import annotations

from functools import lru_cache
from typing import Iterable

from cubesolve.formula import FormulaConverter, Move
from cubesolve.models import AlgorithmGroup, AlgorithmPreset


PRESET_LIST = [
    AlgorithmPreset(name="Sexy", formula="R U R' U'", group=AlgorithmGroup.TRIGGER, aliases=("SexyMove",)),
    AlgorithmPreset(name="Left Sexy", formula="L' U' L U", group=AlgorithmGroup.TRIGGER),
    AlgorithmPreset(name="Double Sexy", formula="R U R' U'", repeat=2, group=AlgorithmGroup.TRIGGER),
    AlgorithmPreset(name="Triple Sexy", formula="R U R' U'", repeat=3, group=AlgorithmGroup.TRIGGER),
    AlgorithmPreset(name="Sledge", formula="R' F R F'", group=AlgorithmGroup.TRIGGER, aliases=("Sledgehammer",)),
    AlgorithmPreset(name="Hedge", formula="F R' F' R", group=AlgorithmGroup.TRIGGER, aliases=("Hedgeslammer",)),
    AlgorithmPreset(name="Sune", formula="R U R' U R U2 R'", group=AlgorithmGroup.OLL),
    AlgorithmPreset(name="Anti-Sune", formula="R' U' R U' R' U2 R", group=AlgorithmGroup.OLL),
    AlgorithmPreset(name="Left Sune", formula="L' U' L U' L' U2 L", group=AlgorithmGroup.OLL),
    AlgorithmPreset(name="OLL-T", formula="F (R U R' U') F'", group=AlgorithmGroup.OLL),
    AlgorithmPreset(name="OLL-L", formula="F' (L' U' L U) F", group=AlgorithmGroup.OLL),
    AlgorithmPreset(
        name="OLL-Cross",
        formula="F (R U R' U') F U F (R U R' U') F'",
        group=AlgorithmGroup.OLL,
    ),
    AlgorithmPreset(name="T-Perm", formula="R U R' U' R' F R2 U' R' U' R U R' F'", group=AlgorithmGroup.PLL),
    AlgorithmPreset(name="Ja-Perm", formula="R U R' F' R U R' U' R' F R2 U' R'", group=AlgorithmGroup.PLL),
    AlgorithmPreset(name="Jb-Perm", formula="R U R' F R' F' R U R' F' R U R' F", group=AlgorithmGroup.PLL),
    AlgorithmPreset(
        name="Y-Perm",
        formula="F R U' R' U' R U R' F' R U R' U' R' F R F'",
        group=AlgorithmGroup.PLL,
    ),
    AlgorithmPreset(name="Ua-Perm", formula="R U' R U R U R U' R' U' R2", group=AlgorithmGroup.PLL, aliases=("Ua",)),
    AlgorithmPreset(name="Ub-Perm", formula="R2 U R U R' U' R' U' R' U R'", group=AlgorithmGroup.PLL, aliases=("Ub",)),
    AlgorithmPreset(name="H-Perm", formula="R2 U2 R U2 R2 U2 R2 U2 R U2 R2", group=AlgorithmGroup.PLL),
    AlgorithmPreset(
        name="Z-Perm",
        formula="R' U' R U2 R' U R' U2 R U R' U R U2 R'",
        group=AlgorithmGroup.PLL,
    ),
    AlgorithmPreset(name="F2L-1", formula="U R U' R' U' F' U F", group=AlgorithmGroup.F2L),
    AlgorithmPreset(name="F2L-2", formula="U' L' U L U F U' F'", group=AlgorithmGroup.F2L),
    AlgorithmPreset(name="F2L-3", formula="R U R' U2 R U R'", group=AlgorithmGroup.F2L),
    AlgorithmPreset(name="F2L-4", formula="L' U' L U2 L' U' L", group=AlgorithmGroup.F2L),
    AlgorithmPreset(name="Comm-1", formula="R U R' U R U2 R'", group=AlgorithmGroup.NO_GROUP),
    AlgorithmPreset(name="Comm-2", formula="R U2 R' U' R U' R'", group=AlgorithmGroup.NO_GROUP),
]


def _lookup_key(name: str) -> str:
    """Case, space and hyphen insensitive: "t perm" finds "T-Perm"."""
    return "".join(char for char in name.lower() if char.isalnum())


def _index_presets(presets: Iterable[AlgorithmPreset]) -> dict[str, AlgorithmPreset]:
    index: dict[str, AlgorithmPreset] = {}
    for preset in presets:
        for label in (preset.name, *preset.aliases):
            key = _lookup_key(label)
            clash = index.get(key)
            if clash is preset:
                continue
            if clash is not None:
                raise ValueError(f"Preset label '{label}' collides with '{clash.name}'")
            index[key] = preset
    return index


PRESET_INDEX = _index_presets(PRESET_LIST)


def get_preset(name: str) -> AlgorithmPreset:
    preset = PRESET_INDEX.get(_lookup_key(name))
    if preset is None:
        raise KeyError(f"Unknown preset: {name}. Available presets: {', '.join(list_preset_names())}")
    return preset


def list_preset_names(group: AlgorithmGroup | None = None) -> list[str]:
    return sorted(preset.name for preset in PRESET_LIST if group is None or preset.group is group)


def preset_moves(preset: AlgorithmPreset) -> tuple[Move, ...]:
    return tuple(FormulaConverter.convert(preset.formula, repeat=preset.repeat))


@lru_cache(maxsize=1)
def algorithm_library() -> tuple[tuple[str, tuple[Move, ...]], ...]:
    """(name, moves) for every preset, in declaration order."""
    return tuple((preset.name, preset_moves(preset)) for preset in PRESET_LIST)
