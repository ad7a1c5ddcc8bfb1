from __future__ import annotations

from collections import defaultdict
from dataclasses import dataclass
from enum import Enum
from itertools import combinations
from typing import Iterable, Mapping, Sequence

from cubesolve.models import ALL_COLORS, Color, FaceletPosition
from cubesolve.pieces import CORNER_SLOTS, EDGE_SLOTS, OPPOSITE_COLORS, PieceSlot
from cubesolve.state import FACE_SIZE, CubeState

EXPECTED_COLOR_COUNT = FACE_SIZE


class ViolationKind(str, Enum):
    COLOR_COUNT = "COLOR_COUNT"
    EDGE_SAME_COLOR = "EDGE_SAME_COLOR"
    EDGE_OPPOSITE = "EDGE_OPPOSITE"
    EDGE_DUPLICATE = "EDGE_DUPLICATE"
    CORNER_SAME_COLOR = "CORNER_SAME_COLOR"
    CORNER_OPPOSITE = "CORNER_OPPOSITE"
    CORNER_DUPLICATE = "CORNER_DUPLICATE"
    EDGE_FLIP = "EDGE_FLIP"
    CORNER_TWIST = "CORNER_TWIST"
    PIECE_SWAP = "PIECE_SWAP"

    @property
    def is_edge(self) -> bool:
        return self.value.startswith("EDGE_") and self is not ViolationKind.EDGE_FLIP

    @property
    def is_corner(self) -> bool:
        return self.value.startswith("CORNER_") and self is not ViolationKind.CORNER_TWIST

    @property
    def is_parity(self) -> bool:
        return self in (ViolationKind.EDGE_FLIP, ViolationKind.CORNER_TWIST, ViolationKind.PIECE_SWAP)


@dataclass(frozen=True)
class Violation:
    kind: ViolationKind
    message: str
    positions: tuple[FaceletPosition, ...] = ()
    colors: tuple[Color, ...] = ()
    slots: tuple[str, ...] = ()
    delta: int | None = None


def check_color_counts(state: CubeState) -> list[Violation]:
    violations: list[Violation] = []
    counts = state.color_counts()
    for color in ALL_COLORS:
        count = counts[color]
        if count == EXPECTED_COLOR_COUNT:
            continue
        delta = count - EXPECTED_COLOR_COUNT
        detail = f"{delta} too many" if delta > 0 else f"missing {-delta}"
        violations.append(
            Violation(
                kind=ViolationKind.COLOR_COUNT,
                message=f"{color.display_name} count = {count} ({detail})",
                positions=tuple(state.positions_of(color)),
                colors=(color,),
                delta=delta,
            )
        )
    return violations


def _piece_label(slot: PieceSlot) -> str:
    return "-".join(position.name for position in slot.positions)


def _color_label(colors: Iterable[Color]) -> str:
    return "/".join(color.display_name for color in colors)


def _check_slot(
    slot: PieceSlot,
    colors: tuple[Color, ...],
    opposites: Mapping[Color, Color],
) -> Violation | None:
    is_edge = slot.kind == "edge"
    kinds = (
        (ViolationKind.EDGE_SAME_COLOR, ViolationKind.EDGE_OPPOSITE)
        if is_edge
        else (ViolationKind.CORNER_SAME_COLOR, ViolationKind.CORNER_OPPOSITE)
    )
    noun = "Edge" if is_edge else "Corner"
    label = _piece_label(slot)

    if len(set(colors)) != len(colors):
        repeated = sorted({c for c in colors if colors.count(c) > 1}, key=ALL_COLORS.index)
        return Violation(
            kind=kinds[0],
            message=f"{noun} {label} has the same color twice ({_color_label(repeated)})",
            positions=slot.positions,
            colors=colors,
            slots=(slot.name,),
        )

    opposite_pairs = [(a, b) for a, b in combinations(colors, 2) if opposites.get(a) == b]
    if opposite_pairs:
        names = ", ".join(f"{a.display_name}/{b.display_name}" for a, b in opposite_pairs)
        return Violation(
            kind=kinds[1],
            message=f"{noun} {label} has opposite colors {names}",
            positions=slot.positions,
            colors=colors,
            slots=(slot.name,),
        )
    return None


def _check_pieces(
    state: CubeState,
    slots: Sequence[PieceSlot],
    duplicate_kind: ViolationKind,
) -> list[Violation]:
    violations: list[Violation] = []
    seen: dict[frozenset[Color], list[PieceSlot]] = defaultdict(list)
    for slot in slots:
        colors = slot.read(state)
        if any(color is None for color in colors):
            continue
        problem = _check_slot(slot, colors, OPPOSITE_COLORS)
        if problem is not None:
            violations.append(problem)
        if len(set(colors)) == len(colors):
            seen[frozenset(colors)].append(slot)

    noun = "edge" if duplicate_kind is ViolationKind.EDGE_DUPLICATE else "corner"
    for combo, occurrences in seen.items():
        if len(occurrences) < 2:
            continue
        ordered = tuple(sorted(combo, key=ALL_COLORS.index))
        names = ", ".join(slot.name for slot in occurrences)
        violations.append(
            Violation(
                kind=duplicate_kind,
                message=f"The {_color_label(ordered)} {noun} appears {len(occurrences)} times ({names})",
                positions=tuple(p for slot in occurrences for p in slot.positions),
                colors=ordered,
                slots=tuple(slot.name for slot in occurrences),
            )
        )
    return violations


def check_edges(state: CubeState) -> list[Violation]:
    return _check_pieces(state, EDGE_SLOTS, ViolationKind.EDGE_DUPLICATE)


def check_corners(state: CubeState) -> list[Violation]:
    return _check_pieces(state, CORNER_SLOTS, ViolationKind.CORNER_DUPLICATE)


def validate_structure(state: CubeState) -> list[Violation]:
    """Collects every colour-count, edge and corner violation; never raises."""
    return [*check_color_counts(state), *check_edges(state), *check_corners(state)]


def is_structurally_valid(state: CubeState) -> bool:
    return not validate_structure(state)


_TIPS = {
    ViolationKind.COLOR_COUNT: "Each color must appear exactly 9 times. Recount the stickers of the colors listed.",
    ViolationKind.EDGE_SAME_COLOR: "An edge piece always shows two different colors.",
    ViolationKind.EDGE_OPPOSITE: "Opposite colors (for example white and yellow) never share an edge piece.",
    ViolationKind.EDGE_DUPLICATE: "Every edge piece exists exactly once on a real cube.",
    ViolationKind.CORNER_SAME_COLOR: "A corner piece always shows three different colors.",
    ViolationKind.CORNER_OPPOSITE: "Opposite colors never share a corner piece.",
    ViolationKind.CORNER_DUPLICATE: "Every corner piece exists exactly once on a real cube.",
    ViolationKind.EDGE_FLIP: "A single flipped edge cannot be reached by turning; the cube was reassembled.",
    ViolationKind.CORNER_TWIST: "A single twisted corner cannot be reached by turning; the cube was reassembled.",
    ViolationKind.PIECE_SWAP: "Two pieces appear swapped; check the color entry or reassemble the cube.",
}


def help_tips(violations: Iterable[Violation]) -> list[str]:
    """One short hint per violation kind present, in first-seen order."""
    tips: list[str] = []
    seen: set[ViolationKind] = set()
    for violation in violations:
        if violation.kind in seen:
            continue
        seen.add(violation.kind)
        tips.append(_TIPS[violation.kind])
    return tips
