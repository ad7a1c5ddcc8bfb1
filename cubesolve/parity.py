from __future__ import annotations

from typing import Mapping, Sequence

from cubesolve.models import Color, Face
from cubesolve.pieces import CORNER_SLOTS, EDGE_SLOTS, PieceSlot, reference_scheme, solved_pieces
from cubesolve.state import CubeState
from cubesolve.validator import Violation, ViolationKind, validate_structure


def _edge_flip(colors: Sequence[Color], ud: set[Color], fb: set[Color]) -> int:
    reference, other = colors
    if reference in ud:
        return 0
    if other in ud:
        return 1
    return 0 if reference in fb else 1


def _corner_twist(colors: Sequence[Color], ud: set[Color]) -> int:
    for twist, color in enumerate(colors):
        if color in ud:
            return twist
    return 0


def edge_orientation_sum(state: CubeState, scheme: Mapping[Face, Color] | None = None) -> int:
    scheme = scheme or reference_scheme(state.centers())
    ud = {scheme[Face.U], scheme[Face.D]}
    fb = {scheme[Face.F], scheme[Face.B]}
    return sum(_edge_flip(slot.read(state), ud, fb) for slot in EDGE_SLOTS)


def corner_twist_sum(state: CubeState, scheme: Mapping[Face, Color] | None = None) -> int:
    scheme = scheme or reference_scheme(state.centers())
    ud = {scheme[Face.U], scheme[Face.D]}
    return sum(_corner_twist(slot.read(state), ud) for slot in CORNER_SLOTS)


def count_inversions(sequence: Sequence[int]) -> int:
    inversions = 0
    for i in range(len(sequence)):
        for j in range(i + 1, len(sequence)):
            if sequence[i] > sequence[j]:
                inversions += 1
    return inversions


def piece_permutation(
    state: CubeState,
    slots: Sequence[PieceSlot],
    scheme: Mapping[Face, Color],
) -> list[int] | None:
    """Home-slot number of the piece sitting in each slot, or None if a piece is unknown."""
    homes = solved_pieces(slots, scheme)
    permutation: list[int] = []
    for slot in slots:
        home = homes.get(frozenset(slot.read(state)))
        if home is None:
            return None
        permutation.append(home)
    return permutation


def check_parity(state: CubeState) -> list[Violation]:
    """Edge-flip, corner-twist and piece-swap checks for a complete, structurally clean state."""
    if not state.is_complete():
        return []

    scheme = reference_scheme(state.centers())
    violations: list[Violation] = []

    flips = edge_orientation_sum(state, scheme)
    if flips % 2 != 0:
        violations.append(
            Violation(
                kind=ViolationKind.EDGE_FLIP,
                message=(
                    f"Edge orientation sum is {flips}, which is odd: one edge is flipped. "
                    "This cannot happen by turning; the physical cube was reassembled."
                ),
                positions=tuple(p for slot in EDGE_SLOTS for p in slot.positions),
            )
        )

    twists = corner_twist_sum(state, scheme)
    if twists % 3 != 0:
        violations.append(
            Violation(
                kind=ViolationKind.CORNER_TWIST,
                message=(
                    f"Corner twist sum is {twists}, not a multiple of 3: a corner is twisted. "
                    "This cannot happen by turning; the physical cube was reassembled."
                ),
                positions=tuple(p for slot in CORNER_SLOTS for p in slot.positions),
            )
        )

    edges = piece_permutation(state, EDGE_SLOTS, scheme)
    corners = piece_permutation(state, CORNER_SLOTS, scheme)
    if edges is not None and corners is not None:
        edge_parity = count_inversions(edges) % 2
        corner_parity = count_inversions(corners) % 2
        if edge_parity != corner_parity:
            violations.append(
                Violation(
                    kind=ViolationKind.PIECE_SWAP,
                    message=(
                        "Edge and corner permutation parities differ: two pieces are swapped. "
                        "This cannot happen by turning; the physical cube was reassembled."
                    ),
                )
            )

    return violations


def validate(state: CubeState) -> list[Violation]:
    """Structural violations, followed by parity violations once the structure is clean."""
    violations = validate_structure(state)
    if violations:
        return violations
    return check_parity(state)


def is_solvable(state: CubeState) -> bool:
    return state.is_complete() and not validate(state)
