from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Iterable, Mapping

from cubesolve.models import ALL_COLORS, FACE_NAMES, FACE_ORDER, OPPOSITE_FACES, Color, Face, FaceletPosition
from cubesolve.parity import check_parity
from cubesolve.pieces import CORNER_SLOTS, EDGE_SLOTS, OPPOSITE_COLORS, reference_scheme, slots_containing
from cubesolve.state import CENTER_INDEX, CubeState, iter_positions
from cubesolve.validator import EXPECTED_COLOR_COUNT, Violation, ViolationKind, validate_structure

logger = logging.getLogger(__name__)

TOTAL_CHECKS = len(ALL_COLORS) + len(EDGE_SLOTS) + len(CORNER_SLOTS) + 1 + 3


class ErrorCategory(str, Enum):
    COLOR_COUNT = "color-count"
    EDGE_PIECE = "edge-piece"
    CORNER_PIECE = "corner-piece"
    ORIENTATION = "orientation"
    PARITY = "parity"


class Severity(str, Enum):
    CRITICAL = "critical"
    WARNING = "warning"
    INFO = "info"


_AUTO_FIXABLE = {
    ViolationKind.COLOR_COUNT,
    ViolationKind.EDGE_SAME_COLOR,
    ViolationKind.EDGE_OPPOSITE,
    ViolationKind.CORNER_SAME_COLOR,
    ViolationKind.CORNER_OPPOSITE,
}


@dataclass(frozen=True)
class CubeError:
    id: str
    category: ErrorCategory
    severity: Severity
    title: str
    message: str
    details: str
    affected_positions: tuple[FaceletPosition, ...] = ()
    suggested_fix: str = ""
    fix_steps: tuple[str, ...] = ()
    can_auto_fix: bool = False
    jump_to_face: Face | None = None
    kind: ViolationKind | None = None
    colors: tuple[Color, ...] = ()


@dataclass(frozen=True)
class ValidationResult:
    is_valid: bool
    errors: tuple[CubeError, ...]
    resolved_count: int
    total_checks: int = TOTAL_CHECKS

    @property
    def progress_percent(self) -> int:
        if self.is_valid:
            return 100
        percent = round(self.resolved_count / self.total_checks * 100)
        return max(0, min(99, percent))

    def by_category(self, category: ErrorCategory) -> list[CubeError]:
        return [error for error in self.errors if error.category is category]


@dataclass(frozen=True)
class AutoFixResult:
    new_state: CubeState | None
    description: str
    success: bool


@dataclass(frozen=True)
class AutoFixReport:
    state: CubeState
    descriptions: list[str] = field(default_factory=list)
    success: bool = False
    iterations: int = 0


def _face_label(face: Face, scheme: Mapping[Face, Color]) -> str:
    return f"{FACE_NAMES[face]} ({scheme[face].display_name})"


def _color_count_error(violation: Violation) -> CubeError:
    color = violation.colors[0]
    name = color.display_name
    lower = name.lower()
    diff = violation.delta or 0
    plural = "s" if abs(diff) > 1 else ""
    if diff > 0:
        details = f"You have {diff} extra {lower} tile{plural}. Remove the excess to continue."
        suggested = f"Change a {lower} tile that looks wrong to another color"
        steps = (
            f"Look at all {lower} tiles listed",
            f"Identify which {lower} tile(s) should be a different color",
            "Select the correct color and repaint the wrong tile",
        )
    else:
        details = f"You need {-diff} more {lower} tile{plural} to complete the cube."
        suggested = f"Find empty or wrongly colored tiles and paint them {lower}"
        steps = (
            f"You need {-diff} more {lower} tile{plural}",
            "Check if any tiles have the wrong color",
            f"Paint the correct tiles {lower}",
        )
    return CubeError(
        id=f"color-count-{color.value}",
        category=ErrorCategory.COLOR_COUNT,
        severity=Severity.CRITICAL,
        title=f"{name} Count Error",
        message=violation.message,
        details=details,
        affected_positions=violation.positions,
        suggested_fix=suggested,
        fix_steps=steps,
        can_auto_fix=True,
        jump_to_face=violation.positions[0].face if violation.positions else None,
        kind=violation.kind,
        colors=violation.colors,
    )


def _valid_partners(color: Color) -> list[str]:
    return [c.display_name for c in ALL_COLORS if c != color and OPPOSITE_COLORS.get(color) != c]


def _piece_error(violation: Violation, scheme: Mapping[Face, Color]) -> CubeError:
    kind = violation.kind
    is_edge = kind.is_edge
    category = ErrorCategory.EDGE_PIECE if is_edge else ErrorCategory.CORNER_PIECE
    noun = "edge" if is_edge else "corner"
    faces = list(dict.fromkeys(position.face for position in violation.positions))
    connects = ", ".join(_face_label(face, scheme) for face in faces[: 2 if is_edge else 3])
    slot = violation.slots[0] if violation.slots else ""

    if kind in (ViolationKind.EDGE_SAME_COLOR, ViolationKind.CORNER_SAME_COLOR):
        repeated = next(c for c in violation.colors if violation.colors.count(c) > 1)
        title = f"Invalid {noun.title()}: Same Color"
        details = (
            f"{noun.title()} pieces always show different colors. The {slot} {noun} has "
            f"{repeated.display_name} more than once, which is impossible on a real cube."
        )
        suggested = f"Change one of the {repeated.display_name.lower()} stickers to a different color"
        steps = (
            f"This {noun} connects {connects}",
            f"{repeated.display_name} appears twice, one must be wrong",
            "Check your physical cube at this piece",
        )
        error_id = f"{category.value}-{slot}"
        severity = Severity.CRITICAL
    elif kind in (ViolationKind.EDGE_OPPOSITE, ViolationKind.CORNER_OPPOSITE):
        first = violation.colors[0]
        partners = _valid_partners(first)
        title = f"Opposite Colors on {noun.title()}"
        details = (
            f"{violation.message}. Opposite colors sit on opposite sides of a solved cube and never touch. "
            f"Valid neighbours of {first.display_name}: {', '.join(partners)}."
        )
        suggested = "One of these stickers is wrong, check your physical cube"
        steps = (
            "Opposite colors never touch on a real cube",
            f"This {noun} connects {connects}",
            "At least one sticker has the wrong color",
        )
        error_id = f"{category.value}-{slot}"
        severity = Severity.CRITICAL
    else:
        combo = "".join(color.value for color in violation.colors)
        title = f"Duplicate {noun.title()} Piece"
        locations = ", ".join(violation.slots)
        details = f"Each {noun} piece is unique and can only appear once; this one sits at {locations}."
        suggested = f"One of these {noun}s has the wrong colors, check every location"
        steps = (
            f"This {noun} appears at: {locations}",
            f"Each {noun} piece is unique on a real cube",
            "Check your physical cube at each location",
        )
        error_id = f"{category.value}-duplicate-{combo}"
        severity = Severity.WARNING

    return CubeError(
        id=error_id,
        category=category,
        severity=severity,
        title=title,
        message=violation.message,
        details=details,
        affected_positions=violation.positions,
        suggested_fix=suggested,
        fix_steps=steps,
        can_auto_fix=kind in _AUTO_FIXABLE,
        jump_to_face=faces[0] if faces else None,
        kind=kind,
        colors=violation.colors,
    )


_PARITY_TEXT = {
    ViolationKind.EDGE_FLIP: (
        "parity-edge-flip",
        "Single Edge Flip Detected",
        "Remove one edge piece, flip it, and reinsert",
    ),
    ViolationKind.CORNER_TWIST: (
        "parity-corner-twist",
        "Single Corner Twist Detected",
        "Remove the twisted corner, rotate it, and reinsert",
    ),
    ViolationKind.PIECE_SWAP: (
        "parity-piece-swap",
        "Swapped Pieces Detected",
        "Swap two edge pieces back on the physical cube",
    ),
}


def _parity_error(violation: Violation) -> CubeError:
    error_id, title, physical_fix = _PARITY_TEXT[violation.kind]
    return CubeError(
        id=error_id,
        category=ErrorCategory.PARITY,
        severity=Severity.CRITICAL,
        title=title,
        message=violation.message,
        details=(
            "The colors are consistent, but the physical cube itself cannot be solved by turning. "
            "This usually happens when it was taken apart and reassembled incorrectly."
        ),
        affected_positions=(),
        suggested_fix="The physical cube needs to be fixed before entering colors",
        fix_steps=(
            "This cube state is mathematically unsolvable",
            "Your physical cube was likely reassembled incorrectly",
            f"Real-world fix: {physical_fix}",
            "Then re-enter the colors from your corrected cube",
        ),
        can_auto_fix=False,
        kind=violation.kind,
    )


def check_orientation(state: CubeState) -> list[CubeError]:
    centers = state.centers()
    problems: list[str] = []

    missing = [face.value for face in FACE_ORDER if centers[face] is None]
    if missing:
        problems.append(f"Centres not set on {', '.join(missing)}")

    present = [color for color in centers.values() if color is not None]
    if len(set(present)) != len(present):
        problems.append("Two faces share the same centre color")

    for face in (Face.U, Face.F, Face.R):
        color, other = centers[face], centers[OPPOSITE_FACES[face]]
        if color is not None and other is not None and OPPOSITE_COLORS.get(color) != other:
            problems.append(
                f"{FACE_NAMES[face]} centre {color.display_name} is not opposite "
                f"{FACE_NAMES[OPPOSITE_FACES[face]]} centre {other.display_name}"
            )

    if not problems:
        return []
    positions = tuple(FaceletPosition(face=face, index=CENTER_INDEX) for face in FACE_ORDER)
    return [
        CubeError(
            id="orientation-centers",
            category=ErrorCategory.ORIENTATION,
            severity=Severity.WARNING,
            title="Centre Colors Look Wrong",
            message="; ".join(problems),
            details="Centre pieces never move relative to each other, so they fix the color scheme of the cube.",
            affected_positions=positions,
            suggested_fix="Hold the cube with the white centre on top and the green centre in front, then re-enter",
            fix_steps=(
                "Check every centre against your physical cube",
                "Opposite centres are white/yellow, red/orange and green/blue",
            ),
            can_auto_fix=False,
            jump_to_face=Face.U,
        )
    ]


def errors_from_violations(
    violations: Iterable[Violation],
    scheme: Mapping[Face, Color],
) -> list[CubeError]:
    errors: list[CubeError] = []
    for violation in violations:
        if violation.kind is ViolationKind.COLOR_COUNT:
            errors.append(_color_count_error(violation))
        elif violation.kind.is_parity:
            errors.append(_parity_error(violation))
        else:
            errors.append(_piece_error(violation, scheme))
    return errors


def validate_cube(state: CubeState) -> ValidationResult:
    """Runs every check and wraps the findings into user-facing errors; never raises."""
    scheme = reference_scheme(state.centers())
    structural = validate_structure(state)
    errors = errors_from_violations(structural, scheme)
    errors.extend(check_orientation(state))
    if not structural:
        errors.extend(errors_from_violations(check_parity(state), scheme))

    resolved = max(0, TOTAL_CHECKS - len(errors))
    logger.debug("Validation found %d error(s)", len(errors))
    return ValidationResult(is_valid=not errors, errors=tuple(errors), resolved_count=resolved)


# ============= AUTO-FIX =============


def _others_in_piece(state: CubeState, position: FaceletPosition) -> list[Color]:
    others: list[Color] = []
    for slot in slots_containing(position):
        for other in slot.positions:
            color = state.at(other)
            if other != position and color is not None:
                others.append(color)
    return others


def _is_legal_here(color: Color, others: Iterable[Color]) -> bool:
    return all(color != other and OPPOSITE_COLORS.get(color) != other for other in others)


def _least_used(candidates: Iterable[Color], counts: Mapping[Color, int]) -> Color | None:
    ordered = sorted(candidates, key=lambda color: (counts[color], ALL_COLORS.index(color)))
    return ordered[0] if ordered else None


def _fix_color_count(error: CubeError, state: CubeState) -> AutoFixResult:
    counts = state.color_counts()
    target = error.colors[0] if error.colors else None
    over = [c for c in ALL_COLORS if counts[c] > EXPECTED_COLOR_COUNT]
    under = [c for c in ALL_COLORS if counts[c] < EXPECTED_COLOR_COUNT]
    if target is not None and counts[target] > EXPECTED_COLOR_COUNT:
        over = [target]
    elif target is not None and counts[target] < EXPECTED_COLOR_COUNT:
        under = [target]
    over.sort(key=lambda c: -counts[c])
    under.sort(key=lambda c: counts[c])

    if not under:
        return AutoFixResult(None, "Cannot determine which color is missing.", False)

    # Prefer tiles that already sit in a broken piece.
    flagged = {
        position
        for violation in validate_structure(state)
        if violation.kind.is_edge or violation.kind.is_corner
        for position in violation.positions
    }
    candidates = [
        position
        for position in iter_positions()
        if not position.is_center and (state.at(position) in over or (not over and state.at(position) is None))
    ]
    candidates.sort(key=lambda p: (p not in flagged, FACE_ORDER.index(p.face), p.index))

    for position in candidates:
        others = _others_in_piece(state, position)
        for replacement in under:
            if _is_legal_here(replacement, others):
                old = state.at(position)
                old_name = old.display_name if old is not None else "empty"
                return AutoFixResult(
                    state.with_facelet(position, replacement),
                    f"Changed {position.name} from {old_name} to {replacement.display_name}",
                    True,
                )
    return AutoFixResult(None, "Could not find a suitable tile to change.", False)


def _fix_same_color(error: CubeError, state: CubeState) -> AutoFixResult:
    positions = error.affected_positions
    colors = [state.at(p) for p in positions]
    seen: set[Color] = set()
    index = None
    for i, color in enumerate(colors):
        if color is None:
            continue
        if color in seen:
            index = i
            break
        seen.add(color)
    if index is None:
        return AutoFixResult(None, "The piece no longer has a repeated color.", False)

    counts = state.color_counts()
    present = {c for c in colors if c is not None}
    replacement = _least_used((c for c in ALL_COLORS if _is_legal_here(c, present)), counts)
    if replacement is None:
        return AutoFixResult(None, "No legal replacement color exists for this piece.", False)

    duplicate = colors[index]
    return AutoFixResult(
        state.with_facelet(positions[index], replacement),
        f"Changed duplicate {duplicate.display_name} at {positions[index].name} to {replacement.display_name}",
        True,
    )


def _fix_opposite(error: CubeError, state: CubeState) -> AutoFixResult:
    positions = error.affected_positions
    colors = [state.at(p) for p in positions]
    counts = state.color_counts()

    for i in range(len(colors)):
        for j in range(i + 1, len(colors)):
            a, b = colors[i], colors[j]
            if a is None or b is None or OPPOSITE_COLORS.get(a) != b:
                continue
            index = i if counts[a] >= counts[b] else j
            changed = colors[index]
            remaining = [c for k, c in enumerate(colors) if k != index and c is not None]
            replacement = _least_used(
                (c for c in ALL_COLORS if c != changed and _is_legal_here(c, remaining)),
                counts,
            )
            if replacement is None:
                return AutoFixResult(None, "No legal replacement color exists for this piece.", False)
            return AutoFixResult(
                state.with_facelet(positions[index], replacement),
                f"Changed {changed.display_name} at {positions[index].name} to "
                f"{replacement.display_name} (opposite colors can't touch)",
                True,
            )
    return AutoFixResult(None, "The piece no longer has opposite colors.", False)


def auto_fix(error: CubeError, state: CubeState) -> AutoFixResult:
    """Attempts a mechanical recolouring for one error; never mutates ``state``."""
    if not error.can_auto_fix or error.kind is None:
        return AutoFixResult(None, "This error type cannot be auto-fixed. Please fix manually.", False)

    if error.kind is ViolationKind.COLOR_COUNT:
        result = _fix_color_count(error, state)
    elif error.kind in (ViolationKind.EDGE_SAME_COLOR, ViolationKind.CORNER_SAME_COLOR):
        result = _fix_same_color(error, state)
    elif error.kind in (ViolationKind.EDGE_OPPOSITE, ViolationKind.CORNER_OPPOSITE):
        result = _fix_opposite(error, state)
    else:
        result = AutoFixResult(None, "This error type cannot be auto-fixed. Please fix manually.", False)

    if result.success:
        logger.info("Auto-fix %s: %s", error.id, result.description)
    else:
        logger.debug("Auto-fix %s failed: %s", error.id, result.description)
    return result


def auto_fix_all(state: CubeState, max_iterations: int = 20) -> AutoFixReport:
    descriptions: list[str] = []
    current = state
    iterations = 0

    while iterations < max_iterations:
        result = validate_cube(current)
        fixable = [error for error in result.errors if error.can_auto_fix]
        if not fixable:
            break
        iterations += 1
        step = auto_fix(fixable[0], current)
        descriptions.append(step.description)
        if not step.success or step.new_state is None:
            break
        current = step.new_state

    final = validate_cube(current)
    return AutoFixReport(state=current, descriptions=descriptions, success=final.is_valid, iterations=iterations)
