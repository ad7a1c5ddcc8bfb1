from __future__ import annotations

from pydantic import BaseModel, Field, field_validator

from cubesolve.diagnostics import CubeError, ValidationResult
from cubesolve.formula import Move
from cubesolve.models import FACE_ORDER
from cubesolve.solver import Solution
from cubesolve.state import FACE_SIZE, CubeState


class CubeStatePayload(BaseModel):
    """Mapping form of a cube: each face letter to its 9 colour symbols, ``X`` for unset."""

    U: list[str] = Field(min_length=FACE_SIZE, max_length=FACE_SIZE)
    R: list[str] = Field(min_length=FACE_SIZE, max_length=FACE_SIZE)
    F: list[str] = Field(min_length=FACE_SIZE, max_length=FACE_SIZE)
    D: list[str] = Field(min_length=FACE_SIZE, max_length=FACE_SIZE)
    L: list[str] = Field(min_length=FACE_SIZE, max_length=FACE_SIZE)
    B: list[str] = Field(min_length=FACE_SIZE, max_length=FACE_SIZE)

    @field_validator("U", "R", "F", "D", "L", "B", mode="before")
    @classmethod
    def _normalize_symbols(cls, value: object) -> object:
        if isinstance(value, str):
            value = list(value)
        if isinstance(value, list):
            return [("X" if item is None else str(item).strip().upper() or "X") for item in value]
        return value

    @field_validator("U", "R", "F", "D", "L", "B")
    @classmethod
    def _check_symbols(cls, value: list[str]) -> list[str]:
        for symbol in value:
            if symbol not in "WYROGBX" or len(symbol) != 1:
                raise ValueError(f"Unknown colour symbol {symbol!r}")
        return value

    def to_state(self) -> CubeState:
        return CubeState.from_faces({face: getattr(self, face.value) for face in FACE_ORDER})

    @classmethod
    def from_state(cls, state: CubeState) -> "CubeStatePayload":
        faces = state.to_faces()
        return cls(
            **{
                face.value: [color.value if color is not None else "X" for color in faces[face]]
                for face in FACE_ORDER
            }
        )


class MovePayload(BaseModel):
    notation: str
    face: str = Field(pattern="^[URFDLB]$")
    direction: str = Field(pattern="^(CW|CCW|180)$")
    wide: bool = False
    description: str

    @classmethod
    def from_move(cls, move: Move) -> "MovePayload":
        return cls(
            notation=move.notation,
            face=move.face.value,
            direction=move.direction.value,
            wide=move.wide,
            description=move.description,
        )


class SolutionPayload(BaseModel):
    moves: list[MovePayload]
    total_moves: int = Field(ge=0)
    notation: str
    status: str = Field(pattern="^(already_solved|solved|incomplete|timed_out|cancelled)$")
    strategy: str | None = None
    elapsed: float = Field(ge=0)
    is_complete: bool

    @classmethod
    def from_solution(cls, solution: Solution) -> "SolutionPayload":
        return cls(
            moves=[MovePayload.from_move(move) for move in solution.moves],
            total_moves=solution.total_moves,
            notation=solution.notation,
            status=solution.status.value,
            strategy=solution.strategy,
            elapsed=solution.elapsed,
            is_complete=solution.is_complete,
        )


class PositionPayload(BaseModel):
    face: str = Field(pattern="^[URFDLB]$")
    position: int = Field(ge=0, le=8)


class CubeErrorPayload(BaseModel):
    id: str
    category: str = Field(pattern="^(color-count|edge-piece|corner-piece|orientation|parity)$")
    severity: str = Field(pattern="^(critical|warning|info)$")
    title: str
    message: str
    details: str
    affected_positions: list[PositionPayload]
    suggested_fix: str
    fix_steps: list[str]
    can_auto_fix: bool
    jump_to_face: str | None = None

    @classmethod
    def from_error(cls, error: CubeError) -> "CubeErrorPayload":
        return cls(
            id=error.id,
            category=error.category.value,
            severity=error.severity.value,
            title=error.title,
            message=error.message,
            details=error.details,
            affected_positions=[
                PositionPayload(face=position.face.value, position=position.index)
                for position in error.affected_positions
            ],
            suggested_fix=error.suggested_fix,
            fix_steps=list(error.fix_steps),
            can_auto_fix=error.can_auto_fix,
            jump_to_face=error.jump_to_face.value if error.jump_to_face is not None else None,
        )


class ValidationPayload(BaseModel):
    is_valid: bool
    errors: list[CubeErrorPayload]
    resolved_count: int = Field(ge=0)
    total_checks: int = Field(ge=1)
    progress_percent: int = Field(ge=0, le=100)

    @classmethod
    def from_result(cls, result: ValidationResult) -> "ValidationPayload":
        return cls(
            is_valid=result.is_valid,
            errors=[CubeErrorPayload.from_error(error) for error in result.errors],
            resolved_count=result.resolved_count,
            total_checks=result.total_checks,
            progress_percent=result.progress_percent,
        )
