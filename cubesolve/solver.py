from __future__ import annotations

import logging
import random
import time
from concurrent.futures import Future, ThreadPoolExecutor
from dataclasses import dataclass, field
from typing import Protocol, Sequence

from cubesolve.config import SolverConfig
from cubesolve.context import ProgressCallback, SolveContext, SolveStatus
from cubesolve.formula import FormulaConverter, Move, simplify_moves
from cubesolve.heuristics import hill_climb_strategy, random_restart_strategy, score_facelets
from cubesolve.moves import apply_sequence_to_facelets
from cubesolve.parity import validate
from cubesolve.pieces import is_legal_scheme
from cubesolve.primary import Backend, PrimarySolver
from cubesolve.search import IDAStarSearch
from cubesolve.state import CubeState, is_solved_facelets
from cubesolve.validator import Violation

logger = logging.getLogger(__name__)


class InvalidCubeStateError(ValueError):
    def __init__(self, violations: Sequence[Violation], reason: str | None = None) -> None:
        self.violations = list(violations)
        self.reason = reason
        problems = [violation.message for violation in self.violations]
        if reason:
            problems.insert(0, reason)
        summary = "; ".join(problems[:3])
        more = f" (+{len(problems) - 3} more)" if len(problems) > 3 else ""
        super().__init__(f"Cube state is not solvable: {summary}{more}")


class Strategy(Protocol):
    name: str

    def attempt(self, state: CubeState, context: SolveContext) -> list[Move] | None:
        ...


@dataclass(frozen=True)
class Solution:
    moves: tuple[Move, ...]
    status: SolveStatus
    strategy: str | None = None
    elapsed: float = 0.0

    @property
    def total_moves(self) -> int:
        return len(self.moves)

    @property
    def notation(self) -> str:
        return FormulaConverter.to_notation(self.moves)

    @property
    def is_complete(self) -> bool:
        return self.status in (SolveStatus.SOLVED, SolveStatus.ALREADY_SOLVED)

    def solves(self, state: CubeState) -> bool:
        """Replays the moves on ``state`` and checks the result."""
        return is_solved_facelets(apply_sequence_to_facelets(state.facelets, self.moves))

    def as_dict(self) -> dict[str, object]:
        return {
            "moves": [
                {
                    "notation": move.notation,
                    "face": move.face.value,
                    "direction": move.direction.value,
                    "wide": move.wide,
                    "description": move.description,
                }
                for move in self.moves
            ],
            "total_moves": self.total_moves,
            "notation": self.notation,
            "status": self.status.value,
            "strategy": self.strategy,
            "elapsed": round(self.elapsed, 4),
        }


@dataclass
class _BestAttempt:
    moves: list[Move] = field(default_factory=list)
    score: int = -1
    strategy: str | None = None

    def offer(self, moves: list[Move], score: int, strategy: str) -> None:
        if score > self.score:
            self.moves, self.score, self.strategy = moves, score, strategy


def default_strategies(config: SolverConfig, backend: Backend | None = None) -> list[Strategy]:
    rng = random.Random(config.seed)
    strategies: list[Strategy] = []
    if config.use_primary:
        strategies.append(PrimarySolver() if backend is None else PrimarySolver(backend=backend))
    strategies.append(IDAStarSearch(max_depth=config.max_depth, max_nodes=config.max_nodes))
    strategies.append(hill_climb_strategy(config, rng))
    strategies.append(random_restart_strategy(config, rng))
    return strategies


class Solver:
    """Runs the strategy chain until one answer replays to the solved cube."""

    def __init__(
        self,
        config: SolverConfig | None = None,
        strategies: Sequence[Strategy] | None = None,
        backend: Backend | None = None,
    ) -> None:
        self.config = config or SolverConfig()
        self._strategies = list(strategies) if strategies is not None else None
        self._backend = backend
        self._executor: ThreadPoolExecutor | None = None

    def strategies(self) -> list[Strategy]:
        # Fresh heuristic objects per solve so the seeded RNG makes runs reproducible.
        if self._strategies is not None:
            return list(self._strategies)
        return default_strategies(self.config, self._backend)

    def solve(
        self,
        state: CubeState,
        context: SolveContext | None = None,
        validate_input: bool | None = None,
    ) -> Solution:
        started = time.monotonic()
        context = context or SolveContext.with_timeout(self.config.timeout, yield_every=self.config.yield_every)
        check = self.config.validate if validate_input is None else validate_input

        if check:
            violations = validate(state)
            if not is_legal_scheme(state.centers()):
                raise InvalidCubeStateError(violations, "centre colors do not form a legal color scheme")
            if violations or not state.is_complete():
                raise InvalidCubeStateError(violations)

        if state.is_solved():
            return Solution(moves=(), status=SolveStatus.ALREADY_SOLVED, elapsed=time.monotonic() - started)

        best = _BestAttempt()
        for strategy in self.strategies():
            if context.checkpoint():
                break

            logger.debug("Trying strategy %s", strategy.name)
            moves = strategy.attempt(state, context)
            if moves is None:
                continue

            final = apply_sequence_to_facelets(state.facelets, moves)
            if is_solved_facelets(final):
                simplified = simplify_moves(moves)
                elapsed = time.monotonic() - started
                logger.info(
                    "Solved with %s: %d moves (%d before simplifying) in %.3fs",
                    strategy.name,
                    len(simplified),
                    len(moves),
                    elapsed,
                )
                return Solution(
                    moves=tuple(simplified),
                    status=SolveStatus.SOLVED,
                    strategy=strategy.name,
                    elapsed=elapsed,
                )

            logger.debug("Strategy %s did not reach the solved state", strategy.name)
            best.offer(moves, score_facelets(final), strategy.name)

        status = context.stop_status() or SolveStatus.INCOMPLETE
        elapsed = time.monotonic() - started
        logger.warning("No complete solution (%s); returning best attempt from %s", status.value, best.strategy)
        return Solution(
            moves=tuple(simplify_moves(best.moves)),
            status=status,
            strategy=best.strategy,
            elapsed=elapsed,
        )

    def submit(
        self,
        state: CubeState,
        progress: ProgressCallback | None = None,
        timeout: float | None = None,
    ) -> "SolveHandle":
        """Starts a solve on a background thread."""
        if self._executor is None:
            self._executor = ThreadPoolExecutor(max_workers=1, thread_name_prefix="cubesolve")
        context = SolveContext.with_timeout(
            timeout or self.config.timeout,
            progress=progress,
            yield_every=self.config.yield_every,
        )
        future = self._executor.submit(self.solve, state, context)
        return SolveHandle(future=future, context=context)

    def close(self) -> None:
        if self._executor is not None:
            self._executor.shutdown(wait=True)
            self._executor = None

    def __enter__(self) -> "Solver":
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()


@dataclass
class SolveHandle:
    future: Future
    context: SolveContext

    def cancel(self) -> None:
        self.context.cancel()

    def done(self) -> bool:
        return self.future.done()

    def result(self, timeout: float | None = None) -> Solution:
        return self.future.result(timeout=timeout)


def solve(state: CubeState, config: SolverConfig | None = None, **overrides: object) -> Solution:
    """Convenience wrapper around ``Solver(config).solve(state)``."""
    solver_config = (config or SolverConfig()).with_overrides(**overrides)
    return Solver(solver_config).solve(state)
