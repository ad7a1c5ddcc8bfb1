"""Score-driven fallback strategies.

Hill-climbing with algorithm injection and the randomized-restart walk are the
same loop with different knobs, so both are instances of ``HeuristicStrategy``.
"""

from __future__ import annotations

import logging
import random
from dataclasses import dataclass, field
from typing import Callable, Sequence

from cubesolve.config import SolverConfig
from cubesolve.context import SolveContext
from cubesolve.formula import Direction, Move
from cubesolve.models import Face
from cubesolve.moves import BASIC_MOVES, apply_sequence_to_facelets, apply_to_facelets
from cubesolve.presets import algorithm_library
from cubesolve.state import CENTER_INDEX, FACE_SIZE, FACELET_COUNT, CubeState, FaceletTuple, is_solved_facelets

logger = logging.getLogger(__name__)

SOLVED_FACE_BONUS = 20

Scorer = Callable[[FaceletTuple], int]
Action = tuple[str, tuple[Move, ...]]

_FINAL_ADJUSTMENTS = tuple(
    Move(face=face, direction=direction)
    for face in (Face.U, Face.D)
    for direction in (Direction.CW, Direction.HALF, Direction.CCW)
)


def score_facelets(facelets: FaceletTuple) -> int:
    """One point per facelet matching its centre, plus a bonus per finished face."""
    score = 0
    for offset in range(0, FACELET_COUNT, FACE_SIZE):
        center = facelets[offset + CENTER_INDEX]
        matching = sum(1 for i in range(offset, offset + FACE_SIZE) if facelets[i] == center)
        score += matching
        if matching == FACE_SIZE:
            score += SOLVED_FACE_BONUS
    return score


def score_state(state: CubeState) -> int:
    return score_facelets(state.facelets)


def move_actions() -> list[Action]:
    return [(move.notation, (move,)) for move in BASIC_MOVES]


def move_and_algorithm_actions() -> list[Action]:
    return move_actions() + list(algorithm_library())


@dataclass
class HeuristicStrategy:
    """Greedy walk over candidate actions with a random escape when progress stalls.

    ``require_improvement`` turns the walk into hill-climbing: the best action is
    only taken if it raises the score, otherwise the stagnation policy kicks in.
    """

    name: str
    rng: random.Random = field(default_factory=random.Random)
    scorer: Scorer = score_facelets
    include_algorithms: bool = True
    require_improvement: bool = True
    greedy_ratio: float = 1.0
    max_iterations: int = 300
    restarts: int = 1
    stagnation_limit: int = 3
    stuck_limit: int = 50
    final_adjustments: bool = True

    def actions(self) -> list[Action]:
        return move_and_algorithm_actions() if self.include_algorithms else move_actions()

    def attempt(self, state: CubeState, context: SolveContext) -> list[Move] | None:
        start = state.facelets
        actions = self.actions()
        algorithms = [action for action in actions if len(action[1]) > 1]

        best_path: list[Move] = []
        best_score = self.scorer(start)
        for restart in range(self.restarts):
            if context.checkpoint():
                break
            path, facelets = self._walk(start, actions, algorithms, context)
            if is_solved_facelets(facelets):
                logger.info("%s solved the cube on run %d with %d moves", self.name, restart + 1, len(path))
                return path
            score = self.scorer(facelets)
            logger.debug("%s run %d ended with score %d", self.name, restart + 1, score)
            if score > best_score:
                best_score, best_path = score, path
            context.report(self.name, (restart + 1) / max(1, self.restarts))

        return best_path

    def _walk(
        self,
        start: FaceletTuple,
        actions: Sequence[Action],
        algorithms: Sequence[Action],
        context: SolveContext,
    ) -> tuple[list[Move], FaceletTuple]:
        path: list[Move] = []
        facelets = start
        streak = 0
        last_improvement = 0

        def apply(moves: Sequence[Move]) -> None:
            nonlocal facelets
            path.extend(moves)
            facelets = apply_sequence_to_facelets(facelets, moves)

        for step in range(self.max_iterations):
            if is_solved_facelets(facelets) or context.checkpoint():
                break

            if self.rng.random() < self.greedy_ratio:
                current = self.scorer(facelets)
                best_moves, best_score = self._best_action(facelets, actions)
                if best_moves and (not self.require_improvement or best_score > current):
                    apply(best_moves)
                    if best_score > current:
                        streak = 0
                        last_improvement = step
                    continue

                streak += 1
                if streak > self.stagnation_limit and algorithms:
                    apply(self.rng.choice(algorithms)[1])
                    streak = 0
                else:
                    apply((self.rng.choice(BASIC_MOVES),))
            else:
                apply((self.rng.choice(BASIC_MOVES),))

            if algorithms and step - last_improvement > self.stuck_limit:
                logger.debug("%s stuck in a local optimum at step %d", self.name, step)
                apply(self.rng.choice(algorithms)[1])
                last_improvement = step

        if self.final_adjustments and not is_solved_facelets(facelets):
            for move in _FINAL_ADJUSTMENTS:
                if is_solved_facelets(apply_to_facelets(facelets, move)):
                    apply((move,))
                    break

        return path, facelets

    def _best_action(
        self,
        facelets: FaceletTuple,
        actions: Sequence[Action],
    ) -> tuple[tuple[Move, ...], int]:
        best_moves: tuple[Move, ...] = ()
        best_score = -1
        for _, moves in actions:
            score = self.scorer(apply_sequence_to_facelets(facelets, moves))
            if score > best_score:
                best_moves, best_score = moves, score
        return best_moves, best_score


def hill_climb_strategy(config: SolverConfig, rng: random.Random) -> HeuristicStrategy:
    return HeuristicStrategy(
        name="hill-climb",
        rng=rng,
        include_algorithms=True,
        require_improvement=True,
        greedy_ratio=1.0,
        max_iterations=config.hill_climb_iterations,
        restarts=1,
        stagnation_limit=config.stagnation_limit,
        stuck_limit=config.stuck_limit,
    )


def random_restart_strategy(config: SolverConfig, rng: random.Random) -> HeuristicStrategy:
    return HeuristicStrategy(
        name="random-restart",
        rng=rng,
        include_algorithms=False,
        require_improvement=False,
        greedy_ratio=config.greedy_ratio,
        max_iterations=config.restart_steps,
        restarts=config.restarts,
        stagnation_limit=config.stagnation_limit,
        stuck_limit=config.stuck_limit,
        final_adjustments=False,
    )
