from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Sequence

from cubesolve.context import SolveContext
from cubesolve.formula import Move
from cubesolve.models import OPPOSITE_FACES, Face
from cubesolve.moves import BASIC_MOVES, apply_to_facelets
from cubesolve.state import CubeState, FaceletTuple, solved_target

logger = logging.getLogger(__name__)

# A single face turn changes at most this many facelets.
FACELETS_PER_TURN = 20


class _SearchAborted(Exception):
    pass


def misplaced_facelets(facelets: FaceletTuple, target: FaceletTuple) -> int:
    return sum(1 for color, wanted in zip(facelets, target) if color != wanted)


def lower_bound(facelets: FaceletTuple, target: FaceletTuple) -> int:
    misplaced = misplaced_facelets(facelets, target)
    return -(-misplaced // FACELETS_PER_TURN)


def can_follow(last_face: Face | None, next_face: Face) -> bool:
    if last_face is None:
        return True
    if last_face == next_face:
        return False
    # Opposite faces commute, so only one of the two orders is explored.
    if OPPOSITE_FACES[last_face] == next_face and last_face.value > next_face.value:
        return False
    return True


@dataclass
class IDAStarSearch:
    """Iterative-deepening search over the 18 face turns, bounded by depth and node count."""

    max_depth: int = 10
    max_nodes: int = 2_000_000
    moves: Sequence[Move] = BASIC_MOVES
    name: str = "ida*"
    nodes: int = 0

    def attempt(self, state: CubeState, context: SolveContext) -> list[Move] | None:
        facelets = state.facelets
        target = solved_target(facelets)
        if facelets == target:
            return []

        self.nodes = 0
        path: list[Move] = []
        start_depth = max(1, lower_bound(facelets, target))
        try:
            for depth in range(start_depth, self.max_depth + 1):
                context.report(self.name, depth / self.max_depth)
                logger.debug("IDA* depth %d (%d nodes so far)", depth, self.nodes)
                if self._search(facelets, target, depth, None, path, context):
                    logger.info("IDA* found a %d-move solution after %d nodes", len(path), self.nodes)
                    return list(path)
                if context.checkpoint():
                    return None
        except _SearchAborted:
            logger.debug("IDA* stopped after %d nodes", self.nodes)
            return None

        logger.debug("IDA* exhausted depth %d after %d nodes", self.max_depth, self.nodes)
        return None

    def _search(
        self,
        facelets: FaceletTuple,
        target: FaceletTuple,
        depth_left: int,
        last_face: Face | None,
        path: list[Move],
        context: SolveContext,
    ) -> bool:
        self.nodes += 1
        if self.nodes > self.max_nodes:
            logger.warning("IDA* hit the node limit of %d", self.max_nodes)
            raise _SearchAborted
        if context.tick():
            raise _SearchAborted

        if facelets == target:
            return True
        if lower_bound(facelets, target) > depth_left:
            return False

        for move in self.moves:
            if not can_follow(last_face, move.face):
                continue
            path.append(move)
            if self._search(apply_to_facelets(facelets, move), target, depth_left - 1, move.face, path, context):
                return True
            path.pop()
        return False
