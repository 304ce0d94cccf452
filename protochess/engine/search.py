"""
Fixed depth alpha-beta search, negamax style.
-----

Every call looks at the position from the point of view of the player to move. A child's score is negated (what is
good for my opponent is bad for me) and the alpha-beta window is negated and swapped on the way down.

The search is fail-hard: returned scores are clamped into the window [alpha, beta]. As soon as a move scores at least
beta, the remaining moves of that node are skipped and beta is returned.

Positions are searched in place: every `apply` is paired with an `undo`, also when the search gets cancelled.
"""

import logging
from dataclasses import dataclass
from typing import Callable, Optional

from protochess.core.exceptions import SearchCancelledError
from protochess.engine.evaluation import Evaluator, MaterialEvaluator
from protochess.engine.movegen import MoveGenerator
from protochess.engine.moves import Move
from protochess.engine.position import Position

LOGGER = logging.getLogger(__name__)

MATE_SCORE = 1_000_000
DRAW_SCORE = 0
# strictly outside anything a node can return
INFINITY = MATE_SCORE + 1


@dataclass(frozen=True)
class SearchResult:
    score: int
    best_move: Optional[Move]


class Searcher:
    """
    Holds what stays the same during a search: the move generator, the evaluator, and an optional callback that is
    asked at every node whether the search should stop.
    """

    def __init__(
        self,
        generator: MoveGenerator,
        evaluator: Optional[Evaluator] = None,
        should_stop: Optional[Callable[[], bool]] = None,
        order_captures_first: bool = False,
    ) -> None:
        self.generator = generator
        self.evaluator = evaluator if evaluator is not None else MaterialEvaluator(generator.rules)
        self.should_stop = should_stop
        self.order_captures_first = order_captures_first
        self.nodes = 0

    def search(
        self,
        position: Position,
        depth: int,
        alpha: int = -INFINITY,
        beta: int = INFINITY,
    ) -> SearchResult:
        """Best move (and its score) for the player to move, looking `depth` plies ahead."""
        if depth < 0:
            raise ValueError(f"Search depth cannot be negative. got {depth}")
        self.nodes = 0
        result = self._negamax(position, depth, alpha, beta, ply=0)
        LOGGER.debug(
            "depth %d search: score %d, best move %s, %d nodes",
            depth,
            result.score,
            result.best_move.to_uci() if result.best_move else None,
            self.nodes,
        )
        return result

    def _negamax(self, position: Position, depth: int, alpha: int, beta: int, ply: int) -> SearchResult:
        if self.should_stop is not None and self.should_stop():
            raise SearchCancelledError(f"Search cancelled after {self.nodes} nodes")
        self.nodes += 1

        if depth == 0:
            return SearchResult(_clamp(self.evaluator.evaluate(position), alpha, beta), None)

        moves = self._ordered(self.generator.legal_moves(position))
        if not moves:
            # checkmate: lost, the sooner the worse. stalemate: draw
            score = -MATE_SCORE + ply if self.generator.in_check(position) else DRAW_SCORE
            return SearchResult(_clamp(score, alpha, beta), None)

        best_move: Optional[Move] = None
        for move in moves:
            token = position.apply(move)
            try:
                child = self._negamax(position, depth - 1, -beta, -alpha, ply + 1)
            finally:
                position.undo(token)

            score = -child.score
            if score >= beta:
                return SearchResult(beta, move)
            # strictly better only: on equal scores the earlier move is kept
            if score > alpha:
                alpha = score
                best_move = move
        return SearchResult(alpha, best_move)

    def _ordered(self, moves: list[Move]) -> list[Move]:
        """Generator order, or (stable) captures of the most valuable pieces first."""
        if not self.order_captures_first:
            return moves
        rules = self.generator.rules
        return sorted(
            moves,
            key=lambda move: -rules[move.captured.piece_type].value - 1 if move.captured else 0,
        )


def _clamp(score: int, alpha: int, beta: int) -> int:
    return max(alpha, min(beta, score))


def search(
    position: Position,
    generator: MoveGenerator,
    depth: int,
    alpha: int = -INFINITY,
    beta: int = INFINITY,
    evaluator: Optional[Evaluator] = None,
) -> SearchResult:
    """Convenience wrapper for a one-off search."""
    return Searcher(generator, evaluator).search(position, depth, alpha, beta)
