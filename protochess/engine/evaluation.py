"""Static evaluation of a position. Swappable: the search only needs something with an `evaluate` method."""

from dataclasses import dataclass, field
from typing import Protocol

from protochess.engine.pieces import STANDARD_RULES, PieceRules
from protochess.engine.position import Position
from protochess.engine.square import Square


class Evaluator(Protocol):
    def evaluate(self, position: Position) -> int:
        """Score in centipawns from the point of view of the player to move: higher is better for them."""
        ...


@dataclass(frozen=True, eq=False)
class MaterialEvaluator:
    """
    Material (the `value` of every piece rule) plus a small bonus for non-royal pieces standing close to the centre.
    Integer arithmetic only, so that scores are totally ordered and identical between runs.
    """

    rules: PieceRules = field(default_factory=lambda: STANDARD_RULES)
    centre_bonus: int = 4

    def evaluate(self, position: Position) -> int:
        material = self.count_material(position)
        player = position.whos_turn
        return material[player] - sum(score for other, score in material.items() if other != player)

    def count_material(self, position: Position) -> dict[int, int]:
        """Tally the points each player has on the board"""
        scores = {player: 0 for player in range(position.num_players)}
        for square, piece in position.pieces.items():
            rule = self.rules[piece.piece_type]
            scores[piece.owner] += rule.value
            if not rule.royal:
                scores[piece.owner] += self._centralisation(square, position)
        return scores

    def _centralisation(self, square: Square, position: Position) -> int:
        """Distances are doubled so the centre of an even sized board lies on whole numbers."""
        width, height = position.dimensions.width, position.dimensions.height
        distance = max(abs(2 * square.x - (width - 1)), abs(2 * square.y - (height - 1)))
        furthest = max(width - 1, height - 1)
        return self.centre_bonus * (furthest - distance) // 2
