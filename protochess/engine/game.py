"""
The Game class will be the entrypoint into the engine for the service layer (or any other driver loop).
It owns one Position, commits moves onto it permanently and keeps track of whether the game has ended.
"""

import logging
from dataclasses import dataclass, field
from typing import Callable, Optional, Self

from protochess.core.config import EngineConfig, rules_for
from protochess.core.shared_types import Status
from protochess.engine.evaluation import Evaluator
from protochess.engine.fen import STARTING_FEN, from_text_position, to_text_position
from protochess.engine.movegen import MoveGenerator
from protochess.engine.moves import Move
from protochess.engine.position import Position
from protochess.engine.search import Searcher
from protochess.engine.square import Dimensions, Square

LOGGER = logging.getLogger(__name__)


@dataclass
class Game:
    position: Position
    generator: MoveGenerator = field(default_factory=MoveGenerator)
    evaluator: Optional[Evaluator] = None
    order_captures_first: bool = False
    search_depth: int = EngineConfig.search_depth
    moves: list[Move] = field(default_factory=list)
    history: list[str] = field(default_factory=list)  # FEN strings, before each move
    status: Status = Status.IN_PROGRESS

    def __post_init__(self) -> None:
        # a game can be set up in a position that already ended
        self._update_game_status()

    @classmethod
    def default(cls, generator: Optional[MoveGenerator] = None) -> Self:
        """Standard chess from the starting position."""
        return cls.from_text(STARTING_FEN, generator)

    @classmethod
    def from_text(cls, fen: str, generator: Optional[MoveGenerator] = None) -> Self:
        generator = generator if generator is not None else MoveGenerator()
        return cls(from_text_position(fen, generator.rules), generator)

    @classmethod
    def from_config(cls, config: EngineConfig) -> Self:
        generator = MoveGenerator(rules_for(config))
        game = cls.from_text(config.starting_position, generator)
        game.order_captures_first = config.order_captures_first
        game.search_depth = config.search_depth
        return game

    # --- READ ONLY QUERIES ---
    @property
    def whos_turn(self) -> int:
        return self.position.whos_turn

    @property
    def dimensions(self) -> Dimensions:
        return self.position.dimensions

    @property
    def last_move(self) -> Optional[Move]:
        return self.moves[-1] if self.moves else None

    @property
    def winner(self) -> Optional[int]:
        """
        For now only works for checkmate.
        Given we know it is checkmate, the player who is to move just got mated and the player before them is the winner
        """
        if self.status != Status.CHECKMATE:
            return None
        return (self.position.whos_turn - 1) % self.position.num_players

    def pieces_as_tuples(self) -> list[tuple[int, int, int, str]]:
        return self.position.pieces_as_tuples()

    def tiles_as_tuples(self) -> list[tuple[int, int, str]]:
        return self.position.tiles_as_tuples()

    def moves_from(self, x: int, y: int) -> list[tuple[int, int]]:
        """Where can the piece on (x, y) go? Empty if it is not that piece's turn."""
        return [(square.x, square.y) for square in self.generator.legal_moves_from(self.position, Square(x, y))]

    def in_check(self) -> bool:
        return self.generator.in_check(self.position)

    def count_legal_moves(self) -> int:
        return self.generator.count_legal_moves(self.position)

    def moves_uci(self) -> list[str]:
        return [move.to_uci() for move in self.moves]

    def to_text(self) -> str:
        return to_text_position(self.position)

    # --- MUTATION ---
    def make_move(
        self,
        move_generator: MoveGenerator,
        x1: int,
        y1: int,
        x2: int,
        y2: int,
        promote_to: Optional[str] = None,
    ) -> bool:
        """
        Attempt to make a move
        -----

        The move is made only if (x1, y1) -> (x2, y2) (with exactly this promotion) is one of the legal moves.
        Otherwise nothing changes and False is returned.

        NOTE: `move_generator` has to play by the same piece rules as the game's own generator, which decides the
        status of the game afterwards.
        """
        assert move_generator.rules == self.generator.rules, "move generator plays by different piece rules"
        from_square, to_square = Square(x1, y1), Square(x2, y2)
        legal_moves = move_generator.legal_moves(self.position)
        move = next((move for move in legal_moves if move.matches(from_square, to_square, promote_to)), None)
        if move is None:
            LOGGER.debug("Rejected move %s -> %s (promotion: %s)", from_square, to_square, promote_to)
            return False

        self._commit(move)
        return True

    def play_best_move(self, depth: Optional[int] = None, should_stop: Optional[Callable[[], bool]] = None) -> bool:
        """
        Let the engine pick a move by searching `depth` plies ahead (default: the game's search depth), and play it.
        Returns False (and leaves the position alone) when there is nothing left to play.
        """
        depth = self.search_depth if depth is None else depth
        if depth < 1:
            # a depth 0 search only evaluates, it never picks a move
            raise ValueError(f"Need to search at least one ply to pick a move. got depth {depth}")
        searcher = Searcher(self.generator, self.evaluator, should_stop, self.order_captures_first)
        result = searcher.search(self.position, depth)
        if result.best_move is None:
            return False

        self._commit(result.best_move)
        return True

    # -- PRIVATE HELPERS ---
    def _commit(self, move: Move) -> None:
        """Apply the move for good: no undo will follow."""
        self.history.append(self.to_text())
        self.position.apply(move)
        self.moves.append(move)
        LOGGER.debug("Played %s, ply %d", move.to_uci(), self.position.ply)
        self._update_game_status()

    def _update_game_status(self) -> None:
        """Performs checks to see if game has ended and changes status accordingly."""
        if self.generator.has_legal_move(self.position):
            self.status = Status.IN_PROGRESS
        elif self.generator.in_check(self.position):
            self.status = Status.CHECKMATE
        else:
            self.status = Status.STALEMATE
