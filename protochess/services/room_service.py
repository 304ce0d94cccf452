"""
Orchestration of one game room: seats players, relays their moves into the engine and describes the resulting state.

Transport is someone else's problem. Whoever owns the connections calls these methods (one call at a time per room)
and sends the returned responses wherever they need to go.
"""

import logging
from typing import Optional, Self

from protochess.api.models import (
    GameStateResponse,
    MovesFromRequest,
    MovesFromResponse,
    PieceModel,
    PlayerListResponse,
    TakeTurnRequest,
    TileModel,
    TurnModel,
)
from protochess.core.config import EngineConfig
from protochess.core.exceptions import (
    GameStateError,
    IllegalMoveError,
    InvalidRequestError,
    NotYourTurnError,
)
from protochess.core.shared_types import Status
from protochess.engine.game import Game
from protochess.engine.movegen import MoveGenerator

LOGGER = logging.getLogger(__name__)

# The generator is stateless: one instance serves every room
SHARED_GENERATOR = MoveGenerator()


class RoomService:
    """Players are seated in the order they join. Seat number = player index in the engine. Seat 0 is the leader."""

    def __init__(self, game: Optional[Game] = None) -> None:
        self.game = game if game is not None else Game.default(SHARED_GENERATOR)
        # moves are checked by the same rules the game uses to decide its status
        self.generator = self.game.generator
        self.players: list[str] = []
        self.to_move_in_check = self.game.in_check()
        self.last_turn: Optional[TurnModel] = None
        self.winner: Optional[str] = None

    @classmethod
    def from_config(cls, config: EngineConfig) -> Self:
        return cls(Game.from_config(config))

    # -- PLAYERS ---
    def add_player(self, name: str) -> GameStateResponse:
        """New player takes the next free seat and receives the current state of the game."""
        if name in self.players:
            raise InvalidRequestError(f"A player called {name!r} is already in this room.")
        self.players.append(name)
        LOGGER.info("Player %s joined in seat %d", name, len(self.players) - 1)
        return self.game_state()

    def remove_player(self, name: str) -> None:
        """Everyone seated after the leaving player moves up one seat."""
        seat = self._seat(name)
        self.players.pop(seat)
        LOGGER.info("Player %s left seat %d", name, seat)

    def is_empty(self) -> bool:
        return not self.players

    def list_players(self, name: str) -> PlayerListResponse:
        return PlayerListResponse(player_num=self._seat(name), you=name, names=list(self.players))

    def switch_leader(self, name: str, new_leader: int) -> None:
        """Only the leader may hand over seat 0, and only to someone who is actually seated."""
        if self._seat(name) != 0:
            raise GameStateError(f"Only the leader can switch leaders. {name!r} is not the leader.")
        if not 0 <= new_leader < len(self.players):
            raise InvalidRequestError(f"No player in seat {new_leader}.")
        self.players[0], self.players[new_leader] = self.players[new_leader], self.players[0]

    # -- GAME ---
    def take_turn(self, request: TakeTurnRequest) -> GameStateResponse:
        """
        Make a move attempt.
        ----

        1. The game must still be going, and it must be the requesting player's turn.
        2. The engine only accepts legal moves.
        3. Afterwards: is the next player in check? Did that end the game?
        """
        seat = self._seat(request.player_name)
        if self.game.status != Status.IN_PROGRESS:
            raise GameStateError(f"Game is not in progress. status: {self.game.status}")
        self._assert_your_turn(seat)

        turn = request.turn
        (x1, y1), (x2, y2) = turn.from_square, turn.to_square
        if not self.game.make_move(self.generator, x1, y1, x2, y2, turn.promote_to):
            LOGGER.warning("Illegal move requested by %s: %s -> %s", request.player_name, turn.from_square, turn.to_square)
            raise IllegalMoveError(f"Move not allowed: {turn.from_square} -> {turn.to_square}")

        self.last_turn = turn
        self.to_move_in_check = self.game.in_check()
        if self.game.status == Status.CHECKMATE:
            # We have a winner!
            self.winner = request.player_name
            LOGGER.info("Player %s won by checkmate", request.player_name)
        return self.game_state()

    def moves_from(self, request: MovesFromRequest) -> MovesFromResponse:
        """Move hints for the player to move."""
        self._assert_your_turn(self._seat(request.player_name))
        return MovesFromResponse(
            from_square=(request.x, request.y),
            to=self.game.moves_from(request.x, request.y),
        )

    def game_state(self) -> GameStateResponse:
        """Everything a client needs to draw the board."""
        dimensions = self.game.dimensions
        pieces = [
            PieceModel(owner=owner, x=x, y=y, piece_type=piece_type)
            for owner, x, y, piece_type in self.game.pieces_as_tuples()
        ]
        tiles = [TileModel(x=x, y=y, tile_type=tile_type) for x, y, tile_type in self.game.tiles_as_tuples()]
        to_move = self.game.whos_turn
        in_check_kings = (
            [
                piece
                for piece in pieces
                if piece.owner == to_move and self.generator.rules[piece.piece_type].royal
            ]
            if self.to_move_in_check
            else None
        )
        return GameStateResponse(
            width=dimensions.width,
            height=dimensions.height,
            winner=self.winner,
            to_move=to_move,
            to_move_in_check=self.to_move_in_check,
            in_check_kings=in_check_kings,
            last_turn=self.last_turn,
            tiles=tiles,
            pieces=pieces,
        )

    # -- Internal helpers --
    def _seat(self, name: str) -> int:
        if name not in self.players:
            raise InvalidRequestError(f"{name!r} is not seated in this room.")
        return self.players.index(name)

    def _assert_your_turn(self, seat: int) -> None:
        if seat != self.game.whos_turn:
            raise NotYourTurnError(f"It is not your turn. Waiting for player {self.game.whos_turn} to make a move first.")
