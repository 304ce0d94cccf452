"""
Representation of a single position on the board: everything that is needed to continue the game from here.

The position is mutated in place. Every `apply` returns an `UndoToken`, and handing that token back to `undo` restores
the position exactly. Search relies on this instead of copying the board at every node.
"""

from copy import copy
from dataclasses import dataclass, field
from typing import Hashable, Optional, Self

from protochess.engine.castling import CastlingRight, CastlingSquares
from protochess.engine.moves import EnPassant, Move
from protochess.engine.pieces import Piece, PieceRules
from protochess.engine.square import STANDARD_DIMENSIONS, Dimensions, Square
from protochess.engine.tiles import Tile


@dataclass(frozen=True)
class UndoToken:
    """Snapshot of everything `apply` changes, so `undo` can put it back."""

    move: Move
    moved_piece: Piece
    captured: Optional[Piece]
    captured_square: Optional[Square]
    castling_squares: Optional[CastlingSquares]
    whos_turn: int
    castling_rights: dict[CastlingRight, CastlingSquares]
    en_passant: Optional[EnPassant]
    half_move_clock: int
    ply: int


@dataclass
class Position:
    dimensions: Dimensions
    pieces: dict[Square, Piece] = field(default_factory=dict)
    tiles: dict[Square, Tile] = field(default_factory=dict)
    whos_turn: int = 0
    num_players: int = 2
    # right -> where king and rook stand (and end up). Only rights whose pieces are still in place are stored.
    castling_rights: dict[CastlingRight, CastlingSquares] = field(default_factory=dict)
    en_passant: Optional[EnPassant] = None
    half_move_clock: int = 0
    ply: int = 0
    _history: list[UndoToken] = field(default_factory=list, repr=False, compare=False)

    def __post_init__(self) -> None:
        # every square gets a tile: fill in the plain checkerboard where nothing was specified
        for square in self.dimensions.squares():
            self.tiles.setdefault(square, Tile.for_square(square))

    @classmethod
    def empty(cls, width: int = STANDARD_DIMENSIONS[0], height: int = STANDARD_DIMENSIONS[1]) -> Self:
        return cls(Dimensions(width, height))

    # --- QUERIES ---
    def piece_at(self, square: Square) -> Optional[Piece]:
        return self.pieces.get(square)

    def is_blocked(self, square: Square) -> bool:
        tile = self.tiles.get(square)
        return tile is not None and tile.is_blocked

    def squares_of(self, player: int) -> list[Square]:
        """Squares occupied by `player`, in a fixed order (does not depend on the order moves were applied in)."""
        return sorted(square for square, piece in self.pieces.items() if piece.owner == player)

    def royal_squares(self, player: int, rules: PieceRules) -> list[Square]:
        return [square for square in self.squares_of(player) if rules[self.pieces[square].piece_type].royal]

    def pieces_as_tuples(self) -> list[tuple[int, int, int, str]]:
        """(owner, x, y, piece_type) for every piece on the board"""
        return [
            (piece.owner, square.x, square.y, piece.piece_type)
            for square, piece in sorted(self.pieces.items(), key=lambda item: item[0])
        ]

    def tiles_as_tuples(self) -> list[tuple[int, int, str]]:
        """(x, y, tile_type) for every square of the board"""
        return [
            (square.x, square.y, str(self.tiles[square].tile_type))
            for square in self.dimensions.squares()
        ]

    @property
    def full_move_number(self) -> int:
        """Starts at 1 and increments every time all players made a move."""
        return self.ply // self.num_players + 1

    def snapshot(self) -> Hashable:
        """Everything observable about the position, in a form that can be compared / hashed."""
        return (
            self.dimensions,
            tuple(sorted(self.pieces.items(), key=lambda item: item[0])),
            tuple(sorted(self.tiles.items(), key=lambda item: item[0])),
            self.whos_turn,
            tuple(sorted(self.castling_rights.items(), key=lambda item: item[0])),
            self.en_passant,
            self.half_move_clock,
            self.ply,
        )

    def copy(self) -> Self:
        """Independent copy (without undo history). Needed when positions are searched in parallel."""
        return type(self)(
            dimensions=self.dimensions,
            pieces=copy(self.pieces),
            tiles=copy(self.tiles),
            whos_turn=self.whos_turn,
            num_players=self.num_players,
            castling_rights=copy(self.castling_rights),
            en_passant=self.en_passant,
            half_move_clock=self.half_move_clock,
            ply=self.ply,
        )

    # --- SETUP ---
    def place_piece(self, piece: Piece, square: Square) -> None:
        if not self.dimensions.contains(square):
            raise ValueError(f"{square} is not on a {self.dimensions.width}x{self.dimensions.height} board")
        if self.is_blocked(square):
            raise ValueError(f"Cannot place a piece on blocked square {square}")
        self.pieces[square] = piece

    def remove_piece(self, square: Square) -> Optional[Piece]:
        return self.pieces.pop(square, None)

    def block_square(self, square: Square) -> None:
        if square in self.pieces:
            raise ValueError(f"Cannot block {square}: it is occupied")
        self.tiles[square] = Tile.blocked()

    # --- MUTATION ---
    def apply(self, move: Move) -> UndoToken:
        """
        Make the move on the board
        -----

        1. move the piece (and the rook when castling), remove whatever got captured (en passant: behind the target)
        2. promote, only if the move says so
        3. revoke castling rights whose king or rook square got touched
        4. update en passant square, clocks and side to move
        """
        moved_piece = self.pieces.get(move.from_square)
        assert moved_piece is not None, f"no piece to move on {move.from_square}"
        assert moved_piece.owner == self.whos_turn, f"{moved_piece} cannot move, player {self.whos_turn} is to move"

        captured_square: Optional[Square] = None
        if move.is_en_passant:
            assert self.en_passant is not None
            captured_square = self.en_passant.victim
        elif move.to_square in self.pieces:
            captured_square = move.to_square

        token = UndoToken(
            move=move,
            moved_piece=moved_piece,
            captured=self.pieces.get(captured_square) if captured_square is not None else None,
            captured_square=captured_square,
            castling_squares=self.castling_rights.get(move.castling) if move.castling else None,
            whos_turn=self.whos_turn,
            castling_rights=self.castling_rights,
            en_passant=self.en_passant,
            half_move_clock=self.half_move_clock,
            ply=self.ply,
        )

        # 1: move the pieces
        del self.pieces[move.from_square]
        if captured_square is not None:
            del self.pieces[captured_square]
        if token.castling_squares is not None:
            rook = self.pieces.pop(token.castling_squares.rook_from)
            self.pieces[token.castling_squares.rook_to] = rook

        # 2: promotion is never inferred
        self.pieces[move.to_square] = moved_piece.promoted(move.promotion) if move.promotion else moved_piece

        # 3: castling rights. NOTE: replace the dict instead of mutating it, the token holds on to the old one
        touched = {move.from_square, move.to_square}
        revoked = [
            right
            for right, squares in self.castling_rights.items()
            if squares.king_from in touched or squares.rook_from in touched
        ]
        if revoked:
            self.castling_rights = {
                right: squares for right, squares in self.castling_rights.items() if right not in revoked
            }

        # 4: bookkeeping
        if move.is_double_step:
            # the midpoint: pushes are not necessarily straight ahead
            passed = Square(
                (move.from_square.x + move.to_square.x) // 2,
                (move.from_square.y + move.to_square.y) // 2,
            )
            self.en_passant = EnPassant(target=passed, victim=move.to_square)
        else:
            self.en_passant = None
        self.half_move_clock = 0 if (move.resets_clock or token.captured is not None) else self.half_move_clock + 1
        self.ply += 1
        self.whos_turn = (self.whos_turn + 1) % self.num_players

        self._history.append(token)
        return token

    def undo(self, token: UndoToken) -> None:
        """Exactly reverse the last `apply`. Tokens must be handed back in reverse order."""
        assert self._history and self._history[-1] is token, "undo token does not belong to the last applied move"
        self._history.pop()

        move = token.move
        del self.pieces[move.to_square]
        if token.castling_squares is not None:
            rook = self.pieces.pop(token.castling_squares.rook_to)
            self.pieces[token.castling_squares.rook_from] = rook
        self.pieces[move.from_square] = token.moved_piece
        if token.captured is not None:
            assert token.captured_square is not None
            self.pieces[token.captured_square] = token.captured

        self.whos_turn = token.whos_turn
        self.castling_rights = token.castling_rights
        self.en_passant = token.en_passant
        self.half_move_clock = token.half_move_clock
        self.ply = token.ply
