"""Helpers for implementing Castling rules. Need to be imported by multiple sources"""

from dataclasses import dataclass
from enum import Enum
from typing import Optional, Self

from protochess.engine.pieces import BLACK, WHITE, Piece, PieceRules
from protochess.engine.square import Square


class CastlingSide(Enum):
    """Values are the direction along the rank the king travels in."""

    KING_SIDE = 1
    QUEEN_SIDE = -1


@dataclass(frozen=True)
class CastlingRight:
    owner: int
    side: CastlingSide

    @classmethod
    def from_fen(cls, character: str) -> Self:
        """K/Q for player 0, k/q for player 1"""
        owner = WHITE if character.isupper() else BLACK
        side = CastlingSide.KING_SIDE if character.lower() == "k" else CastlingSide.QUEEN_SIDE
        return cls(owner, side)

    def to_fen(self) -> str:
        character = "k" if self.side == CastlingSide.KING_SIDE else "q"
        return character.upper() if self.owner == WHITE else character

    def __lt__(self, other: "CastlingRight") -> bool:
        # FEN order: KQkq
        return (self.owner, -self.side.value) < (other.owner, -other.side.value)


FEN_CASTLING_CHARACTERS = "KQkq"


@dataclass(frozen=True)
class CastlingSquares:
    """
    Store the squares where king/rook start from/end up in by castling.
    NOTE: If castling rights have not been revoked, we already know the king / rook are still at their starting squares.
    """

    king_from: Square
    king_to: Square
    rook_from: Square
    rook_to: Square

    @classmethod
    def for_right(cls, right: CastlingRight, king_from: Square, rook_from: Square) -> Self:
        """The king moves two squares towards the rook, the rook jumps to the square the king passed over."""
        step = right.side.value
        king_to = king_from.shifted(2 * step, 0)
        rook_to = king_from.shifted(step, 0)
        return cls(king_from, king_to, rook_from, rook_to)


def find_castling_rook(
    pieces: dict[Square, Piece],
    rules: PieceRules,
    king_square: Square,
    side: CastlingSide,
    width: int,
) -> Optional[Square]:
    """
    The rook belonging to a castling right: the outermost castle partner of the king's owner on the king's rank,
    looking from the edge of the board back towards the king.
    """
    owner = pieces[king_square].owner
    edge = width - 1 if side == CastlingSide.KING_SIDE else 0
    for x in range(edge, king_square.x, -side.value):
        square = Square(x, king_square.y)
        piece = pieces.get(square)
        if piece is None:
            continue
        if piece.owner == owner and rules[piece.piece_type].castle_partner:
            return square
    return None


def squares_between_on_rank(from_square: Square, to_square: Square) -> list[Square]:
    """
    Find the squares in between the two squares specified that are on the same rank

    Needed for checking if you can still castle (the generator will check which of those are empty etc.)
    """
    assert from_square.y == to_square.y, f"{from_square} and {to_square} are not on the same rank"
    step = 1 if to_square.x > from_square.x else -1
    return [Square(x, from_square.y) for x in range(from_square.x + step, to_square.x, step)]


def squares_on_rank(from_square: Square, to_square: Square) -> list[Square]:
    """Like `squares_between_on_rank`, but includes both end points."""
    return [from_square, *squares_between_on_rank(from_square, to_square), to_square]
