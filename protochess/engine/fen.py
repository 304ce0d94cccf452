"""
Reading and writing positions as (extended) FEN strings.
----

FEN, or Forsyth-Edwards Notation, is a standard notation for describing a particular board position of a chess game.
The purpose of FEN is to provide all the necessary information to restart a game from a particular position.

<board position string> <active color> <castling rights> <en passant square> <# half move clock> <number turns played>

* Ranks are listed from the top of the board (highest rank) to the bottom, separated by slashes.
    Capital letters are player 0's pieces, small letters player 1's. A number counts consecutive empty squares
    (may have several digits on wide boards), a '*' is a blocked square. The size of the board follows from the string.
* The active color is either "w" or "b"
* Castling rights are denoted as "k" for king-side or "q" for queen-side. Capital letters for player 0, small letters for
    player 1. If all rights have been revoked a "-" is used.
* The en passant square indicates the square a pawn just skipped over. If not available a "-" is used.
* The half move clock counts the number of moves made since the last pawn move or capture.
* The number of turns starts at 1 and increments after every move black makes.

Everything after the board is optional when reading: missing fields default to "w - - 0 1".

ex) The standard starting position has a FEN
rnbqkbnr/pppppppp/8/8/8/8/PPPPPPPP/RNBQKBNR w KQkq - 0 1
"""

import logging
import re
from string import ascii_lowercase
from typing import Optional

from protochess.core.exceptions import InvalidFENError
from protochess.engine.castling import (
    FEN_CASTLING_CHARACTERS,
    CastlingRight,
    CastlingSquares,
    find_castling_rook,
)
from protochess.engine.moves import EnPassant
from protochess.engine.pieces import BLACK, STANDARD_RULES, WHITE, Piece, PieceRules, orient
from protochess.engine.position import Position
from protochess.engine.square import Dimensions, Square
from protochess.engine.tiles import Tile

LOGGER = logging.getLogger(__name__)

STARTING_FEN = "rnbqkbnr/pppppppp/8/8/8/8/PPPPPPPP/RNBQKBNR w KQkq - 0 1"
BLOCKED_SQUARE = "*"
DEFAULT_FIELDS = ("w", "-", "-", "0", "1")

# a rank is made up of: runs of empty squares, piece letters and blocked squares
RANK_TOKEN = re.compile(r"(\d+)|([a-zA-Z])|(\*)")


def parse_rank(rank_fen: str, rules: PieceRules) -> list[Piece | None | str]:
    """
    One entry per square: a Piece, None for an empty square or BLOCKED_SQUARE.
    Raises InvalidFENError on anything that is not a run length, a known piece letter or a blocked square.
    """
    squares: list[Piece | None | str] = []
    position = 0
    for match in RANK_TOKEN.finditer(rank_fen):
        if match.start() != position:
            raise InvalidFENError(f"Unexpected character {rank_fen[position]!r} in rank {rank_fen!r}")
        position = match.end()

        run_length, letter, blocked = match.groups()
        if run_length is not None:
            count = int(run_length)
            if count == 0:
                raise InvalidFENError(f"Empty square count cannot be 0 in rank {rank_fen!r}")
            squares.extend([None] * count)
        elif letter is not None:
            if letter.lower() not in rules:
                raise InvalidFENError(f"Unknown piece type {letter!r} in rank {rank_fen!r}")
            squares.append(Piece.from_fen(letter))
        else:
            squares.append(BLOCKED_SQUARE)

    if position != len(rank_fen):
        raise InvalidFENError(f"Unexpected character {rank_fen[position]!r} in rank {rank_fen!r}")
    return squares


def parse_square(algebraic: str, dimensions: Dimensions) -> Square:
    """Valid square should be a letter for the file + a number for the rank, and lie on the board"""
    if not re.fullmatch(r"[a-z]\d+", algebraic):
        raise InvalidFENError(f"Cannot interpret {algebraic!r} as a square")
    square = Square.from_algebraic(algebraic)
    if not dimensions.contains(square):
        raise InvalidFENError(f"Square {algebraic!r} is not on the board")
    return square


def parse_counter(counter: str, name: str) -> int:
    if not counter.isdigit():
        raise InvalidFENError(f"The {name} must be a non-negative number. got {counter!r}")
    return int(counter)


def parse_castling_rights(castling: str, position: Position, rules: PieceRules) -> None:
    """
    A valid castling encoding has either KQkq, KQk, etc. or a '-' if all rights have been revoked.

    NOTE: Rights are resolved against the board. The king is the castler of that player on its home rank, the rook is
    the outermost castling partner on the king's rank in the direction of the right. Rights for which either piece is
    missing are dropped (they could never be used anyway).
    """
    if castling == "-":
        return
    if not castling or any(char not in FEN_CASTLING_CHARACTERS for char in castling):
        raise InvalidFENError(f"Invalid castling rights: {castling!r}")
    if len(set(castling)) != len(castling):
        raise InvalidFENError(f"Repeated castling rights: {castling!r}")

    for character in castling:
        right = CastlingRight.from_fen(character)
        home_rank = 0 if right.owner == WHITE else position.dimensions.height - 1
        kings = [
            square
            for square in position.squares_of(right.owner)
            if square.y == home_rank and rules[position.pieces[square].piece_type].castler
        ]
        if len(kings) != 1:
            LOGGER.debug("Dropping castling right %s: no single castler on the home rank", character)
            continue

        king_square = kings[0]
        rook_square = find_castling_rook(
            position.pieces, rules, king_square, right.side, position.dimensions.width
        )
        # the king needs room to move two squares towards the rook (and the rook to jump over it)
        if rook_square is None or abs(rook_square.x - king_square.x) < 3:
            LOGGER.debug("Dropping castling right %s: no rook to castle with", character)
            continue
        position.castling_rights[right] = CastlingSquares.for_right(right, king_square, rook_square)


def find_en_passant_victim(target: Square, mover: int, position: Position, rules: PieceRules) -> Optional[Square]:
    """
    The piece that skipped over `target` stands one more of its push steps beyond it, and must be able to take part
    in en passant at all. Rules are tried in registry order.
    """
    for symbol, rule in rules.items():
        if not (rule.en_passant and rule.double_step):
            continue
        for vector in rule.move_only_jumps:
            dx, dy = orient(vector, mover)
            square = target.shifted(dx, dy)
            piece = position.piece_at(square)
            if piece is not None and piece.owner == mover and piece.piece_type == symbol:
                return square
    return None


def parse_en_passant(en_passant: str, position: Position, rules: PieceRules) -> None:
    """The skipped square has to be free, and the piece that skipped it has to be right behind it."""
    if en_passant == "-":
        return
    target = parse_square(en_passant, position.dimensions)
    if target in position.pieces or position.is_blocked(target):
        raise InvalidFENError(f"En passant square {en_passant!r} is not empty")
    # the player that just moved is the one before the player to move
    mover = (position.whos_turn - 1) % position.num_players
    victim = find_en_passant_victim(target, mover, position, rules)
    if victim is None:
        raise InvalidFENError(f"En passant square {en_passant!r} cannot have been skipped over by player {mover}")
    position.en_passant = EnPassant(target=target, victim=victim)


def from_text_position(fen: str, rules: PieceRules = STANDARD_RULES) -> Position:
    """
    Parse the FEN into a Position.

    Raises InvalidFENError if the string cannot be interpreted. The Position is only returned once fully built.
    """
    parts = fen.strip().split()
    if not 1 <= len(parts) <= 6:
        raise InvalidFENError(f"Cannot interpret supplied string as FEN: {fen!r}")
    board_fen, active_color, castling, en_passant, half_moves, full_moves = (
        parts + list(DEFAULT_FIELDS[len(parts) - 1 :])
    )

    # Board: FEN string is read from the top rank to the bottom rank, left to right
    ranks = [parse_rank(rank_fen, rules) for rank_fen in board_fen.split("/")]
    widths = {len(rank) for rank in ranks}
    if len(widths) != 1 or 0 in widths:
        raise InvalidFENError(f"All ranks must describe the same (non-zero) number of squares: {board_fen!r}")
    width = widths.pop()
    if width > len(ascii_lowercase):
        raise InvalidFENError(f"Boards wider than {len(ascii_lowercase)} files are not supported: {board_fen!r}")

    position = Position(Dimensions(width, len(ranks)))
    for rank_idx, rank in enumerate(ranks):
        y = len(ranks) - 1 - rank_idx
        for x, content in enumerate(rank):
            square = Square(x, y)
            if content == BLOCKED_SQUARE:
                position.tiles[square] = Tile.blocked()
            elif isinstance(content, Piece):
                position.pieces[square] = content

    # Check which color is to move
    if active_color not in {"w", "b"}:
        raise InvalidFENError(f"Active color must be 'w' or 'b'. got {active_color!r}")
    position.whos_turn = WHITE if active_color == "w" else BLACK

    parse_castling_rights(castling, position, rules)
    parse_en_passant(en_passant, position, rules)

    position.half_move_clock = parse_counter(half_moves, "half move clock")
    full_move_number = parse_counter(full_moves, "full move number")
    if full_move_number < 1:
        raise InvalidFENError(f"The full move number starts at 1. got {full_move_number}")
    position.ply = (full_move_number - 1) * position.num_players + position.whos_turn
    return position


def rank_to_fen(position: Position, y: int) -> str:
    """FEN string of a single rank"""
    fen_characters: list[str] = []
    empty_count = 0
    for x in range(position.dimensions.width):
        square = Square(x, y)
        piece = position.piece_at(square)
        if piece is None and not position.is_blocked(square):
            empty_count += 1
            continue

        if empty_count > 0:
            fen_characters.append(str(empty_count))
            empty_count = 0
        fen_characters.append(piece.to_fen() if piece is not None else BLOCKED_SQUARE)

    # if the entire rank is empty, then we still place this number in the string
    if empty_count > 0:
        fen_characters.append(str(empty_count))
    return "".join(fen_characters)


def to_text_position(position: Position) -> str:
    """reverse operation: write a FEN from the given Position"""
    board_fen = "/".join(rank_to_fen(position, y) for y in range(position.dimensions.height - 1, -1, -1))
    active_color = "w" if position.whos_turn == WHITE else "b"
    castling = "".join(right.to_fen() for right in sorted(position.castling_rights)) or "-"
    en_passant = position.en_passant.target.to_algebraic() if position.en_passant is not None else "-"
    return (
        f"{board_fen} {active_color} {castling} {en_passant} "
        f"{position.half_move_clock} {position.full_move_number}"
    )
