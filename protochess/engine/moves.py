"""
Geometry/Base movement and capturing/attacking rules

Key idea: every piece type is described by a `PieceRule`. The same handful of primitives (raycasting for sliding
pieces, single steps for everything else) interpret those rules, both forwards ("where can this piece go?") and
backwards ("can anything reach this square?").

Legality (not leaving your own royal piece attacked) is checked later by the MoveGenerator
"""

from dataclasses import dataclass, replace
from typing import Optional, Protocol, Self

from protochess.engine.castling import CastlingRight
from protochess.engine.pieces import Piece, PieceRule, PieceRules, Vector, orient
from protochess.engine.square import Dimensions, Square


@dataclass(frozen=True)
class EnPassant:
    """The square a pawn-like piece skipped over (`target`) and the square it ended up on (`victim`)."""

    target: Square
    victim: Square


class Board(Protocol):
    """Just the parts the movement strategies need"""

    dimensions: Dimensions
    num_players: int
    en_passant: Optional[EnPassant]

    def piece_at(self, square: Square) -> Optional[Piece]: ...
    def is_blocked(self, square: Square) -> bool: ...
    def royal_squares(self, player: int, rules: PieceRules) -> list[Square]: ...


@dataclass(frozen=True)
class Move:
    """basic definition of a move to be made. Everything besides the squares and promotion is filled in by the generator."""

    from_square: Square
    to_square: Square
    promotion: Optional[str] = None
    captured: Optional[Piece] = None
    castling: Optional[CastlingRight] = None
    is_en_passant: bool = False
    is_double_step: bool = False
    # pawn-like moves and captures reset the half move clock
    resets_clock: bool = False

    @classmethod
    def from_uci(cls, uci: str) -> Self:
        """
        Universal Chess Interface:
        ---

        examples:
        * "e2e4": move the piece that was on e2 to e4
        * "e7e8q" : (pawn) moves from e7 to e8 and promotes to a queen (the q)
        * "a9a10": ranks beyond the 9th take two digits

        NOTE: Captures / castling / en passant are not encoded. Look the move up among the legal moves instead.
        """
        promotion = uci[-1] if uci[-1].isalpha() and not uci[-2].isalpha() else None
        body = uci[:-1] if promotion else uci
        # second square starts at the second letter
        split = next(idx for idx in range(1, len(body)) if body[idx].isalpha())
        return cls(
            Square.from_algebraic(body[:split]),
            Square.from_algebraic(body[split:]),
            promotion=promotion,
        )

    def to_uci(self) -> str:
        return f"{self.from_square.to_algebraic()}{self.to_square.to_algebraic()}{self.promotion or ''}"

    def matches(self, from_square: Square, to_square: Square, promotion: Optional[str] = None) -> bool:
        """Does a (from, to, promotion) request refer to this move?"""
        return (
            self.from_square == from_square
            and self.to_square == to_square
            and self.promotion == promotion
        )

    @property
    def is_capture(self) -> bool:
        return self.captured is not None


def is_open(square: Square, board: Board) -> bool:
    """On the board, and not a blocked tile."""
    return board.dimensions.contains(square) and not board.is_blocked(square)


# --- MOVEMENT RULES ---
def raycasting_move(
    square: Square, board: Board, directions: tuple[Vector, ...], owner: int
) -> list[Move]:
    """
    Raycasting algorithm
    -----

    ---
    The main trick we use to check the 'line of sight of a piece'.
    We define move directions and move along them until we hit another piece,
    a blocked tile or the edge of the board.
    """
    moves: list[Move] = []
    for dx, dy in directions:
        target = square
        while True:
            target = target.shifted(dx, dy)
            if not is_open(target, board):
                break

            occupant = board.piece_at(target)
            if occupant is not None:
                # only need to add the first occupied square found if it is the opponent's: then it can be captured.
                if occupant.owner != owner:
                    moves.append(Move(square, target, captured=occupant, resets_clock=True))
                break

            moves.append(Move(square, target))
    return moves


def single_step_move(
    square: Square,
    board: Board,
    deltas: tuple[Vector, ...],
    owner: int,
    quiet: bool = True,
    capture: bool = True,
) -> list[Move]:
    """
    Raycasting is for sliding pieces. This is the equivalent for pieces that just move a single step along a direction.
    `quiet` allows moving onto an empty square, `capture` allows taking an opponent's piece.
    """
    moves: list[Move] = []
    for dx, dy in deltas:
        target = square.shifted(dx, dy)
        if not is_open(target, board):
            continue

        occupant = board.piece_at(target)
        if occupant is None and quiet:
            moves.append(Move(square, target))
        elif occupant is not None and capture and occupant.owner != owner:
            moves.append(Move(square, target, captured=occupant, resets_clock=True))
    return moves


def double_step_moves(square: Square, board: Board, rule: PieceRule, owner: int) -> list[Move]:
    """From its owner's second rank a pawn-like piece may make its push twice, if both squares are free."""
    if square.y != board.dimensions.second_rank(owner):
        return []

    moves: list[Move] = []
    for vector in rule.move_only_jumps:
        dx, dy = orient(vector, owner)
        passed = square.shifted(dx, dy)
        target = passed.shifted(dx, dy)
        if not (is_open(passed, board) and is_open(target, board)):
            continue
        if board.piece_at(passed) is None and board.piece_at(target) is None:
            moves.append(Move(square, target, is_double_step=True, resets_clock=True))
    return moves


def en_passant_moves(square: Square, board: Board, rule: PieceRule, owner: int) -> list[Move]:
    """A capture-only step onto the square an opponent's pawn-like piece just skipped over takes that piece."""
    en_passant = board.en_passant
    if en_passant is None or board.piece_at(en_passant.target) is not None:
        return []

    victim = board.piece_at(en_passant.victim)
    if victim is None or victim.owner == owner:
        return []

    for vector in rule.capture_only_jumps:
        dx, dy = orient(vector, owner)
        if square.shifted(dx, dy) == en_passant.target:
            return [
                Move(
                    square,
                    en_passant.target,
                    captured=victim,
                    is_en_passant=True,
                    resets_clock=True,
                )
            ]
    return []


def candidate_moves(square: Square, board: Board, rules: PieceRules) -> list[Move]:
    """
    All pseudo-legal moves of the piece on `square`. Castling is added by the MoveGenerator, promotions are expanded
    there as well (this returns the bare push onto the last rank).
    """
    piece = board.piece_at(square)
    assert piece is not None, f"no piece on {square}"
    rule = rules[piece.piece_type]
    owner = piece.owner
    pawn_like = bool(rule.promotions) or rule.double_step

    def oriented(vectors: tuple[Vector, ...]) -> tuple[Vector, ...]:
        return tuple(orient(vector, owner) for vector in vectors)

    moves: list[Move] = []
    moves.extend(raycasting_move(square, board, oriented(rule.slides), owner))
    moves.extend(single_step_move(square, board, oriented(rule.jumps), owner))
    moves.extend(single_step_move(square, board, oriented(rule.move_only_jumps), owner, capture=False))
    moves.extend(single_step_move(square, board, oriented(rule.capture_only_jumps), owner, quiet=False))
    if rule.double_step:
        moves.extend(double_step_moves(square, board, rule, owner))
    if rule.en_passant:
        moves.extend(en_passant_moves(square, board, rule, owner))

    if pawn_like:
        moves = [
            replace(move, resets_clock=True) for move in moves
        ]
    return moves


def pseudo_destinations(square: Square, board: Board, rules: PieceRules) -> set[Square]:
    return {move.to_square for move in candidate_moves(square, board, rules)}


# --- CAPTURING RULES / ATTACKING RULES ---
def raycasting_attack(
    square: Square,
    by_player: int,
    board: Board,
    rules: PieceRules,
    directions: frozenset[Vector],
) -> bool:
    """
    Raycasting algorithm for attacks.
    ---

    Where `raycasting_move()` determines
    _"What is the line-of-sight of the piece standing on the specified square?"_

    This function determines:
    _"Is the specified square in the line-of-sight of a piece of the specified player that
    is allowed to slide along the given direction?"_

    Walk backwards along every direction until the first piece (or blocked tile / edge of the board).
    """
    for dx, dy in directions:
        source = square
        while True:
            source = source.shifted(-dx, -dy)
            if not is_open(source, board):
                break

            piece = board.piece_at(source)
            if piece is None:
                continue
            if piece.owner == by_player:
                slides = rules[piece.piece_type].slides
                if orient((dx, dy), by_player) in slides:
                    return True
            break
    return False


def single_step_attack(
    square: Square,
    by_player: int,
    board: Board,
    rules: PieceRules,
    deltas: frozenset[Vector],
) -> bool:
    """
    The equivalent for steppers: look one step back along every delta for a piece that could have made that step as a
    capture.

    NOTE: Pawn-like moves are not symmetric. Deltas are already oriented for `by_player`, and so the piece found is
    checked against its rule after orienting back (orient is its own inverse).
    """
    for dx, dy in deltas:
        piece = board.piece_at(square.shifted(-dx, -dy))
        if piece is None or piece.owner != by_player:
            continue
        rule = rules[piece.piece_type]
        vector = orient((dx, dy), by_player)
        if vector in rule.jumps or vector in rule.capture_only_jumps:
            return True
    return False


def is_attacked(square: Square, by_player: int, board: Board, rules: PieceRules) -> bool:
    """Could any piece of `by_player` capture on `square`? (the square itself may be empty)"""
    slides, jumps = rules.attack_vectors(by_player)
    return single_step_attack(square, by_player, board, rules, jumps) or raycasting_attack(
        square, by_player, board, rules, slides
    )


def in_check(player: int, board: Board, rules: PieceRules) -> bool:
    """
    Is any royal piece of `player` attacked by any other player?
    A side without royal pieces can never be in check.
    """
    opponents = [other for other in range(board.num_players) if other != player]
    return any(
        is_attacked(square, opponent, board, rules)
        for square in board.royal_squares(player, rules)
        for opponent in opponents
    )
