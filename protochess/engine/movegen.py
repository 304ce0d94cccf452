"""
Legal move generation.

The MoveGenerator holds nothing but the piece rules of a variant. It never stores a position, so a single instance
can be shared by every game that plays that variant.
"""

from dataclasses import dataclass, field, replace
from typing import Optional

from protochess.engine.castling import CastlingRight, squares_between_on_rank, squares_on_rank
from protochess.engine.moves import Move, candidate_moves, in_check, is_attacked, pseudo_destinations
from protochess.engine.pieces import STANDARD_RULES, PieceRules
from protochess.engine.position import Position
from protochess.engine.square import Square


@dataclass(frozen=True, eq=False)
class MoveGenerator:
    rules: PieceRules = field(default_factory=lambda: STANDARD_RULES)

    # --- ATTACK & LEGALITY ---
    def pseudo_moves(self, position: Position, square: Square) -> list[Move]:
        """Moves of the piece on `square` that follow its movement rule, ignoring whether they expose a royal piece."""
        return candidate_moves(square, position, self.rules)

    def pseudo_destinations(self, position: Position, square: Square) -> set[Square]:
        return pseudo_destinations(square, position, self.rules)

    def is_attacked(self, position: Position, square: Square, by_player: int) -> bool:
        return is_attacked(square, by_player, position, self.rules)

    def in_check(self, position: Position, player: Optional[int] = None) -> bool:
        """Is `player` (default: the player to move) in check?"""
        return in_check(position.whos_turn if player is None else player, position, self.rules)

    # --- LEGAL MOVES ---
    def legal_moves(self, position: Position) -> list[Move]:
        """
        List of legal moves for the player to move
        ----

        **Combines the following**

        1. generate candidate moves, using the movement rules of every piece (origins in sorted square order)
        2. add castling moves
        3. remove illegal options --> a move that would put you in check or you are in check and the move does not get you out of it.
        4. Pawn push to promotion square? --> expand the move into one for every piece type the pawn can promote into.
        """
        player = position.whos_turn
        candidates: list[Move] = []
        for square in position.squares_of(player):
            candidates.extend(self.pseudo_moves(position, square))
        candidates.extend(self._castling_moves(position))

        legal: list[Move] = []
        for move in candidates:
            if self._is_putting_yourself_in_check(position, move):
                continue
            legal.extend(self._expand_promotions(position, move))
        return legal

    def legal_moves_from(self, position: Position, square: Square) -> list[Square]:
        """Destinations of the piece on `square` (each listed once, even if several promotions lead there)."""
        destinations: list[Square] = []
        for move in self.legal_moves(position):
            if move.from_square == square and move.to_square not in destinations:
                destinations.append(move.to_square)
        return destinations

    def legal_moves_as_tuples(self, position: Position) -> list[tuple[tuple[int, int], tuple[int, int]]]:
        return [
            ((move.from_square.x, move.from_square.y), (move.to_square.x, move.to_square.y))
            for move in self.legal_moves(position)
        ]

    def count_legal_moves(self, position: Position) -> int:
        return len(self.legal_moves(position))

    def has_legal_move(self, position: Position) -> bool:
        """Stops at the first legal move found (cheaper than counting them all)."""
        player = position.whos_turn
        for square in position.squares_of(player):
            for move in self.pseudo_moves(position, square):
                if not self._is_putting_yourself_in_check(position, move):
                    return True
        # a castler without a one square step along the rank may have castling as its only move
        return any(
            not self._is_putting_yourself_in_check(position, move) for move in self._castling_moves(position)
        )

    def is_checkmate(self, position: Position) -> bool:
        return self.in_check(position) and not self.has_legal_move(position)

    def is_stalemate(self, position: Position) -> bool:
        return not self.in_check(position) and not self.has_legal_move(position)

    # -- LEGAL MOVES HELPERS ---
    def _is_putting_yourself_in_check(self, position: Position, move: Move) -> bool:
        """Make the move, look whether the mover's royal pieces are attacked, take the move back."""
        player = position.whos_turn
        token = position.apply(move)
        try:
            return in_check(player, position, self.rules)
        finally:
            position.undo(token)

    def _expand_promotions(self, position: Position, move: Move) -> list[Move]:
        """A pawn-like piece reaching its last rank must promote: one move per option, in the rule's order."""
        piece = position.pieces[move.from_square]
        rule = self.rules[piece.piece_type]
        if not rule.promotions or move.to_square.y != position.dimensions.last_rank(piece.owner):
            return [move]
        return [replace(move, promotion=piece_type) for piece_type in rule.promotions]

    # -- CASTLING RULE HELPERS ---
    def _castling_moves(self, position: Position) -> list[Move]:
        """
        Find the legal castling moves for the player to move
        ---

        **you are allowed to castle if**

        * Castling rights are not yet revoked (rights only exist while king and rook are on their squares).
        * Every square in between the king and the rook is empty.
        * You are not currently in check, and the king does not pass through or land on an attacked square.
        """
        player = position.whos_turn
        rights = sorted(right for right in position.castling_rights if right.owner == player)
        if not rights:
            return []

        opponents = [other for other in range(position.num_players) if other != player]
        moves: list[Move] = []
        for right in rights:
            squares = position.castling_rights[right]
            between = squares_between_on_rank(squares.king_from, squares.rook_from)
            if any(square in position.pieces or position.is_blocked(square) for square in between):
                continue

            king_path = squares_on_rank(squares.king_from, squares.king_to)
            if any(
                is_attacked(square, opponent, position, self.rules)
                for square in king_path
                for opponent in opponents
            ):
                continue

            moves.append(self._castling_move(right, squares.king_from, squares.king_to))
        return moves

    @staticmethod
    def _castling_move(right: CastlingRight, king_from: Square, king_to: Square) -> Move:
        return Move(king_from, king_to, castling=right)
