"""Unit tests for /protochess/engine/position.py"""

import pytest

from protochess.engine.castling import CastlingRight, CastlingSide
from protochess.engine.fen import from_text_position, to_text_position
from protochess.engine.movegen import MoveGenerator
from protochess.engine.moves import Move
from protochess.engine.pieces import BLACK, STANDARD_RULES, WHITE, Piece
from protochess.engine.position import Position
from protochess.engine.square import Square
from tests.conftest import (
    BEROLINA,
    CASTLING_FEN,
    EN_PASSANT_FEN,
    KIWIPETE_FEN,
    PROMOTION_FEN,
    STARTING_FEN,
)


def test_empty_position_has_checkerboard_tiles() -> None:
    position = Position.empty(5, 6)
    tiles = position.tiles_as_tuples()
    assert len(tiles) == 30
    assert tiles[0] == (0, 0, "b")
    assert tiles[1] == (1, 0, "w")
    assert position.pieces_as_tuples() == []


def test_pieces_as_tuples(starting_position: Position) -> None:
    pieces = starting_position.pieces_as_tuples()
    assert len(pieces) == 32
    assert pieces[0] == (0, 0, 0, "r")
    assert pieces[1] == (0, 0, 1, "p")
    assert (1, 4, 7, "k") in pieces


def test_place_piece_checks_the_board() -> None:
    position = from_text_position("8/8/8/8/8/8/8/3*4 w - - 0 1")
    with pytest.raises(ValueError):
        position.place_piece(Piece(WHITE, "k"), Square(8, 0))
    with pytest.raises(ValueError):
        position.place_piece(Piece(WHITE, "k"), Square(3, 0))
    position.place_piece(Piece(WHITE, "k"), Square(4, 0))
    assert position.piece_at(Square(4, 0)) == Piece(WHITE, "k")


def test_block_square_refuses_occupied(starting_position: Position) -> None:
    with pytest.raises(ValueError):
        starting_position.block_square(Square(0, 0))
    starting_position.block_square(Square(0, 3))
    assert starting_position.is_blocked(Square(0, 3))


def test_squares_of_is_sorted(starting_position: Position) -> None:
    squares = starting_position.squares_of(BLACK)
    assert squares == sorted(squares)
    assert len(squares) == 16


def test_apply_quiet_move(starting_position: Position) -> None:
    starting_position.apply(Move(Square(6, 0), Square(5, 2)))
    assert starting_position.piece_at(Square(5, 2)) == Piece(WHITE, "n")
    assert starting_position.piece_at(Square(6, 0)) is None
    assert starting_position.whos_turn == BLACK
    assert starting_position.ply == 1
    assert starting_position.half_move_clock == 1
    assert starting_position.en_passant is None


def test_double_step_sets_en_passant(starting_position: Position) -> None:
    starting_position.apply(Move(Square(4, 1), Square(4, 3), is_double_step=True, resets_clock=True))
    assert starting_position.en_passant is not None
    assert starting_position.en_passant.target == Square(4, 2)
    assert starting_position.en_passant.victim == Square(4, 3)
    assert to_text_position(starting_position) == "rnbqkbnr/pppppppp/8/8/4P3/8/PPPP1PPP/RNBQKBNR b KQkq e3 0 1"


def test_en_passant_removes_the_victim() -> None:
    position = from_text_position(EN_PASSANT_FEN)
    capture = Move(Square(3, 3), Square(4, 2), captured=Piece(WHITE, "p"), is_en_passant=True, resets_clock=True)
    token = position.apply(capture)

    assert position.piece_at(Square(4, 2)) == Piece(BLACK, "p")
    assert position.piece_at(Square(4, 3)) is None
    assert token.captured == Piece(WHITE, "p")

    position.undo(token)
    assert to_text_position(position) == EN_PASSANT_FEN


def test_promotion_is_never_inferred() -> None:
    position = from_text_position(PROMOTION_FEN)
    token = position.apply(Move(Square(0, 6), Square(0, 7)))
    assert position.piece_at(Square(0, 7)) == Piece(WHITE, "p")
    position.undo(token)

    position.apply(Move(Square(0, 6), Square(0, 7), promotion="q"))
    assert position.piece_at(Square(0, 7)) == Piece(WHITE, "q")


def test_castling_moves_the_rook() -> None:
    position = from_text_position(CASTLING_FEN)
    right = CastlingRight(WHITE, CastlingSide.KING_SIDE)
    token = position.apply(Move(Square(4, 0), Square(6, 0), castling=right))

    assert position.piece_at(Square(6, 0)) == Piece(WHITE, "k")
    assert position.piece_at(Square(5, 0)) == Piece(WHITE, "r")
    assert position.piece_at(Square(7, 0)) is None
    assert to_text_position(position) == "r3k2r/8/8/8/8/8/8/R4RK1 b kq - 1 1"

    position.undo(token)
    assert to_text_position(position) == CASTLING_FEN


@pytest.mark.parametrize(
    "uci, rights",
    [
        ("a1a2", "Kkq"),
        ("h1h5", "Qkq"),
        ("e1e2", "kq"),
        # capturing a rook on its square takes away both sides' rights on that wing
        ("a1a8", "Kk"),
    ],
)
def test_castling_rights_revoked(uci: str, rights: str) -> None:
    position = from_text_position(CASTLING_FEN)
    move = next(move for move in MoveGenerator().legal_moves(position) if move.to_uci() == uci)
    position.apply(move)
    assert to_text_position(position).split()[2] == rights


def test_capture_resets_half_move_clock() -> None:
    position = from_text_position("4k3/8/8/3q4/8/8/8/3RK3 w - - 7 20")
    position.apply(Move(Square(3, 0), Square(3, 4), captured=Piece(BLACK, "q"), resets_clock=True))
    assert position.half_move_clock == 0
    assert position.full_move_number == 20
    position.apply(Move(Square(4, 7), Square(4, 6)))
    assert position.half_move_clock == 1
    assert position.full_move_number == 21


@pytest.mark.parametrize("fen", [STARTING_FEN, KIWIPETE_FEN, CASTLING_FEN, EN_PASSANT_FEN, PROMOTION_FEN])
def test_apply_undo_restores_every_legal_move(fen: str, generator: MoveGenerator) -> None:
    position = from_text_position(fen)
    before = position.snapshot()
    for move in generator.legal_moves(position):
        token = position.apply(move)
        assert position.snapshot() != before
        position.undo(token)
        assert position.snapshot() == before, move.to_uci()


def test_nested_undo(generator: MoveGenerator) -> None:
    position = from_text_position(KIWIPETE_FEN)
    before = position.snapshot()
    tokens = []
    for _ in range(4):
        tokens.append(position.apply(generator.legal_moves(position)[0]))
    for token in reversed(tokens):
        position.undo(token)
    assert position.snapshot() == before


def test_undo_out_of_order_fails(starting_position: Position) -> None:
    first = starting_position.apply(Move(Square(6, 0), Square(5, 2)))
    starting_position.apply(Move(Square(6, 7), Square(5, 5)))
    with pytest.raises(AssertionError):
        starting_position.undo(first)


def test_copy_is_independent(starting_position: Position) -> None:
    duplicate = starting_position.copy()
    duplicate.apply(Move(Square(6, 0), Square(5, 2)))
    assert starting_position.piece_at(Square(6, 0)) == Piece(WHITE, "n")
    assert duplicate.snapshot() != starting_position.snapshot()


def test_diagonal_double_step_skips_the_midpoint() -> None:
    generator = MoveGenerator(STANDARD_RULES.with_rule(BEROLINA))
    position = from_text_position("8/8/8/8/8/8/O7/8 w - - 0 1", generator.rules)
    double_step = next(move for move in generator.legal_moves(position) if move.is_double_step)
    assert double_step.to_uci() == "a2c4"

    position.apply(double_step)
    assert position.en_passant is not None
    assert position.en_passant.target == Square(1, 2)
    assert position.en_passant.victim == Square(2, 3)
    assert to_text_position(position) == "8/8/8/8/2O5/8/8/8 b - b3 0 1"
