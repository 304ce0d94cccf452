"""Unit tests for /protochess/engine/movegen.py"""

from dataclasses import replace

import pytest

from protochess.core.shared_types import Status
from protochess.engine.fen import from_text_position
from protochess.engine.game import Game
from protochess.engine.movegen import MoveGenerator
from protochess.engine.pieces import KING, STANDARD_RULES, PieceRule
from protochess.engine.position import Position
from protochess.engine.square import Square
from tests.conftest import (
    CAPABLANCA_FEN,
    CASTLING_FEN,
    EN_PASSANT_FEN,
    FOOLS_MATE_FEN,
    KIWIPETE_FEN,
    PROMOTION_FEN,
    STALEMATE_FEN,
    STARTING_FEN,
)


def uci_moves(generator: MoveGenerator, fen: str) -> list[str]:
    return [move.to_uci() for move in generator.legal_moves(from_text_position(fen, generator.rules))]


# --- OPENING ---
def test_twenty_opening_moves(generator: MoveGenerator, starting_position: Position) -> None:
    assert generator.count_legal_moves(starting_position) == 20
    assert len(generator.legal_moves_as_tuples(starting_position)) == 20
    assert not generator.in_check(starting_position)


def test_generation_order_is_deterministic(generator: MoveGenerator, starting_position: Position) -> None:
    first = generator.legal_moves(starting_position)
    second = generator.legal_moves(starting_position)
    assert first == second
    assert first[0].to_uci() == "a2a3"
    assert generator.legal_moves_as_tuples(starting_position)[0] == ((0, 1), (0, 2))


def test_legal_moves_from(generator: MoveGenerator, starting_position: Position) -> None:
    assert generator.legal_moves_from(starting_position, Square(4, 1)) == [Square(4, 2), Square(4, 3)]
    # not black's turn, and an empty square has no moves
    assert generator.legal_moves_from(starting_position, Square(4, 6)) == []
    assert generator.legal_moves_from(starting_position, Square(4, 4)) == []


# --- END OF GAME ---
def test_checkmate(generator: MoveGenerator) -> None:
    position = from_text_position(FOOLS_MATE_FEN)
    assert generator.in_check(position)
    assert generator.count_legal_moves(position) == 0
    assert not generator.has_legal_move(position)
    assert generator.is_checkmate(position)
    assert not generator.is_stalemate(position)


def test_stalemate(generator: MoveGenerator) -> None:
    position = from_text_position(STALEMATE_FEN)
    assert not generator.in_check(position)
    assert generator.count_legal_moves(position) == 0
    assert generator.is_stalemate(position)
    assert not generator.is_checkmate(position)


# --- LEGALITY ---
def test_pinned_piece_cannot_move(generator: MoveGenerator) -> None:
    position = from_text_position("4k3/4r3/8/8/8/8/4B3/4K3 w - - 0 1")
    assert generator.legal_moves_from(position, Square(4, 1)) == []


def test_check_must_be_answered(generator: MoveGenerator) -> None:
    assert set(uci_moves(generator, "4k3/8/8/8/8/8/8/r3K3 w - - 0 1")) == {"e1d2", "e1e2", "e1f2"}


@pytest.mark.parametrize("fen", [STARTING_FEN, KIWIPETE_FEN, CASTLING_FEN, EN_PASSANT_FEN, FOOLS_MATE_FEN])
def test_legal_moves_never_expose_royal_pieces(generator: MoveGenerator, fen: str) -> None:
    position = from_text_position(fen)
    mover = position.whos_turn
    for move in generator.legal_moves(position):
        token = position.apply(move)
        assert not generator.in_check(position, mover), move.to_uci()
        position.undo(token)
    assert generator.has_legal_move(position) == (generator.count_legal_moves(position) > 0)


# --- CASTLING ---
def test_castling_both_sides(generator: MoveGenerator) -> None:
    moves = generator.legal_moves(from_text_position(CASTLING_FEN))
    assert len(moves) == 26
    castles = {move.to_uci(): move for move in moves if move.castling is not None}
    assert set(castles) == {"e1g1", "e1c1"}


@pytest.mark.parametrize(
    "fen, castles",
    [
        # f1 is attacked
        ("4kr2/8/8/8/8/8/8/R3K2R w KQ - 0 1", {"e1c1"}),
        # in check
        ("4r1k1/8/8/8/8/8/8/R3K2R w KQ - 0 1", set()),
        # knight in between
        ("r3k2r/8/8/8/8/8/8/RN2K2R w KQkq - 0 1", {"e1g1"}),
        # blocked square in between
        ("r3k2r/8/8/8/8/8/8/R*2K2R w KQ - 0 1", {"e1g1"}),
        # the rook may pass an attacked square, the king may not
        ("1r2k2r/8/8/8/8/8/8/R3K2R w KQk - 0 1", {"e1g1", "e1c1"}),
        ("r3k2r/8/8/8/8/8/8/R3K2R w - - 0 1", set()),
    ],
)
def test_castling_conditions(generator: MoveGenerator, fen: str, castles: set[str]) -> None:
    position = from_text_position(fen)
    assert {move.to_uci() for move in generator.legal_moves(position) if move.castling is not None} == castles


def test_black_castles(generator: MoveGenerator) -> None:
    fen = CASTLING_FEN.replace(" w ", " b ")
    castles = [move for move in generator.legal_moves(from_text_position(fen)) if move.castling is not None]
    assert {move.to_uci() for move in castles} == {"e8g8", "e8c8"}


# --- EN PASSANT ---
def test_en_passant_capture_available(generator: MoveGenerator) -> None:
    position = from_text_position(EN_PASSANT_FEN)
    en_passant = [move for move in generator.legal_moves(position) if move.is_en_passant]
    assert [move.to_uci() for move in en_passant] == ["d4e3"]
    assert en_passant[0].is_capture


def test_en_passant_expires(generator: MoveGenerator) -> None:
    position = from_text_position(EN_PASSANT_FEN.replace(" e3 ", " - "))
    assert not any(move.is_en_passant for move in generator.legal_moves(position))


# --- PROMOTION ---
def test_promotion_expands_into_every_option(generator: MoveGenerator) -> None:
    moves = uci_moves(generator, PROMOTION_FEN)
    assert len(moves) == 7
    assert moves[:4] == ["a7a8q", "a7a8r", "a7a8b", "a7a8n"]
    position = from_text_position(PROMOTION_FEN)
    assert generator.legal_moves_from(position, Square(0, 6)) == [Square(0, 7)]


def test_variant_promotions(variant_generator: MoveGenerator) -> None:
    moves = uci_moves(variant_generator, PROMOTION_FEN)
    assert [move for move in moves if move.startswith("a7")] == [
        "a7a8m",
        "a7a8q",
        "a7a8c",
        "a7a8a",
        "a7a8r",
        "a7a8b",
        "a7a8n",
    ]


def test_capture_with_promotion(generator: MoveGenerator) -> None:
    moves = uci_moves(generator, "1r5k/P7/8/8/8/8/8/7K w - - 0 1")
    assert "a7b8q" in moves
    assert "a7a8q" in moves


# --- BOARD SHAPES & PIECES ---
def test_blocked_tiles_stop_sliders(generator: MoveGenerator) -> None:
    assert len(uci_moves(generator, "8/8/8/8/8/8/8/R2*4 w - - 0 1")) == 9


def test_knights_cannot_land_on_blocked_tiles(generator: MoveGenerator) -> None:
    assert uci_moves(generator, "8/8/8/8/8/2*5/8/1N6 w - - 0 1") == ["b1d2", "b1a3"]


def test_small_board(generator: MoveGenerator) -> None:
    assert len(uci_moves(generator, "rnbqk/ppppp/5/PPPPP/RNBQK w - - 0 1")) == 7


def test_fairy_piece_moves(variant_generator: MoveGenerator) -> None:
    # bishop lines + knight jumps from d4
    assert len(uci_moves(variant_generator, "8/8/8/8/3A4/8/8/8 w - - 0 1")) == 21
    assert len(uci_moves(variant_generator, "8/8/8/8/3C4/8/8/8 w - - 0 1")) == 22


def test_wide_board_opening(variant_generator: MoveGenerator) -> None:
    assert len(uci_moves(variant_generator, CAPABLANCA_FEN)) == 28


def test_no_royal_pieces_means_no_check(generator: MoveGenerator) -> None:
    position = from_text_position("8/8/8/8/8/8/8/R6r w - - 0 1")
    assert not generator.in_check(position)
    assert generator.count_legal_moves(position) == 14


def test_pseudo_destinations_ignore_pins(generator: MoveGenerator) -> None:
    position = from_text_position("4k3/4r3/8/8/8/8/4B3/4K3 w - - 0 1")
    destinations = generator.pseudo_destinations(position, Square(4, 1))
    assert Square(3, 2) in destinations
    assert len(destinations) == 9


def test_castling_as_the_only_legal_move() -> None:
    """A king that can only step up the board, next to a rook that cannot move at all."""
    rules = STANDARD_RULES.with_rule(replace(KING, jumps=((0, 1),))).with_rule(
        PieceRule(symbol="t", name="tower", value=0, castle_partner=True)
    )
    generator = MoveGenerator(rules)
    fen = "4k3/8/8/8/8/8/4*3/4K2T w K - 0 1"
    position = from_text_position(fen, rules)

    assert [move.to_uci() for move in generator.legal_moves(position)] == ["e1g1"]
    assert generator.has_legal_move(position)
    assert not generator.is_stalemate(position)
    assert Game.from_text(fen, generator).status == Status.IN_PROGRESS
