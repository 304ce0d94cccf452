"""
Pytest will auto-discover / import this file called 'conftest.py'.
This file defines fixtures/variables required for testing multiple layers.
"""

import pytest

from protochess.engine.fen import from_text_position
from protochess.engine.movegen import MoveGenerator
from protochess.engine.pieces import VARIANT_RULES, PieceRule
from protochess.engine.position import Position

STARTING_FEN = "rnbqkbnr/pppppppp/8/8/8/8/PPPPPPPP/RNBQKBNR w KQkq - 0 1"
# white to move and mated
FOOLS_MATE_FEN = "rnb1kbnr/pppp1ppp/8/4p3/6Pq/5P2/PPPPP2P/RNBQKBNR w KQkq - 1 3"
# black to move, not in check, no legal move
STALEMATE_FEN = "7k/5Q2/6K1/8/8/8/8/8 b - - 0 1"
KIWIPETE_FEN = "r3k2r/p1ppqpb1/bn2pnp1/3PN3/1p2P3/2N2Q1p/PPPBBPPP/R3K2R w KQkq - 0 1"
CASTLING_FEN = "r3k2r/8/8/8/8/8/8/R3K2R w KQkq - 0 1"
EN_PASSANT_FEN = "rnbqkbnr/ppp1pppp/8/8/3pP3/8/PPPP1PPP/RNBQKBNR b KQkq e3 0 3"
PROMOTION_FEN = "8/P7/8/8/8/8/8/k6K w - - 0 1"
CAPABLANCA_FEN = "rnabqkbcnr/pppppppppp/10/10/10/10/PPPPPPPPPP/RNABQKBCNR w KQkq - 0 1"


@pytest.fixture
def generator() -> MoveGenerator:
    return MoveGenerator()


@pytest.fixture
def variant_generator() -> MoveGenerator:
    return MoveGenerator(VARIANT_RULES)


@pytest.fixture
def starting_position() -> Position:
    return from_text_position(STARTING_FEN)

# pawn that pushes diagonally and captures straight ahead
BEROLINA = PieceRule(
    symbol="o",
    name="berolina",
    value=100,
    move_only_jumps=((1, 1), (-1, 1)),
    capture_only_jumps=((0, 1),),
    double_step=True,
    en_passant=True,
)
