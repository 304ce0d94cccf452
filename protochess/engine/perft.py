"""Performance test: count the leaf nodes of the legal move tree. Standard way to validate a move generator."""

from protochess.engine.movegen import MoveGenerator
from protochess.engine.position import Position


def perft(position: Position, generator: MoveGenerator, depth: int) -> int:
    if depth <= 0:
        return 1
    moves = generator.legal_moves(position)
    if depth == 1:
        return len(moves)
    total = 0
    for move in moves:
        token = position.apply(move)
        total += perft(position, generator, depth - 1)
        position.undo(token)
    return total


def perft_divide(position: Position, generator: MoveGenerator, depth: int) -> dict[str, int]:
    """Divide perft: nodes per root move (UCI)."""
    out: dict[str, int] = {}
    for move in generator.legal_moves(position):
        token = position.apply(move)
        out[move.to_uci()] = perft(position, generator, depth - 1)
        position.undo(token)
    return out
