"""
Defines the types of chess pieces.

Key idea: a piece type is nothing more than a one-character symbol. What the piece can do is described by a
`PieceRule` stored in a `PieceRules` registry. Adding a fairy piece means adding a rule, not writing new code.
"""

from dataclasses import dataclass, replace
from types import MappingProxyType
from typing import Iterator, Mapping, Self

Vector = tuple[int, int]

# Players are numbered. In text notation player 0 uses capital letters ("white"), player 1 small letters ("black")
WHITE = 0
BLACK = 1

DIAGONALS: tuple[Vector, ...] = ((1, 1), (-1, 1), (1, -1), (-1, -1))
STRAIGHTS: tuple[Vector, ...] = ((1, 0), (-1, 0), (0, 1), (0, -1))
KNIGHT_JUMPS: tuple[Vector, ...] = (
    (2, 1),
    (2, -1),
    (-2, 1),
    (-2, -1),
    (1, 2),
    (1, -2),
    (-1, 2),
    (-1, -2),
)


def orient(vector: Vector, owner: int) -> Vector:
    """
    All vectors are written from player 0's point of view (moving UP the board).
    Every other player moves DOWN the board, so mirror the rank component.
    """
    dx, dy = vector
    return (dx, dy) if owner == WHITE else (dx, -dy)


@dataclass(frozen=True)
class PieceRule:
    """
    Movement-rule descriptor for one piece type.
    ---

    * slides: directions the piece can travel along until it hits something (moves and captures)
    * jumps: single steps (moves and captures)
    * move_only_jumps / capture_only_jumps: steps that are only allowed onto an empty square / onto an enemy piece
    * double_step: from its owner's second rank, the piece may also make its move-only jump twice (through an empty square)
    * promotions: piece types it may turn into on reaching the last rank, in order of preference
    * royal: attacks on this piece are checks
    * castler / castle_partner: the king and rook of castling
    * en_passant: can create (by double stepping) and take (capture-only jump onto the passed square) en passant
    """

    symbol: str
    name: str
    value: int
    slides: tuple[Vector, ...] = ()
    jumps: tuple[Vector, ...] = ()
    move_only_jumps: tuple[Vector, ...] = ()
    capture_only_jumps: tuple[Vector, ...] = ()
    double_step: bool = False
    promotions: tuple[str, ...] = ()
    royal: bool = False
    castler: bool = False
    castle_partner: bool = False
    en_passant: bool = False

    def __post_init__(self) -> None:
        if len(self.symbol) != 1 or not self.symbol.isalpha() or not self.symbol.islower():
            raise ValueError(f"Piece symbols are single lower case letters. got {self.symbol!r}")


class PieceRules(Mapping[str, PieceRule]):
    """Read-only registry: symbol -> rule. Shared by every game that uses the same variant."""

    def __init__(self, rules: list[PieceRule]) -> None:
        by_symbol: dict[str, PieceRule] = {}
        for rule in rules:
            if rule.symbol in by_symbol:
                raise ValueError(f"Duplicate piece symbol: {rule.symbol!r}")
            by_symbol[rule.symbol] = rule
        for rule in rules:
            unknown = [symbol for symbol in rule.promotions if symbol not in by_symbol]
            if unknown:
                raise ValueError(f"{rule.name} promotes into unknown piece type(s): {unknown}")
        self._rules = MappingProxyType(by_symbol)
        # every direction / step anything can capture along. Only orientation differs between players
        slides = frozenset(vector for rule in rules for vector in rule.slides)
        jumps = frozenset(vector for rule in rules for vector in rule.jumps + rule.capture_only_jumps)
        mirrored_slides = frozenset(orient(vector, BLACK) for vector in slides)
        mirrored_jumps = frozenset(orient(vector, BLACK) for vector in jumps)
        self._attack_vectors = {WHITE: (slides, jumps), BLACK: (mirrored_slides, mirrored_jumps)}

    def __getitem__(self, symbol: str) -> PieceRule:
        return self._rules[symbol]

    def __iter__(self) -> Iterator[str]:
        return iter(self._rules)

    def __len__(self) -> int:
        return len(self._rules)

    def with_rule(self, rule: PieceRule) -> Self:
        """Copy of the registry with one extra rule (or a rule replaced)."""
        rules = {**self._rules, rule.symbol: rule}
        return type(self)(list(rules.values()))

    def attack_vectors(self, owner: int) -> tuple[frozenset[Vector], frozenset[Vector]]:
        """(slide directions, capture steps) of all piece types, oriented for `owner`."""
        return self._attack_vectors[WHITE if owner == WHITE else BLACK]

    def values_by_symbol(self) -> dict[str, int]:
        return {symbol: rule.value for symbol, rule in self._rules.items()}


@dataclass(frozen=True)
class Piece:
    owner: int
    piece_type: str

    @classmethod
    def from_fen(cls, character: str) -> Self:
        # lower case: player 1 ("black"), upper case: player 0 ("white")
        owner = WHITE if character.isupper() else BLACK
        return cls(owner, character.lower())

    def to_fen(self) -> str:
        return self.piece_type.upper() if self.owner == WHITE else self.piece_type

    def promoted(self, new_type: str) -> Self:
        return replace(self, piece_type=new_type)


# --- CLASSICAL PIECES ---
PAWN = PieceRule(
    symbol="p",
    name="pawn",
    value=100,
    move_only_jumps=((0, 1),),
    capture_only_jumps=((1, 1), (-1, 1)),
    double_step=True,
    promotions=("q", "r", "b", "n"),
    en_passant=True,
)
KNIGHT = PieceRule(symbol="n", name="knight", value=320, jumps=KNIGHT_JUMPS)
BISHOP = PieceRule(symbol="b", name="bishop", value=330, slides=DIAGONALS)
ROOK = PieceRule(symbol="r", name="rook", value=500, slides=STRAIGHTS, castle_partner=True)
QUEEN = PieceRule(symbol="q", name="queen", value=900, slides=STRAIGHTS + DIAGONALS)
# NOTE: The King's worth does not count towards material: both sides always have one in a classical game
KING = PieceRule(
    symbol="k",
    name="king",
    value=0,
    jumps=STRAIGHTS + DIAGONALS,
    royal=True,
    castler=True,
)

# --- FAIRY PIECES ---
ARCHBISHOP = PieceRule(symbol="a", name="archbishop", value=850, slides=DIAGONALS, jumps=KNIGHT_JUMPS)
CHANCELLOR = PieceRule(symbol="c", name="chancellor", value=900, slides=STRAIGHTS, jumps=KNIGHT_JUMPS)
AMAZON = PieceRule(symbol="m", name="amazon", value=1300, slides=STRAIGHTS + DIAGONALS, jumps=KNIGHT_JUMPS)

STANDARD_RULES = PieceRules([PAWN, KNIGHT, BISHOP, ROOK, QUEEN, KING])
VARIANT_RULES = PieceRules(
    [
        replace(PAWN, promotions=("m", "q", "c", "a", "r", "b", "n")),
        KNIGHT,
        BISHOP,
        ROOK,
        QUEEN,
        KING,
        ARCHBISHOP,
        CHANCELLOR,
        AMAZON,
    ]
)
