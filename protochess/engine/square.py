"""
A square on the board, and the dimensions of the board it lives on.

(placed in its own module as multiple other modules need to import it)
"""

from __future__ import annotations

from dataclasses import dataclass
from string import ascii_lowercase
from typing import Iterator

# Boards are not fixed to 8x8. This is only the size of the standard game.
STANDARD_DIMENSIONS = (8, 8)


@dataclass(frozen=True, order=True)
class Square:
    """0-indexed: x is the file (a = 0), y is the rank (1st rank = 0)."""

    x: int
    y: int

    @classmethod
    def from_algebraic(cls, sq: str) -> Square:
        """Algebraic notation: 'a1' - 'h8' get converted to (0,0) - (7,7). Ranks may have multiple digits ('a10')."""
        x = ascii_lowercase.index(sq[0])
        y = int(sq[1:]) - 1
        return cls(x, y)

    def to_algebraic(self) -> str:
        return f"{ascii_lowercase[self.x]}{self.y + 1}"

    def shifted(self, dx: int, dy: int) -> Square:
        return Square(self.x + dx, self.y + dy)


@dataclass(frozen=True)
class Dimensions:
    width: int
    height: int

    def __post_init__(self) -> None:
        if self.width <= 0 or self.height <= 0:
            raise ValueError(f"Board dimensions must be positive. got {self.width}x{self.height}")
        # NOTE: algebraic notation runs out of letters after the z-file
        if self.width > len(ascii_lowercase):
            raise ValueError(f"Boards wider than {len(ascii_lowercase)} files are not supported. got {self.width}")

    def contains(self, square: Square) -> bool:
        return (0 <= square.x < self.width) and (0 <= square.y < self.height)

    def squares(self) -> Iterator[Square]:
        """Rank by rank, starting in the a1 corner. Any code that needs a deterministic order should iterate this."""
        for y in range(self.height):
            for x in range(self.width):
                yield Square(x, y)

    def last_rank(self, owner: int) -> int:
        """The rank a player's pieces are moving towards (promotion rank)."""
        return self.height - 1 if owner == 0 else 0

    def second_rank(self, owner: int) -> int:
        """The rank where a player's pawn-like pieces start (and may push twice)."""
        return 1 if owner == 0 else self.height - 2
