"""Terrain of a square, independent of the piece standing on it."""

from dataclasses import dataclass
from enum import StrEnum
from typing import Self

from protochess.engine.square import Square


class TileType(StrEnum):
    LIGHT = "w"
    DARK = "b"
    # No piece may stand on, move onto or slide through a blocked square
    BLOCKED = "x"


@dataclass(frozen=True)
class Tile:
    tile_type: TileType

    @classmethod
    def for_square(cls, square: Square) -> Self:
        """Plain checkerboard colouring: a1 is dark."""
        return cls(TileType.DARK if (square.x + square.y) % 2 == 0 else TileType.LIGHT)

    @classmethod
    def blocked(cls) -> Self:
        return cls(TileType.BLOCKED)

    @property
    def is_blocked(self) -> bool:
        return self.tile_type == TileType.BLOCKED
