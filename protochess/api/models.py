"""Requests and Response models exchanged with the room service"""

from typing import Optional

from pydantic import BaseModel, field_validator

from protochess.core.exceptions import InvalidRequestError

Coordinate = tuple[int, int]
PlayerName = str


def _validate_coordinate(value: Coordinate) -> Coordinate:
    x, y = value
    if x < 0 or y < 0:
        raise InvalidRequestError(f"Board coordinates cannot be negative. got {value}")
    return value


# --- SHARED MODELS ---
class PieceModel(BaseModel):
    owner: int
    x: int
    y: int
    piece_type: str


class TileModel(BaseModel):
    x: int
    y: int
    tile_type: str


class TurnModel(BaseModel):
    from_square: Coordinate
    to_square: Coordinate
    promote_to: Optional[str] = None

    @field_validator(*["from_square", "to_square"])
    @classmethod
    def validate_square(cls, value: Coordinate) -> Coordinate:
        return _validate_coordinate(value)

    @field_validator("promote_to")
    @classmethod
    def validate_promotion(cls, value: Optional[str]) -> Optional[str]:
        if value is None:
            return value
        if len(value) != 1 or not value.isalpha():
            raise InvalidRequestError(f"Cannot interpret promote_to: {value!r} as a piece type.")
        return value.lower()


# --- REQUEST MODELS ---
class TakeTurnRequest(BaseModel):
    player_name: PlayerName
    turn: TurnModel


class MovesFromRequest(BaseModel):
    player_name: PlayerName
    x: int
    y: int

    @field_validator(*["x", "y"])
    @classmethod
    def validate_coordinate(cls, value: int) -> int:
        if value < 0:
            raise InvalidRequestError(f"Board coordinates cannot be negative. got {value}")
        return value


# --- RESPONSE MODELS ---
class GameStateResponse(BaseModel):
    width: int
    height: int
    winner: Optional[PlayerName]
    to_move: int
    to_move_in_check: bool
    in_check_kings: Optional[list[PieceModel]]
    last_turn: Optional[TurnModel]
    tiles: list[TileModel]
    pieces: list[PieceModel]


class MovesFromResponse(BaseModel):
    from_square: Coordinate
    to: list[Coordinate]


class PlayerListResponse(BaseModel):
    player_num: int
    you: PlayerName
    names: list[PlayerName]
