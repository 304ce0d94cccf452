"""
Exceptions shared across layers.

Only bad input and broken game flow end up here. Programming errors inside the engine (a mismatched undo, a piece
placed off the board) are asserted instead, and an illegal move handed to `Game.make_move` simply returns False.
"""


class GameError(Exception):
    """Base class for everything the service layer may want to catch."""


class InvalidFENError(GameError):
    """Position text could not be parsed."""


class GameStateError(GameError):
    """The request does not make sense in the current state of the game (or the configuration is off)."""


class IllegalMoveError(GameError):
    """A player requested a move that is not in the set of legal moves."""


class NotYourTurnError(GameError):
    """A player tried to act while another player is to move."""


class InvalidRequestError(GameError):
    """Boundary validation failed. Raised from inside pydantic validators, so it propagates as is."""


class SearchCancelledError(GameError):
    """The search was asked to stop. The position has been fully restored by the time this propagates."""
