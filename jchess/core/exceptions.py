"""
Errors raised by the engine.

Everything the engine reports to a caller derives from GameError, so the service layer can turn
any of them into a message for the player without catching unrelated bugs.
"""


class GameError(Exception):
    """Base class for all expected, user-facing failures."""


class NotationError(GameError):
    """Malformed move text. Raised before the board is looked at."""


class InvalidSquareError(NotationError):
    """Text that does not name a square on the board."""


class IllegalMoveError(GameError):
    """The move is well formed, but the rules do not allow it in the current position."""


class DisambiguationError(IllegalMoveError):
    """The described move could not be matched to exactly one piece."""


class SelfCheckError(IllegalMoveError):
    """The move would leave the mover's own king under attack."""


class GameStateError(GameError):
    """The request does not fit the state of the game (e.g. moving after checkmate)."""


class InvalidFENError(GameError):
    """The board placement string cannot be parsed."""


class InvalidRequestError(GameError):
    """A request model failed validation at the boundary."""
