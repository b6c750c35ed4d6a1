"""
Sources of moves for the game loop.

Whoever is to move is asked for a Move. A human types notation, a bot picks from the legal moves.
The loop in ChessService does not care which is which.
"""

import logging
import random
from typing import Callable, Optional, Protocol

from jchess.chess.game import Game
from jchess.chess.moves import Move
from jchess.chess.notation import parse_notation
from jchess.core.exceptions import GameStateError

log = logging.getLogger(__name__)


class MoveSource(Protocol):
    def get_move(self, game: Game) -> Move: ...


class HumanPlayer:
    """
    Reads one line of notation per move.

    `read_line` gets a prompt and returns the typed text (`input` by default), so tests can feed moves from a list.
    Parsing errors propagate as NotationError; the board is not consulted here.
    """

    def __init__(self, read_line: Optional[Callable[[str], str]] = None, name: str = "Human") -> None:
        self.read_line = read_line if read_line is not None else input
        self.name = name

    def get_move(self, game: Game) -> Move:
        color = game.current_color()
        text = self.read_line(f"{color.name.capitalize()} to move: ")
        return parse_notation(text.strip(), color)


class RandomBot:
    """Plays a uniformly random legal move."""

    def __init__(self, seed: Optional[int] = None, rng: Optional[random.Random] = None, name: str = "RandomBot") -> None:
        self.rng = rng if rng is not None else random.Random(seed)
        self.name = name

    def get_move(self, game: Game) -> Move:
        legal_moves = game.list_valid_moves()
        if not legal_moves:
            raise GameStateError(f"{self.name} has no legal moves")
        move = self.rng.choice(legal_moves)
        log.debug("%s picked %s out of %d moves", self.name, move.notation(), len(legal_moves))
        return move
