"""
Pytest will auto-discover / import this file called 'conftest.py'.
This file defines fixtures required for testing multiple layers.
"""

from typing import Callable

import pytest

from jchess.chess.game import Game
from jchess.chess.notation import parse_notation

PlayFn = Callable[..., Game]


def _play(game: Game, *notations: str) -> Game:
    """Parse, resolve and make each move in turn, the way the game loop does (without self-check rollback)."""
    for text in notations:
        move = game.disambiguate(parse_notation(text, game.to_move))
        game.do_move(move)
        game.next_turn()
        game.evaluate_terminal_state()
    return game


@pytest.fixture
def play() -> PlayFn:
    """Play a list of typed moves on a game: `play(game, "e4", "e5", "Nf3")`"""
    return _play


@pytest.fixture
def new_game() -> Game:
    return Game.new_game()
