"""Unit tests for /jchess/chess/castling.py"""

import pytest

from jchess.chess.castling import (
    CASTLING_RULES,
    CastlingDirection,
    castling_direction,
    castling_squares,
)
from jchess.chess.pieces import Color
from jchess.chess.square import Square


@pytest.mark.parametrize(
    "color, long_castle, direction",
    [
        (Color.WHITE, False, CastlingDirection.WHITE_KING_SIDE),
        (Color.WHITE, True, CastlingDirection.WHITE_QUEEN_SIDE),
        (Color.BLACK, False, CastlingDirection.BLACK_KING_SIDE),
        (Color.BLACK, True, CastlingDirection.BLACK_QUEEN_SIDE),
    ],
)
def test_castling_direction(color: Color, long_castle: bool, direction: CastlingDirection) -> None:
    assert castling_direction(color, long_castle) == direction
    assert castling_squares(color, long_castle) == CASTLING_RULES[direction]


def test_white_short_castle_squares() -> None:
    squares = castling_squares(Color.WHITE, long_castle=False)
    assert squares.king_from == Square.from_algebraic("e1")
    assert squares.king_to == Square.from_algebraic("g1")
    assert squares.rook_from == Square.from_algebraic("h1")
    assert squares.rook_to == Square.from_algebraic("f1")
    assert [sq.to_algebraic() for sq in squares.path] == ["f1", "g1"]


def test_queen_side_path_includes_knight_square() -> None:
    """Castling long, the b-file square must be clear too"""
    squares = castling_squares(Color.BLACK, long_castle=True)
    assert [sq.to_algebraic() for sq in squares.path] == ["d8", "c8", "b8"]
    assert squares.rook_to == Square.from_algebraic("d8")
