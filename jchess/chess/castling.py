"""Helpers for implementing Castling rules. Need to be imported by multiple sources"""

from dataclasses import dataclass
from enum import Enum
from typing import Self

from jchess.chess.pieces import Color
from jchess.chess.square import Square


class CastlingDirection(Enum):
    """The four castling directions. Values are the letters FEN uses for them."""

    WHITE_KING_SIDE = "K"
    WHITE_QUEEN_SIDE = "Q"
    BLACK_KING_SIDE = "k"
    BLACK_QUEEN_SIDE = "q"


@dataclass(frozen=True)
class CastlingSquares:
    """
    Store the squares where king/rook start from/end up in by castling.

    `path` holds every square that must be empty and not attacked: the squares the king crosses
    (destination included) and, on the queen side, the knight's square next to the rook.
    """

    king_from: Square
    king_to: Square
    rook_from: Square
    rook_to: Square
    path: tuple[Square, ...]

    @classmethod
    def from_algebraic(
        cls, k_from: str, k_to: str, r_from: str, r_to: str, *path: str
    ) -> Self:
        """Convenience method: to make mapping shown below (from CastlingDirection) more readable"""
        king_from = Square.from_algebraic(k_from)
        king_to = Square.from_algebraic(k_to)
        rook_from = Square.from_algebraic(r_from)
        rook_to = Square.from_algebraic(r_to)
        path_squares = tuple(Square.from_algebraic(sq) for sq in path)
        return cls(king_from, king_to, rook_from, rook_to, path_squares)


# The moves (in classical chess) made when castling
CASTLING_RULES: dict[CastlingDirection, CastlingSquares] = {
    CastlingDirection.WHITE_KING_SIDE: CastlingSquares.from_algebraic(
        "e1", "g1", "h1", "f1", "f1", "g1"
    ),
    CastlingDirection.WHITE_QUEEN_SIDE: CastlingSquares.from_algebraic(
        "e1", "c1", "a1", "d1", "d1", "c1", "b1"
    ),
    CastlingDirection.BLACK_KING_SIDE: CastlingSquares.from_algebraic(
        "e8", "g8", "h8", "f8", "f8", "g8"
    ),
    CastlingDirection.BLACK_QUEEN_SIDE: CastlingSquares.from_algebraic(
        "e8", "c8", "a8", "d8", "d8", "c8", "b8"
    ),
}


def castling_direction(color: Color, long_castle: bool) -> CastlingDirection:
    if color == Color.WHITE:
        return (
            CastlingDirection.WHITE_QUEEN_SIDE
            if long_castle
            else CastlingDirection.WHITE_KING_SIDE
        )
    return (
        CastlingDirection.BLACK_QUEEN_SIDE
        if long_castle
        else CastlingDirection.BLACK_KING_SIDE
    )


def castling_squares(color: Color, long_castle: bool) -> CastlingSquares:
    return CASTLING_RULES[castling_direction(color, long_castle)]
