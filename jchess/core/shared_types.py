"""
Type definitions used across layers
"""

from enum import StrEnum


class Status(StrEnum):
    IN_PROGRESS = "in progress"
    CHECKMATE = "checkmate"
    STALEMATE = "stalemate"
    CONCEDED = "conceded"
    ABORTED = "aborted"


# --- Color and PieceType DO NOT contain options for empty squares. The engine versions live in jchess/chess/pieces.py
# --- NOTE Same names as the engine enums: the imports show which versions are used in what part of the code


class Color(StrEnum):
    WHITE = "white"
    BLACK = "black"


class PieceType(StrEnum):
    PAWN = "pawn"
    KNIGHT = "knight"
    BISHOP = "bishop"
    ROOK = "rook"
    QUEEN = "queen"
    KING = "king"


class Orientation(StrEnum):
    """Which side of the board is drawn at the bottom"""

    WHITE_BOTTOM = "white bottom"
    BLACK_BOTTOM = "black bottom"
