"""Defines the types of chess pieces"""

from dataclasses import dataclass
from enum import Enum, auto
from typing import Self


class PieceType(Enum):
    EMPTY = auto()
    PAWN = auto()
    KNIGHT = auto()
    BISHOP = auto()
    ROOK = auto()
    QUEEN = auto()
    KING = auto()


class Color(Enum):
    NONE = auto()
    WHITE = auto()
    BLACK = auto()

    @property
    def opponent(self) -> "Color":
        if self == Color.NONE:
            return Color.NONE
        return Color.WHITE if self == Color.BLACK else Color.BLACK


PLAYER_COLORS: tuple[Color, Color] = (Color.WHITE, Color.BLACK)

FEN_TO_PIECE: dict[str, PieceType] = {
    "p": PieceType.PAWN,
    "n": PieceType.KNIGHT,
    "b": PieceType.BISHOP,
    "r": PieceType.ROOK,
    "q": PieceType.QUEEN,
    "k": PieceType.KING,
}

PIECE_TO_FEN: dict[PieceType, str] = {value: key for key, value in FEN_TO_PIECE.items()}

# Letters used in move notation. Pawns are written without a letter, but "P" is still understood.
NOTATION_TO_PIECE: dict[str, PieceType] = {
    char.upper(): piece_type for char, piece_type in FEN_TO_PIECE.items()
}

PIECE_TO_NOTATION: dict[PieceType, str] = {
    PieceType.KNIGHT: "N",
    PieceType.BISHOP: "B",
    PieceType.ROOK: "R",
    PieceType.QUEEN: "Q",
    PieceType.KING: "K",
}


@dataclass
class Piece:
    type: PieceType
    color: Color
    has_moved: bool = False

    @classmethod
    def empty(cls) -> Self:
        return cls(PieceType.EMPTY, Color.NONE)

    @classmethod
    def from_fen(cls, character: str) -> Self:
        # lower case: Black pieces, upper case: White pieces
        color = Color.WHITE if character.isupper() else Color.BLACK
        piece_type = FEN_TO_PIECE[character.lower()]
        return cls(piece_type, color)

    def to_fen(self) -> str:
        return (
            PIECE_TO_FEN[self.type].upper()
            if self.color == Color.WHITE
            else PIECE_TO_FEN[self.type].lower()
        )

    @property
    def letter(self) -> str:
        """Letter used in move notation ('' for pawns and the empty square)"""
        return PIECE_TO_NOTATION.get(self.type, "")

    def is_empty(self) -> bool:
        return self.type == PieceType.EMPTY

    def matches(self, other: "Piece") -> bool:
        """Same kind and color. Whether the piece has moved is not part of its identity."""
        return self.type == other.type and self.color == other.color

    def promote_to(self, new_type: PieceType) -> None:
        self.type = new_type
