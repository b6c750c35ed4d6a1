"""The Game board implements all rules that effect the `position` (in chess: the configuration of pieces on the board)"""

import logging
from dataclasses import dataclass, replace
from typing import Iterator, Optional, Self

from jchess.chess.castling import castling_squares
from jchess.chess.moves import ATTACK_RULES, Move
from jchess.chess.pieces import FEN_TO_PIECE, Color, Piece, PieceType
from jchess.chess.square import BOARD_DIMENSIONS, Square
from jchess.core.exceptions import InvalidFENError

log = logging.getLogger(__name__)

STARTING_POSITION_FEN = "rnbqkbnr/pppppppp/8/8/8/8/PPPPPPPP/RNBQKBNR"


def all_squares() -> Iterator[Square]:
    """Board scan order used throughout the engine: file by file (a-h), and within a file rank 1 to 8."""
    for file in range(1, BOARD_DIMENSIONS[0] + 1):
        for rank in range(1, BOARD_DIMENSIONS[1] + 1):
            yield Square(file, rank)


def is_valid_position(fen_str: str) -> bool:
    """Placement part of a FEN string: 8 ranks separated by '/', each adding up to 8 files."""
    ranks = fen_str.split("/")
    if len(ranks) != BOARD_DIMENSIONS[1]:
        return False

    for fen_one_rank in ranks:
        files = 0
        for character in fen_one_rank:
            if character.isdigit():
                files += int(character)
            elif character.lower() in FEN_TO_PIECE:
                files += 1
            else:
                return False
        if files != BOARD_DIMENSIONS[0]:
            return False
    return True


@dataclass
class Board:
    position: dict[Square, Piece]

    @classmethod
    def empty(cls) -> Self:
        return cls({square: Piece.empty() for square in all_squares()})

    @classmethod
    def starting_position(cls) -> Self:
        return cls.from_fen(STARTING_POSITION_FEN)

    @classmethod
    def from_fen(cls, fen_str: str) -> Self:
        """Construct a board using a given FEN string.

        That is, we supply the first part of the FEN string that denotes the board position
        ex. standard starting position:
        rnbqkbnr/pppppppp/8/8/8/8/PPPPPPPP/RNBQKBNR
        means:
        * black pieces are on the 8th rank, starting with rook on a8, knight on b8, etc.
        * pawns cover 7th rank entirely
        * ranks 6 through 3 have 8 consecutive empty squares
        * rank 2 are the white pawns (capital letters)
        * 1st rank are the white pieces.

        NOTE: FEN does not say which pieces have moved. Pawns away from their starting rank are marked as moved
        (they can no longer double-step), every other piece is taken to be unmoved.
        """
        if not is_valid_position(fen_str):
            raise InvalidFENError(f"Invalid board position: {fen_str!r}")

        board = cls.empty()
        fen_by_ranks = fen_str.split("/")
        for rank_idx, fen_one_rank in enumerate(fen_by_ranks):
            # FEN string is read from top rank (8th) to bottom rank (1st)
            rank = BOARD_DIMENSIONS[1] - rank_idx
            # ... but the first character is the a-file, so reads in normal direction
            file = 1
            for character in fen_one_rank:
                if character.isalpha():
                    # simple case: a letter directly denotes the piece that should be created
                    piece = Piece.from_fen(character)
                    start_rank = 2 if piece.color == Color.WHITE else BOARD_DIMENSIONS[1] - 1
                    piece.has_moved = piece.type == PieceType.PAWN and rank != start_rank
                    board.position[Square(file, rank)] = piece
                    file += 1
                else:
                    # A number denotes the amount of empty squares after each other
                    file += int(character)
        return board

    def to_fen(self) -> str:
        """Ranks are separated by slashes in FEN string."""
        return "/".join(
            self._rank_to_fen(rank) for rank in range(BOARD_DIMENSIONS[1], 0, -1)
        )

    def _rank_to_fen(self, rank: int) -> str:
        """FEN string of a single rank"""
        fen_characters: list[str] = []
        empty_count = 0
        for file in range(1, BOARD_DIMENSIONS[0] + 1):
            piece = self.piece(Square(file, rank))

            if piece.type != PieceType.EMPTY:
                if empty_count > 0:
                    fen_characters.append(str(empty_count))
                    empty_count = 0
                fen_characters.append(piece.to_fen())
            else:
                empty_count += 1

        # if the entire rank is empty, then we still place this number in the string
        if empty_count > 0:
            fen_characters.append(str(empty_count))
        return "".join(fen_characters)

    # -- ACCESS ---
    def piece(self, square: Square) -> Piece:
        return self.position[square]

    def is_empty(self, square: Square) -> bool:
        return self.position[square].is_empty()

    def squares(self) -> Iterator[tuple[Square, Piece]]:
        """(square, piece) pairs in board scan order"""
        for square in all_squares():
            yield square, self.position[square]

    def locate_pieces(self, piece_type: PieceType, color: Optional[Color] = None) -> list[Square]:
        return [
            square
            for square, piece in self.squares()
            if piece.type == piece_type and (color is None or piece.color == color)
        ]

    def locate_color(self, color: Color) -> list[Square]:
        return [square for square, piece in self.squares() if piece.color == color]

    def find_king(self, color: Color) -> Optional[Square]:
        kings = self.locate_pieces(PieceType.KING, color)
        return kings[0] if kings else None

    # -- SETTING UP POSITIONS ---
    def place_piece(self, piece: Piece, square: Square) -> None:
        self.position[square] = piece

    def remove_piece(self, square: Square) -> Piece:
        removed = self.position[square]
        self.position[square] = Piece.empty()
        return removed

    def promote_piece(self, square: Square, to: PieceType) -> None:
        self.position[square].promote_to(to)

    def move_piece(self, from_square: Square, to_square: Square) -> Piece:
        """Plain relocation of a piece (marking it as moved). Returns whatever stood on the target square."""
        piece_that_moved = self.remove_piece(from_square)
        captured = self.position[to_square]
        self.position[to_square] = replace(piece_that_moved, has_moved=True)
        return captured

    def apply_move(self, move: Move) -> Optional[Piece]:
        """
        Update the position on the board with a complete move.
        ---

        * Castling relocates both the king and the rook.
        * En passant removes the pawn on the en passant square, not on the destination.
        * Promotion changes the type of the piece that arrived on the destination.

        Returns the captured piece (None if nothing was captured).
        """
        if move.is_castle():
            squares = castling_squares(move.piece.color, move.long_castle)
            self.move_piece(squares.king_from, squares.king_to)
            self.move_piece(squares.rook_from, squares.rook_to)
            return None

        captured: Optional[Piece] = self.move_piece(move.origin, move.dest)
        if move.en_passant is not None:
            captured = self.remove_piece(move.en_passant)

        if move.promotion != PieceType.EMPTY:
            self.promote_piece(move.dest, to=move.promotion)

        if captured is None or captured.is_empty():
            return None
        return captured

    # -- ATTACKS AND CHECKS ---
    def is_attacked(self, square: Square, color: Color) -> bool:
        """Is `square` attacked by any piece of the opponent of `color`?"""
        by_color = color.opponent
        return any(
            is_attacked_by(square, by_color, self)
            for is_attacked_by in ATTACK_RULES.values()
        )

    def is_check(self, color: Color) -> bool:
        """The king of `color` is under attack"""
        king_square = self.find_king(color)
        if king_square is None:
            # Only happens on hand-made boards. Without a king there is nothing to check.
            log.warning("No %s king on the board; treating as not in check", color.name)
            return False
        return self.is_attacked(king_square, color)

    def is_any_occupied(self, squares: tuple[Square, ...] | list[Square]) -> bool:
        return any(not self.is_empty(square) for square in squares)

    def is_any_under_attack(
        self, squares: tuple[Square, ...] | list[Square], color: Color
    ) -> bool:
        """Is any of the squares attacked by the opponent of `color`?"""
        return any(self.is_attacked(square, color) for square in squares)
