"""
A square on the board

(placed in its own module as multiple other modules need to import it)

A square may be only partially known: notation like "Nbd2" names the file of the
moving piece but not its rank. Missing components are stored as None.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from jchess.core.exceptions import InvalidSquareError

# Chess board is always 8x8. Just in case we want to try some funky stuff, make it adjustable
BOARD_DIMENSIONS = (8, 8)

FILE_LETTERS = "abcdefgh"


def is_file_letter(character: str) -> bool:
    return len(character) == 1 and character in FILE_LETTERS[: BOARD_DIMENSIONS[0]]


def is_rank_digit(character: str) -> bool:
    return (
        len(character) == 1
        and character.isdigit()
        and 1 <= int(character) <= BOARD_DIMENSIONS[1]
    )


@dataclass(frozen=True)
class Square:
    file: Optional[int] = None
    rank: Optional[int] = None

    @classmethod
    def from_algebraic(cls, sq: str) -> Square:
        """Algebraic notation: 'a1' - 'h8' get converted to (1,1) - (8,8)"""
        if len(sq) != 2 or not (is_file_letter(sq[0]) and is_rank_digit(sq[1])):
            raise InvalidSquareError(f"Invalid square: {sq!r}")
        file = ord(sq[0]) - ord("a") + 1
        rank = int(sq[1])
        return cls(file, rank)

    @classmethod
    def from_partial(cls, hint: str) -> Square:
        """A disambiguation hint: '', 'b', '1' or 'b1'. Anything else is the empty square."""
        if len(hint) == 2 and is_file_letter(hint[0]) and is_rank_digit(hint[1]):
            return cls.from_algebraic(hint)
        if len(hint) == 1 and is_file_letter(hint):
            return cls(file=ord(hint) - ord("a") + 1)
        if len(hint) == 1 and is_rank_digit(hint):
            return cls(rank=int(hint))
        return cls()

    @classmethod
    def from_index(cls, file_idx: int, rank_idx: int) -> Square:
        """0-based indices, as used for an 8x8 array"""
        return cls(file_idx + 1, rank_idx + 1)

    def index(self) -> tuple[int, int]:
        if not self.is_within_bounds():
            raise InvalidSquareError(f"Square {self} has no board index")
        assert self.file is not None and self.rank is not None
        return self.file - 1, self.rank - 1

    @property
    def file_letter(self) -> str:
        if self.file is None or not 1 <= self.file <= BOARD_DIMENSIONS[0]:
            return ""
        return FILE_LETTERS[self.file - 1]

    def to_algebraic(self) -> str:
        """Missing components are left out, so a file-only square prints as just 'b'"""
        rank = str(self.rank) if self.rank is not None else ""
        return f"{self.file_letter}{rank}"

    def has_file(self) -> bool:
        return self.file is not None and 1 <= self.file <= BOARD_DIMENSIONS[0]

    def has_rank(self) -> bool:
        return self.rank is not None and 1 <= self.rank <= BOARD_DIMENSIONS[1]

    def is_within_bounds(self) -> bool:
        return self.has_file() and self.has_rank()

    def offset(self, df: int, dr: int) -> Square:
        """Square shifted by a vector. May fall off the board, check with is_within_bounds()"""
        assert self.file is not None and self.rank is not None
        return Square(self.file + df, self.rank + dr)

    def __str__(self) -> str:
        return self.to_algebraic() or "-"


NO_SQUARE = Square()
