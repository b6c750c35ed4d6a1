"""Requests and Response models"""

from typing import Optional

from pydantic import BaseModel, field_validator

from jchess.chess.notation import MAX_NOTATION_LENGTH
from jchess.core.exceptions import InvalidRequestError
from jchess.core.shared_types import Color, Orientation, PieceType, Status


# --- REQUEST MODELS ---
class MoveRequest(BaseModel):
    notation: str

    @field_validator("notation")
    @classmethod
    def validate_notation(cls, value: str) -> str:
        """Only the shape of the text is checked here. Whether it is a move is up to the parser."""
        value = value.strip()
        if not value:
            raise InvalidRequestError("Move notation cannot be empty.")
        if not value.isascii():
            raise InvalidRequestError(f"Move notation {value!r} contains non-ascii characters.")
        if len(value) > MAX_NOTATION_LENGTH:
            raise InvalidRequestError(
                f"Move notation {value!r} is longer than {MAX_NOTATION_LENGTH} characters."
            )
        return value


# --- RESPONSE MODELS ---
class GameResponse(BaseModel):
    status: Status
    to_move: Color
    turn_count: int
    board_fen: str
    move_history: list[str]
    captured: dict[Color, list[PieceType]]
    is_check: bool
    winner: Optional[Color] = None
    orientation: Orientation = Orientation.WHITE_BOTTOM


class LegalMovesResponse(BaseModel):
    color: Color
    legal_moves: list[str]


class TurnResponse(BaseModel):
    """Outcome of one submitted move. A rejected move leaves `game` exactly as it was."""

    accepted: bool
    move: Optional[str] = None
    error: Optional[str] = None
    game: GameResponse
