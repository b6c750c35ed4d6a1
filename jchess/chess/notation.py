"""
Parsing of typed moves.

The notation is algebraic-like: [piece letter][origin hint][x]<destination>[=promotion][+|#],
plus "O-O" / "O-O-O" for castling and a few plain-word commands.

The string is consumed from the end, one component at a time. The result is a Move whose origin
may be only partially known. It has not been checked against the board: that is the job of
Game.disambiguate().
"""

import logging

from jchess.chess.moves import MetaMove, Move
from jchess.chess.pieces import NOTATION_TO_PIECE, Color, Piece, PieceType
from jchess.chess.square import Square, is_file_letter, is_rank_digit
from jchess.core.exceptions import InvalidSquareError, NotationError

log = logging.getLogger(__name__)

MIN_NOTATION_LENGTH = 2
MAX_NOTATION_LENGTH = 9

# Exact, case-sensitive matches
META_COMMANDS: dict[str, MetaMove] = {
    "quit": MetaMove.QUIT,
    "exit": MetaMove.QUIT,
    "concede": MetaMove.CONCEDE,
    "flip": MetaMove.FLIP,
}

SHORT_CASTLE = "O-O"
LONG_CASTLE = "O-O-O"


def validate_notation(text: str) -> None:
    if not text.isascii():
        raise NotationError("Non-ascii input")
    if len(text) < MIN_NOTATION_LENGTH:
        raise NotationError("Input is too short")
    if len(text) > MAX_NOTATION_LENGTH:
        raise NotationError("Input is too long")


def piece_type_from_letter(letter: str) -> PieceType:
    """'' is a pawn move. Otherwise one of P, N, B, R, Q, K."""
    if letter == "":
        return PieceType.PAWN
    if letter not in NOTATION_TO_PIECE:
        raise NotationError(f"Unrecognized piece: {letter!r}")
    return NOTATION_TO_PIECE[letter]


def split_origin_hint(text: str) -> tuple[str, str]:
    """
    Split what is left in front of the destination into (piece letter, origin hint).
    The hint is a full square ('g1'), a file ('b') or a rank ('1'), scanning from the end.
    """
    if len(text) >= 2 and is_file_letter(text[-2]) and is_rank_digit(text[-1]):
        return text[:-2], text[-2:]
    if text and (is_file_letter(text[-1]) or is_rank_digit(text[-1])):
        return text[:-1], text[-1:]
    return text, ""


def parse_notation(text: str, color_to_move: Color) -> Move:
    """
    Turn typed text into a (possibly partial) Move for the side to move.

    Raises NotationError for anything that is not well formed. The board is never consulted.
    """
    if text in META_COMMANDS:
        return Move.command(META_COMMANDS[text])

    validate_notation(text)
    remainder = text

    checkmate = remainder.endswith("#")
    if checkmate:
        remainder = remainder[:-1]

    check = remainder.endswith("+")
    if check:
        remainder = remainder[:-1]

    if check and checkmate:
        raise NotationError("Both check and checkmate")

    # Castling is checked after the check/mate markers, so "O-O+" works as well
    if remainder in (SHORT_CASTLE, LONG_CASTLE):
        return Move(
            piece=Piece(PieceType.KING, color_to_move),
            castle=remainder == SHORT_CASTLE,
            long_castle=remainder == LONG_CASTLE,
            check=check,
            checkmate=checkmate,
        )

    # A promotion needs at least a destination in front of it, so only look for one with more than 2 characters left
    promotion = PieceType.EMPTY
    if len(remainder) > 2 and remainder[-2] == "=":
        promotion = piece_type_from_letter(remainder[-1])
        remainder = remainder[:-2]

    try:
        dest = Square.from_algebraic(remainder[-2:])
    except InvalidSquareError as e:
        raise NotationError("Invalid square") from e
    remainder = remainder[:-2]

    takes = remainder.endswith("x")
    if takes:
        remainder = remainder[:-1]

    piece_letter, hint = split_origin_hint(remainder)
    piece_type = piece_type_from_letter(piece_letter)

    move = Move(
        origin=Square.from_partial(hint),
        dest=dest,
        piece=Piece(piece_type, color_to_move),
        takes=takes,
        check=check,
        checkmate=checkmate,
        promotion=promotion,
    )
    log.debug("Parsed %r as: %s", text, move.describe())
    return move
