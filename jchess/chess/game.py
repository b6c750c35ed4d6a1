"""
The Game class is the entrypoint into the rules engine for the service layer.
It owns the board and the move history, decides which moves are legal, resolves typed moves
against the position, makes moves and detects the end of the game.
"""

import logging
from copy import copy, deepcopy
from dataclasses import dataclass, field, fields, replace
from enum import Enum, auto
from typing import Iterator, Optional, Self

from jchess.chess.board import Board, all_squares
from jchess.chess.castling import castling_squares
from jchess.chess.moves import (
    Move,
    candidate_castling_move,
    candidate_castling_moves,
    pseudo_legal_moves,
)
from jchess.chess.pieces import Color, Piece, PieceType
from jchess.chess.square import BOARD_DIMENSIONS, Square
from jchess.core.exceptions import (
    DisambiguationError,
    GameStateError,
    IllegalMoveError,
)

log = logging.getLogger(__name__)


class Status(Enum):
    IN_PROGRESS = auto()
    CHECKMATE = auto()
    STALEMATE = auto()
    CONCEDED = auto()
    ABORTED = auto()


def _empty_captures() -> dict[Color, list[Piece]]:
    return {Color.WHITE: [], Color.BLACK: []}


@dataclass
class Game:
    board: Board
    to_move: Color = Color.WHITE
    turn_count: int = 1
    history: list[Move] = field(default_factory=list)
    # pieces captured BY each color
    captured: dict[Color, list[Piece]] = field(default_factory=_empty_captures)
    status: Status = Status.IN_PROGRESS

    @classmethod
    def new_game(cls, starting_fen: Optional[str] = None, to_move: Color = Color.WHITE) -> Self:
        """Standard starting position, unless a FEN board placement is given."""
        board = Board.from_fen(starting_fen) if starting_fen else Board.starting_position()
        return cls(board=board, to_move=to_move)

    # -- READ ACCESS ---
    def current_color(self) -> Color:
        return self.to_move

    @property
    def last_move(self) -> Optional[Move]:
        return self.history[-1] if self.history else None

    @property
    def is_over(self) -> bool:
        return self.status != Status.IN_PROGRESS

    @property
    def winner(self) -> Optional[Color]:
        """
        Given we know it is checkmate (or a concession), the player who is to move lost and the opponent must be the winner
        """
        if self.status not in (Status.CHECKMATE, Status.CONCEDED):
            return None
        return self.to_move.opponent

    def is_check(self) -> bool:
        """Is the side to move in check?"""
        return self.board.is_check(self.to_move)

    def is_attacked(self, square: Square, color: Color) -> bool:
        return self.board.is_attacked(square, color)

    def clone(self) -> Self:
        return deepcopy(self)

    # -- MOVE VALIDATION ---
    def validate_castle(self, move: Move) -> Move:
        """
        Check castling for the side to move and return the complete castling move.
        ---

        **you are allowed to castle if**

        * The king and the rook are on their original squares and have never moved.
        * You are not currently in check (you cannot castle out of check).
        * Every square the king passes through (and, castling long, the knight's square) is empty and not under attack.
        """
        squares = castling_squares(self.to_move, move.long_castle)
        king = self.board.piece(squares.king_from)
        rook = self.board.piece(squares.rook_from)
        pieces_in_place = (
            king.matches(Piece(PieceType.KING, self.to_move))
            and not king.has_moved
            and rook.matches(Piece(PieceType.ROOK, self.to_move))
            and not rook.has_moved
        )
        if not pieces_in_place or self.board.is_attacked(squares.king_from, self.to_move):
            raise IllegalMoveError("King/Rook are not valid")

        if self.board.is_any_occupied(squares.path) or self.board.is_any_under_attack(
            squares.path, self.to_move
        ):
            raise IllegalMoveError("Castle path is not clear")

        castle = candidate_castling_move(self.to_move, move.long_castle)
        return replace(castle, check=move.check, checkmate=move.checkmate)

    def is_valid_castle(self, move: Move) -> bool:
        try:
            self.validate_castle(move)
        except IllegalMoveError:
            return False
        return True

    def validate_move(self, move: Move) -> Move:
        """
        Check a complete move against the movement rules and return it with all derived flags set
        (capture, double step, en passant).

        NOTE: Does not look at whether the move exposes your own king. See `is_legal()`.
        """
        if move.is_castle():
            return self.validate_castle(move)

        if not (move.origin.is_within_bounds() and move.dest.is_within_bounds()):
            raise IllegalMoveError("Move needs both an origin and a destination")

        moving_piece = self.board.piece(move.origin)
        if moving_piece.is_empty() or moving_piece.color != self.to_move:
            raise IllegalMoveError("There is no piece to move")

        if move.dest == move.origin:
            raise IllegalMoveError("Origin and Destination are the same")
        target = self.board.piece(move.dest)
        if target.color == moving_piece.color:
            raise IllegalMoveError("There is a piece at the destination")

        # The generated candidates mark a capture whenever an enemy is on the destination, whatever the caller said.
        candidates = [
            candidate
            for candidate in pseudo_legal_moves(move.origin, self.board, self.last_move)
            if candidate.dest == move.dest
        ]
        if move.takes and target.is_empty():
            if not any(candidate.en_passant is not None for candidate in candidates):
                raise IllegalMoveError("There is no piece to take")

        if not candidates:
            raise IllegalMoveError("Selected piece cannot make that move")

        with_promotion = [
            candidate for candidate in candidates if candidate.promotion == move.promotion
        ]
        if not with_promotion:
            raise IllegalMoveError("Invalid promotion")

        return replace(with_promotion[0], check=move.check, checkmate=move.checkmate)

    def is_valid_move(self, move: Move) -> bool:
        try:
            self.validate_move(move)
        except IllegalMoveError:
            return False
        return True

    def is_legal(self, move: Move) -> bool:
        """
        Return True if the move does not put (or leave) the mover in check

        plan:
        1. Copy the board
        2. make the candidate move
        3. determine if king is in check on the new board
        """
        board = deepcopy(self.board)
        board.apply_move(move)
        return not board.is_check(move.piece.color)

    def _iter_valid_moves(self) -> Iterator[Move]:
        """
        Legal moves for the side to move, in board scan order, castling last.
        ----

        1. generate pseudo-legal moves for every piece of the side to move (incl. en passant and promotions)
        2. add the two castling moves, if the castling rule allows them
        3. keep those moves that do not put (or leave) you in check
        """
        last_move = self.last_move
        for square, piece in self.board.squares():
            if piece.color != self.to_move:
                continue
            for move in pseudo_legal_moves(square, self.board, last_move):
                if self.is_legal(move):
                    yield move

        for move in candidate_castling_moves(self.to_move):
            if self.is_valid_castle(move) and self.is_legal(move):
                yield move

    def list_valid_moves(self) -> list[Move]:
        return list(self._iter_valid_moves())

    def any_valid_moves(self) -> bool:
        return next(self._iter_valid_moves(), None) is not None

    # -- DISAMBIGUATION ---
    def _candidate_origins(self, hint: Square, wanted: Piece) -> list[Square]:
        """Squares holding the wanted piece, narrowed down by whatever part of the origin is known."""
        if hint.is_within_bounds():
            squares = [hint]
        elif hint.has_file():
            squares = [Square(hint.file, rank) for rank in range(1, BOARD_DIMENSIONS[1] + 1)]
        elif hint.has_rank():
            squares = [Square(file, hint.rank) for file in range(1, BOARD_DIMENSIONS[0] + 1)]
        else:
            squares = list(all_squares())
        return [square for square in squares if self.board.piece(square).matches(wanted)]

    def disambiguate(self, move: Move) -> Move:
        """
        Resolve a parsed (partial) move to the one move on the board it describes.

        Every piece that fits the description is tried. Exactly one of them must be able to make the move;
        none or several is reported with the same error.
        """
        if move.is_meta():
            raise IllegalMoveError("Commands cannot be played as moves")

        if move.is_castle():
            return self.validate_castle(move)

        if not move.dest.is_within_bounds():
            raise DisambiguationError("Move has no destination")

        wanted = Piece(move.piece.type, self.to_move)
        origins = self._candidate_origins(move.origin, wanted)
        if not origins:
            raise DisambiguationError("No pieces match")

        resolved: list[Move] = []
        for origin in origins:
            candidate = replace(move, origin=origin, piece=copy(self.board.piece(origin)))
            try:
                resolved.append(self.validate_move(candidate))
            except IllegalMoveError as e:
                log.debug("Discarding %s: %s", candidate.notation(), e)

        if len(resolved) != 1:
            raise DisambiguationError(
                f"Cannot uniquely resolve {move.notation()!r}: no single piece can make that move"
            )
        return resolved[0]

    # -- MAKING MOVES ---
    def do_move(self, move: Move) -> Self:
        """
        Make a complete (resolved) move on the board and add it to the history.
        -----

        Returns a snapshot of the game as it was before the move, so the caller can roll back with `restore()`.
        The `check` flag of the recorded move is set if the opponent is now in check.

        NOTE: Turn does not pass here. Call `next_turn()` once the move is accepted.
        """
        if self.is_over:
            raise GameStateError(f"Game is over. status: {self.status.name.lower()}")
        if move.is_meta():
            raise IllegalMoveError("Commands cannot be played as moves")
        if not move.is_castle() and not move.origin.is_within_bounds():
            raise IllegalMoveError("Move must be disambiguated before it is made")

        previous_state = self.clone()
        mover = self.to_move

        captured = self.board.apply_move(move)
        if captured is not None:
            self.captured[mover].append(captured)

        gives_check = self.board.is_check(mover.opponent)
        recorded = replace(move, check=gives_check, checkmate=False)
        self.history.append(recorded)
        log.info("%s plays %s", mover.name.capitalize(), recorded.notation())
        return previous_state

    def restore(self, snapshot: "Game") -> None:
        """Roll back to a snapshot returned by `do_move()`"""
        restored = deepcopy(snapshot)
        for f in fields(self):
            setattr(self, f.name, getattr(restored, f.name))

    def next_turn(self) -> None:
        self.to_move = self.to_move.opponent
        if self.to_move == Color.WHITE:
            self.turn_count += 1

    # -- END OF GAME ---
    def evaluate_terminal_state(self) -> Status:
        """
        Performs checks to see if game has ended and changes status accordingly.

        NOTE the turn has already passed: the side to move is the opponent of the player that just moved.
        """
        if self.is_over:
            return self.status

        if not self.any_valid_moves():
            if self.is_check():
                self.set_checkmate()
            else:
                self.set_stalemate()
        return self.status

    def finalize_last_move(self) -> None:
        """The one permitted edit of the history: the last move turns out to have been checkmate."""
        if self.history:
            self.history[-1] = replace(self.history[-1], check=False, checkmate=True)

    def set_checkmate(self) -> None:
        self._change_status(Status.CHECKMATE)
        self.finalize_last_move()

    def set_stalemate(self) -> None:
        self._change_status(Status.STALEMATE)

    def set_concede(self) -> None:
        self._change_status(Status.CONCEDED)

    def set_abort(self) -> None:
        self._change_status(Status.ABORTED)

    def _change_status(self, new_status: Status) -> None:
        log.info("Game status: %s -> %s", self.status.name, new_status.name)
        self.status = new_status
