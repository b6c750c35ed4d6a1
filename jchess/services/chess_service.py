"""Orchestration of communication between players (or a client) and the rules engine."""

import logging
from typing import Optional

from jchess.api.models import (
    GameResponse,
    LegalMovesResponse,
    MoveRequest,
    TurnResponse,
)
from jchess.chess.game import Game
from jchess.chess.moves import MetaMove, Move
from jchess.chess.notation import parse_notation
from jchess.chess.pieces import Color as EngineColor
from jchess.chess.pieces import Piece
from jchess.chess.square import BOARD_DIMENSIONS, FILE_LETTERS, Square
from jchess.core.config import EngineSettings
from jchess.core.exceptions import GameError, GameStateError, SelfCheckError
from jchess.core.shared_types import Color, Orientation, PieceType, Status
from jchess.services.players import MoveSource

log = logging.getLogger(__name__)

EMPTY_SQUARE = "."


def _to_color(color: EngineColor) -> Color:
    return Color[color.name]


def _orientation_for(color: EngineColor) -> Orientation:
    return Orientation.BLACK_BOTTOM if color == EngineColor.BLACK else Orientation.WHITE_BOTTOM


class ChessService:
    """Runs one game at a time: takes moves in, applies them to the Game and reports the outcome."""

    def __init__(self, settings: Optional[EngineSettings] = None) -> None:
        self.settings = settings if settings is not None else EngineSettings()
        self.game = Game.new_game(self.settings.starting_position)
        self.orientation = Orientation.WHITE_BOTTOM
        # state of the game before each accepted move, most recent last
        self._snapshots: list[Game] = []

    # -- GAME LIFECYCLE ---
    def new_game(self, starting_position: Optional[str] = None) -> GameResponse:
        """Throw away the current game and set up the board again."""
        self.game = Game.new_game(starting_position or self.settings.starting_position)
        self.orientation = Orientation.WHITE_BOTTOM
        self._snapshots.clear()
        log.info("New game from %s", self.game.board.to_fen())
        return self.game_state()

    def game_state(self) -> GameResponse:
        game = self.game
        winner = game.winner
        return GameResponse(
            status=Status[game.status.name],
            to_move=_to_color(game.to_move),
            turn_count=game.turn_count,
            board_fen=game.board.to_fen(),
            move_history=[move.notation() for move in game.history],
            captured={
                _to_color(color): [PieceType[piece.type.name] for piece in pieces]
                for color, pieces in game.captured.items()
            },
            is_check=game.is_check(),
            winner=_to_color(winner) if winner is not None else None,
            orientation=self.orientation,
        )

    def legal_moves(self) -> LegalMovesResponse:
        return LegalMovesResponse(
            color=_to_color(self.game.to_move),
            legal_moves=[move.notation() for move in self.game.list_valid_moves()],
        )

    def undo(self) -> GameResponse:
        """Take back the last accepted move (this also reopens a finished game)."""
        if not self._snapshots:
            raise GameStateError("Nothing to undo")
        self.game.restore(self._snapshots.pop())
        log.info("Move taken back, %s to move", self.game.to_move.name.lower())
        return self.game_state()

    # -- MAKING MOVES ---
    def submit_notation(self, request: MoveRequest) -> TurnResponse:
        """A move typed by a client."""
        try:
            move = parse_notation(request.notation, self.game.to_move)
        except GameError as e:
            return self._rejected(request.notation, e)
        return self.play_move(move)

    def play_turn(self, source: MoveSource) -> TurnResponse:
        """Ask the source whose turn it is for a move and play it."""
        try:
            move = source.get_move(self.game)
        except GameError as e:
            return self._rejected(None, e)
        return self.play_move(move)

    def play_move(self, move: Move) -> TurnResponse:
        """
        Play a parsed move. Rule violations come back as an error on the response, with the game untouched.
        """
        try:
            played = self._play(move)
        except GameError as e:
            return self._rejected(move.notation(), e)
        return TurnResponse(accepted=True, move=played, game=self.game_state())

    def _play(self, move: Move) -> str:
        """
        Plan:
        1. commands (quit / concede / flip) never reach the board
        2. resolve the move against the board
        3. make it, and roll back if the mover's own king is left under attack
        4. pass the turn and check for checkmate or stalemate
        """
        if move.is_meta():
            return self._handle_command(move.meta)

        game = self.game
        if game.is_over:
            raise GameStateError(f"Game is over. status: {game.status.name.lower()}")

        resolved = game.disambiguate(move)
        snapshot = game.do_move(resolved)
        if game.is_check():
            game.restore(snapshot)
            raise SelfCheckError("Move leaves the king in check")

        self._snapshots.append(snapshot)
        played = game.history[-1].notation()
        game.next_turn()
        game.evaluate_terminal_state()
        if self.settings.auto_flip:
            self.orientation = _orientation_for(game.to_move)

        # evaluating the end of the game can still turn a check into checkmate
        return game.history[-1].notation() if game.is_over else played

    def _handle_command(self, meta: MetaMove) -> str:
        if meta == MetaMove.FLIP:
            self.flip()
            return "flip"

        if self.game.is_over:
            raise GameStateError(f"Game is over. status: {self.game.status.name.lower()}")
        if meta == MetaMove.CONCEDE:
            log.info("%s concedes", self.game.to_move.name.capitalize())
            self.game.set_concede()
            return "concede"
        self.game.set_abort()
        return "quit"

    def _rejected(self, notation: Optional[str], error: GameError) -> TurnResponse:
        log.info("Rejected %r: %s", notation, error)
        return TurnResponse(accepted=False, move=notation, error=str(error), game=self.game_state())

    # -- AUTOMATED PLAY ---
    def run(self, white: MoveSource, black: MoveSource) -> GameResponse:
        """
        Play until the game is over, asking each side for moves in turn.
        ---

        Rejected moves are logged and the same side is asked again. After `max_plies` attempts the game is aborted,
        so two sources that never finish (or keep sending bad moves) cannot loop forever.
        """
        for _ in range(self.settings.max_plies):
            if self.game.is_over:
                break
            source = white if self.game.to_move == EngineColor.WHITE else black
            response = self.play_turn(source)
            if not response.accepted:
                log.info("%s: %s", self.game.to_move.name.capitalize(), response.error)
        else:
            if not self.game.is_over:
                log.warning("No result after %d plies, aborting", self.settings.max_plies)
                self.game.set_abort()
        return self.game_state()

    # -- PRESENTATION ---
    def flip(self) -> Orientation:
        self.orientation = (
            Orientation.WHITE_BOTTOM
            if self.orientation == Orientation.BLACK_BOTTOM
            else Orientation.BLACK_BOTTOM
        )
        return self.orientation

    def render(self) -> str:
        """Plain text board as seen from the bottom side, with rank numbers and file letters."""
        white_bottom = self.orientation == Orientation.WHITE_BOTTOM
        ranks = range(BOARD_DIMENSIONS[1], 0, -1) if white_bottom else range(1, BOARD_DIMENSIONS[1] + 1)
        files = list(range(1, BOARD_DIMENSIONS[0] + 1))
        if not white_bottom:
            files.reverse()

        lines = [
            f"{rank} " + " ".join(self._square_symbol(self.game.board.piece(Square(file, rank))) for file in files)
            for rank in ranks
        ]
        lines.append("  " + " ".join(FILE_LETTERS[file - 1] for file in files))
        return "\n".join(lines)

    @staticmethod
    def _square_symbol(piece: Piece) -> str:
        return EMPTY_SQUARE if piece.is_empty() else piece.to_fen()
