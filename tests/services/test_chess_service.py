"""Unit tests for /jchess/services/chess_service.py"""

from unittest.mock import Mock

import pytest

from jchess.api.models import MoveRequest
from jchess.chess.game import Game
from jchess.chess.moves import Move
from jchess.chess.notation import parse_notation
from jchess.core.config import EngineSettings
from jchess.core.exceptions import GameStateError, NotationError
from jchess.core.shared_types import Color, Orientation, PieceType, Status
from jchess.services.chess_service import ChessService
from jchess.services.players import HumanPlayer, RandomBot

FOOLS_MATE = ["f3", "e5", "g4", "Qh4#"]


@pytest.fixture
def service() -> ChessService:
    return ChessService()


def submit(service: ChessService, *notations: str) -> None:
    for notation in notations:
        response = service.submit_notation(MoveRequest(notation=notation))
        assert response.accepted, response.error


# --- SERVICE - GAME STATE ----
def test_new_service_starts_a_game(service: ChessService) -> None:
    state = service.game_state()
    assert state.status == Status.IN_PROGRESS
    assert state.to_move == Color.WHITE
    assert state.turn_count == 1
    assert state.move_history == []
    assert not state.is_check
    assert state.winner is None


def test_legal_moves(service: ChessService) -> None:
    response = service.legal_moves()
    assert response.color == Color.WHITE
    assert len(response.legal_moves) == 20
    assert "Ng1f3" in response.legal_moves


def test_new_game_from_position(service: ChessService) -> None:
    submit(service, "e4")
    state = service.new_game("4k3/8/8/8/8/5N2/8/1N2K3")
    assert state.board_fen == "4k3/8/8/8/8/5N2/8/1N2K3"
    assert state.move_history == []


# --- SERVICE - MAKING MOVES ----
def test_submit_pawn_push(service: ChessService) -> None:
    response = service.submit_notation(MoveRequest(notation="e4"))
    assert response.accepted
    assert response.move == "e2e4"
    assert response.game.to_move == Color.BLACK
    assert response.game.board_fen == "rnbqkbnr/pppppppp/8/8/4P3/8/PPPP1PPP/RNBQKBNR"


def test_turn_count_after_full_move(service: ChessService) -> None:
    submit(service, "e4", "e5")
    assert service.game_state().turn_count == 2


def test_captures_are_reported(service: ChessService) -> None:
    submit(service, "e4", "d5", "exd5")
    assert service.game_state().captured == {Color.WHITE: [PieceType.PAWN], Color.BLACK: []}


@pytest.mark.parametrize(
    "notation, error",
    [
        ("e5", "uniquely resolve"),
        ("Xe4", "Unrecognized piece"),
        ("Qh5+#", "Both check and checkmate"),
        ("O-O", "Castle path is not clear"),
    ],
)
def test_rejected_move_leaves_game_untouched(service: ChessService, notation: str, error: str) -> None:
    before = service.game_state()
    response = service.submit_notation(MoveRequest(notation=notation))
    assert not response.accepted
    assert error in response.error
    assert response.game == before


def test_self_check_is_rolled_back() -> None:
    """The knight on e2 is pinned by the rook on e8"""
    service = ChessService(EngineSettings(starting_position="4r1k1/8/8/8/8/8/4N3/4K3"))
    response = service.submit_notation(MoveRequest(notation="Nc3"))
    assert not response.accepted
    assert response.error == "Move leaves the king in check"
    assert response.game.board_fen == "4r1k1/8/8/8/8/8/4N3/4K3"
    assert response.game.to_move == Color.WHITE
    assert service.game.history == []


def test_fools_mate(service: ChessService) -> None:
    submit(service, *FOOLS_MATE[:-1])
    response = service.submit_notation(MoveRequest(notation=FOOLS_MATE[-1]))
    assert response.move == "Qd8h4#"
    assert response.game.status == Status.CHECKMATE
    assert response.game.winner == Color.BLACK
    assert response.game.move_history[-1] == "Qd8h4#"


def test_no_moves_after_game_over(service: ChessService) -> None:
    submit(service, *FOOLS_MATE)
    response = service.submit_notation(MoveRequest(notation="a3"))
    assert not response.accepted
    assert "Game is over" in response.error


# --- SERVICE - COMMANDS ----
def test_concede(service: ChessService) -> None:
    submit(service, "e4")
    response = service.submit_notation(MoveRequest(notation="concede"))
    assert response.accepted
    assert response.move == "concede"
    assert response.game.status == Status.CONCEDED
    assert response.game.winner == Color.WHITE


@pytest.mark.parametrize("command", ["quit", "exit"])
def test_quit_aborts(service: ChessService, command: str) -> None:
    response = service.submit_notation(MoveRequest(notation=command))
    assert response.game.status == Status.ABORTED
    assert response.game.winner is None


def test_flip_changes_orientation_only(service: ChessService) -> None:
    response = service.submit_notation(MoveRequest(notation="flip"))
    assert response.accepted
    assert response.game.orientation == Orientation.BLACK_BOTTOM
    assert response.game.to_move == Color.WHITE
    assert service.flip() == Orientation.WHITE_BOTTOM


def test_auto_flip_follows_side_to_move() -> None:
    service = ChessService(EngineSettings(auto_flip=True))
    submit(service, "e4")
    assert service.orientation == Orientation.BLACK_BOTTOM
    submit(service, "e5")
    assert service.orientation == Orientation.WHITE_BOTTOM


def test_render_board(service: ChessService) -> None:
    rendered = service.render().splitlines()
    assert rendered[0] == "8 r n b q k b n r"
    assert rendered[-1] == "  a b c d e f g h"

    service.flip()
    rendered = service.render().splitlines()
    assert rendered[0] == "1 R N B K Q B N R"
    assert rendered[-1] == "  h g f e d c b a"


# --- SERVICE - UNDO ----
def test_undo(service: ChessService) -> None:
    submit(service, "e4", "e5")
    state = service.undo()
    assert state.to_move == Color.BLACK
    assert state.move_history == ["e2e4"]


def test_undo_reopens_finished_game(service: ChessService) -> None:
    submit(service, *FOOLS_MATE)
    state = service.undo()
    assert state.status == Status.IN_PROGRESS
    assert len(state.move_history) == 3


def test_nothing_to_undo(service: ChessService) -> None:
    with pytest.raises(GameStateError):
        service.undo()


# --- SERVICE - MOVE SOURCES ----
def test_play_turn_asks_the_source(service: ChessService) -> None:
    source = Mock()
    source.get_move.side_effect = lambda game: parse_notation("Nf3", game.to_move)
    response = service.play_turn(source)
    source.get_move.assert_called_once_with(service.game)
    assert response.move == "Ng1f3"


def test_play_turn_reports_source_errors(service: ChessService) -> None:
    source = Mock()
    source.get_move.side_effect = NotationError("Input is too short")
    response = service.play_turn(source)
    assert not response.accepted
    assert response.error == "Input is too short"


def test_play_move_with_generated_move(service: ChessService) -> None:
    move: Move = service.game.list_valid_moves()[0]
    response = service.play_move(move)
    assert response.accepted
    assert response.move == move.notation()


def test_run_two_bots_until_the_end() -> None:
    service = ChessService(EngineSettings(max_plies=40))
    state = service.run(RandomBot(seed=3), RandomBot(seed=4))
    assert state.status != Status.IN_PROGRESS
    assert len(state.move_history) <= 40


def test_run_aborts_after_max_plies() -> None:
    """Two humans that only ever type nonsense never finish a game"""
    service = ChessService(EngineSettings(max_plies=5))
    nonsense = HumanPlayer(lambda prompt: "Xz9")
    state = service.run(nonsense, nonsense)
    assert state.status == Status.ABORTED
    assert state.move_history == []


def test_run_scripted_game() -> None:
    moves = iter(FOOLS_MATE)
    player = HumanPlayer(lambda prompt: next(moves))
    state = ChessService().run(player, player)
    assert state.status == Status.CHECKMATE
    assert isinstance(ChessService().game, Game)
