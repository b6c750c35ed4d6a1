"""Unit tests for /jchess/chess/board.py"""

import logging

import pytest

from jchess.chess.board import STARTING_POSITION_FEN, Board, all_squares, is_valid_position
from jchess.chess.moves import Move
from jchess.chess.pieces import Color, Piece, PieceType
from jchess.chess.square import Square
from jchess.core.exceptions import InvalidFENError

EMPTY_FEN = "/".join(["8"] * 8)


def sq(name: str) -> Square:
    return Square.from_algebraic(name)


# -- CREATION LOGIC --
def test_starting_position() -> None:
    board = Board.starting_position()
    assert board.piece(sq("e1")) == Piece(PieceType.KING, Color.WHITE)
    assert board.piece(sq("d8")) == Piece(PieceType.QUEEN, Color.BLACK)
    assert len(board.locate_pieces(PieceType.PAWN)) == 16
    assert len(board.locate_color(Color.WHITE)) == 16
    assert all(board.is_empty(Square(file, rank)) for file in range(1, 9) for rank in range(3, 7))


@pytest.mark.parametrize(
    "fen",
    [
        STARTING_POSITION_FEN,
        EMPTY_FEN,
        "r3k2r/pppq1ppp/2npbn2/4p3/2B1P3/2NP1N2/PPP2PPP/R1BQ1RK1",
        "4k3/8/8/8/8/5N2/8/1N2K3",
    ],
)
def test_fen_roundtrip(fen: str) -> None:
    assert Board.from_fen(fen).to_fen() == fen


@pytest.mark.parametrize(
    "fen",
    [
        "rnbqkbnr/pppppppp/8/8/8/8/PPPPPPPP",  # only 7 ranks
        "rnbqkbnr/pppppppp/8/8/8/8/PPPPPPPP/RNBQKBNRR",  # 9 files on the first rank
        "rnbqkbnr/pppppppp/8/8/8/8/PPPPPPPP/RNBQKBN",  # 7 files on the first rank
        "rnbqkbnr/pppppppp/8/8/8/8/PPPPPPPP/RNBXKBNR",  # unknown piece
    ],
)
def test_invalid_fen(fen: str) -> None:
    assert not is_valid_position(fen)
    with pytest.raises(InvalidFENError):
        Board.from_fen(fen)


def test_pawns_off_start_rank_have_moved() -> None:
    """FEN has no history: a pawn away from its starting rank can no longer double-step"""
    board = Board.from_fen("4k3/8/8/8/4P3/8/3P4/4K3")
    assert board.piece(sq("e4")).has_moved
    assert not board.piece(sq("d2")).has_moved


def test_scan_order_is_file_major() -> None:
    squares = list(all_squares())
    assert len(squares) == 64
    assert squares[:3] == [sq("a1"), sq("a2"), sq("a3")]
    assert squares[8] == sq("b1")
    assert squares[-1] == sq("h8")


# -- MAKING MOVES ---
def test_move_piece_marks_it_as_moved() -> None:
    board = Board.starting_position()
    captured = board.move_piece(sq("g1"), sq("f3"))
    assert captured.is_empty()
    assert board.is_empty(sq("g1"))
    assert board.piece(sq("f3")) == Piece(PieceType.KNIGHT, Color.WHITE, has_moved=True)


def test_apply_capture_returns_captured_piece() -> None:
    board = Board.from_fen("4k3/8/8/3p4/4P3/8/8/4K3")
    move = Move(sq("e4"), sq("d5"), Piece(PieceType.PAWN, Color.WHITE), takes=True)
    captured = board.apply_move(move)
    assert captured is not None and captured.matches(Piece(PieceType.PAWN, Color.BLACK))
    assert board.piece(sq("d5")).matches(Piece(PieceType.PAWN, Color.WHITE))


def test_apply_quiet_move_captures_nothing() -> None:
    board = Board.starting_position()
    assert board.apply_move(Move(sq("e2"), sq("e4"), Piece(PieceType.PAWN, Color.WHITE))) is None


def test_apply_castle_moves_king_and_rook() -> None:
    board = Board.from_fen("r3k2r/8/8/8/8/8/8/R3K2R")
    board.apply_move(Move(piece=Piece(PieceType.KING, Color.BLACK), long_castle=True))
    assert board.piece(sq("c8")) == Piece(PieceType.KING, Color.BLACK, has_moved=True)
    assert board.piece(sq("d8")) == Piece(PieceType.ROOK, Color.BLACK, has_moved=True)
    assert board.is_empty(sq("e8")) and board.is_empty(sq("a8"))
    # the other side is untouched
    assert board.piece(sq("h8")) == Piece(PieceType.ROOK, Color.BLACK)


def test_apply_en_passant_removes_passed_pawn() -> None:
    board = Board.from_fen("4k3/8/8/3pP3/8/8/8/4K3")
    move = Move(
        sq("e5"), sq("d6"), Piece(PieceType.PAWN, Color.WHITE), takes=True, en_passant=sq("d5")
    )
    captured = board.apply_move(move)
    assert captured is not None and captured.matches(Piece(PieceType.PAWN, Color.BLACK))
    assert board.is_empty(sq("d5"))
    assert board.piece(sq("d6")).matches(Piece(PieceType.PAWN, Color.WHITE))


def test_apply_promotion() -> None:
    board = Board.from_fen("4k3/P7/8/8/8/8/8/4K3")
    board.apply_move(
        Move(sq("a7"), sq("a8"), Piece(PieceType.PAWN, Color.WHITE), promotion=PieceType.KNIGHT)
    )
    assert board.piece(sq("a8")).matches(Piece(PieceType.KNIGHT, Color.WHITE))


# -- ATTACKS AND CHECKS ---
def test_check_detection() -> None:
    board = Board.from_fen("4k3/8/8/8/8/8/8/4K2r")
    assert board.is_check(Color.WHITE)
    assert not board.is_check(Color.BLACK)


def test_missing_king_is_not_in_check(caplog: pytest.LogCaptureFixture) -> None:
    board = Board.from_fen("4k3/8/8/8/8/8/8/7r")
    with caplog.at_level(logging.WARNING):
        assert not board.is_check(Color.WHITE)
    assert "No WHITE king" in caplog.text


def test_squares_under_attack() -> None:
    board = Board.from_fen("4k3/8/8/8/8/8/8/5r1K")
    assert board.is_attacked(sq("g1"), Color.WHITE)
    assert not board.is_attacked(sq("a2"), Color.WHITE)
    assert board.is_any_under_attack([sq("a2"), sq("e1")], Color.WHITE)
    assert board.is_any_occupied([sq("a1"), sq("f1")])
    assert not board.is_any_occupied([sq("a1"), sq("b1")])
