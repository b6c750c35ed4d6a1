"""
Geometry/Base movement and capturing/attacking rules

Key idea: Use strategy pattern to define pseudo-legal move sets for each piece type.
A pseudo-legal move obeys the piece's movement pattern and the occupancy of the board,
but may still leave the mover's own king in check.

Legality is checked later by Game
"""

from copy import copy
from dataclasses import dataclass, field, replace
from enum import Enum, auto
from typing import Callable, Optional, Protocol, Self

from jchess.chess.castling import castling_squares
from jchess.chess.pieces import Color, Piece, PieceType
from jchess.chess.square import BOARD_DIMENSIONS, NO_SQUARE, Square


class Board(Protocol):
    """Just the parts the movement strategies need"""

    def piece(self, square: Square) -> Piece: ...
    def is_empty(self, square: Square) -> bool: ...


Vector = tuple[int, int]


class MetaMove(Enum):
    """Commands typed in place of a move. The controller handles them before touching the board."""

    NONE = auto()
    QUIT = auto()
    CONCEDE = auto()
    FLIP = auto()


@dataclass(frozen=True)
class Move:
    """
    A single ply.

    A Move coming out of the notation parser may be incomplete (origin unknown or only partially known).
    Moves produced by the move generator, or resolved by Game.disambiguate(), are complete.
    `en_passant` holds the square of the pawn being captured, which is not the destination.
    """

    origin: Square = NO_SQUARE
    dest: Square = NO_SQUARE
    piece: Piece = field(default_factory=Piece.empty)
    takes: bool = False
    check: bool = False
    checkmate: bool = False
    castle: bool = False
    long_castle: bool = False
    pawn_double: bool = False
    en_passant: Optional[Square] = None
    promotion: PieceType = PieceType.EMPTY
    meta: MetaMove = MetaMove.NONE

    @classmethod
    def command(cls, meta: MetaMove) -> Self:
        return cls(meta=meta)

    def is_castle(self) -> bool:
        return self.castle or self.long_castle

    def is_meta(self) -> bool:
        return self.meta != MetaMove.NONE

    def notation(self) -> str:
        """
        Algebraic-like notation of the move: <piece><origin><x><dest><=promotion><+/#>

        The origin is written as far as it is known. Moves from the generator always know it,
        so pawn moves come out as "e2e4" and knight moves as "Ng1f3".
        """
        suffix = "#" if self.checkmate else "+" if self.check else ""
        if self.castle:
            return f"O-O{suffix}"
        if self.long_castle:
            return f"O-O-O{suffix}"

        takes = "x" if self.takes else ""
        promotion = (
            f"={Piece(self.promotion, self.piece.color).letter}"
            if self.promotion != PieceType.EMPTY
            else ""
        )
        return f"{self.piece.letter}{self.origin.to_algebraic()}{takes}{self.dest.to_algebraic()}{promotion}{suffix}"

    def describe(self) -> str:
        """Plain-language version for logs, e.g. 'Knight on g1 to f3 with check'"""
        if self.castle:
            return "Castles"
        if self.long_castle:
            return "Long Castles"

        words = [self.piece.type.name.capitalize()]
        if self.origin.to_algebraic():
            words.append(f"on {self.origin.to_algebraic()}")
        words.append("takes on" if self.takes else "to")
        words.append(self.dest.to_algebraic())
        if self.promotion != PieceType.EMPTY:
            words.append(f"promotes to {self.promotion.name.capitalize()}")
        if self.checkmate:
            words.append("with checkmate")
        elif self.check:
            words.append("with check")
        return " ".join(words)

    def __str__(self) -> str:
        return self.notation()


# --- PAWN GEOMETRY ---
# White moves UP the board, black moves DOWN
PAWN_DIRECTION: dict[Color, int] = {Color.WHITE: 1, Color.BLACK: -1}
PAWN_START_RANK: dict[Color, int] = {Color.WHITE: 2, Color.BLACK: BOARD_DIMENSIONS[1] - 1}
PROMOTION_RANK: dict[Color, int] = {Color.WHITE: BOARD_DIMENSIONS[1], Color.BLACK: 1}


def _move_to(square: Square, target_square: Square, board: Board, **flags) -> Move:
    """A move of the piece on `square`. Capture flag follows from what stands on the target square."""
    return Move(
        origin=square,
        dest=target_square,
        piece=copy(board.piece(square)),
        takes=not board.is_empty(target_square),
        **flags,
    )


# --- MOVEMENT RULES ---
def raycasting_move(
    square: Square, board: Board, directions: list[Vector]
) -> list[Move]:
    """
    Raycasting algorithm
    -----

    ---
    The main trick we use to check the 'line of sight of a piece'.
    We define move directions and move along them until we hit another piece or
    the edge of the board.
    """

    player_color = board.piece(square).color

    moves: list[Move] = []
    for df, dr in directions:
        target_square = square
        while True:
            target_square = target_square.offset(df, dr)
            if not target_square.is_within_bounds():
                break

            if not board.is_empty(target_square):
                # only need to add the first occupied square found if it is the opponent's: then it can be captured.
                if board.piece(target_square).color == player_color.opponent:
                    moves.append(_move_to(square, target_square, board))
                break

            moves.append(_move_to(square, target_square, board))
    return moves


def single_step_move(square: Square, board: Board, deltas: list[Vector]) -> list[Move]:
    """Raycasting is for sliding pieces. This is the equivalent for kings and knights that just can move a single step along a direction"""
    moves: list[Move] = []
    player_color = board.piece(square).color
    for df, dr in deltas:
        target_square = square.offset(df, dr)
        if not target_square.is_within_bounds():
            continue

        square_available = board.piece(target_square).color != player_color
        if square_available:
            moves.append(_move_to(square, target_square, board))

    return moves


def candidate_pawn_moves(square: Square, board: Board) -> list[Move]:
    """
    A pawn:
    - moves by a single square forward, onto an empty square.
    - It can move by two in their first move (so when on their starting rank), if both squares are empty
    - takes diagonally

    NOTE: En passant and promotion are added by `pseudo_legal_moves()`
    """
    pawn = board.piece(square)
    direction = PAWN_DIRECTION[pawn.color]

    moves: list[Move] = []
    single_push = square.offset(0, direction)
    if single_push.is_within_bounds() and board.is_empty(single_push):
        moves.append(_move_to(square, single_push, board))

        double_push = square.offset(0, 2 * direction)
        on_start_rank = square.rank == PAWN_START_RANK[pawn.color]
        if (
            not pawn.has_moved
            and on_start_rank
            and double_push.is_within_bounds()
            and board.is_empty(double_push)
        ):
            moves.append(_move_to(square, double_push, board, pawn_double=True))

    # pawns take diagonally:
    for df in (-1, 1):
        target_square = square.offset(df, direction)
        if not target_square.is_within_bounds():
            continue
        if board.piece(target_square).color == pawn.color.opponent:
            moves.append(_move_to(square, target_square, board))
    return moves


KNIGHT_DELTAS: list[Vector] = [
    (2, 1),
    (2, -1),
    (-2, 1),
    (-2, -1),
    (1, 2),
    (1, -2),
    (-1, 2),
    (-1, -2),
]
KING_DELTAS: list[Vector] = [
    (0, 1),
    (0, -1),
    (1, 0),
    (-1, 0),
    (1, 1),
    (1, -1),
    (-1, 1),
    (-1, -1),
]
DIAGONALS: list[Vector] = [(1, 1), (-1, 1), (1, -1), (-1, -1)]
STRAIGHTS: list[Vector] = [(1, 0), (-1, 0), (0, 1), (0, -1)]


def candidate_knight_moves(square: Square, board: Board) -> list[Move]:
    """Knights always move such that |delta_rank| + |delta_file| = 3"""
    return single_step_move(square, board, KNIGHT_DELTAS)


def candidate_bishop_moves(square: Square, board: Board) -> list[Move]:
    """Bishops move diagonally: |delta_rank| = |delta_file|"""
    return raycasting_move(square, board, DIAGONALS)


def candidate_rook_moves(square: Square, board: Board) -> list[Move]:
    """Rooks move either horizontally or vertically"""
    return raycasting_move(square, board, STRAIGHTS)


def candidate_queen_moves(square: Square, board: Board) -> list[Move]:
    """
    The Queen combines the rook moves (horizontal + vertical movements) and bishop moves (diagonal movement)
    """
    diagonal_moves = candidate_bishop_moves(square, board)
    horizontal_and_vertical_moves = candidate_rook_moves(square, board)
    return diagonal_moves + horizontal_and_vertical_moves


def candidate_king_moves(square: Square, board: Board) -> list[Move]:
    """
    The king can move by a single square at the time.

    Castling is modelled as a special king move (handled separately).
    """
    return single_step_move(square, board, KING_DELTAS)


# -- STRATEGY PATTERN: MOVEMENT RULES ---
CandidateMovesFn = Callable[[Square, Board], list[Move]]
MOVEMENT_RULES: dict[PieceType, CandidateMovesFn] = {
    PieceType.PAWN: candidate_pawn_moves,
    PieceType.KNIGHT: candidate_knight_moves,
    PieceType.BISHOP: candidate_bishop_moves,
    PieceType.ROOK: candidate_rook_moves,
    PieceType.QUEEN: candidate_queen_moves,
    PieceType.KING: candidate_king_moves,
}


# -- EN PASSANT MOVES ---
def en_passant_moves(
    square: Square, board: Board, last_move: Optional[Move]
) -> list[Move]:
    """
    The pawn on `square` may take en passant only right after an enemy pawn double-stepped
    and landed next to it. The capture goes to the square the enemy pawn skipped over.
    """
    if last_move is None or not last_move.pawn_double:
        return []

    pawn = board.piece(square)
    landing_square = last_move.dest
    if pawn.type != PieceType.PAWN or last_move.piece.color != pawn.color.opponent:
        return []

    assert square.file is not None and landing_square.file is not None
    is_adjacent = (
        landing_square.rank == square.rank and abs(landing_square.file - square.file) == 1
    )
    if not is_adjacent:
        return []

    if not board.piece(landing_square).matches(
        Piece(PieceType.PAWN, pawn.color.opponent)
    ):
        return []

    target_square = landing_square.offset(0, PAWN_DIRECTION[pawn.color])
    if not board.is_empty(target_square):
        return []

    return [
        Move(
            origin=square,
            dest=target_square,
            piece=copy(pawn),
            takes=True,
            en_passant=landing_square,
        )
    ]


# -- PAWN PROMOTION MOVES --
PROMOTION_OPTIONS: list[PieceType] = [
    PieceType.KNIGHT,
    PieceType.BISHOP,
    PieceType.ROOK,
    PieceType.QUEEN,
]


def is_pawn_move_to_promotion_rank(move: Move) -> bool:
    """check if the move is a pawn move that reaches the final rank (for its color)"""
    is_pawn_move = move.piece.type == PieceType.PAWN
    return is_pawn_move and move.dest.rank == PROMOTION_RANK.get(move.piece.color)


def pawn_moves_w_promotion(pawn_move: Move) -> list[Move]:
    """Return multiple copies of the pawn move with the piece type to promote into filled in."""
    return [replace(pawn_move, promotion=piece_type) for piece_type in PROMOTION_OPTIONS]


def pseudo_legal_moves(
    square: Square, board: Board, last_move: Optional[Move] = None
) -> list[Move]:
    """
    Everything the piece on `square` could do, before checking whether it exposes its own king.

    Combines the movement rule of the piece type with en passant, and expands pawn moves
    to the last rank into one move per promotion option.
    """
    piece = board.piece(square)
    if piece.is_empty():
        return []

    moves = MOVEMENT_RULES[piece.type](square, board)
    if piece.type != PieceType.PAWN:
        return moves

    moves.extend(en_passant_moves(square, board, last_move))
    expanded: list[Move] = []
    for move in moves:
        if is_pawn_move_to_promotion_rank(move):
            expanded.extend(pawn_moves_w_promotion(move))
        else:
            expanded.append(move)
    return expanded


# -- CASTLING MOVES ---
def candidate_castling_move(color: Color, long_castle: bool) -> Move:
    """Castling is described by the king's move. The rook follows when the move is made."""
    squares = castling_squares(color, long_castle)
    return Move(
        origin=squares.king_from,
        dest=squares.king_to,
        piece=Piece(PieceType.KING, color),
        castle=not long_castle,
        long_castle=long_castle,
    )


def candidate_castling_moves(color: Color) -> list[Move]:
    return [candidate_castling_move(color, long_castle) for long_castle in (False, True)]


# --- CAPTURING RULES / ATTACKING RULES ---
def raycasting_attack(
    square: Square,
    by_color: Color,
    by_piece_type: PieceType,
    board: Board,
    directions: list[Vector],
) -> bool:
    """
    Raycasting algorithm for attacks.
    ---

    ---
    Similar to raycasting moves.
    However, where `raycasting_move()` determines
    _"What is the line-of-sight of the piece standing on the specified square?"_


    This function determines:
    _"Is the specified square in the line-of-sight of a piece of the specified color and type
    that is allowed to move along the given direction?"_

    ---
    Returns TRUE if the first piece encountered is of the specified color and type.
    """

    for df, dr in directions:
        target_square = square
        while True:
            target_square = target_square.offset(df, dr)

            if not target_square.is_within_bounds():
                break

            if not board.is_empty(target_square):
                # only need to look at the first occupied square: anything behind it is blocked.
                piece_found = board.piece(target_square)
                if (piece_found.color == by_color) and (
                    piece_found.type == by_piece_type
                ):
                    return True
                break
    return False


def single_step_attack(
    square: Square,
    by_color: Color,
    by_piece_type: PieceType,
    board: Board,
    deltas: list[Vector],
) -> bool:
    """
    Raycasting is for sliding pieces. This is the equivalent for pawns, kings, and knights that just can move a single step along a direction.
    Hence, they also can only attack along a single direction.

    ---
    Returns TRUE if the piece encountered is of the specified color and type.
    """
    for df, dr in deltas:
        target_square = square.offset(df, dr)
        if not target_square.is_within_bounds():
            continue

        piece_found = board.piece(target_square)
        if (piece_found.color == by_color) and (piece_found.type == by_piece_type):
            return True

    return False


def is_attacked_by_pawn(square: Square, by_color: Color, board: Board) -> bool:
    """
    Pawns take diagonally
    ----

    NOTE: Pawn moves are not symmetric, so to check IF a white pawn could take on your square -->
    Must look one rank DOWN the board. That is, you are asking "Could a white pawn, that moves UP the board, take on the specified square?"

    Forward pawn pushes never attack anything.
    An en passant capture only ever lands on the empty square behind a pawn, never on a king or a castling square,
    so it needs no separate attack rule.
    """
    back = -PAWN_DIRECTION[by_color]
    inverse_pawn_take_deltas: list[Vector] = [(1, back), (-1, back)]
    return single_step_attack(
        square, by_color, PieceType.PAWN, board, inverse_pawn_take_deltas
    )


def is_attacked_by_knight(square: Square, by_color: Color, board: Board) -> bool:
    return single_step_attack(square, by_color, PieceType.KNIGHT, board, KNIGHT_DELTAS)


def is_attacked_by_bishop(square: Square, by_color: Color, board: Board) -> bool:
    return raycasting_attack(square, by_color, PieceType.BISHOP, board, DIAGONALS)


def is_attacked_by_rook(square: Square, by_color: Color, board: Board) -> bool:
    return raycasting_attack(square, by_color, PieceType.ROOK, board, STRAIGHTS)


def is_attacked_by_queen(square: Square, by_color: Color, board: Board) -> bool:
    """
    The Queen combines the rook moves (horizontal + vertical movements) and bishop moves (diagonal movement)
    """
    queen_on_straight = raycasting_attack(
        square, by_color, PieceType.QUEEN, board, STRAIGHTS
    )
    queen_on_diagonal = raycasting_attack(
        square, by_color, PieceType.QUEEN, board, DIAGONALS
    )
    return queen_on_straight or queen_on_diagonal


def is_attacked_by_king(square: Square, by_color: Color, board: Board) -> bool:
    return single_step_attack(square, by_color, PieceType.KING, board, KING_DELTAS)


# --- STRATEGY PATTERN: ATTACKING RULES ---
IsAttackedFn = Callable[[Square, Color, Board], bool]
ATTACK_RULES: dict[PieceType, IsAttackedFn] = {
    PieceType.PAWN: is_attacked_by_pawn,
    PieceType.KNIGHT: is_attacked_by_knight,
    PieceType.BISHOP: is_attacked_by_bishop,
    PieceType.ROOK: is_attacked_by_rook,
    PieceType.QUEEN: is_attacked_by_queen,
    PieceType.KING: is_attacked_by_king,
}
