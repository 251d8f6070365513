"""Xiangqi move generation.

Every function here is a pure function of the board: nothing is mutated.
Moves that leave the mover's own General attacked are not filtered out; a game
ends only when a General is actually captured.
"""

from typing import Dict, List, Tuple

from .board import Board, Color, Move, Piece, PieceKind

Square = Tuple[int, int]
Destinations = Dict[Square, List[Square]]

ORTHOGONAL = [(0, 1), (0, -1), (1, 0), (-1, 0)]
DIAGONAL = [(1, 1), (1, -1), (-1, 1), (-1, -1)]

# (file delta, rank delta, leg file delta, leg rank delta)
HORSE_JUMPS = [
    (1, 2, 0, 1),
    (2, 1, 1, 0),
    (2, -1, 1, 0),
    (1, -2, 0, -1),
    (-1, -2, 0, -1),
    (-2, -1, -1, 0),
    (-2, 1, -1, 0),
    (-1, 2, 0, 1),
]


def on_board(file: int, rank: int) -> bool:
    return 0 <= file < Board.FILES and 0 <= rank < Board.RANKS


def in_palace(file: int, rank: int, color: Color) -> bool:
    """Check if a square is in the palace of the given color."""
    if not 3 <= file <= 5:
        return False
    if color == Color.RED:
        return 7 <= rank <= 9
    return 0 <= rank <= 2


def on_own_half(rank: int, color: Color) -> bool:
    """Check if a rank is on the given color's side of the river."""
    if color == Color.RED:
        return rank >= 5
    return rank <= 4


def has_crossed_river(rank: int, color: Color) -> bool:
    return not on_own_half(rank, color)


def _can_land(board: Board, file: int, rank: int, color: Color) -> bool:
    """Destination is empty or holds an enemy piece."""
    target = board.get_piece(file, rank)
    return target is None or target.color != color


def _general_moves(board: Board, file: int, rank: int, color: Color) -> List[Square]:
    """One orthogonal step inside the palace, plus the flying-general capture."""
    moves = []
    for df, dr in ORTHOGONAL:
        to_file, to_rank = file + df, rank + dr
        if in_palace(to_file, to_rank, color) and _can_land(board, to_file, to_rank, color):
            moves.append((to_file, to_rank))

    enemy = board.find_general(color.opponent)
    if enemy is not None and enemy[0] == file:
        low, high = sorted((rank, enemy[1]))
        if all(board.get_piece(file, r) is None for r in range(low + 1, high)):
            moves.append(enemy)
    return moves


def _advisor_moves(board: Board, file: int, rank: int, color: Color) -> List[Square]:
    moves = []
    for df, dr in DIAGONAL:
        to_file, to_rank = file + df, rank + dr
        if in_palace(to_file, to_rank, color) and _can_land(board, to_file, to_rank, color):
            moves.append((to_file, to_rank))
    return moves


def _elephant_moves(board: Board, file: int, rank: int, color: Color) -> List[Square]:
    """Two diagonal steps on own half, blocked by a piece on the elephant eye."""
    moves = []
    for df, dr in DIAGONAL:
        to_file, to_rank = file + 2 * df, rank + 2 * dr
        if not on_board(to_file, to_rank) or not on_own_half(to_rank, color):
            continue
        if board.get_piece(file + df, rank + dr) is not None:
            continue
        if _can_land(board, to_file, to_rank, color):
            moves.append((to_file, to_rank))
    return moves


def _horse_moves(board: Board, file: int, rank: int, color: Color) -> List[Square]:
    """Knight-like jumps, blocked by a piece on the leg next to the source."""
    moves = []
    for df, dr, leg_df, leg_dr in HORSE_JUMPS:
        to_file, to_rank = file + df, rank + dr
        if not on_board(to_file, to_rank):
            continue
        if board.get_piece(file + leg_df, rank + leg_dr) is not None:
            continue
        if _can_land(board, to_file, to_rank, color):
            moves.append((to_file, to_rank))
    return moves


def _chariot_moves(board: Board, file: int, rank: int, color: Color) -> List[Square]:
    moves = []
    for df, dr in ORTHOGONAL:
        to_file, to_rank = file + df, rank + dr
        while on_board(to_file, to_rank):
            target = board.get_piece(to_file, to_rank)
            if target is None:
                moves.append((to_file, to_rank))
            else:
                if target.color != color:
                    moves.append((to_file, to_rank))
                break
            to_file, to_rank = to_file + df, to_rank + dr
    return moves


def _cannon_moves(board: Board, file: int, rank: int, color: Color) -> List[Square]:
    """Slide like a chariot to empty squares; capture only over exactly one screen."""
    moves = []
    for df, dr in ORTHOGONAL:
        screen_found = False
        to_file, to_rank = file + df, rank + dr
        while on_board(to_file, to_rank):
            target = board.get_piece(to_file, to_rank)
            if not screen_found:
                if target is None:
                    moves.append((to_file, to_rank))
                else:
                    screen_found = True
            elif target is not None:
                if target.color != color:
                    moves.append((to_file, to_rank))
                break
            to_file, to_rank = to_file + df, to_rank + dr
    return moves


def _soldier_moves(board: Board, file: int, rank: int, color: Color) -> List[Square]:
    """Forward one step; sideways too once across the river. Never backward."""
    moves = []
    forward = -1 if color == Color.RED else 1
    candidates = [(file, rank + forward)]
    if has_crossed_river(rank, color):
        candidates.extend([(file - 1, rank), (file + 1, rank)])
    for to_file, to_rank in candidates:
        if on_board(to_file, to_rank) and _can_land(board, to_file, to_rank, color):
            moves.append((to_file, to_rank))
    return moves


def moves_for_piece(board: Board, file: int, rank: int, piece: Piece) -> List[Square]:
    """Destinations of piece standing on (file, rank)."""
    kind = piece.kind
    if kind == PieceKind.GENERAL:
        return _general_moves(board, file, rank, piece.color)
    elif kind == PieceKind.ADVISOR:
        return _advisor_moves(board, file, rank, piece.color)
    elif kind == PieceKind.ELEPHANT:
        return _elephant_moves(board, file, rank, piece.color)
    elif kind == PieceKind.HORSE:
        return _horse_moves(board, file, rank, piece.color)
    elif kind == PieceKind.CHARIOT:
        return _chariot_moves(board, file, rank, piece.color)
    elif kind == PieceKind.CANNON:
        return _cannon_moves(board, file, rank, piece.color)
    elif kind == PieceKind.SOLDIER:
        return _soldier_moves(board, file, rank, piece.color)
    return []


def legal_moves(board: Board, file: int, rank: int) -> List[Square]:
    """Destinations legally reachable by the piece on (file, rank).

    Empty for an empty or off-board square. The side to move is not
    consulted, so this works for either color's pieces.
    """
    piece = board.get_piece(file, rank)
    if piece is None:
        return []
    return moves_for_piece(board, file, rank, piece)


def all_destinations(board: Board) -> Destinations:
    """Map every occupied square to its legal destinations."""
    return {
        (file, rank): moves_for_piece(board, file, rank, piece)
        for file, rank, piece in board.pieces()
    }


def generate_moves(board: Board) -> List[Move]:
    """Generate all legal moves for the side to move, in board-scan order."""
    moves = []
    for file, rank, piece in board.pieces():
        if piece.color != board.side_to_move:
            continue
        for to_file, to_rank in moves_for_piece(board, file, rank, piece):
            moves.append(Move(file, rank, to_file, to_rank))
    return moves


def attacks_square(board: Board, color: Color, target: Square) -> bool:
    """Whether any piece of color can move to target."""
    for file, rank, piece in board.pieces():
        if piece.color == color and target in moves_for_piece(board, file, rank, piece):
            return True
    return False


def is_in_check(board: Board, color: Color) -> bool:
    """Check if the given color's General is attacked."""
    general = board.find_general(color)
    if general is None:
        return False
    return attacks_square(board, color.opponent, general)
