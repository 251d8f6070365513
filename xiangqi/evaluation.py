"""Heuristic position evaluation for the side to move."""

from typing import Dict, Optional

import numpy as np

from .board import Board, Color, PieceKind
from .movegen import Destinations, all_destinations, has_crossed_river


PIECE_VALUES: Dict[PieceKind, int] = {
    PieceKind.GENERAL: 10000,
    PieceKind.CHARIOT: 1000,
    PieceKind.CANNON: 550,
    PieceKind.HORSE: 400,
    PieceKind.ELEPHANT: 250,
    PieceKind.ADVISOR: 250,
    PieceKind.SOLDIER: 150,
}

# Piece-square tables, indexed [row][file]. Row 0 is the piece's own back
# rank for black; red pieces are looked up with the rank mirrored.
CHARIOT_TABLE = np.array([
    [206, 208, 207, 213, 214, 213, 207, 208, 206],
    [206, 212, 209, 216, 233, 216, 209, 212, 206],
    [206, 208, 207, 214, 216, 214, 207, 208, 206],
    [206, 213, 213, 216, 216, 216, 213, 213, 206],
    [208, 211, 211, 214, 215, 214, 211, 211, 208],
    [208, 212, 212, 214, 215, 214, 212, 212, 208],
    [204, 209, 204, 212, 214, 212, 204, 209, 204],
    [198, 208, 204, 212, 212, 212, 204, 208, 198],
    [200, 208, 206, 212, 200, 212, 206, 208, 200],
    [194, 206, 204, 212, 200, 212, 204, 206, 194],
], dtype=np.int32)

CANNON_TABLE = np.array([
    [100, 100, 96, 91, 90, 91, 96, 100, 100],
    [98, 98, 96, 92, 89, 92, 96, 98, 98],
    [97, 97, 96, 91, 92, 91, 96, 97, 97],
    [96, 99, 99, 98, 100, 98, 99, 99, 96],
    [96, 96, 96, 96, 100, 96, 96, 96, 96],
    [95, 96, 99, 96, 100, 96, 99, 96, 95],
    [96, 96, 96, 96, 96, 96, 96, 96, 96],
    [97, 96, 100, 99, 101, 99, 100, 96, 97],
    [96, 97, 98, 98, 98, 98, 98, 97, 96],
    [96, 96, 97, 99, 99, 99, 97, 96, 96],
], dtype=np.int32)

HORSE_TABLE = np.array([
    [90, 90, 90, 96, 90, 96, 90, 90, 90],
    [90, 96, 103, 97, 94, 97, 103, 96, 90],
    [92, 98, 99, 103, 99, 103, 99, 98, 92],
    [93, 108, 100, 107, 100, 107, 100, 108, 93],
    [90, 100, 99, 103, 104, 103, 99, 100, 90],
    [90, 98, 101, 102, 103, 102, 101, 98, 90],
    [92, 94, 98, 95, 98, 95, 98, 94, 92],
    [93, 92, 94, 95, 92, 95, 94, 92, 93],
    [85, 90, 92, 93, 78, 93, 92, 90, 85],
    [88, 85, 90, 88, 90, 88, 90, 85, 88],
], dtype=np.int32)

SOLDIER_TABLE = np.array([
    [9, 9, 9, 11, 13, 11, 9, 9, 9],
    [19, 24, 34, 42, 44, 42, 34, 24, 19],
    [19, 24, 32, 37, 37, 37, 32, 24, 19],
    [19, 23, 27, 29, 30, 29, 27, 23, 19],
    [14, 18, 20, 27, 29, 27, 20, 18, 14],
    [7, 0, 13, 0, 16, 0, 13, 0, 7],
    [7, 0, 7, 0, 15, 0, 7, 0, 7],
    [0, 0, 0, 0, 0, 0, 0, 0, 0],
    [0, 0, 0, 0, 0, 0, 0, 0, 0],
    [0, 0, 0, 0, 0, 0, 0, 0, 0],
], dtype=np.int32)

GENERAL_TABLE = np.array([
    [0, 0, 0, 8, 8, 8, 0, 0, 0],
    [0, 0, 0, 9, 9, 9, 0, 0, 0],
    [0, 0, 0, 10, 10, 10, 0, 0, 0],
    [0, 0, 0, 0, 0, 0, 0, 0, 0],
    [0, 0, 0, 0, 0, 0, 0, 0, 0],
    [0, 0, 0, 0, 0, 0, 0, 0, 0],
    [0, 0, 0, 0, 0, 0, 0, 0, 0],
    [0, 0, 0, -1, -1, -1, 0, 0, 0],
    [0, 0, 0, -2, -2, -2, 0, 0, 0],
    [0, 0, 0, -3, -3, -3, 0, 0, 0],
], dtype=np.int32)

ADVISOR_TABLE = np.array([
    [0, 0, 0, 20, 0, 20, 0, 0, 0],
    [0, 0, 0, 0, 23, 0, 0, 0, 0],
    [0, 0, 0, 20, 0, 20, 0, 0, 0],
    [0, 0, 0, 0, 0, 0, 0, 0, 0],
    [0, 0, 0, 0, 0, 0, 0, 0, 0],
    [0, 0, 0, 0, 0, 0, 0, 0, 0],
    [0, 0, 0, 0, 0, 0, 0, 0, 0],
    [0, 0, 0, 20, 0, 20, 0, 0, 0],
    [0, 0, 0, 0, 23, 0, 0, 0, 0],
    [0, 0, 0, 20, 0, 20, 0, 0, 0],
], dtype=np.int32)

ELEPHANT_TABLE = np.array([
    [0, 0, 20, 0, 0, 0, 20, 0, 0],
    [0, 0, 0, 0, 0, 0, 0, 0, 0],
    [18, 0, 0, 20, 23, 20, 0, 0, 18],
    [0, 0, 0, 0, 0, 0, 0, 0, 0],
    [0, 0, 20, 0, 0, 0, 20, 0, 0],
    [0, 0, 20, 0, 0, 0, 20, 0, 0],
    [0, 0, 0, 0, 0, 0, 0, 0, 0],
    [18, 0, 0, 20, 23, 20, 0, 0, 18],
    [0, 0, 0, 0, 0, 0, 0, 0, 0],
    [0, 0, 20, 0, 0, 0, 20, 0, 0],
], dtype=np.int32)

POSITION_TABLES: Dict[PieceKind, np.ndarray] = {
    PieceKind.CHARIOT: CHARIOT_TABLE,
    PieceKind.CANNON: CANNON_TABLE,
    PieceKind.HORSE: HORSE_TABLE,
    PieceKind.SOLDIER: SOLDIER_TABLE,
    PieceKind.GENERAL: GENERAL_TABLE,
    PieceKind.ADVISOR: ADVISOR_TABLE,
    PieceKind.ELEPHANT: ELEPHANT_TABLE,
}

CROSSED_RIVER_BONUS = 50
MOBILITY_WEIGHT = 3
CHECK_BONUS = 100
DEFENDER_BONUS = 20


def piece_square_value(kind: PieceKind, color: Color, file: int, rank: int) -> int:
    """Base value plus table value of a piece on (file, rank)."""
    row = 9 - rank if color == Color.RED else rank
    value = PIECE_VALUES[kind] + int(POSITION_TABLES[kind][row, file])
    if kind == PieceKind.SOLDIER and has_crossed_river(rank, color):
        value += CROSSED_RIVER_BONUS
    return value


class Evaluator:
    """Material, mobility, control, check and king-safety evaluation.

    Scores are relative to the side to move: positive favors that side.
    """

    def evaluate(self, board: Board) -> float:
        """Evaluate board position."""
        destinations = all_destinations(board)
        return (
            self.evaluate_material(board)
            + self.evaluate_mobility(board, destinations)
            + self.evaluate_control(board, destinations)
            + self.evaluate_check(board, destinations)
            + self.evaluate_defense(board)
        )

    def evaluate_material(self, board: Board) -> float:
        score = 0.0
        for file, rank, piece in board.pieces():
            value = piece_square_value(piece.kind, piece.color, file, rank)
            if board.is_own_piece(piece):
                score += value
            else:
                score -= value
        return score

    def evaluate_mobility(self, board: Board, destinations: Optional[Destinations] = None) -> float:
        """Difference in total destination counts, weighted."""
        if destinations is None:
            destinations = all_destinations(board)
        own = enemy = 0
        for (file, rank), moves in destinations.items():
            if board.is_own_piece(board.get_piece(file, rank)):
                own += len(moves)
            else:
                enemy += len(moves)
        return float((own - enemy) * MOBILITY_WEIGHT)

    def evaluate_control(self, board: Board, destinations: Optional[Destinations] = None) -> float:
        """Sum of a tenth of the value of every piece under attack."""
        if destinations is None:
            destinations = all_destinations(board)
        own = enemy = 0.0
        for (file, rank), moves in destinations.items():
            mine = board.is_own_piece(board.get_piece(file, rank))
            for to_file, to_rank in moves:
                target = board.get_piece(to_file, to_rank)
                if target is None:
                    continue
                threat = PIECE_VALUES[target.kind] / 10
                if mine:
                    own += threat
                else:
                    enemy += threat
        return own - enemy

    def evaluate_check(self, board: Board, destinations: Optional[Destinations] = None) -> float:
        """+CHECK_BONUS for giving check, -CHECK_BONUS for being in check."""
        if destinations is None:
            destinations = all_destinations(board)
        own_general = board.find_general(board.side_to_move)
        enemy_general = board.find_general(board.side_to_move.opponent)

        gives_check = in_check = False
        for (file, rank), moves in destinations.items():
            if board.is_own_piece(board.get_piece(file, rank)):
                if enemy_general is not None and enemy_general in moves:
                    gives_check = True
            elif own_general is not None and own_general in moves:
                in_check = True

        score = 0.0
        if gives_check:
            score += CHECK_BONUS
        if in_check:
            score -= CHECK_BONUS
        return score

    def evaluate_defense(self, board: Board) -> float:
        """Bonus for own Advisors and Elephants around own General."""
        general = board.find_general(board.side_to_move)
        if general is None:
            return 0.0
        score = 0.0
        for df in (-1, 0, 1):
            for dr in (-1, 0, 1):
                piece = board.get_piece(general[0] + df, general[1] + dr)
                if board.is_own_piece(piece) and piece.kind in (PieceKind.ADVISOR, PieceKind.ELEPHANT):
                    score += DEFENDER_BONUS
        return score
