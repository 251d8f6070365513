"""Chinese Chess (Xiangqi) game engine."""

from .board import Board, Move, MoveRecord, Color, PieceKind, Piece, square_name, parse_square
from .movegen import (
    legal_moves, generate_moves, all_destinations, attacks_square, is_in_check,
    in_palace, has_crossed_river,
)
from .evaluation import Evaluator, PIECE_VALUES, piece_square_value
from .engine import Engine
from .game import XiangqiGame

__all__ = [
    # Board and game state
    'Board', 'Move', 'MoveRecord', 'Color', 'PieceKind', 'Piece',
    'square_name', 'parse_square',
    # Move generation
    'legal_moves', 'generate_moves', 'all_destinations', 'attacks_square',
    'is_in_check', 'in_palace', 'has_crossed_river',
    # Evaluation
    'Evaluator', 'PIECE_VALUES', 'piece_square_value',
    # Search
    'Engine',
    # Facade
    'XiangqiGame',
]
