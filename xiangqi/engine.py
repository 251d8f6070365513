"""Xiangqi AI engine with negamax search and alpha-beta pruning."""

import logging
import time
from typing import List, Optional, Tuple

from .board import Board, Move, PieceKind
from .evaluation import Evaluator, PIECE_VALUES
from .movegen import generate_moves, has_crossed_river

logger = logging.getLogger(__name__)

NO_MOVES_SCORE = -10000.0

# Board center used by move ordering
CENTER_FILE = 4
CENTER_RANK = 5

ORDERING_BONUS = {
    PieceKind.CHARIOT: 300,
    PieceKind.CANNON: 200,
    PieceKind.HORSE: 100,
}


class Engine:
    """Fixed-depth negamax engine.

    The engine borrows the board it searches: every move is applied in place
    and undone before the next one is tried, so the board is left exactly as
    it was found. Only one search may run against a board at a time.
    """

    def __init__(self, depth: int = 5, evaluator: Optional[Evaluator] = None):
        """Initialize engine.

        Args:
            depth: Search depth in plies
            evaluator: Position evaluator (defaults to Evaluator())
        """
        if depth < 1:
            raise ValueError(f"search depth must be at least 1, got {depth}")
        self.depth = depth
        self.evaluator = evaluator or Evaluator()
        self.nodes_searched = 0
        self.prune_count = 0
        self.best_score: Optional[float] = None
        self.root_alpha: Optional[float] = None
        self.root_scores: List[Tuple[Move, float]] = []
        self.last_search_time = 0.0

    def search(self, board: Board) -> Optional[Move]:
        """Search for the best move of the side to move.

        Returns None if the game is already over or the side to move has no
        legal moves.
        """
        self.nodes_searched = 0
        self.prune_count = 0
        self.best_score = None
        self.root_alpha = None
        self.root_scores = []

        if board.game_over:
            logger.info("Game is over, nothing to search")
            return None

        moves = generate_moves(board)
        if not moves:
            logger.info("No legal moves for %s", board.side_to_move.value)
            return None

        moves = self._order_moves(board, moves)
        logger.info(
            "Searching depth %d for %s, %d candidate moves",
            self.depth, board.side_to_move.value, len(moves),
        )
        start = time.perf_counter()

        best_move = None
        best_value = float('-inf')
        alpha = float('-inf')
        beta = float('inf')

        # Every root move is searched: no cutoff here, so each one gets a score
        for move in moves:
            record = board.apply_move(*move.from_square, *move.to_square)
            value = -self._negamax(board, self.depth - 1, -beta, -alpha)
            board.undo_transient(record)

            self.root_scores.append((move, value))
            logger.debug("Candidate %s scored %s", move, value)

            if value > best_value:
                best_value = value
                best_move = move

            alpha = max(alpha, value)

        self.best_score = best_value
        self.root_alpha = alpha
        self.last_search_time = time.perf_counter() - start
        logger.info(
            "Best move %s (score %s), %d nodes, %d cutoffs, %.3fs",
            best_move, best_value, self.nodes_searched, self.prune_count,
            self.last_search_time,
        )
        return best_move

    def _negamax(self, board: Board, depth: int, alpha: float, beta: float) -> float:
        """Negamax with alpha-beta pruning (fail-hard)."""
        self.nodes_searched += 1

        if depth <= 0 or board.game_over:
            return self.evaluator.evaluate(board)

        moves = generate_moves(board)
        if not moves:
            return NO_MOVES_SCORE

        for move in self._order_moves(board, moves):
            record = board.apply_move(*move.from_square, *move.to_square)
            score = -self._negamax(board, depth - 1, -beta, -alpha)
            board.undo_transient(record)

            if score >= beta:
                self.prune_count += 1
                return beta
            alpha = max(alpha, score)

        return alpha

    def _order_moves(self, board: Board, moves: List[Move]) -> List[Move]:
        """Order moves for better alpha-beta pruning, best guess first."""
        return sorted(moves, key=lambda m: self._ordering_score(board, m), reverse=True)

    def _ordering_score(self, board: Board, move: Move) -> int:
        score = 0
        target = board.get_piece(move.to_file, move.to_rank)
        if target is not None:
            score += PIECE_VALUES[target.kind]
        piece = board.get_piece(move.from_file, move.from_rank)
        if piece is not None:
            score += ORDERING_BONUS.get(piece.kind, 0)
        distance = abs(move.to_file - CENTER_FILE) + abs(move.to_rank - CENTER_RANK)
        return score - 5 * distance

    def describe_move(self, board: Board, move: Move) -> str:
        """Short rationale for a move, for display before it is played."""
        piece = board.get_piece(move.from_file, move.from_rank)
        if piece is None:
            return ""
        thoughts = []
        target = board.get_piece(move.to_file, move.to_rank)
        if target is not None:
            thoughts.append(f"captures the {target.kind.value.lower()}")

        if piece.kind == PieceKind.CHARIOT:
            thoughts.append("chariot takes control of an open line")
        elif piece.kind == PieceKind.CANNON:
            thoughts.append("cannon occupies a key square")
        elif piece.kind == PieceKind.HORSE:
            thoughts.append("horse jumps into the attack")
        elif piece.kind == PieceKind.SOLDIER:
            if has_crossed_river(move.to_rank, piece.color):
                thoughts.append("soldier across the river strengthens the attack")
            else:
                thoughts.append("soldier advances")

        if not thoughts:
            thoughts.append("improves piece placement")
        return ", ".join(thoughts)
