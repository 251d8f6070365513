"""Game facade consumed by the UI layer."""

import asyncio
import logging
from concurrent.futures import Executor
from typing import Dict, List, Optional, Tuple

from .board import Board, Move, MoveRecord
from .engine import Engine
from .movegen import Square, legal_moves

logger = logging.getLogger(__name__)


class XiangqiGame:
    """One game of Xiangqi against the engine.

    All coordinates are (file 0-8, rank 0-9) pairs, rank 0 being black's
    back rank.
    """

    def __init__(
        self,
        depth: int = 5,
        thinking_time: float = 1.0,
        custom_setup: Optional[Dict[str, str]] = None,
    ):
        """Initialize game.

        Args:
            depth: Search depth for the engine
            thinking_time: Cosmetic delay in seconds before the engine searches
            custom_setup: Optional starting position, see Board
        """
        self.board = Board(custom_setup=custom_setup)
        self.engine = Engine(depth=depth)
        self.thinking_time = thinking_time

    @property
    def game_over(self) -> bool:
        return self.board.game_over

    @property
    def winner(self):
        return self.board.winner

    def get_legal_moves(self, file: int, rank: int) -> List[Square]:
        """Destinations of the piece on (file, rank); empty if none."""
        return legal_moves(self.board, file, rank)

    def make_move(self, from_file: int, from_rank: int, to_file: int, to_rank: int) -> Optional[MoveRecord]:
        """Apply a move and return its record, or None if the source is empty."""
        if self.board.get_piece(from_file, from_rank) is None:
            return None
        return self.board.apply_move(from_file, from_rank, to_file, to_rank)

    def undo_single_move(self, record: MoveRecord) -> None:
        """Reverse exactly one ply."""
        self.board.undo_transient(record)

    def undo_last_full(self) -> Optional[Tuple[MoveRecord, MoveRecord]]:
        """Take back the last move of each side."""
        result = self.board.undo_last_full()
        if result is None:
            logger.info("Take-back rejected: fewer than two moves played")
        return result

    async def get_best_move(self, executor: Optional[Executor] = None) -> Optional[Move]:
        """Pause for the thinking delay, then search for the best move.

        The search itself runs in executor (the loop's default when None).
        Returns None when the side to move has no legal moves.
        """
        if self.thinking_time > 0:
            await asyncio.sleep(self.thinking_time)
        loop = asyncio.get_running_loop()
        return await loop.run_in_executor(executor, self.engine.search, self.board)

    async def get_hint(self, executor: Optional[Executor] = None) -> Optional[Move]:
        """Suggest a move for the side to move without playing it or pausing."""
        loop = asyncio.get_running_loop()
        return await loop.run_in_executor(executor, self.engine.search, self.board)

    def reset(self) -> None:
        """Start a new game from the standard position."""
        self.board.reset()
