"""Unit tests for Engine class."""

import pytest
import sys
import os

# Add parent directory to path for imports
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from xiangqi import Board, Move, Color, Engine, Evaluator, generate_moves
from xiangqi.engine import NO_MOVES_SCORE


# Red chariot can take an undefended black chariot on the a-file
FREE_CHARIOT = {
    "d9": "rK",
    "f0": "bK",
    "a5": "rR",
    "a2": "bR",
}


class TestEngineInitialization:
    """Test engine initialization."""

    def test_default_initialization(self):
        """Test default engine initialization."""
        engine = Engine()

        assert engine.depth == 5
        assert isinstance(engine.evaluator, Evaluator)
        assert engine.nodes_searched == 0
        assert engine.prune_count == 0
        assert engine.best_score is None

    def test_custom_depth(self):
        """Test engine with custom depth."""
        engine = Engine(depth=3)

        assert engine.depth == 3

    @pytest.mark.parametrize("depth", [0, -1])
    def test_depth_must_be_positive(self, depth):
        with pytest.raises(ValueError):
            Engine(depth=depth)


class TestEngineSearch:
    """Test engine search functionality."""

    def test_search_returns_legal_move(self):
        """Test search returns only legal moves."""
        board = Board()
        engine = Engine(depth=1)  # Low depth for speed

        move = engine.search(board)

        assert isinstance(move, Move)
        assert move in generate_moves(board)

    def test_search_no_moves(self):
        """Black has no pieces at all."""
        board = Board(custom_setup={"e9": "rK"})
        board.side_to_move = Color.BLACK
        engine = Engine(depth=2)

        assert engine.search(board) is None
        assert engine.best_score is None
        assert engine.root_scores == []

    def test_search_after_game_over(self):
        """A finished game is not searched and keeps its result."""
        board = Board(custom_setup={"d9": "rK", "e0": "bK", "e5": "rR"})
        board.apply_move(4, 5, 4, 0)
        before = board.snapshot()
        engine = Engine(depth=2)

        assert engine.search(board) is None
        assert board.snapshot() == before
        assert board.winner == Color.RED
        assert engine.nodes_searched == 0

    def test_search_leaves_board_unchanged(self):
        board = Board()
        board.apply_move(1, 7, 4, 7)
        before = board.snapshot()
        history = list(board.move_history)

        Engine(depth=2).search(board)

        assert board.snapshot() == before
        assert board.move_history == history

    def test_search_is_deterministic(self):
        first = Engine(depth=2).search(Board())
        second = Engine(depth=2).search(Board())

        assert first == second

    def test_root_scores(self):
        """Every root move is scored and the first best one is chosen."""
        board = Board()
        engine = Engine(depth=1)

        move = engine.search(board)

        assert len(engine.root_scores) == len(generate_moves(board))
        scores = [score for _, score in engine.root_scores]
        assert engine.best_score == max(scores)
        assert engine.root_alpha == engine.best_score
        first_best = next(m for m, score in engine.root_scores if score == max(scores))
        assert move == first_best

    def test_depth_one_counts_root_children(self):
        board = Board(custom_setup=FREE_CHARIOT)
        engine = Engine(depth=1)

        engine.search(board)

        assert engine.nodes_searched == len(generate_moves(board))
        assert engine.prune_count == 0

    def test_nodes_grow_with_depth(self):
        board = Board(custom_setup={"d9": "rK", "f0": "bK", "a5": "rR", "i2": "bH"})
        nodes = []
        for depth in (1, 2, 3):
            engine = Engine(depth=depth)
            engine.search(board)
            nodes.append(engine.nodes_searched)

        assert nodes[0] < nodes[1] <= nodes[2]

    @pytest.mark.parametrize("depth", [1, 2])
    def test_captures_free_chariot(self, depth):
        board = Board(custom_setup=FREE_CHARIOT)

        move = Engine(depth=depth).search(board)

        assert move == Move(0, 5, 0, 2)

    @pytest.mark.parametrize("depth", [1, 2])
    def test_captures_general(self, depth):
        board = Board(custom_setup={"d9": "rK", "e0": "bK", "e5": "rR"})

        move = Engine(depth=depth).search(board)

        assert move == Move(4, 5, 4, 0)

    def test_black_search(self):
        """Search works for black as the side to move."""
        board = Board()
        board.apply_move(1, 7, 4, 7)
        engine = Engine(depth=1)

        move = engine.search(board)

        piece = board.get_piece(move.from_file, move.from_rank)
        assert piece.color == Color.BLACK


class TestNegamax:
    """Test the internal search."""

    def test_negative_depth_is_static_eval(self):
        board = Board(custom_setup={"d9": "rK", "f0": "bK"})
        engine = Engine()

        score = engine._negamax(board, -1, float('-inf'), float('inf'))

        assert score == Evaluator().evaluate(board)
        assert engine.nodes_searched == 1

    def test_no_moves_score(self):
        board = Board(custom_setup={"e9": "rK"})
        board.side_to_move = Color.BLACK
        engine = Engine()

        score = engine._negamax(board, 2, float('-inf'), float('inf'))

        assert score == NO_MOVES_SCORE == -10000

    def test_depth_zero_is_static_eval(self):
        board = Board()
        engine = Engine()

        score = engine._negamax(board, 0, float('-inf'), float('inf'))

        assert score == Evaluator().evaluate(board)
        assert engine.nodes_searched == 1

    def test_fail_hard_returns_beta(self):
        """A window below the real score is cut off at beta."""
        board = Board(custom_setup=FREE_CHARIOT)
        engine = Engine()

        score = engine._negamax(board, 1, -10.0, -5.0)

        assert score == -5.0
        assert engine.prune_count == 1


class TestMoveOrdering:
    """Test move ordering heuristic."""

    def test_ordering_score_capture(self):
        board = Board(custom_setup=FREE_CHARIOT)
        engine = Engine()

        # Captured chariot 1000, moving chariot 300, distance to center 7
        assert engine._ordering_score(board, Move(0, 5, 0, 2)) == 1000 + 300 - 35

    def test_ordering_score_quiet_move(self):
        board = Board(custom_setup=FREE_CHARIOT)
        engine = Engine()

        assert engine._ordering_score(board, Move(3, 9, 3, 8)) == -20

    def test_capture_ordered_first(self):
        board = Board(custom_setup=FREE_CHARIOT)
        engine = Engine()

        ordered = engine._order_moves(board, generate_moves(board))

        assert ordered[0] == Move(0, 5, 0, 2)

    def test_ordering_is_stable(self):
        """Equal keys keep generation order."""
        board = Board()
        engine = Engine()
        moves = generate_moves(board)

        ordered = engine._order_moves(board, moves)
        keys = [engine._ordering_score(board, m) for m in ordered]

        assert keys == sorted(keys, reverse=True)
        for key in set(keys):
            same = [m for m in ordered if engine._ordering_score(board, m) == key]
            assert same == [m for m in moves if engine._ordering_score(board, m) == key]


class TestDescribeMove:
    """Test move descriptions."""

    def test_describe_capture(self):
        board = Board(custom_setup=FREE_CHARIOT)

        reason = Engine().describe_move(board, Move(0, 5, 0, 2))

        assert reason.startswith("captures the chariot")

    def test_describe_soldier(self):
        board = Board()

        reason = Engine().describe_move(board, Move(4, 6, 4, 5))

        assert reason == "soldier advances"

    def test_describe_empty_square(self):
        assert Engine().describe_move(Board(), Move(4, 4, 4, 3)) == ""
