"""Xiangqi board representation, move application and take-back."""

from enum import Enum
from typing import List, Optional, Tuple, Dict
from dataclasses import dataclass


FILES = "abcdefghi"


class Color(Enum):
    """Player colors."""

    RED = "RED"  # Bottom side (ranks 5-9), moves first
    BLACK = "BLACK"  # Top side (ranks 0-4)

    @property
    def opponent(self) -> "Color":
        return Color.BLACK if self is Color.RED else Color.RED


class PieceKind(Enum):
    """Piece kinds."""

    GENERAL = "GENERAL"
    ADVISOR = "ADVISOR"
    ELEPHANT = "ELEPHANT"
    HORSE = "HORSE"
    CHARIOT = "CHARIOT"
    CANNON = "CANNON"
    SOLDIER = "SOLDIER"


KIND_CODES: Dict[str, PieceKind] = {
    "K": PieceKind.GENERAL,
    "A": PieceKind.ADVISOR,
    "E": PieceKind.ELEPHANT,
    "H": PieceKind.HORSE,
    "R": PieceKind.CHARIOT,
    "C": PieceKind.CANNON,
    "P": PieceKind.SOLDIER,
}
CODE_FOR_KIND: Dict[PieceKind, str] = {kind: code for code, kind in KIND_CODES.items()}


@dataclass(frozen=True)
class Piece:
    """Represents a piece on the board."""

    color: Color
    kind: PieceKind

    @property
    def code(self) -> str:
        """Two-character code, e.g. "rR" for a red chariot."""
        return ("r" if self.color is Color.RED else "b") + CODE_FOR_KIND[self.kind]

    @classmethod
    def from_code(cls, code: str) -> Optional["Piece"]:
        if len(code) != 2 or code[0] not in "rb" or code[1] not in KIND_CODES:
            return None
        color = Color.RED if code[0] == "r" else Color.BLACK
        return cls(color, KIND_CODES[code[1]])

    def __str__(self) -> str:
        return f"{self.color.value}_{self.kind.value}"


def square_name(file: int, rank: int) -> str:
    """Convert (file, rank) to square notation, e.g. (4, 9) -> "e9"."""
    return f"{FILES[file]}{rank}"


def parse_square(square: str) -> Tuple[int, int]:
    """Convert square notation to (file, rank). Raises ValueError if malformed."""
    if len(square) != 2 or square[0] not in FILES or not square[1].isdigit():
        raise ValueError(f"invalid square: {square!r}")
    return FILES.index(square[0]), int(square[1])


@dataclass(frozen=True)
class Move:
    """A candidate move, not yet applied."""

    from_file: int  # 0-8 (a-i)
    from_rank: int  # 0-9, 0 is black's back rank
    to_file: int
    to_rank: int

    @property
    def from_square(self) -> Tuple[int, int]:
        return (self.from_file, self.from_rank)

    @property
    def to_square(self) -> Tuple[int, int]:
        return (self.to_file, self.to_rank)

    def __str__(self) -> str:
        return self.to_uci()

    def to_uci(self) -> str:
        """Convert to UCI-like notation."""
        return square_name(self.from_file, self.from_rank) + square_name(self.to_file, self.to_rank)

    @classmethod
    def from_uci(cls, uci: str) -> "Move":
        """Parse UCI-like notation."""
        from_file, from_rank = parse_square(uci[:2])
        to_file, to_rank = parse_square(uci[2:])
        return cls(from_file, from_rank, to_file, to_rank)


@dataclass(frozen=True)
class MoveRecord:
    """Everything needed to reverse an applied move.

    ``side_before`` is the side to move before the move was applied, which is
    also the mover's color.
    """

    piece: Piece
    captured: Optional[Piece]
    from_square: Tuple[int, int]
    to_square: Tuple[int, int]
    side_before: Color

    @property
    def mover(self) -> Color:
        return self.side_before

    @property
    def move(self) -> Move:
        return Move(*self.from_square, *self.to_square)


# Back rank from file 0 to file 8
BACK_RANK = (
    PieceKind.CHARIOT,
    PieceKind.HORSE,
    PieceKind.ELEPHANT,
    PieceKind.ADVISOR,
    PieceKind.GENERAL,
    PieceKind.ADVISOR,
    PieceKind.ELEPHANT,
    PieceKind.HORSE,
    PieceKind.CHARIOT,
)


class Board:
    """Xiangqi game state: grid, side to move, result and move history."""

    FILES = 9
    RANKS = 10

    def __init__(self, custom_setup: Optional[Dict[str, str]] = None):
        """Initialize board.

        Args:
            custom_setup: Optional dictionary mapping squares (e.g., "e9") to piece
                codes (e.g., "rK" for the red General). Red moves first.
        """
        self.board: List[List[Optional[Piece]]] = []
        self.side_to_move = Color.RED
        self.game_over = False
        self.winner: Optional[Color] = None
        self.move_history: List[MoveRecord] = []
        if custom_setup is not None:
            self._initialize_custom_position(custom_setup)
        else:
            self.reset()

    def _empty_grid(self) -> List[List[Optional[Piece]]]:
        return [[None for _ in range(self.FILES)] for _ in range(self.RANKS)]

    def _initialize_starting_position(self):
        """Set up the standard starting position, black on top."""
        self.board = self._empty_grid()
        for color, back, cannons, soldiers in (
            (Color.BLACK, 0, 2, 3),
            (Color.RED, 9, 7, 6),
        ):
            for file, kind in enumerate(BACK_RANK):
                self.board[back][file] = Piece(color, kind)
            self.board[cannons][1] = Piece(color, PieceKind.CANNON)
            self.board[cannons][7] = Piece(color, PieceKind.CANNON)
            for file in (0, 2, 4, 6, 8):
                self.board[soldiers][file] = Piece(color, PieceKind.SOLDIER)

    def _initialize_custom_position(self, custom_setup: Dict[str, str]):
        """Initialize board with custom piece positions, skipping bad entries."""
        self.board = self._empty_grid()
        for square, code in custom_setup.items():
            try:
                file, rank = parse_square(square)
            except ValueError:
                continue
            if not (0 <= file < self.FILES and 0 <= rank < self.RANKS):
                continue
            piece = Piece.from_code(code)
            if piece is not None:
                self.board[rank][file] = piece

    def reset(self) -> None:
        """Reinitialize to the starting layout with red to move."""
        self._initialize_starting_position()
        self.side_to_move = Color.RED
        self.game_over = False
        self.winner = None
        self.move_history = []

    def get_piece(self, file: int, rank: int) -> Optional[Piece]:
        """Get piece at given coordinates, None when empty or off the board."""
        if 0 <= file < self.FILES and 0 <= rank < self.RANKS:
            return self.board[rank][file]
        return None

    def is_own_piece(self, piece: Optional[Piece], side: Optional[Color] = None) -> bool:
        """Whether piece belongs to side (the side to move by default)."""
        if piece is None:
            return False
        return piece.color == (side or self.side_to_move)

    def find_general(self, color: Color) -> Optional[Tuple[int, int]]:
        """Get (file, rank) of the General of given color."""
        for rank in range(self.RANKS):
            for file in range(self.FILES):
                piece = self.board[rank][file]
                if piece is not None and piece.color == color and piece.kind == PieceKind.GENERAL:
                    return (file, rank)
        return None

    def pieces(self):
        """Iterate over (file, rank, piece) for every occupied square."""
        for rank in range(self.RANKS):
            for file in range(self.FILES):
                piece = self.board[rank][file]
                if piece is not None:
                    yield file, rank, piece

    def apply_move(self, from_file: int, from_rank: int, to_file: int, to_rank: int) -> MoveRecord:
        """Move the piece at from-square to to-square and return the undo record.

        No legality check is made here: the caller guarantees that the source
        holds a piece of the side to move. Capturing a General ends the game.
        """
        piece = self.board[from_rank][from_file]
        captured = self.board[to_rank][to_file]
        record = MoveRecord(
            piece=piece,
            captured=captured,
            from_square=(from_file, from_rank),
            to_square=(to_file, to_rank),
            side_before=self.side_to_move,
        )
        self.move_history.append(record)

        self.board[to_rank][to_file] = piece
        self.board[from_rank][from_file] = None
        self.side_to_move = self.side_to_move.opponent

        if captured is not None and captured.kind == PieceKind.GENERAL:
            self.game_over = True
            self.winner = record.side_before
        return record

    def _restore(self, record: MoveRecord) -> None:
        from_file, from_rank = record.from_square
        to_file, to_rank = record.to_square
        self.board[from_rank][from_file] = record.piece
        self.board[to_rank][to_file] = record.captured

    def undo_last_full(self) -> Optional[Tuple[MoveRecord, MoveRecord]]:
        """Take back the last two plies (one per side).

        Returns the reversed records, most recent first, or None when fewer
        than two plies have been played.
        """
        if len(self.move_history) < 2:
            return None
        last = self.move_history.pop()
        self._restore(last)
        earlier = self.move_history.pop()
        self._restore(earlier)

        self.side_to_move = earlier.side_before
        self.game_over = False
        self.winner = None
        return last, earlier

    def undo_transient(self, record: MoveRecord) -> None:
        """Reverse exactly one applied move (search-internal undo).

        The record is dropped from history only when it is the tail entry;
        otherwise history is left untouched.
        """
        self._restore(record)
        self.side_to_move = record.side_before
        self.game_over = False
        self.winner = None

        if self.move_history:
            tail = self.move_history[-1]
            if tail.from_square == record.from_square and tail.to_square == record.to_square:
                self.move_history.pop()

    def snapshot(self) -> tuple:
        """Hashable summary of the full state, for exact-restoration checks."""
        grid = tuple(tuple(row) for row in self.board)
        return (grid, self.side_to_move, self.game_over, self.winner, len(self.move_history))

    def __str__(self) -> str:
        lines = []
        for rank in range(self.RANKS):
            row = []
            for file in range(self.FILES):
                piece = self.board[rank][file]
                row.append(piece.code if piece else "..")
            lines.append(f"{rank} " + " ".join(row))
        lines.append("  " + " ".join(f"{c} " for c in FILES))
        return "\n".join(lines)
