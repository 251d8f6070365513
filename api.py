"""FastAPI backend for Xiangqi game."""

import os
import asyncio
import logging
from concurrent.futures import ThreadPoolExecutor
from contextlib import asynccontextmanager
from fastapi import FastAPI, HTTPException, Request
from pydantic import BaseModel, Field
from typing import Optional, List, Dict, Any
from time import time

from xiangqi.board import Board, Color, MoveRecord, Piece, parse_square, square_name
from xiangqi.game import XiangqiGame
from xiangqi.movegen import generate_moves, is_in_check

logger = logging.getLogger(__name__)


# Thread pool for CPU-intensive AI operations
executor = ThreadPoolExecutor(max_workers=4)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan manager."""
    yield
    # Cleanup: shutdown thread pool on app shutdown
    executor.shutdown(wait=True)


app = FastAPI(title="Xiangqi AI Engine", lifespan=lifespan)


def _get_default_depth() -> int:
    """Default search depth (env XIANGQI_SEARCH_DEPTH, else 5), at least 1."""
    try:
        depth = int(os.environ.get("XIANGQI_SEARCH_DEPTH", "5"))
    except ValueError:
        return 5
    return max(1, depth)


def _get_default_thinking_time() -> float:
    """Default thinking delay in seconds (env XIANGQI_THINKING_TIME, else 1.0)."""
    try:
        return float(os.environ.get("XIANGQI_THINKING_TIME", "1.0"))
    except ValueError:
        return 1.0


class GameSession:
    """Game plus the locking state the API needs around it."""

    def __init__(self, game: XiangqiGame):
        self.game = game
        self.lock = asyncio.Lock()
        self.last_access = time()
        self.is_processing = False


# Global game sessions with proper locking
games: Dict[str, GameSession] = {}
games_lock = asyncio.Lock()

# Rate limiting configuration
RATE_LIMIT_WINDOW = 1.0
RATE_LIMIT_MAX_REQUESTS = 10
rate_limit_data: Dict[str, List[float]] = {}

MAX_IDLE_TIME = 3600


async def check_rate_limit(request: Request) -> None:
    """Reject the request with 429 if its client exceeded the rate limit."""
    client_ip = request.client.host if request.client else "unknown"
    current_time = time()

    timestamps = [
        t for t in rate_limit_data.get(client_ip, []) if current_time - t < RATE_LIMIT_WINDOW
    ]
    if len(timestamps) >= RATE_LIMIT_MAX_REQUESTS:
        rate_limit_data[client_ip] = timestamps
        raise HTTPException(
            status_code=429, detail="Too many requests. Please slow down."
        )
    timestamps.append(current_time)
    rate_limit_data[client_ip] = timestamps


async def get_session(game_id: str) -> GameSession:
    """Get game session with proper error handling."""
    async with games_lock:
        if game_id not in games:
            raise HTTPException(status_code=404, detail="Game not found")
        session = games[game_id]
        session.last_access = time()
        return session


async def cleanup_old_games():
    """Clean up games that haven't been accessed for a long time."""
    current_time = time()

    async with games_lock:
        to_remove = [
            game_id
            for game_id, session in games.items()
            if current_time - session.last_access > MAX_IDLE_TIME
        ]
        for game_id in to_remove:
            del games[game_id]
    if to_remove:
        logger.info("Removed %d idle games", len(to_remove))


class MoveRequest(BaseModel):
    """Request model for making a move."""

    game_id: str
    from_square: str  # e.g., "b7"
    to_square: str  # e.g., "b4"


class NewGameRequest(BaseModel):
    """Request model for creating a new game."""

    game_id: str
    depth: Optional[int] = Field(default=None, ge=1)  # Uses XIANGQI_SEARCH_DEPTH if None
    thinking_time: Optional[float] = Field(default=None, ge=0)  # Uses XIANGQI_THINKING_TIME if None
    custom_setup: Optional[Dict[str, str]] = None  # e.g., {"e9": "rK", "e0": "bK"}


class BoardResponse(BaseModel):
    """Response model for board state."""

    board: List[List[Optional[str]]]
    side_to_move: str
    game_over: bool
    winner: Optional[str]
    in_check: bool
    legal_moves: List[Dict[str, str]]
    move_history: List[Dict[str, Any]]
    can_undo: bool = False


def piece_to_string(piece: Optional[Piece]) -> Optional[str]:
    """Convert piece to string representation."""
    if piece is None:
        return None
    return piece.code


def record_to_dict(record: MoveRecord) -> Dict[str, Any]:
    """Convert a move record to JSON-friendly form."""
    return {
        "piece": record.piece.code,
        "captured": piece_to_string(record.captured),
        "from": square_name(*record.from_square),
        "to": square_name(*record.to_square),
        "mover": record.mover.value,
    }


def _parse_square(square: str):
    try:
        return parse_square(square)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=f"Invalid square notation: {e}")


def _board_response(board: Board) -> BoardResponse:
    board_array = [
        [piece_to_string(board.get_piece(file, rank)) for file in range(board.FILES)]
        for rank in range(board.RANKS)
    ]
    legal_moves = []
    if not board.game_over:
        legal_moves = [
            {
                "from": square_name(move.from_file, move.from_rank),
                "to": square_name(move.to_file, move.to_rank),
            }
            for move in generate_moves(board)
        ]
    return BoardResponse(
        board=board_array,
        side_to_move=board.side_to_move.value,
        game_over=board.game_over,
        winner=board.winner.value if board.winner else None,
        in_check=is_in_check(board, board.side_to_move),
        legal_moves=legal_moves,
        move_history=[record_to_dict(r) for r in board.move_history],
        can_undo=len(board.move_history) >= 2,
    )


@app.post("/api/new-game")
async def new_game(request: NewGameRequest, req: Request):
    """Create a new game."""
    await check_rate_limit(req)

    depth = request.depth if request.depth is not None else _get_default_depth()
    thinking_time = (
        request.thinking_time
        if request.thinking_time is not None
        else _get_default_thinking_time()
    )
    game = XiangqiGame(
        depth=depth, thinking_time=thinking_time, custom_setup=request.custom_setup
    )

    async with games_lock:
        games[request.game_id] = GameSession(game)

    asyncio.create_task(cleanup_old_games())

    return {
        "status": "ok",
        "game_id": request.game_id,
        "depth": depth,
        "thinking_time": thinking_time,
    }


@app.get("/api/board/{game_id}")
async def get_board(game_id: str, req: Request):
    """Get current board state."""
    await check_rate_limit(req)
    session = await get_session(game_id)

    async with session.lock:
        if session.is_processing:
            raise HTTPException(status_code=409, detail="AI is thinking")
        return _board_response(session.game.board)


@app.get("/api/legal-moves/{game_id}")
async def get_legal_moves(game_id: str, square: str, req: Request):
    """Get destinations of the piece on a square."""
    await check_rate_limit(req)
    session = await get_session(game_id)
    file, rank = _parse_square(square)

    async with session.lock:
        if session.is_processing:
            raise HTTPException(status_code=409, detail="AI is thinking")
        destinations = session.game.get_legal_moves(file, rank)

    return {
        "square": square,
        "moves": [square_name(f, r) for f, r in destinations],
    }


@app.post("/api/move")
async def make_move(request: MoveRequest, req: Request):
    """Make a move for the side to move."""
    await check_rate_limit(req)
    session = await get_session(request.game_id)

    from_file, from_rank = _parse_square(request.from_square)
    to_file, to_rank = _parse_square(request.to_square)

    async with session.lock:
        game = session.game
        if session.is_processing:
            raise HTTPException(status_code=409, detail="AI is thinking")
        if game.game_over:
            raise HTTPException(status_code=400, detail="Game is over")
        piece = game.board.get_piece(from_file, from_rank)
        if not game.board.is_own_piece(piece):
            raise HTTPException(status_code=400, detail="No piece of the side to move there")
        if (to_file, to_rank) not in game.get_legal_moves(from_file, from_rank):
            raise HTTPException(status_code=400, detail="Illegal move")

        record = game.make_move(from_file, from_rank, to_file, to_rank)

        return {
            "status": "ok",
            "move": record_to_dict(record),
            "game_over": game.game_over,
            "winner": game.winner.value if game.winner else None,
        }


@app.post("/api/undo/{game_id}")
async def undo_move_pair(game_id: str, req: Request):
    """Undo the last two moves (player's move and AI's move)."""
    await check_rate_limit(req)
    session = await get_session(game_id)

    async with session.lock:
        if session.is_processing:
            raise HTTPException(status_code=409, detail="AI is thinking")
        undone = session.game.undo_last_full()
        if undone is None:
            raise HTTPException(status_code=400, detail="Not enough moves to undo")

    return {
        "status": "ok",
        "undone": [record_to_dict(r) for r in undone],
    }


async def _search(session: GameSession, hint: bool):
    """Run a search for the session, refusing concurrent searches."""
    async with session.lock:
        if session.is_processing:
            raise HTTPException(
                status_code=409, detail="AI is already processing a move. Please wait."
            )
        if session.game.game_over:
            raise HTTPException(status_code=400, detail="Game is over")
        session.is_processing = True

    try:
        # The board is only mutated by the search while is_processing is set
        if hint:
            return await session.game.get_hint(executor)
        return await session.game.get_best_move(executor)
    finally:
        async with session.lock:
            session.is_processing = False


@app.post("/api/ai-move/{game_id}")
async def ai_move(game_id: str, req: Request):
    """Let the engine play a move for the side to move."""
    await check_rate_limit(req)
    session = await get_session(game_id)

    best_move = await _search(session, hint=False)
    if best_move is None:
        raise HTTPException(status_code=400, detail="No legal moves available")

    async with session.lock:
        game = session.game
        reason = game.engine.describe_move(game.board, best_move)
        record = game.make_move(*best_move.from_square, *best_move.to_square)

        return {
            "status": "ok",
            "move": record_to_dict(record),
            "reason": reason,
            "score": game.engine.best_score,
            "nodes_searched": game.engine.nodes_searched,
            "prune_count": game.engine.prune_count,
            "game_over": game.game_over,
            "winner": game.winner.value if game.winner else None,
        }


@app.get("/api/hint/{game_id}")
async def hint(game_id: str, req: Request):
    """Suggest a move for the side to move without playing it."""
    await check_rate_limit(req)
    session = await get_session(game_id)

    best_move = await _search(session, hint=True)
    if best_move is None:
        raise HTTPException(status_code=400, detail="No legal moves available")

    async with session.lock:
        reason = session.game.engine.describe_move(session.game.board, best_move)

    return {
        "status": "ok",
        "move": {
            "from": square_name(*best_move.from_square),
            "to": square_name(*best_move.to_square),
        },
        "reason": reason,
    }


@app.post("/api/reset/{game_id}")
async def reset_game(game_id: str, req: Request):
    """Reset a game to the starting position."""
    await check_rate_limit(req)
    session = await get_session(game_id)

    async with session.lock:
        if session.is_processing:
            raise HTTPException(status_code=409, detail="AI is thinking")
        session.game.reset()

    return {"status": "ok", "side_to_move": Color.RED.value}
