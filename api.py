"""FastAPI backend for Xiangqi games."""

import asyncio
import copy
import logging
from concurrent.futures import ThreadPoolExecutor
from contextlib import asynccontextmanager
from time import time
from typing import Any, Dict, List, Optional

from fastapi import FastAPI, HTTPException
from pydantic import BaseModel, ConfigDict, Field

from xiangqi.advisor import AdvisorRequest, MoveAdvisor
from xiangqi.arbiter import Decision, Difficulty, MoveArbiter
from xiangqi.board import Board, Color, Move, Square, deserialize, serialize
from xiangqi.config import EngineConfig
from xiangqi.exceptions import IllegalMove, MalformedBoard
from xiangqi.game import GameState
from xiangqi.repetition import RepetitionTracker
from xiangqi.rules import GameStatus, collect_all_legal_moves
from xiangqi.scoring import rank_moves

logger = logging.getLogger(__name__)

config = EngineConfig.from_env()

# Thread pool for CPU-intensive AI operations
executor = ThreadPoolExecutor(max_workers=4)

# Optional external advisor used by /api/ai-move; None means local play only.
move_advisor: Optional[MoveAdvisor] = None


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan manager."""
    yield
    executor.shutdown(wait=True)


app = FastAPI(title="Xiangqi Rules Engine", lifespan=lifespan)


class GameSession:
    """A game plus the per-session lock, arbiter and busy flag."""

    def __init__(self, game: GameState, arbiter: MoveArbiter, difficulty: Difficulty):
        self.game = game
        self.arbiter = arbiter
        self.difficulty = difficulty
        self.lock = asyncio.Lock()
        self.last_access = time()
        self.is_processing = False


games: Dict[str, GameSession] = {}
games_lock = asyncio.Lock()


async def get_session(game_id: str) -> GameSession:
    async with games_lock:
        if game_id not in games:
            raise HTTPException(status_code=404, detail="Game not found")
        session = games[game_id]
        session.last_access = time()
        return session


async def cleanup_old_games():
    """Drop games that have been idle longer than the configured limit."""
    current_time = time()
    async with games_lock:
        to_remove = [
            game_id
            for game_id, session in games.items()
            if current_time - session.last_access > config.max_idle_seconds
        ]
        for game_id in to_remove:
            del games[game_id]
    if to_remove:
        logger.info("Removed %d idle games", len(to_remove))


class NewGameRequest(BaseModel):
    """Request model for creating a new game."""

    game_id: str
    difficulty: Optional[Difficulty] = None  # server default if None
    use_search: Optional[bool] = None
    depth: Optional[int] = Field(default=None, ge=1, le=4)
    board: Optional[str] = None  # custom position in board text format
    side_to_move: Color = Color.RED
    seed: Optional[int] = None


class MoveRequest(BaseModel):
    """Request model for making a move."""

    game_id: str
    from_square: str  # ICCS, e.g. "h2"
    to_square: str  # e.g. "e2"


class LoggedMoveModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    ply: int = Field(ge=1)
    from_: Any = Field(alias="from")  # [row, col] or ICCS text
    to: Any


class SyncRequest(BaseModel):
    """Moves from a shared multiplayer log, in any order."""

    moves: List[LoggedMoveModel]


class BoardResponse(BaseModel):
    """Response model for board state."""

    board: str
    rows: List[str]
    side_to_move: str
    status: str
    game_over: bool
    winner: Optional[str]
    in_check: bool
    legal_moves: List[Dict[str, str]]
    move_history: List[str]
    ply: int
    can_undo: bool = False
    warning: Dict[str, Any]


def _parse_move(from_square: str, to_square: str) -> Move:
    try:
        return Move(Square.from_iccs(from_square), Square.from_iccs(to_square))
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))


def _move_dict(move: Move) -> Dict[str, str]:
    return {"from": move.from_square.to_iccs(), "to": move.to_square.to_iccs()}


def _winner(game: GameState, status: GameStatus) -> Optional[str]:
    # Checkmated or stalemated, the side to move loses.
    if status is GameStatus.ONGOING:
        return None
    return game.side_to_move.opponent.value


def _board_response(session: GameSession) -> BoardResponse:
    game = session.game
    status = game.status()
    text = serialize(game.board)
    return BoardResponse(
        board=text,
        rows=text.split("/"),
        side_to_move=game.side_to_move.value,
        status=status.value,
        game_over=status is not GameStatus.ONGOING,
        winner=_winner(game, status),
        in_check=game.in_check(),
        legal_moves=[_move_dict(m) for m in game.all_legal_moves()],
        move_history=[m.to_iccs() for m in game.moves],
        ply=game.ply,
        can_undo=game.ply > 0,
        warning=game.repetition.warnings(),
    )


def _result_dict(result) -> Dict[str, Any]:
    return {
        "status": "ok",
        "move": _move_dict(result.move),
        "captured": result.captured.symbol if result.captured else None,
        "gave_check": result.gave_check,
        "game_status": result.status.value,
        "game_over": result.game_over,
        "ply": result.ply,
    }


@app.post("/api/new-game")
async def new_game(request: NewGameRequest):
    """Create a new game, optionally from a custom position."""
    use_search = config.use_search if request.use_search is None else request.use_search
    depth = request.depth or config.search_depth
    difficulty = request.difficulty or config.default_difficulty

    game = GameState()
    if request.board is not None:
        try:
            game.reset(deserialize(request.board), request.side_to_move)
        except MalformedBoard as e:
            raise HTTPException(status_code=400, detail=str(e))

    arbiter = MoveArbiter(
        use_search=use_search,
        search_depth=depth,
        seed=request.seed,
        advisor_timeout=config.advisor_timeout,
    )

    async with games_lock:
        games[request.game_id] = GameSession(game, arbiter, difficulty)

    asyncio.create_task(cleanup_old_games())

    logger.info("New game %s (difficulty=%s, search=%s)", request.game_id, difficulty.value, use_search)
    return {"status": "ok", "game_id": request.game_id, "difficulty": difficulty.value}


@app.get("/api/board/{game_id}")
async def get_board(game_id: str) -> BoardResponse:
    """Get current board state."""
    session = await get_session(game_id)
    async with session.lock:
        return _board_response(session)


@app.post("/api/move")
async def make_move(request: MoveRequest):
    """Make a move for the side to move."""
    session = await get_session(request.game_id)
    move = _parse_move(request.from_square, request.to_square)

    async with session.lock:
        try:
            result = session.game.commit_move(move)
        except IllegalMove as e:
            raise HTTPException(status_code=400, detail=str(e))

    return _result_dict(result)


@app.post("/api/undo/{game_id}")
async def undo_move(game_id: str):
    """Undo the last move."""
    session = await get_session(game_id)

    async with session.lock:
        if not session.game.undo():
            raise HTTPException(status_code=400, detail="No moves to undo")

    return {"status": "ok", "message": "Move undone successfully", "ply": session.game.ply}


@app.post("/api/undo-pair/{game_id}")
async def undo_move_pair(game_id: str):
    """Undo the last two moves (player's move and AI's move)."""
    session = await get_session(game_id)

    async with session.lock:
        if not session.game.undo(2):
            raise HTTPException(status_code=400, detail="Not enough moves to undo")

    return {"status": "ok", "message": "Two moves undone successfully", "ply": session.game.ply}


def _run_local_choice(
    arbiter: MoveArbiter,
    board: Board,
    side: Color,
    tracker: RepetitionTracker,
    difficulty: Difficulty,
) -> Decision:
    """CPU-bound move choice, run in the thread pool."""
    return arbiter.choose_move(board, side, tracker, difficulty)


@app.post("/api/ai-move/{game_id}")
async def ai_move(game_id: str):
    """Let the automated player move for the side to move."""
    session = await get_session(game_id)

    async with session.lock:
        if session.is_processing:
            raise HTTPException(
                status_code=409, detail="AI is already processing a move. Please wait."
            )
        session.is_processing = True
        # Choose on copies so the board stays readable while we think.
        board = session.game.board.clone()
        side = session.game.side_to_move
        tracker = copy.deepcopy(session.game.repetition)
        ply = session.game.ply

    try:
        if move_advisor is not None:
            decision = await session.arbiter.choose_move_with_advisor(
                board, side, tracker, session.difficulty, move_advisor
            )
        else:
            loop = asyncio.get_running_loop()
            decision = await loop.run_in_executor(
                executor,
                _run_local_choice,
                session.arbiter,
                board,
                side,
                tracker,
                session.difficulty,
            )

        if decision.move is None:
            raise HTTPException(status_code=400, detail="No legal moves available")

        async with session.lock:
            if session.game.ply != ply:
                raise HTTPException(status_code=409, detail="Board changed while thinking")
            try:
                result = session.game.commit_move(decision.move)
            except IllegalMove:
                logger.exception("Arbiter produced an illegal move in game %s", game_id)
                raise HTTPException(status_code=500, detail="AI generated illegal move")

        response = _result_dict(result)
        response["source"] = decision.source
        if decision.advisor_error:
            response["advisor_error"] = decision.advisor_error
        return response
    finally:
        async with session.lock:
            session.is_processing = False


@app.post("/api/sync/{game_id}")
async def sync_moves(game_id: str, request: SyncRequest):
    """Apply moves from a shared move log that this game has not seen yet."""
    session = await get_session(game_id)
    entries = [{"ply": m.ply, "from": m.from_, "to": m.to} for m in request.moves]

    async with session.lock:
        try:
            results = session.game.apply_logged_moves(entries)
        except IllegalMove as e:
            raise HTTPException(status_code=400, detail=str(e))
        except (ValueError, IndexError, TypeError) as e:
            raise HTTPException(status_code=400, detail=f"Invalid move entry: {e}")

    return {
        "status": "ok",
        "applied": [_move_dict(r.move) for r in results],
        "ply": session.game.ply,
    }


@app.post("/api/advisor/move")
async def advisor_move(request: AdvisorRequest):
    """Heuristic advisor: answers the advisor contract without a language model."""
    try:
        board = deserialize(request.board)
        side = Color(request.side)
        difficulty = Difficulty(request.difficulty)
        tracker = RepetitionTracker.from_hints(request.repetition.model_dump())
    except (MalformedBoard, ValueError) as e:
        raise HTTPException(status_code=400, detail=str(e))

    if not request.candidates:
        raise HTTPException(status_code=400, detail="No candidate moves")

    candidates = [c.to_move() for c in request.candidates]
    legal = set(collect_all_legal_moves(board, side))
    for move in candidates:
        if move not in legal:
            raise HTTPException(status_code=400, detail=f"Candidate {move} is not legal")

    ranked = rank_moves(board, side, tracker, candidates)
    pick = MoveArbiter(use_search=False).pick_from_ranking(ranked, difficulty)

    move = pick.move
    return {
        "from": [move.from_square.row, move.from_square.col],
        "to": [move.to_square.row, move.to_square.col],
    }
