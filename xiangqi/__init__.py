"""Xiangqi (Chinese Chess) rules engine."""

from .board import (
    Board, Color, Move, Piece, PieceKind, Square,
    create_initial_board, serialize, deserialize, position_key,
)
from .exceptions import (
    XiangqiError, MalformedBoard, IllegalMove,
    AdvisorError, AdvisorUnavailable, AdvisorInvalidResponse,
)
from .movegen import generate_pseudo_moves
from .attacks import is_square_attacked, is_in_check
from .rules import (
    GameStatus, legal_moves, collect_all_legal_moves, has_any_legal_move, is_legal, classify,
)
from .repetition import RepetitionTracker
from .scoring import ScoredMove, score_move, rank_moves
from .engine import Engine, MaterialEvaluator
from .advisor import AdvisorRequest, AdvisorResponse, MoveAdvisor, parse_response
from .arbiter import Decision, Difficulty, MoveArbiter
from .game import GameState, MoveResult
from .config import EngineConfig

__all__ = [
    # Board model
    'Board', 'Color', 'Move', 'Piece', 'PieceKind', 'Square',
    'create_initial_board', 'serialize', 'deserialize', 'position_key',
    # Errors
    'XiangqiError', 'MalformedBoard', 'IllegalMove',
    'AdvisorError', 'AdvisorUnavailable', 'AdvisorInvalidResponse',
    # Rules
    'generate_pseudo_moves', 'is_square_attacked', 'is_in_check',
    'GameStatus', 'legal_moves', 'collect_all_legal_moves', 'has_any_legal_move',
    'is_legal', 'classify',
    # Repetition and move choice
    'RepetitionTracker', 'ScoredMove', 'score_move', 'rank_moves',
    'Engine', 'MaterialEvaluator',
    'AdvisorRequest', 'AdvisorResponse', 'MoveAdvisor', 'parse_response',
    'Decision', 'Difficulty', 'MoveArbiter',
    # Game
    'GameState', 'MoveResult',
    'EngineConfig',
]
