"""Heuristic move scoring used by every difficulty tier and the fallback."""

from dataclasses import dataclass
from typing import Dict, List, Optional

from .board import Board, Color, Move, Piece, PieceKind, on_own_side, position_key
from .repetition import RepetitionTracker
from .rules import collect_all_legal_moves

# Rook > Cannon > Horse > Elephant/Advisor > Soldier
CAPTURE_VALUES: Dict[PieceKind, int] = {
    PieceKind.GENERAL: 10000,
    PieceKind.ROOK: 500,
    PieceKind.CANNON: 450,
    PieceKind.HORSE: 300,
    PieceKind.ELEPHANT: 250,
    PieceKind.ADVISOR: 250,
    PieceKind.SOLDIER: 100,
}
CROSSED_SOLDIER_BONUS = 40
SOLDIER_PUSH_BONUS = 6
CENTER_WEIGHT = 0.8
CENTER_RADIUS = 8

AVOID_PENALTY = 100000
PINGPONG_PENALTY = 500
CHECK_STREAK_PENALTY = 800


@dataclass
class ScoredMove:
    """A legal move with its heuristic score.

    `index` is the move's position in the unsorted legal-move list, which is
    what the advisor refers to.
    """

    index: int
    move: Move
    score: float
    result_key: str
    avoided: bool = False


def capture_value(piece: Piece, row: int) -> int:
    value = CAPTURE_VALUES[piece.kind]
    if piece.kind is PieceKind.SOLDIER and not on_own_side(piece.color, row):
        value += CROSSED_SOLDIER_BONUS
    return value


def center_bonus(move: Move) -> float:
    """Reward destinations close to the middle of the board."""
    dst = move.to_square
    distance = abs(4 - dst.col) + abs(4.5 - dst.row)
    return (CENTER_RADIUS - distance) * CENTER_WEIGHT


def score_move(
    board: Board,
    move: Move,
    side: Color,
    tracker: Optional[RepetitionTracker] = None,
    avoid: Optional[set] = None,
) -> float:
    """Score one legal move for `side`."""
    score = 0.0
    target = board.piece_at(move.to_square)
    if target is not None and target.color is not side:
        score += capture_value(target, move.to_square.row)

    score += center_bonus(move)

    mover = board.piece_at(move.from_square)
    if mover is not None and mover.kind is PieceKind.SOLDIER:
        advance = move.from_square.row - move.to_square.row
        if (side is Color.RED and advance > 0) or (side is Color.BLACK and advance < 0):
            score += SOLDIER_PUSH_BONUS

    if tracker is not None:
        if avoid is None:
            avoid = tracker.avoid_set()
        if position_key(board.moved(move), side.opponent) in avoid:
            score -= AVOID_PENALTY
        if tracker.ping_pong_exceeded():
            score -= PINGPONG_PENALTY
        if tracker.check_streak_exceeded(side):
            score -= CHECK_STREAK_PENALTY
    return score


def rank_moves(
    board: Board,
    side: Color,
    tracker: Optional[RepetitionTracker] = None,
    moves: Optional[List[Move]] = None,
) -> List[ScoredMove]:
    """Score every legal move and sort best first (ties keep generation order)."""
    if moves is None:
        moves = collect_all_legal_moves(board, side)
    avoid = tracker.avoid_set() if tracker is not None else set()

    scored = []
    for index, move in enumerate(moves):
        key = position_key(board.moved(move), side.opponent)
        score = score_move(board, move, side, tracker, avoid)
        scored.append(ScoredMove(index, move, score, key, key in avoid))
    scored.sort(key=lambda item: -item.score)
    return scored
