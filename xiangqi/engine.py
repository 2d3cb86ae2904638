"""Shallow negamax search with alpha-beta pruning for the hard tier."""

from typing import List, Optional

from .attacks import is_in_check
from .board import Board, Color, Move, PieceKind, on_own_side
from .rules import collect_all_legal_moves, has_any_legal_move

MATE_SCORE = 999999


class MaterialEvaluator:
    """Material-only evaluator, scored from one side's point of view."""

    PIECE_VALUES = {
        PieceKind.GENERAL: 10000,
        PieceKind.ROOK: 900,
        PieceKind.CANNON: 450,
        PieceKind.HORSE: 400,
        PieceKind.ELEPHANT: 200,
        PieceKind.ADVISOR: 200,
        PieceKind.SOLDIER: 100,
    }
    CROSSED_SOLDIER_BONUS = 40

    @classmethod
    def piece_value(cls, kind: PieceKind, color: Color, row: int) -> int:
        value = cls.PIECE_VALUES[kind]
        if kind is PieceKind.SOLDIER and not on_own_side(color, row):
            value += cls.CROSSED_SOLDIER_BONUS
        return value

    @classmethod
    def evaluate(cls, board: Board, side: Color) -> float:
        score = 0
        for square, piece in board.pieces():
            value = cls.piece_value(piece.kind, piece.color, square.row)
            score += value if piece.color is side else -value
        return score


class Engine:
    """Xiangqi search engine."""

    def __init__(self, depth: int = 2):
        """Initialize engine.

        Args:
            depth: Search depth in plies (2 for the hard tier)
        """
        if depth < 1:
            raise ValueError("Search depth must be at least 1")
        self.depth = depth
        self.evaluator = MaterialEvaluator()
        self.nodes_searched = 0
        self.best_score: Optional[float] = None

    def search(self, board: Board, side: Color) -> Optional[Move]:
        """Search for the best move for `side` on a copy of `board`."""
        self.nodes_searched = 0
        self.best_score = None

        moves = collect_all_legal_moves(board, side)
        if not moves:
            return None

        moves = self._order_moves(board, moves)

        best_move = None
        best_value = float("-inf")
        alpha = float("-inf")
        beta = float("inf")

        for move in moves:
            child = board.moved(move)
            value = -self._negamax(child, side.opponent, self.depth - 1, 1, -beta, -alpha)
            if value > best_value:
                best_value = value
                best_move = move
            alpha = max(alpha, best_value)

        self.best_score = best_value
        return best_move

    def _negamax(
        self,
        board: Board,
        side: Color,
        depth: int,
        ply: int,
        alpha: float,
        beta: float,
    ) -> float:
        """Score `board` for `side` to move, searching `depth` more plies."""
        self.nodes_searched += 1

        if depth == 0:
            if not has_any_legal_move(board, side):
                return self._terminal_score(board, side, ply)
            return self.evaluator.evaluate(board, side)

        moves = collect_all_legal_moves(board, side)
        if not moves:
            return self._terminal_score(board, side, ply)

        best = float("-inf")
        for move in self._order_moves(board, moves):
            value = -self._negamax(board.moved(move), side.opponent, depth - 1, ply + 1, -beta, -alpha)
            if value > best:
                best = value
            if best > alpha:
                alpha = best
            if alpha >= beta:
                break  # Alpha-beta cutoff
        return best

    @staticmethod
    def _terminal_score(board: Board, side: Color, ply: int) -> float:
        # Being mated later is better than being mated now.
        if is_in_check(board, side):
            return -MATE_SCORE + ply
        return 0.0

    def _order_moves(self, board: Board, moves: List[Move]) -> List[Move]:
        """Order moves for better alpha-beta pruning (captures first)."""
        captures = []
        non_captures = []

        for move in moves:
            target = board.piece_at(move.to_square)
            if target is not None:
                # Prioritize high-value captures
                value = self.evaluator.PIECE_VALUES[target.kind]
                captures.append((move, value))
            else:
                non_captures.append(move)

        # Sort captures by value (highest first)
        captures.sort(key=lambda x: -x[1])

        return [m for m, _ in captures] + non_captures
