"""Unit tests for heuristic move scoring."""

import pytest
import sys
import os

# Add parent directory to path for imports
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from xiangqi import (
    Board, Color, Move, Piece, PieceKind, RepetitionTracker, Square,
    collect_all_legal_moves, create_initial_board, position_key, rank_moves, score_move,
)
from xiangqi.repetition import AVOID_THRESHOLD, CHECK_STREAK_LIMIT, PINGPONG_LIMIT
from xiangqi.scoring import AVOID_PENALTY, PINGPONG_PENALTY, capture_value, center_bonus


def board_from(setup):
    """Build a board from {iccs_square: symbol}."""
    board = Board()
    for iccs, symbol in setup.items():
        square = Square.from_iccs(iccs)
        board.set_piece(square.row, square.col, Piece.from_symbol(symbol))
    return board


class TestTerms:
    """Test the individual scoring terms."""

    def test_capture_values_ordered(self):
        values = [
            capture_value(Piece(kind, Color.BLACK), 0)
            for kind in (PieceKind.ROOK, PieceKind.CANNON, PieceKind.HORSE,
                         PieceKind.ELEPHANT, PieceKind.SOLDIER)
        ]

        assert values == sorted(values, reverse=True)

    def test_crossed_soldier_worth_more(self):
        soldier = Piece(PieceKind.SOLDIER, Color.BLACK)

        assert capture_value(soldier, 3) == 100
        assert capture_value(soldier, 6) == 140

    def test_center_bonus(self):
        assert center_bonus(Move.from_iccs("e0e5")) == pytest.approx(6.0)
        assert center_bonus(Move.from_iccs("a1a0")) == pytest.approx(-0.4)

    def test_soldier_push_bonus(self):
        board = board_from({"e3": "P", "a0": "R", "d0": "K", "f9": "k"})
        push = score_move(board, Move.from_iccs("e3e4"), Color.RED)

        assert push == pytest.approx(center_bonus(Move.from_iccs("e3e4")) + 6)

    def test_capture_scores_higher(self):
        board = board_from({"e4": "R", "e7": "r", "a4": "p", "d0": "K", "f9": "k"})
        take_rook = score_move(board, Move.from_iccs("e4e7"), Color.RED)
        take_soldier = score_move(board, Move.from_iccs("e4a4"), Color.RED)

        assert take_rook > take_soldier > 0


class TestRanking:
    """Test ordering and repetition penalties."""

    def test_opening_top_moves_are_cannon_captures(self):
        ranked = rank_moves(create_initial_board(), Color.RED)

        assert ranked[0].move == Move.from_iccs("b2b9")
        assert ranked[1].move == Move.from_iccs("h2h9")

    def test_sorted_descending(self):
        ranked = rank_moves(create_initial_board(), Color.RED)
        scores = [item.score for item in ranked]

        assert scores == sorted(scores, reverse=True)

    def test_index_refers_to_legal_move_list(self):
        board = create_initial_board()
        moves = collect_all_legal_moves(board, Color.RED)
        for item in rank_moves(board, Color.RED):
            assert moves[item.index] == item.move

    def test_avoided_result_ranks_last(self):
        board = create_initial_board()
        capture = Move.from_iccs("b2b9")
        tracker = RepetitionTracker()
        tracker.counts[position_key(board.moved(capture), Color.BLACK)] = AVOID_THRESHOLD

        ranked = rank_moves(board, Color.RED, tracker)

        assert ranked[0].move == Move.from_iccs("h2h9")
        assert ranked[-1].move == capture
        assert ranked[-1].avoided
        assert ranked[-1].score < -AVOID_PENALTY / 2
        assert not any(item.avoided for item in ranked[:-1])

    def test_check_streak_penalty(self):
        board = create_initial_board()
        move = Move.from_iccs("h2e2")
        tracker = RepetitionTracker()
        base = score_move(board, move, Color.RED, tracker)
        tracker.check_streak[Color.RED] = CHECK_STREAK_LIMIT

        assert score_move(board, move, Color.RED, tracker) == pytest.approx(base - 800)

    def test_ping_pong_penalty_at_limit(self):
        board = create_initial_board()
        move = Move.from_iccs("h2e2")
        below = RepetitionTracker()
        below.ping_pong_count = PINGPONG_LIMIT - 1
        at_limit = RepetitionTracker()
        at_limit.ping_pong_count = PINGPONG_LIMIT

        difference = (
            score_move(board, move, Color.RED, below)
            - score_move(board, move, Color.RED, at_limit)
        )

        assert difference == pytest.approx(PINGPONG_PENALTY)

    def test_no_moves(self):
        board = board_from({"d9": "k", "e7": "R", "a8": "R", "f0": "K"})

        assert rank_moves(board, Color.BLACK) == []
