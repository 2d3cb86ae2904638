"""Unit tests for Engine class."""

import pytest
import sys
import os

# Add parent directory to path for imports
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from xiangqi import (
    Board, Color, Engine, GameStatus, MaterialEvaluator, Move, Piece, Square,
    classify, collect_all_legal_moves, create_initial_board,
)
from xiangqi.engine import MATE_SCORE


def board_from(setup):
    """Build a board from {iccs_square: symbol}."""
    board = Board()
    for iccs, symbol in setup.items():
        square = Square.from_iccs(iccs)
        board.set_piece(square.row, square.col, Piece.from_symbol(symbol))
    return board


class TestEngineInitialization:
    """Test engine initialization."""

    def test_default_initialization(self):
        engine = Engine()

        assert engine.depth == 2
        assert engine.nodes_searched == 0
        assert engine.best_score is None

    def test_custom_depth(self):
        engine = Engine(depth=3)

        assert engine.depth == 3

    def test_invalid_depth(self):
        with pytest.raises(ValueError):
            Engine(depth=0)


class TestEvaluation:
    """Test material evaluation."""

    def test_initial_position_balanced(self):
        board = create_initial_board()

        assert MaterialEvaluator.evaluate(board, Color.RED) == 0
        assert MaterialEvaluator.evaluate(board, Color.BLACK) == 0

    def test_extra_rook(self):
        board = board_from({"a0": "R", "d0": "K", "f9": "k"})

        assert MaterialEvaluator.evaluate(board, Color.RED) == 900
        assert MaterialEvaluator.evaluate(board, Color.BLACK) == -900

    def test_crossed_soldier_bonus(self):
        board = board_from({"e5": "P", "d0": "K", "f9": "k"})

        assert MaterialEvaluator.evaluate(board, Color.RED) == 140


class TestEngineSearch:
    """Test engine search functionality."""

    def test_search_returns_legal_move(self):
        board = create_initial_board()
        engine = Engine(depth=1)  # Low depth for speed

        move = engine.search(board, Color.RED)

        assert move in collect_all_legal_moves(board, Color.RED)

    def test_search_does_not_modify_board(self):
        board = create_initial_board()
        Engine(depth=1).search(board, Color.RED)

        assert board == create_initial_board()

    def test_search_updates_stats(self):
        board = board_from({"e4": "R", "e7": "r", "d9": "k", "f0": "K"})
        engine = Engine(depth=2)

        engine.search(board, Color.RED)

        assert engine.nodes_searched > 0
        assert engine.best_score is not None

    def test_captures_hanging_rook(self):
        board = board_from({"e4": "R", "e7": "r", "d9": "k", "f0": "K"})
        engine = Engine(depth=2)

        move = engine.search(board, Color.RED)

        assert move == Move.from_iccs("e4e7")

    def test_finds_mate_in_one(self):
        board = board_from({"e9": "k", "a8": "R", "i5": "R", "d0": "K"})
        engine = Engine(depth=2)

        move = engine.search(board, Color.RED)

        assert engine.best_score == MATE_SCORE - 1
        assert classify(board.moved(move), Color.BLACK) is GameStatus.CHECKMATE

    def test_search_no_moves(self):
        """Search returns None when the side to move is stalemated."""
        board = board_from({"d9": "k", "e7": "R", "a8": "R", "f0": "K"})
        engine = Engine(depth=2)

        assert engine.search(board, Color.BLACK) is None

    def test_mated_side_scores_mate(self):
        board = board_from({"e9": "k", "a9": "R", "b8": "R", "d0": "K"})
        engine = Engine(depth=1)

        assert engine._negamax(board, Color.BLACK, 1, 1, float("-inf"), float("inf")) == -MATE_SCORE + 1


class TestMoveOrdering:
    """Test move ordering for alpha-beta efficiency."""

    def test_captures_first(self):
        board = create_initial_board()
        engine = Engine(depth=1)
        moves = collect_all_legal_moves(board, Color.RED)

        ordered = engine._order_moves(board, moves)

        assert board.piece_at(ordered[0].to_square) is not None
        assert board.piece_at(ordered[1].to_square) is not None
        assert board.piece_at(ordered[2].to_square) is None
        assert sorted(ordered, key=str) == sorted(moves, key=str)
