"""Unit tests for terminal-state classification."""

import sys
import os

# Add parent directory to path for imports
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from xiangqi import (
    Board, Color, GameStatus, Piece, Square,
    classify, collect_all_legal_moves, create_initial_board, has_any_legal_move,
    is_in_check,
)


def board_from(setup):
    """Build a board from {iccs_square: symbol}."""
    board = Board()
    for iccs, symbol in setup.items():
        square = Square.from_iccs(iccs)
        board.set_piece(square.row, square.col, Piece.from_symbol(symbol))
    return board


class TestClassify:
    """Test checkmate and stalemate detection."""

    def test_initial_position_ongoing(self):
        board = create_initial_board()

        assert classify(board, Color.RED) is GameStatus.ONGOING
        assert classify(board, Color.BLACK) is GameStatus.ONGOING

    def test_back_rank_checkmate(self):
        """Rook on the back rank, second rook sealing the rank below."""
        board = board_from({"e9": "k", "a9": "R", "b8": "R", "d0": "K"})

        assert is_in_check(board, Color.BLACK)
        assert not has_any_legal_move(board, Color.BLACK)
        assert classify(board, Color.BLACK) is GameStatus.CHECKMATE

    def test_check_with_escape_is_ongoing(self):
        board = board_from({"e9": "k", "a9": "R", "d0": "K"})

        assert is_in_check(board, Color.BLACK)
        assert classify(board, Color.BLACK) is GameStatus.ONGOING

    def test_capture_escapes_check(self):
        board = board_from({"e9": "k", "d9": "a", "e8": "R", "d0": "K"})

        moves = collect_all_legal_moves(board, Color.BLACK)

        assert classify(board, Color.BLACK) is GameStatus.ONGOING
        assert any(m.to_square == Square.from_iccs("e8") for m in moves)

    def test_stalemate(self):
        """No legal move and not in check."""
        board = board_from({"d9": "k", "e7": "R", "a8": "R", "f0": "K"})

        assert not is_in_check(board, Color.BLACK)
        assert collect_all_legal_moves(board, Color.BLACK) == []
        assert classify(board, Color.BLACK) is GameStatus.STALEMATE

    def test_facing_generals_limit_escape(self):
        """The general may not step onto an open file facing the enemy general."""
        board = board_from({"d9": "k", "a8": "R", "e0": "K"})

        assert classify(board, Color.BLACK) is GameStatus.STALEMATE
