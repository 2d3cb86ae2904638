"""Unit tests for attack detection and check."""

import sys
import os

# Add parent directory to path for imports
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from xiangqi import (
    Board, Color, Piece, Square, create_initial_board,
    generate_pseudo_moves, is_in_check, is_square_attacked,
)


def board_from(setup):
    """Build a board from {iccs_square: symbol}."""
    board = Board()
    for iccs, symbol in setup.items():
        square = Square.from_iccs(iccs)
        board.set_piece(square.row, square.col, Piece.from_symbol(symbol))
    return board


def attacked(board, iccs, by_color):
    return is_square_attacked(board, Square.from_iccs(iccs), by_color)


class TestSoldierAttacks:
    """A soldier attacks the squares it could step onto."""

    def test_crossed_red_soldier(self):
        board = board_from({"e5": "P", "d0": "K", "f9": "k"})

        assert attacked(board, "e6", Color.RED)
        assert attacked(board, "d5", Color.RED)
        assert attacked(board, "f5", Color.RED)
        assert not attacked(board, "e4", Color.RED)

    def test_uncrossed_red_soldier(self):
        board = board_from({"e3": "P", "d0": "K", "f9": "k"})

        assert attacked(board, "e4", Color.RED)
        assert not attacked(board, "d3", Color.RED)
        assert not attacked(board, "f3", Color.RED)

    def test_crossed_black_soldier(self):
        board = board_from({"e4": "p", "d0": "K", "f9": "k"})

        assert attacked(board, "e3", Color.BLACK)
        assert attacked(board, "d4", Color.BLACK)
        assert attacked(board, "f4", Color.BLACK)
        assert not attacked(board, "e5", Color.BLACK)

    def test_soldier_checks_general(self):
        board = board_from({"e1": "p", "e0": "K", "d9": "k"})

        assert is_in_check(board, Color.RED)


class TestHorseAttacks:
    """Horse attacks respect the leg next to the horse."""

    def test_open_attack(self):
        board = board_from({"e4": "N", "d0": "K", "f9": "k"})

        assert attacked(board, "d6", Color.RED)

    def test_leg_blocked(self):
        board = board_from({"e4": "N", "e5": "p", "d0": "K", "f9": "k"})

        assert not attacked(board, "d6", Color.RED)

    def test_leg_is_next_to_the_horse(self):
        """A piece next to the target does not hobble the horse."""
        board = board_from({"e4": "N", "d5": "p", "d0": "K", "f9": "k"})

        assert attacked(board, "d6", Color.RED)

    def test_horse_check(self):
        board = board_from({"f7": "N", "e9": "k", "d0": "K"})

        assert is_in_check(board, Color.BLACK)


class TestLineAttacks:
    """Rooks, cannons and the facing general."""

    def test_rook_check(self):
        board = board_from({"e4": "R", "e9": "k", "d0": "K"})

        assert is_in_check(board, Color.BLACK)

    def test_cannon_needs_screen(self):
        board = board_from({"e4": "C", "e9": "k", "d0": "K"})

        assert not is_in_check(board, Color.BLACK)

    def test_cannon_check_over_screen(self):
        board = board_from({"e4": "C", "e8": "a", "e9": "k", "d0": "K"})

        assert is_in_check(board, Color.BLACK)

    def test_cannon_two_screens(self):
        board = board_from({"e4": "C", "e7": "p", "e8": "a", "e9": "k", "d0": "K"})

        assert not is_in_check(board, Color.BLACK)

    def test_generals_only_fly_at_generals(self):
        board = board_from({"e0": "K", "d9": "k"})

        assert not attacked(board, "e5", Color.RED)


class TestPalaceAttacks:
    """Advisors and generals attack only inside their palace."""

    def test_advisor_attacks_palace_square(self):
        board = board_from({"e1": "A", "d0": "K", "f9": "k"})

        assert attacked(board, "f2", Color.RED)

    def test_advisor_does_not_attack_outside_palace(self):
        board = board_from({"d2": "A", "f0": "K", "d9": "k"})

        assert not attacked(board, "c3", Color.RED)

    def test_elephant_does_not_attack_across_river(self):
        board = board_from({"c4": "B", "e0": "K", "d9": "k"})

        assert attacked(board, "a2", Color.RED)
        assert not attacked(board, "a6", Color.RED)


class TestCheck:
    """Test check detection."""

    def test_initial_position_not_in_check(self):
        board = create_initial_board()

        assert not is_in_check(board, Color.RED)
        assert not is_in_check(board, Color.BLACK)

    def test_missing_general_counts_as_check(self):
        board = board_from({"e9": "k"})

        assert is_in_check(board, Color.RED)

    def test_attacks_agree_with_generator(self):
        """Every pseudo-legal capture of the general is seen as check."""
        board = board_from({
            "e9": "k", "d9": "a", "f8": "n",
            "e7": "N", "e6": "C", "a8": "R", "e5": "P", "d0": "K",
        })
        general = board.find_general(Color.BLACK)
        reaches = any(
            general in generate_pseudo_moves(board, square)
            for square, _ in board.pieces(Color.RED)
        )

        assert reaches
        assert is_in_check(board, Color.BLACK)
