"""Legal move filtering and terminal-state classification."""

from enum import Enum
from typing import List

from .attacks import is_in_check
from .board import Board, Color, Move, Square
from .movegen import generate_pseudo_moves


class GameStatus(Enum):
    """Outcome of a position for the side to move."""

    ONGOING = "ongoing"
    CHECKMATE = "checkmate"
    STALEMATE = "stalemate"


def legal_moves(board: Board, square: Square, color: Color) -> List[Square]:
    """Destinations for the piece on `square` that keep `color`'s general safe."""
    piece = board.piece_at(square)
    if piece is None or piece.color is not color:
        return []

    legal = []
    for destination in generate_pseudo_moves(board, square):
        simulated = board.moved(Move(square, destination))
        if not is_in_check(simulated, color):
            legal.append(destination)
    return legal


def collect_all_legal_moves(board: Board, color: Color) -> List[Move]:
    """Generate all legal moves for a side, sources in row-major order."""
    moves = []
    for square, _ in board.pieces(color):
        for destination in legal_moves(board, square, color):
            moves.append(Move(square, destination))
    return moves


def has_any_legal_move(board: Board, color: Color) -> bool:
    for square, _ in board.pieces(color):
        if legal_moves(board, square, color):
            return True
    return False


def is_legal(board: Board, move: Move, color: Color) -> bool:
    return move.to_square in legal_moves(board, move.from_square, color)


def classify(board: Board, side: Color) -> GameStatus:
    """Ongoing while `side` can move; otherwise checkmate or stalemate."""
    if has_any_legal_move(board, side):
        return GameStatus.ONGOING
    if is_in_check(board, side):
        return GameStatus.CHECKMATE
    return GameStatus.STALEMATE
