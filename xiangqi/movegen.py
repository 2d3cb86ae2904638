"""Pseudo-legal move generation. Self-check is handled by rules.py."""

from typing import Callable, Dict, List

from .board import (
    Board,
    Color,
    Piece,
    PieceKind,
    Square,
    in_bounds,
    in_palace,
    on_own_side,
)

ORTHOGONAL = ((-1, 0), (1, 0), (0, -1), (0, 1))
DIAGONAL = ((1, 1), (1, -1), (-1, 1), (-1, -1))
HORSE_JUMPS = (
    (-2, -1), (-2, 1), (2, -1), (2, 1),
    (-1, -2), (-1, 2), (1, -2), (1, 2),
)
ELEPHANT_JUMPS = ((2, 2), (2, -2), (-2, 2), (-2, -2))


def forward_step(color: Color) -> int:
    """Row delta of a forward move: Red goes up the board, Black down."""
    return -1 if color is Color.RED else 1


def horse_leg(row: int, col: int, dr: int, dc: int):
    """Square a horse steps through first when jumping by (dr, dc)."""
    if abs(dr) == 2:
        return row + dr // 2, col
    return row, col + dc // 2


def _can_land(board: Board, row: int, col: int, piece: Piece) -> bool:
    if not in_bounds(row, col):
        return False
    target = board.get_piece(row, col)
    return target is None or target.color is not piece.color


def _rook_moves(board: Board, row: int, col: int, piece: Piece) -> List[Square]:
    """Slide along each ray until blocked; capture an enemy blocker."""
    moves = []
    for dr, dc in ORTHOGONAL:
        r, c = row + dr, col + dc
        while in_bounds(r, c):
            target = board.get_piece(r, c)
            if target is None:
                moves.append(Square(r, c))
            else:
                if target.color is not piece.color:
                    moves.append(Square(r, c))
                break
            r, c = r + dr, c + dc
    return moves


def _cannon_moves(board: Board, row: int, col: int, piece: Piece) -> List[Square]:
    """Generate cannon moves.

    Cannon rules:
    - Quiet moves slide over empty squares like a rook
    - The first piece met on a ray (either colour) is the screen
    - The only landing beyond the screen is the next piece, if it is an enemy
    """
    moves = []
    for dr, dc in ORTHOGONAL:
        r, c = row + dr, col + dc
        screen_found = False
        while in_bounds(r, c):
            target = board.get_piece(r, c)
            if not screen_found:
                if target is None:
                    moves.append(Square(r, c))
                else:
                    screen_found = True
            elif target is not None:
                if target.color is not piece.color:
                    moves.append(Square(r, c))
                break
            r, c = r + dr, c + dc
    return moves


def _horse_moves(board: Board, row: int, col: int, piece: Piece) -> List[Square]:
    moves = []
    for dr, dc in HORSE_JUMPS:
        to_row, to_col = row + dr, col + dc
        if not in_bounds(to_row, to_col):
            continue
        leg_row, leg_col = horse_leg(row, col, dr, dc)
        if board.get_piece(leg_row, leg_col) is not None:
            continue  # hobbled
        if _can_land(board, to_row, to_col, piece):
            moves.append(Square(to_row, to_col))
    return moves


def _elephant_moves(board: Board, row: int, col: int, piece: Piece) -> List[Square]:
    moves = []
    for dr, dc in ELEPHANT_JUMPS:
        to_row, to_col = row + dr, col + dc
        if not in_bounds(to_row, to_col):
            continue
        if not on_own_side(piece.color, to_row):
            continue
        if board.get_piece(row + dr // 2, col + dc // 2) is not None:
            continue  # eye blocked
        if _can_land(board, to_row, to_col, piece):
            moves.append(Square(to_row, to_col))
    return moves


def _advisor_moves(board: Board, row: int, col: int, piece: Piece) -> List[Square]:
    moves = []
    for dr, dc in DIAGONAL:
        to_row, to_col = row + dr, col + dc
        if in_palace(piece.color, to_row, to_col) and _can_land(board, to_row, to_col, piece):
            moves.append(Square(to_row, to_col))
    return moves


def _general_moves(board: Board, row: int, col: int, piece: Piece) -> List[Square]:
    """Generate general moves.

    One orthogonal step inside the palace, plus the flying-general capture
    when the enemy general stands on the same file with nothing in between.
    """
    moves = []
    for dr, dc in ORTHOGONAL:
        to_row, to_col = row + dr, col + dc
        if in_palace(piece.color, to_row, to_col) and _can_land(board, to_row, to_col, piece):
            moves.append(Square(to_row, to_col))

    enemy = board.find_general(piece.color.opponent)
    if enemy is not None and enemy.col == col and file_is_clear(board, col, row, enemy.row):
        moves.append(enemy)
    return moves


def _soldier_moves(board: Board, row: int, col: int, piece: Piece) -> List[Square]:
    moves = []
    forward = forward_step(piece.color)
    if _can_land(board, row + forward, col, piece):
        moves.append(Square(row + forward, col))
    if not on_own_side(piece.color, row):
        for dc in (-1, 1):
            if _can_land(board, row, col + dc, piece):
                moves.append(Square(row, col + dc))
    return moves


def file_is_clear(board: Board, col: int, row_a: int, row_b: int) -> bool:
    """True when every square strictly between two rows on a file is empty."""
    low, high = sorted((row_a, row_b))
    return all(board.get_piece(r, col) is None for r in range(low + 1, high))


_GENERATORS: Dict[PieceKind, Callable[[Board, int, int, Piece], List[Square]]] = {
    PieceKind.ROOK: _rook_moves,
    PieceKind.CANNON: _cannon_moves,
    PieceKind.HORSE: _horse_moves,
    PieceKind.ELEPHANT: _elephant_moves,
    PieceKind.ADVISOR: _advisor_moves,
    PieceKind.GENERAL: _general_moves,
    PieceKind.SOLDIER: _soldier_moves,
}


def generate_pseudo_moves(board: Board, square: Square) -> List[Square]:
    """Destinations for the piece on `square`, ignoring self-check."""
    piece = board.piece_at(square)
    if piece is None:
        return []
    return _GENERATORS[piece.kind](board, square.row, square.col, piece)
