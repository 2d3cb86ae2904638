"""Attack detection, worked outward from the target square.

Mirrors the generator in movegen.py so that check detection agrees with
the moves pieces can actually make.
"""

from .board import Board, Color, PieceKind, Square, in_bounds, in_palace, on_own_side
from .movegen import (
    DIAGONAL,
    ELEPHANT_JUMPS,
    HORSE_JUMPS,
    ORTHOGONAL,
    forward_step,
    horse_leg,
)


def _attacked_along_rays(board: Board, row: int, col: int, by_color: Color) -> bool:
    """Rooks, cannons and the facing general, counting blockers on each ray."""
    occupant = board.get_piece(row, col)
    # Generals only fly at each other.
    general_target = occupant is not None and occupant.kind is PieceKind.GENERAL
    for dr, dc in ORTHOGONAL:
        r, c = row + dr, col + dc
        blockers = 0
        while in_bounds(r, c) and blockers < 2:
            piece = board.get_piece(r, c)
            if piece is not None:
                if piece.color is by_color:
                    if blockers == 0 and piece.kind is PieceKind.ROOK:
                        return True
                    if blockers == 1 and piece.kind is PieceKind.CANNON:
                        return True
                    if (
                        general_target
                        and blockers == 0
                        and piece.kind is PieceKind.GENERAL
                        and dc == 0
                    ):
                        return True
                blockers += 1
            r, c = r + dr, c + dc
    return False


def _attacked_by_horse(board: Board, row: int, col: int, by_color: Color) -> bool:
    for dr, dc in HORSE_JUMPS:
        src_row, src_col = row + dr, col + dc
        piece = board.get_piece(src_row, src_col)
        if piece is None or piece.color is not by_color or piece.kind is not PieceKind.HORSE:
            continue
        # The horse jumps by (-dr, -dc) from its own square.
        leg_row, leg_col = horse_leg(src_row, src_col, -dr, -dc)
        if board.get_piece(leg_row, leg_col) is None:
            return True
    return False


def _attacked_by_elephant(board: Board, row: int, col: int, by_color: Color) -> bool:
    if not on_own_side(by_color, row):
        return False
    for dr, dc in ELEPHANT_JUMPS:
        piece = board.get_piece(row + dr, col + dc)
        if piece is None or piece.color is not by_color or piece.kind is not PieceKind.ELEPHANT:
            continue
        if board.get_piece(row + dr // 2, col + dc // 2) is None:
            return True
    return False


def _attacked_in_palace(board: Board, row: int, col: int, by_color: Color) -> bool:
    """Advisors (diagonal) and the general (orthogonal) within their palace."""
    if not in_palace(by_color, row, col):
        return False
    for deltas, kind in ((DIAGONAL, PieceKind.ADVISOR), (ORTHOGONAL, PieceKind.GENERAL)):
        for dr, dc in deltas:
            piece = board.get_piece(row + dr, col + dc)
            if piece is not None and piece.color is by_color and piece.kind is kind:
                return True
    return False


def _attacked_by_soldier(board: Board, row: int, col: int, by_color: Color) -> bool:
    # An attacking soldier stands one step behind the target from its own
    # point of view: Red soldiers below (row + 1), Black soldiers above.
    piece = board.get_piece(row - forward_step(by_color), col)
    if piece is not None and piece.color is by_color and piece.kind is PieceKind.SOLDIER:
        return True
    if on_own_side(by_color, row):
        return False  # sideways steps only happen past the river
    for dc in (-1, 1):
        piece = board.get_piece(row, col + dc)
        if piece is not None and piece.color is by_color and piece.kind is PieceKind.SOLDIER:
            return True
    return False


def is_square_attacked(board: Board, target: Square, by_color: Color) -> bool:
    """Whether any piece of `by_color` could move onto `target`."""
    row, col = target.row, target.col
    return (
        _attacked_along_rays(board, row, col, by_color)
        or _attacked_by_horse(board, row, col, by_color)
        or _attacked_by_elephant(board, row, col, by_color)
        or _attacked_in_palace(board, row, col, by_color)
        or _attacked_by_soldier(board, row, col, by_color)
    )


def is_in_check(board: Board, color: Color) -> bool:
    """Check if the given side's general is attacked.

    A missing general counts as being in check so that positions reached by
    capturing it are never treated as safe.
    """
    general = board.find_general(color)
    if general is None:
        return True
    return is_square_attacked(board, general, color.opponent)
