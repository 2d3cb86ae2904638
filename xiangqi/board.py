"""Xiangqi board representation and text serialization."""

from enum import Enum
from typing import Iterator, List, Optional, Tuple
from dataclasses import dataclass

from .exceptions import MalformedBoard


class Color(Enum):
    """Player sides."""

    RED = "r"  # Bottom side, moves first
    BLACK = "b"  # Top side

    @property
    def opponent(self) -> "Color":
        return Color.BLACK if self is Color.RED else Color.RED


class PieceKind(Enum):
    """Piece kinds, valued by their text-format letter."""

    GENERAL = "K"
    ADVISOR = "A"
    ELEPHANT = "B"
    HORSE = "N"
    ROOK = "R"
    CANNON = "C"
    SOLDIER = "P"


@dataclass(frozen=True)
class Piece:
    """Represents a piece on the board."""

    kind: PieceKind
    color: Color

    @property
    def symbol(self) -> str:
        """Text-format letter: uppercase for Red, lowercase for Black."""
        letter = self.kind.value
        return letter if self.color is Color.RED else letter.lower()

    @classmethod
    def from_symbol(cls, symbol: str) -> "Piece":
        try:
            kind = PieceKind(symbol.upper())
        except ValueError:
            raise MalformedBoard(f"Unrecognized piece character: {symbol!r}") from None
        color = Color.RED if symbol.isupper() else Color.BLACK
        return cls(kind, color)

    def __str__(self) -> str:
        return self.symbol


FILES = "abcdefghi"


@dataclass(frozen=True, order=True)
class Square:
    """A board intersection. Row 0 is Black's back rank, row 9 Red's."""

    row: int  # 0-9
    col: int  # 0-8

    def to_iccs(self) -> str:
        """ICCS coordinate, e.g. row 9 col 4 -> 'e0'."""
        return f"{FILES[self.col]}{9 - self.row}"

    @classmethod
    def from_iccs(cls, text: str) -> "Square":
        """Parse ICCS coordinates such as 'e0' or 'h7'."""
        if len(text) != 2 or text[0] not in FILES or not text[1].isdigit():
            raise ValueError(f"Invalid square notation: {text!r}")
        return cls(9 - int(text[1]), FILES.index(text[0]))

    def __str__(self) -> str:
        return self.to_iccs()


@dataclass(frozen=True)
class Move:
    """Represents a move. Only meaningful relative to a board and side."""

    from_square: Square
    to_square: Square

    def __str__(self) -> str:
        return self.to_iccs()

    def to_iccs(self) -> str:
        """Convert to ICCS notation, e.g. 'h2e2'."""
        return f"{self.from_square.to_iccs()}{self.to_square.to_iccs()}"

    @classmethod
    def from_iccs(cls, text: str) -> "Move":
        """Parse ICCS notation."""
        if len(text) != 4:
            raise ValueError(f"Invalid move notation: {text!r}")
        return cls(Square.from_iccs(text[:2]), Square.from_iccs(text[2:]))

    @classmethod
    def from_coords(cls, from_rc, to_rc) -> "Move":
        """Build from [row, col] pairs as used by the advisor contract."""
        return cls(Square(int(from_rc[0]), int(from_rc[1])), Square(int(to_rc[0]), int(to_rc[1])))

    def reversed(self) -> "Move":
        return Move(self.to_square, self.from_square)


ROWS = 10
COLS = 9


def in_bounds(row: int, col: int) -> bool:
    return 0 <= row < ROWS and 0 <= col < COLS


def in_palace(color: Color, row: int, col: int) -> bool:
    """Check if a square is in the palace for the given side."""
    if not 3 <= col <= 5:
        return False
    if color is Color.BLACK:
        return 0 <= row <= 2
    return 7 <= row <= 9


def on_own_side(color: Color, row: int) -> bool:
    """River lies between rows 4 and 5; Black owns 0-4, Red owns 5-9."""
    if color is Color.BLACK:
        return row <= 4
    return row >= 5


class Board:
    """Xiangqi board representation."""

    ROWS = ROWS
    COLS = COLS

    def __init__(self, grid: Optional[List[List[Optional[Piece]]]] = None):
        """Create an empty board, or wrap an existing 10x9 grid."""
        if grid is None:
            grid = [[None for _ in range(self.COLS)] for _ in range(self.ROWS)]
        self.grid: List[List[Optional[Piece]]] = grid

    def get_piece(self, row: int, col: int) -> Optional[Piece]:
        """Get piece at given coordinates, None when empty or off-board."""
        if in_bounds(row, col):
            return self.grid[row][col]
        return None

    def piece_at(self, square: Square) -> Optional[Piece]:
        return self.get_piece(square.row, square.col)

    def set_piece(self, row: int, col: int, piece: Optional[Piece]) -> None:
        self.grid[row][col] = piece

    def clone(self) -> "Board":
        # Pieces are immutable, so copying the rows is enough.
        return Board([row[:] for row in self.grid])

    def apply(self, move: Move) -> Optional[Piece]:
        """Move a piece in place and return whatever it captured.

        No legality checks; callers use this on clones or after validation.
        """
        src, dst = move.from_square, move.to_square
        piece = self.grid[src.row][src.col]
        captured = self.grid[dst.row][dst.col]
        self.grid[dst.row][dst.col] = piece
        self.grid[src.row][src.col] = None
        return captured

    def moved(self, move: Move) -> "Board":
        """Return a copy of this board with the move applied."""
        board = self.clone()
        board.apply(move)
        return board

    def pieces(self, color: Optional[Color] = None) -> Iterator[Tuple[Square, Piece]]:
        """Iterate over occupied squares in row-major order."""
        for row in range(self.ROWS):
            for col in range(self.COLS):
                piece = self.grid[row][col]
                if piece is not None and (color is None or piece.color is color):
                    yield Square(row, col), piece

    def find_general(self, color: Color) -> Optional[Square]:
        """Get general position for given side."""
        for square, piece in self.pieces(color):
            if piece.kind is PieceKind.GENERAL:
                return square
        return None

    def __eq__(self, other) -> bool:
        if not isinstance(other, Board):
            return NotImplemented
        return self.grid == other.grid

    def __str__(self) -> str:
        lines = []
        for row in range(self.ROWS):
            cells = "".join(
                (p.symbol if p else ".") for p in self.grid[row]
            )
            lines.append(f"{9 - row} {cells}")
        lines.append("  " + FILES)
        return "\n".join(lines)

    def __repr__(self) -> str:
        return f"Board({serialize(self)!r})"


_BACK_RANK = (
    PieceKind.ROOK,
    PieceKind.HORSE,
    PieceKind.ELEPHANT,
    PieceKind.ADVISOR,
    PieceKind.GENERAL,
    PieceKind.ADVISOR,
    PieceKind.ELEPHANT,
    PieceKind.HORSE,
    PieceKind.ROOK,
)


def create_initial_board() -> Board:
    """Set up the starting position."""
    board = Board()
    for color, back, cannons, soldiers in (
        (Color.BLACK, 0, 2, 3),
        (Color.RED, 9, 7, 6),
    ):
        for col, kind in enumerate(_BACK_RANK):
            board.set_piece(back, col, Piece(kind, color))
        board.set_piece(cannons, 1, Piece(PieceKind.CANNON, color))
        board.set_piece(cannons, 7, Piece(PieceKind.CANNON, color))
        for col in (0, 2, 4, 6, 8):
            board.set_piece(soldiers, col, Piece(PieceKind.SOLDIER, color))
    return board


def serialize(board: Board) -> str:
    """Ten rows joined by '/', '.' for empty squares."""
    return "/".join(
        "".join(p.symbol if p else "." for p in row) for row in board.grid
    )


def deserialize(text: str) -> Board:
    """Parse the compact board text. Fails closed with MalformedBoard."""
    if not isinstance(text, str):
        raise MalformedBoard(f"Board text must be a string, got {type(text).__name__}")
    rows = text.split("/")
    if len(rows) != ROWS:
        raise MalformedBoard(f"Expected {ROWS} rows, got {len(rows)}")
    grid = []
    for index, row in enumerate(rows):
        if len(row) != COLS:
            raise MalformedBoard(f"Row {index} has {len(row)} columns, expected {COLS}")
        grid.append([None if ch == "." else Piece.from_symbol(ch) for ch in row])
    return Board(grid)


def position_key(board: Board, side: Color) -> str:
    """Canonical key of (placement, side to move next) for repetition counting."""
    return f"{serialize(board)}|{side.value}"
