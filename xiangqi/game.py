"""Game aggregate: the authoritative board, turn, history and repetition state."""

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Optional, Tuple

from .attacks import is_in_check
from .board import Board, Color, Move, Piece, Square, create_initial_board, position_key
from .exceptions import IllegalMove
from .repetition import RepetitionTracker
from .rules import GameStatus, classify, collect_all_legal_moves, legal_moves

logger = logging.getLogger(__name__)


@dataclass
class Snapshot:
    """A board copy and the side to move, plus the move that led here."""

    board: Board
    side_to_move: Color
    move: Optional[Move] = None


@dataclass
class MoveResult:
    """Outcome of a committed move."""

    move: Move
    mover: Color
    captured: Optional[Piece]
    gave_check: bool
    status: GameStatus
    ply: int

    @property
    def game_over(self) -> bool:
        return self.status is not GameStatus.ONGOING


@dataclass
class LoggedMove:
    """Entry of an external, append-only multiplayer move log."""

    ply: int
    from_square: Square
    to_square: Square

    @classmethod
    def from_record(cls, record: Dict[str, Any]) -> "LoggedMove":
        """Accept {'ply', 'from', 'to'} with [row, col] pairs or ICCS text."""

        def _square(value) -> Square:
            if isinstance(value, str):
                return Square.from_iccs(value)
            return Square(int(value[0]), int(value[1]))

        return cls(int(record["ply"]), _square(record["from"]), _square(record["to"]))

    @property
    def move(self) -> Move:
        return Move(self.from_square, self.to_square)


@dataclass
class GameState:
    """Single mutable aggregate for one game, changed only via commit_move/undo."""

    board: Board = field(default_factory=create_initial_board)
    side_to_move: Color = Color.RED
    history: List[Snapshot] = field(default_factory=list)
    repetition: RepetitionTracker = field(default_factory=RepetitionTracker)

    def __post_init__(self):
        if not self.history:
            self.history.append(Snapshot(self.board.clone(), self.side_to_move))
            self.repetition.touch(position_key(self.board, self.side_to_move))

    @classmethod
    def new_game(cls) -> "GameState":
        return cls()

    def reset(self, board: Optional[Board] = None, side_to_move: Color = Color.RED) -> None:
        """Start over from `board` (the initial layout by default)."""
        self.board = board.clone() if board is not None else create_initial_board()
        self.side_to_move = side_to_move
        self.history = [Snapshot(self.board.clone(), side_to_move)]
        self.repetition.reset()
        self.repetition.touch(position_key(self.board, side_to_move))

    # -- queries -----------------------------------------------------------

    @property
    def ply(self) -> int:
        """Number of moves committed since the starting snapshot."""
        return len(self.history) - 1

    @property
    def moves(self) -> List[Move]:
        return [snap.move for snap in self.history[1:]]

    def legal_moves(self, square: Square) -> List[Square]:
        return legal_moves(self.board, square, self.side_to_move)

    def all_legal_moves(self) -> List[Move]:
        return collect_all_legal_moves(self.board, self.side_to_move)

    def status(self) -> GameStatus:
        return classify(self.board, self.side_to_move)

    def in_check(self) -> bool:
        return is_in_check(self.board, self.side_to_move)

    def position_key(self) -> str:
        return position_key(self.board, self.side_to_move)

    def snapshots(self) -> List[Tuple[Board, Color]]:
        """Copies of every (board, side to move) state, oldest first."""
        return [(snap.board.clone(), snap.side_to_move) for snap in self.history]

    # -- mutation ----------------------------------------------------------

    def commit_move(self, move: Move) -> MoveResult:
        """Validate and apply a move for the side to move.

        Raises IllegalMove without touching any state when the move is not
        in the legal move list.
        """
        if move.to_square not in legal_moves(self.board, move.from_square, self.side_to_move):
            raise IllegalMove(move, f"not legal for {self.side_to_move.name}")

        mover = self.side_to_move
        captured = self.board.apply(move)
        self.side_to_move = mover.opponent

        gave_check = is_in_check(self.board, self.side_to_move)
        self.repetition.record_move(
            move, mover, gave_check, position_key(self.board, self.side_to_move)
        )
        self.history.append(Snapshot(self.board.clone(), self.side_to_move, move))

        status = classify(self.board, self.side_to_move)
        if status is not GameStatus.ONGOING:
            logger.info("%s after %s by %s", status.value, move, mover.name)
        return MoveResult(move, mover, captured, gave_check, status, self.ply)

    def undo(self, count: int = 1) -> bool:
        """Step back `count` moves. Returns False if there are not enough."""
        if count < 1 or len(self.history) - count < 1:
            return False
        del self.history[-count:]
        last = self.history[-1]
        self.board = last.board.clone()
        self.side_to_move = last.side_to_move
        self._rebuild_repetition()
        return True

    def _rebuild_repetition(self) -> None:
        """Recompute repetition counters by replaying the remaining history."""
        tracker = self.repetition
        tracker.reset()
        start = self.history[0]
        tracker.touch(position_key(start.board, start.side_to_move))
        previous = start
        for snap in self.history[1:]:
            gave_check = is_in_check(snap.board, snap.side_to_move)
            tracker.record_move(
                snap.move,
                previous.side_to_move,
                gave_check,
                position_key(snap.board, snap.side_to_move),
            )
            previous = snap

    def apply_logged_moves(self, entries: Iterable[Any]) -> List[MoveResult]:
        """Replay moves from an external move log through commit_move.

        Entries already applied (ply <= current ply) are skipped; the rest
        must continue the sequence without gaps.
        """
        results = []
        for entry in sorted(
            (e if isinstance(e, LoggedMove) else LoggedMove.from_record(e) for e in entries),
            key=lambda e: e.ply,
        ):
            if entry.ply <= self.ply:
                continue
            if entry.ply != self.ply + 1:
                raise IllegalMove(entry.move, f"ply {entry.ply} does not follow ply {self.ply}")
            results.append(self.commit_move(entry.move))
        return results
