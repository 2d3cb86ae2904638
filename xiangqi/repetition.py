"""Repetition, ping-pong and perpetual-check tracking for one game.

Counts are keyed by position_key(board, side_to_move). Keys seen at least
AVOID_THRESHOLD times make up the avoid set that the scorer and the arbiter
steer away from.
"""

from collections import deque
from typing import Deque, Dict, Optional, Set

from .board import Color, Move

AVOID_THRESHOLD = 4
PINGPONG_LIMIT = 5
CHECK_STREAK_LIMIT = 5
RECENT_KEYS_CAPACITY = 40
HINT_RECENT_KEYS = 20

WARNING_TEXT = "Avoid repetition and perpetual check: choose a different move"


class RepetitionTracker:
    """Stateful anti-perpetual counters owned by a single game."""

    def __init__(self):
        self.counts: Dict[str, int] = {}
        self.recent_keys: Deque[str] = deque(maxlen=RECENT_KEYS_CAPACITY)
        self.ping_pong_count = 0
        self.check_streak: Dict[Color, int] = {Color.RED: 0, Color.BLACK: 0}
        self._last_move: Optional[Move] = None
        self._prev_move: Optional[Move] = None

    @classmethod
    def from_hints(cls, hints: Dict) -> "RepetitionTracker":
        """Rebuild enough state from advisor hints to score moves against it.

        Recent keys are kept for reference only and do not add to the
        position counts; only `avoid_keys` feed the avoid set. Move history
        is not part of the hints, so ping-pong detection for future moves
        starts fresh.
        """
        tracker = cls()
        tracker.recent_keys.extend(hints.get("recent_keys", []))
        for key in hints.get("avoid_keys", []):
            tracker.counts[key] = AVOID_THRESHOLD
        tracker.ping_pong_count = int(hints.get("ping_pong_count", 0))
        for value, n in hints.get("check_streak", {}).items():
            tracker.check_streak[Color(value)] = int(n)
        return tracker

    def reset(self) -> None:
        self.counts.clear()
        self.recent_keys.clear()
        self.ping_pong_count = 0
        self.check_streak = {Color.RED: 0, Color.BLACK: 0}
        self._last_move = None
        self._prev_move = None

    def touch(self, key: str) -> int:
        """Count one occurrence of a position and return its new count."""
        count = self.counts.get(key, 0) + 1
        self.counts[key] = count
        self.recent_keys.append(key)
        return count

    def is_ping_pong(self, move: Move) -> bool:
        """Whether `move` undoes the same side's previous move (two plies back)."""
        return self._prev_move is not None and move == self._prev_move.reversed()

    def record_move(self, move: Move, mover: Color, gave_check: bool, key: str) -> None:
        """Update every counter for a committed move.

        `key` is the position key of the resulting board with the opponent
        to move.
        """
        if self.is_ping_pong(move):
            self.ping_pong_count += 1
        else:
            self.ping_pong_count = 0

        self.check_streak[mover] = self.check_streak[mover] + 1 if gave_check else 0

        self._prev_move = self._last_move
        self._last_move = move
        self.touch(key)

    def count(self, key: str) -> int:
        return self.counts.get(key, 0)

    def avoid_set(self) -> Set[str]:
        return {key for key, count in self.counts.items() if count >= AVOID_THRESHOLD}

    def ping_pong_exceeded(self) -> bool:
        return self.ping_pong_count >= PINGPONG_LIMIT

    def check_streak_exceeded(self, color: Color) -> bool:
        return self.check_streak[color] >= CHECK_STREAK_LIMIT

    def hints(self) -> Dict:
        """Repetition hints in the shape the move advisor expects."""
        return {
            "avoid_keys": sorted(self.avoid_set()),
            "recent_keys": list(self.recent_keys)[-HINT_RECENT_KEYS:],
            "ping_pong_count": self.ping_pong_count,
            "check_streak": {color.value: n for color, n in self.check_streak.items()},
        }

    def warnings(self) -> Dict:
        """Status-bar style warning plus the limits and hints behind it."""
        flagged = (
            bool(self.avoid_set())
            or self.ping_pong_exceeded()
            or any(self.check_streak_exceeded(color) for color in Color)
        )
        return {
            "text": WARNING_TEXT if flagged else "",
            "limits": {
                "avoid_threshold": AVOID_THRESHOLD,
                "pingpong_limit": PINGPONG_LIMIT,
                "check_streak_limit": CHECK_STREAK_LIMIT,
            },
            "repetition": self.hints(),
        }
