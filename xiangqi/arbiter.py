"""Move selection per difficulty tier, with an optional external advisor.

The advisor is consulted best-effort: its answer is validated against the
legal move list and the repetition avoid set, and any failure falls back to
the local heuristic ranking.
"""

import asyncio
import logging
from dataclasses import dataclass
from enum import Enum
from typing import List, Optional

import numpy as np

from .advisor import AdvisorRequest, CandidateMove, MoveAdvisor, RepetitionHints, parse_response
from .board import Board, Color, Move, serialize
from .engine import Engine
from .exceptions import AdvisorError, AdvisorInvalidResponse, AdvisorUnavailable
from .repetition import RepetitionTracker
from .rules import collect_all_legal_moves
from .scoring import ScoredMove, rank_moves

logger = logging.getLogger(__name__)

EASY_KEEP_TOP = 0.6
MEDIUM_TEMPERATURE = 1.2
DEFAULT_ADVISOR_TIMEOUT = 8.0


class Difficulty(str, Enum):
    EASY = "easy"
    MEDIUM = "medium"
    HARD = "hard"


@dataclass
class Decision:
    """The chosen move and where it came from."""

    move: Optional[Move]
    source: str  # "heuristic", "search", "advisor" or "fallback"
    score: Optional[float] = None
    advisor_error: Optional[str] = None


def fallback_choice(ranked: List[ScoredMove]) -> Optional[ScoredMove]:
    """Top-ranked move whose result is not avoided, else the overall top."""
    if not ranked:
        return None
    for item in ranked:
        if not item.avoided:
            return item
    return ranked[0]


class MoveArbiter:
    """Chooses moves for an automated player."""

    def __init__(
        self,
        use_search: bool = True,
        search_depth: int = 2,
        seed: Optional[int] = None,
        advisor_timeout: float = DEFAULT_ADVISOR_TIMEOUT,
    ):
        self.use_search = use_search
        self.engine = Engine(depth=search_depth) if use_search else None
        self.rng = np.random.default_rng(seed)
        self.advisor_timeout = advisor_timeout

    # -- local tiers -------------------------------------------------------

    def pick_from_ranking(self, ranked: List[ScoredMove], difficulty: Difficulty) -> Optional[ScoredMove]:
        """Heuristic-only pick: easy samples the top slice, medium uses softmax."""
        if not ranked:
            return None
        difficulty = Difficulty(difficulty)
        if difficulty is Difficulty.EASY:
            top_k = max(1, int(len(ranked) * EASY_KEEP_TOP))
            return ranked[int(self.rng.integers(top_k))]
        if difficulty is Difficulty.MEDIUM:
            scores = np.array([item.score for item in ranked], dtype=float)
            weights = np.exp((scores - scores.max()) / MEDIUM_TEMPERATURE)
            probs = weights / weights.sum()
            return ranked[int(self.rng.choice(len(ranked), p=probs))]
        return ranked[0]

    def choose_move(
        self,
        board: Board,
        side: Color,
        tracker: RepetitionTracker,
        difficulty: Difficulty = Difficulty.MEDIUM,
    ) -> Decision:
        """Pick a move without consulting any advisor."""
        difficulty = Difficulty(difficulty)
        ranked = rank_moves(board, side, tracker)
        if not ranked:
            return Decision(None, "heuristic")

        if difficulty is Difficulty.HARD and self.engine is not None:
            move = self.engine.search(board, side)
            chosen = next((item for item in ranked if item.move == move), None)
            if chosen is not None and not chosen.avoided:
                logger.debug(
                    "search picked %s (score %s, %d nodes)",
                    move, self.engine.best_score, self.engine.nodes_searched,
                )
                return Decision(move, "search", self.engine.best_score)
            logger.info("search move %s repeats an avoided position, using fallback", move)
            pick = fallback_choice(ranked)
            return Decision(pick.move, "fallback", pick.score)

        pick = self.pick_from_ranking(ranked, difficulty)
        return Decision(pick.move, "heuristic", pick.score)

    # -- advisor path ------------------------------------------------------

    def build_request(
        self,
        board: Board,
        side: Color,
        tracker: RepetitionTracker,
        difficulty: Difficulty,
        moves: List[Move],
        suggestion: Optional[int] = None,
    ) -> AdvisorRequest:
        return AdvisorRequest(
            side=side.value,
            board=serialize(board),
            candidates=[CandidateMove.from_move(m) for m in moves],
            repetition=RepetitionHints(**tracker.hints()),
            difficulty=Difficulty(difficulty).value,
            suggestion=suggestion,
        )

    async def _ask(self, advisor: MoveAdvisor, request: AdvisorRequest, timeout: float):
        try:
            return await asyncio.wait_for(advisor.advise(request), timeout)
        except asyncio.TimeoutError:
            raise AdvisorUnavailable(f"advisor did not answer within {timeout}s") from None
        except AdvisorError:
            raise
        except Exception as e:
            raise AdvisorUnavailable(f"advisor call failed: {e}") from e

    async def choose_move_with_advisor(
        self,
        board: Board,
        side: Color,
        tracker: RepetitionTracker,
        difficulty: Difficulty,
        advisor: Optional[MoveAdvisor],
        timeout: Optional[float] = None,
    ) -> Decision:
        """Ask the advisor for a move, validating it before trusting it.

        Works on a snapshot of the board, so cancelling the call leaves no
        partial state behind.
        """
        if advisor is None:
            return self.choose_move(board, side, tracker, difficulty)

        board = board.clone()
        moves = collect_all_legal_moves(board, side)
        if not moves:
            return Decision(None, "advisor")

        ranked = rank_moves(board, side, tracker, moves)
        suggestion = self.pick_from_ranking(ranked, difficulty)
        request = self.build_request(
            board, side, tracker, difficulty, moves, suggestion.index
        )

        if timeout is None:
            timeout = self.advisor_timeout
        try:
            raw = await self._ask(advisor, request, timeout)
            index = parse_response(raw).resolve(moves)
            chosen = next(item for item in ranked if item.index == index)
            if chosen.avoided:
                raise AdvisorInvalidResponse(f"move {chosen.move} repeats an avoided position")
        except AdvisorError as e:
            logger.warning("advisor answer rejected (%s): %s", type(e).__name__, e)
            pick = fallback_choice(ranked)
            return Decision(pick.move, "fallback", pick.score, advisor_error=str(e))

        return Decision(chosen.move, "advisor", chosen.score)
