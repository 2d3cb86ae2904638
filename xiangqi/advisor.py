"""Move-advisor contract: the request sent out and the responses accepted.

The transport behind an advisor (an LLM API, a remote service) lives
outside this package; anything with an async ``advise`` method fits.
"""

from typing import Any, Dict, List, Optional, Protocol

from pydantic import BaseModel, ConfigDict, Field, StrictInt, ValidationError, model_validator

from .board import Move
from .exceptions import AdvisorInvalidResponse


class CandidateMove(BaseModel):
    """One legal move as a pair of [row, col] coordinates."""

    model_config = ConfigDict(populate_by_name=True)

    from_: List[int] = Field(alias="from", min_length=2, max_length=2)
    to: List[int] = Field(min_length=2, max_length=2)

    @classmethod
    def from_move(cls, move: Move) -> "CandidateMove":
        return cls(
            from_=[move.from_square.row, move.from_square.col],
            to=[move.to_square.row, move.to_square.col],
        )

    def to_move(self) -> Move:
        return Move.from_coords(self.from_, self.to)


class RepetitionHints(BaseModel):
    """Anti-repetition context so the advisor can steer clear of loops."""

    avoid_keys: List[str] = []
    recent_keys: List[str] = []
    ping_pong_count: int = 0
    check_streak: Dict[str, int] = {}


class AdvisorRequest(BaseModel):
    """Request model for asking an advisor to pick a move."""

    side: str  # 'r' / 'b'
    board: str  # serialized board text
    candidates: List[CandidateMove]
    repetition: RepetitionHints
    difficulty: str = "medium"
    suggestion: Optional[int] = None  # heuristic pick, advisory only

    def payload(self) -> Dict[str, Any]:
        return self.model_dump(by_alias=True)


class AdvisorResponse(BaseModel):
    """Either a candidate index, or an explicit from/to pair."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    index: Optional[StrictInt] = None
    from_: Optional[List[StrictInt]] = Field(default=None, alias="from", min_length=2, max_length=2)
    to: Optional[List[StrictInt]] = Field(default=None, min_length=2, max_length=2)

    @model_validator(mode="after")
    def _one_shape(self) -> "AdvisorResponse":
        has_pair = self.from_ is not None and self.to is not None
        if self.index is None and not has_pair:
            raise ValueError("response needs an index or a from/to pair")
        if (self.from_ is None) != (self.to is None):
            raise ValueError("from and to must be given together")
        return self

    def resolve(self, candidates: List[Move]) -> int:
        """Map this response onto an index into `candidates`."""
        if self.index is not None:
            if not 0 <= self.index < len(candidates):
                raise AdvisorInvalidResponse(
                    f"index {self.index} out of range for {len(candidates)} candidates"
                )
            return self.index

        move = Move.from_coords(self.from_, self.to)
        try:
            return candidates.index(move)
        except ValueError:
            raise AdvisorInvalidResponse(f"move {move} is not a legal candidate") from None


def parse_response(raw: Any) -> AdvisorResponse:
    """Validate a raw advisor answer, raising AdvisorInvalidResponse."""
    if isinstance(raw, AdvisorResponse):
        return raw
    if not isinstance(raw, dict):
        raise AdvisorInvalidResponse(f"expected a JSON object, got {type(raw).__name__}")
    try:
        return AdvisorResponse.model_validate(raw)
    except ValidationError as e:
        raise AdvisorInvalidResponse(str(e)) from e


class MoveAdvisor(Protocol):
    """External move advisor."""

    async def advise(self, request: AdvisorRequest) -> Any:
        """Return a response dict such as ``{"index": 3}``."""
        ...
