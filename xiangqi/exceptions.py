"""Exception types raised by the Xiangqi engine."""


class XiangqiError(Exception):
    """Base class for engine errors."""


class MalformedBoard(XiangqiError):
    """Board text could not be parsed."""


class IllegalMove(XiangqiError):
    """Requested move is not legal for the side to move."""

    def __init__(self, move, reason: str = "not a legal move"):
        self.move = move
        self.reason = reason
        super().__init__(f"Illegal move {move}: {reason}")


class AdvisorError(XiangqiError):
    """Base class for move-advisor failures. Always recoverable."""


class AdvisorUnavailable(AdvisorError):
    """Advisor could not be reached, errored or timed out."""


class AdvisorInvalidResponse(AdvisorError):
    """Advisor answered with something that cannot be played."""
