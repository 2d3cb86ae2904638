"""Runtime configuration read from environment variables."""

import os
from dataclasses import dataclass

from .arbiter import DEFAULT_ADVISOR_TIMEOUT, Difficulty

_TRUE_VALUES = {"1", "true", "yes", "on"}


def _env_bool(name: str, default: bool) -> bool:
    value = os.environ.get(name)
    if value is None:
        return default
    return value.strip().lower() in _TRUE_VALUES


@dataclass
class EngineConfig:
    search_depth: int = 2
    use_search: bool = True
    advisor_timeout: float = DEFAULT_ADVISOR_TIMEOUT
    default_difficulty: Difficulty = Difficulty.MEDIUM
    log_level: str = "INFO"
    max_idle_seconds: int = 3600  # idle games are dropped after an hour

    @classmethod
    def from_env(cls) -> "EngineConfig":
        """Build a config from XIANGQI_* variables, keeping defaults for unset ones.

        Raises ValueError for values that do not parse.
        """
        config = cls(
            search_depth=int(os.environ.get("XIANGQI_SEARCH_DEPTH", cls.search_depth)),
            use_search=_env_bool("XIANGQI_USE_SEARCH", cls.use_search),
            advisor_timeout=float(
                os.environ.get("XIANGQI_ADVISOR_TIMEOUT", cls.advisor_timeout)
            ),
            default_difficulty=Difficulty(
                os.environ.get("XIANGQI_DEFAULT_DIFFICULTY", cls.default_difficulty.value)
            ),
            log_level=os.environ.get("XIANGQI_LOG_LEVEL", cls.log_level).upper(),
            max_idle_seconds=int(
                os.environ.get("XIANGQI_MAX_IDLE_SECONDS", cls.max_idle_seconds)
            ),
        )
        if config.search_depth < 1:
            raise ValueError("XIANGQI_SEARCH_DEPTH must be at least 1")
        if config.advisor_timeout <= 0:
            raise ValueError("XIANGQI_ADVISOR_TIMEOUT must be positive")
        return config
