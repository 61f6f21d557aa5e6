from __future__ import annotations

from enum import Enum
from typing import Literal

LogLevelName = Literal[
    "trace",
    "debug",
    "info",
    "warn",
    "error",
    "critical",
    "fatal",
]


class LogLevel(Enum):
    """Entry severity, declared from least to most severe."""

    TRACE = "TRACE"
    DEBUG = "DEBUG"
    INFO = "INFO"
    WARN = "WARN"
    ERROR = "ERROR"
    CRITICAL = "CRITICAL"
    FATAL = "FATAL"

    @property
    def rank(self) -> int:
        return list(LogLevel).index(self)

    def admits(self, level: LogLevel) -> bool:
        """Whether an entry at level passes this threshold."""
        return level.rank >= self.rank

    @classmethod
    def to_level(cls, level_name: str) -> LogLevel | None:
        try:
            return cls(level_name.upper())

        except ValueError:
            return None
