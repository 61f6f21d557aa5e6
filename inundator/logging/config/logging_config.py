import contextvars
from typing import FrozenSet, Literal

from inundator.logging.models import LogLevel, LogLevelName

from .stream_type import StreamType

LogOutput = Literal["stdout", "stderr"]

_log_level = contextvars.ContextVar(
    "inundator_log_level",
    default=LogLevel.ERROR,
)
_log_output = contextvars.ContextVar(
    "inundator_log_output",
    default=StreamType.STDERR,
)
_log_directory: contextvars.ContextVar[str | None] = contextvars.ContextVar(
    "inundator_log_directory",
    default=None,
)
_disabled_streams: contextvars.ContextVar[FrozenSet[str]] = contextvars.ContextVar(
    "inundator_disabled_streams",
    default=frozenset(),
)


class LoggingConfig:
    """
    Process-wide logging settings. Values live in context variables so
    every LoggerStream sees the settings the command line applied.
    """

    def update(
        self,
        log_directory: str | None = None,
        log_level: LogLevelName | None = None,
        log_output: LogOutput | None = None,
    ):
        if log_directory:
            _log_directory.set(log_directory)

        if log_level and (level := LogLevel.to_level(log_level)):
            _log_level.set(level)

        if log_output:
            _log_output.set(StreamType(log_output))

    def disable(self, stream_name: str):
        _disabled_streams.set(_disabled_streams.get() | {stream_name})

    def enabled(
        self,
        stream_name: str,
        level: LogLevel,
    ) -> bool:
        if stream_name in _disabled_streams.get():
            return False

        return _log_level.get().admits(level)

    @property
    def level(self) -> LogLevel:
        return _log_level.get()

    @property
    def output(self) -> StreamType:
        return _log_output.get()

    @property
    def directory(self) -> str | None:
        return _log_directory.get()
