import pathlib
from typing import Dict, TextIO

from .logger_stream import LoggerStream


class Logger:
    """Registry of named streams, closed together at the end of a run."""

    def __init__(self) -> None:
        self._streams: Dict[str, LoggerStream] = {}

    def __getitem__(self, name: str) -> LoggerStream:
        return self._streams.setdefault(name, LoggerStream(name=name))

    def get_stream(
        self,
        name: str = "default",
        template: str | None = None,
        path: str | None = None,
        stdout: TextIO | None = None,
        stderr: TextIO | None = None,
    ) -> LoggerStream:
        filename: str | None = None
        directory: str | None = None

        if path:
            logfile_path = pathlib.Path(path)
            if logfile_path.suffix:
                filename = logfile_path.name
                directory = str(logfile_path.parent.absolute())

            else:
                directory = str(logfile_path.absolute())

        if (existing := self._streams.pop(name, None)) is not None:
            existing.close()

        stream = LoggerStream(
            name=name,
            template=template,
            filename=filename,
            directory=directory,
            stdout=stdout,
            stderr=stderr,
        )
        self._streams[name] = stream

        return stream

    def close(self):
        for stream in self._streams.values():
            stream.close()

        self._streams.clear()
