import datetime
import io
import os
import pathlib
import sys
import threading
from typing import (
    Callable,
    Dict,
    TextIO,
    TypeVar,
)

import msgspec

from inundator.logging.config.logging_config import LoggingConfig
from inundator.logging.config.stream_type import StreamType
from inundator.logging.models import Entry, Log

T = TypeVar("T", bound=Entry)

DEFAULT_TEMPLATE = "{timestamp} - {level} - {thread_id} - {filename}:{function_name}.{line_number} - {message}"


class LoggerStream:
    """
    Synchronous log stream.

    Entries are rendered through a template to stdout/stderr, or appended
    as msgspec-encoded JSON lines when a log file or directory is set. The
    engine runs a single selector loop, so writes happen inline.
    """

    def __init__(
        self,
        name: str | None = None,
        template: str | None = None,
        filename: str | None = None,
        directory: str | None = None,
        stdout: TextIO | None = None,
        stderr: TextIO | None = None,
    ) -> None:
        self._name = name or "default"
        self._template = template or DEFAULT_TEMPLATE
        self._filename = filename
        self._directory = directory

        self._stdout = stdout
        self._stderr = stderr

        self._config = LoggingConfig()
        self._files: Dict[str, io.BufferedWriter] = {}
        self._closed = False

    @property
    def name(self):
        return self._name

    def log(
        self,
        entry: T,
        template: str | None = None,
        path: str | None = None,
        filter: Callable[[T], bool] | None = None,
    ):
        if self._closed or not self._config.enabled(self._name, entry.level):
            return

        if filter and filter(entry) is False:
            return

        filename, directory = self._resolve_destination(path)

        if filename or directory:
            self._write_json(
                entry,
                self._to_logfile_path(filename, directory),
            )

        else:
            self._write_template(
                entry,
                template or self._template,
            )

    def _resolve_destination(self, path: str | None):
        if path is None:
            return (
                self._filename,
                self._directory or self._config.directory,
            )

        logfile_path = pathlib.Path(path)
        if logfile_path.suffix:
            return logfile_path.name, str(logfile_path.parent.absolute())

        return None, str(logfile_path.absolute())

    def _write_template(
        self,
        entry: T,
        template: str,
    ):
        filename, line_number, function_name = self._find_caller()

        stream = self._stdout or sys.stdout
        if self._config.output == StreamType.STDERR:
            stream = self._stderr or sys.stderr

        stream.write(
            entry.to_template(
                template,
                context={
                    "filename": filename,
                    "function_name": function_name,
                    "line_number": line_number,
                    "thread_id": threading.get_native_id(),
                    "timestamp": datetime.datetime.now(datetime.UTC).isoformat(),
                },
            )
            + "\n"
        )
        stream.flush()

    def _write_json(
        self,
        entry: T,
        logfile_path: str,
    ):
        logfile = self._files.get(logfile_path)
        if logfile is None or logfile.closed:
            logfile = self._open_file(logfile_path)

        filename, line_number, function_name = self._find_caller()

        logfile.write(
            msgspec.json.encode(
                Log(
                    logger=self._name,
                    entry=entry,
                    filename=filename,
                    function_name=function_name,
                    line_number=line_number,
                )
            )
            + b"\n"
        )
        logfile.flush()

    def _open_file(self, logfile_path: str):
        resolved_path = pathlib.Path(logfile_path).absolute().resolve()
        resolved_path.parent.mkdir(parents=True, exist_ok=True)

        logfile = open(resolved_path, "ab")
        self._files[logfile_path] = logfile

        return logfile

    def _to_logfile_path(
        self,
        filename: str | None,
        directory: str | None,
    ):
        if filename is None:
            filename = f"{self._name}.json"

        if directory is None:
            directory = os.path.join(os.getcwd(), "logs")

        assert (
            pathlib.Path(filename).suffix == ".json"
        ), "Err. - file must be JSON file for logs."

        return os.path.join(directory, filename)

    def _find_caller(self):
        """
        Find the stack frame that called log() so the source file name,
        line number and function name can be noted.
        """
        frame = sys._getframe(3)
        code = frame.f_code

        return (
            code.co_filename,
            frame.f_lineno,
            code.co_name,
        )

    def close(self):
        for logfile in self._files.values():
            if not logfile.closed:
                logfile.close()

        self._files.clear()
        self._closed = True
