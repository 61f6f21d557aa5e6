"""
Response framing for request/response peers.

The parser counts complete HTTP/1.1 responses in a byte stream. It only
frames messages: a status line, header lines up to the blank separator,
then a body sized either by Content-Length or by the terminal chunk of a
chunked body. Nothing inside a body is interpreted.

Chunked bodies are completed by locating the terminal marker 0\\r\\n\\r\\n,
without reading the chunk-size fields. Chunk data that happens to contain
the marker ends the message early. This is a known limitation.
"""

from inundator.errors import BufferOverflow, UnknownTransferMode

from .cursor import Cursor
from .parse_result import ParseResult
from .transfer_mode import (
    UNKNOWN,
    Chunked,
    Fixed,
    TransferMode,
    Unknown,
)

LAST_CHUNK = b"0\r\n\r\n"
CONTENT_LENGTH = b"content-length"
TRANSFER_ENCODING = b"transfer-encoding"
CHUNKED = b"chunked"


def parse_read(
    data: bytes,
    capacity: int,
    mode: TransferMode = UNKNOWN,
    leftover: bytes = b"",
) -> ParseResult:
    """
    Parse one read. A read that filled the receive buffer may have left
    data in the socket that would be framed wrongly, so it is fatal.
    """
    if len(data) >= capacity:
        raise BufferOverflow(
            "Read buffer filled up, raise the read buffer size",
            capacity=capacity,
        )

    return parse_responses(leftover + data, mode)


def parse_responses(
    buffer: bytes,
    mode: TransferMode = UNKNOWN,
) -> ParseResult:
    cursor = Cursor(buffer)
    completed = 0

    match mode:
        case Chunked(tail=tail):
            mode = _consume_chunked(cursor, tail)
            if isinstance(mode, Chunked):
                return ParseResult(
                    completed=0,
                    mode=mode,
                    consumed=cursor.position,
                )

            completed += 1

        case Fixed(remaining=remaining):
            mode = _consume_fixed(cursor, remaining)
            if isinstance(mode, Fixed):
                return ParseResult(
                    completed=0,
                    mode=mode,
                    consumed=cursor.position,
                )

            completed += 1

    while not cursor.exhausted:
        message_start = cursor.position
        framing = _read_head(cursor)

        if framing is None:
            return ParseResult(
                completed=completed,
                mode=UNKNOWN,
                leftover=buffer[message_start:],
                consumed=message_start,
            )

        match framing:
            case Fixed(remaining=length):
                mode = _consume_fixed(cursor, length)

            case Chunked():
                mode = _consume_chunked(cursor, b"")

        if not isinstance(mode, Unknown):
            return ParseResult(
                completed=completed,
                mode=mode,
                consumed=cursor.position,
            )

        completed += 1

    return ParseResult(
        completed=completed,
        mode=UNKNOWN,
        consumed=cursor.position,
    )


def _consume_fixed(cursor: Cursor, remaining: int) -> TransferMode:
    skipped = cursor.skip(remaining)
    if skipped < remaining:
        return Fixed(remaining - skipped)

    return UNKNOWN


def _consume_chunked(cursor: Cursor, tail: bytes) -> TransferMode:
    window = tail + cursor.rest()
    index = window.find(LAST_CHUNK)

    if index < 0:
        cursor.seek_end()
        return Chunked(window[-(len(LAST_CHUNK) - 1):])

    cursor.skip(index + len(LAST_CHUNK) - len(tail))

    return UNKNOWN


def _read_head(cursor: Cursor) -> Fixed | Chunked | None:
    """
    Read a status line and header block. Returns the body framing, or
    None when the head is not fully buffered yet.
    """
    status_line = cursor.read_line()
    if status_line is None:
        return None

    framing: Fixed | Chunked | None = None

    while (line := cursor.read_line()) is not None:
        if len(line) == 0:
            break

        if framing is None:
            framing = _framing_from_header(line)

    else:
        return None

    if framing is None:
        raise UnknownTransferMode(
            "Cannot detect the transfer mode",
            status_line=status_line.decode(errors="replace"),
        )

    return framing


def _framing_from_header(line: bytes) -> Fixed | Chunked | None:
    name, separator, value = line.partition(b":")
    if not separator:
        return None

    name = name.strip().lower()

    if name == CONTENT_LENGTH:
        try:
            return Fixed(int(value.strip()))

        except ValueError as err:
            raise UnknownTransferMode(
                "Malformed Content-Length header",
                cause=err,
                header=line.decode(errors="replace"),
            )

    if name == TRANSFER_ENCODING and CHUNKED in value.lower():
        return Chunked()

    return None
