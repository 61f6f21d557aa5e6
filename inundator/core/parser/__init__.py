from .cursor import Cursor as Cursor
from .parse_result import ParseResult as ParseResult
from .stream_parser import (
    LAST_CHUNK as LAST_CHUNK,
    parse_read as parse_read,
    parse_responses as parse_responses,
)
from .transfer_mode import (
    UNKNOWN as UNKNOWN,
    Chunked as Chunked,
    Fixed as Fixed,
    TransferMode as TransferMode,
    Unknown as Unknown,
)
