from dataclasses import dataclass


@dataclass(slots=True, frozen=True)
class Unknown:
    """No message body is in progress."""


@dataclass(slots=True, frozen=True)
class Fixed:
    """A Content-Length body with this many bytes still to skip."""

    remaining: int


@dataclass(slots=True, frozen=True)
class Chunked:
    """
    A chunked body whose terminal marker has not been seen yet.

    The last few bytes of the previous read are kept so a marker split
    across two reads is still found.
    """

    tail: bytes = b""


TransferMode = Unknown | Fixed | Chunked

UNKNOWN = Unknown()
