class Cursor:
    """Read position over an owned byte sequence."""

    __slots__ = (
        "data",
        "position",
    )

    def __init__(
        self,
        data: bytes,
        position: int = 0,
    ) -> None:
        self.data = data
        self.position = position

    @property
    def remaining(self) -> int:
        return len(self.data) - self.position

    @property
    def exhausted(self) -> bool:
        return self.position >= len(self.data)

    def rest(self) -> bytes:
        return self.data[self.position:]

    def find(self, needle: bytes) -> int:
        """Offset of needle relative to the cursor, or -1."""
        index = self.data.find(needle, self.position)
        if index < 0:
            return index

        return index - self.position

    def read_line(self, terminator: bytes = b"\r\n") -> bytes | None:
        """
        Return the next line without its terminator and move past it. An
        unterminated line leaves the cursor untouched and returns None.
        """
        offset = self.find(terminator)
        if offset < 0:
            return None

        line = self.data[self.position:self.position + offset]
        self.position += offset + len(terminator)

        return line

    def skip(self, count: int) -> int:
        skipped = min(count, self.remaining)
        self.position += skipped

        return skipped

    def seek_end(self):
        self.position = len(self.data)
