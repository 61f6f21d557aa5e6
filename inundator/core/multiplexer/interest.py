import selectors
from enum import IntFlag


class Interest(IntFlag):
    """Readiness a peer wants to be notified about."""

    NONE = 0
    READ = 1
    WRITE = 2

    def to_events(self) -> int:
        events = 0
        if self & Interest.READ:
            events |= selectors.EVENT_READ

        if self & Interest.WRITE:
            events |= selectors.EVENT_WRITE

        return events
