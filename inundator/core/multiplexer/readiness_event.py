from dataclasses import dataclass


@dataclass(slots=True, frozen=True)
class ReadinessEvent:
    """A readiness notification for one peer, tagged by its slot index."""

    peer_id: int
    readable: bool = False
    writable: bool = False
    hangup: bool = False
    error: bool = False
    error_code: int = 0
