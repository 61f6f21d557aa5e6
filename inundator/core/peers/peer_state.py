from enum import IntEnum


class HTTPPeerState(IntEnum):
    """States of a request/response peer."""

    IDLE = 0
    """Slot not yet admitted by slow start."""

    CONNECTING = 1
    """Non-blocking TCP connect in progress."""

    HANDSHAKING = 2
    """TLS handshake in progress (https only)."""

    READY_TO_SEND = 3
    """Connected with nothing outstanding."""

    AWAITING_RESPONSE = 4
    """At least one request sent and not yet answered."""


class TLSPeerState(IntEnum):
    """States of a handshake/renegotiation peer."""

    IDLE = 0
    """Slot not yet admitted by slow start."""

    TCP_CONNECTING = 1

    TLS_CONNECTING = 2
    """Initial TLS handshake in progress."""

    TLS_HANDSHAKING = 3
    """Renegotiating, or about to renegotiate again."""

    DUMMY_WRITING = 4
    """Sending the one-byte liveness write between renegotiations."""


PeerState = HTTPPeerState | TLSPeerState
