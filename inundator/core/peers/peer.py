from dataclasses import dataclass
from socket import socket as Socket

from inundator.core.multiplexer import Interest
from inundator.core.parser import UNKNOWN, TransferMode
from inundator.core.tls import TLSSession

from .peer_state import PeerState


@dataclass(slots=True)
class Peer:
    peer_id: int
    state: PeerState
    socket: Socket | None = None
    session: TLSSession | None = None
    pending: int = 0
    transfer_mode: TransferMode = UNKNOWN
    leftover: bytes = b""
    outgoing: bytes | None = None
    renegotiations: int = 0
    connect_started: float = 0.0
    connected_once: bool = False
    interest: Interest = Interest.NONE
    advance: bool = False

    def reset(self, state: PeerState):
        """Return the slot to its initial state. The socket must already be closed."""
        self.state = state
        self.socket = None
        self.session = None
        self.pending = 0
        self.transfer_mode = UNKNOWN
        self.leftover = b""
        self.outgoing = None
        self.renegotiations = 0
        self.interest = Interest.NONE
        self.advance = True
