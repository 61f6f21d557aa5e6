from .http_peer_machine import HTTPPeerMachine as HTTPPeerMachine
from .peer import Peer as Peer
from .peer_state import (
    HTTPPeerState as HTTPPeerState,
    PeerState as PeerState,
    TLSPeerState as TLSPeerState,
)
from .sockets import (
    AddressInfo as AddressInfo,
    close_socket as close_socket,
    open_connection as open_connection,
)
from .step_result import StepResult as StepResult
from .tls_peer_machine import TLSPeerMachine as TLSPeerMachine
