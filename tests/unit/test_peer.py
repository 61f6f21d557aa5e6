import socket
import typing

from inundator.core.multiplexer import Interest
from inundator.core.parser import UNKNOWN, Fixed
from inundator.core.peers import HTTPPeerState, Peer, TLSPeerState


class TestPeer:
    def test_socket_field_is_annotated_with_the_socket_type(self):
        hints = typing.get_type_hints(Peer)

        assert hints["socket"] == socket.socket | None

    def test_holds_a_socket(self):
        left, right = socket.socketpair()

        try:
            peer = Peer(
                peer_id=0,
                state=HTTPPeerState.CONNECTING,
                socket=left,
            )

            assert peer.socket is left

        finally:
            left.close()
            right.close()

    def test_reset_keeps_identity_and_first_connect(self):
        peer = Peer(
            peer_id=4,
            state=TLSPeerState.TLS_HANDSHAKING,
            pending=3,
            transfer_mode=Fixed(10),
            leftover=b"HTTP/1.1",
            renegotiations=12,
            connected_once=True,
            interest=Interest.READ,
        )

        peer.reset(TLSPeerState.TCP_CONNECTING)

        assert peer.peer_id == 4
        assert peer.state == TLSPeerState.TCP_CONNECTING
        assert peer.socket is None
        assert peer.pending == 0
        assert peer.transfer_mode == UNKNOWN
        assert peer.leftover == b""
        assert peer.renegotiations == 0
        assert peer.connected_once
        assert peer.interest == Interest.NONE
        assert peer.advance
