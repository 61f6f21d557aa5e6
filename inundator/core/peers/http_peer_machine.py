import socket
from dataclasses import replace
from typing import Callable

from inundator.core.models import RunConfig, build_request
from inundator.core.multiplexer import Interest, ReadinessEvent
from inundator.core.parser import parse_read
from inundator.core.stats import StatisticsAggregator
from inundator.core.tls import (
    TLSError,
    TLSSession,
    TLSWant,
    TLSWantRead,
    TLSWantWrite,
)
from inundator.errors import BootstrapError, PeerSocketError

from .peer import Peer
from .peer_state import HTTPPeerState
from .sockets import (
    HANGUP_ERRORS,
    IN_PROGRESS,
    AddressInfo,
    Connector,
    open_connection,
    pending_connect_error,
)
from .step_result import CONTINUE, HANGUP, StepResult

SessionFactory = Callable[[socket.socket], TLSSession]


class HTTPPeerMachine:
    """
    Request/response cycling: connect, optional TLS handshake, then send
    the prebuilt GET and count the responses as they are framed.
    """

    initial_state = HTTPPeerState.CONNECTING
    idle_state = HTTPPeerState.IDLE

    def __init__(
        self,
        config: RunConfig,
        stats: StatisticsAggregator,
        address_info: AddressInfo,
        write_buffer_size: int = 1024,
        read_buffer_size: int = 65536,
        session_factory: SessionFactory | None = None,
        connector: Connector = open_connection,
    ) -> None:
        self._endpoint = config.endpoint
        self._stats = stats
        self._address_info = address_info
        self._pipeline_depth = config.pipeline_depth
        self._max_requests = config.max_requests
        self._read_buffer_size = read_buffer_size
        self._session_factory = session_factory
        self._connector = connector

        self._request = build_request(
            self._endpoint,
            write_buffer_size,
        )

    @property
    def request(self):
        return self._request

    def is_connecting(self, peer: Peer):
        return peer.state in (
            HTTPPeerState.CONNECTING,
            HTTPPeerState.HANDSHAKING,
        )

    def is_established(self, peer: Peer):
        return peer.state in (
            HTTPPeerState.READY_TO_SEND,
            HTTPPeerState.AWAITING_RESPONSE,
        )

    def advance(
        self,
        peer: Peer,
        now: float,
    ) -> StepResult:
        peer.advance = False

        if peer.state == HTTPPeerState.CONNECTING and peer.socket is None:
            return self._connect(peer, now)

        return CONTINUE

    def step(
        self,
        peer: Peer,
        event: ReadinessEvent,
    ) -> StepResult:
        if peer.state == HTTPPeerState.CONNECTING:
            return self._finish_connect(peer, event)

        if event.error:
            raise PeerSocketError(
                "Socket error reported by the multiplexer",
                peer_id=peer.peer_id,
                state=peer.state.name,
                errno=event.error_code,
            )

        if event.hangup:
            return HANGUP

        match peer.state:
            case HTTPPeerState.HANDSHAKING:
                return self._handshake(peer)

            case HTTPPeerState.READY_TO_SEND | HTTPPeerState.AWAITING_RESPONSE:
                return self._transfer(peer, event)

            case _:
                return CONTINUE

    def _connect(
        self,
        peer: Peer,
        now: float,
    ):
        sock, result = self._connector(self._address_info)

        peer.socket = sock
        peer.connect_started = now
        peer.state = HTTPPeerState.CONNECTING

        if result in IN_PROGRESS:
            peer.interest = Interest.WRITE
            return CONTINUE

        if result != 0:
            raise PeerSocketError(
                "Connect failed",
                peer_id=peer.peer_id,
                errno=result,
                target=str(self._endpoint),
            )

        return self._connected(peer)

    def _finish_connect(
        self,
        peer: Peer,
        event: ReadinessEvent,
    ):
        result = event.error_code or pending_connect_error(peer.socket)

        if result in IN_PROGRESS:
            return CONTINUE

        if result != 0:
            raise PeerSocketError(
                "Connect failed",
                peer_id=peer.peer_id,
                errno=result,
                target=str(self._endpoint),
            )

        return self._connected(peer)

    def _connected(self, peer: Peer):
        self._stats.record_connection()

        first_connect = not peer.connected_once
        peer.connected_once = True

        if self._endpoint.protocol == "https":
            peer.session = self._session_factory(peer.socket)
            peer.state = HTTPPeerState.HANDSHAKING
            result = self._handshake(peer)

        else:
            peer.state = HTTPPeerState.READY_TO_SEND
            peer.interest = self._desired_interest(peer)
            result = CONTINUE

        return replace(result, first_connect=first_connect)

    def _handshake(self, peer: Peer):
        try:
            peer.session.do_handshake()

        except TLSWantRead:
            peer.interest = Interest.READ
            return CONTINUE

        except TLSWantWrite:
            peer.interest = Interest.WRITE
            return CONTINUE

        except TLSError as err:
            if self._stats.tls_connects == 0:
                raise BootstrapError(
                    "TLS handshake failed, target does not look like TLS",
                    cause=err,
                    target=str(self._endpoint),
                )

            return HANGUP

        self._stats.record_tls_connect()

        peer.state = HTTPPeerState.READY_TO_SEND
        peer.interest = self._desired_interest(peer)

        return CONTINUE

    def _transfer(
        self,
        peer: Peer,
        event: ReadinessEvent,
    ):
        if event.readable:
            result = self._receive(peer)
            if result.recycle:
                return result

        if event.writable:
            result = self._send(peer)
            if result.recycle:
                return result

        peer.interest = self._desired_interest(peer)

        return CONTINUE

    def _receive(self, peer: Peer):
        try:
            if peer.session:
                data = peer.session.recv(self._read_buffer_size)

            else:
                data = peer.socket.recv(self._read_buffer_size)

        except (BlockingIOError, TLSWant):
            return CONTINUE

        except (*HANGUP_ERRORS, TLSError):
            return HANGUP

        except OSError as err:
            raise PeerSocketError(
                "Read failed",
                cause=err,
                peer_id=peer.peer_id,
            )

        if len(data) == 0:
            return HANGUP

        result = parse_read(
            data,
            self._read_buffer_size,
            mode=peer.transfer_mode,
            leftover=peer.leftover,
        )

        peer.transfer_mode = result.mode
        peer.leftover = result.leftover

        completed = min(result.completed, peer.pending)
        peer.pending -= completed
        self._stats.record_completions(completed)

        if peer.pending == 0 and peer.outgoing is None:
            peer.state = HTTPPeerState.READY_TO_SEND

        return CONTINUE

    def _send(self, peer: Peer):
        if peer.outgoing is None:
            if not self._can_send(peer):
                return CONTINUE

            peer.outgoing = self._request
            peer.pending += 1
            self._stats.record_attempt()
            peer.state = HTTPPeerState.AWAITING_RESPONSE

        try:
            if peer.session:
                sent = peer.session.send(peer.outgoing)

            else:
                sent = peer.socket.send(peer.outgoing)

        except (BlockingIOError, TLSWant):
            return CONTINUE

        except (*HANGUP_ERRORS, TLSError):
            return HANGUP

        except OSError as err:
            raise PeerSocketError(
                "Write failed",
                cause=err,
                peer_id=peer.peer_id,
            )

        peer.outgoing = peer.outgoing[sent:] or None

        return CONTINUE

    def _can_send(self, peer: Peer):
        return (
            peer.pending < self._pipeline_depth
            and self._stats.within_budget(self._max_requests)
        )

    def _desired_interest(self, peer: Peer):
        if peer.outgoing is not None or self._can_send(peer):
            return Interest.READ | Interest.WRITE

        return Interest.READ
