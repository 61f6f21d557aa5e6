"""
Fixed-capacity peer pool.

Peers are allocated once and recycled in place. A recycled peer keeps its
identity, loses its socket and session, and is flagged to advance so the
loop dials it again on the next pass.
"""

from typing import List

from inundator.core.multiplexer import Multiplexer, ReadinessEvent
from inundator.core.peers import (
    HTTPPeerMachine,
    Peer,
    StepResult,
    TLSPeerMachine,
    close_socket,
)
from inundator.core.stats import StatisticsAggregator
from inundator.logging import LoggerStream
from inundator.logging.inundator_logging_models import PeerDebug, PeerError

PeerMachine = HTTPPeerMachine | TLSPeerMachine


class ConnectionPool:
    def __init__(
        self,
        machine: PeerMachine,
        multiplexer: Multiplexer,
        stats: StatisticsAggregator,
        capacity: int,
        slow_start: bool = False,
        connect_timeout: float = 10.0,
        logger: LoggerStream | None = None,
    ) -> None:
        self._machine = machine
        self._multiplexer = multiplexer
        self._stats = stats
        self._slow_start = slow_start
        self._connect_timeout = connect_timeout
        self._logger = logger

        self._peers: List[Peer] = [
            Peer(
                peer_id=peer_id,
                state=machine.idle_state,
            )
            for peer_id in range(capacity)
        ]

        self._admitted = 0

    @property
    def peers(self):
        return self._peers

    @property
    def admitted(self):
        return self._admitted

    def connected_count(self):
        return len([
            peer for peer in self._peers if self._machine.is_established(peer)
        ])

    def start(self):
        if self._slow_start:
            self._admit_next()
            return

        while self._admitted < len(self._peers):
            self._admit_next()

    def advance_peers(self, now: float):
        for peer in self._peers[:self._admitted]:
            if peer.advance:
                result = self._machine.advance(peer, now)
                self._apply(peer, result)

    def dispatch(self, event: ReadinessEvent):
        peer = self._peers[event.peer_id]
        if peer.socket is None:
            return

        result = self._machine.step(peer, event)
        self._apply(peer, result)

    def recycle(
        self,
        peer: Peer,
        count_error: bool = False,
    ):
        state = peer.state

        if peer.socket is not None:
            self._multiplexer.deregister(peer.socket)
            close_socket(peer.socket)

        if peer.session is not None:
            peer.session.release()

        self._stats.rollback(peer.pending)
        peer.reset(self._machine.initial_state)

        if count_error:
            self._stats.record_error()

        if self._logger is None:
            return

        if count_error:
            self._logger.log(
                PeerError(
                    message="Peer disconnected, reconnecting",
                    peer_id=peer.peer_id,
                    state=state.name,
                )
            )

        else:
            self._logger.log(
                PeerDebug(
                    message="Peer recycled",
                    peer_id=peer.peer_id,
                    state=state.name,
                )
            )

    def sweep_timeouts(self, now: float):
        for peer in self._peers[:self._admitted]:
            if (
                peer.socket is not None
                and self._machine.is_connecting(peer)
                and now - peer.connect_started > self._connect_timeout
            ):
                if self._logger:
                    self._logger.log(
                        PeerDebug(
                            message=f"Connect timed out after {self._connect_timeout}s",
                            peer_id=peer.peer_id,
                            state=peer.state.name,
                        )
                    )

                self.recycle(peer)

    def close(self):
        for peer in self._peers:
            if peer.socket is not None:
                self._multiplexer.deregister(peer.socket)
                close_socket(peer.socket)

            if peer.session is not None:
                peer.session.release()

            peer.socket = None
            peer.session = None

    def _admit_next(self):
        if self._admitted >= len(self._peers):
            return

        peer = self._peers[self._admitted]
        peer.state = self._machine.initial_state
        peer.advance = True

        self._admitted += 1

    def _apply(
        self,
        peer: Peer,
        result: StepResult,
    ):
        if result.first_connect and self._slow_start:
            self._admit_next()

        if result.recycle:
            self.recycle(
                peer,
                count_error=result.count_error,
            )

        elif peer.socket is not None:
            self._multiplexer.update(
                peer.socket,
                peer.peer_id,
                peer.interest,
            )
