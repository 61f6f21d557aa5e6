"""
Shared fixtures: socketpair connectors standing in for TCP connects, and a
scriptable TLS session standing in for pyOpenSSL.
"""

import socket
import tempfile
from typing import Generator, List

import pytest

from inundator.core.tls import TLSWantRead
from inundator.logging import Entry, LoggingConfig, LogLevel


class SocketPairConnector:
    """Connector returning one end of a socketpair and a fixed connect result."""

    def __init__(self, result: int = 0) -> None:
        self.result = result
        self.calls = 0
        self.clients: List[socket.socket] = []
        self.servers: List[socket.socket] = []

    def __call__(self, address_info):
        client, server = socket.socketpair()
        client.setblocking(False)
        server.setblocking(False)

        self.calls += 1
        self.clients.append(client)
        self.servers.append(server)

        return client, self.result

    def close(self):
        for sock in [*self.clients, *self.servers]:
            sock.close()


class FakeTLSSession:
    """
    Scripted session. Each handshake, recv and send call pops the next
    outcome from its list: an exception instance is raised, anything else
    is returned. Empty scripts succeed (handshake, send) or want-read (recv).
    """

    def __init__(
        self,
        sock: socket.socket | None = None,
        handshakes: list | None = None,
        renegotiations: list | None = None,
        reads: list | None = None,
        writes: list | None = None,
    ) -> None:
        self.sock = sock
        self.handshakes = list(handshakes or [])
        self.renegotiations = list(renegotiations or [])
        self.reads = list(reads or [])
        self.writes = list(writes or [])

        self.handshake_calls = 0
        self.renegotiate_calls = 0
        self.sent: List[bytes] = []
        self.released = False

    def do_handshake(self):
        self.handshake_calls += 1
        self._next(self.handshakes, None)

    def renegotiate(self):
        self.renegotiate_calls += 1
        return self._next(self.renegotiations, True)

    def recv(self, size: int):
        if not self.reads:
            raise TLSWantRead()

        return self._next(self.reads, b"")

    def send(self, data: bytes):
        outcome = self._next(self.writes, len(data))
        self.sent.append(data)

        return outcome

    def release(self):
        self.released = True

    def _next(self, script: list, default):
        if not script:
            return default

        outcome = script.pop(0)
        if isinstance(outcome, BaseException):
            raise outcome

        return outcome


class FakeSessionFactory:
    def __init__(self, **script) -> None:
        self.script = script
        self.sessions: List[FakeTLSSession] = []

    def __call__(self, sock: socket.socket):
        session = FakeTLSSession(
            sock,
            **{name: list(outcomes) for name, outcomes in self.script.items()},
        )
        self.sessions.append(session)

        return session


@pytest.fixture
def connector() -> Generator[SocketPairConnector, None, None]:
    pair_connector = SocketPairConnector()
    yield pair_connector
    pair_connector.close()


@pytest.fixture
def session_factory():
    def create_factory(**script):
        return FakeSessionFactory(**script)

    return create_factory


@pytest.fixture
def address_info():
    return (
        socket.AF_INET,
        socket.SOCK_STREAM,
        socket.IPPROTO_TCP,
        "",
        ("127.0.0.1", 8080),
    )


@pytest.fixture
def temp_log_directory() -> Generator[str, None, None]:
    with tempfile.TemporaryDirectory() as temp_directory:
        yield temp_directory


@pytest.fixture
def sample_entry() -> Entry:
    return Entry(
        message="Test log message",
        level=LogLevel.INFO,
    )


@pytest.fixture
def log_level():
    config = LoggingConfig()

    def set_level(level_name: str):
        config.update(log_level=level_name)

    yield set_level

    config.update(log_level="error")
