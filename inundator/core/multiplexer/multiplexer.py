"""
Readiness multiplexer over the platform selector (epoll, kqueue, poll or
select, whichever selectors.DefaultSelector picks).

Selectors are level-triggered. Peers get edge-like behaviour by keeping
their desired interest accurate: a peer only asks for WRITE while it has
something to write, so it is not re-notified for a readiness state it
cannot act on.

Selectors fold hangup and error conditions into read/write readiness, so
each ready socket is probed once: a pending SO_ERROR is reported as an
error (or a hangup for resets), and a readable socket with nothing left
to read is reported as a hangup. The pending error is consumed by the
probe and travels on the event as error_code.
"""

import errno
import selectors
import socket
from typing import Dict, List

from inundator.errors import MultiplexerError

from .interest import Interest
from .readiness_event import ReadinessEvent

HANGUP_ERRNOS = {
    errno.ECONNRESET,
    errno.ECONNABORTED,
    errno.EPIPE,
}
class Multiplexer:
    def __init__(
        self,
        selector: selectors.BaseSelector | None = None,
    ) -> None:
        if selector is None:
            selector = selectors.DefaultSelector()

        self._selector = selector
        self._interests: Dict[int, Interest] = {}

    def __len__(self):
        return len(self._interests)

    def __contains__(self, sock: socket.socket):
        return sock.fileno() in self._interests

    def interest(self, sock: socket.socket) -> Interest:
        return self._interests.get(sock.fileno(), Interest.NONE)

    def register(
        self,
        sock: socket.socket,
        peer_id: int,
        interest: Interest,
    ):
        try:
            self._selector.register(
                sock,
                interest.to_events(),
                data=peer_id,
            )

        except (KeyError, ValueError, OSError) as err:
            raise MultiplexerError(
                "Failed to register socket",
                cause=err,
                peer_id=peer_id,
                interest=interest.name,
            )

        self._interests[sock.fileno()] = interest

    def modify(
        self,
        sock: socket.socket,
        peer_id: int,
        interest: Interest,
    ):
        try:
            self._selector.modify(
                sock,
                interest.to_events(),
                data=peer_id,
            )

        except (KeyError, ValueError, OSError) as err:
            raise MultiplexerError(
                "Failed to modify socket interest",
                cause=err,
                peer_id=peer_id,
                interest=interest.name,
            )

        self._interests[sock.fileno()] = interest

    def deregister(self, sock: socket.socket):
        fileno = sock.fileno()
        if self._interests.pop(fileno, None) is None:
            return

        try:
            self._selector.unregister(sock)

        except (KeyError, ValueError, OSError) as err:
            raise MultiplexerError(
                "Failed to deregister socket",
                cause=err,
                fileno=fileno,
            )

    def update(
        self,
        sock: socket.socket,
        peer_id: int,
        interest: Interest,
    ):
        """Reconcile the registered interest with the desired one."""
        current = self._interests.get(sock.fileno())

        if interest == Interest.NONE:
            self.deregister(sock)

        elif current is None:
            self.register(sock, peer_id, interest)

        elif current != interest:
            self.modify(sock, peer_id, interest)

    def wait(self, timeout: float | None) -> List[ReadinessEvent]:
        try:
            ready = self._selector.select(timeout)

        except InterruptedError:
            return []

        except OSError as err:
            raise MultiplexerError(
                "Readiness wait failed",
                cause=err,
            )

        return [
            self._probe(key.fileobj, key.data, mask)
            for key, mask in ready
        ]

    def _probe(
        self,
        sock: socket.socket,
        peer_id: int,
        mask: int,
    ) -> ReadinessEvent:
        readable = bool(mask & selectors.EVENT_READ)
        writable = bool(mask & selectors.EVENT_WRITE)

        error_code = sock.getsockopt(socket.SOL_SOCKET, socket.SO_ERROR)
        if error_code != 0:
            return ReadinessEvent(
                peer_id=peer_id,
                readable=readable,
                writable=writable,
                hangup=error_code in HANGUP_ERRNOS,
                error=error_code not in HANGUP_ERRNOS,
                error_code=error_code,
            )

        hangup = False
        if readable:
            try:
                hangup = len(sock.recv(1, socket.MSG_PEEK)) == 0

            except BlockingIOError:
                pass

            except (ConnectionResetError, ConnectionAbortedError, BrokenPipeError):
                hangup = True

        return ReadinessEvent(
            peer_id=peer_id,
            readable=readable,
            writable=writable,
            hangup=hangup,
        )

    def close(self):
        self._interests.clear()
        self._selector.close()
