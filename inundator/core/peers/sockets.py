import errno
import socket
from typing import Any, Callable, Tuple

from inundator.errors import PeerSocketError

AddressInfo = Tuple[
    socket.AddressFamily,
    socket.SocketKind,
    int,
    str,
    Tuple[Any, ...],
]

Connector = Callable[[AddressInfo], Tuple[socket.socket, int]]

IN_PROGRESS = {
    errno.EINPROGRESS,
    errno.EAGAIN,
    errno.EWOULDBLOCK,
    errno.EALREADY,
}

HANGUP_ERRORS = (
    ConnectionResetError,
    ConnectionAbortedError,
    BrokenPipeError,
)


def open_connection(address_info: AddressInfo) -> Tuple[socket.socket, int]:
    """
    Start a non-blocking connect. Returns the socket and the connect_ex
    result: 0 when connected already, an IN_PROGRESS errno when pending.
    """
    family, type_, proto, _, address = address_info

    try:
        sock = socket.socket(family=family, type=type_, proto=proto)

    except OSError as err:
        raise PeerSocketError(
            "Failed to create socket",
            cause=err,
        )

    sock.setblocking(False)
    sock.setsockopt(socket.IPPROTO_TCP, socket.TCP_NODELAY, 1)

    return sock, sock.connect_ex(address)


def pending_connect_error(sock: socket.socket) -> int:
    return sock.getsockopt(socket.SOL_SOCKET, socket.SO_ERROR)


def close_socket(sock: socket.socket):
    try:
        sock.shutdown(socket.SHUT_RDWR)

    except OSError:
        pass

    sock.close()
