import errno
import socket

from OpenSSL import SSL


class TLSWant(Exception):
    """The TLS engine needs the socket to become ready before it can continue."""


class TLSWantRead(TLSWant):
    pass


class TLSWantWrite(TLSWant):
    pass


class TLSError(Exception):
    """A TLS failure that is not a want-read/want-write signal."""


class TLSClosed(TLSError):
    """The remote end closed the connection or the TLS session."""


_CLOSED_ERRNOS = {
    -1,
    0,
    errno.ECONNRESET,
    errno.EPIPE,
    errno.ECONNABORTED,
}


class TLSSession:
    """
    Client-side TLS session over a non-blocking socket.

    Wraps a pyOpenSSL connection and translates its exceptions into
    TLSWantRead, TLSWantWrite, TLSClosed and TLSError so peer machines
    never handle library types directly.
    """

    def __init__(
        self,
        context: SSL.Context,
        sock: socket.socket,
        server_hostname: str | None = None,
    ) -> None:
        self._connection: SSL.Connection | None = SSL.Connection(context, sock)

        if server_hostname:
            self._connection.set_tlsext_host_name(
                server_hostname.encode("idna")
            )

        self._connection.set_connect_state()

    def do_handshake(self):
        self._call(self._connection.do_handshake)

    def renegotiate(self) -> bool:
        if self._connection.get_protocol_version_name() == "TLSv1.3":
            # TLS 1.3 has no renegotiation.
            return False

        return self._call(self._connection.renegotiate)

    def recv(self, size: int) -> bytes:
        return self._call(self._connection.recv, size)

    def send(self, data: bytes) -> int:
        return self._call(self._connection.send, data)

    def release(self):
        """
        Drop the session without a shutdown alert. The context has its
        session cache disabled, so nothing is resumed on reconnect.
        """
        self._connection = None

    def _call(self, method, *args):
        try:
            return method(*args)

        except SSL.WantReadError:
            raise TLSWantRead()

        except SSL.WantWriteError:
            raise TLSWantWrite()

        except SSL.ZeroReturnError as err:
            raise TLSClosed("TLS session closed by peer") from err

        except SSL.SysCallError as err:
            code = err.args[0] if err.args else -1
            if code in _CLOSED_ERRNOS:
                raise TLSClosed(str(err)) from err

            raise TLSError(str(err)) from err

        except SSL.Error as err:
            raise TLSError(str(err)) from err
