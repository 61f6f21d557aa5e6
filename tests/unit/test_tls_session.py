import errno
from unittest.mock import Mock, patch

import pytest
from OpenSSL import SSL

from inundator.core.tls import (
    TLSClosed,
    TLSError,
    TLSSession,
    TLSWantRead,
    TLSWantWrite,
)


@pytest.fixture
def connection():
    with patch("OpenSSL.SSL.Connection") as connection_type:
        yield connection_type.return_value


def create_session(server_hostname: str | None = None):
    return TLSSession(
        Mock(spec=SSL.Context),
        Mock(),
        server_hostname=server_hostname,
    )


class TestSetup:
    def test_client_mode_without_sni(self, connection: Mock):
        create_session()

        connection.set_connect_state.assert_called_once()
        connection.set_tlsext_host_name.assert_not_called()

    def test_hostname_is_sent_as_sni(self, connection: Mock):
        create_session("example.com")

        connection.set_tlsext_host_name.assert_called_once_with(b"example.com")


class TestRenegotiate:
    def test_requested_on_tls_1_2(self, connection: Mock):
        connection.get_protocol_version_name.return_value = "TLSv1.2"
        connection.renegotiate.return_value = True

        assert create_session().renegotiate() is True
        connection.renegotiate.assert_called_once()

    def test_never_requested_on_tls_1_3(self, connection: Mock):
        connection.get_protocol_version_name.return_value = "TLSv1.3"

        assert create_session().renegotiate() is False
        connection.renegotiate.assert_not_called()


class TestErrorTranslation:
    def test_want_read(self, connection: Mock):
        connection.do_handshake.side_effect = SSL.WantReadError()

        with pytest.raises(TLSWantRead):
            create_session().do_handshake()

    def test_want_write(self, connection: Mock):
        connection.send.side_effect = SSL.WantWriteError()

        with pytest.raises(TLSWantWrite):
            create_session().send(b"\x00")

    def test_close_notify_is_a_close(self, connection: Mock):
        connection.recv.side_effect = SSL.ZeroReturnError()

        with pytest.raises(TLSClosed):
            create_session().recv(1024)

    @pytest.mark.parametrize(
        "code",
        [-1, errno.ECONNRESET, errno.EPIPE],
    )
    def test_eof_and_reset_are_a_close(self, connection: Mock, code: int):
        connection.recv.side_effect = SSL.SysCallError(code, "connection lost")

        with pytest.raises(TLSClosed):
            create_session().recv(1024)

    def test_other_syscall_failures_are_errors(self, connection: Mock):
        connection.recv.side_effect = SSL.SysCallError(errno.EBADF, "bad file")

        with pytest.raises(TLSError) as raised:
            create_session().recv(1024)

        assert not isinstance(raised.value, TLSClosed)

    def test_protocol_failure_is_an_error(self, connection: Mock):
        connection.do_handshake.side_effect = SSL.Error(
            [("SSL routines", "", "no renegotiation")]
        )

        with pytest.raises(TLSError) as raised:
            create_session().do_handshake()

        assert not isinstance(raised.value, TLSClosed)
        assert isinstance(raised.value.__cause__, SSL.Error)
