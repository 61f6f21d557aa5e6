import datetime
import socket
import threading
from http.server import BaseHTTPRequestHandler, ThreadingHTTPServer
from typing import Generator

import pytest
from cryptography import x509
from cryptography.hazmat.primitives import hashes, serialization
from cryptography.hazmat.primitives.asymmetric import rsa
from cryptography.x509.oid import NameOID
from OpenSSL import SSL

# SSL_OP_ALLOW_CLIENT_RENEGOTIATION. OpenSSL 3 servers refuse client
# initiated renegotiation unless it is set.
ALLOW_CLIENT_RENEGOTIATION = 0x100


class CountingHandler(BaseHTTPRequestHandler):
    protocol_version = "HTTP/1.1"

    def do_GET(self):
        self.server.paths.append(self.path)

        body = b"hello"

        self.send_response(200)

        match self.server.framing:
            case "chunked":
                self.send_header("Transfer-Encoding", "chunked")
                self.end_headers()
                self.wfile.write(b"%x\r\n%s\r\n0\r\n\r\n" % (len(body), body))

            case "none":
                self.send_header("Connection", "close")
                self.end_headers()
                self.wfile.write(body)

            case _:
                self.send_header("Content-Length", str(len(body)))
                self.end_headers()
                self.wfile.write(body)

    def log_message(self, format, *args):
        pass


class CountingServer(ThreadingHTTPServer):
    daemon_threads = True

    def __init__(self, framing: str) -> None:
        super().__init__(("127.0.0.1", 0), CountingHandler)
        self.framing = framing
        self.paths: list[str] = []

    @property
    def port(self):
        return self.server_address[1]


@pytest.fixture
def http_server() -> Generator:
    servers: list[CountingServer] = []

    def start(framing: str = "fixed"):
        server = CountingServer(framing)
        thread = threading.Thread(target=server.serve_forever, daemon=True)
        thread.start()
        servers.append(server)

        return server

    yield start

    for server in servers:
        server.shutdown()
        server.server_close()


class RenegotiatingServer:
    """
    Threaded pyOpenSSL TLS 1.2 server. Each connection is read until the
    client goes away; renegotiations are served inside recv, and any
    application data is collected in received.
    """

    def __init__(
        self,
        certificate_path: str,
        key_path: str,
        allow_renegotiation: bool = True,
    ) -> None:
        context = SSL.Context(SSL.TLS_SERVER_METHOD)
        context.set_max_proto_version(SSL.TLS1_2_VERSION)
        context.use_certificate_file(certificate_path)
        context.use_privatekey_file(key_path)

        if allow_renegotiation:
            context.set_options(ALLOW_CLIENT_RENEGOTIATION)

        self._context = context
        self._listener = socket.create_server(("127.0.0.1", 0))
        self._listener.settimeout(0.2)
        self._stopped = threading.Event()
        self._threads: list[threading.Thread] = []
        self._lock = threading.Lock()

        self.received = bytearray()

    @property
    def port(self):
        return self._listener.getsockname()[1]

    def start(self):
        thread = threading.Thread(target=self._serve, daemon=True)
        thread.start()
        self._threads.append(thread)

    def stop(self):
        self._stopped.set()
        for thread in self._threads:
            thread.join(timeout=5.0)

        self._listener.close()

    def _serve(self):
        while not self._stopped.is_set():
            try:
                sock, _ = self._listener.accept()

            except TimeoutError:
                continue

            except OSError:
                return

            thread = threading.Thread(
                target=self._handle,
                args=(sock,),
                daemon=True,
            )
            thread.start()

    def _handle(self, sock: socket.socket):
        sock.setblocking(True)

        connection = SSL.Connection(self._context, sock)
        connection.set_accept_state()

        try:
            while True:
                data = connection.recv(1024)
                with self._lock:
                    self.received.extend(data)

        except (SSL.Error, OSError):
            pass

        finally:
            sock.close()


@pytest.fixture(scope="session")
def certificate_files(tmp_path_factory):
    key = rsa.generate_private_key(public_exponent=65537, key_size=2048)
    name = x509.Name([x509.NameAttribute(NameOID.COMMON_NAME, "localhost")])
    now = datetime.datetime.now(datetime.timezone.utc)

    certificate = (
        x509.CertificateBuilder()
        .subject_name(name)
        .issuer_name(name)
        .public_key(key.public_key())
        .serial_number(x509.random_serial_number())
        .not_valid_before(now - datetime.timedelta(days=1))
        .not_valid_after(now + datetime.timedelta(days=1))
        .sign(key, hashes.SHA256())
    )

    directory = tmp_path_factory.mktemp("tls")
    certificate_path = directory / "server.pem"
    key_path = directory / "server.key"

    certificate_path.write_bytes(
        certificate.public_bytes(serialization.Encoding.PEM)
    )
    key_path.write_bytes(
        key.private_bytes(
            serialization.Encoding.PEM,
            serialization.PrivateFormat.TraditionalOpenSSL,
            serialization.NoEncryption(),
        )
    )

    return str(certificate_path), str(key_path)


@pytest.fixture
def tls_server(certificate_files) -> Generator:
    servers: list[RenegotiatingServer] = []

    def start(allow_renegotiation: bool = True):
        server = RenegotiatingServer(
            *certificate_files,
            allow_renegotiation=allow_renegotiation,
        )
        server.start()
        servers.append(server)

        return server

    yield start

    for server in servers:
        server.stop()
