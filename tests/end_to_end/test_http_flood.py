import io
import socket

from inundator.core import run_load
from inundator.core.models import Endpoint, RunConfig
from inundator.env import Env


def http_config(port: int, **options):
    return RunConfig(
        endpoint=Endpoint(
            protocol="http",
            host="127.0.0.1",
            port=port,
            path="/hello",
        ),
        duration=10.0,
        **options,
    )


class TestRequestLimit:
    def test_exact_request_count(self, http_server):
        server = http_server()
        output = io.StringIO()
        errors = io.StringIO()

        exit_code = run_load(
            http_config(server.port, concurrency=1, max_requests=3),
            env=Env(),
            output=output,
            errors=errors,
        )

        assert exit_code == 0
        assert server.paths == ["/hello", "/hello", "/hello"]
        assert "Requests sent: 3" in output.getvalue()
        assert "Responses received: 3" in output.getvalue()
        assert errors.getvalue() == ""

    def test_chunked_responses(self, http_server):
        server = http_server("chunked")
        output = io.StringIO()

        exit_code = run_load(
            http_config(server.port, concurrency=1, max_requests=3),
            env=Env(),
            output=output,
            errors=io.StringIO(),
        )

        assert exit_code == 0
        assert len(server.paths) == 3
        assert "Responses received: 3" in output.getvalue()

    def test_several_connections(self, http_server):
        server = http_server()
        output = io.StringIO()

        exit_code = run_load(
            http_config(server.port, concurrency=4, max_requests=20),
            env=Env(),
            output=output,
            errors=io.StringIO(),
        )

        assert exit_code == 0
        assert "Responses received: 20" in output.getvalue()


class TestFatalErrors:
    def test_unframed_response(self, http_server):
        server = http_server("none")
        errors = io.StringIO()

        exit_code = run_load(
            http_config(server.port, max_requests=1),
            env=Env(),
            output=io.StringIO(),
            errors=errors,
        )

        assert exit_code == 1
        assert "Cannot detect the transfer mode" in errors.getvalue()

    def test_connection_refused(self):
        listener = socket.create_server(("127.0.0.1", 0))
        port = listener.getsockname()[1]
        listener.close()

        output = io.StringIO()
        errors = io.StringIO()

        exit_code = run_load(
            http_config(port, max_requests=1),
            env=Env(),
            output=output,
            errors=errors,
        )

        assert exit_code == 1
        assert "Connect failed" in errors.getvalue()
        assert "Requests sent: 0" in output.getvalue()

    def test_concurrency_over_cap(self, http_server):
        server = http_server()
        errors = io.StringIO()

        exit_code = run_load(
            http_config(server.port, concurrency=8),
            env=Env(INUNDATOR_MAX_CONCURRENCY=4),
            output=io.StringIO(),
            errors=errors,
        )

        assert exit_code == 1
        assert "[CONFIGURATION]" in errors.getvalue()
