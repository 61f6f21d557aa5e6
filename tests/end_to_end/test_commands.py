import io

import pytest

from inundator.commands.root import create_parser, run, warm_up


@pytest.fixture(autouse=True)
def isolated_env(monkeypatch, tmp_path):
    monkeypatch.chdir(tmp_path)


class TestHTTPCommand:
    def test_request_limit(self, http_server):
        server = http_server()
        output = io.StringIO()

        exit_code = run(
            [
                "http",
                f"http://127.0.0.1:{server.port}/cli",
                "-n",
                "2",
                "-H",
                "X-Run: cli",
                "--duration",
                "10s",
            ],
            output=output,
            errors=io.StringIO(),
        )

        assert exit_code == 0
        assert server.paths == ["/cli", "/cli"]
        assert "Responses received: 2" in output.getvalue()

    def test_invalid_target(self):
        errors = io.StringIO()

        exit_code = run(
            ["http", "ftp://example.com/"],
            output=io.StringIO(),
            errors=errors,
        )

        assert exit_code == 1
        assert "Target must look like" in errors.getvalue()

    def test_invalid_duration(self):
        exit_code = run(
            ["http", "http://127.0.0.1/", "--duration", "later"],
            output=io.StringIO(),
            errors=io.StringIO(),
        )

        assert exit_code == 1


class TestTLSCommand:
    def test_requires_accept(self):
        errors = io.StringIO()
        sleeps = []

        exit_code = run(
            ["tls", "127.0.0.1", "443"],
            output=io.StringIO(),
            errors=errors,
            sleep=sleeps.append,
        )

        assert exit_code == 1
        assert "--accept" in errors.getvalue()
        assert sleeps == []

    def test_defaults(self):
        args = create_parser().parse_args(["tls", "10.0.0.5"])

        assert args.port is None
        assert args.concurrency == 400
        assert args.accept is False
        assert args.skip_delay is False


class TestWarmUp:
    def test_one_dot_per_second(self):
        output = io.StringIO()
        sleeps = []

        warm_up(3, output, sleep=sleeps.append)

        assert sleeps == [1.0, 1.0, 1.0]
        assert output.getvalue().endswith("...\n")
