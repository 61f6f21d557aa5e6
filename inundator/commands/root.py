import argparse
import sys
import time
from typing import Callable, List, TextIO

from pydantic import ValidationError

from inundator.core import RunConfig, run_load
from inundator.env import Env, TimeParser, load_env
from inundator.errors import ConfigurationError
from inundator.logging import Logger, LoggingConfig, LogLevel

from .target import parse_target, tls_target

LOG_LEVELS = [
    "trace",
    "debug",
    "info",
    "warn",
    "error",
    "critical",
    "fatal",
]


def create_parser():
    parser = argparse.ArgumentParser(
        prog="inundator",
        description="Connection churn load generator for a single endpoint you are authorized to test.",
    )

    parser.add_argument(
        "--log-level",
        choices=LOG_LEVELS,
        default=None,
        help="Log level (defaults to INUNDATOR_LOG_LEVEL)",
    )

    subcommands = parser.add_subparsers(dest="command", required=True)

    http = subcommands.add_parser(
        "http",
        help="Cycle GET requests over persistent connections",
    )
    http.add_argument("url", help="http://host[:port]/path or https://host[:port]/path")
    http.add_argument("-n", "--requests", type=int, default=None, help="Stop after this many responses")
    http.add_argument("-c", "--concurrency", type=int, default=1, help="Number of connections")
    http.add_argument(
        "-H",
        "--header",
        action="append",
        default=[],
        dest="headers",
        help="Extra header line, may be repeated",
    )
    http.add_argument("--pipeline", type=int, default=1, help="Requests in flight per connection")
    http.add_argument("--duration", default=None, help="Stop after this long, e.g. 30s or 5m")
    http.add_argument("--slow-start", action="store_true", help="Admit one connection per completed connect")

    tls = subcommands.add_parser(
        "tls",
        help="Cycle TLS renegotiations over persistent connections",
    )
    tls.add_argument("host")
    tls.add_argument("port", nargs="?", default=None)
    tls.add_argument("-l", "--concurrency", type=int, default=400, help="Number of connections")
    tls.add_argument("-n", "--requests", type=int, default=None, help="Stop after this many renegotiations")
    tls.add_argument("--duration", default=None, help="Stop after this long, e.g. 30s or 5m")
    tls.add_argument("--accept", action="store_true", help="Confirm you are authorized to load test the target")
    tls.add_argument("--skip-delay", action="store_true", help="Start without the warm-up pause")

    return parser


def build_config(args: argparse.Namespace) -> RunConfig:
    try:
        duration = TimeParser().parse(args.duration) if args.duration else None

    except ValueError as err:
        raise ConfigurationError(
            "Invalid duration",
            cause=err,
            duration=args.duration,
        )

    try:
        if args.command == "tls":
            return RunConfig(
                endpoint=tls_target(args.host, args.port),
                concurrency=args.concurrency,
                max_requests=args.requests,
                duration=duration,
                slow_start=True,
                accept=args.accept,
                skip_delay=args.skip_delay,
            )

        return RunConfig(
            endpoint=parse_target(args.url, headers=tuple(args.headers)),
            concurrency=args.concurrency,
            max_requests=args.requests,
            duration=duration,
            pipeline_depth=args.pipeline,
            slow_start=args.slow_start,
        )

    except ValidationError as err:
        raise ConfigurationError(
            "Invalid run configuration",
            cause=err,
        )


def read_env() -> Env:
    try:
        env = load_env(Env)
        TimeParser().parse(env.INUNDATOR_WARMUP_DELAY)

    except ValueError as err:
        raise ConfigurationError(
            "Invalid environment configuration",
            cause=err,
        )

    return env


def configure_logging(
    env: Env,
    log_level: str | None = None,
):
    level_name = log_level or env.INUNDATOR_LOG_LEVEL
    if LogLevel.to_level(level_name) is None:
        raise ConfigurationError(
            "Unknown log level",
            log_level=level_name,
        )

    LoggingConfig().update(
        log_directory=env.INUNDATOR_LOGS_DIRECTORY,
        log_level=level_name,
        log_output=env.INUNDATOR_LOG_OUTPUT,
    )


def warm_up(
    seconds: float,
    output: TextIO,
    sleep: Callable[[float], None] = time.sleep,
):
    """Pause before a renegotiation run, printing a dot per second."""
    output.write(f"Starting in {seconds:g}s, interrupt to abort")
    output.flush()

    remaining = seconds
    while remaining > 0:
        sleep(min(1.0, remaining))
        remaining -= 1.0

        output.write(".")
        output.flush()

    output.write("\n")
    output.flush()


def run(
    argv: List[str] | None = None,
    output: TextIO | None = None,
    errors: TextIO | None = None,
    sleep: Callable[[float], None] = time.sleep,
) -> int:
    if argv is None:
        argv = sys.argv[1:]

    if output is None:
        output = sys.stdout

    if errors is None:
        errors = sys.stderr

    args = create_parser().parse_args(argv)

    try:
        env = read_env()
        configure_logging(env, args.log_level)
        config = build_config(args)

        if config.endpoint.protocol == "tls" and not config.accept:
            raise ConfigurationError(
                "Refusing to start a TLS renegotiation run without --accept",
            )

    except ConfigurationError as err:
        errors.write(f"Error: {err}\n")
        errors.flush()

        return 1

    if config.endpoint.protocol == "tls" and not config.skip_delay:
        try:
            warm_up(
                TimeParser().parse(env.INUNDATOR_WARMUP_DELAY),
                output,
                sleep=sleep,
            )

        except KeyboardInterrupt:
            return 0

    logger = Logger()
    stream = logger.get_stream("inundator")

    try:
        return run_load(
            config,
            env=env,
            output=output,
            errors=errors,
            logger=stream,
        )

    finally:
        logger.close()


def main():
    sys.exit(run())
