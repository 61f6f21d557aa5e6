import functools
import ipaddress
import socket
import sys
import time
from typing import Callable, TextIO

from inundator.env import Env, TimeParser
from inundator.errors import BootstrapError, ConfigurationError, InundatorError
from inundator.logging import LoggerStream
from inundator.logging.inundator_logging_models import RunFatal, RunInfo

from .loop import EventLoop
from .models import Endpoint, RunConfig
from .multiplexer import Multiplexer
from .peers import (
    AddressInfo,
    HTTPPeerMachine,
    TLSPeerMachine,
    open_connection,
)
from .peers.http_peer_machine import SessionFactory
from .peers.sockets import Connector
from .pool import ConnectionPool
from .stats import StatisticsAggregator, http_statistics, tls_statistics
from .tls import TLSSession, create_tls_context


def resolve_endpoint(endpoint: Endpoint) -> AddressInfo:
    try:
        addresses = socket.getaddrinfo(
            endpoint.host,
            endpoint.port,
            type=socket.SOCK_STREAM,
            proto=socket.IPPROTO_TCP,
        )

    except socket.gaierror as err:
        raise BootstrapError(
            "Cannot resolve target host",
            cause=err,
            host=endpoint.host,
        )

    if len(addresses) == 0:
        raise BootstrapError(
            "Target host has no addresses",
            host=endpoint.host,
        )

    return addresses[0]


def default_session_factory(
    endpoint: Endpoint,
    ciphers: str | None = None,
) -> SessionFactory:
    context = create_tls_context(ciphers)

    server_hostname: str | None = endpoint.host
    try:
        ipaddress.ip_address(endpoint.host)
        server_hostname = None

    except ValueError:
        pass

    return functools.partial(
        TLSSession,
        context,
        server_hostname=server_hostname,
    )


def run_load(
    config: RunConfig,
    env: Env | None = None,
    output: TextIO | None = None,
    errors: TextIO | None = None,
    session_factory: SessionFactory | None = None,
    logger: LoggerStream | None = None,
    connector: Connector = open_connection,
    clock: Callable[[], float] = time.monotonic,
) -> int:
    """
    Run one load session to completion and return the process exit code:
    0 for a limit, duration or interrupt, 1 for a fatal error. The pool is
    torn down and the summary printed either way.
    """
    if env is None:
        env = Env()

    if output is None:
        output = sys.stdout

    if errors is None:
        errors = sys.stderr

    endpoint = config.endpoint
    time_parser = TimeParser()

    stats: StatisticsAggregator | None = None
    multiplexer: Multiplexer | None = None
    pool: ConnectionPool | None = None

    try:
        config.enforce_limits(env)

        if endpoint.protocol == "tls" and not config.accept:
            raise ConfigurationError(
                "TLS renegotiation runs must be acknowledged with --accept",
            )

        stats_interval = time_parser.parse(env.INUNDATOR_STATS_INTERVAL)
        address_info = resolve_endpoint(endpoint)

        if session_factory is None and endpoint.is_tls:
            session_factory = default_session_factory(
                endpoint,
                ciphers=env.INUNDATOR_TLS_CIPHERS if endpoint.protocol == "tls" else None,
            )

        if endpoint.protocol == "tls":
            stats = tls_statistics(stats_interval)
            poll_interval = time_parser.parse(env.INUNDATOR_TLS_POLL_INTERVAL)
            machine = TLSPeerMachine(
                config,
                stats,
                address_info,
                session_factory,
                dummy_write_interval=env.INUNDATOR_DUMMY_WRITE_INTERVAL,
                connector=connector,
            )

        else:
            stats = http_statistics(stats_interval)
            poll_interval = time_parser.parse(env.INUNDATOR_POLL_INTERVAL)
            machine = HTTPPeerMachine(
                config,
                stats,
                address_info,
                write_buffer_size=env.INUNDATOR_WRITE_BUFFER_SIZE,
                read_buffer_size=env.INUNDATOR_READ_BUFFER_SIZE,
                session_factory=session_factory,
                connector=connector,
            )

        multiplexer = Multiplexer()
        pool = ConnectionPool(
            machine,
            multiplexer,
            stats,
            config.concurrency,
            slow_start=config.slow_start,
            connect_timeout=time_parser.parse(env.INUNDATOR_CONNECT_TIMEOUT),
            logger=logger,
        )

        loop = EventLoop(
            pool,
            multiplexer,
            stats,
            poll_interval=poll_interval,
            max_completions=config.max_requests,
            duration=config.duration,
            output=output,
            clock=clock,
        )

        if logger:
            logger.log(
                RunInfo(
                    message="Starting run",
                    target=str(endpoint),
                    protocol=endpoint.protocol,
                    concurrency=config.concurrency,
                )
            )

        loop.run()

        return 0

    except KeyboardInterrupt:
        return 0

    except InundatorError as err:
        if logger:
            logger.log(
                RunFatal(
                    message=err.message,
                    target=str(endpoint),
                    protocol=endpoint.protocol,
                    concurrency=config.concurrency,
                    error_type=type(err).__name__,
                )
            )

        errors.write(f"Error: {err}\n")
        errors.flush()

        return 1

    finally:
        if pool is not None:
            pool.close()

        if multiplexer is not None:
            multiplexer.close()

        if stats is not None:
            for line in stats.summary():
                output.write(line + "\n")

            output.flush()
