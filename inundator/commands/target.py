import re

from inundator.core.models import Endpoint
from inundator.errors import ConfigurationError

TARGET_PATTERN = re.compile(r"^(https?)://([^/:]+)(?::([0-9]+))?(/.*)?$")

DEFAULT_PORTS = {
    "http": 80,
    "https": 443,
    "tls": 443,
}


def parse_target(
    url: str,
    headers: tuple[str, ...] = (),
) -> Endpoint:
    """
    Split http://host[:port][/path] or https://... into an Endpoint.
    Port defaults to 80 or 443 by scheme and path to "/".
    """
    match = TARGET_PATTERN.match(url)
    if match is None:
        raise ConfigurationError(
            "Target must look like http://host[:port]/path or https://host[:port]/path",
            target=url,
        )

    protocol, host, port, path = match.groups()

    return Endpoint(
        protocol=protocol,
        host=host,
        port=_to_port(port, DEFAULT_PORTS[protocol]),
        path=path or "/",
        headers=headers,
    )


def tls_target(
    host: str,
    port: str | None = None,
) -> Endpoint:
    return Endpoint(
        protocol="tls",
        host=host,
        port=_to_port(port, DEFAULT_PORTS["tls"]),
    )


def _to_port(
    port: str | None,
    default: int,
) -> int:
    if port is None:
        return default

    try:
        value = int(port)

    except ValueError as err:
        raise ConfigurationError(
            "Port must be a number",
            cause=err,
            port=port,
        )

    if not 0 < value < 65536:
        raise ConfigurationError(
            "Port out of range",
            port=value,
        )

    return value
