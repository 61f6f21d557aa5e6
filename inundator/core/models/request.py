from inundator.errors import ConfigurationError

from .endpoint import Endpoint


def build_request(
    endpoint: Endpoint,
    capacity: int,
) -> bytes:
    """
    Encode the single GET request every peer sends. Extra header lines are
    written verbatim in the order given.
    """
    request = [
        f"GET {endpoint.path} HTTP/1.1",
        f"Host: {endpoint.authority}",
    ]

    for header in endpoint.headers:
        request.append(header)

    encoded = ("\r\n".join(request) + "\r\n\r\n").encode()

    if len(encoded) > capacity:
        raise ConfigurationError(
            "Request does not fit in the write buffer",
            size=len(encoded),
            capacity=capacity,
        )

    return encoded
