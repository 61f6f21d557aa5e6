"""
Inundator Error Hierarchy

Every condition that aborts a run is raised as an InundatorError. Errors
are classified by category so the runner can print a useful diagnostic:

- BOOTSTRAP: the first attempt of a kind failed, so the target cannot
  support the probe at all (unreachable, not TLS, no renegotiation).
- RESOURCE: the multiplexer, a socket or a buffer hit a limit.
- PROTOCOL: a response could not be framed.
- CONFIGURATION: the run configuration violates a hard cap.

Transient conditions (would-block, TLS want-read/want-write) and
peer-recoverable ones (hangup, late TLS failures) never raise out of a
peer step and have no class here.
"""

from enum import Enum, auto
from typing import Any


class ErrorCategory(Enum):
    """What kind of fatal error is this?"""

    BOOTSTRAP = auto()
    """The very first attempt of a kind failed."""

    RESOURCE = auto()
    """Multiplexer, socket or buffer capacity problems."""

    PROTOCOL = auto()
    """The byte stream could not be parsed safely."""

    CONFIGURATION = auto()
    """The run configuration is invalid or exceeds a hard cap."""


class InundatorError(Exception):
    """
    Base exception for fatal run errors.

    All errors carry:
    - message: Human-readable description
    - category: What kind of error
    - context: Additional debugging info
    - cause: Original exception if wrapping

    Example:
        raise BootstrapError(
            "TCP connect failed",
            host="10.0.0.5",
            port=443,
        )
    """

    category: ErrorCategory = ErrorCategory.RESOURCE

    def __init__(
        self,
        message: str,
        cause: BaseException | None = None,
        **context: Any,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.cause = cause
        self.context = context

    def __str__(self) -> str:
        ctx = f" {self.context}" if self.context else ""
        cause = ""
        if self.cause:
            cause_str = str(self.cause)
            cause_type = type(self.cause).__name__
            if cause_str:
                cause = f" (caused by {cause_type}: {cause_str})"
            else:
                cause = f" (caused by {cause_type})"

        return f"[{self.category.name}] {self.message}{ctx}{cause}"


class BootstrapError(InundatorError):
    """
    The first attempt of a kind failed outright.

    Raised when the first-ever TCP connect fails, or the first TLS
    handshake fails before any TLS connect succeeded.
    """

    category = ErrorCategory.BOOTSTRAP


class RenegotiationUnsupported(BootstrapError):
    """A renegotiation failed before any renegotiation ever succeeded."""


class MultiplexerError(InundatorError):
    """Registration or wait failure other than an interrupted wait."""

    category = ErrorCategory.RESOURCE


class PeerSocketError(InundatorError):
    """Unexpected socket error on a request/response peer."""

    category = ErrorCategory.RESOURCE


class ParseError(InundatorError):
    category = ErrorCategory.PROTOCOL


class UnknownTransferMode(ParseError):
    """A response header block carried neither a length nor chunked framing."""


class BufferOverflow(ParseError):
    """A single read filled the receive buffer to capacity."""

    category = ErrorCategory.RESOURCE


class ConfigurationError(InundatorError):
    category = ErrorCategory.CONFIGURATION
