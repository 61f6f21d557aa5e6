from .tls_context import create_tls_context as create_tls_context
from .tls_session import (
    TLSClosed as TLSClosed,
    TLSError as TLSError,
    TLSSession as TLSSession,
    TLSWant as TLSWant,
    TLSWantRead as TLSWantRead,
    TLSWantWrite as TLSWantWrite,
)
