from OpenSSL import SSL

from inundator.errors import ConfigurationError


def create_tls_context(ciphers: str | None = None) -> SSL.Context:
    """
    Client context for load runs: no certificate verification, TLS 1.2 at
    most (TLS 1.3 removed renegotiation), legacy renegotiation allowed
    where the library exposes it, session cache off.
    """
    try:
        context = SSL.Context(SSL.TLS_CLIENT_METHOD)
        context.set_verify(SSL.VERIFY_NONE)
        context.set_max_proto_version(SSL.TLS1_2_VERSION)
        context.set_session_cache_mode(SSL.SESS_CACHE_OFF)

        options = SSL.OP_NO_TICKET
        for option_name in (
            "OP_ALLOW_UNSAFE_LEGACY_RENEGOTIATION",
            "OP_LEGACY_SERVER_CONNECT",
        ):
            options |= getattr(SSL, option_name, 0)

        context.set_options(options)

        if ciphers:
            context.set_cipher_list(ciphers.encode())

    except SSL.Error as err:
        raise ConfigurationError(
            "Failed to set up the TLS context",
            cause=err,
            ciphers=ciphers,
        )

    return context
