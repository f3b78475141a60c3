from __future__ import annotations

import os
import socket

try:  # Compiled with SSL?
    import ssl
    from ssl import (  # type: ignore[assignment]
        OP_NO_COMPRESSION,
        OP_NO_TICKET,
        PROTOCOL_TLS_CLIENT,
        SSLContext,
        TLSVersion,
    )
except ImportError:  # Platform-specific: No SSL.
    ssl = None  # type: ignore[assignment]
    SSLContext = None  # type: ignore[assignment,misc]


def create_default_context() -> ssl.SSLContext:
    """Build the TLS context shared by every HTTPS handle of an engine.

    It:

    - Requires TLS 1.2 or newer
    - Disables compression and session tickets
    - Verifies the peer certificate and hostname
    - Loads the platform's default CA certificates

    :returns:
        Constructed SSLContext object
    """
    if SSLContext is None:
        raise TypeError("Can't create an SSLContext object without an ssl module")

    context = SSLContext(PROTOCOL_TLS_CLIENT)
    context.minimum_version = TLSVersion.TLSv1_2

    # Disable compression to prevent CRIME attacks, and do not request
    # tickets the server may not be rotating the keys of.
    context.options |= OP_NO_COMPRESSION | OP_NO_TICKET

    context.verify_mode = ssl.CERT_REQUIRED
    context.check_hostname = True

    context.load_default_certs()

    # Enable logging of TLS session keys via defacto standard environment variable
    # 'SSLKEYLOGFILE'. Skip empty values.
    sslkeylogfile = os.environ.get("SSLKEYLOGFILE")
    if sslkeylogfile:
        context.keylog_filename = sslkeylogfile

    return context


def ssl_wrap_socket(
    sock: socket.socket,
    ssl_context: ssl.SSLContext,
    server_hostname: str | None = None,
) -> ssl.SSLSocket:
    """Wrap a connected socket; ``server_hostname`` is used for SNI and
    hostname verification."""
    return ssl_context.wrap_socket(sock, server_hostname=server_hostname)

