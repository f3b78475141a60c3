from __future__ import annotations

import logging
import re
import socket
import typing
from http.client import HTTPConnection as _HTTPConnection
from http.client import HTTPException as HTTPException  # noqa: F401
from http.client import HTTPResponse as _HTTPResponse
from http.client import InvalidURL
from urllib.parse import urlsplit

try:  # Compiled with SSL?
    import ssl

    BaseSSLError = ssl.SSLError
except (ImportError, AttributeError):  # Platform-specific: No SSL.
    ssl = None  # type: ignore[assignment]

    class BaseSSLError(BaseException):  # type: ignore[no-redef]
        pass


from ._version import __version__
from .engine import Handle, Option, TransportEngine
from .exceptions import (
    BodyReadError,
    BodyWriteError,
    LocationParseError,
    NameResolutionError,
    NewConnectionError,
    ProtocolError,
    SSLError,
    TransportError,
)
from .util import connection
from .util.ssl_ import create_default_context, ssl_wrap_socket
from .util.typing import _TYPE_READ_FUNCTION, _TYPE_WRITE_FUNCTION
from .util.util import split_header_line

log = logging.getLogger(__name__)

port_by_scheme = {"http": 80, "https": 443}

_CONTAINS_CONTROL_CHAR_RE = re.compile(r"[^-!#$%&'*+.^_`|~0-9a-zA-Z]")

DEFAULT_BLOCKSIZE = 16384


class HTTPConnection(_HTTPConnection):
    """
    Based on :class:`http.client.HTTPConnection`, connecting through
    :func:`pooledhttp.util.connection.create_connection` so that socket
    options are applied and connection failures surface as
    :class:`~pooledhttp.exceptions.TransportError` subclasses.

    - ``socket_options``: Set specific options on the underlying socket. If not specified, then
      defaults are loaded from ``HTTPConnection.default_socket_options`` which includes disabling
      Nagle's algorithm (sets TCP_NODELAY to 1).
    """

    default_port: int = port_by_scheme["http"]

    #: Disable Nagle's algorithm by default.
    #: ``[(socket.IPPROTO_TCP, socket.TCP_NODELAY, 1)]``
    default_socket_options: connection._TYPE_SOCKET_OPTIONS = [
        (socket.IPPROTO_TCP, socket.TCP_NODELAY, 1)
    ]

    def __init__(
        self,
        host: str,
        port: int | None = None,
        blocksize: int = DEFAULT_BLOCKSIZE,
        socket_options: connection._TYPE_SOCKET_OPTIONS
        | None = default_socket_options,
    ) -> None:
        self.socket_options = socket_options
        super().__init__(host=host, port=port, blocksize=blocksize)

    def _new_conn(self) -> socket.socket:
        """Establish a socket connection and set nodelay settings on it.

        :return: New socket connection.
        """
        try:
            return connection.create_connection(
                (self.host, self.port),
                source_address=self.source_address,
                socket_options=self.socket_options,
            )
        except socket.gaierror as e:
            raise NameResolutionError(self.host, self.port, e) from e
        except OSError as e:
            raise NewConnectionError(
                self.host,
                self.port,
                f"Failed to connect to {self.host} port {self.port}: {e}",
            ) from e

    def connect(self) -> None:
        self.sock = self._new_conn()

    def putrequest(
        self,
        method: str,
        url: str,
        skip_host: bool = False,
        skip_accept_encoding: bool = False,
    ) -> None:
        """"""
        # Empty docstring because the indentation of CPython's implementation
        # is broken but we don't want this method in our documentation.
        match = _CONTAINS_CONTROL_CHAR_RE.search(method)
        if match:
            raise ValueError(
                f"Method cannot contain non-token characters {method!r} (found at least {match.group()!r})"
            )

        return super().putrequest(
            method, url, skip_host=skip_host, skip_accept_encoding=skip_accept_encoding
        )


class HTTPSConnection(HTTPConnection):
    """
    Wraps the socket with the engine's shared :class:`ssl.SSLContext`,
    verifying the server certificate against ``host``.
    """

    default_port = port_by_scheme["https"]

    def __init__(
        self,
        host: str,
        port: int | None = None,
        ssl_context: ssl.SSLContext | None = None,
        blocksize: int = DEFAULT_BLOCKSIZE,
        socket_options: connection._TYPE_SOCKET_OPTIONS
        | None = HTTPConnection.default_socket_options,
    ) -> None:
        super().__init__(
            host, port=port, blocksize=blocksize, socket_options=socket_options
        )
        self.ssl_context = ssl_context

    def connect(self) -> None:
        sock = self._new_conn()
        if self.ssl_context is None:
            self.ssl_context = create_default_context()
        try:
            self.sock = ssl_wrap_socket(
                sock, self.ssl_context, server_hostname=self.host
            )
        except BaseSSLError as e:
            sock.close()
            raise SSLError(f"SSL connect error: {e}") from e


class HTTPClientHandle(Handle):
    """A handle that keeps its socket connection alive between requests.

    The connection is not a per-request option, so :meth:`reset` leaves it
    open and the next request to the same scheme, host and port reuses it.
    """

    def __init__(self) -> None:
        super().__init__()
        self.conn: HTTPConnection | None = None
        self.conn_key: tuple[str, str, int] | None = None
        self.num_connections = 0

    def close(self) -> None:
        conn, self.conn, self.conn_key = self.conn, None, None
        if conn is not None:
            conn.close()


class HTTPClientEngine(TransportEngine):
    """
    Transport engine built on :mod:`http.client`.

    :param blocksize:
        How many bytes to ask of the upload read callback, and to read from
        the socket, per call.

    :param socket_options:
        Options applied to every new socket; see
        :attr:`HTTPConnection.default_socket_options`.
    """

    def __init__(
        self,
        blocksize: int = DEFAULT_BLOCKSIZE,
        socket_options: connection._TYPE_SOCKET_OPTIONS
        | None = HTTPConnection.default_socket_options,
    ) -> None:
        super().__init__()
        self.blocksize = blocksize
        self.socket_options = socket_options
        self.ssl_context: ssl.SSLContext | None = None

    def __repr__(self) -> str:
        return f"{type(self).__name__}(blocksize={self.blocksize})"

    def global_init(self) -> None:
        if ssl is not None:
            self.ssl_context = create_default_context()

    def create_handle(self) -> HTTPClientHandle:
        self.ensure_initialized()
        return HTTPClientHandle()

    def dispose_handle(self, handle: Handle) -> None:
        typing.cast(HTTPClientHandle, handle).close()

    def perform(self, handle: Handle) -> None:
        handle = typing.cast(HTTPClientHandle, handle)
        url = handle.getopt(Option.URL) or ""
        scheme, host, port, target = _split_url(url)
        method = _request_method(handle)
        headers = [
            split_header_line(line) for line in handle.getopt(Option.HTTPHEADER) or ()
        ]
        header_keys = {name.lower() for name, _ in headers}

        try:
            conn = self._get_conn(handle, scheme, host, port)
            conn.putrequest(
                method,
                target,
                skip_host="host" in header_keys,
                skip_accept_encoding="accept-encoding" in header_keys,
            )
            if "user-agent" not in header_keys:
                conn.putheader("User-Agent", _get_default_user_agent())
            for name, value in headers:
                conn.putheader(name, value)

            if handle.getopt(Option.UPLOAD):
                self._send_upload(conn, handle, header_keys)
            elif handle.getopt(Option.POST):
                self._send_post(conn, handle, header_keys)
            else:
                conn.endheaders()

            response = conn.getresponse()
            handle.status = response.status
            for name, value in response.getheaders():
                handle.response_headers.add(name, value)
            length = self._read_body(response, handle.getopt(Option.WRITEFUNCTION))

        except TransportError:
            handle.close()
            raise
        except InvalidURL as e:
            handle.close()
            raise LocationParseError(url) from e
        except BaseSSLError as e:
            handle.close()
            raise SSLError(f"SSL error: {e}") from e
        except (OSError, HTTPException, ValueError) as e:
            handle.close()
            raise ProtocolError(f"Connection aborted: {e!r}") from e

        log.debug(
            '%s://%s:%s "%s %s HTTP/1.1" %s %s',
            scheme,
            host,
            port,
            method,
            target,
            handle.status,
            length,
        )
        if response.will_close:
            log.debug("Server asked to close the connection: %s", host)
            handle.close()

    def _get_conn(
        self, handle: HTTPClientHandle, scheme: str, host: str, port: int
    ) -> HTTPConnection:
        key = (scheme, host, port)
        conn = handle.conn
        if conn is not None and (
            handle.conn_key != key or connection.is_connection_dropped(conn)
        ):
            log.debug("Resetting dropped connection: %s", handle.conn_key)
            handle.close()
            conn = None

        if conn is None:
            handle.num_connections += 1
            log.debug(
                "Starting new %s connection (%d): %s:%s",
                scheme.upper(),
                handle.num_connections,
                host,
                port,
            )
            if scheme == "https":
                conn = HTTPSConnection(
                    host,
                    port,
                    ssl_context=self.ssl_context,
                    blocksize=self.blocksize,
                    socket_options=self.socket_options,
                )
            else:
                conn = HTTPConnection(
                    host,
                    port,
                    blocksize=self.blocksize,
                    socket_options=self.socket_options,
                )
            handle.conn, handle.conn_key = conn, key
        return conn

    def _send_post(
        self, conn: HTTPConnection, handle: Handle, header_keys: set[str]
    ) -> None:
        body = handle.getopt(Option.POSTFIELDS) or b""
        size = handle.getopt(Option.POSTFIELDSIZE)
        if size is not None:
            body = body[:size]
        if "content-length" not in header_keys:
            conn.putheader("Content-Length", str(len(body)))
        conn.endheaders(message_body=body)

    def _send_upload(
        self, conn: HTTPConnection, handle: Handle, header_keys: set[str]
    ) -> None:
        read: _TYPE_READ_FUNCTION | None = handle.getopt(Option.READFUNCTION)
        size: int | None = handle.getopt(Option.INFILESIZE)
        if read is None:
            read = _empty_read

        if size is None or size < 0:
            if "transfer-encoding" not in header_keys:
                conn.putheader("Transfer-Encoding", "chunked")
            conn.endheaders()
            self._send_chunked(conn, read)
            return

        if "content-length" not in header_keys:
            conn.putheader("Content-Length", str(size))
        conn.endheaders()

        remaining = size
        while remaining > 0:
            chunk = self._read_chunk(read)
            if not chunk:
                raise BodyReadError(
                    f"Upload body ended early: {remaining} of {size} bytes not sent"
                )
            if len(chunk) > remaining:
                raise BodyReadError(
                    f"Read callback returned {len(chunk)} bytes with only "
                    f"{remaining} of {size} bytes left to send"
                )
            conn.send(chunk)
            remaining -= len(chunk)

    def _send_chunked(self, conn: HTTPConnection, read: _TYPE_READ_FUNCTION) -> None:
        while True:
            chunk = self._read_chunk(read)
            if not chunk:
                break
            to_send = bytearray(hex(len(chunk))[2:].encode())
            to_send += b"\r\n"
            to_send += chunk
            to_send += b"\r\n"
            conn.send(to_send)

        # After the loop, to always have a closed body
        conn.send(b"0\r\n\r\n")

    def _read_chunk(self, read: _TYPE_READ_FUNCTION) -> bytes:
        chunk = read(self.blocksize)
        if len(chunk) > self.blocksize:
            raise BodyReadError(
                f"Read callback returned {len(chunk)} bytes, "
                f"more than the {self.blocksize} requested"
            )
        return chunk

    def _read_body(
        self, response: _HTTPResponse, write: _TYPE_WRITE_FUNCTION | None
    ) -> int:
        length = 0
        while True:
            chunk = response.read(self.blocksize)
            if not chunk:
                break
            length += len(chunk)
            if write is None:
                continue
            written = write(chunk)
            if written != len(chunk):
                raise BodyWriteError(
                    f"Failure writing output to destination, "
                    f"passed {len(chunk)} returned {written}"
                )
        return length


def _split_url(url: str) -> tuple[str, str, int, str]:
    try:
        parts = urlsplit(url)
        port = parts.port
    except ValueError:
        raise LocationParseError(url) from None

    scheme = parts.scheme.lower()
    host = parts.hostname
    if scheme not in port_by_scheme or not host:
        raise LocationParseError(url)

    target = parts.path or "/"
    if parts.query:
        target += "?" + parts.query
    if port is None:
        port = port_by_scheme[scheme]
    return scheme, host, port, target


def _request_method(handle: Handle) -> str:
    custom = handle.getopt(Option.CUSTOMREQUEST)
    if custom:
        return str(custom)
    if handle.getopt(Option.UPLOAD):
        return "PUT"
    if handle.getopt(Option.POST):
        return "POST"
    return "GET"


def _empty_read(size: int) -> bytes:
    return b""


def _get_default_user_agent() -> str:
    return f"python-pooledhttp/{__version__}"
