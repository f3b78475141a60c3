from __future__ import annotations

import socket
import typing

if typing.TYPE_CHECKING:
    from .handlepool import HandlePool

# Base Exceptions


class HTTPError(Exception):
    """Base exception used by this module."""

    pass


_TYPE_REDUCE_RESULT = typing.Tuple[
    typing.Callable[..., object], typing.Tuple[object, ...]
]


class PoolError(HTTPError):
    """Base exception for errors caused within a pool."""

    def __init__(self, pool: HandlePool | None, message: str) -> None:
        self.pool = pool
        super().__init__(f"{pool}: {message}")

    def __reduce__(self) -> _TYPE_REDUCE_RESULT:
        # For pickling purposes.
        return self.__class__, (None, None)


class ClosedPoolError(PoolError):
    """Raised when a handle is requested from a pool that has been closed."""

    pass


class EngineUnavailableError(HTTPError):
    """Raised by a transport engine that cannot initialize a new handle.

    The pool turns this into a ``None`` handle and the connection turns that
    into a ``None`` response, so callers only see it when driving an engine
    directly.
    """

    pass


class InvalidMethodError(HTTPError, ValueError):
    """Raised when a request carries a method outside GET, POST, PUT and DELETE.

    This is a programming error, not a request failure: it is never converted
    into a ``None`` response.
    """

    def __init__(self, method: object) -> None:
        self.method = method
        super().__init__(f"Invalid request type: {method!r}")

    def __reduce__(self) -> _TYPE_REDUCE_RESULT:
        # For pickling purposes.
        return self.__class__, (self.method,)


# Transport Exceptions


class TransportError(HTTPError):
    """Raised by an engine when the network exchange does not complete.

    :param reason: The engine's diagnostic text.
    """

    def __init__(self, reason: str) -> None:
        self.reason = reason
        super().__init__(reason)


class LocationParseError(TransportError):
    """Raised when the engine cannot find a scheme and host in the URL."""

    def __init__(self, location: str) -> None:
        self.location = location
        super().__init__(f"URL using bad/illegal format or missing URL: {location!r}")

    def __reduce__(self) -> _TYPE_REDUCE_RESULT:
        # For pickling purposes.
        return self.__class__, (self.location,)


class NewConnectionError(TransportError):
    """Raised when we fail to establish a new connection. Usually ECONNREFUSED."""

    def __init__(self, host: str, port: int, message: str) -> None:
        self.host = host
        self.port = port
        super().__init__(message)

    def __reduce__(self) -> _TYPE_REDUCE_RESULT:
        # For pickling purposes.
        return self.__class__, (self.host, self.port, self.reason)


class NameResolutionError(NewConnectionError):
    """Raised when host name resolution fails."""

    def __init__(self, host: str, port: int, reason: socket.gaierror) -> None:
        self.gaierror = reason
        super().__init__(host, port, f"Could not resolve host: {host} ({reason})")

    def __reduce__(self) -> _TYPE_REDUCE_RESULT:
        # For pickling purposes.
        return self.__class__, (self.host, self.port, self.gaierror)


class SSLError(TransportError):
    """Raised when the TLS handshake or a TLS read/write fails."""

    pass


class ProtocolError(TransportError):
    """Raised when something unexpected happens mid-request/response."""

    pass


class BodyReadError(TransportError):
    """Raised when an upload read callback breaks its contract.

    Either it produced more bytes than were requested, or it ran dry before
    the declared upload size was sent.
    """

    pass


class BodyWriteError(TransportError):
    """Raised when the response write callback accepts fewer bytes than given."""

    pass
