from __future__ import annotations

import dataclasses
import logging
import threading
import typing
import weakref
from types import TracebackType

from .engine import Handle, Option, TransportEngine, default_engine
from .exceptions import InvalidMethodError, TransportError
from .handlepool import HandlePool
from .request import Request, RequestMethod
from .response import BodyAccumulator, Response
from .util.request import BodyCursor

log = logging.getLogger(__name__)

__all__ = ["Connection", "ConnectionOptions"]


@dataclasses.dataclass(frozen=True)
class ConnectionOptions:
    """
    Settings for a :class:`Connection`.

    :param max_pool_size:
        Number of idle transport handles kept for reuse.

    :param blocksize:
        Chunk size used by the default engine when a connection builds it.
        Ignored when an engine is passed in.

    :param max_response_bytes:
        Upper bound on a response body. ``None`` (the default) accumulates
        bodies of any size; past the bound the exchange is aborted and the
        request fails like any other transport failure.
    """

    max_pool_size: int = 10
    blocksize: int = 16384
    max_response_bytes: int | None = None

    def __post_init__(self) -> None:
        if self.max_pool_size < 0:
            raise ValueError(f"max_pool_size must be >= 0, got {self.max_pool_size}")
        if self.blocksize <= 0:
            raise ValueError(f"blocksize must be > 0, got {self.blocksize}")
        if self.max_response_bytes is not None and self.max_response_bytes < 0:
            raise ValueError(
                f"max_response_bytes must be >= 0, got {self.max_response_bytes}"
            )


class Connection:
    """
    Issues blocking HTTP requests over a pool of reusable transport handles.

    :param options:
        A :class:`ConnectionOptions`; defaults apply when omitted.

    :param engine:
        The :class:`~pooledhttp.engine.TransportEngine` to drive. Defaults to
        the process-wide :class:`~pooledhttp.connection.HTTPClientEngine`
        (or a private one when ``options.blocksize`` differs from its
        default).

    Any number of threads may call :meth:`blocking_request` on the same
    connection; each call gets a handle of its own for its duration.

    Example::

        with pooledhttp.Connection() as conn:
            r = conn.blocking_request(pooledhttp.Request("http://example.com/"))
            if r is not None:
                print(r.status, r.data)
    """

    def __init__(
        self,
        options: ConnectionOptions | None = None,
        engine: TransportEngine | None = None,
    ) -> None:
        self.options = options or ConnectionOptions()
        if engine is None:
            engine = _engine_for(self.options)
        self.engine = engine
        self.engine.ensure_initialized()

        self.pool = HandlePool(engine, maxsize=self.options.max_pool_size)
        self._finalizer = weakref.finalize(self, self.pool.close)

        # These are mostly for testing and debugging purposes.
        self.num_requests = 0
        self._counter_lock = threading.Lock()

        # Warm the pool with one handle.
        with self.pool.scoped() as handle:
            if handle is None:
                log.warning("Transport engine %r could not create a handle", engine)

    def __repr__(self) -> str:
        return f"{type(self).__name__}(pool={self.pool!r})"

    def __enter__(self) -> Connection:
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: TracebackType | None,
    ) -> typing.Literal[False]:
        self.close()
        # Return False to re-raise any potential exceptions
        return False

    def close(self) -> None:
        """Dispose every idle handle. The connection cannot be used afterwards."""
        self._finalizer()

    def blocking_request(self, request: Request) -> Response | None:
        """
        Send ``request`` and wait for the whole response.

        :returns:
            The :class:`~pooledhttp.response.Response`, whatever its status
            code, or ``None`` when no handle could be created or the exchange
            failed. The reason is logged; nothing is retried.

        :raises ~pooledhttp.exceptions.InvalidMethodError:
            When ``request.method`` is not GET, POST, PUT or DELETE. Nothing
            is sent.
        """
        with self._counter_lock:
            self.num_requests += 1

        output = BodyAccumulator(limit=self.options.max_response_bytes)

        with self.pool.scoped() as handle:
            if handle is None:
                log.error("Could not initialize transport handle.")
                return None

            handle.setopt(Option.URL, request.url.path)
            handle.setopt(Option.WRITEFUNCTION, output.write)
            _configure_method(handle, request)

            header_lines = request.headers.lines()
            if header_lines:
                handle.setopt(Option.HTTPHEADER, header_lines)

            try:
                self.engine.perform(handle)
            except TransportError as e:
                log.error("Request failed: %s %s: %s", request.method, request.url, e)
                return None

            return Response(
                data=output.getvalue(),
                status=self.engine.status_code(handle),
                headers=self.engine.response_headers(handle),
            )


def _configure_method(handle: Handle, request: Request) -> None:
    method = request.method
    if method is RequestMethod.GET:
        pass
    elif method is RequestMethod.POST:
        handle.setopt(Option.POST, True)
        handle.setopt(Option.POSTFIELDS, request.content)
        handle.setopt(Option.POSTFIELDSIZE, len(request.content))
    elif method is RequestMethod.PUT:
        handle.setopt(Option.UPLOAD, True)
        handle.setopt(Option.INFILESIZE, len(request.content))
        handle.setopt(Option.READFUNCTION, BodyCursor(request.content).read)
    elif method is RequestMethod.DELETE:
        handle.setopt(Option.CUSTOMREQUEST, "DELETE")
    else:
        log.critical("Invalid request type: %r", method)
        raise InvalidMethodError(method)


def _engine_for(options: ConnectionOptions) -> TransportEngine:
    engine = default_engine()
    if options.blocksize != engine.blocksize:
        from .connection import HTTPClientEngine

        engine = HTTPClientEngine(blocksize=options.blocksize)
    return engine
