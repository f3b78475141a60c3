"""
The boundary between the pooling layer and the transport that moves bytes.

A :class:`TransportEngine` creates, resets, disposes and drives
:class:`Handle` objects. Everything about a single exchange is expressed as
handle options (:class:`Option`); the engine reads them in
:meth:`TransportEngine.perform`. The pool and the connection only ever talk
to an engine through this interface, so tests can swap in a scripted one.
"""

from __future__ import annotations

import enum
import logging
import threading
import typing

from ._collections import HTTPHeaders

if typing.TYPE_CHECKING:
    from .connection import HTTPClientEngine

log = logging.getLogger(__name__)


class Option(enum.Enum):
    #: Target URL string.
    URL = "url"
    #: ``Callable[[bytes], int]`` receiving each chunk of the response body.
    WRITEFUNCTION = "writefunction"
    #: Send the request as a POST.
    POST = "post"
    #: POST body bytes.
    POSTFIELDS = "postfields"
    #: Number of ``POSTFIELDS`` bytes to send.
    POSTFIELDSIZE = "postfieldsize"
    #: Send the request body from ``READFUNCTION`` as a PUT upload.
    UPLOAD = "upload"
    #: Declared upload size. Unset means chunked transfer encoding.
    INFILESIZE = "infilesize"
    #: ``Callable[[int], bytes]`` producing at most the requested bytes.
    READFUNCTION = "readfunction"
    #: Verb that overrides whatever the other options imply.
    CUSTOMREQUEST = "customrequest"
    #: List of ``"name: value"`` header lines.
    HTTPHEADER = "httpheader"


class Handle:
    """
    One engine session: the options of the exchange being configured, and
    what came back from the last one.

    A handle is owned by one caller at a time. :meth:`reset` returns it to
    neutral configuration so nothing from one request is seen by the next.
    """

    def __init__(self) -> None:
        self.options: dict[Option, typing.Any] = {}
        self.status = -1
        self.response_headers = HTTPHeaders()

    def setopt(self, option: Option, value: typing.Any) -> None:
        self.options[option] = value

    def getopt(self, option: Option, default: typing.Any = None) -> typing.Any:
        return self.options.get(option, default)

    def reset(self) -> None:
        self.options.clear()
        self.status = -1
        self.response_headers = HTTPHeaders()

    def __repr__(self) -> str:
        return f"<{type(self).__name__} at {id(self):#x}>"


class TransportEngine:
    """
    Base class for transport engines.

    Subclasses implement :meth:`create_handle`, :meth:`perform` and, when
    their handles hold resources, :meth:`dispose_handle`.
    :meth:`global_init` runs once per engine, before its first handle is
    created, through :meth:`ensure_initialized`.
    """

    def __init__(self) -> None:
        self._init_lock = threading.Lock()
        self._initialized = False

    def ensure_initialized(self) -> None:
        with self._init_lock:
            if self._initialized:
                return
            log.debug("Initializing transport engine %r", self)
            self.global_init()
            self._initialized = True

    @property
    def initialized(self) -> bool:
        return self._initialized

    def global_init(self) -> None:
        """Process-wide setup; the base engine needs none."""

    def create_handle(self) -> Handle | None:
        """Return a fresh handle.

        An engine that cannot build one returns ``None`` or raises
        :class:`~pooledhttp.exceptions.EngineUnavailableError`.
        """
        raise NotImplementedError()

    def reset_handle(self, handle: Handle) -> None:
        handle.reset()

    def dispose_handle(self, handle: Handle) -> None:
        pass

    def perform(self, handle: Handle) -> None:
        """Run the exchange configured on ``handle``, blocking until done.

        :raises ~pooledhttp.exceptions.TransportError:
            When the exchange does not complete; the message is the
            engine's diagnostic text.
        """
        raise NotImplementedError()

    def status_code(self, handle: Handle) -> int:
        return handle.status

    def response_headers(self, handle: Handle) -> HTTPHeaders:
        return handle.response_headers.copy()


_default_engine: HTTPClientEngine | None = None
_default_engine_lock = threading.Lock()


def default_engine() -> HTTPClientEngine:
    """Return the process-wide :class:`~pooledhttp.connection.HTTPClientEngine`.

    It is shared by every connection built without an explicit engine, so
    its one-time initialization happens once per process.
    """
    global _default_engine

    with _default_engine_lock:
        if _default_engine is None:
            from .connection import HTTPClientEngine

            _default_engine = HTTPClientEngine()
        return _default_engine
