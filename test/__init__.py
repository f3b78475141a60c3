from __future__ import annotations

import threading
import typing

from pooledhttp.engine import Handle, Option, TransportEngine
from pooledhttp.exceptions import BodyWriteError, TransportError


class StubHandle(Handle):
    def __init__(self, number: int) -> None:
        super().__init__()
        self.number = number
        self.num_resets = 0
        self.disposed = False

    def reset(self) -> None:
        super().reset()
        self.num_resets += 1

    def __repr__(self) -> str:
        return f"<StubHandle {self.number}>"


class StubEngine(TransportEngine):
    """
    A transport engine that never touches the network.

    Every :meth:`perform` records the options it was given, drains the
    upload read callback ``read_size`` bytes at a time, then answers with
    ``status``, ``headers`` and the body split into ``chunks``.
    """

    def __init__(
        self,
        status: int = 200,
        chunks: typing.Iterable[bytes] = (),
        headers: dict[str, str] | None = None,
        fail_create: bool = False,
        error: TransportError | None = None,
        read_size: int = 7,
    ) -> None:
        super().__init__()
        self.status = status
        self.chunks = list(chunks)
        self.headers = headers or {}
        self.fail_create = fail_create
        self.error = error
        self.read_size = read_size

        self.lock = threading.Lock()
        self.num_global_inits = 0
        self.created: list[StubHandle] = []
        self.disposed: list[StubHandle] = []
        self.performed: list[dict[Option, typing.Any]] = []
        self.uploads: list[bytes] = []
        self.read_sizes: list[int] = []

    def global_init(self) -> None:
        self.num_global_inits += 1

    def create_handle(self) -> StubHandle | None:
        if self.fail_create:
            return None
        with self.lock:
            handle = StubHandle(len(self.created))
            self.created.append(handle)
        return handle

    def dispose_handle(self, handle: Handle) -> None:
        handle = typing.cast(StubHandle, handle)
        handle.disposed = True
        with self.lock:
            self.disposed.append(handle)

    def perform(self, handle: Handle) -> None:
        with self.lock:
            self.performed.append(dict(handle.options))
        if self.error is not None:
            raise self.error

        if handle.getopt(Option.UPLOAD):
            read = handle.getopt(Option.READFUNCTION)
            upload = b""
            while True:
                chunk = read(self.read_size)
                self.read_sizes.append(len(chunk))
                if not chunk:
                    break
                upload += chunk
            with self.lock:
                self.uploads.append(upload)

        handle.status = self.status
        for name, value in self.headers.items():
            handle.response_headers.set(name, value)

        write = handle.getopt(Option.WRITEFUNCTION)
        for chunk in self.chunks:
            if write(chunk) != len(chunk):
                raise BodyWriteError("Failure writing output to destination")
