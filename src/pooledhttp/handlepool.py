from __future__ import annotations

import logging
import threading
import typing
from types import TracebackType

from .engine import Handle, TransportEngine
from .exceptions import ClosedPoolError, EngineUnavailableError

log = logging.getLogger(__name__)

__all__ = ["HandlePool", "ScopedHandle"]


class HandlePool:
    """
    Thread-safe freelist of idle transport handles.

    :param engine:
        The :class:`~pooledhttp.engine.TransportEngine` that creates, resets
        and disposes the handles.

    :param maxsize:
        Number of idle handles to keep for reuse. More than 1 is useful in
        multithreaded situations. The pool never blocks: when it is empty a
        new handle is created, and handles released while ``maxsize`` are
        already idle are disposed.

    Handles come back out in last-released-first order, so the warmest one
    is reused. Creating, resetting and disposing handles happen outside the
    pool's lock; the lock only guards the idle list.
    """

    def __init__(self, engine: TransportEngine, maxsize: int = 10) -> None:
        if maxsize < 0:
            raise ValueError(f"maxsize must be >= 0, got {maxsize}")

        self.engine = engine
        self.maxsize = maxsize
        self.lock = threading.Lock()
        self.pool: list[Handle] = []
        self.closed = False

        # These are mostly for testing and debugging purposes.
        self.num_handles = 0
        self.num_disposed = 0

    def __repr__(self) -> str:
        return f"{type(self).__name__}(engine={self.engine!r}, maxsize={self.maxsize})"

    def __enter__(self) -> HandlePool:
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

    @property
    def num_idle(self) -> int:
        with self.lock:
            return len(self.pool)

    def _new_handle(self) -> Handle | None:
        """
        Return a fresh handle, or ``None`` when the engine cannot build one.
        """
        with self.lock:
            self.num_handles += 1
            num_handles = self.num_handles
        log.debug("Starting new transport handle (%d)", num_handles)

        try:
            handle = self.engine.create_handle()
        except EngineUnavailableError as e:
            log.error("Could not initialize transport handle: %s", e)
            handle = None
        else:
            if handle is None:
                log.error("Could not initialize transport handle: %r", self.engine)

        if handle is None:
            with self.lock:
                self.num_handles -= 1
        return handle

    def acquire(self) -> Handle | None:
        """
        Get a handle. Will return the most recently released idle handle if
        one is available. Otherwise, a fresh handle is created.

        Never blocks. ``None`` means the engine could not create a handle;
        callers must treat that as the engine being unavailable.
        """
        with self.lock:
            if self.closed:
                raise ClosedPoolError(self, "Pool is closed.")
            if self.pool:
                return self.pool.pop()

        return self._new_handle()

    def release(self, handle: Handle | None) -> None:
        """
        Reset a handle and put it back into the pool.

        If the pool already holds ``maxsize`` idle handles, or has been
        closed, the handle is disposed instead. ``None`` is ignored.
        """
        if handle is None:
            return

        try:
            self.engine.reset_handle(handle)
        except Exception:
            log.warning("Failed to reset handle %r, disposing it", handle)
            self._dispose(handle)
            raise

        with self.lock:
            if not self.closed and len(self.pool) < self.maxsize:
                self.pool.append(handle)
                return
            closed = self.closed

        if not closed:
            log.warning(
                "Handle pool is full, discarding handle: %r. Handle pool size: %s",
                handle,
                self.maxsize,
            )
        self._dispose(handle)

    def scoped(self) -> ScopedHandle:
        """Acquire a handle that is released when the scope ends.

        >>> with pool.scoped() as handle:
        ...     if handle is not None:
        ...         engine.perform(handle)
        """
        return ScopedHandle(self, self.acquire())

    def resize(self, size: int) -> None:
        """
        Dispose idle handles until at most ``size`` remain.

        The lock is dropped around each disposal so concurrent
        acquire/release calls are not held up by a slow teardown.
        """
        self.lock.acquire()
        try:
            while len(self.pool) > size:
                handle = self.pool.pop()
                self.lock.release()
                try:
                    self._dispose(handle)
                finally:
                    self.lock.acquire()
        finally:
            self.lock.release()

    def close(self) -> None:
        """
        Close the pool, disposing all idle handles.

        Handles still in use are disposed when they are released.
        """
        with self.lock:
            if self.closed:
                return
            self.closed = True
        self.resize(0)

    def _dispose(self, handle: Handle) -> None:
        with self.lock:
            self.num_disposed += 1
        self.engine.dispose_handle(handle)


class ScopedHandle:
    """
    Owns one acquired handle and gives it back to its pool exactly once.

    Used as a context manager, the handle is released whichever way the
    ``with`` block is left: normally, by an early ``return``, or by an
    exception. Calling :meth:`release` by hand is also allowed; later calls,
    including the one made on exit, do nothing.
    """

    def __init__(self, pool: HandlePool, handle: Handle | None) -> None:
        self._pool = pool
        self._handle = handle
        self._released = False

    def get(self) -> Handle | None:
        return self._handle

    @property
    def released(self) -> bool:
        return self._released

    def release(self) -> None:
        if self._released:
            return
        self._released = True
        self._pool.release(self._handle)

    def __enter__(self) -> Handle | None:
        return self._handle

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: TracebackType | None,
    ) -> typing.Literal[False]:
        self.release()
        return False
