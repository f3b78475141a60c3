from __future__ import annotations


class BodyCursor:
    """
    Streams a request body out to the transport in caller-sized chunks.

    Each :meth:`read` hands out at most ``min(size, remaining)`` bytes and
    advances the cursor by exactly that much, so the chunks concatenate to
    the original body in order. Once the body is exhausted it returns
    ``b""``.

    >>> cursor = BodyCursor(b"hello")
    >>> cursor.read(3), cursor.read(3), cursor.read(3)
    (b'hel', b'lo', b'')
    """

    def __init__(self, data: bytes) -> None:
        self._view = memoryview(data)
        self.offset = 0

    def __len__(self) -> int:
        return len(self._view)

    @property
    def remaining(self) -> int:
        return len(self._view) - self.offset

    def read(self, size: int) -> bytes:
        actual = min(max(size, 0), self.remaining)
        chunk = self._view[self.offset : self.offset + actual].tobytes()
        self.offset += actual
        return chunk
