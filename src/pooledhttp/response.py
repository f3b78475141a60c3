from __future__ import annotations

import json as _json
import logging
import typing

from ._collections import HTTPHeaders, ValidHTTPHeaderSource

log = logging.getLogger(__name__)


class BodyAccumulator:
    """
    Collects a response body as the transport delivers it.

    :meth:`write` is handed to the engine as its write callback. It appends
    every chunk and reports the whole chunk as accepted. With ``limit`` set,
    a chunk that would grow the body past ``limit`` bytes is refused (``0``
    is returned) and the engine aborts the exchange.
    """

    def __init__(self, limit: int | None = None) -> None:
        self._buffer = bytearray()
        self.limit = limit

    def __len__(self) -> int:
        return len(self._buffer)

    def write(self, chunk: bytes) -> int:
        if self.limit is not None and len(self._buffer) + len(chunk) > self.limit:
            log.warning(
                "Response body exceeds %d bytes, refusing %d more bytes",
                self.limit,
                len(chunk),
            )
            return 0
        self._buffer += chunk
        return len(chunk)

    def getvalue(self) -> bytes:
        return bytes(self._buffer)


class Response:
    """
    An inbound HTTP response, fully read.

    :param data:
        The response body.

    :param status:
        The numeric status code. ``-1`` means it has not been set; a
        response returned by a connection always has the server's code,
        including error codes such as 404 or 500.

    :param headers:
        The response header fields.
    """

    def __init__(
        self,
        data: bytes = b"",
        status: int = -1,
        headers: ValidHTTPHeaderSource | None = None,
    ) -> None:
        self.data = data
        self.status = status
        self.headers = HTTPHeaders(headers)

    def json(self) -> typing.Any:
        """
        Parses the body of the HTTP response as JSON.

        To use a custom JSON decoder pass the result of :attr:`Response.data` to
        the decoder.

        This method can raise either `UnicodeDecodeError` or `json.JSONDecodeError`.
        """
        data = self.data.decode("utf-8")
        return _json.loads(data)

    def __repr__(self) -> str:
        return f"<{type(self).__name__} status={self.status} length={len(self.data)}>"
