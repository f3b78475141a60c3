from __future__ import annotations

import enum
import typing

from ._collections import HTTPHeaders, ValidHTTPHeaderSource
from .util.typing import _TYPE_BODY
from .util.url import Url
from .util.util import to_bytes, to_str

__all__ = ["Request", "RequestMethod"]


class RequestMethod(str, enum.Enum):
    GET = "GET"
    POST = "POST"
    PUT = "PUT"
    DELETE = "DELETE"

    def __str__(self) -> str:
        return self.value


_TYPE_METHOD = typing.Union[RequestMethod, str]


def _coerce_method(method: object) -> object:
    """Map a method name onto :class:`RequestMethod`.

    Values that name none of the four methods are kept as given; the
    connection refuses them when the request is executed.
    """
    if isinstance(method, RequestMethod):
        return method
    if isinstance(method, str):
        try:
            return RequestMethod(method.upper())
        except ValueError:
            pass
    return method


class Request:
    """
    An outbound HTTP request.

    :param url:
        The target, as a string or :class:`~pooledhttp.util.url.Url`.

    :param method:
        One of :class:`RequestMethod`, or its name. Defaults to ``GET``.

    :param headers:
        Header fields to send, as given (names are case-sensitive).

    :param content:
        The request body. ``str`` is encoded as UTF-8.

    The connection never modifies a request, so one instance may be sent any
    number of times.
    """

    def __init__(
        self,
        url: Url | str = "",
        method: _TYPE_METHOD = RequestMethod.GET,
        headers: ValidHTTPHeaderSource | None = None,
        content: _TYPE_BODY = b"",
    ) -> None:
        self.url = url if isinstance(url, Url) else Url(url)
        self.method = _coerce_method(method)
        self.headers = HTTPHeaders(headers)
        self.content = to_bytes(content)

    # Mutators

    def set_url(self, url: Url | str) -> None:
        self.url = url if isinstance(url, Url) else Url(url)

    def set_request_type(self, method: _TYPE_METHOD) -> None:
        self.method = _coerce_method(method)

    def set_mime_type(self, mime_type: str) -> None:
        self.headers.set("Content-Type", mime_type)

    def set_content(self, content: _TYPE_BODY) -> None:
        self.content = to_bytes(content)

    def debug_string(self) -> str:
        """Render the request roughly as it would look on the wire."""
        if isinstance(self.method, RequestMethod):
            out = f"{self.method.value} "
        else:
            out = "??INVALID?? "
        out += self.url.path
        for line in self.headers.lines():
            out += "\n" + line
        if self.content:
            out += "\n\n" + to_str(self.content, errors="replace")
        return out

    def __repr__(self) -> str:
        return f"{type(self).__name__}(method={self.method!r}, url={self.url.path!r})"
