from __future__ import annotations

import typing
from collections.abc import Mapping, MutableMapping

__all__ = ["HTTPHeaders"]


ValidHTTPHeaderSource = typing.Union[
    "HTTPHeaders",
    typing.Mapping[str, str],
    typing.Iterable[typing.Tuple[str, str]],
]


class HTTPHeaders(MutableMapping[str, str]):
    """
    :param headers:
        An iterable of field-value pairs, or a mapping.

    :param kwargs:
        Additional field-value pairs.

    A ``dict`` like container for storing HTTP Headers.

    Field names are stored and compared exactly as given: ``Content-Type``
    and ``content-type`` are two different fields. Setting an existing name
    overwrites its value (last write wins). Looking up a missing name with
    :meth:`get` returns an empty string rather than ``None``. Names cannot
    contain ``:``, which separates a name from its value on the wire.

    >>> headers = HTTPHeaders()
    >>> headers.set('Content-Type', 'application/json')
    >>> headers.get('Content-Type')
    'application/json'
    >>> headers.get('content-type')
    ''
    """

    _container: dict[str, str]

    def __init__(self, headers: ValidHTTPHeaderSource | None = None, **kwargs: str):
        super().__init__()
        self._container = {}
        if headers is not None:
            self.update(headers)
        if kwargs:
            self.update(kwargs)

    def __setitem__(self, key: str, val: str) -> None:
        if ":" in key:
            raise ValueError(f"Header name cannot contain ':', got {key!r}")
        self._container[key] = val

    def __getitem__(self, key: str) -> str:
        return self._container[key]

    def __delitem__(self, key: str) -> None:
        del self._container[key]

    def __contains__(self, key: object) -> bool:
        return key in self._container

    def __len__(self) -> int:
        return len(self._container)

    def __iter__(self) -> typing.Iterator[str]:
        return iter(self._container)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Mapping):
            return False
        return dict(self.items()) == dict(other.items())

    def __ne__(self, other: object) -> bool:
        return not self.__eq__(other)

    def set(self, key: str, val: str) -> None:
        self[key] = val

    def erase(self, key: str) -> None:
        """Remove ``key`` if present; a missing key is not an error."""
        self._container.pop(key, None)

    def get(self, key: str, default: str = "") -> str:  # type: ignore[override]
        return self._container.get(key, default)

    def add(self, key: str, val: str) -> None:
        """Adds a (name, value) pair, merging with any existing value.

        Servers may send a field more than once; the values are joined the
        way they would be folded onto one line.

        >>> headers = HTTPHeaders(foo='bar')
        >>> headers.add('foo', 'baz')
        >>> headers['foo']
        'bar, baz'
        """
        existing = self._container.get(key)
        if existing is None:
            self._container[key] = val
        else:
            self._container[key] = f"{existing}, {val}"

    def copy(self) -> HTTPHeaders:
        return type(self)(self._container)

    def lines(self) -> list[str]:
        """Render every field as a ``name: value`` line."""
        return [f"{key}: {val}" for key, val in self._container.items()]

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self._container})"
