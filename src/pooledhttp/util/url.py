from __future__ import annotations

import typing


class Url(typing.NamedTuple):
    """
    Datastructure for the target of a request.

    The string is kept opaque: nothing here parses or normalizes it. A
    ``Url`` is valid when the string is non-empty; anything beyond that is
    for the transport engine to accept or reject when the request is sent.
    """

    path: str = ""

    @property
    def is_valid(self) -> bool:
        return bool(self.path)

    def __str__(self) -> str:
        return self.path
