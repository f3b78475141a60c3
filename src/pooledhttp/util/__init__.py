from __future__ import annotations

from .connection import is_connection_dropped
from .request import BodyCursor
from .url import Url
from .util import to_bytes, to_str

__all__ = (
    "BodyCursor",
    "Url",
    "is_connection_dropped",
    "to_bytes",
    "to_str",
)
