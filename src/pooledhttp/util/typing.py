from __future__ import annotations

import typing

_TYPE_BODY = typing.Union[bytes, bytearray, str]
_TYPE_READ_FUNCTION = typing.Callable[[int], bytes]
_TYPE_WRITE_FUNCTION = typing.Callable[[bytes], int]
