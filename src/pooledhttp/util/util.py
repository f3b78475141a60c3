from __future__ import annotations

import typing


def to_bytes(
    x: str | bytes | bytearray,
    encoding: str | None = None,
    errors: str | None = None,
) -> bytes:
    if isinstance(x, bytes):
        return x
    elif isinstance(x, bytearray):
        return bytes(x)
    elif not isinstance(x, str):
        raise TypeError(f"not expecting type {type(x).__name__}")
    if encoding or errors:
        return x.encode(encoding or "utf-8", errors=errors or "strict")
    return x.encode()


def to_str(
    x: str | bytes, encoding: str | None = None, errors: str | None = None
) -> str:
    if isinstance(x, str):
        return x
    elif not isinstance(x, bytes):
        raise TypeError(f"not expecting type {type(x).__name__}")
    if encoding or errors:
        return x.decode(encoding or "utf-8", errors=errors or "strict")
    return x.decode()


def split_header_line(line: str) -> typing.Tuple[str, str]:
    """Split a ``name: value`` header line into its stripped parts."""
    name, _, value = line.partition(":")
    return name.strip(), value.strip()
