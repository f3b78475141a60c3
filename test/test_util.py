from __future__ import annotations

import socket

import pytest

from pooledhttp.util import BodyCursor, is_connection_dropped, to_bytes, to_str
from pooledhttp.util.connection import _set_socket_options
from pooledhttp.util.util import split_header_line


class TestBodyCursor:
    def test_reads_in_requested_sizes(self) -> None:
        cursor = BodyCursor(b"0123456789")
        assert cursor.read(4) == b"0123"
        assert cursor.remaining == 6
        assert cursor.read(4) == b"4567"
        assert cursor.read(4) == b"89"
        assert cursor.read(4) == b""
        assert cursor.remaining == 0

    def test_larger_request_than_body(self) -> None:
        cursor = BodyCursor(b"abc")
        assert cursor.read(16384) == b"abc"
        assert cursor.read(16384) == b""

    def test_zero_and_negative_requests(self) -> None:
        cursor = BodyCursor(b"abc")
        assert cursor.read(0) == b""
        assert cursor.read(-1) == b""
        assert cursor.offset == 0

    def test_empty_body(self) -> None:
        cursor = BodyCursor(b"")
        assert len(cursor) == 0
        assert cursor.read(10) == b""


class TestUtil:
    @pytest.mark.parametrize(
        "value, expected",
        [(b"abc", b"abc"), ("abc", b"abc"), (bytearray(b"abc"), b"abc")],
    )
    def test_to_bytes(self, value: str | bytes, expected: bytes) -> None:
        assert to_bytes(value) == expected

    def test_to_bytes_encoding(self) -> None:
        assert to_bytes("é", encoding="latin-1") == b"\xe9"

    def test_to_str(self) -> None:
        assert to_str(b"abc") == "abc"
        assert to_str("abc") == "abc"
        with pytest.raises(TypeError, match="not expecting type int"):
            to_str(1)  # type: ignore[arg-type]

    @pytest.mark.parametrize(
        "line, expected",
        [
            ("Content-Type: text/plain", ("Content-Type", "text/plain")),
            ("X-Empty:", ("X-Empty", "")),
            ("X-Colon: a:b", ("X-Colon", "a:b")),
            ("  Spaced  :  v  ", ("Spaced", "v")),
        ],
    )
    def test_split_header_line(self, line: str, expected: tuple[str, str]) -> None:
        assert split_header_line(line) == expected


class TestConnectionUtil:
    def test_set_socket_options_none(self) -> None:
        _set_socket_options(socket.socket(), None)

    def test_is_connection_dropped_without_socket(self) -> None:
        class Conn:
            sock = None

        assert is_connection_dropped(Conn())  # type: ignore[arg-type]

    def test_is_connection_dropped_on_closed_peer(self) -> None:
        a, b = socket.socketpair()
        try:

            class Conn:
                sock = a

            assert not is_connection_dropped(Conn())  # type: ignore[arg-type]
            b.close()
            assert is_connection_dropped(Conn())  # type: ignore[arg-type]
        finally:
            a.close()
