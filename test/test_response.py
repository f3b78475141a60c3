from __future__ import annotations

import json

import pytest

from pooledhttp.response import BodyAccumulator, Response


class TestResponse:
    def test_defaults(self) -> None:
        r = Response()
        assert r.status == -1
        assert r.data == b""
        assert len(r.headers) == 0

    def test_headers(self) -> None:
        r = Response(headers={"Content-Type": "text/plain"})
        assert r.headers.get("Content-Type") == "text/plain"
        assert r.headers.get("content-type") == ""

    def test_json(self) -> None:
        r = Response(b'{"foo": "bar"}', status=200)
        assert r.json() == {"foo": "bar"}

    def test_json_invalid(self) -> None:
        r = Response(b"not json", status=200)
        with pytest.raises(json.JSONDecodeError):
            r.json()

    def test_repr(self) -> None:
        assert repr(Response(b"[]", status=200)) == "<Response status=200 length=2>"


class TestBodyAccumulator:
    def test_concatenates_in_order(self) -> None:
        acc = BodyAccumulator()
        for chunk in (b"he", b"", b"llo", b" world"):
            assert acc.write(chunk) == len(chunk)
        assert acc.getvalue() == b"hello world"
        assert len(acc) == 11

    def test_unbounded_by_default(self) -> None:
        acc = BodyAccumulator()
        chunk = b"x" * 65536
        for _ in range(64):
            acc.write(chunk)
        assert len(acc) == 64 * 65536

    def test_limit_refuses_overflowing_chunk(self, caplog: pytest.LogCaptureFixture) -> None:
        acc = BodyAccumulator(limit=5)
        assert acc.write(b"abc") == 3
        assert acc.write(b"de") == 2
        assert acc.write(b"f") == 0
        assert acc.getvalue() == b"abcde"
        assert "Response body exceeds 5 bytes" in caplog.text
