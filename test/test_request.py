from __future__ import annotations

import pytest

from pooledhttp.request import Request, RequestMethod
from pooledhttp.util.url import Url


class TestUrl:
    @pytest.mark.parametrize(
        "path, valid",
        [
            ("http://x/items", True),
            ("not even a url", True),
            ("/", True),
            ("", False),
        ],
    )
    def test_is_valid(self, path: str, valid: bool) -> None:
        assert Url(path).is_valid is valid

    def test_default_is_invalid(self) -> None:
        assert Url().path == ""
        assert not Url().is_valid

    def test_str(self) -> None:
        assert str(Url("http://x/items")) == "http://x/items"


class TestRequest:
    def test_defaults(self) -> None:
        r = Request()
        assert r.method is RequestMethod.GET
        assert r.url == Url("")
        assert len(r.headers) == 0
        assert r.content == b""

    def test_url_string_is_wrapped(self) -> None:
        r = Request("http://x/items")
        assert r.url == Url("http://x/items")
        r.set_url("http://x/other")
        assert r.url.path == "http://x/other"
        r.set_url(Url("http://x/third"))
        assert r.url.path == "http://x/third"

    @pytest.mark.parametrize(
        "method, expected",
        [
            ("GET", RequestMethod.GET),
            ("post", RequestMethod.POST),
            ("Put", RequestMethod.PUT),
            (RequestMethod.DELETE, RequestMethod.DELETE),
        ],
    )
    def test_method_names_are_coerced(
        self, method: str, expected: RequestMethod
    ) -> None:
        assert Request("http://x/", method=method).method is expected

    @pytest.mark.parametrize("method", ["PATCH", "HEAD", 4, None])
    def test_unknown_methods_are_kept(self, method: object) -> None:
        r = Request("http://x/", method=method)  # type: ignore[arg-type]
        assert r.method == method
        assert not isinstance(r.method, RequestMethod)

    def test_set_request_type(self) -> None:
        r = Request("http://x/")
        r.set_request_type("delete")
        assert r.method is RequestMethod.DELETE

    def test_set_mime_type(self) -> None:
        r = Request("http://x/")
        r.set_mime_type("application/json")
        assert r.headers.get("Content-Type") == "application/json"

    def test_content_str_is_encoded(self) -> None:
        r = Request("http://x/", content="hé")
        assert r.content == b"h\xc3\xa9"
        r.set_content(bytearray(b"raw"))
        assert r.content == b"raw"

    def test_content_rejects_other_types(self) -> None:
        with pytest.raises(TypeError, match="not expecting type int"):
            Request("http://x/", content=12)  # type: ignore[arg-type]

    def test_header_name_with_colon_rejected(self) -> None:
        with pytest.raises(ValueError):
            Request("http://x/", headers={"X-Weird:Name": "v"})

    def test_headers_are_copied(self) -> None:
        headers = {"Accept": "*/*"}
        r = Request("http://x/", headers=headers)
        r.headers.set("Accept", "text/plain")
        assert headers == {"Accept": "*/*"}


class TestDebugString:
    def test_get(self) -> None:
        assert Request("http://x/items").debug_string() == "GET http://x/items"

    def test_headers_and_content(self) -> None:
        r = Request(
            "http://x/items",
            method=RequestMethod.POST,
            headers={"Content-Type": "application/json", "X-Trace": "1"},
            content=b'{"a":1}',
        )
        assert r.debug_string() == (
            "POST http://x/items\n"
            "Content-Type: application/json\n"
            "X-Trace: 1\n"
            "\n"
            '{"a":1}'
        )

    def test_invalid_method(self) -> None:
        r = Request("http://x/items", method="PATCH")
        assert r.debug_string() == "??INVALID?? http://x/items"

    def test_repr(self) -> None:
        r = Request("http://x/items", method="DELETE")
        assert repr(r) == (
            "Request(method=<RequestMethod.DELETE: 'DELETE'>, url='http://x/items')"
        )
