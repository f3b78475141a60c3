from __future__ import annotations

import pickle
import socket

import pytest

from pooledhttp.exceptions import (
    BodyReadError,
    BodyWriteError,
    ClosedPoolError,
    EngineUnavailableError,
    HTTPError,
    InvalidMethodError,
    LocationParseError,
    NameResolutionError,
    NewConnectionError,
    PoolError,
    ProtocolError,
    SSLError,
    TransportError,
)
from pooledhttp.handlepool import HandlePool

from . import StubEngine


class TestPickle:
    @pytest.mark.parametrize(
        "exception",
        [
            HTTPError(None),
            HTTPError("foo"),
            EngineUnavailableError("no sessions"),
            InvalidMethodError("PATCH"),
            TransportError("boom"),
            LocationParseError("fake location"),
            NewConnectionError("localhost", 80, "refused"),
            NameResolutionError("x.invalid", 80, socket.gaierror(-2, "unknown")),
            SSLError("handshake"),
            ProtocolError("aborted"),
            BodyReadError("short"),
            BodyWriteError("short"),
            ClosedPoolError(HandlePool(StubEngine()), "Pool is closed."),
        ],
    )
    def test_exceptions(self, exception: Exception) -> None:
        result = pickle.loads(pickle.dumps(exception))
        assert isinstance(result, type(exception))

    def test_keeps_fields(self) -> None:
        err = pickle.loads(pickle.dumps(NewConnectionError("localhost", 8080, "refused")))
        assert (err.host, err.port, err.reason) == ("localhost", 8080, "refused")

        parse = pickle.loads(pickle.dumps(LocationParseError("::")))
        assert parse.location == "::"
        assert str(parse) == str(LocationParseError("::"))


class TestHierarchy:
    @pytest.mark.parametrize(
        "cls",
        [
            LocationParseError,
            NewConnectionError,
            NameResolutionError,
            SSLError,
            ProtocolError,
            BodyReadError,
            BodyWriteError,
        ],
    )
    def test_transport_errors(self, cls: type[Exception]) -> None:
        assert issubclass(cls, TransportError)
        assert issubclass(cls, HTTPError)

    def test_non_transport_errors(self) -> None:
        for cls in (ClosedPoolError, EngineUnavailableError, InvalidMethodError):
            assert issubclass(cls, HTTPError)
            assert not issubclass(cls, TransportError)
        assert issubclass(ClosedPoolError, PoolError)
        assert issubclass(InvalidMethodError, ValueError)


class TestFormat:
    def test_transport_error_reason(self) -> None:
        err = TransportError("Connection aborted")
        assert err.reason == "Connection aborted"
        assert str(err) == "Connection aborted"

    def test_location_parse_error(self) -> None:
        assert str(LocationParseError("")) == (
            "URL using bad/illegal format or missing URL: ''"
        )

    def test_name_resolution_error(self) -> None:
        err = NameResolutionError("x.invalid", 80, socket.gaierror(-2, "unknown"))
        assert str(err).startswith("Could not resolve host: x.invalid")
        assert isinstance(err.gaierror, socket.gaierror)

    def test_invalid_method(self) -> None:
        assert str(InvalidMethodError("PATCH")) == "Invalid request type: 'PATCH'"

    def test_pool_error(self) -> None:
        pool = HandlePool(StubEngine())
        err = ClosedPoolError(pool, "Pool is closed.")
        assert err.pool is pool
        assert str(err).endswith(": Pool is closed.")
