from __future__ import annotations

import typing

import pytest

from pooledhttp.handlepool import HandlePool

from . import StubEngine


@pytest.fixture
def engine() -> StubEngine:
    return StubEngine()


@pytest.fixture
def pool(engine: StubEngine) -> typing.Generator[HandlePool, None, None]:
    with HandlePool(engine, maxsize=2) as pool:
        yield pool
