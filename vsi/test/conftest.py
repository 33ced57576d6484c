from __future__ import annotations

from collections.abc import Iterator

import pytest

from vsi.platform.paths import clear_caches
from vsi.test.stub_server import StubServer, serve


@pytest.fixture(autouse=True)
def _fresh_path_caches() -> Iterator[None]:
    clear_caches()
    yield
    clear_caches()


@pytest.fixture
def stub_server() -> Iterator[StubServer]:
    with serve() as server:
        yield server
