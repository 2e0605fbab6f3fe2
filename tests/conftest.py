"""Test configuration and shared fixtures."""

import random
from typing import Callable

import httpx
import pytest
import pytest_asyncio

from querybench.foundation.common.metrics_factory import reset_metrics
from querybench.services.query import metrics as query_metrics  # noqa: F401 - registers collectors
from querybench.services.query.fanout import FanoutEngine

FIXED_NOW = 1_700_000_000.5


@pytest.fixture(autouse=True)
def _reset_query_metrics():
    reset_metrics()
    yield
    reset_metrics()


@pytest.fixture
def rng() -> random.Random:
    return random.Random(1234)


@pytest_asyncio.fixture
async def make_engine():
    """Build a :class:`FanoutEngine` whose endpoints are served by ``handler``."""

    clients: list[httpx.AsyncClient] = []

    def _make(
        handler: Callable[[httpx.Request], object],
        urls: list[str],
        **kwargs,
    ) -> FanoutEngine:
        client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
        clients.append(client)
        kwargs.setdefault("clock", lambda: FIXED_NOW)
        return FanoutEngine(urls, client=client, **kwargs)

    yield _make
    for client in clients:
        await client.aclose()
