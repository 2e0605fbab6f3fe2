import asyncio

import httpx
import pytest

from querybench.services.query.checker import InMemoryChecker
from querybench.services.query.config import QueryConfig
from querybench.services.query.errors import ConfigurationInfeasible
from querybench.services.query.executor import QueryExecutor, build_engine

URLS = ["http://replica-a/q", "http://replica-b/q"]


def _config(**overrides) -> QueryConfig:
    base = dict(
        urls=URLS,
        concurrency=3,
        num_write_hosts=4,
        num_series=250,
        load_range=3600,
        load_step=60,
        accuracy_range=300,
        accuracy_step=10,
        labels={"job": "bench"},
        sleep=0.001,
        seed=42,
    )
    base.update(overrides)
    return QueryConfig(**base)


@pytest.mark.asyncio
async def test_build_loops_wires_configuration(make_engine):
    engine = make_engine(lambda r: httpx.Response(200, request=r), URLS)
    executor = QueryExecutor(_config(), InMemoryChecker(), engine)

    loads, accuracy = executor.build_loops()

    assert len(loads) == 3
    assert {load.num_hosts for load in loads} == {3}
    assert all(load.query_range == 3600 and load.step == 60 for load in loads)
    assert accuracy.query_range == 300 and accuracy.step == 10
    assert len({id(load.rng) for load in loads} | {id(accuracy.rng)}) == 4


@pytest.mark.asyncio
async def test_seeded_loops_are_reproducible(make_engine):
    engine = make_engine(lambda r: httpx.Response(200, request=r), URLS)
    first, _ = QueryExecutor(_config(), InMemoryChecker(), engine).build_loops()
    second, _ = QueryExecutor(_config(), InMemoryChecker(), engine).build_loops()

    assert [g.rng.random() for g in first] == [g.rng.random() for g in second]


@pytest.mark.asyncio
async def test_start_rejects_infeasible_series(make_engine):
    engine = make_engine(lambda r: httpx.Response(200, request=r), URLS)
    executor = QueryExecutor(_config(num_series=1000, num_write_hosts=2), InMemoryChecker(), engine)

    with pytest.raises(ConfigurationInfeasible):
        await executor.start()
    assert not executor.running


@pytest.mark.asyncio
async def test_start_runs_load_and_accuracy_loops_until_stopped(make_engine):
    modes: dict[str, int] = {"load": 0, "accuracy": 0}
    both_seen = asyncio.Event()

    def handler(request: httpx.Request) -> httpx.Response:
        query = request.url.params["query"]
        modes["load" if "hostname=~" in query else "accuracy"] += 1
        if modes["load"] >= 6 and modes["accuracy"] >= 2:
            both_seen.set()
        return httpx.Response(200, content=b"{}", request=request)

    checker = InMemoryChecker(["h1", "h2", "h3", "h4"])
    checker.record("h1", 0.0, 1.0)
    executor = QueryExecutor(_config(), checker, make_engine(handler, URLS))

    await executor.start()
    try:
        assert executor.running
        await asyncio.wait_for(both_seen.wait(), timeout=2)
    finally:
        await executor.stop()

    assert not executor.running


def test_build_engine_uses_config():
    cfg = _config(headers={"X-Scope-OrgID": "t"}, debug=True, debug_length=16)

    engine = build_engine(cfg, httpx.AsyncClient())

    assert engine.urls == tuple(URLS)
