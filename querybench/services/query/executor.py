"""Launch the load and accuracy loops against a shared fanout engine."""

from __future__ import annotations

import asyncio
import logging
import random
from dataclasses import dataclass, field

import httpx

from .accuracy import AccuracyChecker
from .builder import QueryBuilder
from .checker import Checker
from .config import QueryConfig
from .fanout import FanoutEngine
from .load import LoadGenerator, hosts_per_query

logger = logging.getLogger(__name__)


def build_engine(cfg: QueryConfig, client: httpx.AsyncClient) -> FanoutEngine:
    return FanoutEngine(
        cfg.urls,
        client=client,
        headers=cfg.headers,
        debug=cfg.debug,
        debug_length=cfg.debug_length,
    )


@dataclass
class QueryExecutor:
    """Run ``concurrency`` load loops plus one accuracy loop."""

    config: QueryConfig
    checker: Checker
    engine: FanoutEngine
    _tasks: list[asyncio.Task] = field(default_factory=list, init=False, repr=False)

    def _rng(self, index: int) -> random.Random:
        if self.config.seed is None:
            return random.Random()
        return random.Random(self.config.seed + index)

    def build_loops(self) -> tuple[list[LoadGenerator], AccuracyChecker]:
        """Create the loop instances; raises ``ConfigurationInfeasible``."""

        cfg = self.config
        num_hosts = hosts_per_query(cfg.num_series, cfg.num_write_hosts)
        builder = QueryBuilder(labels=dict(cfg.labels), aggregation=cfg.aggregation)
        loads = [
            LoadGenerator(
                engine=self.engine,
                checker=self.checker,
                builder=builder,
                num_hosts=num_hosts,
                query_range=cfg.load_range,
                step=cfg.load_step,
                sleep=cfg.sleep,
                rng=self._rng(i),
            )
            for i in range(cfg.concurrency)
        ]
        accuracy = AccuracyChecker(
            engine=self.engine,
            checker=self.checker,
            builder=builder,
            query_range=cfg.accuracy_range,
            step=cfg.accuracy_step,
            sleep=cfg.sleep,
            rng=self._rng(cfg.concurrency),
        )
        return loads, accuracy

    async def start(self) -> None:
        if self._tasks:
            return
        loads, accuracy = self.build_loops()
        logger.info(
            "query load configured: concurrency=%d hosts_per_query=%d endpoints=%d",
            len(loads),
            loads[0].num_hosts if loads else 0,
            len(self.engine.urls),
        )
        self._tasks = [asyncio.create_task(load.run_forever()) for load in loads]
        self._tasks.append(asyncio.create_task(accuracy.run_forever()))

    async def wait(self) -> None:
        """Block until every loop exits; loops only exit on error or cancellation."""
        await asyncio.gather(*self._tasks)

    async def stop(self) -> None:
        tasks, self._tasks = self._tasks, []
        for task in tasks:
            task.cancel()
        await asyncio.gather(*tasks, return_exceptions=True)

    @property
    def running(self) -> bool:
        return any(not t.done() for t in self._tasks)


__all__ = ["QueryExecutor", "build_engine"]
