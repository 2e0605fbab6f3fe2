"""Throughput-oriented query loop."""

from __future__ import annotations

import asyncio
import itertools
import logging
import math
import random
from dataclasses import dataclass, field

from . import metrics as query_metrics
from .builder import QueryBuilder
from .checker import Checker
from .errors import ConfigurationInfeasible, EmptyHostPool
from .fanout import FanoutEngine, FanoutMode, FanoutResult

logger = logging.getLogger(__name__)

# Number of series a single write host emits.
SERIES_PER_HOST = 101


def hosts_per_query(num_series: int, num_write_hosts: int) -> int:
    """Return how many hosts one load query must span to cover ``num_series``."""

    num_hosts = max(1, math.ceil(num_series / SERIES_PER_HOST))
    if num_hosts > num_write_hosts:
        raise ConfigurationInfeasible(num_series, num_write_hosts, SERIES_PER_HOST)
    return num_hosts


@dataclass
class LoadGenerator:
    """Repeatedly query random host subsets and discard the results."""

    engine: FanoutEngine
    checker: Checker
    builder: QueryBuilder
    num_hosts: int
    query_range: float
    step: float
    sleep: float
    rng: random.Random = field(default_factory=random.Random)

    async def run_once(self) -> FanoutResult | None:
        """Issue a single load query; ``None`` when no hosts are known."""

        try:
            query = self.builder.multi_host(
                self.checker.get_host_names(), self.num_hosts, self.rng
            )
        except EmptyHostPool:
            logger.error("no hosts returned in the checker, skipping load test round")
            query_metrics.skipped_rounds_total.labels(loop="load").inc()
            return None
        return await self.engine.fanout(
            query, self.query_range, self.step, FanoutMode.LOAD_ONLY
        )

    async def run_forever(self) -> None:
        for iteration in itertools.count():
            if iteration > 0:
                await asyncio.sleep(self.sleep)
            try:
                await self.run_once()
            except Exception:
                logger.exception("load test round failed")


__all__ = ["LoadGenerator", "SERIES_PER_HOST", "hosts_per_query"]
