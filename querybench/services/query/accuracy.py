"""Accuracy loop: query one host at a time and validate what comes back."""

from __future__ import annotations

import asyncio
import itertools
import logging
import random
from dataclasses import dataclass, field
from typing import Sequence

from . import metrics as query_metrics
from .builder import QueryBuilder
from .checker import Checker
from .fanout import FanoutEngine, FanoutMode
from .models import Datapoint
from .validator import ResultValidator

logger = logging.getLogger(__name__)

# Random host picks made while looking for a host with more than one datapoint.
PICK_ATTEMPTS = 5


@dataclass
class AccuracyChecker:
    engine: FanoutEngine
    checker: Checker
    builder: QueryBuilder
    query_range: float
    step: float
    sleep: float
    validator: ResultValidator = field(default_factory=ResultValidator)
    rng: random.Random = field(default_factory=random.Random)

    def pick_host(self, hosts: Sequence[str]) -> tuple[str, Sequence[Datapoint]]:
        host = ""
        datapoints: Sequence[Datapoint] = ()
        for _ in range(PICK_ATTEMPTS):
            host = self.rng.choice(hosts)
            datapoints = self.checker.get_datapoints(host)
            if len(datapoints) > 1:
                break
        return host, datapoints

    async def run_once(self, iteration: int = 0) -> list[bool] | None:
        """Run one accuracy round.

        Returns the validation outcome per payload, or ``None`` when the round
        was skipped or the fanout failed.
        """

        hosts = self.checker.get_host_names()
        if not hosts:
            if iteration > 0:
                logger.error("no hosts returned in the checker, skipping accuracy check.")
            query_metrics.skipped_rounds_total.labels(loop="accuracy").inc()
            return None

        host, datapoints = self.pick_host(hosts)
        if len(datapoints) <= 1 and iteration > 1:
            logger.error(
                "couldn't find a host with more than 1 datapoint. Skipping accuracy check"
            )

        query = self.builder.single_host(host)
        result = await self.engine.fanout(
            query, self.query_range, self.step, FanoutMode.COMPARE_RESULTS
        )
        if result.error is not None:
            logger.error("fanout execution failed: host=%s error=%s", host, result.error)
            return None
        if not result.payloads:
            logger.error("invalid response for accuracy query: host=%s", host)
            return None

        outcomes = []
        for index, payload in enumerate(result.payloads):
            ok = self.validator.validate(datapoints, payload)
            if ok:
                logger.debug("accuracy check passed: host=%s index=%d", host, index)
            else:
                logger.error("accuracy check failed: host=%s index=%d", host, index)
            outcomes.append(ok)
        return outcomes

    async def run_forever(self) -> None:
        for iteration in itertools.count():
            if iteration > 0:
                await asyncio.sleep(self.sleep)
            try:
                await self.run_once(iteration)
            except Exception:
                logger.exception("accuracy check round failed")


__all__ = ["AccuracyChecker", "PICK_ATTEMPTS"]
