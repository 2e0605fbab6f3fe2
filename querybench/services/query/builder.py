"""Construction of label-selector query strings."""

from __future__ import annotations

import random
from dataclasses import dataclass, field
from typing import Mapping, Sequence

from .errors import EmptyHostPool

__all__ = ["QueryBuilder"]


@dataclass(frozen=True)
class QueryBuilder:
    """Build selector queries over a fixed label set.

    ``labels`` are appended after the host matcher in mapping order. When
    ``aggregation`` is non-empty the selector is wrapped as ``agg({...})``.
    """

    labels: Mapping[str, str] = field(default_factory=dict)
    aggregation: str | None = None

    def multi_host(
        self, hosts: Sequence[str], count: int, rng: random.Random
    ) -> str:
        """Select up to ``count`` distinct hosts at random and match them by regex.

        Pools smaller than ``count`` contribute every host once.
        """

        if not hosts:
            raise EmptyHostPool()
        if count < 1:
            raise ValueError("count must be positive")
        pool = list(dict.fromkeys(hosts))
        picked = rng.sample(pool, min(count, len(pool)))
        return self._wrap(f'hostname=~"({"|".join(picked)})"')

    def single_host(self, host: str) -> str:
        if not host:
            raise EmptyHostPool()
        return self._wrap(f'hostname="{host}"')

    def _wrap(self, matcher: str) -> str:
        matchers = [matcher]
        matchers.extend(f'{name}="{value}"' for name, value in self.labels.items())
        selector = "{" + ",".join(matchers) + "}"
        if self.aggregation:
            return f"{self.aggregation}({selector})"
        return selector
