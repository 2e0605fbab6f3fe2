"""Source of known hosts and the datapoints written for them."""

from __future__ import annotations

import threading
from typing import Iterable, Protocol, Sequence

from .models import Datapoint


class Checker(Protocol):
    """Write-side bookkeeping consumed by the query loops."""

    def get_host_names(self) -> Sequence[str]:
        ...

    def get_datapoints(self, host: str) -> Sequence[Datapoint]:
        ...


class InMemoryChecker:
    """Thread-safe :class:`Checker` fed by a write path running in-process."""

    def __init__(self, hosts: Iterable[str] = ()) -> None:
        self._lock = threading.Lock()
        self._datapoints: dict[str, list[Datapoint]] = {h: [] for h in hosts}

    def add_host(self, host: str) -> None:
        with self._lock:
            self._datapoints.setdefault(host, [])

    def remove_host(self, host: str) -> None:
        with self._lock:
            self._datapoints.pop(host, None)

    def record(self, host: str, timestamp: float, value: float) -> Datapoint:
        dp = Datapoint(timestamp=timestamp, value=value)
        with self._lock:
            self._datapoints.setdefault(host, []).append(dp)
        return dp

    def get_host_names(self) -> list[str]:
        with self._lock:
            return list(self._datapoints)

    def get_datapoints(self, host: str) -> tuple[Datapoint, ...]:
        with self._lock:
            return tuple(self._datapoints.get(host, ()))


__all__ = ["Checker", "InMemoryChecker"]
