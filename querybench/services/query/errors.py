"""Error taxonomy for the query fanout and validation engine."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Sequence

__all__ = [
    "QueryBenchError",
    "EmptyHostPool",
    "EndpointError",
    "TransportFailure",
    "ResultMismatch",
    "ResponseShapeError",
    "ConfigurationInfeasible",
]


class QueryBenchError(Exception):
    """Base class for all querybench errors."""
    pass


class EmptyHostPool(QueryBenchError, LookupError):
    """Raised when there are no hosts to build a query from."""

    def __init__(self) -> None:
        super().__init__("no hosts available to query")


@dataclass(frozen=True, slots=True)
class EndpointError:
    """A transport-level failure for one endpoint of a fanout."""

    url: str
    cause: BaseException

    def __str__(self) -> str:
        return f"{self.url}: {self.cause}"


class TransportFailure(QueryBenchError):
    """One or more endpoints could not be reached or read."""

    def __init__(self, errors: Sequence[EndpointError]) -> None:
        self.errors = list(errors)
        if len(self.errors) == 1:
            detail = f"1 endpoint failed: {self.errors[0]}"
        else:
            joined = "; ".join(str(err) for err in self.errors)
            detail = f"{len(self.errors)} endpoints failed: {joined}"
        super().__init__(detail)

    @property
    def urls(self) -> list[str]:
        return [err.url for err in self.errors]


class ResultMismatch(QueryBenchError):
    """Endpoints answered the same query with different payloads."""

    def __init__(self, index: int, url: str | None = None) -> None:
        self.index = index
        self.url = url
        detail = f"mismatch in returned data at index {index}"
        if url is not None:
            detail += f" ({url})"
        super().__init__(detail)


class ResponseShapeError(QueryBenchError, ValueError):
    """A query response could not be decoded into exactly one series."""
    pass


class ConfigurationInfeasible(QueryBenchError, ValueError):
    """The requested series count exceeds what the write hosts emit."""

    def __init__(self, num_series: int, num_write_hosts: int, series_per_host: int) -> None:
        self.num_series = num_series
        self.num_write_hosts = num_write_hosts
        self.max_series = num_write_hosts * series_per_host
        super().__init__(
            f"num series {num_series} exceeds metrics emitted by {num_write_hosts} "
            f"write hosts (max {self.max_series})"
        )
