"""Concurrent dispatch of one query to every configured backend endpoint.

A fanout is a single barrier: every endpoint is queried in parallel, the call
waits for all of them, and only then are the outcomes folded into one
:class:`FanoutResult`. Each endpoint request reports its own
:class:`EndpointOutcome`; nothing is shared between the concurrent requests.

Any failed endpoint request (connect errors, timeouts, broken bodies,
requests that cannot be built) fails the whole fanout with
:class:`TransportFailure`. A non-2xx status is only logged. In
:attr:`FanoutMode.COMPARE_RESULTS` the collected bodies must be byte-identical,
otherwise the fanout fails with :class:`ResultMismatch`.
"""

from __future__ import annotations

import asyncio
import logging
import time
from dataclasses import dataclass, field
from enum import Enum
from typing import Callable, Mapping, Sequence

import httpx

from querybench.foundation.common.duration import format_duration, parse_duration

from . import metrics as query_metrics
from .errors import EndpointError, QueryBenchError, ResultMismatch, TransportFailure

logger = logging.getLogger(__name__)

__all__ = [
    "EndpointOutcome",
    "FanoutEngine",
    "FanoutMode",
    "FanoutResult",
    "QueryWindow",
]


class FanoutMode(str, Enum):
    """What a fanout does with the response bodies."""

    LOAD_ONLY = "load_only"
    COMPARE_RESULTS = "compare_results"


@dataclass(frozen=True, slots=True)
class QueryWindow:
    """Request parameters of a range query."""

    query: str
    start: int
    end: int
    step: float

    @classmethod
    def ending_at(
        cls, query: str, now: float, query_range: float, step: float
    ) -> "QueryWindow":
        return cls(query=query, start=int(now - query_range), end=int(now), step=step)

    def to_params(self) -> dict[str, str]:
        return {
            "query": self.query,
            "start": str(self.start),
            "end": str(self.end),
            "step": format_duration(self.step),
        }

    @classmethod
    def from_params(cls, params: Mapping[str, str]) -> "QueryWindow":
        return cls(
            query=params["query"],
            start=int(params["start"]),
            end=int(params["end"]),
            step=parse_duration(params["step"]),
        )


@dataclass(slots=True)
class EndpointOutcome:
    url: str
    payload: bytes | None = None
    status: int | None = None
    error: BaseException | None = None


@dataclass(slots=True)
class FanoutResult:
    payloads: list[bytes] = field(default_factory=list)
    error: QueryBenchError | None = None

    @property
    def ok(self) -> bool:
        return self.error is None


class FanoutEngine:
    """Issue range queries against a fixed set of endpoints.

    The engine holds no per-call state and may be shared by any number of
    concurrent callers.
    """

    def __init__(
        self,
        urls: Sequence[str],
        *,
        client: httpx.AsyncClient,
        headers: Mapping[str, str] | None = None,
        debug: bool = False,
        debug_length: int = 0,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self._urls = tuple(urls)
        self._client = client
        self._headers = dict(headers or {})
        self._debug = debug
        self._debug_length = debug_length
        self._clock = clock

    @property
    def urls(self) -> tuple[str, ...]:
        return self._urls

    async def fanout(
        self,
        query: str,
        query_range: float,
        step: float,
        mode: FanoutMode = FanoutMode.LOAD_ONLY,
    ) -> FanoutResult:
        window = QueryWindow.ending_at(query, self._clock(), query_range, step)
        params = window.to_params()
        if self._debug:
            for url in self._urls:
                logger.info("fanout query: url=%s params=%s", url, params)

        outcomes = await asyncio.gather(
            *(self._execute(url, params, mode) for url in self._urls)
        )

        errors = [
            EndpointError(url=o.url, cause=o.error) for o in outcomes if o.error is not None
        ]
        collected = [o for o in outcomes if o.payload is not None]
        payloads = [o.payload for o in collected]

        if errors:
            failure = TransportFailure(errors)
            logger.error("fanout error: %s", failure)
            query_metrics.fanout_errors_total.labels(kind="transport").inc()
            return FanoutResult(payloads=payloads, error=failure)

        # Fewer than two bodies leaves nothing to compare.
        if mode is FanoutMode.LOAD_ONLY or len(payloads) < 2:
            return FanoutResult(payloads=payloads)

        first = payloads[0]
        for index, outcome in enumerate(collected[1:], start=1):
            if outcome.payload == first:
                continue
            logger.error(
                "mismatch in returned data: index=%d url=%s status=%s",
                index,
                outcome.url,
                outcome.status,
            )
            query_metrics.fanout_errors_total.labels(kind="mismatch").inc()
            return FanoutResult(error=ResultMismatch(index, outcome.url))

        return FanoutResult(payloads=payloads)

    async def _execute(
        self, url: str, params: Mapping[str, str], mode: FanoutMode
    ) -> EndpointOutcome:
        start = time.perf_counter()
        try:
            async with self._client.stream(
                "GET", url, params=params, headers=self._headers or None
            ) as response:
                if not response.is_success:
                    logger.warning(
                        "response from query non-2XX status code: url=%s code=%d",
                        response.url,
                        response.status_code,
                    )
                payload = await self._read_body(url, response, mode)
        except (httpx.HTTPError, httpx.InvalidURL) as exc:
            query_metrics.observe_request(mode.value, "error", time.perf_counter() - start)
            return EndpointOutcome(url=url, error=exc)
        except Exception as exc:
            logger.exception("unexpected error querying endpoint: url=%s", url)
            query_metrics.observe_request(mode.value, "error", time.perf_counter() - start)
            return EndpointOutcome(url=url, error=exc)

        result = "ok" if response.is_success else "non_2xx"
        query_metrics.observe_request(mode.value, result, time.perf_counter() - start)
        return EndpointOutcome(url=url, payload=payload, status=response.status_code)

    async def _read_body(
        self, url: str, response: httpx.Response, mode: FanoutMode
    ) -> bytes | None:
        if mode is FanoutMode.COMPARE_RESULTS:
            body = await response.aread()
            if self._debug:
                logger.info("response body: url=%s body=%r", url, self._preview(body))
            return body

        if not self._debug:
            async for _ in response.aiter_bytes():
                pass
            return None

        body = await self._read_limited(response)
        logger.info("response body: url=%s limit=%d body=%r", url, self._debug_length, body)
        return None

    async def _read_limited(self, response: httpx.Response) -> bytes:
        if self._debug_length <= 0:
            return await response.aread()
        chunks: list[bytes] = []
        size = 0
        async for chunk in response.aiter_bytes():
            chunks.append(chunk)
            size += len(chunk)
            if size >= self._debug_length:
                break
        return b"".join(chunks)[: self._debug_length]

    def _preview(self, body: bytes) -> bytes:
        if self._debug_length > 0:
            return body[: self._debug_length]
        return body
