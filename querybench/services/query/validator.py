from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Sequence

from pydantic import ValidationError

from . import metrics as query_metrics
from .errors import ResponseShapeError
from .models import Datapoint, PromQueryResult

logger = logging.getLogger(__name__)

_NO_SAMPLES = "no samples returned in result series"

__all__ = ["ResultValidator", "ValidationReport", "count_matches", "parse_series"]


@dataclass(frozen=True, slots=True)
class ValidationReport:
    ok: bool
    matches: int = 0
    samples: int = 0
    reason: str | None = None


def parse_series(raw: bytes) -> list[tuple[float, float]]:
    """Decode a range query response holding exactly one non-empty series."""

    try:
        result = PromQueryResult.model_validate_json(raw)
    except (ValidationError, ValueError, OverflowError, RecursionError) as exc:
        raise ResponseShapeError(f"unable to decode query result: {exc}") from exc

    matrix = result.data.result
    if len(matrix) != 1:
        raise ResponseShapeError(f"expecting one result series, but got {len(matrix)}")
    if not matrix[0].values:
        raise ResponseShapeError(_NO_SAMPLES)
    return list(matrix[0].values)


def count_matches(expected: Sequence[Datapoint], samples: Sequence[tuple[float, float]]) -> int:
    """Count returned samples whose value equals any expected value.

    Every sample is checked against the whole expected sequence, so order and
    repetition are not enforced.
    """

    return sum(
        1 for _, value in samples if any(dp.value == value for dp in expected)
    )


class ResultValidator:
    """Check a backend response against datapoints known to be written."""

    def check(self, expected: Sequence[Datapoint], raw: bytes) -> ValidationReport:
        try:
            samples = parse_series(raw)
        except ResponseShapeError as exc:
            return ValidationReport(ok=False, reason=str(exc))

        matches = count_matches(expected, samples)
        if matches == 0:
            return ValidationReport(
                ok=False, samples=len(samples), reason="no values matched at all"
            )
        return ValidationReport(ok=True, matches=matches, samples=len(samples))

    def validate(self, expected: Sequence[Datapoint], raw: bytes) -> bool:
        report = self.check(expected, raw)
        if report.ok:
            query_metrics.validation_total.labels(result="pass").inc()
            return True

        query_metrics.validation_total.labels(result="fail").inc()
        if report.reason == _NO_SAMPLES:
            logger.warning(
                "No results returned from query. There may be a slight delay in ingestion"
            )
        else:
            logger.error(
                "accuracy validation failed: %s (expected=%d returned=%d)",
                report.reason,
                len(expected),
                report.samples,
            )
        return False
