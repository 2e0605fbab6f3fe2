"""Public API surface for the querybench package."""

from __future__ import annotations

from .services.query import (
    AccuracyChecker,
    Datapoint,
    FanoutEngine,
    FanoutMode,
    FanoutResult,
    InMemoryChecker,
    LoadGenerator,
    QueryBuilder,
    QueryExecutor,
    ResultValidator,
)

__all__ = [
    "AccuracyChecker",
    "Datapoint",
    "FanoutEngine",
    "FanoutMode",
    "FanoutResult",
    "InMemoryChecker",
    "LoadGenerator",
    "QueryBuilder",
    "QueryExecutor",
    "ResultValidator",
]

__version__ = "0.1.0"
