"""Query fanout, consistency comparison and accuracy validation."""

from .accuracy import AccuracyChecker
from .builder import QueryBuilder
from .checker import Checker, InMemoryChecker
from .errors import (
    ConfigurationInfeasible,
    EmptyHostPool,
    EndpointError,
    QueryBenchError,
    ResponseShapeError,
    ResultMismatch,
    TransportFailure,
)
from .executor import QueryExecutor, build_engine
from .fanout import EndpointOutcome, FanoutEngine, FanoutMode, FanoutResult, QueryWindow
from .load import SERIES_PER_HOST, LoadGenerator, hosts_per_query
from .models import Datapoint, PromQueryResult
from .validator import ResultValidator, ValidationReport

__all__ = [
    "AccuracyChecker",
    "Checker",
    "ConfigurationInfeasible",
    "Datapoint",
    "EmptyHostPool",
    "EndpointError",
    "EndpointOutcome",
    "FanoutEngine",
    "FanoutMode",
    "FanoutResult",
    "InMemoryChecker",
    "LoadGenerator",
    "PromQueryResult",
    "QueryBenchError",
    "QueryBuilder",
    "QueryExecutor",
    "QueryWindow",
    "ResponseShapeError",
    "ResultMismatch",
    "ResultValidator",
    "SERIES_PER_HOST",
    "TransportFailure",
    "ValidationReport",
    "build_engine",
    "hosts_per_query",
]
