from .duration import format_duration, parse_duration
from .metrics_factory import (
    get_or_create_counter,
    get_or_create_histogram,
    reset_metrics,
)

__all__ = [
    "format_duration",
    "parse_duration",
    "get_or_create_counter",
    "get_or_create_histogram",
    "reset_metrics",
]
