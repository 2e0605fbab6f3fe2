from __future__ import annotations

from dataclasses import dataclass, field, fields
from typing import Any, Mapping, Optional
import logging

from querybench.foundation.common.duration import parse_duration

logger = logging.getLogger(__name__)

_DURATION_FIELDS: tuple[str, ...] = (
    "load_range",
    "load_step",
    "accuracy_range",
    "accuracy_step",
    "sleep",
    "timeout",
)

_ALIASES: dict[str, str] = {
    "endpoints": "urls",
    "url": "urls",
}


@dataclass
class QueryConfig:
    """Configuration for the query load and accuracy loops.

    Durations are stored in seconds.
    """

    urls: list[str] = field(default_factory=list)
    concurrency: int = 1
    num_write_hosts: int = 1
    num_series: int = 101
    load_range: float = 3600.0
    load_step: float = 60.0
    accuracy_range: float = 300.0
    accuracy_step: float = 10.0
    aggregation: Optional[str] = None
    labels: dict[str, str] = field(default_factory=dict)
    headers: dict[str, str] = field(default_factory=dict)
    sleep: float = 1.0
    timeout: float = 30.0
    debug: bool = False
    debug_length: int = 0
    seed: Optional[int] = None

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> "QueryConfig":
        """Construct :class:`QueryConfig` from a raw YAML mapping."""

        base = dict(data)
        for alias, canonical in _ALIASES.items():
            if alias not in base:
                continue
            if canonical in base:
                base.pop(alias)
                continue
            logger.warning("query: key '%s' is deprecated; use '%s' instead", alias, canonical)
            base[canonical] = base.pop(alias)

        known = {f.name for f in fields(cls)}
        unknown = sorted(set(base) - known)
        if unknown:
            raise TypeError(f"unknown query settings: {', '.join(unknown)}")

        if "urls" in base:
            base["urls"] = _as_url_list(base["urls"])
        for name in ("labels", "headers"):
            if name in base:
                base[name] = _as_pairs(base[name], name)
        for name in _DURATION_FIELDS:
            if name in base:
                base[name] = parse_duration(base[name])
        if base.get("aggregation") == "":
            base["aggregation"] = None
        return cls(**base)


def _as_url_list(value: Any) -> list[str]:
    if value is None:
        return []
    if isinstance(value, str):
        return [u.strip() for u in value.split(",") if u.strip()]
    if isinstance(value, (list, tuple)):
        return [str(u) for u in value]
    raise TypeError("query.urls must be a string or a list of strings")


def _as_pairs(value: Any, name: str) -> dict[str, str]:
    """Accept either a mapping or a list of ``key=value`` strings."""

    if value is None:
        return {}
    if isinstance(value, Mapping):
        return {str(k): str(v) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        pairs: dict[str, str] = {}
        for item in value:
            key, sep, val = str(item).partition("=")
            if not sep or not key:
                raise ValueError(f"query.{name} entries must look like key=value, got {item!r}")
            pairs[key.strip()] = val.strip()
        return pairs
    raise TypeError(f"query.{name} must be a mapping or a list of key=value strings")


__all__ = ["QueryConfig"]
