"""Utilities for idempotent Prometheus metric registration.

Metric modules are imported once per process but tests reload them and share
the global registry. Fetch-or-create keeps registration safe across reloads
and :func:`reset_metrics` lets a test start from zeroed collectors without
touching Prometheus internals directly.
"""

from __future__ import annotations

from collections.abc import Callable, Iterable, Sequence
from typing import Dict, Tuple, TypeVar

from prometheus_client import (
    CollectorRegistry,
    Counter,
    Histogram,
    REGISTRY as global_registry,
)
from prometheus_client.metrics import MetricWrapperBase

__all__ = [
    "get_or_create_counter",
    "get_or_create_histogram",
    "reset_metrics",
]

MetricT = TypeVar("MetricT", bound=MetricWrapperBase)
RegistryKey = Tuple[CollectorRegistry, str]

_METRIC_CACHE: Dict[RegistryKey, MetricWrapperBase] = {}
_RESET_CALLBACKS: Dict[RegistryKey, Callable[[], None]] = {}


def get_or_create_counter(
    name: str,
    documentation: str,
    labelnames: Sequence[str] | None = None,
    *,
    registry: CollectorRegistry | None = None,
) -> Counter:
    """Return an existing counter or register a new one."""

    reg = registry or global_registry
    metric = _get_or_create_metric(Counter, name, documentation, labelnames, registry=reg)
    _register_reset(metric, reg)
    return metric


def get_or_create_histogram(
    name: str,
    documentation: str,
    labelnames: Sequence[str] | None = None,
    *,
    registry: CollectorRegistry | None = None,
) -> Histogram:
    """Return an existing histogram or register a new one."""

    reg = registry or global_registry
    metric = _get_or_create_metric(Histogram, name, documentation, labelnames, registry=reg)
    _register_reset(metric, reg)
    return metric


def reset_metrics(
    names: Iterable[str] | None = None,
    *,
    registry: CollectorRegistry | None = None,
) -> None:
    """Invoke registered reset callbacks for ``names``.

    When ``names`` is ``None`` every registered metric for ``registry`` is
    reset.
    """

    reg = registry or global_registry
    if names is None:
        keys = [key for key in _RESET_CALLBACKS if key[0] is reg]
    else:
        requested = set(names)
        keys = [key for key in _RESET_CALLBACKS if key[0] is reg and key[1] in requested]
    for key in keys:
        _RESET_CALLBACKS[key]()


# ---------------------------------------------------------------------------
# Internal helpers
# ---------------------------------------------------------------------------


def _get_or_create_metric(
    metric_cls: type[MetricT],
    name: str,
    documentation: str,
    labelnames: Sequence[str] | None,
    *,
    registry: CollectorRegistry,
) -> MetricT:
    labels = tuple(labelnames or ())
    cache_key = (registry, name)
    cached = _METRIC_CACHE.get(cache_key)
    if cached is not None:
        if isinstance(cached, metric_cls) and _labels_match(cached, labels):
            return cached  # type: ignore[return-value]
        try:
            registry.unregister(cached)
        except KeyError:  # pragma: no cover - already gone
            pass
        _METRIC_CACHE.pop(cache_key, None)

    existing = _lookup_metric(registry, name)
    if existing is not None:
        if not isinstance(existing, metric_cls):
            raise TypeError(
                f"Metric '{name}' already registered with incompatible type {type(existing)!r}"
            )
        if not _labels_match(existing, labels):
            registry.unregister(existing)
            existing = None
    if existing is None:
        metric = metric_cls(name, documentation, labels, registry=registry)
    else:
        metric = existing
    _METRIC_CACHE[cache_key] = metric
    return metric  # type: ignore[return-value]


def _register_reset(metric: MetricWrapperBase, registry: CollectorRegistry) -> None:
    name = getattr(metric, "_name", None)
    if not name:
        return
    _RESET_CALLBACKS[(registry, name)] = metric.clear


def _lookup_metric(registry: CollectorRegistry, name: str) -> MetricWrapperBase | None:
    try:
        collectors = registry._names_to_collectors  # type: ignore[attr-defined]
    except AttributeError:  # pragma: no cover
        return None
    # Counters are indexed under both ``name`` and ``name_total``.
    return collectors.get(name) or collectors.get(f"{name}_total")


def _labels_match(metric: MetricWrapperBase, expected: Sequence[str]) -> bool:
    current = tuple(getattr(metric, "_labelnames", ()))
    return current == tuple(expected)
