from __future__ import annotations

import asyncio
from dataclasses import dataclass
from typing import Dict

import httpx

from querybench.foundation.config import UnifiedConfig
from querybench.services.query.config import QueryConfig
from querybench.services.query.errors import ConfigurationInfeasible
from querybench.services.query.load import hosts_per_query


@dataclass(slots=True)
class ValidationIssue:
    """Represents the outcome of a single validation check."""

    severity: str
    hint: str


def _check_positive(cfg: QueryConfig, names: tuple[str, ...]) -> ValidationIssue:
    bad = [f"{name}={getattr(cfg, name)}" for name in names if getattr(cfg, name) <= 0]
    if bad:
        return ValidationIssue("error", "must be positive: " + ", ".join(bad))
    return ValidationIssue("ok", "all positive")


def validate_query_config(cfg: QueryConfig) -> Dict[str, ValidationIssue]:
    """Return per-check results for the ``query`` section."""

    results: Dict[str, ValidationIssue] = {}

    if not cfg.urls:
        results["urls"] = ValidationIssue("error", "no query endpoints configured")
    elif len(cfg.urls) == 1:
        results["urls"] = ValidationIssue(
            "warning", "single endpoint configured; consistency comparison is disabled"
        )
    else:
        results["urls"] = ValidationIssue("ok", f"{len(cfg.urls)} endpoints configured")

    results["concurrency"] = _check_positive(cfg, ("concurrency",))
    results["durations"] = _check_positive(
        cfg, ("load_range", "load_step", "accuracy_range", "accuracy_step", "timeout")
    )
    if cfg.sleep < 0:
        results["sleep"] = ValidationIssue("error", f"sleep must not be negative: {cfg.sleep}")
    elif cfg.sleep == 0:
        results["sleep"] = ValidationIssue("warning", "sleep is 0; loops will not pause")
    else:
        results["sleep"] = ValidationIssue("ok", f"sleeping {cfg.sleep}s between rounds")

    try:
        num_hosts = hosts_per_query(cfg.num_series, cfg.num_write_hosts)
    except ConfigurationInfeasible as exc:
        results["series"] = ValidationIssue("error", str(exc))
    else:
        results["series"] = ValidationIssue("ok", f"{num_hosts} hosts per load query")

    if cfg.debug_length < 0:
        results["debug_length"] = ValidationIssue(
            "error", f"debug_length must not be negative: {cfg.debug_length}"
        )
    return results


def validate_config(unified: UnifiedConfig) -> Dict[str, ValidationIssue]:
    results = {f"query.{k}": v for k, v in validate_query_config(unified.query).items()}
    port = unified.telemetry.metrics_port
    if port is not None and not 0 < port < 65536:
        results["telemetry.metrics_port"] = ValidationIssue(
            "error", f"metrics_port out of range: {port}"
        )
    return results


async def _probe_endpoint(client: httpx.AsyncClient, url: str) -> ValidationIssue:
    try:
        resp = await client.get(url, params={"query": "vector(1)"})
    except httpx.HTTPError as exc:
        return ValidationIssue("error", f"{url} unreachable: {exc}")
    if resp.is_success:
        return ValidationIssue("ok", f"{url} reachable")
    return ValidationIssue("warning", f"{url} answered with status {resp.status_code}")


async def validate_endpoints(
    cfg: QueryConfig,
    *,
    offline: bool = False,
    client: httpx.AsyncClient | None = None,
) -> Dict[str, ValidationIssue]:
    """Probe each configured endpoint once."""

    if offline:
        return {
            url: ValidationIssue("warning", f"Offline mode: skipped probe for {url}")
            for url in cfg.urls
        }

    owns_client = client is None
    http = client or httpx.AsyncClient(timeout=cfg.timeout, headers=cfg.headers)
    try:
        issues = await asyncio.gather(*(_probe_endpoint(http, url) for url in cfg.urls))
    finally:
        if owns_client:
            await http.aclose()
    return dict(zip(cfg.urls, issues))


__all__ = [
    "ValidationIssue",
    "validate_config",
    "validate_endpoints",
    "validate_query_config",
]
