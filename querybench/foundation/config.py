from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, FrozenSet, Mapping

import yaml  # type: ignore[import-untyped]

from querybench.services.query.config import QueryConfig

logger = logging.getLogger(__name__)


@dataclass
class CheckerConfig:
    """Hosts seeded into the bundled in-memory checker."""

    hosts: list[str] = field(default_factory=list)


@dataclass
class TelemetryConfig:
    """Metrics exposition settings."""

    metrics_port: int | None = None


CONFIG_SECTION_NAMES: tuple[str, ...] = (
    "query",
    "checker",
    "telemetry",
)


@dataclass
class UnifiedConfig:
    """Configuration aggregating every querybench section."""

    query: QueryConfig = field(default_factory=QueryConfig)
    checker: CheckerConfig = field(default_factory=CheckerConfig)
    telemetry: TelemetryConfig = field(default_factory=TelemetryConfig)
    present_sections: FrozenSet[str] = field(default_factory=frozenset)


def find_config_file(cwd: Path | None = None) -> str | None:
    """Return the first discoverable configuration file in ``cwd``."""

    base = Path.cwd() if cwd is None else cwd

    for name in ("querybench.yml", "querybench.yaml"):
        candidate = base / name
        if candidate.is_file():
            return str(candidate)
    return None


def _read_config_mapping(path: str) -> dict[str, Any]:
    try:
        with open(path, "r", encoding="utf-8") as fh:
            try:
                data = yaml.safe_load(fh) or {}
            except yaml.YAMLError as exc:
                logger.error("Failed to parse configuration file %s: %s", path, exc)
                raise ValueError(f"Failed to parse configuration file {path}") from exc
    except (FileNotFoundError, OSError) as exc:
        logger.error("Unable to open configuration file %s: %s", path, exc)
        raise

    if not isinstance(data, dict):
        raise TypeError("Unified config must be a mapping")
    return data


def _extract_sections(
    data: Mapping[str, Any],
) -> tuple[dict[str, dict[str, Any]], FrozenSet[str]]:
    present_sections: FrozenSet[str] = frozenset(
        section
        for section in CONFIG_SECTION_NAMES
        if section in data and isinstance(data.get(section), dict)
    )

    sections: dict[str, dict[str, Any]] = {}
    for section_name in CONFIG_SECTION_NAMES:
        raw_section = data.get(section_name, {})
        if raw_section is None:
            raw_section = {}
        if not isinstance(raw_section, dict):
            raise TypeError(f"{section_name} section must be a mapping")
        sections[section_name] = dict(raw_section)
    return sections, present_sections


def load_config(path: str) -> UnifiedConfig:
    """Parse YAML/JSON and populate :class:`UnifiedConfig`."""
    data = _read_config_mapping(path)
    sections, present_sections = _extract_sections(data)

    checker_data = sections["checker"]
    if "hosts" in checker_data:
        checker_data["hosts"] = [str(h) for h in checker_data["hosts"] or []]

    return UnifiedConfig(
        query=QueryConfig.from_mapping(sections["query"]),
        checker=CheckerConfig(**checker_data),
        telemetry=TelemetryConfig(**sections["telemetry"]),
        present_sections=present_sections,
    )


__all__ = [
    "CONFIG_SECTION_NAMES",
    "CheckerConfig",
    "TelemetryConfig",
    "UnifiedConfig",
    "find_config_file",
    "load_config",
]
