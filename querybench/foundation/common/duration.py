"""Prometheus-style duration strings.

Durations appear in two places: the YAML configuration (``sleep: 1s``,
``load_range: 1h``) and the ``step`` parameter sent to the query backend.
Both sides use the same grammar so a formatted value always parses back to
the number of seconds it came from (down to millisecond precision).
"""

from __future__ import annotations

import math
import re

__all__ = ["parse_duration", "format_duration"]

_UNIT_SECONDS: dict[str, float] = {
    "y": 365 * 86400.0,
    "w": 7 * 86400.0,
    "d": 86400.0,
    "h": 3600.0,
    "m": 60.0,
    "s": 1.0,
    "ms": 0.001,
}

_COMPONENT_RE = re.compile(r"(\d+(?:\.\d+)?)(ms|[ywdhms])")


def parse_duration(value: str | int | float) -> float:
    """Return ``value`` in seconds.

    Numbers are taken as seconds. Strings are either a bare number of seconds
    or a sequence of ``<amount><unit>`` components such as ``"1h30m"``.
    """

    if isinstance(value, bool):
        raise ValueError(f"invalid duration: {value!r}")
    if isinstance(value, (int, float)):
        if value < 0:
            raise ValueError(f"duration must not be negative: {value!r}")
        return float(value)

    text = str(value).strip().lower()
    if not text:
        raise ValueError("duration must not be empty")
    try:
        seconds = float(text)
    except ValueError:
        pass
    else:
        if seconds < 0 or not math.isfinite(seconds):
            raise ValueError(f"invalid duration: {value!r}")
        return seconds

    total = 0.0
    pos = 0
    for match in _COMPONENT_RE.finditer(text):
        if match.start() != pos:
            break
        total += float(match.group(1)) * _UNIT_SECONDS[match.group(2)]
        pos = match.end()
    if pos != len(text):
        raise ValueError(f"invalid duration: {value!r}")
    return total


def format_duration(seconds: float) -> str:
    """Render ``seconds`` as a compact duration string (``"1h30m"``, ``"500ms"``)."""

    if seconds < 0:
        raise ValueError(f"duration must not be negative: {seconds!r}")
    remaining = int(round(seconds * 1000))
    if remaining == 0:
        return "0s"

    parts: list[str] = []
    for unit, size in (("h", 3_600_000), ("m", 60_000), ("s", 1000), ("ms", 1)):
        amount, remaining = divmod(remaining, size)
        if amount:
            parts.append(f"{amount}{unit}")
    return "".join(parts)
