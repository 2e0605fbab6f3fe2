from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Optional, Sequence

from pydantic import BaseModel, Field, field_validator


@dataclass(frozen=True, slots=True)
class Datapoint:
    """A sample known to have been written for a host."""

    timestamp: float
    value: float


Datapoints = Sequence[Datapoint]


class PromQueryMatrix(BaseModel):
    metric: dict[str, str] = Field(default_factory=dict)
    values: list[tuple[float, float]] = Field(default_factory=list)

    @field_validator("values", mode="before")
    @classmethod
    def _decode_pairs(cls, raw: Any) -> Any:
        # Sample values travel as strings ("1.5", "NaN", "+Inf").
        if not isinstance(raw, list):
            return raw
        pairs = []
        for item in raw:
            if not isinstance(item, (list, tuple)) or len(item) != 2:
                raise ValueError(f"sample must be a [timestamp, value] pair, got {item!r}")
            try:
                pairs.append((float(item[0]), float(item[1])))
            except (TypeError, ValueError, OverflowError) as exc:
                raise ValueError(f"invalid sample {item!r}: {exc}") from exc
        return pairs


class PromQueryData(BaseModel):
    resultType: str = ""
    result: list[PromQueryMatrix] = Field(default_factory=list)
    stats: Optional[dict[str, Any]] = None


class PromQueryResult(BaseModel):
    status: str = ""
    data: PromQueryData = Field(default_factory=PromQueryData)


__all__ = [
    "Datapoint",
    "Datapoints",
    "PromQueryData",
    "PromQueryMatrix",
    "PromQueryResult",
]
