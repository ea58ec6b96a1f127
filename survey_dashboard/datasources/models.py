from __future__ import annotations

from typing import Dict, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field

from ..utils import round_half_up


class Category(BaseModel):
    """One mutually exclusive response bucket as shown in a summary list."""

    model_config = ConfigDict(frozen=True)

    key: str
    label: str
    color: str
    responses: int


class HistogramBucket(BaseModel):
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    bucket: int
    value: int
    klass: Optional[str] = Field(default=None, alias="class")


class TrendPoint(BaseModel):
    model_config = ConfigDict(frozen=True)

    label: str
    value: int
    responses: int


class StackedEntry(BaseModel):
    """Daily class mix: rounded percentage shares plus the raw counts."""

    model_config = ConfigDict(frozen=True)

    label: str
    component_shares: Dict[str, int]
    component_raw: Dict[str, int]
    total: int


class MetricDataset(BaseModel):
    """Immutable metric snapshot for one (metric kind, period) pair."""

    model_config = ConfigDict(frozen=True)

    kind: str
    period: str
    score: Optional[float] = None
    median: float
    average: float
    total: int
    categories: Tuple[Category, ...]
    histogram: Tuple[HistogramBucket, ...]
    trend: Tuple[TrendPoint, ...]
    stacked: Tuple[StackedEntry, ...] = ()

    def share(self, value: int) -> int:
        """Rounded percentage of `total`; 0 for an empty dataset."""
        if self.total <= 0:
            return 0
        return round_half_up(value / self.total * 100)
