"""Metric-kind configuration and the fixed reporting periods.

CSAT, NPS and multiple-choice questions share one dataset/geometry pipeline;
everything that differs between them lives in a `MetricKind` instance.
"""
from __future__ import annotations

from typing import Dict, Literal, Optional, Tuple

from pydantic import BaseModel, ConfigDict


class Draw(BaseModel):
    """Integer draw parameters: `floor(rng() * span) + offset`."""

    model_config = ConfigDict(frozen=True)

    span: int
    offset: int = 0


class ClassBand(BaseModel):
    """A contiguous run of buckets that share a class (e.g. NPS promoters)."""

    model_config = ConfigDict(frozen=True)

    key: str
    label: str
    color: str
    buckets: int
    daily: Optional[Draw] = None


class Choice(BaseModel):
    model_config = ConfigDict(frozen=True)

    key: str
    label: str
    color: str


class Period(BaseModel):
    model_config = ConfigDict(frozen=True)

    label: str
    seed: int
    days: int


class MetricKind(BaseModel):
    model_config = ConfigDict(frozen=True)

    name: Literal["csat", "nps", "choice"]
    title: str
    gauge_label: str = ""
    bucket_count: int
    bucket_draw: Draw
    gauge_min: float = 0.0
    gauge_max: float = 100.0
    summary_range: Tuple[float, float] = (1.0, 5.0)
    trend_value: Draw = Draw(span=70, offset=10)
    trend_responses: Draw = Draw(span=25, offset=5)
    classes: Tuple[ClassBand, ...] = ()
    choices: Tuple[Choice, ...] = ()
    color: str = "#A52E9D"
    score_suffix: str = ""
    modes: Tuple[str, ...] = ("overview", "detailed")
    detail_views: Tuple[str, ...] = ()
    base_scores: Dict[str, int] = {}

    @property
    def classified(self) -> bool:
        return bool(self.classes)

    def class_of(self, bucket_index: int) -> Optional[ClassBand]:
        """Class band for a 0-based bucket index, assigned statically by position."""
        upper = 0
        for band in self.classes:
            upper += band.buckets
            if bucket_index < upper:
                return band
        return None

    def gauge_spans(self) -> Optional[Tuple[int, ...]]:
        if not self.classified:
            return None
        return tuple(band.buckets for band in self.classes)


PERIODS: Tuple[Period, ...] = (
    Period(label="Last 30 days", seed=55, days=30),
    Period(label="Last 3 months", seed=90, days=90),
    Period(label="Last 6 months", seed=180, days=180),
    Period(label="All time", seed=365, days=365),
)
PERIOD_LABELS: Tuple[str, ...] = tuple(p.label for p in PERIODS)

PURPLE = "#A52E9D"
ACCENT = "#1966CA"

CSAT = MetricKind(
    name="csat",
    title="Customer Satisfaction Score",
    gauge_label="CSAT",
    bucket_count=5,
    bucket_draw=Draw(span=20, offset=2),
    summary_range=(3.5, 5.0),
    trend_value=Draw(span=70, offset=10),
    trend_responses=Draw(span=25, offset=5),
    color=PURPLE,
    score_suffix="%",
    detail_views=("histogram", "trend"),
    base_scores={"Last 30 days": 72, "Last 3 months": 70, "Last 6 months": 69, "All time": 67},
)

NPS = MetricKind(
    name="nps",
    title="Net Promoter Score",
    gauge_label="NPS",
    bucket_count=10,
    bucket_draw=Draw(span=70, offset=5),
    gauge_min=-100.0,
    gauge_max=100.0,
    summary_range=(6.0, 10.0),
    trend_value=Draw(span=60, offset=10),
    trend_responses=Draw(span=30, offset=10),
    classes=(
        ClassBand(key="detractor", label="Detractors", color="#D8D8D8", buckets=6, daily=Draw(span=15, offset=5)),
        ClassBand(key="passive", label="Passives", color="#FB813F", buckets=2, daily=Draw(span=20, offset=10)),
        ClassBand(key="promoter", label="Promoters", color="#27A674", buckets=2, daily=Draw(span=40, offset=20)),
    ),
    color=ACCENT,
    detail_views=("histogram", "stacked", "trend"),
    base_scores={"Last 30 days": 48, "Last 3 months": 45, "Last 6 months": 41, "All time": 39},
)

CHOICE = MetricKind(
    name="choice",
    title="Multiple Response",
    bucket_count=4,
    bucket_draw=Draw(span=60, offset=5),
    summary_range=(1.0, 4.0),
    choices=(
        Choice(key="A", label="What we gonna do today", color="#1966CA"),
        Choice(key="B", label="I think we should try play basketball", color="#6B4FBB"),
        Choice(key="C", label="Well, I probably agree with you", color="#2DB88A"),
        Choice(key="D", label="Definitely", color="#E5AA28"),
    ),
    color=ACCENT,
    modes=("vertical", "horizontal", "donut"),
)

KINDS: Dict[str, MetricKind] = {k.name: k for k in (CHOICE, NPS, CSAT)}


def get_kind(name: str) -> MetricKind:
    return KINDS[name]


def get_period(label: str) -> Period:
    for period in PERIODS:
        if period.label == label:
            return period
    raise KeyError(label)
