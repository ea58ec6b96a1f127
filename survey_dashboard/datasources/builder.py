from __future__ import annotations

import datetime as dt
import logging
from typing import Dict, List, Optional, Tuple

from ..utils import day_label, round_half_up
from .kinds import MetricKind
from .models import Category, HistogramBucket, MetricDataset, StackedEntry, TrendPoint
from .rng import SeededSequence

logger = logging.getLogger(__name__)


class DatasetBuilder:
    """Generates deterministic synthetic datasets for any metric kind.

    The order in which values are drawn from the sequence is fixed: bucket
    counts, median, average, daily stacked mix (classified kinds only), then
    the daily trend. Changing that order changes every value downstream.
    """

    def __init__(self, anchor_date: dt.date = dt.date(2025, 3, 31)) -> None:
        self.anchor_date = anchor_date

    def build(
        self,
        kind: MetricKind,
        seed: int,
        period_label: str,
        day_count: int,
        base_score: Optional[float] = None,
    ) -> MetricDataset:
        rng = SeededSequence(seed)

        counts = [rng.draw(kind.bucket_draw.span, kind.bucket_draw.offset) for _ in range(kind.bucket_count)]
        lo, hi = kind.summary_range
        median = round_half_up(lo + rng() * (hi - lo), 1)
        average = round_half_up(lo + rng() * (hi - lo), 1)

        labels = self._day_labels(day_count)
        stacked = self._stacked(kind, rng, labels) if kind.classified else ()
        trend = tuple(
            TrendPoint(
                label=label,
                value=rng.draw(kind.trend_value.span, kind.trend_value.offset),
                responses=rng.draw(kind.trend_responses.span, kind.trend_responses.offset),
            )
            for label in labels
        )

        histogram = tuple(
            HistogramBucket(
                bucket=i + 1,
                value=value,
                klass=(kind.class_of(i).key if kind.classified else None),
            )
            for i, value in enumerate(counts)
        )

        dataset = MetricDataset(
            kind=kind.name,
            period=period_label,
            score=base_score,
            median=median,
            average=average,
            total=sum(counts),
            categories=self._categories(kind, counts),
            histogram=histogram,
            trend=trend,
            stacked=stacked,
        )
        logger.debug(
            "Built %s dataset for %r (seed=%s, days=%s, total=%s)",
            kind.name, period_label, seed, day_count, dataset.total,
        )
        return dataset

    def _day_labels(self, day_count: int) -> List[str]:
        first = self.anchor_date - dt.timedelta(days=day_count - 1)
        return [day_label(first + dt.timedelta(days=i)) for i in range(day_count)]

    @staticmethod
    def _categories(kind: MetricKind, counts: List[int]) -> Tuple[Category, ...]:
        if kind.classified:
            sums: Dict[str, int] = {band.key: 0 for band in kind.classes}
            for i, value in enumerate(counts):
                sums[kind.class_of(i).key] += value
            return tuple(
                Category(key=band.key, label=band.label, color=band.color, responses=sums[band.key])
                for band in kind.classes
            )
        if kind.choices:
            return tuple(
                Category(key=choice.key, label=choice.label, color=choice.color, responses=value)
                for choice, value in zip(kind.choices, counts)
            )
        # Rating scales list the highest rating first
        return tuple(
            Category(key=str(i + 1), label=str(i + 1), color=kind.color, responses=counts[i])
            for i in reversed(range(len(counts)))
        )

    @staticmethod
    def _stacked(kind: MetricKind, rng: SeededSequence, labels: List[str]) -> Tuple[StackedEntry, ...]:
        entries = []
        for label in labels:
            # Top of the stack is drawn first
            raw = {}
            for band in reversed(kind.classes):
                daily = band.daily
                raw[band.key] = rng.draw(daily.span, daily.offset) if daily else 0
            total = sum(raw.values())
            shares = {
                key: (round_half_up(value / total * 100) if total else 0)
                for key, value in raw.items()
            }
            entries.append(
                StackedEntry(
                    label=label,
                    component_shares={band.key: shares[band.key] for band in kind.classes},
                    component_raw={band.key: raw[band.key] for band in kind.classes},
                    total=total,
                )
            )
        return tuple(entries)
