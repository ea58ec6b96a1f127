from __future__ import annotations

import datetime as dt
import logging
from types import MappingProxyType
from typing import TYPE_CHECKING, Dict, Mapping, Optional, Tuple

import pandas as pd

from .builder import DatasetBuilder
from .kinds import KINDS, PERIODS, MetricKind
from .models import MetricDataset

if TYPE_CHECKING:  # pragma: no cover
    from ..config import Settings

logger = logging.getLogger(__name__)

Key = Tuple[str, str]


class DatasetRepository:
    """Read-only cache of every (metric kind, period) dataset.

    Built once, eagerly, by the composition root and handed to the layout and
    callbacks. Switching periods only changes which entry is read.
    """

    def __init__(self, datasets: Mapping[Key, MetricDataset]) -> None:
        self._datasets: Mapping[Key, MetricDataset] = MappingProxyType(dict(datasets))

    @classmethod
    def build(
        cls,
        settings: Optional["Settings"] = None,
        kinds: Optional[Dict[str, MetricKind]] = None,
    ) -> "DatasetRepository":
        anchor = settings.anchor_date if settings is not None else dt.date(2025, 3, 31)
        builder = DatasetBuilder(anchor_date=anchor)
        datasets: Dict[Key, MetricDataset] = {}
        for kind in (kinds or KINDS).values():
            for period in PERIODS:
                datasets[(kind.name, period.label)] = builder.build(
                    kind,
                    seed=period.seed,
                    period_label=period.label,
                    day_count=period.days,
                    base_score=kind.base_scores.get(period.label),
                )
        logger.info("Built %d survey datasets (anchor %s)", len(datasets), anchor.isoformat())
        return cls(datasets)

    def get(self, kind: str, period: str) -> MetricDataset:
        return self._datasets[(kind, period)]

    def kinds(self) -> Tuple[str, ...]:
        return tuple(dict.fromkeys(k for k, _ in self._datasets))

    def periods(self) -> Tuple[str, ...]:
        return tuple(dict.fromkeys(p for _, p in self._datasets))

    def __len__(self) -> int:
        return len(self._datasets)

    # ---- Export ----
    def frame(self, kind: str, period: str, view: str) -> pd.DataFrame:
        """Tabular form of the series a chart view displays."""
        ds = self.get(kind, period)
        if view == "histogram":
            rows = [b.model_dump(by_alias=True) for b in ds.histogram]
            return pd.DataFrame(rows, columns=["bucket", "value", "class"])
        if view == "trend":
            return pd.DataFrame([p.model_dump() for p in ds.trend], columns=["label", "value", "responses"])
        if view == "stacked":
            rows = []
            for entry in ds.stacked:
                row = {"label": entry.label, "total": entry.total}
                row.update({f"{k}_share": v for k, v in entry.component_shares.items()})
                row.update({f"{k}_raw": v for k, v in entry.component_raw.items()})
                rows.append(row)
            return pd.DataFrame(rows)
        df = pd.DataFrame([c.model_dump() for c in ds.categories], columns=["key", "label", "color", "responses"])
        df["share"] = [ds.share(v) for v in df["responses"]]
        return df
