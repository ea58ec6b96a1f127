"""Data layer package: seeded generator, metric kinds, dataset builder, repository.

Public exports:
- SeededSequence
- MetricKind, PERIODS, KINDS
- MetricDataset
- DatasetBuilder
- FigureCache
- DatasetRepository
"""
from .rng import SeededSequence
from .kinds import MetricKind, PERIODS, PERIOD_LABELS, KINDS, get_kind
from .models import MetricDataset
from .builder import DatasetBuilder
from .cache import FigureCache
from .repository import DatasetRepository

__all__ = [
    "SeededSequence",
    "MetricKind",
    "PERIODS",
    "PERIOD_LABELS",
    "KINDS",
    "get_kind",
    "MetricDataset",
    "DatasetBuilder",
    "FigureCache",
    "DatasetRepository",
]
