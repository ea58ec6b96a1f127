"""Pure geometry helpers turning metric series into drawable primitives.

Coordinates are SVG-style pixels (y grows downwards) unless stated otherwise.
Gauge angles run 0..180 degrees from the left end of the half circle,
over the top, to the right end. Donut angles are compass degrees, clockwise
from 12 o'clock.
"""
from __future__ import annotations

import math
from dataclasses import dataclass
from typing import List, Optional, Sequence, Tuple

import numpy as np

Point = Tuple[float, float]

GAUGE_CENTER: Point = (72.0, 65.0)
GAUGE_RADIUS = 60.0
DONUT_GAP = 3.0


@dataclass(frozen=True)
class Arc:
    start: float
    end: float

    @property
    def sweep(self) -> float:
        return self.end - self.start


@dataclass(frozen=True)
class GaugeGeometry:
    angle: float
    track: Arc
    bands: Tuple[Arc, ...]
    value_arc: Optional[Arc]
    indicator: Point
    center: Point
    radius: float


@dataclass(frozen=True)
class Segment:
    index: int
    start: float
    end: float
    value: float

    @property
    def sweep(self) -> float:
        return self.end - self.start

    @property
    def mid(self) -> float:
        return (self.start + self.end) / 2.0


@dataclass(frozen=True)
class Box:
    """Vertical extent measured upwards from the track bottom."""

    index: int
    y0: float
    y1: float

    @property
    def height(self) -> float:
        return self.y1 - self.y0


# ---- Gauge ----

def gauge_angle(score: float, lo: float, hi: float) -> float:
    """Map `score` on `[lo, hi]` to a 0..180 degree sweep, clamping out-of-range scores."""
    if hi <= lo:
        return 0.0
    clamped = min(max(score, lo), hi)
    return (clamped - lo) / (hi - lo) * 180.0


def gauge_point(angle: float, center: Point = GAUGE_CENTER, radius: float = GAUGE_RADIUS) -> Point:
    theta = math.pi + math.radians(angle)
    return center[0] + radius * math.cos(theta), center[1] + radius * math.sin(theta)


def arc_path(start: float, end: float, center: Point = GAUGE_CENTER, radius: float = GAUGE_RADIUS) -> str:
    """SVG path for a gauge arc from `start` to `end` degrees."""
    x1, y1 = gauge_point(start, center, radius)
    x2, y2 = gauge_point(end, center, radius)
    large = 1 if end - start > 180 else 0
    return f"M {x1} {y1} A {radius} {radius} 0 {large} 1 {x2} {y2}"


def arc_polyline(
    start: float,
    end: float,
    center: Point = GAUGE_CENTER,
    radius: float = GAUGE_RADIUS,
    steps: int = 48,
) -> List[Point]:
    """Sampled gauge arc, for renderers without an arc primitive."""
    theta = np.pi + np.radians(np.linspace(start, end, max(steps, 2)))
    xs = center[0] + radius * np.cos(theta)
    ys = center[1] + radius * np.sin(theta)
    return [(float(x), float(y)) for x, y in zip(xs, ys)]


def gauge_bands(spans: Sequence[float]) -> Tuple[Arc, ...]:
    """Split the half circle into contiguous bands proportional to `spans`.

    Spans of 6, 2, 2 (scale points) give 108, 36 and 36 degrees.
    """
    total = float(sum(spans))
    if total <= 0:
        return ()
    bands = []
    cursor = 0.0
    for i, span in enumerate(spans):
        end = 180.0 if i == len(spans) - 1 else cursor + span / total * 180.0
        bands.append(Arc(cursor, end))
        cursor = end
    return tuple(bands)


def gauge(
    score: float,
    lo: float,
    hi: float,
    spans: Optional[Sequence[float]] = None,
    center: Point = GAUGE_CENTER,
    radius: float = GAUGE_RADIUS,
) -> GaugeGeometry:
    """Full gauge: background track or class bands, value arc and indicator point.

    Classified gauges show the value only through the indicator; their bands
    do not depend on the score.
    """
    angle = gauge_angle(score, lo, hi)
    bands = gauge_bands(spans) if spans else ()
    return GaugeGeometry(
        angle=angle,
        track=Arc(0.0, 180.0),
        bands=bands,
        value_arc=None if bands else Arc(0.0, angle),
        indicator=gauge_point(angle, center, radius - 2),
        center=center,
        radius=radius,
    )


# ---- Donut ----

def donut_segments(values: Sequence[float], gap: float = DONUT_GAP, start: float = 0.0) -> List[Segment]:
    """Consecutive donut segments separated by a fixed angular gap.

    The sweeps share `360 - N * gap` degrees in proportion to the values, so
    sweeps plus gaps always close the circle. A zero total yields no segments.
    """
    clean = [max(float(v), 0.0) for v in values]
    total = sum(clean)
    available = 360.0 - len(clean) * gap
    if not clean or total <= 0 or available <= 0:
        return []
    segments = []
    cursor = start
    for i, value in enumerate(clean):
        end = cursor + value / total * available
        segments.append(Segment(index=i, start=cursor, end=end, value=value))
        cursor = end + gap
    return segments


def donut_point(angle: float, center: Point, radius: float) -> Point:
    a = math.radians(angle)
    return center[0] + radius * math.sin(a), center[1] - radius * math.cos(a)


def segment_midpoint(segment: Segment, center: Point, radius: float) -> Point:
    return donut_point(segment.mid, center, radius)


def segment_polygon(
    segment: Segment,
    center: Point,
    outer: float,
    inner: float,
    steps: int = 24,
) -> List[Point]:
    """Closed ring-slice outline: outer edge forward, inner edge back."""
    angles = np.radians(np.linspace(segment.start, segment.end, max(steps, 2)))
    outer_pts = [(center[0] + outer * np.sin(a), center[1] - outer * np.cos(a)) for a in angles]
    inner_pts = [(center[0] + inner * np.sin(a), center[1] - inner * np.cos(a)) for a in angles[::-1]]
    pts = outer_pts + inner_pts
    pts.append(pts[0])
    return [(float(x), float(y)) for x, y in pts]


# ---- Bars ----

def bar_extents(values: Sequence[float], track: float) -> List[float]:
    """Bar lengths scaled so the series maximum fills `track`."""
    peak = max(values, default=0)
    if peak <= 0:
        peak = 1
    return [max(v, 0) / peak * track for v in values]


def stacked_boxes(shares: Sequence[float], track: float) -> List[Box]:
    """Contiguous boxes, first share at the bottom, each `share / 100 * track` tall."""
    boxes = []
    cursor = 0.0
    for i, share in enumerate(shares):
        height = max(share, 0) / 100.0 * track
        boxes.append(Box(index=i, y0=cursor, y1=cursor + height))
        cursor += height
    return boxes


def slot_center(index: int, count: int, extent: float) -> float:
    """Midpoint of the `index`-th of `count` equal slots along `extent`."""
    if count <= 0:
        return 0.0
    return (index + 0.5) / count * extent
