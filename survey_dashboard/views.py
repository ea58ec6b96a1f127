"""Chart views: dataset slice -> geometry -> Plotly figure dict, plus tooltip content.

Views own no data. Everything here is re-derivable from the dataset, the
selected period and the hover state. The plot area of every figure is laid
out in pixel coordinates with no top or right margin, so hover offsets
reported by the browser line up with the geometry. Scale labels live in a
left gutter and a bottom label band outside the plot area.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable, Dict, List, Optional, Sequence, Tuple, Union

from . import geometry
from .datasources.kinds import MetricKind, get_kind
from .datasources.models import MetricDataset
from .hover import (
    DEFAULT_TOOLTIP_OFFSET,
    Anchor,
    AnchorStrategy,
    Hovering,
    Idle,
    Size,
    place_tooltip,
)

Figure = Dict[str, Any]

TRACK_COLOR = "#E8E8E8"
INDICATOR_COLOR = "#302E2A"
GRID_COLOR = "rgba(0,0,0,0.08)"
HOVER_FILL = "rgba(48,46,42,0.04)"
LABEL_FONT = {"size": 12, "color": "#73726C"}
GAUGE_SIZE = Size(144, 80)
DONUT_OUTER = 57.0
DONUT_INNER = 43.0
DONUT_HOVER_GROWTH = 1.5  # per edge, 3 px thicker ring overall
SCALE_GUTTER = 32.0
LABEL_BAND = 20.0
DAY_TICKS = (0, 6, 13, 20, 27)


class ChartView(str, Enum):
    GAUGE = "gauge"
    DONUT = "donut"
    VERTICAL = "vertical"
    HORIZONTAL = "horizontal"
    HISTOGRAM = "histogram"
    STACKED = "stacked"
    TREND = "trend"


@dataclass(frozen=True)
class ViewSpec:
    view: ChartView
    height: float
    tooltip: Size = Size(180, 100)
    strategy: AnchorStrategy = AnchorStrategy.CENTER_CLAMP
    index_source: str = "point"
    hoverable: bool = True
    gutter: float = 0.0
    label_band: float = 0.0


VIEW_SPECS: Dict[ChartView, ViewSpec] = {
    ChartView.GAUGE: ViewSpec(ChartView.GAUGE, height=GAUGE_SIZE.height, hoverable=False),
    ChartView.HISTOGRAM: ViewSpec(ChartView.HISTOGRAM, height=120, gutter=SCALE_GUTTER, label_band=LABEL_BAND),
    ChartView.TREND: ViewSpec(ChartView.TREND, height=120, gutter=SCALE_GUTTER, label_band=LABEL_BAND),
    ChartView.STACKED: ViewSpec(
        ChartView.STACKED,
        height=120,
        tooltip=Size(180, 140),
        gutter=SCALE_GUTTER,
        label_band=LABEL_BAND,
    ),
    ChartView.VERTICAL: ViewSpec(ChartView.VERTICAL, height=156, tooltip=Size(180, 110), label_band=LABEL_BAND),
    ChartView.HORIZONTAL: ViewSpec(ChartView.HORIZONTAL, height=156, tooltip=Size(180, 110), label_band=LABEL_BAND),
    ChartView.DONUT: ViewSpec(
        ChartView.DONUT,
        height=156,
        tooltip=Size(180, 110),
        strategy=AnchorStrategy.EDGE_SNAP,
        index_source="curve",
    ),
}


@dataclass
class TooltipContent:
    rows: List[Tuple[str, str]]
    caption: str


@dataclass
class Tooltip:
    """Anchor is relative to the plot area; `gutter` is the plot area's left offset in the figure."""

    anchor: Anchor
    size: Size
    content: TooltipContent = field(default_factory=lambda: TooltipContent([], ""))
    gutter: float = 0.0


EMPTY_FIGURE: Figure = {"data": [], "layout": {"paper_bgcolor": "white", "plot_bgcolor": "white"}}


def active_view(kind: MetricKind, mode: Optional[str], tab: Optional[str]) -> ChartView:
    """Resolve the selector values of a card into the chart view to show."""
    if not kind.detail_views:
        return ChartView(mode if mode in kind.modes else kind.modes[0])
    if mode != "detailed":
        return ChartView.GAUGE
    return ChartView(tab if tab in kind.detail_views else kind.detail_views[0])


# ---- Layout helpers ----

def _hidden_axis(extent: float, flip: bool = False) -> Dict[str, Any]:
    return {"range": [extent, 0] if flip else [0, extent], "visible": False, "fixedrange": True}


def _layout(
    width: float,
    height: float,
    flip_y: bool = False,
    gutter: float = 0.0,
    band: float = 0.0,
    **extra,
) -> Dict[str, Any]:
    layout = {
        "width": width + gutter,
        "height": height + band,
        "margin": {"l": gutter, "r": 0, "t": 0, "b": band, "pad": 0},
        "xaxis": _hidden_axis(width),
        "yaxis": _hidden_axis(height, flip=flip_y),
        "showlegend": False,
        "hovermode": "closest",
        "paper_bgcolor": "white",
        "plot_bgcolor": "white",
        "shapes": [],
    }
    layout.update(extra)
    return layout


def _label_axis(extent: float, positions: Sequence[float], labels: Sequence[str], flip: bool = False) -> Dict[str, Any]:
    """Visible axis carrying only the given tick labels, no grid or line."""
    return {
        **_hidden_axis(extent, flip=flip),
        "visible": True,
        "tickmode": "array",
        "tickvals": list(positions),
        "ticktext": list(labels),
        "ticks": "",
        "showgrid": False,
        "showline": False,
        "zeroline": False,
        "tickfont": LABEL_FONT,
    }


def _value_scale(track: float, suffix: str = "") -> Dict[str, Any]:
    """0/50/100 scale on the left gutter with dashed gridlines and a solid baseline."""
    return {
        **_label_axis(track, [0, track / 2, track], [f"0{suffix}", f"50{suffix}", f"100{suffix}"]),
        "showgrid": True,
        "gridcolor": GRID_COLOR,
        "griddash": "dash",
        "zeroline": True,
        "zerolinecolor": GRID_COLOR,
        "zerolinewidth": 1,
    }


def day_ticks(count: int) -> List[int]:
    """Indices of the day labels drawn under a daily series."""
    if count <= DAY_TICKS[-1] + 3:
        return [i for i in DAY_TICKS if i < count]
    step = (count - 1) / 4
    return [int(k * step + 0.5) for k in range(5)]


def _in_range(index: Optional[int], count: int) -> bool:
    return index is not None and 0 <= index < count


def _slot_highlight(index: int, count: int, extent: float, span: float, horizontal: bool = False) -> Dict[str, Any]:
    """Shaded full-height (or full-width) slot behind the hovered item."""
    lo, hi = index / count * extent, (index + 1) / count * extent
    box = dict(x0=0, x1=span, y0=lo, y1=hi) if horizontal else dict(x0=lo, x1=hi, y0=0, y1=span)
    return {
        "type": "rect",
        "xref": "x",
        "yref": "y",
        **box,
        "fillcolor": HOVER_FILL,
        "line": {"width": 0},
        "layer": "below",
    }


def _rule(x0: float, y0: float, x1: float, y1: float) -> Dict[str, Any]:
    return {"type": "line", "xref": "x", "yref": "y", "x0": x0, "y0": y0, "x1": x1, "y1": y1,
            "line": {"color": GRID_COLOR, "width": 1}, "layer": "below"}


def _bar_colors(kind: MetricKind, ds: MetricDataset) -> List[str]:
    if not kind.classified:
        return [kind.color] * len(ds.histogram)
    palette = {band.key: band.color for band in kind.classes}
    return [palette.get(b.klass, kind.color) for b in ds.histogram]


# ---- Render entry points (one per view) ----

def render_gauge(ds: MetricDataset, width: float = GAUGE_SIZE.width, hovered: Optional[int] = None) -> Figure:
    kind = get_kind(ds.kind)
    geo = geometry.gauge(ds.score or 0.0, kind.gauge_min, kind.gauge_max, kind.gauge_spans())

    def arc_trace(arc: geometry.Arc, color: str) -> Dict[str, Any]:
        pts = geometry.arc_polyline(arc.start, arc.end, geo.center, geo.radius)
        return {
            "type": "scatter",
            "mode": "lines",
            "x": [p[0] for p in pts],
            "y": [p[1] for p in pts],
            "line": {"color": color, "width": 12},
            "hoverinfo": "skip",
        }

    if geo.bands:
        data = [arc_trace(arc, band.color) for arc, band in zip(geo.bands, kind.classes)]
    else:
        data = [arc_trace(geo.track, TRACK_COLOR)]
        if geo.value_arc is not None and geo.value_arc.sweep > 0:
            data.append(arc_trace(geo.value_arc, kind.color))
    data.append({
        "type": "scatter",
        "mode": "markers",
        "x": [geo.indicator[0]],
        "y": [geo.indicator[1]],
        "marker": {"color": INDICATOR_COLOR, "size": 8},
        "hoverinfo": "skip",
    })
    return {"data": data, "layout": _layout(GAUGE_SIZE.width, GAUGE_SIZE.height, flip_y=True)}


def _vertical_bars(
    spec: ViewSpec,
    values: List[int],
    colors: List[str],
    width: float,
    bar_width: float,
    hovered: Optional[int],
) -> Figure:
    n = len(values)
    height = spec.height
    trace = {
        "type": "bar",
        "x": [geometry.slot_center(i, n, width) for i in range(n)],
        "y": geometry.bar_extents(values, height),
        "width": [bar_width] * n,
        "marker": {"color": colors},
        "customdata": values,
        "hoverinfo": "none",
    }
    layout = _layout(width, height, gutter=spec.gutter, band=spec.label_band)
    if _in_range(hovered, n):
        layout["shapes"].append(_slot_highlight(hovered, n, width, height))
    return {"data": [trace], "layout": layout}


def render_histogram(ds: MetricDataset, width: float, hovered: Optional[int] = None) -> Figure:
    kind = get_kind(ds.kind)
    spec = VIEW_SPECS[ChartView.HISTOGRAM]
    values = [b.value for b in ds.histogram]
    fig = _vertical_bars(spec, values, _bar_colors(kind, ds), width, 16, hovered)
    n = len(values)
    fig["layout"]["xaxis"] = _label_axis(
        width, [geometry.slot_center(i, n, width) for i in range(n)], [str(b.bucket) for b in ds.histogram]
    )
    fig["layout"]["yaxis"] = _value_scale(spec.height)
    return fig


def _daily_axis(labels: List[str], width: float) -> Dict[str, Any]:
    n = len(labels)
    ticks = day_ticks(n)
    return _label_axis(width, [geometry.slot_center(i, n, width) for i in ticks], [labels[i] for i in ticks])


def render_trend(ds: MetricDataset, width: float, hovered: Optional[int] = None) -> Figure:
    kind = get_kind(ds.kind)
    spec = VIEW_SPECS[ChartView.TREND]
    values = [p.value for p in ds.trend]
    slot = width / len(values) if values else width
    fig = _vertical_bars(spec, values, [kind.color] * len(values), width, max(slot - 1, 1), hovered)
    fig["layout"]["xaxis"] = _daily_axis([p.label for p in ds.trend], width)
    fig["layout"]["yaxis"] = _value_scale(spec.height)
    return fig


def render_vertical(ds: MetricDataset, width: float, hovered: Optional[int] = None) -> Figure:
    kind = get_kind(ds.kind)
    spec = VIEW_SPECS[ChartView.VERTICAL]
    values = [c.responses for c in ds.categories]
    n = len(values)
    fig = _vertical_bars(spec, values, [kind.color] * n, width, 24, hovered)
    fig["layout"]["xaxis"] = _label_axis(
        width, [geometry.slot_center(i, n, width) for i in range(n)], [f"{ds.share(v)}%" for v in values]
    )
    fig["layout"]["shapes"].append(_rule(0, 0, width, 0))
    return fig


def render_horizontal(ds: MetricDataset, width: float, hovered: Optional[int] = None) -> Figure:
    kind = get_kind(ds.kind)
    spec = VIEW_SPECS[ChartView.HORIZONTAL]
    height = spec.height
    values = [c.responses for c in ds.categories]
    n = len(values)
    trace = {
        "type": "bar",
        "orientation": "h",
        "x": geometry.bar_extents(values, width),
        "y": [geometry.slot_center(i, n, height) for i in range(n)],
        "width": [16] * n,
        "marker": {"color": [kind.color] * n},
        "customdata": values,
        "hoverinfo": "none",
    }
    layout = _layout(width, height, flip_y=True, band=spec.label_band)
    layout["xaxis"] = _label_axis(width, [width * q / 100 for q in (0, 25, 50, 75)], ["0", "25", "50", "75"])
    layout["shapes"].append(_rule(0, 0, 0, height))
    if _in_range(hovered, n):
        layout["shapes"].append(_slot_highlight(hovered, n, height, width, horizontal=True))
    return {"data": [trace], "layout": layout}


def render_stacked(ds: MetricDataset, width: float, hovered: Optional[int] = None) -> Figure:
    kind = get_kind(ds.kind)
    spec = VIEW_SPECS[ChartView.STACKED]
    height = spec.height
    n = len(ds.stacked)
    xs = [geometry.slot_center(i, n, width) for i in range(n)]
    bar_width = max(width / n - 1, 1) if n else 1
    columns = [
        geometry.stacked_boxes([entry.component_shares[band.key] for band in kind.classes], height)
        for entry in ds.stacked
    ]
    data = []
    for j, band in enumerate(kind.classes):
        data.append({
            "type": "bar",
            "x": xs,
            "y": [col[j].height for col in columns],
            "base": [col[j].y0 for col in columns],
            "width": [bar_width] * n,
            "marker": {"color": band.color},
            "name": band.label,
            "hoverinfo": "none",
        })
    layout = _layout(width, height, gutter=spec.gutter, band=spec.label_band, barmode="overlay")
    layout["xaxis"] = _daily_axis([entry.label for entry in ds.stacked], width)
    layout["yaxis"] = _value_scale(height, suffix="%")
    if _in_range(hovered, n):
        layout["shapes"].append(_slot_highlight(hovered, n, width, height))
    return {"data": data, "layout": layout}


def render_donut(ds: MetricDataset, width: float, hovered: Optional[int] = None) -> Figure:
    height = VIEW_SPECS[ChartView.DONUT].height
    center = (width / 2.0, height / 2.0)
    data = []
    for seg, cat in zip(geometry.donut_segments([c.responses for c in ds.categories]), ds.categories):
        grow = DONUT_HOVER_GROWTH if seg.index == hovered else 0.0
        pts = geometry.segment_polygon(seg, center, DONUT_OUTER + grow, DONUT_INNER - grow)
        data.append({
            "type": "scatter",
            "mode": "lines",
            "x": [p[0] for p in pts],
            "y": [p[1] for p in pts],
            "fill": "toself",
            "fillcolor": cat.color,
            "line": {"width": 0, "color": cat.color},
            "hoveron": "fills",
            "hoverinfo": "none",
            "name": cat.key,
        })
    return {"data": data, "layout": _layout(width, height, flip_y=True)}


RENDERERS: Dict[ChartView, Callable[..., Figure]] = {
    ChartView.GAUGE: render_gauge,
    ChartView.DONUT: render_donut,
    ChartView.VERTICAL: render_vertical,
    ChartView.HORIZONTAL: render_horizontal,
    ChartView.HISTOGRAM: render_histogram,
    ChartView.STACKED: render_stacked,
    ChartView.TREND: render_trend,
}


def render(view: ChartView, ds: MetricDataset, width: float, hovered: Optional[int] = None) -> Figure:
    """Figure for `view`; `hovered` highlights that item (ignored by the gauge)."""
    return RENDERERS[ChartView(view)](ds, width, hovered)


# ---- Tooltips ----

def series_length(view: ChartView, ds: MetricDataset) -> int:
    view = ChartView(view)
    if view is ChartView.HISTOGRAM:
        return len(ds.histogram)
    if view is ChartView.TREND:
        return len(ds.trend)
    if view is ChartView.STACKED:
        return len(ds.stacked)
    if view in (ChartView.VERTICAL, ChartView.HORIZONTAL, ChartView.DONUT):
        return len(ds.categories)
    return 0


def item_x(view: ChartView, ds: MetricDataset, index: int, width: float) -> Optional[float]:
    """Horizontal reference point of an item when it does not sit in an equal-width slot."""
    view = ChartView(view)
    if view is ChartView.HORIZONTAL:
        extents = geometry.bar_extents([c.responses for c in ds.categories], width)
        return extents[index] / 2.0
    if view is ChartView.DONUT:
        height = VIEW_SPECS[ChartView.DONUT].height
        segments = geometry.donut_segments([c.responses for c in ds.categories])
        if index < len(segments):
            return geometry.segment_midpoint(segments[index], (width / 2.0, height / 2.0), DONUT_OUTER)[0]
    return None


def tooltip_content(view: ChartView, ds: MetricDataset, index: int) -> TooltipContent:
    view = ChartView(view)
    kind = get_kind(ds.kind)
    if view is ChartView.HISTOGRAM:
        bucket = ds.histogram[index]
        return TooltipContent(
            rows=[("Responses:", str(bucket.value)), ("Share:", f"{ds.share(bucket.value)}%")],
            caption=ds.period,
        )
    if view is ChartView.TREND:
        point = ds.trend[index]
        return TooltipContent(
            rows=[(f"{kind.gauge_label}:", f"{point.value}{kind.score_suffix}"), ("Responses:", str(point.responses))],
            caption=point.label,
        )
    if view is ChartView.STACKED:
        entry = ds.stacked[index]
        top, bottom = kind.classes[-1].key, kind.classes[0].key
        rows = [
            (f"{kind.gauge_label}:", str(entry.component_shares[top] - entry.component_shares[bottom])),
            ("Responses:", str(entry.total)),
        ]
        rows += [(f"{band.label}:", str(entry.component_raw[band.key])) for band in reversed(kind.classes)]
        return TooltipContent(rows=rows, caption=entry.label)
    cat = ds.categories[index]
    return TooltipContent(
        rows=[("Option", cat.key), ("Responses:", str(cat.responses)), ("Share:", f"{ds.share(cat.responses)}%")],
        caption=ds.period,
    )


def tooltip_for(
    view: ChartView,
    ds: MetricDataset,
    state: Union[Idle, Hovering],
    width: float,
    fixed_offset: float = DEFAULT_TOOLTIP_OFFSET,
) -> Optional[Tooltip]:
    """Tooltip for the hovered item, or None when idle, not hoverable or unmeasured."""
    spec = VIEW_SPECS[ChartView(view)]
    if not spec.hoverable or not isinstance(state, Hovering):
        return None
    count = series_length(spec.view, ds)
    if state.index >= count:
        return None
    box = Size(width, spec.height)
    anchor = place_tooltip(
        state.index,
        count,
        box,
        spec.tooltip,
        state.offset_y,
        strategy=spec.strategy,
        fixed_offset=fixed_offset,
        item_x=item_x(spec.view, ds, state.index, width),
    )
    if anchor is None:
        return None
    return Tooltip(
        anchor=anchor,
        size=spec.tooltip,
        content=tooltip_content(spec.view, ds, state.index),
        gutter=spec.gutter,
    )
