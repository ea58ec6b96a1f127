import logging
from typing import Any, Callable, Dict, List, Optional

from dash import ALL, Input, Output, State, ctx, no_update
from pydantic import BaseModel, field_validator, ValidationError

from .config import Settings, get_settings
from .datasources import DatasetRepository, FigureCache, KINDS, PERIOD_LABELS
from .datasources.kinds import MetricKind, get_kind
from .hover import (
    Hovering,
    dismiss,
    dump_state,
    enter,
    index_from_hover,
    leave,
    load_state,
    move,
    offset_from_hover,
)
from .ui import HIDDEN, UIBuilder
from .views import EMPTY_FIGURE, VIEW_SPECS, ChartView, active_view, render, tooltip_for

logger = logging.getLogger(__name__)


class ChartSelection(BaseModel):
    """Selector values of one card, validated before any rendering."""

    kind: str
    period: str
    mode: Optional[str] = None
    tab: Optional[str] = None

    @field_validator("kind")
    @classmethod
    def known_kind(cls, v):
        if v not in KINDS:
            raise ValueError(f"unknown metric kind {v!r}")
        return v

    @field_validator("period")
    @classmethod
    def known_period(cls, v):
        if v not in PERIOD_LABELS:
            raise ValueError(f"unknown period {v!r}")
        return v

    @property
    def metric(self) -> MetricKind:
        return get_kind(self.kind)

    @property
    def view(self) -> ChartView:
        return active_view(self.metric, self.mode, self.tab)


def _selection(kind: str, mode, period, tab=None) -> Optional[ChartSelection]:
    try:
        return ChartSelection(kind=kind, period=period, mode=mode, tab=tab)
    except ValidationError as e:
        logger.warning("Ignoring invalid chart selection for %s: %s", kind, e.errors())
        return None


def chart_outputs(
    repo: DatasetRepository,
    sel: Optional[ChartSelection],
    width: float,
    render_fn: Callable[..., Dict[str, Any]],
    hovered: Optional[int] = None,
) -> List[Any]:
    """Figure, summary panel and tab-selector style for a card."""
    if sel is None:
        return [EMPTY_FIGURE, [], HIDDEN]
    ds = repo.get(sel.kind, sel.period)
    view = sel.view
    figure = render_fn(sel.kind, view.value, sel.period, width, hovered)
    tab_style = {"display": "block"} if sel.mode == "detailed" else HIDDEN
    return [figure, UIBuilder.summary_panel(sel.metric, ds, view, hovered), tab_style]


def next_hover_state(
    stored: Optional[Dict[str, Any]],
    graph_triggered: bool,
    hover_data: Optional[Dict[str, Any]],
    source: str = "point",
) -> Dict[str, Any]:
    """Apply one pointer/selection event to the stored hover state.

    Any selector change dismisses the hover; a hover event over an item enters
    or moves; a cleared hoverData (pointer left the plot) goes Idle.
    """
    state = load_state(stored)
    if not graph_triggered:
        return dump_state(dismiss(state))
    index = index_from_hover(hover_data, source)
    if index is None:
        return dump_state(leave(state))
    offset = offset_from_hover(hover_data)
    if isinstance(state, Hovering) and state.index == index:
        new_state = move(state, offset if offset is not None else state.offset_y)
    else:
        new_state = enter(state, index, offset)
    return dump_state(new_state)


def row_hover_state(stored: Optional[Dict[str, Any]], index: int) -> Dict[str, Any]:
    """A click on a summary row hovers that item; clicking the hovered row again leaves it."""
    state = load_state(stored)
    if isinstance(state, Hovering) and state.index == index:
        return dump_state(leave(state))
    return dump_state(enter(state, index))


def highlight_output(stored: Optional[Dict[str, Any]], current: Optional[int]) -> Any:
    """Item to highlight for a hover state, or no_update when it is unchanged.

    Pointer moves within one item change only the offset; they must not
    re-render the figure.
    """
    state = load_state(stored)
    index = state.index if isinstance(state, Hovering) else None
    return no_update if index == current else index


def tooltip_outputs(
    repo: DatasetRepository,
    sel: Optional[ChartSelection],
    stored: Optional[Dict[str, Any]],
    width: float,
    fixed_offset: float,
) -> List[Any]:
    if sel is None:
        return [[], HIDDEN]
    ds = repo.get(sel.kind, sel.period)
    tooltip = tooltip_for(sel.view, ds, load_state(stored), width, fixed_offset)
    return [UIBuilder.tooltip_children(tooltip), UIBuilder.tooltip_style(tooltip)]


def export_payload(repo: DatasetRepository, sel: Optional[ChartSelection]) -> Optional[Dict[str, str]]:
    if sel is None:
        return None
    view = sel.view
    df = repo.frame(sel.kind, sel.period, view.value)
    slug = sel.period.lower().replace(" ", "_")
    return dict(content=df.to_csv(index=False), filename=f"{sel.kind}_{view.value}_{slug}.csv")


def register_callbacks(
    app,
    repo: DatasetRepository,
    settings: Optional[Settings] = None,
    figure_cache: Optional[FigureCache] = None,
) -> None:
    settings = settings or get_settings()
    figure_cache = figure_cache or FigureCache(cache=None, timeout_seconds=settings.cache_timeout_seconds)

    def render_figure(kind: str, view: str, period: str, width: float, hovered: Optional[int] = None):
        def build():
            logger.debug("Rendering %s/%s for %r (hovered=%s)", kind, view, period, hovered)
            return render(ChartView(view), repo.get(kind, period), width, hovered)
        return figure_cache.get_or_render(kind, view, period, width, hovered, build)

    for kind in KINDS.values():
        _register_card(app, kind, repo, settings, render_figure)


def _register_card(app, kind: MetricKind, repo: DatasetRepository, settings: Settings, render_figure) -> None:
    k = kind.name
    has_tabs = bool(kind.detail_views)
    selectors = [f"{k}-mode", f"{k}-period"] + ([f"{k}-tab"] if has_tabs else [])
    rows = [Input({"type": f"{k}-row", "index": ALL}, "n_clicks")] if kind.choices else []

    def selection(values) -> Optional[ChartSelection]:
        mode, period = values[0], values[1]
        return _selection(k, mode, period, values[2] if has_tabs else None)

    @app.callback(
        Output(f"{k}-graph", "figure"),
        Output(f"{k}-summary", "children"),
        *([Output(f"{k}-tab", "style")] if has_tabs else []),
        *[Input(s, "value") for s in selectors],
        Input(f"{k}-highlight", "data"),
        prevent_initial_call=True,
    )
    def update_chart(*args):
        values, hovered = args[:-1], args[-1]
        out = chart_outputs(repo, selection(values), settings.chart_width, render_figure, hovered)
        return out if has_tabs else out[:2]

    @app.callback(
        Output(f"{k}-hover-store", "data"),
        Input(f"{k}-graph", "hoverData"),
        *[Input(s, "value") for s in selectors],
        *rows,
        State(f"{k}-hover-store", "data"),
        prevent_initial_call=True,
    )
    def update_hover(hover_data, *args):
        stored = args[-1]
        trigger = ctx.triggered_id
        if isinstance(trigger, dict):
            # Summary rows are re-created with n_clicks=0 on every chart update
            if not ctx.triggered[0]["value"]:
                return no_update
            return row_hover_state(stored, trigger["index"])
        sel = selection(args[:len(selectors)])
        index_source = VIEW_SPECS[sel.view].index_source if sel is not None else "point"
        return next_hover_state(stored, trigger == f"{k}-graph", hover_data, index_source)

    @app.callback(
        Output(f"{k}-highlight", "data"),
        Input(f"{k}-hover-store", "data"),
        State(f"{k}-highlight", "data"),
        prevent_initial_call=True,
    )
    def update_highlight(stored, current):
        return highlight_output(stored, current)

    @app.callback(
        Output(f"{k}-tooltip", "children"),
        Output(f"{k}-tooltip", "style"),
        Input(f"{k}-hover-store", "data"),
        *[State(s, "value") for s in selectors],
        prevent_initial_call=True,
    )
    def update_tooltip(stored, *values):
        return tooltip_outputs(repo, selection(values), stored, settings.chart_width, settings.tooltip_offset)

    @app.callback(
        Output(f"{k}-download", "data"),
        Input(f"{k}-export-btn", "n_clicks"),
        *[State(s, "value") for s in selectors],
        prevent_initial_call=True,
    )
    def export_csv(n_clicks, *values):
        if not n_clicks:
            return no_update
        payload = export_payload(repo, selection(values))
        return payload if payload is not None else no_update
