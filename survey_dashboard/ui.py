from typing import List, Optional

from dash import dcc, html

from . import geometry
from .config import Settings, get_settings
from .datasources import DatasetRepository, PERIOD_LABELS, KINDS
from .datasources.kinds import MetricKind
from .datasources.models import MetricDataset
from .hover import IDLE, dump_state
from .utils import fmt_count
from .views import HOVER_FILL, ChartView, Tooltip, active_view, render

MODE_LABELS = {
    "overview": "Overview",
    "detailed": "Detailed",
    "vertical": "Vertical bars",
    "horizontal": "Horizontal bars",
    "donut": "Donut",
}
TAB_LABELS = {"histogram": "Histogram", "stacked": "Stacked", "trend": "Trend"}

HIDDEN = {"display": "none"}
TOOLTIP_BASE_STYLE = {
    "position": "absolute",
    "zIndex": 50,
    "pointerEvents": "none",
    "background": "white",
    "border": "0.5px solid rgba(0,0,0,0.12)",
    "borderRadius": "8px",
    "boxShadow": "0px 8px 16px rgba(0,0,0,0.04), 0px 1px 2px rgba(0,0,0,0.08)",
    "padding": "8px 6px",
    "fontSize": "12px",
    "boxSizing": "border-box",
}


def row_id(kind: MetricKind, index: int) -> dict:
    """Pattern-matching id of a summary row, shared with the hover callback."""
    return {"type": f"{kind.name}-row", "index": index}


class UIBuilder:
    """Class that encapsulates layout building logic."""

    def __init__(self, repo: DatasetRepository, settings: Optional[Settings] = None) -> None:
        self.repo = repo
        self.settings = settings or get_settings()
        self.title = self.settings.app_title

    # ---- Fragments shared with callbacks ----
    @staticmethod
    def muted(text, **style):
        return html.Span(text, style={"fontSize": "14px", "color": "#73726C", **style})

    @staticmethod
    def based_on(total: int):
        return html.Div(UIBuilder.muted(f"Based on {fmt_count(total)} responses", color="#9E9D98"),
                        style={"padding": "0 8px"})

    @staticmethod
    def legend(kind: MetricKind):
        return html.Div([
            html.Div([
                html.Div(style={"width": "8px", "height": "8px", "borderRadius": "4px", "backgroundColor": band.color}),
                html.Span(band.label, style={"fontSize": "12px", "color": "#73726C"}),
            ], style={"display": "flex", "gap": "8px", "alignItems": "center"})
            for band in reversed(kind.classes)
        ], style={"display": "flex", "gap": "24px", "padding": "0 8px"})

    @staticmethod
    def score_block(kind: MetricKind, ds: MetricDataset):
        stat = lambda label, value: html.Div([  # noqa: E731
            UIBuilder.muted(f"{label}:"),
            html.Span(str(value), style={"fontWeight": 500}),
        ], style={"display": "flex", "gap": "12px", "padding": "4px 10px"})
        return html.Div([
            html.Span(kind.gauge_label, style={"fontSize": "12px"}),
            html.Span(f"{ds.score:g}{kind.score_suffix}", id=f"{kind.name}-score",
                      style={"fontSize": "28px", "fontWeight": 600}),
            html.Div([stat("Median", ds.median), stat("Average", ds.average)], style={"display": "flex"}),
        ], style={"display": "flex", "flexDirection": "column", "alignItems": "center"})

    @staticmethod
    def category_rows(kind: MetricKind, ds: MetricDataset, hovered: Optional[int] = None):
        if kind.choices:
            # Clicking a row drives the same hover state as the chart
            return [
                html.Div([
                    html.Span(cat.key, style={"fontSize": "12px", "fontWeight": 600, "padding": "0 4px",
                                              "background": "rgba(115,114,108,0.12)", "borderRadius": "2px"}),
                    html.Span(cat.label, style={"fontSize": "16px"}),
                ], id=row_id(kind, i), n_clicks=0, style={
                    "display": "flex", "gap": "12px", "padding": "8px 16px 8px 10px", "borderRadius": "8px",
                    "cursor": "pointer", **({"background": HOVER_FILL} if i == hovered else {}),
                })
                for i, cat in enumerate(ds.categories)
            ]
        if kind.classified:
            return [
                html.Div([
                    html.Div(style={"width": "8px", "height": "8px", "borderRadius": "4px", "backgroundColor": cat.color}),
                    UIBuilder.muted(cat.label, flex="1"),
                    html.Span(f"{cat.responses} responses", style={"fontSize": "14px"}),
                ], style={"display": "flex", "gap": "12px", "alignItems": "center", "height": "32px", "padding": "0 16px 0 10px"})
                for cat in ds.categories
            ]
        # Rating scale: inline bars scaled to the busiest rating
        widths = geometry.bar_extents([c.responses for c in ds.categories], 140)
        return [
            html.Div([
                html.Span(f"☆ {cat.label}", style={"fontSize": "14px", "width": "32px"}),
                html.Div(style={"width": f"{w}px", "height": "8px", "backgroundColor": cat.color,
                                "borderRadius": "0 4px 4px 0"}),
                UIBuilder.muted(f"{cat.responses} responses", marginLeft="auto"),
            ], style={"display": "flex", "gap": "12px", "alignItems": "center", "height": "16px"})
            for cat, w in zip(ds.categories, widths)
        ]

    @staticmethod
    def summary_panel(kind: MetricKind, ds: MetricDataset, view: ChartView, hovered: Optional[int] = None):
        if kind.choices:
            return html.Div(UIBuilder.category_rows(kind, ds, hovered) + [UIBuilder.based_on(ds.total)],
                            style={"display": "flex", "flexDirection": "column", "gap": "4px"})
        if view is ChartView.GAUGE:
            return html.Div([
                html.Div(UIBuilder.category_rows(kind, ds) + [UIBuilder.based_on(ds.total)],
                         style={"display": "flex", "flexDirection": "column", "gap": "12px", "flex": "1"}),
                UIBuilder.score_block(kind, ds),
            ], style={"display": "flex", "gap": "24px", "alignItems": "center"})
        if kind.classified and view in (ChartView.HISTOGRAM, ChartView.STACKED):
            return UIBuilder.legend(kind)
        return html.Div()

    @staticmethod
    def tooltip_children(tooltip: Optional[Tooltip]) -> List:
        if tooltip is None:
            return []
        rows = [
            html.Div([
                html.Span(label, style={"flex": "1", "color": "#73726C"}),
                html.Span(value, style={"fontWeight": 500}),
            ], style={"display": "flex", "gap": "8px", "padding": "4px 8px 4px 4px"})
            for label, value in tooltip.content.rows
        ]
        rows.append(html.Div(tooltip.content.caption, style={"color": "#9E9D98", "padding": "4px 8px 4px 4px"}))
        return rows

    @staticmethod
    def tooltip_style(tooltip: Optional[Tooltip]) -> dict:
        if tooltip is None:
            return HIDDEN
        return {
            **TOOLTIP_BASE_STYLE,
            "left": f"{tooltip.gutter + tooltip.anchor.x:.1f}px",
            "top": f"{tooltip.anchor.y:.1f}px",
            "width": f"{tooltip.size.width:g}px",
            "maxHeight": f"{tooltip.size.height:g}px",
        }

    # ---- Cards ----
    def card(self, kind: MetricKind):
        k = kind.name
        period = self.settings.default_period
        ds = self.repo.get(k, period)
        mode = kind.modes[0]
        tab = kind.detail_views[0] if kind.detail_views else None
        view = active_view(kind, mode, tab)

        controls = [
            dcc.Dropdown(
                id=f"{k}-mode",
                options=[{"label": MODE_LABELS[m], "value": m} for m in kind.modes],
                value=mode, clearable=False, searchable=False, style={"minWidth": "160px"},
            ),
            dcc.Dropdown(
                id=f"{k}-period",
                options=[{"label": p, "value": p} for p in PERIOD_LABELS],
                value=period, clearable=False, searchable=False, style={"minWidth": "164px"},
            ),
            html.Button("Export CSV", id=f"{k}-export-btn", n_clicks=0),
        ]

        body = [
            html.Div(id=f"{k}-summary", children=self.summary_panel(kind, ds, view),
                     style={"flex": "1"} if kind.choices else {}),
            html.Div([
                dcc.Graph(
                    id=f"{k}-graph",
                    figure=render(view, ds, self.settings.chart_width),
                    config={"displayModeBar": False, "staticPlot": False},
                    clear_on_unhover=True,
                ),
                html.Div(id=f"{k}-tooltip", style=HIDDEN),
            ], style={"position": "relative"}),
        ]

        return html.Div(id=f"{k}-card", className="survey-card", children=[
            dcc.Store(id=f"{k}-hover-store", data=dump_state(IDLE)),
            dcc.Store(id=f"{k}-highlight", data=None),
            dcc.Download(id=f"{k}-download"),
            html.Div([
                html.Span(kind.title, style={"fontSize": "14px", "fontWeight": 600}),
                html.Div(controls, style={"display": "flex", "gap": "8px", "alignItems": "center"}),
            ], style={"display": "flex", "justifyContent": "space-between", "alignItems": "center"}),
            *([dcc.RadioItems(
                id=f"{k}-tab",
                options=[{"label": TAB_LABELS[v], "value": v} for v in kind.detail_views],
                value=tab, inline=True, style=HIDDEN,
            )] if kind.detail_views else []),
            html.Div(body, style={"display": "flex", "flexDirection": "row" if kind.choices else "column",
                                  "gap": "24px"}),
        ], style={
            "border": "1px solid #e0e0e0",
            "borderRadius": "12px",
            "padding": "16px 16px 24px",
            "boxShadow": "0px 2px 4px rgba(0,0,0,0.04)",
            "background": "white",
            "width": "764px",
            "display": "flex",
            "flexDirection": "column",
            "gap": "16px",
        })

    def build_layout(self):
        return html.Div([
            html.Div([
                html.H1(self.title, style={"margin": "0", "fontSize": "28px"}),
                html.Div("Survey results by question", style={"color": "#666"}),
            ], style={"width": "764px", "display": "flex", "flexDirection": "column", "gap": "4px"}),
            *[self.card(kind) for kind in KINDS.values()],
        ], style={"display": "flex", "flexDirection": "column", "alignItems": "center", "gap": "56px",
                  "padding": "96px 32px 32px"})
