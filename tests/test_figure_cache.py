from __future__ import annotations

from flask import Flask
from flask_caching import Cache

from survey_dashboard.datasources import FigureCache


def _renderer(calls):
    def render():
        calls["n"] += 1
        return {"data": [], "layout": {"n": calls["n"]}}
    return render


def test_figure_cache_without_cache_always_renders():
    calls = {"n": 0}
    figures = FigureCache(cache=None, timeout_seconds=1)
    figures.get_or_render("nps", "stacked", "Last 30 days", 560, None, _renderer(calls))
    figures.get_or_render("nps", "stacked", "Last 30 days", 560, None, _renderer(calls))
    # Without cache, both calls executed the renderer
    assert calls["n"] == 2


def test_figure_cache_with_flask_cache_reuses_figures():
    server = Flask(__name__)
    cache = Cache(server, config={"CACHE_TYPE": "SimpleCache", "CACHE_DEFAULT_TIMEOUT": 60})
    figures = FigureCache(cache=cache, timeout_seconds=60)

    calls = {"n": 0}
    render = _renderer(calls)
    with server.app_context():
        first = figures.get_or_render("nps", "stacked", "Last 30 days", 560, None, render)
        second = figures.get_or_render("nps", "stacked", "Last 30 days", 560, None, render)
        figures.get_or_render("nps", "stacked", "All time", 560, None, render)
        figures.get_or_render("nps", "stacked", "Last 30 days", 560, 3, render)
    # Second call should hit cache; other period and highlight render again
    assert first == second
    assert calls["n"] == 3


def test_figure_cache_key_names_every_input():
    assert FigureCache.key("csat", "trend", "Last 3 months", 560) == "figure:csat:trend:Last 3 months:560:-"
    assert FigureCache.key("choice", "donut", "All time", 480.0, 2) == "figure:choice:donut:All time:480:2"
