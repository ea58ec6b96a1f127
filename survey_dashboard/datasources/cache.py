from __future__ import annotations

import logging
from typing import Any, Callable, Dict, Optional

from flask_caching import Cache

logger = logging.getLogger(__name__)

Figure = Dict[str, Any]


class FigureCache:
    """Flask-Caching store for rendered chart figures.

    Entries are keyed by everything a figure depends on: metric kind, view,
    period, plot width and the highlighted item. Datasets never change after
    startup, so a key always maps to the same figure. Without a cache every
    lookup renders.
    """

    prefix = "figure"

    def __init__(self, cache: Optional[Cache], timeout_seconds: int) -> None:
        self.cache = cache
        self.timeout_seconds = timeout_seconds

    @classmethod
    def key(cls, kind: str, view: str, period: str, width: float, hovered: Optional[int] = None) -> str:
        slot = "-" if hovered is None else str(int(hovered))
        return f"{cls.prefix}:{kind}:{view}:{period}:{width:g}:{slot}"

    def get_or_render(
        self,
        kind: str,
        view: str,
        period: str,
        width: float,
        hovered: Optional[int],
        render: Callable[[], Figure],
    ) -> Figure:
        if self.cache is None:
            return render()
        key = self.key(kind, view, period, width, hovered)
        figure = self.cache.get(key)
        if figure is None:
            logger.debug("Figure cache miss for %s", key)
            figure = render()
            self.cache.set(key, figure, timeout=self.timeout_seconds)
        return figure
