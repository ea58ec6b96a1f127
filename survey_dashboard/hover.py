"""Hover state machine and tooltip placement.

A chart is either `Idle` or `Hovering(index, offset_y)`. Transitions are
pure functions returning a new state, so callbacks only have to persist the
serialized value (a `dcc.Store`) between pointer events.
"""
from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from enum import Enum
from typing import Annotated, Any, Dict, List, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter, ValidationError

from .geometry import slot_center

logger = logging.getLogger(__name__)

DEFAULT_TOOLTIP_OFFSET = 12


class Idle(BaseModel):
    model_config = ConfigDict(frozen=True)

    state: Literal["idle"] = "idle"


class Hovering(BaseModel):
    model_config = ConfigDict(frozen=True)

    state: Literal["hovering"] = "hovering"
    index: int = Field(ge=0)
    offset_y: float = 0.0


HoverState = Annotated[Union[Idle, Hovering], Field(discriminator="state")]
_state_adapter: TypeAdapter = TypeAdapter(HoverState)

IDLE = Idle()


def load_state(data: Optional[Dict[str, Any]]) -> Union[Idle, Hovering]:
    """Rebuild a state from its stored dict; anything unreadable is Idle."""
    if not data:
        return IDLE
    try:
        return _state_adapter.validate_python(data)
    except ValidationError as e:
        logger.debug("Discarding unreadable hover state %r: %s", data, e)
        return IDLE


def dump_state(state: Union[Idle, Hovering]) -> Dict[str, Any]:
    return state.model_dump()


# ---- Transitions ----

def enter(state: Union[Idle, Hovering], index: int, offset_y: Optional[float] = None) -> Hovering:
    """Pointer is over item `index`; moving between items never passes through Idle."""
    if offset_y is None:
        offset_y = state.offset_y if isinstance(state, Hovering) else 0.0
    return Hovering(index=index, offset_y=offset_y)


def move(state: Union[Idle, Hovering], offset_y: float) -> Union[Idle, Hovering]:
    if isinstance(state, Hovering):
        return Hovering(index=state.index, offset_y=offset_y)
    return state


def leave(state: Union[Idle, Hovering]) -> Idle:
    return IDLE


def dismiss(state: Union[Idle, Hovering]) -> Idle:
    """Outside interaction (another control opened, selection changed)."""
    return IDLE


# ---- Placement ----

class AnchorStrategy(str, Enum):
    CENTER_CLAMP = "center-clamp"  # centre on the item's slot, clamped to the box
    EDGE_SNAP = "edge-snap"  # open towards the side of the item with more room


@dataclass(frozen=True)
class Size:
    width: float
    height: float


@dataclass(frozen=True)
class Anchor:
    x: float
    y: float


def _clamp(value: float, lo: float, hi: float) -> float:
    return max(lo, min(value, hi))


def place_tooltip(
    index: int,
    count: int,
    box: Size,
    tooltip: Size,
    offset_y: float,
    strategy: AnchorStrategy = AnchorStrategy.CENTER_CLAMP,
    fixed_offset: float = DEFAULT_TOOLTIP_OFFSET,
    item_x: Optional[float] = None,
) -> Optional[Anchor]:
    """Top-left corner of the tooltip, kept inside the chart box.

    Returns None when the box has not been measured (zero width or height).
    `item_x` overrides the slot midpoint for items that are not laid out in
    equal slots (donut segments, horizontal bars).
    """
    if box.width <= 0 or box.height <= 0:
        return None
    if not math.isfinite(offset_y):
        offset_y = 0.0

    cx = item_x if item_x is not None else slot_center(index, count, box.width)
    if strategy is AnchorStrategy.EDGE_SNAP:
        x = cx if box.width - cx >= cx else cx - tooltip.width
    else:
        x = cx - tooltip.width / 2

    x = _clamp(x, 0.0, max(box.width - tooltip.width, 0.0))
    y = _clamp(offset_y + fixed_offset, 0.0, max(box.height - tooltip.height, 0.0))
    return Anchor(x=x, y=y)


class HoverController:
    """Per-chart hover tracker built on the pure transitions above."""

    def __init__(
        self,
        tooltip: Size = Size(180, 100),
        strategy: AnchorStrategy = AnchorStrategy.CENTER_CLAMP,
        fixed_offset: float = DEFAULT_TOOLTIP_OFFSET,
        state: Union[Idle, Hovering] = IDLE,
    ) -> None:
        self.tooltip = tooltip
        self.strategy = strategy
        self.fixed_offset = fixed_offset
        self.state: Union[Idle, Hovering] = state
        self.history: List[Union[Idle, Hovering]] = [state]

    def _set(self, state: Union[Idle, Hovering]) -> Union[Idle, Hovering]:
        if state != self.state:
            self.history.append(state)
        self.state = state
        return state

    @property
    def hovered_index(self) -> Optional[int]:
        return self.state.index if isinstance(self.state, Hovering) else None

    def on_enter(self, index: int, offset_y: Optional[float] = None) -> Union[Idle, Hovering]:
        return self._set(enter(self.state, index, offset_y))

    def on_move(self, offset_y: float) -> Union[Idle, Hovering]:
        return self._set(move(self.state, offset_y))

    def on_leave(self) -> Union[Idle, Hovering]:
        return self._set(leave(self.state))

    def on_dismiss(self) -> Union[Idle, Hovering]:
        return self._set(dismiss(self.state))

    def anchor(self, count: int, box: Size, item_x: Optional[float] = None) -> Optional[Anchor]:
        if not isinstance(self.state, Hovering):
            return None
        return place_tooltip(
            self.state.index,
            count,
            box,
            self.tooltip,
            self.state.offset_y,
            strategy=self.strategy,
            fixed_offset=self.fixed_offset,
            item_x=item_x,
        )


# ---- Dash hoverData helpers ----

def _first_point(hover_data: Optional[Dict[str, Any]]) -> Optional[Dict[str, Any]]:
    points = (hover_data or {}).get("points") or []
    return points[0] if points else None


def index_from_hover(hover_data: Optional[Dict[str, Any]], source: str = "point") -> Optional[int]:
    """Item index of the hovered point: its point index, or its trace for one-trace-per-item charts."""
    point = _first_point(hover_data)
    if point is None:
        return None
    if source == "curve":
        raw = point.get("curveNumber")
    else:
        raw = point.get("pointIndex", point.get("pointNumber"))
    if isinstance(raw, list):  # 2d traces report [row, col]
        raw = raw[0] if raw else None
    return int(raw) if isinstance(raw, (int, float)) else None


def offset_from_hover(hover_data: Optional[Dict[str, Any]]) -> Optional[float]:
    """Vertical pointer offset from the chart top, taken from the hover bbox."""
    point = _first_point(hover_data)
    bbox = (point or {}).get("bbox") or {}
    if "y0" not in bbox:
        return None
    y1 = bbox.get("y1", bbox["y0"])
    return (float(bbox["y0"]) + float(y1)) / 2.0
