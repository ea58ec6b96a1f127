import math

import pytest

from survey_dashboard.hover import (
    IDLE,
    AnchorStrategy,
    HoverController,
    Hovering,
    Idle,
    Size,
    dismiss,
    dump_state,
    enter,
    index_from_hover,
    leave,
    load_state,
    move,
    offset_from_hover,
    place_tooltip,
)


def test_enter_move_leave():
    s = enter(IDLE, 2, 40.0)
    assert s == Hovering(index=2, offset_y=40.0)
    s = move(s, 55.0)
    assert s == Hovering(index=2, offset_y=55.0)
    assert leave(s) == IDLE
    assert move(IDLE, 10.0) == IDLE


def test_enter_keeps_previous_offset_when_unknown():
    s = enter(Hovering(index=1, offset_y=33.0), 5)
    assert s == Hovering(index=5, offset_y=33.0)
    assert enter(IDLE, 0).offset_y == 0.0


def test_dismiss_always_idles():
    assert dismiss(Hovering(index=3)) == IDLE
    assert dismiss(IDLE) == IDLE


def test_moving_between_items_never_passes_through_idle():
    ctl = HoverController()
    ctl.on_enter(0, 10.0)
    for i in range(1, 10):
        ctl.on_enter(i, 10.0)
    assert ctl.hovered_index == 9
    assert not any(isinstance(s, Idle) for s in ctl.history[1:])


def test_leave_hides_tooltip():
    ctl = HoverController()
    ctl.on_enter(3, 20.0)
    assert ctl.anchor(10, Size(560, 120)) is not None
    ctl.on_leave()
    assert isinstance(ctl.state, Idle)
    assert ctl.hovered_index is None
    assert ctl.anchor(10, Size(560, 120)) is None


def test_dismiss_from_controller():
    ctl = HoverController()
    ctl.on_enter(1)
    ctl.on_dismiss()
    assert ctl.state == IDLE
    assert ctl.history == [IDLE, Hovering(index=1), IDLE]


def test_state_round_trips_through_store():
    s = Hovering(index=4, offset_y=12.5)
    assert load_state(dump_state(s)) == s
    assert dump_state(IDLE) == {"state": "idle"}


@pytest.mark.parametrize("data", [None, {}, {"state": "bogus"}, {"state": "hovering"},
                                  {"state": "hovering", "index": -1}])
def test_unreadable_state_is_idle(data):
    assert load_state(data) == IDLE


@pytest.mark.parametrize("count", [1, 3, 5, 10, 30, 365])
@pytest.mark.parametrize("box", [Size(560, 120), Size(150, 80), Size(100, 156)])
@pytest.mark.parametrize("offset", [-50.0, 0.0, 60.0, 500.0, math.nan, math.inf])
@pytest.mark.parametrize("strategy", list(AnchorStrategy))
def test_tooltip_stays_inside_box(count, box, offset, strategy):
    tooltip = Size(180, 100)
    for index in range(count):
        a = place_tooltip(index, count, box, tooltip, offset, strategy=strategy)
        assert 0 <= a.x <= max(box.width - tooltip.width, 0)
        assert 0 <= a.y <= max(box.height - tooltip.height, 0)
        if box.width >= tooltip.width:
            assert a.x + tooltip.width <= box.width
        if box.height >= tooltip.height:
            assert a.y + tooltip.height <= box.height


@pytest.mark.parametrize("box", [Size(0, 120), Size(560, 0), Size(0, 0)])
def test_unmeasured_box_has_no_anchor(box):
    assert place_tooltip(0, 5, box, Size(180, 100), 10.0) is None


def test_center_clamp_positions():
    box, tip = Size(560, 120), Size(180, 100)
    # middle slot of 5: centre 280 -> left edge 190
    a = place_tooltip(2, 5, box, tip, 0.0)
    assert a.x == 190
    assert a.y == 12
    # first and last slots are pulled back inside
    assert place_tooltip(0, 30, box, tip, 0.0).x == 0
    assert place_tooltip(29, 30, box, tip, 0.0).x == 380
    # pointer low in the chart: y clamps to height - tooltip height
    assert place_tooltip(2, 5, box, tip, 60.0).y == 20


def test_fixed_offset_is_configurable():
    a = place_tooltip(2, 5, Size(560, 156), Size(180, 110), 10.0, fixed_offset=20)
    assert a.y == 30


def test_edge_snap_opens_towards_roomier_side():
    box, tip = Size(560, 156), Size(180, 110)
    snap = AnchorStrategy.EDGE_SNAP
    assert place_tooltip(0, 4, box, tip, 0.0, strategy=snap, item_x=100).x == 100
    assert place_tooltip(0, 4, box, tip, 0.0, strategy=snap, item_x=500).x == 320
    assert place_tooltip(0, 4, box, tip, 0.0, strategy=snap, item_x=280).x == 280


def test_item_x_overrides_slot():
    a = place_tooltip(0, 4, Size(560, 156), Size(180, 110), 0.0, item_x=300)
    assert a.x == 210


def test_index_from_hover_point_and_curve():
    hd = {"points": [{"curveNumber": 2, "pointNumber": 17, "pointIndex": 17}]}
    assert index_from_hover(hd) == 17
    assert index_from_hover(hd, "curve") == 2
    assert index_from_hover({"points": [{"pointNumber": 4}]}) == 4
    assert index_from_hover({"points": [{"pointIndex": [1, 0]}]}) == 1


@pytest.mark.parametrize("hd", [None, {}, {"points": []}, {"points": [{}]}])
def test_index_from_hover_missing(hd):
    assert index_from_hover(hd) is None


def test_offset_from_hover_uses_bbox_middle():
    assert offset_from_hover({"points": [{"bbox": {"x0": 1, "x1": 2, "y0": 40, "y1": 60}}]}) == 50
    assert offset_from_hover({"points": [{"bbox": {"y0": 40}}]}) == 40
    assert offset_from_hover({"points": [{"pointIndex": 1}]}) is None
    assert offset_from_hover(None) is None
