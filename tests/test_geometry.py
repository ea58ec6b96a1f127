import math

import pytest

from survey_dashboard import geometry
from survey_dashboard.datasources.rng import SeededSequence


def test_gauge_angle_maps_range_to_half_circle():
    assert geometry.gauge_angle(0, 0, 100) == 0
    assert geometry.gauge_angle(50, 0, 100) == 90
    assert geometry.gauge_angle(100, 0, 100) == 180
    assert geometry.gauge_angle(0, -100, 100) == 90


@pytest.mark.parametrize("score", [-1e9, -101, 150, 1e9])
def test_gauge_angle_clamps_out_of_range(score):
    angle = geometry.gauge_angle(score, 0, 100)
    assert 0 <= angle <= 180


def test_gauge_angle_is_monotonic():
    angles = [geometry.gauge_angle(s, -100, 100) for s in range(-120, 121, 5)]
    assert angles == sorted(angles)


def test_gauge_angle_degenerate_range():
    assert geometry.gauge_angle(5, 10, 10) == 0


def test_gauge_point_ends_and_top():
    cx, cy = geometry.GAUGE_CENTER
    r = geometry.GAUGE_RADIUS
    x, y = geometry.gauge_point(0)
    assert x == pytest.approx(cx - r) and y == pytest.approx(cy)
    x, y = geometry.gauge_point(90)
    assert x == pytest.approx(cx) and y == pytest.approx(cy - r)
    x, y = geometry.gauge_point(180)
    assert x == pytest.approx(cx + r) and y == pytest.approx(cy)


def test_gauge_bands_split_by_scale_points():
    bands = geometry.gauge_bands([6, 2, 2])
    assert [b.sweep for b in bands] == pytest.approx([108, 36, 36])
    assert bands[0].start == 0
    assert bands[-1].end == 180
    for a, b in zip(bands, bands[1:]):
        assert a.end == b.start


def test_gauge_bands_empty_spans():
    assert geometry.gauge_bands([]) == ()
    assert geometry.gauge_bands([0, 0]) == ()


def test_gauge_plain_has_value_arc():
    geo = geometry.gauge(72, 0, 100)
    assert geo.bands == ()
    assert geo.value_arc.sweep == pytest.approx(72 / 100 * 180)
    assert geo.track.sweep == 180


def test_gauge_classified_shows_indicator_only():
    geo = geometry.gauge(48, -100, 100, [6, 2, 2])
    assert geo.value_arc is None
    assert len(geo.bands) == 3
    # indicator sits just inside the arc
    dx = geo.indicator[0] - geo.center[0]
    dy = geo.indicator[1] - geo.center[1]
    assert math.hypot(dx, dy) == pytest.approx(geo.radius - 2)


def test_arc_path_and_polyline_endpoints():
    path = geometry.arc_path(0, 90)
    assert path.startswith("M ") and " A 60.0 60.0 0 0 1 " in path
    pts = geometry.arc_polyline(0, 90, steps=10)
    assert len(pts) == 10
    assert pts[0] == pytest.approx(geometry.gauge_point(0))
    assert pts[-1] == pytest.approx(geometry.gauge_point(90))


def _distributions():
    rng = SeededSequence(7)
    yield [1]
    yield [5, 5]
    yield [1, 0, 0, 0]
    yield [0, 3, 0, 9]
    for n in range(1, 12):
        yield [rng.draw(100) for _ in range(n)]


@pytest.mark.parametrize("values", list(_distributions()))
def test_donut_sweeps_and_gaps_close_the_circle(values):
    segments = geometry.donut_segments(values)
    if sum(values) == 0:
        assert segments == []
        return
    total = sum(s.sweep for s in segments) + len(segments) * geometry.DONUT_GAP
    assert abs(total - 360) <= 0.01
    for a, b in zip(segments, segments[1:]):
        assert b.start == pytest.approx(a.end + geometry.DONUT_GAP)


def test_donut_sweeps_proportional_to_values():
    segments = geometry.donut_segments([10, 30, 60], gap=0)
    assert [s.sweep for s in segments] == pytest.approx([36, 108, 216])
    assert segments[1].mid == pytest.approx(36 + 54)


def test_donut_zero_total_yields_no_segments():
    assert geometry.donut_segments([0, 0, 0, 0]) == []
    assert geometry.donut_segments([]) == []


def test_donut_too_many_gaps_yields_no_segments():
    assert geometry.donut_segments([1] * 120, gap=3) == []


def test_donut_point_compass_orientation():
    center = (100.0, 100.0)
    assert geometry.donut_point(0, center, 50) == pytest.approx((100, 50))
    assert geometry.donut_point(90, center, 50) == pytest.approx((150, 100))


def test_segment_polygon_is_closed_ring_slice():
    seg = geometry.donut_segments([1, 1])[0]
    pts = geometry.segment_polygon(seg, (78, 78), 57, 43, steps=8)
    assert len(pts) == 17
    assert pts[0] == pts[-1]
    for x, y in pts:
        assert 43 - 1e-6 <= math.hypot(x - 78, y - 78) <= 57 + 1e-6


def test_bar_extents_scale_to_peak():
    assert geometry.bar_extents([5, 10, 0], 120) == [60, 120, 0]


def test_bar_extents_all_zero_does_not_divide_by_zero():
    assert geometry.bar_extents([0, 0, 0], 120) == [0, 0, 0]
    assert geometry.bar_extents([], 120) == []


def test_stacked_boxes_are_contiguous():
    boxes = geometry.stacked_boxes([30, 20, 50], 120)
    assert [b.height for b in boxes] == pytest.approx([36, 24, 60])
    assert boxes[0].y0 == 0
    assert boxes[-1].y1 == pytest.approx(120)
    for a, b in zip(boxes, boxes[1:]):
        assert a.y1 == b.y0


def test_slot_center():
    assert geometry.slot_center(0, 4, 400) == 50
    assert geometry.slot_center(3, 4, 400) == 350
    assert geometry.slot_center(0, 0, 400) == 0
