import datetime as dt

from survey_dashboard.utils import day_label, fmt_count, round_half_up


def test_round_half_up():
    assert round_half_up(2.5) == 3
    assert round_half_up(0.5) == 1
    assert round_half_up(2.4) == 2
    assert isinstance(round_half_up(7.2), int)
    assert round_half_up(3.564133, 1) == 3.6
    assert round_half_up(4.381181, 1) == 4.4
    assert round_half_up(3.25, 1) == 3.3


def test_day_label():
    assert day_label(dt.date(2025, 3, 7)) == "Mar 7"
    assert day_label(dt.date(2024, 12, 31)) == "Dec 31"


def test_fmt_count_ranges():
    assert fmt_count(0) == "0"
    assert fmt_count(999) == "999"
    assert fmt_count(12_300) == "12K"
    assert fmt_count(12_900) == "13K"
    assert fmt_count(7_000_000) == "7M"
    assert fmt_count(1_200_000_000) == "1B"
    assert fmt_count(2_000_000_000_000) == "2T"
