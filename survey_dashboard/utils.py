import datetime as dt
import math


def round_half_up(x: float, ndigits: int = 0) -> float:
    """Round halves away from zero for positives (2.5 -> 3), unlike builtin round().

    Returns an int when `ndigits` is 0.
    """
    factor = 10 ** ndigits
    value = math.floor(x * factor + 0.5) / factor
    return int(value) if ndigits == 0 else value


def day_label(day: dt.date) -> str:
    """Short axis label, e.g. "Mar 7"."""
    return f"{day:%b} {day.day}"


def fmt_count(x: float) -> str:
    """Compact human-readable count formatting (e.g., 12K, 7M)."""
    for unit in ["", "K", "M", "B"]:
        if abs(x) < 1000.0:
            return f"{x:,.0f}{unit}"
        x /= 1000.0
    return f"{x:,.0f}T"
