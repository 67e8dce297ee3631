"""
Chart data shaping and rendering for usage statistics.

PURPOSE: Turn per-day statistics into PNG bar charts.
AI CONTEXT: Pure functions plus one renderer class - no server API access.

COMPONENTS:
1. create_date_list: Zero-filled, contiguous day scaffold ending yesterday
2. merge_series: Overlay sparse daily values onto the scaffold
3. format_bytes: Byte counts as B/kiB/MiB/GiB/TiB axis labels
4. GraphRenderer: matplotlib bar chart to PNG bytes

USAGE:
    scaffold = create_date_list(date.today(), timedelta(days=31))
    series = merge_series(scaffold, {"2026-10-01": 1048576})
    png = GraphRenderer().draw(series, format_bytes)
"""

from __future__ import annotations

import io
import numbers
from collections.abc import Callable, Mapping
from datetime import date, datetime, time, timedelta

from .config import Config

__all__ = [
    "BYTE_UNITS",
    "LabelFormatter",
    "create_date_list",
    "merge_series",
    "format_bytes",
    "GraphRenderer",
]

BYTE_UNITS: tuple[str, ...] = ("B", "kiB", "MiB", "GiB", "TiB")

LabelFormatter = Callable[[float], str]


def create_date_list(today: date, duration: timedelta) -> dict[str, int]:
    """
    Build a zero-filled scaffold of calendar days before ``today``.

    Walks one day at a time from midnight of ``today - duration`` while
    still before midnight of ``today``, so the start day is included and
    ``today`` never is. Calendar arithmetic handles month, year and leap
    day boundaries.

    Business context: Statistics only contain days with traffic. Charts
    merge real values over this scaffold so quiet days show up as zero
    instead of silently vanishing from the x-axis.

    Args:
        today: Current date, injected by the caller so results are
            deterministic.
        duration: Length of the window. A partial day extends the window
            to include that whole day.

    Returns:
        Ordered mapping "YYYY-MM-DD" -> 0, ascending, ending at
        ``today - 1 day``. Empty for a zero or negative duration.

    Example:
        >>> create_date_list(date(2026, 3, 2), timedelta(days=3))
        {'2026-02-27': 0, '2026-02-28': 0, '2026-03-01': 0}
    """
    end = datetime.combine(today, time.min)
    current = end - duration
    one_day = timedelta(days=1)

    date_list: dict[str, int] = {}
    while current < end:
        date_list[current.strftime(Config.DATE_FORMAT)] = 0
        current += one_day
    return date_list


def merge_series(
    scaffold: Mapping[str, float], values: Mapping[str, float]
) -> dict[str, float]:
    """
    Overlay actual daily values on a zero-filled scaffold.

    Values for days outside the scaffold are kept, so nothing the server
    reported is hidden. Keys are ISO dates, so lexical order is
    chronological order.

    Args:
        scaffold: Output of create_date_list.
        values: Sparse "YYYY-MM-DD" -> value mapping.

    Returns:
        New mapping sorted by date.

    Example:
        >>> merge_series({"2026-01-01": 0, "2026-01-02": 0}, {"2026-01-02": 7})
        {'2026-01-01': 0, '2026-01-02': 7}
    """
    merged: dict[str, float] = {**scaffold, **values}
    return dict(sorted(merged.items()))


def format_bytes(value: float) -> str:
    """
    Format a byte count with a binary unit for axis labels.

    Divides by 1024 while the value exceeds 1024, advancing through
    B, kiB, MiB, GiB and TiB. Scaling stops at TiB however large the
    value. The scaled number is truncated to an integer, not rounded.

    Business context: Daily VPN traffic spans from a few kilobytes on
    idle profiles to terabytes on busy ones; a fixed unit would make
    one of them unreadable.

    Args:
        value: Non-negative byte count (int or float).

    Returns:
        Label like "2 kiB " with a trailing space.

    Raises:
        TypeError: If value is not a real number (bools are rejected).
        ValueError: If value is negative.

    Example:
        >>> format_bytes(2048)
        '2 kiB '
        >>> format_bytes(1024)
        '1024 B '
    """
    if isinstance(value, bool) or not isinstance(value, numbers.Real):
        raise TypeError(f"byte count must be a number, got {type(value).__name__}")
    if value < 0:
        raise ValueError(f"byte count must not be negative, got {value}")

    unit_index = 0
    while value > 1024 and unit_index < len(BYTE_UNITS) - 1:
        value /= 1024
        unit_index += 1
    return "%d %s " % (value, BYTE_UNITS[unit_index])


class GraphRenderer:
    """
    Renderer for daily statistics bar charts.

    Uses matplotlib's object-oriented Figure API rather than pyplot;
    pyplot keeps global figure state and route handlers run on several
    worker threads.
    """

    def __init__(
        self,
        figsize: tuple[float, float] = Config.CHART_FIGSIZE,
        dpi: int = Config.CHART_DPI,
        bar_color: str = Config.CHART_BAR_COLOR,
    ) -> None:
        self.figsize = figsize
        self.dpi = dpi
        self.bar_color = bar_color

    def draw(
        self,
        series: Mapping[str, float],
        label_formatter: LabelFormatter | None = None,
    ) -> bytes:
        """
        Render an ordered date -> value mapping as a PNG bar chart.

        One bar per key, in mapping order. The y-axis starts at zero;
        each tick label goes through ``label_formatter`` when given,
        otherwise matplotlib's default numeric labels are used. At most
        about ten date labels are printed to keep the x-axis legible.

        Args:
            series: Ordered mapping "YYYY-MM-DD" -> value.
            label_formatter: Optional callable turning a tick value into
                its label, e.g. format_bytes.

        Returns:
            PNG image bytes.

        Example:
            >>> png = GraphRenderer().draw({"2026-01-01": 3, "2026-01-02": 5})
            >>> png[:8] == b"\\x89PNG\\r\\n\\x1a\\n"
            True
        """
        from matplotlib.figure import Figure
        from matplotlib.ticker import FuncFormatter, MaxNLocator

        labels = list(series.keys())
        values = [float(v) for v in series.values()]

        fig = Figure(figsize=self.figsize, dpi=self.dpi)
        ax = fig.subplots()

        positions = range(len(labels))
        ax.bar(positions, values, color=self.bar_color)
        ax.set_ylim(0, max(max(values, default=0.0) * 1.1, 1.0))

        step = max(1, len(labels) // 10)
        ax.set_xticks(list(positions)[::step])
        ax.set_xticklabels(labels[::step], rotation=45, ha="right", fontsize=8)

        if label_formatter is not None:
            # Locators may place a tick a rounding error below zero.
            ax.yaxis.set_major_formatter(
                FuncFormatter(lambda v, _pos: label_formatter(max(float(v), 0.0)))
            )
        else:
            ax.yaxis.set_major_locator(MaxNLocator(integer=True))

        ax.spines["top"].set_visible(False)
        ax.spines["right"].set_visible(False)

        buf = io.BytesIO()
        fig.tight_layout()
        fig.savefig(buf, format="png", dpi=self.dpi, bbox_inches="tight")
        buf.seek(0)
        return buf.read()
