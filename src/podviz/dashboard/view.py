"""Refresh-tick computation: store + navigation state -> immutable dashboard view.

Nothing here touches the terminal. The Textual adapter and the ``--once`` table
both render from these plain dataclasses, which keeps the derivation testable
without a screen.
"""

from __future__ import annotations

import math
import time
from collections.abc import Callable, Sequence
from dataclasses import dataclass, field

from ..metrics.rates import RateWindow
from ..metrics.series import Series, format_labels
from ..metrics.store import SeriesStore
from ..navigation.state import Focus, NavigationSnapshot, NavigationState
from ..units.formatting import ValueFormatter, format_generic, format_raw

NO_LABELS = "(no labels)"
KEY_HINTS = "q: quit │ /: filter │ Tab: focus │ ↑↓: nav │ []: rate"


@dataclass(frozen=True)
class SidebarRow:
    name: str
    badge: str
    series_count: int
    selected: bool = False
    focused: bool = False

    def render(self) -> str:
        if self.selected:
            prefix = "▶ " if self.focused else "› "
        else:
            prefix = "  "
        count = f" ({self.series_count})" if self.series_count > 1 else ""
        return f"{prefix}{self.badge} {self.name}{count}"


@dataclass(frozen=True)
class SeriesRow:
    key: str
    label_text: str
    value_text: str
    selected: bool = False

    def render(self) -> str:
        prefix = "▶ " if self.selected else "  "
        return f"{prefix}{self.label_text} = {self.value_text}"


@dataclass(frozen=True)
class ChartLine:
    label: str
    data: tuple[float, ...]
    latest_text: str


@dataclass(frozen=True)
class ChartBlock:
    title: str
    kind: str  # "rate", "age", "raw" or "empty"
    lines: tuple[ChartLine, ...] = ()
    axis: Callable[[float], str] = field(default=format_generic, compare=False)

    @property
    def key(self) -> str:
        """Identity of the charted series; changes when the chart must be rebuilt."""

        return ";".join(line.label for line in self.lines)


@dataclass(frozen=True)
class DashboardView:
    sidebar: tuple[SidebarRow, ...]
    sidebar_more_above: int
    sidebar_more_below: int
    filter_line: str | None
    filter_invalid: bool
    selected_name: str
    series_header: str
    series_help: str
    series_rows: tuple[SeriesRow, ...]
    series_more_above: int
    series_more_below: int
    chart: ChartBlock
    status: str
    focus: Focus
    empty_message: str = ""

    def sidebar_text(self) -> str:
        lines: list[str] = []
        if self.filter_line is not None:
            lines.extend([self.filter_line, ""])
        if self.sidebar_more_above:
            lines.append(f"  ↑ {self.sidebar_more_above} more")
        lines.extend(row.render() for row in self.sidebar)
        if self.sidebar_more_below:
            lines.append(f"  ↓ {self.sidebar_more_below} more")
        if self.empty_message:
            lines.extend(["", f"  {self.empty_message}"])
        return "\n".join(lines)

    def series_text(self) -> str:
        if not self.selected_name:
            return "  select a metric name"
        if not self.series_rows:
            return f"  no series for {self.selected_name}"
        lines = [self.series_header]
        if self.series_help:
            lines.append(f" {self.series_help}")
        lines.append("")
        if self.series_more_above:
            lines.append(f"  ↑ {self.series_more_above} more")
        lines.extend(row.render() for row in self.series_rows)
        if self.series_more_below:
            lines.append(f"  ↓ {self.series_more_below} more")
        return "\n".join(lines)


def format_series_value(series: Series, window: float, formatter: ValueFormatter) -> str:
    """Rate for rate-applicable series, unit formatting otherwise, raw value appended."""

    raw_value = series.last()
    raw = format_raw(raw_value)
    if series.should_rate():
        text = format_generic(series.rate(window)) + "/s"
    else:
        text = formatter.format_value(series.name, raw_value)
    if text != raw:
        return f"{text} ({raw})"
    return text


def label_text(series: Series) -> str:
    return format_labels(series.labels, separator=", ") or NO_LABELS


def chart_data(
    series: Series, window: float, formatter: ValueFormatter, now: float
) -> tuple[str, list[float]]:
    """Return the chart kind and the sequence to plot for one series."""

    if series.should_rate():
        return "rate", series.rate_slice(window)
    if formatter.is_timestamp(series.name):
        return "age", [
            now - value if math.isfinite(value) and value > 0 else 0.0
            for value in series.values()
        ]
    return "raw", series.values()


def _chart_block(
    family: Sequence[Series],
    snap: NavigationSnapshot,
    store: SeriesStore,
    window: float,
    formatter: ValueFormatter,
    now: float,
) -> ChartBlock:
    name = snap.selected_name
    if not name or not family:
        return ChartBlock(title=" chart ", kind="empty")

    focused_series = snap.focus is Focus.SERIES_TABLE and 0 <= snap.series_index < len(family)
    charted = [family[snap.series_index]] if focused_series else list(family)

    first = charted[0]
    kind, _ = chart_data(first, window, formatter, now)
    if kind == "rate":
        axis = formatter.rate_axis_formatter()
    elif kind == "age":
        axis = formatter.age_axis_formatter()
    else:
        axis = formatter.axis_formatter(first.name)

    lines: list[ChartLine] = []
    for series in charted:
        _, data = chart_data(series, window, formatter, now)
        if len(data) < 2:
            continue
        lines.append(ChartLine(series.display_name(), tuple(data), axis(data[-1])))

    if focused_series:
        if kind == "rate":
            title = f" {first.display_name()} [rate/s] "
        elif kind == "age":
            title = f" {first.display_name()} [age] "
        else:
            title = f" {first.display_name()}{formatter.unit_suffix(first.name)} "
    else:
        badge = store.first_type(name).badge
        title = f" {badge} {name} ({len(family)} series) "
    return ChartBlock(title=title, kind=kind, lines=tuple(lines), axis=axis)


def status_line(
    version: str,
    targets: Sequence[str],
    filtered: int,
    total: int,
    series_total: int,
    rate_window: RateWindow,
) -> str:
    return (
        f" podviz {version} │ Targets: {', '.join(targets)} │ Metrics: {filtered}/{total}"
        f" │ Series: {series_total} │ Rate: {rate_window} │ {KEY_HINTS}"
    )


def build_view(
    store: SeriesStore,
    nav: NavigationState,
    rate_window: RateWindow,
    formatter: ValueFormatter,
    targets: Sequence[str],
    *,
    version: str = "",
    now: float | None = None,
) -> DashboardView:
    """Compute one refresh tick's worth of display data."""

    now = time.time() if now is None else now
    window = rate_window.get()

    names = store.names()
    nav.set_keys(names)
    snap = nav.snapshot()
    family = store.series_for_name(snap.selected_name) if snap.selected_name else []
    nav.clamp_series_index(len(family))
    snap = nav.snapshot()

    sidebar_focused = snap.focus is Focus.SIDEBAR
    start = snap.scroll_offset
    end = min(len(snap.filtered), start + snap.page_size)
    sidebar = tuple(
        SidebarRow(
            name=name,
            badge=store.first_type(name).badge,
            series_count=store.series_count(name),
            selected=idx == snap.selected_index,
            focused=sidebar_focused,
        )
        for idx, name in enumerate(snap.filtered[start:end], start=start)
    )

    filter_line: str | None = None
    if snap.filter_mode or snap.filter_text:
        marker = "" if snap.filter_valid else "(err)"
        filter_line = f"Filter{marker}: {snap.filter_text}█"

    empty_message = ""
    if not names:
        empty_message = f"waiting for metrics from {', '.join(targets)}"
    elif not snap.filtered:
        empty_message = "no metrics match filter"

    series_header = ""
    series_help = ""
    if family:
        badge = store.first_type(snap.selected_name).badge
        series_header = f" {badge} {snap.selected_name} - {len(family)} series"
        series_help = family[0].help
    s_start = snap.series_scroll
    s_end = min(len(family), s_start + snap.series_page_size)
    series_focused = snap.focus is Focus.SERIES_TABLE
    series_rows = tuple(
        SeriesRow(
            key=series.key,
            label_text=label_text(series),
            value_text=format_series_value(series, window, formatter),
            selected=series_focused and idx == snap.series_index,
        )
        for idx, series in enumerate(family[s_start:s_end], start=s_start)
    )

    return DashboardView(
        sidebar=sidebar,
        sidebar_more_above=start,
        sidebar_more_below=max(len(snap.filtered) - end, 0),
        filter_line=filter_line,
        filter_invalid=not snap.filter_valid,
        selected_name=snap.selected_name,
        series_header=series_header,
        series_help=series_help,
        series_rows=series_rows,
        series_more_above=s_start,
        series_more_below=max(len(family) - s_end, 0),
        chart=_chart_block(family, snap, store, window, formatter, now),
        status=status_line(
            version, targets, len(snap.filtered), len(names), len(store), rate_window
        ),
        focus=snap.focus,
        empty_message=empty_message,
    )


def render_table(store: SeriesStore, formatter: ValueFormatter, window: float) -> str:
    """Plain-text listing of every series and its display value."""

    rows = [
        (
            series.metric_type.badge,
            series.display_name(),
            format_series_value(series, window, formatter),
        )
        for series in store.snapshot()
    ]
    if not rows:
        return "no series scraped"
    width = max(len(name) for _, name, _ in rows)
    return "\n".join(f"{badge} {name:<{width}}  {value}" for badge, name, value in rows)


__all__ = [
    "ChartBlock",
    "ChartLine",
    "DashboardView",
    "NO_LABELS",
    "SeriesRow",
    "SidebarRow",
    "build_view",
    "chart_data",
    "format_series_value",
    "label_text",
    "render_table",
    "status_line",
]
