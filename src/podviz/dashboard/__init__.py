"""Terminal-independent dashboard view model."""

from .view import (
    NO_LABELS,
    ChartBlock,
    ChartLine,
    DashboardView,
    SeriesRow,
    SidebarRow,
    build_view,
    chart_data,
    format_series_value,
    label_text,
    render_table,
    status_line,
)

__all__ = [
    "NO_LABELS",
    "ChartBlock",
    "ChartLine",
    "DashboardView",
    "SeriesRow",
    "SidebarRow",
    "build_view",
    "chart_data",
    "format_series_value",
    "label_text",
    "render_table",
    "status_line",
]
