from __future__ import annotations

import asyncio
import math

import pytest

from podviz.config import load_app_config
from podviz.dashboard.view import ChartBlock, ChartLine
from podviz.metrics import SeriesStore
from podviz.navigation import Focus
from podviz.tui.app import _TEXTUAL_ERR, PodvizApp, chart_legend, create_app, plot_values
from podviz.units import build_classifier

BODY = """# TYPE http_requests_total counter
http_requests_total{method="GET"} 10
http_requests_total{method="POST"} 4
# TYPE memory_usage_bytes gauge
memory_usage_bytes 4096
"""


def _fake_fetch(target: str, timeout: float) -> str | None:
    del target, timeout
    return BODY


def test_chart_legend_states() -> None:
    assert chart_legend(ChartBlock(title="", kind="empty", lines=())) == "select a metric name"
    assert chart_legend(ChartBlock(title="", kind="raw", lines=())) == "collecting samples..."
    chart = ChartBlock(
        title=" x ",
        kind="rate",
        lines=(
            ChartLine(label='req{method="GET"}', data=(1.0, 2.0), latest_text="2.00/s"),
            ChartLine(label='req{method="POST"}', data=(0.0, 1.0), latest_text="1.00/s"),
        ),
    )
    assert chart_legend(chart) == 'req{method="GET"}  2.00/s\nreq{method="POST"}  1.00/s'


def test_plot_values_flattens_non_finite_points() -> None:
    assert plot_values((1.5, math.nan, math.inf, -math.inf, 2.0)) == [1.5, 0.0, 0.0, 0.0, 2.0]


def test_create_app_wires_config() -> None:
    if _TEXTUAL_ERR is not None:
        pytest.skip("Textual not available")

    cfg = load_app_config(None, env={"METRIC_TARGETS": "a:1,b:2", "RATE_WINDOW": "12s"})
    cfg.display.page_size = 7
    store = SeriesStore()
    app = create_app(cfg, build_classifier(), version="9.9", store=store, fetch=_fake_fetch)
    assert isinstance(app, PodvizApp)
    assert app.store is store
    assert app.targets == ("a:1", "b:2")
    assert app.scheduler.targets == ("a:1", "b:2")
    # 12s snaps up to the next step.
    assert app.rate_window.get() == 15.0
    assert app.navigation.page_size == 7
    assert app.version == "9.9"


def test_dashboard_keyboard_flow() -> None:
    if _TEXTUAL_ERR is not None:
        pytest.skip("Textual not available")

    cfg = load_app_config(None, env={"METRIC_TARGETS": "svc:9100"})
    cfg.scrape.interval = 5.0
    app = create_app(cfg, build_classifier(), version="1.0.0", fetch=_fake_fetch)

    async def scenario() -> None:
        async with app.run_test() as pilot:
            for _ in range(100):
                if len(app.store):
                    break
                await pilot.pause(0.02)
            await app.refresh_view()
            assert app.view is not None
            assert [row.name for row in app.view.sidebar] == [
                "http_requests_total",
                "memory_usage_bytes",
            ]
            assert "Targets: svc:9100" in app.view.status

            await pilot.press("down")
            assert app.navigation.selected_name() == "memory_usage_bytes"

            await pilot.press("tab")
            assert app.navigation.snapshot().focus is Focus.SERIES_TABLE
            await pilot.press("tab")

            await pilot.press("right_square_bracket")
            assert app.rate_window.get() == 10.0
            await pilot.press("left_square_bracket")
            await pilot.press("left_square_bracket")
            assert app.rate_window.get() == 2.0

            await pilot.press("slash")
            assert app.navigation.filter_mode
            await pilot.press("h", "t", "t")
            await pilot.pause()
            assert app.navigation.filter_text == "htt"
            # Movement keys are disabled while typing a filter.
            await pilot.press("down")
            assert app.navigation.snapshot().filtered == ("http_requests_total",)
            await pilot.press("enter")
            await pilot.pause()
            assert not app.navigation.filter_mode
            assert app.view.sidebar[0].name == "http_requests_total"

            await app.action_clear_or_quit()
            assert app.navigation.filter_text == ""
            assert len(app.navigation.snapshot().filtered) == 2

    asyncio.run(scenario())
