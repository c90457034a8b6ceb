"""Textual dashboard: sidebar, chart, series table and status line."""

from __future__ import annotations

import asyncio
import logging
import math
from collections.abc import Sequence
from functools import partial
from typing import TYPE_CHECKING, Any, cast

from ..config import AppConfig
from ..dashboard.view import ChartBlock, DashboardView, build_view
from ..metrics.constants import REFRESH_INTERVAL_SECONDS
from ..metrics.rates import RateWindow
from ..metrics.store import SeriesStore
from ..navigation.state import Focus, NavigationState
from ..scrape.client import FetchFn, fetch_exposition
from ..scrape.scheduler import ScrapeScheduler
from ..units.formatting import ValueFormatter
from ..units.patterns import UnitClassifier

logger = logging.getLogger(__name__)

_TEXTUAL_ERR: Exception | None = None
if TYPE_CHECKING:  # pragma: no cover - only for static analysis
    from textual.app import App as AppBase
    from textual.app import ComposeResult
    from textual.binding import Binding
    from textual.containers import Horizontal, Vertical
    from textual.widgets import Input, Sparkline, Static
else:  # pragma: no cover - guarded runtime import
    try:
        from textual.app import App as AppBase  # type: ignore[import-not-found]
        from textual.app import ComposeResult
        from textual.binding import Binding  # type: ignore[import-not-found]
        from textual.containers import Horizontal, Vertical  # type: ignore[import-not-found]
        from textual.widgets import Input, Sparkline, Static  # type: ignore[import-not-found]
    except Exception as exc:  # pragma: no cover  # noqa: BLE001
        _TEXTUAL_ERR = exc
        AppBase = cast(Any, object)
        ComposeResult = cast(Any, object)
        Binding = cast(Any, object)
        Horizontal = cast(Any, object)
        Vertical = cast(Any, object)
        Input = cast(Any, object)
        Sparkline = cast(Any, object)
        Static = cast(Any, object)

# Actions that stay live while the filter input owns the keyboard.
_FILTER_MODE_ACTIONS = {"clear_or_quit", "quit"}


def plot_values(data: Sequence[float]) -> list[float]:
    """Sparklines cannot scale NaN or infinities; plot those points as 0."""

    return [value if math.isfinite(value) else 0.0 for value in data]


def chart_legend(chart: ChartBlock) -> str:
    if chart.kind == "empty":
        return "select a metric name"
    if not chart.lines:
        return "collecting samples..."
    return "\n".join(f"{line.label}  {line.latest_text}" for line in chart.lines)


if _TEXTUAL_ERR is None:

    class PodvizApp(AppBase[None]):
        """Live dashboard over a shared series store and navigation state."""

        AUTO_FOCUS = None
        CSS = """
        Screen { layout: vertical; }
        #main { height: 1fr; }
        #left { width: 70%; }
        #chart { height: 60%; border: solid cyan; }
        #chart-lines { height: 1fr; }
        #chart-lines Sparkline { height: 1fr; min-height: 2; }
        #legend { height: auto; max-height: 8; color: $text-muted; }
        #series { height: 40%; border: solid blue; overflow-y: auto; }
        #sidebar { width: 30%; border: solid green; overflow-y: auto; }
        #filter { display: none; }
        #filter.active { display: block; }
        .focused { border: solid cyan; }
        #status { height: 1; background: #1f2937; color: #22c55e; }
        """

        BINDINGS = [
            Binding("q", "quit_dashboard", "Quit"),
            Binding("escape", "clear_or_quit", "Clear/Quit", show=False),
            Binding("up,k", "move_up", "Up", show=False),
            Binding("down,j", "move_down", "Down", show=False),
            Binding("tab", "toggle_focus", "Focus", priority=True),
            Binding("slash", "start_filter", "Filter"),
            Binding("left_square_bracket,minus", "rate_down", "Rate -"),
            Binding("right_square_bracket,plus", "rate_up", "Rate +"),
        ]

        def __init__(
            self,
            store: SeriesStore,
            scheduler: ScrapeScheduler,
            formatter: ValueFormatter,
            *,
            targets: Sequence[str],
            rate_window: RateWindow | None = None,
            navigation: NavigationState | None = None,
            refresh_interval: float = REFRESH_INTERVAL_SECONDS,
            version: str = "",
        ) -> None:
            super().__init__()
            self.store = store
            self.scheduler = scheduler
            self.formatter = formatter
            self.targets = tuple(targets)
            self.rate_window = rate_window or RateWindow()
            self.navigation = navigation or NavigationState()
            self.refresh_interval = refresh_interval
            self.version = version
            self.view: DashboardView | None = None
            self._chart_key: str | None = None
            self._stop = asyncio.Event()

        def compose(self) -> ComposeResult:
            with Horizontal(id="main"):
                with Vertical(id="left"):
                    with Vertical(id="chart"):
                        yield Vertical(id="chart-lines")
                        yield Static("", id="legend", markup=False)
                    yield Static("", id="series", markup=False)
                with Vertical(id="sidebar"):
                    yield Input(placeholder="regex or substring", id="filter")
                    yield Static("", id="names", markup=False)
            yield Static("", id="status", markup=False)

        async def on_mount(self) -> None:
            self.query_one("#chart").border_title = " chart "
            self.query_one("#series").border_title = " series "
            self.query_one("#sidebar").border_title = " metric names "
            self.run_worker(self.scheduler.run(self._stop), name="scrape", group="scrape")
            self.set_interval(self.refresh_interval, self.refresh_view)
            await self.refresh_view()

        async def on_unmount(self) -> None:
            self._stop.set()

        def check_action(self, action: str, parameters: tuple[object, ...]) -> bool | None:
            if self.navigation.filter_mode and action not in _FILTER_MODE_ACTIONS:
                return False
            return True

        async def refresh_view(self) -> None:
            view = build_view(
                self.store,
                self.navigation,
                self.rate_window,
                self.formatter,
                self.targets,
                version=self.version,
            )
            self.view = view
            self.query_one("#names", Static).update(view.sidebar_text())
            self.query_one("#series", Static).update(view.series_text())
            self.query_one("#status", Static).update(view.status)
            sidebar_focused = view.focus is Focus.SIDEBAR
            self.query_one("#sidebar").set_class(sidebar_focused, "focused")
            self.query_one("#series").set_class(not sidebar_focused, "focused")
            await self._render_chart(view.chart)

        async def _render_chart(self, chart: ChartBlock) -> None:
            self.query_one("#chart").border_title = chart.title
            self.query_one("#legend", Static).update(chart_legend(chart))
            lines_box = self.query_one("#chart-lines", Vertical)
            if chart.key != self._chart_key:
                self._chart_key = chart.key
                await lines_box.remove_children()
                await lines_box.mount_all(
                    [
                        Sparkline(plot_values(line.data), summary_function=max)
                        for line in chart.lines
                    ]
                )
                return
            for sparkline, line in zip(lines_box.query(Sparkline), chart.lines, strict=False):
                sparkline.data = plot_values(line.data)

        # -- filter input ---------------------------------------------

        def on_input_changed(self, event: Input.Changed) -> None:
            self.navigation.set_filter(event.value)

        async def on_input_submitted(self, event: Input.Submitted) -> None:
            self.navigation.commit_filter()
            self.set_focus(None)
            await self.refresh_view()

        # -- actions ----------------------------------------------------

        async def action_quit_dashboard(self) -> None:
            self._stop.set()
            self.exit()

        async def action_clear_or_quit(self) -> None:
            if self.navigation.filter_mode or self.navigation.filter_text:
                self.navigation.clear_filter()
                filter_input = self.query_one("#filter", Input)
                filter_input.value = ""
                filter_input.remove_class("active")
                self.set_focus(None)
                await self.refresh_view()
                return
            await self.action_quit_dashboard()

        async def action_move_up(self) -> None:
            self.navigation.move_up()
            await self.refresh_view()

        async def action_move_down(self) -> None:
            self.navigation.move_down()
            await self.refresh_view()

        async def action_toggle_focus(self) -> None:
            self.navigation.toggle_focus()
            await self.refresh_view()

        async def action_start_filter(self) -> None:
            self.navigation.start_filter()
            filter_input = self.query_one("#filter", Input)
            filter_input.value = self.navigation.filter_text
            filter_input.add_class("active")
            filter_input.focus()

        async def action_rate_down(self) -> None:
            self.rate_window.step_down()
            await self.refresh_view()

        async def action_rate_up(self) -> None:
            self.rate_window.step_up()
            await self.refresh_view()

else:  # pragma: no cover - exercised only when Textual is absent

    class PodvizApp:  # type: ignore[no-redef]
        def __init__(self, *_args: Any, **_kwargs: Any) -> None:
            raise ImportError(
                "The podviz dashboard requires 'textual'. Install with `pip install textual`."
            ) from _TEXTUAL_ERR


def create_app(
    cfg: AppConfig,
    classifier: UnitClassifier,
    *,
    version: str = "",
    store: SeriesStore | None = None,
    fetch: FetchFn | None = None,
) -> PodvizApp:
    """Wire a store, scheduler and formatter from ``cfg`` into a dashboard app."""

    store = store if store is not None else SeriesStore()
    scheduler = ScrapeScheduler(
        cfg.scrape.targets,
        store,
        interval=cfg.scrape.interval,
        timeout=cfg.scrape.timeout,
        fetch=fetch or partial(fetch_exposition, path=cfg.scrape.metrics_path),
    )
    return PodvizApp(
        store,
        scheduler,
        ValueFormatter(classifier),
        targets=cfg.scrape.targets,
        rate_window=RateWindow(cfg.display.rate_window),
        navigation=NavigationState(
            page_size=cfg.display.page_size,
            series_page_size=cfg.display.series_page_size,
        ),
        refresh_interval=cfg.display.refresh_interval,
        version=version,
    )


def run_tui(cfg: AppConfig, classifier: UnitClassifier, *, version: str = "") -> None:
    """Launch the dashboard and block until the user quits."""

    app = create_app(cfg, classifier, version=version)
    logger.info("Starting dashboard for %s", ", ".join(cfg.scrape.targets))
    app.run()


__all__ = ["PodvizApp", "chart_legend", "create_app", "plot_values", "run_tui"]
