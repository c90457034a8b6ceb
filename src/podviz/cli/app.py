"""podviz command line: configuration, logging and dashboard startup."""

from __future__ import annotations

import argparse
import asyncio
import contextlib
import json
import logging
import sys
import time
from collections.abc import Callable
from functools import partial
from logging.handlers import RotatingFileHandler
from typing import Any, TextIO

from .. import __version__
from ..config import AppConfig, load_app_config, parse_duration, parse_targets
from ..contracts.error import BadInputError, Exit, guard_cli
from ..dashboard.view import render_table
from ..metrics.rates import RateWindow
from ..metrics.store import SeriesStore
from ..scrape.client import fetch_exposition
from ..scrape.scheduler import ScrapeScheduler
from ..units.formatting import ValueFormatter
from ..units.patterns import UnitClassifier, build_classifier

logger = logging.getLogger("podviz")
logger.setLevel(logging.INFO)
logger.propagate = False

DEFAULT_LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"
DEFAULT_LOG_DATEFMT = "%Y-%m-%dT%H:%M:%S"
DEFAULT_LOG_MAX_BYTES = 5_000_000
DEFAULT_LOG_BACKUP_COUNT = 5
TTY_POLL_SECONDS = 2.0


class JsonFormatter(logging.Formatter):
    """Render log records as JSON objects."""

    def format(self, record: logging.LogRecord) -> str:
        payload = {
            "ts": self.formatTime(record, DEFAULT_LOG_DATEFMT),
            "level": record.levelname,
            "logger": record.name,
            "msg": record.getMessage(),
        }
        if record.exc_info:
            payload["exc_info"] = self.formatException(record.exc_info)
        if record.stack_info:
            payload["stack"] = self.formatStack(record.stack_info)
        return json.dumps(payload, ensure_ascii=False)


def configure_logging(
    use_json: bool = False,
    log_file: str | None = None,
    *,
    console: bool = True,
    max_bytes: int = DEFAULT_LOG_MAX_BYTES,
    backup_count: int = DEFAULT_LOG_BACKUP_COUNT,
) -> None:
    """Configure console (and optional rotating file) logging.

    ``console=False`` is used while the dashboard owns the terminal; records then
    only reach ``log_file`` (or nowhere).
    """

    formatter: logging.Formatter
    if use_json:
        formatter = JsonFormatter()
    else:
        formatter = logging.Formatter(DEFAULT_LOG_FORMAT, DEFAULT_LOG_DATEFMT)

    for handler in list(logger.handlers):
        with contextlib.suppress(Exception):
            handler.close()
        logger.removeHandler(handler)

    if console:
        stream = logging.StreamHandler()
        stream.setFormatter(formatter)
        logger.addHandler(stream)

    if log_file:
        handler = RotatingFileHandler(log_file, maxBytes=max_bytes, backupCount=backup_count)
        handler.setFormatter(formatter)
        logger.addHandler(handler)

    if not logger.handlers:
        logger.addHandler(logging.NullHandler())


configure_logging()


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="podviz",
        description="Live terminal dashboard for Prometheus-style /metrics endpoints.",
    )
    parser.add_argument(
        "--targets",
        default=None,
        help="Comma-separated host:port list to scrape (env: METRIC_TARGETS)",
    )
    parser.add_argument(
        "--rate-window",
        default=None,
        help="Rate calculation window, e.g. 10s or 1m (env: RATE_WINDOW)",
    )
    parser.add_argument(
        "--patterns",
        default=None,
        help="YAML file with unit patterns that override the built-in defaults",
    )
    parser.add_argument(
        "--config",
        default=None,
        help="Path to TOML config file (env: PODVIZ_CONFIG)",
    )
    parser.add_argument(
        "--once",
        action="store_true",
        help="Scrape every target once, print a table and exit",
    )
    parser.add_argument("--log-json", action="store_true", help="Emit logs in JSON format")
    parser.add_argument(
        "--log-file",
        default=None,
        help="Optional log file path (rotates at 5MB, keeps 5 backups)",
    )
    parser.add_argument(
        "--version",
        action="version",
        version=f"podviz {__version__}",
    )
    return parser


def apply_cli_overrides(cfg: AppConfig, args: argparse.Namespace) -> None:
    if args.targets:
        targets = parse_targets(args.targets)
        if not targets:
            raise BadInputError("--targets did not contain any host:port entries")
        cfg.scrape.targets = targets
    if args.rate_window:
        try:
            window = parse_duration(args.rate_window)
        except ValueError:
            window = 0.0
        if window > 0:
            cfg.display.rate_window = window
        else:
            logger.warning(
                "Invalid --rate-window %r, using %gs", args.rate_window, cfg.display.rate_window
            )
    if args.patterns:
        cfg.display.patterns_file = args.patterns


def wait_for_tty(
    stream: TextIO | None = None,
    *,
    poll_interval: float = TTY_POLL_SECONDS,
    sleep: Callable[[float], Any] = time.sleep,
) -> None:
    """Block until ``stream`` (stdin by default) is attached to a terminal."""

    stream = stream if stream is not None else sys.stdin
    if stream.isatty():
        return
    print("podviz: no TTY detected, waiting for terminal attachment...", file=sys.stderr)
    while not stream.isatty():
        sleep(poll_interval)
    print("podviz: TTY detected, starting dashboard", file=sys.stderr)


def run_once(cfg: AppConfig, classifier: UnitClassifier) -> int:
    store = SeriesStore()
    scheduler = ScrapeScheduler(
        cfg.scrape.targets,
        store,
        interval=cfg.scrape.interval,
        timeout=cfg.scrape.timeout,
        fetch=partial(fetch_exposition, path=cfg.scrape.metrics_path),
    )
    results = asyncio.run(scheduler.scrape_once())
    for target, count in results.items():
        if count is None:
            logger.warning("Target %s could not be scraped", target)
        else:
            logger.info("Target %s: %d samples", target, count)
    window = RateWindow(cfg.display.rate_window).get()
    print(render_table(store, ValueFormatter(classifier), window))
    return int(Exit.OK)


def run_dashboard(cfg: AppConfig, classifier: UnitClassifier) -> int:
    from ..tui.app import run_tui

    wait_for_tty()
    run_tui(cfg, classifier, version=__version__)
    return int(Exit.OK)


@guard_cli
def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    configure_logging(args.log_json, args.log_file)

    cfg = load_app_config(args.config)
    apply_cli_overrides(cfg, args)
    cfg.validate()

    classifier = build_classifier(cfg.display.patterns_file)
    logger.info("podviz %s", __version__)
    logger.info(
        "targets=%s rate_window=%s",
        ",".join(cfg.scrape.targets),
        RateWindow(cfg.display.rate_window),
    )

    if args.once:
        return run_once(cfg, classifier)

    # The dashboard owns the terminal from here on.
    configure_logging(args.log_json, args.log_file, console=False)
    return run_dashboard(cfg, classifier)


def console_main() -> None:
    """Entry point for console_scripts."""

    try:
        raise SystemExit(main(sys.argv[1:]))
    except SystemExit:
        raise
    except Exception as e:  # noqa: BLE001
        logger.exception("Fatal error: %s", e)
        raise SystemExit(2) from e


if __name__ == "__main__":
    console_main()
