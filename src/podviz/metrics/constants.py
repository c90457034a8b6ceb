"""Shared constants for the podviz ingestion engine."""

from __future__ import annotations

RING_SIZE = 120

SCRAPE_INTERVAL_SECONDS = 1.0
SCRAPE_TIMEOUT_SECONDS = 2.0
REFRESH_INTERVAL_SECONDS = 0.25

DEFAULT_RATE_WINDOW_SECONDS = 5.0
RATE_WINDOW_STEPS_SECONDS: tuple[float, ...] = (1.0, 2.0, 5.0, 10.0, 15.0, 30.0, 60.0)

DEFAULT_TARGET = "localhost:8080"
METRICS_PATH = "/metrics"
PROMETHEUS_CONTENT_TYPE = "text/plain; version=0.0.4"

HELP_PREFIX = "# HELP "
TYPE_PREFIX = "# TYPE "

# Families whose _count/_sum children accumulate like counters.
ACCUMULATING_SUFFIXES: tuple[str, ...] = ("_count", "_sum")

__all__ = [
    "RING_SIZE",
    "SCRAPE_INTERVAL_SECONDS",
    "SCRAPE_TIMEOUT_SECONDS",
    "REFRESH_INTERVAL_SECONDS",
    "DEFAULT_RATE_WINDOW_SECONDS",
    "RATE_WINDOW_STEPS_SECONDS",
    "DEFAULT_TARGET",
    "METRICS_PATH",
    "PROMETHEUS_CONTENT_TYPE",
    "HELP_PREFIX",
    "TYPE_PREFIX",
    "ACCUMULATING_SUFFIXES",
]
