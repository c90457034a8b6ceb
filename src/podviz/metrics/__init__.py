"""Metric ingestion and time-series engine."""

from .constants import (
    DEFAULT_RATE_WINDOW_SECONDS,
    METRICS_PATH,
    PROMETHEUS_CONTENT_TYPE,
    RATE_WINDOW_STEPS_SECONDS,
    RING_SIZE,
)
from .exposition import ExpositionSample, ingest, parse_exposition, parse_labels
from .rates import RateWindow, format_window, rate, rate_slice
from .ring import RingBuffer
from .series import MetricType, Series, format_labels, series_key
from .store import SeriesStore

__all__ = [
    "DEFAULT_RATE_WINDOW_SECONDS",
    "METRICS_PATH",
    "PROMETHEUS_CONTENT_TYPE",
    "RATE_WINDOW_STEPS_SECONDS",
    "RING_SIZE",
    "ExpositionSample",
    "MetricType",
    "RateWindow",
    "RingBuffer",
    "Series",
    "SeriesStore",
    "format_labels",
    "format_window",
    "ingest",
    "parse_exposition",
    "parse_labels",
    "rate",
    "rate_slice",
    "series_key",
]
