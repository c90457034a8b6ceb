"""Series identity, metric type variant and per-series history."""

from __future__ import annotations

import threading
from collections.abc import Mapping
from contextlib import AbstractContextManager
from enum import Enum
from typing import Any

from . import rates
from .constants import ACCUMULATING_SUFFIXES, RING_SIZE
from .ring import RingBuffer


class MetricType(str, Enum):
    """Declared family type from a ``# TYPE`` annotation."""

    COUNTER = "counter"
    GAUGE = "gauge"
    HISTOGRAM = "histogram"
    SUMMARY = "summary"
    UNKNOWN = "unknown"

    @classmethod
    def parse(cls, text: str | None) -> MetricType:
        if not text:
            return cls.UNKNOWN
        try:
            return cls(text.strip().lower())
        except ValueError:
            return cls.UNKNOWN

    @property
    def effective(self) -> MetricType:
        """Unknown types are treated as gauges."""

        return MetricType.GAUGE if self is MetricType.UNKNOWN else self

    @property
    def badge(self) -> str:
        return _BADGES[self]


_BADGES = {
    MetricType.COUNTER: "[C]",
    MetricType.GAUGE: "[G]",
    MetricType.HISTOGRAM: "[H]",
    MetricType.SUMMARY: "[S]",
    MetricType.UNKNOWN: "[?]",
}


def series_key(name: str, labels: Mapping[str, str] | None) -> str:
    """Canonical ``name{k1=v1,k2=v2}`` key with labels in sorted key order."""

    if not labels:
        return name
    parts = ",".join(f"{key}={labels[key]}" for key in sorted(labels))
    return f"{name}{{{parts}}}"


def format_labels(labels: Mapping[str, str] | None, *, separator: str = ",") -> str:
    if not labels:
        return ""
    parts = separator.join(f'{key}="{labels[key]}"' for key in sorted(labels))
    return f"{{{parts}}}"


class Series:
    """One metric name + label combination and its bounded history.

    Reads and writes go through ``lock``, which the owning store shares across
    all of its series.
    """

    __slots__ = ("key", "name", "labels", "help", "_type", "_buffer", "_lock")

    def __init__(
        self,
        name: str,
        labels: Mapping[str, str] | None = None,
        *,
        help_text: str = "",
        metric_type: MetricType = MetricType.UNKNOWN,
        capacity: int = RING_SIZE,
        lock: AbstractContextManager[Any] | None = None,
    ) -> None:
        self.name = name
        self.labels: dict[str, str] = dict(labels or {})
        self.key = series_key(name, self.labels)
        self.help = help_text
        self._type = metric_type
        self._buffer = RingBuffer(capacity)
        self._lock: AbstractContextManager[Any] = lock if lock is not None else threading.RLock()

    @property
    def declared_type(self) -> MetricType:
        return self._type

    @property
    def metric_type(self) -> MetricType:
        return self._type.effective

    def refresh_metadata(self, help_text: str, metric_type: MetricType) -> None:
        with self._lock:
            if help_text:
                self.help = help_text
            if metric_type is not MetricType.UNKNOWN:
                self._type = metric_type

    def record(self, value: float, observed_at: float) -> None:
        with self._lock:
            self._buffer.push(value, observed_at)

    def history(self) -> RingBuffer:
        """Point-in-time copy of the ring buffer."""

        with self._lock:
            return self._buffer.copy()

    def values(self) -> list[float]:
        with self._lock:
            return self._buffer.slice()

    def last(self) -> float:
        with self._lock:
            return self._buffer.last()

    def count(self) -> int:
        with self._lock:
            return self._buffer.count()

    def should_rate(self) -> bool:
        kind = self.metric_type
        if kind is MetricType.COUNTER:
            return True
        if kind in (MetricType.HISTOGRAM, MetricType.SUMMARY):
            return self.name.endswith(ACCUMULATING_SUFFIXES)
        return False

    def rate(self, window: float) -> float:
        return rates.rate(self.history(), window)

    def rate_slice(self, window: float) -> list[float]:
        return rates.rate_slice(self.history(), window)

    def display_name(self) -> str:
        return self.name + format_labels(self.labels)

    def __repr__(self) -> str:  # pragma: no cover - debugging aid
        return f"Series({self.key!r}, type={self._type.value}, n={self.count()})"


__all__ = ["MetricType", "Series", "format_labels", "series_key"]
