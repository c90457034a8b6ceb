"""Concurrent series store shared by scrape tasks and the refresh loop."""

from __future__ import annotations

import bisect
import threading
import time
from collections.abc import Callable, Mapping

from .constants import RING_SIZE
from .series import MetricType, Series, series_key


class SeriesStore:
    """Maps canonical series keys to :class:`Series` with sorted key/name indexes.

    Series are created lazily on first observation and never removed. A single
    re-entrant lock guards the indexes and every series buffer.
    """

    def __init__(
        self,
        *,
        capacity: int = RING_SIZE,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._lock = threading.RLock()
        self._capacity = capacity
        self._clock = clock
        self._series: dict[str, Series] = {}
        self._order: list[str] = []
        self._names: list[str] = []
        self._name_set: set[str] = set()

    def update(
        self,
        name: str,
        labels: Mapping[str, str] | None,
        help_text: str,
        metric_type: MetricType | str | None,
        value: float,
        *,
        observed_at: float | None = None,
    ) -> Series:
        if not isinstance(metric_type, MetricType):
            metric_type = MetricType.parse(metric_type)
        key = series_key(name, labels)
        with self._lock:
            series = self._series.get(key)
            if series is None:
                series = Series(
                    name,
                    labels,
                    help_text=help_text,
                    metric_type=metric_type,
                    capacity=self._capacity,
                    lock=self._lock,
                )
                self._series[key] = series
                bisect.insort(self._order, key)
                if name not in self._name_set:
                    self._name_set.add(name)
                    bisect.insort(self._names, name)
            else:
                series.refresh_metadata(help_text, metric_type)
            series.record(value, self._clock() if observed_at is None else observed_at)
        return series

    def snapshot(self) -> list[Series]:
        with self._lock:
            return [self._series[key] for key in self._order]

    def keys(self) -> list[str]:
        with self._lock:
            return list(self._order)

    def names(self) -> list[str]:
        with self._lock:
            return list(self._names)

    def series_for_name(self, name: str) -> list[Series]:
        with self._lock:
            return [self._series[key] for key in self._order if self._series[key].name == name]

    def series_count(self, name: str) -> int:
        return len(self.series_for_name(name))

    def first_type(self, name: str) -> MetricType:
        family = self.series_for_name(name)
        return family[0].metric_type if family else MetricType.GAUGE

    def get(self, key: str) -> Series | None:
        with self._lock:
            return self._series.get(key)

    def __len__(self) -> int:
        with self._lock:
            return len(self._series)


__all__ = ["SeriesStore"]
