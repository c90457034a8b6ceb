"""Human-readable value formatting driven by unit classification."""

from __future__ import annotations

import math
import time
from collections.abc import Callable

from .patterns import UnitClassifier

_KIB = 1 << 10
_MIB = 1 << 20
_GIB = 1 << 30
_TIB = 1 << 40


def format_bytes(value: float) -> str:
    if value >= _TIB:
        return f"{value / _TIB:.2f} TiB"
    if value >= _GIB:
        return f"{value / _GIB:.2f} GiB"
    if value >= _MIB:
        return f"{value / _MIB:.2f} MiB"
    if value >= _KIB:
        return f"{value / _KIB:.2f} KiB"
    return f"{value:.0f} B"


def format_duration(seconds: float) -> str:
    if seconds >= 86400:
        return f"{seconds / 86400:.1f}d"
    if seconds >= 3600:
        return f"{seconds / 3600:.1f}h"
    if seconds >= 60:
        return f"{seconds / 60:.1f}m"
    if seconds >= 1:
        return f"{seconds:.2f}s"
    if seconds >= 0.001:
        return f"{seconds * 1000:.1f}ms"
    if seconds >= 0.000001:
        return f"{seconds * 1e6:.1f}µs"
    return f"{seconds * 1e9:.0f}ns"


def format_count(value: float) -> str:
    if value >= 1e9:
        return f"{value / 1e9:.2f}G"
    if value >= 1e6:
        return f"{value / 1e6:.2f}M"
    if value >= 1e3:
        return f"{value / 1e3:.2f}k"
    return f"{value:.0f}"


def format_generic(value: float) -> str:
    """Magnitude-scaled fallback for names no unit rule matches."""

    if value == 0:
        return "0"
    magnitude = abs(value)
    if magnitude >= 1e6:
        return f"{value / 1e6:.2f}M"
    if magnitude >= 1e3:
        return f"{value / 1e3:.2f}k"
    if magnitude >= 1:
        return f"{value:.2f}"
    if magnitude >= 0.01:
        return f"{value:.3f}"
    return f"{value:.4f}"


def format_rel_duration(seconds: float) -> str:
    if not math.isfinite(seconds):
        return format_raw(seconds)
    total_sec = int(seconds)
    if total_sec < 60:
        return f"{total_sec}s"
    total_min = total_sec // 60
    if total_min < 60:
        return f"{total_min}m{total_sec % 60}s"
    total_hr = total_min // 60
    if total_hr < 24:
        return f"{total_hr}h{total_min % 60}m"
    days = total_hr // 24
    if days < 365:
        return f"{days}d{total_hr % 24}h"
    return f"{days // 365}y{days % 365}d"


def format_timestamp(epoch_seconds: float, now: float | None = None) -> str:
    """Render a unix timestamp as its age relative to ``now``."""

    if epoch_seconds == 0:
        return "0"
    if not math.isfinite(epoch_seconds):
        return format_raw(epoch_seconds)
    current = time.time() if now is None else now
    diff = current - epoch_seconds
    if diff < 0:
        return f"in {format_rel_duration(-diff)}"
    return f"{format_rel_duration(diff)} ago"


def format_raw(value: float) -> str:
    """Shortest round-tripping text for a float (``42.5``, ``10``, ``1e+21``)."""

    if math.isfinite(value) and value == int(value) and abs(value) < 1e21:
        return str(int(value))
    return repr(value)


class ValueFormatter:
    """Formats values for display using an explicitly supplied classifier."""

    def __init__(
        self, classifier: UnitClassifier, *, clock: Callable[[], float] = time.time
    ) -> None:
        self.classifier = classifier
        self._clock = clock

    def unit_of(self, name: str) -> str | None:
        match = self.classifier.match(name)
        return match.unit if match else None

    def unit_suffix(self, name: str) -> str:
        match = self.classifier.match(name)
        return match.suffix if match else ""

    def is_timestamp(self, name: str) -> bool:
        return self.unit_of(name) == "timestamp"

    def format_value(self, name: str, value: float) -> str:
        unit = self.unit_of(name)
        if unit == "bytes":
            return format_bytes(value)
        if unit == "megabytes":
            return format_bytes(value * _MIB)
        if unit == "kilobytes":
            return format_bytes(value * _KIB)
        if unit == "duration":
            return format_duration(value)
        if unit == "duration_ms":
            return format_duration(value / 1000)
        if unit == "percent":
            return f"{value:.1f}%"
        if unit == "timestamp":
            return format_timestamp(value, self._clock())
        if unit == "count":
            return format_count(value)
        return format_generic(value)

    def axis_formatter(self, name: str) -> Callable[[float], str]:
        def _format(value: float) -> str:
            if math.isnan(value):
                return ""
            return self.format_value(name, value)

        return _format

    @staticmethod
    def rate_axis_formatter() -> Callable[[float], str]:
        def _format(value: float) -> str:
            if math.isnan(value):
                return ""
            return format_generic(value) + "/s"

        return _format

    @staticmethod
    def age_axis_formatter() -> Callable[[float], str]:
        def _format(value: float) -> str:
            if math.isnan(value):
                return ""
            return format_rel_duration(value)

        return _format


__all__ = [
    "ValueFormatter",
    "format_bytes",
    "format_count",
    "format_duration",
    "format_generic",
    "format_raw",
    "format_rel_duration",
    "format_timestamp",
]
