"""Rate extraction over ring-buffer history."""

from __future__ import annotations

import threading
from itertools import pairwise

from .constants import DEFAULT_RATE_WINDOW_SECONDS, RATE_WINDOW_STEPS_SECONDS
from .ring import RingBuffer


def rate(buffer: RingBuffer, window: float) -> float:
    """Per-second increase between the newest sample and the oldest one inside ``window``.

    Samples are scanned backwards from the newest while they are no older than
    ``newest_t - window``. A negative delta (counter reset) is reported as ``0``.
    """

    samples = buffer.samples()
    if len(samples) < 2:
        return 0.0

    newest_value, newest_t = samples[-1]
    cutoff = newest_t - window
    oldest_value, oldest_t = newest_value, newest_t
    for value, observed_at in reversed(samples[:-1]):
        if observed_at < cutoff:
            break
        oldest_value, oldest_t = value, observed_at

    elapsed = newest_t - oldest_t
    if elapsed <= 0:
        return 0.0
    delta = newest_value - oldest_value
    if delta < 0:
        return 0.0
    return delta / elapsed


def rate_slice(buffer: RingBuffer, window: float) -> list[float]:
    """One rate per adjacent sample pair across the whole buffer, for charting.

    ``window`` only selects what is displayed; it does not bound this sequence.
    Returns an empty list when fewer than two samples exist.
    """

    del window
    samples = buffer.samples()
    if len(samples) < 2:
        return []

    rates: list[float] = []
    for (prev_value, prev_t), (value, observed_at) in pairwise(samples):
        dt = observed_at - prev_t
        if dt <= 0:
            rates.append(0.0)
            continue
        rates.append(max(0.0, value - prev_value) / dt)
    return rates


def format_window(seconds: float) -> str:
    """Render a window the way durations read in the status line (``5s``, ``1m0s``)."""

    if seconds < 1:
        return f"{seconds * 1000:g}ms"
    whole = int(seconds)
    frac = seconds - whole
    minutes, secs = divmod(whole, 60)
    hours, minutes = divmod(minutes, 60)
    sec_text = f"{secs + frac:g}s"
    if hours:
        return f"{hours}h{minutes}m{sec_text}"
    if minutes:
        return f"{minutes}m{sec_text}"
    return sec_text


class RateWindow:
    """Thread-safe selector over the fixed rate-window steps."""

    def __init__(
        self,
        initial: float = DEFAULT_RATE_WINDOW_SECONDS,
        steps: tuple[float, ...] = RATE_WINDOW_STEPS_SECONDS,
    ) -> None:
        if not steps:
            raise ValueError("Rate window needs at least one step")
        self._steps = tuple(sorted(steps))
        self._lock = threading.Lock()
        self._idx = 0
        self.set(initial)

    @property
    def steps(self) -> tuple[float, ...]:
        return self._steps

    def get(self) -> float:
        with self._lock:
            return self._steps[self._idx]

    def step_up(self) -> float:
        with self._lock:
            if self._idx < len(self._steps) - 1:
                self._idx += 1
            return self._steps[self._idx]

    def step_down(self) -> float:
        with self._lock:
            if self._idx > 0:
                self._idx -= 1
            return self._steps[self._idx]

    def set(self, seconds: float) -> float:
        """Snap to the first step >= ``seconds`` (or the largest step)."""

        with self._lock:
            for idx, step in enumerate(self._steps):
                if step >= seconds:
                    self._idx = idx
                    break
            else:
                self._idx = len(self._steps) - 1
            return self._steps[self._idx]

    def __str__(self) -> str:
        return format_window(self.get())


__all__ = ["rate", "rate_slice", "format_window", "RateWindow"]
