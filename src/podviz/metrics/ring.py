"""Fixed-capacity circular history of timestamped samples."""

from __future__ import annotations

from .constants import RING_SIZE

Sample = tuple[float, float]


class RingBuffer:
    """Arena-style ring of ``(value, observed_at)`` pairs.

    The write cursor advances modulo ``capacity``; ``full`` flips the first time
    the cursor wraps back to slot zero, which is what lets :meth:`slice` unroll
    the arena into chronological order.
    """

    __slots__ = ("capacity", "index", "full", "_values", "_times")

    def __init__(self, capacity: int = RING_SIZE) -> None:
        if capacity <= 0:
            raise ValueError("Ring capacity must be > 0")
        self.capacity = capacity
        self.index = 0
        self.full = False
        self._values: list[float] = [0.0] * capacity
        self._times: list[float] = [0.0] * capacity

    def push(self, value: float, observed_at: float) -> None:
        self._values[self.index] = value
        self._times[self.index] = observed_at
        self.index = (self.index + 1) % self.capacity
        if self.index == 0:
            self.full = True

    def count(self) -> int:
        return self.capacity if self.full else self.index

    def __len__(self) -> int:
        return self.count()

    def _order(self) -> range:
        start = self.index if self.full else 0
        return range(start, start + self.count())

    def slice(self) -> list[float]:
        """Return a copy of the stored values, oldest first."""

        if not self.full:
            return self._values[: self.index]
        return self._values[self.index :] + self._values[: self.index]

    def times(self) -> list[float]:
        if not self.full:
            return self._times[: self.index]
        return self._times[self.index :] + self._times[: self.index]

    def samples(self) -> list[Sample]:
        cap = self.capacity
        return [(self._values[i % cap], self._times[i % cap]) for i in self._order()]

    def last(self) -> float:
        """Most recently written value, ``0.0`` when nothing was pushed yet."""

        if self.index == 0 and not self.full:
            return 0.0
        return self._values[self.index - 1]

    def copy(self) -> RingBuffer:
        clone = RingBuffer(self.capacity)
        clone.index = self.index
        clone.full = self.full
        clone._values = list(self._values)
        clone._times = list(self._times)
        return clone


__all__ = ["RingBuffer", "Sample"]
