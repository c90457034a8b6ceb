"""Periodic scrape loop feeding the series store."""

from __future__ import annotations

import asyncio
import contextlib
import logging
from collections.abc import Sequence

from ..metrics.constants import SCRAPE_INTERVAL_SECONDS, SCRAPE_TIMEOUT_SECONDS
from ..metrics.store import SeriesStore
from .client import FetchFn, fetch_exposition, scrape_target

logger = logging.getLogger(__name__)


class ScrapeScheduler:
    """Scrapes every target once eagerly, then once per ``interval``.

    Each tick spawns one fire-and-forget task per target, so a slow target never
    delays the others or the next tick. Blocking HTTP runs in worker threads.
    Failed targets are simply retried on the next tick.
    """

    def __init__(
        self,
        targets: Sequence[str],
        store: SeriesStore,
        *,
        interval: float = SCRAPE_INTERVAL_SECONDS,
        timeout: float = SCRAPE_TIMEOUT_SECONDS,
        fetch: FetchFn = fetch_exposition,
    ) -> None:
        if interval <= 0:
            raise ValueError("Scrape interval must be > 0")
        self.targets = tuple(targets)
        self.store = store
        self.interval = interval
        self.timeout = timeout
        self._fetch = fetch
        self._inflight: set[asyncio.Task[int | None]] = set()
        self.cycles = 0

    def _scrape_blocking(self, target: str) -> int | None:
        try:
            count = scrape_target(target, self.store, timeout=self.timeout, fetch=self._fetch)
        except Exception:  # noqa: BLE001
            # One misbehaving target must never end the scrape loop.
            logger.exception("Scrape of %s failed unexpectedly", target)
            return None
        if count is None:
            logger.debug("Target %s skipped this cycle", target)
        return count

    async def scrape_target(self, target: str) -> int | None:
        return await asyncio.to_thread(self._scrape_blocking, target)

    async def scrape_once(self) -> dict[str, int | None]:
        """Scrape all targets concurrently and wait for every result."""

        results = await asyncio.gather(*(self.scrape_target(t) for t in self.targets))
        self.cycles += 1
        return dict(zip(self.targets, results, strict=True))

    def _spawn_cycle(self) -> None:
        for target in self.targets:
            task = asyncio.create_task(self.scrape_target(target), name=f"scrape:{target}")
            self._inflight.add(task)
            task.add_done_callback(self._inflight.discard)
        self.cycles += 1

    async def run(self, stop: asyncio.Event | None = None) -> None:
        """Run until ``stop`` is set or the task is cancelled."""

        stop = stop or asyncio.Event()
        logger.info("Scraping %d target(s) every %.2fs", len(self.targets), self.interval)
        await self.scrape_once()
        while not stop.is_set():
            with contextlib.suppress(asyncio.TimeoutError):
                await asyncio.wait_for(stop.wait(), timeout=self.interval)
            if stop.is_set():
                break
            self._spawn_cycle()
        logger.debug("Scrape loop stopped after %d cycle(s)", self.cycles)

    @property
    def inflight(self) -> int:
        return len(self._inflight)


__all__ = ["ScrapeScheduler"]
