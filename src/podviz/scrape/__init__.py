"""Scrape transport and scheduling."""

from .client import FetchFn, fetch_exposition, metrics_url, scrape_target
from .scheduler import ScrapeScheduler

__all__ = ["FetchFn", "ScrapeScheduler", "fetch_exposition", "metrics_url", "scrape_target"]
