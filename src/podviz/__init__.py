"""podviz: terminal dashboard for Prometheus-style metrics endpoints."""

from . import config, contracts, dashboard, metrics, navigation, scrape, units

__version__ = "1.0.0"

__all__ = [
    "__version__",
    "config",
    "contracts",
    "dashboard",
    "metrics",
    "navigation",
    "scrape",
    "units",
]
