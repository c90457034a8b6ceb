"""Typed configuration loader for podviz."""

from __future__ import annotations

import logging
import os
import re
import tomllib
from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from .contracts.error import BadInputError, IOErrorEnvelope
from .metrics.constants import (
    DEFAULT_RATE_WINDOW_SECONDS,
    DEFAULT_TARGET,
    METRICS_PATH,
    REFRESH_INTERVAL_SECONDS,
    SCRAPE_INTERVAL_SECONDS,
    SCRAPE_TIMEOUT_SECONDS,
)
from .navigation.state import DEFAULT_PAGE_SIZE, DEFAULT_SERIES_PAGE_SIZE

logger = logging.getLogger(__name__)

_DURATION_UNITS: dict[str, float] = {
    "ns": 1e-9,
    "us": 1e-6,
    "µs": 1e-6,
    "μs": 1e-6,
    "ms": 1e-3,
    "s": 1.0,
    "m": 60.0,
    "h": 3600.0,
}
_DURATION_PART = re.compile(r"(\d+\.?\d*|\.\d+)(ns|us|µs|μs|ms|s|m|h)")


def parse_duration(text: str) -> float:
    """Parse ``10s``, ``1m30s``, ``500ms`` style durations into seconds."""

    raw = text.strip()
    if not raw:
        raise ValueError("empty duration")
    sign = 1.0
    if raw[0] in "+-":
        sign = -1.0 if raw[0] == "-" else 1.0
        raw = raw[1:]
    if raw == "0":
        return 0.0
    total = 0.0
    pos = 0
    while pos < len(raw):
        match = _DURATION_PART.match(raw, pos)
        if match is None:
            raise ValueError(f"invalid duration {text!r}")
        total += float(match.group(1)) * _DURATION_UNITS[match.group(2)]
        pos = match.end()
    return sign * total


def coerce_seconds(value: Any) -> float:
    """Numbers are seconds; strings may be plain numbers or duration strings."""

    if isinstance(value, bool):
        raise ValueError("boolean is not a duration")
    if isinstance(value, int | float):
        return float(value)
    if isinstance(value, str):
        try:
            return float(value)
        except ValueError:
            return parse_duration(value)
    raise ValueError(f"unsupported duration value {value!r}")


def parse_targets(raw: str | Sequence[str]) -> list[str]:
    """Split a comma list of ``host:port`` targets, trimming and skipping empties."""

    parts = raw.split(",") if isinstance(raw, str) else list(raw)
    return [part.strip() for part in parts if part and part.strip()]


@dataclass
class ScrapePolicy:
    targets: list[str] = field(default_factory=lambda: [DEFAULT_TARGET])
    interval: float = SCRAPE_INTERVAL_SECONDS
    timeout: float = SCRAPE_TIMEOUT_SECONDS
    metrics_path: str = METRICS_PATH

    def validate(self) -> None:
        if not self.targets:
            raise BadInputError("scrape.targets must list at least one host:port")
        if self.interval <= 0:
            raise BadInputError("scrape.interval must be > 0")
        if self.timeout <= 0:
            raise BadInputError("scrape.timeout must be > 0")
        if not self.metrics_path.startswith("/"):
            raise BadInputError("scrape.metrics_path must start with '/'")


@dataclass
class DisplayPolicy:
    rate_window: float = DEFAULT_RATE_WINDOW_SECONDS
    refresh_interval: float = REFRESH_INTERVAL_SECONDS
    page_size: int = DEFAULT_PAGE_SIZE
    series_page_size: int = DEFAULT_SERIES_PAGE_SIZE
    patterns_file: str | None = None

    def validate(self) -> None:
        if self.rate_window <= 0:
            raise BadInputError("display.rate_window must be > 0")
        if self.refresh_interval <= 0:
            raise BadInputError("display.refresh_interval must be > 0")
        if self.page_size <= 0:
            raise BadInputError("display.page_size must be > 0")
        if self.series_page_size <= 0:
            raise BadInputError("display.series_page_size must be > 0")


def _table(data: Mapping[str, Any], name: str) -> dict[str, Any]:
    section = data.get(name, {})
    if not isinstance(section, dict):
        raise BadInputError(f"[{name}] section must be a table")
    return dict(section)


def _seconds_field(section: dict[str, Any], table: str, key: str) -> None:
    if key not in section:
        return
    try:
        section[key] = coerce_seconds(section[key])
    except ValueError as exc:
        raise BadInputError(f"{table}.{key} must be a number of seconds or a duration") from exc


@dataclass
class AppConfig:
    scrape: ScrapePolicy = field(default_factory=ScrapePolicy)
    display: DisplayPolicy = field(default_factory=DisplayPolicy)

    @classmethod
    def load(cls, path: Path | None, env: Mapping[str, str] | None = None) -> AppConfig:
        if path is None:
            cfg = cls()
        else:
            try:
                data = tomllib.loads(path.read_text(encoding="utf-8"))
            except FileNotFoundError as exc:
                raise BadInputError(f"Config file not found: {path}") from exc
            except OSError as exc:
                raise IOErrorEnvelope(f"Cannot read config file {path}: {exc}") from exc
            except tomllib.TOMLDecodeError as exc:
                raise BadInputError(f"Invalid TOML: {exc}") from exc
            cfg = cls.from_dict(data)
        cfg.apply_env_overrides(os.environ if env is None else env)
        cfg.validate()
        return cfg

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> AppConfig:
        scrape_data = _table(data, "scrape")
        if "targets" in scrape_data:
            raw_targets = scrape_data["targets"]
            if not isinstance(raw_targets, str | list):
                raise BadInputError("scrape.targets must be a string or a list of strings")
            scrape_data["targets"] = parse_targets(raw_targets)
        _seconds_field(scrape_data, "scrape", "interval")
        _seconds_field(scrape_data, "scrape", "timeout")

        display_data = _table(data, "display")
        _seconds_field(display_data, "display", "rate_window")
        _seconds_field(display_data, "display", "refresh_interval")

        try:
            scrape = ScrapePolicy(**scrape_data)
            display = DisplayPolicy(**display_data)
        except TypeError as exc:
            raise BadInputError(f"Unknown config key: {exc}") from exc
        return cls(scrape=scrape, display=display)

    def apply_env_overrides(self, env: Mapping[str, str]) -> None:
        raw_targets = env.get("METRIC_TARGETS")
        if raw_targets is not None:
            targets = parse_targets(raw_targets)
            if targets:
                self.scrape.targets = targets

        raw_window = env.get("RATE_WINDOW")
        if raw_window:
            try:
                window = parse_duration(raw_window)
            except ValueError:
                logger.warning(
                    "Invalid RATE_WINDOW=%r, keeping %gs", raw_window, self.display.rate_window
                )
            else:
                if window > 0:
                    self.display.rate_window = window
                else:
                    logger.warning("Non-positive RATE_WINDOW=%r ignored", raw_window)

        seconds_overrides: dict[str, str] = {
            "PODVIZ_SCRAPE_INTERVAL": "interval",
            "PODVIZ_SCRAPE_TIMEOUT": "timeout",
        }
        for key, attr in seconds_overrides.items():
            raw_value = env.get(key)
            if raw_value is None:
                continue
            try:
                value = coerce_seconds(raw_value)
            except ValueError as exc:
                raise BadInputError(f"Invalid env override {key}={raw_value!r}") from exc
            setattr(self.scrape, attr, value)

        patterns = env.get("PODVIZ_PATTERNS")
        if patterns:
            self.display.patterns_file = patterns

    def validate(self) -> None:
        self.scrape.validate()
        self.display.validate()


DEFAULT_CONFIG = AppConfig()


def load_app_config(path: str | None, env: Mapping[str, str] | None = None) -> AppConfig:
    """Load config from ``path`` (or ``PODVIZ_CONFIG``) then apply env overrides."""

    environ = os.environ if env is None else env
    chosen = path or environ.get("PODVIZ_CONFIG") or None
    config_path = Path(chosen) if chosen else None
    return AppConfig.load(config_path, environ)


__all__ = [
    "AppConfig",
    "DEFAULT_CONFIG",
    "DisplayPolicy",
    "ScrapePolicy",
    "coerce_seconds",
    "load_app_config",
    "parse_duration",
    "parse_targets",
]
