"""Regex-based unit classification with base/override merge semantics.

Unit documents look like::

    units:
      - unit: bytes
        suffix: " [bytes]"
        matchers: ["_bytes$", "_octets$"]

The compiled :class:`UnitClassifier` is immutable and passed explicitly to
whatever needs unit lookups; there is no process-wide instance.
"""

from __future__ import annotations

import logging
import re
from collections.abc import Iterable
from dataclasses import dataclass, field
from importlib import resources
from pathlib import Path
from typing import Any

import yaml

from ..contracts.error import BadInputError, IOErrorEnvelope

logger = logging.getLogger(__name__)

DEFAULT_PATTERNS_RESOURCE = "patterns_default.yaml"


@dataclass(frozen=True)
class UnitRule:
    unit: str
    suffix: str = ""
    matchers: tuple[str, ...] = ()


@dataclass(frozen=True)
class UnitsConfig:
    rules: tuple[UnitRule, ...] = field(default_factory=tuple)

    def units(self) -> list[str]:
        return [rule.unit for rule in self.rules]

    def get(self, unit: str) -> UnitRule | None:
        for rule in self.rules:
            if rule.unit == unit:
                return rule
        return None


@dataclass(frozen=True)
class UnitMatch:
    unit: str
    suffix: str


def _coerce_rule(entry: Any, position: int) -> UnitRule:
    if not isinstance(entry, dict):
        raise BadInputError(f"units[{position}] must be a mapping")
    unit = entry.get("unit")
    if not isinstance(unit, str) or not unit:
        raise BadInputError(f"units[{position}].unit must be a non-empty string")
    suffix = entry.get("suffix", "")
    if suffix is None:
        suffix = ""
    if not isinstance(suffix, str):
        raise BadInputError(f"units[{position}].suffix must be a string")
    matchers = entry.get("matchers") or []
    if not isinstance(matchers, list) or not all(isinstance(m, str) for m in matchers):
        raise BadInputError(f"units[{position}].matchers must be a list of strings")
    return UnitRule(unit=unit, suffix=suffix, matchers=tuple(matchers))


def load_units_config(text: str) -> UnitsConfig:
    """Parse a YAML unit document into an ordered :class:`UnitsConfig`.

    Rules with no matchers or an empty suffix are accepted as-is.
    """

    try:
        data = yaml.safe_load(text)
    except yaml.YAMLError as exc:
        raise BadInputError(f"Invalid units YAML: {exc}") from exc
    if data is None:
        return UnitsConfig()
    if not isinstance(data, dict):
        raise BadInputError("Units document must be a mapping with a 'units' list")
    entries = data.get("units") or []
    if not isinstance(entries, list):
        raise BadInputError("'units' must be a list")
    return UnitsConfig(rules=tuple(_coerce_rule(entry, idx) for idx, entry in enumerate(entries)))


def load_default_units() -> UnitsConfig:
    text = resources.files(__package__).joinpath(DEFAULT_PATTERNS_RESOURCE).read_text("utf-8")
    return load_units_config(text)


def load_units_file(path: str | Path) -> UnitsConfig:
    target = Path(path).expanduser()
    try:
        text = target.read_text(encoding="utf-8")
    except OSError as exc:
        raise IOErrorEnvelope(f"Cannot read units file {str(target)!r}: {exc}") from exc
    return load_units_config(text)


def merge_units(base: UnitsConfig, override: UnitsConfig | None) -> UnitsConfig:
    """Override rules replace same-unit base rules wholesale.

    The result lists every override rule first, then the base rules whose unit
    the override does not mention, each side in its original order.
    """

    if override is None:
        return base
    seen = {rule.unit for rule in override.rules}
    merged = list(override.rules)
    merged.extend(rule for rule in base.rules if rule.unit not in seen)
    return UnitsConfig(rules=tuple(merged))


@dataclass(frozen=True)
class _CompiledUnit:
    unit: str
    suffix: str
    pattern: re.Pattern[str]


class UnitClassifier:
    """First-match-wins lookup over compiled unit patterns."""

    __slots__ = ("_units",)

    def __init__(self, units: Iterable[_CompiledUnit] = ()) -> None:
        self._units: tuple[_CompiledUnit, ...] = tuple(units)

    def __len__(self) -> int:
        return len(self._units)

    def match(self, name: str) -> UnitMatch | None:
        for compiled in self._units:
            if compiled.pattern.search(name):
                return UnitMatch(unit=compiled.unit, suffix=compiled.suffix)
        return None


def compile_units(config: UnitsConfig) -> UnitClassifier:
    """Compile every matcher in configuration order; any bad regex fails the whole set."""

    compiled: list[_CompiledUnit] = []
    for rule in config.rules:
        for expr in rule.matchers:
            try:
                pattern = re.compile(expr)
            except re.error as exc:
                raise BadInputError(
                    f"Cannot compile pattern {expr!r} for unit {rule.unit!r}: {exc}"
                ) from exc
            compiled.append(_CompiledUnit(rule.unit, rule.suffix, pattern))
    return UnitClassifier(compiled)


def build_classifier(user_file: str | Path | None = None) -> UnitClassifier:
    """Defaults merged with an optional user override file, compiled."""

    base = load_default_units()
    override = None
    if user_file:
        override = load_units_file(user_file)
        logger.info("Loaded unit pattern overrides from %s", user_file)
    return compile_units(merge_units(base, override))


__all__ = [
    "UnitClassifier",
    "UnitMatch",
    "UnitRule",
    "UnitsConfig",
    "build_classifier",
    "compile_units",
    "load_default_units",
    "load_units_config",
    "load_units_file",
    "merge_units",
]
