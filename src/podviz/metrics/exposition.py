"""Line-oriented parser for the text metrics exposition format.

Only the documented subset is understood: ``# HELP``/``# TYPE`` annotations,
comment and blank lines, and ``name{k="v",...} value`` sample lines. Malformed
sample lines are dropped one at a time; they never abort a scrape.
"""

from __future__ import annotations

import logging
from collections.abc import Iterator
from dataclasses import dataclass, field

from .constants import HELP_PREFIX, TYPE_PREFIX
from .series import MetricType
from .store import SeriesStore

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ExpositionSample:
    name: str
    labels: dict[str, str] | None
    help: str
    metric_type: MetricType
    value: float


@dataclass
class _FamilyState:
    base_name: str = ""
    help: str = ""
    metric_type: MetricType = field(default=MetricType.UNKNOWN)

    def announce(self, base_name: str) -> None:
        if base_name != self.base_name:
            self.base_name = base_name
            self.help = ""
            self.metric_type = MetricType.UNKNOWN


def parse_labels(text: str) -> tuple[str, dict[str, str] | None]:
    """Split ``name{k="v",...}`` into the bare name and its labels.

    A missing label block yields ``None``; a block without a closing brace
    degrades to ``None`` as well.
    """

    open_idx = text.find("{")
    if open_idx < 0:
        return text, None
    name = text[:open_idx]
    rest = text[open_idx + 1 :]
    close_idx = rest.find("}")
    if close_idx < 0:
        return name, None
    labels: dict[str, str] = {}
    for pair in rest[:close_idx].split(","):
        pair = pair.strip()
        key, sep, raw = pair.partition("=")
        if not sep:
            continue
        labels[key.strip()] = raw.strip().strip('"')
    return name, labels


def _split_annotation(line: str, prefix: str) -> tuple[str, str | None]:
    parts = line[len(prefix) :].split(" ", 1)
    return parts[0], (parts[1] if len(parts) > 1 else None)


def parse_exposition(body: str) -> Iterator[ExpositionSample]:
    """Yield every parseable sample in ``body`` with its scoped metadata."""

    family = _FamilyState()
    for raw_line in body.splitlines():
        line = raw_line.rstrip("\r")
        if line.startswith(HELP_PREFIX):
            base, text = _split_annotation(line, HELP_PREFIX)
            family.announce(base)
            if text is not None:
                family.help = text
            continue
        if line.startswith(TYPE_PREFIX):
            base, text = _split_annotation(line, TYPE_PREFIX)
            family.announce(base)
            if text is not None:
                family.metric_type = MetricType.parse(text)
            continue
        if not line or line.startswith("#"):
            continue

        metric_part, sep, value_text = line.rpartition(" ")
        if not sep or "_" in value_text:
            continue
        try:
            value = float(value_text)
        except ValueError:
            continue

        name, labels = parse_labels(metric_part)
        if name == family.base_name:
            help_text, metric_type = family.help, family.metric_type
        else:
            help_text, metric_type = "", MetricType.UNKNOWN
        yield ExpositionSample(name, labels, help_text, metric_type, value)


def ingest(body: str, store: SeriesStore) -> int:
    """Parse ``body`` into ``store``; returns the number of samples recorded."""

    count = 0
    for sample in parse_exposition(body):
        store.update(sample.name, sample.labels, sample.help, sample.metric_type, sample.value)
        count += 1
    logger.debug("Ingested %d samples", count)
    return count


__all__ = ["ExpositionSample", "ingest", "parse_exposition", "parse_labels"]
