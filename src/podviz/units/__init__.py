"""Unit classification and display formatting."""

from .formatting import (
    ValueFormatter,
    format_bytes,
    format_count,
    format_duration,
    format_generic,
    format_raw,
    format_rel_duration,
    format_timestamp,
)
from .patterns import (
    UnitClassifier,
    UnitMatch,
    UnitRule,
    UnitsConfig,
    build_classifier,
    compile_units,
    load_default_units,
    load_units_config,
    load_units_file,
    merge_units,
)

__all__ = [
    "UnitClassifier",
    "UnitMatch",
    "UnitRule",
    "UnitsConfig",
    "ValueFormatter",
    "build_classifier",
    "compile_units",
    "format_bytes",
    "format_count",
    "format_duration",
    "format_generic",
    "format_raw",
    "format_rel_duration",
    "format_timestamp",
    "load_default_units",
    "load_units_config",
    "load_units_file",
    "merge_units",
]
