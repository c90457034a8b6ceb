from __future__ import annotations

from pathlib import Path

import pytest

from podviz.contracts.error import BadInputError, IOErrorEnvelope
from podviz.units import (
    UnitRule,
    UnitsConfig,
    build_classifier,
    compile_units,
    load_default_units,
    load_units_config,
    load_units_file,
    merge_units,
)

CUSTOM_UNITS = """units:
  - unit: bytes
    suffix: " [B]"
    matchers:
      - "_bytes$"
      - "_octets$"
  - unit: custom
    suffix: " [custom]"
    matchers:
      - "^myprefix_"
"""


def test_default_units_load_in_order() -> None:
    cfg = load_default_units()
    units = cfg.units()
    assert units[0] == "timestamp"
    assert units.index("timestamp") < units.index("duration")
    for rule in cfg.rules:
        assert rule.matchers, f"{rule.unit} has no matchers"
        assert rule.suffix, f"{rule.unit} has no suffix"


@pytest.mark.parametrize(
    ("name", "unit"),
    [
        ("go_memstats_alloc_bytes", "bytes"),
        ("go_memstats_alloc_bytes_total", "bytes"),
        ("go_gc_duration_seconds", "duration"),
        ("request_duration_milliseconds", "duration_ms"),
        ("cpu_usage_percent", "percent"),
        ("disk_ratio", "percent"),
        ("go_memstats_last_gc_time_seconds", "timestamp"),
        ("process_start_timestamp", "timestamp"),
        ("promhttp_metric_handler_requests_total", "count"),
        ("memory_usage_megabytes", "megabytes"),
        ("cache_kilobytes", "kilobytes"),
        ("unknown_metric", None),
    ],
)
def test_default_classifier_matches(name: str, unit: str | None) -> None:
    match = compile_units(load_default_units()).match(name)
    assert (match.unit if match else None) == unit


def test_first_matching_rule_wins() -> None:
    cfg = UnitsConfig(
        rules=(
            UnitRule("timestamp", " [time]", ("_time_seconds$",)),
            UnitRule("duration", " [duration]", ("_seconds$",)),
        )
    )
    match = compile_units(cfg).match("last_gc_time_seconds")
    assert match is not None and match.unit == "timestamp"
    flipped = compile_units(UnitsConfig(rules=tuple(reversed(cfg.rules))))
    match = flipped.match("last_gc_time_seconds")
    assert match is not None and match.unit == "duration"


def test_matching_is_unanchored_search() -> None:
    cfg = UnitsConfig(rules=(UnitRule("special", " [s]", ("myapp",)),))
    assert compile_units(cfg).match("prefix_myapp_total") is not None


def test_merge_override_replaces_whole_rule() -> None:
    base = UnitsConfig(
        rules=(
            UnitRule("bytes", " [bytes]", ("_bytes$",)),
            UnitRule("duration", " [duration]", ("_seconds$",)),
        )
    )
    override = UnitsConfig(
        rules=(
            UnitRule("bytes", " [B]", ("_bytes$", "_octets$")),
            UnitRule("custom", " [custom]", ("_custom$",)),
        )
    )
    merged = merge_units(base, override)
    assert merged.units() == ["bytes", "custom", "duration"]
    bytes_rule = merged.get("bytes")
    assert bytes_rule is not None
    assert bytes_rule.matchers == ("_bytes$", "_octets$")
    assert bytes_rule.suffix == " [B]"
    assert merged.get("duration") == base.get("duration")


def test_merge_without_override_returns_base() -> None:
    base = UnitsConfig(rules=(UnitRule("bytes", " [bytes]", ("_bytes$",)),))
    assert merge_units(base, None) == base


def test_load_units_file(tmp_path: Path) -> None:
    path = tmp_path / "units.yaml"
    path.write_text(CUSTOM_UNITS, encoding="utf-8")
    cfg = load_units_file(path)
    assert cfg.units() == ["bytes", "custom"]
    assert cfg.rules[0].matchers == ("_bytes$", "_octets$")


def test_empty_matchers_and_suffix_are_accepted() -> None:
    cfg = load_units_config("units:\n  - unit: bare\n")
    assert cfg.rules == (UnitRule("bare", "", ()),)
    assert len(compile_units(cfg)) == 0
    assert load_units_config("") == UnitsConfig()


@pytest.mark.parametrize(
    "document",
    [
        "units: [1, 2]",
        "units:\n  - suffix: x\n",
        "units: nope",
        "- just\n- a list\n",
        "units:\n  - unit: a\n    matchers: [1]\n",
        "units: [",
    ],
)
def test_malformed_documents_raise_bad_input(document: str) -> None:
    with pytest.raises(BadInputError):
        load_units_config(document)


def test_invalid_regex_fails_whole_compile() -> None:
    cfg = UnitsConfig(
        rules=(
            UnitRule("ok", " [ok]", ("_ok$",)),
            UnitRule("broken", " [x]", ("([unclosed",)),
        )
    )
    with pytest.raises(BadInputError, match="broken"):
        compile_units(cfg)


def test_build_classifier_merges_user_file(tmp_path: Path, podviz_caplog) -> None:
    path = tmp_path / "custom.yaml"
    path.write_text(CUSTOM_UNITS, encoding="utf-8")
    classifier = build_classifier(path)

    custom = classifier.match("myprefix_metric")
    assert custom is not None and custom.unit == "custom"
    octets = classifier.match("memory_octets")
    assert octets is not None and octets.suffix == " [B]"
    duration = classifier.match("go_gc_duration_seconds")
    assert duration is not None and duration.unit == "duration"
    assert "Loaded unit pattern overrides" in podviz_caplog.text


def test_build_classifier_missing_file_is_io_error(tmp_path: Path) -> None:
    with pytest.raises(IOErrorEnvelope):
        build_classifier(tmp_path / "nonexistent" / "path.yaml")


def test_build_classifier_defaults_only() -> None:
    classifier = build_classifier(None)
    assert len(classifier) == len(
        [expr for rule in load_default_units().rules for expr in rule.matchers]
    )
