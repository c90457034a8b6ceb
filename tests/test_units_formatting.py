from __future__ import annotations

import math

import pytest

from podviz.units import (
    ValueFormatter,
    build_classifier,
    format_bytes,
    format_count,
    format_duration,
    format_generic,
    format_raw,
    format_rel_duration,
    format_timestamp,
)

NOW = 1_700_000_000.0


@pytest.fixture(scope="module")
def formatter() -> ValueFormatter:
    return ValueFormatter(build_classifier(), clock=lambda: NOW)


@pytest.mark.parametrize(
    ("value", "text"),
    [
        (0, "0 B"),
        (512, "512 B"),
        (1024, "1.00 KiB"),
        (1536, "1.50 KiB"),
        (1048576, "1.00 MiB"),
        (1073741824, "1.00 GiB"),
        (1099511627776, "1.00 TiB"),
    ],
)
def test_format_bytes(value: float, text: str) -> None:
    assert format_bytes(value) == text


@pytest.mark.parametrize(
    ("seconds", "text"),
    [
        (0.0000001, "100ns"),
        (0.00035, "350.0µs"),
        (0.045, "45.0ms"),
        (1.5, "1.50s"),
        (90, "1.5m"),
        (5400, "1.5h"),
        (172800, "2.0d"),
    ],
)
def test_format_duration(seconds: float, text: str) -> None:
    assert format_duration(seconds) == text


@pytest.mark.parametrize(
    ("value", "text"),
    [(0, "0"), (42, "42"), (999, "999"), (1500, "1.50k"), (2500000, "2.50M"), (3.5e9, "3.50G")],
)
def test_format_count(value: float, text: str) -> None:
    assert format_count(value) == text


@pytest.mark.parametrize(
    ("value", "text"),
    [
        (0, "0"),
        (0.005, "0.0050"),
        (0.15, "0.150"),
        (42.5, "42.50"),
        (1500, "1.50k"),
        (2500000, "2.50M"),
        (-1500, "-1.50k"),
    ],
)
def test_format_generic(value: float, text: str) -> None:
    assert format_generic(value) == text


@pytest.mark.parametrize(
    ("seconds", "text"),
    [
        (45, "45s"),
        (185, "3m5s"),
        (7800, "2h10m"),
        (4 * 86400 + 3 * 3600, "4d3h"),
        (385 * 86400, "1y20d"),
    ],
)
def test_format_rel_duration(seconds: float, text: str) -> None:
    assert format_rel_duration(seconds) == text


def test_format_timestamp_relative_to_now() -> None:
    assert format_timestamp(NOW - 90, NOW) == "1m30s ago"
    assert format_timestamp(NOW + 45, NOW) == "in 45s"
    assert format_timestamp(0, NOW) == "0"


def test_format_raw() -> None:
    assert format_raw(50.0) == "50"
    assert format_raw(42.5) == "42.5"
    assert format_raw(-3.0) == "-3"
    assert format_raw(math.inf) == "inf"


@pytest.mark.parametrize(
    ("name", "value", "text"),
    [
        ("memory_usage_bytes", 1048576, "1.00 MiB"),
        ("memory_usage_megabytes", 256, "256.00 MiB"),
        ("memory_usage_kilobytes", 1024, "1.00 MiB"),
        ("request_duration_seconds", 0.045, "45.0ms"),
        ("request_duration_milliseconds", 45, "45.0ms"),
        ("request_duration_ms", 45, "45.0ms"),
        ("cpu_usage_percent", 65.3, "65.3%"),
        ("http_requests_total", 1500, "1.50k"),
        ("active_connections", 42.5, "42.50"),
        ("process_start_timestamp", NOW - 3600, "1h0m ago"),
    ],
)
def test_format_value_dispatch(
    formatter: ValueFormatter, name: str, value: float, text: str
) -> None:
    assert formatter.format_value(name, value) == text


@pytest.mark.parametrize(
    ("name", "suffix"),
    [
        ("memory_usage_bytes", " [bytes]"),
        ("memory_usage_megabytes", " [bytes]"),
        ("memory_usage_kilobytes", " [bytes]"),
        ("request_duration_seconds", " [duration]"),
        ("request_duration_milliseconds", " [duration]"),
        ("latency_ms", " [duration]"),
        ("cpu_usage_percent", " [%]"),
        ("http_requests_total", " [count]"),
        ("active_connections", ""),
    ],
)
def test_unit_suffix(formatter: ValueFormatter, name: str, suffix: str) -> None:
    assert formatter.unit_suffix(name) == suffix


def test_is_timestamp(formatter: ValueFormatter) -> None:
    assert formatter.is_timestamp("go_memstats_last_gc_time_seconds")
    assert not formatter.is_timestamp("go_gc_duration_seconds")


def test_axis_formatters(formatter: ValueFormatter) -> None:
    axis = formatter.axis_formatter("memory_usage_bytes")
    assert axis(1048576) == "1.00 MiB"
    assert axis(math.nan) == ""
    assert formatter.axis_formatter("request_duration_seconds")(0.045) == "45.0ms"

    rate_axis = ValueFormatter.rate_axis_formatter()
    assert rate_axis(42.5) == "42.50/s"
    assert rate_axis(math.nan) == ""

    age_axis = ValueFormatter.age_axis_formatter()
    assert age_axis(185) == "3m5s"
    assert age_axis(math.nan) == ""


@pytest.mark.parametrize(
    ("value", "text"), [(math.nan, "nan"), (math.inf, "inf"), (-math.inf, "-inf")]
)
def test_non_finite_timestamps_render_raw(
    formatter: ValueFormatter, value: float, text: str
) -> None:
    assert format_timestamp(value, NOW) == text
    assert format_rel_duration(value) == text
    assert formatter.format_value("last_success_timestamp", value) == text
    expected_axis = "" if math.isnan(value) else text
    assert ValueFormatter.age_axis_formatter()(value) == expected_axis
