from __future__ import annotations

from datetime import datetime, timezone

import pytest

from boltwood_alpaca.utils.exceptions import MalformedTelemetry
from boltwood_alpaca.weather.parser import (
    ALERT_STATUSES,
    CLOUD_CONDITIONS,
    TelemetryParser,
    lookup_condition,
)


def _line(**overrides: str) -> str:
    fields = (
        "2024-01-01 03:15:00.00 C M 5.0 10.0 12.0 15.0 55.0 3.0 20.0 "
        "0 0 0 0 2 1 1 2 0 1"
    ).split()
    for index, value in overrides.items():
        fields[int(index.lstrip("f"))] = value
    return " ".join(fields)


def test_sample_line_conditions(sample_line: str) -> None:
    snapshot = TelemetryParser("UTC").parse(sample_line)

    assert snapshot.cloud_condition == "Light Clouds"
    assert snapshot.wind_condition == "Calm"
    assert snapshot.rain_condition == "Dry"
    assert snapshot.darkness_condition == "Dim"
    assert snapshot.alert_status == "Alert"


def test_sample_line_readings_are_literal_values(sample_line: str) -> None:
    snapshot = TelemetryParser("UTC").parse(sample_line)

    assert snapshot.date == datetime(2024, 1, 1, 3, 15, tzinfo=timezone.utc)
    assert snapshot.temperature_scale == "C"
    assert snapshot.wind_speed_scale == "M"
    assert snapshot.sky_temperature == 5.0
    assert snapshot.ambient_temperature == 10.0
    assert snapshot.sensor_temperature == 12.0
    assert snapshot.wind_speed == 15.0
    assert snapshot.humidity == 55.0
    assert snapshot.dew_point == 3.0
    assert snapshot.dew_heater_percentage == 20.0
    assert snapshot.rain_flag == 0
    assert snapshot.wet_flag == 0


def test_fahrenheit_values_are_not_converted() -> None:
    snapshot = TelemetryParser("UTC").parse(_line(f2="F", f5="50.5"))

    assert snapshot.temperature_scale == "F"
    assert snapshot.ambient_temperature == 50.5


def test_ignored_fields_do_not_matter() -> None:
    snapshot = TelemetryParser("UTC", numeric_policy="strict").parse(
        _line(f13="junk", f14="junk", f19="junk")
    )

    assert snapshot.alert_status == "Alert"


def test_local_timestamp_converted_to_utc() -> None:
    snapshot = TelemetryParser("Europe/Rome").parse(_line())

    # CET is UTC+1 in January
    assert snapshot.date == datetime(2024, 1, 1, 2, 15, tzinfo=timezone.utc)
    assert snapshot.date.utcoffset().total_seconds() == 0


def test_bytes_input_with_trailing_newline() -> None:
    snapshot = TelemetryParser().parse((_line() + "\r\n").encode("ascii"))

    assert snapshot.humidity == 55.0


def test_fewer_than_21_fields_rejected() -> None:
    truncated = " ".join(_line().split()[:20])

    with pytest.raises(MalformedTelemetry, match="got 20"):
        TelemetryParser().parse(truncated)


@pytest.mark.parametrize("content", ["", "\n\n", _line() + "\n" + _line()])
def test_line_count_other_than_one_rejected(content: str) -> None:
    with pytest.raises(MalformedTelemetry):
        TelemetryParser().parse(content)


@pytest.mark.parametrize("date,time", [("2024-13-01", "03:15:00.00"), ("2024-01-01", "3pm")])
def test_bad_date_rejected(date: str, time: str) -> None:
    with pytest.raises(MalformedTelemetry, match="Invalid date"):
        TelemetryParser().parse(_line(f0=date, f1=time))


def test_zero_fill_policy_replaces_bad_numbers() -> None:
    snapshot = TelemetryParser(numeric_policy="zero_fill").parse(
        _line(f8="n/a", f11="x", f15="?")
    )

    assert snapshot.humidity == 0.0
    assert snapshot.rain_flag == 0
    assert snapshot.cloud_condition == "Unknown"
    assert snapshot.ambient_temperature == 10.0


def test_strict_policy_rejects_bad_numbers() -> None:
    with pytest.raises(MalformedTelemetry, match="humidity"):
        TelemetryParser(numeric_policy="strict").parse(_line(f8="n/a"))


@pytest.mark.parametrize("raw", ["nan", "inf", "-Infinity"])
def test_zero_fill_policy_replaces_non_finite_numbers(raw: str) -> None:
    snapshot = TelemetryParser(numeric_policy="zero_fill").parse(_line(f5=raw))

    assert snapshot.ambient_temperature == 0.0


@pytest.mark.parametrize("raw", ["nan", "inf", "-Infinity"])
def test_strict_policy_rejects_non_finite_numbers(raw: str) -> None:
    with pytest.raises(MalformedTelemetry, match="ambient temperature"):
        TelemetryParser(numeric_policy="strict").parse(_line(f5=raw))


def test_date_outside_utc_range_rejected() -> None:
    with pytest.raises(MalformedTelemetry, match="out of range"):
        TelemetryParser("Europe/Rome").parse(_line(f0="0001-01-01", f1="00:30:00.00"))


def test_invalid_numeric_policy() -> None:
    with pytest.raises(ValueError):
        TelemetryParser(numeric_policy="lenient")


def test_unknown_condition_codes() -> None:
    snapshot = TelemetryParser().parse(_line(f15="0", f16="7", f17="-1", f18="4", f20="2"))

    assert snapshot.cloud_condition == "Unknown"
    assert snapshot.wind_condition == "Unknown"
    assert snapshot.rain_condition == "Unknown"
    assert snapshot.darkness_condition == "Unknown"
    assert snapshot.alert_status == "Unknown"


def test_lookup_tables() -> None:
    assert [lookup_condition(CLOUD_CONDITIONS, c) for c in (1, 2, 3)] == [
        "Clear",
        "Light Clouds",
        "Very Cloudy",
    ]
    assert lookup_condition(ALERT_STATUSES, 0) == "No Alert"


def test_snapshot_is_immutable(sample_line: str) -> None:
    snapshot = TelemetryParser().parse(sample_line)

    with pytest.raises(AttributeError):
        snapshot.humidity = 1.0  # type: ignore[misc]


def test_snapshot_to_dict(sample_line: str) -> None:
    data = TelemetryParser().parse(sample_line).to_dict()

    assert data["Date"] == "2024-01-01T03:15:00+00:00"
    assert data["CloudCondition"] == "Light Clouds"
    assert data["WindSpeedScale"] == "M"
    assert len(data) == 17
