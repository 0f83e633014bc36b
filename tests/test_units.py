"""Unit tests for canonical unit conversion."""

from __future__ import annotations

import logging
import math

import pytest

from mqtt_sensors.core.exceptions import NonNumericValue
from mqtt_sensors.mapping.units import (
    NonNumericPolicy,
    UnitConverter,
    canonical_unit,
    coerce_number,
    convert,
)
from mqtt_sensors.models.sensor_models import SensorType


@pytest.mark.parametrize(
    ("unit", "raw", "expected"),
    [
        ("C", 21.5, 294.65),
        ("F", 32, 273.15),
        ("F", "212", 373.15),
        ("K", 300.123, 300.12),
    ],
)
def test_temperature_to_kelvin(unit: str, raw, expected: float) -> None:
    assert convert(SensorType.TEMPERATURE, unit, raw) == expected


@pytest.mark.parametrize(
    ("unit", "raw", "expected"),
    [
        ("Pa", 101325, 101325.0),
        ("hPa", 1013.25, 101325.0),
        ("mmHg", 760, 101324.72),
        ("atm", 1, 101325.0),
    ],
)
def test_pressure_to_pascal(unit: str, raw, expected: float) -> None:
    assert convert(SensorType.PRESSURE, unit, raw) == pytest.approx(expected)


@pytest.mark.parametrize(
    "sensor_type",
    [SensorType.HUMIDITY, SensorType.BATTERY, SensorType.WATER_LEAK, SensorType.OTHER],
)
def test_passthrough_types_keep_raw_value(sensor_type: SensorType) -> None:
    assert convert(sensor_type, "%", "42.123456") == "42.123456"
    assert convert(sensor_type, "", True) is True


def test_unknown_unit_passes_raw_value_with_warning(caplog) -> None:
    with caplog.at_level(logging.WARNING):
        value = convert(SensorType.TEMPERATURE, "R", "500")

    assert value == "500"
    assert "Unknown conversion" in caplog.text


def test_non_numeric_value_propagates_nan(caplog) -> None:
    with caplog.at_level(logging.WARNING):
        value = convert(SensorType.TEMPERATURE, "C", "warm")

    assert math.isnan(value)
    assert "not numeric" in caplog.text


def test_non_numeric_value_skip_policy_raises() -> None:
    converter = UnitConverter(non_numeric_policy=NonNumericPolicy.SKIP)

    with pytest.raises(NonNumericValue):
        converter.convert(SensorType.PRESSURE, "hPa", None)


def test_atm_fallthrough_warning_is_opt_in(caplog) -> None:
    quiet = UnitConverter()
    with caplog.at_level(logging.WARNING):
        assert quiet.convert(SensorType.PRESSURE, "atm", 2) == 202650.0
    assert "Unknown conversion" not in caplog.text

    noisy = UnitConverter(atm_fallthrough_warning=True)
    with caplog.at_level(logging.WARNING):
        assert noisy.convert(SensorType.PRESSURE, "atm", 2) == 202650.0
    assert "Unknown conversion from 'atm' to SI unit for pressure" in caplog.text


def test_coerce_number_tags_results() -> None:
    assert coerce_number(3) == coerce_number(3.0)
    assert coerce_number(" 4.5 ").value == 4.5
    assert coerce_number(True).value == 1.0
    assert coerce_number("abc").is_number is False
    assert coerce_number(None).is_number is False
    assert coerce_number({"a": 1}).is_number is False
    assert math.isnan(coerce_number([]).value)


def test_registered_rule_extends_table() -> None:
    converter = UnitConverter()
    converter.register(SensorType.HUMIDITY, "ratio", lambda v: v * 100, round_to=1)

    assert converter.convert(SensorType.HUMIDITY, "ratio", "0.456") == 45.6
    assert converter.canonical_unit(SensorType.HUMIDITY) == "%"


def test_canonical_units() -> None:
    assert canonical_unit(SensorType.TEMPERATURE) == "K"
    assert canonical_unit(SensorType.PRESSURE) == "Pa"
    assert canonical_unit(SensorType.HUMIDITY) == "%"
    assert canonical_unit(SensorType.BATTERY) == "%"
    assert canonical_unit(SensorType.WATER_LEAK) == "boolean"
    assert canonical_unit(SensorType.OTHER) is None


def test_policy_parse_defaults_to_propagate() -> None:
    assert NonNumericPolicy.parse("SKIP") is NonNumericPolicy.SKIP
    assert NonNumericPolicy.parse("bogus") is NonNumericPolicy.PROPAGATE
    assert NonNumericPolicy.parse(None) is NonNumericPolicy.PROPAGATE


@pytest.mark.parametrize("raw", ["1_000", "nan", "NaN", "inf", "-Infinity", "0x10", float("inf"), float("nan"), 10 ** 400])
def test_coerce_number_rejects_non_decimal_and_non_finite(raw) -> None:
    coerced = coerce_number(raw)

    assert coerced.is_number is False
    assert math.isnan(coerced.value)


def test_coerce_number_accepts_exponent_notation() -> None:
    assert coerce_number("1e3") == coerce_number(1000)
    assert coerce_number("-.5").value == -0.5
    assert coerce_number(b"21.5").value == 21.5
