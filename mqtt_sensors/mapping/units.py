"""Unit normalisation of extracted sensor values to canonical SI units."""

import logging
import math
import re
from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, Dict, Optional, Tuple

from mqtt_sensors.core.exceptions import NonNumericValue
from mqtt_sensors.models.sensor_models import SensorType

# plain decimal notation only: no "nan", "inf" or "1_000"
_DECIMAL = re.compile(r"[+-]?(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?")


CANONICAL_UNITS: Dict[SensorType, Optional[str]] = {
    SensorType.TEMPERATURE: "K",        # Kelvin
    SensorType.PRESSURE:    "Pa",       # Pascal
    SensorType.HUMIDITY:    "%",
    SensorType.BATTERY:     "%",
    SensorType.WATER_LEAK:  "boolean",  # presence/absence
    SensorType.OTHER:       None,
}


class NonNumericPolicy(Enum):
    """What to do when a value that needs arithmetic is not a number."""
    PROPAGATE = "propagate"     # convert anyway, result is NaN
    SKIP = "skip"               # raise NonNumericValue, sensor is dropped

    @classmethod
    def parse(cls, raw: Any) -> "NonNumericPolicy":
        if isinstance(raw, NonNumericPolicy):
            return raw
        try:
            return cls(str(raw or "").strip().lower())
        except ValueError:
            return cls.PROPAGATE


@dataclass(frozen=True)
class Coercion:
    """Result of a best-effort numeric parse."""
    value: float
    is_number: bool


def _finite(number: float) -> Coercion:
    if math.isfinite(number):
        return Coercion(number, True)
    return Coercion(math.nan, False)


def coerce_number(value: Any) -> Coercion:
    """Coerce an extracted value to float, tagging whether it worked."""
    if isinstance(value, bool):
        return Coercion(float(value), True)
    if isinstance(value, (int, float)):
        try:
            return _finite(float(value))
        except OverflowError:
            return Coercion(math.nan, False)
    if isinstance(value, bytes):
        value = value.decode("utf-8", errors="replace")
    if isinstance(value, str):
        text = value.strip()
        if not _DECIMAL.fullmatch(text):
            return Coercion(math.nan, False)
        return _finite(float(text))
    return Coercion(math.nan, False)


@dataclass(frozen=True)
class ConversionRule:
    """Arithmetic turning one input unit into the canonical unit of a sensor type."""
    func: Callable[[float], float]
    round_to: Optional[int] = 2
    warn_after: bool = False


class UnitConverter:
    """
    Lookup table of (sensor type, input unit) -> conversion rule.

    Sensor types with no rules at all pass values through untouched. Sensor
    types that have rules but not for the declared unit also pass the raw value
    through, with a warning, so a partially configured sensor still reports.
    """

    def __init__(self,
                 non_numeric_policy: NonNumericPolicy = NonNumericPolicy.PROPAGATE,
                 atm_fallthrough_warning: bool = False):
        self.non_numeric_policy = NonNumericPolicy.parse(non_numeric_policy)
        self.atm_fallthrough_warning = atm_fallthrough_warning
        self.logger = logging.getLogger(self.__class__.__name__)
        self._rules: Dict[Tuple[SensorType, str], ConversionRule] = {}
        self._canonical: Dict[SensorType, Optional[str]] = dict(CANONICAL_UNITS)
        self._register_defaults()

    def _register_defaults(self):
        temperature = SensorType.TEMPERATURE
        self.register(temperature, "F", lambda v: (v - 32) / 1.8 + 273.15)
        self.register(temperature, "C", lambda v: v + 273.15)
        self.register(temperature, "K", lambda v: v)

        pressure = SensorType.PRESSURE
        self.register(pressure, "Pa", lambda v: v)
        self.register(pressure, "hPa", lambda v: v * 100.0)
        self.register(pressure, "mmHg", lambda v: v * 133.322)
        self.register(pressure, "atm", lambda v: v * 101325.0,
                      warn_after=self.atm_fallthrough_warning)

    def register(self, sensor_type: SensorType, unit: str, func: Callable[[float], float],
                 canonical_unit: Optional[str] = None, round_to: Optional[int] = 2,
                 warn_after: bool = False):
        """Add or replace a conversion rule."""
        self._rules[(sensor_type, unit)] = ConversionRule(func, round_to, warn_after)
        if canonical_unit is not None:
            self._canonical[sensor_type] = canonical_unit

    def canonical_unit(self, sensor_type: SensorType) -> Optional[str]:
        return self._canonical.get(sensor_type)

    def has_rules(self, sensor_type: SensorType) -> bool:
        return any(key[0] is sensor_type for key in self._rules)

    def convert(self, sensor_type: SensorType, input_unit: str, raw_value: Any) -> Any:
        """Normalise ``raw_value`` to the canonical unit of ``sensor_type``."""
        rule = self._rules.get((sensor_type, input_unit))

        if rule is None:
            if self.has_rules(sensor_type):
                self.logger.warning(
                    f"Unknown conversion from {input_unit!r} to SI unit for {sensor_type.value}"
                )
            else:
                self.logger.debug(f"No data type conversion for {sensor_type.value}")
            return raw_value

        coerced = coerce_number(raw_value)
        if not coerced.is_number:
            if self.non_numeric_policy is NonNumericPolicy.SKIP:
                raise NonNumericValue(
                    f"Value {raw_value!r} for {sensor_type.value} is not numeric"
                )
            self.logger.warning(f"Value {raw_value!r} for {sensor_type.value} is not numeric")

        value = rule.func(coerced.value)
        if rule.round_to is not None:
            value = round(value, rule.round_to)

        self.logger.debug(
            f"Converting {sensor_type.value} from {input_unit} to "
            f"{self.canonical_unit(sensor_type)}: {value}"
        )
        if rule.warn_after:
            self.logger.warning(
                f"Unknown conversion from {input_unit!r} to SI unit for {sensor_type.value}"
            )
        return value


_default_converter = UnitConverter()


def convert(sensor_type: SensorType, input_unit: str, raw_value: Any) -> Any:
    """Convert with the default policy (NaN propagation, no atm warning)."""
    return _default_converter.convert(sensor_type, input_unit, raw_value)


def canonical_unit(sensor_type: SensorType) -> Optional[str]:
    return _default_converter.canonical_unit(sensor_type)
