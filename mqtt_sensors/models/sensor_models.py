from __future__ import annotations
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Optional, Tuple
import logging
import math

log = logging.getLogger(__name__)


###############################################################################
# 1. SENSOR TYPE --------------------------------------------------------------
###############################################################################

class SensorType(Enum):
    """Category of measurement a sensor binding produces."""
    TEMPERATURE = "temperature"
    WATER_LEAK  = "water_leak"
    HUMIDITY    = "humidity"
    BATTERY     = "battery"
    PRESSURE    = "pressure"
    OTHER       = "other"

    @classmethod
    def parse(cls, raw: Any) -> "SensorType":
        """Case-insensitive lookup; unknown tags degrade to OTHER."""
        if isinstance(raw, SensorType):
            return raw
        tag = str(raw or "").strip().lower()
        try:
            return cls(tag)
        except ValueError:
            log.warning("Unknown sensor type %r, treating it as 'other'", raw)
            return cls.OTHER


###############################################################################
# 2. SENSOR BINDING -----------------------------------------------------------
###############################################################################

@dataclass(frozen=True, slots=True)
class SensorBinding:
    """One field extraction + conversion rule of a topic entry."""
    destination_path: str
    sensor_type: SensorType = SensorType.OTHER
    input_unit: str = ""
    selector: Optional[str] = None             # JSONPath, None = whole payload

    # ---------- factory --------------------------------------------------- #
    @classmethod
    def from_row(cls, row: Dict[str, Any]) -> "SensorBinding":
        destination = str(row.get("destination") or "").strip()
        if not destination:
            raise ValueError("sensor has no destination path")
        selector = row.get("json_path")
        if selector is not None:
            selector = str(selector).strip() or None
        return cls(
            destination_path = destination,
            sensor_type      = SensorType.parse(row.get("sensor")),
            input_unit       = str(row.get("unit") or "").strip(),
            selector         = selector,
        )


###############################################################################
# 3. TOPIC BINDING ------------------------------------------------------------
###############################################################################

@dataclass(frozen=True, slots=True)
class TopicBinding:
    """An inbound MQTT topic and the sensors that read from it."""
    topic: str
    sensors: Tuple[SensorBinding, ...] = field(default_factory=tuple)

    def __post_init__(self):
        if not self.topic:
            raise ValueError("topic identifier must not be empty")


###############################################################################
# 4. EPHEMERAL RECORDS --------------------------------------------------------
###############################################################################

@dataclass(frozen=True, slots=True)
class OutputRecord:
    """Normalised value for one destination path, produced per message."""
    destination_path: str
    value: Any

    def to_delta(self) -> Dict[str, Any]:
        value = self.value
        if isinstance(value, float) and not math.isfinite(value):
            value = None                    # JSON has no NaN/Infinity
        return {"path": self.destination_path, "value": value}


@dataclass(frozen=True, slots=True)
class MetadataRecord:
    """Canonical unit announcement for one destination path."""
    destination_path: str
    canonical_unit: str

    def to_delta(self) -> Dict[str, Any]:
        return {"path": self.destination_path, "value": {"units": self.canonical_unit}}
