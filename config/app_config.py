"""Centralised application settings (dotenv + env overrides)."""
from __future__ import annotations
import os
from dataclasses import dataclass
from functools import lru_cache
from pathlib import Path
from typing import Optional
from dotenv import load_dotenv

ROOT = Path(__file__).parents[1]
load_dotenv(ROOT / ".env", override=False)

_TRUE = {"1", "true", "yes", "on"}
_FALSE = {"0", "false", "no", "off"}


@dataclass(frozen=True)
class Settings:                            # pylint: disable=too-many-instance-attributes
    MQTT_ENABLED: bool
    MQTT_SERVER: str
    MQTT_USERNAME: Optional[str]
    MQTT_PASSWORD: Optional[str]
    MQTT_CLIENT_ID: Optional[str]
    MQTT_KEEPALIVE: int
    MQTT_QOS: int
    SENSORS_FILE: Path
    DELTA_TOPIC: Optional[str]
    SOURCE_LABEL: str
    ATM_FALLTHROUGH_WARNING: bool
    NON_NUMERIC_POLICY: str
    LOG_LEVEL: str


def _str(name: str, default: Optional[str]) -> Optional[str]:
    value = os.getenv(name)
    if value is None:
        return default
    return value.strip() or default


def _int(name: str, default: int) -> int:
    value = _str(name, None)
    if value is None:
        return default
    try:
        return int(value)
    except ValueError:
        return default


def _bool(name: str, default: bool) -> bool:
    value = (_str(name, None) or "").lower()
    if value in _TRUE:
        return True
    if value in _FALSE:
        return False
    return default


@lru_cache
def get_settings() -> Settings:
    sensors_file = Path(_str("SENSORS_FILE", "sensors.json"))
    if not sensors_file.is_absolute():
        sensors_file = ROOT / sensors_file
    return Settings(
        MQTT_ENABLED            = _bool("MQTT_ENABLED", True),
        MQTT_SERVER             = _str("MQTT_SERVER", "mqtt://localhost:1883"),
        MQTT_USERNAME           = _str("MQTT_USERNAME", None),
        MQTT_PASSWORD           = _str("MQTT_PASSWORD", None),
        MQTT_CLIENT_ID          = _str("MQTT_CLIENT_ID", None),
        MQTT_KEEPALIVE          = _int("MQTT_KEEPALIVE", 60),
        MQTT_QOS                = _int("MQTT_QOS", 0),
        SENSORS_FILE            = sensors_file,
        DELTA_TOPIC             = _str("DELTA_TOPIC", None),
        SOURCE_LABEL            = _str("SOURCE_LABEL", "mqtt-sensors"),
        ATM_FALLTHROUGH_WARNING = _bool("ATM_FALLTHROUGH_WARNING", False),
        NON_NUMERIC_POLICY      = (_str("NON_NUMERIC_POLICY", "propagate")).lower(),
        LOG_LEVEL               = (_str("LOG_LEVEL", "INFO")).upper(),
    )
