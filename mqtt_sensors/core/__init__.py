# mqtt_sensors/core/__init__.py
"""Core infrastructure components for the MQTT sensors bridge."""

from .exceptions import (
    MqttSensorsError,
    ConfigurationError,
    ProtocolError,
    SelectorError,
    SelectorParseError,
    SelectorNotFound,
    SelectorSyntaxError,
    ConversionError,
    NonNumericValue,
)
from .state_machine import StateMachine, ConnectionState


__all__ = [
    "StateMachine",
    "ConnectionState",
    "MqttSensorsError",
    "ConfigurationError",
    "ProtocolError",
    "SelectorError",
    "SelectorParseError",
    "SelectorNotFound",
    "SelectorSyntaxError",
    "ConversionError",
    "NonNumericValue",
]
