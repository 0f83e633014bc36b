"""
Centralised exception definitions for the MQTT sensors bridge.
All custom exceptions should inherit from MqttSensorsError.
"""

class MqttSensorsError(Exception):
    """Base class for every custom exception thrown by this project."""

class ConfigurationError(MqttSensorsError):
    """Raised when settings or the sensor definition file are unusable."""

class ProtocolError(MqttSensorsError):
    """Generic failure inside the MQTT transport client."""

class SelectorError(MqttSensorsError):
    """A value could not be extracted from a payload for one sensor."""

class SelectorParseError(SelectorError):
    """Payload is not valid JSON although a selector was declared."""

class SelectorNotFound(SelectorError):
    """Selector matched nothing in a well-formed payload."""

class SelectorSyntaxError(SelectorError):
    """Selector expression could not be compiled."""

class ConversionError(MqttSensorsError):
    """Raised when a raw value cannot be normalised for a sensor."""

class NonNumericValue(ConversionError):
    """Raw value is not numeric and the converter is set to skip such values."""
