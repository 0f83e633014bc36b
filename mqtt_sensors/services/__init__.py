"""Business logic services."""

from .bridge_service import SensorBridgeService
from .definitions import load_sensor_definitions
from .metadata_publisher import publish_metadata
from .sinks import (
    DeltaSink,
    StatusSink,
    LoggingDeltaSink,
    LoggingStatusSink,
    MqttDeltaSink,
    values_delta,
    meta_delta
)

__all__ = [
    'SensorBridgeService',
    'load_sensor_definitions',
    'publish_metadata',
    'DeltaSink',
    'StatusSink',
    'LoggingDeltaSink',
    'LoggingStatusSink',
    'MqttDeltaSink',
    'values_delta',
    'meta_delta'
]
