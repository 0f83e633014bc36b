from __future__ import annotations

from typing import List, Sequence

import pytest

from mqtt_sensors.mapping.registry import TopicRegistry
from mqtt_sensors.mapping.translator import MessageTranslator
from mqtt_sensors.models.sensor_models import MetadataRecord, OutputRecord
from mqtt_sensors.services.sinks import DeltaSink

CABIN_TOPIC = "zigbee2mqtt/Front Cabin Water Sensor"
PRESSURE_TOPIC = "weather/outside/pressure"


@pytest.fixture()
def sensor_entries() -> list:
    return [
        {
            "mqtt_topic": CABIN_TOPIC,
            "sensors": [
                {
                    "json_path": "$.device_temperature",
                    "destination": "environment.inside.cabinFront.temperature",
                    "sensor": "temperature",
                    "unit": "C",
                },
                {
                    "json_path": "$.water_leak",
                    "destination": "environment.inside.cabinFront.water_leak",
                    "sensor": "water_leak",
                    "unit": "boolean",
                },
                {
                    "json_path": "$.linkquality",
                    "destination": "environment.inside.cabinFront.linkquality",
                    "sensor": "other",
                },
            ],
        },
        {
            "mqtt_topic": PRESSURE_TOPIC,
            "sensors": [
                {
                    "destination": "environment.outside.pressure",
                    "sensor": "pressure",
                    "unit": "hPa",
                }
            ],
        },
    ]


@pytest.fixture()
def registry(sensor_entries) -> TopicRegistry:
    return TopicRegistry.from_config(sensor_entries)


@pytest.fixture()
def translator(registry) -> MessageTranslator:
    return MessageTranslator(registry)


class RecordingSink(DeltaSink):
    """Delta sink that keeps every batch it receives."""

    def __init__(self) -> None:
        self.values: List[List[OutputRecord]] = []
        self.metadata: List[List[MetadataRecord]] = []

    def publish_values(self, records: Sequence[OutputRecord]) -> None:
        self.values.append(list(records))

    def publish_metadata(self, records: Sequence[MetadataRecord]) -> None:
        self.metadata.append(list(records))
