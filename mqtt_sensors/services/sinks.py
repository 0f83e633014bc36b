"""
Outbound collaborators of the bridge.

A DeltaSink receives translated values and unit metadata; a StatusSink receives
human-readable connection status. The concrete sinks here render Signal K style
delta documents and either log them or republish them on MQTT.
"""

import json
import logging
from abc import ABC, abstractmethod
from collections import deque
from typing import Any, Deque, Dict, Optional, Sequence

from mqtt_sensors.models.sensor_models import MetadataRecord, OutputRecord


def values_delta(records: Sequence[OutputRecord], source_label: Optional[str] = None) -> Dict[str, Any]:
    """Delta document carrying one batch of values."""
    update: Dict[str, Any] = {"values": [record.to_delta() for record in records]}
    if source_label:
        update = {"source": {"label": source_label}, **update}
    return {"updates": [update]}


def meta_delta(records: Sequence[MetadataRecord]) -> Dict[str, Any]:
    """Delta document carrying unit metadata."""
    return {"updates": [{"meta": [record.to_delta() for record in records]}]}


class DeltaSink(ABC):
    """Receives translated batches."""

    @abstractmethod
    def publish_values(self, records: Sequence[OutputRecord]) -> None:
        pass

    @abstractmethod
    def publish_metadata(self, records: Sequence[MetadataRecord]) -> None:
        pass


class StatusSink(ABC):
    """Receives connection / health status text."""

    @abstractmethod
    def report_status(self, message: str, is_error: bool = False) -> None:
        pass


class LoggingDeltaSink(DeltaSink):
    """Writes delta documents to the log."""

    def __init__(self, source_label: Optional[str] = None):
        self.source_label = source_label
        self.logger = logging.getLogger(self.__class__.__name__)

    def publish_values(self, records: Sequence[OutputRecord]) -> None:
        self.logger.info("delta %s", json.dumps(values_delta(records, self.source_label), allow_nan=False))

    def publish_metadata(self, records: Sequence[MetadataRecord]) -> None:
        self.logger.info("meta %s", json.dumps(meta_delta(records), allow_nan=False))


class MqttDeltaSink(DeltaSink):
    """Republishes delta documents as JSON on an MQTT topic."""

    def __init__(self, client, topic: str, source_label: Optional[str] = None, qos: int = 0):
        self.client = client
        self.topic = topic
        self.source_label = source_label
        self.qos = qos
        self.logger = logging.getLogger(self.__class__.__name__)

    def publish_values(self, records: Sequence[OutputRecord]) -> None:
        self.client.publish_message(self.topic, values_delta(records, self.source_label), self.qos)

    def publish_metadata(self, records: Sequence[MetadataRecord]) -> None:
        # retained so late subscribers still learn the units
        self.client.publish_message(self.topic, meta_delta(records), self.qos, retain=True)


class LoggingStatusSink(StatusSink):
    """Logs status changes and remembers the most recent ones."""

    def __init__(self, max_history: int = 50):
        self.logger = logging.getLogger(self.__class__.__name__)
        self.history: Deque[Dict[str, Any]] = deque(maxlen=max_history)

    @property
    def last_status(self) -> Optional[Dict[str, Any]]:
        return self.history[-1] if self.history else None

    def report_status(self, message: str, is_error: bool = False) -> None:
        self.history.append({"message": message, "is_error": is_error})
        if is_error:
            self.logger.error(f"Error: {message}")
        else:
            self.logger.info(message)
