from typing import Any, Dict, Iterable, Iterator, List, Optional, Set, Tuple
import logging

from mqtt_sensors.mapping.units import UnitConverter
from mqtt_sensors.models.sensor_models import MetadataRecord, SensorBinding, TopicBinding


class TopicRegistry:
    """Read-only index of sensor bindings by inbound MQTT topic."""

    def __init__(self, topic_bindings: Iterable[TopicBinding] = (),
                 converter: Optional[UnitConverter] = None):
        self.logger = logging.getLogger(self.__class__.__name__)
        self.converter = converter or UnitConverter()
        self._topics: Dict[str, TopicBinding] = {}

        for binding in topic_bindings:
            existing = self._topics.get(binding.topic)
            if existing is None:
                self._topics[binding.topic] = binding
            else:
                # repeated topic entries are merged in declaration order
                self._topics[binding.topic] = TopicBinding(
                    existing.topic, existing.sensors + binding.sensors
                )

    @classmethod
    def from_config(cls, entries: Any, converter: Optional[UnitConverter] = None) -> "TopicRegistry":
        """Build from ``[{mqtt_topic, sensors: [...]}, ...]``, skipping malformed entries."""
        logger = logging.getLogger(cls.__name__)
        if not isinstance(entries, (list, tuple)):
            logger.info("No MQTT sensor definitions configured")
            return cls((), converter)

        logger.debug("Loading MQTT sensor definitions...")
        bindings: List[TopicBinding] = []
        for index, entry in enumerate(entries):
            if not isinstance(entry, dict):
                logger.warning(f"Skipping topic entry {index}: not an object")
                continue
            topic = str(entry.get("mqtt_topic") or "").strip()
            if not topic:
                logger.warning(f"Skipping topic entry {index}: missing mqtt_topic")
                continue
            raw_sensors = entry.get("sensors")
            if not isinstance(raw_sensors, list):
                logger.warning(f"Skipping topic {topic!r}: sensors must be a list")
                continue

            logger.debug(f"MQTT Topic: {topic}")
            sensors: List[SensorBinding] = []
            for sensor_index, row in enumerate(raw_sensors):
                if not isinstance(row, dict):
                    logger.warning(f"Skipping sensor {sensor_index} of {topic!r}: not an object")
                    continue
                try:
                    sensors.append(SensorBinding.from_row(row))
                except ValueError as e:
                    logger.warning(f"Skipping sensor {sensor_index} of {topic!r}: {e}")
                    continue
                logger.debug(f"  {row}")

            bindings.append(TopicBinding(topic, tuple(sensors)))

        return cls(bindings, converter)

    # ------------------------------------------------------------------ #
    #  Queries
    # ------------------------------------------------------------------ #
    def subscription_topics(self) -> Set[str]:
        return set(self._topics)

    def bindings_for(self, topic: str) -> Tuple[SensorBinding, ...]:
        binding = self._topics.get(topic)
        return binding.sensors if binding else ()

    def all_metadata(self) -> List[MetadataRecord]:
        """One canonical-unit record per sensor whose type has a unit."""
        meta: List[MetadataRecord] = []
        for binding in self._topics.values():
            for sensor in binding.sensors:
                unit = self.converter.canonical_unit(sensor.sensor_type)
                if unit:
                    meta.append(MetadataRecord(sensor.destination_path, unit))
        return meta

    @property
    def topic_bindings(self) -> List[TopicBinding]:
        return list(self._topics.values())

    def __iter__(self) -> Iterator[TopicBinding]:
        return iter(self.topic_bindings)

    def __len__(self) -> int:
        return len(self._topics)
