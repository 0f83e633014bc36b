from typing import List, Optional, Union
import logging

from mqtt_sensors.core.exceptions import ConversionError, SelectorError
from mqtt_sensors.mapping.registry import TopicRegistry
from mqtt_sensors.mapping.selector import evaluate
from mqtt_sensors.mapping.units import UnitConverter
from mqtt_sensors.models.sensor_models import OutputRecord, SensorBinding


class MessageTranslator:
    """Turns one inbound MQTT message into output records for every bound sensor."""

    def __init__(self, registry: TopicRegistry, converter: Optional[UnitConverter] = None):
        self.registry = registry
        self.converter = converter or registry.converter
        self.logger = logging.getLogger(self.__class__.__name__)

    def translate(self, topic: str, payload: Union[str, bytes]) -> List[OutputRecord]:
        """
        Translate a payload received on ``topic``.

        Never raises; sensors whose value cannot be extracted or converted are
        left out of the result, which keeps declaration order for the rest.
        """
        sensors = self.registry.bindings_for(topic)
        if not sensors:
            self.logger.debug(f"Couldn't find a registration for MQTT topic {topic}")
            return []

        self.logger.debug(f"Processing topic {topic}")
        records: List[OutputRecord] = []
        for sensor in sensors:
            record = self._translate_sensor(sensor, payload)
            if record is not None:
                records.append(record)

        self.logger.debug(f"Found deltas: {records}")
        return records

    def _translate_sensor(self, sensor: SensorBinding,
                          payload: Union[str, bytes]) -> Optional[OutputRecord]:
        try:
            raw_value = evaluate(payload, sensor.selector)
        except SelectorError as e:
            self.logger.debug(f"Skipping {sensor.destination_path}: {e}")
            return None
        except Exception as e:
            self.logger.error(f"Error finding value for {sensor.destination_path}: {e}", exc_info=True)
            return None

        try:
            value = self.converter.convert(sensor.sensor_type, sensor.input_unit, raw_value)
        except ConversionError as e:
            self.logger.debug(f"Skipping {sensor.destination_path}: {e}")
            return None
        except Exception as e:
            self.logger.error(f"Conversion failed for {sensor.destination_path}: {e}", exc_info=True)
            return None

        self.logger.debug(
            f"Preparing delta for {sensor.sensor_type.value} with unit "
            f"{sensor.input_unit} to path {sensor.destination_path}"
        )
        return OutputRecord(sensor.destination_path, value)
