"""Central coordinator: startup, message pump and shutdown of the sensor bridge."""
from __future__ import annotations
import asyncio
import logging
from typing import List, Optional, Union

from mqtt_sensors.core.exceptions import ConfigurationError, MqttSensorsError, ProtocolError
from mqtt_sensors.mapping.registry import TopicRegistry
from mqtt_sensors.mapping.translator import MessageTranslator
from mqtt_sensors.mapping.units import NonNumericPolicy, UnitConverter
from mqtt_sensors.models.sensor_models import OutputRecord
from mqtt_sensors.protocols.mqtt_client import MQTTClient, MQTTClientConfig
from mqtt_sensors.services.definitions import load_sensor_definitions
from mqtt_sensors.services.metadata_publisher import publish_metadata
from mqtt_sensors.services.sinks import (
    DeltaSink,
    LoggingDeltaSink,
    LoggingStatusSink,
    MqttDeltaSink,
    StatusSink,
)


class SensorBridgeService:
    def __init__(self,
                 registry: TopicRegistry,
                 delta_sink: DeltaSink,
                 status_sink: Optional[StatusSink] = None,
                 transport: Optional[MQTTClient] = None,
                 poll_interval: float = 0.1):
        self.registry = registry
        self.translator = MessageTranslator(registry)
        self.delta_sink = delta_sink
        self.status_sink = status_sink or LoggingStatusSink()
        self.transport = transport
        self.poll_interval = poll_interval
        self.running = False
        self.metadata_pending = False
        self.log = logging.getLogger(self.__class__.__name__)

    # --------------------------------------------------------------------- #
    #  Wiring
    # --------------------------------------------------------------------- #
    @classmethod
    def from_settings(cls, settings) -> "SensorBridgeService":
        """Build the bridge from application settings (see config.app_config)."""
        converter = UnitConverter(
            non_numeric_policy=NonNumericPolicy.parse(settings.NON_NUMERIC_POLICY),
            atm_fallthrough_warning=settings.ATM_FALLTHROUGH_WARNING,
        )
        entries = load_sensor_definitions(settings.SENSORS_FILE)
        registry = TopicRegistry.from_config(entries, converter)
        status_sink = LoggingStatusSink()

        transport = None
        if settings.MQTT_ENABLED:
            try:
                client_config = MQTTClientConfig(
                    server=settings.MQTT_SERVER,
                    username=settings.MQTT_USERNAME,
                    password=settings.MQTT_PASSWORD,
                    client_id=settings.MQTT_CLIENT_ID,
                    keepalive=settings.MQTT_KEEPALIVE,
                    qos=settings.MQTT_QOS,
                )
            except ProtocolError as e:
                raise ConfigurationError(str(e)) from e
            transport = MQTTClient(client_config, status_callback=status_sink.report_status)

        if transport is not None and settings.DELTA_TOPIC:
            delta_sink: DeltaSink = MqttDeltaSink(
                transport, settings.DELTA_TOPIC, settings.SOURCE_LABEL, settings.MQTT_QOS
            )
        else:
            delta_sink = LoggingDeltaSink(settings.SOURCE_LABEL)

        return cls(registry, delta_sink, status_sink, transport)

    # --------------------------------------------------------------------- #
    #  Public API
    # --------------------------------------------------------------------- #
    async def startup(self):
        self.log.info("starting with %d topic bindings", len(self.registry))
        for binding in self.registry:
            self.log.debug("MQTT Topic: %s (%d sensors)", binding.topic, len(binding.sensors))

        self.running = True
        if self.transport is None:
            self.status_sink.report_status("MQTT disabled, not connecting", False)
        else:
            try:
                await self.transport.start(self.registry.subscription_topics())
            except ProtocolError as e:
                self.log.error("transport did not start: %s", e)
                self.status_sink.report_status(f"Transport error: {e}", True)

        self._publish_metadata()

    def _publish_metadata(self):
        self.log.debug("Updating server with SignalK metadata units")
        try:
            publish_metadata(self.registry, self.delta_sink)
        except MqttSensorsError as e:
            # retried by run() once the transport reports a connection
            self.metadata_pending = True
            self.log.warning("metadata not published yet: %s", e)
        else:
            self.metadata_pending = False

    def handle_message(self, topic: str, payload: Union[str, bytes]) -> List[OutputRecord]:
        """Translate one inbound message and forward the batch to the delta sink."""
        records = self.translator.translate(topic, payload)
        if not self.registry.bindings_for(topic):
            return records
        try:
            self.delta_sink.publish_values(records)
        except MqttSensorsError as e:
            self.log.error("delta for %s not delivered: %s", topic, e)
            self.status_sink.report_status(f"Delivery error: {e}", True)
        return records

    async def run(self):
        """Pump queued transport messages until shutdown()."""
        if self.transport is None:
            self.log.info("no transport configured, nothing to pump")
            return
        while self.running:
            if self.metadata_pending and self.transport.is_connected():
                self._publish_metadata()
            for topic, payload in self.transport.drain_messages():
                self.handle_message(topic, payload)
            await asyncio.sleep(self.poll_interval)

    async def shutdown(self):
        self.log.info("stopping")
        self.running = False
        if self.transport is not None:
            await self.transport.stop()
