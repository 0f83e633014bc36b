"""
MQTT transport client.

Wraps paho-mqtt: connects to the broker, (re)subscribes to the sensor topics on
every successful connect, queues inbound messages for the bridge and surfaces
connection changes through a status callback.
"""

import asyncio
import json
import logging
import queue
from datetime import datetime
from typing import Any, Callable, Dict, Iterable, List, Optional, Set, Tuple, Union
from urllib.parse import urlsplit

import paho.mqtt.client as mqtt

from mqtt_sensors.core.exceptions import ProtocolError
from mqtt_sensors.core.state_machine import ConnectionState, StateMachine

StatusCallback = Callable[[str, bool], None]

_SCHEME_PORTS = {"mqtt": 1883, "tcp": 1883, "mqtts": 8883, "ssl": 8883, "tls": 8883}


class MQTTClientConfig:
    """Connection parameters for the broker."""

    def __init__(self,
                 server: str,
                 username: Optional[str] = None,
                 password: Optional[str] = None,
                 client_id: Optional[str] = None,
                 keepalive: int = 60,
                 qos: int = 0,
                 timeout: float = 30.0,
                 min_reconnect_delay: int = 1,
                 max_reconnect_delay: int = 60):
        self.server = server
        self.username = username
        self.password = password
        self.client_id = client_id or f"mqtt_sensors_{int(datetime.now().timestamp())}"
        self.keepalive = keepalive
        self.qos = qos
        self.timeout = timeout
        self.min_reconnect_delay = min_reconnect_delay
        self.max_reconnect_delay = max_reconnect_delay
        self.host, self.port, self.use_tls = self.parse_server(server)

    @staticmethod
    def parse_server(server: str) -> Tuple[str, int, bool]:
        """Split ``mqtt[s]://host[:port]`` (scheme optional) into host, port, tls."""
        if not server or not server.strip():
            raise ProtocolError("MQTT broker address is required")
        candidate = server.strip()
        if "://" not in candidate:
            candidate = f"mqtt://{candidate}"
        parts = urlsplit(candidate)
        scheme = parts.scheme.lower()
        if scheme not in _SCHEME_PORTS:
            raise ProtocolError(f"Unsupported MQTT URL scheme: {parts.scheme}")
        try:
            port = parts.port or _SCHEME_PORTS[scheme]
        except ValueError as e:
            raise ProtocolError(f"Invalid MQTT broker port in {server!r}") from e
        if not parts.hostname:
            raise ProtocolError(f"MQTT broker host missing in {server!r}")
        return parts.hostname, port, scheme in ("mqtts", "ssl", "tls")


class MQTTClient:
    """
    paho-mqtt adapter used by the bridge service.

    Features:
    - Subscription to a fixed topic set, renewed on every reconnect
    - Automatic reconnection with bounded backoff (paho network loop)
    - Thread-safe hand-off of inbound messages through a queue
    - Status reporting for the host application
    """

    def __init__(self, config: MQTTClientConfig,
                 status_callback: Optional[StatusCallback] = None,
                 client_factory: Optional[Callable[..., Any]] = None):
        self.config = config
        self.status_callback = status_callback
        self.logger = logging.getLogger(self.__class__.__name__)
        self.client: Optional[mqtt.Client] = None
        self.message_queue: "queue.Queue[Tuple[str, bytes]]" = queue.Queue()
        self.topics: Set[str] = set()
        self.subscribed_topics: Set[str] = set()
        self.state = StateMachine(ConnectionState.DISCONNECTED)
        self._client_factory = client_factory or mqtt.Client

    # ------------------------------------------------------------------ #
    #  Lifecycle
    # ------------------------------------------------------------------ #
    def _initialize_client(self):
        """Create the paho client and wire callbacks."""
        self.client = self._client_factory(
            callback_api_version=mqtt.CallbackAPIVersion.VERSION2,
            client_id=self.config.client_id,
            clean_session=True,
            protocol=mqtt.MQTTv311,
        )

        if self.config.username:
            self.client.username_pw_set(self.config.username, self.config.password)

        if self.config.use_tls:
            self.client.tls_set()

        self.client.reconnect_delay_set(
            min_delay=self.config.min_reconnect_delay,
            max_delay=self.config.max_reconnect_delay,
        )

        self.client.on_connect = self._on_connect
        self.client.on_connect_fail = self._on_connect_fail
        self.client.on_disconnect = self._on_disconnect
        self.client.on_message = self._on_message
        self.client.on_subscribe = self._on_subscribe
        self.client.on_log = self._on_log

        self.logger.info(f"MQTT client initialized with ID: {self.config.client_id}")

    async def start(self, topics: Iterable[str]) -> bool:
        """
        Connect and subscribe to ``topics``.

        Returns True once connected, False if the broker did not answer within
        the timeout; the network loop keeps retrying in the background either way.
        """
        self.topics = set(topics)
        self.state.transition(ConnectionState.CONNECTING)
        self.logger.info(f"Connecting to MQTT broker at {self.config.host}:{self.config.port}")

        try:
            self._initialize_client()
            self.client.connect_async(
                host=self.config.host,
                port=self.config.port,
                keepalive=self.config.keepalive,
            )
            self.client.loop_start()
        except Exception as e:
            self.state.transition(ConnectionState.ERROR)
            self._report(f"Connection error: {e}", True)
            raise ProtocolError(f"MQTT connection failed: {e}") from e

        loop = asyncio.get_running_loop()
        deadline = loop.time() + self.config.timeout
        while not self.is_connected():
            if loop.time() > deadline:
                self.logger.warning(f"No connection after {self.config.timeout}s, retrying in background")
                return False
            await asyncio.sleep(0.1)
        return True

    async def stop(self):
        """Disconnect and stop the network loop."""
        if self.client is None:
            return
        self.state.transition(ConnectionState.SHUTDOWN)
        try:
            self.logger.info("Disconnecting from MQTT broker")
            self.client.disconnect()
            self.client.loop_stop()
        except Exception as e:
            self.logger.error(f"Error during MQTT disconnection: {e}")
        finally:
            self.subscribed_topics.clear()

    # ------------------------------------------------------------------ #
    #  paho callbacks (network thread)
    # ------------------------------------------------------------------ #
    def _on_connect(self, client, userdata, flags, reason_code, properties=None):
        if reason_code.is_failure:
            self.state.transition(ConnectionState.ERROR)
            self._report(f"Connection error: {reason_code}", True)
            return

        self.state.transition(ConnectionState.CONNECTED)
        self._report(f"Connected to {self.config.server}", False)
        self._subscribe_all()

    def _on_connect_fail(self, client, userdata):
        self.state.transition(ConnectionState.RECONNECTING)
        self._report("Attempting to reconnect to MQTT broker...", False)

    def _on_disconnect(self, client, userdata, disconnect_flags, reason_code, properties=None):
        self.subscribed_topics.clear()
        if self.state.state is ConnectionState.SHUTDOWN:
            return
        if reason_code.is_failure:
            self.logger.warning(f"Unexpected disconnection from MQTT broker ({reason_code})")
            self.state.transition(ConnectionState.RECONNECTING)
            self._report("Disconnected", False)
        else:
            self.state.transition(ConnectionState.DISCONNECTED)
            self._report("Connection closed.", False)

    def _on_message(self, client, userdata, msg):
        self.message_queue.put((msg.topic, msg.payload))
        if self.logger.isEnabledFor(logging.DEBUG):
            self.logger.debug(f"Received message on topic '{msg.topic}': {len(msg.payload)} bytes")

    def _on_subscribe(self, client, userdata, mid, reason_code_list, properties=None):
        failures = [rc for rc in reason_code_list if rc.is_failure]
        if failures:
            self.logger.warning(f"Error subscribing to topics: {failures}")
        else:
            self.logger.debug("Subscribed to all required topics")

    def _on_log(self, client, userdata, level, buf):
        level_map = {
            mqtt.MQTT_LOG_DEBUG: logging.DEBUG,
            mqtt.MQTT_LOG_INFO: logging.INFO,
            mqtt.MQTT_LOG_NOTICE: logging.INFO,
            mqtt.MQTT_LOG_WARNING: logging.WARNING,
            mqtt.MQTT_LOG_ERR: logging.ERROR
        }
        self.logger.log(level_map.get(level, logging.DEBUG), f"MQTT: {buf}")

    # ------------------------------------------------------------------ #
    #  Helpers
    # ------------------------------------------------------------------ #
    def _subscribe_all(self):
        if not self.topics:
            self.logger.warning("No topics configured for subscription")
            return
        self.logger.debug(f"MQTT topics for subscription {sorted(self.topics)}")
        result, _mid = self.client.subscribe([(topic, self.config.qos) for topic in sorted(self.topics)])
        if result != mqtt.MQTT_ERR_SUCCESS:
            self.logger.warning(f"Error subscribing to topics: {result}")
            return
        self.subscribed_topics = set(self.topics)

    def _report(self, message: str, is_error: bool):
        if is_error:
            self.logger.error(message)
        else:
            self.logger.info(message)
        if self.status_callback:
            try:
                self.status_callback(message, is_error)
            except Exception as e:
                self.logger.error(f"Error in status callback: {e}")

    def publish_message(self, topic: str, payload: Any, qos: int = 0, retain: bool = False):
        """Publish a message to a topic."""
        if not self.client or not self.is_connected():
            raise ProtocolError("MQTT client is not connected")

        if isinstance(payload, (dict, list)):
            try:
                payload = json.dumps(payload, allow_nan=False)
            except ValueError as e:
                raise ProtocolError(f"Payload for topic '{topic}' is not valid JSON: {e}") from e
        elif not isinstance(payload, (str, bytes)):
            payload = str(payload)

        result = self.client.publish(topic, payload, qos, retain)
        if result.rc != mqtt.MQTT_ERR_SUCCESS:
            raise ProtocolError(f"Failed to publish message to topic '{topic}': {result.rc}")

        self.logger.debug(f"Published message to topic '{topic}'")
        return result

    def drain_messages(self) -> List[Tuple[str, Union[str, bytes]]]:
        """Pop every queued ``(topic, payload)`` pair."""
        messages = []
        while True:
            try:
                messages.append(self.message_queue.get_nowait())
            except queue.Empty:
                break
        return messages

    def is_connected(self) -> bool:
        return self.state.state is ConnectionState.CONNECTED

    def get_connection_state(self) -> ConnectionState:
        return self.state.state

    def get_subscribed_topics(self) -> List[str]:
        return sorted(self.subscribed_topics)

    def get_stats(self) -> Dict[str, Any]:
        return {
            "server": self.config.server,
            "connection_state": self.state.state.name.lower(),
            "topics": len(self.topics),
            "queued_messages": self.message_queue.qsize(),
        }
