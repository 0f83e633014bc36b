"""Transport clients."""

from .mqtt_client import MQTTClient, MQTTClientConfig

__all__ = [
    'MQTTClient',
    'MQTTClientConfig'
]
