"""MQTT Sensors - map MQTT sensor payloads to normalised Signal K values"""

__version__ = '1.0.0'
__description__ = 'Configuration driven translation of MQTT sensor messages to SI-unit deltas'

# Core - most fundamental
from .core import MqttSensorsError, ConfigurationError, StateMachine, ConnectionState

# Models - domain objects
from .models import SensorType, SensorBinding, TopicBinding, OutputRecord, MetadataRecord

# Mapping - translation core
from .mapping import TopicRegistry, MessageTranslator, UnitConverter, evaluate

# Services
from .services import SensorBridgeService, publish_metadata

# Protocols
from .protocols import MQTTClient, MQTTClientConfig

__all__ = [
    # Core
    'MqttSensorsError',
    'ConfigurationError',
    'StateMachine',
    'ConnectionState',

    # Models
    'SensorType',
    'SensorBinding',
    'TopicBinding',
    'OutputRecord',
    'MetadataRecord',

    # Mapping
    'TopicRegistry',
    'MessageTranslator',
    'UnitConverter',
    'evaluate',

    # Services
    'SensorBridgeService',
    'publish_metadata',

    # Protocols
    'MQTTClient',
    'MQTTClientConfig'
]
