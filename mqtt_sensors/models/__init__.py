"""Data models and domain objects."""

from .sensor_models import (
    SensorType,
    SensorBinding,
    TopicBinding,
    OutputRecord,
    MetadataRecord
)

__all__ = [
    'SensorType',
    'SensorBinding',
    'TopicBinding',
    'OutputRecord',
    'MetadataRecord'
]
