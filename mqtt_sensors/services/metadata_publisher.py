import logging

from mqtt_sensors.mapping.registry import TopicRegistry
from mqtt_sensors.services.sinks import DeltaSink

logger = logging.getLogger(__name__)


def publish_metadata(registry: TopicRegistry, sink: DeltaSink) -> int:
    """Announce canonical units for every destination path; returns the batch size."""
    meta = registry.all_metadata()
    if not meta:
        logger.debug("No metadata was created for the configured sensors. Nothing updated")
        return 0

    logger.debug(f"Publishing meta data types {meta}")
    sink.publish_metadata(meta)
    return len(meta)
