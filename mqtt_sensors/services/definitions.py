"""Reads the sensor definition file (JSON) that feeds the topic registry."""
from __future__ import annotations
import json
import logging
from pathlib import Path
from typing import Any, List, Union

from mqtt_sensors.core.exceptions import ConfigurationError

logger = logging.getLogger(__name__)


def load_sensor_definitions(path: Union[str, Path]) -> List[Any]:
    """
    Return the list of topic entries stored in ``path``.

    The file holds either the list itself or an object with a ``from`` key
    (the plugin options layout). Anything else yields an empty list.
    """
    path = Path(path)
    try:
        raw = path.read_text(encoding="utf-8")
    except FileNotFoundError as e:
        raise ConfigurationError(f"Sensor definition file not found: {path}") from e
    except OSError as e:
        raise ConfigurationError(f"Cannot read sensor definition file {path}: {e}") from e

    try:
        document = json.loads(raw)
    except json.JSONDecodeError as e:
        raise ConfigurationError(f"Sensor definition file {path} is not valid JSON: {e}") from e

    if isinstance(document, dict):
        document = document.get("from")
    if not isinstance(document, list):
        logger.warning(f"No topic list found in {path}")
        return []

    logger.info(f"Loaded {len(document)} topic definitions from {path}")
    return document
