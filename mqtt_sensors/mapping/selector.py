"""
Selector evaluation: pull one scalar out of a raw MQTT payload.

Selectors are JSONPath expressions (``$.device_temperature``,
``$.sensors[0].value``, ``$.readings[*].value``). A binding without a selector
uses the whole payload text as its value.
"""

import json
import logging
from functools import lru_cache
from typing import Any, Optional, Union

from jsonpath_ng.ext import parse as parse_jsonpath

from mqtt_sensors.core.exceptions import (
    SelectorNotFound,
    SelectorParseError,
    SelectorSyntaxError,
)

logger = logging.getLogger(__name__)


def _reject_constant(token: str):
    raise ValueError(f"non-standard JSON constant {token}")


@lru_cache(maxsize=None)
def compile_selector(selector: str):
    """Compile a JSONPath expression once per distinct string."""
    try:
        return parse_jsonpath(selector)
    except Exception as e:
        raise SelectorSyntaxError(f"Invalid JSON path {selector!r}: {e}") from e


def evaluate(payload: Union[str, bytes], selector: Optional[str] = None) -> Any:
    """
    Return the value a selector picks from ``payload``.

    Raises:
        SelectorParseError: a selector is set and the payload is not JSON.
        SelectorNotFound: the selector matched nothing.
        SelectorSyntaxError: the selector itself is malformed.
    """
    if isinstance(payload, bytes):
        try:
            payload = payload.decode("utf-8")
        except UnicodeDecodeError as e:
            raise SelectorParseError(f"Payload is not valid UTF-8: {e}") from e

    if selector is None or not selector.strip():
        return payload

    expression = compile_selector(selector.strip())

    try:
        document = json.loads(payload, parse_constant=_reject_constant)
    except (ValueError, TypeError) as e:
        raise SelectorParseError(f"Payload is not valid JSON: {e}") from e

    # indexing into a string is not a match
    matches = [
        match for match in expression.find(document)
        if match.context is None or not isinstance(match.context.value, str)
    ]
    if not matches:
        raise SelectorNotFound(f"JSON path {selector} did not return any results")

    # first match in document order wins
    value = matches[0].value
    logger.debug("Parsed %s to find value %r", selector, value)
    return value
