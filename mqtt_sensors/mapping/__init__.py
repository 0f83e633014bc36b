"""Payload extraction, unit normalisation and topic-to-sensor mapping."""

from .selector import evaluate, compile_selector
from .units import (
    CANONICAL_UNITS,
    Coercion,
    ConversionRule,
    NonNumericPolicy,
    UnitConverter,
    coerce_number,
    convert,
    canonical_unit
)
from .registry import TopicRegistry
from .translator import MessageTranslator

__all__ = [
    # Selector
    'evaluate',
    'compile_selector',

    # Units
    'CANONICAL_UNITS',
    'Coercion',
    'ConversionRule',
    'NonNumericPolicy',
    'UnitConverter',
    'coerce_number',
    'convert',
    'canonical_unit',

    # Registry / translation
    'TopicRegistry',
    'MessageTranslator'
]
