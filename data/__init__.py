"""
Parameter catalog data.

Static definitions of every monitorable parameter per system type: label,
unit, bound shape, core/optional and measured/derived.
"""

from .parameter_catalog import (
    CATALOG,
    INDEX_INPUT_KEYS,
    ParameterDefinition,
    TemperatureInput,
    describe,
    get_definition,
    input_label,
    temperature_inputs,
)

__all__ = [
    "CATALOG",
    "INDEX_INPUT_KEYS",
    "ParameterDefinition",
    "TemperatureInput",
    "describe",
    "get_definition",
    "input_label",
    "temperature_inputs",
]
