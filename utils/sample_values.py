"""
Sample value coercion.

Operators type values into forms, so a sample mixes numbers, numeric strings,
blank strings and None. The rules here are the single definition of
"present":

- None, "" and whitespace-only strings are absent
- Anything that parses to a finite float is present, including 0 and "0"
- Booleans, NaN, infinities, integers too large for a float and
  non-numeric text are absent
"""

from typing import Any, Dict, Mapping, Optional
import math


def to_number(value: Any) -> Optional[float]:
    """
    Coerce a sample value to a finite float.

    Returns:
        The float value, or None when the value is absent or not numeric

    Example:
        >>> to_number("0")
        0.0
        >>> to_number("") is None
        True
    """
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, str):
        value = value.strip()
        if not value:
            return None
    try:
        number = float(value)
    except (TypeError, ValueError, OverflowError):
        return None
    if not math.isfinite(number):
        return None
    return number


def is_present(value: Any) -> bool:
    return to_number(value) is not None


def numeric_values(sample: Mapping[str, Any]) -> Dict[str, float]:
    """Keep only the present values of a sample, as floats"""
    values = {}
    for key, value in sample.items():
        number = to_number(value)
        if number is not None:
            values[key] = number
    return values
