"""
Out-of-domain validation for raw samples.

Physically impossible values (pH 15, negative hardness, a basin at 140 °C)
are rejected before anything is sent to the calculation service. Absent
values are not checked here; readiness is the requirement checker's job.
"""

from typing import Any, Dict, List, Mapping, Optional, Tuple
import logging

from utils.sample_values import to_number

logger = logging.getLogger(__name__)

# Inclusive (min, max) per key; None means unbounded on that side
DOMAIN_LIMITS: Dict[str, Tuple[float, Optional[float]]] = {
    "ph": (0.0, 14.0),
    "cycle": (1.0, None),
    "basin_temperature": (0.0, 100.0),
    "hot_side_temperature": (0.0, 100.0),
}

# Concentrations cannot be negative
NON_NEGATIVE_KEYS = (
    "tds",
    "hardness",
    "alkalinity",
    "m_alkalinity",
    "p_alkalinity",
    "oh_alkalinity",
    "chloride",
    "iron",
    "phosphate",
    "sulphite",
    "sodium_chloride",
    "dissolved_oxygen",
)


class SampleValidationError(ValueError):
    """Raised when a sample holds out-of-domain values"""

    def __init__(self, messages: List[str]):
        self.messages = list(messages)
        super().__init__("; ".join(self.messages))


def _limits_for(key: str):
    if key in DOMAIN_LIMITS:
        return DOMAIN_LIMITS[key]
    if key in NON_NEGATIVE_KEYS:
        return (0.0, None)
    return None


def find_domain_errors(sample: Mapping[str, Any]) -> List[str]:
    """
    List validation messages for out-of-domain values.

    Args:
        sample: Raw sample {key: value}

    Returns:
        One message per offending key (empty when the sample is valid)

    Example:
        >>> find_domain_errors({"ph": 15})
        ['pH must be between 0 and 14 (got 15)']
    """
    messages = []
    for key, raw in sample.items():
        value = to_number(raw)
        limits = _limits_for(key)
        if value is None or limits is None:
            continue

        low, high = limits
        name = "pH" if key == "ph" else key.replace("_", " ")
        if low is not None and high is not None and not (low <= value <= high):
            messages.append(f"{name} must be between {low:g} and {high:g} (got {value:g})")
        elif low is not None and value < low:
            if low == 0.0:
                messages.append(f"{name} cannot be negative (got {value:g})")
            else:
                messages.append(f"{name} must be at least {low:g} (got {value:g})")
    return messages


def validate_sample(sample: Mapping[str, Any]) -> None:
    """
    Validate a sample before submission.

    Raises:
        SampleValidationError: If any value is outside its physical domain
    """
    messages = find_domain_errors(sample)
    if messages:
        logger.warning(f"Sample rejected: {messages}")
        raise SampleValidationError(messages)
