"""
Requirement Checker - Is There Enough Data to Request a Calculation?

Given the effective specification set and the current sample, reports
whether the Calculate action may be enabled and which fields are missing.

Rules:
- Every enabled measured parameter is required. Derived parameters (LSI,
  RSI, LR) come back from the calculation service and are never solicited.
- Cooling coupling: basin and hot-side temperatures are required only when
  ph, tds, alkalinity and hardness are all enabled. The index calculation
  needs all four together, so with any of them missing temperature is not
  asked for.
- Present means numeric and finite; "" is absent, 0 is present.
- No enabled parameters means calculation stays disabled until the entity
  is configured.

The checker is pure: it only reports, it never mutates specs or samples.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, Optional, Sequence
import logging

from core.schemas import SystemType
from data.parameter_catalog import INDEX_INPUT_KEYS, input_label, temperature_inputs
from tools.evaluation.parameter_spec import ParameterSpec, enabled_specs
from utils.sample_values import is_present

logger = logging.getLogger(__name__)

NOT_CONFIGURED_REASON = "configure parameters first"
MISSING_INPUT_REASON = "missing required fields"


@dataclass(frozen=True)
class RequirementReport:
    """
    Readiness of the current sample.

    Attributes:
        ready: True when the calculate action may be enabled
        required: Keys that must be present, in display order
        missing: Required keys without a present value
        missing_labels: Display labels of the missing keys
        reason: Why the sample is not ready (None when ready)
    """
    ready: bool
    required: List[str] = field(default_factory=list)
    missing: List[str] = field(default_factory=list)
    missing_labels: List[str] = field(default_factory=list)
    reason: Optional[str] = None


def required_keys(specs: Sequence[ParameterSpec]) -> List[str]:
    """
    Keys the operator must supply for this specification set.

    Includes cooling temperature inputs when the coupling rule holds.
    """
    enabled = enabled_specs(specs)
    required = [spec.key.value for spec in enabled if spec.is_measured]
    if not enabled:
        return required

    system_type = enabled[0].system_type
    if system_type == SystemType.COOLING and temperature_required(specs):
        required.extend(temperature.key for temperature in temperature_inputs(system_type))
    return required


def temperature_required(specs: Sequence[ParameterSpec]) -> bool:
    """True when every parameter the index calculation needs is enabled"""
    enabled = {spec.key for spec in specs if spec.enabled}
    return all(key in enabled for key in INDEX_INPUT_KEYS)


def restrict_sample(specs: Sequence[ParameterSpec], values: Mapping[str, Any]) -> Dict[str, Any]:
    """
    Keep only the values the operator may enter for this specification set.

    Values for disabled parameters (and unsolicited temperatures) are
    dropped, so a sample never carries them.
    """
    allowed = required_keys(specs)
    dropped = sorted(key for key in values if key not in allowed)
    if dropped:
        logger.debug(f"Dropping sample values for keys that are not enabled: {dropped}")
    return {key: values[key] for key in allowed if key in values}


def check_requirements(
    specs: Sequence[ParameterSpec],
    sample: Mapping[str, Any],
) -> RequirementReport:
    """
    Decide whether enough data exists to request a calculation.

    Args:
        specs: Effective specification set from the resolver
        sample: Current raw input values {key: value}

    Returns:
        RequirementReport; never raises for incomplete input

    Example:
        >>> report = check_requirements(specs, {"ph": 7.2, "tds": ""})
        >>> report.ready, report.missing
        (False, ['tds', ...])
    """
    required = required_keys(specs)
    if not required:
        return RequirementReport(ready=False, reason=NOT_CONFIGURED_REASON)

    system_type = specs[0].system_type
    missing = [key for key in required if not is_present(sample.get(key))]
    missing_labels = [input_label(system_type, key) for key in missing]

    if missing:
        logger.debug(f"Calculation blocked, missing {missing}")
        return RequirementReport(
            ready=False,
            required=required,
            missing=missing,
            missing_labels=missing_labels,
            reason=MISSING_INPUT_REASON,
        )

    return RequirementReport(ready=True, required=required)
