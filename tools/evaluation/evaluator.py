"""
Evaluator - Classify Current Values Against the Action Table

For each parameter value (raw measurement or index returned by the
calculation service) the first band of its ActionTableEntry that contains
the value decides the classification and action text. A value matched by
no band is within range and carries no action.

Missing, blank or non-finite values produce no result at all: the parameter
is left out of the rendered list rather than shown as an error. Keys absent
from the action table (disabled or unconfigured) are skipped the same way.

Evaluation is deterministic: same value, same entry, same classification.
"""

from typing import Any, List, Mapping, Optional
import logging

from core.schemas import Classification, EvaluationResult
from tools.evaluation.action_table import ActionTable, ActionTableEntry
from utils.sample_values import to_number

logger = logging.getLogger(__name__)


def evaluate_parameter(
    key,
    value: Any,
    entry: Optional[ActionTableEntry],
) -> Optional[EvaluationResult]:
    """
    Classify one parameter value.

    Args:
        key: Parameter key
        value: Current value (number, numeric string, "" or None)
        entry: The key's action table entry (None if the key is not enabled)

    Returns:
        EvaluationResult, or None when there is nothing to evaluate

    Example:
        >>> entry = default_entry("cooling", "lsi")
        >>> evaluate_parameter("lsi", 0, entry).band_label
        'Balanced'
    """
    if entry is None:
        return None

    number = to_number(value)
    if number is None:
        logger.debug(f"No usable value for '{entry.key.value}' ({value!r}); skipping")
        return None

    for band in entry.bands:
        if band.matches(number):
            return EvaluationResult(
                key=entry.key.value,
                label=entry.label,
                unit=entry.unit,
                current_value=number,
                target_description=entry.target_description,
                classification=band.classification,
                band_label=band.label,
                severity=band.severity,
                action_text=band.action,
            )

    return EvaluationResult(
        key=entry.key.value,
        label=entry.label,
        unit=entry.unit,
        current_value=number,
        target_description=entry.target_description,
        classification=Classification.WITHIN_RANGE.value,
        band_label=None,
        severity="ok",
        action_text=None,
    )


def evaluate_values(table: ActionTable, values: Mapping[str, Any]) -> List[EvaluationResult]:
    """
    Evaluate every table entry that has a value.

    Args:
        table: Action table of the selected entity
        values: Current values keyed by parameter (sample merged with indices)

    Returns:
        Results in table order; keys outside the table never appear
    """
    results = []
    for entry in table:
        result = evaluate_parameter(entry.key, values.get(entry.key.value), entry)
        if result is not None:
            results.append(result)

    ignored = sorted(key for key in values if key not in table)
    if ignored:
        logger.debug(f"Values outside the action table ignored: {ignored}")

    return results


def suggested_actions(results: List[EvaluationResult]) -> List[EvaluationResult]:
    """Only the results that carry corrective action text"""
    return [result for result in results if result.action_text]
