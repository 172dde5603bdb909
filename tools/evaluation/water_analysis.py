"""
Water Analysis Report - Resolve, Check, Evaluate, Present

Assembles the rendering contract handed to callers:
- One row per enabled parameter that has a value: label, target, current
  value, classification, action text, status and color
- Whether calculation is allowed, and the labels of missing fields
- Warnings for enabled indices the calculation service did not return
- Stability score and overall status (with colors) when a calculation
  response is available, plus the recommendations sent with it

Typical use:
    >>> specs = resolve_parameter_specs(water_system=ws)
    >>> report = build_water_analysis_report(ws.system_type, specs, sample, response)
    >>> [row.status for row in report.rows]
    ['Above Range', 'Within Range', 'Within Range']
"""

from typing import Any, Dict, List, Mapping, Optional, Sequence
import logging

from core.schemas import (
    CalculationResponse,
    EvaluationResult,
    ParameterSource,
    ReportRow,
    SystemType,
    WaterAnalysisReport,
)
from tools.evaluation.action_table import build_action_table
from tools.evaluation.evaluator import evaluate_values
from tools.evaluation.parameter_spec import ParameterSpec, enabled_specs
from tools.evaluation.presenter import (
    present_classification,
    service_status_color,
    stability_score_color,
)
from tools.evaluation.requirement_checker import check_requirements, restrict_sample
from utils.action_defaults_db import DefaultActionDatabase
from utils.sample_values import numeric_values

logger = logging.getLogger(__name__)


def build_water_analysis_report(
    system_type,
    specs: Sequence[ParameterSpec],
    sample: Mapping[str, Any],
    response: Optional[CalculationResponse] = None,
    defaults_db: Optional[DefaultActionDatabase] = None,
) -> WaterAnalysisReport:
    """
    Build the full analysis report for one entity.

    Args:
        system_type: System type of the selected entity
        specs: Effective specification set from the resolver
        sample: Raw operator input (disabled keys are ignored)
        response: Calculation service response, if a calculation ran
        defaults_db: Default action database (shared instance if None)

    Returns:
        WaterAnalysisReport ready for tabular display
    """
    system_type = SystemType(system_type)
    sample = restrict_sample(specs, sample)
    requirements = check_requirements(specs, sample)
    table = build_action_table(system_type, specs, defaults_db=defaults_db)

    values: Dict[str, Any] = numeric_values(sample)
    if response is not None:
        values.update(response.index_values())

    results = evaluate_values(table, values)
    rows = [_row_from_result(result) for result in results]

    report = WaterAnalysisReport(
        system_type=system_type,
        rows=rows,
        calculation_allowed=requirements.ready,
        missing_fields=requirements.missing_labels,
        reason=requirements.reason,
    )

    if response is not None:
        report.warnings = missing_index_warnings(specs, response)
        report.stability_score = response.stability_score
        report.stability_color = stability_score_color(response.stability_score)
        report.overall_status = response.overall_status or None
        report.overall_color = service_status_color(response.overall_status)
        report.index_values = _index_summary(response)
        report.recommendations = list(response.recommendations)

    logger.info(
        f"Analysis report ({system_type.value}): {len(rows)} rows, "
        f"{sum(1 for r in results if r.action_text)} actions, "
        f"calculation_allowed={requirements.ready}"
    )
    return report


def missing_index_warnings(
    specs: Sequence[ParameterSpec],
    response: CalculationResponse,
) -> List[str]:
    """
    Warn for enabled derived parameters absent from the response.

    Absence is expected when alkalinity or temperature was not supplied, so
    it is reported, never raised.
    """
    returned = response.index_values()
    warnings = []
    for spec in enabled_specs(specs):
        if spec.definition.source != ParameterSource.DERIVED:
            continue
        if spec.key.value not in returned:
            message = (
                f"{spec.label} was not returned by the calculation service; "
                f"check alkalinity and temperature inputs"
            )
            logger.warning(message)
            warnings.append(message)
    return warnings


def _row_from_result(result: EvaluationResult) -> ReportRow:
    status, color = present_classification(
        result.classification,
        severity=result.severity,
        band_label=result.band_label,
    )
    return ReportRow(
        key=result.key,
        label=result.label,
        unit=result.unit,
        target_description=result.target_description,
        current_value=result.current_value,
        classification=result.classification,
        action_text=result.action_text,
        status=status,
        color=color,
    )


def _index_summary(response: CalculationResponse) -> Dict[str, Any]:
    statuses = {
        "lsi": response.lsi_status,
        "rsi": response.rsi_status,
        "lr": response.lr_status,
    }
    summary = {}
    for key, value in response.index_values().items():
        summary[key] = {
            "value": value,
            "status": statuses.get(key),
            "color": service_status_color(statuses.get(key)),
        }
    return summary
