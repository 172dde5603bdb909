"""
Threshold-driven evaluation of water samples.

Pipeline:
    resolve_parameter_specs -> check_requirements -> build_action_table
    -> evaluate_values -> build_water_analysis_report
"""

from tools.evaluation.parameter_spec import BoundShape, ParameterSpec, enabled_keys, enabled_specs
from tools.evaluation.parameter_resolver import resolve_parameter_specs
from tools.evaluation.requirement_checker import (
    RequirementReport,
    check_requirements,
    required_keys,
    restrict_sample,
    temperature_required,
)
from tools.evaluation.action_table import (
    ActionBand,
    ActionTable,
    ActionTableEntry,
    build_action_table,
    default_action_table,
    default_entry,
    override_entry,
)
from tools.evaluation.evaluator import evaluate_parameter, evaluate_values, suggested_actions
from tools.evaluation.presenter import (
    present_classification,
    service_status_color,
    stability_score_color,
)
from tools.evaluation.water_analysis import build_water_analysis_report, missing_index_warnings

__all__ = [
    "BoundShape",
    "ParameterSpec",
    "enabled_keys",
    "enabled_specs",
    "resolve_parameter_specs",
    "RequirementReport",
    "check_requirements",
    "required_keys",
    "restrict_sample",
    "temperature_required",
    "ActionBand",
    "ActionTable",
    "ActionTableEntry",
    "build_action_table",
    "default_action_table",
    "default_entry",
    "override_entry",
    "evaluate_parameter",
    "evaluate_values",
    "suggested_actions",
    "present_classification",
    "service_status_color",
    "stability_score_color",
    "build_water_analysis_report",
    "missing_index_warnings",
]
