"""
Water Treatment Evaluation MCP Server

FastMCP server exposing threshold-driven evaluation of cooling-tower and
boiler water samples for AI agents and front ends.

Pipeline:
- Resolve the effective parameter set of a water system (or legacy plant)
- Check whether the sample is complete enough to request a calculation
- Build the action table (configured bounds override the defaults)
- Classify measured values and the LSI/RSI/LR indices returned by the
  calculation service, with status text, colors and suggested actions

Collaborators (see core.config for the environment variables):
- Config records from a YAML file (WATER_CONFIG_PATH) or the config
  service (WATER_CONFIG_SERVICE_URL)
- Calculation service (WATER_CALC_SERVICE_URL)

Usage:
    python server.py
"""

from fastmcp import FastMCP
from mcp.types import ToolAnnotations
import anyio
import logging
from typing import Any, Dict, Optional, Union

from core.calculation_client import HttpCalculationService
from core.config import load_settings
from core.config_repository import HttpConfigRepository, YamlConfigRepository
from core.interfaces import ConfigRepository
from core.schemas import ParameterKey, SystemType
from core.state_container import AnalysisSession
from data.parameter_catalog import describe, get_definition, temperature_inputs
from tools.evaluation.action_table import (
    build_action_table,
    default_action_table,
    default_entry,
    override_entry,
)
from tools.evaluation.evaluator import evaluate_parameter
from tools.evaluation.parameter_spec import BoundShape
from tools.evaluation.presenter import present_classification
from tools.evaluation.requirement_checker import temperature_required
from utils.action_defaults_db import get_default_actions_db

# Pydantic imports for input validation
from pydantic import BaseModel, Field, ConfigDict, field_validator, model_validator

settings = load_settings()

# Configure logging
logging.basicConfig(
    level=getattr(logging, settings.log_level),
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)


# ============================================================================
# Constants
# ============================================================================

SERVER_VERSION = "0.3.0"
INDEX_KEYS = ("lsi", "rsi")

SampleValue = Optional[Union[float, str]]


# ============================================================================
# Pydantic Input Models
# ============================================================================

class SystemTypeInput(BaseModel):
    """Input for catalog lookups."""
    model_config = ConfigDict(str_strip_whitespace=True, validate_assignment=True)

    system_type: SystemType = Field(
        ...,
        description="System type: 'cooling' or 'boiler'"
    )


class SelectionInput(BaseModel):
    """Entity selection: a water system, or a legacy plant plus system type."""
    model_config = ConfigDict(str_strip_whitespace=True, validate_assignment=True)

    water_system_id: Optional[int] = Field(
        default=None,
        description="Water system id (preferred; its bounds are authoritative)",
        ge=1
    )
    plant_id: Optional[int] = Field(
        default=None,
        description="Legacy plant id, used only when no water system is given",
        ge=1
    )
    system_type: Optional[SystemType] = Field(
        default=None,
        description="Required with plant_id: 'cooling' or 'boiler'"
    )

    @model_validator(mode="after")
    def validate_selection(self):
        if self.water_system_id is None and self.plant_id is None:
            raise ValueError("Provide water_system_id or plant_id")
        if self.water_system_id is None and self.system_type is None:
            raise ValueError("system_type is required when selecting a plant")
        return self


class SampleInput(SelectionInput):
    """Entity selection plus the operator's sample values."""

    sample: Dict[str, SampleValue] = Field(
        default_factory=dict,
        description="Raw values keyed by parameter, e.g. {'ph': 8.2, 'tds': '1200', "
                    "'basin_temperature': 30}. Blank strings count as missing."
    )


class ActionTableInput(BaseModel):
    """Input for action table lookup."""
    model_config = ConfigDict(str_strip_whitespace=True, validate_assignment=True)

    selection: Optional[SelectionInput] = Field(
        default=None,
        description="Entity whose configured bounds override the defaults. "
                    "If None, the default table for system_type is returned."
    )
    system_type: Optional[SystemType] = Field(
        default=None,
        description="System type for the default table (ignored with a selection)"
    )

    @model_validator(mode="after")
    def validate_target(self):
        if self.selection is None and self.system_type is None:
            raise ValueError("Provide a selection or a system_type")
        return self


class ClassifyIndexInput(BaseModel):
    """Input for single-index classification."""
    model_config = ConfigDict(str_strip_whitespace=True, validate_assignment=True)

    index: str = Field(
        ...,
        description="Index to classify: 'lsi' or 'rsi'"
    )
    value: float = Field(
        ...,
        description="Index value returned by the calculation service",
        allow_inf_nan=False
    )
    min_value: Optional[float] = Field(
        default=None,
        description="Configured lower bound. Both bounds override the default bands.",
        allow_inf_nan=False
    )
    max_value: Optional[float] = Field(
        default=None,
        description="Configured upper bound. Both bounds override the default bands.",
        allow_inf_nan=False
    )

    @field_validator("index")
    @classmethod
    def validate_index(cls, v: str) -> str:
        v_lower = v.lower()
        if v_lower not in INDEX_KEYS:
            raise ValueError(f"index must be one of {list(INDEX_KEYS)}")
        return v_lower


# ============================================================================
# Collaborators
# ============================================================================

_repository: Optional[ConfigRepository] = None
_calculation_service: Optional[HttpCalculationService] = None


def get_repository() -> ConfigRepository:
    """Get or create the config repository from settings"""
    global _repository
    if _repository is None:
        if settings.config_path:
            _repository = YamlConfigRepository(settings.config_path)
        elif settings.config_service_url:
            _repository = HttpConfigRepository(
                settings.config_service_url,
                api_token=settings.api_token,
                timeout_s=settings.config_timeout_s,
                cache_s=settings.config_cache_s,
            )
        else:
            raise RuntimeError(
                "No config source: set WATER_CONFIG_PATH or WATER_CONFIG_SERVICE_URL"
            )
    return _repository


def get_calculation_service() -> HttpCalculationService:
    """Get or create the calculation service client from settings"""
    global _calculation_service
    if _calculation_service is None:
        _calculation_service = HttpCalculationService(
            settings.calc_service_url,
            timeout_s=settings.calc_timeout_s,
            api_token=settings.api_token,
        )
    return _calculation_service


def _open_session(selection: SelectionInput) -> AnalysisSession:
    """Load the selected entity and return a session bound to it"""
    repository = get_repository()
    session = AnalysisSession()
    if selection.water_system_id is not None:
        session.select_water_system(repository.get_water_system(selection.water_system_id))
    else:
        session.select_plant(repository.get_plant(selection.plant_id), selection.system_type)
    return session


def _selection_summary(session: AnalysisSession) -> Dict[str, Any]:
    return {
        "system_type": session.system_type.value,
        "water_system_id": session.water_system_id,
        "plant_id": session.plant_id,
    }


# ============================================================================
# Initialize FastMCP Server
# ============================================================================

mcp = FastMCP("Water Treatment Evaluation")


# ============================================================================
# Catalog and Configuration Tools
# ============================================================================

@mcp.tool(
    name="water_describe_parameters",
    annotations=ToolAnnotations(
        readOnlyHint=True,
        openWorldHint=False,  # Static catalog
    )
)
async def describe_parameters(params: SystemTypeInput) -> dict:
    """
    List every parameter that can be monitored for a system type.

    Args:
        params (SystemTypeInput): system_type ('cooling' or 'boiler')

    Returns:
        Dictionary with one entry per parameter (key, label, unit, bound
        kind, core/optional, measured/derived, enable flag) and the
        temperature inputs the system type may ask for.

    Example:
        result = await describe_parameters(SystemTypeInput(system_type="cooling"))
        print([p["key"] for p in result["parameters"]])
    """
    definitions = describe(params.system_type)
    return {
        "system_type": params.system_type.value,
        "parameters": [
            {
                "key": d.key.value,
                "label": d.label,
                "unit": d.unit,
                "bound_kind": d.bound_kind.value,
                "is_core": d.is_core,
                "source": d.source.value,
                "enable_field": d.enable_field,
            }
            for d in definitions
        ],
        "temperature_inputs": [
            {"key": t.key, "label": t.label, "unit": t.unit}
            for t in temperature_inputs(params.system_type)
        ],
    }


@mcp.tool(
    name="water_resolve_parameters",
    annotations=ToolAnnotations(
        readOnlyHint=True,
        openWorldHint=True,  # Reads the config source
    )
)
async def resolve_parameters(params: SelectionInput) -> dict:
    """
    Resolve the effective parameter set of a water system or legacy plant.

    A water system's own bounds are authoritative; plant bounds are used
    only when no water system is selected. Core parameters are enabled when
    their bounds are set, optional ones additionally need their flag.

    Args:
        params (SelectionInput): water_system_id, or plant_id + system_type

    Returns:
        Dictionary with one entry per catalog parameter: key, label, unit,
        enabled, bounds and target description.
    """
    logger.info(f"Resolving parameters for {params.model_dump(exclude_none=True)}")
    session = await anyio.to_thread.run_sync(lambda: _open_session(params))

    return {
        **_selection_summary(session),
        "parameters": [
            {
                "key": spec.key.value,
                "label": spec.label,
                "unit": spec.unit,
                "enabled": spec.enabled,
                "min": spec.bounds.min,
                "max": spec.bounds.max,
                "target_description": spec.bounds.describe(),
            }
            for spec in session.specs
        ],
        "temperature_required": temperature_required(session.specs),
    }


@mcp.tool(
    name="water_check_requirements",
    annotations=ToolAnnotations(
        readOnlyHint=True,
        openWorldHint=True,
    )
)
async def check_requirements(params: SampleInput) -> dict:
    """
    Check whether a sample is complete enough to request a calculation.

    Args:
        params (SampleInput): Selection plus sample values

    Returns:
        {
            "ready": bool,              # Calculate may be enabled
            "required": List[str],      # Keys the operator must supply
            "missing": List[str],
            "missing_labels": List[str],
            "reason": Optional[str],    # e.g. "configure parameters first"
        }
    """
    session = await anyio.to_thread.run_sync(lambda: _open_session(params))
    session.set_sample(params.sample)
    report = session.requirements

    return {
        **_selection_summary(session),
        "ready": report.ready,
        "required": report.required,
        "missing": report.missing,
        "missing_labels": report.missing_labels,
        "reason": report.reason,
    }


@mcp.tool(
    name="water_get_action_table",
    annotations=ToolAnnotations(
        readOnlyHint=True,
        openWorldHint=True,
    )
)
async def get_action_table(params: ActionTableInput) -> dict:
    """
    Get the action table used to classify values.

    With a selection, configured bounds replace the default target and
    bands; disabled parameters are excluded. Without one, the full default
    table for the system type is returned (including the LSI/RSI bands).

    Args:
        params (ActionTableInput): selection, or system_type

    Returns:
        Dictionary with entries keyed by parameter: label, unit, target
        description, bands (classification, label, action, interval) and
        whether the entry was overridden.
    """
    if params.selection is None:
        table = default_action_table(params.system_type)
        return {"source": "defaults", **table.to_dict()}

    session = await anyio.to_thread.run_sync(lambda: _open_session(params.selection))
    table = build_action_table(session.system_type, session.specs)
    return {"source": "configured", **_selection_summary(session), **table.to_dict()}


# ============================================================================
# Evaluation Tools
# ============================================================================

@mcp.tool(
    name="water_classify_index",
    annotations=ToolAnnotations(
        readOnlyHint=True,
        openWorldHint=False,  # Pure classification
    )
)
async def classify_index(params: ClassifyIndexInput) -> dict:
    """
    Classify a single LSI or RSI value.

    Without bounds, the default banding applies (e.g. LSI -1.0 is
    "Corrosion tendency", RSI 9.5 is "Intolerable corrosion"). With both
    bounds, values outside them get the configured action text.

    Args:
        params (ClassifyIndexInput): index, value, optional min/max

    Returns:
        Dictionary with classification, band label, status, color and
        action text.

    Example:
        result = await classify_index(ClassifyIndexInput(index="lsi", value=-1.0))
        print(result["band_label"])  # "Corrosion tendency"
    """
    key = ParameterKey(params.index)
    system_type = SystemType.COOLING
    bounds = BoundShape(
        get_definition(system_type, key).bound_kind,
        params.min_value,
        params.max_value,
    )
    if bounds.has_bounds:
        entry = override_entry(system_type, key, bounds)
    else:
        entry = default_entry(system_type, key)

    result = evaluate_parameter(key, params.value, entry)
    status, color = present_classification(
        result.classification, severity=result.severity, band_label=result.band_label
    )
    return {
        "index": key.value,
        "value": params.value,
        "target_description": entry.target_description,
        "overridden": entry.overridden,
        "classification": result.classification,
        "band_label": result.band_label,
        "status": status,
        "color": color,
        "action_text": result.action_text,
    }


@mcp.tool(
    name="water_evaluate_sample",
    annotations=ToolAnnotations(
        readOnlyHint=True,
        openWorldHint=True,
    )
)
async def evaluate_sample(params: SampleInput) -> dict:
    """
    Evaluate measured values against the configured targets.

    No calculation is requested, so only measured parameters are
    classified. Use water_analyze to include LSI/RSI/LR.

    Args:
        params (SampleInput): Selection plus sample values

    Returns:
        WaterAnalysisReport as a dictionary: rows (label, target, current
        value, status, color, action), calculation_allowed and
        missing_fields.
    """
    def _run():
        session = _open_session(params)
        session.set_sample(params.sample)
        return session.evaluate()

    report = await anyio.to_thread.run_sync(_run)
    return report.model_dump(mode="json")


@mcp.tool(
    name="water_analyze",
    annotations=ToolAnnotations(
        readOnlyHint=True,
        openWorldHint=True,  # Calls the calculation service
    )
)
async def analyze(params: SampleInput) -> dict:
    """
    Request derived indices and evaluate the full sample.

    Validates the sample (pH 0-14, non-negative concentrations, cycles at
    least 1, temperatures 0-100 °C), sends enabled measurements to the
    calculation service, then classifies measured values and returned
    indices.

    Args:
        params (SampleInput): Selection plus sample values

    Returns:
        WaterAnalysisReport as a dictionary, including stability score,
        overall status (with colors), index values and warnings for
        indices the service did not return.

    Raises:
        ValueError: If required fields are missing or values are out of
            their physical domain
        CalculationServiceError: If the calculation service fails; retry
            with the same input
        ConfigServiceError: If the config service cannot be reached
    """
    def _run():
        session = _open_session(params)
        session.set_sample(params.sample)
        return session.calculate(get_calculation_service())

    report = await anyio.to_thread.run_sync(_run)
    logger.info(
        f"Analysis complete: stability_score={report.stability_score}, "
        f"overall_status={report.overall_status}"
    )
    return report.model_dump(mode="json")


# ============================================================================
# Server Information
# ============================================================================

@mcp.tool(
    name="water_get_server_info",
    annotations=ToolAnnotations(
        readOnlyHint=True,
        openWorldHint=False,  # Returns static server info
    )
)
async def get_server_info() -> dict:
    """
    Get water treatment evaluation MCP server information.

    Returns:
        Dictionary with server version, configured collaborators and the
        tool registry.
    """
    tool_registry = [
        {"name": "water_describe_parameters", "description": "Parameter catalog per system type"},
        {"name": "water_resolve_parameters", "description": "Effective parameter set of an entity"},
        {"name": "water_check_requirements", "description": "Readiness of a sample for calculation"},
        {"name": "water_get_action_table", "description": "Default or configured action table"},
        {"name": "water_classify_index", "description": "Classify one LSI or RSI value"},
        {"name": "water_evaluate_sample", "description": "Classify measured values"},
        {"name": "water_analyze", "description": "Calculate indices and classify the full sample"},
        {"name": "water_get_server_info", "description": "Server information"},
    ]

    return {
        "server_name": "Water Treatment Evaluation MCP Server",
        "version": SERVER_VERSION,
        "system_types": [t.value for t in SystemType],
        "calculation_service_url": settings.calc_service_url,
        "config_source": (
            "yaml" if settings.config_path
            else "http" if settings.config_service_url
            else None
        ),
        "default_actions": get_default_actions_db().get_metadata(),
        "tool_count": len(tool_registry),
        "tool_registry": tool_registry,
    }


# ============================================================================
# Run Server
# ============================================================================

if __name__ == "__main__":
    logger.info("=" * 70)
    logger.info(f"Water Treatment Evaluation MCP Server {SERVER_VERSION}")
    logger.info("=" * 70)
    logger.info(f"Calculation service: {settings.calc_service_url}")
    logger.info(f"Config source: {settings.config_path or settings.config_service_url or 'not set'}")
    logger.info("=" * 70)

    # Run the server
    mcp.run()
