"""
Core layer for the water treatment evaluation MCP server.

This module provides:
- Shared schemas (records, calculation contract, report models)
- Collaborator interfaces (calculation service, config repository)
- HTTP and YAML adapters for those collaborators
- Environment-driven settings

The analysis session lives in core.state_container and is imported from
there directly.
"""

from .interfaces import CalculationService, ConfigRepository
from .schemas import (
    SystemType,
    ParameterKey,
    BoundKind,
    Classification,
    WaterSystem,
    Plant,
    CalculationRequest,
    CalculationResponse,
    Recommendation,
    EvaluationResult,
    ReportRow,
    WaterAnalysisReport,
)
from .config import EngineSettings, load_settings
from .calculation_client import CalculationServiceError, HttpCalculationService
from .config_repository import ConfigServiceError, HttpConfigRepository, YamlConfigRepository

__all__ = [
    "CalculationService",
    "ConfigRepository",
    "SystemType",
    "ParameterKey",
    "BoundKind",
    "Classification",
    "WaterSystem",
    "Plant",
    "CalculationRequest",
    "CalculationResponse",
    "Recommendation",
    "EvaluationResult",
    "ReportRow",
    "WaterAnalysisReport",
    "EngineSettings",
    "load_settings",
    "CalculationServiceError",
    "HttpCalculationService",
    "ConfigServiceError",
    "HttpConfigRepository",
    "YamlConfigRepository",
]
