"""
Pydantic models and enumerations shared by the evaluation engine.

Records (WaterSystem, Plant) mirror the flat bound/enable fields stored by the
config service. Request/response models describe the calculation service
contract. Result models are what the engine hands back for tabular display.

The engine itself works on immutable values built from these records
(see tools.evaluation), so nothing downstream of the resolver ever touches
the flat record fields directly.
"""

from typing import Any, Dict, List, Optional, Union
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field, model_validator


# ============================================================================
# Enumerations
# ============================================================================

class SystemType(str, Enum):
    """Water system type, fixed when the system is created"""
    COOLING = "cooling"
    BOILER = "boiler"


class ParameterKey(str, Enum):
    """Every monitorable parameter across both system types"""
    PH = "ph"
    TDS = "tds"
    HARDNESS = "hardness"
    ALKALINITY = "alkalinity"
    M_ALKALINITY = "m_alkalinity"
    CHLORIDE = "chloride"
    CYCLE = "cycle"
    IRON = "iron"
    PHOSPHATE = "phosphate"
    P_ALKALINITY = "p_alkalinity"
    OH_ALKALINITY = "oh_alkalinity"
    SULPHITE = "sulphite"
    SODIUM_CHLORIDE = "sodium_chloride"
    DISSOLVED_OXYGEN = "dissolved_oxygen"
    LSI = "lsi"
    RSI = "rsi"
    LR = "lr"


class BoundKind(str, Enum):
    """Shape of a parameter's target range"""
    MAX_ONLY = "max_only"
    MIN_MAX = "min_max"
    INDEX_BAND = "index_band"    # Signed banding around zero (LSI)
    RATIO_BAND = "ratio_band"    # Asymmetric banding with intolerable tier (RSI)


class ParameterSource(str, Enum):
    """Where a parameter's current value comes from"""
    MEASURED = "measured"    # Entered by the operator
    DERIVED = "derived"      # Returned by the calculation service


class Classification(str, Enum):
    """Non-banded classifications. Banded states are 'band:<n>' strings."""
    WITHIN_RANGE = "within_range"
    BELOW_MIN = "below_min"
    ABOVE_MAX = "above_max"


BAND_PREFIX = "band:"


def band_classification(index: int) -> str:
    """Classification string for the 1-based default band `index`"""
    return f"{BAND_PREFIX}{index}"


def is_band_classification(classification: str) -> bool:
    return classification.startswith(BAND_PREFIX)


# ============================================================================
# Config Records
# ============================================================================

class WaterSystem(BaseModel):
    """
    Water system as stored by the config service.

    Bound fields follow the `<key>_min` / `<key>_max` convention and optional
    parameters carry a `<key>_enabled` flag. Only the fields matching the
    system type are meaningful; the rest stay None.
    """
    model_config = ConfigDict(extra="ignore")

    id: int = Field(..., description="Water system identifier")
    name: str = Field(..., description="Display name (e.g., 'CT-1 North Basin')")
    plant_id: Optional[int] = Field(None, description="Owning plant")
    system_type: SystemType = Field(..., description="cooling or boiler")

    # Core (both types)
    ph_min: Optional[float] = None
    ph_max: Optional[float] = None
    tds_min: Optional[float] = None
    tds_max: Optional[float] = None
    hardness_max: Optional[float] = None

    # Core alkalinity family
    alkalinity_max: Optional[float] = None          # cooling
    m_alkalinity_min: Optional[float] = None        # boiler
    m_alkalinity_max: Optional[float] = None        # boiler

    # Optional, cooling
    chloride_enabled: bool = False
    chloride_max: Optional[float] = None
    cycle_enabled: bool = False
    cycle_min: Optional[float] = None
    cycle_max: Optional[float] = None
    lsi_enabled: bool = False
    lsi_min: Optional[float] = None
    lsi_max: Optional[float] = None
    rsi_enabled: bool = False
    rsi_min: Optional[float] = None
    rsi_max: Optional[float] = None
    lr_max: Optional[float] = None

    # Optional, both types
    iron_enabled: bool = False
    iron_max: Optional[float] = None
    phosphate_enabled: bool = False
    phosphate_min: Optional[float] = None
    phosphate_max: Optional[float] = None

    # Optional, boiler
    p_alkalinity_enabled: bool = False
    p_alkalinity_min: Optional[float] = None
    p_alkalinity_max: Optional[float] = None
    oh_alkalinity_enabled: bool = False
    oh_alkalinity_min: Optional[float] = None
    oh_alkalinity_max: Optional[float] = None
    sulphite_enabled: bool = False
    sulphite_min: Optional[float] = None
    sulphite_max: Optional[float] = None
    sodium_chloride_enabled: bool = False
    sodium_chloride_max: Optional[float] = None
    dissolved_oxygen_enabled: bool = False
    dissolved_oxygen_max: Optional[float] = None


class Plant(BaseModel):
    """
    Legacy plant record.

    Carries a reduced set of cooling/boiler bounds for flows that pre-date
    water-system level configuration. Fields are prefixed with the system
    type they apply to.
    """
    model_config = ConfigDict(extra="ignore")

    id: int
    name: str

    cooling_ph_min: Optional[float] = None
    cooling_ph_max: Optional[float] = None
    cooling_tds_min: Optional[float] = None
    cooling_tds_max: Optional[float] = None
    cooling_hardness_max: Optional[float] = None
    cooling_alkalinity_max: Optional[float] = None
    cooling_chloride_enabled: bool = False
    cooling_chloride_max: Optional[float] = None
    cooling_cycle_enabled: bool = False
    cooling_cycle_min: Optional[float] = None
    cooling_cycle_max: Optional[float] = None
    cooling_iron_enabled: bool = False
    cooling_iron_max: Optional[float] = None

    boiler_ph_min: Optional[float] = None
    boiler_ph_max: Optional[float] = None
    boiler_tds_max: Optional[float] = None
    boiler_hardness_max: Optional[float] = None
    boiler_m_alkalinity_min: Optional[float] = None
    boiler_m_alkalinity_max: Optional[float] = None


# ============================================================================
# Calculation Service Contract
# ============================================================================

class CalculationRequest(BaseModel):
    """Payload sent to the remote calculation service"""
    system_type: SystemType
    water_system_id: Optional[int] = None
    plant_id: Optional[int] = None
    measurements: Dict[str, float] = Field(
        default_factory=dict,
        description="Enabled raw measurements {key: value}",
    )

    @model_validator(mode="after")
    def exactly_one_entity(self):
        if (self.water_system_id is None) == (self.plant_id is None):
            raise ValueError("Exactly one of water_system_id or plant_id must be set")
        return self


class Recommendation(BaseModel):
    """
    Treatment recommendation returned alongside a calculation.

    Recommendations with source "dynamic" were derived from this analysis;
    the others are standing advice for the water system.
    """
    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    id: Optional[Union[int, str]] = None
    title: str = Field(..., description="Short headline")
    description: str = ""
    priority: Optional[str] = Field(None, description="high, medium or low")
    category: Optional[str] = Field(None, alias="type", description="e.g. 'chemical', 'operational'")
    source: Optional[str] = Field(None, description="'dynamic' when based on the latest analysis")

    @property
    def is_dynamic(self) -> bool:
        return self.source == "dynamic"


class CalculationResponse(BaseModel):
    """
    Derived indices returned by the calculation service.

    Any index may be absent (e.g., no alkalinity or temperature supplied);
    that is surfaced as a warning, never an error.
    """
    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    lsi: Optional[float] = None
    rsi: Optional[float] = None
    lr: Optional[float] = Field(None, alias="ls")
    stability_score: Optional[float] = None
    overall_status: Optional[str] = None
    lsi_status: Optional[str] = None
    rsi_status: Optional[str] = None
    lr_status: Optional[str] = Field(None, alias="ls_status")
    recommendations: List[Recommendation] = Field(
        default_factory=list,
        description="Recommendations sent next to the calculation",
    )

    def index_values(self) -> Dict[str, float]:
        """Derived values keyed like the parameter catalog"""
        values = {"lsi": self.lsi, "rsi": self.rsi, "lr": self.lr}
        return {key: value for key, value in values.items() if value is not None}


# ============================================================================
# Evaluation Results
# ============================================================================

class EvaluationResult(BaseModel):
    """Classification of one parameter's current value"""
    key: str
    label: str
    unit: str = ""
    current_value: float
    target_description: str
    classification: str = Field(..., description="within_range, below_min, above_max or band:<n>")
    band_label: Optional[str] = Field(None, description="Human label of the matched band")
    severity: str = Field("ok", description="ok, warning or critical")
    action_text: Optional[str] = None


class ReportRow(BaseModel):
    """One row of the rendered suggested-actions table"""
    key: str
    label: str
    unit: str = ""
    target_description: str
    current_value: Optional[float] = None
    classification: Optional[str] = None
    action_text: Optional[str] = None
    status: str
    color: str


class WaterAnalysisReport(BaseModel):
    """Everything the caller needs to render an analysis"""
    system_type: SystemType
    rows: List[ReportRow] = Field(default_factory=list)
    calculation_allowed: bool = False
    missing_fields: List[str] = Field(default_factory=list)
    reason: Optional[str] = None
    warnings: List[str] = Field(default_factory=list)
    stability_score: Optional[float] = None
    stability_color: Optional[str] = None
    overall_status: Optional[str] = None
    overall_color: Optional[str] = None
    index_values: Dict[str, Any] = Field(default_factory=dict)
    recommendations: List[Recommendation] = Field(default_factory=list)
