"""
Parameter Catalog - Static Definitions of Monitorable Parameters

One table per system type (cooling tower, boiler). Each entry fixes:
- Key, display label and unit
- Bound shape (max-only, min/max, LSI index banding, RSI ratio banding)
- Whether the parameter is core (always relevant once bounded) or optional
  (participates only when its enable flag is set)
- Whether the value is measured by the operator or derived by the
  calculation service

A few keys (ph, tds, hardness, iron, phosphate) exist in both tables with
independent bound shapes.

The catalog is read-only; nothing here has side effects.
"""

from dataclasses import dataclass
from typing import Dict, List, Optional, Tuple

from core.schemas import BoundKind, ParameterKey, ParameterSource, SystemType


@dataclass(frozen=True)
class ParameterDefinition:
    """
    Catalog entry for one parameter of one system type.

    Attributes:
        key: Parameter identifier
        system_type: System type this definition belongs to
        label: Display label
        unit: Display unit ("" for dimensionless)
        bound_kind: Shape of the target range
        is_core: Core parameters have no enable flag
        source: measured (operator input) or derived (calculation service)
        enable_field: Record flag gating an optional parameter
    """
    key: ParameterKey
    system_type: SystemType
    label: str
    unit: str
    bound_kind: BoundKind
    is_core: bool = False
    source: ParameterSource = ParameterSource.MEASURED
    enable_field: Optional[str] = None

    @property
    def is_measured(self) -> bool:
        return self.source == ParameterSource.MEASURED


@dataclass(frozen=True)
class TemperatureInput:
    """Auxiliary raw input that is never evaluated against bounds"""
    key: str
    label: str
    unit: str = "°C"


PPM = "ppm"
PPM_CACO3 = "ppm as CaCO3"


def _core(system_type, key, label, unit, kind) -> ParameterDefinition:
    return ParameterDefinition(key, system_type, label, unit, kind, is_core=True)


def _optional(system_type, key, label, unit, kind, source=ParameterSource.MEASURED,
              enable_field=None) -> ParameterDefinition:
    return ParameterDefinition(
        key,
        system_type,
        label,
        unit,
        kind,
        is_core=False,
        source=source,
        enable_field=enable_field or f"{key.value}_enabled",
    )


_C = SystemType.COOLING
_B = SystemType.BOILER
K = ParameterKey

# Order matters: it is the display order of every downstream table.
CATALOG: Dict[SystemType, Tuple[ParameterDefinition, ...]] = {
    SystemType.COOLING: (
        _core(_C, K.PH, "pH", "", BoundKind.MIN_MAX),
        _core(_C, K.TDS, "TDS", PPM, BoundKind.MIN_MAX),
        _core(_C, K.HARDNESS, "Total Hardness", PPM_CACO3, BoundKind.MAX_ONLY),
        _core(_C, K.ALKALINITY, "M-Alkalinity", PPM_CACO3, BoundKind.MAX_ONLY),
        _optional(_C, K.CHLORIDE, "Chloride", PPM, BoundKind.MAX_ONLY),
        _optional(_C, K.CYCLE, "Cycles of Concentration", "", BoundKind.MIN_MAX),
        _optional(_C, K.IRON, "Iron", PPM, BoundKind.MAX_ONLY),
        _optional(_C, K.PHOSPHATE, "Phosphate", PPM, BoundKind.MIN_MAX),
        _optional(_C, K.LSI, "LSI (Langelier Saturation Index)", "", BoundKind.INDEX_BAND,
                  source=ParameterSource.DERIVED),
        _optional(_C, K.RSI, "RSI (Ryznar Stability Index)", "", BoundKind.RATIO_BAND,
                  source=ParameterSource.DERIVED),
        # LR is only meaningful where chloride is monitored
        _optional(_C, K.LR, "LR (Langelier Ratio)", "", BoundKind.MAX_ONLY,
                  source=ParameterSource.DERIVED, enable_field="chloride_enabled"),
    ),
    SystemType.BOILER: (
        _core(_B, K.PH, "pH", "", BoundKind.MIN_MAX),
        _core(_B, K.TDS, "TDS", PPM, BoundKind.MAX_ONLY),
        _core(_B, K.HARDNESS, "Total Hardness", PPM_CACO3, BoundKind.MAX_ONLY),
        _core(_B, K.M_ALKALINITY, "M-Alkalinity", PPM_CACO3, BoundKind.MIN_MAX),
        _optional(_B, K.P_ALKALINITY, "P-Alkalinity", PPM_CACO3, BoundKind.MIN_MAX),
        _optional(_B, K.OH_ALKALINITY, "OH-Alkalinity", PPM_CACO3, BoundKind.MIN_MAX),
        _optional(_B, K.SULPHITE, "Sulphite", PPM, BoundKind.MIN_MAX),
        _optional(_B, K.PHOSPHATE, "Phosphate", PPM, BoundKind.MIN_MAX),
        _optional(_B, K.SODIUM_CHLORIDE, "Sodium Chloride", PPM, BoundKind.MAX_ONLY),
        _optional(_B, K.DISSOLVED_OXYGEN, "Dissolved Oxygen", PPM, BoundKind.MAX_ONLY),
        _optional(_B, K.IRON, "Iron", PPM, BoundKind.MAX_ONLY),
    ),
}

# Basin and hot-side temperatures feed the index calculation only
TEMPERATURE_INPUTS: Dict[SystemType, Tuple[TemperatureInput, ...]] = {
    SystemType.COOLING: (
        TemperatureInput("basin_temperature", "Basin Temperature"),
        TemperatureInput("hot_side_temperature", "Hot Side Temperature"),
    ),
    SystemType.BOILER: (),
}

# Core cooling parameters the index calculation needs together
INDEX_INPUT_KEYS: Tuple[ParameterKey, ...] = (K.PH, K.TDS, K.ALKALINITY, K.HARDNESS)


def describe(system_type) -> List[ParameterDefinition]:
    """
    List every parameter definition for a system type, in display order.

    Example:
        >>> [d.key.value for d in describe("boiler")][:4]
        ['ph', 'tds', 'hardness', 'm_alkalinity']
    """
    return list(CATALOG[SystemType(system_type)])


def get_definition(system_type, key) -> ParameterDefinition:
    """
    Look up a single definition.

    Raises:
        KeyError: If the key is not defined for this system type
    """
    system_type = SystemType(system_type)
    key = ParameterKey(key)
    for definition in CATALOG[system_type]:
        if definition.key == key:
            return definition
    raise KeyError(f"Parameter '{key.value}' is not defined for {system_type.value} systems")


def temperature_inputs(system_type) -> List[TemperatureInput]:
    """Auxiliary temperature inputs for a system type (empty for boilers)"""
    return list(TEMPERATURE_INPUTS[SystemType(system_type)])


def input_label(system_type, key: str) -> str:
    """Display label for a parameter key or temperature input key"""
    for temperature in TEMPERATURE_INPUTS[SystemType(system_type)]:
        if temperature.key == key:
            return temperature.label
    return get_definition(system_type, key).label
