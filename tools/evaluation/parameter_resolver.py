"""
Parameter Resolver - Effective Parameter Specification for an Entity

Turns a selected WaterSystem (preferred) or a legacy Plant (fallback) into a
list of ParameterSpec values, one per catalog entry of the matching system
type.

Enable rules:
- Core parameter: enabled iff all bounds its shape needs are present
- Optional parameter: enabled iff its enable flag is true AND its bounds
  are present

Precedence:
    A selected WaterSystem is authoritative. Plant-level bounds are not read
    at all in that case, even if they differ.

Both record shapes are handled here and nowhere else: everything downstream
sees ParameterSpec only.
"""

from typing import Any, List, Optional
import logging

from core.schemas import BoundKind, Plant, SystemType, WaterSystem
from data.parameter_catalog import ParameterDefinition, describe

from .parameter_spec import BoundShape, ParameterSpec, enabled_keys

logger = logging.getLogger(__name__)


def resolve_parameter_specs(
    water_system: Optional[WaterSystem] = None,
    plant: Optional[Plant] = None,
    system_type: Optional[SystemType] = None,
) -> List[ParameterSpec]:
    """
    Resolve the effective parameter specification set.

    Args:
        water_system: Selected water system (authoritative when given)
        plant: Legacy plant record, used only when no water system is given
        system_type: Required for plant resolution; ignored for water systems
                     (their type is fixed at creation)

    Returns:
        One ParameterSpec per catalog entry, in catalog order. When nothing
        is configured every spec is disabled; that is a valid state.

    Raises:
        ValueError: If neither entity is given, or a plant is given without
                    a system type
    """
    if water_system is not None:
        if plant is not None:
            logger.debug(
                f"Water system {water_system.id} selected; ignoring plant {plant.id} bounds"
            )
        specs = _resolve(water_system, SystemType(water_system.system_type), prefix="")
        source = f"water system {water_system.id}"
    elif plant is not None:
        if system_type is None:
            raise ValueError("system_type is required when resolving from a plant")
        system_type = SystemType(system_type)
        specs = _resolve(plant, system_type, prefix=f"{system_type.value}_")
        source = f"plant {plant.id} ({system_type.value})"
    else:
        raise ValueError("Either a water system or a plant must be selected")

    keys = enabled_keys(specs)
    if not keys:
        logger.info(f"No parameters configured for {source}")
    else:
        logger.info(f"Resolved {len(keys)} enabled parameters for {source}: {keys}")

    return specs


def _resolve(record: Any, system_type: SystemType, prefix: str) -> List[ParameterSpec]:
    specs = []
    for definition in describe(system_type):
        bounds = _read_bounds(record, definition, prefix)
        enabled = bounds.has_bounds and (definition.is_core or _read_flag(record, definition, prefix))
        specs.append(ParameterSpec(definition.key, system_type, bounds, enabled))
    return specs


def _read_bounds(record: Any, definition: ParameterDefinition, prefix: str) -> BoundShape:
    key = definition.key.value
    maximum = _read_number(record, f"{prefix}{key}_max")
    if definition.bound_kind == BoundKind.MAX_ONLY:
        return BoundShape.max_only(maximum)
    minimum = _read_number(record, f"{prefix}{key}_min")
    return BoundShape(definition.bound_kind, minimum, maximum)


def _read_flag(record: Any, definition: ParameterDefinition, prefix: str) -> bool:
    return bool(getattr(record, f"{prefix}{definition.enable_field}", False))


def _read_number(record: Any, field: str) -> Optional[float]:
    # Fields a record shape does not carry count as absent
    value = getattr(record, field, None)
    if value is None:
        return None
    return float(value)
