"""
Action Table - Target Ranges and Corrective Actions per Parameter

Built in two steps:

1. Start from the industry-default table (databases/default_actions.yaml):
   default min/max for simple keys, fine-grained bands for LSI and RSI.
2. Override: for every enabled spec carrying concrete bounds, rebuild the
   band predicates and target description from the configured numbers.
   The action prose is reused from the defaults.

Keys that are not enabled are left out entirely, whatever the default
table holds.

Bands are plain intervals, so the evaluator needs no per-parameter logic:
the LSI and RSI special cases live in how their bands are constructed here.

LSI with bounds:   < min corrosion | [min, max] within | > max heavy scale
RSI with bounds:   < min heavy scale | [min, max] within |
                   (max, max+2] heavy corrosion | > max+2 heavy corrosion
"""

from dataclasses import dataclass
from typing import Any, Dict, Iterator, List, Optional, Sequence, Tuple
import logging

from core.schemas import (
    BoundKind,
    Classification,
    ParameterKey,
    SystemType,
    band_classification,
)
from data.parameter_catalog import ParameterDefinition, describe, get_definition
from tools.evaluation.parameter_spec import BoundShape, ParameterSpec, describe_range, format_bound
from utils.action_defaults_db import DefaultActionDatabase, get_default_actions_db

logger = logging.getLogger(__name__)

# Width of the RSI heavy-corrosion tier above a configured max
RSI_CORROSION_SPAN = 2.0


# ============================================================================
# Table Types
# ============================================================================

@dataclass(frozen=True)
class ActionBand:
    """
    One out-of-range (or banded) state of a parameter.

    A band matches a value inside its interval; a missing side is unbounded.
    """
    classification: str
    label: str
    action: Optional[str]
    severity: str = "critical"
    lower: Optional[float] = None
    upper: Optional[float] = None
    lower_inclusive: bool = False
    upper_inclusive: bool = False

    def matches(self, value: float) -> bool:
        if self.lower is not None:
            if value < self.lower or (value == self.lower and not self.lower_inclusive):
                return False
        if self.upper is not None:
            if value > self.upper or (value == self.upper and not self.upper_inclusive):
                return False
        return True

    def to_dict(self) -> Dict[str, Any]:
        return {
            "classification": self.classification,
            "label": self.label,
            "action": self.action,
            "severity": self.severity,
        }


@dataclass(frozen=True)
class ActionTableEntry:
    """Target description and ordered bands for one enabled parameter"""
    key: ParameterKey
    label: str
    unit: str
    target_description: str
    bands: Tuple[ActionBand, ...]
    overridden: bool = False

    def to_dict(self) -> Dict[str, Any]:
        return {
            "key": self.key.value,
            "label": self.label,
            "unit": self.unit,
            "target_description": self.target_description,
            "overridden": self.overridden,
            "bands": [band.to_dict() for band in self.bands],
        }


class ActionTable:
    """Ordered mapping of parameter key to ActionTableEntry"""

    def __init__(self, system_type: SystemType, entries: Sequence[ActionTableEntry]):
        self.system_type = SystemType(system_type)
        self._entries: Dict[str, ActionTableEntry] = {entry.key.value: entry for entry in entries}

    def get(self, key) -> Optional[ActionTableEntry]:
        return self._entries.get(_key_value(key))

    def __contains__(self, key) -> bool:
        return _key_value(key) in self._entries

    def __iter__(self) -> Iterator[ActionTableEntry]:
        return iter(self._entries.values())

    def __len__(self) -> int:
        return len(self._entries)

    def keys(self) -> List[str]:
        return list(self._entries)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "system_type": self.system_type.value,
            "entries": [entry.to_dict() for entry in self],
        }


def _key_value(key) -> str:
    return key.value if isinstance(key, ParameterKey) else str(key)


# ============================================================================
# Builders
# ============================================================================

def build_action_table(
    system_type,
    specs: Sequence[ParameterSpec],
    defaults_db: Optional[DefaultActionDatabase] = None,
) -> ActionTable:
    """
    Build the action table for an effective specification set.

    Args:
        system_type: System type of the selected entity
        specs: Specs from the resolver (disabled specs are skipped)
        defaults_db: Default action database (shared instance if None)

    Returns:
        ActionTable holding exactly the enabled keys, in catalog order

    Raises:
        ValueError: If a spec belongs to another system type
    """
    system_type = SystemType(system_type)
    db = defaults_db or get_default_actions_db()

    entries = []
    for spec in specs:
        if spec.system_type != system_type:
            raise ValueError(
                f"Spec '{spec.key.value}' is for {spec.system_type.value}, not {system_type.value}"
            )
        if not spec.enabled:
            continue

        definition = get_definition(system_type, spec.key)
        default = db.get_entry(system_type, spec.key.value)
        if spec.bounds.has_bounds:
            entries.append(_override_entry(definition, default, spec.bounds))
        else:
            entries.append(_default_entry(definition, default))

    logger.debug(f"Built {system_type.value} action table with keys {[e.key.value for e in entries]}")
    return ActionTable(system_type, entries)


def default_action_table(
    system_type,
    defaults_db: Optional[DefaultActionDatabase] = None,
) -> ActionTable:
    """Industry reference table covering every catalog key of a system type"""
    system_type = SystemType(system_type)
    db = defaults_db or get_default_actions_db()
    entries = [
        _default_entry(definition, db.get_entry(system_type, definition.key.value))
        for definition in describe(system_type)
    ]
    return ActionTable(system_type, entries)


def default_entry(
    system_type,
    key,
    defaults_db: Optional[DefaultActionDatabase] = None,
) -> ActionTableEntry:
    """Reference entry for a single key"""
    db = defaults_db or get_default_actions_db()
    definition = get_definition(system_type, key)
    return _default_entry(definition, db.get_entry(system_type, definition.key.value))


def override_entry(
    system_type,
    key,
    bounds: BoundShape,
    defaults_db: Optional[DefaultActionDatabase] = None,
) -> ActionTableEntry:
    """Entry for a single key with configured bounds substituted"""
    db = defaults_db or get_default_actions_db()
    definition = get_definition(system_type, key)
    return _override_entry(definition, db.get_entry(system_type, definition.key.value), bounds)


# ============================================================================
# Entry Construction
# ============================================================================

def _default_entry(definition: ParameterDefinition, default: Dict[str, Any]) -> ActionTableEntry:
    if definition.bound_kind in (BoundKind.INDEX_BAND, BoundKind.RATIO_BAND):
        bands = tuple(
            _band_from_yaml(index, band)
            for index, band in enumerate(default.get("bands", []), start=1)
        )
        target = default.get("target", "See reference bands")
    else:
        minimum = default.get("min") if definition.bound_kind != BoundKind.MAX_ONLY else None
        maximum = default.get("max")
        bands = _range_bands(minimum, maximum, default)
        target = describe_range(minimum, maximum)

    return ActionTableEntry(
        key=definition.key,
        label=definition.label,
        unit=definition.unit,
        target_description=target,
        bands=bands,
        overridden=False,
    )


def _override_entry(
    definition: ParameterDefinition,
    default: Dict[str, Any],
    bounds: BoundShape,
) -> ActionTableEntry:
    if definition.bound_kind == BoundKind.RATIO_BAND:
        bands = _rsi_override_bands(bounds, default)
    else:
        # Simple keys and LSI share plain below/above banding once bounded
        minimum = bounds.min if bounds.kind != BoundKind.MAX_ONLY else None
        bands = _range_bands(minimum, bounds.max, default)

    return ActionTableEntry(
        key=definition.key,
        label=definition.label,
        unit=definition.unit,
        target_description=bounds.describe(),
        bands=bands,
        overridden=True,
    )


def _range_bands(
    minimum: Optional[float],
    maximum: Optional[float],
    default: Dict[str, Any],
) -> Tuple[ActionBand, ...]:
    bands = []
    if minimum is not None:
        bands.append(ActionBand(
            classification=Classification.BELOW_MIN.value,
            label=f"< {format_bound(minimum)}",
            action=default.get("below_action"),
            upper=float(minimum),
        ))
    if maximum is not None:
        bands.append(ActionBand(
            classification=Classification.ABOVE_MAX.value,
            label=f"> {format_bound(maximum)}",
            action=default.get("above_action"),
            lower=float(maximum),
        ))
    return tuple(bands)


def _rsi_override_bands(bounds: BoundShape, default: Dict[str, Any]) -> Tuple[ActionBand, ...]:
    heavy_corrosion_limit = bounds.max + RSI_CORROSION_SPAN
    above_action = default.get("above_action")
    # TODO: give values beyond max+2 the intolerable-corrosion action once the
    # bounded RSI table gets an escalation tier of its own
    return (
        ActionBand(
            classification=Classification.BELOW_MIN.value,
            label=f"< {format_bound(bounds.min)}",
            action=default.get("below_action"),
            upper=float(bounds.min),
        ),
        ActionBand(
            classification=Classification.ABOVE_MAX.value,
            label=f"> {format_bound(bounds.max)}",
            action=above_action,
            lower=float(bounds.max),
            upper=float(heavy_corrosion_limit),
            upper_inclusive=True,
        ),
        ActionBand(
            classification=Classification.ABOVE_MAX.value,
            label=f"> {format_bound(heavy_corrosion_limit)}",
            action=above_action,
            lower=float(heavy_corrosion_limit),
        ),
    )


def _band_from_yaml(index: int, band: Dict[str, Any]) -> ActionBand:
    lower = band.get("lower")
    upper = band.get("upper")
    return ActionBand(
        classification=band_classification(index),
        label=band.get("label", f"Band {index}"),
        action=band.get("action"),
        severity=band.get("severity", "warning"),
        lower=float(lower) if lower is not None else None,
        upper=float(upper) if upper is not None else None,
        lower_inclusive=bool(band.get("lower_inclusive", False)),
        upper_inclusive=bool(band.get("upper_inclusive", False)),
    )
