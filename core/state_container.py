"""
Analysis session - selection, sample and calculation state for one operator.

A session holds:
- The selected entity (water system, or legacy plant plus system type)
- The effective parameter specs resolved for that entity
- The current sample, restricted to enabled parameters
- The last analysis report

Concurrency rules:
- Last selection wins. Every selection bumps a generation counter; a
  calculation result that arrives for an older generation is discarded.
- One calculation in flight per session. A second begin_calculation()
  while one is pending raises RuntimeError.
- A failed calculation leaves selection and sample untouched so the
  operator can retry.

Usage:
    session = AnalysisSession()
    session.select_water_system(ws)
    session.set_sample({"ph": 8.2, "tds": 1200, "hardness": 300})
    report = session.calculate(service)
"""

from dataclasses import dataclass
from typing import Any, Dict, List, Mapping, Optional
import logging
import threading

from tools.evaluation.parameter_resolver import resolve_parameter_specs
from tools.evaluation.parameter_spec import ParameterSpec
from tools.evaluation.requirement_checker import (
    RequirementReport,
    check_requirements,
    required_keys,
    restrict_sample,
)
from tools.evaluation.water_analysis import build_water_analysis_report
from utils.action_defaults_db import DefaultActionDatabase
from utils.sample_validation import validate_sample
from utils.sample_values import numeric_values

from .interfaces import CalculationService
from .schemas import (
    CalculationRequest,
    CalculationResponse,
    Plant,
    SystemType,
    WaterAnalysisReport,
    WaterSystem,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CalculationTicket:
    """Handle for one in-flight calculation"""
    generation: int
    request: CalculationRequest


class AnalysisSession:
    """
    State container for one operator's evaluation workflow.

    The session is not shared between operators; the lock only guards
    against a calculation completing on a worker thread while the
    selection changes.
    """

    def __init__(self, defaults_db: Optional[DefaultActionDatabase] = None):
        self._defaults_db = defaults_db
        self._lock = threading.Lock()
        self._generation = 0
        self._pending: Optional[CalculationTicket] = None

        self.system_type: Optional[SystemType] = None
        self.water_system_id: Optional[int] = None
        self.plant_id: Optional[int] = None
        self.specs: List[ParameterSpec] = []
        self.sample: Dict[str, Any] = {}
        self.report: Optional[WaterAnalysisReport] = None

    # ========================================================================
    # Selection
    # ========================================================================

    def select_water_system(self, water_system: WaterSystem) -> List[ParameterSpec]:
        """Select a water system; its own bounds are authoritative"""
        specs = resolve_parameter_specs(water_system=water_system)
        self._select(SystemType(water_system.system_type), specs, water_system_id=water_system.id)
        return specs

    def select_plant(self, plant: Plant, system_type: SystemType) -> List[ParameterSpec]:
        """Select a legacy plant for the given system type"""
        specs = resolve_parameter_specs(plant=plant, system_type=system_type)
        self._select(SystemType(system_type), specs, plant_id=plant.id)
        return specs

    def _select(
        self,
        system_type: SystemType,
        specs: List[ParameterSpec],
        water_system_id: Optional[int] = None,
        plant_id: Optional[int] = None,
    ):
        with self._lock:
            self._generation += 1
            if self._pending is not None:
                logger.info(
                    f"Selection changed during calculation; result for generation "
                    f"{self._pending.generation} will be discarded"
                )
            self._pending = None
            self.system_type = system_type
            self.water_system_id = water_system_id
            self.plant_id = plant_id
            self.specs = specs
            self.sample = {}
            self.report = None

    @property
    def generation(self) -> int:
        return self._generation

    @property
    def has_selection(self) -> bool:
        return self.system_type is not None

    # ========================================================================
    # Sample
    # ========================================================================

    def set_value(self, key: str, value: Any) -> bool:
        """
        Set one sample value.

        Returns:
            False when the key is not an input for the current specs (the
            value is dropped)
        """
        if key not in required_keys(self.specs):
            logger.debug(f"Ignoring value for '{key}': not enabled for this selection")
            return False
        self.sample[key] = value
        return True

    def set_sample(self, values: Mapping[str, Any]):
        """Replace the sample; values for disabled parameters are dropped"""
        self.sample = restrict_sample(self.specs, values)

    @property
    def requirements(self) -> RequirementReport:
        return check_requirements(self.specs, self.sample)

    def evaluate(self) -> WaterAnalysisReport:
        """Evaluate the current sample without calling the calculation service"""
        self._require_selection()
        return build_water_analysis_report(
            self.system_type, self.specs, self.sample, defaults_db=self._defaults_db
        )

    # ========================================================================
    # Calculation
    # ========================================================================

    def begin_calculation(self) -> CalculationTicket:
        """
        Validate the sample and issue a ticket for one calculation.

        Raises:
            RuntimeError: If nothing is selected or a calculation is pending
            SampleValidationError: If a value is out of its physical domain
            ValueError: If required fields are missing
        """
        self._require_selection()
        validate_sample(self.sample)

        requirements = self.requirements
        if not requirements.ready:
            detail = f": {', '.join(requirements.missing_labels)}" if requirements.missing_labels else ""
            raise ValueError(f"Cannot calculate, {requirements.reason}{detail}")

        with self._lock:
            if self._pending is not None:
                raise RuntimeError("A calculation is already in progress for this session")
            request = CalculationRequest(
                system_type=self.system_type,
                water_system_id=self.water_system_id,
                plant_id=self.plant_id,
                measurements=numeric_values(self.sample),
            )
            ticket = CalculationTicket(generation=self._generation, request=request)
            self._pending = ticket
        return ticket

    def complete_calculation(
        self,
        ticket: CalculationTicket,
        response: CalculationResponse,
    ) -> Optional[WaterAnalysisReport]:
        """
        Apply a calculation response.

        Returns:
            The new report, or None when the ticket is stale (the selection
            changed after it was issued)
        """
        with self._lock:
            if self._pending is not ticket:
                self._log_stale(ticket)
                return None
            self._pending = None
            system_type = self.system_type
            specs = list(self.specs)
            sample = dict(self.sample)

        report = build_water_analysis_report(
            system_type,
            specs,
            sample,
            response=response,
            defaults_db=self._defaults_db,
        )

        # A selection made while the report was being built owns the session now
        with self._lock:
            if self._generation != ticket.generation:
                self._log_stale(ticket)
                return None
            self.report = report
        return report

    def abandon_calculation(self, ticket: CalculationTicket):
        """Release the pending slot after a failed calculation"""
        with self._lock:
            if self._pending is ticket:
                self._pending = None

    def calculate(self, service: CalculationService) -> Optional[WaterAnalysisReport]:
        """
        Run one calculation synchronously.

        Raises:
            CalculationServiceError: Propagated from the service; selection
                and sample are left as they were
        """
        ticket = self.begin_calculation()
        logger.info(f"Calculating via {service.get_service_name()} service")
        try:
            response = service.calculate(ticket.request)
        except Exception:
            self.abandon_calculation(ticket)
            raise
        return self.complete_calculation(ticket, response)

    def _log_stale(self, ticket: CalculationTicket):
        logger.warning(
            f"Discarding stale calculation result (generation {ticket.generation}, "
            f"current {self._generation})"
        )

    def _require_selection(self):
        if not self.has_selection:
            raise RuntimeError("Select a water system or plant first")
