"""
Abstract base classes for the engine's external collaborators.

The evaluation engine is pure; the only I/O it depends on is:
- A calculation service that turns raw measurements into derived indices
  (LSI, RSI, LR, stability score)
- A config service that stores plants and water systems with their
  bound/enable fields

Both are swappable: HTTP adapters for production, YAML or in-memory
implementations for tests and offline use.
"""

from abc import ABC, abstractmethod
from typing import List, Optional

from .schemas import CalculationRequest, CalculationResponse, Plant, WaterSystem


# ============================================================================
# Calculation Service
# ============================================================================

class CalculationService(ABC):
    """
    Remote calculation of derived stability indices.

    Implementations must raise CalculationServiceError (a RuntimeError) on
    any failure so callers can retry without losing their input.
    """

    @abstractmethod
    def calculate(self, request: CalculationRequest) -> CalculationResponse:
        """
        Request derived indices for a set of enabled raw measurements.

        Args:
            request: System type, entity id and measurements

        Returns:
            CalculationResponse with whichever indices could be computed
        """
        pass

    @abstractmethod
    def get_service_name(self) -> str:
        """Return a short identifier for logging (e.g., 'http')"""
        pass


# ============================================================================
# Config Service
# ============================================================================

class ConfigRepository(ABC):
    """
    Read-only access to plant and water-system configuration.

    No write access is part of the engine.
    """

    @abstractmethod
    def get_water_system(self, water_system_id: int) -> WaterSystem:
        """Return the water system, or raise KeyError if unknown"""
        pass

    @abstractmethod
    def get_plant(self, plant_id: int) -> Plant:
        """Return the plant, or raise KeyError if unknown"""
        pass

    @abstractmethod
    def list_water_systems(self, plant_id: Optional[int] = None) -> List[WaterSystem]:
        """List water systems, optionally restricted to one plant"""
        pass
