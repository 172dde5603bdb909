"""
Config repositories - where WaterSystem and Plant records come from.

Two implementations of core.interfaces.ConfigRepository:
1. YamlConfigRepository: local YAML file (offline, deterministic, tests)
2. HttpConfigRepository: config service REST API, responses cached with
   requests_cache so repeated selections of the same entity stay local

YAML layout:
    plants:
      - id: 1
        name: North Site
        cooling_ph_min: 7.0
        ...
    water_systems:
      - id: 10
        name: CT-1
        plant_id: 1
        system_type: cooling
        ph_min: 7.0
        ...
"""

from pathlib import Path
from typing import Any, Dict, List, Optional
import logging

import requests
import requests_cache
import yaml

from .interfaces import ConfigRepository
from .schemas import Plant, WaterSystem

logger = logging.getLogger(__name__)


class ConfigServiceError(RuntimeError):
    """Failure reaching the config service (network, HTTP, payload)"""


class YamlConfigRepository(ConfigRepository):
    """
    Config records loaded from a YAML file.

    Usage:
        repo = YamlConfigRepository("config/water_systems.yaml")
        ws = repo.get_water_system(10)
    """

    def __init__(self, yaml_path: str):
        self.yaml_path = yaml_path
        self._water_systems: Optional[Dict[int, WaterSystem]] = None
        self._plants: Optional[Dict[int, Plant]] = None

    def _load_yaml(self):
        """Lazy load and validate all records on first access"""
        if self._water_systems is not None:
            return

        yaml_file = Path(self.yaml_path)
        if not yaml_file.exists():
            raise FileNotFoundError(f"Config file not found: {self.yaml_path}")

        with open(yaml_file, 'r') as f:
            data = yaml.safe_load(f) or {}

        self._plants = {
            plant.id: plant
            for plant in (Plant.model_validate(item) for item in data.get("plants") or [])
        }
        self._water_systems = {
            ws.id: ws
            for ws in (WaterSystem.model_validate(item) for item in data.get("water_systems") or [])
        }
        logger.info(
            f"Loaded {len(self._water_systems)} water systems and "
            f"{len(self._plants)} plants from {self.yaml_path}"
        )

    def get_water_system(self, water_system_id: int) -> WaterSystem:
        self._load_yaml()
        if water_system_id not in self._water_systems:
            raise KeyError(f"Unknown water system: {water_system_id}")
        return self._water_systems[water_system_id]

    def get_plant(self, plant_id: int) -> Plant:
        self._load_yaml()
        if plant_id not in self._plants:
            raise KeyError(f"Unknown plant: {plant_id}")
        return self._plants[plant_id]

    def list_water_systems(self, plant_id: Optional[int] = None) -> List[WaterSystem]:
        self._load_yaml()
        systems = list(self._water_systems.values())
        if plant_id is not None:
            systems = [ws for ws in systems if ws.plant_id == plant_id]
        return systems


class HttpConfigRepository(ConfigRepository):
    """
    Config records fetched from the config service.

    Endpoints (relative to base_url):
        GET water-systems/{id}/
        GET water-systems/?plant_id={id}
        GET plants/{id}/
    """

    def __init__(
        self,
        base_url: str,
        api_token: Optional[str] = None,
        timeout_s: float = 30.0,
        cache_s: int = 60,
        session: Optional[requests.Session] = None,
    ):
        """
        Initialize config service client.

        Args:
            base_url: Service root, e.g. "http://127.0.0.1:8000/api/"
            api_token: Optional Bearer token
            timeout_s: Request timeout in seconds
            cache_s: Lifetime of cached responses in seconds (0 disables)
            session: Optional session, mainly for tests
        """
        self.base_url = base_url if base_url.endswith("/") else base_url + "/"
        self.api_token = api_token
        self.timeout_s = timeout_s
        if session is not None:
            self._session = session
        elif cache_s > 0:
            self._session = requests_cache.CachedSession(
                "water_config_cache",
                backend="memory",
                expire_after=cache_s,
            )
        else:
            self._session = requests.Session()

    def _get(self, path: str, params: Optional[Dict[str, Any]] = None) -> Any:
        """
        GET one resource.

        Raises:
            KeyError: If the service answers 404
            ConfigServiceError: On connection errors, timeouts, other HTTP
                error statuses or a non-JSON body
        """
        headers = {"Accept": "application/json"}
        if self.api_token:
            headers["Authorization"] = f"Bearer {self.api_token}"

        url = self.base_url + path
        try:
            response = self._session.get(url, params=params, headers=headers, timeout=self.timeout_s)
            if response.status_code == 404:
                raise KeyError(f"Not found: {path}")
            response.raise_for_status()
        except requests.Timeout as e:
            logger.error(f"Config service timed out after {self.timeout_s}s ({url})")
            raise ConfigServiceError(f"Config service timed out: {e}") from e
        except requests.RequestException as e:
            logger.error(f"Config request failed: {e}")
            raise ConfigServiceError(f"Config request failed: {e}") from e

        logger.debug(f"GET {url} ({'cached' if getattr(response, 'from_cache', False) else 'live'})")
        try:
            return response.json()
        except ValueError as e:
            raise ConfigServiceError(f"Invalid JSON from config service: {e}") from e

    def get_water_system(self, water_system_id: int) -> WaterSystem:
        return WaterSystem.model_validate(self._get(f"water-systems/{water_system_id}/"))

    def get_plant(self, plant_id: int) -> Plant:
        return Plant.model_validate(self._get(f"plants/{plant_id}/"))

    def list_water_systems(self, plant_id: Optional[int] = None) -> List[WaterSystem]:
        params = {"plant_id": plant_id} if plant_id is not None else None
        data = self._get("water-systems/", params=params)
        # Paginated responses wrap records in "results"
        if isinstance(data, dict):
            data = data.get("results", [])
        return [WaterSystem.model_validate(item) for item in data]
