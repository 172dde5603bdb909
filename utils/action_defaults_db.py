"""
Default Action Database

Loads the industry-default target ranges, band tables and corrective action
prose from `databases/default_actions.yaml`.

Lazy: the YAML file is read on first access and cached per instance. The
module-level `get_default_actions_db()` shares one instance across the
engine.
"""

from typing import Any, Dict, Optional
import yaml
import logging
from pathlib import Path

from core.schemas import SystemType

logger = logging.getLogger(__name__)


class DefaultActionDatabase:
    """
    Reference band table for cooling and boiler systems.

    Provides:
    - Default min/max per simple key
    - Ordered band lists for LSI and RSI
    - Below/above action prose reused when bounds are configured
    """

    def __init__(self, yaml_path: Optional[str] = None):
        """
        Initialize default action database.

        Args:
            yaml_path: Path to the YAML file (defaults to databases/default_actions.yaml)
        """
        self.yaml_path = yaml_path or self._default_yaml_path()
        self._yaml_data: Optional[Dict] = None

    def _default_yaml_path(self) -> str:
        """Get default YAML path relative to this module"""
        base_dir = Path(__file__).parent.parent
        return str(base_dir / "databases" / "default_actions.yaml")

    def _load_yaml(self) -> Dict:
        """Lazy load YAML data on first access"""
        if self._yaml_data is not None:
            return self._yaml_data

        yaml_file = Path(self.yaml_path)
        if not yaml_file.exists():
            raise RuntimeError(f"Default action table not found: {self.yaml_path}")

        try:
            with open(yaml_file, 'r', encoding='utf-8') as f:
                data = yaml.safe_load(f) or {}
        except yaml.YAMLError as e:
            raise RuntimeError(f"Invalid default action table {self.yaml_path}: {e}") from e

        self._yaml_data = data
        logger.info(f"Loaded default action table from {self.yaml_path}")
        return self._yaml_data

    def get_system_defaults(self, system_type) -> Dict[str, Dict[str, Any]]:
        """All default entries for one system type {key: entry}"""
        data = self._load_yaml()
        return data.get(SystemType(system_type).value, {})

    def get_entry(self, system_type, key: str) -> Dict[str, Any]:
        """
        Default entry for one key.

        Returns:
            The YAML entry, or {} when the key has no default
        """
        entry = self.get_system_defaults(system_type).get(key)
        if entry is None:
            logger.warning(f"No default action entry for {SystemType(system_type).value}.{key}")
            return {}
        return entry

    def get_metadata(self) -> Dict[str, Any]:
        return self._load_yaml().get("metadata", {})


_default_db: Optional[DefaultActionDatabase] = None


def get_default_actions_db() -> DefaultActionDatabase:
    """Get or create the shared database instance"""
    global _default_db
    if _default_db is None:
        _default_db = DefaultActionDatabase()
    return _default_db


def reset_default_actions_db():
    """Drop the shared instance (useful for testing)"""
    global _default_db
    _default_db = None
