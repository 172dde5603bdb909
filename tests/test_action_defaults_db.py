"""
Unit tests for DefaultActionDatabase

Tests lazy YAML loading, entry lookup and failure on a missing table.
"""

import pytest
from unittest.mock import patch, mock_open
from pathlib import Path
import sys

# Add parent directory to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from utils.action_defaults_db import (
    DefaultActionDatabase,
    get_default_actions_db,
    reset_default_actions_db,
)


# Mock YAML data
MOCK_YAML = """
metadata:
  description: "Test table"

cooling:
  ph:
    min: 6.8
    max: 7.9
    below_action: "Raise pH"
    above_action: "Lower pH"

boiler:
  tds:
    max: 3000
    above_action: "Blow down"
"""


class TestDefaultActionDatabase:
    """Test suite for DefaultActionDatabase"""

    def test_get_entry(self):
        with patch('builtins.open', mock_open(read_data=MOCK_YAML)):
            with patch('pathlib.Path.exists', return_value=True):
                db = DefaultActionDatabase(yaml_path="test.yaml")
                entry = db.get_entry("cooling", "ph")

        assert entry["min"] == 6.8
        assert entry["above_action"] == "Lower pH"

    def test_unknown_key_returns_empty(self):
        with patch('builtins.open', mock_open(read_data=MOCK_YAML)):
            with patch('pathlib.Path.exists', return_value=True):
                db = DefaultActionDatabase(yaml_path="test.yaml")
                assert db.get_entry("boiler", "sulphite") == {}

    def test_lazy_load_reads_once(self):
        with patch('builtins.open', mock_open(read_data=MOCK_YAML)) as mocked:
            with patch('pathlib.Path.exists', return_value=True):
                db = DefaultActionDatabase(yaml_path="test.yaml")
                db.get_entry("cooling", "ph")
                db.get_system_defaults("boiler")
                db.get_metadata()

        assert mocked.call_count == 1

    def test_missing_file_raises(self):
        with patch('pathlib.Path.exists', return_value=False):
            db = DefaultActionDatabase(yaml_path="missing.yaml")
            with pytest.raises(RuntimeError, match="not found"):
                db.get_entry("cooling", "ph")

    def test_invalid_yaml_raises(self):
        with patch('builtins.open', mock_open(read_data="cooling: [unclosed")):
            with patch('pathlib.Path.exists', return_value=True):
                db = DefaultActionDatabase(yaml_path="broken.yaml")
                with pytest.raises(RuntimeError, match="Invalid default action table"):
                    db.get_metadata()


class TestShippedTable:
    """Test the YAML file shipped in databases/"""

    def setup_method(self):
        reset_default_actions_db()

    def teardown_method(self):
        reset_default_actions_db()

    def test_shared_instance(self):
        assert get_default_actions_db() is get_default_actions_db()

    def test_every_catalog_key_has_a_default(self):
        from data.parameter_catalog import describe

        db = get_default_actions_db()
        for system_type in ("cooling", "boiler"):
            defaults = db.get_system_defaults(system_type)
            for definition in describe(system_type):
                assert definition.key.value in defaults, (system_type, definition.key.value)

    def test_metadata(self):
        assert "description" in get_default_actions_db().get_metadata()
