"""
Unit tests for environment settings.
"""

import pytest
from pathlib import Path
import sys

from pydantic import ValidationError

# Add parent directory to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from core.config import load_settings


class TestLoadSettings:
    """Test suite for load_settings"""

    def test_defaults(self):
        settings = load_settings({})

        assert settings.calc_service_url == "http://127.0.0.1:8000/api/"
        assert settings.calc_timeout_s == 30.0
        assert settings.api_token is None
        assert settings.config_path is None
        assert settings.config_timeout_s == 30.0
        assert settings.config_cache_s == 60
        assert settings.log_level == "INFO"

    def test_values_from_environment(self):
        settings = load_settings({
            "WATER_CALC_SERVICE_URL": "https://calc.example.org/api",
            "WATER_CALC_TIMEOUT_S": "5",
            "WATER_API_TOKEN": "abc",
            "WATER_CONFIG_PATH": "/etc/water/systems.yaml",
            "WATER_LOG_LEVEL": "debug",
        })

        assert settings.calc_service_url == "https://calc.example.org/api/"
        assert settings.calc_timeout_s == 5.0
        assert settings.api_token == "abc"
        assert settings.config_path == "/etc/water/systems.yaml"
        assert settings.log_level == "DEBUG"

    def test_blank_values_use_defaults(self):
        settings = load_settings({"WATER_CALC_TIMEOUT_S": " ", "WATER_API_TOKEN": ""})
        assert settings.calc_timeout_s == 30.0
        assert settings.api_token is None

    def test_unrelated_variables_ignored(self):
        settings = load_settings({"CALC_TIMEOUT_S": "1", "PATH": "/usr/bin"})
        assert settings.calc_timeout_s == 30.0

    def test_invalid_log_level(self):
        with pytest.raises(ValidationError):
            load_settings({"WATER_LOG_LEVEL": "chatty"})

    def test_invalid_timeout(self):
        with pytest.raises(ValidationError):
            load_settings({"WATER_CALC_TIMEOUT_S": "0"})

    def test_config_timeout_independent_of_calculation_timeout(self):
        settings = load_settings({"WATER_CALC_TIMEOUT_S": "90", "WATER_CONFIG_TIMEOUT_S": "5"})
        assert settings.calc_timeout_s == 90.0
        assert settings.config_timeout_s == 5.0

    def test_invalid_config_timeout(self):
        with pytest.raises(ValidationError):
            load_settings({"WATER_CONFIG_TIMEOUT_S": "-1"})
